"""Locale file loading, writing and key extraction modules."""

from .locale_loader import LocaleLoader, LocaleStore, find_json_files, locale_id_for
from .locale_writer import LocaleWriter
from .key_extractor import KeyExtractor, KeySite, LineIndex

__all__ = [
    "LocaleLoader",
    "LocaleStore",
    "find_json_files",
    "locale_id_for",
    "LocaleWriter",
    "KeyExtractor",
    "KeySite",
    "LineIndex",
]
