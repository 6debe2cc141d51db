"""Locale editing modules."""

from .locale_editor import LocaleEditor, locate_key

__all__ = ["LocaleEditor", "locate_key"]
