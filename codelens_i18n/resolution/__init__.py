"""Translation selection and inline annotation modules."""

from .resolver import (
    LocaleResolver,
    PrimaryTranslation,
    LocaleClassification,
    select_primary,
    classify_locales,
)
from .lens_provider import KeyLens, LensProvider

__all__ = [
    "LocaleResolver",
    "PrimaryTranslation",
    "LocaleClassification",
    "select_primary",
    "classify_locales",
    "KeyLens",
    "LensProvider",
]
