"""Picks which translation to display for a key."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..models.snapshot import LocaleSnapshot


@dataclass
class PrimaryTranslation:
    """The single translation shown for a key."""

    locale: str
    value: str


@dataclass
class LocaleClassification:
    """Loaded locales split by whether they have a value for a key."""

    with_value: Dict[str, str] = field(default_factory=dict)  # locale -> value, load order
    without_value: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.with_value)


def dedupe_priority(priority: Iterable[str]) -> List[str]:
    """Drop repeated locale ids, keeping the first occurrence."""
    return list(dict.fromkeys(p for p in priority if p))


def find_suffix_match(snapshot: LocaleSnapshot, candidate: str) -> Optional[str]:
    """
    Find the first grouped locale id that names the candidate.

    A grouped id matches when its last segment is the candidate
    ("locales.ja" from locales/ja.json) or its first segment is
    ("ja.common" from ja/common.json). The plain id "ja" itself is not a
    suffix match.
    """
    for locale in snapshot.locales:
        if "." not in locale:
            continue
        segments = locale.split(".")
        if segments[-1] == candidate or segments[0] == candidate:
            return locale
    return None


def select_primary(
    key: str,
    snapshot: LocaleSnapshot,
    priority: Iterable[str],
) -> Optional[PrimaryTranslation]:
    """
    Choose the translation to display for a key.

    For each priority locale in order, try the exact locale id, then the
    first loaded locale whose last segment matches it. The first candidate
    with a value wins. Failing that, use the first loaded locale that has
    any value.

    Args:
        key: Dot-separated key path
        snapshot: Loaded locales
        priority: Preferred locale ids, highest priority first

    Returns:
        PrimaryTranslation, or None if no locale has the key
    """
    for candidate in dedupe_priority(priority):
        if candidate in snapshot.trees:
            value = snapshot.get_value(key, candidate)
            if value is not None:
                return PrimaryTranslation(locale=candidate, value=value)

        suffix_locale = find_suffix_match(snapshot, candidate)
        if suffix_locale is not None:
            value = snapshot.get_value(key, suffix_locale)
            if value is not None:
                return PrimaryTranslation(locale=suffix_locale, value=value)

    # Global fallback: first locale with any value
    for locale in snapshot.locales:
        value = snapshot.get_value(key, locale)
        if value is not None:
            return PrimaryTranslation(locale=locale, value=value)

    return None


def classify_locales(key: str, snapshot: LocaleSnapshot) -> LocaleClassification:
    """Split loaded locales into those with and without a value for the key."""
    classification = LocaleClassification()
    for locale in snapshot.locales:
        value = snapshot.get_value(key, locale)
        if value is not None:
            classification.with_value[locale] = value
        else:
            classification.without_value.append(locale)
    return classification


class LocaleResolver:
    """Resolves keys against a snapshot using a fixed priority list."""

    def __init__(self, priority: Iterable[str]):
        self.priority = dedupe_priority(priority)

    def select_primary(self, key: str, snapshot: LocaleSnapshot) -> Optional[PrimaryTranslation]:
        return select_primary(key, snapshot, self.priority)

    def classify(self, key: str, snapshot: LocaleSnapshot) -> LocaleClassification:
        return classify_locales(key, snapshot)
