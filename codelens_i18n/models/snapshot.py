"""Data model for a loaded generation of locale files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .key_path import get_value, iter_keys
from .locale_tree import Branch


@dataclass(frozen=True)
class LocaleSnapshot:
    """
    Every locale loaded from the configured i18n folders.

    A snapshot is built in one go and never mutated afterwards; reloading
    produces a new snapshot.
    """

    trees: Dict[str, Branch] = field(default_factory=dict)
    origins: Dict[str, Path] = field(default_factory=dict)

    @property
    def locales(self) -> List[str]:
        """Locale ids in load order."""
        return list(self.trees.keys())

    def is_empty(self) -> bool:
        return not self.trees

    def get_tree(self, locale: str) -> Optional[Branch]:
        return self.trees.get(locale)

    def get_origin(self, locale: str) -> Optional[Path]:
        return self.origins.get(locale)

    def get_value(self, key: str, locale: str) -> Optional[str]:
        """Get the string for a key in one locale, or None."""
        tree = self.trees.get(locale)
        if tree is None:
            return None
        return get_value(tree, key)

    def all_keys(self) -> List[str]:
        """
        Every key that has a string value in at least one locale.

        Keys are listed in declaration order: locales in load order, each
        tree in object traversal order, first occurrence wins.
        """
        seen: Dict[str, None] = {}
        for tree in self.trees.values():
            for key in iter_keys(tree):
                seen.setdefault(key, None)
        return list(seen)

    def values_for(self, key: str) -> Dict[str, str]:
        """Map of locale -> value for every locale that has the key."""
        values = {}
        for locale, tree in self.trees.items():
            value = get_value(tree, key)
            if value is not None:
                values[locale] = value
        return values

    def values_by_locale(self, keys: Iterable[str]) -> Dict[str, Dict[str, str]]:
        """
        Group the values of the given keys by locale.

        Locales appear in the order they are first hit while walking keys
        in order, matching the unused-key report layout.
        """
        grouped: Dict[str, Dict[str, str]] = {}
        for key in keys:
            for locale, value in self.values_for(key).items():
                grouped.setdefault(locale, {})[key] = value
        return grouped
