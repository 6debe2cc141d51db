"""Builds inline annotations for translation calls in a document."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..extraction.key_extractor import KeyExtractor, LineIndex
from ..extraction.locale_loader import LocaleStore
from ..models.snapshot import LocaleSnapshot
from .resolver import LocaleResolver, PrimaryTranslation


@dataclass
class KeyLens:
    """An annotation attached to one translation call."""

    start: int
    end: int
    line: int
    column: int
    key: str
    title: str
    tooltip: str
    primary: Optional[PrimaryTranslation] = None
    translations: Dict[str, str] = field(default_factory=dict)
    missing_locales: List[str] = field(default_factory=list)
    locale_file_paths: Dict[str, str] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.primary is not None

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "line": self.line,
            "column": self.column,
            "key": self.key,
            "title": self.title,
            "tooltip": self.tooltip,
            "primary": (
                {"locale": self.primary.locale, "value": self.primary.value}
                if self.primary
                else None
            ),
            "translations": dict(self.translations),
            "missing_locales": list(self.missing_locales),
            "locale_file_paths": dict(self.locale_file_paths),
        }


def format_title(key: str, primary: Optional[PrimaryTranslation]) -> str:
    if primary is None:
        return f"{key} (Not found)"
    return f'{primary.locale}: "{primary.value}"'


def format_tooltip(key: str, translations: Dict[str, str]) -> str:
    lines = [f"i18n key: {key}"]
    lines.extend(f'{locale}: "{value}"' for locale, value in translations.items())
    return "\n".join(lines)


class LensProvider:
    """Produces KeyLens annotations for documents."""

    def __init__(
        self,
        store: LocaleStore,
        priority: List[str],
        enabled: bool = True,
        extractor: Optional[KeyExtractor] = None,
    ):
        self.store = store
        self.resolver = LocaleResolver(priority)
        self.enabled = enabled
        self.extractor = extractor or KeyExtractor()

    async def provide(self, text: str) -> List[KeyLens]:
        """
        Annotate every translation call in a document.

        Args:
            text: Full document text

        Returns:
            One KeyLens per call site, or an empty list when disabled
        """
        if not self.enabled:
            return []

        snapshot = await self.store.snapshot()
        return self.build(text, snapshot)

    def build(self, text: str, snapshot: LocaleSnapshot) -> List[KeyLens]:
        """Annotate a document against an already loaded snapshot."""
        lenses = []
        line_index = LineIndex(text)
        file_paths = {locale: str(path) for locale, path in snapshot.origins.items()}

        for site in self.extractor.iter_call_sites(text):
            primary = self.resolver.select_primary(site.key, snapshot)
            classification = self.resolver.classify(site.key, snapshot)
            line, column = line_index.position_at(site.start)

            lenses.append(KeyLens(
                start=site.start,
                end=site.end,
                line=line,
                column=column,
                key=site.key,
                title=format_title(site.key, primary),
                tooltip=format_tooltip(site.key, classification.with_value),
                primary=primary,
                translations=classification.with_value,
                missing_locales=classification.without_value,
                locale_file_paths=file_paths,
            ))

        return lenses
