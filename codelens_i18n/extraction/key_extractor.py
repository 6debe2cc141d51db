"""Lexical extraction of translation keys from source text."""

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Set, Tuple


@dataclass(frozen=True)
class KeySite:
    """A translation call site found in a document."""

    start: int  # Offset of the "t(" token
    end: int  # Offset just past the match
    key: str  # Quoted content, not unescaped


class KeyExtractor:
    """
    Finds key-shaped strings in source text with regular expressions.

    No language parsing is done, so any language with quoted strings can be
    scanned. Two independent patterns are used:
    - call sites: t('key'), t("key"), t(`key`), possibly spread over lines
    - literals: any quoted identifier or dotted identifier path
    """

    # t( + whitespace + quoted string (escapes allowed) + optional whitespace and ")"
    CALL_SITE_PATTERN = re.compile(
        r"(?<![\w$])t\("  # "t(" not preceded by an identifier character
        r"\s*"
        r"(?P<quote>['\"`])"
        r"(?P<key>(?:\\.|(?!(?P=quote))[^\\])*)"  # Escaped chars or anything but the delimiter
        r"(?P=quote)"
        r"(?:\s*\))?",
        re.DOTALL,
    )

    # 'name', "a.b.c", `A_B.$c` - identifier segments joined by dots
    LITERAL_PATTERN = re.compile(
        r"(?P<quote>['\"`])"
        r"(?P<key>[A-Za-z_$][A-Za-z0-9_$]*(?:\.[A-Za-z0-9_$]+)*)"
        r"(?P=quote)"
    )

    def iter_call_sites(self, text: str) -> Iterator[KeySite]:
        """Yield every translation call site in the text, in order."""
        for match in self.CALL_SITE_PATTERN.finditer(text):
            key = match.group("key")
            if not key:
                continue
            yield KeySite(start=match.start(), end=match.end(), key=key)

    def extract_call_sites(self, text: str) -> List[KeySite]:
        """Get all translation call sites in the text."""
        return list(self.iter_call_sites(text))

    def iter_literals(self, text: str) -> Iterator[str]:
        """Yield the content of every key-shaped quoted literal, in order."""
        for match in self.LITERAL_PATTERN.finditer(text):
            yield match.group("key")

    def extract_literals(self, text: str) -> Set[str]:
        """Get the distinct key-shaped literals in the text."""
        return set(self.iter_literals(text))

    def find_used_keys(self, text: str, known_keys: Set[str]) -> Set[str]:
        """Get the known keys that appear as literals in the text."""
        return {literal for literal in self.iter_literals(text) if literal in known_keys}


class LineIndex:
    """Maps character offsets in a text to (line, column) pairs, both 0-based."""

    def __init__(self, text: str):
        self.line_starts = [0]
        for match in re.finditer("\n", text):
            self.line_starts.append(match.end())

    def position_at(self, offset: int) -> Tuple[int, int]:
        line = bisect_right(self.line_starts, offset) - 1
        return line, offset - self.line_starts[line]
