"""Edit operations that write changes back to locale files."""

import copy
import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..extraction.locale_loader import LOCALE_SUFFIX, parse_locale_file
from ..extraction.locale_writer import LocaleWriter
from ..models.key_path import delete_value, set_value, split_key
from ..models.locale_tree import Branch
from ..models.snapshot import LocaleSnapshot

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "i18n"


class LocaleEditor:
    """
    Applies key edits to locale files under a project root.

    Writes are last-writer-wins: each edit re-reads the file from disk and
    overwrites it, with no check against concurrent edits.
    """

    def __init__(self, project_root: Path, folders: Sequence[str], writer: Optional[LocaleWriter] = None):
        self.project_root = Path(project_root)
        self.folders = list(folders)
        self.writer = writer or LocaleWriter()

    def resolve_target_path(self, locale: str, target_path: Optional[Path] = None) -> Path:
        """
        Decide which file a new value for a locale goes to.

        An existing target_path wins, then <folder>/<locale>.json in the
        first folder that has it, then a new file in the first folder.
        """
        if target_path and Path(target_path).exists():
            return Path(target_path)

        for folder in self.folders:
            candidate = self.project_root / folder / f"{locale}{LOCALE_SUFFIX}"
            if candidate.exists():
                return candidate

        first_folder = self.folders[0] if self.folders else DEFAULT_FOLDER
        return self.project_root / first_folder / f"{locale}{LOCALE_SUFFIX}"

    def save_value(
        self,
        locale: str,
        key: str,
        value: str,
        target_path: Optional[Path] = None,
    ) -> Path:
        """
        Set a key's value for one locale and write the file.

        Args:
            locale: Locale id
            key: Dot-separated key path
            value: New translation
            target_path: Known origin file of the locale, if any

        Returns:
            Path of the written file

        Raises:
            OSError: If the file cannot be written
        """
        path = self.resolve_target_path(locale, target_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        tree = self._load_for_edit(path)
        set_value(tree, key, value)
        self.writer.write(tree, path)

        logger.info("Saved %s for %s in %s", key, locale, path)
        return path

    def delete_key(self, snapshot: LocaleSnapshot, key: str) -> List[str]:
        """
        Remove a key from every locale that has it.

        The snapshot is left untouched; each modified tree is a copy written
        to its origin file.

        Returns:
            Locale ids the key was removed from
        """
        deleted_from = []
        for locale, tree in snapshot.trees.items():
            edited = copy.deepcopy(tree)
            if not delete_value(edited, key):
                continue

            origin = snapshot.get_origin(locale)
            if origin is None:
                continue
            self.writer.write(edited, origin)
            deleted_from.append(locale)

        return deleted_from

    def delete_keys(self, snapshot: LocaleSnapshot, keys: Iterable[str]) -> Dict[str, int]:
        """
        Remove several keys from every locale, writing each file at most once.

        Returns:
            Modified locale id -> number of keys removed from it
        """
        keys = list(keys)
        removed_by_locale: Dict[str, int] = {}

        for locale, tree in snapshot.trees.items():
            edited = copy.deepcopy(tree)
            removed = sum(1 for key in keys if delete_value(edited, key))
            if not removed:
                continue

            origin = snapshot.get_origin(locale)
            if origin is None:
                continue
            self.writer.write(edited, origin)
            removed_by_locale[locale] = removed

        return removed_by_locale

    def _load_for_edit(self, path: Path) -> Branch:
        if not path.exists():
            return Branch()

        tree = parse_locale_file(path.read_text(encoding="utf-8"))
        if tree is None:
            logger.warning("Could not parse existing file %s, starting from an empty object", path)
            return Branch()
        return tree


def locate_key(text: str, key: str) -> Optional[Tuple[int, int]]:
    """
    Find where a key is declared in JSON text.

    Each segment is searched for on a line after the previous segment's
    line and indented deeper than it. If that fails, the first line that
    declares the last segment is used.

    Returns:
        0-based (line, column) of the key's opening quote, or None
    """
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return None

    lines = text.split("\n")
    segments = split_key(key)
    target: Optional[Tuple[int, int]] = None
    depth = 0
    search_from = 0

    for index, segment in enumerate(segments):
        pattern = re.compile(r'^\s*"' + re.escape(segment) + r'"\s*:')
        found = False
        for line_number in range(search_from, len(lines)):
            line = lines[line_number]
            indent = len(line) - len(line.lstrip())
            if pattern.match(line) and (index == 0 or indent > depth):
                target = (line_number, line.index(f'"{segment}"'))
                depth = indent
                search_from = line_number + 1
                found = True
                break
        if not found:
            target = None
            break

    if target is not None:
        return target

    last = segments[-1]
    pattern = re.compile(r'"' + re.escape(last) + r'"\s*:')
    for line_number, line in enumerate(lines):
        if pattern.search(line):
            return line_number, line.index(f'"{last}"')
    return None
