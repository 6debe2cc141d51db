"""Loader for locale JSON files under the configured i18n folders."""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from ..models.locale_tree import Branch, from_json
from ..models.snapshot import LocaleSnapshot

logger = logging.getLogger(__name__)

LOCALE_SUFFIX = ".json"


def find_json_files(directory: Path) -> List[Path]:
    """
    Recursively find every .json file under a directory.

    Entries are visited in name order so repeated scans of an unchanged
    tree return the same list. Unreadable directories are skipped.
    """
    json_files: List[Path] = []
    directory = Path(directory)

    if not directory.is_dir():
        return json_files

    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as e:
        logger.warning("Failed to read directory %s: %s", directory, e)
        return json_files

    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir():
            json_files.extend(find_json_files(path))
        elif entry.is_file() and entry.name.endswith(LOCALE_SUFFIX):
            json_files.append(path)

    return json_files


def locale_id_for(root: Path, file_path: Path) -> str:
    """
    Derive the locale id of a file from its path relative to its i18n root.

    "en.json" -> "en", "ja/common.json" -> "ja.common"
    """
    relative = Path(file_path).relative_to(root)
    if len(relative.parts) == 1:
        return relative.name[: -len(LOCALE_SUFFIX)]

    relative_path = relative.as_posix()
    if relative_path.endswith(LOCALE_SUFFIX):
        relative_path = relative_path[: -len(LOCALE_SUFFIX)]
    return relative_path.replace("/", ".")


def parse_locale_file(content: str) -> Optional[Branch]:
    """
    Parse locale file content into a tree.

    Returns:
        The root Branch, or None if the content is not a JSON object
    """
    # ValueError covers JSONDecodeError and oversized integer literals
    try:
        data = json.loads(content)
        if not isinstance(data, dict):
            return None
        return from_json(data)
    except (ValueError, RecursionError):
        return None


class LocaleLoader:
    """Loads locale snapshots from i18n folders relative to a project root."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)

    async def reload(self, folders: Sequence[str]) -> LocaleSnapshot:
        """
        Load every locale file under the given folders into a new snapshot.

        Missing folders contribute nothing. Files that cannot be read or
        parsed are skipped with a warning. When two files map to the same
        locale id the one loaded last wins.

        Args:
            folders: i18n folders relative to the project root

        Returns:
            A freshly built LocaleSnapshot
        """
        trees = {}
        origins = {}

        for folder in folders:
            folder_path = self.project_root / folder
            if not folder_path.is_dir():
                logger.debug("Skipping missing i18n folder %s", folder_path)
                continue

            json_files = await asyncio.to_thread(find_json_files, folder_path)

            for file_path in json_files:
                try:
                    content = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning("Failed to read i18n file %s: %s", file_path, e)
                    continue

                tree = parse_locale_file(content)
                if tree is None:
                    logger.warning("Skipping i18n file %s: not a JSON object", file_path)
                    continue

                locale = locale_id_for(folder_path, file_path)
                logger.debug("Loading i18n file %s as locale %s", file_path, locale)
                if locale in trees:
                    logger.warning(
                        "Locale %s from %s overrides %s", locale, file_path, origins[locale]
                    )
                # An overridden id keeps its original position
                trees[locale] = tree
                origins[locale] = file_path

        return LocaleSnapshot(trees=trees, origins=origins)


async def reload(project_root: Path, folders: Sequence[str]) -> LocaleSnapshot:
    """Load a new snapshot for the given i18n folders."""
    return await LocaleLoader(project_root).reload(folders)


def all_keys(snapshot: LocaleSnapshot) -> List[str]:
    """Every key with a string value in any locale, in declaration order."""
    return snapshot.all_keys()


class LocaleStore:
    """
    Lazily loaded, invalidatable cache of the current locale snapshot.

    The snapshot is rebuilt from disk on first use after an invalidation.
    Readers always get a complete snapshot; it is replaced, never patched.
    """

    def __init__(self, project_root: Path, folders: Sequence[str]):
        self.loader = LocaleLoader(project_root)
        self.folders: List[str] = list(folders)
        self._snapshot: Optional[LocaleSnapshot] = None
        self._lock = asyncio.Lock()

    @property
    def project_root(self) -> Path:
        return self.loader.project_root

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    async def snapshot(self) -> LocaleSnapshot:
        """Return the cached snapshot, loading it if needed."""
        async with self._lock:
            if self._snapshot is None:
                self._snapshot = await self.loader.reload(self.folders)
            return self._snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot."""
        self._snapshot = None

    def update_folders(self, folders: Sequence[str]) -> bool:
        """
        Replace the folder list, invalidating the cache if it changed.

        Returns:
            True if the folder list changed
        """
        folders = list(folders)
        if folders == self.folders:
            return False
        self.folders = folders
        self.invalidate()
        return True

    def notify_saved(self, file_path: Path) -> bool:
        """
        Invalidate the cache if a saved file is a locale file under a folder.

        Returns:
            True if the cache was invalidated
        """
        path = Path(file_path)
        if not path.name.endswith(LOCALE_SUFFIX):
            return False

        if not path.is_absolute():
            path = self.project_root / path

        for folder in self.folders:
            folder_path = self.project_root / folder
            if path == folder_path or folder_path in path.parents:
                self.invalidate()
                return True
        return False
