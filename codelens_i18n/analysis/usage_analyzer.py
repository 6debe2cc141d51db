"""Finds locale keys that are never referenced in a project's source files."""

import asyncio
import logging
import os
import re
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from ..extraction.key_extractor import KeyExtractor
from ..extraction.locale_loader import LocaleLoader
from ..models.analysis_result import AnalysisOutcome, AnalysisResult

logger = logging.getLogger(__name__)

# Files larger than this are not read
MAX_FILE_SIZE = 5 * 1024 * 1024

# Generated or vendored directories, skipped even if the excludes miss them
GENERATED_DIRS = frozenset({
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    "out",
    "public",
    "assets",
    ".vscode",
    ".idea",
    "tmp",
    "temp",
    "vendor",
    "lib",
    "libs",
    ".git",
})

# Progress is reported every this many scanned files
PROGRESS_INTERVAL = 20

# Share of the progress bar covered by the scan phase, starting at SCAN_START
SCAN_START = 50
SCAN_SPAN = 30

ProgressCallback = Callable[..., Awaitable[None]]


class CancellationToken:
    """Cooperative cancellation flag, polled by long-running operations."""

    def __init__(self):
        self._cancelled = False

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def expand_braces(pattern: str) -> List[str]:
    """Expand the first {a,b} group of a glob, recursively: "*.{ts,js}" -> ["*.ts", "*.js"]."""
    match = re.search(r"\{([^{}]*)\}", pattern)
    if not match:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end():]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def matches_glob(relative_path: str, pattern: str) -> bool:
    """
    Match a project-relative posix path against a glob.

    "*" may cross directory separators, and a leading "**/" also matches
    at the project root.
    """
    for expanded in expand_braces(pattern):
        if fnmatchcase(relative_path, expanded):
            return True
        if expanded.startswith("**/") and fnmatchcase(relative_path, expanded[3:]):
            return True
    return False


def default_file_globs(extensions: Sequence[str]) -> List[str]:
    """Include globs for the given extensions."""
    return [f"**/*.{{{','.join(extensions)}}}"] if extensions else []


def in_generated_dir(relative_path: str) -> bool:
    """Check whether any directory segment of the path is a generated directory."""
    return any(part in GENERATED_DIRS for part in relative_path.split("/")[:-1])


class UsageAnalyzer:
    """
    Classifies every known key as used or unused.

    A key is used when some scanned source file contains a quoted literal
    exactly equal to it. Files are read one at a time, in a stable order.
    """

    def __init__(
        self,
        project_root: Path,
        i18n_folders: Sequence[str],
        include_extensions: Sequence[str],
        exclude_patterns: Sequence[str] = (),
        file_globs: Optional[Sequence[str]] = None,
        extractor: Optional[KeyExtractor] = None,
    ):
        self.project_root = Path(project_root)
        self.i18n_folders = list(i18n_folders)
        self.include_extensions = [ext.lstrip(".") for ext in include_extensions]
        self.exclude_patterns = list(exclude_patterns)
        self.file_globs = (
            list(file_globs) if file_globs is not None else default_file_globs(self.include_extensions)
        )
        self.loader = LocaleLoader(self.project_root)
        self.extractor = extractor or KeyExtractor()

    async def analyze(
        self,
        token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """
        Run a full analysis.

        Args:
            token: Polled before each phase and before each file
            progress_callback: Async callback(percentage, message, **extra)

        Returns:
            AnalysisResult; outcome is CANCELLED if the token fired, in
            which case no partial results are returned
        """
        token = token or CancellationToken()

        async def report(percentage: int, message: str, **extra) -> None:
            if progress_callback:
                await progress_callback(percentage, message, **extra)

        cancelled = AnalysisResult(outcome=AnalysisOutcome.CANCELLED)

        await report(0, "Initializing...")
        if token.is_cancellation_requested:
            return cancelled

        # 1. Load locales and collect keys
        await report(20, "Loading i18n data...")
        snapshot = await self.loader.reload(self.i18n_folders)

        if snapshot.is_empty():
            logger.warning("No i18n files found in folders: %s", ", ".join(self.i18n_folders))
            return AnalysisResult(outcome=AnalysisOutcome.NO_LOCALE_FILES, snapshot=snapshot)

        if token.is_cancellation_requested:
            return cancelled

        await report(30, "Extracting keys...")
        keys = snapshot.all_keys()
        if not keys:
            logger.info("No i18n keys found")
            return AnalysisResult(outcome=AnalysisOutcome.NO_KEYS, snapshot=snapshot)

        if token.is_cancellation_requested:
            return cancelled

        # 2. Enumerate candidate files
        await report(40, "Finding source files...")
        files = await asyncio.to_thread(self.find_source_files)

        if token.is_cancellation_requested:
            return cancelled

        # 3. Scan files
        await report(SCAN_START, f"Scanning {len(files)} files...", total_files=len(files))
        known_keys = set(keys)
        used_keys = set()
        scanned_files = 0

        for file_path in files:
            if token.is_cancellation_requested:
                return cancelled

            text = await self._read_source(file_path)
            if text is None:
                continue

            used_keys.update(self.extractor.find_used_keys(text, known_keys))
            scanned_files += 1

            if scanned_files % PROGRESS_INTERVAL == 0 or scanned_files == len(files):
                percentage = SCAN_START + int(scanned_files / len(files) * SCAN_SPAN)
                await report(
                    percentage,
                    f"Scanned {scanned_files}/{len(files)} files...",
                    scanned_files=scanned_files,
                    total_files=len(files),
                )

        # 4. Everything not seen is unused, in declaration order
        await report(80, "Analyzing results...")
        unused_keys = [key for key in keys if key not in used_keys]

        if token.is_cancellation_requested:
            return cancelled

        await report(100, "Done")
        return AnalysisResult(
            outcome=AnalysisOutcome.COMPLETED,
            total_keys=len(keys),
            unused_keys=unused_keys,
            scanned_file_count=scanned_files,
            candidate_file_count=len(files),
            snapshot=snapshot,
        )

    def find_source_files(self) -> List[Path]:
        """
        List files matching the include globs and none of the excludes.

        Directories are walked in name order; generated directories are
        never entered.
        """
        files = []
        for dirpath, dirnames, filenames in os.walk(self.project_root):
            dirnames[:] = sorted(d for d in dirnames if d not in GENERATED_DIRS)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                relative = path.relative_to(self.project_root).as_posix()
                if self._is_candidate(relative):
                    files.append(path)
        return files

    def _is_candidate(self, relative_path: str) -> bool:
        if not any(matches_glob(relative_path, glob) for glob in self.file_globs):
            return False
        if any(matches_glob(relative_path, glob) for glob in self.exclude_patterns):
            return False
        if in_generated_dir(relative_path):
            return False
        extension = relative_path.rsplit(".", 1)[-1] if "." in relative_path else ""
        return extension in self.include_extensions

    async def _read_source(self, file_path: Path) -> Optional[str]:
        """Read a source file, or None if it is too large, binary or unreadable."""
        try:
            size = (await asyncio.to_thread(file_path.stat)).st_size
            if size > MAX_FILE_SIZE:
                logger.debug("Skipping %s: %d bytes exceeds size limit", file_path, size)
                return None

            text = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        except UnicodeDecodeError:
            logger.debug("Skipping binary file %s", file_path)
            return None
        except OSError as e:
            logger.debug("Skipping unreadable file %s: %s", file_path, e)
            return None

        if "\x00" in text:
            logger.debug("Skipping binary file %s", file_path)
            return None
        return text


async def analyze(
    project_root: Path,
    i18n_folders: Sequence[str],
    include_extensions: Sequence[str],
    exclude_patterns: Sequence[str] = (),
    token: Optional[CancellationToken] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> AnalysisResult:
    """Run a usage analysis with a one-off analyzer."""
    analyzer = UsageAnalyzer(project_root, i18n_folders, include_extensions, exclude_patterns)
    return await analyzer.analyze(token, progress_callback)
