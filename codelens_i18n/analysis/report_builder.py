"""Markdown report of unused locale keys."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

REPORT_PREFIX = "i18n-unused-resources"


def report_file_name(now: Optional[datetime] = None) -> str:
    """Report file name for a point in time, e.g. i18n-unused-resources-2024-05-01-13-45-10.md."""
    now = now or datetime.now()
    return f"{REPORT_PREFIX}-{now:%Y-%m-%d}-{now:%H-%M-%S}.md"


def usage_rate(total_keys: int, unused_count: int) -> str:
    """Percentage of keys in use, with one decimal."""
    if total_keys <= 0:
        return "100.0"
    return f"{(total_keys - unused_count) / total_keys * 100:.1f}"


class ReportBuilder:
    """
    Builds the unused-resources report.

    The output only depends on the inputs and the scan timestamp.
    """

    def build(
        self,
        total_keys: int,
        scanned_files: int,
        unused_keys: Sequence[str],
        values_by_locale: Mapping[str, Mapping[str, str]],
        generated_at: Optional[datetime] = None,
    ) -> str:
        """
        Render the report.

        Args:
            total_keys: Number of distinct keys across all locales
            scanned_files: Number of source files scanned
            unused_keys: Unused keys in declaration order
            values_by_locale: locale -> {key: value} for the unused keys
            generated_at: Scan timestamp (defaults to now)

        Returns:
            Markdown document
        """
        generated_at = generated_at or datetime.now()
        lines: List[str] = [
            "# I18n Unused Resources Report",
            "",
            f"**Scan Date:** {generated_at:%Y-%m-%d %H:%M:%S}",
            "",
            "## Summary",
            "",
            f"- **Total i18n keys:** {total_keys}",
            f"- **Files scanned:** {scanned_files}",
            f"- **Unused keys found:** {len(unused_keys)}",
            f"- **Usage rate:** {usage_rate(total_keys, len(unused_keys))}%",
            "",
        ]

        if not unused_keys:
            lines.extend([
                "🎉 **Result:** All i18n resources are being used!",
                "",
                f"All {total_keys} i18n keys in your project are currently being used in the codebase.",
                "",
            ])
            return "\n".join(lines)

        lines.extend(self._details(unused_keys, values_by_locale))
        lines.extend([
            "## Recommendations",
            "",
            "1. **Review unused keys:** Check if these keys are actually needed",
            "2. **Safe removal:** Consider removing unused keys to clean up your i18n files",
            "3. **Backup first:** Always backup your i18n files before mass deletion",
            "",
            "## Raw Unused Keys List",
            "",
            "```",
            *unused_keys,
            "```",
            "",
        ])
        return "\n".join(lines)

    def _details(
        self,
        unused_keys: Sequence[str],
        values_by_locale: Mapping[str, Mapping[str, str]],
    ) -> List[str]:
        lines = [
            "## Unused Keys Details",
            "",
            f"Found {len(unused_keys)} unused i18n resources:",
            "",
        ]

        for locale, values in values_by_locale.items():
            entries = [f'- `{key}`: "{values[key]}"' for key in unused_keys if key in values]
            if not entries:
                continue
            lines.append(f"### {locale}")
            lines.extend(entries)
            lines.append("")

        return lines


def save_report(content: str, directory: Path, now: Optional[datetime] = None) -> Optional[Path]:
    """
    Write a report into a directory.

    Returns:
        The written path, or None if writing failed; the caller keeps the
        in-memory content in that case
    """
    path = Path(directory) / report_file_name(now)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error("Could not save report file %s: %s", path, e)
        return None
    return path
