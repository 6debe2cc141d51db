import os
import sys
from datetime import datetime

ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from codelens_i18n.analysis.report_builder import (
    ReportBuilder,
    report_file_name,
    save_report,
    usage_rate,
)

SCAN_TIME = datetime(2024, 5, 1, 13, 45, 10)


def test_usage_rate_rounds_to_one_decimal():
    assert usage_rate(10, 3) == "70.0"
    assert usage_rate(3, 1) == "66.7"
    assert usage_rate(0, 0) == "100.0"


def test_report_summary():
    report = ReportBuilder().build(
        total_keys=10,
        scanned_files=4,
        unused_keys=["a", "b", "c"],
        values_by_locale={},
        generated_at=SCAN_TIME,
    )
    assert "**Scan Date:** 2024-05-01 13:45:10" in report
    assert "- **Total i18n keys:** 10" in report
    assert "- **Files scanned:** 4" in report
    assert "- **Unused keys found:** 3" in report
    assert "- **Usage rate:** 70.0%" in report


def test_report_details_grouped_by_locale():
    report = ReportBuilder().build(
        total_keys=5,
        scanned_files=2,
        unused_keys=["menu.open", "title"],
        values_by_locale={
            "en": {"menu.open": "Open", "title": "Title"},
            "ja": {"title": "タイトル"},
        },
        generated_at=SCAN_TIME,
    )

    assert "## Unused Keys Details" in report
    assert report.index("### en") < report.index("### ja")
    assert '- `menu.open`: "Open"' in report
    assert '- `title`: "タイトル"' in report
    assert "## Recommendations" in report
    assert report.rstrip().endswith("```\nmenu.open\ntitle\n```")


def test_report_when_everything_is_used():
    report = ReportBuilder().build(
        total_keys=7,
        scanned_files=3,
        unused_keys=[],
        values_by_locale={},
        generated_at=SCAN_TIME,
    )
    assert "All i18n resources are being used!" in report
    assert "All 7 i18n keys" in report
    assert "## Unused Keys Details" not in report
    assert "```" not in report


def test_report_is_deterministic_for_fixed_time():
    builder = ReportBuilder()
    args = dict(
        total_keys=3,
        scanned_files=1,
        unused_keys=["b"],
        values_by_locale={"en": {"b": "B"}},
        generated_at=SCAN_TIME,
    )
    assert builder.build(**args) == builder.build(**args)


def test_save_report_uses_timestamped_name(tmp_path):
    assert report_file_name(SCAN_TIME) == "i18n-unused-resources-2024-05-01-13-45-10.md"

    path = save_report("# report", tmp_path, now=SCAN_TIME)

    assert path == tmp_path / "i18n-unused-resources-2024-05-01-13-45-10.md"
    assert path.read_text(encoding="utf-8") == "# report"


def test_save_report_failure_returns_none(tmp_path):
    assert save_report("# report", tmp_path / "missing" / "dir") is None
