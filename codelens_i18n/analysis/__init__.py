"""Usage analysis and reporting modules."""

from .usage_analyzer import UsageAnalyzer, CancellationToken, analyze
from .report_builder import ReportBuilder, report_file_name, save_report

__all__ = [
    "UsageAnalyzer",
    "CancellationToken",
    "analyze",
    "ReportBuilder",
    "report_file_name",
    "save_report",
]
