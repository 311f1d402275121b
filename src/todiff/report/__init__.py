"""Building and rendering of diff reports."""

from todiff.report.builder import Report, ReportEntry, ReportSection, SectionKind, build_report
from todiff.report.render import ReportRenderer, describe, format_report, make_console

__all__ = [
    "Report",
    "ReportEntry",
    "ReportSection",
    "SectionKind",
    "build_report",
    "ReportRenderer",
    "describe",
    "format_report",
    "make_console",
]
