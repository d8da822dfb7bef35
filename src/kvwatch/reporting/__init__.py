"""
Reporting module for kvwatch.

Aggregates classified messages into a severity-ordered report.
"""

from kvwatch.reporting.report import Report, ReportBuilder, build_report

__all__ = [
    "Report",
    "ReportBuilder",
    "build_report",
]
