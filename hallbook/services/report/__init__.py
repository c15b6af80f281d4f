"""
Reports and exports.
"""

from hallbook.services.report.report_service import ReportFile, ReportService

__all__ = ["ReportFile", "ReportService"]
