"""
Client-side report builder.

Holds the column selection, renders previews for the active entity and
drives exports against the custom-report HTTP endpoint.
"""

from fieldsales.builder.client import CustomReportClient, ReportClientError
from fieldsales.builder.selection import ColumnSelection
from fieldsales.builder.session import BuilderState, ReportBuilderSession

__all__ = [
    "BuilderState",
    "ColumnSelection",
    "CustomReportClient",
    "ReportBuilderSession",
    "ReportClientError",
]
