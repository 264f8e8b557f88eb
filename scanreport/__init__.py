"""scanreport — consolidate security scan data into a single report payload."""

from scanreport.engines.report_builder import CODEQL_TOOL, ReportBuilder
from scanreport.exceptions import MalformedInputError, ReportError
from scanreport.models import ReportSource

__version__ = "0.1.0"

__all__ = [
    "CODEQL_TOOL",
    "MalformedInputError",
    "ReportBuilder",
    "ReportError",
    "ReportSource",
]
