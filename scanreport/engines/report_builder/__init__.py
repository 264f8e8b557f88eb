"""Report builder engine — aggregate scan data into a report payload."""

from scanreport.engines.report_builder.builder import (
    CODEQL_TOOL,
    ReportBuilder,
    format_timestamp,
    merge_rules,
    summarize_alerts,
)
from scanreport.engines.report_builder.normalize import (
    normalize_group_key,
    project_rule,
    project_vulnerability,
)

__all__ = [
    "CODEQL_TOOL",
    "ReportBuilder",
    "format_timestamp",
    "merge_rules",
    "normalize_group_key",
    "project_rule",
    "project_vulnerability",
    "summarize_alerts",
]
