"""Report source models."""

from scanreport.models.source import (
    Dependency,
    DependencySet,
    ReportSource,
    Rule,
    SarifPayload,
    SarifReport,
    ScanAlert,
    Vulnerability,
)

__all__ = [
    "Dependency",
    "DependencySet",
    "ReportSource",
    "Rule",
    "SarifPayload",
    "SarifReport",
    "ScanAlert",
    "Vulnerability",
]
