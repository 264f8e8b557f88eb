"""Grouping keys and record projections used by the report builder."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from scanreport.models.source import Rule, Vulnerability


def normalize_group_key(value: str) -> str:
    """Return the bucket key for a case-insensitive grouping.

    Mixed-case and lower-case spellings land in the same bucket
    (``"High"`` and ``"high"`` both map to ``"high"``).
    """
    return value.lower()


def project_rule(rule: Rule | None) -> dict[str, Any] | None:
    """Return the simplified view of a rule exposed in ``scanning.rules``."""
    if rule is None:
        return None

    return {
        "name": rule.name,
        "severity": rule.severity,
        "precision": rule.precision,
        "kind": rule.kind,
        "shortDescription": rule.short_description,
        "description": rule.description,
        "tags": rule.tags,
        "cwe": rule.cwes,
    }


def timestamp_value(value: str | datetime | None) -> str | None:
    """Render a source timestamp as it appears in the payload."""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def project_vulnerability(vuln: Vulnerability | None) -> dict[str, Any] | None:
    if vuln is None:
        return None

    data = {
        "created": timestamp_value(vuln.created),
        "published": timestamp_value(vuln.published_at),
        "severity": vuln.severity,
        "vulnerability": vuln.vulnerability,
        "advisory": vuln.advisory,
        "source": vuln.source,
        "link": vuln.link,
    }
    if vuln.is_dismissed:
        data["dismissed"] = vuln.dismissed_by
    return data
