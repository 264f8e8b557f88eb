"""ReportBuilder — consolidate one project's scan data into a report payload."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

import structlog

from scanreport.engines.report_builder.normalize import (
    normalize_group_key,
    project_rule,
    project_vulnerability,
    timestamp_value,
)
from scanreport.models.source import ReportSource, Rule, SarifReport, ScanAlert, Vulnerability

log = structlog.get_logger("scanreport.engine")

CODEQL_TOOL = "CodeQL"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def merge_rules(reports: list[SarifReport]) -> dict[str | None, Rule]:
    """Fold the rules of every report into one index, in report order.

    A rule id seen again in a later report replaces the earlier definition;
    the key keeps its first-seen position.  Rules without an id share the
    ``None`` key.
    """
    index: dict[str | None, Rule] = {}
    for report in reports:
        for rule in report.payload.rules or []:
            if rule.id in index:
                log.debug("report.rule_overwritten", rule_id=rule.id, file=report.file)
            index[rule.id] = rule
    return index


def summarize_alerts(
    results: Mapping[str, list[ScanAlert]],
    rules: Mapping[str | None, Rule],
    tool: str = CODEQL_TOOL,
) -> dict[str, Any]:
    """Group one side (open or closed) of the alert map by alert severity.

    Only the alerts filed under ``tool`` are summarized.  Severities are used
    as-is, without case folding.

    ``rule.details`` carries the matched rule in its source shape (``id``,
    ``cwes``, ...), not the ``scanning.rules`` projection.
    """
    scans: dict[str | None, list[dict[str, Any]]] = {}
    total = 0

    for alert in results.get(tool, []):
        summary: dict[str, Any] = {
            "tool": alert.tool_name,
            "name": alert.rule_description,
            "state": alert.state,
            "created": timestamp_value(alert.created),
            "url": alert.url,
            "rule": {"id": alert.rule_id},
        }
        matched = rules.get(alert.rule_id) if alert.rule_id is not None else None
        if matched is not None:
            summary["rule"]["details"] = matched.dump()

        scans.setdefault(alert.severity, []).append(summary)
        total += 1

    return {"total": total, "scans": scans}


class ReportBuilder:
    """Stateless transformer from a :class:`ReportSource` to a report payload.

    Every view is recomputed on each call; the source is never mutated.
    """

    def __init__(
        self,
        source: ReportSource | Mapping[str, Any] | None = None,
        *,
        clock: Clock | None = None,
        scan_tool: str = CODEQL_TOOL,
    ) -> None:
        if isinstance(source, ReportSource):
            self._source = source
        else:
            self._source = ReportSource.from_data(source)
        self._clock = clock or _utcnow
        self._scan_tool = scan_tool

    @property
    def source(self) -> ReportSource:
        return self._source

    # ── vulnerabilities ──────────────────────────────────────────────────

    def open_vulnerabilities(self) -> list[Vulnerability]:
        return [v for v in self._source.vulnerabilities if not v.is_dismissed]

    def closed_vulnerabilities(self) -> list[Vulnerability]:
        return [v for v in self._source.vulnerabilities if v.is_dismissed]

    def vulnerabilities_by_severity(self) -> dict[str, list[Vulnerability]]:
        """Open vulnerabilities grouped by lower-cased severity, input order kept."""
        result: dict[str, list[Vulnerability]] = {}
        for vuln in self.open_vulnerabilities():
            result.setdefault(normalize_group_key(vuln.severity), []).append(vuln)
        return result

    def vulnerability_details(self) -> list[dict[str, Any]]:
        """Open vulnerabilities in their flattened detail form."""
        return [project_vulnerability(v) for v in self.open_vulnerabilities()]

    # ── dependencies ─────────────────────────────────────────────────────

    def dependency_summary(self) -> dict[str, Any]:
        processed: list[dict[str, Any]] = []
        unprocessed: list[dict[str, Any]] = []
        dependencies: dict[str, list[dict[str, Any]]] = {}
        total = 0

        for dep_set in self._source.dependencies:
            total += dep_set.count

            manifest = {"filename": dep_set.filename, "path": dep_set.path}
            if dep_set.is_valid:
                processed.append(manifest)
            else:
                unprocessed.append(manifest)

            for dep in dep_set.dependencies or []:
                dependencies.setdefault(normalize_group_key(dep.package_type), []).append(
                    {"name": dep.name, "type": dep.package_type, "version": dep.version}
                )

        return {
            "manifests": {"processed": processed, "unprocessed": unprocessed},
            "totalDependencies": total,
            "dependencies": dependencies,
        }

    # ── code scanning ────────────────────────────────────────────────────

    def open_code_scan_results(self) -> dict[str, list[ScanAlert]]:
        return self._source.code_scanning_open

    def closed_code_scan_results(self) -> dict[str, list[ScanAlert]]:
        return self._source.code_scanning_closed

    def rule_index(self) -> dict[str | None, Rule]:
        return merge_rules(self._source.sarif_reports)

    def applied_rules(self) -> list[dict[str, Any]]:
        return [project_rule(rule) for rule in self.rule_index().values()]

    def cwe_coverage(self) -> dict[str, Any]:
        """Map each CWE id to the applied rules declaring it.

        Returns ``{}`` when no rules were loaded at all, otherwise
        ``{"cweToRules": ..., "cwes": [...]}`` in discovery order.
        """
        rules = self.applied_rules()
        if not rules:
            return {}

        cwe_to_rules: dict[str, list[dict[str, Any]]] = {}
        for rule in rules:
            for cwe in rule["cwe"] or []:
                cwe_to_rules.setdefault(cwe, []).append(rule)

        return {"cweToRules": cwe_to_rules, "cwes": list(cwe_to_rules)}

    def code_scan_summary(self) -> dict[str, Any]:
        rules = self.rule_index()
        return {
            "open": summarize_alerts(self.open_code_scan_results(), rules, self._scan_tool),
            "closed": summarize_alerts(self.closed_code_scan_results(), rules, self._scan_tool),
        }

    # ── payload ──────────────────────────────────────────────────────────

    def build_payload(self) -> dict[str, Any]:
        by_severity = {
            severity: [v.dump() for v in vulns]
            for severity, vulns in self.vulnerabilities_by_severity().items()
        }
        results = self.code_scan_summary()

        payload = {
            "github": dict(self._source.github),
            "metadata": {"created": format_timestamp(self._clock())},
            "sca": {
                "dependencies": self.dependency_summary(),
                "vulnerabilities": {
                    "total": len(self.open_vulnerabilities()),
                    "bySeverity": by_severity,
                },
            },
            "scanning": {
                "rules": self.applied_rules(),
                "cwe": self.cwe_coverage(),
                "results": results,
            },
        }

        log.info(
            "report.payload_built",
            open_vulns=payload["sca"]["vulnerabilities"]["total"],
            rules=len(payload["scanning"]["rules"]),
            open_alerts=results["open"]["total"],
            closed_alerts=results["closed"]["total"],
        )
        return payload

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.build_payload(), indent=indent)
