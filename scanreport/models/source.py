"""Input records for a report run.

A :class:`ReportSource` is built once from externally gathered scan data
(dependency graph, vulnerability alerts, code-scanning alerts and SARIF rule
metadata).  Every container field is normalized to an empty default at
construction time so the builder never has to re-check for absent input.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from scanreport.exceptions import MalformedInputError

log = structlog.get_logger("scanreport.models")

Timestamp = str | datetime | None

_MAPPING_FIELDS = frozenset({"github", "code_scanning_open", "code_scanning_closed"})


class SourceRecord(BaseModel):
    """Base for all source records: camelCase on the wire, unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    def dump(self) -> dict[str, Any]:
        """Return the record in its wire shape, limited to the keys it was given."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Vulnerability(SourceRecord):
    """A dependency vulnerability alert."""

    created: Timestamp = None
    published_at: Timestamp = None
    severity: str
    is_dismissed: bool = False
    dismissed_by: Any = None  # only set when dismissed
    vulnerability: Any = None
    advisory: Any = None
    source: Any = None
    link: str | None = None

    @field_validator("is_dismissed", mode="before")
    @classmethod
    def _null_flag(cls, v: Any) -> Any:
        return False if v is None else v


class Dependency(SourceRecord):
    name: str | None = None
    package_type: str
    version: str | None = None


class DependencySet(SourceRecord):
    """Scan result for one manifest file.

    ``count`` is what the manifest declares; ``dependencies`` holds only the
    entries that were identified, so it can be shorter on a partial parse.
    """

    filename: str | None = None
    path: str | None = None
    is_valid: bool = False
    count: int
    dependencies: list[Dependency] | None = None

    @field_validator("is_valid", mode="before")
    @classmethod
    def _null_flag(cls, v: Any) -> Any:
        return False if v is None else v


class ScanAlert(SourceRecord):
    """A code-scanning (static analysis) alert."""

    tool_name: str | None = None
    rule_id: str | None = None
    rule_description: str | None = None
    severity: str | None = None
    state: str | None = None
    created: Timestamp = None
    url: str | None = None


class Rule(SourceRecord):
    """A static-analysis rule definition taken from a SARIF run."""

    id: str | None = None
    name: str | None = None
    severity: str | None = None
    precision: str | None = None
    kind: str | None = None
    short_description: Any = None
    description: Any = None
    tags: list[Any] | None = None
    cwes: list[str] | None = None


class SarifPayload(SourceRecord):
    rules: list[Rule] | None = None


class SarifReport(SourceRecord):
    file: Any = None
    payload: SarifPayload = Field(default_factory=SarifPayload)

    @field_validator("payload", mode="before")
    @classmethod
    def _empty_payload(cls, v: Any) -> Any:
        return {} if v is None else v


class ReportSource(SourceRecord):
    """Immutable input bundle for :class:`~scanreport.engines.report_builder.ReportBuilder`."""

    github: dict[str, Any] = Field(default_factory=dict)
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    dependencies: list[DependencySet] = Field(default_factory=list)
    code_scanning_open: dict[str, list[ScanAlert]] = Field(default_factory=dict)
    code_scanning_closed: dict[str, list[ScanAlert]] = Field(default_factory=dict)
    sarif_reports: list[SarifReport] = Field(default_factory=list)

    @field_validator(
        "github",
        "vulnerabilities",
        "dependencies",
        "code_scanning_open",
        "code_scanning_closed",
        "sarif_reports",
        mode="before",
    )
    @classmethod
    def _absent_as_empty(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return {} if info.field_name in _MAPPING_FIELDS else []
        return v

    @field_validator("code_scanning_open", "code_scanning_closed", mode="before")
    @classmethod
    def _null_alert_lists(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {tool: [] if alerts is None else alerts for tool, alerts in v.items()}
        return v

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> ReportSource:
        """Normalize raw scan data into a :class:`ReportSource`.

        Raises :class:`MalformedInputError` when a field the builder depends on
        (``count``, ``severity``, ``packageType``) is missing or
        has the wrong type.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise MalformedInputError([f"expected a mapping, got {type(data).__name__}"])
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            errors = [
                f"{' → '.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
            log.warning("report.source_rejected", error_count=len(errors))
            raise MalformedInputError(errors) from exc
