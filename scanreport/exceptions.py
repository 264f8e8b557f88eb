"""Custom exceptions for scanreport."""

from __future__ import annotations


class ReportError(Exception):
    """Base exception for all report errors."""


class MalformedInputError(ReportError):
    """Raised when a report source is missing a field the builder relies on."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Malformed report source: {'; '.join(errors)}")
