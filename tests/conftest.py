"""Shared fixtures for scanreport tests."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest
import structlog

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def sample_data() -> dict:
    """A report source covering every section, in the camelCase wire shape."""
    return {
        "github": {"owner": "octo-org", "repo": "shop", "url": "https://github.com/octo-org/shop"},
        "vulnerabilities": [
            {
                "created": "2024-04-01T00:00:00Z",
                "publishedAt": "2024-03-30T00:00:00Z",
                "severity": "HIGH",
                "isDismissed": False,
                "vulnerability": {"package": "lodash"},
                "advisory": {"ghsaId": "GHSA-jf85-cpcp-j695"},
                "source": "GITHUB",
                "link": "https://github.com/advisories/GHSA-jf85-cpcp-j695",
            },
            {
                "created": "2024-04-02T00:00:00Z",
                "severity": "moderate",
                "isDismissed": True,
                "dismissedBy": {"login": "alice"},
            },
            {
                "created": "2024-04-03T00:00:00Z",
                "severity": "high",
                "isDismissed": False,
            },
        ],
        "dependencies": [
            {
                "filename": "package-lock.json",
                "path": "package-lock.json",
                "isValid": True,
                "count": 3,
                "dependencies": [
                    {"name": "lodash", "packageType": "NPM", "version": "4.17.15"},
                    {"name": "express", "packageType": "NPM", "version": "4.18.2"},
                ],
            },
            {
                "filename": "requirements.txt",
                "path": "api/requirements.txt",
                "isValid": False,
                "count": 1,
            },
            {
                "filename": "pom.xml",
                "path": "svc/pom.xml",
                "isValid": True,
                "count": 1,
                "dependencies": [
                    {"name": "log4j-core", "packageType": "MAVEN", "version": "2.14.1"},
                ],
            },
        ],
        "codeScanningOpen": {
            "CodeQL": [
                {
                    "toolName": "CodeQL",
                    "ruleId": "js/sql-injection",
                    "ruleDescription": "Database query built from user-controlled sources",
                    "severity": "error",
                    "state": "open",
                    "created": "2024-04-10T00:00:00Z",
                    "url": "https://github.com/octo-org/shop/security/code-scanning/1",
                },
                {
                    "toolName": "CodeQL",
                    "ruleId": "js/unknown-rule",
                    "ruleDescription": "Something else",
                    "severity": "warning",
                    "state": "open",
                    "created": "2024-04-11T00:00:00Z",
                    "url": "https://github.com/octo-org/shop/security/code-scanning/2",
                },
            ],
            "ESLint": [
                {"toolName": "ESLint", "ruleId": "no-eval", "severity": "error"},
            ],
        },
        "codeScanningClosed": {
            "CodeQL": [
                {
                    "toolName": "CodeQL",
                    "ruleId": "js/xss",
                    "ruleDescription": "Client-side cross-site scripting",
                    "severity": "error",
                    "state": "fixed",
                    "created": "2024-03-01T00:00:00Z",
                    "url": "https://github.com/octo-org/shop/security/code-scanning/3",
                },
            ],
        },
        "sarifReports": [
            {
                "file": "results/javascript.sarif",
                "payload": {
                    "rules": [
                        {
                            "id": "js/sql-injection",
                            "name": "js/sql-injection",
                            "severity": "error",
                            "precision": "high",
                            "kind": "path-problem",
                            "shortDescription": "Database query built from user-controlled sources",
                            "description": "Building a database query from user input is vulnerable.",
                            "tags": ["security", "external/cwe/cwe-089"],
                            "cwes": ["CWE-89"],
                        },
                        {
                            "id": "js/xss",
                            "name": "js/xss",
                            "severity": "error",
                            "precision": "high",
                            "kind": "path-problem",
                            "tags": ["security"],
                            "cwes": ["CWE-79", "CWE-116"],
                        },
                    ],
                },
            },
            {"file": "results/empty.sarif", "payload": {}},
            {
                "file": "results/extra.sarif",
                "payload": {
                    "rules": [
                        {"id": "js/unused-local-variable", "name": "js/unused-local-variable"},
                        {"id": "js/log-injection", "cwes": ["CWE-117", "CWE-79"]},
                    ],
                },
            },
        ],
    }


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by CLI runs so later tests don't write to closed streams."""
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()
