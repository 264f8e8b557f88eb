"""CLI entry point: scan-report.

Subcommands:
    scan-report build source.json -o report.json   # Write the report payload
    scan-report build - < source.json              # Read the source from stdin
    scan-report summary source.json                # Short human-readable overview
"""

from __future__ import annotations

import json
import sys
from typing import IO, Any

import click
import structlog

from scanreport.core.logging import setup_logging
from scanreport.engines.report_builder import CODEQL_TOOL, ReportBuilder
from scanreport.exceptions import MalformedInputError

log = structlog.get_logger("scanreport.cli")

_tool_option = click.option(
    "--tool",
    default=CODEQL_TOOL,
    envvar="SCANREPORT_SCAN_TOOL",
    show_default=True,
    help="Code-scanning tool whose alerts are summarized",
)


def _load_builder(source: IO[str], tool: str) -> ReportBuilder:
    """Parse a JSON report source, exiting with status 1 on bad input."""
    try:
        data: Any = json.load(source)
    except json.JSONDecodeError as e:
        click.echo(f"Error: {source.name} is not valid JSON: {e}", err=True)
        sys.exit(1)

    try:
        return ReportBuilder(data, scan_tool=tool)
    except MalformedInputError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """scan-report: consolidate security scan data into one report."""
    setup_logging("DEBUG" if verbose else None)


@main.command("build")
@click.argument("source", type=click.File("r"))
@click.option("-o", "--output", type=click.File("w"), default="-", help="Output file path")
@click.option("--indent", type=int, default=None, help="Indent the JSON output")
@_tool_option
def build(source: IO[str], output: IO[str], indent: int | None, tool: str) -> None:
    """Build the report payload from a JSON report source."""
    builder = _load_builder(source, tool)
    output.write(builder.to_json(indent=indent))
    output.write("\n")
    log.debug("cli.payload_written", output=output.name)


@main.command("summary")
@click.argument("source", type=click.File("r"))
@_tool_option
def summary(source: IO[str], tool: str) -> None:
    """Print a short overview of a report source."""
    builder = _load_builder(source, tool)

    deps = builder.dependency_summary()
    manifests = deps["manifests"]
    click.echo(
        f"Manifests: {len(manifests['processed'])} processed, "
        f"{len(manifests['unprocessed'])} unprocessed "
        f"({deps['totalDependencies']} dependencies)"
    )

    by_severity = builder.vulnerabilities_by_severity()
    click.echo(f"Open vulnerabilities: {len(builder.open_vulnerabilities())}")
    for severity, vulns in by_severity.items():
        click.echo(f"  {severity}: {len(vulns)}")

    results = builder.code_scan_summary()
    for side in ("open", "closed"):
        click.echo(f"{side.capitalize()} {tool} alerts: {results[side]['total']}")
        for severity, alerts in results[side]["scans"].items():
            click.echo(f"  {severity}: {len(alerts)}")

    coverage = builder.cwe_coverage()
    click.echo(f"Rules: {len(builder.applied_rules())}, CWEs: {len(coverage.get('cwes', []))}")


if __name__ == "__main__":
    main()
