# HawkAI — AI Usage & Reachability Scanner
# Copyright (C) 2026 HawkAI Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""HawkAI CLI — Typer entry point.

Commands:
- hawkai analyze <findings.json>  — Group, score and trace findings to risky paths
- hawkai version                  — Show the installed version
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError
from rich.markup import escape

from hawkai import __version__
from hawkai.models.config import AnalysisConfig
from hawkai.models.findings import Finding
from hawkai.models.report import AnalysisReport
from hawkai.policy.config_loader import ScoringConfigStore
from hawkai.reporter.console_out import console, print_analysis
from hawkai.reporter.json_out import to_canonical_json, write_report
from hawkai.scanner.call_edges import PythonCallEdgeExtractor
from hawkai.scanner.pipeline import analyze_findings

app = typer.Typer(
    name="hawkai",
    help=(
        "HawkAI: correlation and reachability analysis for AI/agent usage findings. "
        "Run 'hawkai <command> --help' for flags."
    ),
    add_completion=False,
)

logger = logging.getLogger("hawkai")


def load_findings(findings_path: Path) -> list[Finding]:
    """Read findings from a JSON list or an object with a ``findings`` list."""
    with open(findings_path, "r", encoding="utf-8") as f:
        data: Any = json.load(f)
    if isinstance(data, dict):
        data = data.get("findings", [])
    if not isinstance(data, list):
        raise ValueError("expected a list of findings or an object with a 'findings' list")
    return [Finding.model_validate(item) for item in data]


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@app.command()
def analyze(
    findings_file: str = typer.Argument(..., help="Findings JSON produced by the rule engine"),
    root: Optional[str] = typer.Option(
        None, "--root", help="Source root for call-edge extraction (skipped when omitted)"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", help="Scoring config (YAML or JSON)"
    ),
    output_json: bool = typer.Option(False, "--json", help="Output raw JSON to stdout (for CI)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Also write the JSON report to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show contributing signals and debug logs"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all output except errors"),
) -> None:
    """Group findings, build the reachability graph and report risky paths."""
    _configure_logging(verbose, quiet)

    findings_path = Path(findings_file)
    if not findings_path.is_file():
        console.print(f"[red]Error: Findings file not found: {findings_path}[/red]")
        raise typer.Exit(code=1)

    try:
        findings = load_findings(findings_path)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        console.print(f"[red]Error: Invalid findings file {findings_path}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    config = AnalysisConfig()
    if config_file:
        try:
            config = ScoringConfigStore.open(config_file).current()
        except (OSError, yaml.YAMLError, ValidationError, ValueError) as e:
            console.print(f"[red]Error: Invalid config {config_file}: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)

    call_edge_source = None
    if root:
        root_dir = Path(root).resolve()
        if not root_dir.is_dir():
            console.print(f"[red]Error: Not a directory: {root_dir}[/red]")
            raise typer.Exit(code=1)
        call_edge_source = PythonCallEdgeExtractor(root_dir)

    result = analyze_findings(findings, config=config, call_edge_source=call_edge_source)
    report = AnalysisReport(
        scan_target=str(root or findings_path),
        finding_count=len(findings),
        groups=result.groups,
        graph=result.graph,
        risky_paths=result.risky_paths,
    )

    if output:
        write_report(report, Path(output))

    if output_json:
        print(to_canonical_json(report), end="")
    elif not quiet:
        print_analysis(report, verbose=verbose)


@app.command()
def version() -> None:
    """Show the HawkAI version."""
    console.print(f"HawkAI v{__version__}")


if __name__ == "__main__":
    app()
