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

"""Rich terminal output for analysis results."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hawkai.models.findings import FindingGroup, Severity
from hawkai.models.graph import RiskLevel, RiskyPath
from hawkai.models.report import AnalysisReport


def _make_console() -> Console:
    """Console with soft wrap. No fixed width, uses live terminal size."""
    return Console(soft_wrap=True)


console = _make_console()

_SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "bold dark_orange",
    Severity.MODERATE: "bold yellow",
    Severity.LOW: "green",
}

_RISK_STYLES = {
    RiskLevel.CRITICAL: "bold red",
    RiskLevel.HIGH: "bold dark_orange",
    RiskLevel.MODERATE: "bold yellow",
    RiskLevel.LOW: "green",
}


def _score_bar(score: float) -> Text:
    """Ten-cell bar for a 0..1 score."""
    filled = max(0, min(10, round(score * 10)))
    bar = Text()
    bar.append("#" * filled, style="cyan")
    bar.append("-" * (10 - filled), style="dim")
    bar.append(f" {score:.2f}")
    return bar


def _location(file: str | None, line: int | None) -> str:
    if not file:
        return "-"
    return f"{file}:{line}" if line is not None else file


def print_analysis_header(report: AnalysisReport) -> None:
    header = Text()
    header.append("HAWKAI REACHABILITY ANALYSIS\n", style="bold cyan")
    header.append(f"  Target:   {report.scan_target or '-'}\n", style="white")
    header.append(f"  Findings: {report.finding_count}\n", style="white")
    header.append(
        f"  Graph:    {report.graph.stats.node_count} nodes, "
        f"{report.graph.stats.edge_count} edges",
        style="dim",
    )
    console.print(
        Panel(
            header,
            border_style="white",
            title="[bold]HawkAI Analysis[/bold]",
            title_align="left",
            expand=True,
            safe_box=True,
        ),
        crop=False,
    )


def print_groups_table(groups: list[FindingGroup], verbose: bool = False) -> None:
    """Finding groups, highest composite score first."""
    if not groups:
        console.print("\n[green]No finding groups above the evidence floor.[/green]")
        return

    table = Table(
        show_header=True,
        header_style="bold dim",
        border_style="dim",
        title="[bold]Finding Groups[/bold]",
        title_justify="left",
        expand=True,
    )
    table.add_column("Severity", min_width=8)
    table.add_column("Rule", style="yellow", ratio=1, overflow="fold")
    table.add_column("Location", style="white", ratio=2, overflow="fold")
    table.add_column("Related", justify="right", min_width=7)
    table.add_column("Score", min_width=15)
    if verbose:
        table.add_column("Signals", style="dim", ratio=2, overflow="fold")

    for group in sorted(groups, key=lambda g: -g.composite_score):
        primary = group.primary_finding
        row = [
            Text(group.severity.value, style=_SEVERITY_STYLES[group.severity]),
            primary.rule_id,
            _location(primary.file, primary.line),
            str(len(group.related_findings)),
            _score_bar(group.composite_score),
        ]
        if verbose:
            row.append(", ".join(
                f"{s.rule_id} ({s.role.value})" for s in group.contributing_signals
            ))
        table.add_row(*row)

    console.print()
    console.print(table, crop=False)


def print_risky_paths(paths: list[RiskyPath]) -> None:
    """Source → transform → sink chains."""
    if not paths:
        console.print("\n[green]No risky source → AI → sink paths detected.[/green]")
        return

    table = Table(
        show_header=True,
        header_style="bold dim",
        border_style="red",
        title="[bold red]Risky Paths[/bold red]",
        title_justify="left",
        expand=True,
    )
    table.add_column("Risk", min_width=8)
    table.add_column("Source", style="cyan", ratio=1, overflow="fold")
    table.add_column("Via", style="magenta", ratio=1, overflow="fold")
    table.add_column("Sink", style="yellow", ratio=1, overflow="fold")
    table.add_column("Confidence", justify="right", min_width=10)

    for path in paths:
        table.add_row(
            Text(path.risk_level.value, style=_RISK_STYLES[path.risk_level]),
            f"{path.source.label}\n{_location(path.source.file, path.source.line)}",
            " → ".join(t.label for t in path.transforms),
            f"{path.sink.label}\n{_location(path.sink.file, path.sink.line)}",
            f"{path.confidence:.3f}",
        )

    console.print()
    console.print(table, crop=False)


def print_analysis(report: AnalysisReport, verbose: bool = False) -> None:
    print_analysis_header(report)
    print_groups_table(report.groups, verbose=verbose)
    print_risky_paths(report.risky_paths)
