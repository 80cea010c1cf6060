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

"""End-to-end analysis: findings in, groups + graph + risky paths out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from hawkai.correlation.grouping import cap_findings_per_file, group_findings
from hawkai.correlation.taxonomy import SignalTaxonomy
from hawkai.graph.builder import build_coarse_graph, enrich_graph_with_call_edges
from hawkai.graph.propagation import propagate_confidence
from hawkai.graph.risky_paths import detect_risky_paths
from hawkai.models.config import AnalysisConfig
from hawkai.models.findings import Finding, FindingGroup
from hawkai.models.graph import ReachabilityGraph, RiskyPath
from hawkai.scanner.call_edges import CallEdgeSource

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    groups: list[FindingGroup] = field(default_factory=list)
    graph: ReachabilityGraph = field(default_factory=ReachabilityGraph)
    risky_paths: list[RiskyPath] = field(default_factory=list)


def analyze_findings(
    findings: list[Finding],
    config: Optional[AnalysisConfig] = None,
    call_edge_source: Optional[CallEdgeSource] = None,
    taxonomy: Optional[SignalTaxonomy] = None,
) -> AnalysisResult:
    """Run grouping, graph building, propagation and risky-path detection.

    Stages, in order:
      1. Cap findings per file (``caps.perFileFindings``).
      2. Deduplicate, group and score.
      3. Build the coarse graph from groups.
      4. Enrich with call edges, when a ``call_edge_source`` is given.
      5. Propagate edge confidence.
      6. Detect risky paths.

    Args:
        findings: Findings from the rule engine, in scan order.
        config: Scoring and reachability configuration (defaults when omitted).
        call_edge_source: Optional per-file call-edge extractor.
        taxonomy: Signal taxonomy override (the bundled table when omitted).
    """
    config = config or AnalysisConfig()

    capped = cap_findings_per_file(findings, config.scoring.caps.per_file_findings)
    if len(capped) < len(findings):
        logger.info(
            "Per-file cap dropped %d of %d findings", len(findings) - len(capped), len(findings)
        )

    groups = group_findings(capped, config.scoring, taxonomy)
    logger.info("Grouped %d findings into %d groups", len(capped), len(groups))

    graph = build_coarse_graph(groups)
    if call_edge_source is not None:
        enrich_graph_with_call_edges(graph, call_edge_source, config.reachability)
    propagate_confidence(graph)
    risky_paths = detect_risky_paths(graph)

    return AnalysisResult(groups=groups, graph=graph, risky_paths=risky_paths)
