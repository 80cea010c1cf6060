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

"""Reachability graph construction.

Two stages:
  1. ``build_coarse_graph`` turns finding groups into finding nodes joined
     by ``related`` edges (primary → related).
  2. ``enrich_graph_with_call_edges`` attaches best-effort call/import edges
     from a ``CallEdgeSource`` to the nearest finding node in the same file.
"""

from __future__ import annotations

import logging
from typing import Optional

from hawkai.graph import roles
from hawkai.models.config import ReachabilityLimits
from hawkai.models.findings import Finding, FindingGroup, max_severity
from hawkai.models.graph import (
    CallEdge,
    CallEdgeKind,
    EdgeKind,
    GraphEdge,
    GraphNode,
    NodeKind,
    ReachabilityGraph,
)
from hawkai.scanner.call_edges import CallEdgeExtractionError, CallEdgeSource

logger = logging.getLogger(__name__)


def node_id_for_finding(finding: Finding) -> str:
    """Node identity: ``ruleId|file|line`` (``null`` when the line is unknown)."""
    line = finding.line if finding.line is not None else "null"
    return f"{finding.rule_id}|{finding.file}|{line}"


def _upsert_node(
    nodes: dict[str, GraphNode],
    finding: Finding,
    composite_score: float,
) -> GraphNode:
    node_id = node_id_for_finding(finding)
    existing = nodes.get(node_id)
    if existing is None:
        node = GraphNode(
            id=node_id,
            kind=NodeKind.FINDING,
            label=finding.rule_id,
            file=finding.file,
            line=finding.line,
            severity=finding.severity,
            confidence=finding.confidence,
            composite_score=composite_score,
            category=finding.category or None,
        )
        nodes[node_id] = node
        return node

    # Same location seen through another group: keep the strongest evidence.
    existing.severity = max_severity(existing.severity, finding.severity)
    existing.confidence = max(existing.confidence or 0.0, finding.confidence)
    existing.composite_score = max(existing.composite_score or 0.0, composite_score)
    if existing.category is None and finding.category:
        existing.category = finding.category
    return existing


def build_coarse_graph(groups: list[FindingGroup]) -> ReachabilityGraph:
    """Build finding nodes and primary → related edges from ``groups``."""
    nodes: dict[str, GraphNode] = {}
    edges: list[GraphEdge] = []
    seen_edges: set[str] = set()

    for group in groups:
        primary = _upsert_node(nodes, group.primary_finding, group.composite_score)
        for related in group.related_findings:
            related_node = _upsert_node(nodes, related, group.composite_score)
            if related_node.id == primary.id:
                continue
            edge_id = f"rel|{primary.id}->{related_node.id}"
            if edge_id in seen_edges:
                continue
            seen_edges.add(edge_id)
            edges.append(GraphEdge(
                id=edge_id,
                kind=EdgeKind.RELATED,
                from_id=primary.id,
                to=related_node.id,
                weight=max(group.composite_score, related.confidence),
                label="related",
            ))

    graph = ReachabilityGraph(nodes=list(nodes.values()), edges=edges)
    graph.refresh_stats()
    logger.info(
        "Coarse graph: %d nodes, %d related edges from %d groups",
        graph.stats.node_count, graph.stats.edge_count, len(groups),
    )
    return graph


def classify_call_edge(call: CallEdge) -> EdgeKind:
    """Map an extracted call edge onto a graph edge kind.

    Imports of AI/agent frameworks become ``uses_model``; calls whose target
    reads like an invoke/stream/tool/execute/run become ``uses_tool``; targets
    naming an endpoint/api/client become ``uses_endpoint``.
    """
    if call.kind == CallEdgeKind.IMPORT:
        if roles.is_ai_framework_import(call.to):
            return EdgeKind.USES_MODEL
    elif call.kind in (CallEdgeKind.CALL, CallEdgeKind.METHOD):
        if roles.is_tool_call_target(call.to):
            return EdgeKind.USES_TOOL
    if roles.is_endpoint_target(call.to):
        return EdgeKind.USES_ENDPOINT
    return EdgeKind.CALLS


def _nearest_node(candidates: list[GraphNode], line: Optional[int]) -> Optional[GraphNode]:
    """Exact line match first, then smallest line distance (first wins ties)."""
    if not candidates:
        return None
    target = line or 0
    best: Optional[GraphNode] = None
    best_distance = -1
    for node in candidates:
        node_line = node.line or 0
        if line is not None and node.line == line:
            return node
        distance = abs(node_line - target)
        if best is None or distance < best_distance:
            best, best_distance = node, distance
    return best


def enrich_graph_with_call_edges(
    graph: ReachabilityGraph,
    source: CallEdgeSource,
    limits: Optional[ReachabilityLimits] = None,
) -> ReachabilityGraph:
    """Attach call edges from ``source`` to finding nodes, in place.

    Files are visited in node order. Extraction failures skip the file with a
    warning. Call edges with no node in their file are dropped.
    """
    limits = limits or ReachabilityLimits()

    nodes_by_file: dict[str, list[GraphNode]] = {}
    for node in graph.nodes:
        if node.file:
            nodes_by_file.setdefault(node.file, []).append(node)

    files = list(nodes_by_file)
    if len(files) > limits.max_files_for_call_edges:
        logger.debug(
            "Call-edge enrichment limited to %d of %d files",
            limits.max_files_for_call_edges, len(files),
        )
        files = files[: limits.max_files_for_call_edges]

    existing_ids = {edge.id for edge in graph.edges}
    added = 0
    dropped = 0
    skipped_files = 0

    for file in files:
        if added >= limits.max_total_call_edges:
            logger.debug("Total call-edge cap (%d) reached", limits.max_total_call_edges)
            break
        try:
            calls = source.extract(file)
        except CallEdgeExtractionError as exc:
            logger.warning("Skipping call edges for %s: %s", file, exc)
            skipped_files += 1
            continue

        calls = calls[: limits.max_call_edges_per_file]
        for call in calls:
            if added >= limits.max_total_call_edges:
                break
            node = _nearest_node(nodes_by_file.get(call.file, []), call.line)
            if node is None:
                dropped += 1
                continue
            kind = classify_call_edge(call)
            line = call.line if call.line is not None else "null"
            edge_id = f"call|{node.id}->{call.to}|{line}|{kind.value}"
            if edge_id in existing_ids:
                continue
            existing_ids.add(edge_id)
            graph.edges.append(GraphEdge(
                id=edge_id,
                kind=kind,
                from_id=node.id,
                to=call.to,
                weight=call.confidence,
                label=call.kind.value,
            ))
            added += 1

    graph.refresh_stats()
    logger.info(
        "Call-edge enrichment: %d edges added from %d files (%d skipped)",
        added, len(files), skipped_files,
    )
    if dropped:
        logger.debug("Dropped %d call edges with no matching node", dropped)
    return graph
