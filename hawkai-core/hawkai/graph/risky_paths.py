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

"""Risky path detection: source → AI transform(s) → sink.

A path is only risky when AI/agent processing sits between the untrusted
source and the dangerous sink; a direct source → sink edge is not reported.
"""

from __future__ import annotations

import logging

from hawkai.graph import roles
from hawkai.graph.index import GraphIndex, node_confidence
from hawkai.models.graph import GraphNode, ReachabilityGraph, RiskLevel, RiskyPath

logger = logging.getLogger(__name__)

MAX_PATH_EDGES = 6
MIN_EDGE_WEIGHT = 0.3
UNWEIGHTED_EDGE = 0.5
LENGTH_DECAY = 0.9
MAX_CANDIDATES = 200
MAX_RISKY_PATHS = 50
DEFAULT_NODE_CONFIDENCE = 0.5

RISK_THRESHOLDS = (
    (0.8, RiskLevel.CRITICAL),
    (0.6, RiskLevel.HIGH),
    (0.4, RiskLevel.MODERATE),
)


def risk_level_for(confidence: float) -> RiskLevel:
    for threshold, level in RISK_THRESHOLDS:
        if confidence >= threshold:
            return level
    return RiskLevel.LOW


def path_confidence(path: list[GraphNode]) -> float:
    """Product of node confidences, decayed once per node on the path."""
    product = 1.0
    for node in path:
        confidence = node_confidence(node)
        product *= confidence if confidence is not None else DEFAULT_NODE_CONFIDENCE
    # Decays per node, not per edge: 0.8 / 0.9 / 0.7 over three nodes scores ~0.367.
    return max(0.0, min(1.0, product * LENGTH_DECAY ** len(path)))


def _top_by_confidence(index: GraphIndex, positions: list[int]) -> list[int]:
    def key(pos: int) -> tuple[float, int]:
        confidence = node_confidence(index.node(pos))
        return (-(confidence if confidence is not None else 0.0), pos)

    return sorted(positions, key=key)[:MAX_CANDIDATES]


def _edge_passes(index: GraphIndex, edge_pos: int) -> bool:
    weight = index.edges[edge_pos].weight
    return (weight if weight is not None else UNWEIGHTED_EDGE) >= MIN_EDGE_WEIGHT


class _PathSearch:
    """Bounded DFS from one source; collects the best path to each sink.

    Nodes are only excluded while they sit on the current path, so every
    simple path of at most ``MAX_PATH_EDGES`` edges is scored.
    """

    def __init__(self, index: GraphIndex, source: int, sinks: set[int], transforms: set[int]):
        self.index = index
        self.source = source
        self.sinks = sinks
        self.transforms = transforms
        self.found: dict[int, RiskyPath] = {}

    def run(self) -> dict[int, RiskyPath]:
        self._visit(self.source, [self.source], [])
        return self.found

    def _visit(self, pos: int, path: list[int], seen_transforms: list[int]) -> None:
        if pos != self.source and pos in self.sinks and seen_transforms:
            self._record(path, seen_transforms)

        if pos != self.source and pos in self.transforms:
            seen_transforms = seen_transforms + [pos]

        if len(path) - 1 >= MAX_PATH_EDGES:
            return
        for edge_pos in self.index.outgoing[pos]:
            target = self.index.edge_target[edge_pos]
            if target is None or target in path or not _edge_passes(self.index, edge_pos):
                continue
            self._visit(target, path + [target], seen_transforms)

    def _record(self, path: list[int], transforms: list[int]) -> None:
        nodes = [self.index.node(p) for p in path]
        confidence = path_confidence(nodes)
        sink = path[-1]
        current = self.found.get(sink)
        if current is not None and current.confidence >= confidence:
            return
        self.found[sink] = RiskyPath(
            source=nodes[0],
            transforms=[self.index.node(p) for p in transforms],
            sink=nodes[-1],
            path=nodes,
            confidence=confidence,
            risk_level=risk_level_for(confidence),
        )


def detect_risky_paths(graph: ReachabilityGraph) -> list[RiskyPath]:
    """Best path per (source, sink) pair, top 50 by confidence."""
    index = GraphIndex(graph)
    positions = range(len(graph.nodes))

    sources = _top_by_confidence(index, [p for p in positions if roles.is_source(index, p)])
    sinks = set(_top_by_confidence(index, [p for p in positions if roles.is_sink(index, p)]))
    transforms = {p for p in positions if roles.is_transform(index.node(p))}
    logger.debug(
        "Risky-path candidates: %d sources, %d transforms, %d sinks",
        len(sources), len(transforms), len(sinks),
    )

    paths: list[RiskyPath] = []
    if sinks and transforms:
        for source in sources:
            paths.extend(_PathSearch(index, source, sinks, transforms).run().values())

    paths.sort(key=lambda p: (-p.confidence, p.source.id, p.sink.id))
    paths = paths[:MAX_RISKY_PATHS]
    logger.info("Detected %d risky paths", len(paths))
    return paths
