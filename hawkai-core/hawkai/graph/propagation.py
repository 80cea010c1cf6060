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

"""Edge confidence propagation.

Each edge first gets a base weight from its endpoints' confidences (geometric
mean, so one weak endpoint drags the edge down), scaled up for AI-specific and
outward-facing edge kinds. A bounded DFS from high-confidence seed nodes then
records, per edge, the best decayed path score that reached it. The final
weight blends the two.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from hawkai.graph.index import GraphIndex, node_confidence
from hawkai.models.graph import EdgeKind, GraphEdge, ReachabilityGraph

logger = logging.getLogger(__name__)

MAX_PROPAGATION_DEPTH = 5
HOP_DECAY = 0.85
SEED_THRESHOLD = 0.7
MAX_SEEDS = 100
BASE_WEIGHT_SHARE = 0.6
PATH_WEIGHT_SHARE = 0.4
DEFAULT_EDGE_WEIGHT = 0.5

KIND_MULTIPLIERS = {
    EdgeKind.USES_MODEL: 1.15,
    EdgeKind.USES_TOOL: 1.15,
    EdgeKind.USES_ENDPOINT: 1.20,
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def base_edge_weight(
    edge: GraphEdge,
    from_confidence: Optional[float],
    to_confidence: Optional[float],
) -> float:
    if from_confidence is not None and to_confidence is not None:
        weight = math.sqrt(from_confidence * to_confidence)
    elif from_confidence is not None:
        weight = from_confidence
    elif to_confidence is not None:
        weight = to_confidence
    elif edge.weight is not None:
        weight = edge.weight
    else:
        weight = DEFAULT_EDGE_WEIGHT
    return min(1.0, weight * KIND_MULTIPLIERS.get(edge.kind, 1.0))


def _endpoint_confidence(index: GraphIndex, pos: Optional[int]) -> Optional[float]:
    if pos is None:
        return None
    return node_confidence(index.node(pos))


def _select_seeds(index: GraphIndex) -> list[int]:
    scored = []
    for pos, node in enumerate(index.nodes):
        confidence = node_confidence(node)
        if confidence is not None and confidence >= SEED_THRESHOLD:
            scored.append((confidence, pos))
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [pos for _, pos in scored[:MAX_SEEDS]]


def _walk(
    index: GraphIndex,
    pos: int,
    hops: int,
    visited: set[int],
    base: list[float],
    best: list[Optional[float]],
) -> None:
    # ``visited`` holds the current path only, so a shorter route into an
    # already-explored node is still credited.
    if hops >= MAX_PROPAGATION_DEPTH:
        return
    visited.add(pos)
    for edge_pos in index.outgoing[pos]:
        score = base[edge_pos] * (HOP_DECAY ** hops)
        current = best[edge_pos]
        if current is None or score > current:
            best[edge_pos] = score
        target = index.edge_target[edge_pos]
        if target is not None and target not in visited:
            _walk(index, target, hops + 1, visited, base, best)
    visited.discard(pos)


def propagate_confidence(graph: ReachabilityGraph) -> ReachabilityGraph:
    """Rewrite every edge weight in place; node confidences are untouched.

    Final weight is ``0.6 * base + 0.4 * best_path``, where ``best_path``
    falls back to ``base`` for edges no seed traversal reached.
    """
    index = GraphIndex(graph)
    base = [
        base_edge_weight(
            edge,
            _endpoint_confidence(index, index.edge_source[i]),
            _endpoint_confidence(index, index.edge_target[i]),
        )
        for i, edge in enumerate(graph.edges)
    ]
    best: list[Optional[float]] = [None] * len(graph.edges)

    seeds = _select_seeds(index)
    for seed in seeds:
        _walk(index, seed, 0, set(), base, best)

    for i, edge in enumerate(graph.edges):
        path_score = best[i] if best[i] is not None else base[i]
        edge.weight = _clamp(BASE_WEIGHT_SHARE * base[i] + PATH_WEIGHT_SHARE * path_score)

    logger.info(
        "Propagated confidence over %d edges from %d seeds",
        len(graph.edges), len(seeds),
    )
    return graph
