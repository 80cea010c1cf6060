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

"""Index-based adjacency view over a ``ReachabilityGraph``.

Traversals work on integer node positions and edge positions rather than
object references, so cyclic call graphs need nothing more than a visited
set and a depth bound to terminate.
"""

from __future__ import annotations

from typing import Optional

from hawkai.models.graph import GraphEdge, GraphNode, ReachabilityGraph


class GraphIndex:
    """Positions of nodes plus outgoing/incoming edge lists per node.

    Edges whose ``to`` is not a node id (unresolved call targets) appear in
    the source node's ``outgoing`` list but have no target position.
    """

    def __init__(self, graph: ReachabilityGraph) -> None:
        self.graph = graph
        self.position: dict[str, int] = {node.id: i for i, node in enumerate(graph.nodes)}
        self.outgoing: list[list[int]] = [[] for _ in graph.nodes]
        self.incoming: list[list[int]] = [[] for _ in graph.nodes]
        self.edge_source: list[Optional[int]] = []
        self.edge_target: list[Optional[int]] = []

        for edge_pos, edge in enumerate(graph.edges):
            src = self.position.get(edge.from_id)
            dst = self.position.get(edge.to)
            self.edge_source.append(src)
            self.edge_target.append(dst)
            if src is not None:
                self.outgoing[src].append(edge_pos)
            if dst is not None:
                self.incoming[dst].append(edge_pos)

    @property
    def nodes(self) -> list[GraphNode]:
        return self.graph.nodes

    @property
    def edges(self) -> list[GraphEdge]:
        return self.graph.edges

    def node(self, pos: int) -> GraphNode:
        return self.graph.nodes[pos]


def node_confidence(node: GraphNode) -> Optional[float]:
    """Confidence used for weighting: the node's own, else its group's composite."""
    if node.confidence is not None:
        return node.confidence
    return node.composite_score
