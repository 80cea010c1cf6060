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

"""Pydantic models for the reachability graph, risky paths and call edges."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hawkai.models.findings import Severity


class NodeKind(str, Enum):
    """Kinds of graph node. Only ``finding`` nodes are produced today."""

    CODE = "code"
    AI = "ai"
    FINDING = "finding"


class EdgeKind(str, Enum):
    """Relationship carried by a graph edge."""

    RELATED = "related"
    CALLS = "calls"
    USES_MODEL = "uses_model"
    USES_TOOL = "uses_tool"
    USES_ENDPOINT = "uses_endpoint"
    DATA_FLOW = "data_flow"


class GraphNode(BaseModel):
    """A finding location in the graph. Identity is ``ruleId|file|line``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    kind: NodeKind = NodeKind.FINDING
    label: str
    file: Optional[str] = None
    line: Optional[int] = None
    severity: Optional[Severity] = None
    confidence: Optional[float] = None
    composite_score: Optional[float] = None
    category: Optional[str] = None


class GraphEdge(BaseModel):
    """A directed edge.

    ``to`` is either a node id or, for call-derived edges, a bare call-target
    label that does not resolve to any node.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    kind: EdgeKind
    from_id: str = Field(alias="from")
    to: str
    weight: Optional[float] = None
    label: Optional[str] = None


class GraphStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    node_count: int = 0
    edge_count: int = 0


class ReachabilityGraph(BaseModel):
    """Nodes and edges in insertion order, so serialized output is stable."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    stats: GraphStats = Field(default_factory=GraphStats)

    def refresh_stats(self) -> None:
        self.stats = GraphStats(node_count=len(self.nodes), edge_count=len(self.edges))


class RiskLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class RiskyPath(BaseModel):
    """A source → transform(s) → sink path through AI/agent processing.

    Invariants: ``source.id != sink.id`` and ``transforms`` is non-empty.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    source: GraphNode
    transforms: list[GraphNode]
    sink: GraphNode
    path: list[GraphNode]
    confidence: float = Field(ge=0.0, le=1.0)
    risk_level: RiskLevel


class CallEdgeKind(str, Enum):
    CALL = "call"
    IMPORT = "import"
    METHOD = "method"
    ATTRIBUTE = "attribute"


class CallEdge(BaseModel):
    """A best-effort call/import relationship extracted from one file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    from_name: str = Field(alias="from")
    to: str
    kind: CallEdgeKind
    file: str
    line: Optional[int] = None
    confidence: float = Field(default=0.7, ge=0.0, le=1.0)
