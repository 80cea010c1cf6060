"""Tests for coarse graph construction and call-edge enrichment."""

import logging

import pytest

from hawkai.graph.builder import (
    build_coarse_graph,
    classify_call_edge,
    enrich_graph_with_call_edges,
    node_id_for_finding,
)
from hawkai.models.config import ReachabilityLimits
from hawkai.models.findings import Finding, FindingGroup, Severity
from hawkai.models.graph import CallEdge, CallEdgeKind, EdgeKind
from hawkai.scanner.call_edges import CallEdgeExtractionError


def _finding(rule_id: str, line: int | None = 1, file: str = "app.py", confidence: float = 0.8,
             severity: str = "moderate") -> Finding:
    return Finding(
        id=f"{rule_id}:{file}:{line}",
        rule_id=rule_id,
        severity=Severity(severity),
        file=file,
        line=line,
        confidence=confidence,
    )


def _group(primary: Finding, related: list[Finding], score: float = 0.6) -> FindingGroup:
    return FindingGroup(
        id=f"group-{primary.id}",
        primary_finding=primary,
        related_findings=related,
        file=primary.file,
        severity=primary.severity,
        composite_score=score,
    )


def _call(to: str, kind: str = "call", line: int | None = 1, file: str = "app.py") -> CallEdge:
    return CallEdge(from_name="main", to=to, kind=CallEdgeKind(kind), file=file, line=line, confidence=0.8)


class FakeCallEdgeSource:
    """In-memory call-edge source keyed by file."""

    def __init__(self, edges: dict[str, list[CallEdge]], failing: set[str] | None = None):
        self.edges = edges
        self.failing = failing or set()
        self.requested: list[str] = []

    def extract(self, file: str) -> list[CallEdge]:
        self.requested.append(file)
        if file in self.failing:
            raise CallEdgeExtractionError(file, "syntax error at line 1")
        return list(self.edges.get(file, []))


class TestNodeIdentity:
    def test_id_format(self):
        assert node_id_for_finding(_finding("R", line=7)) == "R|app.py|7"
        assert node_id_for_finding(_finding("R", line=None)) == "R|app.py|null"

    def test_shared_location_merges_into_one_node(self):
        shared_low = _finding("SHARED", line=5, confidence=0.4, severity="low")
        shared_high = _finding("SHARED", line=5, confidence=0.9, severity="high")
        groups = [
            _group(_finding("A", line=1), [shared_low], score=0.5),
            _group(_finding("B", line=9), [shared_high], score=0.7),
        ]
        graph = build_coarse_graph(groups)
        ids = [n.id for n in graph.nodes]
        assert len(ids) == len(set(ids)) == 3
        merged = next(n for n in graph.nodes if n.id == "SHARED|app.py|5")
        assert merged.severity == Severity.HIGH
        assert merged.confidence == 0.9
        assert merged.composite_score == 0.7


class TestCoarseGraph:
    def test_related_edges(self):
        primary = _finding("CLIENT", line=10, confidence=0.8)
        related = _finding("IMPORT", line=1, confidence=0.9)
        graph = build_coarse_graph([_group(primary, [related], score=0.6)])
        assert graph.stats.node_count == 2
        assert graph.stats.edge_count == 1
        edge = graph.edges[0]
        assert edge.kind == EdgeKind.RELATED
        assert edge.from_id == "CLIENT|app.py|10"
        assert edge.to == "IMPORT|app.py|1"
        assert edge.weight == pytest.approx(0.9)
        assert edge.label == "related"

    def test_standalone_group_has_no_edges(self):
        graph = build_coarse_graph([_group(_finding("SOLO"), [])])
        assert graph.stats.node_count == 1
        assert graph.edges == []

    def test_serializes_with_from_alias(self):
        graph = build_coarse_graph([_group(_finding("A", line=2), [_finding("B", line=1)])])
        data = graph.model_dump(by_alias=True)
        assert data["edges"][0]["from"] == "A|app.py|2"
        assert data["stats"] == {"nodeCount": 2, "edgeCount": 1}


class TestClassifyCallEdge:
    @pytest.mark.parametrize("to", ["openai", "langchain_core.messages", "@langchain/core", "llama_index.core"])
    def test_ai_framework_import(self, to):
        assert classify_call_edge(_call(to, kind="import")) == EdgeKind.USES_MODEL

    @pytest.mark.parametrize("to", ["graph.invoke", "agent.astream", "subprocess.run", "executor.execute"])
    def test_tool_like_call(self, to):
        assert classify_call_edge(_call(to, kind="method")) == EdgeKind.USES_TOOL

    @pytest.mark.parametrize("to", ["httpx.Client", "api.fetch_user", "get_endpoint"])
    def test_endpoint_like(self, to):
        assert classify_call_edge(_call(to, kind="call")) == EdgeKind.USES_ENDPOINT

    def test_plain_call(self):
        assert classify_call_edge(_call("json.dumps")) == EdgeKind.CALLS

    def test_non_ai_import(self):
        assert classify_call_edge(_call("os.path", kind="import")) == EdgeKind.CALLS


class TestEnrichment:
    def _graph(self):
        groups = [
            _group(_finding("CLIENT", line=10), [_finding("IMPORT", line=1)]),
            _group(_finding("OTHER", line=5, file="tools.py"), []),
        ]
        return build_coarse_graph(groups)

    def test_exact_line_match(self):
        graph = self._graph()
        source = FakeCallEdgeSource({"app.py": [_call("graph.invoke", kind="method", line=10)]})
        enrich_graph_with_call_edges(graph, source)
        call_edges = [e for e in graph.edges if e.kind != EdgeKind.RELATED]
        assert len(call_edges) == 1
        assert call_edges[0].from_id == "CLIENT|app.py|10"
        assert call_edges[0].kind == EdgeKind.USES_TOOL
        assert call_edges[0].weight == 0.8
        assert call_edges[0].label == "method"
        assert graph.stats.edge_count == 2

    def test_nearest_line_match(self):
        graph = self._graph()
        source = FakeCallEdgeSource({"app.py": [_call("json.dumps", line=3)]})
        enrich_graph_with_call_edges(graph, source)
        edge = graph.edges[-1]
        assert edge.from_id == "IMPORT|app.py|1"

    def test_edge_for_file_without_nodes_is_dropped(self):
        graph = self._graph()
        stray = _call("json.dumps", file="elsewhere.py")
        source = FakeCallEdgeSource({"app.py": [stray]})
        enrich_graph_with_call_edges(graph, source)
        assert graph.stats.edge_count == 1

    def test_extraction_error_skips_file(self, caplog):
        graph = self._graph()
        source = FakeCallEdgeSource(
            {"tools.py": [_call("subprocess.run", kind="method", line=5, file="tools.py")]},
            failing={"app.py"},
        )
        with caplog.at_level(logging.WARNING):
            enrich_graph_with_call_edges(graph, source)
        assert "Skipping call edges for app.py" in caplog.text
        assert graph.edges[-1].from_id == "OTHER|tools.py|5"

    def test_file_cap(self):
        graph = self._graph()
        source = FakeCallEdgeSource({})
        enrich_graph_with_call_edges(graph, source, ReachabilityLimits(max_files_for_call_edges=1))
        assert source.requested == ["app.py"]

    def test_per_file_and_total_caps(self):
        graph = self._graph()
        many = [_call(f"helper_{i}", line=10) for i in range(10)]
        source = FakeCallEdgeSource({
            "app.py": many,
            "tools.py": [_call("other", line=5, file="tools.py")],
        })
        limits = ReachabilityLimits(max_call_edges_per_file=4, max_total_call_edges=4)
        enrich_graph_with_call_edges(graph, source, limits)
        assert len([e for e in graph.edges if e.kind != EdgeKind.RELATED]) == 4
        assert source.requested == ["app.py"]
