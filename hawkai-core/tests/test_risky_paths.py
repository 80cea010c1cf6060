"""Tests for risky path detection (source → AI transform → sink)."""

import pytest

from hawkai.graph.risky_paths import detect_risky_paths, path_confidence, risk_level_for
from hawkai.models.graph import EdgeKind, GraphEdge, GraphNode, ReachabilityGraph, RiskLevel


def _node(label: str, confidence: float, line: int = 1) -> GraphNode:
    return GraphNode(id=f"{label}|app.py|{line}", label=label, file="app.py", line=line, confidence=confidence)


def _link(a: GraphNode, b: GraphNode, weight: float | None = 0.8) -> GraphEdge:
    return GraphEdge(id=f"{a.id}->{b.id}", kind=EdgeKind.DATA_FLOW, from_id=a.id, to=b.id, weight=weight)


def _graph(nodes, edges) -> ReachabilityGraph:
    graph = ReachabilityGraph(nodes=list(nodes), edges=list(edges))
    graph.refresh_stats()
    return graph


SOURCE = _node("HTTP-REQUEST-INPUT", 0.8, line=1)
TRANSFORM = _node("LLM-INVOKE", 0.9, line=2)
SINK = _node("SHELL-EXEC", 0.7, line=3)


class TestScoring:
    def test_length_decay(self):
        assert path_confidence([SOURCE, TRANSFORM, SINK]) == pytest.approx(0.8 * 0.9 * 0.7 * 0.9 ** 3)

    @pytest.mark.parametrize("confidence,level", [
        (0.85, RiskLevel.CRITICAL),
        (0.6, RiskLevel.HIGH),
        (0.4, RiskLevel.MODERATE),
        (0.39, RiskLevel.LOW),
    ])
    def test_risk_levels(self, confidence, level):
        assert risk_level_for(confidence) == level


class TestDetection:
    def test_source_transform_sink(self):
        graph = _graph([SOURCE, TRANSFORM, SINK], [_link(SOURCE, TRANSFORM), _link(TRANSFORM, SINK)])
        paths = detect_risky_paths(graph)
        assert len(paths) == 1
        path = paths[0]
        assert path.source.id == SOURCE.id
        assert path.sink.id == SINK.id
        assert [t.id for t in path.transforms] == [TRANSFORM.id]
        assert [n.id for n in path.path] == [SOURCE.id, TRANSFORM.id, SINK.id]
        assert path.confidence == pytest.approx(0.367, abs=1e-3)
        assert path.risk_level == RiskLevel.LOW

    def test_direct_source_to_sink_is_not_risky(self):
        graph = _graph([SOURCE, TRANSFORM, SINK], [_link(SOURCE, SINK)])
        assert detect_risky_paths(graph) == []

    def test_weak_edges_are_not_followed(self):
        graph = _graph(
            [SOURCE, TRANSFORM, SINK],
            [_link(SOURCE, TRANSFORM, weight=0.2), _link(TRANSFORM, SINK)],
        )
        assert detect_risky_paths(graph) == []

    def test_unweighted_edges_are_followed(self):
        graph = _graph(
            [SOURCE, TRANSFORM, SINK],
            [_link(SOURCE, TRANSFORM, weight=None), _link(TRANSFORM, SINK, weight=None)],
        )
        assert len(detect_risky_paths(graph)) == 1

    def test_source_and_sink_node_never_loops_to_itself(self):
        both = _node("USER-INPUT-SHELL-EXEC", 0.9, line=1)
        llm = _node("LLM-CHAT", 0.9, line=2)
        graph = _graph([both, llm], [_link(both, llm), _link(llm, both), _link(both, both)])
        assert detect_risky_paths(graph) == []

    def test_cycle_terminates(self):
        graph = _graph(
            [SOURCE, TRANSFORM, SINK],
            [_link(SOURCE, TRANSFORM), _link(TRANSFORM, SOURCE), _link(TRANSFORM, SINK), _link(SINK, TRANSFORM)],
        )
        paths = detect_risky_paths(graph)
        assert len(paths) == 1
        for path in paths:
            assert path.source.id != path.sink.id
            assert len(path.transforms) >= 1

    def test_best_path_per_pair(self):
        weak = _node("LLM-CHAT", 0.5, line=4)
        strong = _node("LLM-CHAT", 0.95, line=5)
        graph = _graph(
            [SOURCE, weak, strong, SINK],
            [_link(SOURCE, weak), _link(SOURCE, strong), _link(weak, SINK), _link(strong, SINK)],
        )
        paths = detect_risky_paths(graph)
        assert len(paths) == 1
        assert paths[0].transforms[0].id == strong.id

    def test_best_path_through_shared_intermediate(self):
        src = _node("USER-INPUT", 0.9, line=1)
        weak = _node("LLM-CHAT", 0.3, line=2)
        strong = _node("LLM-CHAT", 0.95, line=3)
        relay = _node("RELAY", 0.9, line=4)
        sink = _node("SHELL-EXEC", 0.9, line=5)
        graph = _graph(
            [src, weak, strong, relay, sink],
            # The weak route reaches the relay first.
            [_link(src, weak), _link(src, strong), _link(weak, relay), _link(strong, relay), _link(relay, sink)],
        )
        paths = detect_risky_paths(graph)
        assert len(paths) == 1
        assert [t.id for t in paths[0].transforms] == [strong.id]
        assert paths[0].confidence == pytest.approx(0.9 * 0.95 * 0.9 * 0.9 * 0.9 ** 4)

    def test_short_route_found_after_long_route_hits_depth_bound(self):
        src = _node("USER-INPUT", 0.9, line=1)
        llm_long = _node("LLM-CHAT", 0.9, line=2)
        relays = [_node("RELAY", 0.9, line=10 + i) for i in range(4)]
        llm_short = _node("LLM-CHAT", 0.9, line=3)
        junction = _node("RELAY", 0.9, line=20)
        sink = _node("SHELL-EXEC", 0.9, line=30)
        long_route = [src, llm_long, *relays, junction]
        edges = [_link(a, b) for a, b in zip(long_route, long_route[1:])]
        edges += [_link(src, llm_short), _link(llm_short, junction), _link(junction, sink)]
        graph = _graph([src, llm_long, *relays, llm_short, junction, sink], edges)

        paths = detect_risky_paths(graph)
        assert len(paths) == 1
        assert [n.id for n in paths[0].path] == [src.id, llm_short.id, junction.id, sink.id]

    def test_path_length_bound(self):
        def chain(length: int) -> ReachabilityGraph:
            transforms = [_node("LLM-CHAT", 1.0, line=10 + i) for i in range(length)]
            src = _node("USER-INPUT", 1.0, line=1)
            dst = _node("SHELL-EXEC", 1.0, line=99)
            nodes = [src, *transforms, dst]
            edges = [_link(a, b) for a, b in zip(nodes, nodes[1:])]
            return _graph(nodes, edges)

        # 5 transforms: 6 edges, within bound. 6 transforms: 7 edges, out of reach.
        assert len(detect_risky_paths(chain(5))) == 1
        assert detect_risky_paths(chain(6)) == []

    def test_result_cap_and_order(self):
        sources = [_node("USER-INPUT", 0.5 + i / 200, line=100 + i) for i in range(60)]
        edges = [_link(s, TRANSFORM) for s in sources] + [_link(TRANSFORM, SINK)]
        graph = _graph([*sources, TRANSFORM, SINK], edges)
        paths = detect_risky_paths(graph)
        assert len(paths) == 50
        confidences = [p.confidence for p in paths]
        assert confidences == sorted(confidences, reverse=True)
        assert len({(p.source.id, p.sink.id) for p in paths}) == 50

    def test_empty_graph(self):
        assert detect_risky_paths(ReachabilityGraph()) == []
