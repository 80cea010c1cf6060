"""Tests for the Python call-edge extractor."""

from pathlib import Path

import pytest

from hawkai.models.graph import CallEdgeKind
from hawkai.scanner.call_edges import (
    CallEdgeExtractionError,
    CallEdgeSource,
    PythonCallEdgeExtractor,
)

FIXTURES = Path(__file__).parent / "fixtures"
AGENT_APP = FIXTURES / "agent_app"


@pytest.fixture
def edges():
    return PythonCallEdgeExtractor(AGENT_APP).extract("app.py")


def _find(edges, to):
    return [e for e in edges if e.to == to]


class TestImports:
    def test_import_edges(self, edges):
        imports = {e.to: e for e in edges if e.kind == CallEdgeKind.IMPORT}
        assert set(imports) == {"subprocess", "flask", "openai"}
        assert imports["openai"].line == 4
        assert imports["openai"].confidence == 0.9
        assert imports["openai"].from_name == "<module>"


class TestCalls:
    def test_from_import_alias_resolved(self, edges):
        (edge,) = _find(edges, "openai.OpenAI")
        assert edge.kind == CallEdgeKind.CALL
        assert edge.line == 7
        assert edge.confidence == 0.8

    def test_method_call_attributed_to_function(self, edges):
        (edge,) = _find(edges, "subprocess.run")
        assert edge.kind == CallEdgeKind.METHOD
        assert edge.from_name == "ask"
        assert edge.line == 18
        assert edge.confidence == 0.7

    def test_attribute_chain(self, edges):
        (edge,) = _find(edges, "client.chat.completions.create")
        assert edge.line == 13

    def test_aliased_object_method(self, edges):
        assert _find(edges, "flask.request.get_json")

    def test_plain_builtins_skipped(self, tmp_path):
        (tmp_path / "mod.py").write_text("x = len([1])\nprint(x)\neval('1')\n", encoding="utf-8")
        edges = PythonCallEdgeExtractor(tmp_path).extract("mod.py")
        assert [e.to for e in edges] == ["eval"]

    def test_edges_report_requested_file(self, edges):
        assert {e.file for e in edges} == {"app.py"}


class TestErrors:
    def test_syntax_error(self):
        with pytest.raises(CallEdgeExtractionError, match="syntax error"):
            PythonCallEdgeExtractor(AGENT_APP).extract("broken.py")

    def test_missing_file(self):
        with pytest.raises(CallEdgeExtractionError, match="could not read"):
            PythonCallEdgeExtractor(AGENT_APP).extract("missing.py")

    def test_non_python_file_yields_nothing(self):
        assert PythonCallEdgeExtractor(AGENT_APP).extract("findings.json") == []


def test_extractor_satisfies_protocol():
    assert isinstance(PythonCallEdgeExtractor(), CallEdgeSource)
