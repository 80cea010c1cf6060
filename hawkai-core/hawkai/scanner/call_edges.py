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

"""Call-edge extraction.

``CallEdgeSource`` is the seam the graph builder enriches through: anything
with an ``extract(file)`` method returning ``CallEdge`` records will do.
``PythonCallEdgeExtractor`` is the built-in implementation, walking the
standard-library AST of Python files.
"""

from __future__ import annotations

import ast
import builtins
import logging
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from hawkai.models.graph import CallEdge, CallEdgeKind

logger = logging.getLogger(__name__)

MODULE_SCOPE = "<module>"

IMPORT_CONFIDENCE = 0.9
CALL_CONFIDENCE = 0.8
METHOD_CONFIDENCE = 0.7

# Builtins worth keeping as call targets: input, file I/O and dynamic execution.
_SIGNIFICANT_BUILTINS = frozenset({"open", "input", "eval", "exec", "compile", "__import__"})
_SKIPPED_BUILTINS = frozenset(dir(builtins)) - _SIGNIFICANT_BUILTINS


class CallEdgeExtractionError(Exception):
    """A file could not be read or parsed for call edges."""

    def __init__(self, file: str, reason: str) -> None:
        self.file = file
        self.reason = reason
        super().__init__(f"{file}: {reason}")


@runtime_checkable
class CallEdgeSource(Protocol):
    def extract(self, file: str) -> list[CallEdge]:
        """Return call edges for ``file`` or raise ``CallEdgeExtractionError``."""
        ...


class _CallEdgeVisitor(ast.NodeVisitor):
    """Collects imports and calls, attributing calls to the enclosing function."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        self.edges: list[CallEdge] = []
        self._scope_stack: list[str] = []
        # Local symbol -> fully qualified module/object.
        #   import numpy as np            => {"np": "numpy"}
        #   from openai import OpenAI as C => {"C": "openai.OpenAI"}
        self._import_aliases: dict[str, str] = {}

    def _scope(self) -> str:
        return ".".join(self._scope_stack) if self._scope_stack else MODULE_SCOPE

    def _resolve_alias_name(self, name: str) -> str:
        parts = name.split(".")
        mapped = self._import_aliases.get(parts[0])
        if not mapped:
            return name
        return ".".join([mapped, *parts[1:]])

    def _add(self, to: str, kind: CallEdgeKind, line: int, confidence: float) -> None:
        self.edges.append(CallEdge(
            from_name=self._scope(),
            to=to,
            kind=kind,
            file=self.filename,
            line=line,
            confidence=confidence,
        ))

    def _visit_scoped(self, node: ast.AST, name: str) -> None:
        self._scope_stack.append(name)
        self.generic_visit(node)
        self._scope_stack.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_scoped(node, node.name)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_scoped(node, node.name)

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self._visit_scoped(node, node.name)

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            if alias.asname:
                self._import_aliases[alias.asname] = alias.name
            self._add(alias.name, CallEdgeKind.IMPORT, node.lineno, IMPORT_CONFIDENCE)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if not node.module:
            return
        for alias in node.names:
            if alias.name == "*":
                continue
            self._import_aliases[alias.asname or alias.name] = f"{node.module}.{alias.name}"
        self._add(node.module, CallEdgeKind.IMPORT, node.lineno, IMPORT_CONFIDENCE)

    def visit_Call(self, node: ast.Call) -> None:
        name = _get_call_name(node)
        if name is not None:
            if isinstance(node.func, ast.Name):
                if name in self._import_aliases or name not in _SKIPPED_BUILTINS:
                    self._add(self._resolve_alias_name(name), CallEdgeKind.CALL, node.lineno, CALL_CONFIDENCE)
            else:
                self._add(self._resolve_alias_name(name), CallEdgeKind.METHOD, node.lineno, METHOD_CONFIDENCE)
        self.generic_visit(node)


def _get_call_name(node: ast.Call) -> Optional[str]:
    """Dotted callable name like ``client.chat.completions.create``; None for complex expressions."""
    if isinstance(node.func, ast.Name):
        return node.func.id
    if isinstance(node.func, ast.Attribute):
        parts = []
        current: ast.expr = node.func
        while isinstance(current, ast.Attribute):
            parts.append(current.attr)
            current = current.value
        if isinstance(current, ast.Name):
            parts.append(current.id)
            return ".".join(reversed(parts))
    return None


class PythonCallEdgeExtractor:
    """Call edges for ``.py`` files under ``root``; other files yield nothing."""

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    def extract(self, file: str) -> list[CallEdge]:
        if not file.endswith(".py"):
            return []
        path = Path(file) if Path(file).is_absolute() else self.root / file
        try:
            source = path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            raise CallEdgeExtractionError(file, f"could not read: {e}") from e
        try:
            tree = ast.parse(source, filename=str(path))
        except SyntaxError as e:
            raise CallEdgeExtractionError(file, f"syntax error at line {e.lineno}") from e

        visitor = _CallEdgeVisitor(file)
        visitor.visit(tree)
        logger.debug("Extracted %d call edges from %s", len(visitor.edges), file)
        return visitor.edges
