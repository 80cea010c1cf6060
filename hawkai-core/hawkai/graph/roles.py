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

"""Vocabulary predicates that assign source / transform / sink roles.

Every predicate works on normalized text: lower-cased, split on anything that
is not a letter or digit, with camelCase words additionally split apart, and
padded with spaces. A vocabulary term matches when it appears as a whole
token sequence, so ``run`` matches ``subprocess.run`` but not ``truncate``.

These are fuzzy heuristics, not a grammar. Each list below is the baseline
vocabulary; widen them deliberately and with a test.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Optional

from hawkai.graph.index import GraphIndex
from hawkai.models.graph import EdgeKind, GraphEdge, GraphNode

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_WORD = re.compile(r"[^a-z0-9]+")

# ── Source vocabulary (untrusted input) ──

USER_INPUT_TERMS = (
    "input", "user input", "userinput", "raw input", "stdin", "readline",
    "user message", "user query", "form data",
)
CLI_ARGUMENT_TERMS = (
    "argv", "argparse", "parse args", "cli", "command line", "click", "typer", "getopt",
)
FILE_READ_TERMS = (
    "read", "readfile", "read file", "read text", "read bytes", "readlines",
    "file read", "load file", "load document", "document loader",
)
ENV_CONFIG_TERMS = (
    "environ", "getenv", "env", "dotenv", "config", "settings",
)
HTTP_INBOUND_TERMS = (
    "http", "https", "request", "request body", "route", "webhook",
    "fastapi", "flask", "django", "express", "handler", "get json",
)

SOURCE_VOCABULARY = {
    "user_input": USER_INPUT_TERMS,
    "cli_argument": CLI_ARGUMENT_TERMS,
    "file_read": FILE_READ_TERMS,
    "env_config": ENV_CONFIG_TERMS,
    "http_inbound": HTTP_INBOUND_TERMS,
}

# ── Transform vocabulary (AI / agent processing) ──

LLM_CALL_TERMS = (
    "llm", "chat", "completion", "completions", "openai", "anthropic", "claude",
    "gpt", "gemini", "mistral", "bedrock", "cohere", "groq", "ollama", "vllm",
    "llama", "invoke", "ainvoke", "stream", "astream", "generate content",
)
AGENT_FRAMEWORK_TERMS = (
    "agent", "agents", "langchain", "langgraph", "stategraph", "lcel", "crewai",
    "autogen", "semantic kernel", "llamaindex", "llama index", "dspy", "haystack", "a2a",
)
RAG_TERMS = (
    "rag", "retrieval", "retriever", "vector", "vectorstore", "vector store",
    "embedding", "embeddings", "similarity search", "context injection",
)
MODEL_ENDPOINT_TERMS = (
    "model", "models", "endpoint", "inference",
)

TRANSFORM_VOCABULARY = {
    "llm_call": LLM_CALL_TERMS,
    "agent_framework": AGENT_FRAMEWORK_TERMS,
    "rag": RAG_TERMS,
    "model_endpoint": MODEL_ENDPOINT_TERMS,
}

# ── Sink vocabulary (dangerous execution) ──

FILESYSTEM_WRITE_TERMS = (
    "write", "writefile", "write file", "write text", "write bytes", "writelines",
    "save", "dump", "unlink", "rmtree", "mkdir", "rename",
)
TOOL_EXECUTION_TERMS = (
    "tool", "tools", "uses tool", "call tool", "run tool", "tool call",
    "execute", "executor", "function calling", "plan exec", "autoexec",
)
OUTBOUND_NETWORK_TERMS = (
    "requests", "httpx", "aiohttp", "urlopen", "urllib", "fetch", "axios",
    "socket", "send", "post", "upload", "smtp", "curl", "webhook",
)
DATABASE_WRITE_TERMS = (
    "insert", "upsert", "commit", "cursor", "sql", "database", "db", "delete",
)
SHELL_EXEC_TERMS = (
    "shell", "subprocess", "popen", "system", "spawn", "exec", "eval",
    "bash", "child process", "execsync", "check output",
)

SINK_VOCABULARY = {
    "filesystem_write": FILESYSTEM_WRITE_TERMS,
    "tool_execution": TOOL_EXECUTION_TERMS,
    "outbound_network": OUTBOUND_NETWORK_TERMS,
    "database_write": DATABASE_WRITE_TERMS,
    "shell_exec": SHELL_EXEC_TERMS,
}

# Marks a node as a tool (never a transform; may be a source if fed by input).
TOOL_TERMS = ("tool", "tools", "function tool")

# ── Call-edge classification vocabulary ──

AI_FRAMEWORK_TERMS = (
    "openai", "anthropic", "langchain", "langgraph", "crewai", "autogen",
    "llamaindex", "llama index", "semantic kernel", "haystack", "dspy",
    "mistralai", "cohere", "groq", "ollama", "vllm", "llama cpp",
    "generativeai", "genai", "vertexai", "bedrock", "transformers", "mcp",
)
TOOL_CALL_TERMS = (
    "invoke", "ainvoke", "stream", "astream", "tool", "tools",
    "execute", "run", "arun",
)
ENDPOINT_TERMS = (
    "endpoint", "endpoints", "api", "apis", "client", "clients",
)


def normalize_text(*parts: Optional[str]) -> str:
    """Normalize text for vocabulary matching.

    ``"AI-FP-OPENAI-CLIENT"`` → ``" ai fp openai client "``;
    ``"readFile"`` → ``" readfile read file "``.
    """
    raw = " ".join(p for p in parts if p)
    plain = _NON_WORD.sub(" ", raw.lower()).split()
    split = _NON_WORD.sub(" ", _CAMEL_BOUNDARY.sub(r"\1 \2", raw).lower()).split()
    tokens = plain if split == plain else plain + split
    return " " + " ".join(tokens) + " "


def matches_any(text: str, terms: Iterable[str]) -> bool:
    """True if any term occurs as a whole token sequence in normalized ``text``."""
    return any(f" {term} " in text for term in terms)


def matched_categories(text: str, vocabulary: dict[str, tuple[str, ...]]) -> list[str]:
    """Names of the vocabulary categories that match ``text``."""
    return [name for name, terms in vocabulary.items() if matches_any(text, terms)]


def node_text(node: GraphNode) -> str:
    return normalize_text(node.label, node.id, node.file)


def edge_text(edge: GraphEdge) -> str:
    """Text of a code-derived edge. ``related`` edges carry no code evidence."""
    if edge.kind == EdgeKind.RELATED:
        return " "
    return normalize_text(edge.kind.value, edge.to, edge.label)


def _text_with_outgoing(index: GraphIndex, pos: int) -> str:
    # Edges into other nodes carry that node's identity, not code evidence.
    parts = [node_text(index.node(pos))]
    for edge_pos in index.outgoing[pos]:
        if index.edge_target[edge_pos] is None:
            parts.append(edge_text(index.edges[edge_pos]))
    return "".join(parts)


def is_tool_node(node: GraphNode) -> bool:
    """Node id/label marks it as a tool."""
    return matches_any(normalize_text(node.label, node.id), TOOL_TERMS)


def is_input_node(node: GraphNode) -> bool:
    """Node's own text matches the untrusted-input vocabulary."""
    return bool(matched_categories(node_text(node), SOURCE_VOCABULARY))


def is_source(index: GraphIndex, pos: int) -> bool:
    """Untrusted input: the node or its outgoing code edges match input vocabulary.

    A tool node is also a source when another node feeding it matches the
    input vocabulary, which lets a tool head a tool → model → tool chain.
    """
    if matched_categories(_text_with_outgoing(index, pos), SOURCE_VOCABULARY):
        return True
    node = index.node(pos)
    if not is_tool_node(node):
        return False
    for edge_pos in index.incoming[pos]:
        src = index.edge_source[edge_pos]
        if src is not None and src != pos and is_input_node(index.node(src)):
            return True
    return False


def is_transform(node: GraphNode) -> bool:
    """AI/agent processing: LLM calls, agent frameworks, RAG, direct model use.

    Tools are never transforms.
    """
    if is_tool_node(node):
        return False
    return bool(matched_categories(node_text(node), TRANSFORM_VOCABULARY))


def is_sink(index: GraphIndex, pos: int) -> bool:
    """Dangerous execution: the node or its outgoing code edges match sink vocabulary."""
    return bool(matched_categories(_text_with_outgoing(index, pos), SINK_VOCABULARY))


def is_ai_framework_import(target: str) -> bool:
    return matches_any(normalize_text(target), AI_FRAMEWORK_TERMS)


def is_tool_call_target(target: str) -> bool:
    return matches_any(normalize_text(target), TOOL_CALL_TERMS)


def is_endpoint_target(target: str) -> bool:
    return matches_any(normalize_text(target), ENDPOINT_TERMS)
