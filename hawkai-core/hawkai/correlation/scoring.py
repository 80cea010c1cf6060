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

"""Composite-score arithmetic for finding groups.

All functions take the ``ScoringConfig`` explicitly; nothing here reads
global state, so concurrent scans can use different configurations.
"""

from __future__ import annotations

from collections.abc import Iterable

from hawkai.models.config import ScoringConfig
from hawkai.models.findings import Severity, SignalRole

# Each later related signal contributes 1 / (1 + k * position).
DIMINISHING_FACTOR = 0.35

# Bare control-loop patterns; only trusted when an actual invoke/stream shows up.
LOOP_RULE_IDS = frozenset({
    "AG-LOOP-AUTOEXEC",
    "AG-LOOP-WITH-AGENT",
    "AG-ASYNC-AGENT-LOOP",
})

INVOKE_RULE_IDS = frozenset({
    "AG-LANGGRAPH-INVOKE",
    "AG-LANGGRAPH-STREAM",
    "AG-LANGCHAIN-INVOKE",
})

TEST_OR_EXAMPLE_MARKERS = ("/test/", "/tests/", "__tests__", "/example/", "/examples/")

MOCK_LIKE_MARKERS = ("/__mocks__/", "/mocks/", "/mock/", "/stubs/", "/fixtures/", "/samples/")


def weight_for_role(role: SignalRole, config: ScoringConfig) -> float:
    """Base weight for a signal role."""
    if role == SignalRole.USAGE:
        return config.weights.usage
    if role == SignalRole.HINT:
        return config.weights.hint
    return config.weights.metadata


def diminishing_factor(position: int) -> float:
    """Contribution multiplier for the related signal at 0-based ``position``."""
    return 1.0 / (1.0 + DIMINISHING_FACTOR * position)


def apply_boosts(score: float, roles: Iterable[SignalRole], config: ScoringConfig) -> float:
    """Multiply in corroboration boosts for usage+hint and usage+metadata."""
    present = set(roles)
    if SignalRole.USAGE in present and SignalRole.HINT in present:
        score *= config.boosts.usage_and_hint
    if SignalRole.USAGE in present and SignalRole.METADATA in present:
        score *= config.boosts.usage_and_metadata
    return score


def apply_demotions(
    score: float,
    config: ScoringConfig,
    *,
    test_or_example_path: bool = False,
    loop_only_without_invoke: bool = False,
    mock_like_path: bool = False,
) -> float:
    """Multiply in each demotion whose condition holds."""
    if test_or_example_path:
        score *= config.demotions.test_or_example_path
    if loop_only_without_invoke:
        score *= config.demotions.loop_only_without_invoke
    if mock_like_path:
        score *= config.demotions.mock_like_path
    return score


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def score_to_severity(score: float, config: ScoringConfig) -> Severity:
    """Map a composite score onto a severity using the configured thresholds."""
    thresholds = config.thresholds
    if score >= thresholds.critical:
        return Severity.CRITICAL
    if score >= thresholds.high:
        return Severity.HIGH
    if score >= thresholds.moderate:
        return Severity.MODERATE
    return Severity.LOW


def _normalize_path(path: str) -> str:
    normalized = path.replace("\\", "/").lower()
    if not normalized.startswith("/"):
        normalized = "/" + normalized
    return normalized


def is_test_or_example_path(path: str) -> bool:
    normalized = _normalize_path(path)
    return any(marker in normalized for marker in TEST_OR_EXAMPLE_MARKERS)


def is_mock_like_path(path: str) -> bool:
    normalized = _normalize_path(path)
    return any(marker in normalized for marker in MOCK_LIKE_MARKERS)


def is_loop_only(rule_ids: Iterable[str]) -> bool:
    """True when a loop pattern is present with no invoke/stream usage beside it."""
    ids = set(rule_ids)
    return bool(ids & LOOP_RULE_IDS) and not (ids & INVOKE_RULE_IDS)
