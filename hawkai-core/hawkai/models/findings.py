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

"""Pydantic models for raw findings and correlated finding groups.

Field names are snake_case in Python; JSON produced by the rule engine (and
consumed by report renderers) uses camelCase, so every model accepts both and
serializes with aliases.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Severity of a finding or group, ordered low → critical."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self) + 1

    @classmethod
    def from_rank(cls, rank: int) -> "Severity":
        """Return the severity for a 1-based rank, clamped to the valid range."""
        rank = max(1, min(rank, len(_SEVERITY_ORDER)))
        return _SEVERITY_ORDER[rank - 1]

    def raised(self, levels: int) -> "Severity":
        """Return this severity raised by ``levels`` steps (capped at critical)."""
        if levels <= 0:
            return self
        return Severity.from_rank(self.rank + levels)


_SEVERITY_ORDER = (Severity.LOW, Severity.MODERATE, Severity.HIGH, Severity.CRITICAL)


def max_severity(a: Optional[Severity], b: Optional[Severity]) -> Optional[Severity]:
    """Return the higher of two severities; ``None`` loses to anything."""
    if a is None:
        return b
    if b is None:
        return a
    return a if a.rank >= b.rank else b


class SignalRole(str, Enum):
    """How a rule's match contributes to a group's evidence."""

    USAGE = "usage"         # direct evidence, e.g. an actual invocation
    HINT = "hint"           # supportive evidence, e.g. an import
    METADATA = "metadata"   # contextual evidence, e.g. protocol/config markers


class Finding(BaseModel):
    """One raw pattern match from the rule engine. Immutable once produced."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    rule_id: str
    title: str = ""
    severity: Severity
    category: str = ""
    owasp: list[str] = Field(default_factory=list)
    file: str
    line: Optional[int] = None
    evidence: str = ""
    remediation: str = ""
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class ContributingSignal(BaseModel):
    """One signal that fed a group's composite score."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    rule_id: str
    weight: float
    confidence: float
    role: SignalRole


class FindingGroup(BaseModel):
    """A correlated cluster: one primary finding plus related evidence.

    ``severity`` is only ever raised after grouping, never lowered below the
    primary finding's own severity.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    primary_finding: Finding
    related_findings: list[Finding] = Field(default_factory=list)
    file: str
    severity: Severity
    category: str = ""
    risk_boost: int = 0
    composite_score: float = Field(default=0.0, ge=0.0, le=1.0)
    contributing_signals: list[ContributingSignal] = Field(default_factory=list)
