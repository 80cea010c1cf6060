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

"""Pydantic models for scoring and reachability configuration.

Every section has complete defaults, so a partial YAML/JSON document only
overrides the keys it names. Keys may be written camelCase (``minGroup``) or
snake_case (``min_group``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ConfigSection(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class RoleWeights(_ConfigSection):
    """Base weight for each signal role."""

    usage: float = Field(default=0.75, ge=0.0)
    hint: float = Field(default=0.45, ge=0.0)
    metadata: float = Field(default=0.30, ge=0.0)


class ScoreThresholds(_ConfigSection):
    """Composite-score cut-offs for severity mapping and the evidence floor."""

    critical: float = 0.90
    high: float = 0.70
    moderate: float = 0.50
    min_group: float = 0.35


class ScoreBoosts(_ConfigSection):
    usage_and_hint: float = Field(default=1.15, ge=0.0)
    usage_and_metadata: float = Field(default=1.05, ge=0.0)


class ScoreDemotions(_ConfigSection):
    test_or_example_path: float = Field(default=0.85, ge=0.0)
    loop_only_without_invoke: float = Field(default=0.80, ge=0.0)
    mock_like_path: float = Field(default=0.90, ge=0.0)


class ScoreCaps(_ConfigSection):
    per_file_findings: int = Field(default=200, ge=1)
    per_group_related: int = Field(default=6, ge=0)


class ScoringConfig(_ConfigSection):
    """Tunable knobs for the grouping & scoring engine."""

    weights: RoleWeights = Field(default_factory=RoleWeights)
    thresholds: ScoreThresholds = Field(default_factory=ScoreThresholds)
    boosts: ScoreBoosts = Field(default_factory=ScoreBoosts)
    demotions: ScoreDemotions = Field(default_factory=ScoreDemotions)
    caps: ScoreCaps = Field(default_factory=ScoreCaps)


class ReachabilityLimits(_ConfigSection):
    """Hard caps on call-edge enrichment work per scan."""

    max_files_for_call_edges: int = Field(default=200, ge=0)
    max_call_edges_per_file: int = Field(default=100, ge=0)
    max_total_call_edges: int = Field(default=5000, ge=0)


class AnalysisConfig(_ConfigSection):
    """Everything one analysis run needs, passed explicitly to each stage."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    reachability: ReachabilityLimits = Field(default_factory=ReachabilityLimits)
