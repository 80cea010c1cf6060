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

"""Pydantic model for the analysis report (hawkai_report.json)."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hawkai import __version__
from hawkai.models.findings import FindingGroup
from hawkai.models.graph import ReachabilityGraph, RiskyPath


class AnalysisReport(BaseModel):
    """Grouped findings, the reachability graph and risky paths for one scan."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    hawkai_version: str = __version__
    scan_target: str = ""
    analyzed_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    finding_count: int = 0
    groups: list[FindingGroup] = Field(default_factory=list)
    graph: ReachabilityGraph = Field(default_factory=ReachabilityGraph)
    risky_paths: list[RiskyPath] = Field(default_factory=list)
