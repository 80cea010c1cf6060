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

"""Scoring configuration loading and hot reload.

A config file is YAML (JSON is accepted too, since it is valid YAML):

    scoring:
      weights: {usage: 0.8}
      thresholds: {minGroup: 0.4}
    reachability:
      maxFilesForCallEdges: 50

A document without ``scoring``/``reachability`` keys is read as the scoring
section itself. Missing keys keep their defaults.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from hawkai.models.config import AnalysisConfig

logger = logging.getLogger(__name__)

_SCORING_SECTIONS = {"weights", "thresholds", "boosts", "demotions", "caps"}


def parse_analysis_config(data: object) -> AnalysisConfig:
    """Validate a decoded config document into ``AnalysisConfig``."""
    if data is None:
        return AnalysisConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}")
    if "scoring" not in data and "reachability" not in data and _SCORING_SECTIONS & set(data):
        data = {"scoring": data}
    return AnalysisConfig.model_validate(data)


def load_analysis_config(config_path: str | Path) -> AnalysisConfig:
    """Load an analysis config from a YAML or JSON file."""
    path = Path(config_path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return parse_analysis_config(data)


class ScoringConfigStore:
    """Serves the current configuration, re-reading the file when it changes.

    A bad edit never takes effect: on a missing, unparsable or invalid file
    the last good configuration stays current and a warning is logged.
    """

    def __init__(self, config_path: str | Path) -> None:
        self.path = Path(config_path)
        self._config = AnalysisConfig()
        self._mtime: Optional[float] = None

    @classmethod
    def open(cls, config_path: str | Path) -> "ScoringConfigStore":
        """Create a store whose first load must succeed; errors propagate."""
        store = cls(config_path)
        mtime = os.stat(store.path).st_mtime
        store._config = load_analysis_config(store.path)
        store._mtime = mtime
        logger.info("Loaded scoring config from %s", store.path)
        return store

    def current(self) -> AnalysisConfig:
        try:
            mtime = os.stat(self.path).st_mtime
        except OSError as e:
            logger.warning("Scoring config %s unavailable (%s); keeping last good config", self.path, e)
            return self._config

        if mtime == self._mtime:
            return self._config

        try:
            config = load_analysis_config(self.path)
        except (OSError, yaml.YAMLError, ValidationError, ValueError) as e:
            logger.warning("Invalid scoring config %s: %s; keeping last good config", self.path, e)
            self._mtime = mtime
            return self._config

        logger.info("Loaded scoring config from %s", self.path)
        self._config = config
        self._mtime = mtime
        return self._config
