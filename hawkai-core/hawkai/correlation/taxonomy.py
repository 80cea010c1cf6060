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

"""Signal taxonomy: which rules are usage, hint or metadata evidence.

The default table lives in ``rules/signal_taxonomy.yaml`` and is loaded once
per process. Callers that need a different table (tests, custom rule packs)
build a ``SignalTaxonomy`` directly and pass it to the grouping engine.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from hawkai.models.findings import SignalRole

logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).parent.parent / "rules" / "signal_taxonomy.yaml"


class TaxonomyEntry(BaseModel):
    """Role of one rule id plus the rules it is meant to correlate with."""

    role: SignalRole
    parent_rules: list[str] = Field(default_factory=list)  # hint/metadata → usage
    child_rules: list[str] = Field(default_factory=list)   # usage → hint/metadata


class SignalTaxonomy:
    """Lookup table from rule id to ``TaxonomyEntry``.

    Unknown rule ids resolve to ``usage`` so unrecognized rules always
    surface instead of being silently folded away.
    """

    def __init__(self, entries: Optional[dict[str, TaxonomyEntry]] = None) -> None:
        self.entries: dict[str, TaxonomyEntry] = dict(entries or {})

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self.entries

    def role_for(self, rule_id: str) -> SignalRole:
        entry = self.entries.get(rule_id)
        return entry.role if entry is not None else SignalRole.USAGE

    def child_rules(self, rule_id: str) -> list[str]:
        entry = self.entries.get(rule_id)
        return list(entry.child_rules) if entry is not None else []

    def parent_rules(self, rule_id: str) -> list[str]:
        entry = self.entries.get(rule_id)
        return list(entry.parent_rules) if entry is not None else []

    @classmethod
    def from_mapping(cls, data: dict) -> "SignalTaxonomy":
        """Build a taxonomy from ``{rule_id: {role, parent_rules?, child_rules?}}``.

        Malformed entries raise ``pydantic.ValidationError``.
        """
        return cls({rule_id: TaxonomyEntry(**entry) for rule_id, entry in data.items()})


def load_signal_taxonomy(path: str | Path = DEFAULT_TAXONOMY_PATH) -> SignalTaxonomy:
    """Load a taxonomy YAML file (top-level ``signals`` mapping).

    A missing file is logged and yields an empty taxonomy, so every rule
    falls back to the ``usage`` role.
    """
    taxonomy_path = Path(path)
    try:
        with open(taxonomy_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Signal taxonomy not found at %s", taxonomy_path)
        return SignalTaxonomy()

    taxonomy = SignalTaxonomy.from_mapping(data.get("signals", {}) or {})
    logger.debug("Loaded %d taxonomy entries from %s", len(taxonomy), taxonomy_path)
    return taxonomy


# Module-level cache
_default_taxonomy: SignalTaxonomy | None = None


def get_signal_taxonomy() -> SignalTaxonomy:
    """Get the cached default taxonomy."""
    global _default_taxonomy
    if _default_taxonomy is None:
        _default_taxonomy = load_signal_taxonomy()
    return _default_taxonomy
