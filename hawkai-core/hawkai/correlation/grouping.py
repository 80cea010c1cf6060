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

"""Finding grouping — turns raw pattern matches into correlated evidence groups.

Within each file:
- usage findings sharing a rule id form one group, led by the strongest match
- hint/metadata findings the taxonomy links to that rule become related evidence
- unclaimed hints stand alone, unless their score falls under the evidence floor
- unclaimed metadata stands alone

Each group gets a composite confidence score (role weights, diminishing
returns, boosts, demotions) and a severity that is never lower than its
primary finding's.
"""

from __future__ import annotations

import logging
from typing import Optional

from hawkai.correlation.scoring import (
    apply_boosts,
    apply_demotions,
    clamp_unit,
    diminishing_factor,
    is_loop_only,
    is_mock_like_path,
    is_test_or_example_path,
    score_to_severity,
    weight_for_role,
)
from hawkai.correlation.taxonomy import SignalTaxonomy, get_signal_taxonomy
from hawkai.models.config import ScoringConfig
from hawkai.models.findings import (
    ContributingSignal,
    Finding,
    FindingGroup,
    SignalRole,
    max_severity,
)

logger = logging.getLogger(__name__)

# Evidence prefix length used in the duplicate key.
EVIDENCE_KEY_CHARS = 50

# Rules whose matches are the most actionable evidence of a live AI call.
PREFERRED_PRIMARY_RULE_IDS = frozenset({
    "AG-LANGGRAPH-INVOKE",
    "AG-LANGGRAPH-STREAM",
    "AI-FP-OPENAI-ENDPOINT",
    "AG-LANGCHAIN-INVOKE",
})
PREFERRED_PRIMARY_BONUS = 0.15

# Extra same-rule usage matches considered as related evidence, nearest first.
MAX_SAME_RULE_RELATED = 3


def _dedup_key(finding: Finding) -> tuple[str, str, Optional[int], str]:
    return (finding.file, finding.rule_id, finding.line, finding.evidence[:EVIDENCE_KEY_CHARS])


def deduplicate_findings(findings: list[Finding]) -> list[Finding]:
    """Drop repeats of (file, rule, line, first 50 evidence chars); first one wins."""
    seen: set[tuple[str, str, Optional[int], str]] = set()
    unique: list[Finding] = []
    for finding in findings:
        key = _dedup_key(finding)
        if key in seen:
            continue
        seen.add(key)
        unique.append(finding)
    return unique


def cap_findings_per_file(findings: list[Finding], limit: int) -> list[Finding]:
    """Keep at most ``limit`` findings per file, in input order."""
    per_file: dict[str, int] = {}
    kept: list[Finding] = []
    for finding in findings:
        count = per_file.get(finding.file, 0)
        if count >= limit:
            continue
        per_file[finding.file] = count + 1
        kept.append(finding)

    dropped = len(findings) - len(kept)
    if dropped:
        logger.debug("Per-file cap (%d) dropped %d findings", limit, dropped)
    return kept


def primary_candidate_score(finding: Finding) -> float:
    """Rank a usage finding for primary selection: severity, confidence, then rule preference."""
    score = finding.severity.rank * 0.6 + finding.confidence * 0.4
    if finding.rule_id in PREFERRED_PRIMARY_RULE_IDS:
        score += PREFERRED_PRIMARY_BONUS
    return score


def score_group(
    primary: Finding,
    related: list[Finding],
    config: ScoringConfig,
    taxonomy: SignalTaxonomy,
) -> tuple[float, list[ContributingSignal]]:
    """Compute the composite score for a primary finding and its related evidence.

    ``related`` must already be truncated to ``caps.per_group_related``.
    Returns the clamped score and the signals that produced it, primary first.
    """
    primary_role = taxonomy.role_for(primary.rule_id)
    primary_weight = weight_for_role(primary_role, config)
    score = primary_weight * primary.confidence
    signals = [
        ContributingSignal(
            rule_id=primary.rule_id,
            weight=primary_weight,
            confidence=primary.confidence,
            role=primary_role,
        )
    ]

    for position, finding in enumerate(related):
        role = taxonomy.role_for(finding.rule_id)
        weight = weight_for_role(role, config)
        score += weight * finding.confidence * diminishing_factor(position)
        signals.append(
            ContributingSignal(
                rule_id=finding.rule_id,
                weight=weight,
                confidence=finding.confidence,
                role=role,
            )
        )

    score = apply_boosts(score, (s.role for s in signals), config)
    score = apply_demotions(
        score,
        config,
        test_or_example_path=is_test_or_example_path(primary.file),
        loop_only_without_invoke=is_loop_only(s.rule_id for s in signals),
        mock_like_path=is_mock_like_path(primary.file),
    )
    return clamp_unit(score), signals


def _standalone_group(
    finding: Finding,
    config: ScoringConfig,
    taxonomy: SignalTaxonomy,
) -> FindingGroup:
    score, signals = score_group(finding, [], config, taxonomy)
    return FindingGroup(
        id=f"group-{finding.id}",
        primary_finding=finding,
        related_findings=[],
        file=finding.file,
        severity=max_severity(finding.severity, score_to_severity(score, config)),
        category=finding.category,
        risk_boost=0,
        composite_score=score,
        contributing_signals=signals,
    )


def _group_file_findings(
    file: str,
    findings: list[Finding],
    config: ScoringConfig,
    taxonomy: SignalTaxonomy,
) -> list[FindingGroup]:
    """Group the deduplicated findings of one file."""
    usage_by_rule: dict[str, list[Finding]] = {}
    hints: list[Finding] = []
    metadata: list[Finding] = []
    for finding in findings:
        role = taxonomy.role_for(finding.rule_id)
        if role == SignalRole.USAGE:
            usage_by_rule.setdefault(finding.rule_id, []).append(finding)
        elif role == SignalRole.HINT:
            hints.append(finding)
        else:
            metadata.append(finding)

    supporting = hints + metadata
    claimed: set[str] = set()
    groups: list[FindingGroup] = []

    for rule_id, cluster in usage_by_rule.items():
        primary_idx = max(
            range(len(cluster)),
            key=lambda i: (primary_candidate_score(cluster[i]), -i),
        )
        primary = cluster[primary_idx]

        related: list[Finding] = []
        related_ids: set[str] = set()

        def _claim(candidate: Finding) -> None:
            if candidate.id in related_ids:
                return
            related_ids.add(candidate.id)
            related.append(candidate)
            claimed.add(candidate.id)

        for child_rule in taxonomy.child_rules(rule_id):
            for candidate in supporting:
                if candidate.rule_id == child_rule:
                    _claim(candidate)

        for candidate in metadata:
            if rule_id in taxonomy.parent_rules(candidate.rule_id):
                _claim(candidate)

        primary_line = primary.line or 0
        other_usages = sorted(
            (u for i, u in enumerate(cluster) if i != primary_idx),
            key=lambda u: abs((u.line or 0) - primary_line),
        )[:MAX_SAME_RULE_RELATED]

        related_limited = (related + other_usages)[: config.caps.per_group_related]
        # Only claimed hint/metadata evidence corroborates; extra same-rule usages do not.
        risk_boost = 1 if any(f.id in related_ids for f in related_limited) else 0
        score, signals = score_group(primary, related_limited, config, taxonomy)
        severity = max_severity(primary.severity.raised(risk_boost), score_to_severity(score, config))

        groups.append(
            FindingGroup(
                id=f"group-{file}-{rule_id}",
                primary_finding=primary,
                related_findings=related_limited,
                file=primary.file,
                severity=severity,
                category=primary.category,
                risk_boost=risk_boost,
                composite_score=score,
                contributing_signals=signals,
            )
        )

    for hint in hints:
        if hint.id in claimed:
            continue
        group = _standalone_group(hint, config, taxonomy)
        if group.composite_score < config.thresholds.min_group:
            logger.debug(
                "Suppressed weak hint %s at %s:%s (score %.3f)",
                hint.rule_id, hint.file, hint.line, group.composite_score,
            )
            continue
        groups.append(group)

    for meta in metadata:
        if meta.id in claimed:
            continue
        groups.append(_standalone_group(meta, config, taxonomy))

    return groups


def group_findings(
    findings: list[Finding],
    config: Optional[ScoringConfig] = None,
    taxonomy: Optional[SignalTaxonomy] = None,
) -> list[FindingGroup]:
    """Deduplicate findings and group them per file.

    Args:
        findings: Raw findings from the rule engine.
        config: Scoring configuration (defaults when omitted).
        taxonomy: Signal taxonomy (the bundled table when omitted).

    Returns:
        Groups in file order of first appearance.
    """
    config = config or ScoringConfig()
    taxonomy = taxonomy if taxonomy is not None else get_signal_taxonomy()

    by_file: dict[str, list[Finding]] = {}
    for finding in deduplicate_findings(findings):
        by_file.setdefault(finding.file, []).append(finding)

    groups: list[FindingGroup] = []
    for file, file_findings in by_file.items():
        groups.extend(_group_file_findings(file, file_findings, config, taxonomy))

    logger.debug("Grouped %d findings into %d groups", len(findings), len(groups))
    return groups


def flatten_groups(groups: list[FindingGroup]) -> list[Finding]:
    """Flatten groups back to a finding list (primary first, then related)."""
    findings: list[Finding] = []
    for group in groups:
        findings.append(group.primary_finding)
        findings.extend(group.related_findings)
    return findings
