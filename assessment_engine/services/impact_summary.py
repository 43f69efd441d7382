"""
Impact / Risk Summary — blast radius of a set of unlocked (re-opened) records.

Scoring:
  - change_ratio = total_affected / max(total_scope_items, 1)
  - risk level, most severe first:
        critical   ratio > 0.30  or  total > 50
        high       ratio > 0.15  or  total > 20
        medium     ratio > 0.05  or  total > 5
        low        otherwise
  - estimated_rework_days = ceil(Σ weight[type] × count[type])

Both tables are heuristics with no calibration data behind them; callers pass
their own ``RiskThresholds`` / weights (the HTTP layer builds them from config).

Usage:
    from assessment_engine.services.impact_summary import compute_impact_summary

    summary = compute_impact_summary(unlocked, snapshot.statistics)
    summary.risk_level   # RiskLevel.CRITICAL
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from assessment_engine.models.lifecycle import (
    EntityType,
    ImpactSummary,
    RiskLevel,
    UnlockedEntity,
)
from assessment_engine.models.snapshot import SnapshotStatistics

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════════
# Threshold Configuration
# ═════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RiskThresholds:
    """Ratio / count bands per risk level; a level applies when either is exceeded."""
    critical_ratio: float = 0.30
    critical_count: int = 50
    high_ratio: float = 0.15
    high_count: int = 20
    medium_ratio: float = 0.05
    medium_count: int = 5

    def bands(self) -> tuple[tuple[RiskLevel, float, int], ...]:
        return (
            (RiskLevel.CRITICAL, self.critical_ratio, self.critical_count),
            (RiskLevel.HIGH, self.high_ratio, self.high_count),
            (RiskLevel.MEDIUM, self.medium_ratio, self.medium_count),
        )


DEFAULT_THRESHOLDS = RiskThresholds()

# Effort in days per unlocked entity; unlisted types add no rework
REWORK_WEIGHTS: Mapping[EntityType, float] = MappingProxyType({
    EntityType.SCOPE_SELECTION: 0.5,
    EntityType.STEP_RESPONSE: 0.25,
    EntityType.GAP_RESOLUTION: 1.0,
    EntityType.INTEGRATION: 2.0,
    EntityType.DATA_MIGRATION: 0.0,
    EntityType.OCM: 0.0,
})


# ═════════════════════════════════════════════════════════════════════════════
# Scoring
# ═════════════════════════════════════════════════════════════════════════════

def classify_risk(
    total_affected: int,
    change_ratio: float,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> RiskLevel:
    for level, ratio, count in thresholds.bands():
        if change_ratio > ratio or total_affected > count:
            return level
    return RiskLevel.LOW


def estimate_rework_days(
    counts: Mapping[EntityType, int],
    weights: Mapping[EntityType, float] = REWORK_WEIGHTS,
) -> int:
    effort = sum(weights.get(t, 0.0) * n for t, n in counts.items())
    return math.ceil(effort)


def compute_impact_summary(
    unlocked: Iterable[UnlockedEntity],
    statistics: SnapshotStatistics,
    *,
    thresholds: RiskThresholds | None = None,
    weights: Mapping[EntityType, float] | None = None,
) -> ImpactSummary:
    """
    Score the impact of re-opening ``unlocked`` against the snapshot totals.

    Args:
        unlocked: Unlocked entities (validated; see ``UnlockedEntity.from_dict``).
        statistics: Aggregate statistics of the locked snapshot.
        thresholds: Risk bands; defaults to ``DEFAULT_THRESHOLDS``.
        weights: Rework days per entity type; defaults to ``REWORK_WEIGHTS``.
    """
    entities = list(unlocked)
    counts = Counter(e.entity_type for e in entities)
    total = len(entities)

    # Zero scope items reads as a ratio over 1, i.e. low risk
    change_ratio = total / max(statistics.total_scope_items, 1)
    risk_level = classify_risk(total, change_ratio, thresholds or DEFAULT_THRESHOLDS)

    areas = sorted({e.functional_area for e in entities if e.functional_area})

    summary = ImpactSummary(
        total_entities_affected=total,
        scope_changes=counts[EntityType.SCOPE_SELECTION],
        classification_changes=counts[EntityType.STEP_RESPONSE],
        gap_resolution_changes=counts[EntityType.GAP_RESOLUTION],
        integration_changes=counts[EntityType.INTEGRATION],
        data_migration_changes=counts[EntityType.DATA_MIGRATION],
        ocm_changes=counts[EntityType.OCM],
        change_ratio=change_ratio,
        risk_level=risk_level,
        estimated_rework_days=estimate_rework_days(
            counts, REWORK_WEIGHTS if weights is None else weights),
        affected_functional_areas=tuple(areas),
    )
    logger.debug("Impact: %d entities, ratio=%.4f, risk=%s, rework=%dd",
                 total, change_ratio, risk_level.value,
                 summary.estimated_rework_days)
    return summary
