"""
Snapshot Delta Engine — compares two snapshots of one assessment.

For each of the five collections independently:

  - id only in ``compare``            → added
  - id in both, significant field(s)  → modified (before/after captured)
    differ
  - id in both, no significant change → nothing emitted
  - id only in ``base``               → removed

O(n) per collection using id → record maps.  Output order carries no meaning.

Usage:
    from assessment_engine.services.delta_engine import compute_delta_report, compute_delta_summary

    report = compute_delta_report(base_snapshot, compare_snapshot)
    summary = compute_delta_summary(report)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from assessment_engine.models.lifecycle import (
    ChangeType,
    ClassificationChange,
    DataMigrationChange,
    DeltaReport,
    DeltaSummary,
    GapResolutionChange,
    IntegrationChange,
    ScopeChange,
)
from assessment_engine.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _CollectionDiff:
    """How one snapshot collection maps onto its ChangeRecord type."""
    collection: str
    record_type: type
    id_field: str                      # field name on the change record
    significant: tuple[str, ...]       # compared fields on the snapshot record
    label_field: str | None = None     # descriptive field carried as-is


_SCOPE = _CollectionDiff(
    "scope_selections", ScopeChange, "scope_item_id",
    significant=("selected", "relevance"),
)
_CLASSIFICATION = _CollectionDiff(
    "step_responses", ClassificationChange, "process_step_id",
    significant=("fit_status", "confidence"),
)
_GAP = _CollectionDiff(
    "gap_resolutions", GapResolutionChange, "gap_resolution_id",
    significant=("resolution_type", "priority", "client_approved"),
)
_INTEGRATION = _CollectionDiff(
    "integration_points", IntegrationChange, "integration_id",
    significant=("status",), label_field="name",
)
_DATA_MIGRATION = _CollectionDiff(
    "data_migration_objects", DataMigrationChange, "data_migration_id",
    significant=("status",), label_field="object_name",
)


def _diff_collection(cfg: _CollectionDiff, base: Snapshot, compare: Snapshot) -> tuple:
    base_map = base.keyed(cfg.collection)
    compare_map = compare.keyed(cfg.collection)
    changes = []

    for record_id, after in compare_map.items():
        before = base_map.get(record_id)
        if before is None:
            kwargs = {f"new_{f}": getattr(after, f) for f in cfg.significant}
            if cfg.label_field:
                kwargs[cfg.label_field] = getattr(after, cfg.label_field)
            changes.append(cfg.record_type(
                **{cfg.id_field: record_id},
                change_type=ChangeType.ADDED,
                **kwargs,
            ))
            continue

        changed = tuple(
            f for f in cfg.significant if getattr(before, f) != getattr(after, f)
        )
        if not changed:
            continue
        kwargs = {}
        for f in cfg.significant:
            kwargs[f"previous_{f}"] = getattr(before, f)
            kwargs[f"new_{f}"] = getattr(after, f)
        if cfg.label_field:
            kwargs[cfg.label_field] = getattr(after, cfg.label_field)
        changes.append(cfg.record_type(
            **{cfg.id_field: record_id},
            change_type=ChangeType.MODIFIED,
            changed_fields=changed,
            **kwargs,
        ))

    for record_id, before in base_map.items():
        if record_id in compare_map:
            continue
        kwargs = {f"previous_{f}": getattr(before, f) for f in cfg.significant}
        if cfg.label_field:
            kwargs[cfg.label_field] = getattr(before, cfg.label_field)
        changes.append(cfg.record_type(
            **{cfg.id_field: record_id},
            change_type=ChangeType.REMOVED,
            **kwargs,
        ))

    return tuple(changes)


def compute_delta_report(base: Snapshot, compare: Snapshot) -> DeltaReport:
    """Full delta report between two snapshots.

    Both arguments must be ``Snapshot`` instances; validate raw payloads with
    ``Snapshot.from_dict`` first.
    """
    report = DeltaReport(
        base_version=base.version,
        compare_version=compare.version,
        scope_changes=_diff_collection(_SCOPE, base, compare),
        classification_changes=_diff_collection(_CLASSIFICATION, base, compare),
        gap_resolution_changes=_diff_collection(_GAP, base, compare),
        integration_changes=_diff_collection(_INTEGRATION, base, compare),
        data_migration_changes=_diff_collection(_DATA_MIGRATION, base, compare),
    )
    logger.debug("Delta v%s -> v%s: %d change(s)",
                 base.version, compare.version, report.total_changes)
    return report


def _count(changes, change_type: ChangeType) -> int:
    return sum(1 for c in changes if c.change_type is change_type)


def compute_delta_summary(report: DeltaReport) -> DeltaSummary:
    """Per-collection, per-change-type counts of a delta report."""
    a, r, m = ChangeType.ADDED, ChangeType.REMOVED, ChangeType.MODIFIED
    return DeltaSummary(
        total_changes=report.total_changes,
        scope_added=_count(report.scope_changes, a),
        scope_removed=_count(report.scope_changes, r),
        scope_modified=_count(report.scope_changes, m),
        classifications_added=_count(report.classification_changes, a),
        classifications_removed=_count(report.classification_changes, r),
        classifications_modified=_count(report.classification_changes, m),
        gap_resolutions_added=_count(report.gap_resolution_changes, a),
        gap_resolutions_removed=_count(report.gap_resolution_changes, r),
        gap_resolutions_modified=_count(report.gap_resolution_changes, m),
        integrations_added=_count(report.integration_changes, a),
        integrations_removed=_count(report.integration_changes, r),
        integrations_modified=_count(report.integration_changes, m),
        data_migration_added=_count(report.data_migration_changes, a),
        data_migration_removed=_count(report.data_migration_changes, r),
        data_migration_modified=_count(report.data_migration_changes, m),
    )
