"""
Lifecycle continuity types: delta reports between snapshots and impact
summaries for unlocked (re-opened) records.

Each snapshot collection has its own ChangeRecord type, so the diff producer
(``services.delta_engine``) and its consumers share one explicit shape per
entity type.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum

from assessment_engine.core.exceptions import ValidationError
from assessment_engine.utils.helpers import get_field, normalize_key


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class EntityType(str, Enum):
    SCOPE_SELECTION = "scope_selection"
    STEP_RESPONSE = "step_response"
    GAP_RESOLUTION = "gap_resolution"
    INTEGRATION = "integration"
    DATA_MIGRATION = "data_migration"
    OCM = "ocm"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ── Change records ──────────────────────────────────────────────────────────


class _ChangeRecord:
    """Shared serialisation for the per-collection change records."""

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            out[f.name] = value
        return out


@dataclass(frozen=True)
class ScopeChange(_ChangeRecord):
    scope_item_id: str
    change_type: ChangeType
    changed_fields: tuple[str, ...] = ()
    previous_selected: bool | None = None
    new_selected: bool | None = None
    previous_relevance: str | None = None
    new_relevance: str | None = None


@dataclass(frozen=True)
class ClassificationChange(_ChangeRecord):
    process_step_id: str
    change_type: ChangeType
    changed_fields: tuple[str, ...] = ()
    previous_fit_status: str | None = None
    new_fit_status: str | None = None
    previous_confidence: str | None = None
    new_confidence: str | None = None


@dataclass(frozen=True)
class GapResolutionChange(_ChangeRecord):
    gap_resolution_id: str
    change_type: ChangeType
    changed_fields: tuple[str, ...] = ()
    previous_resolution_type: str | None = None
    new_resolution_type: str | None = None
    previous_priority: str | None = None
    new_priority: str | None = None
    previous_client_approved: bool | None = None
    new_client_approved: bool | None = None


@dataclass(frozen=True)
class IntegrationChange(_ChangeRecord):
    integration_id: str
    change_type: ChangeType
    changed_fields: tuple[str, ...] = ()
    previous_status: str | None = None
    new_status: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class DataMigrationChange(_ChangeRecord):
    data_migration_id: str
    change_type: ChangeType
    changed_fields: tuple[str, ...] = ()
    previous_status: str | None = None
    new_status: str | None = None
    object_name: str | None = None


@dataclass(frozen=True)
class DeltaReport:
    """Five parallel change lists between a base and a compare snapshot.

    List order carries no meaning.
    """
    base_version: int = 0
    compare_version: int = 0
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    scope_changes: tuple[ScopeChange, ...] = ()
    classification_changes: tuple[ClassificationChange, ...] = ()
    gap_resolution_changes: tuple[GapResolutionChange, ...] = ()
    integration_changes: tuple[IntegrationChange, ...] = ()
    data_migration_changes: tuple[DataMigrationChange, ...] = ()

    @property
    def total_changes(self) -> int:
        return (
            len(self.scope_changes)
            + len(self.classification_changes)
            + len(self.gap_resolution_changes)
            + len(self.integration_changes)
            + len(self.data_migration_changes)
        )

    def to_dict(self) -> dict:
        return {
            "base_version": self.base_version,
            "compare_version": self.compare_version,
            "computed_at": self.computed_at.isoformat(),
            "scope_changes": [c.to_dict() for c in self.scope_changes],
            "classification_changes": [c.to_dict() for c in self.classification_changes],
            "gap_resolution_changes": [c.to_dict() for c in self.gap_resolution_changes],
            "integration_changes": [c.to_dict() for c in self.integration_changes],
            "data_migration_changes": [c.to_dict() for c in self.data_migration_changes],
        }


@dataclass(frozen=True)
class DeltaSummary:
    total_changes: int = 0
    scope_added: int = 0
    scope_removed: int = 0
    scope_modified: int = 0
    classifications_added: int = 0
    classifications_removed: int = 0
    classifications_modified: int = 0
    gap_resolutions_added: int = 0
    gap_resolutions_removed: int = 0
    gap_resolutions_modified: int = 0
    integrations_added: int = 0
    integrations_removed: int = 0
    integrations_modified: int = 0
    data_migration_added: int = 0
    data_migration_removed: int = 0
    data_migration_modified: int = 0

    @property
    def classifications_changed(self) -> int:
        return (self.classifications_added + self.classifications_removed
                + self.classifications_modified)

    def to_dict(self) -> dict:
        out = asdict(self)
        out["classifications_changed"] = self.classifications_changed
        return out


# ── Unlocking & impact ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class UnlockedEntity:
    """A previously finalised record re-opened for editing."""
    entity_type: EntityType
    entity_id: str
    reason: str
    functional_area: str | None = None
    scope_item_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "UnlockedEntity":
        if not isinstance(data, dict):
            raise ValidationError("unlocked entity must be an object")
        raw_type = get_field(data, "entity_type", "entityType")
        try:
            entity_type = EntityType(normalize_key(raw_type))
        except ValueError:
            raise ValidationError(
                f"Unknown entity_type: {raw_type!r}",
                details={"entity_type": raw_type,
                         "valid": [t.value for t in EntityType]},
            ) from None
        entity_id = get_field(data, "entity_id", "entityId")
        if not entity_id:
            raise ValidationError("entity_id is required",
                                  details={"entity_id": "required"})
        return cls(
            entity_type=entity_type,
            entity_id=str(entity_id),
            reason=str(get_field(data, "reason", default="") or ""),
            functional_area=get_field(data, "functional_area", "functionalArea"),
            scope_item_id=get_field(data, "scope_item_id", "scopeItemId"),
        )


@dataclass(frozen=True)
class ImpactSummary:
    total_entities_affected: int
    scope_changes: int
    classification_changes: int
    gap_resolution_changes: int
    integration_changes: int
    data_migration_changes: int
    ocm_changes: int
    change_ratio: float
    risk_level: RiskLevel
    estimated_rework_days: int
    affected_functional_areas: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        out = asdict(self)
        out["risk_level"] = self.risk_level.value
        out["affected_functional_areas"] = list(self.affected_functional_areas)
        out["change_ratio"] = round(self.change_ratio, 4)
        return out
