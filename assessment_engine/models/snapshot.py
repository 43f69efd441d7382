"""
Snapshot — immutable point-in-time capture of an assessment.

Five id-keyed collections plus aggregate statistics.  Snapshots are built
once (usually via ``Snapshot.from_dict`` from the stored JSON blob) and never
mutated; the delta engine only ever compares two of them pairwise.

The JSON blob uses camelCase keys; ``from_dict`` also accepts snake_case.
Every record's key field is listed in ``KEY_FIELDS``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields

from assessment_engine.core.exceptions import ValidationError
from assessment_engine.utils.helpers import get_field


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


def _record_from_dict(cls, data, collection: str):
    if not isinstance(data, dict):
        raise ValidationError(f"{collection} entries must be objects",
                              details={"collection": collection})
    kwargs = {}
    for f in fields(cls):
        value = get_field(data, f.name, _camel(f.name), _MISSING)
        if value is _MISSING:
            if f.name == KEY_FIELDS[collection]:
                raise ValidationError(
                    f"{collection} entry is missing '{_camel(f.name)}'",
                    details={"collection": collection, "field": f.name},
                )
            continue
        kwargs[f.name] = value

    key = KEY_FIELDS[collection]
    kwargs[key] = _key_value(kwargs[key], collection, key)
    return cls(**kwargs)


def _key_value(value, collection: str, key: str) -> str:
    """Record ids are non-empty strings; integers are accepted as strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    raise ValidationError(
        f"{collection} entry has an invalid '{_camel(key)}'",
        details={"collection": collection, "field": key, "value": repr(value)},
    )


def _reject_duplicate_ids(records: tuple, collection: str) -> None:
    key = KEY_FIELDS[collection]
    seen = set()
    for record in records:
        record_id = getattr(record, key)
        if record_id in seen:
            raise ValidationError(
                f"{collection} contains duplicate '{_camel(key)}' {record_id!r}",
                details={"collection": collection, "field": key, "value": record_id},
            )
        seen.add(record_id)


_MISSING = object()


@dataclass(frozen=True)
class ScopeSelectionRecord:
    scope_item_id: str
    selected: bool = False
    relevance: str | None = None
    id: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class StepResponseRecord:
    process_step_id: str
    fit_status: str | None = None
    confidence: str | None = None
    id: str | None = None
    client_note: str | None = None


@dataclass(frozen=True)
class GapResolutionRecord:
    id: str
    resolution_type: str | None = None
    priority: str | None = None
    client_approved: bool = False
    process_step_id: str | None = None
    scope_item_id: str | None = None
    resolution_description: str | None = None
    risk_category: str | None = None


@dataclass(frozen=True)
class IntegrationPointRecord:
    id: str
    status: str | None = None
    name: str | None = None
    direction: str | None = None
    source_system: str | None = None
    target_system: str | None = None
    interface_type: str | None = None


@dataclass(frozen=True)
class DataMigrationRecord:
    id: str
    status: str | None = None
    object_name: str | None = None
    object_type: str | None = None
    source_system: str | None = None


@dataclass(frozen=True)
class SnapshotStatistics:
    total_scope_items: int = 0
    selected_scope_items: int = 0
    total_steps: int = 0
    fit_count: int = 0
    configure_count: int = 0
    gap_count: int = 0
    na_count: int = 0
    pending_count: int = 0
    total_gap_resolutions: int = 0
    approved_gap_resolutions: int = 0
    integration_point_count: int = 0
    data_migration_object_count: int = 0

    @classmethod
    def from_dict(cls, data: dict | None) -> "SnapshotStatistics":
        data = data or {}
        if not isinstance(data, dict):
            raise ValidationError("statistics must be an object")
        kwargs = {}
        for f in fields(cls):
            value = get_field(data, f.name, _camel(f.name), 0)
            try:
                kwargs[f.name] = int(value or 0)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"statistics.{_camel(f.name)} must be an integer",
                    details={"field": f.name, "value": value},
                ) from None
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return asdict(self)


COLLECTIONS = (
    "scope_selections",
    "step_responses",
    "gap_resolutions",
    "integration_points",
    "data_migration_objects",
)

RECORD_TYPES = {
    "scope_selections": ScopeSelectionRecord,
    "step_responses": StepResponseRecord,
    "gap_resolutions": GapResolutionRecord,
    "integration_points": IntegrationPointRecord,
    "data_migration_objects": DataMigrationRecord,
}

# Identity of a record within its collection
KEY_FIELDS = {
    "scope_selections": "scope_item_id",
    "step_responses": "process_step_id",
    "gap_resolutions": "id",
    "integration_points": "id",
    "data_migration_objects": "id",
}


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time capture of one assessment."""
    assessment_id: str | None = None
    version: int = 0
    status: str | None = None
    scope_selections: tuple[ScopeSelectionRecord, ...] = ()
    step_responses: tuple[StepResponseRecord, ...] = ()
    gap_resolutions: tuple[GapResolutionRecord, ...] = ()
    integration_points: tuple[IntegrationPointRecord, ...] = ()
    data_migration_objects: tuple[DataMigrationRecord, ...] = ()
    statistics: SnapshotStatistics = field(default_factory=SnapshotStatistics)

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        """Validate and build a snapshot from its JSON form.

        Raises:
            ValidationError: payload is not an object, a collection is not a
                list, or a record lacks a valid key field
                or repeats the key of another record in its collection.
        """
        if not isinstance(data, dict):
            raise ValidationError("snapshot must be an object")

        collections = {}
        for name in COLLECTIONS:
            raw = get_field(data, name, _camel(name), [])
            if raw is None:
                raw = []
            if not isinstance(raw, (list, tuple)):
                raise ValidationError(f"snapshot.{_camel(name)} must be a list",
                                      details={"collection": name})
            record_cls = RECORD_TYPES[name]
            collections[name] = tuple(_record_from_dict(record_cls, r, name) for r in raw)
            _reject_duplicate_ids(collections[name], name)

        version = get_field(data, "version", "snapshotVersion", 0)
        try:
            version = int(version or 0)
        except (TypeError, ValueError):
            raise ValidationError("snapshot.version must be an integer",
                                  details={"version": version}) from None

        return cls(
            assessment_id=get_field(data, "assessment_id", "assessmentId"),
            version=version,
            status=get_field(data, "status"),
            statistics=SnapshotStatistics.from_dict(get_field(data, "statistics")),
            **collections,
        )

    def keyed(self, collection: str) -> dict:
        """id → record map for one collection."""
        key = KEY_FIELDS[collection]
        return {getattr(r, key): r for r in getattr(self, collection)}
