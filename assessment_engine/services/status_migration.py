"""
Legacy Status Migrator — V1 (5 statuses) → V2 (12 statuses).

    draft       → draft
    in_progress → in_progress
    completed   → pending_validation
    reviewed    → validated
    signed_off  → signed_off

Usage:
    from assessment_engine.services.status_migration import migrate_legacy_status

    migrate_legacy_status("completed")   # AssessmentStatus.PENDING_VALIDATION
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from assessment_engine.core.exceptions import UnknownStatusError
from assessment_engine.models.assessment import AssessmentStatus, LegacyAssessmentStatus

logger = logging.getLogger(__name__)

_L = LegacyAssessmentStatus
_A = AssessmentStatus

V1_TO_V2_STATUS_MAP: MappingProxyType[LegacyAssessmentStatus, AssessmentStatus] = MappingProxyType({
    _L.DRAFT: _A.DRAFT,
    _L.IN_PROGRESS: _A.IN_PROGRESS,
    _L.COMPLETED: _A.PENDING_VALIDATION,
    _L.REVIEWED: _A.VALIDATED,
    _L.SIGNED_OFF: _A.SIGNED_OFF,
})


def migrate_legacy_status(legacy_status) -> AssessmentStatus:
    """Map a V1 status to its V2 counterpart.

    Raises:
        UnknownStatusError: not a V1 status.
    """
    return V1_TO_V2_STATUS_MAP[LegacyAssessmentStatus.parse(legacy_status)]


def coerce_status(value) -> AssessmentStatus:
    """Read a stored status that may still be in the V1 vocabulary.

    V2 wins where the vocabularies overlap (draft, in_progress, signed_off
    map onto themselves either way).
    """
    try:
        return AssessmentStatus.parse(value)
    except UnknownStatusError:
        pass
    try:
        migrated = migrate_legacy_status(value)
    except UnknownStatusError:
        raise UnknownStatusError(
            "AssessmentStatus",
            value,
            [s.value for s in AssessmentStatus] + [s.value for s in LegacyAssessmentStatus],
        ) from None
    logger.debug("Coerced legacy status %r -> %s", value, migrated.value)
    return migrated


def migrate_many(statuses) -> dict[str, str]:
    """Bulk mapping for data backfills: {legacy literal: v2 literal}."""
    return {str(s): migrate_legacy_status(s).value for s in statuses}
