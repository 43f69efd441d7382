"""
Canonical roles, legacy aliases, role hierarchy and the capability matrix.

The capability matrix is a complete table: every canonical role has exactly
one row, and every row carries all 14 flags.  Unknown roles fall back to
``NO_CAPABILITIES`` (every flag false).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType


class CanonicalRole(str, Enum):
    """The 11 canonical platform roles."""
    PLATFORM_ADMIN = "platform_admin"
    PARTNER_LEAD = "partner_lead"
    CONSULTANT = "consultant"
    PROJECT_MANAGER = "project_manager"
    SOLUTION_ARCHITECT = "solution_architect"
    PROCESS_OWNER = "process_owner"
    IT_LEAD = "it_lead"
    DATA_MIGRATION_LEAD = "data_migration_lead"
    EXECUTIVE_SPONSOR = "executive_sponsor"
    VIEWER = "viewer"
    CLIENT_ADMIN = "client_admin"


ALL_ROLES: tuple[CanonicalRole, ...] = tuple(CanonicalRole)

# Old 5-role vocabulary: consultant / process_owner / it_lead kept their names.
LEGACY_ROLE_ALIASES = MappingProxyType({
    "admin": CanonicalRole.PLATFORM_ADMIN,
    "executive": CanonicalRole.EXECUTIVE_SPONSOR,
})

# Higher number = higher authority
ROLE_HIERARCHY = MappingProxyType({
    CanonicalRole.PLATFORM_ADMIN: 100,
    CanonicalRole.PARTNER_LEAD: 90,
    CanonicalRole.CONSULTANT: 80,
    CanonicalRole.SOLUTION_ARCHITECT: 75,
    CanonicalRole.PROJECT_MANAGER: 70,
    CanonicalRole.CLIENT_ADMIN: 65,
    CanonicalRole.PROCESS_OWNER: 60,
    CanonicalRole.IT_LEAD: 55,
    CanonicalRole.DATA_MIGRATION_LEAD: 50,
    CanonicalRole.EXECUTIVE_SPONSOR: 45,
    CanonicalRole.VIEWER: 10,
})

ROLE_LABELS = MappingProxyType({
    CanonicalRole.PLATFORM_ADMIN: "Platform Admin",
    CanonicalRole.PARTNER_LEAD: "Partner Lead",
    CanonicalRole.CONSULTANT: "Consultant",
    CanonicalRole.PROJECT_MANAGER: "Project Manager",
    CanonicalRole.SOLUTION_ARCHITECT: "Solution Architect",
    CanonicalRole.PROCESS_OWNER: "Process Owner",
    CanonicalRole.IT_LEAD: "IT Lead",
    CanonicalRole.DATA_MIGRATION_LEAD: "Data Migration Lead",
    CanonicalRole.EXECUTIVE_SPONSOR: "Executive Sponsor",
    CanonicalRole.VIEWER: "Viewer",
    CanonicalRole.CLIENT_ADMIN: "Client Admin",
})


@dataclass(frozen=True)
class RoleCapabilities:
    """One row of the capability matrix."""
    can_create_assessment: bool = False
    can_edit_assessment: bool = False
    can_delete_assessment: bool = False
    can_manage_stakeholders: bool = False
    can_manage_organization: bool = False
    can_invite_users: bool = False
    can_transition_status: bool = False
    can_edit_step_responses: bool = False
    can_edit_gap_resolutions: bool = False
    can_edit_registers: bool = False
    can_approve_gaps: bool = False
    can_sign_off: bool = False
    can_view_all_assessments: bool = False
    is_area_locked: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


NO_CAPABILITIES = RoleCapabilities()

ROLE_CAPABILITIES: MappingProxyType[CanonicalRole, RoleCapabilities] = MappingProxyType({
    CanonicalRole.PLATFORM_ADMIN: RoleCapabilities(
        can_create_assessment=True,
        can_edit_assessment=True,
        can_delete_assessment=True,
        can_manage_stakeholders=True,
        can_manage_organization=True,
        can_invite_users=True,
        can_transition_status=True,
        can_edit_step_responses=True,
        can_edit_gap_resolutions=True,
        can_edit_registers=True,
        can_approve_gaps=True,
        can_sign_off=True,
        can_view_all_assessments=True,
    ),
    CanonicalRole.PARTNER_LEAD: RoleCapabilities(
        can_create_assessment=True,
        can_edit_assessment=True,
        can_delete_assessment=True,
        can_manage_stakeholders=True,
        can_manage_organization=True,
        can_invite_users=True,
        can_transition_status=True,
        can_view_all_assessments=True,
    ),
    CanonicalRole.CONSULTANT: RoleCapabilities(
        can_create_assessment=True,
        can_edit_assessment=True,
        can_manage_stakeholders=True,
        can_transition_status=True,
        can_edit_step_responses=True,
        can_edit_gap_resolutions=True,
        can_edit_registers=True,
        can_approve_gaps=True,
        can_sign_off=True,
    ),
    CanonicalRole.PROJECT_MANAGER: RoleCapabilities(
        can_manage_stakeholders=True,
    ),
    CanonicalRole.SOLUTION_ARCHITECT: RoleCapabilities(
        can_edit_step_responses=True,
        can_edit_gap_resolutions=True,
    ),
    CanonicalRole.PROCESS_OWNER: RoleCapabilities(
        can_edit_step_responses=True,
        is_area_locked=True,
    ),
    CanonicalRole.IT_LEAD: RoleCapabilities(
        can_edit_step_responses=True,
        can_edit_registers=True,
    ),
    CanonicalRole.DATA_MIGRATION_LEAD: RoleCapabilities(
        can_edit_registers=True,
    ),
    CanonicalRole.EXECUTIVE_SPONSOR: RoleCapabilities(
        can_transition_status=True,
        can_sign_off=True,
    ),
    CanonicalRole.VIEWER: RoleCapabilities(),
    CanonicalRole.CLIENT_ADMIN: RoleCapabilities(
        can_manage_organization=True,
        can_invite_users=True,
    ),
})
