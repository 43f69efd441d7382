"""
Role Resolver & Capability Matrix

Single boundary where raw role strings (session claims, stakeholder records,
legacy data) become ``CanonicalRole`` values.  Everything downstream matches
on the enum.

Resolution is total: unknown inputs are returned unchanged and simply match
no permitted-role set and no capability row.

Usage:
    from assessment_engine.services.role_resolver import (
        resolve_role, has_role, get_capabilities, can_assign_role,
    )

    resolve_role("admin")                      # CanonicalRole.PLATFORM_ADMIN
    get_capabilities("executive").can_sign_off  # True
    can_assign_role("consultant", "partner_lead")  # False
"""

from __future__ import annotations

import logging
from typing import Iterable

from assessment_engine.models.roles import (
    LEGACY_ROLE_ALIASES,
    NO_CAPABILITIES,
    ROLE_CAPABILITIES,
    ROLE_HIERARCHY,
    CanonicalRole,
    RoleCapabilities,
)
from assessment_engine.utils.helpers import normalize_key

logger = logging.getLogger(__name__)


def resolve_role(raw) -> CanonicalRole | str:
    """Map a raw or legacy role string to its canonical role.

    Returns the input unchanged when it is not a known role or alias;
    non-string input comes back as its ``str`` form so it can still be
    compared against role sets.
    """
    if isinstance(raw, CanonicalRole):
        return raw
    if raw is None:
        return raw
    key = normalize_key(raw)
    alias = LEGACY_ROLE_ALIASES.get(key)
    if alias is not None:
        return alias
    try:
        return CanonicalRole(key)
    except ValueError:
        logger.debug("Unresolved role %r — treated as no capabilities", raw)
        return raw if isinstance(raw, str) else str(raw)


def is_canonical(raw) -> bool:
    return isinstance(resolve_role(raw), CanonicalRole)


def _role_of(user_or_role):
    if isinstance(user_or_role, dict):
        return user_or_role.get("role")
    return getattr(user_or_role, "role", user_or_role)


def has_role(user_or_role, roles: Iterable) -> bool:
    """True if the user's resolved role is one of ``roles`` (also resolved).

    ``user_or_role`` may be a raw role string, a dict with a "role" key, or
    any object with a ``role`` attribute.
    """
    resolved = resolve_role(_role_of(user_or_role))
    if not isinstance(resolved, CanonicalRole):
        return False
    return any(resolve_role(r) == resolved for r in roles)


def get_capabilities(raw) -> RoleCapabilities:
    """Capability row for a role; unknown roles get every flag false."""
    resolved = resolve_role(raw)
    if not isinstance(resolved, CanonicalRole):
        return NO_CAPABILITIES
    return ROLE_CAPABILITIES[resolved]


def role_level(raw) -> int:
    resolved = resolve_role(raw)
    if not isinstance(resolved, CanonicalRole):
        return 0
    return ROLE_HIERARCHY[resolved]


def can_assign_role(assigner_role, target_role) -> bool:
    """Privilege-escalation guard for stakeholder invitations.

    platform_admin may assign any role; every other role only roles at or
    below its own rank.  Unresolvable roles on either side are refused.
    """
    assigner = resolve_role(assigner_role)
    target = resolve_role(target_role)
    if not isinstance(assigner, CanonicalRole) or not isinstance(target, CanonicalRole):
        return False
    if assigner is CanonicalRole.PLATFORM_ADMIN:
        return True
    allowed = ROLE_HIERARCHY[assigner] >= ROLE_HIERARCHY[target]
    if not allowed:
        logger.debug("Role assignment refused: %s cannot assign %s",
                     assigner.value, target.value)
    return allowed


def assignable_roles(assigner_role) -> list[CanonicalRole]:
    """Roles ``assigner_role`` may hand out, highest rank first."""
    return sorted(
        (r for r in CanonicalRole if can_assign_role(assigner_role, r)),
        key=lambda r: ROLE_HIERARCHY[r],
        reverse=True,
    )


def role_name(raw) -> str:
    """Display/serialisation name of a resolved role."""
    resolved = resolve_role(raw)
    if isinstance(resolved, CanonicalRole):
        return resolved.value
    return str(resolved)
