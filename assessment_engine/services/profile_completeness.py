"""
Company-profile completeness score (0–100) with a per-group breakdown.

This is the caller-side input for the profile-completeness transition gate.
Each group contributes its weight scaled by the share of its fields that are
filled; the breakdown flags groups whose fields are all filled.
"""

from __future__ import annotations

from types import MappingProxyType

from assessment_engine.utils.helpers import get_field

# group → (weight, fields as (snake_case, camelCase))
PROFILE_GROUPS = MappingProxyType({
    "basic": (30, (
        ("company_name", "companyName"),
        ("industry", "industry"),
        ("country", "country"),
        ("company_size", "companySize"),
    )),
    "financial": (15, (
        ("employee_count", "employeeCount"),
        ("annual_revenue", "annualRevenue"),
    )),
    "sap_strategy": (30, (
        ("deployment_model", "deploymentModel"),
        ("sap_modules", "sapModules"),
        ("migration_approach", "migrationApproach"),
        ("target_go_live_date", "targetGoLiveDate"),
    )),
    "operational": (15, (
        ("key_processes", "keyProcesses"),
        ("operating_countries", "operatingCountries"),
    )),
    "it_landscape": (10, (
        ("current_erp_version", "currentErpVersion"),
        ("it_landscape_summary", "itLandscapeSummary"),
    )),
})


def _has_value(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def calculate_profile_completeness(profile: dict) -> dict:
    """Score a profile dict (snake_case or camelCase keys).

    Returns:
        {"score": int, "breakdown": {group: bool, ...}}
    """
    profile = profile or {}
    score = 0.0
    breakdown = {}
    for group, (weight, group_fields) in PROFILE_GROUPS.items():
        filled = sum(
            1 for snake, camel in group_fields
            if _has_value(get_field(profile, snake, camel))
        )
        breakdown[group] = filled == len(group_fields)
        score += filled / len(group_fields) * weight

    # half-up rounding
    return {"score": int(score + 0.5), "breakdown": breakdown}
