"""Feature entitlement checks against a resolved plan."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional

from ..plans import (
    PLAN_CATALOG,
    TIER_ORDER,
    UNLIMITED,
    EffectivePlan,
    PlanTier,
    TierLimits,
    get_plan_definition,
    tier_rank,
)
from .usage import is_within_limit


class Feature(str, Enum):
    """Gated capabilities; values match the wire keys of tier limits."""

    ACTIVE_PROPOSALS = "activeProposals"
    TEAM_MEMBERS = "teamMembers"
    UPLOAD_IMAGES = "uploadImages"
    ALL_THEMES = "allThemes"
    NO_WATERMARK = "noWatermark"
    PDF_EXPORT = "pdfExport"
    COMMENTS = "comments"
    CUSTOM_DOMAINS = "customDomains"

    @classmethod
    def parse(cls, value: object) -> Optional["Feature"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (TypeError, ValueError):
            return None


class FeatureKind(str, Enum):
    COUNT = "count"
    FLAG = "flag"


# Feature -> (kind, TierLimits attribute)
FEATURE_LIMITS: Mapping[Feature, tuple[FeatureKind, str]] = {
    Feature.ACTIVE_PROPOSALS: (FeatureKind.COUNT, "active_proposals"),
    Feature.TEAM_MEMBERS: (FeatureKind.COUNT, "team_members"),
    Feature.UPLOAD_IMAGES: (FeatureKind.FLAG, "upload_images"),
    Feature.ALL_THEMES: (FeatureKind.FLAG, "all_themes"),
    Feature.NO_WATERMARK: (FeatureKind.FLAG, "no_watermark"),
    Feature.PDF_EXPORT: (FeatureKind.FLAG, "pdf_export"),
    Feature.COMMENTS: (FeatureKind.FLAG, "comments"),
    Feature.CUSTOM_DOMAINS: (FeatureKind.FLAG, "custom_domains"),
}

_unhandled = set(Feature) - set(FEATURE_LIMITS)
if _unhandled:  # pragma: no cover - import-time exhaustiveness check
    raise RuntimeError(f"Features without a limit mapping: {sorted(f.value for f in _unhandled)}")

FEATURE_DISPLAY_NAMES: Dict[Feature, str] = {
    Feature.UPLOAD_IMAGES: "Image uploads",
    Feature.ALL_THEMES: "Premium themes",
    Feature.NO_WATERMARK: "Watermark removal",
    Feature.PDF_EXPORT: "PDF export",
    Feature.COMMENTS: "Comments",
    Feature.CUSTOM_DOMAINS: "Custom domains",
}


def limit_value(limits: TierLimits, feature: Feature) -> int | bool:
    _, attribute = FEATURE_LIMITS[feature]
    return getattr(limits, attribute)


def can_access_limits(limits: Optional[TierLimits], feature: object) -> bool:
    """Boolean gate over a limits record.

    ``activeProposals`` only reports whether proposals are unlimited; use
    :func:`check_feature_access` or :func:`is_within_limit` to compare against
    a live count. ``teamMembers`` is denied only when the tier disables it.
    Unknown features are denied.
    """

    parsed = Feature.parse(feature)
    if limits is None or parsed is None:
        return False
    if parsed is Feature.ACTIVE_PROPOSALS:
        return limits.active_proposals == UNLIMITED
    if parsed is Feature.TEAM_MEMBERS:
        return limits.team_members != 0
    return bool(limit_value(limits, parsed))


def can_access(plan: Optional[EffectivePlan], feature: object) -> bool:
    """Return whether ``plan`` grants ``feature``. Never raises."""

    if plan is None:
        return False
    return can_access_limits(plan.limits, feature)


def get_upgrade_tier(current_tier: PlanTier, feature: Feature) -> Optional[PlanTier]:
    """Find the lowest tier above ``current_tier`` that improves ``feature``."""

    kind, _ = FEATURE_LIMITS[feature]
    current_value = limit_value(PLAN_CATALOG[current_tier].limits, feature)
    for tier in TIER_ORDER[tier_rank(current_tier) + 1:]:
        value = limit_value(PLAN_CATALOG[tier].limits, feature)
        if kind is FeatureKind.COUNT:
            if value == UNLIMITED or (current_value != UNLIMITED and value > current_value):
                return tier
        elif value:
            return tier
    return None


@dataclass(frozen=True)
class FeatureAccessResult:
    """Outcome of a server-side feature check."""

    allowed: bool
    reason: Optional[str] = None
    upgrade_to_tier: Optional[PlanTier] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "upgradeToTier": self.upgrade_to_tier.value if self.upgrade_to_tier else None,
        }


def check_feature_access(
    plan: Optional[EffectivePlan],
    feature: object,
    *,
    current_count: Optional[int] = None,
) -> FeatureAccessResult:
    """Check a feature for creation-time enforcement.

    Count features compare ``current_count`` against the numeric limit (a
    missing count is treated as zero). Flag features read the tier flag.
    """

    if plan is None:
        return FeatureAccessResult(allowed=False, reason="Organization not found")
    parsed = Feature.parse(feature)
    if parsed is None:
        return FeatureAccessResult(allowed=False, reason=f"Unknown feature '{feature}'")

    limits = plan.limits
    plan_name = get_plan_definition(plan.effective_tier).name
    kind, _ = FEATURE_LIMITS[parsed]

    if kind is FeatureKind.COUNT:
        limit = int(limit_value(limits, parsed))
        if is_within_limit(limit, current_count or 0):
            return FeatureAccessResult(allowed=True)
        if parsed is Feature.ACTIVE_PROPOSALS:
            reason = f"You've reached the limit of {limit} proposals on the {plan_name} plan"
        elif limit == 0:
            reason = f"Team members are not available on the {plan_name} plan"
        else:
            reason = f"You've reached the limit of {limit} team members on the {plan_name} plan"
        return FeatureAccessResult(
            allowed=False,
            reason=reason,
            upgrade_to_tier=get_upgrade_tier(plan.effective_tier, parsed),
        )

    if limit_value(limits, parsed):
        return FeatureAccessResult(allowed=True)
    display_name = FEATURE_DISPLAY_NAMES[parsed]
    verb = "is" if parsed is Feature.NO_WATERMARK else "are"
    return FeatureAccessResult(
        allowed=False,
        reason=f"{display_name} {verb} not available on the {plan_name} plan",
        upgrade_to_tier=get_upgrade_tier(plan.effective_tier, parsed),
    )


def is_theme_allowed(plan: Optional[EffectivePlan], theme: str) -> bool:
    if plan is None:
        return False
    return theme in get_plan_definition(plan.effective_tier).allowed_themes
