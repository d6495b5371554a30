"""Static catalog definitions for subscription tiers."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .models import TIER_ORDER, UNLIMITED, PlanTier, TierLimits


@dataclass(frozen=True)
class PlanDefinition:
    """Describes a subscription tier, its price and its limits."""

    tier: PlanTier
    name: str
    price: int
    limits: TierLimits
    allowed_themes: Tuple[str, ...]


DEFAULT_TIER = PlanTier.FREE
TRIAL_TIER = PlanTier.PRO

BASE_THEMES: Tuple[str, ...] = ("minimalistic",)
PREMIUM_THEMES: Tuple[str, ...] = ("minimalistic", "kudu", "discovery", "safari-portal")

FREE_LIMITS = TierLimits(
    active_proposals=2,
    team_members=0,
    upload_images=False,
    all_themes=False,
    no_watermark=False,
    pdf_export=False,
    comments=False,
    custom_domains=False,
)

STARTER_LIMITS = TierLimits(
    active_proposals=5,
    team_members=0,
    upload_images=False,
    all_themes=False,
    no_watermark=False,
    pdf_export=True,
    comments=False,
    custom_domains=False,
)

PRO_LIMITS = TierLimits(
    active_proposals=UNLIMITED,
    team_members=3,
    upload_images=True,
    all_themes=True,
    no_watermark=True,
    pdf_export=True,
    comments=True,
    custom_domains=False,
)

BUSINESS_LIMITS = TierLimits(
    active_proposals=UNLIMITED,
    team_members=UNLIMITED,
    upload_images=True,
    all_themes=True,
    no_watermark=True,
    pdf_export=True,
    comments=True,
    custom_domains=True,
)

PLAN_CATALOG: Mapping[PlanTier, PlanDefinition] = MappingProxyType(
    {
        PlanTier.FREE: PlanDefinition(
            tier=PlanTier.FREE,
            name="Free",
            price=0,
            limits=FREE_LIMITS,
            allowed_themes=BASE_THEMES,
        ),
        PlanTier.STARTER: PlanDefinition(
            tier=PlanTier.STARTER,
            name="Starter",
            price=49,
            limits=STARTER_LIMITS,
            allowed_themes=BASE_THEMES,
        ),
        PlanTier.PRO: PlanDefinition(
            tier=PlanTier.PRO,
            name="Pro",
            price=99,
            limits=PRO_LIMITS,
            allowed_themes=PREMIUM_THEMES,
        ),
        PlanTier.BUSINESS: PlanDefinition(
            tier=PlanTier.BUSINESS,
            name="Business",
            price=249,
            limits=BUSINESS_LIMITS,
            allowed_themes=PREMIUM_THEMES,
        ),
    }
)

if set(PLAN_CATALOG) != set(TIER_ORDER):  # pragma: no cover - guarded by static catalog
    raise RuntimeError("PLAN_CATALOG must define every tier in TIER_ORDER")


def get_plan_definition(tier: object) -> PlanDefinition:
    """Return the definition for ``tier``, falling back to the free tier."""

    parsed = PlanTier.parse(tier)
    if parsed is None:
        return PLAN_CATALOG[DEFAULT_TIER]
    return PLAN_CATALOG[parsed]


def get_limits(tier: object) -> TierLimits:
    """Return the limits granted by ``tier``; unknown tiers get free limits."""

    return get_plan_definition(tier).limits


def tier_rank(tier: PlanTier) -> int:
    return TIER_ORDER.index(tier)


def higher_tier(first: PlanTier, second: Optional[PlanTier]) -> PlanTier:
    """Return whichever tier sits higher in :data:`TIER_ORDER`."""

    if second is None:
        return first
    return second if tier_rank(second) > tier_rank(first) else first
