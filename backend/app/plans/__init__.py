"""Plan catalog and trial-aware tier resolution."""

from .catalog import (
    DEFAULT_TIER,
    PLAN_CATALOG,
    TRIAL_TIER,
    PlanDefinition,
    get_limits,
    get_plan_definition,
    higher_tier,
    tier_rank,
)
from .models import (
    TIER_ORDER,
    UNLIMITED,
    EffectivePlan,
    PlanTier,
    SubscriptionState,
    TierLimits,
)
from .resolver import parse_tier, resolve_plan

__all__ = [
    "DEFAULT_TIER",
    "PLAN_CATALOG",
    "TRIAL_TIER",
    "PlanDefinition",
    "get_limits",
    "get_plan_definition",
    "higher_tier",
    "tier_rank",
    "TIER_ORDER",
    "UNLIMITED",
    "EffectivePlan",
    "PlanTier",
    "SubscriptionState",
    "TierLimits",
    "parse_tier",
    "resolve_plan",
]
