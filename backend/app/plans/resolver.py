"""Resolution of a persisted subscription into the plan that grants access now."""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from .catalog import DEFAULT_TIER, TRIAL_TIER, get_limits, higher_tier
from .models import EffectivePlan, PlanTier, SubscriptionState

logger = logging.getLogger("plans")

_SECONDS_PER_DAY = 24 * 60 * 60


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _trial_days_remaining(trial_ends_at: datetime, now: datetime) -> int:
    remaining_seconds = (trial_ends_at - now).total_seconds()
    return max(0, math.ceil(remaining_seconds / _SECONDS_PER_DAY))


def parse_tier(raw_tier: Optional[str], *, organization_id: Optional[str] = None) -> PlanTier:
    """Parse a stored tier string, degrading to the free tier when unknown."""

    tier = PlanTier.parse(raw_tier)
    if tier is None:
        if raw_tier is not None:
            logger.warning(
                "Unknown plan tier %r for organization=%s; using %s",
                raw_tier,
                organization_id,
                DEFAULT_TIER.value,
            )
        return DEFAULT_TIER
    return tier


def resolve_plan(subscription: SubscriptionState, *, now: Optional[datetime] = None) -> EffectivePlan:
    """Compute the effective plan for a subscription at ``now``.

    An active trial (trial end strictly after ``now``) grants the higher of the
    billed tier and the trial tier. Once the trial has lapsed, or when there is
    none, the billed tier applies. Never raises for malformed tier values.
    """

    current_time = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    tier = parse_tier(subscription.plan_tier, organization_id=subscription.organization_id)

    trial_ends_at = _as_utc(subscription.trial_ends_at) if subscription.trial_ends_at else None
    is_trialing = trial_ends_at is not None and trial_ends_at > current_time

    if is_trialing:
        effective_tier = higher_tier(tier, subscription.trial_tier or TRIAL_TIER)
        trial_days_remaining: Optional[int] = _trial_days_remaining(trial_ends_at, current_time)
    else:
        effective_tier = tier
        trial_days_remaining = None

    return EffectivePlan(
        tier=tier,
        effective_tier=effective_tier,
        is_trialing=is_trialing,
        trial_ends_at=trial_ends_at,
        trial_days_remaining=trial_days_remaining,
        limits=get_limits(effective_tier),
    )
