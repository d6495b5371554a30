from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend.app.plans import (
    PlanTier,
    SubscriptionState,
    get_limits,
    resolve_plan,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _subscription(**overrides) -> SubscriptionState:
    data = {"organization_id": "org-1", "plan_tier": "free"}
    data.update(overrides)
    return SubscriptionState(**data)


def test_free_tier_with_active_trial_gets_trial_tier() -> None:
    plan = resolve_plan(_subscription(trial_ends_at=NOW + timedelta(days=10)), now=NOW)

    assert plan.tier == PlanTier.FREE
    assert plan.effective_tier == PlanTier.PRO
    assert plan.is_trialing is True
    assert plan.trial_days_remaining == 10
    assert plan.limits == get_limits(PlanTier.PRO)


def test_trial_days_round_up_partial_days() -> None:
    plan = resolve_plan(_subscription(trial_ends_at=NOW + timedelta(days=2, hours=1)), now=NOW)

    assert plan.trial_days_remaining == 3


def test_trial_ending_within_seconds_still_counts_one_day() -> None:
    plan = resolve_plan(_subscription(trial_ends_at=NOW + timedelta(seconds=5)), now=NOW)

    assert plan.is_trialing is True
    assert plan.trial_days_remaining == 1


@pytest.mark.parametrize(
    "trial_ends_at",
    [None, NOW - timedelta(days=1), NOW],
    ids=["no-trial", "lapsed", "ends-now"],
)
def test_without_active_trial_billed_tier_applies(trial_ends_at) -> None:
    plan = resolve_plan(_subscription(plan_tier="starter", trial_ends_at=trial_ends_at), now=NOW)

    assert plan.is_trialing is False
    assert plan.effective_tier == plan.tier == PlanTier.STARTER
    assert plan.trial_days_remaining is None
    assert plan.limits == get_limits(PlanTier.STARTER)


def test_trial_never_downgrades_a_higher_billed_tier() -> None:
    plan = resolve_plan(
        _subscription(plan_tier="business", trial_ends_at=NOW + timedelta(days=3)),
        now=NOW,
    )

    assert plan.is_trialing is True
    assert plan.effective_tier == PlanTier.BUSINESS


def test_trial_tier_override_is_honoured() -> None:
    plan = resolve_plan(
        _subscription(trial_ends_at=NOW + timedelta(days=3), trial_tier=PlanTier.BUSINESS),
        now=NOW,
    )

    assert plan.effective_tier == PlanTier.BUSINESS
    assert plan.limits.custom_domains is True


def test_naive_trial_end_is_treated_as_utc() -> None:
    naive_end = (NOW + timedelta(days=1)).replace(tzinfo=None)

    plan = resolve_plan(_subscription(trial_ends_at=naive_end), now=NOW)

    assert plan.is_trialing is True
    assert plan.trial_ends_at.tzinfo is not None


@pytest.mark.parametrize("raw_tier", ["platinum", None, ""])
def test_unknown_tier_resolves_to_free_without_raising(raw_tier) -> None:
    plan = resolve_plan(_subscription(plan_tier=raw_tier), now=NOW)

    assert plan.tier == PlanTier.FREE
    assert plan.effective_tier == PlanTier.FREE
    assert plan.limits == get_limits(PlanTier.FREE)


def test_unknown_tier_is_logged(caplog) -> None:
    with caplog.at_level("WARNING", logger="plans"):
        resolve_plan(_subscription(plan_tier="platinum"), now=NOW)

    assert "platinum" in caplog.text


def test_cancellation_flag_does_not_change_resolution() -> None:
    plan = resolve_plan(
        _subscription(plan_tier="pro", cancel_at_period_end=True),
        now=NOW,
    )

    assert plan.effective_tier == PlanTier.PRO


def test_response_body_uses_wire_keys() -> None:
    trial_end = NOW + timedelta(days=5)
    plan = resolve_plan(_subscription(trial_ends_at=trial_end), now=NOW)

    body = plan.to_response()

    assert body["tier"] == "free"
    assert body["effectiveTier"] == "pro"
    assert body["isTrialing"] is True
    assert body["trialEndsAt"] == trial_end.isoformat()
    assert body["trialDaysRemaining"] == 5
    assert body["limits"]["activeProposals"] == -1
