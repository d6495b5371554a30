"""Convenience wrapper around a resolved plan for feature gating."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from ..plans import EffectivePlan, PlanTier
from .access import FeatureAccessResult, can_access, check_feature_access, is_theme_allowed
from .enforcement import require_feature
from .usage import UsageEvaluation, evaluate_usage


@dataclass(frozen=True)
class PlanContext:
    """Facade exposing gating-centric helpers for an organization's plan."""

    plan: EffectivePlan

    @property
    def tier(self) -> PlanTier:
        return self.plan.tier

    @property
    def effective_tier(self) -> PlanTier:
        return self.plan.effective_tier

    @property
    def limits(self) -> Dict[str, Union[int, bool]]:
        return self.plan.limits.to_dict()

    def has(self, feature: object) -> bool:
        return can_access(self.plan, feature)

    def check(self, feature: object, *, current_count: Optional[int] = None) -> FeatureAccessResult:
        return check_feature_access(self.plan, feature, current_count=current_count)

    def require(self, feature: object, *, current_count: Optional[int] = None) -> FeatureAccessResult:
        """Raise :class:`FeatureGateError` unless the feature is granted."""

        return require_feature(self.plan, feature, current_count=current_count)

    def allows_theme(self, theme: str) -> bool:
        return is_theme_allowed(self.plan, theme)

    def proposal_usage(self, active_proposals: int) -> UsageEvaluation:
        return evaluate_usage(limit=self.plan.limits.active_proposals, current_count=active_proposals)

    def remaining_proposals(self, active_proposals: int) -> Optional[int]:
        """Proposals that may still be created, ``None`` when unlimited."""

        return self.proposal_usage(active_proposals).remaining
