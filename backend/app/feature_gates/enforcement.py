"""Helpers for enforcing plan features on API and service layers."""
from __future__ import annotations

from typing import Optional

from ..plans import EffectivePlan
from .access import FeatureAccessResult, check_feature_access
from .exceptions import FeatureGateError


def require_feature(
    plan: Optional[EffectivePlan],
    feature: object,
    *,
    current_count: Optional[int] = None,
    error_code: str = "plan_upgrade_required",
) -> FeatureAccessResult:
    """Ensure ``plan`` allows ``feature`` before proceeding.

    Parameters
    ----------
    plan:
        The resolved plan of the acting organization. ``None`` is denied.
    feature:
        A :class:`~backend.app.feature_gates.access.Feature` or its wire key.
    current_count:
        Live usage for count-based features such as ``activeProposals``.
    error_code:
        Error code surfaced to API callers when access is denied.
    """

    result = check_feature_access(plan, feature, current_count=current_count)
    if not result.allowed:
        raise FeatureGateError(
            code=error_code,
            message=result.reason or "This feature is not available on your plan.",
            feature=str(getattr(feature, "value", feature)),
            upgrade_to_tier=result.upgrade_to_tier,
        )
    return result
