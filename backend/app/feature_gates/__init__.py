"""Feature gating utilities evaluated against resolved plans."""
from .access import (
    FEATURE_DISPLAY_NAMES,
    Feature,
    FeatureAccessResult,
    can_access,
    can_access_limits,
    check_feature_access,
    get_upgrade_tier,
    is_theme_allowed,
)
from .context import PlanContext
from .enforcement import require_feature
from .exceptions import FeatureGateError
from .usage import UsageEvaluation, evaluate_usage, is_within_limit

__all__ = [
    "FEATURE_DISPLAY_NAMES",
    "Feature",
    "FeatureAccessResult",
    "FeatureGateError",
    "PlanContext",
    "UsageEvaluation",
    "can_access",
    "can_access_limits",
    "check_feature_access",
    "evaluate_usage",
    "get_upgrade_tier",
    "is_theme_allowed",
    "is_within_limit",
    "require_feature",
]
