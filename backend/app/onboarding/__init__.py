"""Onboarding progress evaluation."""
from .evaluator import (
    MAX_ORGANIZATION_NAME_LENGTH,
    TOTAL_STEPS,
    evaluate_onboarding,
    is_default_organization_name,
)
from .models import OnboardingStatus, OnboardingStep, OnboardingSteps, ToursStep

__all__ = [
    "MAX_ORGANIZATION_NAME_LENGTH",
    "TOTAL_STEPS",
    "OnboardingStatus",
    "OnboardingStep",
    "OnboardingSteps",
    "ToursStep",
    "evaluate_onboarding",
    "is_default_organization_name",
]
