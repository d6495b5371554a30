"""Typed representations of onboarding progress."""
from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class OnboardingStep(BaseModel):
    """A single setup step and the value currently satisfying it, if any."""

    complete: bool
    current: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ToursStep(OnboardingStep):
    count: int = 0


class OnboardingSteps(BaseModel):
    organization_name: OnboardingStep = Field(alias="organizationName")
    notification_email: OnboardingStep = Field(alias="notificationEmail")
    has_tours: ToursStep = Field(alias="hasTours")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class OnboardingStatus(BaseModel):
    """Derived onboarding progress. Recomputed on every evaluation."""

    is_complete: bool = Field(alias="isComplete")
    completed_count: int = Field(alias="completedCount")
    total_steps: int = Field(alias="totalSteps")
    steps: OnboardingSteps

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_response(self) -> Dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
