"""API schemas for onboarding endpoints."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class OnboardingCompleteResponse(BaseModel):
    success: bool

    model_config = ConfigDict(populate_by_name=True)
