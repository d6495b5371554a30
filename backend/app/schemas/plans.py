"""API schemas for plan endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..feature_gates import FeatureAccessResult
from ..plans import EffectivePlan, PlanDefinition, PlanTier


class PlanStatusResponse(BaseModel):
    """Body of ``GET /api/plan``; also parsed by the in-process plan client."""

    tier: PlanTier
    effective_tier: PlanTier = Field(alias="effectiveTier")
    is_trialing: bool = Field(alias="isTrialing")
    trial_ends_at: Optional[datetime] = Field(alias="trialEndsAt", default=None)
    trial_days_remaining: Optional[int] = Field(alias="trialDaysRemaining", default=None)
    limits: Dict[str, int | bool]

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_plan(cls, plan: EffectivePlan) -> "PlanStatusResponse":
        return cls.model_validate(plan.to_response())


class PlanCatalogEntry(BaseModel):
    tier: PlanTier
    name: str
    price: int
    limits: Dict[str, int | bool]
    allowed_themes: List[str] = Field(alias="allowedThemes")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_definition(cls, definition: PlanDefinition) -> "PlanCatalogEntry":
        return cls(
            tier=definition.tier,
            name=definition.name,
            price=definition.price,
            limits=definition.limits.to_dict(),
            allowed_themes=list(definition.allowed_themes),
        )


class PlanCatalogResponse(BaseModel):
    plans: List[PlanCatalogEntry]

    model_config = ConfigDict(populate_by_name=True)


class FeatureAccessResponse(BaseModel):
    feature: str
    allowed: bool
    reason: Optional[str] = None
    upgrade_to_tier: Optional[PlanTier] = Field(alias="upgradeToTier", default=None)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_result(cls, feature: str, result: FeatureAccessResult) -> "FeatureAccessResponse":
        return cls(
            feature=feature,
            allowed=result.allowed,
            reason=result.reason,
            upgrade_to_tier=result.upgrade_to_tier,
        )
