"""Domain models for subscription tiers and resolved plans."""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlanTier(str, Enum):
    """Canonical identifiers for subscription tiers."""

    FREE = "free"
    STARTER = "starter"
    PRO = "pro"
    BUSINESS = "business"

    @classmethod
    def parse(cls, value: object) -> Optional["PlanTier"]:
        """Return the tier for ``value`` or ``None`` when it is not recognized."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


TIER_ORDER: tuple[PlanTier, ...] = (
    PlanTier.FREE,
    PlanTier.STARTER,
    PlanTier.PRO,
    PlanTier.BUSINESS,
)

UNLIMITED = -1

# Python attribute name -> wire key
_LIMIT_WIRE_KEYS: Dict[str, str] = {
    "active_proposals": "activeProposals",
    "team_members": "teamMembers",
    "upload_images": "uploadImages",
    "all_themes": "allThemes",
    "no_watermark": "noWatermark",
    "pdf_export": "pdfExport",
    "comments": "comments",
    "custom_domains": "customDomains",
}


@dataclass(frozen=True)
class TierLimits:
    """Numeric and boolean limits granted by a tier.

    ``active_proposals`` and ``team_members`` use ``-1`` for unlimited;
    ``team_members == 0`` means team invitations are disabled entirely.
    """

    active_proposals: int
    team_members: int
    upload_images: bool
    all_themes: bool
    no_watermark: bool
    pdf_export: bool
    comments: bool
    custom_domains: bool

    def to_dict(self) -> Dict[str, int | bool]:
        """Serialize limits using the camelCase keys exposed to clients."""

        return {_LIMIT_WIRE_KEYS[field.name]: getattr(self, field.name) for field in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "TierLimits":
        """Build limits from a wire payload; missing keys raise ``KeyError``."""

        values = {name: data[wire_key] for name, wire_key in _LIMIT_WIRE_KEYS.items()}
        return cls(
            active_proposals=int(values["active_proposals"]),
            team_members=int(values["team_members"]),
            upload_images=bool(values["upload_images"]),
            all_themes=bool(values["all_themes"]),
            no_watermark=bool(values["no_watermark"]),
            pdf_export=bool(values["pdf_export"]),
            comments=bool(values["comments"]),
            custom_domains=bool(values["custom_domains"]),
        )


class SubscriptionState(BaseModel):
    """Persisted subscription fields of an organization, as read from storage."""

    organization_id: str
    plan_tier: Optional[str] = Field(
        default=None,
        description="Billed tier exactly as stored; unknown values resolve to free.",
    )
    trial_ends_at: Optional[datetime] = None
    trial_tier: Optional[PlanTier] = Field(
        default=None,
        description="Tier promised by the trial. Defaults to the catalog trial tier.",
    )
    cancel_at_period_end: bool = False
    grace_period_expires_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class EffectivePlan(BaseModel):
    """Plan state derived for a single request. Never persisted."""

    tier: PlanTier
    effective_tier: PlanTier
    is_trialing: bool
    trial_ends_at: Optional[datetime] = None
    trial_days_remaining: Optional[int] = None
    limits: TierLimits

    model_config = ConfigDict(frozen=True)

    def to_response(self) -> Dict[str, object]:
        """Represent the plan as the JSON body of the plan status endpoint."""

        return {
            "tier": self.tier.value,
            "effectiveTier": self.effective_tier.value,
            "isTrialing": self.is_trialing,
            "trialEndsAt": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            "trialDaysRemaining": self.trial_days_remaining,
            "limits": self.limits.to_dict(),
        }
