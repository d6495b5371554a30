"""Typed representations of organizations and their memberships."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..plans import SubscriptionState


class MembershipRole(str, Enum):
    """Roles a user can hold within an organization."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Organization(BaseModel):
    """Persistent organization record carrying its subscription fields."""

    id: str
    name: str
    slug: Optional[str] = None
    notification_email: Optional[str] = None
    plan_tier: Optional[str] = Field(
        default="free",
        description="Billed tier as written by the billing webhooks.",
    )
    trial_ends_at: Optional[datetime] = None
    cancel_at_period_end: bool = False
    grace_period_expires_at: Optional[datetime] = None
    onboarding_completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def subscription_state(self) -> SubscriptionState:
        """Project the billing columns into the resolver's input."""

        return SubscriptionState(
            organization_id=self.id,
            plan_tier=self.plan_tier,
            trial_ends_at=self.trial_ends_at,
            cancel_at_period_end=self.cancel_at_period_end,
            grace_period_expires_at=self.grace_period_expires_at,
        )
