"""Application wiring for plan resolution, feature checks and onboarding."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional, Protocol

from ..feature_gates import Feature, FeatureAccessResult, check_feature_access
from ..onboarding import OnboardingStatus, evaluate_onboarding
from ..organizations.models import Organization
from ..organizations.repository import PostgresOrganizationRepository
from ..plans import EffectivePlan, SubscriptionState, resolve_plan

logger = logging.getLogger("plans")


class OrganizationRepository(Protocol):
    """Data access required by the plan service."""

    def get_organization(self, organization_id: str) -> Optional[Organization]:
        ...

    def get_subscription_state(self, organization_id: str) -> Optional[SubscriptionState]:
        ...

    def find_membership_organization(self, user_id: str) -> Optional[str]:
        ...

    def count_tours(self, organization_id: str) -> int:
        ...

    def count_active_proposals(self, organization_id: str) -> int:
        ...

    def count_non_admin_members(self, organization_id: str) -> int:
        ...

    def count_pending_invitations(self, organization_id: str) -> int:
        ...

    def mark_onboarding_complete(self, organization_id: str) -> bool:
        ...


def _current_time(clock: Optional[Callable[[], datetime]]) -> datetime:
    if clock is None:
        return datetime.now(timezone.utc)
    value = clock()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class PlanService:
    """Loads organization state and hands it to the pure plan logic."""

    repository: OrganizationRepository
    clock: Optional[Callable[[], datetime]] = None

    def resolve_organization_id(self, user_id: str, active_organization_id: Optional[str] = None) -> str:
        """Return the caller's organization, preferring the session's active one.

        Raises ``LookupError`` when the user belongs to no organization.
        """

        if active_organization_id:
            return active_organization_id
        organization_id = self.repository.find_membership_organization(user_id)
        if not organization_id:
            raise LookupError("No organization found")
        return organization_id

    def get_org_plan(self, organization_id: str) -> Optional[EffectivePlan]:
        subscription = self.repository.get_subscription_state(organization_id)
        if subscription is None:
            return None
        plan = resolve_plan(subscription, now=_current_time(self.clock))
        logger.debug(
            "Resolved plan organization=%s tier=%s effective=%s trialing=%s",
            organization_id,
            plan.tier.value,
            plan.effective_tier.value,
            plan.is_trialing,
        )
        return plan

    def current_usage(
        self,
        organization_id: str,
        feature: Feature,
        *,
        current_count: Optional[int] = None,
    ) -> Optional[int]:
        """Live count backing a count-based feature, ``None`` for flag features.

        ``current_count`` replaces the stored proposal or member count. Pending
        invitations always reserve a team seat on top of it.
        """

        if feature is Feature.ACTIVE_PROPOSALS:
            if current_count is not None:
                return current_count
            return self.repository.count_active_proposals(organization_id)
        if feature is Feature.TEAM_MEMBERS:
            members = current_count
            if members is None:
                members = self.repository.count_non_admin_members(organization_id)
            return members + self.repository.count_pending_invitations(organization_id)
        return current_count

    def check_feature_access(
        self,
        organization_id: str,
        feature: object,
        *,
        current_count: Optional[int] = None,
    ) -> FeatureAccessResult:
        """Check ``feature`` against live usage.

        Raises ``LookupError`` when the organization does not exist.
        """

        plan = self.get_org_plan(organization_id)
        if plan is None:
            raise LookupError("Organization not found")
        parsed = Feature.parse(feature)
        if parsed is None:
            return check_feature_access(plan, feature)

        usage = self.current_usage(organization_id, parsed, current_count=current_count)
        result = check_feature_access(plan, parsed, current_count=usage)
        if not result.allowed:
            logger.info(
                "Feature denied organization=%s feature=%s tier=%s usage=%s",
                organization_id,
                parsed.value,
                plan.effective_tier.value,
                usage,
            )
        return result

    def get_onboarding_status(self, organization_id: str) -> OnboardingStatus:
        organization = self.repository.get_organization(organization_id)
        if organization is None:
            raise LookupError("Organization not found")
        tours_count = self.repository.count_tours(organization_id)
        return evaluate_onboarding(organization, tours_count)

    def mark_onboarding_complete(self, organization_id: str) -> None:
        if not self.repository.mark_onboarding_complete(organization_id):
            raise LookupError("Organization not found")
        logger.info("Onboarding marked complete organization=%s", organization_id)


@lru_cache(maxsize=1)
def get_plan_service() -> PlanService:
    return PlanService(repository=PostgresOrganizationRepository())


__all__ = ["OrganizationRepository", "PlanService", "get_plan_service"]
