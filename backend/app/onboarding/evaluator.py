"""Onboarding completion checks for an organization."""
from __future__ import annotations

from typing import Any, Optional

from .models import OnboardingStatus, OnboardingStep, OnboardingSteps, ToursStep

MAX_ORGANIZATION_NAME_LENGTH = 255
TOTAL_STEPS = 3

# Signup generates "<first name>'s Agency", or "User's Agency" without a name.
_DEFAULT_NAME_SUFFIX = "'s agency"
_FALLBACK_NAME = "user's agency"


def _field(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def is_default_organization_name(name: Optional[str]) -> bool:
    """Return whether ``name`` looks auto-generated rather than user-chosen.

    Empty names and names longer than 255 characters count as default; the
    length check runs before any pattern test.
    """

    if not name or len(name) > MAX_ORGANIZATION_NAME_LENGTH:
        return True
    lower_name = name.lower()
    return lower_name.endswith(_DEFAULT_NAME_SUFFIX) or lower_name == _FALLBACK_NAME


def _tours_label(tours_count: int) -> str:
    return f"{tours_count} tour{'' if tours_count == 1 else 's'}"


def evaluate_onboarding(organization: Any, tours_count: int) -> OnboardingStatus:
    """Compute which setup steps ``organization`` has completed.

    ``organization`` may be ``None``, a mapping or any object exposing ``name``
    and ``notification_email``. Absent values leave their step incomplete.
    """

    name = _text(_field(organization, "name"))
    notification_email = _text(_field(organization, "notification_email"))
    count = tours_count if isinstance(tours_count, int) and tours_count > 0 else 0

    has_tours = count > 0
    steps = OnboardingSteps(
        organization_name=OnboardingStep(
            complete=name is not None and not is_default_organization_name(name),
            current=name,
        ),
        notification_email=OnboardingStep(
            complete=notification_email is not None,
            current=notification_email,
        ),
        has_tours=ToursStep(
            complete=has_tours,
            current=_tours_label(count) if has_tours else None,
            count=count,
        ),
    )

    completed_count = sum(
        1
        for step in (steps.organization_name, steps.notification_email, steps.has_tours)
        if step.complete
    )
    return OnboardingStatus(
        is_complete=completed_count == TOTAL_STEPS,
        completed_count=completed_count,
        total_steps=TOTAL_STEPS,
        steps=steps,
    )
