"""API routes exposing onboarding progress."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..schemas.onboarding import OnboardingCompleteResponse
from ..services.plans import get_plan_service
from .errors import error_response, failure_response
from .plans import _get_session

logger = logging.getLogger("onboarding")

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])


@router.get("")
def get_onboarding_status(session=Depends(_get_session)) -> JSONResponse:
    if session is None:
        return error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    service = get_plan_service()
    try:
        organization_id = service.resolve_organization_id(
            session.user_id, session.active_organization_id
        )
        onboarding = service.get_onboarding_status(organization_id)
    except LookupError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))
    except Exception as exc:
        return failure_response(exc, logger=logger, event="onboarding_fetch_failed", user_id=session.user_id)

    return JSONResponse(content=onboarding.to_response())


@router.post("/complete")
def complete_onboarding(session=Depends(_get_session)) -> JSONResponse:
    if session is None:
        return error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    service = get_plan_service()
    try:
        organization_id = service.resolve_organization_id(
            session.user_id, session.active_organization_id
        )
        service.mark_onboarding_complete(organization_id)
    except LookupError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))
    except Exception as exc:
        return failure_response(exc, logger=logger, event="onboarding_complete_failed", user_id=session.user_id)

    return JSONResponse(content=OnboardingCompleteResponse(success=True).model_dump())
