"""API routes exposing plan status, the plan catalog and feature checks."""
from __future__ import annotations

import logging
import os
from typing import Any, Optional

from fastapi import APIRouter, Cookie, Depends, status
from fastapi.responses import JSONResponse

from ..feature_gates import Feature
from ..plans import PLAN_CATALOG, TIER_ORDER
from ..schemas.plans import (
    FeatureAccessResponse,
    PlanCatalogEntry,
    PlanCatalogResponse,
    PlanStatusResponse,
)
from ..services.plans import get_plan_service
from .errors import error_response, failure_response

try:  # pragma: no cover - resolve context when imported from FastAPI app
    from backend import app_context
except ModuleNotFoundError as exc:  # pragma: no cover
    if exc.name != "backend":
        raise
    from ... import app_context  # type: ignore[no-redef]

logger = logging.getLogger("plans")

_SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")


def _get_session(
    session_token: Optional[str] = Cookie(None, alias=_SESSION_COOKIE_NAME),
) -> Optional[Any]:
    return app_context.get_optional_current_session(session_token=session_token)


router = APIRouter(prefix="/api", tags=["plans"])


@router.get("/plan")
def get_plan(session=Depends(_get_session)) -> JSONResponse:
    """Return the caller organization's effective plan."""

    if session is None:
        return error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    service = get_plan_service()
    try:
        organization_id = service.resolve_organization_id(
            session.user_id, session.active_organization_id
        )
    except LookupError:
        return error_response(status.HTTP_404_NOT_FOUND, "No organization found")
    except Exception as exc:
        return failure_response(exc, logger=logger, event="plan_fetch_failed", user_id=session.user_id)

    try:
        plan = service.get_org_plan(organization_id)
    except Exception as exc:
        return failure_response(
            exc,
            logger=logger,
            event="plan_fetch_failed",
            user_id=session.user_id,
            organization_id=organization_id,
        )
    if plan is None:
        return error_response(status.HTTP_404_NOT_FOUND, "Organization not found")

    body = PlanStatusResponse.from_plan(plan).model_dump(mode="json", by_alias=True)
    return JSONResponse(
        content=body,
        headers={"Cache-Control": app_context.get_config().plan_cache_control},
    )


@router.get("/plans", response_model=PlanCatalogResponse)
def list_plans() -> PlanCatalogResponse:
    """Public tier catalog for the pricing page."""

    return PlanCatalogResponse(
        plans=[PlanCatalogEntry.from_definition(PLAN_CATALOG[tier]) for tier in TIER_ORDER]
    )


@router.get("/plan/features/{feature}")
def check_feature(feature: str, session=Depends(_get_session)) -> JSONResponse:
    """Check a feature against live usage for the caller's organization."""

    if session is None:
        return error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    service = get_plan_service()
    try:
        organization_id = service.resolve_organization_id(
            session.user_id, session.active_organization_id
        )
        result = service.check_feature_access(organization_id, feature)
    except LookupError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))
    except Exception as exc:
        return failure_response(
            exc,
            logger=logger,
            event="feature_check_failed",
            user_id=session.user_id,
            feature=feature,
        )

    parsed = Feature.parse(feature)
    response = FeatureAccessResponse.from_result(parsed.value if parsed else feature, result)
    return JSONResponse(content=response.model_dump(mode="json", by_alias=True))
