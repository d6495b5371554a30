"""Exceptions raised when a plan does not grant a feature."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status

from ..plans import PlanTier


@dataclass
class FeatureGateError(Exception):
    """A denied feature check, carrying the upgrade hint shown to the user."""

    code: str
    message: str
    feature: Optional[str] = None
    upgrade_to_tier: Optional[PlanTier] = None
    status_code: int = status.HTTP_403_FORBIDDEN
    detail: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def payload(self) -> Mapping[str, Any]:
        """JSON body for API responses."""

        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.feature:
            body["feature"] = self.feature
        if self.upgrade_to_tier is not None:
            body["upgradeToTier"] = self.upgrade_to_tier.value
        if self.detail:
            body.update(self.detail)
        return body

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=dict(self.payload))
