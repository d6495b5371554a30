"""In-process plan context backed by the plan status endpoint."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from ..feature_gates import can_access_limits
from ..plans import PlanTier, TierLimits
from ..schemas.plans import PlanStatusResponse

logger = logging.getLogger("plan_client")

PLAN_ENDPOINT = "/api/plan"


class PlanClient:
    """Holds the caller's plan and answers feature gates from it.

    ``load`` fetches the plan once (when a consumer mounts); ``refresh_plan``
    bypasses HTTP caches. Fetch failures are logged and leave the previous plan
    in place.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = http_client or httpx.Client(base_url=base_url, timeout=10.0)
        self._owns_client = http_client is None
        self._sleep = sleep
        self.plan: Optional[PlanStatusResponse] = None
        self.is_loading = True

    def __enter__(self) -> "PlanClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _fetch(self, *, bust_cache: bool = False) -> Optional[PlanStatusResponse]:
        headers = {"Cache-Control": "no-store"} if bust_cache else None
        try:
            response = self._client.get(PLAN_ENDPOINT, headers=headers)
            if response.is_success:
                self.plan = PlanStatusResponse.model_validate(response.json())
                return self.plan
            logger.warning("Plan request failed status=%s", response.status_code)
        except (httpx.HTTPError, ValueError, ValidationError):
            logger.exception("Failed to fetch plan")
        finally:
            self.is_loading = False
        return None

    def load(self) -> Optional[PlanStatusResponse]:
        return self._fetch()

    def refresh_plan(self) -> None:
        self._fetch(bust_cache=True)

    def can_access(self, feature: object) -> bool:
        if self.plan is None:
            return False
        try:
            limits = TierLimits.from_dict(self.plan.limits)
        except (KeyError, TypeError, ValueError):
            return False
        return can_access_limits(limits, feature)

    def wait_for_plan_update(self, *, max_attempts: int = 10, delay: float = 1.5) -> bool:
        """Poll until the billed tier differs from the current one.

        Used after checkout while the billing webhook lands. Returns whether a
        change was observed.
        """

        current_tier = self.plan.tier if self.plan else PlanTier.FREE
        for _ in range(max_attempts):
            self._sleep(delay)
            updated = self._fetch(bust_cache=True)
            if updated is not None and updated.tier != current_tier:
                return True
        return False
