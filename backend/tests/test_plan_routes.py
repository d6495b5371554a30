from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import psycopg2
import pytest
from fastapi.testclient import TestClient

import backend.main as backend_main
from backend.app.organizations.models import Organization
from backend.app.routes import onboarding as onboarding_routes
from backend.app.routes import plans as plan_routes
from backend.app.services.plans import PlanService
from backend.config import load_app_config

NOW = datetime(2026, 5, 4, 9, 30, tzinfo=timezone.utc)


class FakeRepository:
    def __init__(self) -> None:
        self.organizations: Dict[str, Organization] = {}
        self.memberships: Dict[str, str] = {}
        self.proposals: Dict[str, int] = {}
        self.completed: list[str] = []
        self.failure: Optional[Exception] = None

    def _maybe_fail(self) -> None:
        if self.failure is not None:
            raise self.failure

    def get_organization(self, organization_id):
        self._maybe_fail()
        return self.organizations.get(organization_id)

    def get_subscription_state(self, organization_id):
        self._maybe_fail()
        organization = self.organizations.get(organization_id)
        return organization.subscription_state() if organization else None

    def find_membership_organization(self, user_id):
        self._maybe_fail()
        return self.memberships.get(user_id)

    def count_tours(self, organization_id):
        return 0

    def count_active_proposals(self, organization_id):
        return self.proposals.get(organization_id, 0)

    def count_non_admin_members(self, organization_id):
        return 0

    def count_pending_invitations(self, organization_id):
        return 0

    def mark_onboarding_complete(self, organization_id):
        self._maybe_fail()
        if organization_id not in self.organizations:
            return False
        self.completed.append(organization_id)
        return True


@pytest.fixture
def repository() -> FakeRepository:
    repo = FakeRepository()
    repo.organizations["org-1"] = Organization(
        id="org-1",
        name="Acme Travel",
        plan_tier="free",
        trial_ends_at=NOW + timedelta(days=14),
    )
    repo.memberships["user-1"] = "org-1"
    return repo


@pytest.fixture
def client(monkeypatch, repository) -> TestClient:
    service = PlanService(repository=repository, clock=lambda: NOW)
    monkeypatch.setattr(plan_routes, "get_plan_service", lambda: service)
    monkeypatch.setattr(onboarding_routes, "get_plan_service", lambda: service)
    app = backend_main.create_app(load_app_config({"PLAN_CACHE_MAX_AGE": "60"}))
    return TestClient(app)


def _login(client: TestClient, user_id: str = "user-1", organization_id: Optional[str] = None) -> None:
    token = backend_main.create_access_token(subject=user_id, organization_id=organization_id)
    client.cookies.set("session", token)


def test_plan_requires_session(client) -> None:
    response = client.get("/api/plan")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_plan_with_invalid_cookie_is_unauthorized(client) -> None:
    client.cookies.set("session", "garbage")

    assert client.get("/api/plan").status_code == 401


def test_plan_returns_effective_plan_with_cache_headers(client) -> None:
    _login(client)

    response = client.get("/api/plan")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "private, max-age=60, stale-while-revalidate=30"
    body = response.json()
    assert body["tier"] == "free"
    assert body["effectiveTier"] == "pro"
    assert body["isTrialing"] is True
    assert body["trialDaysRemaining"] == 14
    assert body["limits"]["activeProposals"] == -1
    assert body["limits"]["pdfExport"] is True


def test_plan_uses_active_organization_from_session(client, repository) -> None:
    repository.organizations["org-2"] = Organization(id="org-2", name="Kudu Safaris", plan_tier="business")
    _login(client, organization_id="org-2")

    assert client.get("/api/plan").json()["effectiveTier"] == "business"


def test_plan_without_membership_is_not_found(client) -> None:
    _login(client, user_id="user-orphan")

    response = client.get("/api/plan")

    assert response.status_code == 404
    assert response.json() == {"error": "No organization found"}


def test_plan_for_missing_organization_is_not_found(client) -> None:
    _login(client, organization_id="org-deleted")

    response = client.get("/api/plan")

    assert response.status_code == 404
    assert response.json() == {"error": "Organization not found"}


def test_connection_failure_maps_to_service_unavailable(client, repository) -> None:
    repository.failure = psycopg2.OperationalError("could not connect to server: Connection refused")
    _login(client)

    response = client.get("/api/plan")

    assert response.status_code == 503
    assert response.json() == {"error": "Service temporarily unavailable"}


def test_unexpected_failure_maps_to_internal_error(client, repository, caplog) -> None:
    repository.failure = RuntimeError("boom")
    _login(client)

    with caplog.at_level("ERROR", logger="plans"):
        response = client.get("/api/plan")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "plan_fetch_failed" in caplog.text


def test_plan_catalog_is_public(client) -> None:
    response = client.get("/api/plans")

    assert response.status_code == 200
    plans = response.json()["plans"]
    assert [entry["tier"] for entry in plans] == ["free", "starter", "pro", "business"]
    assert plans[0]["limits"]["activeProposals"] == 2
    assert "allowedThemes" in plans[0]


def test_feature_check_uses_live_usage(client, repository) -> None:
    repository.organizations["org-1"] = Organization(id="org-1", name="Acme Travel", plan_tier="free")
    repository.proposals["org-1"] = 2
    _login(client)

    response = client.get("/api/plan/features/activeProposals")

    assert response.status_code == 200
    assert response.json() == {
        "feature": "activeProposals",
        "allowed": False,
        "reason": "You've reached the limit of 2 proposals on the Free plan",
        "upgradeToTier": "starter",
    }


def test_unknown_feature_check_is_denied(client) -> None:
    _login(client)

    body = client.get("/api/plan/features/teleportation").json()

    assert body["feature"] == "teleportation"
    assert body["allowed"] is False


def test_feature_check_for_missing_organization_is_not_found(client) -> None:
    _login(client, organization_id="org-deleted")

    response = client.get("/api/plan/features/comments")

    assert response.status_code == 404
    assert response.json() == {"error": "Organization not found"}


def test_feature_check_without_membership_is_not_found(client) -> None:
    _login(client, user_id="user-orphan")

    response = client.get("/api/plan/features/comments")

    assert response.status_code == 404
    assert response.json() == {"error": "No organization found"}


@pytest.mark.parametrize(
    ("failure", "status_code", "message"),
    [
        (psycopg2.OperationalError("server closed the connection unexpectedly"), 503, "Service temporarily unavailable"),
        (RuntimeError("boom"), 500, "Internal server error"),
    ],
    ids=["connection-lost", "unexpected"],
)
@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/api/plan/features/teamMembers"),
        ("GET", "/api/onboarding"),
        ("POST", "/api/onboarding/complete"),
    ],
)
def test_failures_map_to_error_status(client, repository, method, path, failure, status_code, message) -> None:
    repository.failure = failure
    _login(client)

    response = client.request(method, path)

    assert response.status_code == status_code
    assert response.json() == {"error": message}


def test_onboarding_status(client) -> None:
    _login(client)

    response = client.get("/api/onboarding")

    assert response.status_code == 200
    body = response.json()
    assert body["completedCount"] == 1
    assert body["isComplete"] is False
    assert body["steps"]["organizationName"] == {"complete": True, "current": "Acme Travel"}


def test_onboarding_requires_session(client) -> None:
    assert client.get("/api/onboarding").status_code == 401
    assert client.post("/api/onboarding/complete").status_code == 401


def test_complete_onboarding(client, repository) -> None:
    _login(client)

    response = client.post("/api/onboarding/complete")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert repository.completed == ["org-1"]


def test_complete_onboarding_for_missing_organization(client) -> None:
    _login(client, organization_id="org-deleted")

    response = client.post("/api/onboarding/complete")

    assert response.status_code == 404
    assert response.json() == {"error": "Organization not found"}
