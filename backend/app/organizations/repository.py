"""Persistence layer for organizations, memberships and usage counts.

Tables read: ``organizations`` (including the ``plan_tier``, ``trial_ends_at``,
``cancel_at_period_end``, ``grace_period_expires_at`` and
``onboarding_completed_at`` columns), ``member``, ``invitation``,
``proposals`` and ``tours``.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

import psycopg2.extras
from psycopg2.extensions import connection as PgConnection
from psycopg2.extensions import cursor as PgCursor

from ..plans import SubscriptionState
from .models import InvitationStatus, MembershipRole, Organization

try:  # pragma: no cover - resolve connection helper when imported from FastAPI app
    from backend.app_context import get_conn
except ModuleNotFoundError as exc:  # pragma: no cover
    if exc.name != "backend":
        raise
    from ...app_context import get_conn  # type: ignore[no-redef]


@contextmanager
def managed_connection(conn: Optional[PgConnection] = None) -> Iterator[Tuple[PgConnection, bool]]:
    """Context manager that manages transaction boundaries for optional connections."""

    if conn is not None:
        yield conn, False
        return

    connection = get_conn()
    try:
        yield connection, True
        connection.commit()
    except Exception:
        connection.rollback()
        raise
    finally:
        connection.close()


_ORGANIZATION_COLUMNS = """
    id::text AS id,
    name,
    slug,
    notification_email,
    plan_tier,
    trial_ends_at,
    COALESCE(cancel_at_period_end, FALSE) AS cancel_at_period_end,
    grace_period_expires_at,
    onboarding_completed_at,
    created_at,
    updated_at
"""


def _row_to_organization(row: dict) -> Organization:
    return Organization(
        id=str(row["id"]),
        name=row["name"],
        slug=row.get("slug"),
        notification_email=row.get("notification_email"),
        plan_tier=row.get("plan_tier"),
        trial_ends_at=row.get("trial_ends_at"),
        cancel_at_period_end=bool(row.get("cancel_at_period_end")),
        grace_period_expires_at=row.get("grace_period_expires_at"),
        onboarding_completed_at=row.get("onboarding_completed_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class PostgresOrganizationRepository:
    """Concrete repository reading organization state from PostgreSQL."""

    def __init__(self, *, conn: Optional[PgConnection] = None) -> None:
        self._conn = conn

    @contextmanager
    def _cursor(self) -> Iterator[PgCursor]:
        with managed_connection(self._conn) as (connection, _managed):
            cursor = connection.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
            try:
                yield cursor
            finally:
                cursor.close()

    def _count(self, query: str, params: tuple) -> int:
        with self._cursor() as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
            return int(row["count"]) if row else 0

    def get_organization(self, organization_id: str) -> Optional[Organization]:
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {_ORGANIZATION_COLUMNS}
                FROM organizations
                WHERE id::text = %s
                LIMIT 1
                """,
                (organization_id,),
            )
            row = cursor.fetchone()
            return _row_to_organization(row) if row else None

    def get_subscription_state(self, organization_id: str) -> Optional[SubscriptionState]:
        organization = self.get_organization(organization_id)
        return organization.subscription_state() if organization else None

    def find_membership_organization(self, user_id: str) -> Optional[str]:
        """Return the first organization the user belongs to, if any."""

        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT organization_id::text AS organization_id
                FROM member
                WHERE user_id = %s
                ORDER BY created_at ASC
                LIMIT 1
                """,
                (user_id,),
            )
            row = cursor.fetchone()
            return row["organization_id"] if row else None

    def count_tours(self, organization_id: str) -> int:
        return self._count(
            "SELECT COUNT(*)::int AS count FROM tours WHERE organization_id::text = %s",
            (organization_id,),
        )

    def count_active_proposals(self, organization_id: str) -> int:
        return self._count(
            "SELECT COUNT(*)::int AS count FROM proposals WHERE organization_id::text = %s",
            (organization_id,),
        )

    def count_non_admin_members(self, organization_id: str) -> int:
        return self._count(
            """
            SELECT COUNT(*)::int AS count
            FROM member
            WHERE organization_id::text = %s AND role = %s
            """,
            (organization_id, MembershipRole.MEMBER.value),
        )

    def count_pending_invitations(self, organization_id: str) -> int:
        return self._count(
            """
            SELECT COUNT(*)::int AS count
            FROM invitation
            WHERE organization_id::text = %s AND status = %s
            """,
            (organization_id, InvitationStatus.PENDING.value),
        )

    def mark_onboarding_complete(self, organization_id: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute(
                """
                UPDATE organizations
                SET onboarding_completed_at = NOW(), updated_at = NOW()
                WHERE id::text = %s
                """,
                (organization_id,),
            )
            return cursor.rowcount > 0


__all__ = ["PostgresOrganizationRepository", "managed_connection"]
