"""PostgreSQL access grant repository implementation."""

import logging
from collections.abc import Mapping

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from opauthz.domain.entities import AccessGrant
from opauthz.domain.exceptions import InvalidGrant
from opauthz.domain.value_objects import OperationRole, PermissionSet

logger = logging.getLogger(__name__)

_COLUMNS = "user_id, operation_id, role, permissions, created_at"


def _row_to_grant(r: tuple) -> AccessGrant:
    try:
        role = OperationRole(r[2])
    except ValueError:
        raise InvalidGrant(f"Unknown role {r[2]!r} for {r[1]}/{r[0]}") from None
    raw_permissions = r[3]
    if raw_permissions is not None and not isinstance(raw_permissions, Mapping):
        logger.warning(
            "Malformed permissions blob, treating as empty",
            extra={"user_id": r[0], "operation_id": r[1]},
        )
    return AccessGrant(
        user_id=r[0],
        operation_id=r[1],
        role=role,
        permissions=PermissionSet.from_raw(raw_permissions),
        created_at=r[4],
    )


def _permissions_param(grant: AccessGrant) -> Jsonb | None:
    if grant.permissions is None:
        return None
    return Jsonb(grant.permissions.to_dict())


class PostgresAccessGrantRepository:
    """Access grant repository implementation over user_operation_access."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get(self, user_id: str, operation_id: str) -> AccessGrant | None:
        """Get grant for user on operation."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM user_operation_access "
            "WHERE user_id = %s AND operation_id = %s",
            (user_id, operation_id),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return _row_to_grant(r)

    async def list_by_operation(self, operation_id: str) -> list[AccessGrant]:
        """List grants on operation. Rows with an unknown role are skipped."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM user_operation_access WHERE operation_id = %s",
            (operation_id,),
        )
        rows = await cur.fetchall()
        grants = []
        for r in rows:
            try:
                grants.append(_row_to_grant(r))
            except InvalidGrant as e:
                logger.warning("Skipping invalid grant", extra={"reason": str(e)})
        return grants

    async def create(self, grant: AccessGrant) -> AccessGrant:
        """Create grant."""
        await self._conn.execute(
            f"INSERT INTO user_operation_access ({_COLUMNS}) VALUES (%s, %s, %s, %s, %s)",
            (
                grant.user_id,
                grant.operation_id,
                grant.role.value,
                _permissions_param(grant),
                grant.created_at,
            ),
        )
        return grant

    async def update(self, grant: AccessGrant) -> None:
        """Update role and permissions of grant."""
        await self._conn.execute(
            "UPDATE user_operation_access SET role=%s, permissions=%s "
            "WHERE user_id=%s AND operation_id=%s",
            (grant.role.value, _permissions_param(grant), grant.user_id, grant.operation_id),
        )

    async def delete(self, user_id: str, operation_id: str) -> None:
        """Delete grant."""
        await self._conn.execute(
            "DELETE FROM user_operation_access WHERE user_id = %s AND operation_id = %s",
            (user_id, operation_id),
        )
