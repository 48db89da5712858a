"""PostgreSQL user repository - read-only view of the identity tables."""

from psycopg import AsyncConnection

from quillgate.domain.entities import User


class PostgresUserRepository:
    """User lookup over app_user and user_role."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, user_id: str) -> User | None:
        """Get user with role memberships."""
        cur = await self._conn.execute(
            "SELECT u.id, u.user_name, u.email, u.is_active, u.is_locked, "
            "COALESCE(array_agg(ur.role_id) FILTER (WHERE ur.role_id IS NOT NULL), '{}') "
            "FROM app_user u LEFT JOIN user_role ur ON ur.user_id = u.id "
            "WHERE u.id = %s GROUP BY u.id",
            (user_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return User(
            id=r[0],
            user_name=r[1],
            email=r[2],
            is_active=r[3],
            is_locked=r[4],
            role_ids=list(r[5]),
        )
