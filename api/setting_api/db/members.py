"""Database operations for members."""

import logging
from typing import Optional, List, Tuple

import asyncpg

from ..models.members import Member, MemberCreate, MemberUpdate, MemberListQuery
from ..pagination import (
    KeysetPaginator, KeysetQueryBuilder, ListPage, PostgresPageSource,
    all_of, eq, render_sql, offset_window
)
from ..errors.exceptions import ConflictError, InternalServerError


logger = logging.getLogger(__name__)

MEMBER_COLUMNS = (
    "id", "user_id", "name", "username", "gender", "birthdate", "address",
    "phone", "photo", "active", "created_by", "updated_by", "created_at", "updated_at",
)
SEARCH_FIELDS = ("name", "username", "phone")

_SELECT = ", ".join(MEMBER_COLUMNS)


class MemberRepository:
    """Member persistence over an injected asyncpg pool."""

    def __init__(self, pool):
        self.pool = pool
        self.builder = KeysetQueryBuilder(sort_key="name", tie_break="id", search_fields=SEARCH_FIELDS)
        self.paginator = KeysetPaginator(
            PostgresPageSource(pool, "members", MEMBER_COLUMNS),
            self.builder,
        )

    async def find_by_id(self, member_id: int) -> Optional[Member]:
        """Get a member by ID, or None."""
        return await self._find_one("id", member_id)

    async def find_by_username(self, username: str) -> Optional[Member]:
        """Get a member by username, or None."""
        return await self._find_one("username", username)

    async def find_by_user_id(self, user_id: int) -> Optional[Member]:
        """Get a member by linked user ID, or None."""
        return await self._find_one("user_id", user_id)

    async def _find_one(self, column: str, value) -> Optional[Member]:
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_SELECT} FROM members WHERE {column} = $1",
                    value
                )
        except asyncpg.PostgresError as e:
            logger.error(f"Database error retrieving member by {column}: {e}")
            raise InternalServerError(f"Database error: {e}")

        return Member.model_validate(dict(row)) if row else None

    async def find_all(self, query: MemberListQuery) -> Tuple[List[Member], int]:
        """List members with offset pagination, search, filter and ordering.

        ``id DESC`` is always the last ordering column so pages are stable
        when the primary ordering has ties.

        Args:
            query: Validated list query

        Returns:
            Tuple of (members, total_matching)

        Raises:
            InternalServerError: If database operation fails
        """
        take, skip = offset_window(query.page, query.limit)

        active_filter = None
        if query.active and query.active != "all":
            active_filter = eq("active", query.active == "active")

        predicate = all_of(self.builder.search_predicate(query.search), active_filter)
        where_clause, params = render_sql(predicate)

        order_by = []
        if query.order_field and query.order_dir:
            order_by.append(f"{query.order_field} {query.order_dir.upper()}")
        order_by.append("id DESC")

        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                        SELECT {_SELECT}
                        FROM members
                        WHERE {where_clause}
                        ORDER BY {', '.join(order_by)}
                        LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}
                    """,
                    *params, take, skip
                )
                total = await conn.fetchval(
                    f"SELECT COUNT(*) FROM members WHERE {where_clause}",
                    *params
                )
        except asyncpg.PostgresError as e:
            logger.error(f"Database error listing members: {e}")
            raise InternalServerError(f"Database error: {e}")

        members = [Member.model_validate(dict(row)) for row in rows]
        logger.debug(f"Listed {len(members)} of {total} members")
        return members, total or 0

    async def load_more(
        self,
        limit: int,
        cursor: Optional[int] = None,
        search: Optional[str] = None
    ) -> ListPage:
        """Load members after ``cursor`` in ``name ASC, id DESC`` order.

        Args:
            limit: Page size
            cursor: ID of the last member already shown
            search: Optional filter on name, username or phone

        Returns:
            ListPage whose data are Member models

        Raises:
            InternalServerError: If database operation fails
        """
        try:
            page = await self.paginator.fetch_page(limit=limit, cursor=cursor, search=search)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error loading more members: {e}")
            raise InternalServerError(f"Database error: {e}")

        page.data = [Member.model_validate(row) for row in page.data]
        return page

    async def create(self, data: MemberCreate, created_by: int = 0) -> Member:
        """Insert a member.

        Raises:
            ConflictError: If username or user_id is already taken
            InternalServerError: If database operation fails
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                        INSERT INTO members (
                            user_id, name, username, gender, birthdate, address,
                            phone, photo, active, created_by, updated_by
                        )
                        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, NULL)
                        RETURNING {_SELECT}
                    """,
                    data.user_id,
                    data.name,
                    data.username,
                    data.gender.value,
                    data.birthdate,
                    data.address,
                    data.phone,
                    data.photo,
                    data.active,
                    created_by
                )
        except asyncpg.UniqueViolationError as e:
            logger.warning(f"Unique constraint violation creating member: {e}")
            raise ConflictError("Username or user is already registered as a member")
        except asyncpg.PostgresError as e:
            logger.error(f"Database error creating member: {e}")
            raise InternalServerError(f"Database error: {e}")

        member = Member.model_validate(dict(row))
        logger.info(f"Created member {member.id}")
        return member

    async def update(
        self,
        member_id: int,
        data: MemberUpdate,
        photo: Optional[str],
        updated_by: int = 0
    ) -> Optional[Member]:
        """Update a member; ``active`` is left unchanged when not given.

        Returns:
            Updated member, or None if it does not exist
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                        UPDATE members
                        SET user_id = $2, name = $3, username = $4, gender = $5,
                            birthdate = $6, address = $7, phone = $8, photo = $9,
                            active = COALESCE($10, active), updated_by = $11,
                            updated_at = now()
                        WHERE id = $1
                        RETURNING {_SELECT}
                    """,
                    member_id,
                    data.user_id,
                    data.name,
                    data.username,
                    data.gender.value,
                    data.birthdate,
                    data.address,
                    data.phone,
                    photo,
                    data.active,
                    updated_by
                )
        except asyncpg.UniqueViolationError as e:
            logger.warning(f"Unique constraint violation updating member {member_id}: {e}")
            raise ConflictError("Username or user is already registered as a member")
        except asyncpg.PostgresError as e:
            logger.error(f"Database error updating member: {e}")
            raise InternalServerError(f"Database error: {e}")

        if not row:
            return None

        logger.info(f"Updated member {member_id}")
        return Member.model_validate(dict(row))

    async def delete(self, member_id: int) -> bool:
        """Delete a member.

        Returns:
            True if a row was deleted
        """
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute("DELETE FROM members WHERE id = $1", member_id)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error deleting member: {e}")
            raise InternalServerError(f"Database error: {e}")

        deleted = result.split()[-1] == "1"  # "DELETE 1" means one row deleted
        if deleted:
            logger.info(f"Deleted member {member_id}")
        return deleted
