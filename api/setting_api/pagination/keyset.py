"""Keyset ("load more") pagination over a non-unique sort key.

Rows are ordered by ``sort_key ASC, tie_break DESC``. The tie-break column
must be unique so the order is total. A page is fetched with ``limit + 1``
rows; the extra row only signals that more data exists and is never
returned.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from pydantic import BaseModel, Field

from .cursor import decode_cursor, encode_cursor, is_row_id
from .predicates import Predicate, all_of, any_of, contains, eq, gt, lt, render_sql


logger = logging.getLogger(__name__)

# LIMIT is bound as a PostgreSQL bigint and the fetch asks for one extra row
MAX_PAGE_LIMIT = 2**63 - 2


class ListPage(BaseModel):
    """One page of keyset results."""

    data: List[Any] = Field(description="Rows of this page, in sort order")
    next_cursor: Optional[int] = Field(default=None, description="Cursor for the next page")
    has_more: bool = Field(description="Whether rows exist beyond this page")


class KeysetQueryBuilder:
    """Builds search and "after cursor" predicates for one fixed ordering."""

    def __init__(
        self,
        sort_key: str,
        tie_break: str = "id",
        search_fields: Sequence[str] = (),
    ):
        self.sort_key = sort_key
        self.tie_break = tie_break
        self.search_fields = tuple(search_fields)

    @property
    def ordering(self) -> Tuple[Tuple[str, str], ...]:
        """Ordering as ``(field, direction)`` pairs."""
        return ((self.sort_key, "ASC"), (self.tie_break, "DESC"))

    def search_predicate(self, search: Optional[str]) -> Optional[Predicate]:
        """Match rows where any search field contains ``search``."""
        if not search or not self.search_fields:
            return None
        return any_of(*(contains(field, search) for field in self.search_fields))

    def after_predicate(self, anchor: Mapping[str, Any]) -> Predicate:
        """Select rows strictly after ``anchor`` in the ordering.

        ``(sort_key > a.sort_key) OR (sort_key = a.sort_key AND id < a.id)``
        """
        sort_value = anchor[self.sort_key]
        tie_value = anchor[self.tie_break]
        return any_of(
            gt(self.sort_key, sort_value),
            all_of(eq(self.sort_key, sort_value), lt(self.tie_break, tie_value)),
        )

    def build(
        self,
        search: Optional[str] = None,
        anchor: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Predicate]:
        """Combine the search and cursor predicates with AND."""
        return all_of(
            self.search_predicate(search),
            self.after_predicate(anchor) if anchor is not None else None,
        )


def assemble_page(rows: Sequence[Any], limit: int, tie_break: str = "id") -> ListPage:
    """Turn a ``limit + 1`` fetch into a page.

    Args:
        rows: Rows in sort order, at most ``limit + 1`` of them
        limit: Requested page size
        tie_break: Key holding the row id used as cursor

    Returns:
        ListPage with trimmed data. ``next_cursor`` is only set when
        ``has_more`` is true.

    Raises:
        ValueError: If limit is less than 1
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    has_more = len(rows) > limit
    page_rows = list(rows[:limit])

    next_cursor = None
    if has_more:
        last = page_rows[-1]
        next_cursor = encode_cursor(last[tie_break] if isinstance(last, Mapping) else getattr(last, tie_break))

    return ListPage(data=page_rows, next_cursor=next_cursor, has_more=has_more)


class PageSource(Protocol):
    """Storage access needed by the paginator."""

    async def fetch_anchor(self, row_id: int, fields: Sequence[str]) -> Optional[Mapping[str, Any]]:
        ...

    async def fetch_rows(
        self,
        predicate: Optional[Predicate],
        ordering: Sequence[Tuple[str, str]],
        limit: int,
    ) -> List[Mapping[str, Any]]:
        ...


class PostgresPageSource:
    """PageSource backed by an asyncpg pool and a single table."""

    def __init__(self, pool, table: str, columns: Sequence[str], id_column: str = "id"):
        self.pool = pool
        self.table = table
        self.columns = tuple(columns)
        self.id_column = id_column

    async def fetch_anchor(self, row_id: int, fields: Sequence[str]) -> Optional[Mapping[str, Any]]:
        query = f"SELECT {', '.join(fields)} FROM {self.table} WHERE {self.id_column} = $1"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, row_id)
        return dict(row) if row else None

    async def fetch_rows(
        self,
        predicate: Optional[Predicate],
        ordering: Sequence[Tuple[str, str]],
        limit: int,
    ) -> List[Mapping[str, Any]]:
        where_clause, params = render_sql(predicate)
        order_clause = ", ".join(f"{field} {direction}" for field, direction in ordering)
        query = f"""
            SELECT {', '.join(self.columns)}
            FROM {self.table}
            WHERE {where_clause}
            ORDER BY {order_clause}
            LIMIT ${len(params) + 1}
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *params, limit)
        return [dict(row) for row in rows]


class KeysetPaginator:
    """Fetches keyset pages from an injected PageSource.

    A cursor whose row no longer exists, or could never exist such as a
    negative id, yields an empty final page rather than restarting from the
    first page, so "load more" clients never see rows twice.
    """

    def __init__(self, source: PageSource, builder: KeysetQueryBuilder):
        self.source = source
        self.builder = builder

    async def fetch_page(
        self,
        limit: int,
        cursor: Any = None,
        search: Optional[str] = None,
    ) -> ListPage:
        """Fetch one page after ``cursor``.

        Args:
            limit: Page size, 1 to MAX_PAGE_LIMIT
            cursor: Row id returned as ``next_cursor`` by the previous page
            search: Optional case-insensitive substring filter

        Returns:
            The requested page
        """
        if not 1 <= limit <= MAX_PAGE_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")

        search = search.strip() if search else None
        row_id = decode_cursor(cursor)

        anchor: Optional[Dict[str, Any]] = None
        if row_id is not None:
            if is_row_id(row_id):
                anchor = await self.source.fetch_anchor(
                    row_id, (self.builder.sort_key, self.builder.tie_break)
                )
            if anchor is None:
                logger.warning(f"Cursor {row_id} matches no row; returning empty page")
                return ListPage(data=[], next_cursor=None, has_more=False)

        predicate = self.builder.build(search=search, anchor=anchor)
        rows = await self.source.fetch_rows(predicate, self.builder.ordering, limit + 1)

        page = assemble_page(rows, limit, self.builder.tie_break)
        logger.debug(
            f"Fetched keyset page: {len(page.data)} rows, has_more={page.has_more}, "
            f"next_cursor={page.next_cursor}"
        )
        return page
