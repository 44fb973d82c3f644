"""Pagination module for keyset and offset pagination."""

from .cursor import encode_cursor, decode_cursor
from .predicates import (
    Condition,
    AllOf,
    AnyOf,
    Predicate,
    eq,
    gt,
    lt,
    contains,
    all_of,
    any_of,
    render_sql
)
from .keyset import (
    MAX_PAGE_LIMIT,
    ListPage,
    KeysetQueryBuilder,
    KeysetPaginator,
    PageSource,
    PostgresPageSource,
    assemble_page
)
from .offset import offset_window, total_pages

__all__ = [
    "encode_cursor",
    "decode_cursor",
    "Condition",
    "AllOf",
    "AnyOf",
    "Predicate",
    "eq",
    "gt",
    "lt",
    "contains",
    "all_of",
    "any_of",
    "render_sql",
    "MAX_PAGE_LIMIT",
    "ListPage",
    "KeysetQueryBuilder",
    "KeysetPaginator",
    "PageSource",
    "PostgresPageSource",
    "assemble_page",
    "offset_window",
    "total_pages"
]
