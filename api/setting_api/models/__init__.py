"""Data models for the PTM BMUP Setting API."""

from .members import (
    Gender,
    Member,
    MemberBase,
    MemberCreate,
    MemberUpdate,
    MemberListQuery,
    OffsetPagination,
    LoadMoreMeta,
    MemberResponse,
    MemberListResponse,
    MemberLoadMoreResponse,
    MessageResponse,
    ORDER_FIELDS
)

__all__ = [
    "Gender",
    "Member",
    "MemberBase",
    "MemberCreate",
    "MemberUpdate",
    "MemberListQuery",
    "OffsetPagination",
    "LoadMoreMeta",
    "MemberResponse",
    "MemberListResponse",
    "MemberLoadMoreResponse",
    "MessageResponse",
    "ORDER_FIELDS"
]
