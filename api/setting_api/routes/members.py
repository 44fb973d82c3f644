"""Members API endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Path, Query
from asyncpg import Pool

from ..config import Settings
from ..dependencies import get_app_settings
from ..db.connection import get_db_pool
from ..db.members import MemberRepository
from ..errors.exceptions import BadRequestError, NotFoundError
from ..models.members import (
    Member, MemberCreate, MemberUpdate, MemberListQuery,
    MemberResponse, MemberListResponse, MemberLoadMoreResponse,
    MessageResponse, OffsetPagination, LoadMoreMeta
)
from ..pagination import MAX_PAGE_LIMIT, total_pages


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/setting/members",
    tags=["Members"],
    responses={
        400: {"description": "Bad Request"},
        404: {"description": "Not Found"},
        429: {"description": "Too Many Requests"}
    }
)


def get_member_repository(pool: Annotated[Pool, Depends(get_db_pool)]) -> MemberRepository:
    """Build a MemberRepository for the request's pool."""
    return MemberRepository(pool)


Repository = Annotated[MemberRepository, Depends(get_member_repository)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
ActingUserId = Annotated[Optional[int], Header(alias="X-User-Id")]


async def _get_existing_member(repository: MemberRepository, member_id: int) -> Member:
    if member_id <= 0:
        raise BadRequestError("Invalid member ID")

    member = await repository.find_by_id(member_id)
    if not member:
        raise NotFoundError("Member not found")
    return member


async def _ensure_unique(
    repository: MemberRepository,
    username: str,
    user_id: Optional[int],
    existing: Optional[Member] = None
) -> None:
    """Reject usernames and user IDs held by another member."""
    if existing is None or username != existing.username:
        if await repository.find_by_username(username):
            raise BadRequestError("This username is already taken")

    if user_id and (existing is None or user_id != existing.user_id):
        if await repository.find_by_user_id(user_id):
            raise BadRequestError("This user is already registered as a member")


@router.get(
    "",
    response_model=MemberListResponse,
    summary="List members",
    description="List members with page-number pagination, search, filtering and ordering."
)
async def list_members(
    repository: Repository,
    settings: AppSettings,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[Optional[int], Query(ge=1, le=100)] = None,
    per_page: Annotated[Optional[int], Query(ge=1, le=100)] = None,
    search: Annotated[Optional[str], Query()] = None,
    order_field: Annotated[Optional[str], Query(alias="orderField")] = None,
    order_field_snake: Annotated[Optional[str], Query(alias="order_field")] = None,
    order_dir: Annotated[Optional[str], Query(alias="orderDir")] = None,
    order_dir_snake: Annotated[Optional[str], Query(alias="order_dir")] = None,
    active: Annotated[Optional[str], Query()] = None
) -> MemberListResponse:
    """List members with offset pagination.

    ``per_page`` takes precedence over ``limit``. The ordering parameters
    accept both camelCase and snake_case spellings.
    """
    query = MemberListQuery(
        page=page,
        limit=per_page or limit or settings.default_page_size,
        search=search,
        order_field=order_field or order_field_snake,
        order_dir=order_dir or order_dir_snake,
        active=active
    )

    members, total = await repository.find_all(query)

    logger.info(f"Retrieved {len(members)} members (page {query.page})")
    return MemberListResponse(
        data=members,
        pagination=OffsetPagination(
            current_page=query.page,
            total_pages=total_pages(total, query.limit),
            total_items=total,
            items_per_page=query.limit
        )
    )


@router.get(
    "/load-more",
    response_model=MemberLoadMoreResponse,
    summary="Load more members",
    description="Cursor-based pagination ordered by name ascending, then id descending."
)
async def load_more_members(
    repository: Repository,
    settings: AppSettings,
    limit: Annotated[Optional[int], Query(ge=1, le=MAX_PAGE_LIMIT, description="Members per page")] = None,
    cursor: Annotated[Optional[int], Query(description="nextCursor from the previous page")] = None,
    search: Annotated[Optional[str], Query(description="Filter on name, username or phone")] = None
) -> MemberLoadMoreResponse:
    """Load the next batch of members after ``cursor``.

    ``limit`` is only bounded by the 64-bit LIMIT range here, unlike the
    page-numbered list. ``nextCursor`` is null on the last page.
    """
    limit = limit or settings.default_load_more_size
    search = search.strip() if search else None

    page = await repository.load_more(limit=limit, cursor=cursor, search=search or None)

    logger.info(f"Loaded {len(page.data)} members after cursor {cursor}")
    return MemberLoadMoreResponse(
        data=page.data,
        meta=LoadMoreMeta(next_cursor=page.next_cursor, has_more=page.has_more, limit=limit)
    )


@router.get(
    "/{member_id}",
    response_model=MemberResponse,
    summary="Get a member"
)
async def get_member(
    member_id: Annotated[int, Path()],
    repository: Repository
) -> MemberResponse:
    """Get a member by ID."""
    member = await _get_existing_member(repository, member_id)
    return MemberResponse(data=member, message="Member retrieved successfully")


@router.post(
    "",
    response_model=MemberResponse,
    status_code=201,
    summary="Create a member"
)
async def create_member(
    member_data: MemberCreate,
    repository: Repository,
    x_user_id: ActingUserId = None
) -> MemberResponse:
    """Create a member after checking username and user ID uniqueness."""
    await _ensure_unique(repository, member_data.username, member_data.user_id)

    member = await repository.create(member_data, created_by=x_user_id or 0)

    logger.info(f"Successfully created member {member.id}")
    return MemberResponse(data=member, message="Member created successfully")


@router.put(
    "/{member_id}",
    response_model=MemberResponse,
    summary="Update a member"
)
async def update_member(
    member_id: Annotated[int, Path()],
    update_data: MemberUpdate,
    repository: Repository,
    x_user_id: ActingUserId = None
) -> MemberResponse:
    """Update a member.

    The stored photo is kept unless ``status_file`` is "1", in which case it
    is replaced by the payload's ``photo`` (null removes it).
    """
    existing = await _get_existing_member(repository, member_id)
    await _ensure_unique(repository, update_data.username, update_data.user_id, existing)

    photo = update_data.photo if update_data.status_file == "1" else existing.photo

    member = await repository.update(member_id, update_data, photo=photo, updated_by=x_user_id or 0)
    if not member:
        raise NotFoundError("Member not found")

    logger.info(f"Successfully updated member {member_id}")
    return MemberResponse(data=member, message="Member updated successfully")


@router.delete(
    "/{member_id}",
    response_model=MessageResponse,
    summary="Delete a member"
)
async def delete_member(
    member_id: Annotated[int, Path()],
    repository: Repository
) -> MessageResponse:
    """Delete a member."""
    await _get_existing_member(repository, member_id)

    deleted = await repository.delete(member_id)
    if not deleted:
        raise NotFoundError("Member not found")

    logger.info(f"Successfully deleted member {member_id}")
    return MessageResponse(message="Member deleted successfully")
