"""Pydantic models for members."""

import re
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Any

from pydantic import BaseModel, Field, ConfigDict, field_validator


USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

ORDER_FIELDS = (
    "id", "name", "username", "gender", "birthdate", "address",
    "phone", "active", "created_at", "updated_at",
)


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


def _coerce_active(value: Any) -> Any:
    """Accept booleans, 1/0 and "true"/"false"/"1"/"0"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError("Active must be true or false")
    if isinstance(value, str):
        if value in ("true", "1"):
            return True
        if value in ("false", "0"):
            return False
        raise ValueError("Active must be true or false")
    return value


class MemberBase(BaseModel):
    """Fields shared by member create and update payloads."""

    user_id: Optional[int] = Field(default=None, description="Linked user ID in the identity service")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    username: str = Field(..., min_length=3, max_length=255, description="Unique username")
    gender: Gender = Field(..., description="Male or Female")
    birthdate: date = Field(..., description="Date of birth, not in the future")
    address: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., min_length=1, max_length=20)
    photo: Optional[str] = Field(default=None, description="Photo URL")

    @field_validator("user_id", mode="before")
    @classmethod
    def normalize_user_id(cls, v):
        if v in (None, "", 0, "0", "null"):
            return None
        return v

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, underscores, and hyphens")
        return v

    @field_validator("gender", mode="before")
    @classmethod
    def validate_gender(cls, v):
        if v not in ("Male", "Female", Gender.MALE, Gender.FEMALE):
            raise ValueError("Gender must be either Male or Female")
        return v

    @field_validator("birthdate", mode="before")
    @classmethod
    def parse_birthdate(cls, v):
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("Birthdate is required")
            value = v.strip()
            try:
                if len(value) == 10:
                    return date.fromisoformat(value)
                # Full ISO timestamps from JS clients, e.g. 1990-01-01T00:00:00.000Z
                if value[10:11] in ("T", " "):
                    if value.endswith("Z"):
                        value = value[:-1] + "+00:00"
                    return datetime.fromisoformat(value).date()
            except ValueError:
                pass
            raise ValueError("Birthdate must be a valid date")
        return v

    @field_validator("birthdate")
    @classmethod
    def validate_birthdate(cls, v):
        if v > date.today():
            raise ValueError("Birthdate must be before today")
        return v

    @field_validator("photo", mode="before")
    @classmethod
    def normalize_photo(cls, v):
        if v in ("", "null"):
            return None
        return v


class MemberCreate(MemberBase):
    """Model for creating a new member."""

    active: bool = Field(..., description="Whether the member is active")

    @field_validator("active", mode="before")
    @classmethod
    def coerce_active(cls, v):
        return _coerce_active(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": 12,
                "name": "Budi Santoso",
                "username": "budi_s",
                "gender": "Male",
                "birthdate": "1990-01-01",
                "address": "Jl. Merdeka 1",
                "phone": "081234567890",
                "active": True
            }
        }
    )


class MemberUpdate(MemberBase):
    """Model for updating a member.

    ``status_file`` controls the photo: "0" keeps the stored photo, "1"
    replaces it with ``photo`` (which may be null to remove it).
    """

    active: Optional[bool] = Field(default=None)
    status_file: str = Field(..., description="'0' keeps the photo, '1' replaces it")

    @field_validator("active", mode="before")
    @classmethod
    def coerce_active(cls, v):
        if v is None:
            return None
        return _coerce_active(v)

    @field_validator("status_file", mode="before")
    @classmethod
    def validate_status_file(cls, v):
        v = str(v) if isinstance(v, int) and not isinstance(v, bool) else v
        if v not in ("0", "1"):
            raise ValueError("status_file must be either 0 or 1")
        return v


class Member(BaseModel):
    """Complete member model as stored."""

    id: int
    user_id: Optional[int] = None
    name: str
    username: str
    gender: str
    birthdate: date
    address: str
    phone: str
    photo: Optional[str] = None
    active: bool
    created_by: int
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberListQuery(BaseModel):
    """Validated query for the offset-paginated member list."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    search: Optional[str] = None
    order_field: Optional[str] = None
    order_dir: Optional[str] = None
    active: Optional[str] = None

    @field_validator("search", mode="before")
    @classmethod
    def trim_search(cls, v):
        if v is None:
            return None
        return v.strip() or None

    @field_validator("order_field")
    @classmethod
    def validate_order_field(cls, v):
        if v is not None and v not in ORDER_FIELDS:
            raise ValueError(f"Order field must be one of: {', '.join(ORDER_FIELDS)}")
        return v

    @field_validator("order_dir")
    @classmethod
    def validate_order_dir(cls, v):
        if v is not None and v not in ("asc", "desc"):
            raise ValueError("Order direction must be either asc or desc")
        return v

    @field_validator("active")
    @classmethod
    def validate_active(cls, v):
        if v is not None and v not in ("active", "inactive", "all"):
            raise ValueError("Active filter must be one of: active, inactive, all")
        return v


class OffsetPagination(BaseModel):
    """Pagination block of offset list responses."""

    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    total_items: int = Field(alias="totalItems")
    items_per_page: int = Field(alias="itemsPerPage")

    model_config = ConfigDict(populate_by_name=True)


class LoadMoreMeta(BaseModel):
    """Meta block of load-more responses."""

    next_cursor: Optional[int] = Field(default=None, alias="nextCursor")
    has_more: bool = Field(alias="hasMore")
    limit: int

    model_config = ConfigDict(populate_by_name=True)


class MemberResponse(BaseModel):
    """Envelope for a single member."""

    success: bool = True
    data: Member
    message: str


class MemberListResponse(BaseModel):
    """Envelope for the offset-paginated member list."""

    success: bool = True
    data: List[Member]
    pagination: OffsetPagination
    message: str = "Members retrieved successfully"


class MemberLoadMoreResponse(BaseModel):
    """Envelope for the keyset load-more list."""

    success: bool = True
    data: List[Member]
    meta: LoadMoreMeta
    message: str = "Members retrieved successfully"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": [],
                "meta": {"nextCursor": 42, "hasMore": True, "limit": 10},
                "message": "Members retrieved successfully"
            }
        }
    )


class MessageResponse(BaseModel):
    """Envelope without data."""

    success: bool = True
    message: str
