"""Cursor codec for keyset pagination.

A cursor is the integer primary key of the last row of a page. It is passed
through the client unchanged and is only meaningful for the sort order that
produced it.
"""

from typing import Any, Optional

from ..errors.exceptions import BadRequestError


# Row ids are PostgreSQL ``integer`` serials
MAX_ROW_ID = 2**31 - 1


def encode_cursor(row_id: Any) -> Optional[int]:
    """Encode a row id as a cursor value.

    Args:
        row_id: Primary key of the last row of a page, or None

    Returns:
        Integer cursor, or None when there is no row
    """
    if row_id is None:
        return None
    return int(row_id)


def decode_cursor(cursor: Any) -> Optional[int]:
    """Decode a client-supplied cursor.

    Args:
        cursor: Raw cursor value (int or numeric string); None, "" and 0 mean
            "start from the beginning"

    Returns:
        The row id to resume after, or None. Any other integer is returned
        as is, even when no row can carry it.

    Raises:
        BadRequestError: If the cursor is not an integer
    """
    if cursor is None or cursor == "":
        return None

    if isinstance(cursor, bool):
        raise BadRequestError("cursor: Cursor must be an integer")

    try:
        value = int(str(cursor).strip())
    except (TypeError, ValueError):
        raise BadRequestError("cursor: Cursor must be an integer")

    return value or None


def is_row_id(value: int) -> bool:
    """Whether ``value`` is in the range a stored row id can take."""
    return 1 <= value <= MAX_ROW_ID
