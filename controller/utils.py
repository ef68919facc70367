"""Utility helper functions for the Controller."""

import base64
import re
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from common.constants import ROOT_PARENT_ID


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def normalize_parent_id(parent_id: Optional[Union[str, int]]) -> str:
    """
    Map the accepted spellings of "no parent" (None, 0, "0", "") to the root sentinel.
    """
    if parent_id is None:
        return ROOT_PARENT_ID
    parent_id = str(parent_id).strip()
    if parent_id in ("", ROOT_PARENT_ID):
        return ROOT_PARENT_ID
    return parent_id


def parse_page(page: Optional[str]) -> int:
    """
    Parse a zero-indexed page number; missing, non-numeric or negative values mean page 0.
    """
    try:
        value = int(page)
    except (TypeError, ValueError):
        return 0
    return max(value, 0)


_BASE64_BODY = re.compile(r"[A-Za-z0-9+/\-_]*")


def decode_base64(data: str) -> bytes:
    """
    Decode a base64 payload, standard or URL-safe alphabet.

    Whitespace (line wrapping) is ignored and missing padding is restored.

    Raises:
        ValueError: If the payload has characters outside the alphabet or a
            length no base64 encoding can have
    """
    compact = re.sub(r"\s+", "", data).rstrip("=")
    if not _BASE64_BODY.fullmatch(compact):
        raise ValueError("invalid base64 character")
    compact = compact.replace("-", "+").replace("_", "/")
    return base64.b64decode(compact + "=" * (-len(compact) % 4), validate=True)
