"""Input checks applied before any store access or dispatch."""

import re
from typing import Any, Optional

from app.exceptions import ServiceValidationError

# +<1-3 digit country code><10 digit number>, e.g. +911234567890
PHONE_REGEX = re.compile(r"^\+\d{1,3}\d{10}$")


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_REGEX.match(phone) is not None


def validate_phone(phone: Optional[str]) -> str:
    if not is_valid_phone(phone):
        raise ServiceValidationError(
            "User phone is missing or invalid format.",
            details={"phone": phone, "example": "+911234567890"},
            code="INVALID_PHONE",
        )
    return phone


def validate_user_id(user_id: Any) -> int:
    """Accept a positive integer (or its string form); reject everything else."""
    if isinstance(user_id, bool):
        user_id = None
    try:
        value = int(user_id)
    except (TypeError, ValueError):
        value = 0
    if value <= 0 or (isinstance(user_id, float) and not user_id.is_integer()):
        raise ServiceValidationError(
            "Missing user_id", details={"user_id": user_id}, code="INVALID_USER_ID"
        )
    return value
