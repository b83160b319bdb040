"""
Shared utility functions.
"""

import logging
import uuid as uuid_mod
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ppc_manager.errors import ValidationError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def parse_uuid(value: str, field_name: str = "id") -> uuid_mod.UUID:
    """
    Parse a string as UUID, raising a ValidationError (400) on invalid input
    instead of letting a bare ValueError bubble up as a 500.
    """
    if isinstance(value, uuid_mod.UUID):
        return value
    try:
        return uuid_mod.UUID(value)
    except (ValueError, AttributeError, TypeError):
        raise ValidationError(f"Invalid UUID for '{field_name}': {value!r}")


def parse_optional_uuid(value: Optional[str], field_name: str = "id") -> Optional[uuid_mod.UUID]:
    if value is None or value == "":
        return None
    return parse_uuid(value, field_name)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce int/float/str/Decimal to Decimal.
    Floats go through str() so 1.1 stays 1.1 instead of its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal(0)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid decimal value: {value!r}")


def decimal_str(value: Any) -> str:
    """Render a counter/money value as a plain decimal string ("1500", "25.00")."""
    return format(to_decimal(value), "f")


def utcnow() -> datetime:
    """
    Return the current UTC time as a naive datetime (no tzinfo).
    Naive datetimes are used because our DB columns are TIMESTAMP WITHOUT TIME ZONE.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
