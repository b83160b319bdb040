"""
Validation Rules — pure guards run before any write.
They never touch storage: callers pass in already-fetched records and values.
"""

from decimal import Decimal
from typing import Any

from ppc_manager.errors import ValidationError
from ppc_manager.models import (
    KEYWORD_TEXT_MAX_LENGTH, MAX_BID, MAX_BUDGET, NAME_MAX_LENGTH, EntityStatus,
)
from ppc_manager.utils import to_decimal


def validate_bid(bid: Any, is_negative: bool) -> None:
    """Negative keywords are exclusions and may bid 0; everything else must bid above 0."""
    value = to_decimal(bid)
    if value < 0:
        raise ValidationError("Bid cannot be negative")
    if not is_negative and value <= 0:
        raise ValidationError("Bid must be greater than 0")
    if value > MAX_BID:
        raise ValidationError(f"Bid cannot exceed {MAX_BID}")


def validate_keyword_text(text: str) -> None:
    if text is None or not text.strip():
        raise ValidationError("Keyword text cannot be empty")
    if len(text.strip()) > KEYWORD_TEXT_MAX_LENGTH:
        raise ValidationError(f"Keyword text cannot exceed {KEYWORD_TEXT_MAX_LENGTH} characters")


def validate_ad_group_ownership(ad_group, campaign_id) -> None:
    if ad_group.campaign_id != campaign_id:
        raise ValidationError("Ad group does not belong to the specified campaign")


def validate_default_bid(bid: Any) -> None:
    value = to_decimal(bid)
    if value <= 0:
        raise ValidationError("Default bid must be greater than 0")
    if value > MAX_BID:
        raise ValidationError(f"Default bid cannot exceed {MAX_BID}")


def validate_budget(budget: Any) -> None:
    value = to_decimal(budget)
    if value <= Decimal(0):
        raise ValidationError("Budget must be greater than 0")
    if value > MAX_BUDGET:
        raise ValidationError(f"Budget cannot exceed {MAX_BUDGET}")


def validate_name(name: str, label: str = "Name") -> None:
    if name is None or not name.strip():
        raise ValidationError(f"{label} cannot be empty")
    if len(name.strip()) > NAME_MAX_LENGTH:
        raise ValidationError(f"{label} cannot exceed {NAME_MAX_LENGTH} characters")


def validate_status_transition(current: EntityStatus, new: EntityStatus, label: str = "Entity") -> None:
    """
    ACTIVE <-> PAUSED is free; anything -> ARCHIVED is allowed.
    ARCHIVED is terminal.
    """
    if current == EntityStatus.ARCHIVED and new != EntityStatus.ARCHIVED:
        raise ValidationError(f"{label} is archived and cannot be set to {EntityStatus(new).value}")
