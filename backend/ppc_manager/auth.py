"""
Caller context — who is making the request.

Authentication is not implemented yet: every request acts as the configured
DEFAULT_USER_ID. The identity is resolved once per request by `get_caller`
and handed explicitly to every service call, so swapping in real auth only
means changing this dependency.
"""

import logging
import uuid
from dataclasses import dataclass

from ppc_manager.config import get_settings
from ppc_manager.utils import parse_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    user_id: uuid.UUID


async def get_caller() -> CallerContext:
    settings = get_settings()
    return CallerContext(user_id=parse_uuid(settings.default_user_id, "default_user_id"))
