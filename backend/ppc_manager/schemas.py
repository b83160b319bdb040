"""
Request bodies.

Update models are explicit optional-field patches: only the fields a client
actually sent are applied (`patch_fields`), everything else is left as stored.
Wire names are camelCase; Python attributes are snake_case.
"""

from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ppc_manager.models import CampaignType, EntityStatus, MatchType


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _Patch(_Body):
    def patch_fields(self) -> dict:
        """Fields present in the request. An explicit null counts as absent."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# ── Campaigns ─────────────────────────────────────────────────────────

class CampaignCreate(_Body):
    name: str
    campaign_type: CampaignType = CampaignType.SPONSORED_PRODUCTS
    budget: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CampaignUpdate(_Patch):
    name: Optional[str] = None
    budget: Optional[Decimal] = None
    status: Optional[EntityStatus] = None
    end_date: Optional[date] = None


# ── Ad Groups ─────────────────────────────────────────────────────────

class AdGroupCreate(_Body):
    campaign_id: Optional[str] = None  # the route's campaign wins
    name: str
    default_bid: Decimal


class AdGroupUpdate(_Patch):
    name: Optional[str] = None
    default_bid: Optional[Decimal] = None
    status: Optional[EntityStatus] = None


# ── Keywords ──────────────────────────────────────────────────────────

class KeywordCreate(_Body):
    campaign_id: Optional[str] = None
    ad_group_id: Optional[str] = None
    keyword_text: str
    match_type: MatchType
    bid: Decimal
    is_negative: bool = False


class KeywordUpdate(_Patch):
    keyword_text: Optional[str] = None
    match_type: Optional[MatchType] = None
    bid: Optional[Decimal] = None
    status: Optional[EntityStatus] = None
    is_negative: Optional[bool] = None


class BulkKeywordCreate(_Body):
    keywords: list[KeywordCreate]


class BulkKeywordOperation(_Body):
    """newBid is required for updateBids and ignored otherwise."""
    keyword_ids: list[str]
    operation: Literal["updateBids", "pause", "activate", "archive"]
    new_bid: Optional[Decimal] = None
