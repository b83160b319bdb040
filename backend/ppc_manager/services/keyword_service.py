"""
Keyword Service — keeps the Campaign → Ad Group → Keyword tree consistent.

A keyword belongs to one campaign and optionally to one ad group of that same
campaign; both references are fixed at creation. Every read and write is
scoped by campaign id, which acts as a tenant key rather than a lookup hint.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ppc_manager.auth import CallerContext
from ppc_manager.errors import AppError, NotFoundError, ValidationError
from ppc_manager.models import AdGroup, EntityStatus, Keyword, MatchType
from ppc_manager.schemas import BulkKeywordOperation, KeywordCreate, KeywordUpdate
from ppc_manager.services.campaign_service import CampaignService
from ppc_manager.services.metrics import stats_for, zero_counters
from ppc_manager.services.validation import (
    validate_ad_group_ownership, validate_bid, validate_keyword_text,
    validate_status_transition,
)
from ppc_manager.store import EntityStore
from ppc_manager.utils import parse_optional_uuid, parse_uuid, to_decimal

logger = logging.getLogger(__name__)

_STATUS_OPERATIONS = {
    "pause": EntityStatus.PAUSED,
    "activate": EntityStatus.ACTIVE,
}


@dataclass
class BulkCreateResult:
    """Outcome of a bulk create. Entries succeed or fail independently."""
    created: list[Keyword] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.errors


class KeywordService:
    def __init__(self, store: EntityStore):
        self.store = store
        self.campaigns = CampaignService(store)

    async def create_keyword(self, data: KeywordCreate, caller: CallerContext) -> Keyword:
        validate_bid(data.bid, data.is_negative)
        validate_keyword_text(data.keyword_text)

        if not data.campaign_id:
            raise ValidationError("campaignId is required")
        campaign = await self.campaigns.get_campaign(parse_uuid(data.campaign_id, "campaignId"), caller)
        if campaign.status == EntityStatus.ARCHIVED:
            raise ValidationError("Cannot create a keyword in an archived campaign")

        ad_group_id = parse_optional_uuid(data.ad_group_id, "adGroupId")
        if ad_group_id:
            ad_group = await self.store.find_by_id(AdGroup, ad_group_id)
            if not ad_group:
                raise NotFoundError("Ad group not found")
            validate_ad_group_ownership(ad_group, campaign.id)
            if ad_group.status == EntityStatus.ARCHIVED:
                raise ValidationError("Cannot create a keyword in an archived ad group")

        keyword = await self.store.insert(Keyword, {
            "campaign_id": campaign.id,
            "ad_group_id": ad_group_id,
            "keyword_text": data.keyword_text.strip(),
            "match_type": data.match_type,
            "bid": to_decimal(data.bid),
            "is_negative": data.is_negative,
            "status": EntityStatus.ACTIVE,
            **zero_counters(),
        })
        logger.info(f"Created keyword {keyword.id} '{keyword.keyword_text}' in campaign {campaign.id}")
        return keyword

    async def get_campaign_keywords(
        self,
        campaign_id,
        caller: CallerContext,
        ad_group_id=None,
        match_type: Optional[MatchType] = None,
        status: Optional[EntityStatus] = None,
        is_negative: Optional[bool] = None,
    ) -> list[Keyword]:
        """All statuses unless `status` is given; newest first."""
        campaign = await self.campaigns.get_campaign(campaign_id, caller)
        filters = {"campaign_id": campaign.id}
        if ad_group_id:
            filters["ad_group_id"] = ad_group_id
        if match_type:
            filters["match_type"] = match_type
        if status:
            filters["status"] = status
        if is_negative is not None:
            filters["is_negative"] = is_negative
        return list(await self.store.find_many(Keyword, filters))

    async def get_negative_keywords(self, campaign_id, caller: CallerContext) -> list[Keyword]:
        return await self.get_campaign_keywords(campaign_id, caller, is_negative=True)

    async def get_keyword_by_id(self, id, campaign_id, caller: CallerContext) -> Keyword:
        campaign = await self.campaigns.get_campaign(campaign_id, caller)
        keyword = await self.store.find_by_id(Keyword, id)
        if not keyword or keyword.campaign_id != campaign.id:
            raise NotFoundError("Keyword not found")
        return keyword

    async def update_keyword(self, id, campaign_id, patch: KeywordUpdate, caller: CallerContext) -> Keyword:
        existing = await self.get_keyword_by_id(id, campaign_id, caller)

        fields = patch.patch_fields()
        # Validate against the negative flag the keyword will have after this update
        will_be_negative = fields.get("is_negative", existing.is_negative)
        if "bid" in fields or "is_negative" in fields:
            validate_bid(fields.get("bid", existing.bid), will_be_negative)
        if "keyword_text" in fields:
            validate_keyword_text(fields["keyword_text"])
            fields["keyword_text"] = fields["keyword_text"].strip()
        if "status" in fields:
            validate_status_transition(existing.status, fields["status"], "Keyword")
        if not fields:
            return existing

        keyword = await self.store.update_fields(Keyword, existing.id, fields)
        logger.info(f"Updated keyword {keyword.id}: {sorted(fields)}")
        return keyword

    async def delete_keyword(self, id, campaign_id, caller: CallerContext) -> Keyword:
        """Soft delete. Archiving an archived keyword succeeds without a write."""
        keyword = await self.get_keyword_by_id(id, campaign_id, caller)
        if keyword.status == EntityStatus.ARCHIVED:
            return keyword
        keyword = await self.store.update_fields(Keyword, keyword.id, {"status": EntityStatus.ARCHIVED})
        logger.info(f"Archived keyword {keyword.id}")
        return keyword

    async def bulk_create_keywords(self, entries: list[KeywordCreate], caller: CallerContext) -> BulkCreateResult:
        """
        Create each entry on its own. A failing entry is reported in
        `errors` and does not undo entries created before it; callers
        must inspect the result to see which ones went through.

        Each entry runs inside a store savepoint, so a write the database
        refuses is rolled back alone.
        """
        result = BulkCreateResult()
        for index, entry in enumerate(entries):
            try:
                async with self.store.savepoint():
                    keyword = await self.create_keyword(entry, caller)
            except AppError as e:
                message = e.message
            except SQLAlchemyError as e:
                logger.error(f"Bulk create entry {index} failed in the database: {e}")
                message = "Keyword could not be saved"
            else:
                result.created.append(keyword)
                continue
            logger.warning(f"Bulk create entry {index} ('{entry.keyword_text}') rejected: {message}")
            result.errors.append({
                "index": index,
                "keywordText": entry.keyword_text,
                "message": message,
            })
        logger.info(f"Bulk create: {len(result.created)} created, {len(result.errors)} rejected")
        return result

    async def bulk_update_keywords(self, campaign_id, operation: BulkKeywordOperation, caller: CallerContext) -> list[Keyword]:
        """
        Apply one operation to many keywords of a campaign. Each keyword goes
        through update/delete so the usual rules hold; the first failure
        propagates and the request transaction rolls back.
        """
        if operation.operation == "updateBids" and operation.new_bid is None:
            raise ValidationError("newBid is required for updateBids")

        updated = []
        for raw_id in operation.keyword_ids:
            keyword_id = parse_uuid(raw_id, "keywordIds")
            if operation.operation == "archive":
                updated.append(await self.delete_keyword(keyword_id, campaign_id, caller))
            elif operation.operation == "updateBids":
                patch = KeywordUpdate(bid=operation.new_bid)
                updated.append(await self.update_keyword(keyword_id, campaign_id, patch, caller))
            else:
                patch = KeywordUpdate(status=_STATUS_OPERATIONS[operation.operation])
                updated.append(await self.update_keyword(keyword_id, campaign_id, patch, caller))
        logger.info(f"Bulk {operation.operation} applied to {len(updated)} keywords in campaign {campaign_id}")
        return updated

    async def get_keyword_stats(self, id, campaign_id, caller: CallerContext) -> dict:
        keyword = await self.get_keyword_by_id(id, campaign_id, caller)
        return stats_for(keyword)
