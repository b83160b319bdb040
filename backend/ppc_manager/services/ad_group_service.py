"""
Ad Group Service — ad groups live under exactly one campaign, fixed at creation.
"""

import logging
from typing import Optional

from ppc_manager.auth import CallerContext
from ppc_manager.errors import NotFoundError, ValidationError
from ppc_manager.models import AdGroup, EntityStatus, Keyword
from ppc_manager.schemas import AdGroupCreate, AdGroupUpdate
from ppc_manager.services.campaign_service import CampaignService, archive_all
from ppc_manager.services.validation import (
    validate_default_bid, validate_name, validate_status_transition,
)
from ppc_manager.store import EntityStore
from ppc_manager.utils import to_decimal

logger = logging.getLogger(__name__)


class AdGroupService:
    def __init__(self, store: EntityStore):
        self.store = store
        self.campaigns = CampaignService(store)

    async def create_ad_group(self, campaign_id, data: AdGroupCreate, caller: CallerContext) -> AdGroup:
        validate_name(data.name, "Ad group name")
        validate_default_bid(data.default_bid)

        campaign = await self.campaigns.get_campaign(campaign_id, caller)
        if campaign.status == EntityStatus.ARCHIVED:
            raise ValidationError("Cannot create an ad group in an archived campaign")

        ad_group = await self.store.insert(AdGroup, {
            "campaign_id": campaign.id,
            "name": data.name.strip(),
            "default_bid": to_decimal(data.default_bid),
            "status": EntityStatus.ACTIVE,
        })
        logger.info(f"Created ad group {ad_group.id} in campaign {campaign.id}")
        return ad_group

    async def list_campaign_ad_groups(
        self,
        campaign_id,
        caller: CallerContext,
        status: Optional[EntityStatus] = None,
    ) -> list[AdGroup]:
        campaign = await self.campaigns.get_campaign(campaign_id, caller)
        filters = {"campaign_id": campaign.id}
        if status:
            filters["status"] = status
        return list(await self.store.find_many(AdGroup, filters))

    async def count_keywords(self, ad_group: AdGroup) -> int:
        return len(await self.store.find_many(Keyword, {"ad_group_id": ad_group.id}))

    async def get_ad_group(self, id, campaign_id, caller: CallerContext) -> AdGroup:
        """campaign_id is a scoping key: an ad group under another campaign is not found."""
        campaign = await self.campaigns.get_campaign(campaign_id, caller)
        ad_group = await self.store.find_by_id(AdGroup, id)
        if not ad_group or ad_group.campaign_id != campaign.id:
            raise NotFoundError("Ad group not found")
        return ad_group

    async def update_ad_group(self, id, campaign_id, patch: AdGroupUpdate, caller: CallerContext) -> AdGroup:
        existing = await self.get_ad_group(id, campaign_id, caller)

        fields = patch.patch_fields()
        if "name" in fields:
            validate_name(fields["name"], "Ad group name")
            fields["name"] = fields["name"].strip()
        if "default_bid" in fields:
            validate_default_bid(fields["default_bid"])
        if "status" in fields:
            validate_status_transition(existing.status, fields["status"], "Ad group")
        if not fields:
            return existing

        ad_group = await self.store.update_fields(AdGroup, existing.id, fields)
        logger.info(f"Updated ad group {ad_group.id}: {sorted(fields)}")
        if fields.get("status") == EntityStatus.ARCHIVED:
            await self._archive_keywords(ad_group)
        return ad_group

    async def delete_ad_group(self, id, campaign_id, caller: CallerContext) -> AdGroup:
        """Soft delete, archiving the ad group's keywords as well. Repeat deletes are no-ops."""
        ad_group = await self.get_ad_group(id, campaign_id, caller)
        if ad_group.status != EntityStatus.ARCHIVED:
            ad_group = await self.store.update_fields(AdGroup, ad_group.id, {"status": EntityStatus.ARCHIVED})
        await self._archive_keywords(ad_group)
        return ad_group

    async def _archive_keywords(self, ad_group: AdGroup) -> None:
        keywords = await archive_all(self.store, Keyword, {"ad_group_id": ad_group.id})
        logger.info(f"Archived ad group {ad_group.id} ({keywords} keywords)")
