"""
Campaign Service — owner-scoped campaign CRUD, soft delete with status
cascade to the campaign's ad groups and keywords, and campaign stats.
"""

import logging
from typing import Optional

from ppc_manager.auth import CallerContext
from ppc_manager.errors import NotFoundError
from ppc_manager.models import AdGroup, Campaign, CampaignType, EntityStatus, Keyword
from ppc_manager.schemas import CampaignCreate, CampaignUpdate
from ppc_manager.services.metrics import stats_for, zero_counters
from ppc_manager.services.validation import (
    validate_budget, validate_name, validate_status_transition,
)
from ppc_manager.store import EntityStore
from ppc_manager.utils import to_decimal

logger = logging.getLogger(__name__)


async def archive_all(store: EntityStore, kind: type, filters: dict) -> int:
    """Archive every live record matching filters. Returns how many changed."""
    changed = 0
    for record in await store.find_many(kind, filters):
        if record.status != EntityStatus.ARCHIVED:
            await store.update_fields(kind, record.id, {"status": EntityStatus.ARCHIVED})
            changed += 1
    return changed


class CampaignService:
    def __init__(self, store: EntityStore):
        self.store = store

    async def create_campaign(self, data: CampaignCreate, caller: CallerContext) -> Campaign:
        validate_name(data.name, "Campaign name")
        validate_budget(data.budget)

        campaign = await self.store.insert(Campaign, {
            "user_id": caller.user_id,
            "name": data.name.strip(),
            "campaign_type": data.campaign_type,
            "budget": to_decimal(data.budget),
            "status": EntityStatus.ACTIVE,
            "start_date": data.start_date,
            "end_date": data.end_date,
            **zero_counters(),
        })
        logger.info(f"Created campaign {campaign.id} for user {caller.user_id}")
        return campaign

    async def list_campaigns(
        self,
        caller: CallerContext,
        status: Optional[EntityStatus] = None,
        campaign_type: Optional[CampaignType] = None,
    ) -> list[Campaign]:
        filters = {"user_id": caller.user_id}
        if status:
            filters["status"] = status
        if campaign_type:
            filters["campaign_type"] = campaign_type
        return list(await self.store.find_many(Campaign, filters))

    async def get_campaign(self, id, caller: CallerContext) -> Campaign:
        """Campaigns owned by someone else are reported as missing."""
        campaign = await self.store.find_by_id(Campaign, id)
        if not campaign or campaign.user_id != caller.user_id:
            raise NotFoundError("Campaign not found")
        return campaign

    async def update_campaign(self, id, patch: CampaignUpdate, caller: CallerContext) -> Campaign:
        existing = await self.get_campaign(id, caller)

        fields = patch.patch_fields()
        if "name" in fields:
            validate_name(fields["name"], "Campaign name")
            fields["name"] = fields["name"].strip()
        if "budget" in fields:
            validate_budget(fields["budget"])
        if "status" in fields:
            validate_status_transition(existing.status, fields["status"], "Campaign")
        if not fields:
            return existing

        campaign = await self.store.update_fields(Campaign, existing.id, fields)
        logger.info(f"Updated campaign {campaign.id}: {sorted(fields)}")
        if fields.get("status") == EntityStatus.ARCHIVED:
            await self._archive_children(campaign)
        return campaign

    async def delete_campaign(self, id, caller: CallerContext) -> Campaign:
        """Soft delete. Ad groups and keywords under the campaign are archived with it."""
        campaign = await self.get_campaign(id, caller)
        if campaign.status != EntityStatus.ARCHIVED:
            campaign = await self.store.update_fields(Campaign, campaign.id, {"status": EntityStatus.ARCHIVED})
        await self._archive_children(campaign)
        return campaign

    async def _archive_children(self, campaign: Campaign) -> None:
        ad_groups = await archive_all(self.store, AdGroup, {"campaign_id": campaign.id})
        keywords = await archive_all(self.store, Keyword, {"campaign_id": campaign.id})
        logger.info(f"Archived campaign {campaign.id} ({ad_groups} ad groups, {keywords} keywords)")

    async def get_campaign_stats(self, id, caller: CallerContext) -> dict:
        campaign = await self.get_campaign(id, caller)
        ad_groups = await self.store.find_many(AdGroup, {"campaign_id": campaign.id})
        keywords = await self.store.find_many(Keyword, {"campaign_id": campaign.id})
        return {
            **stats_for(campaign),
            "adGroupCount": len(ad_groups),
            "keywordCount": len(keywords),
        }
