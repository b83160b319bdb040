"""
Campaigns Router — CRUD and stats for the caller's campaigns.
"Delete" archives the campaign together with its ad groups and keywords.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ppc_manager.auth import CallerContext, get_caller
from ppc_manager.models import Campaign, CampaignType, EntityStatus
from ppc_manager.schemas import CampaignCreate, CampaignUpdate
from ppc_manager.services.campaign_service import CampaignService
from ppc_manager.store import EntityStore, get_store
from ppc_manager.utils import decimal_str, isoformat, parse_uuid

logger = logging.getLogger(__name__)
router = APIRouter()


def serialize_campaign(c: Campaign) -> dict:
    return {
        "id": str(c.id),
        "userId": str(c.user_id),
        "name": c.name,
        "campaignType": CampaignType(c.campaign_type).value,
        "budget": float(c.budget),
        "status": EntityStatus(c.status).value,
        "startDate": c.start_date.isoformat() if c.start_date else None,
        "endDate": c.end_date.isoformat() if c.end_date else None,
        "impressions": decimal_str(c.impressions),
        "clicks": c.clicks or 0,
        "conversions": c.conversions or 0,
        "spend": decimal_str(c.spend),
        "sales": decimal_str(c.sales),
        "createdAt": isoformat(c.created_at),
        "updatedAt": isoformat(c.updated_at),
    }


@router.get("")
@router.get("/")
async def list_campaigns(
    status: Optional[EntityStatus] = Query(None, description="Filter by status: ACTIVE, PAUSED, ARCHIVED"),
    campaign_type: Optional[CampaignType] = Query(None, alias="campaignType"),
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    """List the caller's campaigns, newest first. All statuses unless filtered."""
    campaigns = await CampaignService(store).list_campaigns(caller, status=status, campaign_type=campaign_type)
    return {"status": "success", "data": {"campaigns": [serialize_campaign(c) for c in campaigns]}}


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
async def create_campaign(
    payload: CampaignCreate,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    campaign = await CampaignService(store).create_campaign(payload, caller)
    return {"status": "success", "data": {"campaign": serialize_campaign(campaign)}}


@router.get("/{campaign_id}")
async def get_campaign(
    campaign_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    campaign = await CampaignService(store).get_campaign(parse_uuid(campaign_id, "campaign_id"), caller)
    return {"status": "success", "data": {"campaign": serialize_campaign(campaign)}}


@router.put("/{campaign_id}")
async def update_campaign(
    campaign_id: str,
    payload: CampaignUpdate,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    """Partial update: only fields present in the body change."""
    campaign = await CampaignService(store).update_campaign(parse_uuid(campaign_id, "campaign_id"), payload, caller)
    return {"status": "success", "data": {"campaign": serialize_campaign(campaign)}}


@router.delete("/{campaign_id}")
async def delete_campaign(
    campaign_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    campaign = await CampaignService(store).delete_campaign(parse_uuid(campaign_id, "campaign_id"), caller)
    return {"status": "success", "data": {"campaign": serialize_campaign(campaign)}}


@router.get("/{campaign_id}/stats")
async def get_campaign_stats(
    campaign_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    stats = await CampaignService(store).get_campaign_stats(parse_uuid(campaign_id, "campaign_id"), caller)
    return {"status": "success", "data": {"stats": stats}}
