"""
Ad Groups Router — nested under /campaigns/{campaign_id}/adgroups.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ppc_manager.auth import CallerContext, get_caller
from ppc_manager.models import AdGroup, EntityStatus
from ppc_manager.schemas import AdGroupCreate, AdGroupUpdate
from ppc_manager.services.ad_group_service import AdGroupService
from ppc_manager.store import EntityStore, get_store
from ppc_manager.utils import isoformat, parse_uuid

router = APIRouter()


def serialize_ad_group(ag: AdGroup, keyword_count: Optional[int] = None) -> dict:
    data = {
        "id": str(ag.id),
        "campaignId": str(ag.campaign_id),
        "name": ag.name,
        "defaultBid": float(ag.default_bid),
        "status": EntityStatus(ag.status).value,
        "createdAt": isoformat(ag.created_at),
        "updatedAt": isoformat(ag.updated_at),
    }
    if keyword_count is not None:
        data["_count"] = {"keywords": keyword_count}
    return data


@router.get("/{campaign_id}/adgroups")
async def list_ad_groups(
    campaign_id: str,
    status: Optional[EntityStatus] = Query(None),
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    service = AdGroupService(store)
    ad_groups = await service.list_campaign_ad_groups(parse_uuid(campaign_id, "campaign_id"), caller, status=status)
    return {
        "status": "success",
        "data": {
            "adGroups": [serialize_ad_group(ag, await service.count_keywords(ag)) for ag in ad_groups],
        },
    }


@router.post("/{campaign_id}/adgroups", status_code=201)
async def create_ad_group(
    campaign_id: str,
    payload: AdGroupCreate,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    ad_group = await AdGroupService(store).create_ad_group(parse_uuid(campaign_id, "campaign_id"), payload, caller)
    return {"status": "success", "data": {"adGroup": serialize_ad_group(ad_group)}}


@router.get("/{campaign_id}/adgroups/{ad_group_id}")
async def get_ad_group(
    campaign_id: str,
    ad_group_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    service = AdGroupService(store)
    ad_group = await service.get_ad_group(
        parse_uuid(ad_group_id, "ad_group_id"), parse_uuid(campaign_id, "campaign_id"), caller,
    )
    return {"status": "success", "data": {"adGroup": serialize_ad_group(ad_group, await service.count_keywords(ad_group))}}


@router.put("/{campaign_id}/adgroups/{ad_group_id}")
async def update_ad_group(
    campaign_id: str,
    ad_group_id: str,
    payload: AdGroupUpdate,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    ad_group = await AdGroupService(store).update_ad_group(
        parse_uuid(ad_group_id, "ad_group_id"), parse_uuid(campaign_id, "campaign_id"), payload, caller,
    )
    return {"status": "success", "data": {"adGroup": serialize_ad_group(ad_group)}}


@router.delete("/{campaign_id}/adgroups/{ad_group_id}")
async def delete_ad_group(
    campaign_id: str,
    ad_group_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    ad_group = await AdGroupService(store).delete_ad_group(
        parse_uuid(ad_group_id, "ad_group_id"), parse_uuid(campaign_id, "campaign_id"), caller,
    )
    return {"status": "success", "data": {"adGroup": serialize_ad_group(ad_group)}}
