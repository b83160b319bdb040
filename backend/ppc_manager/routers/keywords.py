"""
Keywords Router — nested under /campaigns/{campaign_id}/keywords.
Includes negative-keyword listing, bulk create (partial success) and bulk
bid/status operations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ppc_manager.auth import CallerContext, get_caller
from ppc_manager.models import EntityStatus, Keyword, MatchType
from ppc_manager.schemas import BulkKeywordCreate, BulkKeywordOperation, KeywordCreate, KeywordUpdate
from ppc_manager.services.keyword_service import KeywordService
from ppc_manager.store import EntityStore, get_store
from ppc_manager.utils import decimal_str, isoformat, parse_optional_uuid, parse_uuid

router = APIRouter()


def serialize_keyword(k: Keyword) -> dict:
    return {
        "id": str(k.id),
        "campaignId": str(k.campaign_id),
        "adGroupId": str(k.ad_group_id) if k.ad_group_id else None,
        "keywordText": k.keyword_text,
        "matchType": MatchType(k.match_type).value,
        "bid": float(k.bid),
        "status": EntityStatus(k.status).value,
        "isNegative": bool(k.is_negative),
        "impressions": decimal_str(k.impressions),
        "clicks": k.clicks or 0,
        "conversions": k.conversions or 0,
        "spend": decimal_str(k.spend),
        "sales": decimal_str(k.sales),
        "createdAt": isoformat(k.created_at),
        "updatedAt": isoformat(k.updated_at),
    }


@router.get("/{campaign_id}/keywords")
async def list_keywords(
    campaign_id: str,
    ad_group_id: Optional[str] = Query(None, alias="adGroupId"),
    match_type: Optional[MatchType] = Query(None, alias="matchType"),
    status: Optional[EntityStatus] = Query(None),
    is_negative: Optional[bool] = Query(None, alias="isNegative"),
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    """List a campaign's keywords, newest first. All statuses unless filtered."""
    keywords = await KeywordService(store).get_campaign_keywords(
        parse_uuid(campaign_id, "campaign_id"),
        caller,
        ad_group_id=parse_optional_uuid(ad_group_id, "adGroupId"),
        match_type=match_type,
        status=status,
        is_negative=is_negative,
    )
    return {"status": "success", "data": {"keywords": [serialize_keyword(k) for k in keywords]}}


@router.get("/{campaign_id}/keywords/negative")
async def list_negative_keywords(
    campaign_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    keywords = await KeywordService(store).get_negative_keywords(parse_uuid(campaign_id, "campaign_id"), caller)
    return {"status": "success", "data": {"keywords": [serialize_keyword(k) for k in keywords]}}


@router.post("/{campaign_id}/keywords", status_code=201)
async def create_keyword(
    campaign_id: str,
    payload: KeywordCreate,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    payload.campaign_id = campaign_id
    keyword = await KeywordService(store).create_keyword(payload, caller)
    return {"status": "success", "data": {"keyword": serialize_keyword(keyword)}}


@router.post("/{campaign_id}/keywords/bulk-create")
async def bulk_create_keywords(
    campaign_id: str,
    payload: BulkKeywordCreate,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    """
    Create many keywords in this campaign. Entries are independent: the
    response lists what was created and which entries were rejected (207
    when some were).
    """
    for entry in payload.keywords:
        entry.campaign_id = campaign_id
    result = await KeywordService(store).bulk_create_keywords(payload.keywords, caller)
    body = {
        "status": "success",
        "data": {
            "keywords": [serialize_keyword(k) for k in result.created],
            "errors": result.errors,
        },
    }
    return JSONResponse(status_code=201 if result.all_succeeded else 207, content=body)


@router.post("/{campaign_id}/keywords/bulk")
async def bulk_keyword_operation(
    campaign_id: str,
    payload: BulkKeywordOperation,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    """updateBids / pause / activate / archive over a list of keyword ids. All or nothing."""
    keywords = await KeywordService(store).bulk_update_keywords(parse_uuid(campaign_id, "campaign_id"), payload, caller)
    return {"status": "success", "data": {"keywords": [serialize_keyword(k) for k in keywords]}}


@router.get("/{campaign_id}/keywords/{keyword_id}")
async def get_keyword(
    campaign_id: str,
    keyword_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    keyword = await KeywordService(store).get_keyword_by_id(
        parse_uuid(keyword_id, "keyword_id"), parse_uuid(campaign_id, "campaign_id"), caller,
    )
    return {"status": "success", "data": {"keyword": serialize_keyword(keyword)}}


@router.put("/{campaign_id}/keywords/{keyword_id}")
async def update_keyword(
    campaign_id: str,
    keyword_id: str,
    payload: KeywordUpdate,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    keyword = await KeywordService(store).update_keyword(
        parse_uuid(keyword_id, "keyword_id"), parse_uuid(campaign_id, "campaign_id"), payload, caller,
    )
    return {"status": "success", "data": {"keyword": serialize_keyword(keyword)}}


@router.delete("/{campaign_id}/keywords/{keyword_id}")
async def delete_keyword(
    campaign_id: str,
    keyword_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    keyword = await KeywordService(store).delete_keyword(
        parse_uuid(keyword_id, "keyword_id"), parse_uuid(campaign_id, "campaign_id"), caller,
    )
    return {"status": "success", "data": {"keyword": serialize_keyword(keyword)}}


@router.get("/{campaign_id}/keywords/{keyword_id}/stats")
async def get_keyword_stats(
    campaign_id: str,
    keyword_id: str,
    store: EntityStore = Depends(get_store),
    caller: CallerContext = Depends(get_caller),
):
    stats = await KeywordService(store).get_keyword_stats(
        parse_uuid(keyword_id, "keyword_id"), parse_uuid(campaign_id, "campaign_id"), caller,
    )
    return {"status": "success", "data": {"stats": stats}}
