"""
Tests for ad group lifecycle.
"""

from decimal import Decimal

import pytest

from ppc_manager.errors import NotFoundError, ValidationError
from ppc_manager.models import AdGroup, EntityStatus
from ppc_manager.schemas import AdGroupCreate, AdGroupUpdate


@pytest.mark.anyio
async def test_create_ad_group(ad_group_service, make_campaign, caller):
    campaign = await make_campaign()
    ad_group = await ad_group_service.create_ad_group(
        campaign.id, AdGroupCreate(name=" Shoes ", default_bid=Decimal("0.80")), caller,
    )
    assert ad_group.name == "Shoes"
    assert ad_group.campaign_id == campaign.id
    assert ad_group.status == EntityStatus.ACTIVE


@pytest.mark.anyio
@pytest.mark.parametrize("bid", ["0", "-1"])
async def test_default_bid_must_be_positive(ad_group_service, make_campaign, caller, store, bid):
    campaign = await make_campaign()
    with pytest.raises(ValidationError, match="Default bid must be greater than 0"):
        await ad_group_service.create_ad_group(campaign.id, AdGroupCreate(name="x", default_bid=Decimal(bid)), caller)
    assert await store.find_many(AdGroup) == []


@pytest.mark.anyio
async def test_archived_campaign_takes_no_new_ad_groups(ad_group_service, campaign_service, make_campaign, caller):
    campaign = await make_campaign()
    await campaign_service.delete_campaign(campaign.id, caller)
    with pytest.raises(ValidationError, match="archived campaign"):
        await ad_group_service.create_ad_group(campaign.id, AdGroupCreate(name="x", default_bid=Decimal("1")), caller)


@pytest.mark.anyio
async def test_ad_group_is_scoped_to_campaign(ad_group_service, make_campaign, make_ad_group, caller):
    c1 = await make_campaign("C1")
    c2 = await make_campaign("C2")
    ad_group = await make_ad_group(c1)
    with pytest.raises(NotFoundError, match="Ad group not found"):
        await ad_group_service.get_ad_group(ad_group.id, c2.id, caller)


@pytest.mark.anyio
async def test_partial_update(ad_group_service, make_campaign, make_ad_group, caller):
    campaign = await make_campaign()
    ad_group = await make_ad_group(campaign, "Original", "0.75")

    updated = await ad_group_service.update_ad_group(
        ad_group.id, campaign.id, AdGroupUpdate(status=EntityStatus.PAUSED), caller,
    )
    assert updated.status == EntityStatus.PAUSED
    assert updated.name == "Original"
    assert updated.default_bid == Decimal("0.75")

    with pytest.raises(ValidationError):
        await ad_group_service.update_ad_group(ad_group.id, campaign.id, AdGroupUpdate(default_bid=Decimal("0")), caller)


@pytest.mark.anyio
async def test_delete_archives_ad_group_and_its_keywords(
    ad_group_service, keyword_service, make_campaign, make_ad_group, keyword_data, caller,
):
    campaign = await make_campaign()
    ad_group = await make_ad_group(campaign)
    attached = await keyword_service.create_keyword(keyword_data(campaign, ad_group, text="attached"), caller)
    loose = await keyword_service.create_keyword(keyword_data(campaign, text="campaign level"), caller)

    archived = await ad_group_service.delete_ad_group(ad_group.id, campaign.id, caller)
    assert archived.status == EntityStatus.ARCHIVED
    assert archived.default_bid == Decimal("0.75")
    assert attached.status == EntityStatus.ARCHIVED
    assert loose.status == EntityStatus.ACTIVE

    again = await ad_group_service.delete_ad_group(ad_group.id, campaign.id, caller)
    assert again.status == EntityStatus.ARCHIVED


@pytest.mark.anyio
async def test_archiving_through_update_archives_keywords(
    ad_group_service, keyword_service, make_campaign, make_ad_group, keyword_data, caller,
):
    campaign = await make_campaign()
    ad_group = await make_ad_group(campaign)
    attached = await keyword_service.create_keyword(keyword_data(campaign, ad_group, text="attached"), caller)
    loose = await keyword_service.create_keyword(keyword_data(campaign, text="campaign level"), caller)

    updated = await ad_group_service.update_ad_group(
        ad_group.id, campaign.id, AdGroupUpdate(status=EntityStatus.ARCHIVED), caller,
    )

    assert updated.status == EntityStatus.ARCHIVED
    assert attached.status == EntityStatus.ARCHIVED
    assert loose.status == EntityStatus.ACTIVE


@pytest.mark.anyio
async def test_name_and_default_bid_respect_column_limits(ad_group_service, make_campaign, caller):
    campaign = await make_campaign()
    with pytest.raises(ValidationError, match="cannot exceed 255 characters"):
        await ad_group_service.create_ad_group(
            campaign.id, AdGroupCreate(name="g" * 256, default_bid=Decimal("1.00")), caller,
        )
    with pytest.raises(ValidationError, match="Default bid cannot exceed"):
        await ad_group_service.create_ad_group(
            campaign.id, AdGroupCreate(name="big", default_bid=Decimal("100000000")), caller,
        )


@pytest.mark.anyio
async def test_list_with_status_filter_and_keyword_count(
    ad_group_service, keyword_service, make_campaign, make_ad_group, keyword_data, caller,
):
    campaign = await make_campaign()
    live = await make_ad_group(campaign, "live")
    paused = await make_ad_group(campaign, "paused")
    await ad_group_service.update_ad_group(paused.id, campaign.id, AdGroupUpdate(status=EntityStatus.PAUSED), caller)
    await keyword_service.create_keyword(keyword_data(campaign, live), caller)

    assert [ag.id for ag in await ad_group_service.list_campaign_ad_groups(campaign.id, caller)] == [paused.id, live.id]
    active = await ad_group_service.list_campaign_ad_groups(campaign.id, caller, status=EntityStatus.ACTIVE)
    assert [ag.id for ag in active] == [live.id]
    assert await ad_group_service.count_keywords(live) == 1
    assert await ad_group_service.count_keywords(paused) == 0
