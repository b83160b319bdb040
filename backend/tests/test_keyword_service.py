"""
Tests for keyword lifecycle and hierarchy consistency.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import DataError

from ppc_manager.errors import NotFoundError, ValidationError
from ppc_manager.models import EntityStatus, Keyword, MatchType
from ppc_manager.schemas import BulkKeywordOperation, KeywordUpdate


@pytest.mark.anyio
async def test_create_keyword_defaults(keyword_service, make_campaign, make_ad_group, keyword_data, caller):
    campaign = await make_campaign()
    ad_group = await make_ad_group(campaign)

    keyword = await keyword_service.create_keyword(
        keyword_data(campaign, ad_group, text="  trail running shoes  "), caller,
    )

    assert keyword.keyword_text == "trail running shoes"
    assert keyword.status == EntityStatus.ACTIVE
    assert keyword.campaign_id == campaign.id
    assert keyword.ad_group_id == ad_group.id
    assert keyword.is_negative is False
    assert (keyword.impressions, keyword.clicks, keyword.conversions, keyword.spend, keyword.sales) == (0, 0, 0, 0, 0)


@pytest.mark.anyio
@pytest.mark.parametrize("bid", ["0", "-0.50"])
async def test_positive_keyword_with_non_positive_bid_is_rejected(
    keyword_service, make_campaign, keyword_data, caller, store, bid,
):
    campaign = await make_campaign()
    with pytest.raises(ValidationError):
        await keyword_service.create_keyword(keyword_data(campaign, bid=bid), caller)
    assert await store.find_many(Keyword) == []


@pytest.mark.anyio
@pytest.mark.parametrize("bid", ["0", "0.00", "2.25"])
async def test_negative_keyword_accepts_any_non_negative_bid(keyword_service, make_campaign, keyword_data, caller, bid):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(
        keyword_data(campaign, text="cheap", bid=bid, is_negative=True), caller,
    )
    assert keyword.is_negative is True
    assert keyword.bid == Decimal(bid)


@pytest.mark.anyio
async def test_blank_keyword_text_is_rejected(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    with pytest.raises(ValidationError, match="Keyword text cannot be empty"):
        await keyword_service.create_keyword(keyword_data(campaign, text="   "), caller)


@pytest.mark.anyio
async def test_unknown_campaign_is_not_found(keyword_service, make_campaign, keyword_data, caller, other_caller):
    foreign = await make_campaign(who=other_caller)
    with pytest.raises(NotFoundError, match="Campaign not found"):
        await keyword_service.create_keyword(keyword_data(foreign), caller)


@pytest.mark.anyio
async def test_unknown_ad_group_is_not_found(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    data = keyword_data(campaign)
    data.ad_group_id = "3fa85f64-5717-4562-b3fc-2c963f66afa6"
    with pytest.raises(NotFoundError, match="Ad group not found"):
        await keyword_service.create_keyword(data, caller)


@pytest.mark.anyio
async def test_cross_campaign_ad_group_is_rejected_and_nothing_inserted(
    keyword_service, make_campaign, make_ad_group, keyword_data, caller, store,
):
    c1 = await make_campaign("C1")
    c2 = await make_campaign("C2")
    a1 = await make_ad_group(c1, "A1")

    data = keyword_data(c2)
    data.ad_group_id = str(a1.id)
    with pytest.raises(ValidationError, match="does not belong"):
        await keyword_service.create_keyword(data, caller)
    assert await store.find_many(Keyword) == []


@pytest.mark.anyio
async def test_update_with_only_bid_leaves_other_fields(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(keyword_data(campaign, match_type=MatchType.PHRASE), caller)

    updated = await keyword_service.update_keyword(keyword.id, campaign.id, KeywordUpdate(bid=Decimal("5")), caller)

    assert updated.bid == Decimal("5")
    assert updated.keyword_text == "running shoes"
    assert updated.match_type == MatchType.PHRASE
    assert updated.status == EntityStatus.ACTIVE
    assert updated.is_negative is False


@pytest.mark.anyio
async def test_update_validates_bid_against_resulting_negative_flag(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(keyword_data(campaign), caller)

    # Becoming negative in the same patch allows a zero bid
    updated = await keyword_service.update_keyword(
        keyword.id, campaign.id, KeywordUpdate(bid=Decimal("0"), is_negative=True), caller,
    )
    assert updated.is_negative is True
    assert updated.bid == Decimal("0")

    # Flipping back without a positive bid would break the invariant
    with pytest.raises(ValidationError, match="Bid must be greater than 0"):
        await keyword_service.update_keyword(keyword.id, campaign.id, KeywordUpdate(is_negative=False), caller)

    updated = await keyword_service.update_keyword(
        keyword.id, campaign.id, KeywordUpdate(is_negative=False, bid=Decimal("0.90")), caller,
    )
    assert updated.is_negative is False


@pytest.mark.anyio
async def test_update_rejects_zero_bid_on_positive_keyword(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(keyword_data(campaign), caller)
    with pytest.raises(ValidationError):
        await keyword_service.update_keyword(keyword.id, campaign.id, KeywordUpdate(bid=Decimal("0")), caller)
    assert keyword.bid == Decimal("1.50")


@pytest.mark.anyio
async def test_update_trims_and_validates_text(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(keyword_data(campaign), caller)

    updated = await keyword_service.update_keyword(keyword.id, campaign.id, KeywordUpdate(keyword_text=" hiking boots "), caller)
    assert updated.keyword_text == "hiking boots"

    with pytest.raises(ValidationError):
        await keyword_service.update_keyword(keyword.id, campaign.id, KeywordUpdate(keyword_text=""), caller)


@pytest.mark.anyio
async def test_keyword_is_scoped_to_its_campaign(keyword_service, make_campaign, keyword_data, caller):
    c1 = await make_campaign("C1")
    c2 = await make_campaign("C2")
    keyword = await keyword_service.create_keyword(keyword_data(c1), caller)

    with pytest.raises(NotFoundError, match="Keyword not found"):
        await keyword_service.get_keyword_by_id(keyword.id, c2.id, caller)
    with pytest.raises(NotFoundError):
        await keyword_service.update_keyword(keyword.id, c2.id, KeywordUpdate(bid=Decimal("2")), caller)
    with pytest.raises(NotFoundError):
        await keyword_service.delete_keyword(keyword.id, c2.id, caller)


@pytest.mark.anyio
async def test_delete_archives_and_is_idempotent(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(keyword_data(campaign), caller)
    before = (keyword.keyword_text, keyword.match_type, keyword.bid, keyword.is_negative, keyword.campaign_id)

    archived = await keyword_service.delete_keyword(keyword.id, campaign.id, caller)
    assert archived.status == EntityStatus.ARCHIVED
    assert (archived.keyword_text, archived.match_type, archived.bid, archived.is_negative, archived.campaign_id) == before

    again = await keyword_service.delete_keyword(keyword.id, campaign.id, caller)
    assert again.status == EntityStatus.ARCHIVED

    # Still stored, just archived
    assert await keyword_service.get_campaign_keywords(campaign.id, caller) == [again]


@pytest.mark.anyio
async def test_archived_keyword_cannot_be_reactivated(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(keyword_data(campaign), caller)
    await keyword_service.delete_keyword(keyword.id, campaign.id, caller)
    with pytest.raises(ValidationError):
        await keyword_service.update_keyword(keyword.id, campaign.id, KeywordUpdate(status=EntityStatus.ACTIVE), caller)


@pytest.mark.anyio
async def test_pause_then_filter_by_status(keyword_service, make_campaign, make_ad_group, keyword_data, caller):
    c1 = await make_campaign("C1")
    a1 = await make_ad_group(c1, "A1")
    k1 = await keyword_service.create_keyword(keyword_data(c1, a1, text="k1", bid="1.50"), caller)
    await keyword_service.create_keyword(keyword_data(c1, a1, text="k2"), caller)

    await keyword_service.update_keyword(k1.id, c1.id, KeywordUpdate(status=EntityStatus.PAUSED), caller)

    paused = await keyword_service.get_campaign_keywords(c1.id, caller, status=EntityStatus.PAUSED)
    assert [k.id for k in paused] == [k1.id]


@pytest.mark.anyio
async def test_list_filters_and_newest_first(keyword_service, make_campaign, make_ad_group, keyword_data, caller):
    campaign = await make_campaign()
    ad_group = await make_ad_group(campaign)
    first = await keyword_service.create_keyword(keyword_data(campaign, text="first", match_type=MatchType.BROAD), caller)
    second = await keyword_service.create_keyword(keyword_data(campaign, ad_group, text="second"), caller)
    negative = await keyword_service.create_keyword(
        keyword_data(campaign, text="free", bid="0", is_negative=True), caller,
    )

    everything = await keyword_service.get_campaign_keywords(campaign.id, caller)
    assert [k.id for k in everything] == [negative.id, second.id, first.id]

    by_group = await keyword_service.get_campaign_keywords(campaign.id, caller, ad_group_id=ad_group.id)
    assert [k.id for k in by_group] == [second.id]

    broad = await keyword_service.get_campaign_keywords(campaign.id, caller, match_type=MatchType.BROAD)
    assert [k.id for k in broad] == [first.id]

    assert [k.id for k in await keyword_service.get_negative_keywords(campaign.id, caller)] == [negative.id]
    positives = await keyword_service.get_campaign_keywords(campaign.id, caller, is_negative=False)
    assert {k.id for k in positives} == {first.id, second.id}


@pytest.mark.anyio
async def test_bulk_create_is_partial_success(keyword_service, make_campaign, make_ad_group, keyword_data, caller, store):
    c1 = await make_campaign("C1")
    c2 = await make_campaign("C2")
    foreign_group = await make_ad_group(c2)

    bad_owner = keyword_data(c1, text="wrong group")
    bad_owner.ad_group_id = str(foreign_group.id)
    entries = [
        keyword_data(c1, text="one"),
        keyword_data(c1, text="two", bid="0"),
        bad_owner,
        keyword_data(c1, text="three"),
    ]

    result = await keyword_service.bulk_create_keywords(entries, caller)

    assert [k.keyword_text for k in result.created] == ["one", "three"]
    assert [e["index"] for e in result.errors] == [1, 2]
    assert result.errors[0]["message"] == "Bid must be greater than 0"
    assert result.all_succeeded is False
    assert len(await store.find_many(Keyword)) == 2


@pytest.mark.anyio
async def test_bulk_create_survives_a_database_failure_on_one_entry(
    keyword_service, make_campaign, keyword_data, caller, store, monkeypatch,
):
    campaign = await make_campaign()
    insert = store.insert

    async def refusing_insert(kind, fields):
        if fields.get("keyword_text") == "refused":
            raise DataError("INSERT INTO keywords", {}, Exception("value too long for type"))
        return await insert(kind, fields)

    monkeypatch.setattr(store, "insert", refusing_insert)
    entries = [
        keyword_data(campaign, text="first"),
        keyword_data(campaign, text="refused"),
        keyword_data(campaign, text="last"),
    ]

    result = await keyword_service.bulk_create_keywords(entries, caller)

    assert [k.keyword_text for k in result.created] == ["first", "last"]
    assert result.errors == [{"index": 1, "keywordText": "refused", "message": "Keyword could not be saved"}]
    assert len(await store.find_many(Keyword)) == 2


@pytest.mark.anyio
async def test_bulk_create_rejects_values_too_large_for_their_columns(
    keyword_service, make_campaign, keyword_data, caller, store,
):
    campaign = await make_campaign()
    entries = [
        keyword_data(campaign, text="ok"),
        keyword_data(campaign, text="w" * 513),
        keyword_data(campaign, text="pricey", bid="100000000"),
    ]

    result = await keyword_service.bulk_create_keywords(entries, caller)

    assert [k.keyword_text for k in result.created] == ["ok"]
    assert [e["message"] for e in result.errors] == [
        "Keyword text cannot exceed 512 characters",
        "Bid cannot exceed 99999999.99",
    ]
    assert len(await store.find_many(Keyword)) == 1


@pytest.mark.anyio
async def test_archived_parents_take_no_new_keywords(
    keyword_service, campaign_service, ad_group_service, make_campaign, make_ad_group, keyword_data, caller, store,
):
    campaign = await make_campaign("Live")
    ad_group = await make_ad_group(campaign)
    await ad_group_service.delete_ad_group(ad_group.id, campaign.id, caller)
    with pytest.raises(ValidationError, match="archived ad group"):
        await keyword_service.create_keyword(keyword_data(campaign, ad_group), caller)

    archived = await make_campaign("Gone")
    await campaign_service.delete_campaign(archived.id, caller)
    with pytest.raises(ValidationError, match="archived campaign"):
        await keyword_service.create_keyword(keyword_data(archived), caller)

    assert await store.find_many(Keyword) == []


@pytest.mark.anyio
async def test_repeat_ad_group_delete_changes_nothing(
    keyword_service, ad_group_service, make_campaign, make_ad_group, keyword_data, caller, store,
):
    campaign = await make_campaign()
    ad_group = await make_ad_group(campaign)
    await keyword_service.create_keyword(keyword_data(campaign, ad_group), caller)
    await ad_group_service.delete_ad_group(ad_group.id, campaign.id, caller)
    before = [(k.id, k.status, k.updated_at) for k in await store.find_many(Keyword)]

    await ad_group_service.delete_ad_group(ad_group.id, campaign.id, caller)

    assert [(k.id, k.status, k.updated_at) for k in await store.find_many(Keyword)] == before


@pytest.mark.anyio
async def test_bulk_operations(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    k1 = await keyword_service.create_keyword(keyword_data(campaign, text="a"), caller)
    k2 = await keyword_service.create_keyword(keyword_data(campaign, text="b"), caller)
    ids = [str(k1.id), str(k2.id)]

    updated = await keyword_service.bulk_update_keywords(
        campaign.id, BulkKeywordOperation(keyword_ids=ids, operation="updateBids", new_bid=Decimal("2.10")), caller,
    )
    assert {k.bid for k in updated} == {Decimal("2.10")}

    paused = await keyword_service.bulk_update_keywords(
        campaign.id, BulkKeywordOperation(keyword_ids=ids, operation="pause"), caller,
    )
    assert {k.status for k in paused} == {EntityStatus.PAUSED}

    active = await keyword_service.bulk_update_keywords(
        campaign.id, BulkKeywordOperation(keyword_ids=ids, operation="activate"), caller,
    )
    assert {k.status for k in active} == {EntityStatus.ACTIVE}

    archived = await keyword_service.bulk_update_keywords(
        campaign.id, BulkKeywordOperation(keyword_ids=ids, operation="archive"), caller,
    )
    assert {k.status for k in archived} == {EntityStatus.ARCHIVED}


@pytest.mark.anyio
async def test_bulk_update_bids_requires_new_bid(keyword_service, make_campaign, keyword_data, caller):
    campaign = await make_campaign()
    k1 = await keyword_service.create_keyword(keyword_data(campaign), caller)
    with pytest.raises(ValidationError, match="newBid is required"):
        await keyword_service.bulk_update_keywords(
            campaign.id, BulkKeywordOperation(keyword_ids=[str(k1.id)], operation="updateBids"), caller,
        )


@pytest.mark.anyio
async def test_keyword_stats(keyword_service, make_campaign, keyword_data, caller, store):
    campaign = await make_campaign()
    keyword = await keyword_service.create_keyword(keyword_data(campaign), caller)
    await store.update_fields(Keyword, keyword.id, {
        "impressions": Decimal("1000"), "clicks": 50, "conversions": 5,
        "spend": Decimal("25.00"), "sales": Decimal("100.00"),
    })

    stats = await keyword_service.get_keyword_stats(keyword.id, campaign.id, caller)

    assert stats["impressions"] == "1000"
    assert stats["spend"] == "25.00"
    assert (stats["ctr"], stats["cvr"], stats["cpc"], stats["acos"]) == ("5.00", "10.00", "0.50", "25.00")
