"""
Shared fixtures. Services run against the in-memory store; the API tests
swap the same store in through dependency overrides.
"""

import uuid
from decimal import Decimal

import pytest

from ppc_manager.auth import CallerContext
from ppc_manager.models import MatchType
from ppc_manager.schemas import AdGroupCreate, CampaignCreate, KeywordCreate
from ppc_manager.services.ad_group_service import AdGroupService
from ppc_manager.services.campaign_service import CampaignService
from ppc_manager.services.keyword_service import KeywordService
from ppc_manager.store import MemoryStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def caller():
    return CallerContext(user_id=uuid.uuid4())


@pytest.fixture
def other_caller():
    return CallerContext(user_id=uuid.uuid4())


@pytest.fixture
def campaign_service(store):
    return CampaignService(store)


@pytest.fixture
def ad_group_service(store):
    return AdGroupService(store)


@pytest.fixture
def keyword_service(store):
    return KeywordService(store)


@pytest.fixture
def make_campaign(campaign_service, caller):
    async def _make(name="Campaign", budget="100.00", who=None):
        return await campaign_service.create_campaign(
            CampaignCreate(name=name, budget=Decimal(budget)), who or caller,
        )
    return _make


@pytest.fixture
def make_ad_group(ad_group_service, caller):
    async def _make(campaign, name="Ad Group", default_bid="0.75"):
        return await ad_group_service.create_ad_group(
            campaign.id, AdGroupCreate(name=name, default_bid=Decimal(default_bid)), caller,
        )
    return _make


@pytest.fixture
def keyword_data():
    """Build a KeywordCreate for a campaign (and optionally an ad group)."""
    def _build(campaign, ad_group=None, text="running shoes", match_type=MatchType.EXACT,
               bid="1.50", is_negative=False) -> KeywordCreate:
        return KeywordCreate(
            campaign_id=str(campaign.id),
            ad_group_id=str(ad_group.id) if ad_group else None,
            keyword_text=text,
            match_type=match_type,
            bid=Decimal(bid),
            is_negative=is_negative,
        )
    return _build
