#!/usr/bin/env python3
"""
Seed the default user and a demo campaign tree with static performance counters.
Run from backend/: python -m scripts.seed_demo_data
"""
import asyncio
import sys
import uuid
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

DEMO_KEYWORDS = [
    # text, match type, bid, negative, (impressions, clicks, conversions, spend, sales)
    ("wireless earbuds", "EXACT", "1.50", False, (12500, 410, 38, "512.40", "1890.00")),
    ("bluetooth headphones", "PHRASE", "1.10", False, (30400, 620, 41, "598.10", "1640.50")),
    ("earbuds", "BROAD", "0.85", False, (88000, 950, 52, "720.00", "2210.75")),
    ("free", "BROAD", "0", True, (0, 0, 0, "0", "0")),
]


async def main():
    from sqlalchemy import select
    from ppc_manager.auth import CallerContext
    from ppc_manager.config import get_settings
    from ppc_manager.database import init_db, session_scope
    from ppc_manager.models import Campaign, CampaignType, Keyword, MatchType, User
    from ppc_manager.schemas import AdGroupCreate, CampaignCreate, KeywordCreate
    from ppc_manager.services.ad_group_service import AdGroupService
    from ppc_manager.services.campaign_service import CampaignService
    from ppc_manager.services.keyword_service import KeywordService
    from ppc_manager.store import SqlAlchemyStore

    settings = get_settings()
    caller = CallerContext(user_id=uuid.UUID(settings.default_user_id))
    await init_db()

    async with session_scope() as db:
        if not (await db.execute(select(User).where(User.id == caller.user_id))).scalar_one_or_none():
            db.add(User(id=caller.user_id, email=settings.default_user_email.lower(), name="Demo User"))
            await db.flush()

        existing = (await db.execute(select(Campaign).where(Campaign.user_id == caller.user_id))).first()
        if existing:
            print("Campaigns already exist for the default user. Nothing to seed.")
            return

        store = SqlAlchemyStore(db)
        campaign = await CampaignService(store).create_campaign(
            CampaignCreate(name="Audio — Sponsored Products", campaign_type=CampaignType.SPONSORED_PRODUCTS,
                           budget=Decimal("150.00")),
            caller,
        )
        ad_group = await AdGroupService(store).create_ad_group(
            campaign.id, AdGroupCreate(name="Earbuds", default_bid=Decimal("1.00")), caller,
        )

        totals = dict(impressions=0, clicks=0, conversions=0, spend=Decimal(0), sales=Decimal(0))
        keyword_service = KeywordService(store)
        for text, match_type, bid, negative, (imp, clicks, conv, spend, sales) in DEMO_KEYWORDS:
            keyword = await keyword_service.create_keyword(
                KeywordCreate(campaign_id=str(campaign.id), ad_group_id=str(ad_group.id), keyword_text=text,
                              match_type=MatchType(match_type), bid=Decimal(bid), is_negative=negative),
                caller,
            )
            counters = dict(impressions=imp, clicks=clicks, conversions=conv,
                            spend=Decimal(spend), sales=Decimal(sales))
            await store.update_fields(Keyword, keyword.id, counters)
            for name, value in counters.items():
                totals[name] += value

        await store.update_fields(Campaign, campaign.id, totals)
        print(f"Seeded campaign {campaign.id} with {len(DEMO_KEYWORDS)} keywords")


if __name__ == "__main__":
    asyncio.run(main())
