"""
PPC Campaign Manager — Database Models
Campaign → Ad Group → Keyword hierarchy with denormalized performance counters.
Nothing is ever physically deleted: "delete" moves status to ARCHIVED.
"""

import uuid
import enum
from datetime import date, datetime, timezone
from decimal import Decimal
from sqlalchemy import (
    String, Integer, Numeric, Boolean, Date, DateTime,
    ForeignKey, Index, CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID
from ppc_manager.database import Base


def _utcnow() -> datetime:
    """Naive UTC now — matches DB columns (TIMESTAMP WITHOUT TIME ZONE)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class EntityStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ARCHIVED = "ARCHIVED"


class MatchType(str, enum.Enum):
    BROAD = "BROAD"
    PHRASE = "PHRASE"
    EXACT = "EXACT"


class CampaignType(str, enum.Enum):
    SPONSORED_PRODUCTS = "SPONSORED_PRODUCTS"
    SPONSORED_BRANDS = "SPONSORED_BRANDS"
    SPONSORED_DISPLAY = "SPONSORED_DISPLAY"


_status_enum = SAEnum(EntityStatus, name="entity_status")

# Counter columns shared by Campaign and Keyword
COUNTER_FIELDS = ("impressions", "clicks", "conversions", "spend", "sales")

# Column limits, checked by the validation rules before any write
NAME_MAX_LENGTH = 255
KEYWORD_TEXT_MAX_LENGTH = 512
MAX_BID = Decimal("99999999.99")          # Numeric(10, 2)
MAX_BUDGET = Decimal("9999999999.99")     # Numeric(12, 2)


# ══════════════════════════════════════════════════════════════════════
#  USERS — Campaign owners
# ══════════════════════════════════════════════════════════════════════

class User(Base):
    """Campaign owner. Until auth exists a single configured user owns everything."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    campaigns: Mapped[list["Campaign"]] = relationship("Campaign", back_populates="user")

    __table_args__ = (
        Index("ix_users_email", "email"),
    )


# ══════════════════════════════════════════════════════════════════════
#  CAMPAIGNS
# ══════════════════════════════════════════════════════════════════════

class Campaign(Base):
    """Top-level budget/grouping entity."""
    __tablename__ = "campaigns"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    campaign_type: Mapped[CampaignType] = mapped_column(
        SAEnum(CampaignType, name="campaign_type"), default=CampaignType.SPONSORED_PRODUCTS, nullable=False,
    )
    budget: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[EntityStatus] = mapped_column(_status_enum, default=EntityStatus.ACTIVE, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=True)
    impressions: Mapped[Decimal] = mapped_column(Numeric(20, 0), default=0, nullable=False)
    clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conversions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    spend: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    sales: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="campaigns")
    ad_groups: Mapped[list["AdGroup"]] = relationship("AdGroup", back_populates="campaign")
    keywords: Mapped[list["Keyword"]] = relationship("Keyword", back_populates="campaign")

    __table_args__ = (
        CheckConstraint("budget > 0", name="ck_campaigns_budget_positive"),
        Index("ix_campaigns_user_id", "user_id"),
        Index("ix_campaigns_status", "status"),
        Index("ix_campaigns_created_at", "created_at"),
    )


# ══════════════════════════════════════════════════════════════════════
#  AD GROUPS
# ══════════════════════════════════════════════════════════════════════

class AdGroup(Base):
    """Keyword grouping within a campaign, carrying a default bid."""
    __tablename__ = "ad_groups"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    campaign_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    default_bid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[EntityStatus] = mapped_column(_status_enum, default=EntityStatus.ACTIVE, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    # Relationships
    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="ad_groups")
    keywords: Mapped[list["Keyword"]] = relationship("Keyword", back_populates="ad_group")

    __table_args__ = (
        CheckConstraint("default_bid > 0", name="ck_ad_groups_default_bid_positive"),
        Index("ix_ad_groups_campaign_id", "campaign_id"),
        Index("ix_ad_groups_status", "status"),
    )


# ══════════════════════════════════════════════════════════════════════
#  KEYWORDS
# ══════════════════════════════════════════════════════════════════════

class Keyword(Base):
    """Leaf targeting entity. Negative keywords are exclusions and conventionally bid 0."""
    __tablename__ = "keywords"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    campaign_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    ad_group_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("ad_groups.id", ondelete="CASCADE"), nullable=True)
    keyword_text: Mapped[str] = mapped_column(String(KEYWORD_TEXT_MAX_LENGTH), nullable=False)
    match_type: Mapped[MatchType] = mapped_column(SAEnum(MatchType, name="match_type"), nullable=False)
    bid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_negative: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[EntityStatus] = mapped_column(_status_enum, default=EntityStatus.ACTIVE, nullable=False)
    impressions: Mapped[Decimal] = mapped_column(Numeric(20, 0), default=0, nullable=False)
    clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    conversions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    spend: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    sales: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    # Relationships
    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="keywords")
    ad_group: Mapped["AdGroup"] = relationship("AdGroup", back_populates="keywords")

    __table_args__ = (
        CheckConstraint("bid >= 0", name="ck_keywords_bid_non_negative"),
        Index("ix_keywords_campaign_id", "campaign_id"),
        Index("ix_keywords_ad_group_id", "ad_group_id"),
        Index("ix_keywords_status", "status"),
        Index("ix_keywords_is_negative", "is_negative"),
    )
