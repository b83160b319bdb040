"""Create users, campaigns, ad_groups and keywords.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = ("ACTIVE", "PAUSED", "ARCHIVED")


def _counter_columns():
    return [
        sa.Column("impressions", sa.Numeric(20, 0), nullable=False, server_default="0"),
        sa.Column("clicks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("conversions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("spend", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("sales", sa.Numeric(14, 2), nullable=False, server_default="0"),
    ]


def upgrade() -> None:
    entity_status = postgresql.ENUM(*STATUSES, name="entity_status", create_type=False)
    campaign_type = postgresql.ENUM(
        "SPONSORED_PRODUCTS", "SPONSORED_BRANDS", "SPONSORED_DISPLAY", name="campaign_type", create_type=False,
    )
    match_type = postgresql.ENUM("BROAD", "PHRASE", "EXACT", name="match_type", create_type=False)
    bind = op.get_bind()
    entity_status.create(bind, checkfirst=True)
    campaign_type.create(bind, checkfirst=True)
    match_type.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=False)

    op.create_table(
        "campaigns",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("campaign_type", campaign_type, nullable=False),
        sa.Column("budget", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", entity_status, nullable=False, server_default="ACTIVE"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        *_counter_columns(),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.text("now()")),
        sa.CheckConstraint("budget > 0", name="ck_campaigns_budget_positive"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_campaigns_user_id", "campaigns", ["user_id"], unique=False)
    op.create_index("ix_campaigns_status", "campaigns", ["status"], unique=False)
    op.create_index("ix_campaigns_created_at", "campaigns", ["created_at"], unique=False)

    op.create_table(
        "ad_groups",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("default_bid", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", entity_status, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.text("now()")),
        sa.CheckConstraint("default_bid > 0", name="ck_ad_groups_default_bid_positive"),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ad_groups_campaign_id", "ad_groups", ["campaign_id"], unique=False)
    op.create_index("ix_ad_groups_status", "ad_groups", ["status"], unique=False)

    op.create_table(
        "keywords",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("ad_group_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("keyword_text", sa.String(512), nullable=False),
        sa.Column("match_type", match_type, nullable=False),
        sa.Column("bid", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_negative", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", entity_status, nullable=False, server_default="ACTIVE"),
        *_counter_columns(),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.text("now()")),
        sa.CheckConstraint("bid >= 0", name="ck_keywords_bid_non_negative"),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["ad_group_id"], ["ad_groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_keywords_campaign_id", "keywords", ["campaign_id"], unique=False)
    op.create_index("ix_keywords_ad_group_id", "keywords", ["ad_group_id"], unique=False)
    op.create_index("ix_keywords_status", "keywords", ["status"], unique=False)
    op.create_index("ix_keywords_is_negative", "keywords", ["is_negative"], unique=False)


def downgrade() -> None:
    op.drop_table("keywords")
    op.drop_table("ad_groups")
    op.drop_table("campaigns")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    bind = op.get_bind()
    for name in ("match_type", "campaign_type", "entity_status"):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
