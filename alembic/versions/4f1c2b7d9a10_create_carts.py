"""create carts

Revision ID: 4f1c2b7d9a10
Revises:
Create Date: 2026-10-19 10:40:12.118204
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "4f1c2b7d9a10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "carts",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("order_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_carts_user_id", "carts", ["user_id"])
    op.create_index(
        "uq_carts_user_enabled",
        "carts",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("enabled"),
        sqlite_where=sa.text("enabled = 1"),
    )

    op.create_table(
        "cart_articles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "cart_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("carts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("article_id", sa.String(64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("validated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("cart_id", "article_id", name="uq_cart_articles_cart_article"),
        sa.CheckConstraint("quantity >= 1", name="ck_cart_articles_quantity"),
    )
    op.create_index("ix_cart_articles_cart_id", "cart_articles", ["cart_id"])


def downgrade() -> None:
    op.drop_index("ix_cart_articles_cart_id", table_name="cart_articles")
    op.drop_table("cart_articles")
    op.drop_index("uq_carts_user_enabled", table_name="carts")
    op.drop_index("ix_carts_user_id", table_name="carts")
    op.drop_table("carts")
