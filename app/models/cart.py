import uuid
from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, CheckConstraint, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import sqlalchemy as sa

from app.db.base import Base


class Cart(Base):
    __tablename__ = "carts"
    __table_args__ = (
        # At most one enabled cart per user
        Index(
            "uq_carts_user_enabled",
            "user_id",
            unique=True,
            postgresql_where=sa.text("enabled"),
            sqlite_where=sa.text("enabled = 1"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Set on checkout, when the cart stops being the user's current cart
    order_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    articles: Mapped[list["CartArticle"]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartArticle.id",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
        onupdate=sa.func.now(),
    )


class CartArticle(Base):
    __tablename__ = "cart_articles"
    __table_args__ = (
        UniqueConstraint("cart_id", "article_id", name="uq_cart_articles_cart_article"),
        CheckConstraint("quantity >= 1", name="ck_cart_articles_quantity"),
    )

    # Autoincrement id doubles as the line order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    cart_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    article_id: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Set by the background catalog check
    validated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    cart: Mapped[Cart] = relationship(back_populates="articles")
