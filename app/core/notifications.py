"""
Background article validation.

Loading a cart schedules a catalog check for the lines that were never
validated. It runs after the response is sent, on its own session, and every
failure is logged and dropped: it must never affect the cart request.
"""

import asyncio
import uuid

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from app.core.cart_validation import ArticleFound, CartValidator, get_cart_validator
from app.core.config import settings
from app.core.logging import get_logger
from app.db.session import get_session_factory
from app.models.cart import CartArticle

logger = get_logger(__name__)


class ArticleValidationNotifier:
    def __init__(self, validator: CartValidator, session_factory: sessionmaker, enabled: bool = True):
        self.validator = validator
        self.session_factory = session_factory
        self.enabled = enabled

    def pending_article_ids(self, lines: list[CartArticle]) -> list[str]:
        return [line.article_id for line in lines if not line.validated]

    async def validate_articles(self, cart_id: uuid.UUID, article_ids: list[str], auth_token: str) -> None:
        if not self.enabled or not article_ids:
            return

        try:
            outcomes = await asyncio.gather(
                *[self.validator.lookup(article_id, auth_token) for article_id in article_ids]
            )
            found = [
                o.article_id
                for o in outcomes
                if isinstance(o, ArticleFound) and o.snapshot.id == o.article_id
            ]
            skipped = sorted(set(article_ids) - set(found))
            if skipped:
                logger.info("Cart %s: articles not validated: %s", cart_id, ", ".join(skipped))

            if found:
                self._mark_validated(cart_id, found)
        except Exception:
            logger.exception("Background article validation failed for cart %s", cart_id)

    def _mark_validated(self, cart_id: uuid.UUID, article_ids: list[str]) -> None:
        db: Session = self.session_factory()
        try:
            (
                db.query(CartArticle)
                .filter(CartArticle.cart_id == cart_id, CartArticle.article_id.in_(article_ids))
                .update({CartArticle.validated: True}, synchronize_session=False)
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def get_article_validation_notifier(
    validator: CartValidator = Depends(get_cart_validator),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> ArticleValidationNotifier:
    return ArticleValidationNotifier(
        validator=validator,
        session_factory=session_factory,
        enabled=settings.ARTICLE_VALIDATION_ENABLED,
    )
