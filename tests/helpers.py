import asyncio

import httpx
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.catalog import ArticleSnapshot
from app.core.security import CurrentUser
from app.models.cart import Cart, CartArticle

# One shared in-memory connection so every session sees the same tables
engine = create_engine(
    "sqlite+pysqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

AUTH = {"Authorization": "bearer test-token"}


def make_user(user_id: str = "user-1", token: str = "bearer test-token") -> CurrentUser:
    return CurrentUser(id=user_id, name="Test User", login="test", token=token, permissions=("user",))


def article(article_id: str, stock: int = 10, enabled: bool = True) -> ArticleSnapshot:
    return ArticleSnapshot(id=article_id, enabled=enabled, stock=stock, name=f"Article {article_id}", price=9.5)


class FakeCatalog:
    """
    In-memory stand-in for CatalogClient.

    Unknown ids answer None (404). Ids registered with fail() raise the given
    exception; delays let tests reorder completion of concurrent lookups.
    """

    def __init__(self):
        self.articles: dict[str, ArticleSnapshot] = {}
        self.failures: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[str, str]] = []

    def add(self, snapshot: ArticleSnapshot, served_as: str | None = None) -> "FakeCatalog":
        self.articles[served_as or snapshot.id] = snapshot
        return self

    def fail(self, article_id: str, error: Exception) -> "FakeCatalog":
        self.failures[article_id] = error
        return self

    async def get_article(self, article_id: str, auth_token: str) -> ArticleSnapshot | None:
        self.calls.append((article_id, auth_token))
        delay = self.delays.get(article_id)
        if delay:
            await asyncio.sleep(delay)
        if article_id in self.failures:
            raise self.failures[article_id]
        return self.articles.get(article_id)


def request_for(url: str = "http://catalog.test/v1/articles/x") -> httpx.Request:
    return httpx.Request("GET", url)


def create_cart(db, user_id: str = "user-1", lines: list[tuple[str, int]] | None = None, enabled: bool = True) -> Cart:
    c = Cart(user_id=user_id, enabled=enabled)
    for article_id, quantity in lines or []:
        c.articles.append(CartArticle(article_id=article_id, quantity=quantity, validated=False))
    db.add(c)
    db.commit()
    db.refresh(c)
    return c
