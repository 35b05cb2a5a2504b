"""
Article Catalog client.

The catalog service is the source of truth for article status and stock.
Only ``GET /articles/{id}`` is consumed here.
"""

from dataclasses import dataclass
from urllib.parse import quote

import httpx

from app.core.config import settings


@dataclass(frozen=True)
class CatalogConfig:
    base_url: str
    timeout_seconds: float = 5.0


@dataclass(frozen=True)
class ArticleSnapshot:
    id: str
    enabled: bool
    stock: int
    name: str | None = None
    price: float | None = None


class MalformedArticleError(ValueError):
    """Catalog answered 200 with a body that is not an article."""


def parse_article(payload: object) -> ArticleSnapshot:
    if not isinstance(payload, dict):
        raise MalformedArticleError(f"expected an object, got {type(payload).__name__}")

    article_id = payload.get("_id", payload.get("id"))
    if not isinstance(article_id, str) or not article_id:
        raise MalformedArticleError("missing article id")

    enabled = payload.get("enabled")
    if not isinstance(enabled, bool):
        raise MalformedArticleError(f"article {article_id}: 'enabled' must be a boolean")

    stock = payload.get("stock")
    # bool is an int subclass; reject it explicitly
    if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
        raise MalformedArticleError(f"article {article_id}: 'stock' must be a non-negative integer")

    price = payload.get("price")
    return ArticleSnapshot(
        id=article_id,
        enabled=enabled,
        stock=stock,
        name=payload.get("name"),
        price=float(price) if isinstance(price, (int, float)) else None,
    )


class CatalogClient:
    """
    Async client for the catalog service.

    get_article returns None when the catalog answers 404 and raises for every
    other failure (httpx errors, non-2xx, MalformedArticleError).
    """

    def __init__(self, config: CatalogConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    async def get_article(self, article_id: str, auth_token: str) -> ArticleSnapshot | None:
        async with self._client() as client:
            response = await client.get(
                f"/articles/{quote(article_id, safe='')}",
                headers={"Authorization": auth_token},
            )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedArticleError(f"article {article_id}: body is not JSON") from e
        return parse_article(payload)


def get_catalog_client() -> CatalogClient:
    return CatalogClient(
        CatalogConfig(
            base_url=settings.CATALOG_SERVER_URL,
            timeout_seconds=settings.CATALOG_TIMEOUT_SECONDS,
        )
    )
