"""
Cart validation before checkout.

Two stages:
  1. fan-out: one catalog lookup per cart line, all concurrent, each one
     settling into ArticleFound or LookupFailed (never raising)
  2. classification: pure join of the cart lines against the outcomes,
     producing a ValidationReport

Usage:
    validator = CartValidator(catalog_client)
    report = await validator.validate(lines, auth_token)
"""

import asyncio
from dataclasses import dataclass, field
from typing import Protocol, Sequence

import httpx

from app.core.catalog import ArticleSnapshot, MalformedArticleError, get_catalog_client
from app.core.logging import get_logger

logger = get_logger(__name__)

# Client-facing messages, part of the API contract
MSG_NOT_FOUND = "No se encuentra"
MSG_INVALID_ARTICLE = "Articulo inválido"
MSG_INSUFFICIENT_STOCK = "Insuficiente stock"


@dataclass(frozen=True)
class CartLineItem:
    article_id: str
    quantity: int


@dataclass(frozen=True)
class ArticleFound:
    article_id: str
    snapshot: ArticleSnapshot


@dataclass(frozen=True)
class LookupFailed:
    article_id: str
    reason: str  # not_found, timeout, http_error, transport_error, malformed, unexpected
    error: Exception | None = field(default=None, compare=False)


LookupOutcome = ArticleFound | LookupFailed


@dataclass(frozen=True)
class ValidationIssue:
    article_id: str
    message: str


@dataclass(frozen=True)
class ValidationReport:
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class ArticleLookup(Protocol):
    async def get_article(self, article_id: str, auth_token: str) -> ArticleSnapshot | None: ...


def _find_snapshot(article_id: str, outcomes: Sequence[LookupOutcome]) -> ArticleSnapshot | None:
    # First match wins when the catalog returns the same id more than once
    for outcome in outcomes:
        if isinstance(outcome, ArticleFound) and outcome.snapshot.id == article_id:
            return outcome.snapshot
    return None


def classify_lines(
    lines: Sequence[CartLineItem],
    outcomes: Sequence[LookupOutcome],
) -> ValidationReport:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    for line in lines:
        snapshot = _find_snapshot(line.article_id, outcomes)
        if snapshot is None:
            errors.append(ValidationIssue(line.article_id, MSG_NOT_FOUND))
        elif not snapshot.enabled:
            errors.append(ValidationIssue(line.article_id, MSG_INVALID_ARTICLE))
        elif snapshot.stock < line.quantity:
            warnings.append(ValidationIssue(line.article_id, MSG_INSUFFICIENT_STOCK))

    return ValidationReport(errors=tuple(errors), warnings=tuple(warnings))


class CartValidator:
    def __init__(self, catalog: ArticleLookup):
        self.catalog = catalog

    async def lookup(self, article_id: str, auth_token: str) -> LookupOutcome:
        """Look up one article, turning every failure into LookupFailed."""
        try:
            snapshot = await self.catalog.get_article(article_id, auth_token)
        except httpx.TimeoutException as e:
            return LookupFailed(article_id, "timeout", e)
        except httpx.HTTPStatusError as e:
            return LookupFailed(article_id, "http_error", e)
        except httpx.HTTPError as e:
            return LookupFailed(article_id, "transport_error", e)
        except MalformedArticleError as e:
            return LookupFailed(article_id, "malformed", e)
        except Exception as e:
            logger.exception("Unexpected catalog failure for article %s", article_id)
            return LookupFailed(article_id, "unexpected", e)

        if snapshot is None:
            return LookupFailed(article_id, "not_found")
        return ArticleFound(article_id, snapshot)

    async def lookup_all(self, lines: Sequence[CartLineItem], auth_token: str) -> list[LookupOutcome]:
        outcomes = await asyncio.gather(
            *[self.lookup(line.article_id, auth_token) for line in lines]
        )
        for outcome in outcomes:
            if isinstance(outcome, LookupFailed):
                logger.warning(
                    "Catalog lookup failed for article %s (%s): %s",
                    outcome.article_id,
                    outcome.reason,
                    outcome.error,
                )
        return list(outcomes)

    async def validate(self, lines: Sequence[CartLineItem], auth_token: str) -> ValidationReport:
        outcomes = await self.lookup_all(lines, auth_token)
        report = classify_lines(lines, outcomes)
        logger.info(
            "Validated %d cart lines: %d errors, %d warnings",
            len(lines),
            len(report.errors),
            len(report.warnings),
        )
        return report


def get_cart_validator() -> CartValidator:
    return CartValidator(get_catalog_client())
