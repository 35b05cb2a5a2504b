from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AddArticleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    article_id: str = Field(alias="articleId", min_length=1, max_length=64, description="Catalog article id")
    quantity: int = Field(ge=1, description="Units to add")


class ArticleQuantityRequest(BaseModel):
    """Body for increment/decrement; the article comes from the path"""
    quantity: int = Field(default=1, ge=1)


class CartArticleOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    article_id: str = Field(alias="articleId")
    quantity: int
    validated: bool  # True once the catalog confirmed the article exists


class CartOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    enabled: bool
    order_id: str | None = Field(default=None, alias="orderId")
    articles: list[CartArticleOut]
    created: datetime
    updated: datetime
