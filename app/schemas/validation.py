from pydantic import BaseModel, ConfigDict, Field


class CartValidationItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    article_id: str = Field(alias="articleId")
    message: str


class CartValidationResponse(BaseModel):
    """Result of the pre-checkout validation"""
    errors: list[CartValidationItem]  # Block checkout
    warnings: list[CartValidationItem]  # Non-blocking
