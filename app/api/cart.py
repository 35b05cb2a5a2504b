from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Path, Response, status
from sqlalchemy.orm import Session

from app.core import cart_ops
from app.core.cart_validation import CartValidator, ValidationReport, get_cart_validator
from app.core.logging import get_logger
from app.core.notifications import ArticleValidationNotifier, get_article_validation_notifier
from app.core.security import CurrentUser, get_current_user
from app.db.session import get_db
from app.models.cart import Cart
from app.schemas.cart import AddArticleRequest, ArticleQuantityRequest, CartArticleOut, CartOut
from app.schemas.validation import CartValidationItem, CartValidationResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])


def to_out(c: Cart) -> CartOut:
    return CartOut(
        id=str(c.id),
        user_id=c.user_id,
        enabled=c.enabled,
        order_id=c.order_id,
        articles=[
            CartArticleOut(article_id=a.article_id, quantity=a.quantity, validated=a.validated)
            for a in c.articles
        ],
        created=c.created_at,
        updated=c.updated_at,
    )


def report_to_out(report: ValidationReport) -> CartValidationResponse:
    return CartValidationResponse(
        errors=[CartValidationItem(article_id=i.article_id, message=i.message) for i in report.errors],
        warnings=[CartValidationItem(article_id=i.article_id, message=i.message) for i in report.warnings],
    )


def get_current_cart(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    notifier: ArticleValidationNotifier = Depends(get_article_validation_notifier),
) -> Cart:
    """
    The user's enabled cart, created on first access.

    Lines never confirmed by the catalog are checked in the background.
    """
    cart = cart_ops.get_or_create_current_cart(db, user.id)

    pending = notifier.pending_article_ids(cart.articles)
    if notifier.enabled and pending:
        background_tasks.add_task(notifier.validate_articles, cart.id, pending, user.token)
    return cart


async def run_cart_validation(
    cart: Cart = Depends(get_current_cart),
    user: CurrentUser = Depends(get_current_user),
    validator: CartValidator = Depends(get_cart_validator),
) -> ValidationReport:
    """Pre-checkout gate: validates every line against the catalog."""
    return await validator.validate(cart_ops.to_line_items(cart), user.token)


@router.get("", response_model=CartOut)
def get_cart(cart: Cart = Depends(get_current_cart)):
    return to_out(cart)


@router.post("/article", response_model=CartOut)
def add_article(
    payload: AddArticleRequest,
    db: Session = Depends(get_db),
    cart: Cart = Depends(get_current_cart),
):
    """Add units of an article, merging with an existing line."""
    cart_ops.add_article(cart, payload.article_id, payload.quantity)
    db.commit()
    db.refresh(cart)
    return to_out(cart)


@router.post("/article/{article_id}/increment", response_model=CartOut)
def increment_article(
    article_id: str = Path(max_length=64),
    payload: ArticleQuantityRequest | None = None,
    db: Session = Depends(get_db),
    cart: Cart = Depends(get_current_cart),
):
    quantity = payload.quantity if payload else 1
    cart_ops.add_article(cart, article_id, quantity)
    db.commit()
    db.refresh(cart)
    return to_out(cart)


@router.post("/article/{article_id}/decrement", response_model=CartOut)
def decrement_article(
    article_id: str = Path(max_length=64),
    payload: ArticleQuantityRequest | None = None,
    db: Session = Depends(get_db),
    cart: Cart = Depends(get_current_cart),
):
    """Decrement units; the line is removed when it drops below 1."""
    quantity = payload.quantity if payload else 1
    cart_ops.decrement_article(cart, article_id, quantity)
    db.commit()
    db.refresh(cart)
    return to_out(cart)


@router.delete("/article/{article_id}")
def delete_article(
    article_id: str = Path(max_length=64),
    db: Session = Depends(get_db),
    cart: Cart = Depends(get_current_cart),
):
    cart_ops.remove_article(cart, article_id)
    db.commit()
    return Response(status_code=status.HTTP_200_OK)


@router.post("/validate", response_model=CartValidationResponse)
async def validate_cart(report: ValidationReport = Depends(run_cart_validation)):
    """
    Full validation of the cart against the catalog, as done before checkout.
    Errors block checkout, warnings do not.
    """
    return report_to_out(report)


@router.post("/checkout", response_model=CartOut)
def checkout_cart(
    db: Session = Depends(get_db),
    cart: Cart = Depends(get_current_cart),
    report: ValidationReport = Depends(run_cart_validation),
):
    if report.has_errors:
        logger.info("Checkout blocked for cart %s: %d errors", cart.id, len(report.errors))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=report_to_out(report).model_dump(by_alias=True),
        )

    cart_ops.checkout(cart)
    db.commit()
    db.refresh(cart)
    logger.info("Cart %s checked out as order %s", cart.id, cart.order_id)
    return to_out(cart)
