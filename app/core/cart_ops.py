import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.cart_validation import CartLineItem
from app.models.cart import Cart, CartArticle


def find_current_cart(db: Session, user_id: str) -> Cart | None:
    return (
        db.query(Cart)
        .filter(Cart.user_id == user_id, Cart.enabled.is_(True))
        .order_by(Cart.created_at.desc())
        .first()
    )


def get_or_create_current_cart(db: Session, user_id: str) -> Cart:
    cart = find_current_cart(db, user_id)
    if cart:
        return cart

    cart = Cart(user_id=user_id, enabled=True)
    db.add(cart)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request created the user's enabled cart first
        db.rollback()
        cart = find_current_cart(db, user_id)
        if cart is None:
            raise
        return cart
    db.refresh(cart)
    return cart


def touch(cart: Cart) -> None:
    # Line changes only write cart_articles, so onupdate never fires for them
    cart.updated_at = datetime.now(timezone.utc)


def find_line(cart: Cart, article_id: str) -> CartArticle | None:
    for line in cart.articles:
        if line.article_id == article_id:
            return line
    return None


def add_article(cart: Cart, article_id: str, quantity: int) -> CartArticle:
    """Add quantity to an existing line, or append a new unvalidated line."""
    if quantity < 1:
        raise ValueError("quantity must be at least 1")

    touch(cart)
    line = find_line(cart, article_id)
    if line:
        line.quantity += quantity
        return line

    line = CartArticle(article_id=article_id, quantity=quantity, validated=False)
    cart.articles.append(line)
    return line


def decrement_article(cart: Cart, article_id: str, quantity: int) -> None:
    """Subtract quantity; a line that drops below 1 is removed. Unknown ids are ignored."""
    if quantity < 1:
        raise ValueError("quantity must be at least 1")

    line = find_line(cart, article_id)
    if not line:
        return

    touch(cart)
    if line.quantity - quantity < 1:
        cart.articles.remove(line)
    else:
        line.quantity -= quantity


def remove_article(cart: Cart, article_id: str) -> None:
    line = find_line(cart, article_id)
    if line:
        touch(cart)
        cart.articles.remove(line)


def checkout(cart: Cart) -> Cart:
    cart.order_id = str(uuid.uuid4())
    cart.enabled = False
    touch(cart)
    return cart


def to_line_items(cart: Cart) -> list[CartLineItem]:
    return [CartLineItem(article_id=a.article_id, quantity=a.quantity) for a in cart.articles]
