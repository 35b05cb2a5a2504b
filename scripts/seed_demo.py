import sys

from app.core import cart_ops
from app.db.session import SessionLocal

DEMO_USER_ID = "demo-user"

# article id -> quantity
DEMO_ARTICLES = {
    "5b2a8f3e9c1d4e0012a1b001": 2,
    "5b2a8f3e9c1d4e0012a1b002": 1,
    "5b2a8f3e9c1d4e0012a1b003": 5,
}


def main():
    user_id = sys.argv[1] if len(sys.argv) > 1 else DEMO_USER_ID
    db = SessionLocal()
    try:
        cart = cart_ops.get_or_create_current_cart(db, user_id)
        for article_id, quantity in DEMO_ARTICLES.items():
            if not cart_ops.find_line(cart, article_id):
                cart_ops.add_article(cart, article_id, quantity)
        db.commit()
        db.refresh(cart)

        print("Seeded cart", cart.id, "for user", user_id)
        for a in cart.articles:
            print(" ", a.article_id, a.quantity)
    finally:
        db.close()

if __name__ == "__main__":
    main()
