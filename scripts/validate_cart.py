"""
Run the checkout validation for a user's current cart against the catalog.

Usage:
    python -m scripts.validate_cart <user_id> "<Authorization header value>"
"""
import asyncio
import json
import sys

from app.core import cart_ops
from app.core.cart_validation import get_cart_validator
from app.db.session import SessionLocal


async def run(user_id: str, token: str) -> dict:
    db = SessionLocal()
    try:
        cart = cart_ops.get_or_create_current_cart(db, user_id)
        lines = cart_ops.to_line_items(cart)
    finally:
        db.close()

    report = await get_cart_validator().validate(lines, token)
    return {
        "errors": [{"articleId": i.article_id, "message": i.message} for i in report.errors],
        "warnings": [{"articleId": i.article_id, "message": i.message} for i in report.warnings],
    }


def main():
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)

    result = asyncio.run(run(sys.argv[1], sys.argv[2]))
    print(json.dumps(result, indent=2, ensure_ascii=False))
    sys.exit(1 if result["errors"] else 0)

if __name__ == "__main__":
    main()
