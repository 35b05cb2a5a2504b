from app.models.cart import Cart, CartArticle

__all__ = [ "Cart", "CartArticle" ]
