from typing import Dict
from decimal import Decimal
from sqlalchemy import delete, func, select
from ..db.session import get_session
from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..models.product import Product
from ..models.cart_item import CartItem
from ..utils.validators import ensure_positive_int
from .logging import log_event


class CartService:
    """Per-user cart backed by DB, checked against live catalog stock."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def get_cart(self, *, user_id: int) -> Dict:
        with self._session_factory() as session:
            rows = session.execute(
                select(CartItem, Product)
                .join(Product, Product.product_id == CartItem.product_id)
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.added_date.desc(), CartItem.cart_id.desc())
            ).all()
            items = []
            subtotal = Decimal("0")
            count = 0
            for it, p in rows:
                line_total = Decimal(str(p.price_per_unit)) * it.quantity
                subtotal += line_total
                count += it.quantity
                items.append(
                    {
                        "cart_id": it.cart_id,
                        "product_id": p.product_id,
                        "product_name": p.product_name,
                        "product_description": p.product_description,
                        "product_image": p.product_image,
                        "timber_type": p.timber_type,
                        "product_grade": p.product_grade,
                        "dimensions": p.dimensions,
                        "quantity": it.quantity,
                        "price_per_unit": float(p.price_per_unit),
                        "line_total": float(line_total),
                    }
                )
            return {"items": items, "subtotal": float(subtotal), "item_count": count}

    def add_item(self, *, user_id: int, product_id: int, quantity: int = 1) -> Dict:
        if not product_id:
            raise ValidationError("Product ID is required")
        qnty = ensure_positive_int(quantity if quantity is not None else 1, "quantity")
        with self._session_factory() as session:
            prod = session.execute(
                select(Product).where(Product.product_id == product_id, Product.is_active.is_(True))
            ).scalar_one_or_none()
            if not prod:
                raise NotFoundError("Product not found or inactive")

            existing = session.execute(
                select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
            ).scalar_one_or_none()
            new_q = (existing.quantity if existing else 0) + qnty
            if new_q > prod.quantity_in_stock:
                raise InsufficientStockError(prod.product_id, prod.product_name)
            if existing:
                existing.quantity = new_q
                item = existing
            else:
                item = CartItem(user_id=user_id, product_id=product_id, quantity=qnty)
                session.add(item)
            session.flush()
            log_event("info", "cart.item_added", user_id=user_id, product_id=product_id, quantity=new_q)
            return {"status": "added", "cart_id": item.cart_id, "quantity": new_q}

    def update_item(self, *, user_id: int, cart_id: int, quantity: int) -> Dict:
        try:
            qnty = int(quantity)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError("quantity must be an integer") from None
        with self._session_factory() as session:
            it = session.execute(
                select(CartItem).where(CartItem.cart_id == cart_id, CartItem.user_id == user_id)
            ).scalar_one_or_none()
            if not it:
                raise NotFoundError("Cart item not found")
            if qnty <= 0:
                session.delete(it)
                session.flush()
                return {"status": "removed", "cart_id": cart_id}
            prod = session.get(Product, it.product_id)
            if prod is None or not prod.is_active:
                raise NotFoundError("Product not found or inactive")
            if qnty > prod.quantity_in_stock:
                raise InsufficientStockError(prod.product_id, prod.product_name)
            it.quantity = qnty
            session.flush()
            return {"status": "updated", "cart_id": cart_id, "quantity": qnty}

    def remove_item(self, *, user_id: int, cart_id: int) -> None:
        with self._session_factory() as session:
            session.execute(delete(CartItem).where(CartItem.cart_id == cart_id, CartItem.user_id == user_id))
        return None

    def clear_cart(self, *, user_id: int) -> None:
        with self._session_factory() as session:
            session.execute(delete(CartItem).where(CartItem.user_id == user_id))
        log_event("info", "cart.cleared", user_id=user_id)
        return None

    def count_items(self, *, user_id: int) -> int:
        with self._session_factory() as session:
            total = session.execute(
                select(func.coalesce(func.sum(CartItem.quantity), 0)).where(CartItem.user_id == user_id)
            ).scalar_one()
            return int(total or 0)
