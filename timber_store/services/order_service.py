import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, List, Optional
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from ..db.session import get_session
from ..errors import EmptyCartError, InsufficientStockError, InvalidStateError, NotFoundError, StoreError, ValidationError
from ..models.cart_item import CartItem
from ..models.order import CANCELLED, DELIVERED, ORDER_STATUSES, PENDING, PROCESSING, SHIPPED, Order
from ..models.order_item import OrderItem
from ..models.product import Product
from ..models.user import User
from ..utils.dto import to_order_item_dto
from .logging import log_event


logger = logging.getLogger(__name__)

# fulfillment moves one step at a time; Cancelled goes through cancel_order only
NEXT_STATUS = {PENDING: PROCESSING, PROCESSING: SHIPPED, SHIPPED: DELIVERED}


@dataclass
class OrderResult:
    success: bool
    order_id: Optional[int] = None
    error: Optional[str] = None
    message: str = ""

    @classmethod
    def failed(cls, exc: StoreError, order_id: Optional[int] = None) -> "OrderResult":
        return cls(success=False, order_id=order_id, error=exc.kind, message=str(exc))

    def to_dict(self) -> Dict:
        data = {"success": self.success, "message": self.message}
        if self.order_id is not None:
            data["order_id"] = self.order_id
        if self.error:
            data["error"] = self.error
        return data


def _text(value) -> Optional[str]:
    # form values are strings; JSON bodies may carry numbers, anything else counts as missing
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return None


@dataclass
class ShippingDetails:
    address: str
    city: str
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Dict) -> "ShippingDetails":
        def _get(key):
            return _text(data.get(f"shipping_{key}", data.get(key)))

        return cls(
            address=_get("address") or "",
            city=_get("city") or "",
            state=_get("state") or None,
            zip=_get("zip") or None,
            phone=_get("phone") or None,
            notes=_text(data.get("customer_notes") or data.get("notes")) or None,
        )

    def validate(self) -> None:
        if not isinstance(self.address, str) or not self.address.strip():
            raise ValidationError("Shipping address is required")
        if not isinstance(self.city, str) or not self.city.strip():
            raise ValidationError("Shipping city is required")


@dataclass
class _Line:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal = field(init=False)

    def __post_init__(self):
        self.total_price = self.unit_price * self.quantity


class OrderService:
    """Checkout, cancellation and order queries.

    Checkout and cancellation each run in a single session scope, so every
    write they make commits together or not at all. Domain failures come back
    as an ``OrderResult`` rather than an exception.
    """

    def __init__(self, session_factory=get_session, on_stock_change: Optional[Callable[[], None]] = None):
        self._session_factory = session_factory
        # called after a committed checkout or cancellation, e.g. to drop cached listings
        self._on_stock_change = on_stock_change

    def create_order_from_cart(self, user_id: int, shipping: ShippingDetails) -> OrderResult:
        try:
            shipping.validate()
            order_id, total, lines = self._place_order(user_id, shipping)
        except StoreError as exc:
            log_event("warning", "order.create_failed", user_id=user_id, reason=exc.kind, message=str(exc))
            return OrderResult.failed(exc)
        except SQLAlchemyError:
            logger.exception("checkout failed for user %s", user_id)
            return OrderResult(success=False, error="database_error", message="Order could not be saved")
        self._stock_changed()
        log_event("info", "order.created", order_id=order_id, user_id=user_id, items=lines, total_amount=float(total))
        return OrderResult(success=True, order_id=order_id, message="Order created successfully")

    def cancel_order(self, order_id: int, user_id: int, elevated: bool = False) -> OrderResult:
        try:
            restored = self._cancel(order_id, user_id, elevated)
        except StoreError as exc:
            log_event("warning", "order.cancel_failed", order_id=order_id, user_id=user_id, reason=exc.kind)
            return OrderResult.failed(exc, order_id=order_id)
        except SQLAlchemyError:
            logger.exception("cancellation failed for order %s", order_id)
            return OrderResult(success=False, order_id=order_id, error="database_error", message="Order could not be cancelled")
        self._stock_changed()
        log_event("info", "order.cancelled", order_id=order_id, user_id=user_id, elevated=elevated, lines_restocked=restored)
        return OrderResult(success=True, order_id=order_id, message="Order cancelled successfully")

    def update_order_status(self, order_id: int, status: str) -> OrderResult:
        """Advance a live order along Pending -> Processing -> Shipped -> Delivered."""
        try:
            previous = self._advance(order_id, status)
        except StoreError as exc:
            return OrderResult.failed(exc, order_id=order_id)
        except SQLAlchemyError:
            logger.exception("status update failed for order %s", order_id)
            return OrderResult(success=False, order_id=order_id, error="database_error", message="Order status could not be updated")
        log_event("info", "order.status_changed", order_id=order_id, previous=previous, status=status)
        return OrderResult(success=True, order_id=order_id, message=f"Order marked {status}")

    def list_orders(self, user_id: int, elevated: bool = False) -> List[Dict]:
        with self._session_factory() as session:
            if elevated:
                rows = session.execute(
                    select(Order, User)
                    .join(User, User.user_id == Order.user_id)
                    .order_by(Order.order_date.desc(), Order.order_id.desc())
                ).all()
                result = []
                for o, u in rows:
                    data = o.to_dict()
                    data.update(
                        {
                            "user_firstname": u.user_firstname,
                            "user_lastname": u.user_lastname,
                            "user_email": u.user_email,
                        }
                    )
                    result.append(data)
                return result
            orders = session.execute(
                select(Order)
                .where(Order.user_id == user_id)
                .order_by(Order.order_date.desc(), Order.order_id.desc())
            ).scalars()
            return [o.to_dict() for o in orders]

    def get_order(self, order_id: int, user_id: int, elevated: bool = False) -> Optional[Dict]:
        """Order with its lines, or None when missing or not visible to the requester."""
        with self._session_factory() as session:
            stmt = select(Order).where(Order.order_id == order_id)
            if not elevated:
                stmt = stmt.where(Order.user_id == user_id)
            order = session.execute(stmt).scalar_one_or_none()
            if order is None:
                return None
            rows = session.execute(
                select(OrderItem, Product)
                .join(Product, Product.product_id == OrderItem.product_id)
                .where(OrderItem.order_id == order_id)
                .order_by(OrderItem.order_item_id)
            ).all()
            data = order.to_dict()
            if elevated:
                owner = session.get(User, order.user_id)
                if owner is not None:
                    data.update(
                        {
                            "user_firstname": owner.user_firstname,
                            "user_lastname": owner.user_lastname,
                            "user_email": owner.user_email,
                        }
                    )
            return {"order": data, "items": [to_order_item_dto(it, p) for it, p in rows]}

    def _stock_changed(self) -> None:
        if self._on_stock_change is not None:
            self._on_stock_change()

    def _place_order(self, user_id: int, shipping: ShippingDetails):
        with self._session_factory() as session:
            rows = session.execute(
                select(CartItem, Product)
                .join(Product, Product.product_id == CartItem.product_id)
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.cart_id)
            ).all()
            if not rows:
                raise EmptyCartError()

            lines: List[_Line] = []
            for it, prod in rows:
                if not prod.is_active:
                    raise InsufficientStockError(
                        prod.product_id, prod.product_name, message=f"{prod.product_name} is no longer available"
                    )
                lines.append(_Line(prod.product_id, prod.product_name, it.quantity, Decimal(str(prod.price_per_unit))))
            total = sum((ln.total_price for ln in lines), Decimal("0"))

            order = Order(
                user_id=user_id,
                total_amount=total,
                order_status=PENDING,
                shipping_address=shipping.address,
                shipping_city=shipping.city,
                shipping_state=shipping.state,
                shipping_zip=shipping.zip,
                shipping_phone=shipping.phone,
                customer_notes=shipping.notes,
            )
            session.add(order)
            session.flush()

            for ln in lines:
                session.add(
                    OrderItem(
                        order_id=order.order_id,
                        product_id=ln.product_id,
                        quantity=ln.quantity,
                        unit_price=ln.unit_price,
                        total_price=ln.total_price,
                    )
                )
                self._decrement_stock(session, ln.product_id, ln.product_name, ln.quantity)

            session.execute(delete(CartItem).where(CartItem.user_id == user_id))
            session.flush()
            return order.order_id, total, len(lines)

    def _decrement_stock(self, session, product_id: int, product_name: str, quantity) -> None:
        result = session.execute(
            update(Product)
            .where(Product.product_id == product_id, Product.quantity_in_stock >= quantity)
            .values(quantity_in_stock=Product.quantity_in_stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InsufficientStockError(product_id, product_name)

    def _cancel(self, order_id: int, user_id: int, elevated: bool) -> int:
        with self._session_factory() as session:
            stmt = select(Order).where(Order.order_id == order_id).with_for_update()
            if not elevated:
                stmt = stmt.where(Order.user_id == user_id)
            order = session.execute(stmt).scalar_one_or_none()
            # missing and not-yours look the same to the caller
            if order is None:
                raise NotFoundError("Order not found")
            if order.order_status != PENDING:
                raise InvalidStateError("Only pending orders can be cancelled")
            order.order_status = CANCELLED

            items = session.execute(
                select(OrderItem.product_id, OrderItem.quantity).where(OrderItem.order_id == order_id)
            ).all()
            for product_id, quantity in items:
                self._restock(session, product_id, quantity)
            session.flush()
            return len(items)

    def _restock(self, session, product_id: int, quantity) -> None:
        session.execute(
            update(Product)
            .where(Product.product_id == product_id)
            .values(quantity_in_stock=Product.quantity_in_stock + quantity)
            .execution_options(synchronize_session=False)
        )

    def _advance(self, order_id: int, status: str) -> str:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Unknown order status: {status}")
        if status == CANCELLED:
            raise InvalidStateError("Use order cancellation to cancel an order")
        with self._session_factory() as session:
            order = session.execute(
                select(Order).where(Order.order_id == order_id).with_for_update()
            ).scalar_one_or_none()
            if order is None:
                raise NotFoundError("Order not found")
            previous = order.order_status
            if previous in (CANCELLED, DELIVERED):
                raise InvalidStateError(f"{previous} orders cannot change status")
            if NEXT_STATUS.get(previous) != status:
                raise InvalidStateError(f"Cannot move order from {previous} to {status}")
            order.order_status = status
            return previous
