from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship
from .base import Base


PENDING = "Pending"
PROCESSING = "Processing"
SHIPPED = "Shipped"
DELIVERED = "Delivered"
CANCELLED = "Cancelled"

ORDER_STATUSES = (PENDING, PROCESSING, SHIPPED, DELIVERED, CANCELLED)


class Order(Base):
    __tablename__ = "orders"

    order_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    total_amount = Column(Numeric(15, 2), nullable=False)
    order_status = Column(String(16), nullable=False, default=PENDING, index=True)
    shipping_address = Column(Text, nullable=False)
    shipping_city = Column(String(128), nullable=False)
    shipping_state = Column(String(128), nullable=True)
    shipping_zip = Column(String(32), nullable=True)
    shipping_phone = Column(String(64), nullable=True)
    customer_notes = Column(Text, nullable=True)
    order_date = Column(DateTime, nullable=False, server_default=func.now())
    updated_date = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.order_item_id")

    def to_dict(self):
        return {
            "order_id": self.order_id,
            "user_id": self.user_id,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "order_status": self.order_status,
            "total_amount": float(self.total_amount or 0),
            "shipping_address": self.shipping_address,
            "shipping_city": self.shipping_city,
            "shipping_state": self.shipping_state,
            "shipping_zip": self.shipping_zip,
            "shipping_phone": self.shipping_phone,
            "customer_notes": self.customer_notes,
        }
