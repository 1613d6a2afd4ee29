from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String, Text, UniqueConstraint, func
from .base import Base


PRODUCT_CATEGORIES = ("Timber", "Plywood", "Hardware", "Paints", "Building Materials")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("product_name", "timber_type", "dimensions"),
        CheckConstraint("quantity_in_stock >= 0", name="ck_products_stock_non_negative"),
    )

    product_id = Column(Integer, primary_key=True, autoincrement=True)
    product_name = Column(String(255), nullable=False)
    timber_type = Column(String(128), nullable=False, index=True)
    product_category = Column(String(32), nullable=False, default="Timber", index=True)
    product_grade = Column(String(64), nullable=False, index=True)
    dimensions = Column(String(64), nullable=False)
    thickness = Column(Numeric(10, 2), nullable=False)
    width = Column(Numeric(10, 2), nullable=False)
    length = Column(Numeric(10, 2), nullable=False)
    price_per_unit = Column(Numeric(15, 2), nullable=False)
    unit = Column(String(32), nullable=False, default="piece")
    quantity_in_stock = Column(Numeric(10, 2), nullable=False, default=0)
    product_description = Column(Text, nullable=True)
    product_image = Column(String(512), nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_date = Column(DateTime, nullable=False, server_default=func.now())
