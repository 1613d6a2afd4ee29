from typing import Any, Dict


def _num(value) -> float:
    return float(value or 0)


def to_product_dto(row: Any) -> Dict:
    return {
        "product_id": getattr(row, "product_id", None),
        "product_name": getattr(row, "product_name", None),
        "timber_type": getattr(row, "timber_type", None),
        "product_category": getattr(row, "product_category", None),
        "product_grade": getattr(row, "product_grade", None),
        "dimensions": getattr(row, "dimensions", None),
        "thickness": _num(getattr(row, "thickness", 0)),
        "width": _num(getattr(row, "width", 0)),
        "length": _num(getattr(row, "length", 0)),
        "price_per_unit": _num(getattr(row, "price_per_unit", 0)),
        "unit": getattr(row, "unit", None) or "piece",
        "quantity_in_stock": _num(getattr(row, "quantity_in_stock", 0)),
        "product_description": getattr(row, "product_description", None),
        "product_image": getattr(row, "product_image", None),
        "is_featured": bool(getattr(row, "is_featured", False)),
        "is_active": bool(getattr(row, "is_active", True)),
    }


def to_order_item_dto(item: Any, product: Any = None) -> Dict:
    data = {
        "order_item_id": item.order_item_id,
        "product_id": item.product_id,
        "quantity": _num(item.quantity),
        "unit_price": _num(item.unit_price),
        "total_price": _num(item.total_price),
    }
    if product is not None:
        data.update(
            {
                "product_name": product.product_name,
                "timber_type": product.timber_type,
                "product_grade": product.product_grade,
                "product_description": product.product_description,
            }
        )
    return data
