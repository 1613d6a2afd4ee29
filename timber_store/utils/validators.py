from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional

from ..errors import ValidationError
from ..models.product import PRODUCT_CATEGORIES


TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off", ""}


def ensure_positive_int(value, field: str) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field} must be an integer") from None
    if v <= 0:
        raise ValidationError(f"{field} must be > 0")
    return v


def to_decimal(value, field: str) -> Decimal:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number") from None
    if not d.is_finite():
        raise ValidationError(f"{field} must be a number")
    return d


def to_bool(value, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in TRUE_STRINGS:
            return True
        if v in FALSE_STRINGS:
            return False
    raise ValidationError(f"{field} must be true or false")


def require_fields(data: Dict, fields: Iterable[str], labels: Optional[Dict[str, str]] = None) -> None:
    labels = labels or {}
    for f in fields:
        v = data.get(f)
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValidationError(f"{labels.get(f, f)} is required")


PRODUCT_REQUIRED = {
    "product_name": "Product name",
    "timber_type": "Timber type",
    "product_category": "Product category",
    "product_grade": "Product grade",
    "dimensions": "Dimensions",
}
PRODUCT_POSITIVE = {
    "thickness": "Thickness",
    "width": "Width",
    "length": "Length",
    "price_per_unit": "Price",
}


def validate_product_fields(data: Dict, *, partial: bool = False) -> Dict:
    """Check and coerce product attributes; ``partial`` validates only the keys present."""
    if not partial:
        require_fields(data, PRODUCT_REQUIRED, PRODUCT_REQUIRED)
        require_fields(data, PRODUCT_POSITIVE, PRODUCT_POSITIVE)
    clean: Dict = {}
    for f, label in PRODUCT_REQUIRED.items():
        if f in data:
            v = str(data[f] or "").strip()
            if not v:
                raise ValidationError(f"{label} is required")
            clean[f] = v
    if "product_category" in clean and clean["product_category"] not in PRODUCT_CATEGORIES:
        raise ValidationError("Product category must be one of: " + ", ".join(PRODUCT_CATEGORIES))
    for f, label in PRODUCT_POSITIVE.items():
        if f in data:
            v = to_decimal(data[f], label)
            if v <= 0:
                raise ValidationError(f"{label} must be greater than 0")
            clean[f] = v
    if "quantity_in_stock" in data:
        v = to_decimal(data["quantity_in_stock"], "Quantity")
        if v < 0:
            raise ValidationError("Quantity must be non-negative")
        clean["quantity_in_stock"] = v
    elif not partial:
        clean["quantity_in_stock"] = Decimal("0")
    for f in ("unit", "product_description", "product_image"):
        if f in data:
            clean[f] = data[f]
    for f in ("is_featured", "is_active"):
        if f in data:
            clean[f] = to_bool(data[f], f)
    return clean
