from typing import Dict, List, Optional, Tuple
from decimal import Decimal
import time
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from ..db.session import get_session
from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..models.product import Product
from ..utils.dto import to_product_dto
from ..utils.pagination import normalize_paging
from ..utils.validators import to_decimal, validate_product_fields
from .logging import log_event


_SIZE_ORDER = (Product.thickness, Product.width, Product.length)


class CatalogService:
    """Product catalog queries and staff-side product maintenance.

    Responsibilities:
    - List/search active products with parameterized filters and pagination
    - Group products by timber type and list the size variants of each
    - Price a quantity of a product against current stock
    - Create/update/deactivate products and adjust stock, clearing cached listings
    """

    def __init__(self, session_factory=get_session, cache_ttl_seconds: int = 60):
        self._session_factory = session_factory
        # key -> (ts, result)
        self._cache: Dict[Tuple, Tuple[float, Dict]] = {}
        self._cache_ttl_seconds = cache_ttl_seconds

    def list_products(
        self,
        *,
        search: Optional[str] = None,
        timber_type: Optional[str] = None,
        category: Optional[str] = None,
        grade: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Dict:
        """Return dict: { items: [ProductDTO], page, page_size, total }"""
        paging = normalize_paging(page, page_size)
        p, ps = paging
        cache_key = (search or "", timber_type or "", category or "", grade or "", p, ps)
        now = time.time()
        cached = self._cache.get(cache_key)
        if cached and now - cached[0] <= self._cache_ttl_seconds:
            return cached[1]

        with self._session_factory() as session:
            q = select(Product).where(Product.is_active.is_(True))
            if search:
                like = f"%{search}%"
                q = q.where(
                    or_(
                        Product.product_name.ilike(like),
                        Product.timber_type.ilike(like),
                        Product.product_description.ilike(like),
                    )
                )
            if timber_type:
                q = q.where(Product.timber_type == timber_type)
            if category:
                q = q.where(Product.product_category == category)
            if grade:
                q = q.where(Product.product_grade == grade)
            total = session.execute(select(func.count()).select_from(q.subquery())).scalar_one()
            rows = session.execute(
                q.order_by(Product.timber_type, *_SIZE_ORDER, Product.product_id)
                .offset(paging.offset)
                .limit(ps)
            ).scalars()
            result = {"items": [to_product_dto(r) for r in rows], "page": p, "page_size": ps, "total": total}
            self._cache[cache_key] = (now, result)
            return result

    def get_product(self, product_id: int) -> Dict:
        """Return ProductDTO for given product id, {} when missing or inactive."""
        with self._session_factory() as session:
            r = session.execute(
                select(Product).where(Product.product_id == product_id, Product.is_active.is_(True))
            ).scalar_one_or_none()
            return to_product_dto(r) if r else {}

    def list_timber_types(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.execute(
                select(
                    Product.timber_type,
                    Product.product_category,
                    func.min(Product.product_image),
                    func.count(Product.product_id),
                )
                .where(Product.is_active.is_(True))
                .group_by(Product.timber_type, Product.product_category)
                .order_by(Product.timber_type)
            ).all()
            return [
                {"timber_type": t, "product_category": c, "product_image": img, "variant_count": n}
                for t, c, img, n in rows
            ]

    def size_variants(self, timber_type: str) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.execute(
                select(Product)
                .where(Product.timber_type == timber_type, Product.is_active.is_(True))
                .order_by(*_SIZE_ORDER)
            ).scalars()
            return [to_product_dto(r) for r in rows]

    def featured_products(self, limit: int = 8) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.execute(
                select(Product)
                .where(Product.is_featured.is_(True), Product.is_active.is_(True))
                .order_by(Product.timber_type, Product.dimensions)
                .limit(limit)
            ).scalars()
            return [to_product_dto(r) for r in rows]

    def list_grades(self) -> List[str]:
        with self._session_factory() as session:
            rows = session.execute(
                select(Product.product_grade)
                .where(Product.is_active.is_(True))
                .distinct()
                .order_by(Product.product_grade)
            ).scalars()
            return list(rows)

    def calculate_price(self, product_id: int, quantity) -> Dict:
        qnty = to_decimal(quantity, "quantity")
        if qnty <= 0:
            raise ValidationError("quantity must be > 0")
        with self._session_factory() as session:
            prod = session.execute(
                select(Product).where(Product.product_id == product_id, Product.is_active.is_(True))
            ).scalar_one_or_none()
            if prod is None:
                raise NotFoundError("Product not found")
            unit_price = Decimal(str(prod.price_per_unit))
            return {
                "unit_price": float(unit_price),
                "total_price": float(unit_price * qnty),
                "unit": prod.unit,
                "available_stock": float(prod.quantity_in_stock),
                "can_order": qnty <= prod.quantity_in_stock,
            }

    def create_product(self, fields: Dict) -> Dict:
        clean = validate_product_fields(fields)
        try:
            with self._session_factory() as session:
                prod = Product(**clean)
                session.add(prod)
                session.flush()
                dto = to_product_dto(prod)
        except IntegrityError:
            raise ValidationError("A product with this name, timber type and dimensions already exists") from None
        self.invalidate_cache_for_product(dto["product_id"])
        log_event("info", "product.created", product_id=dto["product_id"], name=dto["product_name"])
        return dto

    def update_product(self, product_id: int, fields: Dict) -> Dict:
        clean = validate_product_fields(fields, partial=True)
        if not clean:
            raise ValidationError("No product fields supplied")
        try:
            with self._session_factory() as session:
                prod = session.get(Product, product_id)
                if prod is None:
                    raise NotFoundError("Product not found")
                for k, v in clean.items():
                    setattr(prod, k, v)
                session.flush()
                dto = to_product_dto(prod)
        except IntegrityError:
            raise ValidationError("A product with this name, timber type and dimensions already exists") from None
        self.invalidate_cache_for_product(product_id)
        log_event("info", "product.updated", product_id=product_id, fields=sorted(clean))
        return dto

    def deactivate_product(self, product_id: int) -> None:
        """Soft-delete: the product disappears from the storefront but order history keeps it."""
        with self._session_factory() as session:
            prod = session.get(Product, product_id)
            if prod is None:
                raise NotFoundError("Product not found")
            prod.is_active = False
        self.invalidate_cache_for_product(product_id)
        log_event("info", "product.deactivated", product_id=product_id)
        return None

    def adjust_stock(self, product_id: int, delta) -> Dict:
        """Add (or, with a negative delta, remove) stock without going below zero."""
        d = to_decimal(delta, "delta")
        with self._session_factory() as session:
            prod = session.get(Product, product_id)
            if prod is None:
                raise NotFoundError("Product not found")
            stmt = (
                update(Product)
                .where(Product.product_id == product_id)
                .values(quantity_in_stock=Product.quantity_in_stock + d)
                .execution_options(synchronize_session=False)
            )
            if d < 0:
                stmt = stmt.where(Product.quantity_in_stock >= -d)
            if session.execute(stmt).rowcount == 0:
                raise InsufficientStockError(product_id, prod.product_name)
            session.refresh(prod)
            dto = to_product_dto(prod)
        self.invalidate_cache_for_product(product_id)
        log_event("info", "product.stock_adjusted", product_id=product_id, delta=float(d), stock=dto["quantity_in_stock"])
        return dto

    def invalidate_cache_for_product(self, product_id: Optional[int] = None) -> None:
        """Invalidate query caches. Listings mix products, so everything is cleared."""
        self._cache.clear()
        return None
