from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..errors import StoreError
from .helpers import components, config, error_response, int_arg, payload


catalog_bp = Blueprint("catalog", __name__, url_prefix="/products")


def _catalog():
    return components()["catalog"]


@catalog_bp.get("/")
def list_products():
    result = _catalog().list_products(
        search=request.args.get("search") or None,
        timber_type=request.args.get("timber_type") or None,
        category=request.args.get("category") or None,
        grade=request.args.get("grade") or None,
        page=int_arg("page", 1),
        page_size=int_arg("page_size", config().page_size),
    )
    return jsonify(result)


@catalog_bp.get("/<int:product_id>")
def product_detail(product_id: int):
    product = _catalog().get_product(product_id)
    if not product:
        return jsonify({"success": False, "message": "Product not found"}), 404
    return jsonify({"product": product})


@catalog_bp.get("/timber-types")
def timber_types():
    return jsonify({"timber_types": _catalog().list_timber_types()})


@catalog_bp.get("/timber-types/<timber_type>")
def size_variants(timber_type: str):
    return jsonify({"timber_type": timber_type, "variants": _catalog().size_variants(timber_type)})


@catalog_bp.get("/featured")
def featured():
    return jsonify({"products": _catalog().featured_products(limit=config().featured_limit)})


@catalog_bp.get("/grades")
def grades():
    return jsonify({"grades": _catalog().list_grades()})


@catalog_bp.post("/calculate-price")
def calculate_price():
    data = payload()
    try:
        quote = _catalog().calculate_price(data.get("product_id"), data.get("quantity", 1))
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, **quote})
