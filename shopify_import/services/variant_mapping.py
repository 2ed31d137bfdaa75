"""
Variant mapping: how Shopify variants collapse onto a local product.

The import loop only sees ``mapper.map(product)``; multi-variant expansion
can be added as another mapper without touching the orchestration.
"""
from typing import Any, Dict, Protocol

from shopify_import.utils.type_converters import to_float, to_int


class VariantMapper(Protocol):
    def map(self, product: Dict[str, Any]) -> Dict[str, Any]:
        ...


class FirstVariantMapper:
    """Single-price product from variants[0]; stock is summed over all variants."""

    def map(self, product: Dict[str, Any]) -> Dict[str, Any]:
        variants = product.get("variants") or []
        first = variants[0] if variants else {}

        return {
            "price": to_float(first.get("price")) or 0,
            "compare_price": to_float(first.get("compare_at_price")),
            "cost": None,
            "track_quantity": first.get("inventory_management") == "shopify",
            "stock_quantity": sum(to_int(v.get("inventory_quantity")) or 0 for v in variants),
            "allow_backorder": first.get("inventory_policy") == "continue",
            "weight": to_float(first.get("weight")),
            "weight_unit": first.get("weight_unit") or "kg",
        }
