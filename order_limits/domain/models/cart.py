"""
Cart domain models.

Represents a storefront cart as submitted for validation, the violations
found in it and the outcome returned to the storefront.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

VIOLATION_MIN = "min"
VIOLATION_MAX = "max"
VIOLATION_CART_MIN = "cart_min"
VIOLATION_CART_MAX = "cart_max"


@dataclass
class CartItem:
    """
    A cart line item.

    Attributes:
        product_id: Shopify product id (numeric or gid)
        variant_id: Shopify variant id (numeric or gid)
        quantity: Units in the cart
        title: Display title, used in violation messages
    """

    quantity: int
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    title: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        product_id = data.get("product_id")
        if product_id is None:
            product_id = data.get("productId")
        variant_id = data.get("variant_id")
        if variant_id is None:
            variant_id = data.get("variantId")
        return cls(
            quantity=int(data.get("quantity") or 0),
            product_id=str(product_id) if product_id is not None else None,
            variant_id=str(variant_id) if variant_id is not None else None,
            title=data.get("title") or "",
        )


@dataclass
class Violation:
    """A single rule or settings bound breached by the cart."""

    type: str
    limit: int
    current: int
    message: str
    item: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.item is not None:
            data["item"] = self.item
        data.update({"limit": self.limit, "current": self.current, "message": self.message})
        return data


@dataclass
class ValidationResult:
    """Outcome of validating a cart."""

    violations: List[Violation] = field(default_factory=list)
    total_quantity: int = 0
    block_checkout: bool = True
    show_warning: bool = True

    @property
    def valid(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [v.to_dict() for v in self.violations],
            "blockCheckout": self.block_checkout,
            "showWarning": self.show_warning,
            "totalQuantity": self.total_quantity,
        }
