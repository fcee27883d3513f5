"""
CartValidator service for checking storefront carts against quantity rules.

This service follows SRP by focusing only on evaluating a cart against the
shop's enabled rules and settings. It performs no I/O: callers load the
rules and settings and pass them in.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence

from order_limits.domain.models.cart import (
    VIOLATION_CART_MAX,
    VIOLATION_CART_MIN,
    VIOLATION_MAX,
    VIOLATION_MIN,
    CartItem,
    ValidationResult,
    Violation,
)
from order_limits.utils.id_utils import ids_match

logger = logging.getLogger(__name__)

RULE_TYPE_PRODUCT = "product"
RULE_TYPE_VARIANT = "variant"
RULE_TYPE_CART = "cart"


class CartValidator:
    """
    Validates a cart against per-item and cart-wide quantity limits.

    Violations are collected in a fixed order:
    - item rules, per line item in cart order, then per rule
    - cart-type rules
    - settings global_min_cart / global_max_cart

    Nothing short-circuits; every breached bound is reported.
    """

    def validate(
        self,
        items: Sequence[CartItem],
        rules: Iterable[Any],
        settings: Optional[Any] = None,
    ) -> ValidationResult:
        """
        Validate a cart.

        Args:
            items: Cart line items
            rules: The shop's enabled rules (ORM rows or any object with the same attributes)
            settings: The shop's settings row, or None

        Returns:
            ValidationResult: violations plus blockCheckout/showWarning flags
        """
        rules = [rule for rule in rules if rule.enabled is not False]
        violations: List[Violation] = []

        for item in items:
            for rule in self._rules_for_item(item, rules):
                violations.extend(self._check_item(item, rule))

        total_quantity = sum(item.quantity for item in items)

        for rule in rules:
            if rule.rule_type == RULE_TYPE_CART:
                violations.extend(
                    self._check_cart_total(total_quantity, rule.min_quantity, rule.max_quantity, rule.message)
                )

        if settings is not None:
            violations.extend(
                self._check_cart_total(total_quantity, settings.global_min_cart, settings.global_max_cart)
            )

        result = ValidationResult(
            violations=violations,
            total_quantity=total_quantity,
            block_checkout=self._flag(settings, "block_checkout"),
            show_warning=self._flag(settings, "show_cart_warning"),
        )

        if violations:
            logger.info(
                f"Cart with {len(items)} items ({total_quantity} units) has "
                f"{len(violations)} violations: {[v.type for v in violations]}"
            )
        else:
            logger.debug(f"Cart with {len(items)} items ({total_quantity} units) is valid")

        return result

    def _rules_for_item(self, item: CartItem, rules: List[Any]) -> List[Any]:
        """Rules whose product or variant target matches the line item."""
        matching = []
        for rule in rules:
            if rule.rule_type == RULE_TYPE_PRODUCT and ids_match(rule.target_id, item.product_id):
                matching.append(rule)
            elif rule.rule_type == RULE_TYPE_VARIANT and ids_match(rule.target_id, item.variant_id):
                matching.append(rule)
        return matching

    def _check_item(self, item: CartItem, rule: Any) -> List[Violation]:
        violations = []

        if rule.min_quantity and item.quantity < rule.min_quantity:
            violations.append(
                Violation(
                    type=VIOLATION_MIN,
                    item=item.title,
                    limit=rule.min_quantity,
                    current=item.quantity,
                    message=rule.message or f"Minimum quantity for {item.title} is {rule.min_quantity}",
                )
            )

        if rule.max_quantity and item.quantity > rule.max_quantity:
            violations.append(
                Violation(
                    type=VIOLATION_MAX,
                    item=item.title,
                    limit=rule.max_quantity,
                    current=item.quantity,
                    message=rule.message or f"Maximum quantity for {item.title} is {rule.max_quantity}",
                )
            )

        return violations

    def _check_cart_total(
        self,
        total_quantity: int,
        min_quantity: Optional[int],
        max_quantity: Optional[int],
        message: Optional[str] = None,
    ) -> List[Violation]:
        violations = []

        if min_quantity and total_quantity < min_quantity:
            violations.append(
                Violation(
                    type=VIOLATION_CART_MIN,
                    limit=min_quantity,
                    current=total_quantity,
                    message=message or f"Minimum cart quantity is {min_quantity} items",
                )
            )

        if max_quantity and total_quantity > max_quantity:
            violations.append(
                Violation(
                    type=VIOLATION_CART_MAX,
                    limit=max_quantity,
                    current=total_quantity,
                    message=message or f"Maximum cart quantity is {max_quantity} items",
                )
            )

        return violations

    @staticmethod
    def _flag(settings: Optional[Any], name: str) -> bool:
        # Flags default to True when the shop has no settings row
        if settings is None:
            return True
        value = getattr(settings, name, None)
        return True if value is None else bool(value)
