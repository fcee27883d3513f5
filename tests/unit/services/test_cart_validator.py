"""Tests unitarios para CartValidator."""

from types import SimpleNamespace

from order_limits.domain.models.cart import CartItem
from order_limits.services.cart import CartValidator


def make_rule(rule_type="product", target_id="111", min_quantity=None, max_quantity=None, enabled=True, message=None):
    return SimpleNamespace(
        rule_type=rule_type,
        target_id=target_id,
        min_quantity=min_quantity,
        max_quantity=max_quantity,
        enabled=enabled,
        message=message,
    )


def make_settings(global_min_cart=None, global_max_cart=None, block_checkout=True, show_cart_warning=True):
    return SimpleNamespace(
        global_min_cart=global_min_cart,
        global_max_cart=global_max_cart,
        block_checkout=block_checkout,
        show_cart_warning=show_cart_warning,
    )


def item(quantity, product_id="111", variant_id="999", title="Coffee Beans"):
    return CartItem(quantity=quantity, product_id=product_id, variant_id=variant_id, title=title)


class TestItemRules:
    """Tests para reglas de producto y variante."""

    def test_cart_without_rules_is_valid(self):
        """Un carrito sin reglas ni settings es válido."""
        result = CartValidator().validate([item(3)], [])

        assert result.valid is True
        assert result.violations == []
        assert result.total_quantity == 3

    def test_below_minimum_yields_one_min_violation(self):
        """Debe reportar exactamente una violación min con limit y current."""
        result = CartValidator().validate([item(1)], [make_rule(min_quantity=3)])

        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.type == "min"
        assert violation.limit == 3
        assert violation.current == 1
        assert violation.item == "Coffee Beans"
        assert violation.message == "Minimum quantity for Coffee Beans is 3"

    def test_above_maximum_yields_one_max_violation(self):
        """Debe reportar exactamente una violación max."""
        result = CartValidator().validate([item(12)], [make_rule(max_quantity=10)])

        assert [v.type for v in result.violations] == ["max"]
        assert result.violations[0].limit == 10
        assert result.violations[0].current == 12
        assert result.violations[0].message == "Maximum quantity for Coffee Beans is 10"

    def test_quantity_within_bounds_is_valid(self):
        """Los límites son inclusivos."""
        rules = [make_rule(min_quantity=2, max_quantity=5)]

        assert CartValidator().validate([item(2)], rules).valid is True
        assert CartValidator().validate([item(5)], rules).valid is True

    def test_variant_rule_matches_variant_id(self):
        """Una regla de variante aplica solo al variant_id indicado."""
        rules = [make_rule(rule_type="variant", target_id="999", min_quantity=4)]

        matching = CartValidator().validate([item(1, variant_id="999")], rules)
        other = CartValidator().validate([item(1, variant_id="555")], rules)

        assert [v.type for v in matching.violations] == ["min"]
        assert other.valid is True

    def test_global_id_matches_numeric_cart_id(self):
        """Un targetId en formato gid coincide con el id numérico del storefront."""
        rules = [make_rule(target_id="gid://shopify/Product/111", min_quantity=2)]

        result = CartValidator().validate([item(1, product_id=111)], rules)

        assert len(result.violations) == 1

    def test_rule_for_other_product_is_ignored(self):
        """Reglas de otros productos no generan violaciones."""
        result = CartValidator().validate([item(1, product_id="222")], [make_rule(min_quantity=5)])

        assert result.valid is True

    def test_disabled_rules_are_skipped(self):
        """Reglas deshabilitadas no se evalúan."""
        result = CartValidator().validate([item(1)], [make_rule(min_quantity=5, enabled=False)])

        assert result.valid is True

    def test_zero_bound_means_no_limit(self):
        """Un límite 0 o None no se aplica."""
        result = CartValidator().validate([item(50)], [make_rule(min_quantity=0, max_quantity=None)])

        assert result.valid is True

    def test_custom_message_is_used(self):
        """El mensaje de la regla reemplaza al mensaje por defecto."""
        rules = [make_rule(min_quantity=6, message="Sold by the half dozen")]

        result = CartValidator().validate([item(2)], rules)

        assert result.violations[0].message == "Sold by the half dozen"

    def test_violations_follow_cart_order(self):
        """Las violaciones siguen el orden de los items del carrito."""
        rules = [
            make_rule(target_id="111", min_quantity=3),
            make_rule(target_id="222", max_quantity=1),
        ]
        items = [item(5, product_id="222", title="Mug"), item(1, product_id="111", title="Beans")]

        result = CartValidator().validate(items, rules)

        assert [(v.type, v.item) for v in result.violations] == [("max", "Mug"), ("min", "Beans")]


class TestCartLimits:
    """Tests para límites del carrito completo."""

    def test_cart_total_below_global_minimum(self):
        """Aunque cada item cumpla, el total bajo el mínimo genera cart_min."""
        rules = [make_rule(min_quantity=1)]

        result = CartValidator().validate([item(2)], rules, make_settings(global_min_cart=5))

        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.type == "cart_min"
        assert violation.item is None
        assert violation.limit == 5
        assert violation.current == 2
        assert violation.message == "Minimum cart quantity is 5 items"

    def test_cart_total_above_global_maximum(self):
        """El total sobre el máximo genera cart_max."""
        items = [item(6, product_id="1"), item(6, product_id="2")]

        result = CartValidator().validate(items, [], make_settings(global_max_cart=10))

        assert [v.type for v in result.violations] == ["cart_max"]
        assert result.violations[0].current == 12

    def test_cart_rule_is_evaluated_against_total(self):
        """Las reglas de tipo cart se comparan con la cantidad total."""
        rules = [make_rule(rule_type="cart", target_id=None, min_quantity=10)]

        result = CartValidator().validate([item(4), item(4, product_id="2")], rules)

        assert [v.type for v in result.violations] == ["cart_min"]
        assert result.violations[0].current == 8

    def test_item_and_cart_violations_are_all_reported(self):
        """No hay corte temprano: se reportan todas las violaciones."""
        rules = [make_rule(min_quantity=3)]

        result = CartValidator().validate([item(1)], rules, make_settings(global_min_cart=4))

        assert [v.type for v in result.violations] == ["min", "cart_min"]


class TestFlags:
    """Tests para blockCheckout y showWarning."""

    def test_flags_default_to_true_without_settings(self):
        """Sin settings, blockCheckout y showWarning son True."""
        result = CartValidator().validate([item(1)], [])

        assert result.block_checkout is True
        assert result.show_warning is True

    def test_flags_come_from_settings(self):
        """Los flags reflejan los settings guardados."""
        settings = make_settings(block_checkout=False, show_cart_warning=False)

        result = CartValidator().validate([item(1)], [], settings)

        assert result.block_checkout is False
        assert result.show_warning is False

    def test_to_dict_shape(self):
        """La respuesta usa las claves del storefront."""
        result = CartValidator().validate([item(1)], [make_rule(min_quantity=2)])

        data = result.to_dict()

        assert data["valid"] is False
        assert data["blockCheckout"] is True
        assert data["showWarning"] is True
        assert data["totalQuantity"] == 1
        assert data["violations"][0] == {
            "type": "min",
            "item": "Coffee Beans",
            "limit": 2,
            "current": 1,
            "message": "Minimum quantity for Coffee Beans is 2",
        }
