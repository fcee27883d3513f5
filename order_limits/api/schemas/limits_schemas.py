"""
Modelos Pydantic para la API de límites de pedido.

Este módulo define los schemas de entrada de reglas, settings y
validación de carrito. Los nombres de campo siguen el JSON de la API
(camelCase).
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class RuleType(str, Enum):
    """Alcance de una regla."""

    PRODUCT = "product"
    VARIANT = "variant"
    CART = "cart"


def parse_bound(value: Any) -> Optional[int]:
    """
    Convierte un límite recibido en la API a entero.

    Acepta enteros o strings numéricos; vacío, cero o null significan
    "sin límite".

    Raises:
        ValueError: Si el valor no es un entero no negativo
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("must be an integer")

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = int(value)
        except ValueError as e:
            raise ValueError("must be an integer") from e

    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("must be an integer")
        value = int(value)

    if not isinstance(value, int):
        raise ValueError("must be an integer")
    if value < 0:
        raise ValueError("must not be negative")

    return value or None


def _check_min_max(min_value: Optional[int], max_value: Optional[int], label: str) -> None:
    if min_value is not None and max_value is not None and min_value > max_value:
        raise ValueError(f"minimum {label} cannot be greater than maximum {label}")


# Rule Models


class RuleCreate(BaseModel):
    """Body de POST /api/rules."""

    shop: Optional[str] = None
    ruleType: RuleType
    targetId: Optional[str] = None
    targetTitle: Optional[str] = None
    minQuantity: Optional[int] = None
    maxQuantity: Optional[int] = None
    message: Optional[str] = None

    @field_validator("minQuantity", "maxQuantity", mode="before")
    @classmethod
    def validate_bounds(cls, v):
        return parse_bound(v)

    @field_validator("targetId", mode="before")
    @classmethod
    def validate_target_id(cls, v):
        """Ids numéricos se guardan como string."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @model_validator(mode="after")
    def validate_rule(self):
        if self.ruleType in (RuleType.PRODUCT, RuleType.VARIANT) and not self.targetId:
            raise ValueError(f"targetId is required for {self.ruleType.value} rules")
        _check_min_max(self.minQuantity, self.maxQuantity, "quantity")
        return self


class RuleUpdate(BaseModel):
    """Body de PUT /api/rules/{id}; solo se aplican los campos enviados."""

    minQuantity: Optional[int] = None
    maxQuantity: Optional[int] = None
    enabled: Optional[bool] = None
    message: Optional[str] = None
    targetTitle: Optional[str] = None

    @field_validator("minQuantity", "maxQuantity", mode="before")
    @classmethod
    def validate_bounds(cls, v):
        return parse_bound(v)

    def to_changes(self) -> Dict[str, Any]:
        """Campos enviados, con nombres de columna."""
        columns = {
            "minQuantity": "min_quantity",
            "maxQuantity": "max_quantity",
            "enabled": "enabled",
            "message": "message",
            "targetTitle": "target_title",
        }
        changes = {columns[name]: getattr(self, name) for name in self.model_fields_set}
        # enabled null no desactiva la regla
        if changes.get("enabled", True) is None:
            changes.pop("enabled")
        return changes


# Settings Models


class SettingsUpdate(BaseModel):
    """Body de PUT /api/settings."""

    shop: Optional[str] = None
    globalMinCart: Optional[int] = None
    globalMaxCart: Optional[int] = None
    showCartWarning: Optional[bool] = None
    blockCheckout: Optional[bool] = None
    customMessageEnabled: Optional[bool] = None

    @field_validator("globalMinCart", "globalMaxCart", mode="before")
    @classmethod
    def validate_bounds(cls, v):
        return parse_bound(v)

    @model_validator(mode="after")
    def validate_cart_bounds(self):
        _check_min_max(self.globalMinCart, self.globalMaxCart, "cart quantity")
        return self

    def to_changes(self) -> Dict[str, Any]:
        """
        Cambios a aplicar. Los límites siempre se escriben (ausente = sin
        límite); los toggles solo si vienen con valor.
        """
        changes: Dict[str, Any] = {
            "global_min_cart": self.globalMinCart,
            "global_max_cart": self.globalMaxCart,
        }
        toggles = {
            "show_cart_warning": self.showCartWarning,
            "block_checkout": self.blockCheckout,
            "custom_message_enabled": self.customMessageEnabled,
        }
        changes.update({key: value for key, value in toggles.items() if value is not None})
        return changes


# Cart Models


class CartItemIn(BaseModel):
    """Línea del carrito enviada por el storefront (snake_case o camelCase)."""

    product_id: Optional[Union[int, str]] = Field(None, validation_alias=AliasChoices("product_id", "productId"))
    variant_id: Optional[Union[int, str]] = Field(None, validation_alias=AliasChoices("variant_id", "variantId"))
    quantity: int = Field(ge=0)
    title: Optional[str] = ""


class ValidateCartRequest(BaseModel):
    """Body de POST /api/validate-cart."""

    shop: Optional[str] = None
    items: Optional[List[CartItemIn]] = None
