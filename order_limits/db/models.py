"""
SQLAlchemy ORM models for the order limits app.

Tables:
- shops: one row per installed Shopify store, keyed by its myshopify domain
- rules: per-product, per-variant and cart-wide quantity rules
- settings: per-shop cart bounds and checkout toggles (one row per shop)
- prep_shipments: shipment preparation records

Every child table references ``shops.id`` with ``ON DELETE CASCADE``.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

RULE_TYPES = ("product", "variant", "cart")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def as_utc(value: datetime) -> datetime:
    # SQLite devuelve datetimes sin zona horaria
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


class TimestampMixin:
    """created_at / updated_at columns maintained by the ORM."""

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Shop(TimestampMixin, Base):
    """Shopify store that installed the app."""

    __tablename__ = "shops"

    id = Column(String(255), primary_key=True)  # example.myshopify.com
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)

    # Offline Admin API token from the OAuth callback
    access_token = Column(String(255), nullable=True)
    scope = Column(Text, nullable=True)

    subscription_id = Column(String(255), nullable=True)
    subscription_status = Column(String(50), nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "subscriptionId": self.subscription_id,
            "subscriptionStatus": self.subscription_status,
            "hasAccessToken": bool(self.access_token),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"Shop(id='{self.id}', subscription_status='{self.subscription_status}')"


class Rule(TimestampMixin, Base):
    """Quantity rule scoped to a product, a variant or the whole cart."""

    __tablename__ = "rules"

    id = Column(String(36), primary_key=True, default=new_id)
    shop_id = Column(String(255), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    rule_type = Column(String(20), nullable=False)
    target_id = Column(String(255), nullable=True)
    target_title = Column(String(255), nullable=True)
    min_quantity = Column(Integer, nullable=True)
    max_quantity = Column(Integer, nullable=True)
    enabled = Column(Boolean, default=True, nullable=False)
    message = Column(Text, nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shopId": self.shop_id,
            "ruleType": self.rule_type,
            "targetId": self.target_id,
            "targetTitle": self.target_title,
            "minQuantity": self.min_quantity,
            "maxQuantity": self.max_quantity,
            "enabled": self.enabled,
            "message": self.message,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"Rule(id='{self.id}', type='{self.rule_type}', target='{self.target_id}')"


class Settings(TimestampMixin, Base):
    """Per-shop global cart bounds and storefront toggles."""

    __tablename__ = "settings"

    id = Column(String(36), primary_key=True, default=new_id)
    shop_id = Column(
        String(255), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    global_min_cart = Column(Integer, nullable=True)
    global_max_cart = Column(Integer, nullable=True)
    show_cart_warning = Column(Boolean, default=True, nullable=False)
    block_checkout = Column(Boolean, default=True, nullable=False)
    custom_message_enabled = Column(Boolean, default=False, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shopId": self.shop_id,
            "globalMinCart": self.global_min_cart,
            "globalMaxCart": self.global_max_cart,
            "showCartWarning": self.show_cart_warning,
            "blockCheckout": self.block_checkout,
            "customMessageEnabled": self.custom_message_enabled,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class PrepShipmentStatus(str, enum.Enum):
    PENDING = "Pending"
    PREPPED = "Prepped"
    SHIPPED = "Shipped"


class PrepShipment(TimestampMixin, Base):
    """Shipment preparation record."""

    __tablename__ = "prep_shipments"
    __table_args__ = (UniqueConstraint("shipment_id", "shop_origin", name="uq_prep_shipment_shop"),)

    id = Column(String(36), primary_key=True, default=new_id)
    shipment_id = Column(String(255), nullable=False)
    units = Column(Integer, nullable=False, default=0)
    status = Column(
        Enum(PrepShipmentStatus, values_callable=lambda e: [m.value for m in e], name="prep_shipment_status"),
        nullable=False,
        default=PrepShipmentStatus.PENDING,
    )
    shop_origin = Column(
        String(255), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shipmentId": self.shipment_id,
            "units": self.units,
            "status": self.status.value if self.status else None,
            "shopOrigin": self.shop_origin,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
