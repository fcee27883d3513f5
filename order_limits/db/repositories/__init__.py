"""
Database repository package.

Repository Structure:
- BaseRepository: session handling and error translation
- ShopRepository: installed shops, tokens, subscription state, redaction
- RuleRepository: quantity rules CRUD
- SettingsRepository: per-shop settings singleton
- PrepShipmentRepository: shipment preparation records
"""

from .base import BaseRepository
from .prep_shipment_repository import PrepShipmentRepository
from .rule_repository import RuleRepository
from .settings_repository import SettingsRepository
from .shop_repository import ShopRepository

__all__ = [
    "BaseRepository",
    "ShopRepository",
    "RuleRepository",
    "SettingsRepository",
    "PrepShipmentRepository",
]
