"""
Modelos Pydantic para prep shipments.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from order_limits.db.models import PrepShipmentStatus


class PrepShipmentCreate(BaseModel):
    """Body de POST /api/prep-shipments."""

    shop: Optional[str] = None
    shipmentId: str = Field(min_length=1)
    units: int = Field(ge=0)
    status: Optional[PrepShipmentStatus] = None

    @field_validator("shipmentId", mode="before")
    @classmethod
    def validate_shipment_id(cls, v):
        return str(v).strip() if v is not None else v


class PrepShipmentUpdate(BaseModel):
    """Body de PUT /api/prep-shipments/{id}."""

    units: Optional[int] = Field(default=None, ge=0)
    status: Optional[PrepShipmentStatus] = None
