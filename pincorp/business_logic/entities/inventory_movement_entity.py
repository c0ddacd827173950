# pincorp/business_logic/entities/inventory_movement_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from .base_entity import BaseEntity
from pincorp.constants import InventoryMovementType, ReferenceType, StockItemKind

@dataclass
class InventoryMovementEntity(BaseEntity):
    item_kind: StockItemKind
    item_id: str
    movement_date: datetime
    quantity_change: Decimal
    movement_type: InventoryMovementType

    reference_id: Optional[str] = field(default=None)
    reference_type: Optional[ReferenceType] = field(default=None)
    description: Optional[str] = field(default=None)
