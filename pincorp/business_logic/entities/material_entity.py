# pincorp/business_logic/entities/material_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity
from pincorp.constants import MaterialUnit

@dataclass
class MaterialEntity(BaseEntity):
    name: str
    sku: str = ""
    unit: MaterialUnit = MaterialUnit.PIECE
    purchase_price: Decimal = field(default_factory=lambda: Decimal("0"))
    stock: Decimal = field(default_factory=lambda: Decimal("0"))
    supplier: Optional[str] = None
    description: Optional[str] = None
