# pincorp/business_logic/entities/bom_entity.py
from dataclasses import dataclass, field
from typing import List, Optional
from decimal import Decimal
from .base_entity import BaseEntity
from .bom_material_entity import BomMaterialEntity

@dataclass
class BOMEntity(BaseEntity):
    product_name: str
    product_sku: str = ""
    materials: List[BomMaterialEntity] = field(default_factory=list)
    notes: Optional[str] = None

    # unit cost at current purchase prices, not stored
    estimated_cost: Optional[Decimal] = field(default=None, compare=False, repr=False)
