# pincorp/business_logic/entities/bom_material_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal

@dataclass
class BomMaterialEntity:
    material_id: str
    quantity: Decimal = field(default_factory=lambda: Decimal("1")) # per unit of finished product

    # display fields, filled in by BomManager
    material_name: Optional[str] = field(default=None, compare=False, repr=False)
    unit_purchase_price: Optional[Decimal] = field(default=None, compare=False, repr=False)
