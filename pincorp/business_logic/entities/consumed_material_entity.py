# pincorp/business_logic/entities/consumed_material_entity.py
from dataclasses import dataclass, field
from decimal import Decimal

@dataclass
class ConsumedMaterialEntity:
    """Snapshot of one material line taken out of stock by a production order."""
    material_id: str
    material_name: str
    quantity_consumed: Decimal = field(default_factory=lambda: Decimal("0"))
    unit_purchase_price: Decimal = field(default_factory=lambda: Decimal("0"))
