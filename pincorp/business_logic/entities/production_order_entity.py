# pincorp/business_logic/entities/production_order_entity.py
from dataclasses import dataclass, field
from typing import Optional, List
from decimal import Decimal
from datetime import date, datetime
from pincorp.business_logic.entities.base_entity import BaseEntity
from pincorp.business_logic.entities.additional_cost_entity import AdditionalCostEntity
from pincorp.business_logic.entities.consumed_material_entity import ConsumedMaterialEntity
from pincorp.constants import ProductionOrderStatus, TERMINAL_ORDER_STATUSES

@dataclass
class ProductionOrderEntity(BaseEntity):
    bom_id: str
    product_name: str # copied from the BOM when the order is created
    quantity_produced: Decimal
    product_sku: str = ""
    creation_date: date = field(default_factory=date.today)
    status: ProductionOrderStatus = ProductionOrderStatus.PENDING
    materials_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    additional_costs: List[AdditionalCostEntity] = field(default_factory=list)
    total_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    notes: Optional[str] = None
    user_name: Optional[str] = None
    consumed_materials: List[ConsumedMaterialEntity] = field(default_factory=list)
    created_at: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    cancellation_date: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES

    @property
    def unit_cost(self) -> Decimal:
        if not self.quantity_produced:
            return Decimal("0")
        return self.total_cost / self.quantity_produced
