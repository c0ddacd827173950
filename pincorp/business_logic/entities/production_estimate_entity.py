# pincorp/business_logic/entities/production_estimate_entity.py
from dataclasses import dataclass, field
from typing import List, Optional
from decimal import Decimal
from .additional_cost_entity import AdditionalCostEntity

@dataclass
class RequiredMaterialEntity:
    material_id: str
    name: str
    required: Decimal
    current_stock: Decimal
    is_sufficient: bool
    unit_purchase_price: Decimal = field(default_factory=lambda: Decimal("0"))
    unit: Optional[str] = None

    @property
    def line_cost(self) -> Decimal:
        return self.unit_purchase_price * self.required

    @property
    def shortage(self) -> Decimal:
        return max(self.required - self.current_stock, Decimal("0"))

@dataclass
class ProductionCostEstimate:
    """Result of expanding a BOM for a given quantity. Never stored."""
    bom_id: Optional[str]
    quantity: Decimal
    required_materials: List[RequiredMaterialEntity] = field(default_factory=list)
    additional_costs: List[AdditionalCostEntity] = field(default_factory=list)
    materials_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    additional_costs_total: Decimal = field(default_factory=lambda: Decimal("0"))
    total_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    is_stock_sufficient: bool = True

    @property
    def deficient_materials(self) -> List[RequiredMaterialEntity]:
        return [line for line in self.required_materials if not line.is_sufficient]
