# pincorp/business_logic/entities/additional_cost_entity.py
from dataclasses import dataclass, field
from decimal import Decimal

@dataclass
class AdditionalCostEntity:
    description: str
    amount: Decimal = field(default_factory=lambda: Decimal("0"))
