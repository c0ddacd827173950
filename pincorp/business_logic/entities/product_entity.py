# pincorp/business_logic/entities/product_entity.py
from dataclasses import dataclass, field
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class ProductEntity(BaseEntity):
    name: str
    sku: str = ""
    stock: Decimal = field(default_factory=lambda: Decimal("0"))
    cost_price: Decimal = field(default_factory=lambda: Decimal("0")) # set by production
    selling_price: Decimal = field(default_factory=lambda: Decimal("0")) # set by staff only
