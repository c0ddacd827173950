# pincorp/business_logic/entities/sale_entity.py
from dataclasses import dataclass, field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from .base_entity import BaseEntity
from .cart_item_entity import CartItemEntity
from pincorp.constants import PaymentMethod, WALK_IN_CUSTOMER_NAME

@dataclass
class SaleCustomerEntity:
    """Customer details as they were at checkout."""
    name: str = WALK_IN_CUSTOMER_NAME
    customer_id: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

@dataclass
class SaleEntity(BaseEntity):
    date: datetime
    items: List[CartItemEntity] = field(default_factory=list)
    subtotal: Decimal = field(default_factory=lambda: Decimal("0"))
    discount: Decimal = field(default_factory=lambda: Decimal("0"))
    total: Decimal = field(default_factory=lambda: Decimal("0"))
    customer: SaleCustomerEntity = field(default_factory=SaleCustomerEntity)
    payment_method: PaymentMethod = PaymentMethod.CASH
    user_id: str = ""
    user_name: str = ""

    @property
    def total_cost(self) -> Decimal:
        return sum((item.cost_price * item.quantity for item in self.items), Decimal("0"))
