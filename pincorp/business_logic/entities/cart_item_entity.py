# pincorp/business_logic/entities/cart_item_entity.py
from dataclasses import dataclass, field
from decimal import Decimal

@dataclass
class CartItemEntity:
    product_id: str
    name: str
    quantity: Decimal
    selling_price: Decimal
    cost_price: Decimal # snapshot at the moment the product went into the cart
    sku: str = ""
    stock: Decimal = field(default_factory=lambda: Decimal("0")) # stock seen when added
    discount: Decimal = field(default_factory=lambda: Decimal("0"))

    @property
    def line_total(self) -> Decimal:
        return self.selling_price * self.quantity
