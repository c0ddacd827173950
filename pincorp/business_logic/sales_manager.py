# pincorp/business_logic/sales_manager.py
from typing import Optional, List, Any, Dict, Union, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
import copy

from pincorp.business_logic.entities.cart_item_entity import CartItemEntity
from pincorp.business_logic.entities.customer_entity import CustomerEntity
from pincorp.business_logic.entities.product_entity import ProductEntity
from pincorp.business_logic.entities.sale_entity import SaleEntity, SaleCustomerEntity
from pincorp.business_logic.material_manager import to_decimal
from pincorp.business_logic.product_manager import ProductManager
from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import PaymentMethod, InventoryMovementType, ReferenceType, WALK_IN_CUSTOMER_NAME

if TYPE_CHECKING:
    from ..data_access.sales_repository import SalesRepository

import logging

logger = logging.getLogger(__name__)


class Cart:
    """
    Checkout state of the sales screen: cart lines, discount, payment method
    and customer selection. Nothing here is stored until SalesManager.checkout.
    """

    def __init__(self):
        self.items: List[CartItemEntity] = []
        self.discount: Decimal = Decimal("0")
        self.payment_method: Optional[PaymentMethod] = None
        self.selected_customer: Optional[CustomerEntity] = None
        self.customer_name: str = ""

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_item(self, product_id: str) -> Optional[CartItemEntity]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add_product(self, product: ProductEntity) -> CartItemEntity:
        """Adds one unit; a product already in the cart gets +1, capped at its stock."""
        existing = self.get_item(product.id)
        if existing:
            existing.quantity = min(existing.quantity + 1, existing.stock)
            return existing
        if product.stock <= Decimal("0"):
            raise ValidationError(f"Sản phẩm '{product.name}' đã hết hàng.")
        item = CartItemEntity(
            product_id=product.id,
            name=product.name,
            sku=product.sku,
            quantity=Decimal("1"),
            selling_price=product.selling_price,
            cost_price=product.cost_price,
            stock=product.stock,
        )
        self.items.append(item)
        return item

    def set_quantity(self, product_id: str, quantity: Any) -> Optional[CartItemEntity]:
        """Clamps the quantity to [0, stock]; zero removes the line."""
        item = self.get_item(product_id)
        if item is None:
            return None
        new_quantity = min(max(Decimal("0"), to_decimal(quantity, "số lượng")), item.stock)
        if new_quantity == Decimal("0"):
            self.remove_product(product_id)
            return None
        item.quantity = new_quantity
        return item

    def remove_product(self, product_id: str) -> None:
        self.items = [item for item in self.items if item.product_id != product_id]

    def set_discount(self, discount: Any) -> None:
        value = to_decimal(discount if discount not in (None, "") else "0", "giảm giá")
        if value < Decimal("0"):
            raise ValidationError("Giảm giá không được âm.")
        self.discount = value

    def set_payment_method(self, payment_method: Optional[PaymentMethod]) -> None:
        self.payment_method = payment_method

    def select_customer(self, customer: Optional[CustomerEntity]) -> None:
        self.selected_customer = customer
        self.customer_name = customer.name if customer else ""

    def set_customer_name(self, text: str) -> None:
        """Free-text name typed in the customer box; it clears a previous selection."""
        self.customer_name = text or ""
        if self.selected_customer and self.selected_customer.name != self.customer_name:
            self.selected_customer = None

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def total(self) -> Decimal:
        return self.subtotal - self.discount

    def customer_snapshot(self) -> SaleCustomerEntity:
        if self.selected_customer:
            return SaleCustomerEntity(
                customer_id=self.selected_customer.id,
                name=self.selected_customer.name,
                phone=self.selected_customer.phone,
                address=self.selected_customer.address,
            )
        return SaleCustomerEntity(name=self.customer_name.strip() or WALK_IN_CUSTOMER_NAME)

    def reset(self) -> None:
        self.items = []
        self.discount = Decimal("0")
        self.payment_method = None
        self.selected_customer = None
        self.customer_name = ""


class SalesManager:
    def __init__(self, sales_repository: 'SalesRepository', product_manager: ProductManager):
        if sales_repository is None:
            raise ValueError("sales_repository cannot be None")
        if product_manager is None:
            raise ValueError("product_manager cannot be None")
        self.sales_repo = sales_repository
        self.product_manager = product_manager

    def get_sale_by_id(self, sale_id: str) -> Optional[SaleEntity]:
        sale = self.sales_repo.get_by_id(sale_id)
        if not sale:
            logger.warning(f"Sale with ID {sale_id} not found.")
        return sale

    def get_available_products(self, search_term: Optional[str] = None) -> List[ProductEntity]:
        """Products that can be sold right now: in stock, matching name or SKU."""
        return self.product_manager.get_all_products(search_term, in_stock_only=True)

    def checkout(self, cart: Cart, user_id: str, user_name: str,
                 sale_date: Optional[datetime] = None) -> SaleEntity:
        """Turns the cart into a recorded sale and clears it. A rejected cart is left untouched."""
        if cart.is_empty:
            raise ValidationError("Giỏ hàng đang trống.")
        if cart.payment_method is None:
            raise ValidationError("Vui lòng chọn phương thức thanh toán.")
        if cart.discount > cart.subtotal:
            raise ValidationError("Giảm giá không được lớn hơn tổng tiền hàng.")

        sale_data = {
            "items": cart.items,
            "subtotal": cart.subtotal,
            "discount": cart.discount,
            "total": cart.total,
            "customer": cart.customer_snapshot(),
            "payment_method": cart.payment_method,
        }
        sale = self.record_sale(sale_data, user_id, user_name, sale_date)
        cart.reset()
        return sale

    def record_sale(self, sale_data: Union[Dict[str, Any], SaleEntity], user_id: str, user_name: str,
                    sale_date: Optional[datetime] = None) -> SaleEntity:
        """
        Stamps id, date and operator on a finalized sale, takes the sold
        quantities out of product stock and stores the sale. Either all of
        it happens or none of it does.
        """
        if isinstance(sale_data, SaleEntity):
            sale_data = {
                "items": sale_data.items, "subtotal": sale_data.subtotal, "discount": sale_data.discount,
                "total": sale_data.total, "customer": sale_data.customer, "payment_method": sale_data.payment_method,
            }
        items = copy.deepcopy(list(sale_data.get("items") or []))
        if not items:
            raise ValidationError("Hóa đơn phải có ít nhất một sản phẩm.")
        subtotal = sum((item.line_total for item in items), Decimal("0"))
        discount = to_decimal(sale_data.get("discount") or "0", "giảm giá")
        if discount < Decimal("0"):
            raise ValidationError("Giảm giá không được âm.")
        payment_method = sale_data.get("payment_method")
        if payment_method is None:
            raise ValidationError("Vui lòng chọn phương thức thanh toán.")

        sale = SaleEntity(
            date=sale_date or datetime.now(),
            items=items,
            subtotal=subtotal,
            discount=discount,
            total=subtotal - discount,
            customer=copy.deepcopy(sale_data.get("customer") or SaleCustomerEntity()),
            payment_method=payment_method,
            user_id=user_id,
            user_name=user_name,
        )
        with self.sales_repo.store.transaction():
            sale.id = self.sales_repo.new_id()
            for item in items:
                self.product_manager.adjust_stock(item.product_id, -item.quantity, InventoryMovementType.SALE,
                                                  sale.id, ReferenceType.SALE, f"Bán hàng, hóa đơn {sale.id}")
            self.sales_repo.add(sale)
        logger.info(f"Sale {sale.id} recorded: {len(items)} lines, total {sale.total}, "
                    f"customer '{sale.customer.name}', by {user_name}.")
        return sale
