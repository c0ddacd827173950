# pincorp/business_logic/product_manager.py
from typing import Optional, List, Any, Dict, TYPE_CHECKING
from decimal import Decimal
from datetime import datetime

from pincorp.business_logic.entities.product_entity import ProductEntity
from pincorp.business_logic.entities.production_order_entity import ProductionOrderEntity
from pincorp.business_logic.entities.inventory_movement_entity import InventoryMovementEntity
from pincorp.business_logic.material_manager import to_decimal
from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import InventoryMovementType, ReferenceType, StockItemKind
from pincorp.config import LOW_MARGIN_THRESHOLD

if TYPE_CHECKING:
    from ..data_access.products_repository import ProductsRepository
    from ..data_access.inventory_movements_repository import InventoryMovementsRepository

import logging

logger = logging.getLogger(__name__)


def calculate_profit_margin(cost_price: Decimal, selling_price: Decimal) -> Decimal:
    """Profit as a percentage of cost; zero when the cost is zero."""
    if not cost_price:
        return Decimal("0")
    return (selling_price - cost_price) / cost_price * Decimal("100")


class ProductManager:
    def __init__(self, products_repository: 'ProductsRepository',
                 inventory_movements_repository: 'InventoryMovementsRepository'):
        if products_repository is None:
            raise ValueError("products_repository cannot be None")
        if inventory_movements_repository is None:
            raise ValueError("inventory_movements_repository cannot be None")
        self.product_repo = products_repository
        self.movements_repo = inventory_movements_repository

    def get_product_by_id(self, product_id: str) -> Optional[ProductEntity]:
        logger.debug(f"Fetching product by ID: {product_id}")
        product = self.product_repo.get_by_id(product_id)
        if not product:
            logger.warning(f"Product with ID {product_id} not found.")
        return product

    def get_all_products(self, search_term: Optional[str] = None, in_stock_only: bool = False) -> List[ProductEntity]:
        products = self.product_repo.search_by_name_or_sku(search_term)
        if in_stock_only:
            products = [p for p in products if p.stock > Decimal("0")]
        logger.debug(f"Fetched {len(products)} products (search: {search_term!r}, in stock only: {in_stock_only}).")
        return products

    def get_price_analysis(self, product: ProductEntity, selling_price: Any = None) -> Dict[str, Any]:
        """
        Profit figures for a product at its current or a proposed selling price.
        A margin under LOW_MARGIN_THRESHOLD is only flagged, never rejected.
        """
        price = product.selling_price if selling_price is None else to_decimal(selling_price, "giá bán")
        margin = calculate_profit_margin(product.cost_price, price)
        return {
            "cost_price": product.cost_price,
            "selling_price": price,
            "profit": price - product.cost_price,
            "profit_margin": margin,
            "is_low_margin": margin < LOW_MARGIN_THRESHOLD,
        }

    def update_selling_price(self, product_id: str, selling_price: Any) -> Optional[ProductEntity]:
        """Only the selling price is editable here; the cost comes from production."""
        logger.info(f"Attempting to update selling price of product ID {product_id} to {selling_price}")
        price = to_decimal(selling_price, "giá bán")
        if price < Decimal("0"):
            raise ValidationError("Giá bán không được âm.")
        product = self.get_product_by_id(product_id)
        if not product:
            return None
        if product.selling_price == price:
            logger.info(f"No change in selling price for product ID {product_id}.")
            return product
        product.selling_price = price
        updated = self.product_repo.update(product)
        if updated:
            logger.info(f"Selling price of product '{product.name}' set to {price}.")
        return updated

    def receive_production(self, order: ProductionOrderEntity) -> ProductEntity:
        """
        Books a completed production order into the product catalog: stock goes
        up by the produced quantity and the cost price becomes the order's unit cost.
        A product seen for the first time is created from the order's snapshot.
        """
        with self.product_repo.store.transaction():
            product = self.product_repo.get_by_id(order.bom_id)
            if product is None:
                product = ProductEntity(
                    id=order.bom_id,
                    name=order.product_name,
                    sku=order.product_sku or "",
                    stock=order.quantity_produced,
                    cost_price=order.unit_cost,
                )
                self.product_repo.add(product)
                logger.info(f"Product '{product.name}' (ID: {product.id}) created from production order {order.id}.")
            else:
                product.stock += order.quantity_produced
                product.cost_price = order.unit_cost
                self.product_repo.update(product)
                logger.info(f"Product '{product.name}' received {order.quantity_produced} units from order {order.id}.")
            self._record_movement(product.id, order.quantity_produced, InventoryMovementType.PRODUCTION_RECEIPT,
                                  order.id, ReferenceType.PRODUCTION_ORDER,
                                  f"Nhập kho từ lệnh sản xuất {order.id}")
        return product

    def adjust_stock(self,
                     product_id: str,
                     quantity_change: Decimal,
                     movement_type: InventoryMovementType,
                     reference_id: Optional[str] = None,
                     reference_type: Optional[ReferenceType] = None,
                     description: Optional[str] = None) -> ProductEntity:
        with self.product_repo.store.transaction():
            product = self.product_repo.get_by_id(product_id)
            if not product:
                raise ValidationError(f"Không tìm thấy sản phẩm với mã {product_id}.")
            new_stock = product.stock + quantity_change
            if new_stock < Decimal("0"):
                raise ValidationError(
                    f"Tồn kho của '{product.name}' không đủ (hiện có {product.stock}, cần {-quantity_change}).")
            product.stock = new_stock
            self.product_repo.update(product)
            self._record_movement(product_id, quantity_change, movement_type, reference_id, reference_type, description)
        logger.info(f"Stock for product {product_id} changed by {quantity_change}. New stock: {new_stock}")
        return product

    def get_movements(self, product_id: str) -> List[InventoryMovementEntity]:
        return self.movements_repo.get_by_item(StockItemKind.PRODUCT, product_id)

    def _record_movement(self, product_id, quantity_change, movement_type, reference_id, reference_type, description):
        self.movements_repo.add(InventoryMovementEntity(
            item_kind=StockItemKind.PRODUCT,
            item_id=product_id,
            movement_date=datetime.now(),
            quantity_change=quantity_change,
            movement_type=movement_type,
            reference_id=reference_id,
            reference_type=reference_type,
            description=description,
        ))
