# pincorp/business_logic/production_manager.py
from typing import Optional, List, Dict, Any, Iterable, FrozenSet, TYPE_CHECKING
from datetime import date, datetime
from decimal import Decimal

from pincorp.business_logic.entities.production_order_entity import ProductionOrderEntity
from pincorp.business_logic.entities.consumed_material_entity import ConsumedMaterialEntity
from pincorp.business_logic.entities.additional_cost_entity import AdditionalCostEntity
from pincorp.business_logic.entities.production_estimate_entity import ProductionCostEstimate
from pincorp.business_logic.bom_manager import BomManager
from pincorp.business_logic.material_manager import MaterialManager
from pincorp.business_logic.product_manager import ProductManager
from pincorp.business_logic.production_cost_engine import ProductionCostEngine
from pincorp.business_logic.exceptions import (
    ValidationError, InsufficientStockError, InvalidStatusTransitionError
)
from pincorp.constants import (
    ProductionOrderStatus, ALLOWED_ORDER_TRANSITIONS, InventoryMovementType, ReferenceType
)
from pincorp.utils.pagination import Page, paginate

if TYPE_CHECKING:
    from ..data_access.production_orders_repository import ProductionOrdersRepository

import logging
logger = logging.getLogger(__name__)


class ProductionManager:
    """
    Production order lifecycle.

    Materials leave stock when an order is created: the sufficiency check and
    the stock decrement run in one store transaction, so nothing can consume
    the same stock in between. Completing an order books the output into the
    product catalog; cancelling returns the consumed materials.
    """

    def __init__(self,
                 production_orders_repository: 'ProductionOrdersRepository',
                 bom_manager: BomManager,
                 material_manager: MaterialManager,
                 product_manager: ProductManager,
                 cost_engine: Optional[ProductionCostEngine] = None):
        if production_orders_repository is None: raise ValueError("production_orders_repository cannot be None")
        if bom_manager is None: raise ValueError("bom_manager cannot be None")
        if material_manager is None: raise ValueError("material_manager cannot be None")
        if product_manager is None: raise ValueError("product_manager cannot be None")

        self.orders_repo = production_orders_repository
        self.bom_manager = bom_manager
        self.material_manager = material_manager
        self.product_manager = product_manager
        self.cost_engine = cost_engine or ProductionCostEngine(material_manager)

    # --- queries ---

    def get_order_by_id(self, order_id: str) -> Optional[ProductionOrderEntity]:
        order = self.orders_repo.get_by_id(order_id)
        if not order:
            logger.warning(f"Production order with ID {order_id} not found.")
        return order

    def get_all_orders(self, status_filter: Optional[ProductionOrderStatus] = None) -> List[ProductionOrderEntity]:
        """Orders newest first."""
        if status_filter:
            return self.orders_repo.get_by_status(status_filter)
        return self.orders_repo.get_all_newest_first()

    def get_orders_page(self, page: int = 1, per_page: Optional[int] = None,
                        status_filter: Optional[ProductionOrderStatus] = None) -> Page[ProductionOrderEntity]:
        orders = self.get_all_orders(status_filter)
        return paginate(orders, page, per_page) if per_page else paginate(orders, page)

    @staticmethod
    def allowed_next_statuses(order: ProductionOrderEntity) -> FrozenSet[ProductionOrderStatus]:
        return ALLOWED_ORDER_TRANSITIONS[order.status]

    def preview_order(self, bom_id: str, quantity: Any,
                      additional_costs: Iterable[AdditionalCostEntity] = ()) -> ProductionCostEstimate:
        """Cost and stock check for the order dialog; recomputed on every edit."""
        bom = self.bom_manager.get_bom_by_id(bom_id)
        if bom is None:
            raise ValidationError("Vui lòng chọn định mức sản phẩm hợp lệ.")
        return self.cost_engine.estimate(bom, quantity, additional_costs)

    # --- lifecycle ---

    def create_order(self,
                     bom_id: str,
                     quantity: Any,
                     additional_costs: Iterable[AdditionalCostEntity] = (),
                     notes: Optional[str] = None,
                     user_name: Optional[str] = None,
                     creation_date: Optional[date] = None) -> ProductionOrderEntity:
        logger.info(f"Attempting to create production order: BOM {bom_id}, quantity {quantity}")
        if not bom_id:
            raise ValidationError("Vui lòng chọn định mức sản phẩm.")
        costs = [self.cost_engine.validate_additional_cost(c.description, c.amount) for c in additional_costs]

        with self.orders_repo.store.transaction():
            estimate = self.preview_order(bom_id, quantity, costs)
            if not estimate.is_stock_sufficient:
                names = ", ".join(line.name for line in estimate.deficient_materials)
                logger.warning(f"Production order for BOM {bom_id} blocked, insufficient stock: {names}")
                raise InsufficientStockError(f"Không đủ nguyên vật liệu: {names}.", estimate.deficient_materials)

            bom = self.bom_manager.get_bom_by_id(bom_id)
            order = ProductionOrderEntity(
                bom_id=bom.id,
                product_name=bom.product_name,
                product_sku=bom.product_sku,
                quantity_produced=estimate.quantity,
                creation_date=creation_date or date.today(),
                status=ProductionOrderStatus.PENDING,
                materials_cost=estimate.materials_cost,
                additional_costs=costs,
                total_cost=estimate.total_cost,
                notes=notes or None,
                user_name=user_name,
                consumed_materials=[
                    ConsumedMaterialEntity(
                        material_id=line.material_id,
                        material_name=line.name,
                        quantity_consumed=line.required,
                        unit_purchase_price=line.unit_purchase_price,
                    )
                    for line in estimate.required_materials
                ],
                created_at=datetime.now(),
            )
            created = self.orders_repo.add(order)
            for consumed in created.consumed_materials:
                self.material_manager.adjust_stock(
                    consumed.material_id, -consumed.quantity_consumed, InventoryMovementType.PRODUCTION_ISSUE,
                    created.id, ReferenceType.PRODUCTION_ORDER, f"Xuất cho lệnh sản xuất {created.id}")

        logger.info(f"Production order {created.id} created for '{created.product_name}' x {created.quantity_produced}, "
                    f"total cost {created.total_cost}.")
        return created

    def set_order_status(self, order_id: str, new_status: ProductionOrderStatus) -> ProductionOrderEntity:
        logger.info(f"Attempting to change status of production order {order_id} to {new_status.name}")
        with self.orders_repo.store.transaction():
            order = self.orders_repo.get_by_id(order_id)
            if order is None:
                raise ValidationError(f"Không tìm thấy lệnh sản xuất {order_id}.")
            if order.status == new_status:
                logger.info(f"Production order {order_id} already has status {new_status.name}. No change.")
                return order
            if new_status not in ALLOWED_ORDER_TRANSITIONS[order.status]:
                raise InvalidStatusTransitionError(
                    f"Không thể chuyển lệnh sản xuất từ '{order.status.value}' sang '{new_status.value}'.")

            if new_status == ProductionOrderStatus.COMPLETED:
                order.completion_date = datetime.now()
                order.status = new_status
                self.product_manager.receive_production(order)
            elif new_status == ProductionOrderStatus.CANCELED:
                order.cancellation_date = datetime.now()
                order.status = new_status
                self._return_consumed_materials(order)
            else:
                order.status = new_status
            self.orders_repo.update(order)

        logger.info(f"Production order {order_id} is now {new_status.name}.")
        return order

    def start_order(self, order_id: str) -> ProductionOrderEntity:
        return self.set_order_status(order_id, ProductionOrderStatus.IN_PROGRESS)

    def complete_order(self, order_id: str) -> ProductionOrderEntity:
        return self.set_order_status(order_id, ProductionOrderStatus.COMPLETED)

    def cancel_order(self, order_id: str) -> ProductionOrderEntity:
        return self.set_order_status(order_id, ProductionOrderStatus.CANCELED)

    def _return_consumed_materials(self, order: ProductionOrderEntity) -> None:
        for consumed in order.consumed_materials:
            if self.material_manager.get_material_by_id(consumed.material_id) is None:
                logger.warning(f"Order {order.id}: material {consumed.material_id} no longer exists, "
                               f"{consumed.quantity_consumed} cannot be returned to stock.")
                continue
            self.material_manager.adjust_stock(
                consumed.material_id, consumed.quantity_consumed, InventoryMovementType.PRODUCTION_RETURN,
                order.id, ReferenceType.PRODUCTION_ORDER, f"Hoàn trả từ lệnh sản xuất {order.id} bị hủy")
