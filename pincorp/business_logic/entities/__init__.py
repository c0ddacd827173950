# pincorp/business_logic/entities/__init__.py
from .base_entity import BaseEntity
from .material_entity import MaterialEntity
from .bom_material_entity import BomMaterialEntity
from .bom_entity import BOMEntity
from .additional_cost_entity import AdditionalCostEntity
from .consumed_material_entity import ConsumedMaterialEntity
from .production_order_entity import ProductionOrderEntity
from .production_estimate_entity import RequiredMaterialEntity, ProductionCostEstimate
from .product_entity import ProductEntity
from .customer_entity import CustomerEntity
from .cart_item_entity import CartItemEntity
from .sale_entity import SaleEntity, SaleCustomerEntity
from .inventory_movement_entity import InventoryMovementEntity

__all__ = [
    "BaseEntity", "MaterialEntity", "BomMaterialEntity", "BOMEntity",
    "AdditionalCostEntity", "ConsumedMaterialEntity", "ProductionOrderEntity",
    "RequiredMaterialEntity", "ProductionCostEstimate", "ProductEntity",
    "CustomerEntity", "CartItemEntity", "SaleEntity", "SaleCustomerEntity",
    "InventoryMovementEntity",
]
