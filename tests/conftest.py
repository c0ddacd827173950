# tests/conftest.py
from decimal import Decimal

import pytest

from pincorp.data_access.state_store import DataStore
from pincorp.data_access.materials_repository import MaterialsRepository
from pincorp.data_access.bom_repository import BOMsRepository
from pincorp.data_access.production_orders_repository import ProductionOrdersRepository
from pincorp.data_access.products_repository import ProductsRepository
from pincorp.data_access.customers_repository import CustomersRepository
from pincorp.data_access.sales_repository import SalesRepository
from pincorp.data_access.inventory_movements_repository import InventoryMovementsRepository
from pincorp.business_logic.material_manager import MaterialManager
from pincorp.business_logic.bom_manager import BomManager
from pincorp.business_logic.production_cost_engine import ProductionCostEngine
from pincorp.business_logic.product_manager import ProductManager
from pincorp.business_logic.production_manager import ProductionManager
from pincorp.business_logic.customer_manager import CustomerManager
from pincorp.business_logic.sales_manager import SalesManager
from pincorp.business_logic.report_manager import ReportManager
from pincorp.business_logic.entities.product_entity import ProductEntity


@pytest.fixture
def store():
    return DataStore()


@pytest.fixture
def repos(store):
    return {
        "materials": MaterialsRepository(store),
        "boms": BOMsRepository(store),
        "orders": ProductionOrdersRepository(store),
        "products": ProductsRepository(store),
        "customers": CustomersRepository(store),
        "sales": SalesRepository(store),
        "movements": InventoryMovementsRepository(store),
    }


@pytest.fixture
def material_manager(repos):
    return MaterialManager(repos["materials"], repos["movements"])


@pytest.fixture
def bom_manager(repos, material_manager):
    return BomManager(repos["boms"], material_manager)


@pytest.fixture
def cost_engine(material_manager):
    return ProductionCostEngine(material_manager)


@pytest.fixture
def product_manager(repos):
    return ProductManager(repos["products"], repos["movements"])


@pytest.fixture
def production_manager(repos, bom_manager, material_manager, product_manager, cost_engine):
    return ProductionManager(repos["orders"], bom_manager, material_manager, product_manager, cost_engine)


@pytest.fixture
def customer_manager(repos):
    return CustomerManager(repos["customers"])


@pytest.fixture
def sales_manager(repos, product_manager):
    return SalesManager(repos["sales"], product_manager)


@pytest.fixture
def report_manager(repos):
    return ReportManager(repos["sales"])


@pytest.fixture
def battery(material_manager, bom_manager):
    """Battery-12V: 2 Plate (stock 10 at 5000) and 1 Casing (stock 3 at 20000) per unit."""
    plate = material_manager.create_material("Plate", purchase_price="5000", sku="PL-01", stock="10")
    casing = material_manager.create_material("Casing", purchase_price="20000", sku="CS-01", stock="3")
    bom = bom_manager.create_bom("Battery-12V", [
        {"material_id": plate.id, "quantity": "2"},
        {"material_id": casing.id, "quantity": "1"},
    ], product_sku="BAT-12")
    return {"plate": plate, "casing": casing, "bom": bom}


@pytest.fixture
def stocked_products(repos, store):
    """Two sellable products: A at 100000 (cost 60000) and B at 50000 (cost 30000)."""
    with store.transaction():
        product_a = repos["products"].add(ProductEntity(
            id="P-A", name="Product A", sku="A-1", stock=Decimal("5"),
            cost_price=Decimal("60000"), selling_price=Decimal("100000")))
        product_b = repos["products"].add(ProductEntity(
            id="P-B", name="Product B", sku="B-1", stock=Decimal("2"),
            cost_price=Decimal("30000"), selling_price=Decimal("50000")))
    return product_a, product_b
