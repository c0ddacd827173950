# pincorp/data_access/__init__.py

from .state_store import DataStore
from .database_manager import DatabaseManager
from .base_repository import BaseRepository

from .materials_repository import MaterialsRepository
from .bom_repository import BOMsRepository
from .production_orders_repository import ProductionOrdersRepository
from .products_repository import ProductsRepository
from .customers_repository import CustomersRepository
from .sales_repository import SalesRepository
from .inventory_movements_repository import InventoryMovementsRepository

ALL_REPOSITORIES = [
    MaterialsRepository, BOMsRepository, ProductionOrdersRepository, ProductsRepository,
    CustomersRepository, SalesRepository, InventoryMovementsRepository,
]
