# pincorp/data_access/production_orders_repository.py

from typing import List
import logging

from pincorp.data_access.base_repository import BaseRepository
from pincorp.data_access.state_store import DataStore
from pincorp.business_logic.entities.production_order_entity import ProductionOrderEntity
from pincorp.constants import ProductionOrderStatus, PRODUCTION_ORDER_ID_PREFIX

logger = logging.getLogger(__name__)

class ProductionOrdersRepository(BaseRepository[ProductionOrderEntity]):
    def __init__(self, store: DataStore):
        super().__init__(store=store,
                         model_type=ProductionOrderEntity,
                         table_name="production_orders",
                         id_prefix=PRODUCTION_ORDER_ID_PREFIX)

    def get_all_newest_first(self) -> List[ProductionOrderEntity]:
        return self.get_all(order_by="creation_date DESC, created_at DESC")

    def get_by_status(self, status: ProductionOrderStatus) -> List[ProductionOrderEntity]:
        return self.find_by_criteria({"status": status}, order_by="creation_date DESC, created_at DESC")
