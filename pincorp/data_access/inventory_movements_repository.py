# pincorp/data_access/inventory_movements_repository.py

from typing import List
import logging

from pincorp.data_access.base_repository import BaseRepository
from pincorp.data_access.state_store import DataStore
from pincorp.business_logic.entities.inventory_movement_entity import InventoryMovementEntity
from pincorp.constants import ReferenceType, StockItemKind, MOVEMENT_ID_PREFIX

logger = logging.getLogger(__name__)

class InventoryMovementsRepository(BaseRepository[InventoryMovementEntity]):
    def __init__(self, store: DataStore):
        super().__init__(store=store,
                         model_type=InventoryMovementEntity,
                         table_name="inventory_movements",
                         id_prefix=MOVEMENT_ID_PREFIX)

    def get_by_item(self, item_kind: StockItemKind, item_id: str) -> List[InventoryMovementEntity]:
        return self.find_by_criteria({"item_kind": item_kind, "item_id": item_id},
                                     order_by="movement_date DESC")

    def get_by_reference(self, reference_id: str, reference_type: ReferenceType) -> List[InventoryMovementEntity]:
        return self.find_by_criteria({"reference_id": reference_id, "reference_type": reference_type},
                                     order_by="movement_date ASC")
