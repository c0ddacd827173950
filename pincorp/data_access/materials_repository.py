# pincorp/data_access/materials_repository.py

from typing import List, Optional
import logging

from pincorp.data_access.base_repository import BaseRepository
from pincorp.data_access.state_store import DataStore
from pincorp.business_logic.entities.material_entity import MaterialEntity
from pincorp.constants import MATERIAL_ID_PREFIX

logger = logging.getLogger(__name__)

class MaterialsRepository(BaseRepository[MaterialEntity]):
    def __init__(self, store: DataStore):
        super().__init__(store=store,
                         model_type=MaterialEntity,
                         table_name="materials",
                         id_prefix=MATERIAL_ID_PREFIX)

    def search_by_name_or_sku(self, term: Optional[str], limit: Optional[int] = None) -> List[MaterialEntity]:
        return self.search(term, ("name", "sku"), order_by="name ASC", limit=limit)
