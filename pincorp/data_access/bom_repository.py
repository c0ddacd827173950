# pincorp/data_access/bom_repository.py

from typing import List, Optional
import logging

from pincorp.data_access.base_repository import BaseRepository
from pincorp.data_access.state_store import DataStore
from pincorp.business_logic.entities.bom_entity import BOMEntity
from pincorp.constants import BOM_ID_PREFIX

logger = logging.getLogger(__name__)

class BOMsRepository(BaseRepository[BOMEntity]):
    def __init__(self, store: DataStore):
        super().__init__(store=store,
                         model_type=BOMEntity,
                         table_name="boms",
                         id_prefix=BOM_ID_PREFIX)

    def search_by_product(self, term: Optional[str]) -> List[BOMEntity]:
        return self.search(term, ("product_name", "product_sku"), order_by="product_name ASC")
