# pincorp/data_access/products_repository.py

from typing import List, Optional
import logging

from pincorp.data_access.base_repository import BaseRepository
from pincorp.data_access.state_store import DataStore
from pincorp.business_logic.entities.product_entity import ProductEntity

logger = logging.getLogger(__name__)

class ProductsRepository(BaseRepository[ProductEntity]):
    # product ids are the ids of the BOMs they are produced from, so no prefix here
    def __init__(self, store: DataStore):
        super().__init__(store=store,
                         model_type=ProductEntity,
                         table_name="products")

    def search_by_name_or_sku(self, term: Optional[str]) -> List[ProductEntity]:
        return self.search(term, ("name", "sku"), order_by="name ASC")
