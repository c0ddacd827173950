# pincorp/data_access/sales_repository.py

from datetime import datetime
from typing import List, Optional
import logging

from pincorp.data_access.base_repository import BaseRepository
from pincorp.data_access.state_store import DataStore
from pincorp.business_logic.entities.sale_entity import SaleEntity
from pincorp.business_logic.exceptions import ImmutableRecordError
from pincorp.constants import SALE_ID_PREFIX

logger = logging.getLogger(__name__)

class SalesRepository(BaseRepository[SaleEntity]):
    """Sales are an append-only ledger: once added they are never updated or deleted."""

    def __init__(self, store: DataStore):
        super().__init__(store=store,
                         model_type=SaleEntity,
                         table_name="sales",
                         id_prefix=SALE_ID_PREFIX)

    def update(self, entity: SaleEntity) -> Optional[SaleEntity]:
        logger.error(f"Attempt to update recorded sale '{entity.id}' rejected.")
        raise ImmutableRecordError("Hóa đơn bán hàng đã ghi nhận không thể chỉnh sửa.")

    def delete(self, entity_id: str) -> bool:
        logger.error(f"Attempt to delete recorded sale '{entity_id}' rejected.")
        raise ImmutableRecordError("Hóa đơn bán hàng đã ghi nhận không thể xóa.")

    def get_by_date_range(self, start: datetime, end: datetime) -> List[SaleEntity]:
        return self.find_by_criteria({"date": ("BETWEEN", (start, end))}, order_by="date ASC")
