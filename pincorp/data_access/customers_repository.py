# pincorp/data_access/customers_repository.py

from typing import List, Optional
import logging

from pincorp.data_access.base_repository import BaseRepository
from pincorp.data_access.state_store import DataStore
from pincorp.business_logic.entities.customer_entity import CustomerEntity
from pincorp.constants import CUSTOMER_ID_PREFIX

logger = logging.getLogger(__name__)

class CustomersRepository(BaseRepository[CustomerEntity]):
    def __init__(self, store: DataStore):
        super().__init__(store=store,
                         model_type=CustomerEntity,
                         table_name="customers",
                         id_prefix=CUSTOMER_ID_PREFIX)

    def get_by_phone(self, phone: str) -> Optional[CustomerEntity]:
        if not phone:
            return None
        found = self.find_by_criteria({"phone": phone}, limit=1)
        return found[0] if found else None

    def search_by_name_or_phone(self, term: str) -> List[CustomerEntity]:
        """Name matches case-insensitively, phone matches as a plain substring."""
        needle = (term or "").strip()
        if not needle:
            return []
        lowered = needle.casefold()
        return [customer for customer in self.get_all()
                if lowered in customer.name.casefold() or needle in (customer.phone or "")]
