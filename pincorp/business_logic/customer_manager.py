# pincorp/business_logic/customer_manager.py
from typing import Optional, List, TYPE_CHECKING

from pincorp.business_logic.entities.customer_entity import CustomerEntity
from pincorp.business_logic.exceptions import ValidationError

if TYPE_CHECKING:
    from ..data_access.customers_repository import CustomersRepository

import logging

logger = logging.getLogger(__name__)

class CustomerManager:
    def __init__(self, customers_repository: 'CustomersRepository'):
        if customers_repository is None:
            raise ValueError("customers_repository cannot be None")
        self.customers_repo = customers_repository

    def search_customers(self, term: Optional[str]) -> List[CustomerEntity]:
        """Matches the name case-insensitively or the phone as a substring. A blank term finds nothing."""
        return self.customers_repo.search_by_name_or_phone(term or "")

    def create_customer(self, name: str, phone: str, address: Optional[str] = None) -> CustomerEntity:
        if not name or not name.strip():
            raise ValidationError("Tên khách hàng không được để trống.")
        if not phone or not phone.strip():
            raise ValidationError("Số điện thoại không được để trống.")
        existing = self.customers_repo.get_by_phone(phone.strip())
        if existing:
            logger.warning(f"Customer phone {phone} is already used by customer {existing.id}.")
        customer = CustomerEntity(name=name.strip(), phone=phone.strip(), address=(address or "").strip() or None)
        created = self.customers_repo.add(customer)
        logger.info(f"Customer '{created.name}' (ID: {created.id}) created.")
        return created
