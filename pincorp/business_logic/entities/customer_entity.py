# pincorp/business_logic/entities/customer_entity.py
from dataclasses import dataclass
from typing import Optional
from .base_entity import BaseEntity

@dataclass
class CustomerEntity(BaseEntity):
    name: str
    phone: str = ""
    address: Optional[str] = None
