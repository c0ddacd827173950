# pincorp/business_logic/entities/base_entity.py
from dataclasses import dataclass, field
from typing import Optional

@dataclass
class BaseEntity:
    id: Optional[str] = field(default=None, kw_only=True) # assigned by the owning repository
