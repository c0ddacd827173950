# pincorp/business_logic/exceptions.py
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .entities.production_estimate_entity import RequiredMaterialEntity


class ValidationError(ValueError):
    """Input rejected by a business rule; the message is shown to the user as is."""


class InsufficientStockError(ValidationError):
    def __init__(self, message: str, deficient_materials: List['RequiredMaterialEntity'] = None):
        super().__init__(message)
        self.deficient_materials = list(deficient_materials or [])


class InvalidStatusTransitionError(ValidationError):
    pass


class ImmutableRecordError(ValidationError):
    pass
