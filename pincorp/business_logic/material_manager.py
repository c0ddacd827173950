# pincorp/business_logic/material_manager.py
from typing import Optional, List, Any, Dict, TYPE_CHECKING
from decimal import Decimal, InvalidOperation
from datetime import datetime

from pincorp.business_logic.entities.material_entity import MaterialEntity
from pincorp.business_logic.entities.inventory_movement_entity import InventoryMovementEntity
from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import MaterialUnit, InventoryMovementType, ReferenceType, StockItemKind

if TYPE_CHECKING:
    from ..data_access.materials_repository import MaterialsRepository
    from ..data_access.inventory_movements_repository import InventoryMovementsRepository

import logging

logger = logging.getLogger(__name__)


def to_decimal(value: Any, field_label: str) -> Decimal:
    """Converts user input to a finite Decimal, raising a ValidationError naming the field."""
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Giá trị '{field_label}' không hợp lệ: {value}")
    # NaN and Infinity parse, but cannot be compared or stored as amounts
    if not result.is_finite():
        raise ValidationError(f"Giá trị '{field_label}' không hợp lệ: {value}")
    return result


class MaterialManager:
    def __init__(self, materials_repository: 'MaterialsRepository',
                 inventory_movements_repository: 'InventoryMovementsRepository'):
        if materials_repository is None:
            raise ValueError("materials_repository cannot be None")
        if inventory_movements_repository is None:
            raise ValueError("inventory_movements_repository cannot be None")
        self.materials_repo = materials_repository
        self.movements_repo = inventory_movements_repository

    def get_material_by_id(self, material_id: str) -> Optional[MaterialEntity]:
        logger.debug(f"Fetching material by ID: {material_id}")
        material = self.materials_repo.get_by_id(material_id)
        if not material:
            logger.warning(f"Material with ID {material_id} not found.")
        return material

    def get_all_materials(self, search_term: Optional[str] = None, limit: Optional[int] = None) -> List[MaterialEntity]:
        """Materials ordered by name, optionally filtered by name or SKU."""
        return self.materials_repo.search_by_name_or_sku(search_term, limit=limit)

    def get_materials_map(self) -> Dict[str, MaterialEntity]:
        return {m.id: m for m in self.materials_repo.get_all()}

    def _validate(self, name: str, purchase_price: Decimal, stock: Decimal) -> None:
        if not name or not name.strip():
            raise ValidationError("Tên nguyên vật liệu không được để trống.")
        if purchase_price <= Decimal("0"):
            raise ValidationError("Giá nhập phải lớn hơn 0.")
        if stock < Decimal("0"):
            raise ValidationError("Tồn kho không được âm.")

    def create_material(self,
                        name: str,
                        purchase_price: Any,
                        sku: str = "",
                        unit: MaterialUnit = MaterialUnit.PIECE,
                        stock: Any = None,
                        supplier: Optional[str] = None,
                        description: Optional[str] = None) -> MaterialEntity:
        price_dec = to_decimal(purchase_price, "giá nhập")
        stock_dec = to_decimal(stock, "tồn kho") if stock not in (None, "") else Decimal("0")
        self._validate(name, price_dec, stock_dec)

        material = MaterialEntity(
            name=name.strip(),
            sku=(sku or "").strip(),
            unit=unit or MaterialUnit.PIECE,
            purchase_price=price_dec,
            stock=stock_dec,
            supplier=supplier or None,
            description=description or None,
        )
        with self.materials_repo.store.transaction():
            created = self.materials_repo.add(material)
            if stock_dec > 0:
                self._record_movement(created.id, stock_dec, InventoryMovementType.INITIAL_STOCK,
                                      None, None, "Tồn đầu kỳ khi tạo nguyên vật liệu")
        logger.info(f"Material '{created.name}' (ID: {created.id}) created.")
        return created

    def update_material(self, material_id: str, update_data: Dict[str, Any]) -> Optional[MaterialEntity]:
        """Full-record edit. A changed stock value is logged as a manual adjustment."""
        logger.info(f"Attempting to update material ID: {material_id} with data: {update_data}")
        material = self.get_material_by_id(material_id)
        if not material:
            return None

        old_stock = material.stock
        for key, value in update_data.items():
            if key == "id" or not hasattr(material, key):
                continue
            if key == "purchase_price":
                value = to_decimal(value, "giá nhập")
            elif key == "stock":
                value = to_decimal(value, "tồn kho") if value not in (None, "") else Decimal("0")
            elif key in ("name", "sku") and value is not None:
                value = value.strip()
            setattr(material, key, value)
        self._validate(material.name, material.purchase_price, material.stock)

        with self.materials_repo.store.transaction():
            updated = self.materials_repo.update(material)
            if updated and material.stock != old_stock:
                self._record_movement(material.id, material.stock - old_stock,
                                      InventoryMovementType.STOCK_ADJUSTMENT, None, ReferenceType.MANUAL,
                                      "Điều chỉnh tồn kho khi sửa nguyên vật liệu")
        logger.info(f"Material ID {material_id} updated.")
        return updated

    def save_material(self, material_data: Dict[str, Any], material_id: Optional[str] = None) -> MaterialEntity:
        if material_id:
            updated = self.update_material(material_id, material_data)
            if updated is None:
                raise ValidationError(f"Không tìm thấy nguyên vật liệu với mã {material_id}.")
            return updated
        return self.create_material(**material_data)

    def delete_material(self, material_id: str) -> bool:
        # BOM lines that point to a deleted material show as "not found" afterwards
        deleted = self.materials_repo.delete(material_id)
        if deleted:
            logger.info(f"Material ID {material_id} deleted.")
        return deleted

    def adjust_stock(self,
                     material_id: str,
                     quantity_change: Decimal,
                     movement_type: InventoryMovementType,
                     reference_id: Optional[str] = None,
                     reference_type: Optional[ReferenceType] = None,
                     description: Optional[str] = None) -> MaterialEntity:
        """Changes a material's stock and records the movement. Stock never goes below zero."""
        with self.materials_repo.store.transaction():
            material = self.materials_repo.get_by_id(material_id)
            if not material:
                raise ValidationError(f"Không tìm thấy nguyên vật liệu với mã {material_id}.")
            new_stock = material.stock + quantity_change
            if new_stock < Decimal("0"):
                raise ValidationError(
                    f"Tồn kho của '{material.name}' không đủ (hiện có {material.stock}, cần {-quantity_change}).")
            material.stock = new_stock
            self.materials_repo.update(material)
            self._record_movement(material_id, quantity_change, movement_type, reference_id, reference_type, description)
        logger.info(f"Stock for material {material_id} changed by {quantity_change}. New stock: {new_stock}")
        return material

    def get_movements(self, material_id: str) -> List[InventoryMovementEntity]:
        return self.movements_repo.get_by_item(StockItemKind.MATERIAL, material_id)

    def _record_movement(self, material_id, quantity_change, movement_type, reference_id, reference_type, description):
        self.movements_repo.add(InventoryMovementEntity(
            item_kind=StockItemKind.MATERIAL,
            item_id=material_id,
            movement_date=datetime.now(),
            quantity_change=quantity_change,
            movement_type=movement_type,
            reference_id=reference_id,
            reference_type=reference_type,
            description=description,
        ))
