# pincorp/business_logic/bom_manager.py

from typing import Optional, List, Dict, Any, TYPE_CHECKING
from decimal import Decimal

from pincorp.business_logic.entities.bom_entity import BOMEntity
from pincorp.business_logic.entities.bom_material_entity import BomMaterialEntity
from pincorp.business_logic.material_manager import MaterialManager, to_decimal
from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import UNRESOLVED_MATERIAL_NAME
from pincorp.config import PICKER_RESULT_LIMIT

if TYPE_CHECKING:
    from ..data_access.bom_repository import BOMsRepository

import logging
logger = logging.getLogger(__name__)

class BomManager:
    def __init__(self, bom_repository: 'BOMsRepository', material_manager: MaterialManager):
        if bom_repository is None: raise ValueError("bom_repository cannot be None")
        if material_manager is None: raise ValueError("material_manager cannot be None")

        self.bom_repo = bom_repository
        self.material_manager = material_manager

    def _build_material_lines(self, materials_data: List[Any]) -> List[BomMaterialEntity]:
        """Validates editor rows ({material_id, quantity} dicts or BomMaterialEntity) into BOM lines."""
        lines: List[BomMaterialEntity] = []
        seen_ids = set()
        for idx, row in enumerate(materials_data, start=1):
            if isinstance(row, BomMaterialEntity):
                material_id, raw_quantity = row.material_id, row.quantity
            else:
                material_id, raw_quantity = row.get("material_id"), row.get("quantity")
            if not material_id:
                raise ValidationError(f"Dòng {idx}: chưa chọn nguyên vật liệu.")
            quantity = to_decimal(raw_quantity, f"số lượng dòng {idx}")
            if quantity <= Decimal("0"):
                raise ValidationError(f"Dòng {idx}: số lượng phải lớn hơn 0.")
            if material_id in seen_ids:
                raise ValidationError(f"Dòng {idx}: nguyên vật liệu bị lặp lại trong định mức.")
            seen_ids.add(material_id)
            if self.material_manager.get_material_by_id(material_id) is None:
                logger.warning(f"BOM line {idx} references unknown material ID {material_id}.")
            lines.append(BomMaterialEntity(material_id=material_id, quantity=quantity))
        return lines

    def _validate_bom_data(self, product_name: str, materials_data: List[Any]) -> List[BomMaterialEntity]:
        if not product_name or not product_name.strip():
            raise ValidationError("Tên sản phẩm không được để trống.")
        if not materials_data:
            raise ValidationError("Định mức phải có ít nhất một nguyên vật liệu.")
        return self._build_material_lines(materials_data)

    def create_bom(self, product_name: str, materials_data: List[Any], product_sku: str = "",
                   notes: Optional[str] = None) -> BOMEntity:
        logger.info(f"Attempting to create BOM for product: {product_name}")
        lines = self._validate_bom_data(product_name, materials_data)
        bom = BOMEntity(
            product_name=product_name.strip(),
            product_sku=(product_sku or "").strip(),
            materials=lines,
            notes=notes or None,
        )
        created = self.bom_repo.add(bom)
        logger.info(f"BOM ID {created.id} created with {len(lines)} material lines.")
        return self.get_bom_with_details(created.id)

    def update_bom(self, bom_id: str, product_name: str, materials_data: List[Any], product_sku: str = "",
                   notes: Optional[str] = None) -> Optional[BOMEntity]:
        """Replaces the whole BOM; the id stays the same."""
        logger.info(f"Attempting to update BOM ID: {bom_id}")
        existing = self.bom_repo.get_by_id(bom_id)
        if not existing:
            logger.error(f"BOM with ID {bom_id} not found for update.")
            return None
        lines = self._validate_bom_data(product_name, materials_data)
        existing.product_name = product_name.strip()
        existing.product_sku = (product_sku or "").strip()
        existing.materials = lines
        existing.notes = notes or None
        if not self.bom_repo.update(existing):
            return None
        logger.info(f"BOM ID {bom_id} updated.")
        return self.get_bom_with_details(bom_id)

    def save_bom(self, bom_data: Dict[str, Any], bom_id: Optional[str] = None) -> BOMEntity:
        """Creates a BOM when no id is given, otherwise replaces the existing one."""
        kwargs = dict(product_name=bom_data.get("product_name", ""),
                      materials_data=bom_data.get("materials", []),
                      product_sku=bom_data.get("product_sku", ""),
                      notes=bom_data.get("notes"))
        if bom_id:
            updated = self.update_bom(bom_id, **kwargs)
            if updated is None:
                raise ValidationError(f"Không tìm thấy định mức với mã {bom_id}.")
            return updated
        return self.create_bom(**kwargs)

    def delete_bom(self, bom_id: str) -> bool:
        # orders keep their own product name snapshot, so they are left alone
        deleted = self.bom_repo.delete(bom_id)
        if deleted:
            logger.info(f"BOM ID {bom_id} deleted.")
        return deleted

    def get_bom_by_id(self, bom_id: str) -> Optional[BOMEntity]:
        bom = self.bom_repo.get_by_id(bom_id)
        if not bom:
            logger.warning(f"BOM with ID {bom_id} not found.")
        return bom

    def get_bom_with_details(self, bom_id: str) -> Optional[BOMEntity]:
        bom = self.get_bom_by_id(bom_id)
        if bom:
            self._fill_details(bom, self.material_manager.get_materials_map())
        return bom

    def get_all_boms(self, search_term: Optional[str] = None) -> List[BOMEntity]:
        boms = self.bom_repo.search_by_product(search_term)
        materials = self.material_manager.get_materials_map()
        for bom in boms:
            self._fill_details(bom, materials)
        logger.debug(f"Fetched {len(boms)} BOMs (search: {search_term!r}).")
        return boms

    def search_materials_for_bom(self, search_term: Optional[str], exclude_ids: List[str],
                                 limit: int = PICKER_RESULT_LIMIT) -> List[Any]:
        """Picker results for the BOM editor: materials not yet in the BOM, at most `limit` of them."""
        excluded = set(exclude_ids or [])
        candidates = [m for m in self.material_manager.get_all_materials(search_term) if m.id not in excluded]
        return candidates[:limit]

    def estimate_unit_cost(self, bom: BOMEntity, materials: Optional[Dict[str, Any]] = None) -> Decimal:
        """Cost of one unit at current purchase prices; unknown materials count as zero."""
        materials = materials if materials is not None else self.material_manager.get_materials_map()
        total = Decimal("0")
        for line in bom.materials:
            material = materials.get(line.material_id)
            if material:
                total += material.purchase_price * line.quantity
        return total

    def _fill_details(self, bom: BOMEntity, materials: Dict[str, Any]) -> None:
        for line in bom.materials:
            material = materials.get(line.material_id)
            line.material_name = material.name if material else UNRESOLVED_MATERIAL_NAME
            line.unit_purchase_price = material.purchase_price if material else Decimal("0")
        bom.estimated_cost = self.estimate_unit_cost(bom, materials)
