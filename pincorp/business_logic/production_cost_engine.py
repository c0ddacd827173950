# pincorp/business_logic/production_cost_engine.py

from typing import Any, Dict, Iterable, List, Optional
from decimal import Decimal

from pincorp.business_logic.entities.bom_entity import BOMEntity
from pincorp.business_logic.entities.additional_cost_entity import AdditionalCostEntity
from pincorp.business_logic.entities.production_estimate_entity import RequiredMaterialEntity, ProductionCostEstimate
from pincorp.business_logic.material_manager import MaterialManager, to_decimal
from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import UNRESOLVED_MATERIAL_NAME

import logging
logger = logging.getLogger(__name__)


class ProductionCostEngine:
    """
    Expands a BOM for a production quantity into required-material lines,
    checks them against current material stock and rolls up the cost.

    The result is advisory and is recomputed whenever the BOM or the
    quantity changes; nothing here modifies stock.
    """

    def __init__(self, material_manager: MaterialManager):
        if material_manager is None:
            raise ValueError("material_manager cannot be None")
        self.material_manager = material_manager

    @staticmethod
    def validate_quantity(quantity: Any) -> Decimal:
        quantity_dec = to_decimal(quantity, "số lượng sản xuất")
        if quantity_dec <= Decimal("0"):
            raise ValidationError("Số lượng sản xuất phải lớn hơn 0.")
        return quantity_dec

    @staticmethod
    def validate_additional_cost(description: str, amount: Any) -> AdditionalCostEntity:
        if not description or not description.strip():
            raise ValidationError("Mô tả chi phí phát sinh không được để trống.")
        amount_dec = to_decimal(amount, "số tiền chi phí phát sinh")
        if amount_dec <= Decimal("0"):
            raise ValidationError("Số tiền chi phí phát sinh phải lớn hơn 0.")
        return AdditionalCostEntity(description=description.strip(), amount=amount_dec)

    def calculate_required_materials(self, bom: BOMEntity, quantity: Any,
                                     materials: Optional[Dict[str, Any]] = None) -> List[RequiredMaterialEntity]:
        quantity_dec = self.validate_quantity(quantity)
        materials = materials if materials is not None else self.material_manager.get_materials_map()

        required_lines: List[RequiredMaterialEntity] = []
        for line in bom.materials:
            required = line.quantity * quantity_dec
            material = materials.get(line.material_id)
            if material is None:
                logger.warning(f"BOM {bom.id}: material {line.material_id} not found, treated as out of stock.")
                required_lines.append(RequiredMaterialEntity(
                    material_id=line.material_id,
                    name=UNRESOLVED_MATERIAL_NAME,
                    required=required,
                    current_stock=Decimal("0"),
                    is_sufficient=False,
                ))
                continue
            required_lines.append(RequiredMaterialEntity(
                material_id=material.id,
                name=material.name,
                required=required,
                current_stock=material.stock,
                is_sufficient=material.stock >= required,
                unit_purchase_price=material.purchase_price,
                unit=material.unit.value,
            ))
        return required_lines

    def estimate(self, bom: BOMEntity, quantity: Any,
                 additional_costs: Iterable[AdditionalCostEntity] = ()) -> ProductionCostEstimate:
        quantity_dec = self.validate_quantity(quantity)
        required_lines = self.calculate_required_materials(bom, quantity_dec)
        costs = list(additional_costs)

        materials_cost = sum((line.line_cost for line in required_lines), Decimal("0"))
        additional_total = sum((cost.amount for cost in costs), Decimal("0"))
        estimate = ProductionCostEstimate(
            bom_id=bom.id,
            quantity=quantity_dec,
            required_materials=required_lines,
            additional_costs=costs,
            materials_cost=materials_cost,
            additional_costs_total=additional_total,
            total_cost=materials_cost + additional_total,
            is_stock_sufficient=all(line.is_sufficient for line in required_lines),
        )
        logger.debug(f"Estimate for BOM {bom.id} x {quantity_dec}: materials {materials_cost}, "
                     f"additional {additional_total}, sufficient={estimate.is_stock_sufficient}")
        return estimate
