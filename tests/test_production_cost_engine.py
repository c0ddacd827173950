# tests/test_production_cost_engine.py
from decimal import Decimal

import pytest

from pincorp.business_logic.entities.bom_entity import BOMEntity
from pincorp.business_logic.entities.bom_material_entity import BomMaterialEntity
from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import UNRESOLVED_MATERIAL_NAME


def test_estimate_within_stock(cost_engine, battery):
    estimate = cost_engine.estimate(battery["bom"], 3)
    required = {line.name: line for line in estimate.required_materials}
    assert required["Plate"].required == Decimal("6")
    assert required["Plate"].is_sufficient
    # exactly at the stock level still counts as sufficient
    assert required["Casing"].required == Decimal("3")
    assert required["Casing"].is_sufficient
    assert estimate.is_stock_sufficient is True
    assert estimate.materials_cost == Decimal("90000")
    assert estimate.total_cost == Decimal("90000")


def test_estimate_beyond_stock(cost_engine, battery):
    estimate = cost_engine.estimate(battery["bom"], 4)
    assert estimate.is_stock_sufficient is False
    assert [line.name for line in estimate.deficient_materials] == ["Casing"]
    assert estimate.deficient_materials[0].shortage == Decimal("1")


def test_required_quantities_scale_linearly(cost_engine, battery):
    one = cost_engine.calculate_required_materials(battery["bom"], 1)
    seven = cost_engine.calculate_required_materials(battery["bom"], 7)
    assert [line.required * 7 for line in one] == [line.required for line in seven]
    assert (cost_engine.estimate(battery["bom"], 7).materials_cost
            == 7 * cost_engine.estimate(battery["bom"], 1).materials_cost)


def test_sufficiency_only_drops_as_quantity_grows(cost_engine, battery):
    flags = [cost_engine.estimate(battery["bom"], q).is_stock_sufficient for q in range(1, 8)]
    assert flags == [True, True, True, False, False, False, False]


def test_additional_costs_are_added_to_total(cost_engine, battery):
    labour = cost_engine.validate_additional_cost(" Nhân công ", "15000")
    power = cost_engine.validate_additional_cost("Điện", 5000)
    estimate = cost_engine.estimate(battery["bom"], 2, [labour, power])
    assert labour.description == "Nhân công"
    assert estimate.materials_cost == Decimal("60000")
    assert estimate.additional_costs_total == Decimal("20000")
    assert estimate.total_cost == Decimal("80000")


@pytest.mark.parametrize("description, amount", [
    ("", "1000"), ("Điện", "0"), ("Điện", "-10"), ("Điện", "x"), ("Điện", "nan"), ("Điện", "Infinity"),
])
def test_invalid_additional_cost_is_rejected(cost_engine, description, amount):
    with pytest.raises(ValidationError):
        cost_engine.validate_additional_cost(description, amount)


@pytest.mark.parametrize("quantity", [0, -2, "abc", "nan", "sNaN", "Infinity", Decimal("-Infinity")])
def test_quantity_must_be_positive(cost_engine, battery, quantity):
    with pytest.raises(ValidationError):
        cost_engine.estimate(battery["bom"], quantity)


def test_unknown_material_is_never_sufficient(cost_engine, battery):
    bom = BOMEntity(product_name="Pin mồ côi", materials=[
        BomMaterialEntity(material_id=battery["plate"].id, quantity=Decimal("1")),
        BomMaterialEntity(material_id="MGONE", quantity=Decimal("1")),
    ], id="BOMX")
    estimate = cost_engine.estimate(bom, 1)
    dangling = estimate.required_materials[1]
    assert dangling.name == UNRESOLVED_MATERIAL_NAME
    assert dangling.current_stock == Decimal("0")
    assert dangling.is_sufficient is False
    assert estimate.is_stock_sufficient is False
    assert estimate.materials_cost == Decimal("5000")


def test_estimate_does_not_touch_stock(cost_engine, material_manager, battery):
    cost_engine.estimate(battery["bom"], 3)
    assert material_manager.get_material_by_id(battery["casing"].id).stock == Decimal("3")
