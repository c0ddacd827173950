# tests/test_bom_manager.py
from decimal import Decimal

import pytest

from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import UNRESOLVED_MATERIAL_NAME


def test_bom_details_carry_material_names_and_estimated_cost(battery, bom_manager):
    bom = bom_manager.get_bom_with_details(battery["bom"].id)
    assert bom.id.startswith("BOM")
    assert [line.material_name for line in bom.materials] == ["Plate", "Casing"]
    assert bom.estimated_cost == Decimal("30000")


def test_bom_requires_product_name(bom_manager, battery):
    with pytest.raises(ValidationError):
        bom_manager.create_bom(" ", [{"material_id": battery["plate"].id, "quantity": "1"}])


def test_bom_requires_at_least_one_line(bom_manager):
    with pytest.raises(ValidationError):
        bom_manager.create_bom("Pin rỗng", [])


@pytest.mark.parametrize("quantity", ["0", "-1", "abc"])
def test_bom_line_quantity_must_be_positive(bom_manager, battery, quantity):
    with pytest.raises(ValidationError):
        bom_manager.create_bom("Pin lỗi", [{"material_id": battery["plate"].id, "quantity": quantity}])


def test_bom_rejects_duplicate_materials(bom_manager, battery):
    plate_id = battery["plate"].id
    with pytest.raises(ValidationError):
        bom_manager.create_bom("Pin đôi", [{"material_id": plate_id, "quantity": "1"},
                                           {"material_id": plate_id, "quantity": "2"}])


def test_update_bom_replaces_lines_and_keeps_id(bom_manager, battery):
    bom_id = battery["bom"].id
    updated = bom_manager.update_bom(bom_id, "Battery-12V Pro",
                                     [{"material_id": battery["casing"].id, "quantity": "2"}])
    assert updated.id == bom_id
    assert updated.product_name == "Battery-12V Pro"
    assert [(line.material_id, line.quantity) for line in updated.materials] == [(battery["casing"].id, Decimal("2"))]
    assert updated.estimated_cost == Decimal("40000")


def test_update_missing_bom_returns_none(bom_manager, battery):
    assert bom_manager.update_bom("BOMNOPE", "x", [{"material_id": battery["plate"].id, "quantity": "1"}]) is None


def test_deleted_material_shows_as_unresolved(bom_manager, material_manager, battery):
    material_manager.delete_material(battery["casing"].id)
    bom = bom_manager.get_bom_with_details(battery["bom"].id)
    assert bom.materials[1].material_name == UNRESOLVED_MATERIAL_NAME
    assert bom.estimated_cost == Decimal("10000")


def test_material_picker_excludes_lines_already_in_bom(bom_manager, material_manager, battery):
    for i in range(12):
        material_manager.create_material(f"Phụ kiện {i:02d}", purchase_price="100")
    results = bom_manager.search_materials_for_bom("", exclude_ids=[battery["plate"].id])
    assert len(results) == 10
    assert battery["plate"].id not in {m.id for m in results}
    assert [m.name for m in bom_manager.search_materials_for_bom("cas", exclude_ids=[])] == ["Casing"]


def test_search_boms_by_product(bom_manager, battery):
    assert [b.id for b in bom_manager.get_all_boms("battery")] == [battery["bom"].id]
    assert bom_manager.get_all_boms("không có") == []
