# tests/test_material_manager.py
from decimal import Decimal

import pytest

from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import InventoryMovementType, MaterialUnit


def test_create_material_assigns_prefixed_id(material_manager):
    material = material_manager.create_material("Đồng lá", purchase_price="12000", unit=MaterialUnit.KG, stock="4")
    assert material.id.startswith("M")
    assert material.purchase_price == Decimal("12000")
    assert material.stock == Decimal("4")
    assert material_manager.get_material_by_id(material.id).name == "Đồng lá"


@pytest.mark.parametrize("name, price, stock", [
    ("", "1000", "0"),
    ("   ", "1000", "0"),
    ("Keo", "0", "0"),
    ("Keo", "-5", "0"),
    ("Keo", "1000", "-1"),
    ("Keo", "abc", "0"),
    ("Keo", "Infinity", "0"),
    ("Keo", "1000", "nan"),
])
def test_create_material_rejects_invalid_input(material_manager, name, price, stock):
    with pytest.raises(ValidationError):
        material_manager.create_material(name, purchase_price=price, stock=stock)
    assert material_manager.get_all_materials() == []


def test_initial_stock_is_recorded_as_movement(material_manager):
    material = material_manager.create_material("Ốc vít", purchase_price="200", stock="50")
    movements = material_manager.get_movements(material.id)
    assert len(movements) == 1
    assert movements[0].movement_type == InventoryMovementType.INITIAL_STOCK
    assert movements[0].quantity_change == Decimal("50")


def test_material_without_stock_has_no_movement(material_manager):
    material = material_manager.create_material("Băng keo", purchase_price="3000")
    assert material.stock == Decimal("0")
    assert material_manager.get_movements(material.id) == []


def test_update_material_records_stock_adjustment(material_manager):
    material = material_manager.create_material("Dây điện", purchase_price="8000", stock="10")
    updated = material_manager.update_material(material.id, {"stock": "7", "supplier": "Cơ khí Minh"})
    assert updated.stock == Decimal("7")
    assert updated.supplier == "Cơ khí Minh"
    adjustments = [m for m in material_manager.get_movements(material.id)
                   if m.movement_type == InventoryMovementType.STOCK_ADJUSTMENT]
    assert [m.quantity_change for m in adjustments] == [Decimal("-3")]


def test_update_material_validates_the_result(material_manager):
    material = material_manager.create_material("Dây điện", purchase_price="8000")
    with pytest.raises(ValidationError):
        material_manager.update_material(material.id, {"purchase_price": "0"})
    assert material_manager.get_material_by_id(material.id).purchase_price == Decimal("8000")


def test_update_unknown_material_returns_none(material_manager):
    assert material_manager.update_material("MNOPE", {"name": "x"}) is None


def test_save_material_creates_then_updates(material_manager):
    created = material_manager.save_material({"name": "Nhựa", "purchase_price": Decimal("1500")})
    updated = material_manager.save_material({"name": "Nhựa ABS", "purchase_price": Decimal("1600")},
                                             material_id=created.id)
    assert updated.id == created.id
    assert updated.name == "Nhựa ABS"
    with pytest.raises(ValidationError):
        material_manager.save_material({"name": "x", "purchase_price": "1"}, material_id="MMISSING")


def test_adjust_stock_never_goes_negative(material_manager):
    material = material_manager.create_material("Chì", purchase_price="100", stock="2")
    with pytest.raises(ValidationError):
        material_manager.adjust_stock(material.id, Decimal("-3"), InventoryMovementType.STOCK_ADJUSTMENT)
    assert material_manager.get_material_by_id(material.id).stock == Decimal("2")
    assert len(material_manager.get_movements(material.id)) == 1


def test_search_matches_name_or_sku(material_manager):
    material_manager.create_material("Plate", purchase_price="5000", sku="PL-01")
    material_manager.create_material("Casing", purchase_price="20000", sku="CS-01")
    assert [m.name for m in material_manager.get_all_materials("pl")] == ["Plate"]
    assert [m.name for m in material_manager.get_all_materials("cs-")] == ["Casing"]
    assert [m.name for m in material_manager.get_all_materials()] == ["Casing", "Plate"]


def test_delete_material(material_manager):
    material = material_manager.create_material("Tạm", purchase_price="1")
    assert material_manager.delete_material(material.id) is True
    assert material_manager.delete_material(material.id) is False
