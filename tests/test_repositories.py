# tests/test_repositories.py
from datetime import date, datetime
from decimal import Decimal

import pytest

from pincorp.business_logic.entities.customer_entity import CustomerEntity
from pincorp.business_logic.entities.material_entity import MaterialEntity
from pincorp.business_logic.entities.sale_entity import SaleEntity, SaleCustomerEntity
from pincorp.business_logic.entities.cart_item_entity import CartItemEntity
from pincorp.constants import MaterialUnit, PaymentMethod, ProductionOrderStatus
from pincorp.data_access.database_manager import DatabaseManager
from pincorp.data_access.serialization import entity_from_dict, entity_to_dict


def test_returned_entities_are_copies(repos):
    material = repos["materials"].add(MaterialEntity(name="Plate", purchase_price=Decimal("5000")))
    material.name = "đổi tên"
    assert repos["materials"].get_by_id(material.id).name == "Plate"


def test_add_rejects_duplicate_id(repos):
    repos["customers"].add(CustomerEntity(name="A", phone="1", id="PINCUST-X"))
    with pytest.raises(ValueError):
        repos["customers"].add(CustomerEntity(name="B", phone="2", id="PINCUST-X"))


def test_update_of_missing_entity_returns_none(repos):
    assert repos["customers"].update(CustomerEntity(name="A", phone="1", id="PINCUST-NONE")) is None


def test_find_by_criteria(repos):
    materials = repos["materials"]
    for name, price, unit in [("A", "100", MaterialUnit.KG), ("B", "200", MaterialUnit.KG), ("C", "300", MaterialUnit.PIECE)]:
        materials.add(MaterialEntity(name=name, purchase_price=Decimal(price), unit=unit))
    assert [m.name for m in materials.find_by_criteria({"unit": MaterialUnit.KG}, order_by="name DESC")] == ["B", "A"]
    assert [m.name for m in materials.find_by_criteria(
        {"purchase_price": ("BETWEEN", (150, Decimal("300")))}, order_by="name")] == ["B", "C"]
    assert [m.name for m in materials.find_by_criteria({"purchase_price": 200})] == ["B"]
    with pytest.raises(ValueError):
        materials.find_by_criteria({"colour": "red"})
    with pytest.raises(ValueError):
        materials.find_by_criteria({"name": ("LIKE", "b%")})


def test_sales_by_date_range(repos):
    sales = repos["sales"]
    for day in (1, 5, 9):
        sales.add(SaleEntity(date=datetime(2024, 5, day, 12, 0), payment_method=PaymentMethod.CASH))
    found = sales.get_by_date_range(datetime(2024, 5, 2), datetime(2024, 5, 9, 12, 0))
    assert [s.date.day for s in found] == [5, 9]


def test_entity_dict_round_trip_keeps_types():
    sale = SaleEntity(
        date=datetime(2024, 5, 2, 9, 30, 15),
        items=[CartItemEntity(product_id="P-A", name="Product A", quantity=Decimal("2"),
                              selling_price=Decimal("100000"), cost_price=Decimal("60000"))],
        subtotal=Decimal("200000"), total=Decimal("200000"),
        customer=SaleCustomerEntity(name="Chị Hoa", customer_id="PINCUST-1", phone="0901"),
        payment_method=PaymentMethod.BANK, user_id="u1", user_name="Thu ngân", id="SALE-1")
    data = entity_to_dict(sale)
    assert data["payment_method"] == "Chuyển khoản"
    assert data["items"][0]["quantity"] == "2"
    assert entity_from_dict(SaleEntity, data) == sale


def test_display_fields_are_not_stored(bom_manager, battery):
    bom = bom_manager.get_bom_with_details(battery["bom"].id)
    data = entity_to_dict(bom)
    assert "estimated_cost" not in data
    assert "material_name" not in data["materials"][0]


def test_bad_stored_value_is_reported():
    with pytest.raises(ValueError):
        entity_from_dict(MaterialEntity, {"name": "x", "purchase_price": "không phải số"})


def test_database_round_trip(tmp_path, store, repos, production_manager, battery):
    db = DatabaseManager(str(tmp_path / "nested" / "pincorp.db"))
    db.create_tables()
    store.subscribe(db.save_changes)

    order = production_manager.create_order(battery["bom"].id, 2, creation_date=date(2024, 5, 2))
    production_manager.start_order(order.id)

    loaded_orders = db.load_collection("production_orders", repos["orders"].model_type)
    assert len(loaded_orders) == 1
    assert loaded_orders[0] == repos["orders"].get_by_id(order.id)
    assert loaded_orders[0].status == ProductionOrderStatus.IN_PROGRESS
    loaded_materials = {m.name: m.stock for m in db.load_collection("materials", MaterialEntity)}
    assert loaded_materials == {"Plate": Decimal("6"), "Casing": Decimal("1")}
    # the listener was attached after the fixture data was created, so BOMs were never written
    assert db.load_collection("boms", repos["boms"].model_type) == []


def test_saved_rows_keep_their_order_and_deletes_are_applied(tmp_path, store, repos):
    db = DatabaseManager(str(tmp_path / "pincorp.db"))
    db.create_tables()
    store.subscribe(db.save_changes)

    customers = repos["customers"]
    first = customers.add(CustomerEntity(name="Một", phone="1"))
    second = customers.add(CustomerEntity(name="Hai", phone="2"))
    third = customers.add(CustomerEntity(name="Ba", phone="3"))
    first.name = "Một (sửa)"
    customers.update(first)
    customers.delete(second.id)

    loaded = db.load_collection("customers", CustomerEntity)
    assert [(c.id, c.name) for c in loaded] == [(first.id, "Một (sửa)"), (third.id, "Ba")]
