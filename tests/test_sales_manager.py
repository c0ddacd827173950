# tests/test_sales_manager.py
import sqlite3
from datetime import datetime
from decimal import Decimal

import pytest

from pincorp.business_logic.sales_manager import Cart
from pincorp.business_logic.exceptions import ImmutableRecordError, ValidationError
from pincorp.constants import InventoryMovementType, PaymentMethod, WALK_IN_CUSTOMER_NAME


@pytest.fixture
def filled_cart(stocked_products):
    product_a, product_b = stocked_products
    cart = Cart()
    cart.add_product(product_a)
    cart.add_product(product_a)
    cart.add_product(product_b)
    cart.set_discount("10000")
    cart.set_payment_method(PaymentMethod.CASH)
    return cart


def test_cart_totals(filled_cart):
    assert filled_cart.subtotal == Decimal("250000")
    assert filled_cart.total == Decimal("240000")


def test_adding_is_capped_at_stock(stocked_products):
    _, product_b = stocked_products
    cart = Cart()
    for _ in range(5):
        cart.add_product(product_b)
    assert len(cart) == 1
    assert cart.get_item(product_b.id).quantity == Decimal("2")


def test_out_of_stock_product_cannot_be_added(stocked_products):
    product_a, _ = stocked_products
    product_a.stock = Decimal("0")
    with pytest.raises(ValidationError):
        Cart().add_product(product_a)


def test_set_quantity_clamps_and_removes(stocked_products):
    product_a, _ = stocked_products
    cart = Cart()
    cart.add_product(product_a)
    assert cart.set_quantity(product_a.id, "99").quantity == Decimal("5")
    assert cart.set_quantity(product_a.id, "-3") is None
    assert cart.is_empty


def test_negative_discount_is_rejected():
    with pytest.raises(ValidationError):
        Cart().set_discount("-1")


@pytest.mark.parametrize("value", ["nan", "Infinity", "-Infinity"])
def test_non_finite_cart_input_is_rejected(stocked_products, value):
    product_a, _ = stocked_products
    cart = Cart()
    cart.add_product(product_a)
    with pytest.raises(ValidationError):
        cart.set_quantity(product_a.id, value)
    with pytest.raises(ValidationError):
        cart.set_discount(value)
    assert cart.get_item(product_a.id).quantity == Decimal("1")
    assert cart.discount == Decimal("0")


def test_typed_name_clears_selected_customer(customer_manager):
    customer = customer_manager.create_customer("Chị Hoa", "0901234567")
    cart = Cart()
    cart.select_customer(customer)
    assert cart.customer_snapshot().customer_id == customer.id
    cart.set_customer_name("Anh Nam")
    assert cart.selected_customer is None
    assert cart.customer_snapshot().name == "Anh Nam"


def test_checkout_records_sale_and_resets_cart(sales_manager, product_manager, filled_cart):
    sale = sales_manager.checkout(filled_cart, "u1", "Thu ngân", sale_date=datetime(2024, 5, 2, 9, 30))

    assert sale.id.startswith("SALE-")
    assert sale.subtotal == Decimal("250000")
    assert sale.discount == Decimal("10000")
    assert sale.total == Decimal("240000")
    assert sale.payment_method == PaymentMethod.CASH
    assert sale.customer.name == WALK_IN_CUSTOMER_NAME
    assert sale.customer.customer_id is None
    assert (sale.user_id, sale.user_name) == ("u1", "Thu ngân")
    assert filled_cart.is_empty
    assert filled_cart.discount == Decimal("0")
    assert filled_cart.payment_method is None

    assert product_manager.get_product_by_id("P-A").stock == Decimal("3")
    assert product_manager.get_product_by_id("P-B").stock == Decimal("1")
    sale_movements = [m for m in product_manager.get_movements("P-A")
                      if m.movement_type == InventoryMovementType.SALE]
    assert [(m.quantity_change, m.reference_id) for m in sale_movements] == [(Decimal("-2"), sale.id)]


def test_checkout_keeps_selected_customer(sales_manager, customer_manager, filled_cart):
    customer = customer_manager.create_customer("Chị Hoa", "0901234567", "12 Lê Lợi")
    filled_cart.select_customer(customer)
    sale = sales_manager.checkout(filled_cart, "u1", "Thu ngân")
    assert sale.customer.customer_id == customer.id
    assert sale.customer.phone == "0901234567"
    assert sale.customer.address == "12 Lê Lợi"


@pytest.mark.parametrize("breaker", ["empty", "no_payment", "discount_too_big"])
def test_checkout_rejects_invalid_cart(sales_manager, product_manager, repos, filled_cart, breaker):
    if breaker == "empty":
        filled_cart.items = []
    elif breaker == "no_payment":
        filled_cart.set_payment_method(None)
    else:
        filled_cart.set_discount("250001")
    with pytest.raises(ValidationError):
        sales_manager.checkout(filled_cart, "u1", "Thu ngân")
    assert repos["sales"].count() == 0
    assert product_manager.get_product_by_id("P-A").stock == Decimal("5")
    if breaker != "empty":
        assert len(filled_cart) == 2


def test_sale_is_all_or_nothing_when_stock_ran_out(sales_manager, product_manager, repos, filled_cart):
    # someone else sold Product B in the meantime
    product_manager.adjust_stock("P-B", Decimal("-2"), InventoryMovementType.SALE)
    with pytest.raises(ValidationError):
        sales_manager.checkout(filled_cart, "u1", "Thu ngân")
    assert repos["sales"].count() == 0
    assert product_manager.get_product_by_id("P-A").stock == Decimal("5")


def test_sale_keeps_cost_snapshot(sales_manager, repos, filled_cart):
    sale = sales_manager.checkout(filled_cart, "u1", "Thu ngân")
    product_a = repos["products"].get_by_id("P-A")
    product_a.cost_price = Decimal("99000")
    repos["products"].update(product_a)
    stored = sales_manager.get_sale_by_id(sale.id)
    assert stored.total_cost == Decimal("150000")


def test_recorded_sales_are_immutable(sales_manager, repos, filled_cart):
    sale = sales_manager.checkout(filled_cart, "u1", "Thu ngân")
    sale.discount = Decimal("0")
    with pytest.raises(ImmutableRecordError):
        repos["sales"].update(sale)
    with pytest.raises(ImmutableRecordError):
        repos["sales"].delete(sale.id)
    assert sales_manager.get_sale_by_id(sale.id).discount == Decimal("10000")


def test_record_sale_recomputes_totals(sales_manager, stocked_products):
    product_a, _ = stocked_products
    cart = Cart()
    cart.add_product(product_a)
    sale = sales_manager.record_sale({
        "items": cart.items, "subtotal": Decimal("1"), "discount": Decimal("5000"),
        "total": Decimal("1"), "payment_method": PaymentMethod.BANK,
    }, "u1", "Thu ngân")
    assert sale.subtotal == Decimal("100000")
    assert sale.total == Decimal("95000")


def test_customer_phone_is_required(customer_manager):
    with pytest.raises(ValidationError):
        customer_manager.create_customer("Anh Ba", " ")


def test_customer_search(customer_manager):
    customer_manager.create_customer("Nguyễn Văn An", "0912000111")
    customer_manager.create_customer("Trần Thị Bình", "0988777666")
    assert [c.name for c in customer_manager.search_customers("văn")] == ["Nguyễn Văn An"]
    assert [c.name for c in customer_manager.search_customers("0988")] == ["Trần Thị Bình"]
    assert customer_manager.search_customers("") == []


def test_failed_save_after_checkout_does_not_invite_a_second_sale(store, repos, sales_manager, product_manager,
                                                                  filled_cart):
    saved = {}
    failures = []

    def flaky_save(collection, entities, deleted_ids):
        if collection == "inventory_movements" and not failures:
            failures.append(collection)
            raise sqlite3.OperationalError("database is locked")
        saved.setdefault(collection, []).extend(entity.id for entity in entities)

    store.subscribe(flaky_save)
    sale = sales_manager.checkout(filled_cart, "u1", "Thu ngân")

    assert repos["sales"].count() == 1
    assert filled_cart.is_empty
    assert product_manager.get_product_by_id("P-A").stock == Decimal("3")
    # collections after the failing one are still written
    assert saved["sales"] == [sale.id]
    assert sorted(saved["products"]) == ["P-A", "P-B"]
    assert "inventory_movements" not in saved
    assert store.has_unsaved_changes

    # the next commit carries the rows that could not be written
    product_manager.update_selling_price("P-B", "55000")
    assert len(saved["inventory_movements"]) == 2
    assert not store.has_unsaved_changes
