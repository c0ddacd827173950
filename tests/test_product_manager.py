# tests/test_product_manager.py
from decimal import Decimal

import pytest

from pincorp.business_logic.product_manager import calculate_profit_margin
from pincorp.business_logic.exceptions import ValidationError


def test_profit_margin_is_relative_to_cost():
    assert round(calculate_profit_margin(Decimal("60000"), Decimal("100000")), 2) == Decimal("66.67")
    assert calculate_profit_margin(Decimal("50000"), Decimal("60000")) == Decimal("20")


def test_profit_margin_is_zero_without_cost():
    assert calculate_profit_margin(Decimal("0"), Decimal("100000")) == Decimal("0")


def test_price_analysis_flags_low_margin(product_manager, stocked_products):
    product_a, _ = stocked_products
    healthy = product_manager.get_price_analysis(product_a)
    assert healthy["profit"] == Decimal("40000")
    assert healthy["is_low_margin"] is False

    thin = product_manager.get_price_analysis(product_a, "66000")
    assert thin["profit"] == Decimal("6000")
    assert thin["profit_margin"] == Decimal("10")
    assert thin["is_low_margin"] is True


def test_update_selling_price(product_manager, stocked_products):
    product_a, _ = stocked_products
    updated = product_manager.update_selling_price(product_a.id, "120000")
    assert updated.selling_price == Decimal("120000")
    assert product_manager.get_product_by_id(product_a.id).cost_price == Decimal("60000")


def test_selling_price_cannot_be_negative(product_manager, stocked_products):
    product_a, _ = stocked_products
    with pytest.raises(ValidationError):
        product_manager.update_selling_price(product_a.id, "-1")


def test_update_selling_price_of_unknown_product(product_manager):
    assert product_manager.update_selling_price("NOPE", "1000") is None


def test_in_stock_filter(product_manager, repos, stocked_products):
    _, product_b = stocked_products
    product_b.stock = Decimal("0")
    repos["products"].update(product_b)
    assert [p.name for p in product_manager.get_all_products()] == ["Product A", "Product B"]
    assert [p.name for p in product_manager.get_all_products(in_stock_only=True)] == ["Product A"]
