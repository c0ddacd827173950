# tests/test_report_manager.py
import random
from datetime import date, datetime
from decimal import Decimal

import pytest

from pincorp.business_logic.entities.cart_item_entity import CartItemEntity
from pincorp.business_logic.entities.sale_entity import SaleEntity
from pincorp.business_logic.report_manager import build_sales_report, default_report_range
from pincorp.business_logic.sales_manager import Cart
from pincorp.business_logic.exceptions import ValidationError
from pincorp.constants import PaymentMethod


def _sale(when, lines, discount="0", sale_id=None):
    items = [CartItemEntity(product_id=pid, name=name, quantity=Decimal(qty),
                            selling_price=Decimal(price), cost_price=Decimal(cost))
             for pid, name, qty, price, cost in lines]
    subtotal = sum((i.line_total for i in items), Decimal("0"))
    return SaleEntity(date=when, items=items, subtotal=subtotal, discount=Decimal(discount),
                      total=subtotal - Decimal(discount), payment_method=PaymentMethod.CASH, id=sale_id)


@pytest.fixture
def two_sales():
    return [
        _sale(datetime(2024, 5, 2, 10, 0), [("P-A", "Product A", "2", "100000", "60000"),
                                            ("P-B", "Product B", "1", "50000", "30000")],
              discount="10000", sale_id="SALE-1"),
        _sale(datetime(2024, 5, 3, 15, 0), [("P-B", "Product B", "3", "30000", "20000")], sale_id="SALE-2"),
    ]


def test_totals(two_sales):
    report = build_sales_report(two_sales, date(2024, 5, 1), date(2024, 5, 31))
    assert report["total_revenue"] == Decimal("330000")
    assert report["total_cost"] == Decimal("210000")
    assert report["total_profit"] == Decimal("120000")
    assert report["sale_count"] == 2


def test_product_performance_sorted_by_revenue(two_sales):
    report = build_sales_report(two_sales, date(2024, 5, 1), date(2024, 5, 31))
    performance = report["product_performance"]
    assert [p["product_id"] for p in performance] == ["P-A", "P-B"]
    assert performance[0]["revenue"] == Decimal("200000")
    assert performance[0]["profit"] == Decimal("80000")
    assert performance[1]["quantity"] == Decimal("4")
    assert performance[1]["revenue"] == Decimal("140000")


def test_daily_trend(two_sales):
    trend = build_sales_report(two_sales, date(2024, 5, 1), date(2024, 5, 31))["daily_trend"]
    assert [(p["label"], p["revenue"], p["profit"]) for p in trend] == [
        ("02/05", Decimal("240000"), Decimal("90000")),
        ("03/05", Decimal("90000"), Decimal("30000")),
    ]


def test_result_does_not_depend_on_input_order(two_sales):
    extra = _sale(datetime(2024, 5, 3, 9, 0), [("P-C", "Product C", "1", "140000", "1")], sale_id="SALE-3")
    sales = two_sales + [extra]
    expected = build_sales_report(sales, date(2024, 5, 1), date(2024, 5, 31))
    rng = random.Random(7)
    for _ in range(5):
        shuffled = sales[:]
        rng.shuffle(shuffled)
        assert build_sales_report(shuffled, date(2024, 5, 1), date(2024, 5, 31)) == expected


def test_range_covers_whole_days():
    sales = [
        _sale(datetime(2024, 5, 1, 0, 0, 0), [("P-A", "A", "1", "100", "50")]),
        _sale(datetime(2024, 5, 3, 23, 59, 59), [("P-A", "A", "1", "100", "50")]),
        _sale(datetime(2024, 4, 30, 23, 59, 59), [("P-A", "A", "1", "100", "50")]),
        _sale(datetime(2024, 5, 4, 0, 0, 0), [("P-A", "A", "1", "100", "50")]),
    ]
    report = build_sales_report(sales, date(2024, 5, 1), date(2024, 5, 3))
    assert report["sale_count"] == 2
    assert report["total_revenue"] == Decimal("200")


def test_trend_across_year_end_is_chronological():
    sales = [
        _sale(datetime(2025, 1, 2, 8, 0), [("P-A", "A", "1", "100", "50")]),
        _sale(datetime(2024, 12, 30, 8, 0), [("P-A", "A", "1", "100", "50")]),
    ]
    trend = build_sales_report(sales, date(2024, 12, 15), date(2025, 1, 15))["daily_trend"]
    assert [p["label"] for p in trend] == ["30/12", "02/01"]
    assert [p["date"] for p in trend] == [date(2024, 12, 30), date(2025, 1, 2)]


def test_empty_range():
    report = build_sales_report([], date(2024, 5, 1), date(2024, 5, 31))
    assert report["total_revenue"] == Decimal("0")
    assert report["product_performance"] == []
    assert report["daily_trend"] == []


def test_default_range_is_the_last_month():
    assert default_report_range(date(2024, 3, 31)) == (date(2024, 2, 29), date(2024, 3, 31))
    assert default_report_range(date(2024, 1, 15)) == (date(2023, 12, 15), date(2024, 1, 15))


def test_report_manager_reads_recorded_sales(report_manager, sales_manager, stocked_products):
    product_a, _ = stocked_products
    cart = Cart()
    cart.add_product(product_a)
    cart.set_payment_method(PaymentMethod.BANK)
    sales_manager.checkout(cart, "u1", "Thu ngân", sale_date=datetime(2024, 6, 10, 11, 0))

    report = report_manager.generate_sales_report(date(2024, 6, 1), date(2024, 6, 30))
    assert report["total_revenue"] == Decimal("100000")
    assert report["total_profit"] == Decimal("40000")
    assert report_manager.get_top_products(date(2024, 6, 1), date(2024, 6, 30), limit=1)[0]["name"] == "Product A"
    assert report_manager.generate_sales_report(date(2024, 7, 1), date(2024, 7, 31))["sale_count"] == 0


def test_start_after_end_is_rejected(report_manager):
    with pytest.raises(ValidationError):
        report_manager.generate_sales_report(date(2024, 6, 2), date(2024, 6, 1))
