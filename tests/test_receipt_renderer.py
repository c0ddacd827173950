# tests/test_receipt_renderer.py
from datetime import datetime
from decimal import Decimal

from pincorp.business_logic.entities.cart_item_entity import CartItemEntity
from pincorp.business_logic.entities.sale_entity import SaleEntity, SaleCustomerEntity
from pincorp.constants import PaymentMethod
from pincorp.presentation.receipt_renderer import (
    RECEIPT_TITLE, THANK_YOU_LINE, build_receipt_html, build_receipt_text
)


def _sale(discount="0", customer=None):
    items = [CartItemEntity(product_id="P-A", name="Pin <12V>", quantity=Decimal("2"),
                            selling_price=Decimal("100000"), cost_price=Decimal("60000"))]
    return SaleEntity(date=datetime(2024, 5, 2, 9, 30), items=items, subtotal=Decimal("200000"),
                      discount=Decimal(discount), total=Decimal("200000") - Decimal(discount),
                      customer=customer or SaleCustomerEntity(), payment_method=PaymentMethod.CASH,
                      id="SALE-ABC")


def test_receipt_html_lists_sale():
    html = build_receipt_html(_sale(), store_name="PIN Corp")
    assert "PIN Corp" in html
    assert RECEIPT_TITLE in html
    assert "SALE-ABC" in html
    assert "02/05/2024 09:30" in html
    assert "Khách lẻ" in html
    assert "200.000 ₫" in html
    assert THANK_YOU_LINE in html


def test_receipt_html_escapes_user_text():
    html = build_receipt_html(_sale(customer=SaleCustomerEntity(name="<b>Hoa</b>")))
    assert "Pin &lt;12V&gt;" in html
    assert "&lt;b&gt;Hoa&lt;/b&gt;" in html
    assert "<b>Hoa</b>" not in html


def test_discount_row_only_when_discounted():
    assert "Giảm giá" not in build_receipt_html(_sale())
    discounted = build_receipt_html(_sale(discount="10000"))
    assert "Giảm giá" in discounted
    assert "-10.000 ₫" in discounted
    assert "190.000 ₫" in discounted


def test_receipt_text_includes_customer_phone():
    text = build_receipt_text(_sale(customer=SaleCustomerEntity(name="Chị Hoa", phone="0901234567")))
    assert "Khách hàng: Chị Hoa" in text
    assert "SĐT: 0901234567" in text
    assert text.splitlines()[-1] == THANK_YOU_LINE
