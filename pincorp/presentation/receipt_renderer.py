# pincorp/presentation/receipt_renderer.py

from html import escape

from pincorp.business_logic.entities.sale_entity import SaleEntity
from pincorp.config import STORE_NAME
from pincorp.utils.date_converter import to_display_datetime
from pincorp.utils.formatting import format_currency, format_quantity

RECEIPT_TITLE = "HÓA ĐƠN BÁN LẺ"
THANK_YOU_LINE = "Cảm ơn quý khách!"

RECEIPT_CSS = """
    body { font-family: 'DejaVu Sans', Arial, sans-serif; font-size: 11pt; margin: 0; }
    .receipt { width: 300px; margin: 0 auto; }
    h1 { font-size: 16pt; text-align: center; margin: 4px 0; }
    h2 { font-size: 12pt; text-align: center; margin: 2px 0 8px 0; }
    .meta p { margin: 1px 0; }
    table { width: 100%; border-collapse: collapse; margin-top: 6px; }
    th, td { padding: 3px 2px; }
    th { border-bottom: 1px solid #000; text-align: left; }
    td.num, th.num { text-align: right; }
    .totals td { border-top: 1px dashed #000; }
    .grand td { font-weight: bold; font-size: 12pt; }
    .thanks { text-align: center; margin-top: 10px; font-style: italic; }
"""


def build_receipt_html(sale: SaleEntity, store_name: str = STORE_NAME) -> str:
    """Printable retail receipt for a recorded sale."""
    customer = sale.customer
    meta_lines = [
        f"<p>Ngày: {escape(to_display_datetime(sale.date))}</p>",
        f"<p>Số HĐ: {escape(sale.id or '-')}</p>",
        f"<p>Khách hàng: {escape(customer.name)}</p>",
    ]
    if customer.phone:
        meta_lines.append(f"<p>SĐT: {escape(customer.phone)}</p>")
    if customer.address:
        meta_lines.append(f"<p>Địa chỉ: {escape(customer.address)}</p>")

    item_rows = "".join(
        f"<tr><td>{escape(item.name)}</td>"
        f"<td class='num'>{format_quantity(item.quantity)}</td>"
        f"<td class='num'>{format_currency(item.line_total)}</td></tr>"
        for item in sale.items
    )

    total_rows = [f"<tr class='totals'><td colspan='2'>Tạm tính</td>"
                  f"<td class='num'>{format_currency(sale.subtotal)}</td></tr>"]
    if sale.discount > 0:
        total_rows.append(f"<tr><td colspan='2'>Giảm giá</td>"
                          f"<td class='num'>-{format_currency(sale.discount)}</td></tr>")
    total_rows.append(f"<tr class='grand'><td colspan='2'>Tổng cộng</td>"
                      f"<td class='num'>{format_currency(sale.total)}</td></tr>")

    return f"""<!DOCTYPE html>
<html lang="vi">
<head><meta charset="utf-8"><title>{escape(RECEIPT_TITLE)} {escape(sale.id or '')}</title>
<style>{RECEIPT_CSS}</style></head>
<body><div class="receipt">
<h1>{escape(store_name)}</h1>
<h2>{RECEIPT_TITLE}</h2>
<div class="meta">{''.join(meta_lines)}</div>
<table>
<thead><tr><th>Sản phẩm</th><th class='num'>SL</th><th class='num'>Thành tiền</th></tr></thead>
<tbody>{item_rows}</tbody>
<tfoot>{''.join(total_rows)}</tfoot>
</table>
<p class="thanks">{THANK_YOU_LINE}</p>
</div></body></html>"""


def build_receipt_text(sale: SaleEntity, store_name: str = STORE_NAME) -> str:
    """Plain-text version of the receipt, for the clipboard."""
    lines = [store_name, RECEIPT_TITLE,
             f"Ngày: {to_display_datetime(sale.date)}",
             f"Số HĐ: {sale.id or '-'}",
             f"Khách hàng: {sale.customer.name}"]
    if sale.customer.phone:
        lines.append(f"SĐT: {sale.customer.phone}")
    lines.append("-" * 30)
    for item in sale.items:
        lines.append(f"{item.name} x {format_quantity(item.quantity)} = {format_currency(item.line_total)}")
    lines.append("-" * 30)
    lines.append(f"Tạm tính: {format_currency(sale.subtotal)}")
    if sale.discount > 0:
        lines.append(f"Giảm giá: -{format_currency(sale.discount)}")
    lines.append(f"Tổng cộng: {format_currency(sale.total)}")
    lines.append(THANK_YOU_LINE)
    return "\n".join(lines)
