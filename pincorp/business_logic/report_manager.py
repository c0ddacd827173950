# pincorp/business_logic/report_manager.py
from typing import List, Dict, Any, Iterable, Optional, Tuple, TYPE_CHECKING
from datetime import date
from decimal import Decimal

from pincorp.business_logic.entities.sale_entity import SaleEntity
from pincorp.business_logic.exceptions import ValidationError
from pincorp.utils.date_converter import day_bounds, one_month_before, to_day_label

if TYPE_CHECKING:
    from ..data_access.sales_repository import SalesRepository

import logging
logger = logging.getLogger(__name__)


def default_report_range(today: Optional[date] = None) -> Tuple[date, date]:
    """The report screen opens on the last month: (same day last month, today)."""
    today = today or date.today()
    return one_month_before(today), today


def build_sales_report(sales: Iterable[SaleEntity], start_date: date, end_date: date) -> Dict[str, Any]:
    """
    Folds a sales history into revenue, cost and profit figures for the
    whole days from start_date to end_date inclusive.

    Returns:
        A dictionary with the three totals, the number of sales, a
        per-product breakdown sorted by revenue (highest first) and a
        per-day trend sorted by date. Each trend point keeps its full date
        so ranges across a year end sort correctly, and a dd/mm label for
        display. The result does not depend on the order of `sales`.
    """
    start, end = day_bounds(start_date, end_date)
    in_range = [sale for sale in sales if start <= sale.date <= end]

    total_revenue = Decimal("0")
    total_cost = Decimal("0")
    products: Dict[str, Dict[str, Any]] = {}
    days: Dict[date, Dict[str, Any]] = {}

    for sale in in_range:
        sale_cost = Decimal("0")
        for item in sale.items:
            item_cost = item.cost_price * item.quantity
            item_revenue = item.selling_price * item.quantity - (item.discount or Decimal("0"))
            sale_cost += item_cost

            entry = products.setdefault(item.product_id, {
                "product_id": item.product_id,
                "name": item.name,
                "sku": item.sku,
                "quantity": Decimal("0"),
                "revenue": Decimal("0"),
                "profit": Decimal("0"),
            })
            entry["quantity"] += item.quantity
            entry["revenue"] += item_revenue
            entry["profit"] += item_revenue - item_cost

        total_revenue += sale.total
        total_cost += sale_cost

        day = sale.date.date()
        point = days.setdefault(day, {
            "date": day,
            "label": to_day_label(day),
            "revenue": Decimal("0"),
            "profit": Decimal("0"),
            "sale_count": 0,
        })
        point["revenue"] += sale.total
        point["profit"] += sale.total - sale_cost
        point["sale_count"] += 1

    # product_id as tie-breaker keeps the order stable whatever order the sales came in
    product_performance = sorted(products.values(), key=lambda p: (-p["revenue"], p["product_id"]))
    daily_trend = [days[day] for day in sorted(days)]

    report = {
        "start_date": start_date,
        "end_date": end_date,
        "total_revenue": total_revenue,
        "total_cost": total_cost,
        "total_profit": total_revenue - total_cost,
        "sale_count": len(in_range),
        "product_performance": product_performance,
        "daily_trend": daily_trend,
    }
    logger.debug(f"Sales report {start_date}..{end_date}: {len(in_range)} sales, revenue {total_revenue}, "
                 f"profit {report['total_profit']}")
    return report


class ReportManager:
    def __init__(self, sales_repository: 'SalesRepository'):
        if sales_repository is None:
            raise ValueError("sales_repository cannot be None")
        self.sales_repo = sales_repository

    def generate_sales_report(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> Dict[str, Any]:
        default_start, default_end = default_report_range()
        start_date = start_date or default_start
        end_date = end_date or default_end
        if start_date > end_date:
            raise ValidationError("Ngày bắt đầu không được sau ngày kết thúc.")
        logger.info(f"Generating sales report from {start_date} to {end_date}...")
        start, end = day_bounds(start_date, end_date)
        return build_sales_report(self.sales_repo.get_by_date_range(start, end), start_date, end_date)

    def get_top_products(self, start_date: date, end_date: date, limit: int = 5) -> List[Dict[str, Any]]:
        return self.generate_sales_report(start_date, end_date)["product_performance"][:limit]
