# pincorp/presentation/reports_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QTableView, QPushButton,
                             QMessageBox, QGroupBox, QFormLayout, QDateEdit, QTabWidget)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QFont, QColor

from typing import List, Optional, Any, Dict
from decimal import Decimal
import logging

from pincorp.business_logic.report_manager import ReportManager, default_report_range
from pincorp.utils.date_converter import from_qdate, to_qdate, to_display_date
from pincorp.utils.formatting import format_currency, format_quantity
from pincorp.constants import DISPLAY_DATE_FORMAT
from pincorp.presentation.custom_widgets import configure_table_view

logger = logging.getLogger(__name__)


class ReportRowsTableModel(QAbstractTableModel):
    """
    Read-only table over the report's row dictionaries.

    `columns` is a list of (header, key, kind) where kind is 'text',
    'money' or 'quantity'. Money columns get a bold total row at the bottom.
    """

    def __init__(self, columns: List[tuple], parent=None):
        super().__init__(parent)
        self._columns = columns
        self._data: List[Dict[str, Any]] = []
        self._totals: Dict[str, Decimal] = {}

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data) + 1 if self._data else 0

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._columns)

    def _format(self, value: Any, kind: str) -> str:
        if kind == "money":
            return format_currency(value)
        if kind == "quantity":
            return format_quantity(value)
        return "" if value is None else str(value)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid():
            return QVariant()
        row, col = index.row(), index.column()
        _header, key, kind = self._columns[col]

        if row == len(self._data):
            if role == Qt.ItemDataRole.DisplayRole:
                if col == 0: return "Tổng cộng"
                if kind == "money": return format_currency(self._totals.get(key, Decimal("0")))
            elif role == Qt.ItemDataRole.FontRole:
                font = QFont(); font.setBold(True); return font
            elif role == Qt.ItemDataRole.BackgroundRole:
                return QColor("#f0f0f0")
            elif role == Qt.ItemDataRole.TextAlignmentRole and kind != "text":
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return QVariant()

        if not (0 <= row < len(self._data)):
            return QVariant()
        value = self._data[row].get(key)
        if role == Qt.ItemDataRole.DisplayRole:
            return self._format(value, kind)
        elif role == Qt.ItemDataRole.TextAlignmentRole and kind != "text":
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole and key == "profit" and value is not None and value < 0:
            return QColor(Qt.GlobalColor.red)
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._columns):
                return self._columns[section][0]
        return QVariant()

    def update_data(self, new_data: List[Dict[str, Any]]):
        self.beginResetModel()
        self._data = new_data
        self._totals = {key: sum((r.get(key) or Decimal("0") for r in new_data), Decimal("0"))
                        for _header, key, kind in self._columns if kind == "money"}
        self.endResetModel()


class ReportsUI(QWidget):
    def __init__(self, report_manager: ReportManager, parent=None):
        super().__init__(parent)
        self.report_manager = report_manager
        self.performance_model = ReportRowsTableModel([
            ("Sản phẩm", "name", "text"),
            ("SKU", "sku", "text"),
            ("Số lượng bán", "quantity", "quantity"),
            ("Doanh thu", "revenue", "money"),
            ("Lợi nhuận", "profit", "money"),
        ])
        self.trend_model = ReportRowsTableModel([
            ("Ngày", "label", "text"),
            ("Số hóa đơn", "sale_count", "text"),
            ("Doanh thu", "revenue", "money"),
            ("Lợi nhuận", "profit", "money"),
        ])
        self._init_ui()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        filter_layout = QHBoxLayout()
        start, end = default_report_range()
        self.start_date_edit = QDateEdit(to_qdate(start), self)
        self.end_date_edit = QDateEdit(to_qdate(end), self)
        qt_format = DISPLAY_DATE_FORMAT.replace("%d", "dd").replace("%m", "MM").replace("%Y", "yyyy")
        for date_edit in (self.start_date_edit, self.end_date_edit):
            date_edit.setCalendarPopup(True)
            date_edit.setDisplayFormat(qt_format)
        self.generate_button = QPushButton("Xem báo cáo")
        self.generate_button.clicked.connect(self.load_report)
        filter_layout.addWidget(QLabel("Từ ngày:"))
        filter_layout.addWidget(self.start_date_edit)
        filter_layout.addWidget(QLabel("Đến ngày:"))
        filter_layout.addWidget(self.end_date_edit)
        filter_layout.addWidget(self.generate_button)
        filter_layout.addStretch()
        main_layout.addLayout(filter_layout)

        summary_box = QGroupBox("Tổng quan", self)
        summary_layout = QFormLayout(summary_box)
        self.revenue_label = QLabel("-")
        self.cost_label = QLabel("-")
        self.profit_label = QLabel("-")
        self.sale_count_label = QLabel("-")
        bold = QFont(); bold.setBold(True)
        for label in (self.revenue_label, self.cost_label, self.profit_label):
            label.setFont(bold)
        summary_layout.addRow("Tổng doanh thu:", self.revenue_label)
        summary_layout.addRow("Tổng giá vốn:", self.cost_label)
        summary_layout.addRow("Lợi nhuận:", self.profit_label)
        summary_layout.addRow("Số hóa đơn:", self.sale_count_label)
        main_layout.addWidget(summary_box)

        self.report_tabs = QTabWidget()
        self.performance_view = QTableView()
        self.performance_view.setModel(self.performance_model)
        configure_table_view(self.performance_view, stretch_column=0)
        self.trend_view = QTableView()
        self.trend_view.setModel(self.trend_model)
        configure_table_view(self.trend_view, stretch_column=0)
        self.report_tabs.addTab(self.performance_view, "Hiệu quả sản phẩm")
        self.report_tabs.addTab(self.trend_view, "Xu hướng theo ngày")
        main_layout.addWidget(self.report_tabs)
        logger.info("ReportsUI initialized.")
        self.load_report()

    def load_report(self):
        start_date = from_qdate(self.start_date_edit.date())
        end_date = from_qdate(self.end_date_edit.date())
        try:
            report = self.report_manager.generate_sales_report(start_date, end_date)
        except ValueError as ve:
            QMessageBox.warning(self, "Khoảng thời gian không hợp lệ", str(ve))
            return
        except Exception as e:
            logger.error(f"Error generating sales report: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi báo cáo", f"Không thể tạo báo cáo: {e}")
            return

        self.revenue_label.setText(format_currency(report["total_revenue"]))
        self.cost_label.setText(format_currency(report["total_cost"]))
        self.profit_label.setText(format_currency(report["total_profit"]))
        profit_color = "red" if report["total_profit"] < 0 else "green"
        self.profit_label.setStyleSheet(f"color: {profit_color};")
        self.sale_count_label.setText(str(report["sale_count"]))
        self.performance_model.update_data(report["product_performance"])
        self.trend_model.update_data(report["daily_trend"])
        self.report_tabs.setToolTip(f"{to_display_date(start_date)} - {to_display_date(end_date)}")
