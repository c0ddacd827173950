# pincorp/presentation/products_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QTableView, QPushButton, QHBoxLayout, QMessageBox,
                             QDialog, QFormLayout, QDialogButtonBox, QLabel)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any
from decimal import Decimal
import logging

from pincorp.business_logic.entities.product_entity import ProductEntity
from pincorp.business_logic.product_manager import ProductManager, calculate_profit_margin
from pincorp.config import LOW_MARGIN_THRESHOLD
from pincorp.utils.formatting import format_currency, format_quantity, format_percent
from pincorp.utils.pagination import paginate
from pincorp.presentation.custom_widgets import (PaginationBar, SearchLineEdit, MovementHistoryDialog,
                                                 make_money_spinbox, spin_value, configure_table_view, selected_row)

logger = logging.getLogger(__name__)


class ProductTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[ProductEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[ProductEntity] = data if data is not None else []
        self._headers = ["Mã", "Tên sản phẩm", "SKU", "Tồn kho", "Giá vốn", "Giá bán", "Lợi nhuận", "Tỷ suất"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid():
            return QVariant()
        row, col = index.row(), index.column()
        if not (0 <= row < len(self._data)):
            return QVariant()
        product = self._data[row]
        margin = calculate_profit_margin(product.cost_price, product.selling_price)

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return product.id
            elif col == 1: return product.name
            elif col == 2: return product.sku
            elif col == 3: return format_quantity(product.stock)
            elif col == 4: return format_currency(product.cost_price)
            elif col == 5: return format_currency(product.selling_price)
            elif col == 6: return format_currency(product.selling_price - product.cost_price)
            elif col == 7: return format_percent(margin)
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col >= 3:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole:
            if col in (6, 7) and margin < LOW_MARGIN_THRESHOLD:
                return QColor(Qt.GlobalColor.red)
            if col == 3 and product.stock <= Decimal("0"):
                return QColor(Qt.GlobalColor.red)
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[ProductEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_product_at_row(self, row: int) -> Optional[ProductEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class EditPriceDialog(QDialog):
    """Selling price editor with the profit figures updated as the user types."""

    def __init__(self, product: ProductEntity, product_manager: ProductManager, parent=None):
        super().__init__(parent)
        self.product = product
        self.product_manager = product_manager
        self.setWindowTitle(f"Sửa giá bán: {product.name}")
        self.setMinimumWidth(380)

        layout = QFormLayout(self)
        self.cost_label = QLabel(format_currency(product.cost_price), self)
        self.price_spinbox = make_money_spinbox(self)
        self.price_spinbox.setValue(float(product.selling_price))
        self.profit_label = QLabel(self)
        self.margin_label = QLabel(self)

        layout.addRow("Sản phẩm:", QLabel(product.name, self))
        layout.addRow("Giá vốn:", self.cost_label)
        layout.addRow("Giá bán:", self.price_spinbox)
        layout.addRow("Lợi nhuận:", self.profit_label)
        layout.addRow("Tỷ suất lợi nhuận:", self.margin_label)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        ok_button = self.button_box.button(QDialogButtonBox.StandardButton.Ok)
        if ok_button: ok_button.setText("Lưu")
        cancel_button = self.button_box.button(QDialogButtonBox.StandardButton.Cancel)
        if cancel_button: cancel_button.setText("Hủy")
        layout.addWidget(self.button_box)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

        self.price_spinbox.valueChanged.connect(self._update_analysis)
        self._update_analysis()

    def _update_analysis(self, *_args):
        analysis = self.product_manager.get_price_analysis(self.product, self.get_selling_price())
        color = "red" if analysis["is_low_margin"] else "green"
        self.profit_label.setText(format_currency(analysis["profit"]))
        self.margin_label.setText(f"<span style='color:{color}'>{format_percent(analysis['profit_margin'])}</span>")
        if analysis["is_low_margin"]:
            self.margin_label.setToolTip(f"Tỷ suất lợi nhuận dưới {format_percent(LOW_MARGIN_THRESHOLD)}")
        else:
            self.margin_label.setToolTip("")

    def get_selling_price(self) -> Decimal:
        return spin_value(self.price_spinbox)


class ProductsUI(QWidget):
    def __init__(self, product_manager: ProductManager, parent=None):
        super().__init__(parent)
        self.product_manager = product_manager
        self.table_model = ProductTableModel()
        self._products: List[ProductEntity] = []
        self._init_ui()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        self.search_edit = SearchLineEdit("Tìm theo tên hoặc SKU...", self)
        self.search_edit.textChanged.connect(lambda _text: self.load_products_data(page=1))
        main_layout.addWidget(self.search_edit)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        configure_table_view(self.table_view, stretch_column=1)
        self.table_view.doubleClicked.connect(self._open_edit_price_dialog)
        main_layout.addWidget(self.table_view)

        self.pagination_bar = PaginationBar(self)
        self.pagination_bar.pageChanged.connect(self._show_page)
        main_layout.addWidget(self.pagination_bar)

        button_layout = QHBoxLayout()
        self.edit_price_button = QPushButton("Sửa giá bán")
        self.history_button = QPushButton("Lịch sử kho")
        self.refresh_button = QPushButton("Tải lại")
        self.edit_price_button.clicked.connect(self._open_edit_price_dialog)
        self.history_button.clicked.connect(self._show_movement_history)
        self.refresh_button.clicked.connect(lambda: self.load_products_data())
        button_layout.addWidget(self.edit_price_button)
        button_layout.addWidget(self.history_button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("ProductsUI initialized.")
        self.load_products_data()

    def load_products_data(self, page: Optional[int] = None):
        try:
            self._products = self.product_manager.get_all_products(self.search_edit.text())
            self._show_page(page or self.pagination_bar.current_page)
        except Exception as e:
            logger.error(f"Error loading products: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi tải dữ liệu", f"Không thể tải danh sách sản phẩm: {e}")

    def _show_page(self, page: int):
        current = paginate(self._products, page)
        self.table_model.update_data(current.items)
        self.pagination_bar.set_page(current)

    def _selected_product(self) -> Optional[ProductEntity]:
        row = selected_row(self.table_view)
        return self.table_model.get_product_at_row(row) if row is not None else None

    def _open_edit_price_dialog(self, *_args):
        product = self._selected_product()
        if not product:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một sản phẩm để sửa giá.")
            return
        dialog = EditPriceDialog(product, self.product_manager, parent=self)
        if dialog.exec_() != QDialog.DialogCode.Accepted:
            return
        try:
            updated = self.product_manager.update_selling_price(product.id, dialog.get_selling_price())
            if updated is None:
                QMessageBox.warning(self, "Không thành công", f"Không tìm thấy sản phẩm '{product.name}'.")
                return
            self.load_products_data()
        except ValueError as ve:
            QMessageBox.warning(self, "Dữ liệu không hợp lệ", str(ve))
        except Exception as e:
            logger.error(f"Error updating selling price: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi cập nhật giá bán: {e}")

    def _show_movement_history(self):
        product = self._selected_product()
        if not product:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một sản phẩm.")
            return
        movements = self.product_manager.get_movements(product.id)
        MovementHistoryDialog(f"Lịch sử kho: {product.name}", movements, self).exec_()
