# pincorp/presentation/sales_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QTableView, QPushButton, QMessageBox, QDialog,
                             QLineEdit, QFormLayout, QDialogButtonBox, QLabel, QGroupBox, QRadioButton,
                             QButtonGroup, QCheckBox, QCompleter, QSplitter, QAbstractItemView)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex, QStringListModel

from typing import List, Optional, Any, Dict
from decimal import Decimal
import logging

from pincorp.business_logic.entities.product_entity import ProductEntity
from pincorp.business_logic.entities.customer_entity import CustomerEntity
from pincorp.business_logic.sales_manager import SalesManager, Cart
from pincorp.business_logic.customer_manager import CustomerManager
from pincorp.constants import PaymentMethod, WALK_IN_CUSTOMER_NAME
from pincorp.utils.formatting import format_currency, format_quantity
from pincorp.presentation.custom_widgets import (SearchLineEdit, make_money_spinbox, spin_value,
                                                 configure_table_view, selected_row)
from pincorp.presentation.receipt_dialog import ReceiptDialog

logger = logging.getLogger(__name__)


class AvailableProductTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[ProductEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[ProductEntity] = data if data is not None else []
        self._headers = ["Tên sản phẩm", "SKU", "Tồn kho", "Giá bán"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        product = self._data[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return product.name
            elif col == 1: return product.sku
            elif col == 2: return format_quantity(product.stock)
            elif col == 3: return format_currency(product.selling_price)
        elif role == Qt.ItemDataRole.TextAlignmentRole and col in (2, 3):
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
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


class CartTableModel(QAbstractTableModel):
    """Cart lines; the quantity column is editable and goes through Cart.set_quantity."""
    QUANTITY_COLUMN = 2

    def __init__(self, cart: Cart, parent=None):
        super().__init__(parent)
        self.cart = cart
        self._headers = ["Sản phẩm", "Đơn giá", "Số lượng", "Thành tiền"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self.cart.items)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self.cart.items)):
            return QVariant()
        item = self.cart.items[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return item.name
            elif col == 1: return format_currency(item.selling_price)
            elif col == 2: return format_quantity(item.quantity)
            elif col == 3: return format_currency(item.line_total)
        elif role == Qt.ItemDataRole.EditRole and col == self.QUANTITY_COLUMN:
            return float(item.quantity)
        elif role == Qt.ItemDataRole.ToolTipRole and col == self.QUANTITY_COLUMN:
            return f"Tồn kho: {format_quantity(item.stock)}"
        elif role == Qt.ItemDataRole.TextAlignmentRole and col > 0:
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def flags(self, index: QModelIndex) -> Qt.ItemFlags:
        flags = super().flags(index)
        if index.isValid() and index.column() == self.QUANTITY_COLUMN:
            flags |= Qt.ItemFlag.ItemIsEditable
        return flags

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.ItemDataRole.EditRole) -> bool:
        if role != Qt.ItemDataRole.EditRole or not index.isValid() or index.column() != self.QUANTITY_COLUMN:
            return False
        item = self.cart.items[index.row()]
        try:
            remaining = self.cart.set_quantity(item.product_id, value)
        except ValueError as ve:
            logger.warning(f"Rejected cart quantity {value!r} for {item.product_id}: {ve}")
            return False
        if remaining is None:
            self.refresh()
        else:
            self.dataChanged.emit(self.index(index.row(), 0), self.index(index.row(), len(self._headers) - 1))
        return True

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def refresh(self):
        self.beginResetModel()
        self.endResetModel()

    def get_product_id_at_row(self, row: int) -> Optional[str]:
        if 0 <= row < len(self.cart.items):
            return self.cart.items[row].product_id
        return None


class NewCustomerDialog(QDialog):
    def __init__(self, initial_name: str = "", parent=None):
        super().__init__(parent)
        self.setWindowTitle("Thêm khách hàng")
        self.setMinimumWidth(360)

        layout = QFormLayout(self)
        self.name_edit = QLineEdit(initial_name, self)
        self.phone_edit = QLineEdit(self)
        self.address_edit = QLineEdit(self)
        layout.addRow("Tên khách hàng:", self.name_edit)
        layout.addRow("Số điện thoại:", self.phone_edit)
        layout.addRow("Địa chỉ:", self.address_edit)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        layout.addWidget(self.button_box)
        self.button_box.accepted.connect(self._on_accept)
        self.button_box.rejected.connect(self.reject)

    def _on_accept(self):
        if self.get_customer_data() is not None:
            self.accept()

    def get_customer_data(self) -> Optional[Dict[str, Any]]:
        if not self.name_edit.text().strip():
            QMessageBox.warning(self, "Thiếu thông tin", "Vui lòng nhập tên khách hàng.")
            return None
        if not self.phone_edit.text().strip():
            QMessageBox.warning(self, "Thiếu thông tin", "Vui lòng nhập số điện thoại.")
            return None
        return {
            "name": self.name_edit.text().strip(),
            "phone": self.phone_edit.text().strip(),
            "address": self.address_edit.text().strip() or None,
        }


class SalesUI(QWidget):
    """Point of sale: product picker on the left, cart and checkout on the right."""

    def __init__(self, sales_manager: SalesManager, customer_manager: CustomerManager,
                 user_id: str, user_name: str, parent=None):
        super().__init__(parent)
        self.sales_manager = sales_manager
        self.customer_manager = customer_manager
        self.user_id = user_id
        self.user_name = user_name
        self.cart = Cart()
        self._customer_matches: Dict[str, CustomerEntity] = {}
        self.products_model = AvailableProductTableModel()
        self.cart_model = CartTableModel(self.cart)
        self._init_ui()

    def _init_ui(self):
        main_layout = QHBoxLayout(self)
        splitter = QSplitter(Qt.Orientation.Horizontal, self)
        main_layout.addWidget(splitter)

        # products
        products_panel = QWidget(self)
        products_layout = QVBoxLayout(products_panel)
        self.product_search_edit = SearchLineEdit("Tìm sản phẩm theo tên hoặc SKU...", self)
        self.product_search_edit.textChanged.connect(lambda _text: self.load_products_data())
        products_layout.addWidget(self.product_search_edit)
        self.products_view = QTableView()
        self.products_view.setModel(self.products_model)
        configure_table_view(self.products_view, stretch_column=0)
        self.products_view.doubleClicked.connect(self._add_selected_product)
        products_layout.addWidget(self.products_view)
        self.add_to_cart_button = QPushButton("Thêm vào giỏ")
        self.add_to_cart_button.clicked.connect(self._add_selected_product)
        products_layout.addWidget(self.add_to_cart_button)
        splitter.addWidget(products_panel)

        # cart and checkout
        cart_panel = QWidget(self)
        cart_layout = QVBoxLayout(cart_panel)
        self.cart_view = QTableView()
        self.cart_view.setModel(self.cart_model)
        configure_table_view(self.cart_view, stretch_column=0)
        self.cart_view.setEditTriggers(QAbstractItemView.EditTrigger.DoubleClicked |
                                       QAbstractItemView.EditTrigger.EditKeyPressed)
        cart_layout.addWidget(QLabel("Giỏ hàng:"))
        cart_layout.addWidget(self.cart_view)
        self.remove_from_cart_button = QPushButton("Xóa khỏi giỏ")
        self.remove_from_cart_button.clicked.connect(self._remove_selected_cart_item)
        cart_layout.addWidget(self.remove_from_cart_button)

        checkout_box = QGroupBox("Thanh toán", self)
        checkout_form = QFormLayout(checkout_box)

        customer_row = QHBoxLayout()
        self.customer_edit = QLineEdit(self)
        self.customer_edit.setPlaceholderText(WALK_IN_CUSTOMER_NAME)
        self.customer_completer_model = QStringListModel(self)
        self.customer_completer = QCompleter(self.customer_completer_model, self)
        self.customer_completer.setCaseSensitivity(Qt.CaseSensitivity.CaseInsensitive)
        self.customer_completer.setFilterMode(Qt.MatchFlag.MatchContains)
        self.customer_edit.setCompleter(self.customer_completer)
        self.customer_edit.textEdited.connect(self._on_customer_text_edited)
        self.customer_completer.activated[str].connect(self._on_customer_chosen)
        self.new_customer_button = QPushButton("Khách mới")
        self.new_customer_button.clicked.connect(self._open_new_customer_dialog)
        customer_row.addWidget(self.customer_edit)
        customer_row.addWidget(self.new_customer_button)
        checkout_form.addRow("Khách hàng:", customer_row)

        self.discount_spinbox = make_money_spinbox(self)
        self.discount_spinbox.valueChanged.connect(self._on_discount_changed)
        checkout_form.addRow("Giảm giá:", self.discount_spinbox)

        payment_row = QHBoxLayout()
        self.payment_group = QButtonGroup(self)
        self.payment_buttons: Dict[PaymentMethod, QRadioButton] = {}
        for method in PaymentMethod:
            radio = QRadioButton(method.value, self)
            self.payment_group.addButton(radio)
            self.payment_buttons[method] = radio
            radio.toggled.connect(lambda checked, m=method: checked and self.cart.set_payment_method(m))
            payment_row.addWidget(radio)
        payment_row.addStretch()
        checkout_form.addRow("Thanh toán:", payment_row)

        self.subtotal_label = QLabel(self)
        self.total_label = QLabel(self)
        self.total_label.setTextFormat(Qt.TextFormat.RichText)
        checkout_form.addRow("Tiền hàng:", self.subtotal_label)
        checkout_form.addRow("Khách cần trả:", self.total_label)

        self.print_receipt_checkbox = QCheckBox("In hóa đơn sau khi thanh toán", self)
        self.print_receipt_checkbox.setChecked(True)
        checkout_form.addRow(self.print_receipt_checkbox)
        cart_layout.addWidget(checkout_box)

        self.checkout_button = QPushButton("Thanh toán")
        self.checkout_button.clicked.connect(self._handle_checkout)
        cart_layout.addWidget(self.checkout_button)
        splitter.addWidget(cart_panel)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 1)

        self.cart_model.modelReset.connect(self._update_totals)
        self.cart_model.dataChanged.connect(lambda *_: self._update_totals())
        logger.info("SalesUI initialized.")
        self.load_products_data()
        self._update_totals()

    def load_products_data(self):
        try:
            self.products_model.update_data(
                self.sales_manager.get_available_products(self.product_search_edit.text()))
        except Exception as e:
            logger.error(f"Error loading products for sale: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi tải dữ liệu", f"Không thể tải danh sách sản phẩm: {e}")

    def _update_totals(self):
        self.subtotal_label.setText(format_currency(self.cart.subtotal))
        color = "red" if self.cart.total < Decimal("0") else "black"
        self.total_label.setText(f"<b style='color:{color}'>{format_currency(self.cart.total)}</b>")
        self.checkout_button.setEnabled(not self.cart.is_empty)

    def _add_selected_product(self, *_args):
        row = selected_row(self.products_view)
        product = self.products_model.get_product_at_row(row) if row is not None else None
        if not product:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một sản phẩm.")
            return
        try:
            self.cart.add_product(product)
        except ValueError as ve:
            QMessageBox.warning(self, "Không thể thêm", str(ve))
            return
        self.cart_model.refresh()

    def _remove_selected_cart_item(self):
        row = selected_row(self.cart_view)
        product_id = self.cart_model.get_product_id_at_row(row) if row is not None else None
        if not product_id:
            return
        self.cart.remove_product(product_id)
        self.cart_model.refresh()

    def _on_discount_changed(self, _value):
        try:
            self.cart.set_discount(spin_value(self.discount_spinbox))
        except ValueError as ve:
            QMessageBox.warning(self, "Dữ liệu không hợp lệ", str(ve))
        self._update_totals()

    def _on_customer_text_edited(self, text: str):
        self.cart.set_customer_name(text)
        matches = self.customer_manager.search_customers(text)
        self._customer_matches = {f"{c.name} - {c.phone}": c for c in matches}
        self.customer_completer_model.setStringList(list(self._customer_matches))

    def _on_customer_chosen(self, text: str):
        customer = self._customer_matches.get(text)
        if customer:
            self._select_customer(customer)

    def _select_customer(self, customer: CustomerEntity):
        self.cart.select_customer(customer)
        self.customer_edit.setText(customer.name)
        self.customer_edit.setToolTip(f"{customer.phone} {customer.address or ''}".strip())

    def _open_new_customer_dialog(self):
        dialog = NewCustomerDialog(initial_name=self.customer_edit.text().strip(), parent=self)
        if dialog.exec_() != QDialog.DialogCode.Accepted:
            return
        data = dialog.get_customer_data()
        if not data:
            return
        try:
            customer = self.customer_manager.create_customer(**data)
            self._select_customer(customer)
        except ValueError as ve:
            QMessageBox.warning(self, "Dữ liệu không hợp lệ", str(ve))
        except Exception as e:
            logger.error(f"Error creating customer: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi thêm khách hàng: {e}")

    def _handle_checkout(self):
        try:
            sale = self.sales_manager.checkout(self.cart, self.user_id, self.user_name)
        except ValueError as ve:
            QMessageBox.warning(self, "Không thể thanh toán", str(ve))
            return
        except Exception as e:
            logger.error(f"Error during checkout: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi thanh toán: {e}")
            return

        self._reset_checkout_form()
        self.load_products_data()
        if self.print_receipt_checkbox.isChecked():
            ReceiptDialog(sale, self).exec_()
        else:
            QMessageBox.information(self, "Thành công",
                                    f"Đã lưu hóa đơn {sale.id}: {format_currency(sale.total)}.")

    def _reset_checkout_form(self):
        self.customer_edit.clear()
        self.customer_edit.setToolTip("")
        self.discount_spinbox.blockSignals(True)
        self.discount_spinbox.setValue(0)
        self.discount_spinbox.blockSignals(False)
        # an exclusive group keeps one button checked unless exclusivity is lifted
        self.payment_group.setExclusive(False)
        for radio in self.payment_buttons.values():
            radio.setChecked(False)
        self.payment_group.setExclusive(True)
        self.cart_model.refresh()
