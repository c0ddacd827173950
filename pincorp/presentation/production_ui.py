# pincorp/presentation/production_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QTableView, QPushButton, QMessageBox, QDialog,
                             QLineEdit, QFormLayout, QDialogButtonBox, QTextEdit, QListWidget, QListWidgetItem,
                             QLabel, QGroupBox, QComboBox)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict
import logging

from pincorp.business_logic.entities.production_order_entity import ProductionOrderEntity
from pincorp.business_logic.entities.production_estimate_entity import RequiredMaterialEntity, ProductionCostEstimate
from pincorp.business_logic.entities.additional_cost_entity import AdditionalCostEntity
from pincorp.business_logic.production_manager import ProductionManager
from pincorp.business_logic.bom_manager import BomManager
from pincorp.constants import ProductionOrderStatus
from pincorp.utils.date_converter import to_display_date
from pincorp.utils.formatting import format_currency, format_quantity
from pincorp.presentation.custom_widgets import (PaginationBar, make_money_spinbox, make_quantity_spinbox,
                                                 spin_value, configure_table_view, selected_row)

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    ProductionOrderStatus.PENDING: Qt.GlobalColor.darkYellow,
    ProductionOrderStatus.IN_PROGRESS: Qt.GlobalColor.blue,
    ProductionOrderStatus.COMPLETED: Qt.GlobalColor.darkGreen,
    ProductionOrderStatus.CANCELED: Qt.GlobalColor.gray,
}


class ProductionOrderTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[ProductionOrderEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[ProductionOrderEntity] = data if data is not None else []
        self._headers = ["Mã lệnh", "Ngày tạo", "Sản phẩm", "Số lượng", "Chi phí NVL", "Chi phí khác",
                         "Tổng chi phí", "Trạng thái", "Người tạo"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        order = self._data[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return order.id
            elif col == 1: return to_display_date(order.creation_date)
            elif col == 2: return order.product_name
            elif col == 3: return format_quantity(order.quantity_produced)
            elif col == 4: return format_currency(order.materials_cost)
            elif col == 5: return format_currency(order.total_cost - order.materials_cost)
            elif col == 6: return format_currency(order.total_cost)
            elif col == 7: return order.status.value
            elif col == 8: return order.user_name or ""
        elif role == Qt.ItemDataRole.ForegroundRole:
            if order.status == ProductionOrderStatus.CANCELED:
                return QColor(Qt.GlobalColor.gray)
            if col == 7:
                return QColor(STATUS_COLORS[order.status])
        elif role == Qt.ItemDataRole.TextAlignmentRole and col in (3, 4, 5, 6):
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[ProductionOrderEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_order_at_row(self, row: int) -> Optional[ProductionOrderEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class RequiredMaterialTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[RequiredMaterialEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[RequiredMaterialEntity] = data if data is not None else []
        self._headers = ["Nguyên vật liệu", "Cần dùng", "Tồn kho", "Đơn giá", "Thành tiền"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        line = self._data[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return line.name
            elif col == 1: return format_quantity(line.required)
            elif col == 2: return format_quantity(line.current_stock)
            elif col == 3: return format_currency(line.unit_purchase_price)
            elif col == 4: return format_currency(line.line_cost)
        elif role == Qt.ItemDataRole.ForegroundRole and not line.is_sufficient:
            return QColor(Qt.GlobalColor.red)
        elif role == Qt.ItemDataRole.TextAlignmentRole and col > 0:
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[RequiredMaterialEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()


class ProductionOrderDialog(QDialog):
    """
    New production order. The required-material table and the cost summary
    are recomputed on every change; saving stays disabled while any material
    is short.
    """

    def __init__(self, production_manager: ProductionManager, bom_manager: BomManager, parent=None):
        super().__init__(parent)
        self.production_manager = production_manager
        self.bom_manager = bom_manager
        self.additional_costs: List[AdditionalCostEntity] = []
        self.estimate: Optional[ProductionCostEstimate] = None
        self.setWindowTitle("Tạo lệnh sản xuất")
        self.setMinimumSize(700, 620)

        main_layout = QVBoxLayout(self)
        form = QFormLayout()
        self.bom_combo = QComboBox(self)
        self.bom_combo.addItem("-- Chọn định mức --", None)
        for bom in self.bom_manager.get_all_boms():
            self.bom_combo.addItem(f"{bom.product_name} ({bom.product_sku or bom.id})", bom.id)
        self.quantity_spinbox = make_quantity_spinbox(self, minimum=1, decimals=0)
        self.quantity_spinbox.setValue(1)
        self.notes_edit = QTextEdit(self)
        self.notes_edit.setFixedHeight(50)
        form.addRow("Định mức sản phẩm:", self.bom_combo)
        form.addRow("Số lượng sản xuất:", self.quantity_spinbox)
        form.addRow("Ghi chú:", self.notes_edit)
        main_layout.addLayout(form)

        self.required_model = RequiredMaterialTableModel(parent=self)
        self.required_view = QTableView(self)
        self.required_view.setModel(self.required_model)
        configure_table_view(self.required_view, stretch_column=0)
        main_layout.addWidget(QLabel("Nguyên vật liệu cần dùng:"))
        main_layout.addWidget(self.required_view)

        costs_box = QGroupBox("Chi phí phát sinh", self)
        costs_layout = QVBoxLayout(costs_box)
        costs_row = QHBoxLayout()
        self.cost_description_edit = QLineEdit(self)
        self.cost_description_edit.setPlaceholderText("Mô tả (nhân công, điện...)")
        self.cost_amount_spinbox = make_money_spinbox(self)
        self.add_cost_button = QPushButton("Thêm")
        self.remove_cost_button = QPushButton("Xóa")
        costs_row.addWidget(self.cost_description_edit)
        costs_row.addWidget(self.cost_amount_spinbox)
        costs_row.addWidget(self.add_cost_button)
        costs_row.addWidget(self.remove_cost_button)
        costs_layout.addLayout(costs_row)
        self.costs_list = QListWidget(self)
        self.costs_list.setMaximumHeight(90)
        costs_layout.addWidget(self.costs_list)
        main_layout.addWidget(costs_box)

        self.summary_label = QLabel(self)
        self.summary_label.setTextFormat(Qt.TextFormat.RichText)
        main_layout.addWidget(self.summary_label)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.save_button = self.button_box.button(QDialogButtonBox.StandardButton.Save)
        main_layout.addWidget(self.button_box)

        self.bom_combo.currentIndexChanged.connect(self._recalculate)
        self.quantity_spinbox.valueChanged.connect(self._recalculate)
        self.add_cost_button.clicked.connect(self._add_additional_cost)
        self.remove_cost_button.clicked.connect(self._remove_additional_cost)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        self._recalculate()

    def _recalculate(self, *_args):
        bom_id = self.bom_combo.currentData()
        if not bom_id:
            self.estimate = None
            self.required_model.update_data([])
            self.summary_label.setText("Vui lòng chọn định mức sản phẩm.")
            self.save_button.setEnabled(False)
            return
        try:
            self.estimate = self.production_manager.preview_order(
                bom_id, spin_value(self.quantity_spinbox), self.additional_costs)
        except ValueError as ve:
            self.estimate = None
            self.required_model.update_data([])
            self.summary_label.setText(str(ve))
            self.save_button.setEnabled(False)
            return
        self.required_model.update_data(self.estimate.required_materials)
        status = ("<span style='color:green'>Đủ nguyên vật liệu</span>" if self.estimate.is_stock_sufficient
                  else "<span style='color:red'>Không đủ nguyên vật liệu</span>")
        self.summary_label.setText(
            f"Chi phí NVL: <b>{format_currency(self.estimate.materials_cost)}</b> &nbsp; "
            f"Chi phí khác: <b>{format_currency(self.estimate.additional_costs_total)}</b> &nbsp; "
            f"Tổng: <b>{format_currency(self.estimate.total_cost)}</b> &nbsp; {status}")
        self.save_button.setEnabled(self.estimate.is_stock_sufficient)

    def _add_additional_cost(self):
        try:
            cost = self.production_manager.cost_engine.validate_additional_cost(
                self.cost_description_edit.text(), spin_value(self.cost_amount_spinbox))
        except ValueError as ve:
            QMessageBox.warning(self, "Dữ liệu không hợp lệ", str(ve))
            return
        self.additional_costs.append(cost)
        self.costs_list.addItem(QListWidgetItem(f"{cost.description}: {format_currency(cost.amount)}"))
        self.cost_description_edit.clear()
        self.cost_amount_spinbox.setValue(0)
        self._recalculate()

    def _remove_additional_cost(self):
        row = self.costs_list.currentRow()
        if 0 <= row < len(self.additional_costs):
            del self.additional_costs[row]
            self.costs_list.takeItem(row)
            self._recalculate()

    def get_order_data(self) -> Optional[Dict[str, Any]]:
        bom_id = self.bom_combo.currentData()
        if not bom_id:
            QMessageBox.warning(self, "Thiếu thông tin", "Vui lòng chọn định mức sản phẩm.")
            return None
        return {
            "bom_id": bom_id,
            "quantity": spin_value(self.quantity_spinbox),
            "additional_costs": list(self.additional_costs),
            "notes": self.notes_edit.toPlainText().strip() or None,
        }


class ProductionUI(QWidget):
    def __init__(self, production_manager: ProductionManager, bom_manager: BomManager,
                 user_name: str = "", parent=None):
        super().__init__(parent)
        self.production_manager = production_manager
        self.bom_manager = bom_manager
        self.user_name = user_name
        self.table_model = ProductionOrderTableModel()
        self._init_ui()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        filter_layout = QHBoxLayout()
        self.status_filter_combo = QComboBox(self)
        self.status_filter_combo.addItem("Tất cả trạng thái", None)
        for status in ProductionOrderStatus:
            self.status_filter_combo.addItem(status.value, status)
        self.status_filter_combo.currentIndexChanged.connect(lambda _i: self.load_orders_data(page=1))
        filter_layout.addWidget(QLabel("Trạng thái:"))
        filter_layout.addWidget(self.status_filter_combo)
        filter_layout.addStretch()
        main_layout.addLayout(filter_layout)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        configure_table_view(self.table_view, stretch_column=2)
        main_layout.addWidget(self.table_view)
        self.table_view.selectionModel().selectionChanged.connect(lambda *_: self._update_action_buttons())

        self.pagination_bar = PaginationBar(self)
        self.pagination_bar.pageChanged.connect(lambda page: self.load_orders_data(page=page))
        main_layout.addWidget(self.pagination_bar)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("Tạo lệnh sản xuất")
        self.start_button = QPushButton("Bắt đầu sản xuất")
        self.complete_button = QPushButton("Hoàn thành")
        self.cancel_button = QPushButton("Hủy lệnh")
        self.refresh_button = QPushButton("Tải lại")
        self.add_button.clicked.connect(self._open_add_order_dialog)
        self.start_button.clicked.connect(lambda: self._change_selected_status(ProductionOrderStatus.IN_PROGRESS))
        self.complete_button.clicked.connect(lambda: self._change_selected_status(ProductionOrderStatus.COMPLETED))
        self.cancel_button.clicked.connect(lambda: self._change_selected_status(ProductionOrderStatus.CANCELED))
        self.refresh_button.clicked.connect(lambda: self.load_orders_data())
        for button in (self.add_button, self.start_button, self.complete_button, self.cancel_button):
            button_layout.addWidget(button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("ProductionUI initialized.")
        self.load_orders_data()

    def load_orders_data(self, page: Optional[int] = None):
        try:
            current = self.production_manager.get_orders_page(
                page or self.pagination_bar.current_page,
                status_filter=self.status_filter_combo.currentData())
            self.table_model.update_data(current.items)
            self.pagination_bar.set_page(current)
        except Exception as e:
            logger.error(f"Error loading production orders: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi tải dữ liệu", f"Không thể tải danh sách lệnh sản xuất: {e}")
        self._update_action_buttons()

    def _selected_order(self) -> Optional[ProductionOrderEntity]:
        row = selected_row(self.table_view)
        return self.table_model.get_order_at_row(row) if row is not None else None

    def _update_action_buttons(self):
        order = self._selected_order()
        allowed = self.production_manager.allowed_next_statuses(order) if order else frozenset()
        self.start_button.setEnabled(ProductionOrderStatus.IN_PROGRESS in allowed)
        self.complete_button.setEnabled(ProductionOrderStatus.COMPLETED in allowed)
        self.cancel_button.setEnabled(ProductionOrderStatus.CANCELED in allowed)

    def _open_add_order_dialog(self):
        dialog = ProductionOrderDialog(self.production_manager, self.bom_manager, parent=self)
        if dialog.exec_() != QDialog.DialogCode.Accepted:
            return
        data = dialog.get_order_data()
        if not data:
            return
        try:
            order = self.production_manager.create_order(user_name=self.user_name, **data)
            QMessageBox.information(self, "Thành công",
                                    f"Đã tạo lệnh sản xuất {order.id} cho '{order.product_name}'.")
            self.load_orders_data(page=1)
        except ValueError as ve:
            QMessageBox.warning(self, "Không thể tạo lệnh", str(ve))
        except Exception as e:
            logger.error(f"Error creating production order: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi tạo lệnh sản xuất: {e}")

    def _change_selected_status(self, new_status: ProductionOrderStatus):
        order = self._selected_order()
        if not order:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một lệnh sản xuất.")
            return
        if new_status == ProductionOrderStatus.CANCELED:
            reply = QMessageBox.question(self, "Xác nhận hủy lệnh",
                                         f"Hủy lệnh sản xuất {order.id}?\n"
                                         f"Nguyên vật liệu đã dùng sẽ được hoàn trả vào kho.",
                                         QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                         QMessageBox.StandardButton.No)
            if reply != QMessageBox.StandardButton.Yes:
                return
        try:
            self.production_manager.set_order_status(order.id, new_status)
            self.load_orders_data()
        except ValueError as ve:
            QMessageBox.warning(self, "Không thể đổi trạng thái", str(ve))
        except Exception as e:
            logger.error(f"Error changing status of order {order.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi đổi trạng thái lệnh sản xuất: {e}")
