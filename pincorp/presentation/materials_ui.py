# pincorp/presentation/materials_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QTableView, QPushButton, QHBoxLayout, QMessageBox,
                             QDialog, QLineEdit, QComboBox, QFormLayout, QDialogButtonBox, QTextEdit)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict
from decimal import Decimal
import logging

from pincorp.business_logic.entities.material_entity import MaterialEntity
from pincorp.business_logic.material_manager import MaterialManager
from pincorp.constants import MaterialUnit
from pincorp.utils.formatting import format_currency, format_quantity
from pincorp.utils.pagination import paginate
from pincorp.presentation.custom_widgets import (PaginationBar, SearchLineEdit, MovementHistoryDialog,
                                                 make_money_spinbox, make_quantity_spinbox, spin_value,
                                                 configure_table_view, selected_row)

logger = logging.getLogger(__name__)


class MaterialTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[MaterialEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[MaterialEntity] = data if data is not None else []
        self._headers = ["Mã", "Tên nguyên vật liệu", "SKU", "Đơn vị", "Giá nhập", "Tồn kho", "Nhà cung cấp"]

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
        material = self._data[row]

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return material.id
            elif col == 1: return material.name
            elif col == 2: return material.sku
            elif col == 3: return material.unit.value
            elif col == 4: return format_currency(material.purchase_price)
            elif col == 5: return format_quantity(material.stock)
            elif col == 6: return material.supplier or ""
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col in (4, 5):
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole:
            if material.stock <= Decimal("0"):
                return QColor(Qt.GlobalColor.red)
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[MaterialEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_material_at_row(self, row: int) -> Optional[MaterialEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class MaterialDialog(QDialog):
    def __init__(self, material: Optional[MaterialEntity] = None, parent=None):
        super().__init__(parent)
        self.material = material
        self.setWindowTitle("Thêm nguyên vật liệu" if not material else f"Sửa: {material.name}")
        self.setMinimumWidth(420)

        layout = QFormLayout(self)
        self.name_edit = QLineEdit(self)
        self.sku_edit = QLineEdit(self)
        self.unit_combo = QComboBox(self)
        for unit in MaterialUnit:
            self.unit_combo.addItem(unit.value, unit)
        self.price_spinbox = make_money_spinbox(self)
        self.stock_spinbox = make_quantity_spinbox(self)
        self.supplier_edit = QLineEdit(self)
        self.description_edit = QTextEdit(self)
        self.description_edit.setFixedHeight(70)

        if material:
            self.name_edit.setText(material.name)
            self.sku_edit.setText(material.sku)
            self.unit_combo.setCurrentIndex(self.unit_combo.findData(material.unit))
            self.price_spinbox.setValue(float(material.purchase_price))
            self.stock_spinbox.setValue(float(material.stock))
            self.supplier_edit.setText(material.supplier or "")
            self.description_edit.setPlainText(material.description or "")

        layout.addRow("Tên nguyên vật liệu:", self.name_edit)
        layout.addRow("SKU:", self.sku_edit)
        layout.addRow("Đơn vị tính:", self.unit_combo)
        layout.addRow("Giá nhập:", self.price_spinbox)
        layout.addRow("Tồn kho:", self.stock_spinbox)
        layout.addRow("Nhà cung cấp:", self.supplier_edit)
        layout.addRow("Ghi chú:", self.description_edit)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        ok_button = self.button_box.button(QDialogButtonBox.StandardButton.Ok)
        if ok_button: ok_button.setText("Lưu")
        cancel_button = self.button_box.button(QDialogButtonBox.StandardButton.Cancel)
        if cancel_button: cancel_button.setText("Hủy")
        layout.addWidget(self.button_box)
        self.button_box.accepted.connect(self._on_accept)
        self.button_box.rejected.connect(self.reject)

    def _on_accept(self):
        if self.get_material_data() is not None:
            self.accept()

    def get_material_data(self) -> Optional[Dict[str, Any]]:
        if not self.name_edit.text().strip():
            QMessageBox.warning(self, "Thiếu thông tin", "Vui lòng nhập tên nguyên vật liệu.")
            return None
        if self.price_spinbox.value() <= 0:
            QMessageBox.warning(self, "Thiếu thông tin", "Vui lòng nhập giá nhập.")
            return None
        return {
            "name": self.name_edit.text().strip(),
            "sku": self.sku_edit.text().strip(),
            "unit": self.unit_combo.currentData() or MaterialUnit.PIECE,
            "purchase_price": spin_value(self.price_spinbox),
            "stock": spin_value(self.stock_spinbox),
            "supplier": self.supplier_edit.text().strip() or None,
            "description": self.description_edit.toPlainText().strip() or None,
        }


class MaterialsUI(QWidget):
    def __init__(self, material_manager: MaterialManager, parent=None):
        super().__init__(parent)
        self.material_manager = material_manager
        self.table_model = MaterialTableModel()
        self._materials: List[MaterialEntity] = []
        self._init_ui()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        self.search_edit = SearchLineEdit("Tìm theo tên hoặc SKU...", self)
        self.search_edit.textChanged.connect(lambda _text: self.load_materials_data(page=1))
        main_layout.addWidget(self.search_edit)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        configure_table_view(self.table_view, stretch_column=1)
        self.table_view.doubleClicked.connect(self._open_edit_material_dialog)
        main_layout.addWidget(self.table_view)

        self.pagination_bar = PaginationBar(self)
        self.pagination_bar.pageChanged.connect(self._show_page)
        main_layout.addWidget(self.pagination_bar)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("Thêm nguyên vật liệu")
        self.edit_button = QPushButton("Sửa")
        self.delete_button = QPushButton("Xóa")
        self.history_button = QPushButton("Lịch sử kho")
        self.refresh_button = QPushButton("Tải lại")

        self.add_button.clicked.connect(self._open_add_material_dialog)
        self.edit_button.clicked.connect(self._open_edit_material_dialog)
        self.delete_button.clicked.connect(self._delete_selected_material)
        self.history_button.clicked.connect(self._show_movement_history)
        self.refresh_button.clicked.connect(lambda: self.load_materials_data())

        for button in (self.add_button, self.edit_button, self.delete_button, self.history_button):
            button_layout.addWidget(button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("MaterialsUI initialized.")
        self.load_materials_data()

    def load_materials_data(self, page: Optional[int] = None):
        try:
            self._materials = self.material_manager.get_all_materials(self.search_edit.text())
            self._show_page(page or self.pagination_bar.current_page)
        except Exception as e:
            logger.error(f"Error loading materials: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi tải dữ liệu", f"Không thể tải danh sách nguyên vật liệu: {e}")

    def _show_page(self, page: int):
        current = paginate(self._materials, page)
        self.table_model.update_data(current.items)
        self.pagination_bar.set_page(current)

    def _selected_material(self) -> Optional[MaterialEntity]:
        row = selected_row(self.table_view)
        return self.table_model.get_material_at_row(row) if row is not None else None

    def _open_add_material_dialog(self):
        dialog = MaterialDialog(parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_material_data()
            if not data:
                return
            try:
                created = self.material_manager.save_material(data)
                QMessageBox.information(self, "Thành công", f"Đã thêm nguyên vật liệu '{created.name}'.")
                self.load_materials_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Dữ liệu không hợp lệ", str(ve))
            except Exception as e:
                logger.error(f"Error adding material: {e}", exc_info=True)
                QMessageBox.critical(self, "Lỗi", f"Lỗi khi thêm nguyên vật liệu: {e}")

    def _open_edit_material_dialog(self, *_args):
        material = self._selected_material()
        if not material:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một nguyên vật liệu để sửa.")
            return
        dialog = MaterialDialog(material=material, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_material_data()
            if not data:
                return
            try:
                updated = self.material_manager.save_material(data, material_id=material.id)
                QMessageBox.information(self, "Thành công", f"Đã cập nhật '{updated.name}'.")
                self.load_materials_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Dữ liệu không hợp lệ", str(ve))
            except Exception as e:
                logger.error(f"Error editing material: {e}", exc_info=True)
                QMessageBox.critical(self, "Lỗi", f"Lỗi khi sửa nguyên vật liệu: {e}")

    def _delete_selected_material(self):
        material = self._selected_material()
        if not material:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một nguyên vật liệu để xóa.")
            return
        reply = QMessageBox.question(self, "Xác nhận xóa",
                                     f"Bạn có chắc muốn xóa nguyên vật liệu '{material.name}'?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply != QMessageBox.StandardButton.Yes:
            return
        try:
            if self.material_manager.delete_material(material.id):
                self.load_materials_data()
            else:
                QMessageBox.warning(self, "Không thành công", f"Không thể xóa '{material.name}'.")
        except Exception as e:
            logger.error(f"Error deleting material: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi xóa nguyên vật liệu: {e}")

    def _show_movement_history(self):
        material = self._selected_material()
        if not material:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một nguyên vật liệu.")
            return
        movements = self.material_manager.get_movements(material.id)
        MovementHistoryDialog(f"Lịch sử kho: {material.name}", movements, self).exec_()
