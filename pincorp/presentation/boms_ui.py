# pincorp/presentation/boms_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QTableView, QPushButton, QMessageBox, QDialog,
                             QLineEdit, QFormLayout, QDialogButtonBox, QTextEdit, QListWidget, QListWidgetItem,
                             QLabel, QGroupBox, QAbstractItemView)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict
from decimal import Decimal, InvalidOperation
import logging

from pincorp.business_logic.entities.bom_entity import BOMEntity
from pincorp.business_logic.entities.bom_material_entity import BomMaterialEntity
from pincorp.business_logic.bom_manager import BomManager
from pincorp.constants import UNRESOLVED_MATERIAL_NAME
from pincorp.utils.formatting import format_currency, format_quantity
from pincorp.utils.pagination import paginate
from pincorp.presentation.custom_widgets import (PaginationBar, SearchLineEdit, make_quantity_spinbox, spin_value,
                                                 configure_table_view, selected_row)

logger = logging.getLogger(__name__)


class BomTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[BOMEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[BOMEntity] = data if data is not None else []
        self._headers = ["Mã", "Sản phẩm", "SKU", "Số NVL", "Giá vốn ước tính / SP", "Ghi chú"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        bom = self._data[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return bom.id
            elif col == 1: return bom.product_name
            elif col == 2: return bom.product_sku
            elif col == 3: return str(len(bom.materials))
            elif col == 4: return format_currency(bom.estimated_cost)
            elif col == 5: return bom.notes or ""
        elif role == Qt.ItemDataRole.TextAlignmentRole and col in (3, 4):
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[BOMEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_bom_at_row(self, row: int) -> Optional[BOMEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class BomMaterialLinesModel(QAbstractTableModel):
    """Material lines being edited in BomDialog. The quantity column is editable in place."""
    QUANTITY_COLUMN = 1

    def __init__(self, lines: Optional[List[BomMaterialEntity]] = None, parent=None):
        super().__init__(parent)
        self._lines: List[BomMaterialEntity] = lines if lines is not None else []
        self._headers = ["Nguyên vật liệu", "Số lượng / SP", "Đơn giá", "Thành tiền"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._lines)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def flags(self, index: QModelIndex):
        base = super().flags(index)
        if index.isValid() and index.column() == self.QUANTITY_COLUMN:
            return base | Qt.ItemFlag.ItemIsEditable
        return base

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._lines)):
            return QVariant()
        line = self._lines[index.row()]
        col = index.column()
        price = line.unit_purchase_price or Decimal("0")
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return line.material_name or UNRESOLVED_MATERIAL_NAME
            elif col == 1: return format_quantity(line.quantity)
            elif col == 2: return format_currency(price)
            elif col == 3: return format_currency(price * line.quantity)
        elif role == Qt.ItemDataRole.EditRole and col == self.QUANTITY_COLUMN:
            return str(line.quantity)
        elif role == Qt.ItemDataRole.ForegroundRole and col == 0:
            if line.material_name in (None, UNRESOLVED_MATERIAL_NAME):
                return QColor(Qt.GlobalColor.red)
        elif role == Qt.ItemDataRole.TextAlignmentRole and col > 0:
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.ItemDataRole.EditRole) -> bool:
        if role != Qt.ItemDataRole.EditRole or index.column() != self.QUANTITY_COLUMN:
            return False
        try:
            quantity = Decimal(str(value).replace(",", ".").strip())
        except InvalidOperation:
            return False
        if not quantity.is_finite() or quantity <= 0:
            return False
        self._lines[index.row()].quantity = quantity
        self.dataChanged.emit(self.index(index.row(), 0), self.index(index.row(), len(self._headers) - 1))
        return True

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def lines(self) -> List[BomMaterialEntity]:
        return list(self._lines)

    def add_line(self, line: BomMaterialEntity):
        self.beginInsertRows(QModelIndex(), len(self._lines), len(self._lines))
        self._lines.append(line)
        self.endInsertRows()

    def remove_line(self, row: int):
        if 0 <= row < len(self._lines):
            self.beginRemoveRows(QModelIndex(), row, row)
            del self._lines[row]
            self.endRemoveRows()

    def estimated_cost(self) -> Decimal:
        return sum(((line.unit_purchase_price or Decimal("0")) * line.quantity for line in self._lines), Decimal("0"))


class BomDialog(QDialog):
    def __init__(self, bom_manager: BomManager, bom: Optional[BOMEntity] = None, parent=None):
        super().__init__(parent)
        self.bom_manager = bom_manager
        self.bom = bom
        self.setWindowTitle("Thêm định mức" if not bom else f"Sửa định mức: {bom.product_name}")
        self.setMinimumSize(640, 560)

        main_layout = QVBoxLayout(self)
        form = QFormLayout()
        self.product_name_edit = QLineEdit(self)
        self.product_sku_edit = QLineEdit(self)
        self.notes_edit = QTextEdit(self)
        self.notes_edit.setFixedHeight(50)
        form.addRow("Tên sản phẩm:", self.product_name_edit)
        form.addRow("SKU sản phẩm:", self.product_sku_edit)
        form.addRow("Ghi chú:", self.notes_edit)
        main_layout.addLayout(form)

        picker_box = QGroupBox("Thêm nguyên vật liệu", self)
        picker_layout = QVBoxLayout(picker_box)
        picker_row = QHBoxLayout()
        self.material_search_edit = SearchLineEdit("Tìm nguyên vật liệu...", self)
        self.material_quantity_spinbox = make_quantity_spinbox(self, minimum=0.01)
        self.material_quantity_spinbox.setValue(1)
        self.add_material_button = QPushButton("Thêm")
        picker_row.addWidget(self.material_search_edit)
        picker_row.addWidget(QLabel("Số lượng:"))
        picker_row.addWidget(self.material_quantity_spinbox)
        picker_row.addWidget(self.add_material_button)
        picker_layout.addLayout(picker_row)
        self.material_results_list = QListWidget(self)
        self.material_results_list.setMaximumHeight(110)
        picker_layout.addWidget(self.material_results_list)
        main_layout.addWidget(picker_box)

        lines = []
        if bom:
            lines = [BomMaterialEntity(material_id=l.material_id, quantity=l.quantity,
                                       material_name=l.material_name, unit_purchase_price=l.unit_purchase_price)
                     for l in bom.materials]
            self.product_name_edit.setText(bom.product_name)
            self.product_sku_edit.setText(bom.product_sku)
            self.notes_edit.setPlainText(bom.notes or "")
        self.lines_model = BomMaterialLinesModel(lines, self)
        self.lines_view = QTableView(self)
        self.lines_view.setModel(self.lines_model)
        configure_table_view(self.lines_view, stretch_column=0)
        self.lines_view.setEditTriggers(QAbstractItemView.EditTrigger.DoubleClicked
                                        | QAbstractItemView.EditTrigger.EditKeyPressed)
        main_layout.addWidget(self.lines_view)

        footer = QHBoxLayout()
        self.remove_line_button = QPushButton("Xóa dòng đã chọn")
        self.estimated_cost_label = QLabel()
        footer.addWidget(self.remove_line_button)
        footer.addStretch()
        footer.addWidget(self.estimated_cost_label)
        main_layout.addLayout(footer)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        main_layout.addWidget(self.button_box)

        self.material_search_edit.textChanged.connect(self._refresh_material_results)
        self.material_results_list.itemDoubleClicked.connect(lambda _item: self._add_selected_material())
        self.add_material_button.clicked.connect(self._add_selected_material)
        self.remove_line_button.clicked.connect(self._remove_selected_line)
        self.lines_model.dataChanged.connect(lambda *_: self._update_estimated_cost())
        self.lines_model.rowsInserted.connect(lambda *_: self._update_estimated_cost())
        self.lines_model.rowsRemoved.connect(lambda *_: self._update_estimated_cost())
        self.button_box.accepted.connect(self._on_accept)
        self.button_box.rejected.connect(self.reject)

        self._refresh_material_results()
        self._update_estimated_cost()

    def _refresh_material_results(self):
        self.material_results_list.clear()
        exclude = [line.material_id for line in self.lines_model.lines()]
        for material in self.bom_manager.search_materials_for_bom(self.material_search_edit.text(), exclude):
            item = QListWidgetItem(f"{material.name} ({material.sku or '-'}) · {format_currency(material.purchase_price)}"
                                   f" / {material.unit.value}")
            item.setData(Qt.ItemDataRole.UserRole, material)
            self.material_results_list.addItem(item)

    def _add_selected_material(self):
        item = self.material_results_list.currentItem()
        if item is None:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một nguyên vật liệu trong danh sách.")
            return
        material = item.data(Qt.ItemDataRole.UserRole)
        self.lines_model.add_line(BomMaterialEntity(
            material_id=material.id,
            quantity=spin_value(self.material_quantity_spinbox),
            material_name=material.name,
            unit_purchase_price=material.purchase_price,
        ))
        self.material_quantity_spinbox.setValue(1)
        self._refresh_material_results()

    def _remove_selected_line(self):
        row = selected_row(self.lines_view)
        if row is not None:
            self.lines_model.remove_line(row)
            self._refresh_material_results()

    def _update_estimated_cost(self):
        self.estimated_cost_label.setText(f"Giá vốn ước tính / SP: {format_currency(self.lines_model.estimated_cost())}")

    def _on_accept(self):
        if self.get_bom_data() is not None:
            self.accept()

    def get_bom_data(self) -> Optional[Dict[str, Any]]:
        if not self.product_name_edit.text().strip():
            QMessageBox.warning(self, "Thiếu thông tin", "Vui lòng nhập tên sản phẩm.")
            return None
        if self.lines_model.rowCount() == 0:
            QMessageBox.warning(self, "Thiếu thông tin", "Vui lòng thêm ít nhất một nguyên vật liệu.")
            return None
        return {
            "product_name": self.product_name_edit.text().strip(),
            "product_sku": self.product_sku_edit.text().strip(),
            "materials": self.lines_model.lines(),
            "notes": self.notes_edit.toPlainText().strip() or None,
        }


class BomsUI(QWidget):
    def __init__(self, bom_manager: BomManager, parent=None):
        super().__init__(parent)
        self.bom_manager = bom_manager
        self.table_model = BomTableModel()
        self._boms: List[BOMEntity] = []
        self._init_ui()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        self.search_edit = SearchLineEdit("Tìm theo tên sản phẩm hoặc SKU...", self)
        self.search_edit.textChanged.connect(lambda _text: self.load_boms_data(page=1))
        main_layout.addWidget(self.search_edit)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        configure_table_view(self.table_view, stretch_column=1)
        self.table_view.doubleClicked.connect(self._open_edit_bom_dialog)
        main_layout.addWidget(self.table_view)

        self.pagination_bar = PaginationBar(self)
        self.pagination_bar.pageChanged.connect(self._show_page)
        main_layout.addWidget(self.pagination_bar)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("Thêm định mức")
        self.edit_button = QPushButton("Sửa")
        self.delete_button = QPushButton("Xóa")
        self.refresh_button = QPushButton("Tải lại")
        self.add_button.clicked.connect(self._open_add_bom_dialog)
        self.edit_button.clicked.connect(self._open_edit_bom_dialog)
        self.delete_button.clicked.connect(self._delete_selected_bom)
        self.refresh_button.clicked.connect(lambda: self.load_boms_data())
        for button in (self.add_button, self.edit_button, self.delete_button):
            button_layout.addWidget(button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("BomsUI initialized.")
        self.load_boms_data()

    def load_boms_data(self, page: Optional[int] = None):
        try:
            self._boms = self.bom_manager.get_all_boms(self.search_edit.text())
            self._show_page(page or self.pagination_bar.current_page)
        except Exception as e:
            logger.error(f"Error loading BOMs: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi tải dữ liệu", f"Không thể tải danh sách định mức: {e}")

    def _show_page(self, page: int):
        current = paginate(self._boms, page)
        self.table_model.update_data(current.items)
        self.pagination_bar.set_page(current)

    def _selected_bom(self) -> Optional[BOMEntity]:
        row = selected_row(self.table_view)
        return self.table_model.get_bom_at_row(row) if row is not None else None

    def _save_from_dialog(self, dialog: BomDialog, bom_id: Optional[str]):
        data = dialog.get_bom_data()
        if not data:
            return
        try:
            saved = self.bom_manager.save_bom(data, bom_id=bom_id)
            QMessageBox.information(self, "Thành công", f"Đã lưu định mức '{saved.product_name}'.")
            self.load_boms_data()
        except ValueError as ve:
            QMessageBox.warning(self, "Dữ liệu không hợp lệ", str(ve))
        except Exception as e:
            logger.error(f"Error saving BOM: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi lưu định mức: {e}")

    def _open_add_bom_dialog(self):
        dialog = BomDialog(self.bom_manager, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            self._save_from_dialog(dialog, None)

    def _open_edit_bom_dialog(self, *_args):
        bom = self._selected_bom()
        if not bom:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một định mức để sửa.")
            return
        dialog = BomDialog(self.bom_manager, bom=bom, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            self._save_from_dialog(dialog, bom.id)

    def _delete_selected_bom(self):
        bom = self._selected_bom()
        if not bom:
            QMessageBox.information(self, "Chưa chọn", "Vui lòng chọn một định mức để xóa.")
            return
        reply = QMessageBox.question(self, "Xác nhận xóa",
                                     f"Bạn có chắc muốn xóa định mức '{bom.product_name}'?\n"
                                     f"Các lệnh sản xuất đã tạo không bị ảnh hưởng.",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply != QMessageBox.StandardButton.Yes:
            return
        try:
            if self.bom_manager.delete_bom(bom.id):
                self.load_boms_data()
        except Exception as e:
            logger.error(f"Error deleting BOM: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi", f"Lỗi khi xóa định mức: {e}")
