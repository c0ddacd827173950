# pincorp/presentation/custom_widgets.py

from PyQt5.QtWidgets import (QWidget, QLineEdit, QPushButton, QHBoxLayout, QLabel, QDialog, QVBoxLayout,
                             QTableView, QAbstractItemView, QHeaderView, QDoubleSpinBox, QDialogButtonBox)
from PyQt5.QtCore import Qt, pyqtSignal, QAbstractTableModel, QModelIndex, QVariant
from PyQt5.QtGui import QColor
from decimal import Decimal
from typing import Any, List, Optional
import logging

from pincorp.business_logic.entities.inventory_movement_entity import InventoryMovementEntity
from pincorp.utils.pagination import Page
from pincorp.utils.date_converter import to_display_datetime
from pincorp.utils.formatting import format_quantity

logger = logging.getLogger(__name__)


class PaginationBar(QWidget):
    """Previous / next buttons with a 'page x of y' label."""
    pageChanged = pyqtSignal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._page = 1
        self._total_pages = 1

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.prev_button = QPushButton("< Trước")
        self.next_button = QPushButton("Sau >")
        self.page_label = QLabel()
        self.page_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        layout.addStretch()
        layout.addWidget(self.prev_button)
        layout.addWidget(self.page_label)
        layout.addWidget(self.next_button)
        layout.addStretch()

        self.prev_button.clicked.connect(lambda: self.pageChanged.emit(self._page - 1))
        self.next_button.clicked.connect(lambda: self.pageChanged.emit(self._page + 1))
        self._refresh()

    @property
    def current_page(self) -> int:
        return self._page

    def set_page(self, page: Page) -> None:
        self._page = page.page
        self._total_pages = page.total_pages
        self._refresh(page.total_items)

    def _refresh(self, total_items: int = 0):
        self.page_label.setText(f"Trang {self._page} / {self._total_pages} ({total_items} mục)")
        self.prev_button.setEnabled(self._page > 1)
        self.next_button.setEnabled(self._page < self._total_pages)


class SearchLineEdit(QLineEdit):
    def __init__(self, placeholder: str = "Tìm kiếm...", parent=None):
        super().__init__(parent)
        self.setPlaceholderText(placeholder)
        self.setClearButtonEnabled(True)


def make_money_spinbox(parent=None, maximum: float = 999999999999.0) -> QDoubleSpinBox:
    spinbox = QDoubleSpinBox(parent)
    spinbox.setDecimals(0)
    spinbox.setMinimum(0)
    spinbox.setMaximum(maximum)
    spinbox.setGroupSeparatorShown(True)
    spinbox.setSuffix(" ₫")
    return spinbox


def make_quantity_spinbox(parent=None, minimum: float = 0.0, decimals: int = 2) -> QDoubleSpinBox:
    spinbox = QDoubleSpinBox(parent)
    spinbox.setDecimals(decimals)
    spinbox.setMinimum(minimum)
    spinbox.setMaximum(9999999.99)
    spinbox.setGroupSeparatorShown(True)
    return spinbox


def spin_value(spinbox: QDoubleSpinBox) -> Decimal:
    return Decimal(str(spinbox.value()))


def configure_table_view(table_view: QTableView, stretch_column: Optional[int] = None) -> None:
    table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
    table_view.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
    table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
    table_view.setAlternatingRowColors(True)
    header = table_view.horizontalHeader()
    if header:
        header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
        if stretch_column is not None:
            header.setSectionResizeMode(stretch_column, QHeaderView.ResizeMode.Stretch)


def selected_row(table_view: QTableView) -> Optional[int]:
    selection_model = table_view.selectionModel()
    if not selection_model or not selection_model.hasSelection():
        return None
    rows = selection_model.selectedRows()
    return rows[0].row() if rows else None


class MovementTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[InventoryMovementEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[InventoryMovementEntity] = data if data is not None else []
        self._headers = ["Thời gian", "Loại", "Thay đổi", "Chứng từ", "Diễn giải"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        movement = self._data[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return to_display_datetime(movement.movement_date)
            elif col == 1: return movement.movement_type.value
            elif col == 2: return f"{'+' if movement.quantity_change > 0 else ''}{format_quantity(movement.quantity_change)}"
            elif col == 3: return movement.reference_id or ""
            elif col == 4: return movement.description or ""
        elif role == Qt.ItemDataRole.ForegroundRole and col == 2:
            return QColor(Qt.GlobalColor.darkGreen) if movement.quantity_change > 0 else QColor(Qt.GlobalColor.red)
        elif role == Qt.ItemDataRole.TextAlignmentRole and col == 2:
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()


class MovementHistoryDialog(QDialog):
    """Read-only stock ledger of one material or product."""

    def __init__(self, title: str, movements: List[InventoryMovementEntity], parent=None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setMinimumSize(640, 380)
        layout = QVBoxLayout(self)
        self.table_view = QTableView(self)
        self.table_view.setModel(MovementTableModel(movements, self))
        configure_table_view(self.table_view, stretch_column=4)
        layout.addWidget(self.table_view)
        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Close, Qt.Orientation.Horizontal, self)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)
