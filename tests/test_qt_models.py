# tests/test_qt_models.py
import os
from decimal import Decimal

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PyQt5.QtWidgets")
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor

from pincorp.business_logic.entities.bom_material_entity import BomMaterialEntity
from pincorp.business_logic.entities.product_entity import ProductEntity
from pincorp.business_logic.entities.production_estimate_entity import RequiredMaterialEntity
from pincorp.business_logic.sales_manager import Cart
from pincorp.presentation.custom_widgets import PaginationBar
from pincorp.presentation.products_ui import ProductTableModel
from pincorp.presentation.production_ui import RequiredMaterialTableModel
from pincorp.presentation.reports_ui import ReportRowsTableModel
from pincorp.utils.pagination import paginate


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


def test_product_model_marks_low_margin(qapp):
    model = ProductTableModel([
        ProductEntity(name="Lời", stock=Decimal("1"), cost_price=Decimal("100"), selling_price=Decimal("150"), id="P1"),
        ProductEntity(name="Lỗ", stock=Decimal("1"), cost_price=Decimal("100"), selling_price=Decimal("90"), id="P2"),
    ])
    assert model.rowCount() == 2
    assert model.data(model.index(0, 7)) == "50,0%"
    assert not isinstance(model.data(model.index(0, 7), Qt.ItemDataRole.ForegroundRole), QColor)
    low = model.data(model.index(1, 7), Qt.ItemDataRole.ForegroundRole)
    assert isinstance(low, QColor) and low.name() == "#ff0000"


def test_required_material_model_marks_shortage(qapp):
    model = RequiredMaterialTableModel([
        RequiredMaterialEntity(material_id="M1", name="Casing", required=Decimal("4"),
                               current_stock=Decimal("3"), is_sufficient=False,
                               unit_purchase_price=Decimal("20000")),
    ])
    assert model.data(model.index(0, 0)) == "Casing"
    assert model.data(model.index(0, 4)) == "80.000 ₫"
    assert model.data(model.index(0, 1), Qt.ItemDataRole.ForegroundRole).name() == "#ff0000"


def test_cart_model_edits_go_through_cart(qapp):
    pytest.importorskip("weasyprint")
    from pincorp.presentation.sales_ui import CartTableModel

    cart = Cart()
    cart.add_product(ProductEntity(name="Pin", stock=Decimal("3"), selling_price=Decimal("1000"), id="P1"))
    model = CartTableModel(cart)
    quantity_index = model.index(0, CartTableModel.QUANTITY_COLUMN)
    assert int(model.flags(quantity_index) & Qt.ItemFlag.ItemIsEditable) != 0

    assert model.setData(quantity_index, 10) is True
    assert cart.items[0].quantity == Decimal("3")
    assert model.data(model.index(0, 3)) == "3.000 ₫"
    assert model.setData(quantity_index, "nan") is False
    assert cart.items[0].quantity == Decimal("3")

    assert model.setData(quantity_index, 0) is True
    assert cart.is_empty
    assert model.rowCount() == 0


def test_bom_line_quantity_must_be_a_positive_number(qapp):
    from pincorp.presentation.boms_ui import BomMaterialLinesModel

    model = BomMaterialLinesModel([BomMaterialEntity(material_id="M1", quantity=Decimal("2"))])
    quantity_index = model.index(0, BomMaterialLinesModel.QUANTITY_COLUMN)
    for bad in ("nan", "Infinity", "0", "abc"):
        assert model.setData(quantity_index, bad) is False
    assert model.setData(quantity_index, "1,5") is True
    assert model.lines()[0].quantity == Decimal("1.5")


def test_report_model_adds_total_row(qapp):
    model = ReportRowsTableModel([("Ngày", "label", "text"), ("Doanh thu", "revenue", "money")])
    model.update_data([{"label": "01/05", "revenue": Decimal("100")}, {"label": "02/05", "revenue": Decimal("250")}])
    assert model.rowCount() == 3
    assert model.data(model.index(2, 0)) == "Tổng cộng"
    assert model.data(model.index(2, 1)) == "350 ₫"
    model.update_data([])
    assert model.rowCount() == 0


def test_pagination_bar_follows_page(qapp):
    bar = PaginationBar()
    bar.set_page(paginate(list(range(25)), 2, per_page=10))
    assert bar.current_page == 2
    assert bar.prev_button.isEnabled() and bar.next_button.isEnabled()
    assert bar.page_label.text() == "Trang 2 / 3 (25 mục)"
    emitted = []
    bar.pageChanged.connect(emitted.append)
    bar.next_button.click()
    assert emitted == [3]
