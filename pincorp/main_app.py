# pincorp/main_app.py
import sys
import logging
from PyQt5.QtWidgets import QApplication, QMainWindow, QTabWidget, QMessageBox
from PyQt5.QtCore import QLocale
from PyQt5.QtGui import QFont

# --- Configuration ---
from pincorp.config import DATABASE_PATH, STORE_NAME, DEFAULT_USER_ID, DEFAULT_USER_NAME, configure_logging

# --- Data Access Layer (DAL) ---
from pincorp.data_access.state_store import DataStore
from pincorp.data_access.database_manager import DatabaseManager
from pincorp.data_access.materials_repository import MaterialsRepository
from pincorp.data_access.bom_repository import BOMsRepository
from pincorp.data_access.production_orders_repository import ProductionOrdersRepository
from pincorp.data_access.products_repository import ProductsRepository
from pincorp.data_access.customers_repository import CustomersRepository
from pincorp.data_access.sales_repository import SalesRepository
from pincorp.data_access.inventory_movements_repository import InventoryMovementsRepository

# --- Business Logic Layer (BLL) ---
from pincorp.business_logic.material_manager import MaterialManager
from pincorp.business_logic.bom_manager import BomManager
from pincorp.business_logic.production_cost_engine import ProductionCostEngine
from pincorp.business_logic.product_manager import ProductManager
from pincorp.business_logic.production_manager import ProductionManager
from pincorp.business_logic.customer_manager import CustomerManager
from pincorp.business_logic.sales_manager import SalesManager
from pincorp.business_logic.report_manager import ReportManager

# --- Presentation Layer (UI Tabs) ---
from pincorp.presentation.materials_ui import MaterialsUI
from pincorp.presentation.boms_ui import BomsUI
from pincorp.presentation.production_ui import ProductionUI
from pincorp.presentation.products_ui import ProductsUI
from pincorp.presentation.sales_ui import SalesUI
from pincorp.presentation.reports_ui import ReportsUI

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, db_path: str = DATABASE_PATH, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"{STORE_NAME} - Quản lý sản xuất và bán hàng")
        self.setGeometry(100, 100, 1300, 800)

        logger.info("Initializing Database Manager and creating tables...")
        self.db_manager = DatabaseManager(db_path)
        try:
            self.db_manager.create_tables()
        except Exception as e:
            logger.error(f"FATAL: Could not initialize database: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi cơ sở dữ liệu", f"Không thể tạo hoặc kết nối cơ sở dữ liệu: {e}")
            sys.exit(1)

        logger.info("Initializing Repositories...")
        self.store = DataStore()
        self.materials_repo = MaterialsRepository(self.store)
        self.boms_repo = BOMsRepository(self.store)
        self.production_orders_repo = ProductionOrdersRepository(self.store)
        self.products_repo = ProductsRepository(self.store)
        self.customers_repo = CustomersRepository(self.store)
        self.sales_repo = SalesRepository(self.store)
        self.inventory_movements_repo = InventoryMovementsRepository(self.store)
        self._load_persisted_state()

        logger.info("Initializing Managers...")
        self.material_manager = MaterialManager(self.materials_repo, self.inventory_movements_repo)
        self.bom_manager = BomManager(self.boms_repo, self.material_manager)
        self.product_manager = ProductManager(self.products_repo, self.inventory_movements_repo)
        self.production_manager = ProductionManager(
            production_orders_repository=self.production_orders_repo,
            bom_manager=self.bom_manager,
            material_manager=self.material_manager,
            product_manager=self.product_manager,
            cost_engine=ProductionCostEngine(self.material_manager),
        )
        self.customer_manager = CustomerManager(self.customers_repo)
        self.sales_manager = SalesManager(self.sales_repo, self.product_manager)
        self.report_manager = ReportManager(self.sales_repo)

        logger.info("Setting up UI...")
        self._setup_ui()
        logger.info("MainWindow initialized and UI setup complete.")

    def _repositories(self):
        return [self.materials_repo, self.boms_repo, self.production_orders_repo, self.products_repo,
                self.customers_repo, self.sales_repo, self.inventory_movements_repo]

    def _load_persisted_state(self):
        try:
            for repo in self._repositories():
                repo.replace_all(self.db_manager.load_collection(repo.table_name, repo.model_type))
        except Exception as e:
            logger.error(f"FATAL: Could not load stored data: {e}", exc_info=True)
            QMessageBox.critical(self, "Lỗi cơ sở dữ liệu", f"Không thể đọc dữ liệu đã lưu: {e}")
            sys.exit(1)
        # every committed change from here on is written back
        self.store.subscribe(self._persist_changes)

    def _persist_changes(self, collection: str, entities, deleted_ids):
        try:
            self.db_manager.save_changes(collection, entities, deleted_ids)
        except Exception as e:
            QMessageBox.critical(self, "Lỗi lưu dữ liệu",
                                 f"Thay đổi đã được ghi nhận nhưng chưa lưu được vào cơ sở dữ liệu: {e}\n"
                                 "Ứng dụng sẽ thử lưu lại ở lần thay đổi tiếp theo. Không cần thực hiện lại thao tác.")
            raise

    def closeEvent(self, event):
        if self.store.has_unsaved_changes and not self.store.flush():
            reply = QMessageBox.question(self, "Dữ liệu chưa được lưu",
                                         "Một số thay đổi vẫn chưa lưu được vào cơ sở dữ liệu và sẽ bị mất.\n"
                                         "Bạn vẫn muốn thoát?",
                                         QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                         QMessageBox.StandardButton.No)
            if reply == QMessageBox.StandardButton.No:
                event.ignore()
                return
        logger.info("Main window closing.")
        event.accept()

    def _setup_ui(self):
        self.tabs = QTabWidget()

        self.sales_tab = SalesUI(self.sales_manager, self.customer_manager,
                                 user_id=DEFAULT_USER_ID, user_name=DEFAULT_USER_NAME, parent=self)
        self.tabs.addTab(self.sales_tab, "Bán hàng")

        self.products_tab = ProductsUI(self.product_manager, self)
        self.tabs.addTab(self.products_tab, "Sản phẩm")

        self.production_tab = ProductionUI(self.production_manager, self.bom_manager,
                                           user_name=DEFAULT_USER_NAME, parent=self)
        self.tabs.addTab(self.production_tab, "Lệnh sản xuất")

        self.boms_tab = BomsUI(self.bom_manager, self)
        self.tabs.addTab(self.boms_tab, "Định mức (BOM)")

        self.materials_tab = MaterialsUI(self.material_manager, self)
        self.tabs.addTab(self.materials_tab, "Nguyên vật liệu")

        self.reports_tab = ReportsUI(self.report_manager, self)
        self.tabs.addTab(self.reports_tab, "Báo cáo")

        self.tabs.currentChanged.connect(self._on_tab_changed)
        self.setCentralWidget(self.tabs)

    def _on_tab_changed(self, index: int):
        # other tabs may have moved stock since this one was last shown
        tab = self.tabs.widget(index)
        if tab is self.sales_tab:
            tab.load_products_data()
        elif tab is self.products_tab:
            tab.load_products_data()
        elif tab is self.production_tab:
            tab.load_orders_data()
        elif tab is self.boms_tab:
            tab.load_boms_data()
        elif tab is self.materials_tab:
            tab.load_materials_data()
        elif tab is self.reports_tab:
            tab.load_report()


def main():
    configure_logging()
    logger.info("Application starting...")
    app = QApplication(sys.argv)
    QLocale.setDefault(QLocale(QLocale.Language.Vietnamese, QLocale.Country.Vietnam))
    app.setFont(QFont("Segoe UI", 10))

    main_window = MainWindow()
    main_window.show()
    logger.info("Application started successfully. Main window shown.")
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
