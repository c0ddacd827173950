# pincorp/business_logic/__init__.py
from .material_manager import MaterialManager
from .bom_manager import BomManager
from .production_cost_engine import ProductionCostEngine
from .product_manager import ProductManager
from .production_manager import ProductionManager
from .customer_manager import CustomerManager
from .sales_manager import Cart, SalesManager
from .report_manager import ReportManager, build_sales_report
