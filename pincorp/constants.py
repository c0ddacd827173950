# pincorp/constants.py

from enum import Enum

# General
DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DISPLAY_DATE_FORMAT = "%d/%m/%Y"
DISPLAY_DATETIME_FORMAT = "%d/%m/%Y %H:%M"
DAY_LABEL_FORMAT = "%d/%m"

WALK_IN_CUSTOMER_NAME = "Khách lẻ"
UNRESOLVED_MATERIAL_NAME = "Không tìm thấy"

# Id prefixes handed out by the repositories
MATERIAL_ID_PREFIX = "M"
BOM_ID_PREFIX = "BOM"
PRODUCTION_ORDER_ID_PREFIX = "PO"
CUSTOMER_ID_PREFIX = "PINCUST-"
SALE_ID_PREFIX = "SALE-"
MOVEMENT_ID_PREFIX = "MV"


class MaterialUnit(Enum):
    PIECE = "cái"
    METER = "mét"
    KG = "kg"
    LITER = "lít"
    ROLL = "cuộn"


class ProductionOrderStatus(Enum):
    PENDING = "Đang chờ"
    IN_PROGRESS = "Đang sản xuất"
    COMPLETED = "Hoàn thành"
    CANCELED = "Đã hủy"


TERMINAL_ORDER_STATUSES = frozenset({ProductionOrderStatus.COMPLETED, ProductionOrderStatus.CANCELED})

ALLOWED_ORDER_TRANSITIONS = {
    ProductionOrderStatus.PENDING: frozenset({ProductionOrderStatus.IN_PROGRESS, ProductionOrderStatus.CANCELED}),
    ProductionOrderStatus.IN_PROGRESS: frozenset({ProductionOrderStatus.COMPLETED, ProductionOrderStatus.CANCELED}),
    ProductionOrderStatus.COMPLETED: frozenset(),
    ProductionOrderStatus.CANCELED: frozenset(),
}


class PaymentMethod(Enum):
    CASH = "Tiền mặt"
    BANK = "Chuyển khoản"


class StockItemKind(Enum):
    MATERIAL = "Nguyên vật liệu"
    PRODUCT = "Thành phẩm"


class InventoryMovementType(Enum):
    INITIAL_STOCK = "Tồn đầu kỳ"
    STOCK_ADJUSTMENT = "Điều chỉnh tồn kho"
    PRODUCTION_ISSUE = "Xuất cho sản xuất"
    PRODUCTION_RETURN = "Hoàn trả từ lệnh sản xuất bị hủy"
    PRODUCTION_RECEIPT = "Nhập từ sản xuất"
    SALE = "Bán hàng"


class ReferenceType(Enum):
    PRODUCTION_ORDER = "Lệnh sản xuất"
    SALE = "Hóa đơn bán hàng"
    MANUAL = "Thủ công"
