# pincorp/config.py

import os
import logging
import logging.config
from decimal import Decimal

# --- Storage Configuration ---
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__))) # pincorp/ -> project root
DATA_DIR = os.environ.get("PINCORP_DATA_DIR", os.path.join(BASE_DIR, "data"))
DB_NAME = "pincorp_data.db"
DATABASE_PATH = os.path.join(DATA_DIR, DB_NAME)

# --- Logging Configuration ---
LOGS_DIR = os.path.join(DATA_DIR, "logs")
LOG_FILE_NAME = "app.log"
LOG_FILE_PATH = os.path.join(LOGS_DIR, LOG_FILE_NAME)

LOG_LEVEL = logging.DEBUG
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': LOG_FORMAT,
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
            'level': logging.DEBUG,
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'standard',
            'filename': LOG_FILE_PATH,
            'maxBytes': 1024*1024*5,  # 5 MB
            'backupCount': 5,
            'level': logging.INFO,
            'encoding': 'utf-8',
        },
    },
    'root': {
        'handlers': ['console', 'file'],
        'level': LOG_LEVEL,
    },
}


def configure_logging(config: dict = None) -> None:
    """Applies LOGGING_CONFIG, creating the log directory on first use."""
    if not os.path.exists(LOGS_DIR):
        os.makedirs(LOGS_DIR)
    logging.config.dictConfig(config or LOGGING_CONFIG)


# --- Application Settings ---
STORE_NAME = "PIN Corp"
DEFAULT_CURRENCY = "VND"
DEFAULT_USER_ID = "admin"
DEFAULT_USER_NAME = "Quản trị viên"

ITEMS_PER_PAGE = 10
PICKER_RESULT_LIMIT = 10 # material picker in the BOM editor
LOW_MARGIN_THRESHOLD = Decimal("20") # percent
