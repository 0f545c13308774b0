import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    STORAGE_BACKEND = data.get("STORAGE_BACKEND", "file")  # memory | file | sql
    STORAGE_DIR = data.get("STORAGE_DIR", "./storage")
    DB_URI = data.get("DB_URI", "sqlite:///./invoices.db")
    STORAGE_KEY = data.get("STORAGE_KEY", "invoiceApp:v1")
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Settings of a fresh document
    DEFAULT_INVOICE_PREFIX = data.get("DEFAULT_INVOICE_PREFIX", "INV")
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "PHP")

    # Overdue advancement worker
    OVERDUE_ADVANCE_ENABLED = bool(data.get("OVERDUE_ADVANCE_ENABLED", True))
    OVERDUE_ADVANCE_INTERVAL_SECONDS = data.get("OVERDUE_ADVANCE_INTERVAL_SECONDS", 3600)  # Hourly
