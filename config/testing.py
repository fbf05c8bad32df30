import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_payroll_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"

SMTP = {"host": ""}

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "/tmp/hr-payroll-test/uploads")
PUBLIC_UPLOAD_URL = "/uploads"
SHEETS_EXPORT_DIR = ""

PAYROLL_POLICY = {}
