import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_payroll_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

SMTP = {
    "host": os.getenv("SMTP_HOST", ""),
    "port": int(os.getenv("SMTP_PORT", "587")),
    "user": os.getenv("SMTP_USER", ""),
    "password": os.getenv("SMTP_PASSWORD", ""),
    "from_address": os.getenv("SMTP_FROM", ""),
}

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "/var/lib/hr-payroll/uploads")
PUBLIC_UPLOAD_URL = os.getenv("PUBLIC_UPLOAD_URL", "/uploads")
SHEETS_EXPORT_DIR = os.getenv("SHEETS_EXPORT_DIR", "/var/lib/hr-payroll/sheets")

PAYROLL_POLICY = {
    "night_duty_rate": os.getenv("NIGHT_DUTY_RATE"),
    "pf_rate": os.getenv("PF_RATE"),
    "pf_employer_rate": os.getenv("PF_EMPLOYER_RATE"),
    "esi_rate": os.getenv("ESI_RATE"),
    "esi_wage_ceiling": os.getenv("ESI_WAGE_CEILING"),
}
