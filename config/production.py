import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

ALLOW_IMPERSONATION = False
ALLOW_ADMIN_DIRECT_APPROVAL = bool(int(os.getenv("ALLOW_ADMIN_DIRECT_APPROVAL", "1")))
AUTO_PROVISION_USERS = False
HISTORY_PAGE_SIZE = int(os.getenv("HISTORY_PAGE_SIZE", "100"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = False
