import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Honour the X-Mock-User header so the UI can switch users locally.
ALLOW_IMPERSONATION = bool(int(os.getenv("ALLOW_IMPERSONATION", "1")))
ALLOW_ADMIN_DIRECT_APPROVAL = bool(int(os.getenv("ALLOW_ADMIN_DIRECT_APPROVAL", "1")))
# Create a minimal Employee for an unknown caller on first project creation.
AUTO_PROVISION_USERS = bool(int(os.getenv("AUTO_PROVISION_USERS", "1")))
HISTORY_PAGE_SIZE = int(os.getenv("HISTORY_PAGE_SIZE", "100"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo users/project on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
