import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_leave_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

JWT_SECRET = "test-jwt-secret"
JWT_EXPIRY_HOURS = 1

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Deliver inline so tests can assert on notifications right after a decision.
NOTIFICATIONS_ASYNC = False

MAIL_SERVER = ""
MAIL_PORT = 587
MAIL_USE_TLS = False
MAIL_USERNAME = ""
MAIL_PASSWORD = ""
MAIL_DEFAULT_SENDER = "no-reply@campus.local"
