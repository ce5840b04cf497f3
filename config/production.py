import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "doposcuola_db"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

MAIL_CONFIG = {
    "host": os.getenv("MAIL_HOST", ""),
    "port": int(os.getenv("MAIL_PORT", "587")),
    "username": os.getenv("MAIL_USERNAME", ""),
    "password": os.getenv("MAIL_PASSWORD", ""),
    "from_address": os.getenv("MAIL_FROM", ""),
    "use_tls": bool(int(os.getenv("MAIL_USE_TLS", "1"))),
}

PUBLIC_URL = os.getenv("PUBLIC_URL", "")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
