import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "doposcuola_db"),
}

# Without MAIL_HOST, login codes and links are written to the log instead of mailed
MAIL_CONFIG = {
    "host": os.getenv("MAIL_HOST", ""),
    "port": int(os.getenv("MAIL_PORT", "587")),
    "username": os.getenv("MAIL_USERNAME", ""),
    "password": os.getenv("MAIL_PASSWORD", ""),
    "from_address": os.getenv("MAIL_FROM", "Doposcuola Connect <no-reply@doposcuola.local>"),
    "use_tls": bool(int(os.getenv("MAIL_USE_TLS", "1"))),
}

PUBLIC_URL = os.getenv("PUBLIC_URL", "http://localhost:5000")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo accounts and subjects on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
