import os
from pathlib import Path
from urllib.parse import urlparse
from dotenv import load_dotenv

# Load .env file from project root
ENV_PATH = Path(__file__).parent.parent / ".env"
load_dotenv(ENV_PATH)

# Server settings
PORT = int(os.getenv("PORT", "8000"))
HOST = os.getenv("HOST", "0.0.0.0")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Database - parse DATABASE_URL for PostgreSQL
DATABASE_URL = os.getenv("DATABASE_URL", "")

def get_db_config():
    """Parse DATABASE_URL into connection parameters."""
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL environment variable is required")

    parsed = urlparse(DATABASE_URL)
    return {
        "host": parsed.hostname,
        "port": parsed.port or 5432,
        "database": parsed.path[1:],  # Remove leading /
        "user": parsed.username,
        "password": parsed.password,
    }

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24 * 7)))
PASSWORD_RESET_EXPIRE_MINUTES = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "60"))

# Email (Resend)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Apex Padel <noreply@apexpadel.com>")
ENABLE_EMAIL = os.getenv("ENABLE_EMAIL", "true").lower() in ("true", "1", "yes")

# Public site, used for share, reset and calendar links
APP_URL = os.getenv("APP_URL", "http://localhost:5173").rstrip("/")
TIMEZONE = os.getenv("TIMEZONE", "America/Los_Angeles")

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Paths
ROOT_DIR = Path(__file__).parent.parent
STATIC_DIR = Path(os.getenv("STATIC_DIR", str(ROOT_DIR / "static")))
