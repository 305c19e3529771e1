import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hotel_reviews.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Frontend base URL used in review and dashboard links
APP_URL = os.getenv("APP_URL") or os.getenv("VITE_APP_URL", "http://localhost:5173")

# SMTP transport - checked when an email is sent, not at startup
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
SMTP_FROM = os.getenv("SMTP_FROM") or SMTP_USER
SMTP_TIMEOUT = int(os.getenv("SMTP_TIMEOUT", "30"))

# Guest review links
REVIEW_TOKEN_TTL_DAYS = int(os.getenv("REVIEW_TOKEN_TTL_DAYS", "7"))

# "memory", "redis" or "none"
TOKEN_CACHE_BACKEND = os.getenv("TOKEN_CACHE_BACKEND", "memory").lower()

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

# CORS - credentials are allowed, so origins must be listed explicitly
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if origin.strip()
]
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
