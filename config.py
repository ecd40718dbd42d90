# config.py
"""
Application settings loaded from the environment (.env supported).

Every value is read once at import time. Tests set environment variables
before importing the application modules.
"""
import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Load .env
load_dotenv()


def _csv(value: str) -> list[str]:
     return [item.strip() for item in value.split(",") if item.strip()]


# Database
DB_SERVER = os.getenv("DB_SERVER")
DB_PORT = os.getenv("DB_PORT", "1433")
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_NAME = os.getenv("DB_NAME")

# DATABASE_URL wins; otherwise build the Azure SQL url for pymssql
DATABASE_URL = os.getenv("DATABASE_URL") or (
     f"mssql+pymssql://{quote_plus(DB_USER or '')}:{quote_plus(DB_PASS or '')}"
     f"@{DB_SERVER}:{DB_PORT}/{DB_NAME}"
)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "480"))

# Roles allowed to record payments / run administrative ledger actions
PAYMENT_ROLES = tuple(_csv(os.getenv("PAYMENT_ROLES", "admin,employee")))
ADMIN_ROLES = tuple(_csv(os.getenv("ADMIN_ROLES", "admin")))

# HTTP
CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", ""))
PORT = int(os.getenv("PORT", "10000"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").lower()
