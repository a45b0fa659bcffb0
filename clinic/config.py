from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# SQLite file in the project root unless configured otherwise
DATABASE_URL = os.getenv("CLINIC_DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'clinic.sqlite'}")
DB_ECHO = os.getenv("CLINIC_DB_ECHO", "0") == "1"

# Admin gate: shared cookie with a fixed sentinel value
ADMIN_COOKIE_NAME = os.getenv("CLINIC_ADMIN_COOKIE_NAME", "admin-session")
ADMIN_COOKIE_VALUE = os.getenv("CLINIC_ADMIN_COOKIE_VALUE", "authenticated")

LOG_LEVEL = os.getenv("CLINIC_LOG_LEVEL", "INFO").upper()

API_BASE = os.getenv("CLINIC_API_BASE", "http://127.0.0.1:8000")
CLIENT_TIMEOUT_SECONDS = float(os.getenv("CLINIC_CLIENT_TIMEOUT", "5"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CLINIC_CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
