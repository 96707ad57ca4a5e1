import os
from datetime import date

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Database configuration
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(os.path.dirname(BASE_DIR), 'siap_bimbingan.db')}",
)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# JWT Configuration
SECRET_KEY = os.getenv("SECRET_KEY", "default-fallback-key")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# Fallback academic calendar, used when no academic period is active
CURRENT_SEMESTER = os.getenv("CURRENT_SEMESTER", "2024/2025 Ganjil")
UTS_DATE = date.fromisoformat(os.getenv("UTS_DATE", "2025-03-15"))
UAS_DATE = date.fromisoformat(os.getenv("UAS_DATE", "2025-06-01"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MAX_IMPORT_SIZE = int(os.getenv("MAX_IMPORT_SIZE", str(5 * 1024 * 1024)))
