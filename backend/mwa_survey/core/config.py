# Runtime settings, read once from the environment (.env supported)
import os
from typing import List, Tuple

from dotenv import load_dotenv

load_dotenv()


def _csv(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _placeholder(name: str, default: str) -> Tuple[int, int, int]:
    # yes / maybe / no, must sum to 100 for a sensible chart
    values = tuple(int(part) for part in _csv(name, default))
    if len(values) != 3:
        raise RuntimeError(f"{name} must hold exactly three integers, got {values!r}")
    return values


SURVEY_VERSION = os.getenv("SURVEY_VERSION", "2025.1")
RECORD_SCHEMA_VERSION = "survey.response.v1"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mwa_survey.db")

CORS_ALLOW_ORIGINS = _csv("CORS_ALLOW_ORIGINS", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DASHBOARD_THEME = os.getenv("DASHBOARD_THEME", "dark").lower()
if DASHBOARD_THEME not in ("dark", "light"):
    raise RuntimeError(f"DASHBOARD_THEME must be 'dark' or 'light', got {DASHBOARD_THEME!r}")

INTEREST_PLACEHOLDER = _placeholder("INTEREST_PLACEHOLDER", "53,34,13")
CME_PLACEHOLDER = _placeholder("CME_PLACEHOLDER", "67,26,7")

SURVEY_API_BASE_URL = os.getenv("SURVEY_API_BASE_URL", "http://localhost:8000/api")
