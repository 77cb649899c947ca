import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TIMEZONE = "Africa/Johannesburg"


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _delays(name: str, default: str) -> List[float]:
    raw = os.getenv(name) or default
    return [float(part) for part in raw.split(",") if part.strip()]


def supabase_url() -> Optional[str]:
    return os.getenv("SUPABASE_URL")


def supabase_key() -> Optional[str]:
    return os.getenv("SUPABASE_KEY")


def supabase_service_key() -> Optional[str]:
    return os.getenv("SUPABASE_SERVICE_KEY")


def supabase_jwt_secret() -> Optional[str]:
    return os.getenv("SUPABASE_JWT_SECRET")


def frontend_url() -> str:
    return os.getenv("FRONTEND_URL", "http://localhost:3000")


def class_timezone() -> str:
    return os.getenv("CLASS_TIMEZONE") or DEFAULT_TIMEZONE


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def verify_writes() -> bool:
    return _flag("VERIFY_WRITES", True)


def goal_cas_attempts() -> int:
    return int(os.getenv("GOAL_CAS_ATTEMPTS", "3"))


def store_retry_delays() -> List[float]:
    return _delays("STORE_RETRY_DELAYS", "0.2,0.5,1.0")


def admin_overview_limit() -> int:
    return int(os.getenv("ADMIN_OVERVIEW_LIMIT", "30"))
