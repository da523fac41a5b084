"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should use the accessor functions below rather than reading `os.environ`
directly, to keep environment handling consistent.
"""

from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
import os

BACKEND_REST = "rest"
BACKEND_MEMORY = "memory"


def _project_root() -> Path:
    """Resolve project root (the directory holding app.py)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Existing environment variables win over .env values.
    """
    env_path = _project_root() / ".env"
    load_dotenv(env_path, override=False)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    raw = get_optional(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_optional_float(key: str, default: float) -> float:
    """Get optional env var as float; return default if missing or invalid."""
    raw = get_optional(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# --- Public config accessors ---

def store_url() -> str:
    """Required for the REST backend: base URL of the hosted data store."""
    return get_required("LUNESTOCK_STORE_URL").rstrip("/")


def store_api_key() -> str:
    """Required for the REST backend: public API key sent as `apikey`."""
    return get_required("LUNESTOCK_STORE_KEY")


def store_backend() -> str:
    """
    Optional: `rest` or `memory`.

    Defaults to `rest` when LUNESTOCK_STORE_URL is set, `memory` otherwise.
    Unknown values fall back to the same default.
    """
    default = BACKEND_REST if get_optional("LUNESTOCK_STORE_URL") else BACKEND_MEMORY
    val = get_optional("LUNESTOCK_BACKEND", default).lower()
    return val if val in (BACKEND_REST, BACKEND_MEMORY) else default


def request_timeout() -> float:
    """Optional: HTTP timeout in seconds for store and auth calls. Default 30."""
    return get_optional_float("LUNESTOCK_REQUEST_TIMEOUT", 30.0)


def low_stock_threshold() -> int:
    """Optional: a variant with fewer units than this is low stock. Default 5."""
    return get_optional_int("LOW_STOCK_THRESHOLD", 5)


def recent_sales_days() -> int:
    """Optional: window for the recent-sales counter, in days. Default 7."""
    return get_optional_int("RECENT_SALES_DAYS", 7)


def shop_timezone() -> Optional[tzinfo]:
    """
    Optional: IANA name of the shop's timezone, e.g. America/Lima.

    Decides which calendar day a sale belongs to on the dashboard. When
    unset or unknown, the server's local timezone is used.
    """
    raw = get_optional("SHOP_TIMEZONE")
    if not raw:
        return None
    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def session_file() -> Optional[Path]:
    """
    Optional: where the login token is kept between runs.

    Unset by default. The file is shared by everyone using this install, so
    only set it for a single-operator deployment.
    """
    raw = get_optional("LUNESTOCK_SESSION_FILE")
    return Path(raw) if raw else None


def log_level() -> str:
    """Optional: log level name. Default INFO."""
    return get_optional("LOG_LEVEL", "INFO").upper()


def log_file() -> Optional[Path]:
    """Optional: log file path. Logs go to stderr only when unset."""
    raw = get_optional("LOG_FILE")
    return Path(raw) if raw else None


def project_root() -> Path:
    """Project root directory."""
    return _project_root()
