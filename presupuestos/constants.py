"""Project-wide constants."""

from decimal import Decimal
from os import getenv


def _env_bool(name: str, default: str | None = None) -> bool:
    """Return a boolean flag read from the environment."""

    value = getenv(name)
    if value is None:
        value = default if default is not None else "0"
    value = str(value).strip().lower()
    return value not in {"0", "false", "no", "off", ""}


def _env_str(name: str, *fallbacks: str, default: str = "") -> str:
    """Return the first non-empty value among ``name`` and ``fallbacks``."""

    for key in (name, *fallbacks):
        value = getenv(key)
        if value is not None and value.strip():
            return value.strip()
    return default


# Base URL used to turn relative logo paths into absolute ones.
BASE_URL = _env_str(
    "PRESUPUESTOS_BASE_URL",
    "NEXT_PUBLIC_APP_URL",
    default="http://localhost:3000",
)

# Reject unparseable numbers instead of treating them as zero.
STRICT_NUMBERS = _env_bool("PRESUPUESTOS_STRICT_NUMBERS", "0")

# Directory for intermediate stage dumps (CLI only, empty = disabled).
TRACE_DIR = _env_str("PRESUPUESTOS_TRACE_DIR")

DEC2 = Decimal("0.01")

DEFAULT_TEMPLATE = "41200-00001"
PAYLOAD_MODE = "produccion"
