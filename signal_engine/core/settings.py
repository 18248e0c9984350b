# core/settings.py
"""Environment-driven settings and logging for the signal engine.

Values are read once at import time.  Every module obtains its logger
through :func:`get_logger` so that all of them share the same handler
format and level.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

# ──────────────────────────────────────────────────────────────────────────────
# Env helpers (strip quotes/whitespace so .env "KEY=value " doesn’t break things)
# ──────────────────────────────────────────────────────────────────────────────

def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1].strip()
    return v or default


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger("signal_engine").warning(
            "Ignoring non-numeric %s=%r, using %s", name, raw, default
        )
        return default

# ──────────────────────────────────────────────────────────────────────────────
# Engine defaults (via env)
# ──────────────────────────────────────────────────────────────────────────────

LOG_LEVEL = (_env("SIGNAL_ENGINE_LOG_LEVEL", "INFO") or "INFO").upper()
DEFAULT_INITIAL_CAPITAL = _env_float("SIGNAL_ENGINE_INITIAL_CAPITAL", 10000.0)
DEFAULT_COMPARE_CAPITAL = _env_float("SIGNAL_ENGINE_COMPARE_CAPITAL", 1000.0)
DEFAULT_VOLUME_THRESHOLD = _env_float("SIGNAL_ENGINE_VOLUME_THRESHOLD", 1.5)

# ──────────────────────────────────────────────────────────────────────────────
# Logging
# ──────────────────────────────────────────────────────────────────────────────

def get_logger(name: str) -> logging.Logger:
    """Return a named logger with the engine's handler and level attached."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        _h = logging.StreamHandler()
        _h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        logger.addHandler(_h)
    logger.setLevel(LOG_LEVEL)
    return logger
