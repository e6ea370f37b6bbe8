# src/week_planner/config.py
from __future__ import annotations
import os


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---- Database ----------------------------------------------------------------
# DB file next to the process; override through env
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./week_planner.db")
# off | summary | sql | full
DB_LOG = os.getenv("DB_LOG", "off").strip().lower()
SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"

# ---- Planning ----------------------------------------------------------------
# Heures disponibles par jour (denominateur de la charge)
CAPACITY_HOURS_PER_DAY = _env_float("PLANNER_CAPACITY_HOURS", 920.0)

# Seuils de classification de charge, en pourcentage de la capacite
WARNING_THRESHOLD_PCT = 85.0
OVERLOAD_THRESHOLD_PCT = 100.0

# ---- Logging -----------------------------------------------------------------
LOG_LEVEL = os.getenv("PLANNER_LOG_LEVEL", "INFO").strip().upper() or "INFO"
