# clv_dcf/config.py
from __future__ import annotations

import logging
import os
from pathlib import Path

# -----------------------
# Paths (repo-root based)
# -----------------------
PROJECT_ROOT = Path(__file__).resolve().parents[1]
OUT_TABLES = Path(os.environ.get("CLV_DCF_OUTPUT_DIR", PROJECT_ROOT / "outputs" / "tables"))

EXPORT_FILENAME = "clv_discounting_calculation.csv"
EXPORT_PATH = OUT_TABLES / EXPORT_FILENAME

# -----------------------
# Horizon bounds
# -----------------------
MIN_HORIZON = 1
MAX_HORIZON = 10

# Repeat probability (%) given to a period appended by grow_horizon
NEW_PERIOD_REPEAT_PROBABILITY = 20.0

# -----------------------
# Logging
# -----------------------
LOG_LEVEL = os.environ.get("CLV_DCF_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging for scripts and the API process."""
    logging.basicConfig(level=level if level is not None else LOG_LEVEL, format=LOG_FORMAT)
