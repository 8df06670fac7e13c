"""
Central configuration for the akkordseddel export/import pipeline.

This module defines:
- Repository-relative output directory used by the pipeline and UI.
- Application identity stamped into every interchange snapshot.
- Fixed tariff rates used when a draft only carries counters (km, lifts, holes).
- Layout/format constants shared by the renderers.
- Logging settings.

All values are constants and should be imported where needed (no runtime logic here
beyond reading the environment once).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


PROJECT_ROOT = Path(__file__).resolve().parents[1]

OUTPUT_ROOT = PROJECT_ROOT / "exports"

APP_NAME = "Cssmate"
APP_VERSION = os.getenv("CSSMATE_APP_VERSION", "dev")

SCHEMA_VERSION = "cssmate.job.v1"
MODEL_VERSION = "2.0"
MODEL_SOURCE = "cssmate"

DEFAULT_CASE_NUMBER = "UKENDT"
DEFAULT_JOB_TYPE = "montage"
DEFAULT_UNIT = "stk"
DEFAULT_BASE_NAME = "akkordseddel"

# Tariff rates (kr per unit)
KM_RATE = 2.12
TRAELLE_RATE35 = 10.44
TRAELLE_RATE50 = 14.62
BORING_HULLER_RATE = 4.70
LUK_HULLER_RATE = 3.45
BORING_BETON_RATE = 11.49
OPSKYDELIGT_RATE = 9.67

CSV_DELIMITER = ";"

# Item names longer than this are laid out as two-line rows in the PDF
NAME_WRAP_CHARS = 46

MAX_SHEET_NAME_CHARS = 31

LOG_LEVEL = os.getenv("CSSMATE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("CSSMATE_LOG_FILE", "")
LOG_MAX_SIZE_MB = 5
LOG_BACKUP_COUNT = 3
