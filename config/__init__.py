from .settings import (
    APP_NAME,
    APP_VERSION,
    BORING_BETON_RATE,
    BORING_HULLER_RATE,
    CSV_DELIMITER,
    DEFAULT_BASE_NAME,
    DEFAULT_CASE_NUMBER,
    DEFAULT_JOB_TYPE,
    DEFAULT_UNIT,
    KM_RATE,
    LUK_HULLER_RATE,
    MAX_SHEET_NAME_CHARS,
    MODEL_SOURCE,
    MODEL_VERSION,
    NAME_WRAP_CHARS,
    OPSKYDELIGT_RATE,
    OUTPUT_ROOT,
    PROJECT_ROOT,
    SCHEMA_VERSION,
    TRAELLE_RATE35,
    TRAELLE_RATE50,
)

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "BORING_BETON_RATE",
    "BORING_HULLER_RATE",
    "CSV_DELIMITER",
    "DEFAULT_BASE_NAME",
    "DEFAULT_CASE_NUMBER",
    "DEFAULT_JOB_TYPE",
    "DEFAULT_UNIT",
    "KM_RATE",
    "LUK_HULLER_RATE",
    "MAX_SHEET_NAME_CHARS",
    "MODEL_SOURCE",
    "MODEL_VERSION",
    "NAME_WRAP_CHARS",
    "OPSKYDELIGT_RATE",
    "OUTPUT_ROOT",
    "PROJECT_ROOT",
    "SCHEMA_VERSION",
    "TRAELLE_RATE35",
    "TRAELLE_RATE50",
]
