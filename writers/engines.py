"""
Rendering-engine factory.

The PDF canvas (reportlab) and the workbook engine (openpyxl) are heavy imports
only some exports need. Each is imported on first use and the handle is kept for
the life of the process; later calls return the same module object. First-use
initialization is serialized by a lock, so concurrent callers never import twice.
"""

from __future__ import annotations

import importlib
import threading
from types import ModuleType
from typing import Dict

from config.logging_config import get_logger
from domain.errors import RenderError

logger = get_logger(__name__)

_pdf_engine: ModuleType | None = None
_workbook_engine: ModuleType | None = None

# Number of actual imports per engine (stays at 1 after the first export)
load_counts: Dict[str, int] = {"pdf": 0, "workbook": 0}
_lock = threading.Lock()


def _load(module_name: str, engine: str) -> ModuleType:
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RenderError(f"Cannot load {engine} engine '{module_name}': {e}", renderer=engine, cause=e) from e
    load_counts[engine] += 1
    logger.debug("Loaded %s engine from %s", engine, module_name)
    return module


def get_pdf_engine() -> ModuleType:
    """Return the shared reportlab canvas module."""
    global _pdf_engine
    if _pdf_engine is None:
        with _lock:
            if _pdf_engine is None:
                _pdf_engine = _load("reportlab.pdfgen.canvas", "pdf")
    return _pdf_engine


def get_workbook_engine() -> ModuleType:
    """Return the shared openpyxl module."""
    global _workbook_engine
    if _workbook_engine is None:
        with _lock:
            if _workbook_engine is None:
                _workbook_engine = _load("openpyxl", "workbook")
    return _workbook_engine
