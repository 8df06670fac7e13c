"""
Error taxonomy of the export/import pipeline.

- ValidationError: required structural data is absent (no line items, no job id).
- FormatError: a snapshot carries a schema version this build does not read.
- RenderError: an output-producing engine failed to load or to produce bytes.
"""

from __future__ import annotations

from typing import Optional


class AkkordError(RuntimeError):
    """Base class for every error the pipeline raises on purpose."""
    pass


class ValidationError(AkkordError):
    """Raised when mandatory structural data is missing from a draft or payload."""
    pass


class FormatError(AkkordError):
    """Raised when a snapshot's schemaVersion does not match the supported one."""
    pass


class RenderError(AkkordError):
    """Raised when a renderer or its engine fails. Carries the underlying cause."""

    def __init__(self, message: str, renderer: str = "", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.renderer = renderer
        self.cause = cause
