from .canonical import Bundle, CanonicalModel, RawDraft, RenderArtifact, Snapshot
from .errors import AkkordError, FormatError, RenderError, ValidationError

__all__ = [
    "AkkordError",
    "Bundle",
    "CanonicalModel",
    "FormatError",
    "RawDraft",
    "RenderArtifact",
    "RenderError",
    "Snapshot",
    "ValidationError",
]
