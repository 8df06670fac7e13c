from .convert import convert_montage_to_demontage
from .reconcile import PayloadShape, detect_shape, reconcile
from .to_canonical import build_canonical_model

__all__ = [
    "PayloadShape",
    "build_canonical_model",
    "convert_montage_to_demontage",
    "detect_shape",
    "reconcile",
]
