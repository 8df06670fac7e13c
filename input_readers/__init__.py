from .json_payload import read_payload

__all__ = ["read_payload"]
