"""Shared utilities for the hydrator."""
from utils.case import to_camel_key

__all__ = [
    "to_camel_key",
]
