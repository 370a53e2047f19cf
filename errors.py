"""
Errors raised by record hydration and serialization.
Unknown input keys and undeclared fields are never errors.
"""

from __future__ import annotations


class HydrationError(Exception):
    """Base class for hydrator errors."""


class ShapeMismatchError(HydrationError, TypeError):
    """A record or a sequence of records was expected for a nested field."""

    def __init__(self, model: str, field: str | None, expected: str, value: object):
        self.model = model
        self.field = field
        self.expected = expected
        where = f"{model}.{field}" if field else model
        super().__init__(f"{where} expects {expected}, got {type(value).__name__}")


class SerializationError(HydrationError, ValueError):
    """A field holds a value with no structured (JSON-compatible) form."""


class SchemaError(HydrationError, TypeError):
    """A Hydratable type is misconfigured."""


class CyclicSchemaError(SchemaError):
    """Nesting went deeper than settings.max_depth."""

    def __init__(self, model: str, depth: int):
        self.model = model
        self.depth = depth
        super().__init__(
            f"Nesting depth {depth} exceeded while processing {model}; "
            "check for a self-referencing record or object graph"
        )
