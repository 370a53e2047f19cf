"""
Converts hydrated models back to plain data.
to_structured_value() produces JSON-compatible dicts and refuses values it
cannot represent instead of dropping them; to_raw_field_map() is a shallow
snapshot of the field values as stored.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Mapping

from pydantic_core import PydanticSerializationError, to_jsonable_python

from config import settings
from errors import CyclicSchemaError, SerializationError

if TYPE_CHECKING:
    from schemas.hydratable import Hydratable


def to_raw_field_map(target: Hydratable, by_alias: bool = True) -> dict[str, Any]:
    """Current field values, unconverted, in declaration order."""
    return {
        ((info.alias or name) if by_alias else name): getattr(target, name)
        for name, info in type(target).model_fields.items()
    }


def to_structured_value(target: Hydratable, by_alias: bool = True, depth: int = 0) -> dict[str, Any]:
    """Deep-convert target and every nested model or collection it holds."""
    model = type(target).__name__
    if depth > settings.max_depth:
        raise CyclicSchemaError(model, depth)
    return {
        key: _convert(value, by_alias, depth, f"{model}.{key}")
        for key, value in to_raw_field_map(target, by_alias).items()
    }


def _convert(value: Any, by_alias: bool, depth: int, where: str) -> Any:
    from schemas.hydratable import Hydratable

    if depth > settings.max_depth:
        raise CyclicSchemaError(where, depth)
    if value is None or type(value) in (str, int, bool):
        return value
    if type(value) is float:
        if not math.isfinite(value):
            raise SerializationError(f"{where}: {value!r} has no JSON representation")
        return value
    if isinstance(value, Hydratable):
        return to_structured_value(value, by_alias, depth + 1)
    if isinstance(value, (list, tuple)):
        return [_convert(v, by_alias, depth + 1, where) for v in value]
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if type(k) is int:
                k = str(k)
            elif not isinstance(k, str):
                raise SerializationError(f"{where}: mapping key {k!r} is not a string or int")
            out[k] = _convert(v, by_alias, depth + 1, f"{where}.{k}")
        return out
    try:
        plain = to_jsonable_python(value)
    except (PydanticSerializationError, ValueError, TypeError) as e:
        raise SerializationError(f"{where}: cannot serialize {type(value).__name__}") from e
    # to_jsonable_python passes non-finite floats through
    return _convert(plain, by_alias, depth + 1, where)
