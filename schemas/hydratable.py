"""
Base model for hydratable record types.

Subclasses declare snake_case fields; each field is addressed by its
camelCase alias (first_name -> firstName) when records are hydrated.
Computed-default hooks are registered per field with @hydration_hook.
"""
from __future__ import annotations

import collections.abc
import types
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping, Optional, Union, get_args, get_origin

from pydantic import BaseModel, PrivateAttr

from errors import SchemaError
from utils.case import to_camel_key

_HOOK_MARKER = "__hydration_hook__"

_SEQUENCE_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)


def hydration_hook(field: str) -> Callable[[Callable[..., None]], Callable[..., None]]:
    """
    Register the decorated method as the computed-default hook of `field`
    (Python name or camelCase alias).

    The hook is called as hook(self, value) with the incoming value, or the
    field's current empty value during the default-completion pass, and is
    solely responsible for assigning the field.
    """
    def decorator(fn: Callable[..., None]) -> Callable[..., None]:
        setattr(fn, _HOOK_MARKER, field)
        return fn

    return decorator


@dataclass(frozen=True)
class FieldDescriptor:
    """How the dispatcher treats one declared field."""
    name: str
    key: str
    annotation: Any
    nested: Optional[type[Hydratable]] = None
    many: bool = False
    hook: Optional[str] = None


def _strip_optional(tp: Any) -> Any:
    if get_origin(tp) in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _as_hydratable(tp: Any) -> Optional[type[Hydratable]]:
    # get_origin guard: list[int] passes isinstance(..., type) on older Pythons
    if get_origin(tp) is None and isinstance(tp, type) and issubclass(tp, Hydratable):
        return tp
    return None


def _nested_type(annotation: Any) -> tuple[Optional[type[Hydratable]], bool]:
    """Return (nested Hydratable type, is-list) for a field annotation."""
    tp = _strip_optional(annotation)
    nested = _as_hydratable(tp)
    if nested is not None:
        return nested, False
    if get_origin(tp) in _SEQUENCE_ORIGINS:
        args = get_args(tp)
        if len(args) == 1:
            item = _as_hydratable(_strip_optional(args[0]))
            if item is not None:
                return item, True
    return None, False


class Hydratable(BaseModel):
    """
    A typed record populated from loosely structured input.

    Field values are stored as supplied (no assignment validation), so
    hydration never coerces; use from_record() or blank() + hydrate()
    rather than the validating constructor when working from raw records.
    """

    model_config = {
        "alias_generator": to_camel_key,
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }

    __hydration_hooks__: ClassVar[dict[str, str]] = {}

    _rename_table: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        hooks: dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            if not issubclass(klass, Hydratable):
                continue
            for attr_name, attr in vars(klass).items():
                field = getattr(attr, _HOOK_MARKER, None)
                if field is not None:
                    hooks[cls._field_name_for(field)] = attr_name
        cls.__hydration_hooks__ = hooks

    @classmethod
    def _field_name_for(cls, field: str) -> str:
        if field in cls.model_fields:
            return field
        for name, info in cls.model_fields.items():
            if to_camel_key(info.alias or name) == to_camel_key(field):
                return name
        raise SchemaError(f"{cls.__name__} has a hydration hook for undeclared field {field!r}")

    @classmethod
    def hydration_fields(cls) -> dict[str, FieldDescriptor]:
        """Field descriptors keyed by camelCase field key, built once per class."""
        cached = cls.__dict__.get("__hydration_fields__")
        if cached is not None:
            return cached
        if not cls.__pydantic_complete__:
            cls.model_rebuild()
        descriptors: dict[str, FieldDescriptor] = {}
        for name, info in cls.model_fields.items():
            nested, many = _nested_type(info.annotation)
            key = to_camel_key(info.alias or name)
            descriptors[key] = FieldDescriptor(
                name=name,
                key=key,
                annotation=info.annotation,
                nested=nested,
                many=many,
                hook=cls.__hydration_hooks__.get(name),
            )
        cls.__hydration_fields__ = descriptors
        return descriptors

    @classmethod
    def blank(cls):
        """Instance with declared defaults; required fields without one are None."""
        missing = {name: None for name, info in cls.model_fields.items() if info.is_required()}
        return cls.model_construct(**missing)

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]] = None, rename_table: Optional[Mapping[str, Any]] = None):
        """Build and hydrate an instance; the rename table is applied first."""
        instance = cls.blank()
        if rename_table:
            instance.set_rename_table(rename_table)
        if record is not None:
            instance.hydrate(record)
        return instance

    @property
    def rename_table(self) -> dict[str, Any]:
        return self._rename_table

    def set_rename_table(self, table: Mapping[str, Any]):
        """Set field -> source key renames (nested tables allowed) for the next hydrate()."""
        self._rename_table = dict(table)
        return self

    def hydrate(self, record: Mapping[str, Any]):
        from services.hydration import hydrate

        return hydrate(self, record)

    def complete_defaults(self):
        from services.hydration import complete_defaults

        complete_defaults(self)
        return self

    def to_structured_value(self, by_alias: bool = True) -> dict[str, Any]:
        from services.serialization import to_structured_value

        return to_structured_value(self, by_alias=by_alias)

    def to_raw_field_map(self, by_alias: bool = True) -> dict[str, Any]:
        from services.serialization import to_raw_field_map

        return to_raw_field_map(self, by_alias=by_alias)
