"""
Populates Hydratable models from loosely structured records.

hydrate() resolves every record key to a field key (rename table reverse
lookup, then camelCase), hands each value to dispatch(), and finishes with
complete_defaults() so hooks of fields that are still empty get to run.
Unknown keys and undeclared fields are skipped, never an error.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from config import settings
from errors import CyclicSchemaError, ShapeMismatchError
from schemas.hydratable import FieldDescriptor, Hydratable
from services.serialization import to_raw_field_map
from utils.case import to_camel_key

logger = logging.getLogger(__name__)


def resolve_key(source_key: str, rename_table: Mapping[str, Any]) -> str:
    """
    Map a record key to a camelCase field key.
    The rename table maps field -> source key, so the lookup is by value; the
    first matching entry wins.
    """
    field = source_key
    for field_name, source in rename_table.items():
        if not isinstance(source, Mapping) and source == source_key:
            field = field_name
            break
    return to_camel_key(field)


def nested_rename_table(rename_table: Mapping[str, Any], field_key: str) -> dict[str, Any]:
    """Rename table for the nested model behind field_key, empty when none is declared."""
    for field_name, entry in rename_table.items():
        if isinstance(entry, Mapping) and to_camel_key(field_name) == field_key:
            return dict(entry)
    return {}


def hydrate(target: Hydratable, record: Mapping[str, Any], depth: int = 0) -> Hydratable:
    """Apply record to target using its current rename table. Returns target."""
    model = type(target).__name__
    if depth > settings.max_depth:
        raise CyclicSchemaError(model, depth)
    if not isinstance(record, Mapping):
        raise ShapeMismatchError(model, None, "a record", record)

    rename_table = target.rename_table
    renamed = {
        to_camel_key(field_name): source
        for field_name, source in reversed(list(rename_table.items()))
        if not isinstance(source, Mapping)
    }
    for source_key, value in record.items():
        if not isinstance(source_key, str):
            logger.debug("Skipping non-string key %r for %s", source_key, model)
            continue
        field_key = resolve_key(source_key, rename_table)
        if field_key in renamed and renamed[field_key] != source_key:
            # A renamed field only reads from its source key
            logger.debug("Ignoring %r: %s.%s is read from %r", source_key, model, field_key, renamed[field_key])
            continue
        dispatch(target, source_key, field_key, value, nested_rename_table(rename_table, field_key), depth)

    complete_defaults(target, depth)
    return target


def dispatch(
    target: Hydratable,
    source_key: str,
    field_key: str,
    value: Any,
    nested_table: Optional[Mapping[str, Any]] = None,
    depth: int = 0,
) -> None:
    """
    Route one value to its field: the field's hook if registered, nested
    hydration for Hydratable (or list-of-Hydratable) fields, plain assignment
    otherwise.
    """
    descriptor = type(target).hydration_fields().get(field_key)
    if descriptor is None:
        logger.debug("Ignoring %r: %s has no field %r", source_key, type(target).__name__, field_key)
        return

    if descriptor.hook is not None:
        logger.debug("Calling hook %s.%s for %r", type(target).__name__, descriptor.hook, source_key)
        getattr(target, descriptor.hook)(value)
        return

    if descriptor.nested is None or value is None:
        setattr(target, descriptor.name, value)
    elif descriptor.many:
        setattr(target, descriptor.name, _hydrate_many(target, descriptor, value, nested_table, depth))
    else:
        setattr(target, descriptor.name, _hydrate_one(target, descriptor, value, nested_table, depth))


def _hydrate_one(
    target: Hydratable,
    descriptor: FieldDescriptor,
    value: Any,
    nested_table: Optional[Mapping[str, Any]],
    depth: int,
) -> Hydratable:
    if isinstance(value, descriptor.nested):
        return value
    if not isinstance(value, Mapping):
        raise ShapeMismatchError(type(target).__name__, descriptor.name, "a record", value)
    child = descriptor.nested.blank()
    if nested_table:
        child.set_rename_table(nested_table)
    return hydrate(child, value, depth + 1)


def _hydrate_many(
    target: Hydratable,
    descriptor: FieldDescriptor,
    value: Any,
    nested_table: Optional[Mapping[str, Any]],
    depth: int,
) -> list[Hydratable]:
    if not isinstance(value, (list, tuple)):
        raise ShapeMismatchError(type(target).__name__, descriptor.name, "a list of records", value)
    # Appends to what the field already holds
    items = list(getattr(target, descriptor.name) or [])
    items.extend(_hydrate_one(target, descriptor, entry, nested_table, depth) for entry in list(value))
    return items


def complete_defaults(target: Hydratable, depth: int = 0) -> None:
    """
    Re-dispatch every field that is still empty (falsy) with its own value,
    so computed-default hooks run even for fields missing from the record.
    Only empty fields are revisited, so running it again changes nothing.
    """
    descriptors = {d.name: d for d in type(target).hydration_fields().values()}
    for name, value in to_raw_field_map(target, by_alias=False).items():
        if value:
            continue
        # An earlier hook in this pass may have filled it already
        current = getattr(target, name)
        if current:
            continue
        key = descriptors[name].key
        dispatch(target, key, key, current, {}, depth)
