from services.hydration import complete_defaults, dispatch, hydrate, nested_rename_table, resolve_key
from services.serialization import to_raw_field_map, to_structured_value

__all__ = [
    "complete_defaults",
    "dispatch",
    "hydrate",
    "nested_rename_table",
    "resolve_key",
    "to_raw_field_map",
    "to_structured_value",
]
