from schemas.hydratable import FieldDescriptor, Hydratable, hydration_hook

__all__ = [
    "FieldDescriptor",
    "Hydratable",
    "hydration_hook",
]
