"""Registry functionality: the process-wide type registry and name lookup."""

from typemirror.registry.registry import (
    TypeRegistry,
    for_name,
    get_registry,
    reflect,
    type_of,
)

__all__ = [
    "TypeRegistry",
    "get_registry",
    "reflect",
    "type_of",
    "for_name",
]
