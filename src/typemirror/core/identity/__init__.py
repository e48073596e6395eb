"""Type identity functionality: stable, name-derived type IDs."""

from typemirror.core.identity.models import TypeId, qualified_name_of

__all__ = [
    "TypeId",
    "qualified_name_of",
]
