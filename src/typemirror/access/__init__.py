"""Access functionality: field accessors and method/constructor invokers."""

from typemirror.access.accessors import (
    Accessor,
    ConstructorInvoker,
    FieldAccessor,
    MethodInvoker,
    accessor_for,
)

__all__ = [
    "Accessor",
    "FieldAccessor",
    "MethodInvoker",
    "ConstructorInvoker",
    "accessor_for",
]
