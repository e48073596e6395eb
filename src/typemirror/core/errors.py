"""Reflection error hierarchy.

Lookup failures subclass ``LookupError`` and argument problems subclass
``TypeError`` so callers can catch them with the builtin they already expect.
"""

from __future__ import annotations

from typing import Any


class ReflectionError(Exception):
    """Base class for all reflection failures."""

    pass


class ClassNotFoundError(ReflectionError, LookupError):
    """Raised when a type name cannot be resolved to a class."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Class not found: {name}")
        self.name = name


class NoSuchFieldError(ReflectionError, LookupError):
    """Raised when a type has no field with the requested name."""

    pass


class NoSuchMethodError(ReflectionError, LookupError):
    """Raised when a type has no method or constructor matching a lookup."""

    pass


class TypeNotRegisteredError(ReflectionError, LookupError):
    """Raised when a type is looked up in a registry that does not know it."""

    pass


class IllegalAccessError(ReflectionError):
    """Raised when an accessor touches a member it is not allowed to."""

    pass


class IllegalArgumentError(ReflectionError, TypeError):
    """Raised for a wrong target instance, wrong arguments or a mistyped value."""

    pass


class InstantiationError(ReflectionError):
    """Raised when instantiating an abstract class, interface or enum."""

    pass


class InvocationTargetError(ReflectionError):
    """Wraps an exception raised by a reflectively invoked member.

    The original exception is available as ``target_exception`` and is also
    chained as ``__cause__``.
    """

    def __init__(self, member: Any, target_exception: Exception) -> None:
        name = getattr(member, "qualified_name", repr(member))
        super().__init__(
            f"{name} raised {type(target_exception).__name__}: {target_exception}"
        )
        self.member = member
        self.target_exception = target_exception
