"""Pure functions over classes, names and annotations.

These helpers carry no state. The descriptor builder uses them to classify
classes and members, and the accessor layer uses ``is_instance_of`` to check
values against declared types.
"""

from __future__ import annotations

import inspect
import types
import typing
from dataclasses import is_dataclass
from enum import Enum
from typing import Any, ClassVar, Final, Literal, TypeVar, Union

from typemirror.core.types import EMPTY, Annotation

# Framework bases whose internals are not reflected as members of user types.
_OPAQUE_MODULES = ("builtins", "abc", "typing", "typing_extensions", "enum", "pydantic")

# int is acceptable where float is declared, and both where complex is.
_NUMERIC_PROMOTIONS: dict[type, tuple[type, ...]] = {
    float: (int,),
    complex: (int, float),
}


def is_special_name(name: str) -> bool:
    """Check for a dunder name such as ``__init__``."""
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def mangle(owner: type, name: str) -> str:
    """Return the attribute name Python stores a ``__private`` member under.

    Args:
        owner: Class declaring the member.
        name: Member name as written in the class body.

    Returns:
        ``_Owner__name`` for private names, the name unchanged otherwise.
    """
    if not name.startswith("__") or name.endswith("__"):
        return name
    stripped = owner.__name__.lstrip("_")
    if not stripped:
        return name
    return f"_{stripped}{name}"


def demangle(owner: type, name: str) -> str:
    """Inverse of ``mangle``: ``_Owner__name`` becomes ``__name``."""
    stripped = owner.__name__.lstrip("_")
    prefix = f"_{stripped}__"
    if stripped and name.startswith(prefix) and not name.endswith("__"):
        return name[len(prefix) - 2 :]
    return name


def is_pydantic(cls: type) -> bool:
    """Check if class is a Pydantic model without importing pydantic.

    Args:
        cls: Class to check.

    Returns:
        True if class inherits from pydantic.BaseModel, False otherwise.
    """
    for base in cls.__mro__:
        if base.__module__.startswith("pydantic") and base.__name__ == "BaseModel":
            return True
    return False


def is_named_tuple(cls: type) -> bool:
    """Check for a ``typing.NamedTuple`` or ``collections.namedtuple`` class."""
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def is_record(cls: type) -> bool:
    """Check for a data-carrier class: dataclass, Pydantic model or NamedTuple."""
    return is_dataclass(cls) or is_pydantic(cls) or is_named_tuple(cls)


def is_enum(cls: type) -> bool:
    return isinstance(cls, type) and issubclass(cls, Enum)


def is_opaque(cls: type) -> bool:
    """Check if a class belongs to the language or a framework, not user code."""
    module = cls.__module__ or ""
    return any(module == m or module.startswith(f"{m}.") for m in _OPAQUE_MODULES)


def is_protocol(cls: type) -> bool:
    """Check for a user-declared ``typing.Protocol`` class."""
    return bool(cls.__dict__.get("_is_protocol", False)) and not is_opaque(cls)


def is_interface(cls: type) -> bool:
    """Check if a class plays the role of an interface.

    A Protocol class is always an interface. An ABC counts when every method
    it declares itself is abstract and it declares no instance fields.

    Args:
        cls: Class to check.

    Returns:
        True for Protocols and fully abstract, field-free ABCs.
    """
    if is_opaque(cls):
        return False
    if is_protocol(cls):
        return True
    if not inspect.isabstract(cls) or is_record(cls):
        return False
    own_methods = [
        value
        for name, value in vars(cls).items()
        if not is_special_name(name) and _unwrap_callable(value) is not None
    ]
    if not own_methods or not all(
        getattr(_unwrap_callable(m), "__isabstractmethod__", False) for m in own_methods
    ):
        return False
    for annotation in inspect.get_annotations(cls).values():
        if not _is_class_var(annotation):
            return False
    return True


def _unwrap_callable(value: Any) -> Any:
    if isinstance(value, (staticmethod, classmethod)):
        return value.__func__
    if isinstance(value, property):
        return value.fget
    if inspect.isfunction(value):
        return value
    return None


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


_QUALIFIERS = ("ClassVar", "Final", "Annotated")


def _first_argument(arguments: str) -> str:
    """First top-level argument of a subscript written as text."""
    depth = 0
    for index, char in enumerate(arguments):
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        elif char == "," and depth == 0:
            return arguments[:index].strip()
    return arguments.strip()


def strip_qualifiers(annotation: Annotation) -> tuple[Annotation, bool, bool]:
    """Remove ``ClassVar``, ``Final`` and ``Annotated`` wrappers.

    Unresolved string annotations are unwrapped by name, so
    ``"ClassVar[Missing]"`` still marks a class variable.

    Args:
        annotation: Annotation as declared on the class.

    Returns:
        Tuple of (bare annotation, is_class_var, is_final).
    """
    class_var = final = False
    while True:
        if isinstance(annotation, str):
            head, bracket, rest = annotation.strip().partition("[")
            qualifier = head.strip().removeprefix("typing.")
            if qualifier not in _QUALIFIERS:
                return annotation, class_var, final
            class_var = class_var or qualifier == "ClassVar"
            final = final or qualifier == "Final"
            if not bracket:
                return Any, class_var, final
            annotation = _first_argument(rest.rstrip().removesuffix("]"))
            continue
        if annotation is ClassVar:
            return Any, True, final
        if annotation is Final:
            return Any, class_var, True
        origin = typing.get_origin(annotation)
        if origin is ClassVar:
            class_var = True
        elif origin is Final:
            final = True
        elif origin is typing.Annotated:
            pass
        else:
            return annotation, class_var, final
        annotation = typing.get_args(annotation)[0]


def format_annotation(annotation: Annotation) -> str:
    """Render an annotation the way it would be written in source."""
    if annotation is EMPTY or annotation is Any:
        return "Any"
    if annotation is None or annotation is type(None):
        return "None"
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


def is_instance_of(value: Any, annotation: Annotation) -> bool:
    """Check a runtime value against a declared type.

    Unresolved forward references, type variables and generic parameters that
    cannot be checked at runtime are accepted.

    Args:
        value: Value to check.
        annotation: Declared type.

    Returns:
        True if the value is acceptable for the annotation.
    """
    if annotation is EMPTY or annotation is Any or annotation is object:
        return True
    if isinstance(annotation, str):
        return True
    if annotation is None or annotation is type(None):
        return value is None
    if isinstance(annotation, TypeVar):
        bound = annotation.__bound__
        return bound is None or is_instance_of(value, bound)
    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return is_instance_of(value, supertype)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is Union or origin is types.UnionType:
        return any(is_instance_of(value, arg) for arg in args)
    if origin is Literal:
        return value in args
    if origin in (typing.Annotated, ClassVar, Final):
        return is_instance_of(value, args[0])
    if origin is type:
        if not isinstance(value, type):
            return False
        return not args or not isinstance(args[0], type) or issubclass(value, args[0])
    if origin is not None:
        return not isinstance(origin, type) or isinstance(value, origin)

    if isinstance(annotation, type):
        if is_protocol(annotation) and not getattr(annotation, "_is_runtime_protocol", False):
            return True
        if isinstance(value, annotation):
            return True
        promoted = _NUMERIC_PROMOTIONS.get(annotation, ())
        return isinstance(value, promoted) and not isinstance(value, bool)
    return True
