"""typemirror: runtime type introspection for Python classes.

Usage:
    from typemirror import reflect, type_of, FieldAccessor, MethodInvoker

    @reflect
    class Person:
        name: str
        __age: int

        def __init__(self, name: str, age: int) -> None:
            self.name = name
            self.__age = age

        def greet(self, other: str) -> str:
            return f"Hello {other}, I am {self.name}"

    person = Person("Ada", 36)
    person_type = type_of(person)

    for f in person_type.declared_fields:
        print(f)  # e.g. "private int myapp.Person.__age"

    age = FieldAccessor(person_type.declared_field("__age"))
    age.set_accessible(True)
    age.set(person, 37)

    MethodInvoker(person_type.method("greet", str)).invoke(person, "Bob")
"""

__version__ = "0.1.0"

# Accessor layer
from typemirror.access import (
    Accessor,
    ConstructorInvoker,
    FieldAccessor,
    MethodInvoker,
    accessor_for,
)

# Configuration
from typemirror.config import ReflectionSettings, configure, get_settings

# Core primitives
from typemirror.core import (
    ClassNotFoundError,
    ConstructorDescriptor,
    FieldDescriptor,
    IllegalAccessError,
    IllegalArgumentError,
    InstantiationError,
    InvocationTargetError,
    MemberDescriptor,
    MemberKind,
    MemberQuery,
    MethodDescriptor,
    Modifier,
    NoSuchFieldError,
    NoSuchMethodError,
    ParameterDescriptor,
    ReflectionError,
    TypeDescriptor,
    TypeId,
    TypeKind,
    TypeNotRegisteredError,
    constructor,
    describe,
)

# Registry
from typemirror.registry import (
    TypeRegistry,
    for_name,
    get_registry,
    reflect,
    type_of,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "TypeId",
    "Modifier",
    "MemberKind",
    "TypeKind",
    "ParameterDescriptor",
    "MemberDescriptor",
    "FieldDescriptor",
    "MethodDescriptor",
    "ConstructorDescriptor",
    "TypeDescriptor",
    "MemberQuery",
    "describe",
    "constructor",
    # Registry
    "TypeRegistry",
    "get_registry",
    "reflect",
    "type_of",
    "for_name",
    # Access
    "Accessor",
    "FieldAccessor",
    "MethodInvoker",
    "ConstructorInvoker",
    "accessor_for",
    # Config
    "ReflectionSettings",
    "get_settings",
    "configure",
    # Errors
    "ReflectionError",
    "ClassNotFoundError",
    "NoSuchFieldError",
    "NoSuchMethodError",
    "TypeNotRegisteredError",
    "IllegalAccessError",
    "IllegalArgumentError",
    "InstantiationError",
    "InvocationTargetError",
]
