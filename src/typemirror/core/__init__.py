"""Core functionalities: stateless descriptors, queries and identity.

Architecture Note:
    core/ contains pure, stateless building blocks: immutable descriptors and
    the functions that build them. For stateful services, see registry/ and
    access/.
"""

from typemirror.core.descriptor import (
    ConstructorDescriptor,
    FieldDescriptor,
    MemberDescriptor,
    MemberKind,
    MethodDescriptor,
    Modifier,
    ParameterDescriptor,
    TypeDescriptor,
    TypeKind,
    constructor,
    describe,
    format_annotation,
    is_instance_of,
    is_interface,
)
from typemirror.core.errors import (
    ClassNotFoundError,
    IllegalAccessError,
    IllegalArgumentError,
    InstantiationError,
    InvocationTargetError,
    NoSuchFieldError,
    NoSuchMethodError,
    ReflectionError,
    TypeNotRegisteredError,
)
from typemirror.core.identity import TypeId, qualified_name_of
from typemirror.core.query import MemberQuery
from typemirror.core.types import EMPTY, Annotation

__all__ = [
    # Types
    "Annotation",
    "EMPTY",
    # Identity
    "TypeId",
    "qualified_name_of",
    # Descriptor
    "Modifier",
    "MemberKind",
    "TypeKind",
    "ParameterDescriptor",
    "MemberDescriptor",
    "FieldDescriptor",
    "MethodDescriptor",
    "ConstructorDescriptor",
    "TypeDescriptor",
    "describe",
    "constructor",
    "format_annotation",
    "is_instance_of",
    "is_interface",
    # Query
    "MemberQuery",
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
