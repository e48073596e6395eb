"""Descriptor functionality: modifiers, member records, and the type describer."""

from typemirror.core.descriptor.core import (
    constructor,
    describe,
    is_constructor,
    visibility_of,
)
from typemirror.core.descriptor.models import (
    ConstructorDescriptor,
    FieldDescriptor,
    MemberDescriptor,
    MemberKind,
    MethodDescriptor,
    Modifier,
    ParameterDescriptor,
    TypeDescriptor,
    TypeKind,
)
from typemirror.core.descriptor.operations import (
    format_annotation,
    is_instance_of,
    is_interface,
    is_record,
)

__all__ = [
    # Models
    "Modifier",
    "MemberKind",
    "TypeKind",
    "ParameterDescriptor",
    "MemberDescriptor",
    "FieldDescriptor",
    "MethodDescriptor",
    "ConstructorDescriptor",
    "TypeDescriptor",
    # Core
    "describe",
    "constructor",
    "is_constructor",
    "visibility_of",
    # Operations
    "format_annotation",
    "is_instance_of",
    "is_interface",
    "is_record",
]
