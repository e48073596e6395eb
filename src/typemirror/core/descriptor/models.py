"""Descriptor models: modifiers, kinds and immutable member records.

Descriptors are plain frozen dataclasses. They describe structure only; reading,
writing and invoking members goes through the accessor layer.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import TYPE_CHECKING, Any

from typemirror.core.descriptor.operations import format_annotation
from typemirror.core.errors import NoSuchFieldError, NoSuchMethodError
from typemirror.core.identity import TypeId, qualified_name_of
from typemirror.core.types import EMPTY, Annotation

if TYPE_CHECKING:
    from typemirror.core.query import MemberQuery


class Modifier(Flag):
    """Modifier flags carried by types and members."""

    NONE = 0
    PUBLIC = auto()  # No leading underscore
    PROTECTED = auto()  # Single leading underscore
    PRIVATE = auto()  # Name-mangled __name
    ABSTRACT = auto()
    STATIC = auto()  # staticmethod or ClassVar
    CLASS = auto()  # classmethod
    FINAL = auto()  # typing.final / Final[...]
    READONLY = auto()
    ASYNC = auto()
    PROPERTY = auto()
    SPECIAL = auto()  # __dunder__
    SYNTHETIC = auto()  # Generated by dataclass/pydantic machinery

    @staticmethod
    def to_string(modifiers: Modifier) -> str:
        """Render modifiers as space-separated keywords in a canonical order.

        Args:
            modifiers: Combined modifier flags.

        Returns:
            Keywords such as ``"public static final"``; empty for NONE.
        """
        return " ".join(m.name.lower() for m in _KEYWORD_ORDER if m in modifiers)  # type: ignore[union-attr]


_KEYWORD_ORDER = (
    Modifier.PUBLIC,
    Modifier.PROTECTED,
    Modifier.PRIVATE,
    Modifier.ABSTRACT,
    Modifier.STATIC,
    Modifier.CLASS,
    Modifier.FINAL,
    Modifier.READONLY,
    Modifier.ASYNC,
    Modifier.PROPERTY,
    Modifier.SPECIAL,
    Modifier.SYNTHETIC,
)


class MemberKind(Enum):
    """Structural category of a member."""

    FIELD = auto()
    METHOD = auto()
    CONSTRUCTOR = auto()


class TypeKind(Enum):
    """Structural category of a type."""

    CLASS = auto()
    INTERFACE = auto()  # Protocol or fully abstract ABC
    ENUM = auto()
    RECORD = auto()  # dataclass, Pydantic model, NamedTuple


@dataclass(frozen=True)
class ParameterDescriptor:
    """One parameter of a method or constructor."""

    name: str
    annotation: Annotation = Any
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    default: Any = field(default=EMPTY, compare=False)

    @property
    def has_default(self) -> bool:
        return self.default is not EMPTY

    @property
    def is_variadic(self) -> bool:
        return self.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)

    def to_parameter(self) -> inspect.Parameter:
        """Convert back to an ``inspect.Parameter``."""
        return inspect.Parameter(
            self.name, self.kind, default=self.default, annotation=self.annotation
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "type": format_annotation(self.annotation),
            "kind": self.kind.name,
        }
        if self.has_default:
            result["default"] = repr(self.default)
        return result

    def __str__(self) -> str:
        prefix = {
            inspect.Parameter.VAR_POSITIONAL: "*",
            inspect.Parameter.VAR_KEYWORD: "**",
        }.get(self.kind, "")
        text = f"{prefix}{self.name}: {format_annotation(self.annotation)}"
        if self.has_default:
            text += f" = {self.default!r}"
        return text


@dataclass(frozen=True)
class MemberDescriptor(ABC):
    """Fields common to every member descriptor."""

    name: str
    owner: type
    modifiers: Modifier

    @property
    @abstractmethod
    def kind(self) -> MemberKind: ...

    @property
    def qualified_name(self) -> str:
        """``module.Owner.member`` form of the member name."""
        return f"{qualified_name_of(self.owner)}.{self.name}"

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_static(self) -> bool:
        return Modifier.STATIC in self.modifiers


@dataclass(frozen=True)
class FieldDescriptor(MemberDescriptor):
    """A field: annotated attribute, class attribute, slot, property or enum constant.

    Attributes:
        name: Field name as written in the class body (``__secret``).
        owner: Declaring class.
        modifiers: Modifier flags.
        type: Declared type, ``Any`` when undeclared.
        storage_name: Attribute the value lives under (``_Owner__secret``).
        default: Declared default value, ``EMPTY`` when there is none.
    """

    type: Annotation = Any
    storage_name: str = ""
    default: Any = field(default=EMPTY, compare=False)

    @property
    def kind(self) -> MemberKind:
        return MemberKind.FIELD

    @property
    def has_default(self) -> bool:
        return self.default is not EMPTY

    @property
    def is_readonly(self) -> bool:
        return Modifier.READONLY in self.modifiers

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "name": self.name,
            "type": format_annotation(self.type),
            "modifiers": Modifier.to_string(self.modifiers),
        }

    def __str__(self) -> str:
        mods = Modifier.to_string(self.modifiers)
        return f"{mods} {format_annotation(self.type)} {self.qualified_name}".lstrip()


@dataclass(frozen=True)
class MethodDescriptor(MemberDescriptor):
    """A method declared on a class.

    ``parameters`` exclude the implicit ``self``/``cls`` receiver.
    """

    parameters: tuple[ParameterDescriptor, ...] = ()
    return_type: Annotation = Any
    storage_name: str = ""
    function: Callable[..., Any] | None = field(default=None, compare=False, repr=False)

    @property
    def kind(self) -> MemberKind:
        return MemberKind.METHOD

    @property
    def parameter_types(self) -> tuple[Annotation, ...]:
        """Declared types of the non-variadic parameters, in order."""
        return tuple(p.annotation for p in self.parameters if not p.is_variadic)

    def matches(self, *parameter_types: Annotation) -> bool:
        return self.parameter_types == parameter_types

    def to_signature(self) -> inspect.Signature:
        """Build an ``inspect.Signature`` without the receiver, for argument binding."""
        return inspect.Signature([p.to_parameter() for p in self.parameters])

    def signature(self) -> str:
        """Render a declaration line such as ``public static int add(a: int, b: int)``."""
        mods = Modifier.to_string(self.modifiers)
        params = ", ".join(str(p) for p in self.parameters)
        text = f"{format_annotation(self.return_type)} {self.name}({params})"
        return f"{mods} {text}" if mods else text

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "name": self.name,
            "modifiers": Modifier.to_string(self.modifiers),
            "parameters": [p.to_dict() for p in self.parameters],
            "returns": format_annotation(self.return_type),
        }

    def __str__(self) -> str:
        return self.signature()


@dataclass(frozen=True)
class ConstructorDescriptor(MethodDescriptor):
    """A way to create instances: the initializer or a named factory classmethod."""

    implicit: bool = False  # Inherited or default initializer

    @property
    def kind(self) -> MemberKind:
        return MemberKind.CONSTRUCTOR

    @property
    def is_primary(self) -> bool:
        return self.name == "__init__"

    def signature(self) -> str:
        mods = Modifier.to_string(self.modifiers)
        params = ", ".join(str(p) for p in self.parameters)
        owner = self.owner.__qualname__
        text = f"{owner}({params})" if self.is_primary else f"{owner}.{self.name}({params})"
        return f"{mods} {text}" if mods else text


@dataclass(frozen=True)
class TypeDescriptor:
    """Everything reflection knows about one class.

    Declared members belong to this class only. ``ancestors`` hold the
    descriptors of the reflected classes in the MRO (nearest first), which is
    what ``fields()`` and ``methods()`` walk to include inherited members.
    """

    cls: type
    name: str
    qualified_name: str
    module: str
    type_id: TypeId
    kind: TypeKind
    modifiers: Modifier
    superclass: type | None = None
    interfaces: tuple[type, ...] = ()
    declared_fields: tuple[FieldDescriptor, ...] = ()
    declared_methods: tuple[MethodDescriptor, ...] = ()
    constructors: tuple[ConstructorDescriptor, ...] = ()
    ancestors: tuple[TypeDescriptor, ...] = field(default=(), compare=False, repr=False)

    @property
    def is_abstract(self) -> bool:
        return Modifier.ABSTRACT in self.modifiers

    @property
    def is_interface(self) -> bool:
        return self.kind is TypeKind.INTERFACE

    # Lookup

    def fields(self) -> tuple[FieldDescriptor, ...]:
        """Public fields, including inherited ones. Nearest declaration wins."""
        return tuple(self._public_members(lambda d: d.declared_fields))

    def methods(self) -> tuple[MethodDescriptor, ...]:
        """Public methods, including inherited ones. Overrides replace the base method."""
        return tuple(self._public_members(lambda d: d.declared_methods))

    def _public_members(self, select: Callable[[TypeDescriptor], Any]) -> Iterator[Any]:
        merged: dict[str, Any] = {}
        for descriptor in (*reversed(self.ancestors), self):
            for member in select(descriptor):
                if member.is_public:
                    merged[member.name] = member
                else:
                    merged.pop(member.name, None)
        return iter(merged.values())

    def declared_field(self, name: str, checked: bool = True) -> FieldDescriptor | None:
        """Find a field declared on this class, whatever its visibility.

        Args:
            name: Field name, either as written (``__secret``) or as stored
                (``_Owner__secret``).
            checked: If True, raise when not found.

        Returns:
            FieldDescriptor, or None if not found and unchecked.

        Raises:
            NoSuchFieldError: If not found and checked.
        """
        for f in self.declared_fields:
            if name in (f.name, f.storage_name):
                return f
        if checked:
            raise NoSuchFieldError(f"{self.qualified_name}.{name}")
        return None

    def field(self, name: str, checked: bool = True) -> FieldDescriptor | None:
        """Find a public field, searching inherited fields too."""
        for f in self.fields():
            if f.name == name:
                return f
        if checked:
            raise NoSuchFieldError(f"{self.qualified_name}.{name}")
        return None

    def declared_method(
        self, name: str, *parameter_types: Annotation, checked: bool = True
    ) -> MethodDescriptor | None:
        """Find a method declared on this class, whatever its visibility.

        Python has one method per name, so ``parameter_types`` only confirm the
        signature: when given, they must equal the declared parameter types.

        Raises:
            NoSuchMethodError: If not found and checked.
        """
        return self._find_method(self.declared_methods, name, parameter_types, checked)

    def method(
        self, name: str, *parameter_types: Annotation, checked: bool = True
    ) -> MethodDescriptor | None:
        """Find a public method, searching inherited methods too."""
        return self._find_method(self.methods(), name, parameter_types, checked)

    def _find_method(
        self,
        candidates: tuple[MethodDescriptor, ...],
        name: str,
        parameter_types: tuple[Annotation, ...],
        checked: bool,
    ) -> MethodDescriptor | None:
        for m in candidates:
            if name in (m.name, m.storage_name) and (
                not parameter_types or m.matches(*parameter_types)
            ):
                return m
        if checked:
            types = ", ".join(format_annotation(t) for t in parameter_types)
            raise NoSuchMethodError(f"{self.qualified_name}.{name}({types})")
        return None

    def constructor(
        self, *parameter_types: Annotation, name: str | None = None, checked: bool = True
    ) -> ConstructorDescriptor | None:
        """Find a constructor.

        Args:
            *parameter_types: Declared parameter types to match exactly.
            name: Named constructor to look for; the initializer is ``__init__``.
            checked: If True, raise when not found.

        Returns:
            With neither types nor name, the primary constructor. Otherwise the
            first constructor matching both.

        Raises:
            NoSuchMethodError: If not found and checked.
        """
        for c in self.constructors:
            if name is None and not parameter_types and c.is_primary:
                return c
            if name is not None and c.name != name:
                continue
            if (parameter_types or name is None) and not c.matches(*parameter_types):
                continue
            return c
        if checked:
            types = ", ".join(format_annotation(t) for t in parameter_types)
            label = name or self.name
            raise NoSuchMethodError(f"{self.qualified_name}.{label}({types})")
        return None

    def members(
        self, query: MemberQuery | None = None, inherited: bool = False
    ) -> tuple[MemberDescriptor, ...]:
        """Members matching a query.

        Args:
            query: Filter to apply; None matches every member.
            inherited: If True, search public inherited fields and methods
                instead of the declared ones.

        Returns:
            Matching fields, methods and constructors in that order.
        """
        if inherited:
            pool: tuple[MemberDescriptor, ...] = (*self.fields(), *self.methods())
        else:
            pool = (*self.declared_fields, *self.declared_methods)
        pool = (*pool, *self.constructors)
        if query is None:
            return pool
        return tuple(m for m in pool if query.matches(m))

    # Hierarchy

    def all_interfaces(self) -> tuple[type, ...]:
        """Interfaces implemented directly or through any ancestor."""
        seen: dict[type, None] = dict.fromkeys(self.interfaces)
        for ancestor in self.ancestors:
            seen.update(dict.fromkeys(ancestor.interfaces))
            if ancestor.is_interface:
                seen[ancestor.cls] = None
        return tuple(seen)

    def is_assignable_from(self, other: type | TypeDescriptor) -> bool:
        """Check if ``other`` is this type or a subtype of it."""
        other_cls = other.cls if isinstance(other, TypeDescriptor) else other
        return isinstance(other_cls, type) and issubclass(other_cls, self.cls)

    def is_instance(self, obj: Any) -> bool:
        return isinstance(obj, self.cls)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "module": self.module,
            "type_id": str(self.type_id),
            "kind": self.kind.name,
            "modifiers": Modifier.to_string(self.modifiers),
            "superclass": qualified_name_of(self.superclass) if self.superclass else None,
            "interfaces": [qualified_name_of(i) for i in self.interfaces],
            "fields": [f.to_dict() for f in self.declared_fields],
            "methods": [m.to_dict() for m in self.declared_methods],
            "constructors": [c.to_dict() for c in self.constructors],
        }

    def __str__(self) -> str:
        mods = Modifier.to_string(self.modifiers)
        keyword = "interface" if self.is_interface else self.kind.name.lower()
        return f"{mods} {keyword} {self.qualified_name}".lstrip()
