"""Descriptor construction: turn a class into a TypeDescriptor.

Usage:
    descriptor = describe(Person)
    for f in descriptor.declared_fields:
        print(f)

    # Named constructors
    @dataclass
    class Point:
        x: float
        y: float

        @constructor
        def origin(cls) -> "Point":
            return cls(0.0, 0.0)
"""

from __future__ import annotations

import inspect
import logging
import sys
import types
import typing
from collections.abc import Callable
from dataclasses import MISSING, fields as dataclass_fields, is_dataclass
from typing import Any, TypeVar

from typemirror.core.descriptor.models import (
    ConstructorDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    Modifier,
    ParameterDescriptor,
    TypeDescriptor,
    TypeKind,
)
from typemirror.core.descriptor.operations import (
    demangle,
    is_enum,
    is_interface,
    is_named_tuple,
    is_opaque,
    is_pydantic,
    is_record,
    is_special_name,
    strip_qualifiers,
)
from typemirror.core.identity import TypeId, qualified_name_of
from typemirror.core.types import EMPTY, Annotation

if typing.TYPE_CHECKING:
    from typemirror.config import ReflectionSettings

logger = logging.getLogger(__name__)

_CONSTRUCTOR_MARK = "__typemirror_constructor__"

# Bookkeeping attributes set by class machinery rather than declared by users.
_IGNORED_ATTRIBUTES = frozenset(
    {
        "__type_descriptor__",
        "_abc_impl",
        "_is_protocol",
        "_is_runtime_protocol",
        "_fields",
        "_field_defaults",
        "model_config",
        "model_fields",
        "model_computed_fields",
    }
)


F = TypeVar("F")
D = TypeVar("D", bound=MethodDescriptor)


def constructor(fn: F) -> F:
    """Mark a classmethod as a named constructor.

    A plain function is wrapped in ``classmethod``; an existing classmethod is
    marked in place. Either decorator order works.

    Args:
        fn: Function or classmethod that creates instances of its class.

    Returns:
        The marked classmethod.

    Raises:
        TypeError: If given a staticmethod or a non-function.
    """
    if isinstance(fn, classmethod):
        setattr(fn.__func__, _CONSTRUCTOR_MARK, True)
        return fn
    if inspect.isfunction(fn):
        setattr(fn, _CONSTRUCTOR_MARK, True)
        return classmethod(fn)  # type: ignore[return-value]
    raise TypeError(f"@constructor expects a function or classmethod, got {type(fn).__name__}")


def is_constructor(fn: Any) -> bool:
    """Check if a function or classmethod was marked with ``@constructor``."""
    if isinstance(fn, classmethod):
        fn = fn.__func__
    return bool(getattr(fn, _CONSTRUCTOR_MARK, False))


def visibility_of(name: str) -> Modifier:
    """Derive visibility from naming conventions.

    Args:
        name: Member name as written in the class body.

    Returns:
        PUBLIC|SPECIAL for dunders, PRIVATE for ``__name``, PROTECTED for
        ``_name``, PUBLIC otherwise.
    """
    if is_special_name(name):
        return Modifier.PUBLIC | Modifier.SPECIAL
    if name.startswith("__"):
        return Modifier.PRIVATE
    if name.startswith("_"):
        return Modifier.PROTECTED
    return Modifier.PUBLIC


def _evaluate(obj: Any, annotation: Any) -> Any:
    """Evaluate one string annotation in the namespace it was written in."""
    if not isinstance(annotation, str):
        return annotation
    if isinstance(obj, type):
        module = sys.modules.get(obj.__module__)
        globalns = vars(module) if module is not None else {}
        localns: dict[str, Any] = dict(vars(obj))
    else:
        globalns = getattr(obj, "__globals__", {})
        localns = {}
    try:
        return eval(annotation, dict(globalns), localns)  # noqa: S307
    except Exception:  # undefined names keep the annotation as written
        return annotation


def _resolve_hints(obj: Any, raw: dict[str, Any]) -> dict[str, Any]:
    """Resolve string annotations, falling back to the raw ones one at a time."""
    if not raw:
        return {}
    if not any(isinstance(value, str) for value in raw.values()):
        return dict(raw)
    try:
        hints = typing.get_type_hints(obj, include_extras=True)
    except Exception as exc:  # NameError, TypeError, AttributeError from user annotations
        logger.warning(
            "Could not resolve annotations of %s (%s); resolving them one at a time",
            getattr(obj, "__qualname__", obj),
            exc,
        )
        return {name: _evaluate(obj, value) for name, value in raw.items()}
    return {name: hints.get(name, value) for name, value in raw.items()}


def _is_synthetic(fn: Callable[..., Any]) -> bool:
    """Functions compiled from generated source (dataclass methods) have no real file."""
    code = getattr(fn, "__code__", None)
    return code is not None and code.co_filename.startswith("<")


class _TypeBuilder:
    """Collects the members of a single class."""

    def __init__(self, cls: type, settings: ReflectionSettings) -> None:
        self.cls = cls
        self.settings = settings
        self.frozen = self._is_frozen()
        self.fields: dict[str, FieldDescriptor] = {}
        self.methods: list[MethodDescriptor] = []
        self.constructors: list[ConstructorDescriptor] = []

    def _is_frozen(self) -> bool:
        cls = self.cls
        if is_dataclass(cls):
            return bool(cls.__dataclass_params__.frozen)  # type: ignore[attr-defined]
        if is_pydantic(cls):
            return bool(getattr(cls, "model_config", {}).get("frozen", False))
        return is_named_tuple(cls)

    def _skip(self, name: str) -> bool:
        if name in _IGNORED_ATTRIBUTES:
            return True
        return is_special_name(name) and not self.settings.include_special_members

    # Fields

    def collect_fields(self) -> None:
        cls = self.cls
        raw = inspect.get_annotations(cls)
        hints = _resolve_hints(cls, raw) if self.settings.resolve_annotations else dict(raw)
        defaults = self._record_defaults()

        for storage_name in raw:
            if self._skip(storage_name):
                continue
            annotation, class_var, final = strip_qualifiers(hints[storage_name])
            name = demangle(cls, storage_name)
            modifiers = visibility_of(name)
            if class_var:
                modifiers |= Modifier.STATIC
            if final:
                modifiers |= Modifier.FINAL | Modifier.READONLY
            elif self.frozen and not class_var:
                modifiers |= Modifier.READONLY
            default = defaults.get(storage_name, EMPTY)
            if default is EMPTY:
                value = cls.__dict__.get(storage_name, EMPTY)
                if not inspect.isdatadescriptor(value):
                    default = value
            self.fields[storage_name] = FieldDescriptor(
                name=name,
                owner=cls,
                modifiers=modifiers,
                type=annotation,
                storage_name=storage_name,
                default=default,
            )

        if is_enum(cls):
            self._collect_enum_constants()

        for storage_name, value in vars(cls).items():
            if storage_name in self.fields or self._skip(storage_name):
                continue
            if isinstance(value, property):
                self._add_property(storage_name, value)
            elif isinstance(value, types.MemberDescriptorType):
                self._add_field(storage_name, Modifier.NONE, EMPTY)
            elif not (self._is_behaviour(value) or is_enum(cls) or is_special_name(storage_name)):
                self._add_field(storage_name, Modifier.STATIC, value)

    def _record_defaults(self) -> dict[str, Any]:
        cls = self.cls
        if is_dataclass(cls):
            return {
                f.name: f.default
                for f in dataclass_fields(cls)
                if f.default is not MISSING
            }
        if is_pydantic(cls):
            return {
                name: info.default
                for name, info in cls.model_fields.items()  # type: ignore[attr-defined]
                if not info.is_required() and info.default_factory is None
            }
        if is_named_tuple(cls):
            return dict(getattr(cls, "_field_defaults", {}))
        return {}

    def _collect_enum_constants(self) -> None:
        cls = self.cls
        for name, member in cls.__members__.items():  # type: ignore[attr-defined]
            if name in self.fields:
                continue
            self.fields[name] = FieldDescriptor(
                name=name,
                owner=cls,
                modifiers=visibility_of(name)
                | Modifier.STATIC
                | Modifier.FINAL
                | Modifier.READONLY,
                type=cls,
                storage_name=name,
                default=member,
            )

    @staticmethod
    def _is_behaviour(value: Any) -> bool:
        return (
            inspect.isfunction(value)
            or isinstance(value, (staticmethod, classmethod, type))
            or inspect.isroutine(value)
            or inspect.ismethoddescriptor(value)
            or inspect.isdatadescriptor(value)
        )

    def _add_field(self, storage_name: str, extra: Modifier, default: Any) -> None:
        name = demangle(self.cls, storage_name)
        modifiers = visibility_of(name) | extra
        if self.frozen and Modifier.STATIC not in extra:
            modifiers |= Modifier.READONLY
        self.fields[storage_name] = FieldDescriptor(
            name=name,
            owner=self.cls,
            modifiers=modifiers,
            type=Any,
            storage_name=storage_name,
            default=default,
        )

    def _add_property(self, storage_name: str, prop: property) -> None:
        name = demangle(self.cls, storage_name)
        modifiers = visibility_of(name) | Modifier.PROPERTY
        if prop.fset is None:
            modifiers |= Modifier.READONLY
        if getattr(prop, "__isabstractmethod__", False):
            modifiers |= Modifier.ABSTRACT
        returns: Annotation = Any
        if prop.fget is not None:
            returns = self._function_hints(prop.fget).get("return", Any)
        self.fields[storage_name] = FieldDescriptor(
            name=name,
            owner=self.cls,
            modifiers=modifiers,
            type=returns,
            storage_name=storage_name,
        )

    # Methods and constructors

    def collect_methods(self) -> None:
        cls = self.cls
        for storage_name, value in vars(cls).items():
            if storage_name in ("__init__", "__new__", "__init_subclass__", "__class_getitem__"):
                continue
            if self._skip(storage_name):
                continue
            if isinstance(value, classmethod) and is_constructor(value):
                self.constructors.append(
                    self._build(ConstructorDescriptor, storage_name, value.__func__, Modifier.NONE, 1)
                )
            elif isinstance(value, staticmethod):
                self.methods.append(
                    self._build(MethodDescriptor, storage_name, value.__func__, Modifier.STATIC, 0)
                )
            elif isinstance(value, classmethod):
                self.methods.append(
                    self._build(MethodDescriptor, storage_name, value.__func__, Modifier.CLASS, 1)
                )
            elif inspect.isfunction(value):
                self.methods.append(
                    self._build(MethodDescriptor, storage_name, value, Modifier.NONE, 1)
                )

    def collect_primary_constructor(self) -> None:
        cls = self.cls
        own_init = cls.__dict__.get("__init__")
        if is_pydantic(cls):
            self.constructors.insert(0, self._pydantic_constructor(own_init is None))
            return
        init: Any = cls.__init__
        implicit = own_init is None
        if is_named_tuple(cls) or not inspect.isfunction(init):
            # Instances are built in __new__, so its signature is the constructor's
            init = cls.__new__
            implicit = "__new__" not in cls.__dict__
        if inspect.isfunction(init):
            descriptor = self._build(
                ConstructorDescriptor, "__init__", init, Modifier.NONE, 1, implicit=implicit
            )
        else:
            descriptor = self._default_constructor()
        self.constructors.insert(0, descriptor)

    def _default_constructor(self) -> ConstructorDescriptor:
        """Constructor of a class whose __init__ and __new__ are both builtins.

        Builtin bases such as ``float`` publish a text signature that
        ``inspect`` can read; ``object`` gives the no-argument constructor.
        """
        cls = self.cls
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            signature = inspect.Signature()
        parameters = tuple(
            ParameterDescriptor(
                name=p.name,
                annotation=Any if p.annotation is EMPTY else p.annotation,
                kind=p.kind,
                default=p.default,
            )
            for p in signature.parameters.values()
        )
        return ConstructorDescriptor(
            name="__init__",
            owner=cls,
            modifiers=Modifier.PUBLIC | Modifier.SYNTHETIC,
            parameters=parameters,
            return_type=cls,
            storage_name="__init__",
            implicit=True,
        )

    def _pydantic_constructor(self, implicit: bool) -> ConstructorDescriptor:
        cls = self.cls
        hints = _resolve_hints(cls, inspect.get_annotations(cls))
        parameters = []
        for name, info in cls.model_fields.items():  # type: ignore[attr-defined]
            annotation = hints.get(name, info.annotation)
            parameters.append(
                ParameterDescriptor(
                    name=info.alias or name,
                    annotation=annotation if annotation is not None else Any,
                    kind=inspect.Parameter.KEYWORD_ONLY,
                    default=EMPTY if info.is_required() else info.get_default(call_default_factory=False),
                )
            )
        return ConstructorDescriptor(
            name="__init__",
            owner=cls,
            modifiers=Modifier.PUBLIC | Modifier.SYNTHETIC,
            parameters=tuple(parameters),
            return_type=cls,
            storage_name="__init__",
            implicit=implicit,
        )

    @staticmethod
    def _function_hints(fn: Callable[..., Any]) -> dict[str, Any]:
        return _resolve_hints(fn, inspect.get_annotations(fn))

    def _build(
        self,
        factory: type[D],
        storage_name: str,
        fn: Callable[..., Any],
        extra: Modifier,
        skip: int,
        **kwargs: Any,
    ) -> D:
        name = demangle(self.cls, storage_name)
        modifiers = visibility_of(name) | extra
        if factory is ConstructorDescriptor:
            modifiers &= ~Modifier.SPECIAL
        if getattr(fn, "__isabstractmethod__", False):
            modifiers |= Modifier.ABSTRACT
        if getattr(fn, "__final__", False):
            modifiers |= Modifier.FINAL
        if inspect.iscoroutinefunction(fn):
            modifiers |= Modifier.ASYNC
        if _is_synthetic(fn):
            modifiers |= Modifier.SYNTHETIC

        hints = (
            self._function_hints(fn)
            if self.settings.resolve_annotations
            else dict(inspect.get_annotations(fn))
        )
        try:
            signature = inspect.signature(fn)
        except (TypeError, ValueError):
            logger.warning("No signature available for %s.%s", self.cls.__qualname__, name)
            signature = inspect.Signature()
        parameters = tuple(
            ParameterDescriptor(
                name=p.name,
                annotation=hints.get(p.name, Any),
                kind=p.kind,
                default=p.default,
            )
            for p in list(signature.parameters.values())[skip:]
        )
        returns = hints.get("return", Any)
        if factory is ConstructorDescriptor and name == "__init__":
            returns = self.cls
        return factory(
            name=name,
            owner=self.cls,
            modifiers=modifiers,
            parameters=parameters,
            return_type=returns,
            storage_name=storage_name,
            function=fn,
            **kwargs,
        )


def _type_modifiers(cls: type, interface: bool, frozen: bool) -> Modifier:
    modifiers = visibility_of(cls.__name__) & ~Modifier.SPECIAL
    if interface or inspect.isabstract(cls):
        modifiers |= Modifier.ABSTRACT
    if cls.__dict__.get("__final__", False) or (is_enum(cls) and len(cls.__members__) > 0):  # type: ignore[attr-defined]
        modifiers |= Modifier.FINAL
    if frozen:
        modifiers |= Modifier.READONLY
    return modifiers


def _type_kind(cls: type, interface: bool) -> TypeKind:
    if is_enum(cls):
        return TypeKind.ENUM
    if interface:
        return TypeKind.INTERFACE
    if is_record(cls):
        return TypeKind.RECORD
    return TypeKind.CLASS


def _superclass(cls: type, interface: bool) -> type | None:
    if cls is object or interface:
        return None
    for base in cls.__bases__:
        if not is_opaque(base) and not is_interface(base):
            return base
    return object


def describe(
    cls: type,
    settings: ReflectionSettings | None = None,
    resolve: Callable[[type], TypeDescriptor] | None = None,
) -> TypeDescriptor:
    """Build the descriptor of a class.

    Args:
        cls: Class to describe.
        settings: Reflection settings; the process defaults when None.
        resolve: Callable producing descriptors for ancestor classes. Defaults
            to recursive ``describe``; registries pass their own lookup so
            ancestors are shared and cached.

    Returns:
        Immutable TypeDescriptor of the class.

    Raises:
        TypeError: If ``cls`` is not a class.
    """
    if not isinstance(cls, type):
        raise TypeError(f"Expected a class, got {type(cls).__name__}")
    if settings is None:
        from typemirror.config import get_settings

        settings = get_settings()
    if resolve is None:

        def resolve(base: type) -> TypeDescriptor:
            return describe(base, settings)

    builder = _TypeBuilder(cls, settings)
    builder.collect_fields()
    builder.collect_methods()
    builder.collect_primary_constructor()

    interface = is_interface(cls)
    ancestors = tuple(resolve(base) for base in cls.__mro__[1:] if not is_opaque(base))
    descriptor = TypeDescriptor(
        cls=cls,
        name=cls.__name__,
        qualified_name=qualified_name_of(cls),
        module=cls.__module__,
        type_id=TypeId.of(cls),
        kind=_type_kind(cls, interface),
        modifiers=_type_modifiers(cls, interface, builder.frozen),
        superclass=_superclass(cls, interface),
        interfaces=tuple(b for b in cls.__bases__ if is_interface(b)),
        declared_fields=tuple(builder.fields.values()),
        declared_methods=tuple(builder.methods),
        constructors=tuple(builder.constructors),
        ancestors=ancestors,
    )
    logger.debug(
        "Described %s: %d fields, %d methods, %d constructors",
        descriptor.qualified_name,
        len(descriptor.declared_fields),
        len(descriptor.declared_methods),
        len(descriptor.constructors),
    )
    return descriptor
