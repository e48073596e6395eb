"""Accessor layer: read and write fields, invoke methods and constructors.

Usage:
    person_type = type_of(person)

    # Field access
    name = FieldAccessor(person_type.field("name")).get(person)

    # Private members need explicit opt-in
    age = FieldAccessor(person_type.declared_field("__age"))
    age.set_accessible(True)
    age.set(person, 43)

    # Invocation
    greet = MethodInvoker(person_type.method("greet", str))
    greeting = greet.invoke(person, "Bob")

    # Instantiation
    make = ConstructorInvoker(person_type.constructor(str, int))
    other = make.new_instance("Carol", 29)
"""

from __future__ import annotations

import inspect
import logging
import warnings
from typing import Any, Generic, TypeVar, overload

from typemirror.config import ReflectionSettings, get_settings
from typemirror.core.descriptor import (
    ConstructorDescriptor,
    FieldDescriptor,
    MemberDescriptor,
    MethodDescriptor,
    Modifier,
    format_annotation,
    is_instance_of,
    is_interface,
)
from typemirror.core.descriptor.operations import is_enum, is_named_tuple
from typemirror.core.errors import (
    IllegalAccessError,
    IllegalArgumentError,
    InstantiationError,
    InvocationTargetError,
)

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=MemberDescriptor)
M = TypeVar("M", bound=MethodDescriptor)


class Accessor(Generic[D]):
    """Base class binding a member descriptor to access checks.

    Accessibility is per accessor, not per descriptor: descriptors are shared
    and immutable, so ``set_accessible`` only affects this accessor.
    """

    __slots__ = ("_descriptor", "_settings", "_accessible")

    def __init__(self, descriptor: D, settings: ReflectionSettings | None = None) -> None:
        self._descriptor = descriptor
        self._settings = settings
        self._accessible = False

    @property
    def descriptor(self) -> D:
        """Return the member descriptor this accessor works on."""
        return self._descriptor

    @property
    def settings(self) -> ReflectionSettings:
        return self._settings if self._settings is not None else get_settings()

    def set_accessible(self, flag: bool = True) -> None:
        """Allow or disallow access to non-public members through this accessor."""
        self._accessible = flag

    def is_accessible(self) -> bool:
        """Check if this accessor may touch its member right now."""
        return self._accessible or not self._is_restricted()

    def _is_restricted(self) -> bool:
        settings = self.settings
        if not settings.strict_access:
            return False
        modifiers = self._descriptor.modifiers
        if Modifier.PRIVATE in modifiers:
            return True
        return settings.enforce_protected and Modifier.PROTECTED in modifiers

    def _check_access(self) -> None:
        if not self.is_accessible():
            raise IllegalAccessError(
                f"Cannot access non-public member {self._descriptor.qualified_name}; "
                f"call set_accessible(True) first"
            )

    def _check_target(self, target: Any, allow_none: bool) -> None:
        owner = self._descriptor.owner
        if target is None:
            if allow_none:
                return
            raise IllegalArgumentError(
                f"{self._descriptor.qualified_name} needs a target instance of {owner.__qualname__}"
            )
        if target is owner and allow_none:
            return
        if not isinstance(target, owner):
            raise IllegalArgumentError(
                f"Target {type(target).__qualname__} is not an instance of {owner.__qualname__}"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._descriptor.qualified_name})"


class FieldAccessor(Accessor[FieldDescriptor]):
    """Reads and writes one field."""

    __slots__ = ()

    def _holder(self, target: Any) -> Any:
        descriptor = self._descriptor
        if descriptor.is_static or target is None:
            return descriptor.owner
        return target

    def get(self, target: Any = None) -> Any:
        """Read the field value.

        Args:
            target: Instance to read from; ignored for static fields.

        Returns:
            Current value.

        Raises:
            IllegalAccessError: If the field is not accessible.
            IllegalArgumentError: If the target is missing or of the wrong type.
            InvocationTargetError: If a property getter raises.
            AttributeError: If the instance has no value stored for the field.
        """
        descriptor = self._descriptor
        self._check_access()
        self._check_target(target, allow_none=descriptor.is_static)
        holder = self._holder(target)
        if Modifier.PROPERTY in descriptor.modifiers:
            try:
                return getattr(holder, descriptor.storage_name)
            except Exception as exc:
                raise InvocationTargetError(descriptor, exc) from exc
        return getattr(holder, descriptor.storage_name)

    def set(self, target: Any, value: Any) -> None:
        """Write the field value.

        Readonly storage (frozen records, ``Final`` fields) is only written
        through an accessible accessor, and bypasses the class's own
        ``__setattr__``. Read-only properties, enum constants and NamedTuple
        fields are never writable.

        Args:
            target: Instance to write to; None for static fields.
            value: New value.

        Raises:
            IllegalAccessError: If the field is not accessible or not writable.
            IllegalArgumentError: If the target is wrong or the value does not
                fit the declared type.
            InvocationTargetError: If a property setter raises.
        """
        descriptor = self._descriptor
        self._check_access()
        self._check_target(target, allow_none=descriptor.is_static)
        modifiers = descriptor.modifiers

        if Modifier.PROPERTY in modifiers and Modifier.READONLY in modifiers:
            raise IllegalAccessError(f"Property {descriptor.qualified_name} has no setter")
        if is_enum(descriptor.owner) and descriptor.is_static:
            raise IllegalAccessError(f"Enum constant {descriptor.qualified_name} cannot be set")
        if self.settings.check_types and not is_instance_of(value, descriptor.type):
            raise IllegalArgumentError(
                f"Cannot set {descriptor.qualified_name} of type "
                f"{format_annotation(descriptor.type)} to {type(value).__qualname__}"
            )

        holder = self._holder(target)
        if Modifier.PROPERTY in modifiers:
            try:
                setattr(holder, descriptor.storage_name, value)
            except Exception as exc:
                raise InvocationTargetError(descriptor, exc) from exc
            return

        if Modifier.READONLY in modifiers:
            if is_named_tuple(descriptor.owner):
                raise IllegalAccessError(
                    f"Cannot set {descriptor.qualified_name}: tuple-backed records are immutable"
                )
            if not self._accessible:
                raise IllegalAccessError(
                    f"Cannot set readonly field {descriptor.qualified_name}; "
                    f"call set_accessible(True) to override"
                )
            warnings.warn(
                f"Overwriting readonly field {descriptor.qualified_name}",
                RuntimeWarning,
                stacklevel=2,
            )
            if isinstance(holder, type):
                type.__setattr__(holder, descriptor.storage_name, value)
            else:
                object.__setattr__(holder, descriptor.storage_name, value)
            return

        setattr(holder, descriptor.storage_name, value)


class _Invoker(Accessor[M]):
    __slots__ = ()

    def _bind(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        descriptor = self._descriptor
        try:
            bound = descriptor.to_signature().bind(*args, **kwargs)
        except TypeError as exc:
            raise IllegalArgumentError(f"{descriptor.qualified_name}: {exc}") from exc
        if not self.settings.check_types:
            return
        params = {p.name: p for p in descriptor.parameters}
        for name, value in bound.arguments.items():
            param = params[name]
            if param.is_variadic:
                continue
            if not is_instance_of(value, param.annotation):
                raise IllegalArgumentError(
                    f"{descriptor.qualified_name}: argument {name!r} expects "
                    f"{format_annotation(param.annotation)}, got {type(value).__qualname__}"
                )

    def _call(self, fn: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            raise InvocationTargetError(self._descriptor, exc) from exc


class MethodInvoker(_Invoker[MethodDescriptor]):
    """Invokes one method.

    Instance methods dispatch on the target, so an override in the target's
    class is the one that runs.
    """

    __slots__ = ()

    def _resolve(self, target: Any) -> Any:
        descriptor = self._descriptor
        modifiers = descriptor.modifiers
        if Modifier.ABSTRACT in modifiers and target is None:
            raise IllegalArgumentError(f"Cannot invoke abstract {descriptor.qualified_name}")
        if Modifier.STATIC in modifiers and descriptor.function is not None:
            return descriptor.function
        holder = descriptor.owner if target is None else target
        return getattr(holder, descriptor.storage_name)

    def invoke(self, target: Any, *args: Any, **kwargs: Any) -> Any:
        """Call the method.

        Coroutine methods return their coroutine unawaited; see
        ``invoke_async``.

        Args:
            target: Instance to call on; None for static and class methods.
            *args: Positional arguments.
            **kwargs: Keyword arguments.

        Returns:
            The method's return value.

        Raises:
            IllegalAccessError: If the method is not accessible.
            IllegalArgumentError: If the target or the arguments do not fit.
            InvocationTargetError: If the method raises.
        """
        descriptor = self._descriptor
        self._check_access()
        static = Modifier.STATIC in descriptor.modifiers or Modifier.CLASS in descriptor.modifiers
        self._check_target(target, allow_none=static)
        self._bind(args, kwargs)
        fn = self._resolve(target)
        logger.debug("Invoking %s", descriptor.qualified_name)
        return self._call(fn, args, kwargs)

    async def invoke_async(self, target: Any, *args: Any, **kwargs: Any) -> Any:
        """Call the method and await its result if it is awaitable.

        Raises:
            InvocationTargetError: If the method or the awaited result raises.
        """
        result = self.invoke(target, *args, **kwargs)
        if not inspect.isawaitable(result):
            return result
        try:
            return await result
        except Exception as exc:
            raise InvocationTargetError(self._descriptor, exc) from exc


class ConstructorInvoker(_Invoker[ConstructorDescriptor]):
    """Creates instances through one constructor."""

    __slots__ = ()

    def _check_instantiable(self) -> None:
        owner = self._descriptor.owner
        if is_interface(owner):
            raise InstantiationError(f"Cannot instantiate interface {owner.__qualname__}")
        if inspect.isabstract(owner):
            raise InstantiationError(f"Cannot instantiate abstract class {owner.__qualname__}")
        if is_enum(owner):
            raise InstantiationError(f"Cannot instantiate enum {owner.__qualname__}")

    def new_instance(self, *args: Any, **kwargs: Any) -> Any:
        """Create an instance.

        Args:
            *args: Positional constructor arguments.
            **kwargs: Keyword constructor arguments.

        Returns:
            The new instance.

        Raises:
            InstantiationError: For abstract classes, interfaces and enums.
            IllegalAccessError: If the constructor is not accessible.
            IllegalArgumentError: If the arguments do not fit.
            InvocationTargetError: If the constructor raises.
        """
        descriptor = self._descriptor
        self._check_instantiable()
        self._check_access()
        self._bind(args, kwargs)
        owner = descriptor.owner
        factory = owner if descriptor.is_primary else getattr(owner, descriptor.storage_name)
        logger.debug("Instantiating %s via %s", owner.__qualname__, descriptor.name)
        return self._call(factory, args, kwargs)


@overload
def accessor_for(
    descriptor: ConstructorDescriptor, settings: ReflectionSettings | None = None
) -> ConstructorInvoker: ...


@overload
def accessor_for(
    descriptor: MethodDescriptor, settings: ReflectionSettings | None = None
) -> MethodInvoker: ...


@overload
def accessor_for(
    descriptor: FieldDescriptor, settings: ReflectionSettings | None = None
) -> FieldAccessor: ...


def accessor_for(
    descriptor: MemberDescriptor, settings: ReflectionSettings | None = None
) -> Accessor[Any]:
    """Create the matching accessor for a member descriptor.

    Args:
        descriptor: Field, method or constructor descriptor.
        settings: Settings for the accessor; process-wide settings when None.

    Returns:
        FieldAccessor, MethodInvoker or ConstructorInvoker.

    Raises:
        TypeError: For unknown descriptor types.
    """
    # Constructor before method: ConstructorDescriptor subclasses MethodDescriptor
    if isinstance(descriptor, ConstructorDescriptor):
        return ConstructorInvoker(descriptor, settings)
    if isinstance(descriptor, MethodDescriptor):
        return MethodInvoker(descriptor, settings)
    if isinstance(descriptor, FieldDescriptor):
        return FieldAccessor(descriptor, settings)
    raise TypeError(f"No accessor for {type(descriptor).__name__}")
