"""Type registry, decorator, and name resolution.

Usage:
    @reflect
    class Person:
        name: str

    descriptor = type_of(Person("Ada"))
    same = for_name("myapp.models.Person")

    # Private registry with its own settings
    registry = TypeRegistry(ReflectionSettings(auto_register=False))
    registry.register(Person)
"""

from __future__ import annotations

import builtins
import importlib
import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any, TypeVar, overload

from typemirror.config import ReflectionSettings, get_settings
from typemirror.core.descriptor import TypeDescriptor, describe
from typemirror.core.errors import ClassNotFoundError, TypeNotRegisteredError
from typemirror.core.identity import TypeId, qualified_name_of

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Process-local registry mapping types to descriptors and stable type IDs.

    Maintains bidirectional mapping between classes and their type IDs.
    Deterministic IDs ensure the same code produces the same IDs in every
    process. All mutation happens under a re-entrant lock, so descriptors of
    ancestor types can be registered while a subtype is being registered.
    """

    def __init__(self, settings: ReflectionSettings | None = None) -> None:
        """Initialize empty type registry.

        Args:
            settings: Settings for this registry; the process-wide settings
                (read at use time) when None.
        """
        self._settings = settings
        self._by_type: dict[type, TypeDescriptor] = {}
        self._by_type_id: dict[TypeId, type] = {}
        self._lock = threading.RLock()

    @property
    def settings(self) -> ReflectionSettings:
        return self._settings if self._settings is not None else get_settings()

    def register(self, cls: type) -> TypeDescriptor:
        """Register a type and return its descriptor.

        Registering the same class again returns the existing descriptor.
        Reflected ancestor classes are registered along the way.

        Args:
            cls: Class to register.

        Returns:
            Descriptor of the class.

        Raises:
            TypeError: If ``cls`` is not a class.
            RuntimeError: If the type ID collides with another registered type.
        """
        if not isinstance(cls, type):
            raise TypeError(f"Expected a class, got {type(cls).__name__}")
        with self._lock:
            existing_descriptor = self._by_type.get(cls)
            if existing_descriptor is not None:
                return existing_descriptor

            type_id = TypeId.of(cls)
            if type_id in self._by_type_id:
                existing = self._by_type_id[type_id]
                raise RuntimeError(
                    f"Type ID collision: {cls} and {existing} hash to {type_id}"
                )

            descriptor = describe(cls, self.settings, resolve=self.register)
            self._by_type[cls] = descriptor
            self._by_type_id[type_id] = cls
            logger.debug("Registered %s as %s", descriptor.qualified_name, type_id)
            return descriptor

    def unregister(self, cls: type) -> bool:
        """Forget a type. Returns True if it was registered."""
        with self._lock:
            descriptor = self._by_type.pop(cls, None)
            if descriptor is None:
                return False
            del self._by_type_id[descriptor.type_id]
            return True

    def clear(self) -> None:
        """Forget every registered type."""
        with self._lock:
            self._by_type.clear()
            self._by_type_id.clear()

    def get(self, cls: type) -> TypeDescriptor | None:
        """Get the descriptor of a registered type.

        Args:
            cls: Class to look up.

        Returns:
            Descriptor if registered, None otherwise.
        """
        return self._by_type.get(cls)

    def get_by_id(self, type_id: TypeId | int) -> TypeDescriptor | None:
        """Get a registered descriptor by type ID.

        Args:
            type_id: TypeId or its integer value.

        Returns:
            Descriptor if found, None otherwise.
        """
        if isinstance(type_id, int):
            type_id = TypeId(type_id)
        cls = self._by_type_id.get(type_id)
        return self._by_type.get(cls) if cls is not None else None

    def get_by_name(self, qualified_name: str) -> TypeDescriptor | None:
        """Get a registered descriptor by ``module.QualName``."""
        return self.get_by_id(TypeId.from_name(qualified_name))

    def is_registered(self, cls: type) -> bool:
        """Check if a class is registered."""
        return cls in self._by_type

    def describe(self, cls: type) -> TypeDescriptor:
        """Get the descriptor of a type, registering it when allowed.

        Args:
            cls: Class to describe.

        Returns:
            Descriptor of the class.

        Raises:
            TypeNotRegisteredError: If the type is unknown and
                ``auto_register`` is off.
        """
        descriptor = self._by_type.get(cls)
        if descriptor is not None:
            return descriptor
        if not self.settings.auto_register:
            raise TypeNotRegisteredError(f"Type {qualified_name_of(cls)} is not registered")
        return self.register(cls)

    def for_name(self, name: str, checked: bool = True) -> TypeDescriptor | None:
        """Resolve a type from its name and return its descriptor.

        Registered types are matched first. Otherwise the longest importable
        module prefix of ``name`` is imported and the rest is followed as an
        attribute path. A name without a module resolves against builtins.

        Args:
            name: ``module.QualName`` (``pkg.mod.Outer.Inner``) or a builtin name.
            checked: If True, raise when the name does not resolve.

        Returns:
            Descriptor of the resolved class, or None if unresolved and unchecked.

        Raises:
            ClassNotFoundError: If the name does not resolve and checked.
            TypeNotRegisteredError: If it resolves to a type that is not
                registered and ``auto_register`` is off.
        """
        descriptor = self.get_by_name(name)
        if descriptor is not None:
            return descriptor
        cls = _import_class(name)
        if cls is None:
            if checked:
                raise ClassNotFoundError(name)
            return None
        return self.describe(cls)

    def subtypes_of(self, cls: type) -> list[TypeDescriptor]:
        """Registered proper subtypes of a class."""
        with self._lock:
            return [d for t, d in self._by_type.items() if t is not cls and issubclass(t, cls)]

    def implementors(self, interface: type) -> list[TypeDescriptor]:
        """Registered types that implement an interface, directly or by inheritance."""
        with self._lock:
            return [d for d in self._by_type.values() if interface in d.all_interfaces()]

    def __contains__(self, cls: object) -> bool:
        return cls in self._by_type

    def __len__(self) -> int:
        return len(self._by_type)

    def __iter__(self) -> Iterator[TypeDescriptor]:
        with self._lock:
            return iter(list(self._by_type.values()))


def _import_class(name: str) -> type | None:
    parts = name.split(".")
    if not all(parts):
        return None
    if len(parts) == 1:
        obj = getattr(builtins, name, None)
        return obj if isinstance(obj, type) else None

    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # Only a missing prefix means "try a shorter module name"
            if exc.name and (module_name == exc.name or module_name.startswith(f"{exc.name}.")):
                continue
            raise
        obj: Any = module
        for attr in parts[split:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                break
        if isinstance(obj, type):
            return obj
        logger.debug("%s resolved in %s but is not a class", name, module_name)
        return None
    return None


# Module-level registry instance
_registry = TypeRegistry()


def get_registry() -> TypeRegistry:
    """Access the global type registry.

    Returns:
        The process-local TypeRegistry instance.
    """
    return _registry


T = TypeVar("T", bound=type)


@overload
def reflect(cls: T) -> T: ...


@overload
def reflect(
    cls: None = None, *, registry: TypeRegistry | None = None
) -> Callable[[T], T]: ...


def reflect(
    cls: type | None = None, *, registry: TypeRegistry | None = None
) -> type | Callable[[type], type]:
    """Register a class for reflection and attach its descriptor.

    Supports three forms:
        @reflect                      # bare decorator
        @reflect()                    # parenthesized, no args
        @reflect(registry=my_reg)     # factory with args

    The descriptor is stored on the class as ``__type_descriptor__``.

    Args:
        cls: The class to register, or None if called with arguments.
        registry: Registry to use instead of the global one.

    Returns:
        Decorated class or decorator function.

    Note:
        Apply @reflect AFTER @dataclass:

        >>> @reflect
        ... @dataclass
        ... class Point:
        ...     x: int
    """

    def decorator(c: type) -> type:
        descriptor = (registry or _registry).register(c)
        c.__type_descriptor__ = descriptor  # type: ignore[attr-defined]
        return c

    if cls is None:
        return decorator
    return decorator(cls)


def type_of(obj: Any) -> TypeDescriptor:
    """Descriptor of an object's runtime class from the global registry."""
    return _registry.describe(type(obj))


@overload
def for_name(name: str) -> TypeDescriptor: ...


@overload
def for_name(name: str, checked: bool) -> TypeDescriptor | None: ...


def for_name(name: str, checked: bool = True) -> TypeDescriptor | None:
    """Resolve a type by name through the global registry."""
    return _registry.for_name(name, checked)
