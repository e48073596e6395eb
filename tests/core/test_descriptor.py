"""Tests for descriptor construction.

Critical Invariants:
- Declared members include every visibility; public lookups never return private members
- Overrides replace inherited members in fields()/methods()
- Constructors are never inherited as named constructors
"""

import inspect
import json
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Final, NamedTuple

import pytest
from pydantic import BaseModel, ConfigDict

from typemirror import (
    MemberDescriptor,
    MemberKind,
    Modifier,
    NoSuchFieldError,
    NoSuchMethodError,
    ReflectionSettings,
    TypeKind,
    constructor,
    describe,
)

# Fields


def test_declared_fields_include_every_visibility(person_cls):
    """CRITICAL: declared fields report private and static members too.

    Why: Reflection must see everything declared, visibility only gates access.
    """
    descriptor = describe(person_cls)

    names = [f.name for f in descriptor.declared_fields]

    assert names == ["species", "name", "__age", "initials"]


def test_private_field_uses_mangled_storage(person_cls):
    age = describe(person_cls).declared_field("__age")

    assert age.modifiers == Modifier.PRIVATE
    assert age.storage_name == "_Person__age"
    assert age.type is int


def test_declared_field_accepts_storage_name(person_cls):
    descriptor = describe(person_cls)

    assert descriptor.declared_field("_Person__age") is descriptor.declared_field("__age")


def test_public_fields_exclude_private(person_cls):
    """fields() only returns public members."""
    names = {f.name for f in describe(person_cls).fields()}

    assert names == {"species", "name", "initials"}


def test_field_lookup_of_private_field_raises(person_cls):
    descriptor = describe(person_cls)

    with pytest.raises(NoSuchFieldError, match="__age"):
        descriptor.field("__age")
    assert descriptor.field("__age", checked=False) is None


def test_class_var_is_static_with_default(person_cls):
    species = describe(person_cls).field("species")

    assert species.is_static
    assert species.type is str
    assert species.default == "human"


def test_instance_field_without_default(person_cls):
    name = describe(person_cls).field("name")

    assert not name.is_static
    assert not name.has_default


def test_property_is_readonly_field(person_cls):
    initials = describe(person_cls).field("initials")

    assert Modifier.PROPERTY in initials.modifiers
    assert initials.is_readonly
    assert initials.type is str


def test_property_with_setter_is_writable():
    class Temperature:
        def __init__(self) -> None:
            self._celsius = 0.0

        @property
        def celsius(self) -> float:
            return self._celsius

        @celsius.setter
        def celsius(self, value: float) -> None:
            self._celsius = value

    celsius = describe(Temperature).field("celsius")

    assert Modifier.PROPERTY in celsius.modifiers
    assert not celsius.is_readonly


def test_unannotated_class_attribute_is_static_field():
    class Counter:
        count = 0
        _cache = {}

    descriptor = describe(Counter)

    assert descriptor.declared_field("count").modifiers == Modifier.PUBLIC | Modifier.STATIC
    assert descriptor.declared_field("_cache").modifiers == Modifier.PROTECTED | Modifier.STATIC


def test_slots_are_instance_fields():
    class Slotted:
        __slots__ = ("x", "_y")

    descriptor = describe(Slotted)

    assert [f.name for f in descriptor.declared_fields] == ["x", "_y"]
    assert not descriptor.declared_field("x").is_static
    assert Modifier.PROTECTED in descriptor.declared_field("_y").modifiers


def test_final_annotation_is_readonly():
    class Limits:
        MAX: Final[int] = 10

    limit = describe(Limits).field("MAX")

    assert Modifier.FINAL in limit.modifiers
    assert limit.is_readonly
    assert limit.type is int


def test_unresolvable_annotation_is_kept_as_string(caplog):
    """Forward references that cannot be resolved degrade, they don't fail."""

    class Dangling:
        other: "DoesNotExist"  # noqa: F821

    with caplog.at_level("WARNING", logger="typemirror.core.descriptor.core"):
        descriptor = describe(Dangling)

    assert descriptor.field("other").type == "DoesNotExist"
    assert "Could not resolve annotations" in caplog.text


def test_qualifiers_survive_unresolvable_neighbours(caplog):
    """CRITICAL: One bad forward reference must not erase ClassVar/Final on the others.

    Why: Losing the qualifier turns a class variable into an instance field
    and a Final constant into a writable one.
    """

    class Mixed:
        count: "ClassVar[int]" = 0
        limit: "Final[int]" = 3
        registry: "ClassVar[Missing]"  # noqa: F821
        other: "DoesNotExist"  # noqa: F821

    with caplog.at_level("WARNING", logger="typemirror.core.descriptor.core"):
        descriptor = describe(Mixed)

    count = descriptor.field("count")
    assert Modifier.STATIC in count.modifiers
    assert count.type is int
    limit = descriptor.field("limit")
    assert limit.is_readonly
    assert limit.type is int
    registry = descriptor.field("registry")
    assert Modifier.STATIC in registry.modifiers
    assert registry.type == "Missing"
    assert descriptor.field("other").type == "DoesNotExist"
    assert "Could not resolve annotations" in caplog.text


def test_unresolved_annotations_when_resolution_disabled():
    class Plain:
        value: "int"

    descriptor = describe(Plain, ReflectionSettings(resolve_annotations=False))

    assert descriptor.field("value").type == "int"


def test_every_member_has_a_kind(person_cls):
    kinds = {m.kind for m in describe(person_cls).members()}

    assert kinds == set(MemberKind)


def test_member_descriptor_base_is_abstract(person_cls):
    with pytest.raises(TypeError, match="abstract"):
        MemberDescriptor(name="x", owner=person_cls, modifiers=Modifier.PUBLIC)


# Methods


def test_method_modifiers(person_cls):
    descriptor = describe(person_cls)

    assert Modifier.STATIC in descriptor.declared_method("average_age").modifiers
    assert Modifier.CLASS in descriptor.declared_method("anonymous").modifiers
    assert Modifier.ASYNC in descriptor.declared_method("fetch_name").modifiers
    assert descriptor.declared_method("__birthday").modifiers == Modifier.PRIVATE


def test_method_lookup_with_parameter_types(person_cls):
    descriptor = describe(person_cls)

    greet = descriptor.method("greet", str)

    assert greet.name == "greet"
    assert greet.return_type is str
    assert [p.name for p in greet.parameters] == ["other"]


def test_method_lookup_with_wrong_types_raises(person_cls):
    with pytest.raises(NoSuchMethodError, match=r"greet\(int\)"):
        describe(person_cls).method("greet", int)


def test_public_method_lookup_skips_private(person_cls):
    descriptor = describe(person_cls)

    assert descriptor.method("__birthday", checked=False) is None
    assert descriptor.declared_method("__birthday") is not None


def test_variadic_parameters_are_not_parameter_types(person_cls):
    average = describe(person_cls).declared_method("average_age")

    assert average.parameters[0].kind is inspect.Parameter.VAR_POSITIONAL
    assert average.parameter_types == ()


def test_method_signature_rendering(person_cls):
    descriptor = describe(person_cls)

    assert (
        descriptor.declared_method("average_age").signature()
        == "public static float average_age(*ages: int)"
    )
    assert descriptor.method("greet").signature() == "public str greet(other: str)"


def test_special_methods_hidden_by_default():
    class WithRepr:
        def __repr__(self) -> str:
            return "WithRepr()"

    assert describe(WithRepr).declared_methods == ()


def test_special_methods_reported_when_enabled():
    class WithRepr:
        def __repr__(self) -> str:
            return "WithRepr()"

    settings = ReflectionSettings(include_special_members=True)
    method = describe(WithRepr, settings).declared_method("__repr__")

    assert Modifier.SPECIAL in method.modifiers


def test_dataclass_generated_methods_are_synthetic():
    @dataclass
    class Generated:
        value: int

    settings = ReflectionSettings(include_special_members=True)
    descriptor = describe(Generated, settings)

    assert Modifier.SYNTHETIC in descriptor.declared_method("__eq__").modifiers
    assert Modifier.SYNTHETIC in descriptor.constructor().modifiers


def test_final_method_and_class():
    @typing.final
    class Sealed:
        @typing.final
        def locked(self) -> None: ...

    descriptor = describe(Sealed)

    assert Modifier.FINAL in descriptor.modifiers
    assert Modifier.FINAL in descriptor.method("locked").modifiers


# Constructors


def test_primary_constructor(person_cls):
    descriptor = describe(person_cls)

    primary = descriptor.constructor()

    assert primary.is_primary
    assert primary.kind is MemberKind.CONSTRUCTOR
    assert primary.parameter_types == (str, int)
    assert descriptor.constructor(str, int) is primary
    assert primary.signature() == "public Person(name: str, age: int)"


def test_constructor_lookup_with_wrong_types_raises(person_cls):
    with pytest.raises(NoSuchMethodError):
        describe(person_cls).constructor(int)


def test_named_constructor(zoo):
    *_, bird_cls = zoo
    descriptor = describe(bird_cls)

    walking = descriptor.constructor(name="walking")

    assert not walking.is_primary
    assert walking.parameter_types == (str,)
    assert [c.name for c in descriptor.constructors] == ["__init__", "walking"]
    assert descriptor.declared_method("walking", checked=False) is None


def test_constructor_decorator_accepts_classmethod():
    class Factory:
        @constructor
        @classmethod
        def build(cls) -> "Factory":
            return cls()

    assert describe(Factory).constructor(name="build").name == "build"


def test_constructor_decorator_rejects_staticmethod():
    with pytest.raises(TypeError, match="@constructor"):
        constructor(staticmethod(lambda: None))


def test_inherited_initializer_is_implicit_constructor(zoo):
    """Constructors are not inherited: subclasses get their own implicit one."""
    _, _, animal_cls, goat_cls, _ = zoo

    primary = describe(goat_cls).constructor()

    assert primary.owner is goat_cls
    assert primary.implicit
    assert primary.parameter_types == (str,)
    assert not describe(animal_cls).constructor().implicit


def test_default_constructor_for_plain_class():
    class Empty:
        pass

    primary = describe(Empty).constructor()

    assert primary.parameters == ()
    assert Modifier.SYNTHETIC in primary.modifiers


def test_constructor_parameters_from_new():
    class Token:
        def __new__(cls, value: str, *, strict: bool = False) -> "Token":
            return super().__new__(cls)

    primary = describe(Token).constructor()

    assert [p.name for p in primary.parameters] == ["value", "strict"]
    assert primary.parameter_types == (str, bool)
    assert primary.return_type is Token
    assert not primary.implicit


def test_constructor_parameters_from_builtin_base():
    class Meters(float):
        pass

    primary = describe(Meters).constructor()

    assert [p.kind for p in primary.parameters] == [inspect.Parameter.POSITIONAL_ONLY]
    assert primary.implicit


# Hierarchy


def test_superclass_and_interfaces(zoo):
    eating, locomotion, animal, goat, bird = zoo

    assert describe(goat).superclass is animal
    assert describe(goat).interfaces == (locomotion,)
    assert describe(animal).superclass is object
    assert describe(animal).interfaces == (eating,)
    assert describe(bird).interfaces == ()
    assert describe(eating).superclass is None


def test_type_kinds_and_modifiers(zoo):
    eating, locomotion, animal, goat, _ = zoo

    assert describe(eating).kind is TypeKind.INTERFACE
    assert describe(locomotion).kind is TypeKind.INTERFACE
    assert describe(animal).kind is TypeKind.CLASS
    assert describe(animal).is_abstract
    assert not describe(goat).is_abstract


def test_inherited_methods_use_most_derived_declaration(zoo):
    """CRITICAL: overrides replace the base declaration in methods()."""
    _, _, animal, goat, _ = zoo

    methods = {m.name: m for m in describe(goat).methods()}

    assert set(methods) == {"eats", "get_sound", "get_name", "get_locomotion"}
    assert methods["get_sound"].owner is goat
    assert methods["get_name"].owner is animal


def test_inherited_fields(zoo):
    _, _, animal, goat, bird = zoo

    assert {f.name for f in describe(goat).fields()} == {"CATEGORY", "name"}
    assert describe(bird).field("name").owner is animal
    assert describe(goat).declared_fields == ()


def test_all_interfaces_walks_ancestors(zoo):
    eating, locomotion, _, goat, bird = zoo

    assert set(describe(goat).all_interfaces()) == {eating, locomotion}
    assert describe(bird).all_interfaces() == (eating,)


def test_is_assignable_from(zoo):
    _, _, animal, goat, bird = zoo
    animal_type = describe(animal)

    assert animal_type.is_assignable_from(goat)
    assert animal_type.is_assignable_from(describe(bird))
    assert not describe(goat).is_assignable_from(animal)


# Records and enums


def test_frozen_dataclass_record():
    @dataclass(frozen=True)
    class Point:
        x: int
        y: int = 0
        tags: list[str] = field(default_factory=list)

    descriptor = describe(Point)

    assert descriptor.kind is TypeKind.RECORD
    assert Modifier.READONLY in descriptor.modifiers
    assert all(f.is_readonly for f in descriptor.declared_fields)
    assert descriptor.field("y").default == 0
    assert not descriptor.field("x").has_default
    assert not descriptor.field("tags").has_default
    assert descriptor.constructor().parameter_types == (int, int, list[str])


def test_pydantic_model_record():
    class Account(BaseModel):
        model_config = ConfigDict(frozen=True)

        owner: str
        balance: float = 0.0

    descriptor = describe(Account)
    primary = descriptor.constructor()

    assert descriptor.kind is TypeKind.RECORD
    assert [f.name for f in descriptor.declared_fields] == ["owner", "balance"]
    assert descriptor.field("balance").default == 0.0
    assert descriptor.field("owner").is_readonly
    assert all(p.kind is inspect.Parameter.KEYWORD_ONLY for p in primary.parameters)
    assert primary.parameter_types == (str, float)


def test_named_tuple_record():
    class Pair(NamedTuple):
        left: int
        right: int = 0

    descriptor = describe(Pair)

    assert descriptor.kind is TypeKind.RECORD
    assert descriptor.field("right").default == 0
    assert not descriptor.field("left").has_default
    assert descriptor.field("left").is_readonly
    assert descriptor.constructor().parameter_types == (int, int)


def test_enum_constants_are_static_final_fields():
    class Color(Enum):
        RED = 1
        GREEN = 2

    descriptor = describe(Color)
    red = descriptor.field("RED")

    assert descriptor.kind is TypeKind.ENUM
    assert Modifier.FINAL in descriptor.modifiers
    assert [f.name for f in descriptor.declared_fields] == ["RED", "GREEN"]
    assert red.modifiers == Modifier.PUBLIC | Modifier.STATIC | Modifier.FINAL | Modifier.READONLY
    assert red.type is Color
    assert red.default is Color.RED


# Rendering


def test_to_dict_is_json_serializable(person_cls):
    data = describe(person_cls).to_dict()

    encoded = json.loads(json.dumps(data))

    assert encoded["name"] == "Person"
    assert encoded["kind"] == "CLASS"
    assert {"name": "__age", "type": "int", "modifiers": "private"} in encoded["fields"]
    assert encoded["constructors"][0]["parameters"][0] == {
        "name": "name",
        "type": "str",
        "kind": "POSITIONAL_OR_KEYWORD",
    }


def test_modifier_to_string_order():
    mods = Modifier.FINAL | Modifier.STATIC | Modifier.PUBLIC

    assert Modifier.to_string(mods) == "public static final"
    assert Modifier.to_string(Modifier.NONE) == ""


def test_type_descriptor_str(zoo):
    eating, _, animal, _, _ = zoo

    assert str(describe(eating)) == f"public abstract interface {eating.__module__}.Eating"
    assert str(describe(animal)) == f"public abstract class {animal.__module__}.Animal"


def test_describe_rejects_non_class():
    with pytest.raises(TypeError, match="Expected a class"):
        describe(42)  # type: ignore[arg-type]


def test_annotation_any_is_default_for_unannotated():
    class Loose:
        def run(self, x, y=1):
            return x

    run = describe(Loose).method("run")

    assert run.parameter_types == (Any, Any)
    assert run.return_type is Any
    assert run.parameters[1].default == 1


def test_class_var_without_type():
    class Registry:
        items: ClassVar = []

    items = describe(Registry).field("items")

    assert items.is_static
    assert items.type is Any
