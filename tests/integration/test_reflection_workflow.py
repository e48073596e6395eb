"""End-to-end reflection workflows."""

import sys
from typing import ClassVar

import pytest

sys.path.insert(0, "src")

from typemirror import (
    ConstructorInvoker,
    FieldAccessor,
    IllegalAccessError,
    MemberKind,
    MemberQuery,
    MethodInvoker,
    Modifier,
    TypeRegistry,
    accessor_for,
    reflect,
)
from typemirror.core.identity import qualified_name_of

workflow_registry = TypeRegistry()


@reflect(registry=workflow_registry)
class Employee:
    company: ClassVar[str] = "Initech"
    name: str
    __salary: int

    def __init__(self, name: str, salary: int) -> None:
        self.name = name
        self.__salary = salary

    def introduce(self) -> str:
        return f"I am {self.name}"

    def __raise_salary(self, amount: int) -> int:
        self.__salary += amount
        return self.__salary


def test_class_lookup_by_name():
    """Resolve a class from its name, then inspect it."""
    descriptor = workflow_registry.for_name(qualified_name_of(Employee))

    assert descriptor is Employee.__type_descriptor__
    assert descriptor.name == "Employee"
    assert descriptor.module == Employee.__module__
    assert descriptor.superclass is object
    assert descriptor.interfaces == ()
    assert Modifier.to_string(descriptor.modifiers) == "public"


def test_list_every_member():
    descriptor = Employee.__type_descriptor__

    lines = [str(f) for f in descriptor.declared_fields]
    lines += [m.signature() for m in descriptor.declared_methods]
    lines += [c.signature() for c in descriptor.constructors]
    module = Employee.__module__

    assert lines == [
        f"public static str {module}.Employee.company",
        f"public str {module}.Employee.name",
        f"private int {module}.Employee.__salary",
        "public str introduce()",
        "private int __raise_salary(amount: int)",
        "public Employee(name: str, salary: int)",
    ]


def test_create_and_modify_through_reflection():
    """Create an instance, read and write a private field, call a private method."""
    descriptor = Employee.__type_descriptor__

    employee = ConstructorInvoker(descriptor.constructor(str, int)).new_instance("Peter", 50)
    salary = FieldAccessor(descriptor.declared_field("__salary"))
    raise_salary = MethodInvoker(descriptor.declared_method("__raise_salary", int))

    with pytest.raises(IllegalAccessError):
        salary.get(employee)

    salary.set_accessible(True)
    raise_salary.set_accessible(True)
    salary.set(employee, 60)

    assert raise_salary.invoke(employee, 5) == 65
    assert salary.get(employee) == 65
    assert MethodInvoker(descriptor.method("introduce")).invoke(employee) == "I am Peter"


def test_query_then_access_generically():
    descriptor = Employee.__type_descriptor__
    employee = Employee("Milton", 10)
    public_instance_fields = (
        MemberQuery().of_kind(MemberKind.FIELD).having(Modifier.PUBLIC).excluding(Modifier.STATIC)
    )

    values = {
        member.name: accessor_for(member).get(employee)
        for member in descriptor.members(public_instance_fields)
    }

    assert values == {"name": "Milton"}


def test_zoo_hierarchy(registry, zoo):
    eating, locomotion, animal, goat, bird = zoo
    goat_type = registry.register(goat)

    assert goat_type.superclass is animal
    assert goat_type.interfaces == (locomotion,)
    assert registry.get(animal).interfaces == (eating,)
    assert registry.get(animal).is_abstract
    assert {m.name for m in goat_type.methods()} == {
        "eats",
        "get_sound",
        "get_name",
        "get_locomotion",
    }

    billy = ConstructorInvoker(goat_type.constructor()).new_instance("Billy")
    sounds = [
        MethodInvoker(registry.register(cls).method("get_sound")).invoke(instance)
        for cls, instance in ((goat, billy), (bird, bird("Tweety")))
    ]

    assert sounds == ["bleat", "chirp"]
    assert {d.cls for d in registry.implementors(eating)} >= {animal, goat, bird}
