from typemirror import (
    ConstructorInvoker,
    FieldAccessor,
    IllegalAccessError,
    MethodInvoker,
    for_name,
    type_of,
)

from .zoo import Goat, Person


def inspect_goat() -> None:
    goat_type = for_name(f"{Goat.__module__}.Goat")
    print(f"{goat_type.qualified_name} extends {goat_type.superclass.__qualname__}")
    print(f"Interfaces: {[i.__qualname__ for i in goat_type.all_interfaces()]}")

    for method in goat_type.methods():
        print(f"  {method.signature()}  (declared by {method.owner.__qualname__})")

    billy = ConstructorInvoker(goat_type.constructor(str)).new_instance("Billy")
    sound = MethodInvoker(goat_type.method("get_sound")).invoke(billy)
    print(f"{billy.name} goes {sound}")


def open_private_members() -> None:
    person = Person("Ada", 36)
    person_type = type_of(person)

    for f in person_type.declared_fields:
        print(f"  {f}")

    age = FieldAccessor(person_type.declared_field("__age"))
    try:
        age.get(person)
    except IllegalAccessError as exc:
        print(f"Refused: {exc}")

    age.set_accessible(True)
    age.set(person, 40)

    birthday = MethodInvoker(person_type.declared_method("__birthday"))
    birthday.set_accessible(True)
    print(f"After birthday: {birthday.invoke(person)}")


def main() -> None:
    inspect_goat()
    open_private_members()


if __name__ == "__main__":
    main()
