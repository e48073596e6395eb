"""Example class hierarchy for reflection walkthroughs."""

from abc import ABC, abstractmethod
from typing import ClassVar, Protocol

from typemirror import constructor, reflect


class Eating(ABC):
    @abstractmethod
    def eats(self) -> str: ...


class Locomotion(Protocol):
    def get_locomotion(self) -> str: ...


@reflect
class Animal(Eating):
    """Example: abstract base with a static field and a protected helper."""

    CATEGORY: ClassVar[str] = "domestic"
    name: str

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def get_sound(self) -> str: ...

    def _describe(self) -> str:
        return f"{self.name} says {self.get_sound()}"


@reflect
class Goat(Animal, Locomotion):
    """Example: concrete subclass that also implements a Protocol."""

    def get_sound(self) -> str:
        return "bleat"

    def eats(self) -> str:
        return "grass"

    def get_locomotion(self) -> str:
        return "walks"


@reflect
class Bird(Animal):
    """Example: named constructor alongside the initializer."""

    walks: bool

    def __init__(self, name: str = "bird", walks: bool = False) -> None:
        super().__init__(name)
        self.walks = walks

    def get_sound(self) -> str:
        return "chirp"

    def eats(self) -> str:
        return "grains"

    @constructor
    def walking(cls, name: str) -> "Bird":
        return cls(name, True)


@reflect
class Person:
    """Example: public and private members."""

    name: str
    __age: int

    def __init__(self, name: str, age: int) -> None:
        self.name = name
        self.__age = age

    def greet(self, other: str) -> str:
        return f"Hello {other}, I am {self.name}"

    def __birthday(self) -> int:
        self.__age += 1
        return self.__age
