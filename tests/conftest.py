"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from abc import ABC, abstractmethod
from typing import ClassVar, Protocol

from typemirror import ReflectionSettings, TypeRegistry, constructor


class Eating(ABC):
    @abstractmethod
    def eats(self) -> str: ...


class Locomotion(Protocol):
    def get_locomotion(self) -> str: ...


class Animal(Eating):
    CATEGORY: ClassVar[str] = "domestic"
    name: str

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def get_sound(self) -> str: ...

    def get_name(self) -> str:
        return self.name

    def _describe(self) -> str:
        return f"{self.name} says {self.get_sound()}"


class Goat(Animal, Locomotion):
    def get_sound(self) -> str:
        return "bleat"

    def eats(self) -> str:
        return "grass"

    def get_locomotion(self) -> str:
        return "walks"


class Bird(Animal):
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


class Person:
    species: ClassVar[str] = "human"
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

    @staticmethod
    def average_age(*ages: int) -> float:
        return sum(ages) / len(ages)

    @classmethod
    def anonymous(cls) -> "Person":
        return cls("anonymous", 0)

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split())

    def fail(self) -> None:
        raise ValueError("boom")

    async def fetch_name(self) -> str:
        return self.name


@pytest.fixture
def registry():
    """Fresh TypeRegistry with default settings."""
    return TypeRegistry(ReflectionSettings())


@pytest.fixture
def person_cls():
    return Person


@pytest.fixture
def zoo():
    """The animal hierarchy: (Eating, Locomotion, Animal, Goat, Bird)."""
    return Eating, Locomotion, Animal, Goat, Bird
