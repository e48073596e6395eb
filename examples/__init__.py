"""Example classes and walkthroughs for typemirror.

This package demonstrates library usage but is not part of the core API.
"""

from .zoo import Animal, Bird, Eating, Goat, Locomotion, Person

__all__ = [
    "Animal",
    "Bird",
    "Eating",
    "Goat",
    "Locomotion",
    "Person",
]
