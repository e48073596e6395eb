"""Core type definitions for typemirror."""

import inspect
from typing import Any, TypeAlias

Annotation: TypeAlias = Any
"""Type alias for a declared type as found on a class or signature.

Either a resolved runtime object (``int``, ``list[str]``, ``Optional[Person]``)
or the raw string of a forward reference that could not be resolved.
"""

EMPTY = inspect.Parameter.empty
"""Sentinel for "no default value", shared with ``inspect`` signatures."""
