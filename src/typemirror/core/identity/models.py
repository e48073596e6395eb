"""Type identity models.

Usage:
    type_id = TypeId.of(Person)
    same = TypeId.from_name("myapp.models.Person")
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass


def qualified_name_of(cls: type) -> str:
    """Fully qualified name of a class, ``module.QualName``."""
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True, slots=True)
class TypeId:
    """Deterministic type identifier derived from the fully qualified name.

    Uses the first 64 bits of a SHA-256 digest so the same class gets the same
    id in every process and every registry instance.
    """

    value: int

    @classmethod
    def from_name(cls, qualified_name: str) -> TypeId:
        """Derive the id for a fully qualified type name.

        Args:
            qualified_name: Name in ``module.QualName`` form.

        Returns:
            TypeId for that name.
        """
        return cls(int(hashlib.sha256(qualified_name.encode()).hexdigest()[:16], 16))

    @classmethod
    def of(cls, type_: type) -> TypeId:
        """Derive the id for a class."""
        return cls.from_name(qualified_name_of(type_))

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:016x}"
