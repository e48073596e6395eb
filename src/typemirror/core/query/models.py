"""Member query models.

Usage:
    # Public, non-static methods
    MemberQuery().of_kind(MemberKind.METHOD).having(Modifier.PUBLIC).excluding(Modifier.STATIC)

    # Getters by name pattern
    MemberQuery().named("get_*")

    descriptor.members(query)
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from typemirror.core.descriptor.models import MemberKind, Modifier

if TYPE_CHECKING:
    from typemirror.core.descriptor.models import MemberDescriptor


@dataclass(frozen=True)
class MemberQuery:
    """Declarative filter over member descriptors.

    Immutable - each method returns a new MemberQuery instance.
    """

    required: Modifier = Modifier.NONE
    excluded: Modifier = Modifier.NONE
    kinds: frozenset[MemberKind] = frozenset()
    pattern: str | None = None

    def having(self, *modifiers: Modifier) -> MemberQuery:
        """Members must carry all of these modifiers."""
        return MemberQuery(
            required=self.required | _combine(modifiers),
            excluded=self.excluded,
            kinds=self.kinds,
            pattern=self.pattern,
        )

    def excluding(self, *modifiers: Modifier) -> MemberQuery:
        """Members must carry none of these modifiers."""
        return MemberQuery(
            required=self.required,
            excluded=self.excluded | _combine(modifiers),
            kinds=self.kinds,
            pattern=self.pattern,
        )

    def of_kind(self, *kinds: MemberKind) -> MemberQuery:
        """Members must be one of these kinds. Repeated calls widen the set."""
        return MemberQuery(
            required=self.required,
            excluded=self.excluded,
            kinds=self.kinds | frozenset(kinds),
            pattern=self.pattern,
        )

    def named(self, pattern: str) -> MemberQuery:
        """Member names must match this glob pattern (case-sensitive)."""
        return MemberQuery(
            required=self.required,
            excluded=self.excluded,
            kinds=self.kinds,
            pattern=pattern,
        )

    def is_empty(self) -> bool:
        """True if no member can ever match (a modifier both required and excluded)."""
        return bool(self.required & self.excluded)

    def matches(self, member: MemberDescriptor) -> bool:
        """Check if a member satisfies every condition of this query."""
        if self.kinds and member.kind not in self.kinds:
            return False
        if self.pattern is not None and not fnmatchcase(member.name, self.pattern):
            return False
        mods = member.modifiers
        return (mods & self.required) == self.required and not (mods & self.excluded)


def _combine(modifiers: tuple[Modifier, ...]) -> Modifier:
    result = Modifier.NONE
    for m in modifiers:
        result |= m
    return result
