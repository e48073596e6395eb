"""Query functionality: declarative member filters."""

from typemirror.core.query.models import MemberQuery

__all__ = [
    "MemberQuery",
]
