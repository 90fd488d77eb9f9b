"""
Class expression AST for Manchester syntax.

A parse produces one of these nodes; the lowerer turns it into triples right
away, so the tree never outlives a single parse call.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class RestrictionKind(Enum):
    """Restriction keywords following the property name."""
    SOME = "some"
    ONLY = "only"
    VALUE = "value"
    SELF = "self"
    MIN = "min"
    MAX = "max"
    EXACTLY = "exactly"

    @classmethod
    def from_keyword(cls, keyword: str) -> Optional["RestrictionKind"]:
        try:
            return cls(keyword.lower())
        except ValueError:
            return None

    @property
    def is_cardinality(self) -> bool:
        return self in (RestrictionKind.MIN, RestrictionKind.MAX, RestrictionKind.EXACTLY)


@dataclass(frozen=True)
class NamedClass:
    """A single token: class name, individual, datatype or literal."""
    token: str

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class IntersectionOf:
    operands: tuple["ClassExpression", ...]

    def __str__(self) -> str:
        return "(" + " and ".join(str(o) for o in self.operands) + ")"


@dataclass(frozen=True)
class UnionOf:
    operands: tuple["ClassExpression", ...]

    def __str__(self) -> str:
        return "(" + " or ".join(str(o) for o in self.operands) + ")"


@dataclass(frozen=True)
class ComplementOf:
    operand: "ClassExpression"

    def __str__(self) -> str:
        return f"not {self.operand}"


@dataclass(frozen=True)
class Restriction:
    """
    A property restriction.

    filler is a class expression for some/only and for qualified
    cardinalities, the raw value token for value, and None for self and
    unqualified cardinalities. cardinality is None when the count was
    missing or not a number.
    """
    property: str
    kind: RestrictionKind
    filler: Optional[Union["ClassExpression", str]] = None
    cardinality: Optional[int] = None
    has_self: bool = field(default=False)

    def __str__(self) -> str:
        parts = [self.property, self.kind.value]
        if self.cardinality is not None:
            parts.append(str(self.cardinality))
        if self.has_self and self.kind is RestrictionKind.SOME:
            parts.append("Self")
        elif self.filler is not None:
            parts.append(str(self.filler))
        return " ".join(parts)


ClassExpression = Union[NamedClass, IntersectionOf, UnionOf, ComplementOf, Restriction]
