"""
Manchester syntax class expressions.

parse_expression() turns text such as "hasChild min 2 Boy" into a resource
reference plus the triples describing it.
"""

from ontoweave.manchester.ast import (
    ClassExpression,
    NamedClass,
    IntersectionOf,
    UnionOf,
    ComplementOf,
    Restriction,
    RestrictionKind,
)
from ontoweave.manchester.parser import (
    ManchesterParser,
    ExpressionLowerer,
    parse_expression,
    parse_list,
    tokenize,
)

__all__ = [
    "ClassExpression",
    "NamedClass",
    "IntersectionOf",
    "UnionOf",
    "ComplementOf",
    "Restriction",
    "RestrictionKind",
    "ManchesterParser",
    "ExpressionLowerer",
    "parse_expression",
    "parse_list",
    "tokenize",
]
