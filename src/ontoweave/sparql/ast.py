"""
Abstract Syntax Tree (AST) nodes for graph-pattern queries.

These classes represent the parsed structure of a SELECT query. Bound terms
keep the text the user typed (prefixed names included); the executor expands
them against the query's prefix table when matching.
"""

from dataclasses import dataclass, field
from typing import Optional, Union


# =============================================================================
# Term Types (subjects, predicates, objects)
# =============================================================================

@dataclass(frozen=True)
class Variable:
    """
    A query variable (e.g., ?name, $person).

    Variables are bound during execution to display strings of matching terms.
    """
    name: str

    def __str__(self) -> str:
        return f"?{self.name}"


@dataclass(frozen=True)
class IRI:
    """
    An IRI as written in the query.

    Can be a full IRI (<http://...>), a prefixed name (ex:Person) or a bare word.
    """
    value: str

    def __str__(self) -> str:
        return f"<{self.value}>"


@dataclass(frozen=True)
class Literal:
    """
    A literal value.

    Can have an optional language tag (@en) or datatype (^^xsd:integer).
    """
    value: str
    language: Optional[str] = None
    datatype: Optional[str] = None

    def __str__(self) -> str:
        base = f'"{self.value}"'
        if self.language:
            return f"{base}@{self.language}"
        if self.datatype:
            return f"{base}^^<{self.datatype}>"
        return base


Term = Union[Variable, IRI, Literal]


# =============================================================================
# Triple Patterns
# =============================================================================

@dataclass(frozen=True)
class TriplePattern:
    """
    A basic graph pattern matching triples.

    Each position can be a variable (for matching) or a concrete term (for filtering).
    """
    subject: Term
    predicate: Term
    object: Term

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."


# =============================================================================
# Query Structure
# =============================================================================

@dataclass
class SelectQuery:
    """
    A SELECT query returning variable bindings.

    SELECT ?s ?p ?o
    WHERE { ?s ?p ?o }
    """
    variables: list[Variable] = field(default_factory=list)  # Empty list means SELECT *
    patterns: list[TriplePattern] = field(default_factory=list)
    prefixes: dict[str, str] = field(default_factory=dict)
    distinct: bool = False
    limit: Optional[int] = None

    def is_select_all(self) -> bool:
        """Check if this is a SELECT * query."""
        return len(self.variables) == 0

    def __str__(self) -> str:
        parts = []

        for prefix, uri in self.prefixes.items():
            parts.append(f"PREFIX {prefix}: <{uri}>")

        distinct_str = "DISTINCT " if self.distinct else ""
        if self.is_select_all():
            parts.append(f"SELECT {distinct_str}*")
        else:
            vars_str = " ".join(str(v) for v in self.variables)
            parts.append(f"SELECT {distinct_str}{vars_str}")

        parts.append("WHERE {")
        for pattern in self.patterns:
            parts.append(f"  {pattern}")
        parts.append("}")

        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")

        return "\n".join(parts)
