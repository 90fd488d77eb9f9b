"""
Turtle-like text output for translated triples.

One statement per line, no predicate lists or nested blank nodes, so the
output diffs cleanly between two builds of the same graph. IRIs are compacted
through the prefix table when the local part is a plain name.
"""

from typing import Iterable, Optional
import re

from ontoweave.terms import (
    STANDARD_PREFIXES,
    IRI,
    BlankNode,
    Collection,
    Literal,
    ResourceRef,
    Triple,
)

_PLAIN_LOCAL = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")


class TurtleSerializer:
    """
    Serializer for the line-oriented Turtle subset.

    Example:
        TurtleSerializer({"ex": "http://example.org/ontology#"}).serialize(triples)
    """

    def __init__(self, prefixes: Optional[dict[str, str]] = None):
        self.prefixes = dict(prefixes) if prefixes is not None else dict(STANDARD_PREFIXES)

    def serialize(self, triples: Iterable[Triple]) -> str:
        """
        Serialize triples to Turtle text.

        Args:
            triples: Ordered triples

        Returns:
            @prefix block, a blank line, then one statement per line
        """
        lines = [f"@prefix {prefix}: <{namespace}> ." for prefix, namespace in self.prefixes.items()]
        lines.append("")
        for triple in triples:
            lines.append(
                f"{self.format_term(triple.subject)} "
                f"{self.format_term(triple.predicate)} "
                f"{self.format_term(triple.object)} ."
            )
        return "\n".join(lines) + "\n"

    def format_term(self, term: ResourceRef) -> str:
        if isinstance(term, IRI):
            return self.format_iri(term.value)
        if isinstance(term, BlankNode):
            return f"_:{term.label}"
        if isinstance(term, Literal):
            return self._format_literal(term)
        if isinstance(term, Collection):
            if not term.items:
                return "()"
            return "( " + " ".join(self.format_term(item) for item in term.items) + " )"
        return str(term)

    def format_iri(self, iri: str) -> str:
        """prefix:local when a namespace matches and the rest is a plain name."""
        best: Optional[tuple[str, str]] = None
        for prefix, namespace in self.prefixes.items():
            if namespace and iri.startswith(namespace) and _PLAIN_LOCAL.match(iri[len(namespace):]):
                if best is None or len(namespace) > len(best[1]):
                    best = (prefix, namespace)
        if best is None:
            return f"<{iri}>"
        return f"{best[0]}:{iri[len(best[1]):]}"

    def _format_literal(self, literal: Literal) -> str:
        escaped = (
            literal.value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        base = f'"{escaped}"'
        if literal.language:
            return f"{base}@{literal.language}"
        if literal.datatype:
            return f"{base}^^{self.format_iri(literal.datatype)}"
        return base


def serialize_turtle(triples: Iterable[Triple], prefixes: Optional[dict[str, str]] = None) -> str:
    """
    Serialize triples to Turtle text.

    Args:
        triples: Ordered triples, e.g. BuildResult.triples
        prefixes: Prefix table; the standard rdf/rdfs/owl/xsd/skos table when omitted

    Returns:
        Turtle formatted string
    """
    return TurtleSerializer(prefixes).serialize(triples)
