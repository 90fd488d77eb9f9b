"""
OntoWeave: OWL export and graph-pattern queries for visually drawn ontologies.

Turns an editor graph (entities, typed edges, inline Manchester axioms) into an
ordered triple list, serializes it as Turtle, and answers SELECT queries over
it with a Polars-backed join engine.
"""

__version__ = "0.1.0"

from ontoweave.config import OntoWeaveConfig, QueryConfig, TranslationConfig, load_config
from ontoweave.manchester import parse_expression
from ontoweave.models import OntologyGraph, OntologyMetadata, load_graph
from ontoweave.owl import BuildResult, TripleStoreBuilder, build_triples
from ontoweave.sparql import (
    MalformedQuery,
    QueryContext,
    QueryResult,
    SPARQLExecutor,
    execute_query,
    graph_to_triples,
    parse_query,
)
from ontoweave.terms import IRI, BlankNode, Collection, Literal, Triple, TermResolver
from ontoweave.turtle import serialize_turtle

__all__ = [
    "OntoWeaveConfig",
    "QueryConfig",
    "TranslationConfig",
    "load_config",
    "parse_expression",
    "OntologyGraph",
    "OntologyMetadata",
    "load_graph",
    "BuildResult",
    "TripleStoreBuilder",
    "build_triples",
    "MalformedQuery",
    "QueryContext",
    "QueryResult",
    "SPARQLExecutor",
    "execute_query",
    "graph_to_triples",
    "parse_query",
    "IRI",
    "BlankNode",
    "Collection",
    "Literal",
    "Triple",
    "TermResolver",
    "serialize_turtle",
]
