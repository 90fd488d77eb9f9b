"""
Graph-pattern query engine.

Supports a SELECT subset: PREFIX declarations, DISTINCT, projection of
variables or *, a block of triple patterns joined on shared variables, and
LIMIT. Evaluation runs on Polars DataFrames.
"""

from ontoweave.sparql.ast import IRI, Literal, SelectQuery, TriplePattern, Variable
from ontoweave.sparql.context import (
    QueryBudgetExceeded,
    QueryContext,
    QueryStats,
    QueryTimeoutException,
)
from ontoweave.sparql.executor import QueryResult, SPARQLExecutor, execute_query
from ontoweave.sparql.parser import MalformedQuery, QueryParser, parse_query
from ontoweave.sparql.projection import Projection, graph_to_triples
from ontoweave.sparql.templates import QUERY_TEMPLATES, QueryTemplate, get_template

__all__ = [
    "IRI",
    "Literal",
    "SelectQuery",
    "TriplePattern",
    "Variable",
    "QueryBudgetExceeded",
    "QueryContext",
    "QueryStats",
    "QueryTimeoutException",
    "QueryResult",
    "SPARQLExecutor",
    "execute_query",
    "MalformedQuery",
    "QueryParser",
    "parse_query",
    "Projection",
    "graph_to_triples",
    "QUERY_TEMPLATES",
    "QueryTemplate",
    "get_template",
]
