"""
Query executor using Polars.

Evaluates a SelectQuery against a list of triples:
- every triple becomes a row of display strings in one DataFrame
- each pattern is a filtered scan of that frame
- patterns are joined left-deep on shared variables, keeping nested-loop
  order (current solution first, then triple order)
- projection, DISTINCT and LIMIT run on the final frame
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

import polars as pl

from ontoweave.sparql.ast import IRI, Literal, SelectQuery, Term, TriplePattern, Variable
from ontoweave.sparql.context import (
    QueryBudgetExceeded,
    QueryContext,
    QueryStats,
    QueryTimeoutException,
)
from ontoweave.sparql.parser import parse_query
from ontoweave.terms import Literal as LiteralTerm, Triple

logger = logging.getLogger(__name__)

_POSITIONS = ("subject", "predicate", "object")
# Bookkeeping columns start with '#', which a query variable name never contains
_SEED = "#seed"
_LEFT = "#left"
_MATCH = "#match"
_INTERNAL = "#"
_LEXICAL = re.compile(r'^"(.*)"(?:@[A-Za-z][A-Za-z0-9\-]*|\^\^<[^>]*>)?$', re.DOTALL)

TripleLike = Union[Triple, tuple[str, str, str]]


@dataclass
class QueryResult:
    """Tabular result of a SELECT query."""
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)
    execution_time: float = 0.0  # milliseconds
    stats: Optional[QueryStats] = None

    def __len__(self) -> int:
        return len(self.rows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [dict(row) for row in self.rows],
            "executionTime": self.execution_time,
        }

    def to_dataframe(self) -> pl.DataFrame:
        if not self.columns:
            return pl.DataFrame()
        return pl.DataFrame(
            {column: [row[column] for row in self.rows] for column in self.columns},
            schema={column: pl.Utf8 for column in self.columns},
        )


def _lexical_value(display: str) -> str:
    """Lexical form of a literal's display string; other terms are unchanged."""
    match = _LEXICAL.match(display)
    if match is None:
        return display
    return match.group(1).replace('\\"', '"').replace("\\\\", "\\")


def _strip_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def triples_to_dataframe(triples: Iterable[TripleLike]) -> pl.DataFrame:
    """
    Build the scan frame: one row per triple, in triple order.

    Columns are the display strings of the three positions, the lexical
    value of the object (for quote-tolerant literal matching) and the
    triple's position in the input list.
    """
    subjects, predicates, objects, values = [], [], [], []
    for triple in triples:
        if isinstance(triple, Triple):
            s, p, o = triple.as_strings()
        else:
            s, p, o = triple
        subjects.append(s)
        predicates.append(p)
        objects.append(o)
        values.append(_lexical_value(o))
    return pl.DataFrame(
        {
            "subject": subjects,
            "predicate": predicates,
            "object": objects,
            "object_value": values,
        },
        schema={
            "subject": pl.Utf8,
            "predicate": pl.Utf8,
            "object": pl.Utf8,
            "object_value": pl.Utf8,
        },
    ).with_row_index(_MATCH)


class SPARQLExecutor:
    """
    Executes SELECT queries against an in-memory triple list.

    The triple list is converted to a DataFrame once; the executor can then
    answer any number of queries against it.
    """

    def __init__(
        self,
        triples: Iterable[TripleLike],
        prefixes: Optional[dict[str, str]] = None,
    ):
        self.prefixes = dict(prefixes or {})
        self._df = triples_to_dataframe(triples)

    def __len__(self) -> int:
        return self._df.height

    def execute(
        self,
        query: Union[str, SelectQuery],
        context: Optional[QueryContext] = None,
    ) -> QueryResult:
        """
        Execute a query.

        Args:
            query: Query text or an already parsed SelectQuery
            context: Optional execution budget; unlimited when omitted

        Returns:
            QueryResult with columns, rows and execution time in milliseconds

        Raises:
            MalformedQuery: If the query text cannot be parsed
            QueryTimeoutException: If the context's timeout is exceeded
            QueryBudgetExceeded: If the context's solution budget is exceeded
        """
        start = time.perf_counter()
        if isinstance(query, str):
            query = parse_query(query, self.prefixes)
        if context is None:
            context = QueryContext()
        context.start()

        try:
            solutions = self._execute_where(query.patterns, query.prefixes, context)
            columns, frame = self._execute_select_post(query, solutions)
        except (QueryTimeoutException, QueryBudgetExceeded):
            raise
        except Exception as e:
            context.fail(str(e))
            raise

        if columns:
            rows = frame.select(columns).to_dicts()
        else:
            rows = [{} for _ in range(frame.height)]
        context.complete(len(rows))

        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"Query returned {len(rows)} rows in {elapsed:.2f}ms")
        return QueryResult(columns=columns, rows=rows, execution_time=elapsed, stats=context.stats)

    # -------------------------------------------------------------------------
    # WHERE
    # -------------------------------------------------------------------------

    def _execute_where(
        self,
        patterns: list[TriplePattern],
        prefixes: dict[str, str],
        context: QueryContext,
    ) -> pl.DataFrame:
        """
        Join every pattern into the solution frame.

        Solutions start as a single empty solution, so a query with no
        patterns yields exactly one (empty) row.
        """
        solutions = pl.DataFrame({_SEED: [0]}, schema={_SEED: pl.UInt32})

        for pattern in patterns:
            matches = self._execute_pattern(pattern, prefixes)
            context.record_pattern(matches.height)

            shared = [
                c for c in matches.columns
                if not c.startswith(_INTERNAL) and c in solutions.columns
            ]
            left = solutions.with_row_index(_LEFT)
            if shared:
                joined = left.join(matches, on=shared, how="inner")
            else:
                joined = left.join(matches, how="cross")
            solutions = joined.sort([_LEFT, _MATCH]).drop([_LEFT, _MATCH])

            context.record_join()
            context.check(solutions.height)
            if solutions.height == 0:
                break

        return solutions

    def _execute_pattern(self, pattern: TriplePattern, prefixes: dict[str, str]) -> pl.DataFrame:
        """Scan the triple frame for one pattern; one column per distinct variable."""
        df = self._df.lazy()

        filters = []
        first_position: dict[str, str] = {}
        for position, term in zip(_POSITIONS, (pattern.subject, pattern.predicate, pattern.object)):
            if isinstance(term, Variable):
                if term.name in first_position:
                    # Same variable twice in one pattern: both positions must agree
                    filters.append(pl.col(position) == pl.col(first_position[term.name]))
                else:
                    first_position[term.name] = position
                continue

            value = self._resolve_term(term, prefixes)
            if position == "object":
                filters.append(
                    (pl.col("object") == value)
                    | (pl.col("object_value") == _strip_quotes(value))
                )
            else:
                filters.append(pl.col(position) == value)

        if filters:
            combined_filter = filters[0]
            for f in filters[1:]:
                combined_filter = combined_filter & f
            df = df.filter(combined_filter)

        select_cols = [pl.col(position).alias(name) for name, position in first_position.items()]
        select_cols.append(pl.col(_MATCH))
        return df.select(select_cols).collect()

    def _resolve_term(self, term: Term, prefixes: dict[str, str]) -> str:
        """Resolve a bound term to the display string stored in the frame."""
        if isinstance(term, IRI):
            return self._expand_iri(term.value, prefixes)
        if isinstance(term, Literal):
            datatype = self._expand_iri(term.datatype, prefixes) if term.datatype else None
            return LiteralTerm(term.value, language=term.language, datatype=datatype).display
        return str(term)

    def _expand_iri(self, value: str, prefixes: dict[str, str]) -> str:
        if value.startswith("_:") or value.startswith(("http://", "https://", "urn:")):
            return value
        if ":" in value:
            prefix, local = value.split(":", 1)
            if prefix in prefixes:
                return prefixes[prefix] + local
            return value
        if "" in prefixes:
            return prefixes[""] + value
        return value

    # -------------------------------------------------------------------------
    # Projection and modifiers
    # -------------------------------------------------------------------------

    def _execute_select_post(
        self, query: SelectQuery, solutions: pl.DataFrame
    ) -> tuple[list[str], pl.DataFrame]:
        bound = [c for c in solutions.columns if not c.startswith(_INTERNAL)]

        if query.is_select_all():
            columns = bound if solutions.height > 0 else []
            frame = solutions
        else:
            columns = [v.name for v in query.variables]
            missing = [c for c in columns if c not in bound]
            if missing:
                # No solution binds these variables, so every solution is dropped
                frame = pl.DataFrame(schema={c: pl.Utf8 for c in columns})
            else:
                frame = solutions

        if query.distinct and columns and frame.height > 0:
            frame = frame.unique(subset=columns, keep="first", maintain_order=True)

        if query.limit is not None:
            frame = frame.head(query.limit)

        return columns, frame


def execute_query(
    query_text: str,
    triples: Iterable[TripleLike],
    prefixes: Optional[dict[str, str]] = None,
    context: Optional[QueryContext] = None,
) -> QueryResult:
    """
    Parse and execute a query against a triple list.

    Args:
        query_text: Query string
        triples: Triples to query, e.g. BuildResult.triples
        prefixes: Extra prefixes available to the query
        context: Optional execution budget

    Returns:
        QueryResult
    """
    executor = SPARQLExecutor(triples, prefixes)
    return executor.execute(query_text, context)
