"""
Query parser using pyparsing.

Reads the SELECT subset the query console supports:

    PREFIX ex: <http://example.org/ontology#>
    SELECT [DISTINCT] (* | ?var ...) [WHERE] { s p o . s p o . ... } [LIMIT n]

The parser scans for each clause instead of matching one grammar over the
whole text, so unsupported keywords around the clauses are ignored. Only a
missing SELECT clause or a missing pattern block is fatal.
"""

import logging
import re
from typing import Optional

import pyparsing as pp
from pyparsing import CaselessKeyword, Group, OneOrMore, Optional as Opt, Regex, Word, nums

from ontoweave.sparql.ast import IRI, Literal, SelectQuery, Term, TriplePattern, Variable
from ontoweave.terms import RDF, STANDARD_PREFIXES

logger = logging.getLogger(__name__)


class MalformedQuery(ValueError):
    """Raised when a query lacks a SELECT clause or a balanced pattern block."""
    pass


# =============================================================================
# Lexical tokens
# =============================================================================

_IRIREF = Regex(r"<[^<>\s]*>")
_STRING = Regex(
    r'"(?:[^"\\]|\\.)*"'
    r'(?:@[A-Za-z][A-Za-z0-9\-]*'
    r'|\^\^(?:<[^<>\s]*>|(?:[A-Za-z_][\w\-]*)?:[\w\-]*(?:\.[\w\-]+)*))?'
)
_COMMENT = Regex(r"#[^\n]*")
_VARIABLE = Regex(r"[?$][A-Za-z0-9_]+")
_ABSOLUTE = Regex(r'(?:https?|urn):[^\s<>"{}]*[^\s<>"{}.]')
_PNAME = Regex(r"(?:[A-Za-z_][\w\-]*)?:(?:[\w\-]+(?:\.[\w\-]+)*)?")
_NUMBER = Regex(r"[+-]?\d+(?:\.\d+)?(?![\w.]*\w)")
_DOT = pp.Literal(".")
_BARE = Regex(r"[^\s.]+(?:\.[^\s.]+)*")

_TERM_TOKEN = _IRIREF | _STRING | _VARIABLE | _ABSOLUTE | _PNAME | _NUMBER | _DOT | _BARE

# Comments are removed outside IRIs and strings; those two pass through untouched
_COMMENT_STRIPPER = _IRIREF | _STRING | _COMMENT.copy().set_parse_action(pp.replace_with(""))

_PREFIX_DECL = (
    CaselessKeyword("PREFIX").suppress()
    + Regex(r"[A-Za-z0-9_\-]*:")("name")
    + _IRIREF("iri")
)

_SELECT_CLAUSE = (
    CaselessKeyword("SELECT").suppress()
    + Opt(CaselessKeyword("DISTINCT"))("distinct")
    + (pp.Literal("*")("star") | Group(OneOrMore(_VARIABLE))("variables"))
)

_PATTERN_BLOCK = pp.original_text_for(pp.nested_expr("{", "}"))

_LIMIT_CLAUSE = CaselessKeyword("LIMIT").suppress() + Word(nums)("limit")

_NUMERIC = re.compile(r"[+-]?\d+(?:\.\d+)?")

_LITERAL_PARTS = re.compile(
    r'"(?P<value>(?:[^"\\]|\\.)*)"(?:@(?P<language>[A-Za-z][A-Za-z0-9\-]*)|\^\^(?P<datatype>\S+))?'
)


class QueryParser:
    """
    Parser for SELECT graph-pattern queries.

    Example:
        query = QueryParser().parse("SELECT ?c WHERE { ?c a owl:Class }")
        query.patterns[0].predicate  # IRI(value='http://www.w3.org/1999/02/22-rdf-syntax-ns#type')
    """

    def __init__(self, prefixes: Optional[dict[str, str]] = None):
        self.default_prefixes = dict(STANDARD_PREFIXES)
        if prefixes:
            self.default_prefixes.update(prefixes)

    def parse(self, query: str) -> SelectQuery:
        """
        Parse a query string.

        Args:
            query: Query text

        Returns:
            SelectQuery with prefixes merged over the default table

        Raises:
            MalformedQuery: If there is no SELECT clause or no balanced { } block
        """
        text = strip_comments(query or "")

        prefixes = dict(self.default_prefixes)
        for tokens, _, _ in _PREFIX_DECL.scan_string(text):
            prefixes[tokens["name"][:-1]] = tokens["iri"][1:-1]

        select = next(_SELECT_CLAUSE.scan_string(text), None)
        if select is None:
            raise MalformedQuery("Invalid query: missing SELECT clause")
        select_tokens, _, select_end = select
        distinct = bool(select_tokens.get("distinct"))
        if "star" in select_tokens:
            variables = []
        else:
            variables = [Variable(v[1:]) for v in select_tokens["variables"]]

        block = next(_PATTERN_BLOCK.scan_string(text[select_end:]), None)
        if block is None:
            raise MalformedQuery("Invalid query: missing pattern block { ... }")
        block_tokens, _, block_end = block
        body = block_tokens[0][1:-1]
        patterns = self._parse_patterns(body)

        limit = None
        tail = text[select_end + block_end:]
        limit_match = next(_LIMIT_CLAUSE.scan_string(tail), None)
        if limit_match is not None:
            limit = int(limit_match[0]["limit"])

        parsed = SelectQuery(
            variables=variables,
            patterns=patterns,
            prefixes=prefixes,
            distinct=distinct,
            limit=limit,
        )
        logger.debug(
            f"Parsed query: {len(variables) or '*'} variables, {len(patterns)} patterns, "
            f"distinct={distinct}, limit={limit}"
        )
        return parsed

    def _parse_patterns(self, body: str) -> list[TriplePattern]:
        statements: list[list[str]] = [[]]
        for tokens, _, _ in _TERM_TOKEN.scan_string(body):
            token = tokens[0]
            if token == ".":
                statements.append([])
            else:
                statements[-1].append(token)

        patterns = []
        for statement in statements:
            if not statement:
                continue
            if len(statement) != 3:
                logger.warning(
                    f"Dropping statement with {len(statement)} terms: {' '.join(statement)!r}"
                )
                continue
            subject, predicate, obj = (self._to_term(token) for token in statement)
            patterns.append(TriplePattern(subject, predicate, obj))
        return patterns

    def _to_term(self, token: str) -> Term:
        if token[0] in "?$":
            return Variable(token[1:])
        if token == "a":
            return IRI(RDF + "type")
        if token.startswith("<") and token.endswith(">"):
            return IRI(token[1:-1])
        if token.startswith('"'):
            match = _LITERAL_PARTS.fullmatch(token)
            if match is None:
                return Literal(token.strip('"'))
            datatype = match.group("datatype")
            if datatype and datatype.startswith("<") and datatype.endswith(">"):
                datatype = datatype[1:-1]
            return Literal(
                match.group("value").replace('\\"', '"'),
                language=match.group("language"),
                datatype=datatype,
            )
        if _NUMERIC.fullmatch(token):
            return Literal(token)
        return IRI(token)


def strip_comments(text: str) -> str:
    """Remove # comments that are not inside an IRI or a quoted string."""
    return _COMMENT_STRIPPER.transform_string(text)


def parse_query(query: str, prefixes: Optional[dict[str, str]] = None) -> SelectQuery:
    """
    Parse a query string into a SelectQuery.

    Args:
        query: Query text
        prefixes: Extra prefixes merged over rdf/rdfs/owl/xsd/skos;
            PREFIX declarations in the query take precedence

    Raises:
        MalformedQuery: If there is no SELECT clause or no balanced { } block
    """
    return QueryParser(prefixes).parse(query)
