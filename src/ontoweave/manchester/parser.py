"""
Manchester syntax parser and lowering to triples.

Grammar, loosest binding first:

    expression  := conjunction ( "or" conjunction )*
    conjunction := unary ( "and" unary )*
    unary       := "not" unary | restriction | primary
    restriction := NAME ( "some" | "only" | "value" | "self"
                        | "min" | "max" | "exactly" ) argument*
    primary     := "(" expression ")" | NAME | LITERAL

Splitting on "or" / "and" only happens at parenthesis depth 0, and a
restriction's argument is the rest of its operand. The parser is lenient:
unmatched parentheses are dropped, unknown shapes fall back to a named
resource, and nothing raises on user input.
"""

import logging
import re
from typing import Optional

import pyparsing as pp

from ontoweave.manchester.ast import (
    ClassExpression,
    ComplementOf,
    IntersectionOf,
    NamedClass,
    Restriction,
    RestrictionKind,
    UnionOf,
)
from ontoweave.terms import (
    RDF_TYPE,
    XSD,
    Collection,
    Literal,
    ResourceRef,
    TranslationContext,
    Triple,
    owl,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Tokenizer
# =============================================================================

_LPAREN = pp.Literal("(")
_RPAREN = pp.Literal(")")
_QUOTED = pp.Regex(r'"(?:[^"\\]|\\.)*"(?:@[A-Za-z][A-Za-z0-9\-]*|\^\^[^\s()]+)?')
_FULL_IRI = pp.Regex(r"<[^<>\s]*>")
_WORD = pp.Regex(r'[^\s()"]+')
_STRAY_QUOTE = pp.Literal('"')

_TOKEN = _LPAREN | _RPAREN | _QUOTED | _FULL_IRI | _WORD | _STRAY_QUOTE


def tokenize(text: str) -> list[str]:
    """Split an expression into parentheses, quoted literals and words."""
    if not text:
        return []
    return [tokens[0] for tokens, _, _ in _TOKEN.scan_string(text)]


def balance_parentheses(tokens: list[str]) -> list[str]:
    """Drop closing parentheses with no opener and openers that never close."""
    kept: list[Optional[str]] = []
    open_positions: list[int] = []
    for token in tokens:
        if token == ")":
            if not open_positions:
                continue
            open_positions.pop()
        elif token == "(":
            open_positions.append(len(kept))
        kept.append(token)
    for position in open_positions:
        kept[position] = None
    return [token for token in kept if token is not None]


def split_top_level(tokens: list[str], keyword: str) -> list[list[str]]:
    """Split on a keyword occurring at parenthesis depth 0."""
    parts: list[list[str]] = [[]]
    depth = 0
    for token in tokens:
        if token == "(":
            depth += 1
        elif token == ")":
            depth = max(depth - 1, 0)
        elif depth == 0 and token.lower() == keyword:
            parts.append([])
            continue
        parts[-1].append(token)
    return parts


def _strip_outer_parentheses(tokens: list[str]) -> list[str]:
    while len(tokens) >= 2 and tokens[0] == "(" and tokens[-1] == ")":
        depth = 0
        closes_at_end = True
        for index, token in enumerate(tokens):
            if token == "(":
                depth += 1
            elif token == ")":
                depth -= 1
                if depth == 0 and index != len(tokens) - 1:
                    closes_at_end = False
                    break
        if not closes_at_end:
            break
        tokens = tokens[1:-1]
    return tokens


_COUNT = re.compile(r"[0-9]+")


def _parse_count(token: str) -> Optional[int]:
    if _COUNT.fullmatch(token):
        return int(token)
    return None


# =============================================================================
# Parser
# =============================================================================

class ManchesterParser:
    """
    Recursive-descent parser from Manchester syntax to a ClassExpression.

    Example:
        ManchesterParser().parse("hasChild some (Person and not Happy)")
        # Restriction(hasChild, SOME, IntersectionOf(Person, ComplementOf(Happy)))
    """

    def parse(self, expression: str) -> ClassExpression:
        tokens = balance_parentheses(tokenize(expression))
        return self._parse_tokens(tokens)

    def _parse_tokens(self, tokens: list[str]) -> ClassExpression:
        tokens = _strip_outer_parentheses(tokens)
        if not tokens:
            return NamedClass("")

        for keyword, node_type in (("or", UnionOf), ("and", IntersectionOf)):
            parts = split_top_level(tokens, keyword)
            if len(parts) == 1:
                continue
            operands = [self._parse_tokens(part) for part in parts if part]
            if not operands:
                return self._fallback(tokens)
            if len(operands) == 1:
                return operands[0]
            return node_type(tuple(operands))

        if tokens[0].lower() == "not" and len(tokens) > 1:
            return ComplementOf(self._parse_tokens(tokens[1:]))

        if len(tokens) >= 2 and tokens[0] not in ("(", ")"):
            kind = RestrictionKind.from_keyword(tokens[1])
            if kind is not None:
                return self._parse_restriction(tokens[0], kind, tokens[2:])

        return self._fallback(tokens)

    def _parse_restriction(
        self, prop: str, kind: RestrictionKind, args: list[str]
    ) -> Restriction:
        if kind is RestrictionKind.SELF:
            return Restriction(prop, kind, has_self=True)

        if kind is RestrictionKind.SOME and len(args) == 1 and args[0].lower() == "self":
            return Restriction(prop, kind, has_self=True)

        if kind is RestrictionKind.VALUE:
            value = " ".join(t for t in args if t not in ("(", ")"))
            return Restriction(prop, kind, filler=value)

        if kind.is_cardinality:
            count = _parse_count(args[0]) if args else None
            rest = args[1:] if count is not None else args
            filler = self._parse_tokens(rest) if rest else None
            return Restriction(prop, kind, filler=filler, cardinality=count)

        filler = self._parse_tokens(args) if args else None
        return Restriction(prop, kind, filler=filler)

    def _fallback(self, tokens: list[str]) -> NamedClass:
        words = [t for t in tokens if t not in ("(", ")")]
        return NamedClass(" ".join(words))


# =============================================================================
# Lowering
# =============================================================================

_CARDINALITY_PREDICATES = {
    RestrictionKind.MIN: ("minCardinality", "minQualifiedCardinality"),
    RestrictionKind.MAX: ("maxCardinality", "maxQualifiedCardinality"),
    RestrictionKind.EXACTLY: ("cardinality", "qualifiedCardinality"),
}


class ExpressionLowerer:
    """
    Lowers a ClassExpression to a resource reference plus the triples that
    describe it.

    Every compound node allocates exactly one blank node from the context's
    counter.
    """

    def __init__(self, context: TranslationContext):
        self.context = context
        self.resolver = context.resolver

    def lower(self, expression: ClassExpression) -> tuple[ResourceRef, list[Triple]]:
        triples: list[Triple] = []
        ref = self._lower(expression, triples)
        return ref, triples

    def _lower(self, expression: ClassExpression, out: list[Triple]) -> ResourceRef:
        if isinstance(expression, NamedClass):
            return self.resolver.resolve(expression.token)
        if isinstance(expression, IntersectionOf):
            return self._lower_boolean(expression.operands, "intersectionOf", out)
        if isinstance(expression, UnionOf):
            return self._lower_boolean(expression.operands, "unionOf", out)
        if isinstance(expression, ComplementOf):
            node = self.context.new_blank()
            operand = self._lower(expression.operand, out)
            out.append(Triple(node, owl("complementOf"), operand))
            return node
        return self._lower_restriction(expression, out)

    def _lower_boolean(
        self, operands: tuple[ClassExpression, ...], predicate: str, out: list[Triple]
    ) -> ResourceRef:
        node = self.context.new_blank()
        members = tuple(self._lower(operand, out) for operand in operands)
        out.append(Triple(node, owl(predicate), Collection(members)))
        return node

    def _lower_restriction(self, restriction: Restriction, out: list[Triple]) -> ResourceRef:
        node = self.context.new_blank()
        out.append(Triple(node, RDF_TYPE, owl("Restriction")))
        out.append(Triple(node, owl("onProperty"), self.resolver.resolve(restriction.property)))

        kind = restriction.kind
        if restriction.has_self:
            out.append(Triple(node, owl("hasSelf"), Literal("true", datatype=XSD + "boolean")))
        elif kind is RestrictionKind.SOME:
            filler = self._lower_filler(restriction.filler, out)
            out.append(Triple(node, owl("someValuesFrom"), filler))
        elif kind is RestrictionKind.ONLY:
            filler = self._lower_filler(restriction.filler, out)
            out.append(Triple(node, owl("allValuesFrom"), filler))
        elif kind is RestrictionKind.VALUE:
            value = self.resolver.resolve_value(str(restriction.filler or ""))
            out.append(Triple(node, owl("hasValue"), value))
        else:
            self._lower_cardinality(node, restriction, out)
        return node

    def _lower_filler(self, filler, out: list[Triple]) -> ResourceRef:
        if filler is None:
            return owl("Thing")
        return self._lower(filler, out)

    def _lower_cardinality(self, node: ResourceRef, restriction: Restriction, out: list[Triple]):
        unqualified, qualified = _CARDINALITY_PREDICATES[restriction.kind]
        filler = restriction.filler
        if restriction.cardinality is not None:
            predicate = qualified if filler is not None else unqualified
            count = Literal(str(restriction.cardinality), datatype=XSD + "nonNegativeInteger")
            out.append(Triple(node, owl(predicate), count))
        else:
            logger.debug(f"Cardinality without a numeric count on {restriction.property}")

        if filler is None:
            return
        if isinstance(filler, NamedClass) and self.resolver.is_datatype(filler.token):
            out.append(Triple(node, owl("onDataRange"), self.resolver.resolve_datatype(filler.token)))
        else:
            out.append(Triple(node, owl("onClass"), self._lower(filler, out)))


def parse_expression(
    expression: str, context: Optional[TranslationContext] = None
) -> tuple[ResourceRef, list[Triple]]:
    """
    Parse a Manchester class expression and lower it to triples.

    Args:
        expression: Raw expression text, e.g. "hasChild min 2 Boy"
        context: Translation context carrying the resolver and blank node
            counter; a fresh one is created when omitted

    Returns:
        (reference for the expression, triples describing its structure)
    """
    if context is None:
        context = TranslationContext()
    parsed = ManchesterParser().parse(expression)
    ref, triples = ExpressionLowerer(context).lower(parsed)
    logger.debug(f"Parsed {expression!r} into {ref} with {len(triples)} triples")
    return ref, triples


def parse_list(text: str, context: TranslationContext) -> Collection:
    """Parse a whitespace-separated list of names into a Collection."""
    tokens = [t for t in tokenize(text) if t not in ("(", ")", ",")]
    return Collection(tuple(context.resolver.resolve(t) for t in tokens))
