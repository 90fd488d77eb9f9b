"""
Tests for the Manchester syntax parser and its lowering to triples.
"""

import pytest

from ontoweave.manchester import (
    ComplementOf,
    IntersectionOf,
    ManchesterParser,
    NamedClass,
    Restriction,
    RestrictionKind,
    UnionOf,
    parse_expression,
    parse_list,
    tokenize,
)
from ontoweave.manchester.parser import balance_parentheses, split_top_level
from ontoweave.terms import (
    DEFAULT_BASE_IRI,
    OWL,
    RDF_TYPE,
    XSD,
    BlankNode,
    Collection,
    IRI,
    Literal,
    TranslationContext,
    Triple,
    owl,
)

EX = DEFAULT_BASE_IRI


def ex(local):
    return IRI(EX + local)


class TestTokenizer:
    """Tests for tokenization and parenthesis handling."""

    def test_words_and_parentheses(self):
        assert tokenize("hasChild some (A and B)") == [
            "hasChild", "some", "(", "A", "and", "B", ")",
        ]

    def test_quoted_literal_is_one_token(self):
        assert tokenize('hasName value "John Smith"@en') == [
            "hasName", "value", '"John Smith"@en',
        ]

    def test_full_iri_is_one_token(self):
        assert tokenize("<http://x.org/A> or B") == ["<http://x.org/A>", "or", "B"]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize("   ") == []

    def test_balance_drops_unmatched(self):
        """Unmatched parentheses on either side are dropped."""
        assert balance_parentheses(["(", "A", "or", "B"]) == ["A", "or", "B"]
        assert balance_parentheses(["A", ")", "or", "B"]) == ["A", "or", "B"]
        assert balance_parentheses(["(", "A", ")"]) == ["(", "A", ")"]

    def test_split_top_level_ignores_nested(self):
        tokens = tokenize("A or (B or C)")
        assert split_top_level(tokens, "or") == [["A"], ["(", "B", "or", "C", ")"]]


class TestManchesterParser:
    """Tests for parsing into the expression tree."""

    @pytest.fixture
    def parser(self):
        return ManchesterParser()

    def test_named(self, parser):
        assert parser.parse("Person") == NamedClass("Person")

    def test_or_binds_loosest(self, parser):
        """A and B or C parses as (A and B) or C."""
        parsed = parser.parse("A and B or C")
        assert parsed == UnionOf((
            IntersectionOf((NamedClass("A"), NamedClass("B"))),
            NamedClass("C"),
        ))

    def test_keywords_are_case_insensitive(self, parser):
        assert parser.parse("A AND B") == IntersectionOf((NamedClass("A"), NamedClass("B")))

    def test_not(self, parser):
        assert parser.parse("not Happy") == ComplementOf(NamedClass("Happy"))

    def test_restriction_with_nested_filler(self, parser):
        parsed = parser.parse("hasChild some (Person and not Happy)")
        assert parsed == Restriction(
            "hasChild",
            RestrictionKind.SOME,
            filler=IntersectionOf((NamedClass("Person"), ComplementOf(NamedClass("Happy")))),
        )

    def test_qualified_cardinality(self, parser):
        parsed = parser.parse("hasChild min 2 Boy")
        assert parsed.kind is RestrictionKind.MIN
        assert parsed.cardinality == 2
        assert parsed.filler == NamedClass("Boy")

    def test_unqualified_cardinality(self, parser):
        parsed = parser.parse("hasChild max 3")
        assert parsed.cardinality == 3
        assert parsed.filler is None

    def test_non_numeric_cardinality(self, parser):
        parsed = parser.parse("hasChild exactly many")
        assert parsed.cardinality is None

    def test_self(self, parser):
        assert parser.parse("loves some Self").has_self is True
        assert parser.parse("loves self").has_self is True

    def test_value_keeps_raw_token(self, parser):
        assert parser.parse("hasColor value Red").filler == "Red"

    def test_outer_parentheses_stripped(self, parser):
        assert parser.parse("((Person))") == NamedClass("Person")

    def test_unbalanced_does_not_raise(self, parser):
        assert parser.parse("(A or B") == UnionOf((NamedClass("A"), NamedClass("B")))

    def test_dangling_keyword(self, parser):
        assert parser.parse("A and") == NamedClass("A")


class TestLowering:
    """Tests for lowering expressions to triples."""

    def test_named_class_has_no_triples(self):
        ref, triples = parse_expression("Person")
        assert ref == ex("Person")
        assert triples == []

    def test_intersection_allocates_one_blank(self):
        """A and B yields exactly one blank node with one intersectionOf triple."""
        ref, triples = parse_expression("A and B")
        assert ref == BlankNode("b0")
        assert triples == [
            Triple(BlankNode("b0"), owl("intersectionOf"), Collection((ex("A"), ex("B")))),
        ]

    def test_union(self):
        ref, triples = parse_expression("A or B or C")
        assert triples == [
            Triple(ref, owl("unionOf"), Collection((ex("A"), ex("B"), ex("C")))),
        ]

    def test_complement(self):
        ref, triples = parse_expression("not Happy")
        assert triples == [Triple(ref, owl("complementOf"), ex("Happy"))]

    def test_some_restriction(self):
        ref, triples = parse_expression("hasPet some Dog")
        assert ref == BlankNode("b0")
        assert triples == [
            Triple(ref, RDF_TYPE, owl("Restriction")),
            Triple(ref, owl("onProperty"), ex("hasPet")),
            Triple(ref, owl("someValuesFrom"), ex("Dog")),
        ]

    def test_only_restriction(self):
        ref, triples = parse_expression("hasPet only Dog")
        assert Triple(ref, owl("allValuesFrom"), ex("Dog")) in triples

    def test_missing_filler_defaults_to_thing(self):
        ref, triples = parse_expression("hasPet some")
        assert Triple(ref, owl("someValuesFrom"), IRI(OWL + "Thing")) in triples

    def test_qualified_min_cardinality(self):
        ref, triples = parse_expression("hasChild min 2 Boy")
        assert triples == [
            Triple(ref, RDF_TYPE, owl("Restriction")),
            Triple(ref, owl("onProperty"), ex("hasChild")),
            Triple(ref, owl("minQualifiedCardinality"),
                   Literal("2", datatype=XSD + "nonNegativeInteger")),
            Triple(ref, owl("onClass"), ex("Boy")),
        ]

    def test_unqualified_min_cardinality(self):
        ref, triples = parse_expression("hasChild min 2")
        predicates = [t.predicate for t in triples]
        assert owl("minCardinality") in predicates
        assert owl("onClass") not in predicates

    def test_non_ascii_digit_count_emits_no_count(self):
        """A count that is not plain ASCII digits is dropped, not converted."""
        ref, triples = parse_expression("hasChild min ² Boy")
        predicates = [t.predicate for t in triples]
        assert Triple(ref, owl("onProperty"), ex("hasChild")) in triples
        assert owl("minCardinality") not in predicates
        assert owl("minQualifiedCardinality") not in predicates

    def test_exactly_uses_cardinality(self):
        _, triples = parse_expression("hasChild exactly 1")
        assert triples[-1].predicate == owl("cardinality")

    def test_datatype_filler_uses_on_data_range(self):
        ref, triples = parse_expression("hasAge exactly 1 xsd:integer")
        assert triples[-1] == Triple(ref, owl("onDataRange"), IRI(XSD + "integer"))
        assert triples[-2].predicate == owl("qualifiedCardinality")

    def test_has_value_literal(self):
        ref, triples = parse_expression('hasName value "Bob"')
        assert triples[-1] == Triple(ref, owl("hasValue"), Literal("Bob"))

    def test_has_value_number(self):
        _, triples = parse_expression("hasAge value 42")
        assert triples[-1].object == Literal("42", datatype=XSD + "integer")

    def test_has_self(self):
        ref, triples = parse_expression("loves some Self")
        assert triples[-1] == Triple(ref, owl("hasSelf"), Literal("true", datatype=XSD + "boolean"))

    def test_nested_blank_numbering(self):
        """Outer nodes are allocated before their operands."""
        ref, triples = parse_expression("hasChild some (Person and not Happy)")
        assert ref == BlankNode("b0")
        assert Triple(BlankNode("b2"), owl("complementOf"), ex("Happy")) in triples
        assert Triple(
            BlankNode("b1"), owl("intersectionOf"), Collection((ex("Person"), BlankNode("b2")))
        ) in triples
        assert triples[-1] == Triple(BlankNode("b0"), owl("someValuesFrom"), BlankNode("b1"))

    def test_shared_context_continues_numbering(self):
        context = TranslationContext.create()
        first, _ = parse_expression("A or B", context)
        second, _ = parse_expression("A or B", context)
        assert (first, second) == (BlankNode("b0"), BlankNode("b1"))

    def test_deterministic(self):
        assert parse_expression("r some (A or not B)") == parse_expression("r some (A or not B)")

    def test_empty_expression(self):
        ref, triples = parse_expression("")
        assert ref == ex("Unknown")
        assert triples == []


class TestParseList:
    def test_names(self):
        context = TranslationContext.create()
        assert parse_list("A B owl:Thing", context) == Collection(
            (ex("A"), ex("B"), IRI(OWL + "Thing"))
        )

    def test_parentheses_ignored(self):
        context = TranslationContext.create()
        assert parse_list("(A B)", context) == Collection((ex("A"), ex("B")))
