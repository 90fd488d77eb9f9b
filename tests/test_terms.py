"""
Tests for resource references and IRI canonicalization.
"""

import pytest

from ontoweave.terms import (
    DEFAULT_BASE_IRI,
    OWL,
    RDF_TYPE,
    RDFS_SUBCLASS_OF,
    OWL_DISJOINT_WITH,
    XSD,
    BlankNode,
    BlankNodeCounter,
    Collection,
    IRI,
    Literal,
    TermResolver,
    TranslationContext,
    Triple,
    normalize_base_iri,
    structural_predicate,
)

EX = DEFAULT_BASE_IRI


class TestTermResolver:
    """Tests for token canonicalization."""

    @pytest.fixture
    def resolver(self):
        return TermResolver()

    def test_angle_bracket_iri(self, resolver):
        """<...> passes through unchanged."""
        assert resolver.resolve("<http://other.org/x#Y>") == IRI("http://other.org/x#Y")

    def test_absolute_iri(self, resolver):
        """Absolute IRIs pass through unchanged."""
        assert resolver.resolve("http://other.org/Thing") == IRI("http://other.org/Thing")
        assert resolver.resolve("urn:isbn:123") == IRI("urn:isbn:123")

    def test_known_prefix(self, resolver):
        """Known prefixes are expanded."""
        assert resolver.resolve("owl:Thing") == IRI(OWL + "Thing")
        assert resolver.resolve("ex:Person") == IRI(EX + "Person")

    def test_unknown_prefix_passes_through(self, resolver):
        """Unknown prefixes are kept as the raw token."""
        assert resolver.resolve("foaf:Person") == IRI("foaf:Person")

    def test_owl_vocabulary_word(self, resolver):
        """Bare OWL vocabulary words land in the owl: namespace."""
        assert resolver.resolve("Thing") == IRI(OWL + "Thing")
        assert resolver.resolve("disjointWith") == IRI(OWL + "disjointWith")

    def test_bare_word_uses_base(self, resolver):
        """Other bare words are appended to the base IRI."""
        assert resolver.resolve("Person") == IRI(EX + "Person")

    def test_inner_whitespace_becomes_underscore(self, resolver):
        assert resolver.resolve("Has  Child") == IRI(EX + "Has_Child")

    def test_empty_token(self, resolver):
        """Empty tokens resolve to base + Unknown."""
        assert resolver.resolve("") == IRI(EX + "Unknown")
        assert resolver.resolve(None) == IRI(EX + "Unknown")

    def test_quoted_literal(self, resolver):
        """Quoted tokens become literals with language or datatype."""
        assert resolver.resolve('"hello"') == Literal("hello")
        assert resolver.resolve('"hello"@en') == Literal("hello", language="en")
        assert resolver.resolve('"5"^^xsd:integer') == Literal("5", datatype=XSD + "integer")

    def test_blank_label_token_maps_to_base(self, resolver):
        """User tokens never collide with blank node display strings."""
        assert resolver.resolve("_:b0") == IRI(EX + "b0")
        assert resolver.resolve("_:") == IRI(EX + "Unknown")

    def test_custom_base_and_prefix(self):
        resolver = TermResolver("http://zoo.org/onto", "zoo")
        assert resolver.base_iri == "http://zoo.org/onto#"
        assert resolver.resolve("zoo:Lion") == IRI("http://zoo.org/onto#Lion")
        assert resolver.resolve("Lion") == IRI("http://zoo.org/onto#Lion")

    def test_extra_prefixes(self):
        resolver = TermResolver(prefixes={"foaf": "http://xmlns.com/foaf/0.1/"})
        assert resolver.resolve("foaf:Person") == IRI("http://xmlns.com/foaf/0.1/Person")

    def test_resolve_datatype(self, resolver):
        """Bare XSD names resolve to xsd:, case-insensitively."""
        assert resolver.resolve_datatype("string") == IRI(XSD + "string")
        assert resolver.resolve_datatype("Integer") == IRI(XSD + "integer")
        assert resolver.resolve_datatype("xsd:dateTime") == IRI(XSD + "dateTime")
        assert resolver.resolve_datatype("Money") == IRI(EX + "Money")

    def test_resolve_value(self, resolver):
        """hasValue fillers recognise numbers and booleans."""
        assert resolver.resolve_value("5") == Literal("5", datatype=XSD + "integer")
        assert resolver.resolve_value("3.14") == Literal("3.14", datatype=XSD + "decimal")
        assert resolver.resolve_value("true") == Literal("true", datatype=XSD + "boolean")
        assert resolver.resolve_value('"Red"') == Literal("Red")
        assert resolver.resolve_value("Red") == IRI(EX + "Red")

    def test_is_datatype(self, resolver):
        assert resolver.is_datatype("xsd:integer")
        assert resolver.is_datatype("string")
        assert not resolver.is_datatype("Person")

    def test_resolution_is_deterministic(self, resolver):
        tokens = ["Person", "owl:Thing", "foo:bar", '"x"@en', "", "<http://a/b>"]
        assert [resolver.resolve(t) for t in tokens] == [resolver.resolve(t) for t in tokens]


class TestDisplay:
    """Tests for display strings used in query results."""

    def test_iri_display_is_full_iri(self):
        assert IRI(EX + "A").display == EX + "A"
        assert str(IRI(EX + "A")) == f"<{EX}A>"

    def test_blank_display(self):
        assert BlankNode("b3").display == "_:b3"

    def test_literal_display(self):
        assert Literal("a").display == '"a"'
        assert Literal("a", language="en").display == '"a"@en'
        assert Literal("1", datatype=XSD + "integer").display == f'"1"^^<{XSD}integer>'

    def test_literal_display_escapes_quotes(self):
        assert Literal('say "hi"').display == '"say \\"hi\\""'

    def test_collection_display(self):
        collection = Collection((IRI(EX + "A"), BlankNode("b0")))
        assert collection.display == f"( {EX}A _:b0 )"
        assert Collection().display == "()"

    def test_triple_as_strings(self):
        triple = Triple(IRI(EX + "A"), RDF_TYPE, Literal("x"))
        assert triple.as_strings() == (EX + "A", RDF_TYPE.value, '"x"')


class TestBlankNodes:
    """Tests for blank node allocation."""

    def test_counter_sequence(self):
        counter = BlankNodeCounter()
        assert counter.next() == BlankNode("b0")
        assert counter.next() == BlankNode("b1")
        assert counter.allocated == 2

    def test_counter_start(self):
        assert BlankNodeCounter(5).next() == BlankNode("b5")

    def test_contexts_do_not_share_numbering(self):
        """Each translation context has its own counter."""
        first = TranslationContext.create()
        second = TranslationContext.create()
        first.new_blank()
        first.new_blank()
        assert second.new_blank() == BlankNode("b0")


class TestHelpers:
    def test_normalize_base_iri(self):
        assert normalize_base_iri("http://x.org/o") == "http://x.org/o#"
        assert normalize_base_iri("http://x.org/o/") == "http://x.org/o/"
        assert normalize_base_iri("http://x.org/o#") == "http://x.org/o#"
        assert normalize_base_iri("") == DEFAULT_BASE_IRI

    def test_structural_predicate(self):
        """Edge labels with built-in meaning map to fixed predicates."""
        assert structural_predicate("subClassOf") == RDFS_SUBCLASS_OF
        assert structural_predicate("rdfs:subClassOf") == RDFS_SUBCLASS_OF
        assert structural_predicate("a") == RDF_TYPE
        assert structural_predicate("type") == RDF_TYPE
        assert structural_predicate("disjointWith") == OWL_DISJOINT_WITH
        assert structural_predicate("is disjoint from") == OWL_DISJOINT_WITH
        assert structural_predicate("hasPet") is None
