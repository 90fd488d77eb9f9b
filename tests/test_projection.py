"""
Tests for the direct graph projection and the built-in query templates.
"""

import pytest

from ontoweave.models import (
    Attribute,
    Axiom,
    ClassEntity,
    IndividualEntity,
    ObjectPropertyEntity,
    Relation,
)
from ontoweave.sparql import QUERY_TEMPLATES, SPARQLExecutor, get_template, graph_to_triples
from ontoweave.terms import (
    DEFAULT_BASE_IRI,
    RDF_TYPE,
    RDFS_LABEL,
    RDFS_SUBCLASS_OF,
    IRI,
    Literal,
    Triple,
    owl,
)

EX = DEFAULT_BASE_IRI


def ex(local):
    return IRI(EX + local)


@pytest.fixture
def canvas():
    entities = [
        ClassEntity(id="1", label="Person", attributes=[Attribute("age", "integer")],
                    axioms=[Axiom("SubClassOf", "hasParent some Person")]),
        ClassEntity(id="2", label="Agent"),
        IndividualEntity(id="3", label="Alice"),
        ObjectPropertyEntity(id="4", label="knows", iri="http://xmlns.com/foaf/0.1/knows"),
    ]
    relations = [
        Relation("1", "2", "subClassOf"),
        Relation("3", "1", "type"),
        Relation("3", "3", "knows"),
        Relation("3", "2", "works for"),
        Relation("3", "2", ""),
        Relation("3", "99", "ghost"),
    ]
    return entities, relations


class TestGraphProjection:
    """Tests for the lightweight canvas view."""

    def test_entity_triples(self, canvas):
        entities, _ = canvas
        triples = graph_to_triples(entities).triples
        assert triples[:3] == [
            Triple(ex("Person"), RDF_TYPE, owl("Class")),
            Triple(ex("Person"), RDFS_LABEL, Literal("Person")),
            Triple(ex("Person"), ex("hasAttribute"), Literal("age")),
        ]

    def test_no_axioms_or_blank_nodes(self, canvas):
        entities, relations = canvas
        triples = graph_to_triples(entities, relations).triples
        assert all(isinstance(t.subject, IRI) for t in triples)
        assert all(t.predicate != owl("someValuesFrom") for t in triples)

    def test_relations(self, canvas):
        entities, relations = canvas
        triples = graph_to_triples(entities, relations).triples
        assert triples[-5:] == [
            Triple(ex("Person"), RDFS_SUBCLASS_OF, ex("Agent")),
            Triple(ex("Alice"), RDF_TYPE, ex("Person")),
            Triple(ex("Alice"), IRI("http://xmlns.com/foaf/0.1/knows"), ex("Alice")),
            Triple(ex("Alice"), ex("works_for"), ex("Agent")),
            Triple(ex("Alice"), ex("relatedTo"), ex("Agent")),
        ]

    def test_custom_base(self):
        triples = graph_to_triples([ClassEntity(id="1", label="Lion")], base_iri="http://zoo.org/o").triples
        assert triples[0].subject == IRI("http://zoo.org/o#Lion")

    def test_label_map(self, canvas):
        entities, _ = canvas
        label_map = graph_to_triples(entities).label_map
        assert label_map[EX + "Person"] == "Person"
        assert label_map["3"] == "Alice"
        assert label_map["http://xmlns.com/foaf/0.1/knows"] == "knows"

    def test_queryable(self, canvas):
        entities, relations = canvas
        projection = graph_to_triples(entities, relations)
        executor = SPARQLExecutor(projection.triples, {"ex": EX, "": EX})
        result = executor.execute("SELECT ?c ?attr { ?c a owl:Class . ?c :hasAttribute ?attr }")
        assert result.rows == [{"c": EX + "Person", "attr": '"age"'}]


class TestQueryTemplates:
    """Tests for the built-in example queries."""

    def test_labels(self):
        assert [t.label for t in QUERY_TEMPLATES] == [
            "All Classes", "Class Hierarchy", "Individuals & Types",
        ]

    def test_lookup_is_case_insensitive(self):
        assert get_template("all classes") is QUERY_TEMPLATES[0]
        with pytest.raises(KeyError):
            get_template("Nope")

    def test_to_dict(self):
        data = QUERY_TEMPLATES[1].to_dict()
        assert set(data) == {"label", "description", "query"}

    def test_templates_run(self, canvas):
        entities, relations = canvas
        executor = SPARQLExecutor(graph_to_triples(entities, relations).triples)
        classes = executor.execute(get_template("All Classes").query)
        assert [row["class"] for row in classes.rows] == [EX + "Person", EX + "Agent"]

        hierarchy = executor.execute(get_template("Class Hierarchy").query)
        assert hierarchy.rows == [{"sub": EX + "Person", "super": EX + "Agent"}]

        individuals = executor.execute(get_template("Individuals & Types").query)
        assert individuals.rows == [{"indiv": EX + "Alice", "type": EX + "Person"}]
