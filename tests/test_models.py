"""
Tests for the editor graph model and JSON loading.
"""

import pytest

from ontoweave.models import (
    Attribute,
    Axiom,
    ClassEntity,
    DataPropertyEntity,
    DatatypeEntity,
    EntityKind,
    IndividualEntity,
    ObjectPropertyEntity,
    OntologyMetadata,
    entity_from_dict,
    load_graph,
    relation_from_dict,
)


class TestEntityKind:
    """Tests for kind parsing."""

    def test_plain_values(self):
        assert EntityKind.from_str("class") is EntityKind.CLASS
        assert EntityKind.from_str("datatype") is EntityKind.DATATYPE

    def test_editor_prefixed_values(self):
        """Editor node types carry an owl_ prefix."""
        assert EntityKind.from_str("owl_class") is EntityKind.CLASS
        assert EntityKind.from_str("owl_named_individual") is EntityKind.NAMED_INDIVIDUAL
        assert EntityKind.from_str("OWL_OBJECT_PROPERTY") is EntityKind.OBJECT_PROPERTY

    def test_aliases(self):
        assert EntityKind.from_str("individual") is EntityKind.NAMED_INDIVIDUAL
        assert EntityKind.from_str("DatatypeProperty") is EntityKind.DATA_PROPERTY

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown entity kind"):
            EntityKind.from_str("widget")


class TestEntityFromDict:
    """Tests for building entity variants."""

    def test_class_with_attributes_and_methods(self):
        """Axioms are read from UML-style methods with a returnType."""
        entity = entity_from_dict({
            "id": 1,
            "kind": "owl_class",
            "label": "Person",
            "attributes": [{"name": "age", "type": "integer"}],
            "methods": [{"name": "SubClassOf", "returnType": "Agent"}],
        })
        assert isinstance(entity, ClassEntity)
        assert entity.id == "1"
        assert entity.attributes == [Attribute("age", "integer")]
        assert entity.axioms == [Axiom("SubClassOf", "Agent")]

    def test_property_attributes_become_characteristics(self):
        entity = entity_from_dict({
            "id": "p",
            "type": "object_property",
            "label": "hasPart",
            "attributes": [{"name": "Transitive"}],
        })
        assert isinstance(entity, ObjectPropertyEntity)
        assert entity.characteristics == [Attribute("Transitive", "")]
        assert entity.is_property

    def test_other_variants(self):
        assert isinstance(entity_from_dict({"id": "i", "kind": "individual"}), IndividualEntity)
        assert isinstance(entity_from_dict({"id": "d", "kind": "data_property"}), DataPropertyEntity)
        assert isinstance(entity_from_dict({"id": "t", "kind": "datatype"}), DatatypeEntity)

    def test_empty_iri_is_none(self):
        entity = entity_from_dict({"id": "a", "kind": "class", "label": "A", "iri": ""})
        assert entity.iri is None
        assert not entity.is_property


    def test_non_string_text_fields_raise(self):
        """Text fields must hold strings; numbers and objects are rejected."""
        with pytest.raises(ValueError, match="label"):
            entity_from_dict({"id": "1", "kind": "class", "label": 123})
        with pytest.raises(ValueError, match="iri"):
            entity_from_dict({"id": "1", "kind": "class", "iri": {"value": "x"}})
        with pytest.raises(ValueError, match="returnType"):
            entity_from_dict({"id": "1", "kind": "class",
                              "methods": [{"name": "SubClassOf", "returnType": 7}]})

    def test_non_object_list_items_raise(self):
        with pytest.raises(ValueError, match="attributes"):
            entity_from_dict({"id": "1", "kind": "class", "attributes": ["age"]})

    def test_nameless_axiom_is_kept(self):
        entity = entity_from_dict({"id": "1", "kind": "class", "methods": [{"returnType": "A"}]})
        assert entity.axioms == [Axiom("", "A")]


class TestLoadGraph:
    """Tests for whole-document loading."""

    def test_relations(self):
        relation = relation_from_dict({"source": 1, "target": 2, "label": "subClassOf"})
        assert relation.source == "1"
        assert relation.target == "2"
        assert relation.inferred is False

    def test_missing_label_is_empty(self):
        assert relation_from_dict({"source": "a", "target": "b"}).label == ""

    def test_load_graph(self):
        graph = load_graph({
            "entities": [
                {"id": "a", "kind": "class", "label": "A"},
                {"id": "b", "kind": "class", "label": "B"},
            ],
            "relations": [{"source": "a", "target": "b", "label": "subClassOf"}],
            "metadata": {"baseIri": "http://zoo.org/", "defaultPrefix": "zoo"},
        })
        assert set(graph.entity_by_id()) == {"a", "b"}
        assert len(graph.relations) == 1
        assert graph.metadata.base_iri == "http://zoo.org/"
        assert graph.metadata.default_prefix == "zoo"

    def test_empty_document(self):
        graph = load_graph({})
        assert graph.entities == []
        assert graph.relations == []
        assert graph.metadata.base_iri is None

    def test_missing_id_raises(self):
        with pytest.raises(KeyError):
            load_graph({"entities": [{"kind": "class", "label": "A"}]})


class TestOntologyMetadata:
    def test_defaults_are_unset(self):
        """Naming fields stay unset so the configuration can fill them."""
        metadata = OntologyMetadata.from_dict({})
        assert metadata.name == "Untitled Ontology"
        assert metadata.base_iri is None
        assert metadata.default_prefix is None
        assert metadata.language is None

    def test_annotations(self):
        metadata = OntologyMetadata.from_dict({
            "annotations": [{"property": "rdfs:comment", "value": "hi", "language": "en"}],
        })
        assert metadata.annotations[0].property == "rdfs:comment"
        assert metadata.annotations[0].language == "en"

    def test_bad_namespaces_raise(self):
        with pytest.raises(ValueError, match="namespaces"):
            OntologyMetadata.from_dict({"namespaces": ["foaf"]})
        with pytest.raises(ValueError, match="namespaces"):
            OntologyMetadata.from_dict({"namespaces": {"foaf": 1}})
