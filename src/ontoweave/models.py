"""
Graph model for ontologies drawn in the visual editor.

The editor hands over a set of entities (typed nodes) and relations (typed
edges). Each entity kind is its own dataclass carrying only the fields that
make sense for that kind:

- ClassEntity: attributes become data properties with the class as domain
- IndividualEntity: axioms such as sameAs / types
- ObjectPropertyEntity / DataPropertyEntity: characteristics and property axioms
- DatatypeEntity: declaration only

load_graph() builds these objects from the editor's JSON document.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union


class EntityKind(Enum):
    """Kinds of entities the editor can place on the canvas."""
    CLASS = "class"
    NAMED_INDIVIDUAL = "named_individual"
    OBJECT_PROPERTY = "object_property"
    DATA_PROPERTY = "data_property"
    DATATYPE = "datatype"

    @classmethod
    def from_str(cls, value: str) -> "EntityKind":
        key = value.strip().lower()
        if key.startswith("owl_"):
            key = key[4:]
        aliases = {
            "individual": "named_individual",
            "namedindividual": "named_individual",
            "objectproperty": "object_property",
            "dataproperty": "data_property",
            "datatypeproperty": "data_property",
        }
        key = aliases.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown entity kind: {value!r}") from None


@dataclass(frozen=True)
class Annotation:
    """An annotation assertion such as rdfs:comment "text"@en."""
    property: str
    value: str
    language: Optional[str] = None


@dataclass(frozen=True)
class Attribute:
    """
    An attribute row on an entity card.

    On a class it declares a data property (name + range type); on a
    property it is a characteristic flag such as Functional.
    """
    name: str
    type: str = ""


@dataclass(frozen=True)
class Axiom:
    """An inline axiom: a name (SubClassOf, DisjointWith, ...) and a raw expression."""
    name: str
    expression: str


@dataclass
class Entity:
    """Fields shared by every entity kind."""
    id: str
    label: str
    iri: Optional[str] = None
    description: Optional[str] = None
    annotations: list[Annotation] = field(default_factory=list)

    kind: ClassVar[EntityKind] = EntityKind.CLASS

    @property
    def is_property(self) -> bool:
        return self.kind in (EntityKind.OBJECT_PROPERTY, EntityKind.DATA_PROPERTY)


@dataclass
class ClassEntity(Entity):
    kind: ClassVar[EntityKind] = EntityKind.CLASS

    attributes: list[Attribute] = field(default_factory=list)
    axioms: list[Axiom] = field(default_factory=list)


@dataclass
class IndividualEntity(Entity):
    kind: ClassVar[EntityKind] = EntityKind.NAMED_INDIVIDUAL

    axioms: list[Axiom] = field(default_factory=list)


@dataclass
class ObjectPropertyEntity(Entity):
    kind: ClassVar[EntityKind] = EntityKind.OBJECT_PROPERTY

    characteristics: list[Attribute] = field(default_factory=list)
    axioms: list[Axiom] = field(default_factory=list)


@dataclass
class DataPropertyEntity(Entity):
    kind: ClassVar[EntityKind] = EntityKind.DATA_PROPERTY

    characteristics: list[Attribute] = field(default_factory=list)
    axioms: list[Axiom] = field(default_factory=list)


@dataclass
class DatatypeEntity(Entity):
    kind: ClassVar[EntityKind] = EntityKind.DATATYPE


AnyEntity = Union[
    ClassEntity, IndividualEntity, ObjectPropertyEntity, DataPropertyEntity, DatatypeEntity
]


@dataclass(frozen=True)
class Relation:
    """A typed edge between two entities, addressed by entity id."""
    source: str
    target: str
    label: str
    inferred: bool = False


@dataclass
class OntologyMetadata:
    """
    Project-level settings: naming, base IRI and ontology header data.

    Unset naming fields fall back to the translation configuration.
    """
    name: str = "Untitled Ontology"
    base_iri: Optional[str] = None
    default_prefix: Optional[str] = None
    ontology_iri: Optional[str] = None
    version_iri: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    namespaces: dict[str, str] = field(default_factory=dict)
    annotations: list[Annotation] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OntologyMetadata":
        namespaces = data.get("namespaces") or {}
        if not isinstance(namespaces, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in namespaces.items()
        ):
            raise ValueError("Field 'namespaces' must map prefix strings to IRI strings")
        return cls(
            name=_text(data, "name") or "Untitled Ontology",
            base_iri=_text(data, "base_iri", "baseIri"),
            default_prefix=_text(data, "default_prefix", "defaultPrefix"),
            ontology_iri=_text(data, "ontology_iri", "ontologyIri"),
            version_iri=_text(data, "version_iri", "versionIri"),
            description=_text(data, "description"),
            language=_text(data, "language"),
            namespaces=dict(namespaces),
            annotations=[_annotation_from_dict(a) for a in _records(data, "annotations")],
        )


@dataclass
class OntologyGraph:
    """Everything the editor hands over for one translation."""
    entities: list[AnyEntity] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
    metadata: OntologyMetadata = field(default_factory=OntologyMetadata)

    def entity_by_id(self) -> dict[str, AnyEntity]:
        return {entity.id: entity for entity in self.entities}


# =============================================================================
# Loading from the editor's JSON document
# =============================================================================

def _text(data: dict[str, Any], *keys: str) -> Optional[str]:
    """
    First non-empty value among keys, which must be a string.

    Raises:
        ValueError: If the value is present but not a string
    """
    for key in keys:
        value = data.get(key)
        if value is None or value == "":
            continue
        if not isinstance(value, str):
            raise ValueError(f"Field {key!r} must be a string, got {type(value).__name__}")
        return value
    return None


def _required_text(data: dict[str, Any], key: str) -> str:
    value = _text(data, key)
    if value is None:
        raise KeyError(key)
    return value


def _records(data: dict[str, Any], *keys: str) -> list[dict[str, Any]]:
    """First non-empty list among keys; every item must be an object."""
    for key in keys:
        items = data.get(key)
        if not items:
            continue
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise ValueError(f"Field {key!r} must be a list of objects")
        return items
    return []


def _annotation_from_dict(data: dict[str, Any]) -> Annotation:
    value = data.get("value", "")
    if isinstance(value, (dict, list)):
        raise ValueError(f"Annotation value must be a scalar, got {type(value).__name__}")
    return Annotation(
        property=_required_text(data, "property"),
        value=str(value),
        language=_text(data, "language"),
    )


def _attribute_from_dict(data: dict[str, Any]) -> Attribute:
    return Attribute(name=_text(data, "name") or "", type=_text(data, "type") or "")


def _axiom_from_dict(data: dict[str, Any]) -> Axiom:
    # The editor stores axioms as UML methods: name + returnType
    return Axiom(
        name=_text(data, "name") or "",
        expression=_text(data, "expression", "returnType") or "",
    )


def entity_from_dict(data: dict[str, Any]) -> AnyEntity:
    """
    Build the entity variant matching the document's kind.

    Raises:
        KeyError: If the entity has no id
        ValueError: If the kind is not one of the five entity kinds, or a
            text field holds a non-string value
    """
    kind = EntityKind.from_str(_text(data, "kind", "type") or "")
    common = dict(
        id=str(data["id"]),
        label=_text(data, "label") or "",
        iri=_text(data, "iri"),
        description=_text(data, "description"),
        annotations=[_annotation_from_dict(a) for a in _records(data, "annotations")],
    )
    attributes = [_attribute_from_dict(a) for a in _records(data, "attributes")]
    axioms = [_axiom_from_dict(a) for a in _records(data, "axioms", "methods")]

    if kind is EntityKind.CLASS:
        return ClassEntity(**common, attributes=attributes, axioms=axioms)
    if kind is EntityKind.NAMED_INDIVIDUAL:
        return IndividualEntity(**common, axioms=axioms)
    if kind is EntityKind.OBJECT_PROPERTY:
        return ObjectPropertyEntity(**common, characteristics=attributes, axioms=axioms)
    if kind is EntityKind.DATA_PROPERTY:
        return DataPropertyEntity(**common, characteristics=attributes, axioms=axioms)
    return DatatypeEntity(**common)


def relation_from_dict(data: dict[str, Any]) -> Relation:
    return Relation(
        source=str(data["source"]),
        target=str(data["target"]),
        label=_text(data, "label") or "",
        inferred=bool(data.get("inferred", False)),
    )


def load_graph(document: dict[str, Any]) -> OntologyGraph:
    """
    Build an OntologyGraph from the editor's JSON document.

    Args:
        document: Dict with "entities", "relations" and optional "metadata"

    Returns:
        Typed graph ready for translation or querying

    Raises:
        KeyError: If an entity or relation lacks a required field
        ValueError: On an unknown entity kind or a mistyped field
    """
    return OntologyGraph(
        entities=[entity_from_dict(e) for e in _records(document, "entities")],
        relations=[relation_from_dict(r) for r in _records(document, "relations")],
        metadata=OntologyMetadata.from_dict(document.get("metadata") or {}),
    )
