"""
Direct projection of the editor graph for the query console.

A lighter view than the OWL translation: no axioms and no blank nodes, just
one type triple and one label per entity, the attribute names, and one
triple per edge. Querying this view answers "what is on the canvas" rather
than "what does the ontology entail".
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ontoweave.models import AnyEntity, EntityKind, Relation
from ontoweave.terms import (
    DEFAULT_BASE_IRI,
    RDF_TYPE,
    RDFS_LABEL,
    IRI,
    Literal,
    Triple,
    normalize_base_iri,
    owl,
    rdfs,
    structural_predicate,
)

logger = logging.getLogger(__name__)

_TYPE_IRIS = {
    EntityKind.CLASS: owl("Class"),
    EntityKind.NAMED_INDIVIDUAL: owl("NamedIndividual"),
    EntityKind.OBJECT_PROPERTY: owl("ObjectProperty"),
    EntityKind.DATA_PROPERTY: owl("DatatypeProperty"),
    EntityKind.DATATYPE: rdfs("Datatype"),
}


@dataclass
class Projection:
    """Projected triples plus a lookup from IRIs and entity ids to labels."""
    triples: list[Triple] = field(default_factory=list)
    label_map: dict[str, str] = field(default_factory=dict)


def graph_to_triples(
    entities: Iterable[AnyEntity],
    relations: Iterable[Relation] = (),
    base_iri: str = DEFAULT_BASE_IRI,
) -> Projection:
    """
    Project entities and relations onto plain triples.

    Args:
        entities: Entities in canvas order
        relations: Edges between entity ids
        base_iri: Namespace for entities without an explicit IRI

    Returns:
        Projection with ordered triples and the label map
    """
    base = normalize_base_iri(base_iri)
    entities = list(entities)

    def entity_iri(entity: AnyEntity) -> IRI:
        if entity.iri:
            return IRI(entity.iri)
        return IRI(base + "_".join(entity.label.split()))

    projection = Projection()
    iri_by_id: dict[str, IRI] = {}
    for entity in entities:
        iri = entity_iri(entity)
        iri_by_id[entity.id] = iri
        projection.label_map[iri.value] = entity.label
        projection.label_map[entity.label] = entity.label
        projection.label_map[entity.id] = entity.label

    has_attribute = IRI(base + "hasAttribute")
    for entity in entities:
        subject = iri_by_id[entity.id]
        projection.triples.append(Triple(subject, RDF_TYPE, _TYPE_IRIS[entity.kind]))
        projection.triples.append(Triple(subject, RDFS_LABEL, Literal(entity.label)))
        for attribute in getattr(entity, "attributes", ()):
            projection.triples.append(Triple(subject, has_attribute, Literal(attribute.name)))

    properties = {e.label: e for e in entities if e.is_property}
    for relation in relations:
        subject = iri_by_id.get(relation.source)
        obj = iri_by_id.get(relation.target)
        if subject is None or obj is None:
            logger.debug(f"Projection skips dangling edge {relation.source} -> {relation.target}")
            continue

        label = relation.label or "relatedTo"
        predicate = structural_predicate(label)
        if predicate is None:
            prop = properties.get(label)
            if prop is not None:
                predicate = iri_by_id[prop.id]
            elif label.startswith("http"):
                predicate = IRI(label)
            else:
                predicate = IRI(base + "_".join(label.split()))
        projection.triples.append(Triple(subject, predicate, obj))

    return projection
