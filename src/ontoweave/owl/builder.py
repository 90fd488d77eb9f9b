"""
Graph-to-triples translation.

TripleStoreBuilder walks the editor graph once and emits an ordered,
duplicate-free list of triples:

- ontology header (owl:Ontology, version IRI, description, annotations)
- one declaration block per entity (type, label, definition, annotations)
- class attributes as data properties, property characteristics as types
- inline axioms, lowered through the Manchester parser
- relations, with first-seen predicate declarations

The builder is lenient: malformed input degrades to best-effort triples and
a warning in the log, never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from ontoweave.config import TranslationConfig
from ontoweave.manchester import parse_expression, parse_list
from ontoweave.models import (
    AnyEntity,
    ClassEntity,
    DataPropertyEntity,
    EntityKind,
    OntologyMetadata,
    Relation,
)
from ontoweave.owl.axioms import AxiomKind, normalize_axiom_name
from ontoweave.terms import (
    OWL_DISJOINT_WITH,
    RDF_TYPE,
    RDFS_LABEL,
    RDFS_SUBCLASS_OF,
    IRI,
    Literal,
    ResourceRef,
    TranslationContext,
    Triple,
    owl,
    rdfs,
    skos,
    structural_predicate,
)

logger = logging.getLogger(__name__)


_DECLARATION_TYPES = {
    EntityKind.CLASS: owl("Class"),
    EntityKind.NAMED_INDIVIDUAL: owl("NamedIndividual"),
    EntityKind.OBJECT_PROPERTY: owl("ObjectProperty"),
    EntityKind.DATA_PROPERTY: owl("DatatypeProperty"),
    EntityKind.DATATYPE: rdfs("Datatype"),
}

_CHARACTERISTICS = {
    "functional": "FunctionalProperty",
    "inversefunctional": "InverseFunctionalProperty",
    "transitive": "TransitiveProperty",
    "symmetric": "SymmetricProperty",
    "asymmetric": "AsymmetricProperty",
    "reflexive": "ReflexiveProperty",
    "irreflexive": "IrreflexiveProperty",
}

# Quantifier spellings accepted in implicit restrictions
_QUANTIFIER_ALIASES = {
    "all": "only",
    "hasvalue": "value",
    "cardinality": "exactly",
}
_QUANTIFIERS = frozenset({"some", "only", "value", "self", "min", "max", "exactly"})


# =============================================================================
# Result
# =============================================================================

@dataclass
class BuildResult:
    """Output of one translation pass."""
    triples: list[Triple] = field(default_factory=list)
    prefixes: dict[str, str] = field(default_factory=dict)
    blank_nodes: int = 0

    def __len__(self) -> int:
        return len(self.triples)

    def as_strings(self) -> list[tuple[str, str, str]]:
        return [triple.as_strings() for triple in self.triples]

    def to_turtle(self) -> str:
        from ontoweave.turtle import serialize_turtle
        return serialize_turtle(self.triples, self.prefixes)


class _TripleSink:
    """Ordered triple list that drops exact duplicates (first one wins)."""

    def __init__(self):
        self.triples: list[Triple] = []
        self._seen: set[Triple] = set()

    def add(self, subject: ResourceRef, predicate: IRI, obj: ResourceRef) -> None:
        self.append(Triple(subject, predicate, obj))

    def append(self, triple: Triple) -> None:
        if triple in self._seen:
            return
        self._seen.add(triple)
        self.triples.append(triple)

    def extend(self, triples: Iterable[Triple]) -> None:
        for triple in triples:
            self.append(triple)


# =============================================================================
# Builder
# =============================================================================

class TripleStoreBuilder:
    """
    Translates entities and relations into an ordered list of triples.

    A builder can be reused: all mutable state (blank node counter, triple
    sink, declared predicates) lives in a per-call _BuildPass, so building the
    same graph twice yields identical output.

    Example:
        result = TripleStoreBuilder().build(graph.entities, graph.relations, graph.metadata)
        print(result.to_turtle())
    """

    def __init__(self, config: Optional[TranslationConfig] = None):
        self.config = config or TranslationConfig()

    def build(
        self,
        entities: Iterable[AnyEntity],
        relations: Iterable[Relation] = (),
        metadata: Optional[OntologyMetadata] = None,
    ) -> BuildResult:
        """
        Run one translation pass.

        Args:
            entities: Entities in canvas order
            relations: Typed edges between entity ids
            metadata: Ontology-level settings; its base IRI, prefix and
                language take precedence over the builder configuration

        Returns:
            BuildResult with ordered triples and the prefix table
        """
        entities = list(entities)
        relations = list(relations)
        build_pass = _BuildPass(self.config, metadata)
        build_pass.emit_header()
        for entity in entities:
            build_pass.emit_entity(entity)
        build_pass.emit_relations(entities, relations)

        result = BuildResult(
            triples=build_pass.sink.triples,
            prefixes=dict(build_pass.context.resolver.prefixes),
            blank_nodes=build_pass.context.counter.allocated,
        )
        logger.debug(
            f"Built {len(result.triples)} triples from {len(entities)} entities "
            f"and {len(relations)} relations ({result.blank_nodes} blank nodes)"
        )
        return result


class _BuildPass:
    """State for a single build() call."""

    def __init__(self, config: TranslationConfig, metadata: Optional[OntologyMetadata]):
        self.config = config
        self.metadata = metadata
        if metadata is not None:
            base_iri = metadata.base_iri or config.base_iri
            default_prefix = metadata.default_prefix or config.default_prefix
            language = metadata.language or config.language
            namespaces = {**config.namespaces, **metadata.namespaces}
        else:
            base_iri = config.base_iri
            default_prefix = config.default_prefix
            language = config.language
            namespaces = dict(config.namespaces)
        self.language = language
        self.context = TranslationContext.create(base_iri, default_prefix, namespaces)
        self.resolver = self.context.resolver
        self.sink = _TripleSink()
        self._axiom_handlers: dict[AxiomKind, Callable[[AnyEntity, IRI, str], None]] = {
            AxiomKind.SUB_CLASS_OF: self._sub_class_of,
            AxiomKind.SUPER_CLASS_OF: self._super_class_of,
            AxiomKind.DISJOINT_WITH: self._disjoint_with,
            AxiomKind.EQUIVALENT_TO: self._equivalent_to,
            AxiomKind.UNION_OF: self._list_axiom("unionOf"),
            AxiomKind.INTERSECTION_OF: self._list_axiom("intersectionOf"),
            AxiomKind.ONE_OF: self._list_axiom("oneOf"),
            AxiomKind.DISJOINT_UNION_OF: self._list_axiom("disjointUnionOf"),
            AxiomKind.HAS_KEY: self._list_axiom("hasKey"),
            AxiomKind.PROPERTY_CHAIN_AXIOM: self._list_axiom("propertyChainAxiom"),
            AxiomKind.COMPLEMENT_OF: self._expression_axiom(owl("complementOf")),
            AxiomKind.SAME_AS: self._expression_axiom(owl("sameAs")),
            AxiomKind.DIFFERENT_FROM: self._expression_axiom(owl("differentFrom")),
            AxiomKind.TYPES: self._expression_axiom(RDF_TYPE),
            AxiomKind.SUB_PROPERTY_OF: self._expression_axiom(rdfs("subPropertyOf")),
            AxiomKind.INVERSE_OF: self._expression_axiom(owl("inverseOf")),
            AxiomKind.DOMAIN: self._expression_axiom(rdfs("domain")),
            AxiomKind.RANGE: self._range,
        }

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def subject_of(self, entity: AnyEntity) -> IRI:
        ref = self.resolver.resolve(entity.iri or entity.label)
        if not isinstance(ref, IRI):
            # A quoted label is not a usable subject; name it after the text
            ref = self.resolver.resolve(str(getattr(ref, "value", entity.label)))
        return ref

    def link(self, subject: ResourceRef, predicate: IRI, expression: str, reverse: bool = False) -> None:
        """Emit the linking triple for a parsed expression, then its structure."""
        ref, triples = parse_expression(expression, self.context)
        if reverse:
            self.sink.add(ref, predicate, subject)
        else:
            self.sink.add(subject, predicate, ref)
        self.sink.extend(triples)

    def _literal(self, value: str, language: Optional[str] = None) -> Literal:
        return Literal(value, language=language or None)

    # -------------------------------------------------------------------------
    # Header
    # -------------------------------------------------------------------------

    def emit_header(self) -> None:
        metadata = self.metadata
        if metadata is None:
            return
        ontology = IRI(metadata.ontology_iri or self.resolver.base_iri.rstrip("#/"))
        self.sink.add(ontology, RDF_TYPE, owl("Ontology"))
        if metadata.version_iri:
            self.sink.add(ontology, owl("versionIRI"), IRI(metadata.version_iri))
        if metadata.description:
            self.sink.add(ontology, rdfs("comment"), self._literal(metadata.description, self.language))
        for annotation in metadata.annotations:
            self._emit_annotation(ontology, annotation)

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def emit_entity(self, entity: AnyEntity) -> None:
        subject = self.subject_of(entity)
        self.sink.add(subject, RDF_TYPE, _DECLARATION_TYPES[entity.kind])
        if entity.label:
            self.sink.add(subject, RDFS_LABEL, self._literal(entity.label))
        if entity.description:
            self.sink.add(subject, skos("definition"), self._literal(entity.description, self.language))
        for annotation in entity.annotations:
            self._emit_annotation(subject, annotation)

        if isinstance(entity, ClassEntity):
            for attribute in entity.attributes:
                self._emit_attribute(subject, attribute.name, attribute.type)
        elif entity.is_property:
            for characteristic in entity.characteristics:
                self._emit_characteristic(subject, characteristic.name)

        for axiom in getattr(entity, "axioms", ()):
            self._emit_axiom(entity, subject, axiom.name, axiom.expression)

    def _emit_annotation(self, subject: IRI, annotation) -> None:
        predicate = self.resolver.resolve(annotation.property)
        if not isinstance(predicate, IRI):
            logger.warning(f"Skipping annotation with non-IRI property {annotation.property!r}")
            return
        value = annotation.value.strip()
        if (value.startswith("<") and value.endswith(">")) or value.startswith(("http://", "https://", "urn:")):
            obj: ResourceRef = self.resolver.resolve(value)
        elif value.startswith('"'):
            obj = self.resolver.parse_literal(value)
        else:
            obj = self._literal(annotation.value, annotation.language)
        self.sink.add(subject, predicate, obj)

    def _emit_attribute(self, owner: IRI, name: str, type_name: str) -> None:
        if not name.strip():
            return
        data_property = self.resolver.resolve(name)
        self.sink.add(data_property, RDF_TYPE, owl("DatatypeProperty"))
        self.sink.add(data_property, RDFS_LABEL, self._literal(name))
        self.sink.add(data_property, rdfs("domain"), owner)
        if type_name.strip():
            self.sink.add(data_property, rdfs("range"), self.resolver.resolve_datatype(type_name))

    def _emit_characteristic(self, subject: IRI, name: str) -> None:
        key = "".join(name.split()).lower()
        if key.endswith("property"):
            key = key[: -len("property")]
        local = _CHARACTERISTICS.get(key)
        if local is None:
            local = "".join(name.split()) + "Property"
            logger.warning(f"Unknown property characteristic {name!r}, emitting owl:{local}")
        self.sink.add(subject, RDF_TYPE, owl(local))

    # -------------------------------------------------------------------------
    # Axioms
    # -------------------------------------------------------------------------

    def _emit_axiom(self, entity: AnyEntity, subject: IRI, name: str, expression: str) -> None:
        if not (expression or "").strip():
            logger.debug(f"Skipping empty axiom {name!r} on {subject.value}")
            return
        kind = normalize_axiom_name(name)
        if kind in _PROPERTY_ONLY and not entity.is_property:
            logger.warning(f"Axiom {name!r} only applies to properties, skipped on {subject.value}")
            return
        if kind in _CLASS_ONLY and entity.is_property:
            logger.warning(f"Axiom {name!r} does not apply to properties, skipped on {subject.value}")
            return
        if kind is AxiomKind.IMPLICIT_RESTRICTION:
            self._implicit_restriction(entity, subject, expression, name)
            return
        self._axiom_handlers[kind](entity, subject, expression)

    def _sub_class_of(self, entity: AnyEntity, subject: IRI, expression: str) -> None:
        predicate = rdfs("subPropertyOf") if entity.is_property else RDFS_SUBCLASS_OF
        self.link(subject, predicate, expression)

    def _super_class_of(self, entity: AnyEntity, subject: IRI, expression: str) -> None:
        self.link(subject, RDFS_SUBCLASS_OF, expression, reverse=True)

    def _disjoint_with(self, entity: AnyEntity, subject: IRI, expression: str) -> None:
        predicate = owl("propertyDisjointWith") if entity.is_property else OWL_DISJOINT_WITH
        self.link(subject, predicate, expression)

    def _equivalent_to(self, entity: AnyEntity, subject: IRI, expression: str) -> None:
        predicate = owl("equivalentProperty") if entity.is_property else owl("equivalentClass")
        self.link(subject, predicate, expression)

    def _range(self, entity: AnyEntity, subject: IRI, expression: str) -> None:
        if isinstance(entity, DataPropertyEntity) and len(expression.split()) == 1:
            self.sink.add(subject, rdfs("range"), self.resolver.resolve_datatype(expression))
        else:
            self.link(subject, rdfs("range"), expression)

    def _expression_axiom(self, predicate: IRI) -> Callable[[AnyEntity, IRI, str], None]:
        def handler(entity: AnyEntity, subject: IRI, expression: str) -> None:
            self.link(subject, predicate, expression)
        return handler

    def _list_axiom(self, local: str) -> Callable[[AnyEntity, IRI, str], None]:
        predicate = owl(local)

        def handler(entity: AnyEntity, subject: IRI, expression: str) -> None:
            self.sink.add(subject, predicate, parse_list(expression, self.context))
        return handler

    def _implicit_restriction(
        self, entity: AnyEntity, subject: IRI, expression: str, name: str = ""
    ) -> None:
        """
        Read an unrecognised axiom as "<name> <expression>".

        An axiom named hasChild with value "min 2 Person" becomes
        subject rdfs:subClassOf (hasChild min 2 Person). A value that does not
        start with a quantifier is read as an existential restriction.
        """
        if entity.is_property:
            logger.warning(f"Unrecognised property axiom {name!r} skipped on {subject.value}")
            return
        prop = "_".join(name.split())
        if not prop:
            logger.warning(f"Nameless axiom skipped on {subject.value}")
            return
        words = expression.split()
        quantifier = words[0].lower()
        quantifier = _QUANTIFIER_ALIASES.get(quantifier, quantifier)
        if quantifier in _QUANTIFIERS:
            text = " ".join([prop, quantifier] + words[1:])
        else:
            text = f"{prop} some {expression.strip()}"
        self.link(subject, RDFS_SUBCLASS_OF, text)

    # -------------------------------------------------------------------------
    # Relations
    # -------------------------------------------------------------------------

    def emit_relations(self, entities: list[AnyEntity], relations: list[Relation]) -> None:
        by_id = {entity.id: entity for entity in entities}
        properties_by_label = {
            entity.label: entity for entity in entities if entity.is_property and entity.label
        }
        declared: set[str] = {
            self.subject_of(entity).value for entity in entities if entity.is_property
        }

        for relation in relations:
            if relation.inferred and not self.config.include_inferred:
                logger.debug(f"Skipping inferred relation {relation.source} -> {relation.target}")
                continue
            source = by_id.get(relation.source)
            target = by_id.get(relation.target)
            if source is None or target is None:
                logger.warning(
                    f"Skipping relation {relation.label!r}: dangling endpoint "
                    f"{relation.source} -> {relation.target}"
                )
                continue

            subject = self.subject_of(source)
            obj = self.subject_of(target)
            predicate = structural_predicate(relation.label)
            if predicate is None:
                prop_entity = properties_by_label.get(relation.label)
                if prop_entity is not None:
                    predicate = self.subject_of(prop_entity)
                else:
                    resolved = self.resolver.resolve(relation.label)
                    if not isinstance(resolved, IRI):
                        logger.warning(f"Skipping relation with literal label {relation.label!r}")
                        continue
                    predicate = resolved
                if predicate.value not in declared:
                    declared.add(predicate.value)
                    if target.kind is EntityKind.DATATYPE:
                        self.sink.add(predicate, RDF_TYPE, owl("DatatypeProperty"))
                    else:
                        self.sink.add(predicate, RDF_TYPE, owl("ObjectProperty"))
            self.sink.add(subject, predicate, obj)


_PROPERTY_ONLY = frozenset({
    AxiomKind.SUB_PROPERTY_OF,
    AxiomKind.INVERSE_OF,
    AxiomKind.DOMAIN,
    AxiomKind.RANGE,
    AxiomKind.PROPERTY_CHAIN_AXIOM,
})

_CLASS_ONLY = frozenset({
    AxiomKind.SUPER_CLASS_OF,
    AxiomKind.UNION_OF,
    AxiomKind.INTERSECTION_OF,
    AxiomKind.ONE_OF,
    AxiomKind.COMPLEMENT_OF,
    AxiomKind.DISJOINT_UNION_OF,
    AxiomKind.HAS_KEY,
    AxiomKind.SAME_AS,
    AxiomKind.DIFFERENT_FROM,
    AxiomKind.TYPES,
})


def build_triples(
    entities: Iterable[AnyEntity],
    relations: Iterable[Relation] = (),
    metadata: Optional[OntologyMetadata] = None,
    config: Optional[TranslationConfig] = None,
) -> list[Triple]:
    """Translate a graph and return just the ordered triples."""
    return TripleStoreBuilder(config).build(entities, relations, metadata).triples
