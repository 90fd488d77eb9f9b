"""
Axiom kinds.

The editor stores axioms under free-form names ("SubClassOf", "Disjoint With",
"equivalent-class", ...). normalize_axiom_name() maps such a name onto the
closed AxiomKind set once, at the boundary; the builder then dispatches on the
enum. Names that match nothing become IMPLICIT_RESTRICTION.
"""

from enum import Enum, auto
import re


class AxiomKind(Enum):
    """Closed set of axioms the builder understands."""
    # Class and individual axioms
    SUB_CLASS_OF = auto()
    SUPER_CLASS_OF = auto()
    DISJOINT_WITH = auto()
    EQUIVALENT_TO = auto()
    UNION_OF = auto()
    INTERSECTION_OF = auto()
    ONE_OF = auto()
    COMPLEMENT_OF = auto()
    DISJOINT_UNION_OF = auto()
    HAS_KEY = auto()
    SAME_AS = auto()
    DIFFERENT_FROM = auto()
    TYPES = auto()

    # Property axioms
    SUB_PROPERTY_OF = auto()
    INVERSE_OF = auto()
    DOMAIN = auto()
    RANGE = auto()
    PROPERTY_CHAIN_AXIOM = auto()

    # Anything else: "<name> <expression>" read as a sub-class restriction
    IMPLICIT_RESTRICTION = auto()

    @property
    def is_list_valued(self) -> bool:
        return self in _LIST_VALUED


_LIST_VALUED = frozenset({
    AxiomKind.UNION_OF,
    AxiomKind.INTERSECTION_OF,
    AxiomKind.ONE_OF,
    AxiomKind.DISJOINT_UNION_OF,
    AxiomKind.HAS_KEY,
    AxiomKind.PROPERTY_CHAIN_AXIOM,
})

_NAME_TO_KIND = {
    "subclassof": AxiomKind.SUB_CLASS_OF,
    "subclass": AxiomKind.SUB_CLASS_OF,
    "superclassof": AxiomKind.SUPER_CLASS_OF,
    "superclass": AxiomKind.SUPER_CLASS_OF,
    "disjointwith": AxiomKind.DISJOINT_WITH,
    "disjointclasses": AxiomKind.DISJOINT_WITH,
    "equivalentto": AxiomKind.EQUIVALENT_TO,
    "equivalentclass": AxiomKind.EQUIVALENT_TO,
    "equivalentclasses": AxiomKind.EQUIVALENT_TO,
    "equivalentproperty": AxiomKind.EQUIVALENT_TO,
    "unionof": AxiomKind.UNION_OF,
    "intersectionof": AxiomKind.INTERSECTION_OF,
    "oneof": AxiomKind.ONE_OF,
    "complementof": AxiomKind.COMPLEMENT_OF,
    "disjointunionof": AxiomKind.DISJOINT_UNION_OF,
    "haskey": AxiomKind.HAS_KEY,
    "sameas": AxiomKind.SAME_AS,
    "sameindividual": AxiomKind.SAME_AS,
    "differentfrom": AxiomKind.DIFFERENT_FROM,
    "differentindividuals": AxiomKind.DIFFERENT_FROM,
    "types": AxiomKind.TYPES,
    "type": AxiomKind.TYPES,
    "instanceof": AxiomKind.TYPES,
    "subpropertyof": AxiomKind.SUB_PROPERTY_OF,
    "inverseof": AxiomKind.INVERSE_OF,
    "domain": AxiomKind.DOMAIN,
    "range": AxiomKind.RANGE,
    "propertydisjointwith": AxiomKind.DISJOINT_WITH,
    "propertychainaxiom": AxiomKind.PROPERTY_CHAIN_AXIOM,
    "propertychain": AxiomKind.PROPERTY_CHAIN_AXIOM,
}

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_axiom_name(name: str) -> AxiomKind:
    """Lower-case, strip non-alphanumerics and look the name up."""
    key = _NON_ALNUM.sub("", (name or "").lower())
    return _NAME_TO_KIND.get(key, AxiomKind.IMPLICIT_RESTRICTION)
