"""
OWL translation of the editor graph.

TripleStoreBuilder turns entities, relations and inline axioms into an
ordered list of triples; axiom names are normalized into AxiomKind first.
"""

from ontoweave.owl.axioms import AxiomKind, normalize_axiom_name
from ontoweave.owl.builder import (
    BuildResult,
    TripleStoreBuilder,
    build_triples,
)

__all__ = [
    "AxiomKind",
    "normalize_axiom_name",
    "BuildResult",
    "TripleStoreBuilder",
    "build_triples",
]
