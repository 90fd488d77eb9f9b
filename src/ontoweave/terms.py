"""
Resource references, triples and IRI canonicalization.

Every translation pass works on the same small term vocabulary:
- IRI: a named resource, always held as a full IRI after canonicalization
- BlankNode: an anonymous resource allocated for compound expressions
- Literal: a lexical value with an optional language tag or datatype
- Collection: an ordered RDF list, used as the object of list-valued predicates

The TermResolver turns raw tokens typed by a user into canonical references.
It is pure: the same token always resolves to the same reference for a given
base IRI and prefix table.
"""

from dataclasses import dataclass, field
from typing import Optional, Union
import re


# =============================================================================
# Namespaces
# =============================================================================

RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS = "http://www.w3.org/2000/01/rdf-schema#"
OWL = "http://www.w3.org/2002/07/owl#"
XSD = "http://www.w3.org/2001/XMLSchema#"
SKOS = "http://www.w3.org/2004/02/skos/core#"

STANDARD_PREFIXES: dict[str, str] = {
    "rdf": RDF,
    "rdfs": RDFS,
    "owl": OWL,
    "xsd": XSD,
    "skos": SKOS,
}

DEFAULT_BASE_IRI = "http://example.org/ontology#"
DEFAULT_PREFIX = "ex"

# OWL 2 RDF-based vocabulary; bare tokens from this set live in the owl: namespace
OWL_VOCABULARY = frozenset({
    "AllDifferent", "AllDisjointClasses", "AllDisjointProperties", "allValuesFrom",
    "annotatedProperty", "annotatedSource", "annotatedTarget", "Annotation",
    "AnnotationProperty", "assertionProperty", "AsymmetricProperty", "Axiom",
    "backwardCompatibleWith", "bottomDataProperty", "bottomObjectProperty", "cardinality",
    "Class", "complementOf", "DataRange", "datatypeComplementOf", "DatatypeProperty",
    "deprecated", "DeprecatedClass", "DeprecatedProperty", "differentFrom",
    "disjointUnionOf", "disjointWith", "distinctMembers", "equivalentClass",
    "equivalentProperty", "FunctionalProperty", "hasKey", "hasSelf", "hasValue",
    "imports", "incompatibleWith", "intersectionOf", "InverseFunctionalProperty",
    "inverseOf", "IrreflexiveProperty", "maxCardinality", "maxQualifiedCardinality",
    "members", "minCardinality", "minQualifiedCardinality", "NamedIndividual",
    "NegativePropertyAssertion", "Nothing", "ObjectProperty", "onClass", "onDataRange",
    "onDatatype", "oneOf", "onProperty", "onProperties", "Ontology", "OntologyProperty",
    "priorVersion", "propertyChainAxiom", "propertyDisjointWith", "qualifiedCardinality",
    "ReflexiveProperty", "Restriction", "sameAs", "someValuesFrom", "sourceIndividual",
    "SymmetricProperty", "targetIndividual", "targetValue", "Thing", "topDataProperty",
    "topObjectProperty", "TransitiveProperty", "unionOf", "versionInfo", "versionIRI",
    "withRestrictions",
})

XSD_DATATYPES = frozenset({
    "string", "boolean", "decimal", "integer", "int", "long", "short", "byte",
    "float", "double", "date", "dateTime", "dateTimeStamp", "time", "duration",
    "anyURI", "nonNegativeInteger", "positiveInteger", "negativeInteger",
    "nonPositiveInteger", "unsignedInt", "unsignedLong", "normalizedString",
    "token", "language", "hexBinary", "base64Binary", "gYear", "gYearMonth",
})

_XSD_BY_LOWER = {name.lower(): name for name in XSD_DATATYPES}

_ABSOLUTE_SCHEMES = ("http://", "https://", "urn:")
_LITERAL_RE = re.compile(r'^"(.*)"(?:@([A-Za-z][A-Za-z0-9\-]*)|\^\^(\S+))?$', re.DOTALL)
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DECIMAL_RE = re.compile(r"^[+-]?\d*\.\d+$")


# =============================================================================
# Resource References
# =============================================================================

@dataclass(frozen=True, slots=True)
class IRI:
    """A named resource identified by a (canonical) IRI."""
    value: str

    def __str__(self) -> str:
        return f"<{self.value}>"

    @property
    def display(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class BlankNode:
    """An anonymous resource allocated for a compound expression."""
    label: str

    def __str__(self) -> str:
        return f"_:{self.label}"

    @property
    def display(self) -> str:
        return f"_:{self.label}"


@dataclass(frozen=True, slots=True)
class Literal:
    """
    An RDF literal.

    Carries either a language tag or a datatype IRI, never both.
    """
    value: str
    language: Optional[str] = None
    datatype: Optional[str] = None

    def __str__(self) -> str:
        return self.display

    @property
    def display(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        base = f'"{escaped}"'
        if self.language:
            return f"{base}@{self.language}"
        if self.datatype:
            return f"{base}^^<{self.datatype}>"
        return base


@dataclass(frozen=True, slots=True)
class Collection:
    """An ordered RDF list of references, e.g. the members of owl:unionOf."""
    items: tuple["ResourceRef", ...] = ()

    def __str__(self) -> str:
        return self.display

    @property
    def display(self) -> str:
        if not self.items:
            return "()"
        return "( " + " ".join(item.display for item in self.items) + " )"


ResourceRef = Union[IRI, BlankNode, Literal, Collection]


@dataclass(frozen=True, slots=True)
class Triple:
    """A subject-predicate-object statement."""
    subject: ResourceRef
    predicate: IRI
    object: ResourceRef

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."

    def as_strings(self) -> tuple[str, str, str]:
        """Display strings for the three positions."""
        return (self.subject.display, self.predicate.display, self.object.display)


def rdf(local: str) -> IRI:
    return IRI(RDF + local)


def rdfs(local: str) -> IRI:
    return IRI(RDFS + local)


def owl(local: str) -> IRI:
    return IRI(OWL + local)


def xsd(local: str) -> IRI:
    return IRI(XSD + local)


def skos(local: str) -> IRI:
    return IRI(SKOS + local)


RDF_TYPE = rdf("type")
RDFS_LABEL = rdfs("label")
RDFS_SUBCLASS_OF = rdfs("subClassOf")
OWL_DISJOINT_WITH = owl("disjointWith")

_STRUCTURAL_LABELS = {
    "type": RDF_TYPE,
    "a": RDF_TYPE,
    "rdf:type": RDF_TYPE,
    "subclassof": RDFS_SUBCLASS_OF,
    "rdfs:subclassof": RDFS_SUBCLASS_OF,
}


def structural_predicate(label: str) -> Optional[IRI]:
    """Map an edge label to rdf:type, rdfs:subClassOf or owl:disjointWith."""
    key = label.strip().lower()
    if key in _STRUCTURAL_LABELS:
        return _STRUCTURAL_LABELS[key]
    if "disjoint" in key:
        return OWL_DISJOINT_WITH
    return None


# =============================================================================
# Blank node allocation
# =============================================================================

class BlankNodeCounter:
    """
    Monotonic blank node allocator scoped to a single translation pass.

    A new counter is created for every pass, so repeated or interleaved
    translations never share numbering.
    """

    def __init__(self, start: int = 0):
        self._next = start

    def next(self) -> BlankNode:
        node = BlankNode(f"b{self._next}")
        self._next += 1
        return node

    @property
    def allocated(self) -> int:
        return self._next


# =============================================================================
# Canonicalization
# =============================================================================

def normalize_base_iri(base_iri: str) -> str:
    """Ensure a base IRI ends with '#' or '/' so local names can be appended."""
    if not base_iri:
        return DEFAULT_BASE_IRI
    if base_iri.endswith("#") or base_iri.endswith("/"):
        return base_iri
    return base_iri + "#"


class TermResolver:
    """
    Resolves raw tokens into canonical resource references.

    Resolution order:
    1. <...> passes through as an IRI
    2. absolute IRIs (http, https, urn) pass through
    3. quoted tokens become literals
    4. _:label maps into the base namespace
    5. prefix:local expands through the prefix table (unknown prefixes pass through)
    6. OWL vocabulary words map to the owl: namespace
    7. any other bare word is appended to the base IRI
    """

    def __init__(
        self,
        base_iri: str = DEFAULT_BASE_IRI,
        default_prefix: str = DEFAULT_PREFIX,
        prefixes: Optional[dict[str, str]] = None,
    ):
        self.base_iri = normalize_base_iri(base_iri)
        self.default_prefix = default_prefix or DEFAULT_PREFIX
        table = dict(STANDARD_PREFIXES)
        table[self.default_prefix] = self.base_iri
        if prefixes:
            table.update(prefixes)
        self.prefixes = table

    def resolve(self, token: Optional[str]) -> ResourceRef:
        """Resolve a class, property or individual token."""
        raw = (token or "").strip()
        if not raw:
            return IRI(self.base_iri + "Unknown")
        if raw.startswith("<") and raw.endswith(">"):
            return IRI(raw[1:-1])
        if raw.startswith(_ABSOLUTE_SCHEMES):
            return IRI(raw)
        if raw.startswith('"'):
            return self.parse_literal(raw)
        if raw.startswith("_:"):
            return IRI(self.base_iri + ("_".join(raw[2:].split()) or "Unknown"))
        if ":" in raw and not any(ch.isspace() for ch in raw):
            prefix, local = raw.split(":", 1)
            namespace = self.prefixes.get(prefix)
            if namespace is not None:
                return IRI(namespace + local)
            return IRI(raw)
        if raw in OWL_VOCABULARY:
            return IRI(OWL + raw)
        return IRI(self.base_iri + "_".join(raw.split()))

    def resolve_datatype(self, token: Optional[str]) -> ResourceRef:
        """Resolve a datatype token; bare XSD names go to the xsd: namespace."""
        raw = (token or "").strip()
        name = _XSD_BY_LOWER.get(raw.lower())
        if name is not None:
            return IRI(XSD + name)
        return self.resolve(raw)

    def resolve_value(self, token: Optional[str]) -> ResourceRef:
        """Resolve a filler for owl:hasValue or an annotation value."""
        raw = (token or "").strip()
        if raw.startswith('"'):
            return self.parse_literal(raw)
        if _INTEGER_RE.match(raw):
            return Literal(raw, datatype=XSD + "integer")
        if _DECIMAL_RE.match(raw):
            return Literal(raw, datatype=XSD + "decimal")
        if raw in ("true", "false"):
            return Literal(raw, datatype=XSD + "boolean")
        return self.resolve(raw)

    def is_datatype(self, token: str) -> bool:
        """True when a token names a datatype rather than a class."""
        raw = token.strip()
        if raw.startswith("xsd:") or raw.startswith("<" + XSD) or raw.startswith(XSD):
            return True
        return raw in XSD_DATATYPES or raw == "rdfs:Literal"

    def parse_literal(self, raw: str) -> Literal:
        match = _LITERAL_RE.match(raw)
        if match is None:
            # Unterminated quote: keep the text without the leading quote
            return Literal(raw.strip('"'))
        value, language, datatype = match.groups()
        if datatype:
            resolved = self.resolve(datatype)
            datatype = resolved.value if isinstance(resolved, IRI) else datatype
        return Literal(value.replace('\\"', '"'), language=language, datatype=datatype)


@dataclass
class TranslationContext:
    """
    Explicit state for one translation pass.

    Holds the resolver and the blank node counter; created per call and passed
    down the parser and builder instead of living in module globals.
    """
    resolver: TermResolver = field(default_factory=TermResolver)
    counter: BlankNodeCounter = field(default_factory=BlankNodeCounter)

    @classmethod
    def create(
        cls,
        base_iri: str = DEFAULT_BASE_IRI,
        default_prefix: str = DEFAULT_PREFIX,
        prefixes: Optional[dict[str, str]] = None,
        blank_start: int = 0,
    ) -> "TranslationContext":
        return cls(
            resolver=TermResolver(base_iri, default_prefix, prefixes),
            counter=BlankNodeCounter(blank_start),
        )

    def new_blank(self) -> BlankNode:
        return self.counter.next()
