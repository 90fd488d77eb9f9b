"""Built-in example queries offered by the query console."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryTemplate:
    label: str
    description: str
    query: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "description": self.description, "query": self.query}


QUERY_TEMPLATES: tuple[QueryTemplate, ...] = (
    QueryTemplate(
        label="All Classes",
        description="List every defined class in the ontology.",
        query="""PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
PREFIX owl: <http://www.w3.org/2002/07/owl#>

SELECT ?class {
  ?class rdf:type owl:Class .
}""",
    ),
    QueryTemplate(
        label="Class Hierarchy",
        description="Show parent-child relationships.",
        query="""PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>

SELECT ?sub ?super WHERE {
  ?sub rdfs:subClassOf ?super .
}""",
    ),
    QueryTemplate(
        label="Individuals & Types",
        description="List individuals and their instantiated class.",
        query="""PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
PREFIX owl: <http://www.w3.org/2002/07/owl#>

SELECT DISTINCT ?indiv ?type {
  ?indiv rdf:type ?type .
  ?type rdf:type owl:Class .
} LIMIT 50""",
    ),
)


def get_template(label: str) -> QueryTemplate:
    """Look up a template by its label (case-insensitive)."""
    for template in QUERY_TEMPLATES:
        if template.label.lower() == label.lower():
            return template
    raise KeyError(f"No query template named {label!r}")
