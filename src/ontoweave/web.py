"""
OntoWeave Web API

FastAPI-based REST API for translating editor graphs and querying them.
Provides endpoints for:
- Graph-to-OWL translation (triples and Turtle)
- Graph-pattern queries over the translation or the direct projection
- Manchester expression parsing
- Built-in query templates
"""

import logging
from typing import Any, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ontoweave import __version__
from ontoweave.config import OntoWeaveConfig, TranslationConfig
from ontoweave.manchester import parse_expression
from ontoweave.models import OntologyGraph, load_graph
from ontoweave.owl import TripleStoreBuilder
from ontoweave.sparql import (
    QUERY_TEMPLATES,
    MalformedQuery,
    QueryBudgetExceeded,
    QueryContext,
    QueryTimeoutException,
    SPARQLExecutor,
    graph_to_triples,
)
from ontoweave.terms import (
    DEFAULT_BASE_IRI,
    DEFAULT_PREFIX,
    TranslationContext,
    normalize_base_iri,
)

logger = logging.getLogger(__name__)


# Pydantic models for API
class GraphDocument(BaseModel):
    """An editor graph: entities, relations and ontology metadata."""
    entities: list[dict[str, Any]] = Field(default_factory=list)
    relations: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class QueryRequest(BaseModel):
    """Query request against a graph."""
    query: str = Field(..., description="SELECT query string")
    graph: GraphDocument = Field(default_factory=GraphDocument)
    source: Literal["owl", "graph"] = Field(
        default="owl",
        description="Query the OWL translation or the direct graph projection",
    )


class ExpressionRequest(BaseModel):
    """Manchester expression to parse."""
    expression: str
    base_iri: Optional[str] = None
    default_prefix: Optional[str] = None


def _load(document: GraphDocument) -> OntologyGraph:
    try:
        return load_graph(document.model_dump())
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid graph: {e}")


def create_app(config: Optional[OntoWeaveConfig] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Optional configuration (read from the environment if not provided)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="OntoWeave API",
        description="Translate visual ontology graphs to OWL and query them",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config or OntoWeaveConfig.from_env()

    def translation_config() -> TranslationConfig:
        return app.state.config.translation

    # ==========================================================================
    # Health & Info
    # ==========================================================================

    @app.get("/", tags=["Info"])
    async def root():
        """API root with basic info."""
        return {
            "name": "OntoWeave",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health", tags=["Info"])
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    # ==========================================================================
    # Translation
    # ==========================================================================

    @app.post("/translate", tags=["Translation"])
    async def translate(document: GraphDocument):
        """Translate a graph to ordered triples and Turtle text."""
        graph = _load(document)
        result = TripleStoreBuilder(translation_config()).build(
            graph.entities, graph.relations, graph.metadata
        )
        return {
            "triple_count": len(result.triples),
            "prefixes": result.prefixes,
            "triples": [list(t) for t in result.as_strings()],
            "turtle": result.to_turtle(),
        }

    @app.post("/expressions/parse", tags=["Translation"])
    async def parse_manchester(request: ExpressionRequest):
        """Parse a Manchester class expression and return its triples."""
        defaults = translation_config()
        context = TranslationContext.create(
            request.base_iri or defaults.base_iri or DEFAULT_BASE_IRI,
            request.default_prefix or defaults.default_prefix or DEFAULT_PREFIX,
            defaults.namespaces,
        )
        ref, triples = parse_expression(request.expression, context)
        return {
            "resource": ref.display,
            "triples": [list(t.as_strings()) for t in triples],
        }

    # ==========================================================================
    # Query
    # ==========================================================================

    @app.post("/query", tags=["Query"])
    async def query(request: QueryRequest):
        """Execute a SELECT query against a graph."""
        graph = _load(request.graph)
        config = translation_config()
        if request.source == "graph":
            base_iri = normalize_base_iri(graph.metadata.base_iri or config.base_iri)
            triples = graph_to_triples(graph.entities, graph.relations, base_iri).triples
            default_prefix = graph.metadata.default_prefix or config.default_prefix
            prefixes = {default_prefix: base_iri, "": base_iri}
        else:
            result = TripleStoreBuilder(config).build(
                graph.entities, graph.relations, graph.metadata
            )
            triples = result.triples
            prefixes = dict(result.prefixes)
            default_prefix = graph.metadata.default_prefix or config.default_prefix
            prefixes.setdefault("", prefixes.get(default_prefix, config.base_iri))

        context = QueryContext.from_config(app.state.config.query)
        try:
            return SPARQLExecutor(triples, prefixes).execute(request.query, context).to_dict()
        except MalformedQuery as e:
            raise HTTPException(status_code=400, detail=str(e))
        except QueryTimeoutException as e:
            raise HTTPException(status_code=408, detail=str(e))
        except QueryBudgetExceeded as e:
            raise HTTPException(status_code=413, detail=str(e))

    @app.get("/query/templates", tags=["Query"])
    async def query_templates():
        """List the built-in example queries."""
        return {"templates": [template.to_dict() for template in QUERY_TEMPLATES]}

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ontoweave.web:create_app", factory=True, host="0.0.0.0", port=8000)
