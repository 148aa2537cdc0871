"""FastAPI HTTP API for DSL/graph conversion."""

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Any

from ..config import get_config
from .parser import DSLParser
from .generator import DSLGenerator
from .converter import AstToGraphConverter, GraphToAstConverter
from .errors import DSLSyntaxError
from .graph import Graph


app = FastAPI(
    title="Flowgo DSL API",
    description="Convert between Flowgo workflow DSL and its visual-editing graph",
    version="0.1.0",
)

parser = DSLParser()
generator = DSLGenerator()
graph_to_ast = GraphToAstConverter()


# Request/Response models
class DslToGraphRequest(BaseModel):
    """Request to convert DSL to an editing graph."""
    dsl: str = Field(..., description="DSL workflow text")
    diagnostics: bool | None = Field(None, description="Log graph construction details")


class DslToGraphResponse(BaseModel):
    """Response containing the graph and the layout hints for it."""
    graph: Graph = Field(..., description="Nodes and edges without positions")
    layout: dict[str, Any] = Field(..., description="Options for the layout engine")


class GraphToDslRequest(BaseModel):
    """Request to convert an edited graph to DSL."""
    graph: Graph = Field(..., description="Nodes and edges as edited")


class DslResponse(BaseModel):
    """Response containing DSL text."""
    dsl: str = Field(..., description="DSL workflow text")


class NormalizeRequest(BaseModel):
    """Request to reformat DSL into canonical form."""
    dsl: str = Field(..., description="DSL workflow text")


def _syntax_error(e: DSLSyntaxError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "message": f"Failed to parse DSL: {e.message}",
            "position": e.position,
            "context": e.context,
        },
    )


# Endpoints
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Flowgo DSL API",
        "version": "0.1.0",
        "endpoints": {
            "dslToGraph": "POST /dslToGraph - Convert DSL to an editing graph",
            "graphToDsl": "POST /graphToDsl - Convert an edited graph to DSL",
            "normalize": "POST /normalize - Reformat DSL into canonical form",
        },
    }


@app.post("/dslToGraph", response_model=DslToGraphResponse)
async def dsl_to_graph(request: DslToGraphRequest):
    """Convert DSL to an editing graph."""
    try:
        program = parser.parse(request.dsl)
    except DSLSyntaxError as e:
        raise _syntax_error(e)

    graph = AstToGraphConverter(diagnostics=request.diagnostics).convert(program)
    return DslToGraphResponse(graph=graph, layout=get_config().layout.to_dict())


@app.post("/graphToDsl", response_model=DslResponse)
async def graph_to_dsl(request: GraphToDslRequest):
    """Convert an edited graph back to DSL.

    Decisions and literal arguments are not represented in the graph and
    are therefore absent from the result.
    """
    program = graph_to_ast.convert(request.graph)
    return DslResponse(dsl=generator.generate(program))


@app.post("/normalize", response_model=DslResponse)
async def normalize(request: NormalizeRequest):
    """Reformat DSL: canonical ordering, indentation and spacing."""
    try:
        program = parser.parse(request.dsl)
    except DSLSyntaxError as e:
        raise _syntax_error(e)
    return DslResponse(dsl=generator.generate(program))


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
