"""Flowgo - a DSL for role-based human/AI workflows and its visual-editing graph.

This package parses the Flowgo workflow DSL into an AST, renders ASTs back to
DSL text, and converts between the AST and the node/edge graph that a visual
editor lays out and edits.

Example:
    Round-trip a document through the editing graph:

    >>> from flowgo import DSLParser, AstToGraphConverter, GraphToAstConverter
    >>> program = DSLParser().parse(text)
    >>> graph = AstToGraphConverter().convert(program)
    >>> print(GraphToAstConverter().convert(graph))

    Or serve the conversions to agents:

    $ flowgo-mcp

Modules:
    dsl: Parser, generator, graph converters and editing surface
    mcp: Model Context Protocol server implementation
    config: Runtime configuration
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .dsl import (
    DSLParser,
    DSLGenerator,
    AstToGraphConverter,
    GraphToAstConverter,
    GraphEditor,
    DSLSyntaxError,
)
from .config import FlowgoConfig, LayoutOptions, get_config

__all__ = [
    "DSLParser",
    "DSLGenerator",
    "AstToGraphConverter",
    "GraphToAstConverter",
    "GraphEditor",
    "DSLSyntaxError",
    "FlowgoConfig",
    "LayoutOptions",
    "get_config",
]
