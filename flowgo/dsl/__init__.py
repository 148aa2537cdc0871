"""DSL package for Flowgo workflow design.

This package provides parsing of the Flowgo workflow DSL, generation of DSL
text from an AST, and conversion between the AST and the node/edge graph a
visual editor works on.

Classes:
    DSLParser: Parse DSL text into a Program AST
    DSLGenerator: Render a Program AST as DSL text
    AstToGraphConverter: Project a Program into an editing graph
    GraphToAstConverter: Rebuild a Program from an edited graph
    GraphEditor: Apply visual-editor edits to a graph

    Program: Root AST node holding actions, entities, roles and workflows
    Graph: Ordered nodes and edges exchanged with the editor

Exceptions:
    DSLSyntaxError: First syntax error in a DSL source, with position context
"""

from .parser import DSLParser
from .generator import DSLGenerator, generate_dsl
from .converter import AstToGraphConverter, GraphToAstConverter, sequence_path
from .editor import GraphEditor
from .errors import DSLSyntaxError
from .ast_nodes import (
    ActionCall,
    ActionDef,
    ActorKind,
    Argument,
    Attribute,
    BooleanLiteral,
    Decision,
    EntityDef,
    Identifier,
    NumberLiteral,
    Parameter,
    Program,
    PropertyAccess,
    RoleDef,
    StringLiteral,
    WorkflowDef,
)
from .graph import EdgeKind, Graph, GraphEdge, GraphNode, NodeKind

__all__ = [
    "DSLParser",
    "DSLGenerator",
    "generate_dsl",
    "AstToGraphConverter",
    "GraphToAstConverter",
    "sequence_path",
    "GraphEditor",
    "DSLSyntaxError",
    "ActionCall",
    "ActionDef",
    "ActorKind",
    "Argument",
    "Attribute",
    "BooleanLiteral",
    "Decision",
    "EntityDef",
    "Identifier",
    "NumberLiteral",
    "Parameter",
    "Program",
    "PropertyAccess",
    "RoleDef",
    "StringLiteral",
    "WorkflowDef",
    "EdgeKind",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "NodeKind",
]
