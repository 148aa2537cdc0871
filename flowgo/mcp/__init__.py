"""MCP Server package for Flowgo workflow design.

This package provides a Model Context Protocol (MCP) server that exposes
Flowgo DSL tooling to AI agents.

Validation:
    - validate_workflow: Check DSL syntax, report unresolved references
    - get_workflow_info: Summarize definitions, actors and data flow

Conversion:
    - dsl_to_graph: DSL to the visual-editing graph plus layout options
    - graph_to_dsl: Edited graph back to DSL
    - format_workflow: Canonical DSL formatting

Example:
    Start the MCP server:

    >>> from flowgo.mcp.server import mcp
    >>> if __name__ == "__main__":
    ...     mcp.run()
"""

from .server import mcp, main

__all__ = [
    "mcp",
    "main",
]
