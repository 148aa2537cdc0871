"""Flowgo Workflow MCP Server

Provides tools for validating, analyzing and converting Flowgo workflows.
Agents work in DSL; the editing graph is exchanged as JSON.
"""

import logging
import sys
from collections import Counter
from fastmcp import FastMCP, Context
from fastmcp.exceptions import ToolError

from .. import __version__
from ..config import get_config
from ..dsl import (
    DSLParser,
    DSLGenerator,
    AstToGraphConverter,
    GraphToAstConverter,
    DSLSyntaxError,
    Decision,
    Graph,
    ActorKind,
)

logger = logging.getLogger(__name__)

# Create MCP server
mcp = FastMCP("Flowgo Workflow Designer")

parser = DSLParser()
generator = DSLGenerator()


def _count_calls(elements) -> tuple[int, int]:
    """Count (action calls, decisions) in a workflow body, recursively."""
    calls = decisions = 0
    for element in elements:
        if isinstance(element, Decision):
            decisions += 1
            nested_calls, nested_decisions = _count_calls(element.if_body + element.else_body)
            calls += nested_calls
            decisions += nested_decisions
        else:
            calls += 1
    return calls, decisions


def _iter_calls(elements):
    """Yield every action call in a workflow body, including those in branches."""
    for element in elements:
        if isinstance(element, Decision):
            yield from _iter_calls(element.if_body + element.else_body)
        else:
            yield element


# ===== VALIDATION TOOLS =====

@mcp.tool
def validate_workflow(dsl: str) -> dict:
    """Validate DSL workflow syntax.

    Parses DSL and checks for syntax errors. Returns validation status, the
    first error found (with its position), and definition counts.

    Args:
        dsl: Workflow content in DSL format

    Returns:
        Validation result with is_valid, errors, and warnings

    Examples:
        validate_workflow(dsl_content)
    """
    try:
        program = parser.parse(dsl)
    except DSLSyntaxError as e:
        return {
            "is_valid": False,
            "errors": [str(e)],
            "warnings": [],
            "position": e.position,
            "message": "DSL syntax error",
        }

    # Names that would be silently dropped from the graph
    warnings = []
    action_names = {a.name for a in program.actions}
    role_names = {r.name for r in program.roles}
    produced = {o for a in program.actions for o in a.outputs}
    for action in program.actions:
        if action.actor == ActorKind.ROLE and action.role_name not in role_names:
            warnings.append(f"Action '{action.name}' is performed by undefined role '{action.role_name}'")
        for input_name in action.inputs:
            if input_name not in produced:
                warnings.append(f"Input '{input_name}' of action '{action.name}' is not produced by any action")
    for workflow in program.workflows:
        for call in _iter_calls(workflow.elements):
            if call.name not in action_names:
                warnings.append(f"Workflow '{workflow.name}' calls undefined action '{call.name}'")

    return {
        "is_valid": True,
        "errors": [],
        "warnings": warnings,
        "action_count": len(program.actions),
        "entity_count": len(program.entities),
        "role_count": len(program.roles),
        "workflow_count": len(program.workflows),
    }


@mcp.tool
def get_workflow_info(dsl: str) -> dict:
    """Analyze workflow structure and return metadata.

    Parses DSL and extracts structural information like actors, data
    dependencies and workflow sizes.

    Args:
        dsl: Workflow content in DSL format

    Returns:
        Workflow metadata including definitions, actors and data flow

    Examples:
        get_workflow_info(dsl_content)
    """
    try:
        program = parser.parse(dsl)
    except DSLSyntaxError as e:
        raise ToolError(f"Error analyzing workflow: {e}")

    actors = Counter(action.actor_label for action in program.actions)

    data_flow = []
    for producer in program.actions:
        for output in producer.outputs:
            consumers = [a.name for a in program.actions if output in a.inputs]
            data_flow.append({"data": output, "from": producer.name, "to": consumers})

    workflows = []
    for workflow in program.workflows:
        calls, decisions = _count_calls(workflow.elements)
        workflows.append({
            "name": workflow.name,
            "element_count": len(workflow.elements),
            "call_count": calls,
            "decision_count": decisions,
        })

    return {
        "definitions": program.list_definitions(),
        "actors": dict(actors),
        "data_flow": data_flow,
        "workflows": workflows,
    }


# ===== CONVERSION TOOLS =====

@mcp.tool
def dsl_to_graph(dsl: str, diagnostics: bool = False) -> dict:
    """Convert DSL to the node/edge graph used by the visual editor.

    Args:
        dsl: Workflow content in DSL format
        diagnostics: Log every node and edge decision at debug level

    Returns:
        Dict with "graph" (nodes and edges) and "layout" (layout engine options)

    Examples:
        dsl_to_graph(dsl_content)
    """
    try:
        program = parser.parse(dsl)
    except DSLSyntaxError as e:
        raise ToolError(f"Error converting workflow: {e}")

    graph = AstToGraphConverter(diagnostics=diagnostics).convert(program)
    return {
        "graph": graph.model_dump(mode="json"),
        "layout": get_config().layout.to_dict(),
    }


@mcp.tool
async def graph_to_dsl(ctx: Context, graph: dict) -> str:
    """Convert an edited graph back to DSL.

    Only straight-line action sequences survive: decisions and literal
    arguments are not represented in the graph.

    Args:
        graph: Graph with "nodes" and "edges", as returned by dsl_to_graph

    Returns:
        Workflow content in DSL format

    Examples:
        graph_to_dsl(result["graph"])
    """
    try:
        parsed = Graph.model_validate(graph)
    except ValueError as e:
        raise ToolError(f"Invalid graph: {e}")

    await ctx.info(f"Reconciling {len(parsed.nodes)} nodes and {len(parsed.edges)} edges")
    program = GraphToAstConverter().convert(parsed)
    dsl = generator.generate(program)
    await ctx.info(f"✓ Generated DSL ({len(dsl)} chars)")
    return dsl


@mcp.tool
def format_workflow(dsl: str) -> str:
    """Reformat DSL into canonical form.

    Definitions are ordered roles, actions, entities, workflows, with
    two-space indentation and comments removed.

    Args:
        dsl: Workflow content in DSL format

    Returns:
        Normalized DSL text

    Examples:
        format_workflow(dsl_content)
    """
    try:
        return generator.generate(parser.parse(dsl))
    except DSLSyntaxError as e:
        raise ToolError(f"Error formatting workflow: {e}")


# ===== CLI SUPPORT =====

def main():
    """Main entry point for the CLI."""
    import argparse

    arg_parser = argparse.ArgumentParser(
        description="Flowgo MCP Server - workflow DSL and visual-graph conversion"
    )
    arg_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    arg_parser.add_argument(
        "--version",
        action="version",
        version=f"flowgo {__version__}"
    )

    args = arg_parser.parse_args()

    # Configure logging
    level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(level=level)

    logger.info("Starting Flowgo MCP Server (debug=%s)", args.debug)

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Flowgo MCP Server stopped")
        sys.exit(0)


# ===== MAIN =====

if __name__ == "__main__":
    main()
