"""In-place editing of a graph on behalf of a visual editor."""

import logging

from .ast_nodes import Program
from .converter import GraphToAstConverter
from .generator import DSLGenerator
from .graph import EDGE_STYLES, EdgeKind, Graph, GraphEdge, GraphNode

logger = logging.getLogger(__name__)


class GraphEditor:
    """Apply UI edits to a graph and project it back to DSL on demand.

    Edits mutate ``graph`` in place and never re-derive other nodes or
    edges; the AST is only rebuilt when ``to_program`` or ``to_dsl`` is
    called.
    """

    def __init__(self, graph: Graph):
        self.graph = graph
        self.reconciler = GraphToAstConverter()
        self.generator = DSLGenerator()

    def _node(self, node_id: str) -> GraphNode:
        node = self.graph.get_node(node_id)
        if node is None:
            raise KeyError(f"Unknown node: {node_id}")
        return node

    def update_node(
        self,
        node_id: str,
        label: str | None = None,
        description: str | None = None,
        inputs: list[str] | None = None,
        outputs: list[str] | None = None,
    ) -> GraphNode:
        """Overwrite the given attributes of a node; others are left alone."""
        node = self._node(node_id)
        if label is not None:
            node.label = label
        if description is not None:
            node.data["description"] = description
        if inputs is not None:
            node.data["inputs"] = [name.strip() for name in inputs if name.strip()]
        if outputs is not None:
            node.data["outputs"] = [name.strip() for name in outputs if name.strip()]
        return node

    def add_edge(
        self,
        source: str,
        target: str,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> GraphEdge:
        """Connect two nodes the way a user drag would.

        A ``data`` substring in either endpoint id or handle makes a data-flow
        edge; anything else is a sequence edge.
        """
        self._node(source)
        self._node(target)

        hints = (source, target, source_handle or "", target_handle or "")
        is_data_flow = any("data" in hint for hint in hints)
        kind = EdgeKind.DATA_FLOW if is_data_flow else EdgeKind.SEQUENCE

        edge = GraphEdge(
            id=self._edge_id(source, target),
            source=source,
            target=target,
            kind=kind,
            label="data flow" if is_data_flow else "connects to",
            source_handle=source_handle,
            target_handle=target_handle,
            style=dict(EDGE_STYLES[kind]),
        )
        self.graph.edges.append(edge)
        logger.debug("Connected %s -> %s as %s", source, target, kind.value)
        return edge

    def _edge_id(self, source: str, target: str) -> str:
        taken = {edge.id for edge in self.graph.edges}
        edge_id = f"edge_user_{source}_{target}"
        suffix = 1
        while edge_id in taken:
            edge_id = f"edge_user_{source}_{target}_{suffix}"
            suffix += 1
        return edge_id

    def remove_edge(self, edge_id: str) -> GraphEdge:
        edge = self.graph.get_edge(edge_id)
        if edge is None:
            raise KeyError(f"Unknown edge: {edge_id}")
        self.graph.edges.remove(edge)
        return edge

    def move_node(self, node_id: str, x: float, y: float) -> GraphNode:
        node = self._node(node_id)
        node.position = {"x": x, "y": y}
        return node

    def to_program(self) -> Program:
        """Reconcile the current graph into a fresh AST."""
        return self.reconciler.convert(self.graph)

    def to_dsl(self) -> str:
        """Current graph state as DSL text."""
        return self.generator.generate(self.to_program())
