"""Node/edge graph used for visual editing of Flowgo programs."""

from collections import defaultdict
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    ACTION = "action"
    ENTITY = "entity"
    ROLE = "role"
    WORKFLOW = "workflow"
    DATA = "data"


class EdgeKind(str, Enum):
    WORKFLOW_START = "workflowStart"
    SEQUENCE = "sequence"
    DATA_FLOW = "dataFlow"
    ROLE_PERFORMANCE = "rolePerformance"


# Renderer hints per edge kind; the converters never read them back.
EDGE_STYLES: dict[EdgeKind, dict[str, Any]] = {
    EdgeKind.WORKFLOW_START: {"stroke": "#4a3f9f", "strokeWidth": 2},
    EdgeKind.SEQUENCE: {"stroke": "#4a3f9f", "strokeWidth": 2},
    EdgeKind.DATA_FLOW: {"stroke": "#ff6b6b", "strokeWidth": 2, "strokeDasharray": "5,5"},
    EdgeKind.ROLE_PERFORMANCE: {"stroke": "#ff9900", "strokeWidth": 2, "animated": True},
}


class GraphNode(BaseModel):
    """Graph node.

    ``data`` mirrors the definition the node was built from. ``position`` is
    written by the layout engine and the UI; the converters never read it.
    """
    id: str
    kind: NodeKind
    label: str
    data: dict[str, Any] = Field(default_factory=dict)
    position: dict[str, float] | None = None


class GraphEdge(BaseModel):
    """Directed edge between two node ids."""
    id: str
    source: str
    target: str
    kind: EdgeKind
    label: str = ""
    source_handle: str | None = None
    target_handle: str | None = None
    style: dict[str, Any] = Field(default_factory=dict)


class Graph(BaseModel):
    """Ordered nodes and edges exchanged with the layout engine and the UI."""
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> GraphNode | None:
        """Find node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        """Find edge by id."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def nodes_of_kind(self, kind: NodeKind) -> list[GraphNode]:
        return [node for node in self.nodes if node.kind == kind]

    def adjacency(self) -> dict[tuple[str, EdgeKind], list[GraphEdge]]:
        """Outgoing edges keyed by (source id, edge kind), in edge order."""
        index: dict[tuple[str, EdgeKind], list[GraphEdge]] = defaultdict(list)
        for edge in self.edges:
            index[(edge.source, edge.kind)].append(edge)
        return index

    def incoming(self, node_id: str, kind: EdgeKind | None = None) -> list[GraphEdge]:
        """Edges ending at ``node_id``, optionally restricted to one kind."""
        return [
            edge
            for edge in self.edges
            if edge.target == node_id and (kind is None or edge.kind == kind)
        ]

    def outgoing(self, node_id: str) -> list[GraphEdge]:
        """Edges leaving ``node_id`` of any kind, in edge order."""
        return [edge for edge in self.edges if edge.source == node_id]
