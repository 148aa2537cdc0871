"""Converter between the DSL AST and the node/edge editing graph.

``AstToGraphConverter`` projects a Program into a Graph; the reverse
``GraphToAstConverter`` reads a (possibly edited) Graph back into a Program.
The round trip is lossy by construction: the graph only encodes straight-line
call sequences, so decisions and literal-valued arguments do not survive it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import diagnostics_enabled
from .ast_nodes import (
    ActionCall,
    ActionDef,
    ActorKind,
    Argument,
    Attribute,
    EntityDef,
    Identifier,
    Parameter,
    Program,
    RoleDef,
    WorkflowDef,
)
from .graph import EDGE_STYLES, EdgeKind, Graph, GraphEdge, GraphNode, NodeKind

logger = logging.getLogger(__name__)

ROLE_PREFIX = "role:"

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class _BuildContext:
    """Mutable state of one ``AstToGraphConverter.convert`` call."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    edge_ids: set[str] = field(default_factory=set)
    next_id: int = 0
    # (kind, name) -> node id
    node_ids: dict[tuple[NodeKind, str], str] = field(default_factory=dict)
    # output name -> data node id, first producer wins
    data_nodes: dict[str, str] = field(default_factory=dict)

    def new_node_id(self) -> str:
        node_id = f"node_{self.next_id}"
        self.next_id += 1
        return node_id


class AstToGraphConverter:
    """Convert a Program AST to an editing graph.

    Nodes are created for actions, entities, roles and workflows, in that
    order, then one data node per distinct output name. Edges come from four
    additive passes: workflow sequences, data outputs, data inputs and role
    performance. References that cannot be resolved are skipped, never
    raised.
    """

    def __init__(self, diagnostics: bool | None = None):
        """Initialize converter; ``diagnostics`` enables per-edge debug logs."""
        if diagnostics is None:
            diagnostics = diagnostics_enabled()
        self.diagnostics = diagnostics

    def convert(self, program: Program) -> Graph:
        """Convert program AST to a fresh graph."""
        ctx = _BuildContext()

        for action in program.actions:
            self._add_node(ctx, NodeKind.ACTION, action.name, {
                "actor": action.actor_label,
                "description": action.description,
                "inputs": list(action.inputs),
                "outputs": list(action.outputs),
                "parameters": [p.model_dump() for p in action.parameters],
            })
        for entity in program.entities:
            self._add_node(ctx, NodeKind.ENTITY, entity.name, {
                "attributes": [a.model_dump() for a in entity.attributes],
            })
        for role in program.roles:
            self._add_node(ctx, NodeKind.ROLE, role.name, {
                "description": role.description,
                "kind": role.kind.value if role.kind is not None else None,
            })
        for workflow in program.workflows:
            workflow_id = self._add_node(ctx, NodeKind.WORKFLOW, workflow.name, {
                "elements": [e.model_dump(mode="json") for e in workflow.elements],
            })
            self._add_sequence_edges(ctx, workflow_id, workflow)

        self._add_output_edges(ctx, program)
        self._add_input_edges(ctx, program)
        self._add_role_edges(ctx, program)

        if self.diagnostics:
            logger.debug("Built graph with %d nodes and %d edges", len(ctx.nodes), len(ctx.edges))
        return Graph(nodes=ctx.nodes, edges=ctx.edges)

    def _add_node(
        self, ctx: _BuildContext, kind: NodeKind, label: str, data: dict[str, Any]
    ) -> str:
        node_id = ctx.new_node_id()
        # Duplicate names: the last definition owns the name for edges
        ctx.node_ids[(kind, label)] = node_id
        ctx.nodes.append(GraphNode(id=node_id, kind=kind, label=label, data=data))
        if self.diagnostics:
            logger.debug("Added %s node %s (%s)", kind.value, node_id, label)
        return node_id

    def _add_edge(
        self, ctx: _BuildContext, tag: str, source: str, target: str, kind: EdgeKind, label: str
    ) -> None:
        edge_id = f"edge_{tag}_{source}_{target}"
        if edge_id in ctx.edge_ids:
            return
        ctx.edge_ids.add(edge_id)
        ctx.edges.append(GraphEdge(
            id=edge_id,
            source=source,
            target=target,
            kind=kind,
            label=label,
            style=dict(EDGE_STYLES[kind]),
        ))
        if self.diagnostics:
            logger.debug("Added %s edge %s -> %s (%s)", kind.value, source, target, label)

    def _skip(self, message: str, *args: Any) -> None:
        if self.diagnostics:
            logger.debug("Skipped: " + message, *args)

    def _add_sequence_edges(
        self, ctx: _BuildContext, workflow_id: str, workflow: WorkflowDef
    ) -> None:
        """Workflow start edge plus one sequence edge per adjacent call pair."""
        elements = workflow.elements

        if elements and isinstance(elements[0], ActionCall):
            first_id = ctx.node_ids.get((NodeKind.ACTION, elements[0].name))
            if first_id is not None:
                self._add_edge(
                    ctx, "workflow_start", workflow_id, first_id,
                    EdgeKind.WORKFLOW_START, "starts with",
                )
            else:
                self._skip("workflow %s starts with unknown action %s",
                           workflow.name, elements[0].name)

        # Decisions break the chain; their bodies stay in the workflow node data only
        for current, following in zip(elements, elements[1:]):
            if not (isinstance(current, ActionCall) and isinstance(following, ActionCall)):
                continue
            source = ctx.node_ids.get((NodeKind.ACTION, current.name))
            target = ctx.node_ids.get((NodeKind.ACTION, following.name))
            if source is None or target is None:
                self._skip("sequence %s -> %s references an unknown action",
                           current.name, following.name)
                continue
            self._add_edge(ctx, "workflow", source, target, EdgeKind.SEQUENCE, "next")

    def _add_output_edges(self, ctx: _BuildContext, program: Program) -> None:
        for action in program.actions:
            action_id = ctx.node_ids[(NodeKind.ACTION, action.name)]
            for output in action.outputs:
                if output not in ctx.data_nodes:
                    data_id = self._add_node(ctx, NodeKind.DATA, output, {})
                    ctx.data_nodes[output] = data_id
                self._add_edge(
                    ctx, "data_output", action_id, ctx.data_nodes[output],
                    EdgeKind.DATA_FLOW, "produces",
                )

    def _add_input_edges(self, ctx: _BuildContext, program: Program) -> None:
        for action in program.actions:
            action_id = ctx.node_ids[(NodeKind.ACTION, action.name)]
            for input_name in action.inputs:
                data_id = ctx.data_nodes.get(input_name)
                if data_id is None:
                    self._skip("input %s of action %s has no producer", input_name, action.name)
                    continue
                self._add_edge(
                    ctx, "data_input", data_id, action_id,
                    EdgeKind.DATA_FLOW, "used by",
                )

    def _add_role_edges(self, ctx: _BuildContext, program: Program) -> None:
        for action in program.actions:
            if action.actor != ActorKind.ROLE or not action.role_name:
                continue
            role_id = ctx.node_ids.get((NodeKind.ROLE, action.role_name))
            action_id = ctx.node_ids[(NodeKind.ACTION, action.name)]
            if role_id is None:
                self._skip("action %s is performed by unknown role %s",
                           action.name, action.role_name)
                continue
            self._add_edge(
                ctx, "role", role_id, action_id,
                EdgeKind.ROLE_PERFORMANCE, "performs",
            )


def sequence_path(graph: Graph, workflow_id: str) -> list[GraphNode]:
    """Action nodes of a workflow in execution order.

    The first node is the target of the workflow node's first outgoing edge
    (of any kind) that points at an action. From there the walk follows,
    at each step, the first outgoing sequence edge whose target is an
    unvisited action node. Only a simple path is representable: extra
    outgoing sequence edges are ignored and cycles end the walk.
    """
    nodes = {node.id: node for node in graph.nodes}
    adjacency = graph.adjacency()

    def is_action(node_id: str) -> bool:
        node = nodes.get(node_id)
        return node is not None and node.kind == NodeKind.ACTION

    first = next(
        (edge.target for edge in graph.outgoing(workflow_id) if is_action(edge.target)),
        None,
    )
    if first is None:
        return []

    path = [nodes[first]]
    visited = {first}
    current = first
    while True:
        successor = next(
            (
                edge.target
                for edge in adjacency.get((current, EdgeKind.SEQUENCE), [])
                if edge.target not in visited and is_action(edge.target)
            ),
            None,
        )
        if successor is None:
            return path
        path.append(nodes[successor])
        visited.add(successor)
        current = successor


class GraphToAstConverter:
    """Convert an editing graph back to a Program AST.

    Action, entity and role nodes are read back directly from their data;
    workflows are rebuilt from the sequence chain (see ``sequence_path``).
    Call arguments are reduced to ``input: input`` identifier bindings taken
    from incoming data-flow edges.
    """

    def convert(self, graph: Graph) -> Program:
        """Convert graph to a fresh program AST."""
        program = Program()

        for node in graph.nodes:
            if node.kind == NodeKind.ACTION:
                program.actions.append(self._action(node))
            elif node.kind == NodeKind.ENTITY:
                program.entities.append(self._entity(node))
            elif node.kind == NodeKind.ROLE:
                program.roles.append(self._role(node))
            elif node.kind == NodeKind.WORKFLOW:
                program.workflows.append(self._workflow(graph, node))

        return program

    def _action(self, node: GraphNode) -> ActionDef:
        data = node.data
        actor_label = str(data.get("actor") or "")
        role_name = None
        if actor_label.startswith(ROLE_PREFIX):
            actor = ActorKind.ROLE
            role_name = actor_label[len(ROLE_PREFIX):]
        elif actor_label in (ActorKind.AI.value, ActorKind.HUMAN.value):
            actor = ActorKind(actor_label)
        else:
            logger.warning("Action %s has unreadable actor %r, using Human", node.label, actor_label)
            actor = ActorKind.HUMAN

        return ActionDef(
            name=node.label,
            actor=actor,
            role_name=role_name,
            parameters=_read_entries(Parameter, data.get("parameters"), node.label),
            description=str(data.get("description") or ""),
            inputs=_read_names(data.get("inputs")),
            outputs=_read_names(data.get("outputs")),
        )

    def _entity(self, node: GraphNode) -> EntityDef:
        return EntityDef(
            name=node.label,
            attributes=_read_entries(Attribute, node.data.get("attributes"), node.label),
        )

    def _role(self, node: GraphNode) -> RoleDef:
        kind = node.data.get("kind")
        return RoleDef(
            name=node.label,
            description=str(node.data.get("description") or ""),
            kind=ActorKind(kind) if kind in (ActorKind.AI.value, ActorKind.HUMAN.value) else None,
        )

    def _workflow(self, graph: Graph, node: GraphNode) -> WorkflowDef:
        elements = [
            ActionCall(name=action.label, args=self.reconstruct_arguments(graph, action))
            for action in sequence_path(graph, node.id)
        ]
        return WorkflowDef(name=node.label, elements=elements)

    def reconstruct_arguments(self, graph: Graph, action: GraphNode) -> list[Argument]:
        """Identifier bindings for declared inputs that arrive over data-flow edges."""
        declared = _read_names(action.data.get("inputs"))
        args = []
        for edge in graph.incoming(action.id, EdgeKind.DATA_FLOW):
            source = graph.get_node(edge.source)
            if source is None or source.kind != NodeKind.DATA:
                continue
            if source.label in declared:
                args.append(Argument(name=source.label, value=Identifier(name=source.label)))
        return args


def _read_names(value: Any) -> list[str]:
    """Name list from node data; anything but a list reads as empty."""
    if not isinstance(value, list):
        return []
    return [str(name) for name in value if name is not None]


def _read_entries(model: type[ModelT], value: Any, owner: str) -> list[ModelT]:
    """Validate typed entries one by one, dropping the unreadable ones."""
    if not isinstance(value, list):
        return []
    entries = []
    for entry in value:
        try:
            entries.append(model.model_validate(entry))
        except ValidationError:
            logger.warning("Dropping unreadable %s of %s: %r", model.__name__.lower(), owner, entry)
    return entries
