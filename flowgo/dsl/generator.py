"""Serialize a Flowgo AST back to DSL text."""

from .ast_nodes import (
    ActionCall,
    ActionDef,
    ActorKind,
    Decision,
    EntityDef,
    Program,
    RoleDef,
    WorkflowDef,
    WorkflowElement,
)

INDENT = "  "


class DSLGenerator:
    """Render a Program as DSL text.

    Output order is fixed: roles, actions, entities, then workflows, each
    kind in collection order. Source order across kinds and original
    whitespace are not preserved, so ``generate(parse(text))`` is a
    normalized form of ``text`` that is stable under another
    parse/generate pass.
    """

    def generate(self, program: Program) -> str:
        """Convert program AST to DSL text."""
        blocks: list[str] = []
        blocks.extend(self._role(role) for role in program.roles)
        blocks.extend(self._action(action) for action in program.actions)
        blocks.extend(self._entity(entity) for entity in program.entities)
        blocks.extend(self._workflow(workflow) for workflow in program.workflows)
        return "".join(f"{block}\n\n" for block in blocks)

    def _role(self, role: RoleDef) -> str:
        lines = [f"role {role.name} {{"]
        if role.description:
            lines.append(f'{INDENT}description: "{role.description}";')
        if role.kind is not None:
            lines.append(f"{INDENT}type: {role.kind.value};")
        lines.append("}")
        return "\n".join(lines)

    def _action(self, action: ActionDef) -> str:
        if action.actor == ActorKind.ROLE:
            header = f"action {action.name} by role {action.role_name}"
        else:
            header = f"action {action.name} by {action.actor.value}"
        if action.parameters:
            header += f" ({', '.join(str(p) for p in action.parameters)})"

        lines = [f"{header} {{"]
        if action.description:
            lines.append(f'{INDENT}description: "{action.description}";')
        if action.inputs:
            lines.append(f"{INDENT}inputs: [{', '.join(action.inputs)}];")
        if action.outputs:
            lines.append(f"{INDENT}outputs: [{', '.join(action.outputs)}];")
        lines.append("}")
        return "\n".join(lines)

    def _entity(self, entity: EntityDef) -> str:
        lines = [f"entity {entity.name} {{"]
        lines.extend(f"{INDENT}{attr}" for attr in entity.attributes)
        lines.append("}")
        return "\n".join(lines)

    def _workflow(self, workflow: WorkflowDef) -> str:
        lines = [f"workflow {workflow.name} {{"]
        lines.extend(self._elements(workflow.elements, depth=1))
        lines.append("}")
        return "\n".join(lines)

    def _elements(self, elements: list[WorkflowElement], depth: int) -> list[str]:
        pad = INDENT * depth
        lines = []
        for element in elements:
            if isinstance(element, ActionCall):
                lines.append(f"{pad}{element}")
            elif isinstance(element, Decision):
                lines.append(f"{pad}if ({element.condition}) {{")
                lines.extend(self._elements(element.if_body, depth + 1))
                if element.else_body:
                    lines.append(f"{pad}}} else {{")
                    lines.extend(self._elements(element.else_body, depth + 1))
                lines.append(f"{pad}}}")
        return lines


def generate_dsl(program: Program) -> str:
    """Convert program AST to DSL text."""
    return DSLGenerator().generate(program)
