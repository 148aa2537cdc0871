"""AST node definitions for the Flowgo workflow DSL."""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ActorKind(str, Enum):
    """Who performs an action, or what kind of actor a role is."""
    AI = "AI"
    HUMAN = "Human"
    ROLE = "Role"


# ===== EXPRESSIONS =====

class StringLiteral(BaseModel):
    type: Literal["stringLiteral"] = "stringLiteral"
    value: str

    def __str__(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


class NumberLiteral(BaseModel):
    type: Literal["numberLiteral"] = "numberLiteral"
    value: float

    def __str__(self) -> str:
        if self.value.is_integer():
            return str(int(self.value))
        # Positional notation only; the grammar has no exponent form.
        return format(Decimal(repr(self.value)), "f")


class BooleanLiteral(BaseModel):
    type: Literal["booleanLiteral"] = "booleanLiteral"
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


class Identifier(BaseModel):
    type: Literal["identifier"] = "identifier"
    name: str

    def __str__(self) -> str:
        return self.name


class PropertyAccess(BaseModel):
    """Single-level ``object.property`` access."""
    type: Literal["propertyAccess"] = "propertyAccess"
    object: str
    property: str

    def __str__(self) -> str:
        return f"{self.object}.{self.property}"


Expression = Annotated[
    Union[StringLiteral, NumberLiteral, BooleanLiteral, Identifier, PropertyAccess],
    Field(discriminator="type"),
]


# ===== WORKFLOW ELEMENTS =====

class Argument(BaseModel):
    """Positional or named argument of an action call."""
    name: str | None = None
    value: Expression

    def __str__(self) -> str:
        if self.name:
            return f"{self.name}: {self.value}"
        return str(self.value)


class ActionCall(BaseModel):
    """Invocation of an action inside a workflow."""
    type: Literal["actionCall"] = "actionCall"
    name: str
    args: list[Argument] = Field(default_factory=list)

    def __str__(self) -> str:
        if self.args:
            return f"{self.name}({', '.join(str(a) for a in self.args)});"
        return f"{self.name};"


class Decision(BaseModel):
    """Conditional branch; bodies hold nested workflow elements."""
    type: Literal["decision"] = "decision"
    condition: Expression
    if_body: list["WorkflowElement"] = Field(default_factory=list)
    else_body: list["WorkflowElement"] = Field(default_factory=list)


WorkflowElement = Annotated[Union[ActionCall, Decision], Field(discriminator="type")]

Decision.model_rebuild()


# ===== DEFINITIONS =====

class Parameter(BaseModel):
    """Typed action parameter."""
    name: str
    type: str

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


class Attribute(BaseModel):
    """Typed entity attribute."""
    name: str
    type: str

    def __str__(self) -> str:
        return f"{self.name}: {self.type};"


class ActionDef(BaseModel):
    """Unit of work performed by an AI, a human, or a named role."""
    name: str
    actor: ActorKind
    role_name: str | None = None
    parameters: list[Parameter] = Field(default_factory=list)
    description: str = ""
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)

    @property
    def actor_label(self) -> str:
        """Flattened actor reference: ``AI``, ``Human`` or ``role:<name>``."""
        if self.actor == ActorKind.ROLE:
            return f"role:{self.role_name}"
        return self.actor.value


class EntityDef(BaseModel):
    """Structured data type declaration."""
    name: str
    attributes: list[Attribute] = Field(default_factory=list)


class RoleDef(BaseModel):
    """Named actor category; ``kind`` is None when the source omits ``type:``."""
    name: str
    description: str = ""
    kind: ActorKind | None = None


class WorkflowDef(BaseModel):
    """Ordered action calls and decisions."""
    name: str
    elements: list[WorkflowElement] = Field(default_factory=list)


class Program(BaseModel):
    """Complete parsed DSL document."""
    actions: list[ActionDef] = Field(default_factory=list)
    entities: list[EntityDef] = Field(default_factory=list)
    roles: list[RoleDef] = Field(default_factory=list)
    workflows: list[WorkflowDef] = Field(default_factory=list)

    def __str__(self) -> str:
        from .generator import DSLGenerator
        return DSLGenerator().generate(self)

    def get_action(self, name: str) -> ActionDef | None:
        """Find action by name."""
        for action in self.actions:
            if action.name == name:
                return action
        return None

    def get_role(self, name: str) -> RoleDef | None:
        """Find role by name."""
        for role in self.roles:
            if role.name == name:
                return role
        return None

    def list_definitions(self) -> dict[str, list[str]]:
        """Get names of all definitions grouped by kind."""
        return {
            "actions": [a.name for a in self.actions],
            "entities": [e.name for e in self.entities],
            "roles": [r.name for r in self.roles],
            "workflows": [w.name for w in self.workflows],
        }
