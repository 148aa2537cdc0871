"""Recursive-descent parser for the Flowgo workflow DSL.

Grammar (newline-insensitive; ``//`` comments are stripped first)::

    Program      := Definition*
    Definition   := ActionDef | EntityDef | WorkflowDef | RoleDef
    ActionDef    := 'action' Ident 'by' Actor Params? '{' ActionAttr* '}'
    Actor        := 'role' Ident | 'AI' | 'Human' | 'Al'
    Params       := '(' (Param (',' Param)*)? ')'
    Param        := Ident ':' Type
    Type         := Letters ('<' Type '>')?
    ActionAttr   := 'description' ':' String ';'
                 |  'inputs' ':' '[' IdentList ']' ';'
                 |  'outputs' ':' '[' IdentList ']' ';'
    EntityDef    := 'entity' Ident '{' (Ident ':' Type ';')* '}'
    RoleDef      := 'role' Ident '{' ('description' ':' String ';'
                                     | 'type' ':' Actor ';')* '}'
    WorkflowDef  := 'workflow' Ident '{' WorkflowElem* '}'
    WorkflowElem := Decision | ActionCall
    Decision     := 'if' '(' Expr ')' '{' WorkflowElem* '}'
                    ('else' '{' WorkflowElem* '}')?
    ActionCall   := Ident Args? ';'
    Args         := '(' (Arg (',' Arg)*)? ')'
    Arg          := (Ident ':')? Expr
    Expr         := Ident '.' Ident | String | Number | Bool | Ident
"""

import logging
from pathlib import Path

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
from .errors import DSLSyntaxError
from .lexer import Lexer, Token, TokenStream, preprocess, unescape_string

logger = logging.getLogger(__name__)

# 'Al' is a common misreading of 'AI' and is accepted as an alias.
ACTOR_ALIASES = {"AI": ActorKind.AI, "Al": ActorKind.AI, "Human": ActorKind.HUMAN}


class _ParseState:
    """Cursor and output of a single parse call."""

    def __init__(self, stream: TokenStream):
        self.stream = stream
        self.program = Program()

    # ----- primitives -----

    def peek_word(self) -> str:
        """Next token's text if it is a word, else an empty string."""
        token = self.stream.peek()
        if token is not None and token.kind == "WORD":
            return token.value
        return ""

    def peek_char(self) -> str:
        """Next token's text if it is punctuation or a literal's first char."""
        token = self.stream.peek()
        if token is None:
            return ""
        return token.value[0]

    def consume_word(self, word: str) -> None:
        found = self.peek_word()
        if found != word:
            raise self.stream.error(f'Expected "{word}", got {self._describe()}')
        self.stream.advance()

    def consume_char(self, char: str) -> None:
        token = self.stream.peek()
        if token is None or token.kind != "PUNCT" or token.value != char:
            raise self.stream.error(f'Expected "{char}", got {self._describe()}')
        self.stream.advance()

    def identifier(self) -> str:
        if not self.peek_word():
            raise self.stream.error(f"Expected identifier, got {self._describe()}")
        return self.stream.advance().value

    def string_literal(self) -> str:
        token = self.stream.peek()
        if token is None or token.kind != "STRING":
            raise self.stream.error(f'Expected "\\"", got {self._describe()}')
        return unescape_string(self.stream.advance().value)

    def _describe(self) -> str:
        token = self.stream.peek()
        return "EOF" if token is None else f'"{token.value}"'

    # ----- definitions -----

    def parse_program(self) -> Program:
        while not self.stream.at_end():
            self.definition()
        return self.program

    def definition(self) -> None:
        keyword = self.peek_word()
        logger.debug("Parsing '%s' definition at position %d", keyword, self.stream.offset())

        if keyword == "action":
            self.program.actions.append(self.action_def())
        elif keyword == "entity":
            self.program.entities.append(self.entity_def())
        elif keyword == "workflow":
            self.program.workflows.append(self.workflow_def())
        elif keyword == "role":
            self.program.roles.append(self.role_def())
        else:
            raise self.stream.error(f"Unexpected keyword: {self._describe()}")

    def action_def(self) -> ActionDef:
        self.consume_word("action")
        name = self.identifier()
        self.consume_word("by")

        role_name = None
        if self.peek_word() == "role":
            self.consume_word("role")
            role_name = self.identifier()
            actor = ActorKind.ROLE
        else:
            actor = self.actor_type()

        parameters = []
        if self.peek_char() == "(":
            parameters = self.parameters()

        action = ActionDef(name=name, actor=actor, role_name=role_name, parameters=parameters)

        self.consume_char("{")
        while self.peek_char() != "}":
            attribute = self.peek_word()
            if attribute == "description":
                self.consume_word("description")
                self.consume_char(":")
                action.description = self.string_literal()
                self.consume_char(";")
            elif attribute in ("inputs", "outputs"):
                self.consume_word(attribute)
                self.consume_char(":")
                self.consume_char("[")
                names = self.identifier_list()
                self.consume_char("]")
                self.consume_char(";")
                setattr(action, attribute, names)
            else:
                raise self.stream.error(f"Unexpected action attribute: {self._describe()}")
        self.consume_char("}")
        return action

    def entity_def(self) -> EntityDef:
        self.consume_word("entity")
        entity = EntityDef(name=self.identifier())

        self.consume_char("{")
        while self.peek_char() != "}":
            name = self.identifier()
            self.consume_char(":")
            entity.attributes.append(Attribute(name=name, type=self.type_()))
            self.consume_char(";")
        self.consume_char("}")
        return entity

    def role_def(self) -> RoleDef:
        self.consume_word("role")
        role = RoleDef(name=self.identifier())

        self.consume_char("{")
        while self.peek_char() != "}":
            attribute = self.peek_word()
            if attribute == "description":
                self.consume_word("description")
                self.consume_char(":")
                role.description = self.string_literal()
                self.consume_char(";")
            elif attribute == "type":
                self.consume_word("type")
                self.consume_char(":")
                role.kind = self.actor_type()
                self.consume_char(";")
            else:
                raise self.stream.error(f"Unexpected role attribute: {self._describe()}")
        self.consume_char("}")
        return role

    def workflow_def(self) -> WorkflowDef:
        self.consume_word("workflow")
        name = self.identifier()
        self.consume_char("{")
        elements = self.workflow_body()
        self.consume_char("}")
        return WorkflowDef(name=name, elements=elements)

    # ----- shared pieces -----

    def actor_type(self) -> ActorKind:
        word = self.peek_word()
        if word not in ACTOR_ALIASES:
            raise self.stream.error(f"Expected actor type (AI or Human), got {self._describe()}")
        self.consume_word(word)
        return ACTOR_ALIASES[word]

    def parameters(self) -> list[Parameter]:
        parameters = []
        self.consume_char("(")
        if self.peek_char() != ")":
            parameters.append(self.parameter())
            while self.peek_char() == ",":
                self.consume_char(",")
                parameters.append(self.parameter())
        self.consume_char(")")
        return parameters

    def parameter(self) -> Parameter:
        name = self.identifier()
        self.consume_char(":")
        return Parameter(name=name, type=self.type_())

    def type_(self) -> str:
        """Type name with optional, arbitrarily nested generic argument.

        Type names are letters only: ``Int32`` or ``Map_x`` are rejected.
        """
        if not self.peek_word().isalpha():
            raise self.stream.error(f"Expected type name, got {self._describe()}")
        name = self.stream.advance().value
        if self.peek_char() == "<":
            self.consume_char("<")
            inner = self.type_()
            self.consume_char(">")
            return f"{name}<{inner}>"
        return name

    def identifier_list(self) -> list[str]:
        identifiers = []
        if self.peek_char() != "]":
            identifiers.append(self.identifier())
            while self.peek_char() == ",":
                self.consume_char(",")
                identifiers.append(self.identifier())
        return identifiers

    # ----- workflow bodies -----

    def workflow_body(self) -> list:
        elements = []
        while self.peek_char() != "}":
            if self.peek_word() == "if":
                elements.append(self.decision())
            else:
                elements.append(self.action_call())
        return elements

    def decision(self) -> Decision:
        self.consume_word("if")
        self.consume_char("(")
        condition = self.expression()
        self.consume_char(")")

        self.consume_char("{")
        if_body = self.workflow_body()
        self.consume_char("}")

        else_body = []
        if self.peek_word() == "else":
            self.consume_word("else")
            self.consume_char("{")
            else_body = self.workflow_body()
            self.consume_char("}")

        return Decision(condition=condition, if_body=if_body, else_body=else_body)

    def action_call(self) -> ActionCall:
        name = self.identifier()
        args = []
        if self.peek_char() == "(":
            args = self.arguments()
        self.consume_char(";")
        return ActionCall(name=name, args=args)

    def arguments(self) -> list[Argument]:
        args = []
        self.consume_char("(")
        if self.peek_char() != ")":
            args.append(self.argument())
            while self.peek_char() == ",":
                self.consume_char(",")
                args.append(self.argument())
        self.consume_char(")")
        return args

    def argument(self) -> Argument:
        first, second = self.stream.peek(), self.stream.peek(1)
        if _is_word(first) and _is_punct(second, ":"):
            name = self.identifier()
            self.consume_char(":")
            return Argument(name=name, value=self.expression())
        return Argument(value=self.expression())

    def expression(self):
        first = self.stream.peek()
        dot, prop = self.stream.peek(1), self.stream.peek(2)
        # Property access only when written without spaces: ``obj.prop``.
        if (
            _is_word(first)
            and _is_punct(dot, ".")
            and _is_word(prop)
            and first.end == dot.start
            and dot.end == prop.start
        ):
            obj = self.identifier()
            self.consume_char(".")
            return PropertyAccess(object=obj, property=self.identifier())

        if first is not None and first.kind == "STRING":
            return StringLiteral(value=self.string_literal())
        if first is not None and first.kind == "NUMBER":
            return NumberLiteral(value=float(self.stream.advance().value))
        if self.peek_word() in ("true", "false"):
            return BooleanLiteral(value=self.stream.advance().value == "true")
        return Identifier(name=self.identifier())


def _is_word(token: Token | None) -> bool:
    return token is not None and token.kind == "WORD"


def _is_punct(token: Token | None, char: str) -> bool:
    return token is not None and token.kind == "PUNCT" and token.value == char


class DSLParser:
    """Main DSL parser.

    Holds only the compiled lexer; every ``parse`` call gets its own cursor
    and output, so one instance can be shared freely.
    """

    def __init__(self, grammar_path: str | Path | None = None):
        """Initialize parser with the terminal grammar."""
        self.lexer = Lexer(grammar_path)

    def parse(self, dsl_text: str) -> Program:
        """Parse DSL text into AST.

        Raises:
            DSLSyntaxError: On the first unexpected token, character or end of
                input; no partial AST is returned.
        """
        buffer = preprocess(dsl_text)
        stream = TokenStream(self.lexer.tokenize(buffer), buffer)
        try:
            program = _ParseState(stream).parse_program()
        except DSLSyntaxError as e:
            logger.debug("Parse error: %s", e)
            raise
        logger.debug(
            "Parsed %d actions, %d entities, %d roles, %d workflows",
            len(program.actions),
            len(program.entities),
            len(program.roles),
            len(program.workflows),
        )
        return program

    def parse_file(self, path: str | Path) -> Program:
        """Parse DSL file into AST."""
        with open(path, encoding="utf-8") as f:
            return self.parse(f.read())
