"""Unit tests for DSL parser."""

import pytest
from flowgo.dsl import (
    DSLParser,
    DSLSyntaxError,
    Program,
    ActionCall,
    ActorKind,
    Argument,
    BooleanLiteral,
    Decision,
    Identifier,
    NumberLiteral,
    PropertyAccess,
    RoleDef,
    StringLiteral,
)
from flowgo.dsl.lexer import preprocess


class TestDSLParser:
    """Test DSL parser functionality."""

    def test_parse_sample_document(self, dsl_parser: DSLParser, sample_dsl: str):
        """Test parsing a document with every definition kind."""
        program = dsl_parser.parse(sample_dsl)

        assert isinstance(program, Program)
        assert [a.name for a in program.actions] == [
            "ClassifyTicket", "DraftReply", "ReviewReply", "Escalate"
        ]
        assert [e.name for e in program.entities] == ["Ticket"]
        assert [r.name for r in program.roles] == ["Agent", "Triage"]
        assert [w.name for w in program.workflows] == ["HandleTicket"]

    def test_parse_role(self, dsl_parser: DSLParser):
        """Test parsing a role definition."""
        program = dsl_parser.parse('role Editor { description: "x"; type: Human; }')

        assert program.roles == [RoleDef(name="Editor", description="x", kind=ActorKind.HUMAN)]

    def test_parse_role_without_type(self, dsl_parser: DSLParser):
        """Test that an omitted role type stays unset."""
        program = dsl_parser.parse("role Bot { }")

        assert program.roles[0].kind is None
        assert program.roles[0].description == ""

    def test_parse_action_actors(self, dsl_parser: DSLParser):
        """Test AI, Human, role and the 'Al' alias as actors."""
        program = dsl_parser.parse('''
            action A by AI { }
            action B by Human { }
            action C by role Editor { }
            action D by Al { }
        ''')

        actors = [(a.actor, a.role_name) for a in program.actions]
        assert actors == [
            (ActorKind.AI, None),
            (ActorKind.HUMAN, None),
            (ActorKind.ROLE, "Editor"),
            (ActorKind.AI, None),
        ]

    def test_parse_action_body(self, dsl_parser: DSLParser, sample_dsl: str):
        """Test parameters, description, inputs and outputs."""
        action = dsl_parser.parse(sample_dsl).get_action("ClassifyTicket")

        assert action is not None
        assert [(p.name, p.type) for p in action.parameters] == [("ticket", "Ticket")]
        assert action.description == "Assign category and priority"
        assert action.inputs == ["ticket"]
        assert action.outputs == ["category", "priority"]

    def test_parse_empty_lists(self, dsl_parser: DSLParser):
        """Test empty parameter and identifier lists."""
        action = dsl_parser.parse("action A by AI () { inputs: []; outputs: []; }").actions[0]

        assert action.parameters == []
        assert action.inputs == []
        assert action.outputs == []

    def test_parse_nested_generic_types(self, dsl_parser: DSLParser, sample_dsl: str):
        """Test that generic types nest to any depth."""
        entity = dsl_parser.parse(sample_dsl).entities[0]

        types = {a.name: a.type for a in entity.attributes}
        assert types == {
            "id": "String",
            "tags": "List<String>",
            "history": "List<List<String>>",
        }

    def test_type_names_are_letters_only(self, dsl_parser: DSLParser):
        """Test that digits and underscores are rejected in type names."""
        for source in ("entity E { n: Int32; }", "action A by AI (m: List<Map_x>) { }"):
            with pytest.raises(DSLSyntaxError, match="Expected type name"):
                dsl_parser.parse(source)

    def test_parse_workflow_elements(self, dsl_parser: DSLParser, sample_dsl: str):
        """Test action calls and a decision with both branches."""
        workflow = dsl_parser.parse(sample_dsl).workflows[0]
        elements = workflow.elements

        assert [type(e) for e in elements] == [ActionCall, ActionCall, ActionCall, Decision]
        assert elements[0].args == [Argument(name="ticket", value=Identifier(name="incoming"))]
        assert elements[1].args == []

        decision = elements[3]
        assert decision.condition == PropertyAccess(object="priority", property="high")
        assert [e.name for e in decision.if_body] == ["Escalate"]
        assert [e.name for e in decision.else_body] == ["ReviewReply"]

    def test_parse_expressions(self, dsl_parser: DSLParser):
        """Test every expression form, named and positional."""
        program = dsl_parser.parse(
            'workflow W { run("a \\"quoted\\" word", 42, 3.5, true, false, name, obj.prop, key: 7); }'
        )
        values = [arg.value for arg in program.workflows[0].elements[0].args]

        assert values == [
            StringLiteral(value='a "quoted" word'),
            NumberLiteral(value=42.0),
            NumberLiteral(value=3.5),
            BooleanLiteral(value=True),
            BooleanLiteral(value=False),
            Identifier(name="name"),
            PropertyAccess(object="obj", property="prop"),
            NumberLiteral(value=7.0),
        ]
        assert program.workflows[0].elements[0].args[-1].name == "key"

    def test_property_access_requires_adjacent_tokens(self, dsl_parser: DSLParser):
        """Test that 'a . b' is not read as property access."""
        with pytest.raises(DSLSyntaxError):
            dsl_parser.parse("workflow W { if (a . b) { x; } }")

    def test_parse_nested_decisions(self, dsl_parser: DSLParser):
        """Test decisions inside decision bodies."""
        program = dsl_parser.parse(
            "workflow W { if (a) { if (b) { x; } else { y; } } z; }"
        )
        outer = program.workflows[0].elements[0]

        assert isinstance(outer, Decision)
        assert outer.else_body == []
        inner = outer.if_body[0]
        assert isinstance(inner, Decision)
        assert inner.condition == Identifier(name="b")
        assert program.workflows[0].elements[1] == ActionCall(name="z")

    def test_parse_empty_document(self, dsl_parser: DSLParser):
        """Test parsing an empty document."""
        program = dsl_parser.parse("")
        assert program == Program()

        program = dsl_parser.parse("   // only a comment\n")
        assert program == Program()

    def test_byte_order_mark_is_stripped(self, dsl_parser: DSLParser):
        """Test that a leading BOM does not reach the scanner."""
        program = dsl_parser.parse("\ufeffentity E { a: Int; }")
        assert program.entities[0].name == "E"

    def test_whitespace_and_comments_are_insignificant(self, dsl_parser: DSLParser, sample_dsl: str):
        """Test that reformatting outside strings leaves the AST unchanged."""
        compact = " ".join(
            line.split("//")[0].strip() for line in sample_dsl.splitlines()
        )
        spread = sample_dsl.replace(";", " ;  // trailing\n").replace("{", "\n\t{\n")

        expected = dsl_parser.parse(sample_dsl)
        assert dsl_parser.parse(compact) == expected
        assert dsl_parser.parse(spread) == expected

    def test_source_order_kept_within_kind(self, dsl_parser: DSLParser):
        """Test that each collection keeps source order."""
        program = dsl_parser.parse('''
            entity Z { }
            action Second by AI { }
            entity A { }
            action First by AI { }
        ''')

        assert [e.name for e in program.entities] == ["Z", "A"]
        assert [a.name for a in program.actions] == ["Second", "First"]

    def test_parse_file(self, dsl_parser: DSLParser, temp_dsl_file, sample_dsl: str):
        """Test parsing from a file path."""
        assert dsl_parser.parse_file(temp_dsl_file) == dsl_parser.parse(sample_dsl)

    def test_parses_are_independent(self, dsl_parser: DSLParser, sample_dsl: str):
        """Test that one parser instance yields fresh, equal ASTs."""
        first = dsl_parser.parse(sample_dsl)
        second = dsl_parser.parse(sample_dsl)

        assert first == second
        assert first is not second
        assert first.actions is not second.actions


class TestDSLSyntaxErrors:
    """Test syntax error reporting."""

    def test_missing_colon_points_at_bracket(self, dsl_parser: DSLParser):
        """Test the offset of a mismatched expected character."""
        source = "action Foo by Human { outputs [x]; }"

        with pytest.raises(DSLSyntaxError) as exc_info:
            dsl_parser.parse(source)

        error = exc_info.value
        assert error.position == source.index("[")
        assert "[[]" in error.context
        assert "position 30" in str(error)

    def test_unexpected_keyword(self, dsl_parser: DSLParser):
        """Test an unknown top-level keyword."""
        with pytest.raises(DSLSyntaxError) as exc_info:
            dsl_parser.parse("entity E { } process P { }")

        assert exc_info.value.position == len("entity E { } ")
        assert "Unexpected keyword" in exc_info.value.message

    def test_unknown_actor(self, dsl_parser: DSLParser):
        """Test an actor that is neither AI, Human nor a role."""
        with pytest.raises(DSLSyntaxError, match="Expected actor type"):
            dsl_parser.parse("action A by Robot { }")

    def test_unknown_action_attribute(self, dsl_parser: DSLParser):
        """Test an attribute an action body does not allow."""
        with pytest.raises(DSLSyntaxError, match="Unexpected action attribute"):
            dsl_parser.parse('action A by AI { owner: "me"; }')

    def test_unexpected_end_of_input(self, dsl_parser: DSLParser):
        """Test that EOF errors point past the last character."""
        source = "workflow W { A;"

        with pytest.raises(DSLSyntaxError) as exc_info:
            dsl_parser.parse(source)

        assert exc_info.value.position == len(source)
        assert "EOF" in str(exc_info.value)

    def test_unexpected_character(self, dsl_parser: DSLParser):
        """Test characters the lexer does not know."""
        source = "action A by AI { @ }"

        with pytest.raises(DSLSyntaxError) as exc_info:
            dsl_parser.parse(source)

        assert exc_info.value.position == source.index("@")

    def test_first_error_wins(self, dsl_parser: DSLParser):
        """Test that the earliest error is reported, not a later one."""
        source = "action A by AI { outputs [x]; } @@@"

        with pytest.raises(DSLSyntaxError) as exc_info:
            dsl_parser.parse(source)

        assert exc_info.value.position == source.index("[")

    def test_context_window_is_bounded(self, dsl_parser: DSLParser):
        """Test that context shows at most 20 chars around the error."""
        source = "entity " + "A" * 50 + " { x: ; }"

        with pytest.raises(DSLSyntaxError) as exc_info:
            dsl_parser.parse(source)

        error = exc_info.value
        assert error.position == source.index(";")
        assert error.context == source[error.position - 20:error.position] + "[;]" + source[error.position + 1:error.position + 21]

    def test_comment_marker_inside_string_truncates_line(self, dsl_parser: DSLParser):
        """Test the known defect: '//' inside a string starts a comment."""
        source = 'role R { description: "see http://example.com"; type: Human; }'

        with pytest.raises(DSLSyntaxError) as exc_info:
            dsl_parser.parse(source)

        assert exc_info.value.position == len(preprocess(source))

    def test_no_partial_result(self, dsl_parser: DSLParser):
        """Test that a late error discards everything parsed before it."""
        with pytest.raises(DSLSyntaxError):
            dsl_parser.parse("entity A { } entity B { } entity")
