"""Pytest configuration and shared fixtures."""

import pytest
from pathlib import Path

from flowgo.dsl import (
    DSLParser,
    DSLGenerator,
    AstToGraphConverter,
    GraphToAstConverter,
)


@pytest.fixture
def sample_dsl() -> str:
    """Sample DSL document covering every definition kind."""
    return '''// Customer support triage
role Agent {
  description: "Front-line support agent";
  type: Human;
}

role Triage {
  description: "Automated classifier";
  type: AI;
}

entity Ticket {
  id: String;
  tags: List<String>;
  history: List<List<String>>;
}

action ClassifyTicket by role Triage (ticket: Ticket) {
  description: "Assign category and priority";
  inputs: [ticket];
  outputs: [category, priority];
}

action DraftReply by AI {
  description: "Draft a reply for the category";
  inputs: [category, ticket];
  outputs: [draft];
}

action ReviewReply by role Agent {
  description: "Check the draft before sending";
  inputs: [draft];
  outputs: [reply];
}

action Escalate by Human {
  inputs: [priority];
}

workflow HandleTicket {
  ClassifyTicket(ticket: incoming);
  DraftReply;
  ReviewReply(draft: draft);
  if (priority.high) {
    Escalate(priority: priority, urgent: true);
  } else {
    ReviewReply(retries: 2);
  }
}
'''


@pytest.fixture
def linear_dsl() -> str:
    """Three actions chained through data, called in a straight line."""
    return '''
action A by AI { outputs: [x]; }
action B by Human { inputs: [x]; outputs: [y]; }
action C by AI { inputs: [y]; }
workflow Main { A; B; C; }
'''


@pytest.fixture
def dsl_parser() -> DSLParser:
    """DSL parser instance."""
    return DSLParser()


@pytest.fixture
def dsl_generator() -> DSLGenerator:
    """DSL generator instance."""
    return DSLGenerator()


@pytest.fixture
def ast_to_graph_converter() -> AstToGraphConverter:
    """AST to graph converter instance."""
    return AstToGraphConverter(diagnostics=False)


@pytest.fixture
def graph_to_ast_converter() -> GraphToAstConverter:
    """Graph to AST converter instance."""
    return GraphToAstConverter()


@pytest.fixture
def temp_dsl_file(tmp_path: Path, sample_dsl: str) -> Path:
    """Create a temporary DSL file."""
    dsl_file = tmp_path / "support.flowgo"
    dsl_file.write_text(sample_dsl, encoding="utf-8")
    return dsl_file


class MockContext:
    """Mock MCP context for testing."""

    def __init__(self):
        self.messages = []

    async def info(self, message: str):
        """Mock info method."""
        self.messages.append(("info", message))

    async def error(self, message: str):
        """Mock error method."""
        self.messages.append(("error", message))


@pytest.fixture
def mock_context() -> MockContext:
    """Mock MCP context for testing tools."""
    return MockContext()
