#!/usr/bin/env python3
"""Manual DSL/graph conversion tool for testing and debugging."""

import argparse
import json
import sys
from pathlib import Path

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from flowgo.dsl import (
    AstToGraphConverter,
    DSLGenerator,
    DSLParser,
    DSLSyntaxError,
    Graph,
    GraphToAstConverter,
)


def to_graph(args):
    """Convert a DSL file to graph JSON."""
    try:
        program = DSLParser().parse_file(args.file)
    except DSLSyntaxError as e:
        print(f"❌ {e}")
        return 1

    graph = AstToGraphConverter(diagnostics=args.verbose).convert(program)
    output = json.dumps(graph.model_dump(mode="json"), indent=2)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"📁 Wrote {len(graph.nodes)} nodes and {len(graph.edges)} edges to {args.output}")
    else:
        print(output)
    return 0


def to_dsl(args):
    """Convert graph JSON back to DSL."""
    try:
        with open(args.file, encoding="utf-8") as f:
            graph = Graph.model_validate(json.load(f))
    except ValueError as e:
        print(f"❌ Invalid graph: {e}")
        return 1

    print(DSLGenerator().generate(GraphToAstConverter().convert(graph)), end="")
    return 0


def roundtrip(args):
    """Show what a DSL file looks like after a trip through the graph."""
    parser = DSLParser()
    generator = DSLGenerator()

    try:
        program = parser.parse_file(args.file)
    except DSLSyntaxError as e:
        print(f"❌ {e}")
        return 1

    normalized = generator.generate(program)
    graph = AstToGraphConverter(diagnostics=args.verbose).convert(program)
    reconciled = generator.generate(GraphToAstConverter().convert(graph))

    if reconciled == normalized:
        print("✅ Round trip is lossless")
        return 0

    print("⚠️  Round trip dropped decisions or literal arguments:")
    print(reconciled, end="")
    return 2


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Flowgo DSL/Graph Tool")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    graph_parser = subparsers.add_parser("graph", help="Convert DSL to graph JSON")
    graph_parser.add_argument("file", help="DSL file path")
    graph_parser.add_argument("--output", "-o", help="Write graph JSON to this file")
    graph_parser.add_argument("--verbose", "-v", action="store_true", help="Log graph construction")

    dsl_parser = subparsers.add_parser("dsl", help="Convert graph JSON to DSL")
    dsl_parser.add_argument("file", help="Graph JSON file path")

    roundtrip_parser = subparsers.add_parser("roundtrip", help="Check DSL -> graph -> DSL")
    roundtrip_parser.add_argument("file", help="DSL file path")
    roundtrip_parser.add_argument("--verbose", "-v", action="store_true", help="Log graph construction")

    args = parser.parse_args()

    if getattr(args, "verbose", False):
        import logging
        logging.basicConfig(level=logging.DEBUG)

    if args.command == "graph":
        return to_graph(args)
    elif args.command == "dsl":
        return to_dsl(args)
    elif args.command == "roundtrip":
        return roundtrip(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
