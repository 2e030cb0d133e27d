#!/usr/bin/env python3
"""
regionquery command line.

    regionquery run --query query.json [--output output.txt]
    regionquery explain --query query.json
    regionquery db info
    regionquery config show
"""
import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from regionquery.config import get_config, init_config
from regionquery.errors import RegionQueryError
from regionquery.query import (
    And, Crop, ExecutionContext, QueryNode, compile_crop,
    execute_query, parse_query_file, write_points,
)

logger = logging.getLogger(__name__)


console = Console()
err_console = Console(stderr=True)


def setup_logging(level: str, verbose: bool = False):
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING),
        format='%(levelname)s: %(name)s: %(message)s',
    )


def _open_db(args):
    # Commands only read; a missing store file is an error, not a new store
    from regionquery.db import get_db
    return get_db(path=args.db, url=args.db_url, create=False)


def cmd_run(args):
    """Evaluate a query file and write matching points."""
    config = get_config()
    node = parse_query_file(args.query)
    db = _open_db(args)

    points = execute_query(db, node, ExecutionContext(max_workers=config.max_workers))

    output = args.output or config.output_file
    count = write_points(points, output)
    if output != '-':
        err_console.print(f"[green]✓ Wrote {count} points to {output}[/green]")


def build_tree(node: QueryNode, tree: Optional[Tree] = None) -> Tree:
    """Render a query tree as a rich Tree, showing each leaf's compiled filter."""
    if isinstance(node, Crop):
        label = f"[cyan]crop[/cyan] {escape(repr(node))}\n[dim]{escape(repr(compile_crop(node)))}[/dim]"
    else:
        name = "and" if isinstance(node, And) else "or"
        label = f"[yellow]{name}[/yellow] ({len(node.operands)} operands)"

    branch = Tree(label) if tree is None else tree.add(label)
    if not isinstance(node, Crop):
        for op in node.operands:
            build_tree(op, branch)
    return branch


def cmd_explain(args):
    """Show the parsed query tree without touching the store."""
    node = parse_query_file(args.query)
    console.print(build_tree(node))


def cmd_db_info(args):
    """Show store information."""
    info = _open_db(args).info()

    table = Table(title="Store")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("URL", info['url'])
    table.add_row("Points", str(info['points']))
    table.add_row("Groups", str(info['groups']))
    if info['extent']:
        min_x, min_y, max_x, max_y = info['extent']
        table.add_row("Extent", f"({min_x:g}, {min_y:g}) - ({max_x:g}, {max_y:g})")
    console.print(table)


def cmd_config(args):
    """Show or initialize configuration."""
    config = get_config()

    if args.action == "show":
        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for key, value in config.to_dict().items():
            table.add_row(key, str(value))
        console.print(table)
    elif args.action == "init":
        path = config.save(Path(args.path) if args.path else None)
        console.print(f"[green]✓ Wrote configuration to {path}[/green]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regionquery",
        description="Evaluate boolean region-crop queries over inspection points",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  regionquery run --query query.json
  regionquery run --query query.json --output - | head
  regionquery explain --query query.json
  regionquery --db points.db db info
""",
    )
    parser.add_argument("--db", help="SQLite database file")
    parser.add_argument("--db-url", help="SQLAlchemy database URL (overrides --db)")
    parser.add_argument("--config", help="Configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Evaluate a query and write matching points")
    run_parser.add_argument("--query", "-q", required=True, help="Query description file (JSON/YAML)")
    run_parser.add_argument("--output", "-o",
                            help="Output file, '-' for stdout (default: output.txt)")
    run_parser.add_argument("--workers", type=int,
                            help="Evaluate sibling operands on this many threads")
    run_parser.set_defaults(func=cmd_run)

    explain_parser = subparsers.add_parser("explain", help="Show the parsed query tree")
    explain_parser.add_argument("--query", "-q", required=True, help="Query description file (JSON/YAML)")
    explain_parser.set_defaults(func=cmd_explain)

    db_parser = subparsers.add_parser("db", help="Database management")
    db_subparsers = db_parser.add_subparsers(dest="db_command", required=True)
    db_info = db_subparsers.add_parser("info", help="Show store information")
    db_info.set_defaults(func=cmd_db_info)

    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("action", choices=["show", "init"], help="Config action")
    config_parser.add_argument("path", nargs="?", help="Target file for init")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = init_config(
            database=args.db,
            config_file=Path(args.config) if args.config else None,
            database_url=args.db_url,
            max_workers=getattr(args, "workers", None),
        )
        setup_logging(config.log_level, args.verbose)
        args.func(args)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except RegionQueryError as e:
        logger.debug("Command failed", exc_info=True)
        err_console.print(f"[red]Error ({e.kind}): {escape(str(e))}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
