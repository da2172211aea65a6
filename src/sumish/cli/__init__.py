"""Sumish CLI: inspect an application's route table.

Entry point registered as ``sumish`` in ``pyproject.toml``::

    [project.scripts]
    sumish = "sumish.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``sumish`` command."""
    parser = argparse.ArgumentParser(
        prog="sumish",
        description="Sumish: a minimal MVC runtime with an autowiring container.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- sumish routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List configured routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- sumish match -----------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Show which action a URI dispatches to")
    match_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    match_parser.add_argument("uri", help="Request path (e.g. /user/42)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from sumish.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from sumish.cli._routes import run_match

        run_match(args)
