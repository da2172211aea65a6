"""``sumish routes`` and ``sumish match``: inspect the route table.

Routes are loaded into a standalone Router, so no controller module is
imported.
"""

import argparse
import sys

from sumish.app import Application
from sumish.cli._resolve import resolve_app
from sumish.container import Container
from sumish.errors import InvalidArgument, NotFound
from sumish.routing.router import Router


def _load(target: str) -> tuple[Application, Router]:
    try:
        app = resolve_app(target)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    router = Router(Container.create(app.config))
    try:
        router.push(app.config.routes)
    except InvalidArgument as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return app, router


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of PATH, CONTROLLER, and ACTION."""
    _, router = _load(args.app)
    routes = router.get()
    if not routes:
        print("No routes registered.")
        return

    rows = [(uri, target.controller, target.action) for uri, target in routes.items()]
    max_path = max(4, *(len(r[0]) for r in rows))
    max_controller = max(10, *(len(r[1]) for r in rows))

    fmt = f"{{:<{max_path}}}  {{:<{max_controller}}}  {{}}"
    print(fmt.format("PATH", "CONTROLLER", "ACTION"))
    print("-" * min(max_path + max_controller + 10, 80))
    for row in rows:
        print(fmt.format(*row))


def run_match(args: argparse.Namespace) -> None:
    """Print the controller, action, and parameters *args.uri* maps to."""
    _, router = _load(args.app)
    try:
        match = router.match(args.uri)
    except NotFound as exc:
        print(f"No match: {exc.detail}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"pattern:    {match.pattern}")
    print(f"controller: {match.controller}")
    print(f"action:     {match.action}")
    for name, value in match.parameters.items():
        print(f"  {name} = {value}")
