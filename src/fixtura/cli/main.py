"""CLI entry point for previewing and seeding fixtures."""

import asyncio
import importlib
import json
import logging
import os
import sys
from typing import Any, Callable

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from fixtura import __version__
from fixtura.cli.output import create_fixture_table, to_plain
from fixtura.config import LOG_LEVELS, load_config
from fixtura.factory import Factory
from fixtura.registry import available_adapters, load_adapter, set_adapter

console = Console()


def load_factory(target: str) -> Factory:
    """Import a factory from a ``package.module:attribute`` path.

    The current working directory is importable, so project-local
    factory modules work without installation.

    Args:
        target: Import path, e.g. 'tests.factories:user_factory'.

    Returns:
        The Factory found at target.

    Raises:
        click.BadParameter: If target is malformed or not a Factory.
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise click.BadParameter(
            f"Expected 'package.module:attribute', got '{target}'.",
            param_hint="TARGET",
        )

    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        obj: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as exc:
        raise click.BadParameter(
            f"Cannot load '{target}': {exc}", param_hint="TARGET"
        ) from exc

    if not isinstance(obj, Factory):
        raise click.BadParameter(
            f"'{target}' is a {type(obj).__name__}, not a Factory.",
            param_hint="TARGET",
        )
    return obj


def parse_assignments(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``KEY=VALUE`` pairs into a nested dict.

    Dotted keys nest (``address.number=456``). Values are parsed as JSON
    when possible and kept as strings otherwise.

    Raises:
        click.BadParameter: If a pair has no '=' or its keys conflict.
    """
    result: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{pair}'.")
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw

        *parents, leaf = key.split(".")
        node = result
        for parent in parents:
            node = node.setdefault(parent, {})
            if not isinstance(node, dict):
                raise click.BadParameter(f"'{key}' conflicts with '{parent}'.")
        node[leaf] = value
    return result


def fixture_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by the build and create commands."""
    func = click.option(
        "--json", "as_json", is_flag=True, help="Print JSON instead of a table."
    )(func)
    func = click.option(
        "-t",
        "--transient",
        multiple=True,
        metavar="KEY=VALUE",
        help="Transient param passed to the attributes generator.",
    )(func)
    func = click.option(
        "-s",
        "--set",
        "overrides",
        multiple=True,
        metavar="KEY=VALUE",
        help="Attribute override; dotted keys set nested fields.",
    )(func)
    func = click.option(
        "-n", "--count", default=1, show_default=True, type=click.IntRange(min=0)
    )(func)
    func = click.argument("target")(func)
    return func


def _produce(
    mode: str,
    target: str,
    count: int,
    overrides: tuple[str, ...],
    transient: tuple[str, ...],
    as_json: bool,
) -> None:
    factory = load_factory(target)
    override = parse_assignments(overrides) or None
    params = parse_assignments(transient) or None
    produce = factory.build_many if mode == "build" else factory.create_many

    try:
        records = asyncio.run(produce(count, override, params))
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    rows = [to_plain(record) for record in records]
    if as_json:
        click.echo(json.dumps(rows, indent=2, default=str))
    else:
        console.print(create_fixture_table(f"{target} ({mode})", rows))


@click.group()
@click.version_option(version=__version__, prog_name="fixtura")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override FIXTURA_LOG_LEVEL.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Preview and seed test fixtures defined with fixtura."""
    try:
        config = load_config()
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {escape(str(e))}")
        sys.exit(1)

    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["console"] = console


@cli.command()
@fixture_options
def build(
    target: str,
    count: int,
    overrides: tuple[str, ...],
    transient: tuple[str, ...],
    as_json: bool,
) -> None:
    """Build fixtures from TARGET without persisting them."""
    _produce("build", target, count, overrides, transient, as_json)


@cli.command()
@fixture_options
@click.option(
    "--adapter",
    "adapter_name",
    default=None,
    help="Adapter entry-point name. Defaults to FIXTURA_ADAPTER or 'object'.",
)
@click.pass_context
def create(
    ctx: click.Context,
    target: str,
    count: int,
    overrides: tuple[str, ...],
    transient: tuple[str, ...],
    as_json: bool,
    adapter_name: str | None,
) -> None:
    """Create (persist) fixtures from TARGET through an adapter."""
    name = adapter_name or ctx.obj["config"].default_adapter
    try:
        set_adapter(load_adapter(name))
    except (RuntimeError, TypeError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    _produce("create", target, count, overrides, transient, as_json)


@cli.command()
@click.pass_context
def adapters(ctx: click.Context) -> None:
    """List adapters registered through entry points."""
    from rich.table import Table

    names = available_adapters()
    if not names:
        ctx.obj["console"].print("[yellow]No adapters registered.[/yellow]")
        return

    table = Table(title="Registered adapters")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    ctx.obj["console"].print(table)
