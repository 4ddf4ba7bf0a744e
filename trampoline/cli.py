"""Trampoline CLI - describe and dry-run hook batches."""

import logging
from typing import Any, Optional

import click
import yaml

from .config import ConfigManager
from .environment import CallContext
from .errors import InvalidHook, ResourceStarvation, Unauthorized
from .hooks import Hook, load_hooks_from_config
from .ui import render_error, render_hooks, render_summary


def load_batch(path: str) -> tuple[Hook, ...]:
    """Read a YAML batch: either a list of hooks or a mapping with a ``hooks`` key."""
    with open(path, "r") as f:
        data: Any = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("hooks", [])
    return load_hooks_from_config(data or [])


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every hook outcome")
def cli(verbose):
    """TRAMPOLINE - run untrusted hook batches under per-hook budgets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("batch", type=click.Path(exists=True, dir_okay=False))
def describe(batch):
    """Show the hooks in a batch file."""
    try:
        hooks = load_batch(batch)
    except (InvalidHook, yaml.YAMLError) as e:
        raise click.ClickException(str(e))
    render_hooks(hooks)


@cli.command()
@click.argument("batch", type=click.Path(exists=True, dir_okay=False))
@click.option("--budget", "-b", type=click.IntRange(min=0), required=True,
              help="Units available to the dispatcher")
@click.option("--sender", "-s", help="Identity invoking the dispatcher (default: authorized caller)")
@click.option("--caller", help="Override the configured authorized caller")
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Config file (default: ~/.config/trampoline/config.yaml)")
def simulate(batch, budget, sender, caller, config_path: Optional[str]):
    """Dispatch a batch against an in-process environment."""
    config = ConfigManager(config_path)
    try:
        hooks = load_batch(batch)
        dispatcher = config.build_dispatcher(authorized_caller=caller)
        environment = config.build_environment()
    except (InvalidHook, ValueError, ImportError, AttributeError, yaml.YAMLError) as e:
        raise click.ClickException(str(e))

    context = CallContext.root(
        sender=sender or dispatcher.authorized_caller,
        address=dispatcher.address,
        budget=budget,
        environment=environment,
    )

    try:
        dispatcher.execute(hooks, context)
    except (Unauthorized, ResourceStarvation) as e:
        render_error(str(e))
        raise click.ClickException(type(e).__name__)

    render_summary(len(hooks), context.meter.limit, context.meter.used)


if __name__ == "__main__":
    cli()
