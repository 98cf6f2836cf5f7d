"""
thebrain-mcp CLI - Main Entry Point

Usage:
    thebrain-mcp serve                       # Run the MCP server on stdio
    thebrain-mcp health                      # Check API reachability
    thebrain-mcp search "project ideas"      # Search thoughts
    thebrain-mcp get <thought-id> --json     # Show one thought
    thebrain-mcp links <thought-id>          # Show a thought's links
    thebrain-mcp list --limit 20             # List thoughts in the brain
"""

import json
from functools import wraps
from pathlib import Path
from typing import Callable, Optional

import click
import requests
from loguru import logger

from thebrain_mcp.core.config import load_config
from thebrain_mcp.core.exceptions import ConfigurationError, ThoughtBridgeError
from thebrain_mcp.core.logging_config import configure_logging
from thebrain_mcp.mcp import protocol
from thebrain_mcp.mcp.adapters.api_adapter import TheBrainAPIAdapter
from thebrain_mcp.mcp.server import MCPServer, render_thought_markdown


def with_adapter(func: Callable) -> Callable:
    """
    Decorator that builds a TheBrainAPIAdapter from the loaded config,
    passes it to the command, closes it afterwards and turns API and
    transport failures into a clean CLI error (exit code 1).
    """
    @wraps(func)
    def wrapper(ctx, *args, **kwargs):
        config = ctx.obj["config"]
        try:
            adapter = TheBrainAPIAdapter(config=config.mcp)
        except ConfigurationError as exc:
            raise click.ClickException(exc.message) from exc

        with adapter:
            try:
                return func(ctx, adapter, *args, **kwargs)
            except ThoughtBridgeError as exc:
                raise click.ClickException(exc.message) from exc
            except requests.RequestException as exc:
                raise click.ClickException(f"Request failed: {exc}") from exc

    return wrapper


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


# ============================================================================
# CLI Group
# ============================================================================

@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to config.yaml file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """
    thebrain-mcp - Model Context Protocol bridge for TheBrain.
    """
    ctx.ensure_object(dict)

    try:
        cfg = load_config(Path(config) if config else None)
    except ConfigurationError as exc:
        raise click.ClickException(exc.message) from exc

    ctx.obj["config"] = cfg
    ctx.obj["verbose"] = verbose

    level = "DEBUG" if verbose else cfg.observability.log_level
    configure_logging(level, cfg.observability.json_logs)


# ============================================================================
# Commands
# ============================================================================

@cli.command()
@click.pass_context
@with_adapter
def serve(ctx, adapter: TheBrainAPIAdapter):
    """
    Run the MCP server over stdin/stdout.

    Nothing but JSON-RPC responses is written to stdout; logs go to stderr.
    """
    MCPServer(adapter, config=ctx.obj["config"].mcp).serve()


@cli.command()
@click.pass_context
@with_adapter
def health(ctx, adapter: TheBrainAPIAdapter):
    """
    Check whether the TheBrain API is reachable.

    Example:
        thebrain-mcp health
    """
    if adapter.health_check():
        click.echo(f"TheBrain API at {adapter.base_url}: OK")
    else:
        click.echo(f"TheBrain API at {adapter.base_url}: UNREACHABLE", err=True)
        ctx.exit(1)


@cli.command()
@click.argument("query", required=True)
@click.option(
    "--limit",
    "-n",
    default=10,
    type=click.IntRange(min=1),
    help="Maximum number of results",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output as JSON",
)
@click.pass_context
@with_adapter
def search(ctx, adapter: TheBrainAPIAdapter, query: str, limit: int, output_json: bool):
    """
    Search thoughts.

    Example:
        thebrain-mcp search "project ideas" --limit 5
    """
    results = adapter.search(query, limit=limit)
    if output_json:
        _echo_json(results)
        return

    thoughts = protocol.extract_thoughts(results)
    click.echo(f"Found {len(thoughts)} thoughts matching '{query}'")
    for thought in thoughts:
        click.echo(f"  {thought.get('id')}  {thought.get('name')}")


@cli.command()
@click.argument("thought_id", required=True)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output as JSON",
)
@click.pass_context
@with_adapter
def get(ctx, adapter: TheBrainAPIAdapter, thought_id: str, output_json: bool):
    """
    Show a thought by ID, as markdown or JSON.

    Example:
        thebrain-mcp get 5b2f1c3e --json
    """
    thought = adapter.get(thought_id)
    if output_json:
        _echo_json(thought)
    else:
        click.echo(render_thought_markdown(thought if isinstance(thought, dict) else {}))


@cli.command()
@click.argument("thought_id", required=True)
@click.pass_context
@with_adapter
def links(ctx, adapter: TheBrainAPIAdapter, thought_id: str):
    """Show the links of a thought."""
    _echo_json(adapter.get_links(thought_id))


@cli.command(name="list")
@click.option(
    "--limit",
    "-n",
    default=50,
    type=click.IntRange(min=1),
    help="Maximum number of thoughts",
)
@click.pass_context
@with_adapter
def list_thoughts(ctx, adapter: TheBrainAPIAdapter, limit: int):
    """List thoughts in the configured brain."""
    results = adapter.list_thoughts(limit=limit)
    thoughts = protocol.extract_thoughts(results)
    logger.debug(f"Listed {len(thoughts)} thoughts")
    for thought in thoughts:
        click.echo(f"{thought.get('id')}  {thought.get('name')}")


if __name__ == "__main__":
    cli()
