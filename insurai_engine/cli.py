"""
Command-line interface for the InsurAI engine.

Provides offline commands over JSON snapshot files (reconcile, stats, sort)
and configuration checks.
"""

import json
import sys
from pathlib import Path
from typing import Any

import click
import structlog

from insurai_engine.config import ConfigurationError, load_config, validate_config
from insurai_engine.utils.logging import configure_logging


logger = structlog.get_logger()


def _load_snapshot_file(path: str) -> dict[str, Any]:
    """
    Read a snapshot file.

    The file holds one JSON object with any of the collections "agents",
    "employees", "hrs", "claims", "policies" and "queries". Missing
    collections read as empty lists.
    """
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise click.BadParameter("snapshot file must contain a JSON object", param_hint="SNAPSHOT")
    return data


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Output logs as JSON",
)
@click.pass_context
def main(ctx, config, verbose, json_logs):
    """InsurAI reconciliation and lifecycle engine."""
    ctx.ensure_object(dict)

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(level=log_level, json_output=json_logs)

    ctx.obj["config_path"] = config
    ctx.obj["log_level"] = log_level


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def reconcile(ctx, snapshot):
    """Join claims with employees, HR staff and policies.

    Prints the enriched claims as JSON.

    \b
    insurai reconcile snapshot.json
    """
    from insurai_engine.core.reconciler import reconcile as reconcile_claims

    try:
        data = _load_snapshot_file(snapshot)
        enriched = reconcile_claims(
            data.get("claims", []),
            data.get("employees", []),
            data.get("hrs", []),
            data.get("policies", []),
        )
        _echo_json([claim.to_wire() for claim in enriched])

    except click.BadParameter:
        raise
    except Exception as e:
        logger.exception("reconcile_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--kind", "-k",
    type=click.Choice(["claims", "queries", "users"]),
    default="claims",
    show_default=True,
    help="Which collection to aggregate",
)
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference day for 'today' counters (format: YYYY-MM-DD)",
)
@click.pass_context
def stats(ctx, snapshot, kind, today):
    """Compute dashboard statistics.

    Claims are reconciled first; users are the merged directory of agents,
    employees and HR staff.

    \b
    insurai stats snapshot.json --kind queries
    """
    from insurai_engine.core.reconciler import merge_directory, normalize_queries
    from insurai_engine.core.reconciler import reconcile as reconcile_claims
    from insurai_engine.statistics import StatisticsAggregator, StatsKind

    config_path = ctx.obj.get("config_path")

    try:
        config = load_config(config_path)
        data = _load_snapshot_file(snapshot)
        employees = data.get("employees", [])
        hrs = data.get("hrs", [])

        if kind == "claims":
            items = reconcile_claims(
                data.get("claims", []), employees, hrs, data.get("policies", [])
            )
        elif kind == "queries":
            items = normalize_queries(data.get("queries", []), employees)
        else:
            items = merge_directory(data.get("agents", []), employees, hrs)

        aggregator = StatisticsAggregator(config.statistics)
        result = aggregator.aggregate(
            items,
            StatsKind(kind),
            today=today.date() if today is not None else None,
        )
        _echo_json(result.to_dict())

    except click.BadParameter:
        raise
    except Exception as e:
        logger.exception("stats_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("sort")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--key", "-k", default=None, help="Field to sort by (e.g. amount, claimDate)")
@click.option(
    "--direction", "-d",
    type=click.Choice(["asc", "desc"]),
    default="asc",
    show_default=True,
)
@click.option("--search", "-s", default="", help="Case-insensitive search text")
@click.option(
    "--status",
    type=click.Choice(["All", "Pending", "Resolved"]),
    default="All",
    show_default=True,
)
@click.pass_context
def sort_cmd(ctx, snapshot, key, direction, search, status):
    """Reconcile, filter and sort claims.

    \b
    insurai sort snapshot.json --key amount --direction desc --status Pending
    """
    from insurai_engine.core.reconciler import reconcile as reconcile_claims
    from insurai_engine.core.sort_filter import SortFilterEngine, SortState
    from insurai_engine.domain.enums import SortDirection

    config_path = ctx.obj.get("config_path")

    try:
        config = load_config(config_path)
        data = _load_snapshot_file(snapshot)
        enriched = reconcile_claims(
            data.get("claims", []),
            data.get("employees", []),
            data.get("hrs", []),
            data.get("policies", []),
        )

        engine = SortFilterEngine(config.sort_filter)
        rows = engine.view(
            enriched,
            search=search,
            status=status,
            sort_state=SortState(key, SortDirection(direction)),
        )
        _echo_json([row.to_wire() for row in rows])

    except click.BadParameter:
        raise
    except Exception as e:
        logger.exception("sort_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("validate-config")
@click.pass_context
def validate_config_cmd(ctx):
    """Validate configuration file."""
    config_path = ctx.obj.get("config_path")

    try:
        config = load_config(config_path)
        warnings = validate_config(config)

        click.echo("Configuration is valid.")

        if warnings:
            click.echo("\nWarnings:")
            for warning in warnings:
                click.echo(f"  - {warning}")

    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def status(ctx):
    """Show effective configuration."""
    config_path = ctx.obj.get("config_path")

    try:
        config = load_config(config_path)

        click.echo("Configuration:")
        click.echo(f"  Config file: {config_path or 'default'}")
        click.echo(f"  Base URL: {config.transport.base_url}")
        click.echo(f"  Request timeout: {config.transport.request_timeout_seconds}s")
        click.echo(f"  Confirm timeout: {config.lifecycle.confirm_timeout_seconds}")
        session_file = config.transport.session_file
        if session_file is None:
            click.echo("  Session file: none (in-memory session)")
        else:
            session_path = Path(session_file).expanduser()
            click.echo(f"  Session file: {session_path}")
            click.echo(f"  Session: {'present' if session_path.exists() else 'missing'}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
