"""
Auction Operator CLI

Main entry point: run the operator loop, inspect the auction, or run a
single reconciliation cycle.
"""

import asyncio
import logging
import sys

import click

from auction_operator.core.config import load_config
from auction_operator.core.engine import classify_case
from auction_operator.core.errors import ConfigError, OperatorError
from auction_operator.utils.logger import get_logger, setup_logging


def connect_client(config):
    """Open the ledger connection for a loaded config."""
    from auction_operator.ledger.web3_client import Web3AuctionContract

    return Web3AuctionContract.connect(config)


def _load(ctx):
    try:
        config = load_config(env_file=ctx.obj.get("env_file"))
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    level = config.level
    if ctx.obj.get("debug"):
        level = logging.DEBUG
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=config.log_to_file)
    return config


def _connect(config):
    try:
        return connect_client(config)
    except OperatorError as e:
        get_logger("cli").error(f"Startup failed: {e}")
        sys.exit(1)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help="Load variables from this .env file")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, env_file):
    """Auction operator - keeps an on-chain auction cycling"""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["env_file"] = env_file


# =============================================================================
# Run Command
# =============================================================================


@cli.command("run")
@click.option("--no-listen", is_flag=True, help="Do not subscribe to contract events")
@click.option("--dry-run", is_flag=True, help="Plan actions without sending transactions")
@click.pass_context
def run(ctx, no_listen, dry_run):
    """Run the operator loop until interrupted"""
    from auction_operator.runtime import AuctionOperator

    config = _load(ctx)
    client = _connect(config)
    operator = AuctionOperator(client, config, dry_run=dry_run, listen=not no_listen)

    click.echo("Operator running. Press Ctrl+C to stop.")
    try:
        asyncio.run(operator.run())
    except KeyboardInterrupt:
        click.echo("\nOperator stopped.")
    finally:
        client.close()


# =============================================================================
# Inspection Commands
# =============================================================================


@cli.command("status")
@click.pass_context
def status(ctx):
    """Show current auction state and the case the operator would act on"""
    from auction_operator.core.reader import StateReader

    config = _load(ctx)
    client = _connect(config)
    reader = StateReader(client, decimals=config.token_decimals)

    async def observe():
        snapshot = await reader.read_snapshot()
        winner = settlement = None
        if not snapshot.is_active:
            winner = await reader.read_winner()
            if winner.has_winner:
                settlement = await reader.read_settlement()
        return snapshot, winner, settlement

    try:
        snapshot, winner, settlement = asyncio.run(observe())
        case = classify_case(snapshot, winner, settlement)
    except OperatorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()

    click.echo(f"Active:         {snapshot.is_active}")
    click.echo(f"Current price:  {snapshot.current_price}")
    click.echo(f"Time remaining: {snapshot.time_remaining} seconds")
    if winner is not None:
        click.echo(f"Winner:         {winner.winner if winner.has_winner else 'none'}")
        if winner.has_winner:
            click.echo(f"Winning bid:    {winner.winning_bid}")
            click.echo(f"Token ID:       {winner.winning_token_id}")
    if settlement is not None:
        click.echo(f"Proof submitted: {settlement.proof_submitted}")
        click.echo(f"Claimed:         {settlement.claimed}")
    click.echo(f"Case:           {case.value}")


@cli.command("reconcile")
@click.option("--dry-run", is_flag=True, help="Print planned actions without sending transactions")
@click.pass_context
def reconcile(ctx, dry_run):
    """Run a single reconciliation cycle"""
    from auction_operator.runtime import AuctionOperator

    config = _load(ctx)
    client = _connect(config)
    operator = AuctionOperator(client, config, dry_run=dry_run, listen=False)

    try:
        report = asyncio.run(operator.engine.reconcile())
    except OperatorError as e:
        click.echo(f"Cycle failed: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()

    click.echo(f"Case: {report.case.value}")
    if not report.actions:
        click.echo("No action needed.")
    for action, receipt in report.actions:
        if receipt is None:
            click.echo(f"  would dispatch {action.describe()}")
        else:
            click.echo(f"  {action.describe()} -> {receipt.tx_hash} (block {receipt.block_number})")


if __name__ == "__main__":
    cli()
