#!/usr/bin/env python3
"""
pushpull CLI

Command-line interface for point-to-point file transfer over TCP.

One side listens, the other connects; which side pushes is agreed out of band.

Usage:
    python cli.py pull OUTPUT --listen                  # Wait for a peer, receive a file
    python cli.py push FILE --connect --host 10.0.0.5   # Dial a peer, send a file
    python cli.py push FILE --listen                    # Wait for a peer, send a file
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from config import Config, load_config
from pushpull.connection import accept_one, close, connect
from pushpull.exceptions import TransferError
from pushpull.session import Pull, Push, TransferRequest, perform
from pushpull.transfer.stats import TransferStats

console = Console()
logger = logging.getLogger('pushpull.cli')


def setup_logging(verbose: bool = False, level: str = 'INFO'):
    """Configure logging with rich output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)]
    )


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              default=None, help='JSON config file')
@click.pass_context
def cli(ctx, verbose, config_path):
    """pushpull - send a file to a peer, or receive one, over a single TCP stream."""
    try:
        config = load_config(config_path)
    except ValueError as e:
        ctx.fail(f"Invalid configuration: {e}")
    setup_logging(verbose, config.log_level)
    ctx.ensure_object(dict)
    ctx.obj['config'] = config


def endpoint_options(command):
    """Options shared by push and pull for establishing the connection."""
    command = click.option('--port', type=int, default=None,
                           help='TCP port (default from config)')(command)
    command = click.option('--host', default=None,
                           help='Address to dial, or to bind with --listen')(command)
    command = click.option('--listen/--connect', default=False,
                           help='Wait for the peer to connect, or dial it (default)')(command)
    return command


@cli.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@endpoint_options
@click.pass_context
def push(ctx, source, listen, host, port):
    """Send SOURCE to the peer."""
    run_transfer(ctx, Push(source), listen, host, port)


@cli.command()
@click.argument('destination', type=click.Path(dir_okay=False, path_type=Path))
@endpoint_options
@click.pass_context
def pull(ctx, destination, listen, host, port):
    """Receive a file from the peer into DESTINATION."""
    run_transfer(ctx, Pull(destination), listen, host, port)


def run_transfer(ctx, request: TransferRequest, listen: bool,
                 host: Optional[str], port: Optional[int]):
    """Connect, run one transfer, print the stats."""
    config: Config = ctx.obj['config']
    host = host or config.host
    port = port if port is not None else config.port

    async def run() -> TransferStats:
        if listen:
            console.print(f"[dim]Waiting for peer on {host}:{port}...[/dim]")
            reader, writer = await accept_one(host, port)
        else:
            reader, writer = await connect(host, port, config.connect_timeout)

        try:
            result = await perform(request, reader, writer, config.buffer_size)
        finally:
            await close(writer)
        return result.stats

    try:
        stats = asyncio.run(run())
    except (TransferError, OSError, EOFError) as e:
        logger.debug("Transfer failed", exc_info=True)
        console.print(f"[red]✗ Transfer failed: {e}[/red]")
        ctx.exit(1)

    verb = 'Pushed' if isinstance(request, Push) else 'Pulled'
    console.print(f"[green]✓ {verb}[/green]")
    console.print(str(stats), markup=False, highlight=False)


if __name__ == '__main__':
    cli()
