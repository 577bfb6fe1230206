#!/usr/bin/env python3
"""
Token Minter - Command Line Interface

Mint and burn the configured token, export the policy blueprint and run the
HTTP endpoint.
"""

import functools
import json
import logging
import sys
from typing import Any, Dict, Optional

import click

from cli import __version__

from .config import NETWORKS, MinterConfig, load_config
from .context import AppContext


class CLIContext:
    """Global CLI context for sharing state across commands."""

    def __init__(self):
        self.config_file: Optional[str] = None
        self.network: Optional[str] = None
        self.output_format: str = "table"
        self.verbose: int = 0
        self.logger: Optional[logging.Logger] = None
        self._app: Optional[AppContext] = None

    def setup_logging(self):
        """Configure logging based on verbosity level."""
        log_levels = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG
        }
        level = log_levels.get(min(self.verbose, 2), logging.DEBUG)

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

        root = logging.getLogger()
        root.handlers = [handler]
        root.setLevel(level)

        # Suppress verbose third-party logs unless in debug mode
        if self.verbose < 2:
            logging.getLogger('requests').setLevel(logging.WARNING)
            logging.getLogger('urllib3').setLevel(logging.WARNING)

        self.logger = logging.getLogger('minter-cli')

    def load(self, **overrides) -> MinterConfig:
        overrides.setdefault("network", self.network)
        return load_config(self.config_file, overrides)

    def app(self, **overrides) -> AppContext:
        if self._app is None:
            self._app = AppContext(self.load(**overrides))
        return self._app

    def output(self, data: Any):
        """Output data in the selected format."""
        if self.output_format == "json":
            click.echo(json.dumps(data, indent=2, default=str))
        elif isinstance(data, dict):
            for key, value in data.items():
                click.echo(f"{key:20} {value}")
        else:
            click.echo(str(data))


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def handle_cli_error(func):
    """Decorator to report command errors without a traceback."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo("\nOperation cancelled by user.", err=True)
            sys.exit(130)
        except click.ClickException:
            raise
        except Exception as e:
            ctx = click.get_current_context().find_object(CLIContext)
            if ctx is not None and ctx.verbose >= 2:
                import traceback
                click.echo(f"Error: {e}", err=True)
                click.echo(traceback.format_exc(), err=True)
            else:
                click.echo(f"Error: {e}", err=True)
                click.echo("Use -vv for detailed error information.", err=True)
            sys.exit(1)

    return wrapper


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c', help='Path to JSON configuration file')
@click.option('--network', '-n', type=click.Choice(NETWORKS), help='Target network')
@click.option('--output-format', '-o',
              type=click.Choice(['table', 'json']),
              default='table',
              help='Output format')
@click.option('--verbose', '-v', count=True, help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.version_option(__version__, prog_name="minter")
@pass_context
def cli(ctx: CLIContext, config_file: Optional[str], network: Optional[str], output_format: str, verbose: int):
    """
    Token Minter

    Admin-controlled minting of a single named token.

    Examples:
        minter blueprint > plutus.json
        minter --network preprod mint --amount 1000
        minter start --port 8088
    """
    ctx.config_file = config_file
    ctx.network = network
    ctx.output_format = output_format
    ctx.verbose = verbose
    ctx.setup_logging()
    ctx.logger.debug("CLI initialized with context")


@cli.command()
@click.option('--output', '-O', type=click.Path(dir_okay=False, writable=True), help='Write to file instead of stdout')
@pass_context
@handle_cli_error
def blueprint(ctx: CLIContext, output: Optional[str]):
    """Export the CIP-57 blueprint of the minting policy."""
    from scripts.blueprint import blueprint_json

    text = blueprint_json(ctx.app().template)
    if output:
        with open(output, 'w') as f:
            f.write(text + "\n")
        click.echo(f"Blueprint written to {output}", err=True)
    else:
        click.echo(text)


@cli.command()
@click.option('--host', help='Interface to bind')
@click.option('--port', '-p', type=int, help='Port to listen on')
@pass_context
@handle_cli_error
def start(ctx: CLIContext, host: Optional[str], port: Optional[int]):
    """Run the HTTP minting endpoint."""
    import uvicorn

    from api.app import create_app

    app_ctx = ctx.app(host=host, port=port)
    service = app_ctx.service
    ctx.logger.info(f"Serving policy {service.script.policy_id_hex} on {app_ctx.config.host}:{app_ctx.config.port}")
    uvicorn.run(create_app(service), host=app_ctx.config.host, port=app_ctx.config.port)


@cli.command()
@click.option('--amount', '-a', type=int, required=True, help='Units to mint')
@pass_context
@handle_cli_error
def mint(ctx: CLIContext, amount: int):
    """Mint tokens to the wallet address."""
    tx_id = ctx.app().service.submit_minting_tx(amount)
    ctx.output({"action": "mint", "amount": amount, "tx_id": tx_id})


@cli.command()
@click.option('--amount', '-a', type=int, required=True, help='Units to burn')
@pass_context
@handle_cli_error
def burn(ctx: CLIContext, amount: int):
    """Burn tokens held by the wallet."""
    tx_id = ctx.app().service.submit_burning_tx(amount)
    ctx.output({"action": "burn", "amount": abs(amount), "tx_id": tx_id})


@cli.command()
@click.option('--show-config', is_flag=True, help='Include the effective configuration')
@pass_context
@handle_cli_error
def info(ctx: CLIContext, show_config: bool):
    """Show the policy id, token unit, wallet address and holdings."""
    app_ctx = ctx.app()
    service = app_ctx.service
    data: Dict[str, Any] = service.policy_info()
    data["holdings"] = service.holdings()
    if show_config:
        data["config"] = app_ctx.config.to_dict()
    ctx.output(data)


def main():
    cli()


if __name__ == '__main__':
    main()
