"""jitlog CLI - reconstruct JIT-compiled methods from profiler logs."""

import click

from jitlog.cli.parse import parse_command
from jitlog.cli.resolve import resolve_command
from jitlog.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="jitlog")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """jitlog - Profiler log parser and method descriptor tool."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(parse_command, name="parse")
cli.add_command(resolve_command, name="resolve")


if __name__ == "__main__":
    cli()
