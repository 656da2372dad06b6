"""
Main CLI entry point for logship.
"""

import click
from rich.console import Console

from logship import __version__

console = Console()
error_console = Console(stderr=True)

LOG_LEVELS = ["trace", "debug", "info", "warn", "warning", "error", "fatal", "off"]


@click.group()
@click.version_option(version=__version__, prog_name="logship")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    logship - host log shipping agent

    Reads logs from files, the OS event log, TCP and stdin, and ships
    every record to every configured output (Redis, Elasticsearch, stdout).

    Examples:

    \b
        logship check -c /etc/logship/conf.d
        logship run -c /etc/logship/conf.d --log-dir /var/log
        tail -F app.log | logship run -c stdin.json --log-level debug
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = console
    ctx.obj["error_console"] = error_console


@cli.command()
@click.option(
    "--config", "-c", "config_path", required=True,
    type=click.Path(),
    help="Configuration file, or directory of configuration files"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="info",
    help="Minimum level of the agent's own diagnostics (default: info)"
)
@click.option(
    "--log-dir", "-d", "log_dir",
    type=click.Path(file_okay=False),
    default=".",
    help="Directory for the diagnostics log (default: current directory)"
)
@click.option(
    "--stats-interval", type=float, default=0.0,
    help="Log throughput every N seconds (default: off)"
)
@click.pass_context
def run(
    ctx: click.Context,
    config_path: str,
    log_level: str,
    log_dir: str,
    stats_interval: float,
) -> None:
    """
    Run the agent until interrupted (Ctrl-C / SIGTERM).

    Examples:

    \b
        logship run -c agent.json
        logship run -c conf.d/ --log-level warning --log-dir /var/log
    """
    from logship.cli.commands import run_command

    exit_code = run_command(
        config_path=config_path,
        log_level=log_level,
        log_dir=log_dir,
        stats_interval=stats_interval,
        console=ctx.obj["console"],
        error_console=ctx.obj["error_console"],
    )
    ctx.exit(exit_code)


@cli.command()
@click.option(
    "--config", "-c", "config_path", required=True,
    type=click.Path(),
    help="Configuration file, or directory of configuration files"
)
@click.pass_context
def check(ctx: click.Context, config_path: str) -> None:
    """
    Validate a configuration and list the outputs and inputs it declares.
    """
    from logship.cli.commands import check_command

    exit_code = check_command(
        config_path=config_path,
        console=ctx.obj["console"],
        error_console=ctx.obj["error_console"],
    )
    ctx.exit(exit_code)


@cli.command()
@click.pass_context
def formats(ctx: click.Context) -> None:
    """
    List the line formats of generic log inputs, and every input and output kind.
    """
    from rich.table import Table
    from logship.infrastructure.registry import default_registry
    from logship.parsers import registry

    table = Table(title="Supported Log Formats")
    table.add_column("Parser", style="cyan")
    table.add_column("Formats", style="green")

    for parser_name in sorted(registry.list_parsers()):
        parser = registry.get_parser(parser_name)
        if parser:
            table.add_row(parser_name, ", ".join(parser.supported_formats))

    console.print(table)

    components = default_registry()
    console.print(f"[bold]Inputs:[/bold] {', '.join(components.list_sources())}")
    console.print(f"[bold]Outputs:[/bold] {', '.join(components.list_sinks())}")


if __name__ == "__main__":
    cli()
