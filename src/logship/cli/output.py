"""
Output formatters for CLI.
"""

from rich.console import Console
from rich.table import Table

from logship.config.models import Configuration, Declaration

__all__ = ["render_configuration", "render_stats"]


def _describe(declaration: Declaration) -> str:
    """One line summary of a declaration's settings."""
    values = {
        key: value
        for key, value in declaration.__dict__.items()
        if key != "name"
    }
    return ", ".join(f"{key}={value}" for key, value in values.items()) or "-"


def render_configuration(configuration: Configuration, console: Console) -> None:
    """Render declared outputs and inputs as Rich tables."""
    if configuration.documents:
        console.print(f"[bold]Documents:[/bold] {', '.join(configuration.documents)}")

    outputs = Table(title="Outputs", show_header=True, header_style="bold magenta")
    outputs.add_column("#", style="dim", width=4)
    outputs.add_column("Kind", style="cyan")
    outputs.add_column("Name")
    outputs.add_column("Settings", overflow="fold")
    for index, declaration in enumerate(configuration.outputs):
        outputs.add_row(str(index), declaration.kind, declaration.display_name, _describe(declaration))

    inputs = Table(title="Inputs", show_header=True, header_style="bold magenta")
    inputs.add_column("#", style="dim", width=4)
    inputs.add_column("Kind", style="green")
    inputs.add_column("Name")
    inputs.add_column("Settings", overflow="fold")
    for index, declaration in enumerate(configuration.inputs):
        inputs.add_row(str(index), declaration.kind, declaration.display_name, _describe(declaration))

    console.print(outputs)
    console.print(inputs)

    n_out = len(configuration.outputs)
    n_in = len(configuration.inputs)
    console.print(
        f"\n{n_out} outputs x {n_in} inputs = [bold]{n_out * n_in}[/bold] connections"
    )


def render_stats(stats: dict, console: Console) -> None:
    """Render an orchestrator stats() snapshot."""
    table = Table(title="Pipeline", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("Started", stats["started_on"])
    table.add_row("Uptime", f"{stats['uptime_seconds']:.0f}s")
    table.add_row("Messages", str(stats["messages"]))
    table.add_row("Connections", str(stats["connections"]))
    table.add_row("Sources", ", ".join(s["name"] for s in stats["sources"]) or "-")
    table.add_row("Sinks", ", ".join(s["name"] for s in stats["sinks"]) or "-")

    console.print(table)
