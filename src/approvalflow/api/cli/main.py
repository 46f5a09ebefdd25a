"""Approvalflow CLI entry point."""

import typer
from rich.console import Console

from approvalflow.api.cli.commands import rules, serve

app = typer.Typer(
    name="approvalflow",
    help="Approvalflow - rule-driven approval workflows for tasks",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Register command groups
app.add_typer(rules.app, name="rules", help="Rule catalog inspection")
app.add_typer(serve.app, name="serve", help="Run the HTTP API")


@app.callback()
def main(
    ctx: typer.Context,
    config: str = typer.Option(
        None, "--config", "-c", help="Settings YAML (overrides APPROVALFLOW_CONFIG)"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Approvalflow CLI."""
    from approvalflow.application.settings import configure_logging

    configure_logging("DEBUG" if debug else "WARNING")
    # Store global options in context for subcommands
    ctx.obj = {"config": config, "debug": debug}


@app.command()
def version():
    """Show Approvalflow version."""
    from approvalflow import __version__

    console.print(f"[bold blue]Version:[/bold blue] [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
