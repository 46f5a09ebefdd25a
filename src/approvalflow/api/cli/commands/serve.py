"""Serve command - Run the HTTP API with uvicorn."""

import os

import typer

app = typer.Typer(help="Run the HTTP API")


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8070, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Start the approval API server."""
    import uvicorn

    global_opts = ctx.obj or {}
    if global_opts.get("config"):
        os.environ["APPROVALFLOW_CONFIG"] = global_opts["config"]
    if global_opts.get("debug"):
        os.environ["LOGLEVEL"] = "DEBUG"

    uvicorn.run("approvalflow.api.server:app", host=host, port=port, reload=reload)
