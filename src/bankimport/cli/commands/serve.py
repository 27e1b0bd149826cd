"""HTTP server command."""

import click
import uvicorn

from bankimport.api.app import create_app


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
@click.pass_context
def serve(ctx, host: str, port: int):
    """Run the HTTP API."""
    app = create_app(ctx.obj["settings"])
    uvicorn.run(app, host=host, port=port, log_level=ctx.obj["settings"].log_level.lower())


def register_commands(cli):
    """Register serve command with main CLI."""
    cli.add_command(serve)
