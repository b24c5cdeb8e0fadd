import click
import uvicorn

from permazip.core.context import PermazipContext
from permazip.server.config import ServerConfig
from permazip.server.main import create_app


@click.command("serve")
@click.option("--host", default=None, help="Bind address (default: $PERMAZIP_HOST or 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port (default: $PERMAZIP_PORT or 8000)")
@click.pass_obj
def serve_cmd(ctx: PermazipContext, host: str | None, port: int | None) -> None:
    """Serve the download and admin endpoints."""
    server_config = ServerConfig.from_env()
    uvicorn.run(
        create_app(ctx),
        host=host or server_config.host,
        port=port or server_config.port,
        log_level="debug" if server_config.debug else "info",
    )
