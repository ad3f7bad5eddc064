"""Command line entry point for the backend server."""

import sys
from pathlib import Path

import click
import uvicorn
from pydantic import ValidationError

from tf_http_backend.core.config import Settings
from tf_http_backend.core.logging import configure_logging, get_logger
from tf_http_backend.main import create_app
from tf_http_backend.state_store import StateStore, StorageInitError

logger = get_logger()


def load_settings(
    address: str | None, path: Path | None, debug: bool | None
) -> Settings:
    """Build settings from the environment with command line overrides."""
    overrides = {
        key: value
        for key, value in (("address", address), ("path", path), ("debug", debug))
        if value is not None
    }
    return Settings(**overrides)


def run(settings: Settings) -> int:
    """Start the backend server and block until it stops.

    Returns:
        Process exit code
    """
    logger.info("starting_backend", version=settings.version)

    try:
        store = StateStore(storage_path=settings.path)
    except StorageInitError as e:
        logger.error("storage_init_failed", error=str(e))
        return 1

    app = create_app(settings=settings, store=store)

    logger.debug("bind_address", address=settings.address)
    try:
        uvicorn.run(
            app,
            host=settings.bind_host,
            port=settings.bind_port,
            timeout_keep_alive=settings.keep_alive_timeout,
            log_config=None,
            access_log=settings.debug,
        )
    except (OSError, SystemExit) as e:
        logger.error("server_failed", error=str(e))
        return 1

    return 0


@click.command()
@click.option(
    "--address",
    default=None,
    help="The address to which HTTP server will bind. "
    "Overrides the TF_HTTP_ADDR environment variable if set. Default = :3001",
)
@click.option(
    "--path",
    type=click.Path(path_type=Path),
    default=None,
    help="The path to Terraform state files storage. "
    "Overrides the TF_HTTP_PATH environment variable if set. "
    "Default = /var/lib/terraform",
)
@click.option(
    "--debug/--no-debug",
    default=None,
    help="Enables debug mode. "
    "Overrides the TF_HTTP_DEBUG environment variable if set. Default = false",
)
def cli(address: str | None, path: Path | None, debug: bool | None) -> None:
    """Terraform HTTP state backend."""
    try:
        settings = load_settings(address, path, debug)
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e

    configure_logging(debug=settings.debug, json_logs=settings.json_logs)
    sys.exit(run(settings))


if __name__ == "__main__":
    cli()
