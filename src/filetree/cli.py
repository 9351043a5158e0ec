"""
Main CLI for filetree using Click.

Commands:
    serve            Populate the index from an entries file and serve it over HTTP
    dir              Show one directory (local entries file or remote server)
    roots            List corpora and their roots
    validate-config  Validate a YAML configuration file
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable

import click
from pydantic import ValidationError

from .config.loader import load_config
from .config.schema import AppConfig
from .errors import FileTreeError
from .indexer import EntriesFileSource, build_index
from .logging import configure_logging
from .service import FileTreeService
from .web.client import WebClient
from .web.codec import corpus_roots_to_wire, dir_to_wire

# Exit codes
EXIT_FAILED = 1
EXIT_NOT_FOUND = 2
EXIT_CONFIG_ERROR = 3

_VERSION = "0.1.0"


def _common_options(func: Callable) -> Callable:
    """Options shared by every command that needs a filetree service."""
    options = [
        click.option(
            "-c",
            "--config",
            type=click.Path(exists=True, path_type=Path),
            help="Path to the YAML configuration file",
        ),
        click.option(
            "--entries",
            type=click.Path(path_type=Path),
            help="JSON-lines entry dump to build the index from",
        ),
        click.option("--log-level", type=click.Choice(["debug", "info", "warn", "error"])),
        click.option("--log-file", type=click.Path(path_type=Path), help="Also write JSON logs here"),
        click.option("-v", "--verbose", count=True, help="More console output (-v, -vv)"),
        click.option("--quiet", is_flag=True, help="No console logging"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _remote_options(func: Callable) -> Callable:
    func = click.option(
        "--binary", is_flag=True, help="Ask the remote server for msgpack responses"
    )(func)
    func = click.option(
        "--remote", help="Query a remote filetree server instead of a local index"
    )(func)
    return func


def _setup(config: Path | None, quiet: bool, **cli_args: Any) -> AppConfig:
    """Load configuration and configure logging, exiting on config errors."""
    try:
        app_config = load_config(config_path=config, cli_args=cli_args)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(app_config.logging, quiet=quiet)
    return app_config


def _open_service(app_config: AppConfig) -> FileTreeService:
    """Remote client if a remote URL is configured, otherwise a local index."""
    if app_config.remote.url:
        return WebClient(
            app_config.remote.url,
            timeout=app_config.remote.timeout,
            binary=app_config.remote.binary,
        )

    if app_config.source.entries is None:
        raise click.UsageError("either --entries or --remote is required")

    return build_index(EntriesFileSource(app_config.source.entries))


def _close(service: FileTreeService) -> None:
    # Only remote clients hold a connection pool
    if hasattr(service, "close"):
        service.close()


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))


@click.group()
@click.version_option(version=_VERSION, prog_name="filetree")
def main() -> None:
    """filetree - directory index over a corpus of file names."""
    pass


@main.command()
@_common_options
@click.option("--host", help="Address to listen on")
@click.option("--port", type=int, help="Port to listen on")
def serve(config: Path | None, quiet: bool, **kwargs: Any) -> None:
    """Build the index from an entries file and serve it over HTTP."""
    import uvicorn

    from .web.server import create_app

    app_config = _setup(config, quiet, **kwargs)
    if app_config.source.entries is None:
        raise click.UsageError("serve needs an entries file (--entries)")

    # Population completes and the index is frozen before any request is accepted
    try:
        index = build_index(EntriesFileSource(app_config.source.entries))
    except FileTreeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)

    uvicorn.run(
        create_app(index),
        host=app_config.server.host,
        port=app_config.server.port,
        log_config=None,
    )


@main.command("dir")
@click.argument("corpus")
@click.argument("path", default="/")
@click.option("--root", default="", help="Root within the corpus (default: empty root)")
@_common_options
@_remote_options
def dir_command(
    corpus: str, path: str, root: str, config: Path | None, quiet: bool, **kwargs: Any
) -> None:
    """Show the files and subdirectories of CORPUS:PATH."""
    app_config = _setup(config, quiet, **kwargs)
    try:
        service = _open_service(app_config)
        try:
            record = service.dir(corpus, root, path)
        finally:
            _close(service)
    except FileTreeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)

    if record is None:
        click.echo(f"Directory not found: {corpus} {root!r} {path}", err=True)
        sys.exit(EXIT_NOT_FOUND)
    _echo_json(dir_to_wire(record))


@main.command()
@_common_options
@_remote_options
def roots(config: Path | None, quiet: bool, **kwargs: Any) -> None:
    """List known corpora and their roots."""
    app_config = _setup(config, quiet, **kwargs)
    try:
        service = _open_service(app_config)
        try:
            corpus_roots = service.corpus_roots()
        finally:
            _close(service)
    except FileTreeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    _echo_json(corpus_roots_to_wire(corpus_roots))


@main.command()
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to the configuration file to validate",
)
def validate_config(config: Path | None) -> None:
    """Validate a YAML configuration file."""
    try:
        app_config = load_config(config_path=config)
        click.echo("Valid configuration")
        click.echo(f"  Entries: {app_config.source.entries or '-'}")
        click.echo(f"  Server: {app_config.server.host}:{app_config.server.port}")
        click.echo(f"  Remote: {app_config.remote.url or '-'}")
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except Exception as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_FAILED)


if __name__ == "__main__":
    main()
