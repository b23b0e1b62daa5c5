"""
CLI interface for searpc.

Provides commands to create a configuration, inspect the services it
registers, and dispatch calls to them in-process.

Services are listed in config.yaml as "module:attr" import paths and are
registered on a fresh Server every time a command runs.
"""

import sys

import click

from searpc import __version__


def _get_server(ctx):
    """Build the Server from the loaded config, or exit with an error."""
    from searpc.config import ConfigError, build_server
    from searpc.errors import RegistrationError
    from searpc.utils import print_error

    if "config" not in ctx.obj:
        print_error(f"Config not loaded: {ctx.obj.get('config_error', 'Unknown error')}")
        click.echo("Run 'searpc init' to create a configuration file.", err=True)
        raise SystemExit(1)

    try:
        return build_server(ctx.obj["config"])
    except (ConfigError, RegistrationError) as e:
        print_error(str(e))
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="searpc")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.yaml (default: $SEARPC_HOME/config.yaml)",
)
@click.pass_context
def main(ctx, config_path):
    """
    searpc - transport-agnostic RPC dispatch.

    Register services from config.yaml and call them with JSON payloads.
    """
    from pathlib import Path

    from searpc.config import load_config
    from searpc.utils import setup_logging

    ctx.ensure_object(dict)
    try:
        config = load_config(Path(config_path) if config_path else None)
    except Exception as e:
        # init works without a config; other commands check ctx.obj
        ctx.obj["config_error"] = str(e)
        return

    ctx.obj["config"] = config
    setup_logging(
        log_file=config.get_log_file_path(),
        log_level=config.log_level,
        log_format=config.log_format,
        console_output=config.console,
    )


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """Initialize searpc configuration."""
    from searpc.config import get_searpc_home
    import yaml

    home = get_searpc_home()
    if not home.exists():
        home.mkdir(parents=True)

    cfg_path = home / "config.yaml"
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    default_cfg = {
        "services": [],
        "log_level": "INFO",
        "log_format": "pretty",
        "log_file": None,
        "console": True,
    }
    cfg_path.write_text(yaml.safe_dump(default_cfg, sort_keys=False))

    click.echo(f"Initialized searpc config at {cfg_path}")
    click.echo("Add receivers under 'services' as module:attr import paths.")


@main.command("services")
@click.pass_context
def list_services(ctx):
    """List registered services and their functions."""
    server = _get_server(ctx)
    services = server.list_services()
    if not services:
        click.echo("No services configured.")
        return

    for service in services:
        click.echo(f"{service.name}")
        for name in sorted(service.methods):
            method = service.methods[name]
            click.echo(f"  {name} ({method.num_in} args)")


@main.command("call")
@click.argument("service")
@click.argument("payload")
@click.option("--check", is_flag=True, help="Exit with status 1 when err_code is non-zero")
@click.pass_context
def call(ctx, service: str, payload: str, check: bool):
    """
    Call a function on SERVICE with a JSON PAYLOAD.

    PAYLOAD is a JSON array such as '["add", 2, 3]', or '-' to read it
    from stdin. The response envelope is printed as-is.
    """
    from searpc.codec import decode_result

    server = _get_server(ctx)
    if payload == "-":
        payload = sys.stdin.read()

    response = server.call(service, payload.encode("utf-8"))
    click.echo(response.decode("utf-8"))

    if check and not decode_result(response).ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
