"""CLI entry point for inoforge."""

import base64
import json as jsonmod
from pathlib import Path

import click

from inoforge.analyzer import analyze
from inoforge.compilers import get_compiler_class, list_compilers
from inoforge.config import ConfigError, load_settings
from inoforge.dispatcher import CompileDispatcher
from inoforge.models import CompileRequest


def _load(config_dir, service_url=None):
    """Load settings, turning config problems into a CLI error."""
    try:
        settings = load_settings(config_dir)
    except ConfigError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)
    if service_url is not None:
        settings.service.url = service_url.strip().rstrip("/") or None
    return settings


def _read_sketch(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _build_dispatcher(settings, backend):
    """Dispatcher for the CLI. 'remote' follows the configured service URL."""
    if backend == "remote":
        return CompileDispatcher.from_settings(settings)
    compiler_cls = get_compiler_class(backend)
    if backend == "arduino-cli":
        compiler = compiler_cls(
            cli_path=settings.peer.arduino_cli,
            compile_timeout=settings.peer.compile_timeout,
            library_timeout=settings.peer.library_timeout,
        )
    else:
        compiler = compiler_cls()
    return CompileDispatcher(settings.board_table(), compiler=compiler)


@click.group()
def main():
    """Compile Arduino/ESP32 sketches through a remote or local toolchain."""
    pass


_config_option = click.option(
    "--config-dir", type=click.Path(file_okay=False), default=".",
    help="Directory containing inoforge.toml.",
)


@main.command()
@click.option("--host", type=str, default=None, help="Bind address.")
@click.option("--port", type=int, default=None, help="Port to listen on.")
@_config_option
def serve(host, port, config_dir):
    """Run the compile API."""
    from inoforge.app import create_app

    settings = _load(config_dir)
    app = create_app(settings)
    app.run(host=host or settings.server.host, port=port or settings.server.port)


@main.command()
@click.option("--host", type=str, default=None, help="Bind address.")
@click.option("--port", type=int, default=None, help="Port to listen on.")
@_config_option
def peer(host, port, config_dir):
    """Run the remote compile peer (needs arduino-cli)."""
    from inoforge.peer import create_peer_app

    settings = _load(config_dir)
    app = create_peer_app(settings)
    app.run(host=host or settings.peer.host, port=port or settings.peer.port)


@main.command("compile")
@click.argument("sketch", type=click.Path(exists=True, dir_okay=False))
@click.option("--board", type=str, required=True, help="Board name (e.g. 'ESP32 Dev Module') or FQBN.")
@click.option("--library", "libraries", multiple=True, help="Library to install before compiling. Repeatable.")
@click.option("--verbose", is_flag=True, help="Ask the toolchain for verbose output.")
@click.option("--output", "output_path", type=click.Path(dir_okay=False), help="Write the binary here.")
@click.option("--backend", type=click.Choice(["remote", "mock", "arduino-cli"]), default="remote",
              help="remote (COMPILE_SERVICE_URL), mock (offline demo) or arduino-cli (local).")
@click.option("--service-url", type=str, default=None, help="Override COMPILE_SERVICE_URL.")
@click.option("--json", "use_json", is_flag=True, help="Output the raw JSON response.")
@_config_option
def compile_cmd(sketch, board, libraries, verbose, output_path, backend, service_url, use_json, config_dir):
    """Compile a sketch file."""
    settings = _load(config_dir, service_url)
    dispatcher = _build_dispatcher(settings, backend)
    request = CompileRequest(code=_read_sketch(sketch), board=board, libraries=list(libraries), verbose=verbose)
    response, _status = dispatcher.compile(request)

    if use_json:
        click.echo(jsonmod.dumps(response.to_dict(), indent=2))
    else:
        for line in response.output:
            click.echo(line)
        for warning in response.warnings:
            click.echo(f"Warning: {warning}")
        for error in response.errors:
            click.echo(f"Error: {error}")

    if not response.success:
        raise SystemExit(1)

    if output_path:
        Path(output_path).write_bytes(base64.b64decode(response.binary))
        if backend == "mock":
            click.echo(f"Wrote placeholder (not flashable) to {output_path}")
        else:
            click.echo(f"Wrote {response.size} bytes to {output_path}")


@main.command()
@click.argument("sketch", type=click.Path(exists=True, dir_okay=False))
@click.option("--board", type=str, default=None, help="Board name or FQBN to report as the target.")
@_config_option
def check(sketch, board, config_dir):
    """Run the offline heuristic checks on a sketch."""
    if board:
        click.echo(f"Target: {_load(config_dir).board_table().resolve(board)}")
    report = analyze(_read_sketch(sketch))
    for warning in report.warnings:
        click.echo(f"Warning: {warning}")
    for error in report.errors:
        click.echo(f"Error: {error}")
    if not report.ok:
        raise SystemExit(1)
    click.echo(f"No structural problems found ({len(report.warnings)} warning(s)).")


@main.command()
@click.option("--json", "use_json", is_flag=True, help="Output JSON.")
@_config_option
def boards(use_json, config_dir):
    """List supported boards."""
    table = _load(config_dir).board_table()
    if use_json:
        data = [{"name": b.name, "fqbn": b.fqbn} for b in table]
        click.echo(jsonmod.dumps(data, indent=2))
        return
    click.echo(f"Supported boards ({len(table)}):\n")
    for b in table:
        click.echo(f"  {b.name:<24} {b.fqbn}")


@main.command()
@click.argument("label")
@_config_option
def resolve(label, config_dir):
    """Print the FQBN for a board name (unknown names are echoed back)."""
    click.echo(_load(config_dir).board_table().resolve(label))


@main.command()
@click.option("--json", "use_json", is_flag=True, help="Output JSON.")
@click.option("--service-url", type=str, default=None, help="Override COMPILE_SERVICE_URL.")
@_config_option
def status(use_json, service_url, config_dir):
    """Check whether the compile service is configured and reachable."""
    settings = _load(config_dir, service_url)
    result = CompileDispatcher.from_settings(settings).status()
    if use_json:
        click.echo(jsonmod.dumps(result, indent=2))
        return
    if not result["serviceConfigured"]:
        click.echo("[!!] Compile service not configured. Set COMPILE_SERVICE_URL.")
    elif result["serviceOnline"]:
        click.echo(f"[OK] Compile service online at {settings.service.url}")
    else:
        click.echo(f"[!!] Compile service at {settings.service.url} is not reachable")
    click.echo(f"Backends: {', '.join(list_compilers())}")
