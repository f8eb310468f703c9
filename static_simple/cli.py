"""Static::Simple CLI - Main Entry Point.

Commands:
    serve    - Serve a document root over HTTP (uvicorn)
    resolve  - Show which file and MIME type a path resolves to
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import click

from . import __version__
from .app import Application
from .asgi import ASGIAdapter
from .config import ConfigLoader, StaticConfig
from .context import DebugTrace
from .faults import Fault
from .pipeline import StaticResolutionPipeline
from .response import NotFound

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def static_options(func):
    """Options shared by every command that builds a StaticConfig."""
    func = click.option('--config', 'config_file', type=click.Path(dir_okay=False),
                        help='YAML or JSON config file')(func)
    func = click.option('--mime', 'mimes', multiple=True, metavar='EXT=TYPE',
                        help='MIME type override (repeatable)')(func)
    func = click.option('--include', 'includes', multiple=True, metavar='DIR',
                        help='Include path directory, searched in order (repeatable)')(func)
    func = click.option('--dir', 'dirs', multiple=True, metavar='RULE',
                        help='Static directory rule, literal prefix or qr/regex/ (repeatable)')(func)
    return func


def _parse_mimes(mimes: Sequence[str]) -> dict:
    parsed = {}
    for item in mimes:
        ext, sep, mime = item.partition("=")
        if not sep or not ext or not mime:
            raise click.BadParameter(f"expected EXT=TYPE, got {item!r}", param_hint="--mime")
        parsed[ext.lstrip(".")] = mime
    return parsed


def _build_config(
    root: str,
    dirs: Sequence[str],
    includes: Sequence[str],
    mimes: Sequence[str],
    config_file: Optional[str],
    debug: bool = False,
    native: bool = False,
) -> StaticConfig:
    """Merge the config file, environment and command line options."""
    static = {}
    if dirs:
        static["dirs"] = list(dirs)
    if includes:
        static["include_path"] = [str(Path(d).absolute()) for d in includes]
    if mimes:
        static["mime_types"] = _parse_mimes(mimes)
    if native:
        static["use_native"] = True
    if debug:
        static["debug"] = True

    loader = ConfigLoader.load(
        paths=[config_file] if config_file else None,
        overrides={"static": static},
    )
    return loader.static_config(root, debug=debug)


def _parse_bind(bind: str):
    if ':' in bind:
        host, port_str = bind.rsplit(':', 1)
        try:
            return host, int(port_str)
        except ValueError:
            raise click.BadParameter(f"invalid port in {bind!r}", param_hint="--bind")
    return bind, 8000


async def not_found(request, ctx):
    """Default application handler: nothing but static files here."""
    return NotFound()


# ============================================================================
# Commands
# ============================================================================

@click.group()
@click.version_option(version=__version__, prog_name="static-simple")
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Serve static files ahead of an application."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command('serve')
@click.argument('root', type=click.Path(exists=True, file_okay=False))
@static_options
@click.option('--debug', is_flag=True, help='Log per-request resolution traces')
@click.option('--bind', type=str, default='127.0.0.1:8000', help='Bind address')
@click.option('--native', is_flag=True, help='Let the server send files under ROOT itself')
@click.pass_context
def serve(ctx, root, dirs, includes, mimes, config_file, debug, bind, native):
    """
    Serve ROOT, answering 404 for anything that is not a static file.

    Examples:
      static-simple serve ./root --dir static
      static-simple serve ./root --dir 'qr/^(images|css)/' --mime jpg=image/jpg
    """
    import uvicorn

    verbose = ctx.obj['verbose']
    logging.basicConfig(
        level=logging.DEBUG if (debug or verbose) else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        config = _build_config(root, dirs, includes, mimes, config_file, debug, native)
    except Fault as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)

    app = Application(not_found, debug=config.debug)
    app.use(StaticResolutionPipeline(config))
    asgi_app = ASGIAdapter(
        app,
        native_document_root=config.root if config.use_native else None,
    )

    host, port = _parse_bind(bind)
    if verbose:
        click.echo(f"Serving {config.root} on http://{host}:{port}")

    uvicorn.run(
        asgi_app,
        host=host,
        port=port,
        log_level="debug" if debug else "info",
    )


@cli.command('resolve')
@click.argument('root', type=click.Path(exists=True, file_okay=False))
@click.argument('paths', nargs=-1, required=True)
@static_options
@click.pass_context
def resolve(ctx, root, paths, dirs, includes, mimes, config_file):
    """
    Print the file and MIME type each PATH resolves to.

    Exits with status 1 when any PATH has no file.

    Examples:
      static-simple resolve ./root css/site.css images/logo.png
    """
    try:
        config = _build_config(root, dirs, includes, mimes, config_file)
    except Fault as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)

    pipeline = StaticResolutionPipeline(config)
    missing = 0
    for path in paths:
        trace = DebugTrace(enabled=ctx.obj['verbose'])
        found = pipeline.locate(path, None, trace)
        if found is None:
            click.secho(f"{path}\tnot found", fg="yellow", err=True)
            missing += 1
            continue
        mime = pipeline.mime.resolve_path(path, trace)
        click.echo(f"{path}\t{found}\t{mime}")
        if trace:
            click.echo(f"  {trace.render()}", err=True)

    if missing:
        sys.exit(1)


def main():
    """Main CLI entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
