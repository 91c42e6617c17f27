"""Command-line interface for Atelier."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from atelier.bundler import existing_bundle_dirs, run_bundle
from atelier.config import AtelierConfig, load_config
from atelier.controller import WizardController
from atelier.errors import AtelierError, ParseFailure
from atelier.gateway import LocalGateway
from atelier.manifest import MANIFEST_FILE, find_project_root, read_project_name
from atelier.model import Failed
from atelier.process import ProcessRunner
from atelier.sequencer import Sequencer
from atelier.tracing import AtelierTracer
from atelier.tui import TerminalApp


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(config: AtelierConfig, interactive: bool = False) -> None:
    """Log to ``log_file`` when set.  Otherwise log to stderr, or nowhere
    while the wizard owns the terminal."""
    level = config.log_level.upper()
    if config.log_file:
        logging.basicConfig(level=level, filename=config.log_file, format=_LOG_FORMAT)
    elif interactive:
        logging.basicConfig(level=level, handlers=[logging.NullHandler()])
    else:
        logging.basicConfig(level=level, format=_LOG_FORMAT)


def _locate_project(config: AtelierConfig) -> tuple[Path, str]:
    """Find the enclosing Gleam project or exit with an error."""
    root = find_project_root(Path.cwd(), max_depth=config.root_search_depth)
    if root is None:
        click.echo(
            f"Error: no {MANIFEST_FILE} found in {Path.cwd()} or its parents.",
            err=True,
        )
        click.echo("Run atelier from inside a Gleam project (see `gleam new`).", err=True)
        sys.exit(1)
    try:
        project_name = read_project_name(root)
    except ParseFailure as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return root, project_name


# ---------------------------------------------------------------------------
# Click CLI
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx):
    """Atelier - turn a Gleam project into a game project."""
    if ctx.invoked_subcommand is not None:
        return

    config = load_config()
    _configure_logging(config, interactive=True)
    root, project_name = _locate_project(config)

    gateway = LocalGateway(root, config, runner=ProcessRunner())
    tracer = AtelierTracer(project_name, enable=config.enable_otel)
    app = TerminalApp(
        WizardController(project_name),
        lambda observer: Sequencer(gateway, observer, tracer),
        read_key=click.getchar,
    )
    try:
        outcome = app.run()
    except KeyboardInterrupt:
        click.echo("Interrupted. Finished steps are safe to repeat on the next run.", err=True)
        sys.exit(130)
    if isinstance(outcome, Failed):
        sys.exit(1)


@cli.command("bundle")
def bundle():
    """Rebuild the app and copy it into every desktop bundle."""
    config = load_config()
    _configure_logging(config)
    root, project_name = _locate_project(config)

    if not existing_bundle_dirs(root):
        click.echo("Error: no desktop bundles found under dist/.", err=True)
        click.echo("Run atelier and choose desktop bundling first.", err=True)
        sys.exit(1)

    try:
        targets = asyncio.run(
            run_bundle(
                root,
                project_name,
                ProcessRunner(),
                config,
                on_stage=lambda message: click.echo(f"✓ {message}"),
            )
        )
    except AtelierError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for target in targets:
        click.echo(f"  {target.relative_to(root)}")


def main() -> None:
    """Main CLI entry point (delegates to click)."""
    cli()


if __name__ == "__main__":
    main()
