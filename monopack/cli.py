"""Click CLI with publish and build subcommands."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from monopack import __version__
from monopack.config import ConfigLoader
from monopack.errors import ConfigLoadError
from monopack.pipeline import Monopack, PublishFailure
from monopack.progress import ProgressBroadcaster
from monopack.publisher import RegistryClient
from monopack.renderer import ERROR_SYMBOL, SUCCESS_SYMBOL, WARNING_SYMBOL, TerminalStatusRenderer


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """monopack: Build and publish the packages of a JavaScript monorepo."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None):
    try:
        return asyncio.run(ConfigLoader(config_path=config_path).load())
    except ConfigLoadError as e:
        raise click.ClickException(str(e))


def _report_failure(failure: PublishFailure) -> None:
    if failure.kind == "config":
        click.echo(
            f"{ERROR_SYMBOL} The provided config is invalid, there are {len(failure.issues)} issue(s)\n"
        )
    elif failure.kind == "checks":
        click.echo(f"{ERROR_SYMBOL} Checks failed, there are {len(failure.issues)} issue(s)\n")
    else:
        partial = failure.partial
        failed = len(partial.failures)
        total = failed + len(partial.succeeded)
        click.echo(f"\n{ERROR_SYMBOL} {failed} from {total} package(s) failed; {len(partial.succeeded)} succeeded")
        return

    for issue in failure.issues:
        click.echo(f"- {issue}")


def _renderer_progress() -> ProgressBroadcaster:
    progress = ProgressBroadcaster()
    TerminalStatusRenderer().attach(progress)
    return progress


@cli.command()
@click.option("--dry-run/--no-dry-run", default=True, help="Only determine what would be published")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Path to monopack.config.py")
def publish(dry_run: bool, config_path: Path | None):
    """Build every package and publish the ones that changed."""
    raw_config = _load_config(config_path)

    async def run():
        async with RegistryClient() as registry_client:
            monopack = Monopack.create(registry_client=registry_client, progress=_renderer_progress())
            return await monopack.build_and_publish_all(raw_config, dry_run=dry_run)

    result = asyncio.run(run())
    if isinstance(result, PublishFailure):
        _report_failure(result)
        raise SystemExit(1)

    click.echo(f"\n{SUCCESS_SYMBOL} Success: all {len(result)} package(s) have been published")
    if dry_run:
        click.echo(
            f"{WARNING_SYMBOL} This was a dry run, nothing has been published. "
            "Run again with --no-dry-run to publish."
        )


@cli.command()
@click.option("-o", "--output", "output_dir", type=click.Path(file_okay=False, path_type=Path), required=True, help="Output directory")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Path to monopack.config.py")
def build(output_dir: Path, config_path: Path | None):
    """Build every package into OUTPUT/<package name> without publishing."""
    raw_config = _load_config(config_path)

    async def run():
        monopack = Monopack.create(progress=_renderer_progress())
        try:
            return await monopack.build_all(raw_config, str(output_dir))
        finally:
            await monopack.processor.emitter.registry_client.aclose()

    result = asyncio.run(run())
    if isinstance(result, PublishFailure):
        _report_failure(result)
        raise SystemExit(1)

    click.echo(f"\n{SUCCESS_SYMBOL} Success: all {len(result)} package(s) have been built in {output_dir}")


if __name__ == "__main__":
    cli()
