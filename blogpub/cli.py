"""CLI entry point for blogpub"""

import logging
import sys
from pathlib import Path

import click
from apscheduler.schedulers.blocking import BlockingScheduler
from dotenv import load_dotenv
from pydantic import ValidationError

from blogpub.config import AppConfig
from blogpub.models.batch import DocumentStatus
from blogpub.services.pipeline import PublishPipeline
from blogpub.services.scheduler import PublishScheduler

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging to stdout (the run log is the only place errors surface)"""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _load_config(ctx: click.Context, **overrides) -> AppConfig:
    """Build configuration from environment, .env and command line overrides"""
    settings = {key: value for key, value in {**ctx.obj, **overrides}.items() if value is not None}
    try:
        return AppConfig(**settings)
    except ValidationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)


@click.group()
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Markdown source directory (default: ./content or CONTENT_DIR env var)",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Serving directory (default: ./public or OUTPUT_DIR env var)",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging",
)
@click.pass_context
def main(ctx, content_dir, output_dir, verbose):
    """Publish a directory of markdown posts as HTML fragments plus an index page."""
    # Load .env first so git settings (e.g. GIT_SSH_COMMAND) reach subprocesses
    if Path(".env").exists():
        load_dotenv()

    ctx.ensure_object(dict)
    ctx.obj.update(
        content_dir=content_dir,
        output_dir=output_dir,
        log_level="DEBUG" if verbose else None,
    )


@main.command()
@click.option("--force", is_flag=True, default=False, help="Publish even without new content")
@click.option(
    "--no-sync",
    is_flag=True,
    default=False,
    help="Do not contact the git remote; publish the checkout as it is",
)
@click.pass_context
def publish(ctx, force, no_sync):
    """Run a single publish batch.

    Exit status is 0 on a clean run, 1 when some documents were skipped,
    and 2 on configuration errors or unexpected failures.
    """
    app_config = _load_config(ctx, sync_enabled=False if no_sync else None)
    setup_logging(app_config.log_level)

    try:
        pipeline = PublishPipeline.from_config(app_config)
        report = pipeline.run(force=force)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        sys.exit(2)

    if not report.ran:
        click.echo("No new content; nothing published.")
        sys.exit(0)

    click.echo(
        f"Converted {report.converted_count} document(s), wrote {report.published} file(s), "
        f"{report.unchanged} unchanged, {len(report.removed)} removed."
    )
    if report.has_warnings:
        for result in report.results:
            if result.status == DocumentStatus.SKIPPED:
                click.echo(f"  skipped {result.name}: {result.reason}", err=True)
        sys.exit(1)
    sys.exit(0)


@main.command()
@click.option(
    "--interval",
    type=click.IntRange(1, 1440),
    default=None,
    help="Minutes between publish cycles (default: 15 or REFRESH_INTERVAL_MINUTES env var)",
)
@click.pass_context
def watch(ctx, interval):
    """Publish on a fixed interval until interrupted."""
    app_config = _load_config(ctx, refresh_interval_minutes=interval)
    setup_logging(app_config.log_level)

    scheduler = BlockingScheduler()
    publish_scheduler = PublishScheduler(PublishPipeline.from_config(app_config))
    publish_scheduler.configure(scheduler, app_config.refresh_interval_minutes)

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        publish_scheduler.stop()
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
