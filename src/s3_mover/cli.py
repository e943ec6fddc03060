# src/s3_mover/cli.py
"""Command-line interface for the s3-mover tool."""

import asyncio
import logging
import sys
from typing import Any, Optional

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from s3_mover.collector import MigrationReport, render_report
from s3_mover.config import DEFAULT_REGION, ENDPOINT_URL_ENV_VAR, MigrationConfig
from s3_mover.exceptions import S3MoverError

logger: logging.Logger = logging.getLogger(__name__)

EXIT_FAILURES: int = 2


def setup_logging(level: str) -> None:
    """Configure rich-based logging for the application."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # Silence noisy loggers
    for logger_name in ["botocore", "aiobotocore", "s3transfer", "urllib3"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


async def main_async(config: MigrationConfig) -> MigrationReport:
    """
    Asynchronously execute the migration pipeline.

    Args:
        config (MigrationConfig): The run configuration.

    Returns:
        MigrationReport: The results of the run.
    """
    # Lazily import to keep CLI startup fast
    from s3_mover.pipeline import MigrationPipeline

    pipeline: MigrationPipeline = MigrationPipeline(config)
    return await pipeline.run()


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--source-bucket", required=True, help="Bucket to move objects from.")
@click.option(
    "--source-path",
    default="",
    help="Key prefix to move objects from.",
    show_default=True,
)
@click.option(
    "--destination-path", required=True, help="Key prefix to move objects to."
)
@click.option(
    "--destination-bucket",
    default=None,
    help="Bucket to move objects to. Defaults to the source bucket.",
)
@click.option(
    "-r",
    "--region-id",
    default=DEFAULT_REGION,
    help="AWS region of the buckets.",
    show_default=True,
)
@click.option(
    "-n",
    "--num-workers",
    type=int,
    default=1,
    help="Number of concurrent move workers.",
    show_default=True,
)
@click.option(
    "--queue-size",
    type=int,
    default=32,
    help="Maximum number of listed objects waiting for a worker.",
    show_default=True,
)
@click.option(
    "--endpoint-url",
    envvar=ENDPOINT_URL_ENV_VAR,
    default=None,
    help="Endpoint URL of an S3-compatible store.",
)
@click.option(
    "--preserve-structure",
    is_flag=True,
    default=False,
    help="Keep the key structure below the source path instead of basenames.",
)
@click.option(
    "--fail-on-error",
    is_flag=True,
    default=False,
    help=f"Exit with status {EXIT_FAILURES} if any object failed to move.",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set the logging level.",
    show_default=True,
)
def cli(**kwargs: Any) -> None:
    """
    Move objects from one S3 prefix to another.

    Every object under the source path is copied to the destination path and
    then deleted from the source. Objects that already exist at the
    destination are skipped, so an interrupted or failed run can simply be
    repeated.

    Credentials are read from the standard AWS credential chain. A .env file
    in the working directory is loaded first.
    """
    load_dotenv()
    setup_logging(kwargs["log_level"])

    report: Optional[MigrationReport] = None
    try:
        config: MigrationConfig = MigrationConfig(
            source_bucket=kwargs["source_bucket"],
            source_path=kwargs["source_path"],
            destination_path=kwargs["destination_path"],
            destination_bucket=kwargs["destination_bucket"],
            region=kwargs["region_id"],
            num_workers=kwargs["num_workers"],
            queue_size=kwargs["queue_size"],
            endpoint_url=kwargs["endpoint_url"],
            preserve_structure=kwargs["preserve_structure"],
        )
        config.validate()

        report = asyncio.run(main_async(config))
        render_report(report)
    except S3MoverError as e:
        logger.critical(f"A critical application error occurred: {e}")
        sys.exit(1)
    except Exception:
        logger.critical(
            "An unexpected error caused the application to fail:", exc_info=True
        )
        sys.exit(1)

    if report.has_failures:
        logger.warning("✗ Run completed with failures.")
        if kwargs["fail_on_error"]:
            sys.exit(EXIT_FAILURES)
    else:
        logger.info("✅ Run completed successfully.")


if __name__ == "__main__":
    cli()
