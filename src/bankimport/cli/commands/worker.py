"""Queue worker command."""

import click

from bankimport.cli.error_handling import handle_domain_error
from bankimport.domain.errors import InfrastructureError
from bankimport.domain.queue_consumer import PdfImportConsumer
from bankimport.jobs.factories import create_queue
from bankimport.jobs.worker import QueueWorker
from bankimport.storage.factories import create_storage


@click.command("worker")
@click.option("--once", is_flag=True, help="Process at most one job")
@click.option("--max-jobs", type=click.IntRange(min=1), help="Stop after this many jobs")
@click.pass_context
def run_worker(ctx, once: bool, max_jobs: int | None):
    """Process queued PDF imports until the queue is empty."""
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]

    storage = create_storage(settings)
    queue = create_queue(settings, db)
    if storage is None or queue is None:
        click.echo("Error: the worker needs both object storage and the job queue enabled", err=True)
        ctx.exit(1)

    worker = QueueWorker(
        queue,
        PdfImportConsumer(db, storage, settings),
        max_attempts=settings.worker_max_attempts,
    )
    try:
        processed = worker.run(max_jobs=1 if once else max_jobs)
    except InfrastructureError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Processed {processed} job(s)")


def register_commands(cli):
    """Register worker command with main CLI."""
    cli.add_command(run_worker)
