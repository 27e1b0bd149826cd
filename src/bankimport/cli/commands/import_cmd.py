"""Statement import command."""

from pathlib import Path

import click

from bankimport.cli.error_handling import handle_domain_error
from bankimport.domain.errors import DomainError, InfrastructureError
from bankimport.domain.statement_import import QueuedImport, StatementImportService, UploadRequest
from bankimport.jobs.factories import create_queue
from bankimport.storage.factories import create_storage


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--tenant", "tenant_id", required=True, help="Tenant ID")
@click.option("--account", "account_id", required=True, help="Account ID to import into")
@click.option("--user", "user_id", default="cli", show_default=True, help="User recorded on the import log")
@click.option("--default-category", "default_category_id", help="Category ID for uncategorized rows")
@click.option("--template", "template_id", help="PDF template ID (skips template detection)")
@click.option("--sync", is_flag=True, help="Parse PDFs now instead of queueing them")
@click.pass_context
def import_statement(
    ctx,
    statement_file: str,
    tenant_id: str,
    account_id: str,
    user_id: str,
    default_category_id: str | None,
    template_id: str | None,
    sync: bool,
):
    """Import transactions from a bank statement file.

    The format is taken from the file extension. PDFs are queued for the
    worker unless --sync is given or storage/queue are disabled.
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = StatementImportService(
        db,
        storage=create_storage(settings),
        queue=create_queue(settings, db),
        settings=settings,
    )
    path = Path(statement_file)
    request = UploadRequest(
        tenant_id=tenant_id,
        user_id=user_id,
        account_id=account_id,
        file_name=path.name,
        content=path.read_bytes(),
        default_category_id=default_category_id,
        pdf_template_id=template_id,
        force_sync=sync,
    )

    try:
        result = service.import_statement(request)
    except (DomainError, InfrastructureError) as e:
        handle_domain_error(ctx, e)

    if isinstance(result, QueuedImport):
        click.echo(f"Queued import {result.log_id}. Run 'bankimport worker' to process it.")
        return

    click.echo(f"\nImport complete ({result.status.value}):")
    click.echo(f"  Log: {result.log_id}")
    click.echo(f"  Imported: {result.imported} of {result.total} transactions")
    click.echo(f"  Skipped: {result.skipped}")
    click.echo(f"  New balance of '{result.account_name}': {result.new_balance}")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
