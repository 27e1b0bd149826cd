"""Import log commands."""

import click

from bankimport.cli.error_handling import handle_domain_error
from bankimport.domain.errors import DomainError
from bankimport.domain.import_logs import ImportLogService


@click.group()
def logs_group():
    """Inspect import logs."""
    pass


@logs_group.command("list")
@click.option("--tenant", "tenant_id", required=True, help="Tenant ID")
@click.option("--limit", type=click.IntRange(min=0), default=20, show_default=True)
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True)
@click.pass_context
def list_logs(ctx, tenant_id: str, limit: int, offset: int):
    """List import logs, newest first."""
    service = ImportLogService(ctx.obj["db"])
    logs = service.list_logs(tenant_id, limit=limit, offset=offset)
    if not logs:
        click.echo("No imports found.")
        return

    click.echo(f"{'ID':36s}  {'Status':10s}  {'Imported':>8s}  {'Failed':>6s}  File")
    click.echo("-" * 90)
    for log in logs:
        click.echo(
            f"{log.id:36s}  {log.status.value:10s}  {log.transactions_imported:8d}  "
            f"{log.transactions_failed:6d}  {log.file_name}"
        )


@logs_group.command("show")
@click.argument("log_id")
@click.option("--tenant", "tenant_id", required=True, help="Tenant ID")
@click.pass_context
def show_log(ctx, log_id: str, tenant_id: str):
    """Show one import log in detail."""
    service = ImportLogService(ctx.obj["db"])
    try:
        log = service.get_log(tenant_id, log_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Import {log.id}")
    click.echo(f"  File: {log.file_name} ({log.file_type}, {log.file_size} bytes)")
    click.echo(f"  Account: {log.account_id}")
    click.echo(f"  Status: {log.status.value}")
    click.echo(
        f"  Transactions: {log.transactions_imported} imported, "
        f"{log.transactions_failed} failed, {log.transactions_total} total"
    )
    if log.processing_time_ms is not None:
        click.echo(f"  Processing time: {log.processing_time_ms} ms")
    if log.error_message:
        click.echo(f"  Error: {log.error_message}")
    for detail in log.error_details or []:
        click.echo(f"    {detail}")


def register_commands(cli):
    """Register import log commands with main CLI."""
    cli.add_command(logs_group, name="logs")
