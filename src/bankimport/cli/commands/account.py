"""Account commands for local use of the import pipeline."""

import click

from bankimport.cli.error_handling import handle_domain_error
from bankimport.domain.account import AccountService
from bankimport.domain.errors import DomainError


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--tenant", "tenant_id", required=True, help="Tenant ID")
@click.option("--type", "account_type", default="current", show_default=True, help="Account type")
@click.option("--currency", default="GBP", show_default=True, help="ISO currency code")
@click.option("--balance", default="0", show_default=True, help="Opening balance")
@click.pass_context
def create_account(ctx, name: str, tenant_id: str, account_type: str, currency: str, balance: str):
    """Create a new account.

    Examples:
        bankimport account create "Current Account" --tenant acme
        bankimport account create "Checking" --tenant acme --currency USD --balance 250.00
    """
    service = AccountService(ctx.obj["db"])
    try:
        account_id = service.create_account(
            tenant_id=tenant_id,
            name=name,
            account_type=account_type,
            currency=currency,
            balance=balance,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.option("--tenant", "tenant_id", required=True, help="Tenant ID")
@click.pass_context
def list_accounts(ctx, tenant_id: str):
    """List a tenant's accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(tenant_id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(f"ID: {acc.id} | {acc.name:20s} | {acc.balance:>12} {acc.currency}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
