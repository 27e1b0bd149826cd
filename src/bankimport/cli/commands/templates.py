"""PDF template listing command."""

import click

from bankimport.parsers.pdf_templates import BANK_PDF_TEMPLATES, GENERIC_TEMPLATE


@click.command("templates")
def list_templates():
    """List the PDF statement templates."""
    for template in (*BANK_PDF_TEMPLATES, GENERIC_TEMPLATE):
        click.echo(f"{template.id:15s} {template.display_name}")
        if template.description:
            click.echo(f"{'':15s} {template.description}")


def register_commands(cli):
    """Register templates command with main CLI."""
    cli.add_command(list_templates)
