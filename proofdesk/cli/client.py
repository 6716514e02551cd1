"""
Client management commands for Proofdesk CLI
"""

import sys
from pathlib import Path
from typing import Optional

import click

from ..core.database import get_supabase_client
from ..core.errors import ProofdeskError
from ..services.client_service import ClientService
from ..services.storage_service import StorageService


def fail(e: Exception):
    click.echo(f"❌ Error: {e}", err=True)
    for problem in getattr(e, "errors", []):
        click.echo(f"   - {problem}", err=True)
    sys.exit(1)


@click.group('client')
def client_group():
    """Manage clients"""
    pass


@client_group.command('list')
def list_clients():
    """
    List all clients

    Examples:
        proofdesk client list
    """
    try:
        clients = ClientService(get_supabase_client()).list_clients()
    except ProofdeskError as e:
        fail(e)

    if not clients:
        click.echo("No clients found.")
        click.echo("\nCreate your first client with: proofdesk client create <name>")
        return

    click.echo(f"\n{'='*60}")
    click.echo(f"🏢 Clients ({len(clients)})")
    click.echo(f"{'='*60}\n")

    for client in clients:
        click.echo(f"🏢 {client.name}")
        click.echo(f"   ID: {client.id}")
        if client.logo_url:
            click.echo(f"   Logo: {client.logo_url}")
        click.echo()


@client_group.command('create')
@click.argument('name')
@click.option('--website', '-w', help='Client website (used to find a logo)')
@click.option('--logo-url', help='Explicit logo URL')
@click.option('--logo-file', type=click.Path(exists=True, dir_okay=False),
              help='Logo image to upload (overrides --logo-url and --website)')
def create_client(name: str, website: Optional[str], logo_url: Optional[str], logo_file: Optional[str]):
    """
    Create a new client

    Examples:
        proofdesk client create "Acme Corp" --website acme.com
        proofdesk client create "Acme Corp" --logo-file acme.png
    """
    try:
        db = get_supabase_client()
        if logo_file:
            path = Path(logo_file)
            logo_url = StorageService(db).upload_client_logo(path.name, path.read_bytes())
        client = ClientService(db).create_client(name, logo_url=logo_url, website=website)
    except ProofdeskError as e:
        fail(e)

    click.echo(f"✅ Created client: {client.name}")
    click.echo(f"   ID: {client.id}")
    if client.logo_url:
        click.echo(f"   Logo: {client.logo_url}")


@client_group.command('edit')
@click.argument('client_id')
@click.option('--name', help='New name')
@click.option('--logo-url', help='New logo URL (empty string clears it)')
def edit_client(client_id: str, name: Optional[str], logo_url: Optional[str]):
    """
    Rename a client or change its logo

    Examples:
        proofdesk client edit <client-id> --name "Acme Inc"
    """
    if name is None and logo_url is None:
        raise click.UsageError("Nothing to change; pass --name and/or --logo-url")
    try:
        client = ClientService(get_supabase_client()).update_client(
            client_id, name=name, logo_url=logo_url
        )
    except ProofdeskError as e:
        fail(e)

    click.echo(f"✅ Updated client: {client.name}")
    if client.logo_url:
        click.echo(f"   Logo: {client.logo_url}")


@client_group.command('delete')
@click.argument('client_id')
@click.confirmation_option(prompt='Delete this client and all of its campaigns?')
def delete_client(client_id: str):
    """Delete a client (campaigns and ad proofs are deleted too)"""
    try:
        ClientService(get_supabase_client()).delete_client(client_id)
    except ProofdeskError as e:
        fail(e)
    click.echo(f"🗑️  Deleted client {client_id}")
