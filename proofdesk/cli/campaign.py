"""
Campaign management commands for Proofdesk CLI
"""

from typing import Optional

import click

from ..core.database import get_supabase_client
from ..core.errors import ProofdeskError
from ..services.campaign_service import CampaignService
from ..services.models import Platform
from ..services.share_service import ShareService, campaign_share_url
from .client import fail


@click.group('campaign')
def campaign_group():
    """Manage campaigns"""
    pass


@campaign_group.command('list')
@click.option('--client', '-c', 'client_id', help='Filter by client ID')
def list_campaigns(client_id: Optional[str]):
    """
    List campaigns

    Examples:
        proofdesk campaign list
        proofdesk campaign list --client <client-id>
    """
    try:
        campaigns = CampaignService(get_supabase_client()).list_campaigns(client_id)
    except ProofdeskError as e:
        fail(e)

    if not campaigns:
        click.echo("No campaigns found.")
        return

    click.echo(f"\n{'='*60}")
    click.echo(f"📁 Campaigns ({len(campaigns)})")
    click.echo(f"{'='*60}\n")

    for campaign in campaigns:
        click.echo(f"📁 {campaign.name}")
        click.echo(f"   ID: {campaign.id}")
        if campaign.platform:
            click.echo(f"   Platform: {campaign.platform}")
        if campaign.share_token:
            click.echo(f"   Share link: {campaign_share_url(campaign.share_token)}")
        click.echo()


@campaign_group.command('create')
@click.argument('client_id')
@click.argument('name')
@click.option('--platform', '-p', type=click.Choice([p.value for p in Platform]), help='Platform tag')
def create_campaign(client_id: str, name: str, platform: Optional[str]):
    """
    Create a campaign for a client

    Examples:
        proofdesk campaign create <client-id> "Spring Launch" --platform facebook
    """
    try:
        campaign = CampaignService(get_supabase_client()).create_campaign(
            client_id, name, platform=platform
        )
    except ProofdeskError as e:
        fail(e)

    click.echo(f"✅ Created campaign: {campaign.name}")
    click.echo(f"   ID: {campaign.id}")


@campaign_group.command('edit')
@click.argument('campaign_id')
@click.option('--name', help='New name')
@click.option('--platform', '-p', type=click.Choice([p.value for p in Platform]), help='New platform tag')
def edit_campaign(campaign_id: str, name: Optional[str], platform: Optional[str]):
    """
    Rename a campaign or change its platform tag

    Examples:
        proofdesk campaign edit <campaign-id> --name "Summer Launch"
    """
    if name is None and platform is None:
        raise click.UsageError("Nothing to change; pass --name and/or --platform")
    try:
        campaign = CampaignService(get_supabase_client()).update_campaign(
            campaign_id, name=name, platform=platform
        )
    except ProofdeskError as e:
        fail(e)

    click.echo(f"✅ Updated campaign: {campaign.name}")
    if campaign.platform:
        click.echo(f"   Platform: {campaign.platform}")


@campaign_group.command('share')
@click.argument('campaign_id')
def share_campaign(campaign_id: str):
    """
    Print the campaign's public share link (created on first use)

    Examples:
        proofdesk campaign share <campaign-id>
    """
    try:
        token = ShareService(get_supabase_client()).ensure_campaign_share_token(campaign_id)
    except ProofdeskError as e:
        fail(e)
    click.echo(campaign_share_url(token))


@campaign_group.command('delete')
@click.argument('campaign_id')
@click.confirmation_option(prompt='Delete this campaign and all of its ad proofs?')
def delete_campaign(campaign_id: str):
    """Delete a campaign (ad proofs and versions are deleted too)"""
    try:
        CampaignService(get_supabase_client()).delete_campaign(campaign_id)
    except ProofdeskError as e:
        fail(e)
    click.echo(f"🗑️  Deleted campaign {campaign_id}")
