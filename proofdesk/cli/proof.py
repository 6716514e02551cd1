"""
Ad proof commands for Proofdesk CLI
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from ..core.database import get_supabase_client
from ..core.errors import ProofdeskError, ValidationError
from ..editor.session import EditorSession
from ..services.ad_proof_service import AdProofService
from ..services.approval_service import ApprovalService
from ..services.content import character_warnings
from ..services.models import AdFormat, Decision, Platform
from ..services.share_service import proof_share_url
from ..services.storage_service import StorageService
from .client import fail


def _load_content(path: str) -> Dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ValidationError([f"{path} is not valid JSON: {e}"])
    if not isinstance(data, dict):
        raise ValidationError([f"{path} must contain a JSON object"])
    return data


def _parse_assignment(assignment: str) -> Tuple[str, Any]:
    key, sep, raw = assignment.partition('=')
    if not sep or not key.strip():
        raise ValidationError([f"Expected field=value, got '{assignment}'"])
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


@click.group('proof')
def proof_group():
    """Manage ad proofs and their versions"""
    pass


@proof_group.command('create')
@click.argument('campaign_id')
@click.option('--platform', '-p', required=True, type=click.Choice([p.value for p in Platform]))
@click.option('--format', '-f', 'ad_format', required=True, type=click.Choice([f.value for f in AdFormat]))
@click.option('--content', '-c', 'content_file', required=True, type=click.Path(exists=True, dir_okay=False),
              help='JSON file with the ad content')
@click.option('--name', '-n', help='Display name')
def create_proof(campaign_id: str, platform: str, ad_format: str, content_file: str, name: Optional[str]):
    """
    Create an ad proof (version 1) from a JSON content file

    Examples:
        proofdesk proof create <campaign-id> -p facebook -f single_image -c ad.json
    """
    try:
        ad_data = _load_content(content_file)
        proof = AdProofService(get_supabase_client()).create_ad_proof(
            campaign_id, platform, ad_format, ad_data, name=name
        )
    except ProofdeskError as e:
        fail(e)

    click.echo(f"✅ Created ad proof {proof.id} (v{proof.current_version})")
    click.echo(f"   Share link: {proof_share_url(proof.share_token)}")
    for warning in character_warnings(platform, ad_data):
        click.echo(f"   ⚠️  {warning}")


@proof_group.command('list')
@click.argument('campaign_id')
def list_proofs(campaign_id: str):
    """List a campaign's ad proofs"""
    try:
        proofs = AdProofService(get_supabase_client()).list_ad_proofs(campaign_id)
    except ProofdeskError as e:
        fail(e)

    if not proofs:
        click.echo("No ad proofs found.")
        return

    for proof in proofs:
        label = proof.name or f"{proof.platform.value} {proof.ad_format.value}"
        click.echo(f"🖼️  {label}  v{proof.current_version}  [{proof.status}]")
        click.echo(f"   ID: {proof.id}")
        click.echo(f"   Share link: {proof_share_url(proof.share_token)}")


@proof_group.command('show')
@click.argument('ad_proof_id')
@click.option('--version', '-v', 'version_number', type=int, help='Version to show (default: current)')
def show_proof(ad_proof_id: str, version_number: Optional[int]):
    """Print one version's content as JSON"""
    try:
        service = AdProofService(get_supabase_client())
        if version_number is None:
            version = service.get_current_version(service.get_ad_proof(ad_proof_id))
        else:
            version = service.get_version(ad_proof_id, version_number)
    except ProofdeskError as e:
        fail(e)

    click.echo(f"# Version {version.version_number} ({version.created_at})")
    click.echo(json.dumps(version.ad_data, indent=2))


@proof_group.command('versions')
@click.argument('ad_proof_id')
def list_versions(ad_proof_id: str):
    """List all versions, newest first"""
    try:
        versions = AdProofService(get_supabase_client()).list_versions(ad_proof_id)
    except ProofdeskError as e:
        fail(e)

    for version in versions:
        click.echo(f"v{version.version_number}  {version.created_at}")


@proof_group.command('save')
@click.argument('ad_proof_id')
@click.option('--content', '-c', 'content_file', required=True, type=click.Path(exists=True, dir_okay=False),
              help='JSON file with the full new content')
def save_version(ad_proof_id: str, content_file: str):
    """Save a JSON content file as the next version"""
    try:
        version = AdProofService(get_supabase_client()).append_version(
            ad_proof_id, _load_content(content_file)
        )
    except ProofdeskError as e:
        fail(e)
    click.echo(f"✅ Saved version {version.version_number}")


@proof_group.command('edit')
@click.argument('ad_proof_id')
@click.option('--set', 'assignments', multiple=True, required=True,
              help='field=value; value may be JSON (repeatable)')
def edit_proof(ad_proof_id: str, assignments: Tuple[str, ...]):
    """
    Change fields of the current version and save the result as a new version

    Examples:
        proofdesk proof edit <id> --set headline="Spring Sale" --set 'cards=[...]'
    """
    errors = []

    async def run():
        session = EditorSession.for_ad_proof(
            AdProofService(get_supabase_client()),
            ad_proof_id,
            on_error=errors.append,
        )
        try:
            for assignment in assignments:
                session.set_field(*_parse_assignment(assignment))
            if not session.is_dirty:
                return None
            return await session.save()
        finally:
            await session.close()

    try:
        version = asyncio.run(run())
    except ProofdeskError as e:
        fail(e)

    if errors:
        fail(errors[0])
    if version is None:
        click.echo("No changes to save.")
        return
    click.echo(f"✅ Saved version {version.version_number}")


@proof_group.command('approvals')
@click.argument('ad_proof_id')
def list_approvals(ad_proof_id: str):
    """Show the approval history, newest first"""
    try:
        approvals = ApprovalService(get_supabase_client()).list_approvals(ad_proof_id)
    except ProofdeskError as e:
        fail(e)

    if not approvals:
        click.echo("No feedback yet.")
        return

    for approval in approvals:
        icon = "✅" if approval.decision == Decision.APPROVED else "📝"
        click.echo(f"{icon} v{approval.version_number} {approval.decision.value} by {approval.approver_name}")
        click.echo(f"   {approval.comment}")


@proof_group.command('approve')
@click.argument('ad_proof_id')
@click.option('--version', '-v', 'version_number', type=int, required=True)
@click.option('--decision', '-d', required=True, type=click.Choice(['approved', 'revision']))
@click.option('--comment', '-m', required=True)
@click.option('--name', 'approver_name', required=True, help='Approver name')
@click.option('--email', 'approver_email', help='Approver email')
def submit_approval(ad_proof_id: str, version_number: int, decision: str, comment: str,
                    approver_name: str, approver_email: Optional[str]):
    """Record feedback on behalf of a client"""
    service = ApprovalService(get_supabase_client())

    async def run():
        approval = await service.submit_approval(
            ad_proof_id, version_number, decision, comment, approver_name, approver_email
        )
        await service.wait_for_notifications()
        return approval

    try:
        approval = asyncio.run(run())
    except ProofdeskError as e:
        fail(e)
    click.echo(f"✅ Recorded '{approval.decision.value}' on version {approval.version_number}")


@proof_group.command('comment')
@click.argument('ad_proof_id')
@click.option('--version', '-v', 'version_number', type=int, required=True)
@click.option('--comment', '-m', required=True)
@click.option('--name', 'commenter_name', required=True, help='Commenter name')
@click.option('--email', 'commenter_email', help='Commenter email')
@click.option('--field', 'field_name', help='Content field the comment is about, e.g. headline')
def add_comment(ad_proof_id: str, version_number: int, comment: str, commenter_name: str,
                commenter_email: Optional[str], field_name: Optional[str]):
    """Leave a comment on a version"""
    try:
        saved = ApprovalService(get_supabase_client()).add_comment(
            ad_proof_id,
            version_number,
            commenter_name,
            comment,
            comment_type="field" if field_name else "general",
            field_name=field_name,
            commenter_email=commenter_email,
        )
    except ProofdeskError as e:
        fail(e)
    click.echo(f"💬 Comment added to version {saved.version_number}")


@proof_group.command('comments')
@click.argument('ad_proof_id')
@click.option('--version', '-v', 'version_number', type=int, help='Only comments on this version')
def list_comments(ad_proof_id: str, version_number: Optional[int]):
    """Show comments, oldest first"""
    try:
        comments = ApprovalService(get_supabase_client()).list_comments(
            ad_proof_id, version_number=version_number
        )
    except ProofdeskError as e:
        fail(e)

    if not comments:
        click.echo("No comments yet.")
        return

    for item in comments:
        where = f" on {item.field_name}" if item.field_name else ""
        click.echo(f"💬 v{item.version_number}{where} by {item.commenter_name}")
        click.echo(f"   {item.comment_text}")


@proof_group.command('update')
@click.argument('ad_proof_id')
@click.option('--name', '-n', help='New display name (empty string clears it)')
@click.option('--status', '-s', help='New status label')
def update_proof(ad_proof_id: str, name: Optional[str], status: Optional[str]):
    """
    Rename an ad proof or change its status label

    Content is never changed here; use 'proof edit' or 'proof save'.

    Examples:
        proofdesk proof update <ad-proof-id> --name "Spring hero"
    """
    if name is None and status is None:
        raise click.UsageError("Nothing to change; pass --name and/or --status")
    try:
        proof = AdProofService(get_supabase_client()).update_details(
            ad_proof_id, name=name, status=status
        )
    except ProofdeskError as e:
        fail(e)

    label = proof.name or f"{proof.platform.value} {proof.ad_format.value}"
    click.echo(f"✅ Updated ad proof: {label} [{proof.status}]")


@proof_group.command('upload')
@click.argument('campaign_id')
@click.argument('share_token')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def upload_media(campaign_id: str, share_token: str, file: str):
    """Upload an image or video and print its public URL"""
    path = Path(file)
    try:
        url = StorageService(get_supabase_client()).upload_ad_media(
            campaign_id, share_token, path.name, path.read_bytes()
        )
    except ProofdeskError as e:
        fail(e)
    click.echo(url)


@proof_group.command('delete')
@click.argument('ad_proof_id')
@click.confirmation_option(prompt='Delete this ad proof and its history?')
def delete_proof(ad_proof_id: str):
    """Delete an ad proof"""
    try:
        AdProofService(get_supabase_client()).delete_ad_proof(ad_proof_id)
    except ProofdeskError as e:
        fail(e)
    click.echo(f"🗑️  Deleted ad proof {ad_proof_id}")
