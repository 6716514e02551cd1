"""
Main CLI entry point for Proofdesk
"""

import click

from .client import client_group
from .campaign import campaign_group
from .proof import proof_group


@click.group()
@click.version_option(version='0.1.0')
def cli():
    """
    Proofdesk - Ad proof review and approval

    Build mock ads, share them with clients, and track version-pinned feedback.
    """
    pass


# Register command groups
cli.add_command(client_group)
cli.add_command(campaign_group)
cli.add_command(proof_group)


if __name__ == '__main__':
    cli()
