"""Flask CLI commands for key and revocation maintenance."""

from __future__ import annotations

import json
import logging

import click
from flask.cli import with_appcontext

from issuer.core.extensions import get_container
from issuer.services._shared.errors import ServiceError

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Raise logging verbosity for the token core when requested."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger("issuer.services").setLevel(level)
    LOGGER.setLevel(level)


@click.group("issuer")
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
def issuer_cli(verbose: bool) -> None:
    """Key and token maintenance commands."""
    _configure_logging(verbose)


@issuer_cli.group("keys")
def keys_cli() -> None:
    """Signing key management."""


@keys_cli.command("rotate")
@with_appcontext
def rotate_keys() -> None:
    """Generate a new key pair; it becomes the current signing key."""
    try:
        record = get_container().keys.generate_key_pair()
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Generated key {record.id} (expires {record.expires_at.isoformat()})")


@keys_cli.command("list")
@with_appcontext
def list_keys() -> None:
    """List stored key pairs, oldest first."""
    try:
        records = get_container().keys.list_records()
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    if not records:
        click.echo("  (no keys)")
        return
    for record in records:
        click.echo(
            f"  {record.id}  created={record.created_at.isoformat()}"
            f"  expires={record.expires_at.isoformat()}"
        )


@issuer_cli.command("jwks")
@with_appcontext
def print_jwks() -> None:
    """Print the public JSON Web Key Set."""
    key_set = get_container().keys.export_jwks()
    if key_set is None:
        raise click.ClickException("No keys have been generated yet")
    click.echo(json.dumps(key_set, indent=2))


@issuer_cli.group("revocations")
def revocations_cli() -> None:
    """Access token denylist maintenance."""


@revocations_cli.command("purge")
@with_appcontext
def purge_revocations() -> None:
    """Delete denylist entries whose tokens have expired."""
    removed = get_container().revocations.purge_expired()
    click.echo(f"Removed {removed} expired revocation entries")
