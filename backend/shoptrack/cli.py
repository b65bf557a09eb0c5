# Overview: Flask CLI command groups for bootstrap and QR token issuing.

# backend/shoptrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "shoptrack" (PowerShell: $env:FLASK_APP="shoptrack").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Create all tables (use "flask db upgrade" once migrations are in play).
#
# Users:
# - python -m flask users create --email admin@shop.local --first-name Ada --last-name Admin --role admin
# - python -m flask users list
# - python -m flask users set-role <user_id> engineer
#
# QR tokens:
# - python -m flask tokens issue <user_id>
#   Print a fresh single-use login token (encode it as a QR code to hand out).

import click
from datetime import timedelta
from flask import current_app
from flask.cli import with_appcontext

from .errors import ShopTrackError
from .extensions import db
from .models.common import ROLES
from .services import user_service
from .services.token_service import TokenService
from .store import DataStore


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create all tables (idempotent)."""
    from . import models  # noqa: F401
    db.create_all()
    click.echo("PASS Database tables created")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--first-name', default=None, help='First name')
@click.option('--last-name', default=None, help='Last name')
@click.option('--role', type=click.Choice(list(ROLES)), default=None, help='Role')
@with_appcontext
def create_user_cli(email, first_name, last_name, role):
    """Create (or update) a user by email."""
    try:
        user = user_service.upsert_user(
            DataStore(db.session),
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
    except ShopTrackError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS User {user.email} ({user.id}) role={user.role or '-'}")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    """List all users with their roles."""
    users = user_service.list_users(DataStore(db.session))
    if not users:
        click.echo("No users found.")
        return
    for user in users:
        click.echo(f"{user.id}  {user.email or '-':<32} {user.role or '-'}")


@users_group.command('set-role')
@click.argument('user_id')
@click.argument('role', type=click.Choice(list(ROLES)))
@with_appcontext
def set_role_cli(user_id, role):
    """Assign a role to a user."""
    try:
        user = user_service.set_role(DataStore(db.session), user_id, role)
    except ShopTrackError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS {user.email or user.id} is now {user.role}")


@click.group('tokens')
def tokens_group():
    """QR login token commands."""


@tokens_group.command('issue')
@click.argument('user_id')
@with_appcontext
def issue_token_cli(user_id):
    """Issue a single-use QR login token for a user."""
    ttl = timedelta(minutes=current_app.config["QR_TOKEN_TTL_MINUTES"])
    try:
        token = TokenService(DataStore(db.session), ttl=ttl).issue(user_id)
    except ShopTrackError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(token)
    click.echo(f"Expires in {current_app.config['QR_TOKEN_TTL_MINUTES']} minutes, single use.", err=True)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(tokens_group)
