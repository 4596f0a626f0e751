# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/retail_pos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Create all tables (idempotent).
# - python -m flask system status
#   Print storage backend, database connectivity and row counts.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
#   List all users with their role.
# - python -m flask users create-admin --username admin --password "secret123"
#   Create an admin account (prompts if options are omitted).

import click
from flask.cli import with_appcontext
from sqlalchemy import text

from .extensions import db
from .errors import DuplicateUsername, ValidationError
from .models import Product, Transaction, User, ROLE_ADMIN
from .services.container import get_services


@click.group('system')
def system_group():
    """System bootstrap and inspection."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create all tables that do not exist yet."""
    click.echo("BUILD  Creating tables...")
    db.create_all()
    click.echo("PASS Database initialized.")


@system_group.command('status')
@with_appcontext
def system_status():
    """Show storage mode, database connectivity and counts."""
    services = get_services()
    click.echo(f"Environment: {services.settings.deploy_env}")
    click.echo(f"Storage:     {services.storage.describe()}")
    try:
        db.session.execute(text("SELECT 1"))
    except Exception as e:
        click.echo(f"Database:    Disconnected ({e.__class__.__name__})")
        return
    click.echo("Database:    Connected")
    click.echo(f"Users:        {db.session.query(User).count()}")
    click.echo(f"Products:     {db.session.query(Product).count()}")
    click.echo(f"Transactions: {db.session.query(Transaction).count()}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """User inspection and bootstrap."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = get_services().credentials.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{'ID':<5} {'Username':<30} {'Role'}")
    click.echo("="*60)

    for user in users:
        click.echo(f"{user.id:<5} {user.username:<30} {user.role}")

    click.echo("="*60 + "\n")


@users_group.command('create-admin')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_admin(username, password):
    """Create an admin account."""
    try:
        user_id = get_services().credentials.register(username, password, ROLE_ADMIN)
    except DuplicateUsername as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(f"Invalid input: {e}")

    click.echo(f"PASS Created admin '{username}' (ID: {user_id})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
