# Overview: Flask CLI command groups for bootstrap and user inspection.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (use `flask db upgrade` for migration-managed databases).
# - python -m flask system seed
#   Idempotent: default admin/manager/cashier users and the default categories.
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --name "Jane" --email jane@pos.local --password "secret1" --role cashier
#   Create a user (prompts if options are omitted).

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import PosError
from .extensions import db
from .models import Category, ROLES, User
from .services import user_service

DEFAULT_USERS = [
    ("Admin", "admin@pos.local", "admin", "admin123"),
    ("Manager", "manager@pos.local", "manager", "manager123"),
    ("Cashier", "cashier@pos.local", "cashier", "cashier123"),
]

DEFAULT_CATEGORIES = [
    ("tiles", "Tiles", "Floor and wall tiles"),
    ("cement", "Cement", "Cement and mortar products"),
    ("jali", "Jali", "Decorative jali screens"),
    ("sanitaryware", "Sanitaryware", "Bathroom fixtures and fittings"),
    ("accessories", "Accessories", "Bathroom and plumbing accessories"),
    ("pipes", "Pipes", "PVC and plumbing pipes"),
    ("fittings", "Fittings", "Pipe fittings and connectors"),
    ("taps", "Taps & Faucets", "Water taps and faucets"),
    ("showers", "Showers", "Shower heads and systems"),
    ("other", "Other", "Miscellaneous items"),
]


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo(f"PASS Tables created on {current_app.config['SQLALCHEMY_DATABASE_URI']}")


@system_group.command('seed')
@with_appcontext
def seed():
    """
    Seed default users and categories. Safe to run repeatedly.

    Default credentials (CHANGE IN PRODUCTION!):
    admin@pos.local / admin123, manager@pos.local / manager123,
    cashier@pos.local / cashier123
    """
    click.echo("\nUSERS Creating default users...")
    for name, email, role, password in DEFAULT_USERS:
        if db.session.query(User).filter_by(email=email).first():
            click.echo(f"WARN  User '{email}' already exists, skipping...")
            continue
        user_service.create_user({"name": name, "email": email, "role": role, "password": password})
        click.echo(f"PASS Created user: {email} with role '{role}'")

    click.echo("\nLIST Creating categories...")
    created = 0
    for name, display_name, description in DEFAULT_CATEGORIES:
        if db.session.query(Category).filter_by(name=name).first():
            continue
        db.session.add(Category(name=name, display_name=display_name, description=description))
        created += 1
    db.session.commit()
    click.echo(f"PASS Created {created} categories ({len(DEFAULT_CATEGORIES) - created} already present)")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """Create a new user interactively."""
    try:
        user = user_service.create_user({"name": name, "email": email, "password": password, "role": role})
    except PosError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created user: {user.email} with role '{user.role}' (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<5} {'Name':<20} {'Email':<35} {'Role':<10} {'Active'}")
    click.echo("=" * 90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.name:<20} {user.email:<35} {user.role:<10} {active_str}")

    click.echo("=" * 90 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
