# Overview: Flask CLI command groups for bootstrap, seeding and calling commands.

# backend/souq_admin/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet (throwaway databases; use flask db upgrade otherwise).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Seeding:
# - python -m flask seed run
#   Insert the sample categories, products, currencies and pages that are missing.
#
# Command surface:
# - python -m flask commands list
#   List every command with its description.
# - python -m flask commands call list_products --args '{"search": "ring", "limit": 5}'
#   Call one command and print its result (exit code 1 on an error envelope).

import json

import click
from flask.cli import with_appcontext

from . import get_registry
from .extensions import db


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables from the models."""
    from . import models  # noqa: F401
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm dropping every table')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    from . import models  # noqa: F401
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('seed')
def seed_group():
    """Sample data commands."""


@seed_group.command('run')
@with_appcontext
def seed_run():
    """Insert missing sample data; existing records are left untouched."""
    envelope = get_registry().dispatch("seed_store_data", {})
    click.echo(envelope["content"])
    if envelope.get("error"):
        raise SystemExit(1)


@click.group('commands')
def commands_group():
    """Inspect and call registry commands."""


@commands_group.command('list')
@with_appcontext
def list_commands():
    """List every command with its description."""
    for entry in get_registry().catalog():
        click.echo(f"{entry['name']:<28} {entry['description']}")


@commands_group.command('call')
@click.argument('name')
@click.option('--args', 'raw_args', default='{}', help='Arguments as a JSON object')
@with_appcontext
def call_command(name, raw_args):
    """Call one command and print its content."""
    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as e:
        click.echo(f"FAIL --args is not valid JSON: {e}")
        raise SystemExit(2)

    envelope = get_registry().dispatch(name, arguments)
    click.echo(envelope["content"])
    if envelope.get("error"):
        raise SystemExit(1)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(seed_group)
    app.cli.add_command(commands_group)
