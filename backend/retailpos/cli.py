# Overview: Flask CLI commands for bootstrap, inspection, and maintenance of the store snapshot.

# backend/retailpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask store <command> [options]
#
# - python -m flask store init [--demo]
#   Create tables and write the initial snapshot if none exists (idempotent).
# - python -m flask store show
#   Print collection counts and the snapshot row version.
# - python -m flask store reset --yes
#   DEV/TEST only: replace the stored snapshot with a fresh store (deletes all data).
# - python -m flask store register-status
#   Print the current register shift.
# - python -m flask store ledger-balance CASH [--as-of 2026-01-31]
#   Print a ledger account balance (debits positive).

import click
from flask import current_app
from flask.cli import with_appcontext

from .domain import StoreState
from .extensions import db
from .models import StoreSnapshot
from .processor import get_processor
from .services.ledger_service import account_balance_cents
from .services.snapshot_service import SnapshotGate
from .validation import InvalidArgumentError, optional_date


def _fmt_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}{abs(cents) // 100}.{abs(cents) % 100:02d}"


@click.group('store')
def store_group():
    """Store snapshot bootstrap and inspection commands."""


@store_group.command('init')
@click.option('--demo', is_flag=True, help='Seed the demo catalog')
@with_appcontext
def init_store(demo):
    """Create tables and the initial snapshot (safe to re-run)."""
    db.create_all()
    gate = SnapshotGate(current_app.config["SNAPSHOT_KEY"])
    if gate.load() is not None:
        click.echo(f"OK Snapshot {gate.key} already exists")
        return
    gate.save(StoreState.demo() if demo else StoreState.initial())
    click.echo(f"OK Created snapshot {gate.key}")


@store_group.command('show')
@with_appcontext
def show_store():
    """Print collection counts."""
    row = db.session.get(StoreSnapshot, current_app.config["SNAPSHOT_KEY"])
    if row is None:
        click.echo("No snapshot stored yet (run: flask store init)")
        return

    state = get_processor().snapshot()
    click.echo(f"Snapshot {row.key} (version {row.version_id}, updated {row.to_dict()['updated_at']})")
    for name in ("products", "catalogs", "suppliers", "customers", "users",
                 "invoices", "purchases", "expenses", "stock_adjustments", "ledger"):
        click.echo(f"  {name:<18} {len(state[name])}")


@store_group.command('reset')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@click.option('--demo', is_flag=True, help='Seed the demo catalog')
@with_appcontext
def reset_store(yes, demo):
    """
    DANGER: Replace the stored snapshot with a fresh store.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    db.create_all()
    get_processor().replace_state(StoreState.demo() if demo else StoreState.initial())
    click.echo("OK Store reset")


@store_group.command('register-status')
@with_appcontext
def register_status():
    """Print the current register shift."""
    session = get_processor().query(lambda s: s.register_session)
    if session is None:
        click.echo("No register shift recorded")
        return

    click.echo(f"Session {session.id}: {session.status}")
    click.echo(f"  opened        {session.opened_at}")
    click.echo(f"  opening float {_fmt_cents(session.opening_balance_cents)}")
    click.echo(f"  expected      {_fmt_cents(session.expected_balance_cents)}")
    click.echo(f"  sales         {session.sales_count} ({_fmt_cents(session.total_sales_cents)})")
    if session.closed_at:
        click.echo(f"  closed        {session.closed_at}")
        click.echo(f"  actual        {_fmt_cents(session.actual_balance_cents)}")
        click.echo(f"  discrepancy   {_fmt_cents(session.discrepancy_cents)}")


@store_group.command('ledger-balance')
@click.argument('account_id')
@click.option('--as-of', default=None, help='Business date cutoff (YYYY-MM-DD, inclusive)')
@with_appcontext
def ledger_balance(account_id, as_of):
    """Print an account balance (debits positive)."""
    try:
        as_of = optional_date({"as_of": as_of}, "as_of")
    except InvalidArgumentError as e:
        raise click.BadParameter(str(e), param_hint="--as-of")

    balance = get_processor().query(lambda s: account_balance_cents(s, account_id, as_of))
    click.echo(f"{account_id}: {_fmt_cents(balance)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(store_group)
