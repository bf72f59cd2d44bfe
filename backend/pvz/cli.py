# Overview: Flask CLI command groups for bootstrap and day-to-day pickup point operations.

# backend/pvz/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to pvz (PowerShell: $env:FLASK_APP="pvz").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent; prefer `flask db upgrade` for managed schemas).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Pickup points:
# - python -m flask pvz create --city "Москва"
# - python -m flask pvz list [--limit 10]
#
# Receptions:
# - python -m flask receptions open <pvz_id>
# - python -m flask receptions close <pvz_id>
#
# Products:
# - python -m flask products add <reception_id> electronics food ...
# - python -m flask products remove-last <reception_id>

import click
from flask.cli import with_appcontext

from .errors import PvzError
from .extensions import db
from .repositories import receptions as reception_repo
from .services import inventory_service, pickup_point_service, reception_service


def _fail(exc: PvzError):
    raise click.ClickException(f"{exc.code}: {exc}")


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema ready")


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
    click.echo("BUILD Recreating schema...")
    db.create_all()
    click.echo("PASS Database reset complete")


@click.group('pvz')
def pvz_group():
    """Pickup point management."""


@pvz_group.command('create')
@click.option('--city', required=True, help='City label of the pickup point')
@with_appcontext
def create_pvz_cli(city):
    """
    Register a new pickup point.

    Example:
        flask pvz create --city "Казань"
    """
    try:
        pickup_point = pickup_point_service.create_pickup_point(city)
    except PvzError as e:
        _fail(e)
    click.echo(f"PASS Created pickup point {pickup_point.id} ({pickup_point.city})")


@pvz_group.command('list')
@click.option('--offset', type=int, default=0, show_default=True)
@click.option('--limit', type=int, default=10, show_default=True)
@with_appcontext
def list_pvz_cli(offset, limit):
    """List pickup points, newest first, with their open reception if any."""
    pickup_points = pickup_point_service.list_pickup_points(offset=offset, limit=limit)
    if not pickup_points:
        click.echo("No pickup points found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<38} {'City':<20} {'Registered':<22} {'Open reception'}")
    click.echo("="*100)

    open_receptions = reception_repo.map_open_by_pickup_points(
        db.session, [p.id for p in pickup_points]
    )
    for pickup_point in pickup_points:
        open_reception = open_receptions.get(pickup_point.id)
        registered = pickup_point.registration_date.strftime("%Y-%m-%d %H:%M:%S")
        click.echo(
            f"{str(pickup_point.id):<38} {pickup_point.city:<20} {registered:<22} "
            f"{open_reception.id if open_reception else '-'}"
        )

    click.echo("="*100)
    click.echo(f"Total: {len(pickup_points)} pickup points\n")


@click.group('receptions')
def receptions_group():
    """Reception lifecycle commands."""


@receptions_group.command('open')
@click.argument('pvz_id', type=click.UUID)
@with_appcontext
def open_reception_cli(pvz_id):
    """Open a reception at a pickup point."""
    try:
        reception = reception_service.open_reception(pvz_id)
    except PvzError as e:
        _fail(e)
    click.echo(f"PASS Opened reception {reception.id}")


@receptions_group.command('close')
@click.argument('pvz_id', type=click.UUID)
@with_appcontext
def close_reception_cli(pvz_id):
    """Close the open reception of a pickup point."""
    try:
        reception = reception_service.close_last_reception(pvz_id)
    except PvzError as e:
        _fail(e)
    click.echo(f"PASS Closed reception {reception.id}")


@click.group('products')
def products_group():
    """Reception inventory commands."""


@products_group.command('add')
@click.argument('reception_id', type=click.UUID)
@click.argument('types', nargs=-1, required=True)
@with_appcontext
def add_products_cli(reception_id, types):
    """
    Add products to an open reception (all-or-nothing).

    Example:
        flask products add <reception_id> electronics food other
    """
    try:
        if len(types) == 1:
            products = [inventory_service.add_product(reception_id, types[0])]
        else:
            products = inventory_service.add_products(reception_id, types)
    except PvzError as e:
        _fail(e)
    for product in products:
        click.echo(f"PASS Added {product.type} ({product.id})")


@products_group.command('remove-last')
@click.argument('reception_id', type=click.UUID)
@with_appcontext
def remove_last_product_cli(reception_id):
    """Remove the most recently added product of an open reception."""
    try:
        product = inventory_service.remove_last_product(reception_id)
    except PvzError as e:
        _fail(e)
    click.echo(f"PASS Removed {product.type} ({product.id})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(pvz_group)
    app.cli.add_command(receptions_group)
    app.cli.add_command(products_group)
