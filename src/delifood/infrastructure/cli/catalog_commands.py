"""CLI commands for inspecting the catalog and preparing the database."""

from __future__ import annotations

from pathlib import Path

import click

from delifood.domain.exceptions import DomainException
from delifood.infrastructure.bootstrap import build_container
from delifood.infrastructure.seed import load_seed_file


@click.command("list")
def catalog_list() -> None:
    """List all products in the catalog."""
    try:
        products = build_container().catalog().list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Rest.':>6} {'Name':<24} {'Price':>10} {'Stock':>6} {'Prep':>5}  Active")
    click.echo("-" * 70)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.restaurant_id:>6} {p.name:<24} {str(p.price):>10} "
            f"{p.stock:>6} {p.preparation_time_minutes:>5}  {'yes' if p.is_active else 'no'}"
        )


@click.command("init")
def db_init() -> None:
    """Create the database tables if they do not exist."""
    try:
        container = build_container()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Database ready at {container.settings.database_url}")


@click.command("seed")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def db_seed(path: Path) -> None:
    """Load users and products from a JSON file."""
    try:
        container = build_container()
        n_users, n_products = load_seed_file(
            path,
            catalog=container.catalog(),
            users=container.users(),
            currency=container.settings.currency,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Loaded {n_users} users and {n_products} products from {path}")
