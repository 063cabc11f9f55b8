import click

from delifood.domain.exceptions import DomainException
from delifood.infrastructure.cli.catalog_commands import catalog_list, db_init, db_seed
from delifood.infrastructure.cli.order_commands import (
    order_by_restaurant,
    order_confirm,
    order_for_delivery,
    order_quote,
    order_show,
    order_status,
)
from delifood.infrastructure.config import Settings
from delifood.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """delifood — order pricing and fulfillment"""
    try:
        settings = Settings.from_env()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    configure_logging(settings.log_level, settings.environment)


@cli.group()
def order() -> None:
    """Quote, place and track orders."""


@cli.group()
def catalog() -> None:
    """Inspect the product catalog."""


@cli.group()
def db() -> None:
    """Prepare the database."""


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=5000, type=int, show_default=True)
def serve(host: str, port: int) -> None:
    """Run the HTTP API."""
    import uvicorn

    from delifood.infrastructure.api.app import create_app
    from delifood.infrastructure.bootstrap import build_container

    try:
        app = create_app(build_container())
    except DomainException as exc:
        raise click.ClickException(str(exc))
    uvicorn.run(app, host=host, port=port)


# Register subcommands
order.add_command(order_by_restaurant)
order.add_command(order_confirm)
order.add_command(order_for_delivery)
order.add_command(order_quote)
order.add_command(order_show)
order.add_command(order_status)
catalog.add_command(catalog_list)
db.add_command(db_init)
db.add_command(db_seed)
