"""CLI commands for quoting, confirming and tracking orders."""

from __future__ import annotations

import click

from delifood.application.dto import CartItemSpec, OrderDTO, OrderSummaryDTO, QuoteDTO
from delifood.domain.exceptions import DomainException
from delifood.infrastructure.bootstrap import build_container


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse '1:3,4:5' (product id : quantity) into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        id_str, qty_str = pair.split(":", 1)
        try:
            product_id = int(id_str)
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid item '{pair}'. Product id and quantity must be integers."
            )
        specs.append(CartItemSpec(product_id=product_id, quantity=qty))
    return specs


def _display_quote(dto: QuoteDTO) -> None:
    click.echo(f"  {'Product':<8} {'Qty':>5} {'Price':>10} {'Total':>10}  Status")
    click.echo(f"  {'-'*56}")
    for line in dto.lines:
        if line.ok:
            click.echo(
                f"  #{line.product_id:<7} {line.quantity:>5} {line.unit_price:>10.2f} "
                f"{line.line_total:>10.2f}  ok ({line.name})"
            )
        else:
            detail = line.reason
            if line.available is not None:
                detail += f" (available: {line.available})"
            click.echo(f"  #{line.product_id:<7} {line.quantity:>5} {'-':>10} {'-':>10}  {detail}")
    click.echo(f"  {'-'*56}")
    click.echo(f"  {'Subtotal':<25} {dto.totals.subtotal:>10.2f}")
    click.echo(f"  {'Delivery fee':<25} {dto.totals.delivery_fee:>10.2f}")
    click.echo(f"  {'Total':<25} {dto.totals.total:>10.2f}")
    click.echo(f"  ETA: {dto.eta_minutes} min  |  {dto.service_hours_message}")


def _display_order(dto: OrderDTO) -> None:
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"User:     #{dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"ETA:      {dto.eta_minutes} min")
    click.echo()
    click.echo(f"  {'Product':<8} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*36}")
    for line in dto.lines:
        click.echo(
            f"  #{line.product_id:<7} {line.quantity:>5} {line.unit_price:>10.2f} {line.line_total:>10.2f}"
        )
    click.echo(f"  {'-'*36}")
    click.echo(f"  {'Delivery fee':<16} {dto.totals.delivery_fee:>19.2f}")
    click.echo(f"  {'Order Total':<16} {dto.totals.total:>19.2f}")


def _display_summaries(rows: list[OrderSummaryDTO]) -> None:
    if not rows:
        click.echo("No orders found.")
        return
    click.echo(f"{'ID':<6} {'Client':<20} {'Rest.':>6} {'Status':<17} {'Total':>10} {'Created':<20}")
    click.echo("-" * 84)
    for row in rows:
        client = row.client_name or f"#{row.user_id}"
        restaurant = str(row.restaurant_id) if row.restaurant_id is not None else "-"
        click.echo(
            f"{row.id:<6} {client:<20} {restaurant:>6} {row.status:<17} "
            f"{row.total:>10.2f} {row.created_at:<20}"
        )


@click.command("quote")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
def order_quote(items: str) -> None:
    """Price a cart without placing an order."""
    specs = _parse_items(items)

    try:
        dto = build_container().quote_handler().handle(specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Quote OK" if dto.success else "Quote has problems")
    _display_quote(dto)


@click.command("confirm")
@click.option("--user", "user_id", required=True, type=int, help="Ordering user's ID.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
def order_confirm(user_id: int, items: str) -> None:
    """Place an order (re-validates and decrements stock atomically)."""
    specs = _parse_items(items)

    try:
        result = build_container().confirm_handler().handle(user_id, specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.success:
        if result.quote is not None:
            _display_quote(result.quote)
        raise click.ClickException(f"[{result.failure.value}] {result.message}")  # type: ignore[union-attr]

    click.echo(result.message)
    for warning in result.warnings:
        click.echo(f"Warning: {warning.value}", err=True)
    _display_order(result.order)  # type: ignore[arg-type]


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    try:
        dto = build_container().show_order_handler().handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--to", "new_status", required=True, help="preparing, out_for_delivery, delivered or cancelled.")
def order_status(order_id: int, new_status: str) -> None:
    """Move an order to its next status."""
    try:
        dto = build_container().update_status_handler().handle(order_id, new_status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("for-delivery")
def order_for_delivery() -> None:
    """List active orders for delivery drivers."""
    try:
        rows = build_container().order_queries().active_for_delivery()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_summaries(rows)


@click.command("by-restaurant")
@click.option("--restaurant", "restaurant_id", required=True, type=int, help="Restaurant ID.")
def order_by_restaurant(restaurant_id: int) -> None:
    """List the latest orders that include a restaurant's products."""
    try:
        rows = build_container().order_queries().for_restaurant(restaurant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_summaries(rows)
