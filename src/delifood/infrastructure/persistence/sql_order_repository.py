"""SQL implementation of OrderRepository."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import Connection, Row, insert, select, update

from delifood.domain.model.order import Order, OrderLine, OrderStatus
from delifood.domain.model.value_objects import Money, Quantity
from delifood.domain.repository.order_repository import OrderRepository
from delifood.infrastructure.persistence.sql_base import SqlRepository, to_utc
from delifood.infrastructure.persistence.tables import order_items, orders, products


class SqlOrderRepository(SqlRepository, OrderRepository):

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        with self._connection() as conn:
            result = conn.execute(insert(orders).values(**self._to_raw(order)))
            order_id = result.inserted_primary_key[0]
            conn.execute(
                insert(order_items),
                [
                    {
                        "order_id": order_id,
                        "product_id": line.product_id,
                        "quantity": line.quantity.value,
                        "unit_price": line.unit_price.amount,
                    }
                    for line in order.lines
                ],
            )
        order.id = order_id

    def get_by_id(self, order_id: int) -> Order | None:
        with self._connection() as conn:
            found = self._load(conn, select(orders).where(orders.c.id == order_id))
        return found[0] if found else None

    def update_status(self, order: Order) -> None:
        with self._connection() as conn:
            conn.execute(
                update(orders)
                .where(orders.c.id == order.id)
                .values(status=order.status.value)
            )

    def list_by_status(self, statuses: Iterable[OrderStatus]) -> list[Order]:
        values = [status.value for status in statuses]
        stmt = (
            select(orders)
            .where(orders.c.status.in_(values))
            .order_by(orders.c.created_at.desc(), orders.c.id.desc())
        )
        with self._connection() as conn:
            return self._load(conn, stmt)

    def list_for_restaurant(self, restaurant_id: int, limit: int) -> list[Order]:
        touching = (
            select(order_items.c.order_id)
            .join(products, products.c.id == order_items.c.product_id)
            .where(products.c.restaurant_id == restaurant_id)
        )
        stmt = (
            select(orders)
            .where(orders.c.id.in_(touching))
            .order_by(orders.c.created_at.desc(), orders.c.id.desc())
            .limit(limit)
        )
        with self._connection() as conn:
            return self._load(conn, stmt)

    # --- Serialization --------------------------------------------------------

    def _load(self, conn: Connection, stmt) -> list[Order]:
        header_rows = conn.execute(stmt).all()
        if not header_rows:
            return []
        ids = [row.id for row in header_rows]
        line_rows = conn.execute(
            select(order_items)
            .where(order_items.c.order_id.in_(ids))
            .order_by(order_items.c.id)
        ).all()

        lines_by_order: dict[int, list[Row]] = {}
        for row in line_rows:
            lines_by_order.setdefault(row.order_id, []).append(row)
        return [self._to_domain(row, lines_by_order.get(row.id, [])) for row in header_rows]

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "user_id": order.user_id,
            "total": order.total.amount,
            "delivery_fee": order.delivery_fee.amount,
            "currency": order.delivery_fee.currency,
            "eta_minutes": order.eta_minutes,
            "status": order.status.value,
            "created_at": to_utc(order.created_at),
        }

    @staticmethod
    def _to_domain(raw: Row, line_rows: list[Row]) -> Order:
        currency = raw.currency
        lines = [
            OrderLine(
                product_id=line.product_id,
                quantity=Quantity(line.quantity),
                unit_price=Money(Decimal(str(line.unit_price)), currency),
            )
            for line in line_rows
        ]
        return Order(
            id=raw.id,
            user_id=raw.user_id,
            lines=lines,
            delivery_fee=Money(Decimal(str(raw.delivery_fee)), currency),
            eta_minutes=raw.eta_minutes,
            status=OrderStatus(raw.status),
            created_at=to_utc(raw.created_at),
        )
