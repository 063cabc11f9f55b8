"""SQL implementation of CatalogRepository."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import Connection, Engine, Row, insert, select, update

from delifood.domain.exceptions import PersistenceError
from delifood.domain.model.product import Product
from delifood.domain.model.value_objects import Money
from delifood.domain.repository.catalog_repository import CatalogRepository
from delifood.infrastructure.persistence.sql_base import SqlRepository
from delifood.infrastructure.persistence.tables import products


class SqlCatalogRepository(SqlRepository, CatalogRepository):
    """Catalog rows mapped to Product.

    With ``currency`` set, ``fetch_by_ids`` raises PersistenceError for
    rows priced in any other currency.
    """

    def __init__(self, bind: Engine | Connection, currency: str | None = None) -> None:
        super().__init__(bind)
        self._currency = currency

    # --- CatalogRepository interface ------------------------------------------

    def fetch_by_ids(self, product_ids: Iterable[int]) -> list[Product]:
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return []
        with self._connection() as conn:
            rows = conn.execute(select(products).where(products.c.id.in_(ids))).all()
        for row in rows:
            if self._currency is not None and row.currency != self._currency:
                raise PersistenceError(
                    f"Product #{row.id} is priced in {row.currency}, "
                    f"but the store is configured for {self._currency}"
                )
        return [self._to_domain(row) for row in rows]

    def get_by_id(self, product_id: int) -> Product | None:
        with self._connection() as conn:
            row = conn.execute(select(products).where(products.c.id == product_id)).first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        with self._connection() as conn:
            rows = conn.execute(select(products).order_by(products.c.id)).all()
        return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        values = self._to_raw(product)
        with self._connection() as conn:
            exists = conn.execute(
                select(products.c.id).where(products.c.id == product.id)
            ).first()
            if exists is None:
                conn.execute(insert(products).values(id=product.id, **values))
            else:
                conn.execute(
                    update(products).where(products.c.id == product.id).values(**values)
                )

    def try_decrement(self, product_id: int, quantity: int) -> bool:
        # Rows with too little stock are left alone and rowcount stays 0.
        stmt = (
            update(products)
            .where(products.c.id == product_id, products.c.stock >= quantity)
            .values(stock=products.c.stock - quantity)
        )
        with self._connection() as conn:
            return conn.execute(stmt).rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "restaurant_id": product.restaurant_id,
            "name": product.name,
            "price": product.price.amount,
            "currency": product.price.currency,
            "stock": product.stock,
            "preparation_time": product.preparation_time_minutes,
            "is_active": product.is_active,
        }

    @staticmethod
    def _to_domain(row: Row) -> Product:
        return Product(
            id=row.id,
            restaurant_id=row.restaurant_id,
            name=row.name,
            price=Money(Decimal(str(row.price)), row.currency),
            stock=row.stock,
            preparation_time_minutes=row.preparation_time,
            is_active=bool(row.is_active),
        )
