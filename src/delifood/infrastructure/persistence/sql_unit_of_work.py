"""SQL implementation of UnitOfWork.

Each ``transaction()`` opens ``engine.begin()``: the repositories it
hands out share that single connection, the block commits on normal exit
and rolls back when anything inside it raises.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from delifood.domain.exceptions import PersistenceError
from delifood.domain.repository.unit_of_work import Transaction, UnitOfWork
from delifood.infrastructure.persistence.sql_catalog_repository import SqlCatalogRepository
from delifood.infrastructure.persistence.sql_order_repository import SqlOrderRepository


class SqlUnitOfWork(UnitOfWork):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        try:
            with self._engine.begin() as conn:
                yield Transaction(
                    catalog=SqlCatalogRepository(conn),
                    orders=SqlOrderRepository(conn),
                )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Transaction rolled back: {exc}") from exc
