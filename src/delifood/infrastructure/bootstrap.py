"""Composition root: builds the engine and hands out SQL-backed handlers.

The CLI and the HTTP app both go through ``build_container``; the
application and domain layers never import the persistence adapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from delifood.application.clock import Clock, system_clock
from delifood.application.confirm_order import ConfirmOrderHandler
from delifood.application.order_queries import OrderQueryService
from delifood.application.quote_order import QuoteOrderHandler
from delifood.application.show_order import ShowOrderHandler
from delifood.application.update_order_status import UpdateOrderStatusHandler
from delifood.application.validate_cart import ValidateCartHandler
from delifood.infrastructure.config import Settings
from delifood.infrastructure.persistence.sql_catalog_repository import SqlCatalogRepository
from delifood.infrastructure.persistence.sql_notifier import SqlNotifier
from delifood.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from delifood.infrastructure.persistence.sql_unit_of_work import SqlUnitOfWork
from delifood.infrastructure.persistence.sql_user_directory import SqlUserDirectory
from delifood.infrastructure.persistence.tables import metadata

# Seconds a writer waits for SQLite's lock before giving up.
SQLITE_BUSY_TIMEOUT = 30


def create_engine_for(database_url: str) -> Engine:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
    if not url.database or url.database == ":memory:":
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)

    Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    metadata.create_all(engine)


@dataclass
class Container:
    """Holds the settings and engine and builds handlers on demand."""

    settings: Settings
    engine: Engine
    clock: Clock = system_clock

    # --- Repositories ---------------------------------------------------------

    def catalog(self) -> SqlCatalogRepository:
        return SqlCatalogRepository(self.engine, currency=self.settings.currency)

    def orders(self) -> SqlOrderRepository:
        return SqlOrderRepository(self.engine)

    def users(self) -> SqlUserDirectory:
        return SqlUserDirectory(self.engine)

    def unit_of_work(self) -> SqlUnitOfWork:
        return SqlUnitOfWork(self.engine)

    def notifier(self) -> SqlNotifier:
        return SqlNotifier(self.engine)

    # --- Handlers -------------------------------------------------------------

    def quote_handler(self) -> QuoteOrderHandler:
        return QuoteOrderHandler(
            catalog=self.catalog(),
            policy=self.settings.pricing_policy(),
            hours=self.settings.service_hours(),
            clock=self.clock,
        )

    def confirm_handler(self) -> ConfirmOrderHandler:
        return ConfirmOrderHandler(
            catalog=self.catalog(),
            unit_of_work=self.unit_of_work(),
            notifier=self.notifier(),
            users=self.users(),
            policy=self.settings.pricing_policy(),
            hours=self.settings.service_hours(),
            clock=self.clock,
        )

    def validate_cart_handler(self) -> ValidateCartHandler:
        return ValidateCartHandler(catalog=self.catalog(), policy=self.settings.pricing_policy())

    def show_order_handler(self) -> ShowOrderHandler:
        return ShowOrderHandler(order_repo=self.orders())

    def update_status_handler(self) -> UpdateOrderStatusHandler:
        return UpdateOrderStatusHandler(unit_of_work=self.unit_of_work())

    def order_queries(self) -> OrderQueryService:
        return OrderQueryService(
            order_repo=self.orders(), catalog=self.catalog(), users=self.users()
        )


def build_container(settings: Settings | None = None, clock: Clock = system_clock) -> Container:
    settings = settings or Settings.from_env()
    engine = create_engine_for(settings.database_url)
    init_db(engine)
    return Container(settings=settings, engine=engine, clock=clock)
