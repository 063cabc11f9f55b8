"""Abstract unit of work: the transactional boundary of a commit.

Everything done through the repositories handed out by ``transaction()``
commits together when the block exits normally and is rolled back when
it raises.  Conflicting stock decrements are serialised by the store,
not by this process.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import TypeVar

from delifood.domain.repository.catalog_repository import CatalogRepository
from delifood.domain.repository.order_repository import OrderRepository

T = TypeVar("T")


@dataclass(frozen=True)
class Transaction:
    catalog: CatalogRepository
    orders: OrderRepository


class UnitOfWork(ABC):

    @abstractmethod
    def transaction(self) -> AbstractContextManager[Transaction]:
        """Open a transaction; commit on normal exit, roll back on error.

        Infrastructure failures surface as PersistenceError after the
        rollback has happened.
        """

    def run(self, work: Callable[[Transaction], T]) -> T:
        with self.transaction() as tx:
            return work(tx)
