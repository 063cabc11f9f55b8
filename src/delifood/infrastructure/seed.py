"""Load users and products from a JSON fixture file.

The catalog and identity stores are owned by other components; this
loader only exists so a fresh database can be exercised from the CLI.

Expected shape::

    {
      "users": [{"id": 1, "name": "Ana", "username": "ana", "role": "client"}],
      "products": [{"id": 1, "restaurant_id": 10, "name": "Taco", "price": "45.00",
                    "stock": 20, "preparation_time": 12, "is_active": true}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from delifood.domain.exceptions import ValidationError
from delifood.domain.model.product import DEFAULT_PREPARATION_TIME_MINUTES, Product
from delifood.domain.model.user import Role, User
from delifood.domain.model.value_objects import Money
from delifood.domain.repository.catalog_repository import CatalogRepository
from delifood.infrastructure.persistence.sql_user_directory import SqlUserDirectory


def load_seed_file(
    path: Path,
    catalog: CatalogRepository,
    users: SqlUserDirectory,
    currency: str,
) -> tuple[int, int]:
    """Upsert every user and product in *path*; return how many of each."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path} is not valid JSON: {exc}") from exc

    try:
        user_records = [_to_user(item) for item in raw.get("users", [])]
        product_records = [_to_product(item, currency) for item in raw.get("products", [])]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"Malformed seed record in {path}: {exc!r}") from exc

    for user in user_records:
        users.save(user)
    for product in product_records:
        catalog.save(product)
    return len(user_records), len(product_records)


def _to_user(raw: dict) -> User:
    return User(
        id=int(raw["id"]),
        name=raw["name"],
        username=raw["username"],
        role=Role(raw.get("role", Role.CLIENT.value)),
    )


def _to_product(raw: dict, currency: str) -> Product:
    return Product(
        id=int(raw["id"]),
        restaurant_id=int(raw["restaurant_id"]),
        name=raw["name"],
        price=Money.of(raw["price"], currency),
        stock=int(raw["stock"]),
        preparation_time_minutes=int(
            raw.get("preparation_time", DEFAULT_PREPARATION_TIME_MINUTES)
        ),
        is_active=bool(raw.get("is_active", True)),
    )
