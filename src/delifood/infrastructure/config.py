"""Runtime configuration, read from environment variables.

Every setting has a default so the CLI and the tests run without any
environment.  Invalid values fail fast with ValidationError.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from delifood.domain.exceptions import ValidationError
from delifood.domain.model.value_objects import DEFAULT_CURRENCY, Money
from delifood.domain.service.pricing import (
    CLOSING_HOUR,
    DELIVERY_BUFFER_MINUTES,
    OPENING_HOUR,
    PricingPolicy,
    ServiceHours,
)

ENV_PREFIX = "DELIFOOD_"
DEFAULT_DATABASE_URL = "sqlite:///data/delifood.db"


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    timezone: str = "UTC"
    opening_hour: int = OPENING_HOUR
    closing_hour: int = CLOSING_HOUR
    free_delivery_threshold: Decimal = Decimal("500")
    delivery_fee: Decimal = Decimal("40")
    delivery_buffer_minutes: int = DELIVERY_BUFFER_MINUTES
    currency: str = DEFAULT_CURRENCY
    environment: str = "development"
    log_level: str = "INFO"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default)

        defaults = Settings()
        return Settings(
            database_url=get("DATABASE_URL", defaults.database_url),
            timezone=get("TIMEZONE", defaults.timezone),
            opening_hour=_as_int("OPENING_HOUR", get("OPENING_HOUR", str(defaults.opening_hour))),
            closing_hour=_as_int("CLOSING_HOUR", get("CLOSING_HOUR", str(defaults.closing_hour))),
            free_delivery_threshold=_as_decimal(
                "FREE_DELIVERY_THRESHOLD",
                get("FREE_DELIVERY_THRESHOLD", str(defaults.free_delivery_threshold)),
            ),
            delivery_fee=_as_decimal("DELIVERY_FEE", get("DELIVERY_FEE", str(defaults.delivery_fee))),
            delivery_buffer_minutes=_as_int(
                "DELIVERY_BUFFER_MINUTES",
                get("DELIVERY_BUFFER_MINUTES", str(defaults.delivery_buffer_minutes)),
            ),
            currency=get("CURRENCY", defaults.currency),
            environment=env.get("ENVIRONMENT", defaults.environment).lower(),
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
        )

    # --- Domain policies ------------------------------------------------------

    def pricing_policy(self) -> PricingPolicy:
        return PricingPolicy(
            free_delivery_threshold=Money.of(self.free_delivery_threshold, self.currency).to_cents(),
            flat_fee=Money.of(self.delivery_fee, self.currency).to_cents(),
            delivery_buffer_minutes=self.delivery_buffer_minutes,
        )

    def service_hours(self) -> ServiceHours:
        try:
            zone = ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValidationError(f"Unknown timezone: {self.timezone!r}") from exc
        return ServiceHours(
            opening_hour=self.opening_hour,
            closing_hour=self.closing_hour,
            timezone=zone,
        )


def _as_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def _as_decimal(name: str, raw: str) -> Decimal:
    try:
        return Money.of(raw).amount
    except ValidationError as exc:
        raise ValidationError(f"{ENV_PREFIX}{name} must be a non-negative amount, got {raw!r}") from exc
