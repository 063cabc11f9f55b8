"""Fixtures that build a real container on a throwaway SQLite file."""

import pytest

from delifood.infrastructure.bootstrap import build_container
from delifood.infrastructure.config import Settings
from delifood.infrastructure.seed import load_seed_file
from tests.fakes import SEED_FILE, fixed_clock


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(database_url=f"sqlite:///{tmp_path / 'delifood.db'}")


@pytest.fixture
def container(settings):
    container = build_container(settings, clock=fixed_clock())
    load_seed_file(
        SEED_FILE,
        catalog=container.catalog(),
        users=container.users(),
        currency=settings.currency,
    )
    yield container
    container.engine.dispose()
