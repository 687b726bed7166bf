"""
Shared fixtures for the packing engine tests.

Everything runs against the in-memory repository; Firebase is never touched.
"""
import itertools

import pytest
from fastapi.testclient import TestClient

from core.config import settings
from core.security import get_current_user
from schemas.gear_schema import GearItem
from schemas.template_schema import PackingTemplate, PackingTemplateItem
from services import packing_service
from services.packing_repository import InMemoryPackingRepository
from services.packing_store import PackingListStore


def make_item(name, category="Other", essential=False, key=None, tier=None, seasons=(), conflicts=()):
    return PackingTemplateItem(
        name=name,
        category=category,
        essential=essential,
        canonical_key=key,
        precedence_tier=tier,
        season_tags=tuple(seasons),
        conflicts_with=tuple(conflicts),
    )


def make_template(key, items, tier=1):
    return PackingTemplate(key=key, name=key.title(), default_precedence_tier=tier, items=tuple(items))


def gear(gear_id, name, category):
    return GearItem(id=gear_id, name=name, category=category)


@pytest.fixture
def repository():
    return InMemoryPackingRepository()


@pytest.fixture
def store(repository):
    return PackingListStore(repository)


@pytest.fixture
def fixed_clock(monkeypatch):
    """Make store timestamps strictly increasing and predictable."""
    counter = itertools.count(1)
    monkeypatch.setattr(
        "services.packing_store._now",
        lambda: f"2025-07-01T00:00:{next(counter):02d}+00:00",
    )


@pytest.fixture
def client(monkeypatch):
    from main import app

    monkeypatch.setattr(settings, "PACKING_STORAGE_BACKEND", "memory")
    packing_service.reset_stores()
    app.dependency_overrides[get_current_user] = lambda: {"uid": "camper-1"}
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        packing_service.reset_stores()
