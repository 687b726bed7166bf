"""Tests for the per-user store cache."""

import pytest

from services import packing_service
from services.packing_repository import InMemoryPackingRepository
from services.packing_store import PackingListStore, StoreUnavailableError


@pytest.fixture(autouse=True)
def fresh_stores():
    packing_service.reset_stores()
    yield
    packing_service.reset_stores()


class FailingRepository:
    def load(self):
        raise ConnectionError("transient")

    def save(self, packing_lists):
        raise AssertionError("must not save")


class TestGetStoreForUser:
    def test_store_is_cached_per_user(self, monkeypatch):
        monkeypatch.setattr(packing_service, "build_repository", lambda user_id: InMemoryPackingRepository())
        first = packing_service.get_store_for_user("camper-1")
        assert packing_service.get_store_for_user("camper-1") is first
        assert packing_service.get_store_for_user("camper-2") is not first

    def test_concurrent_first_requests_share_one_store(self, monkeypatch):
        winner = PackingListStore(InMemoryPackingRepository())

        def build_while_another_request_finishes(user_id):
            # Another request caches its store while this one is still loading.
            packing_service._stores[user_id] = winner
            return InMemoryPackingRepository()

        monkeypatch.setattr(packing_service, "build_repository", build_while_another_request_finishes)
        assert packing_service.get_store_for_user("camper-1") is winner

    def test_failed_load_is_not_cached(self, monkeypatch):
        monkeypatch.setattr(packing_service, "build_repository", lambda user_id: FailingRepository())
        with pytest.raises(StoreUnavailableError):
            packing_service.get_store_for_user("camper-1")

        monkeypatch.setattr(packing_service, "build_repository", lambda user_id: InMemoryPackingRepository())
        assert packing_service.get_store_for_user("camper-1").packing_lists == []

    def test_memory_backend(self):
        assert isinstance(packing_service.build_repository("camper-1", "memory"), InMemoryPackingRepository)
