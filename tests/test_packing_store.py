"""Tests for the packing list store: mutations, snapshots and persistence."""

import asyncio
import logging
import threading
import time

import pytest

from conftest import gear
from schemas.trip_schema import Trip
from services.packing_repository import InMemoryPackingRepository
from services.packing_store import PackingListStore, StoreUnavailableError


class BrokenRepository:
    def load(self):
        return []

    def save(self, packing_lists):
        raise RuntimeError("disk full")


class FlakyRepository:
    """Wraps an in-memory repository whose first loads fail."""

    def __init__(self, fail_loads=1):
        self.backing = InMemoryPackingRepository()
        self.fail_loads = fail_loads

    def load(self):
        if self.fail_loads:
            self.fail_loads -= 1
            raise ConnectionError("transient")
        return self.backing.load()

    def save(self, packing_lists):
        self.backing.save(packing_lists)


class ThreadRecordingRepository:
    def __init__(self):
        self.save_threads = []
        self.snapshots = []
        self.saved = threading.Event()

    def load(self):
        return []

    def save(self, packing_lists):
        self.save_threads.append(threading.get_ident())
        self.snapshots.append(list(packing_lists))
        self.saved.set()

    def wait_for_saves(self, count, timeout=5):
        deadline = time.monotonic() + timeout
        while len(self.snapshots) < count and time.monotonic() < deadline:
            time.sleep(0.01)


def new_list(store, **kwargs):
    options = {"name": "Yosemite Weekend", "trip_type": "weekend", "season": "summer"}
    options.update(kwargs)
    return store.create_packing_list(**options)


def section_by_title(store, list_id, title):
    return next(s for s in store.get_packing_list_by_id(list_id).sections if s.title == title)


@pytest.fixture
def list_with_items(store):
    """A list with one 'Gear' section holding Tent, Stove and Lantern."""
    list_id = new_list(store)
    section_id = store.add_section(list_id, "Gear")
    item_ids = [store.add_item(list_id, section_id, name) for name in ("Tent", "Stove", "Lantern")]
    return list_id, section_id, item_ids


class TestCreateAndQuery:
    def test_list_without_templates_uses_the_skeleton(self, store):
        list_id = new_list(store)
        packing_list = store.get_packing_list_by_id(list_id)
        assert len(packing_list.sections) == 11
        assert packing_list.meta is None
        assert packing_list.is_template is False

    def test_list_from_templates_records_meta(self, store):
        list_id = new_list(store, template_keys=["essential"], trip_days=3)
        packing_list = store.get_packing_list_by_id(list_id)
        assert packing_list.meta.selected_template_keys == ["essential"]
        assert packing_list.meta.trip_days_used_for_generation == 3
        assert any(s.title == "Shelter & Sleep" for s in packing_list.sections)

    def test_new_lists_come_first(self, store):
        first = new_list(store, name="First")
        second = new_list(store, name="Second")
        assert [pl.id for pl in store.packing_lists] == [second, first]

    def test_queries(self, store):
        trip_list = new_list(store, trip_id="trip-1")
        template = new_list(store, is_template=True)
        assert [pl.id for pl in store.get_packing_lists_by_trip_id("trip-1")] == [trip_list]
        assert [pl.id for pl in store.get_templates()] == [template]
        assert [pl.id for pl in store.get_active_lists()] == [trip_list]
        assert store.get_packing_list_by_id("missing") is None

    def test_create_for_trip(self, store):
        trip = Trip(start_date="2025-01-10", end_date="2025-01-12", camping_style="BACKPACKING")
        list_id = store.create_packing_list_for_trip("Winter Loop", trip, trip_id="trip-9")
        packing_list = store.get_packing_list_by_id(list_id)
        assert packing_list.season == "winter"
        assert packing_list.trip_type == "backpacking"
        assert packing_list.trip_id == "trip-9"
        assert packing_list.meta.trip_days_used_for_generation == 3

    def test_create_for_trip_derives_type_from_length(self, store):
        trip = Trip(start_date="2025-07-10", end_date="2025-07-15")
        list_id = store.create_packing_list_for_trip("Long one", trip)
        assert store.get_packing_list_by_id(list_id).trip_type == "multi-day"

    def test_delete(self, store):
        list_id = new_list(store)
        assert store.delete_packing_list(list_id) is True
        assert store.delete_packing_list(list_id) is False
        assert store.packing_lists == []


class TestSnapshots:
    def test_earlier_snapshots_do_not_change(self, store, list_with_items):
        list_id, section_id, (tent_id, _, _) = list_with_items
        before = store.get_packing_list_by_id(list_id)
        collection_before = store.packing_lists

        store.toggle_item_checked(list_id, section_id, tent_id)

        after = store.get_packing_list_by_id(list_id)
        assert after is not before
        tent_before = next(i for s in before.sections for i in s.items if i.id == tent_id)
        tent_after = next(i for s in after.sections for i in s.items if i.id == tent_id)
        assert tent_before.checked is False
        assert tent_after.checked is True
        assert collection_before[0] is before

    def test_untouched_sections_are_shared(self, store, list_with_items):
        list_id, section_id, (tent_id, _, _) = list_with_items
        before = store.get_packing_list_by_id(list_id)
        store.toggle_item_checked(list_id, section_id, tent_id)
        after = store.get_packing_list_by_id(list_id)
        untouched_before = [s for s in before.sections if s.id != section_id]
        untouched_after = [s for s in after.sections if s.id != section_id]
        assert all(a is b for a, b in zip(untouched_before, untouched_after))

    def test_mutations_stamp_updated_at(self, store, fixed_clock):
        list_id = new_list(store)
        created = store.get_packing_list_by_id(list_id)
        assert created.created_at == created.updated_at

        store.add_section(list_id, "Extras")
        updated = store.get_packing_list_by_id(list_id)
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

    def test_no_op_mutations_do_not_persist(self, store, repository, list_with_items):
        list_id, section_id, _ = list_with_items
        saves = repository.save_count
        assert store.toggle_item_checked(list_id, section_id, "missing") is False
        assert store.delete_section(list_id, "missing") is False
        assert store.add_item("missing", section_id, "Tarp") is None
        assert repository.save_count == saves


class TestPersistence:
    def test_each_mutation_saves_once(self, store, repository):
        list_id = new_list(store)
        assert repository.save_count == 1
        store.add_section(list_id, "Extras")
        assert repository.save_count == 2
        assert repository.document["packingLists"][0]["sections"][-1]["title"] == "Extras"

    def test_lists_are_loaded_on_start(self, store, repository):
        list_id = new_list(store)
        reloaded = PackingListStore(InMemoryPackingRepository(repository.document))
        assert reloaded.get_packing_list_by_id(list_id) == store.get_packing_list_by_id(list_id)

    def test_save_failures_are_logged_not_raised(self, caplog):
        store = PackingListStore(BrokenRepository())
        with caplog.at_level(logging.ERROR):
            list_id = new_list(store)
        assert store.get_packing_list_by_id(list_id) is not None
        assert "Failed to persist" in caplog.text

    def test_failed_load_does_not_overwrite_stored_lists(self, caplog):
        repository = FlakyRepository(fail_loads=1)
        original = PackingListStore(repository.backing)
        existing_id = new_list(original, name="Existing")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(StoreUnavailableError):
                PackingListStore(repository)
        assert "transient" in caplog.text
        assert [pl["name"] for pl in repository.backing.document["packingLists"]] == ["Existing"]

        retried = PackingListStore(repository)
        new_list(retried, name="New")
        stored = [pl["name"] for pl in repository.backing.document["packingLists"]]
        assert stored == ["New", "Existing"]
        assert retried.get_packing_list_by_id(existing_id) is not None

    def test_saves_run_off_the_event_loop_thread(self):
        repository = ThreadRecordingRepository()
        store = PackingListStore(repository)

        async def mutate():
            loop_thread = threading.get_ident()
            new_list(store)
            assert len(store.packing_lists) == 1
            saved = await asyncio.get_running_loop().run_in_executor(None, repository.saved.wait, 5)
            assert saved
            return loop_thread

        loop_thread = asyncio.run(mutate())
        assert repository.save_threads
        assert loop_thread not in repository.save_threads

    def test_deferred_saves_keep_commit_order(self):
        repository = ThreadRecordingRepository()
        store = PackingListStore(repository)

        async def mutate():
            for name in ("One", "Two", "Three"):
                new_list(store, name=name)
            await asyncio.get_running_loop().run_in_executor(None, repository.wait_for_saves, 3)

        asyncio.run(mutate())
        assert [len(snapshot) for snapshot in repository.snapshots] == [1, 2, 3]


class TestSections:
    def test_add_section_rejects_duplicate_titles(self, store):
        list_id = new_list(store)
        assert store.add_section(list_id, "Extras") is not None
        assert store.add_section(list_id, " extras ") is None
        assert store.add_section(list_id, "Cooking and Food") is None

    def test_rename(self, store):
        list_id = new_list(store)
        section_id = store.add_section(list_id, "Extras")
        assert store.rename_section(list_id, section_id, "Bonus") is True
        assert section_by_title(store, list_id, "Bonus").id == section_id
        assert store.rename_section(list_id, section_id, "Clothing") is False
        assert store.rename_section(list_id, section_id, "bonus") is True

    def test_delete_section(self, store):
        list_id = new_list(store)
        section_id = store.add_section(list_id, "Extras")
        assert store.delete_section(list_id, section_id) is True
        assert all(s.id != section_id for s in store.get_packing_list_by_id(list_id).sections)

    def test_reorder(self, store):
        list_id = new_list(store)
        titles = [s.title for s in store.get_packing_list_by_id(list_id).sections]
        assert store.reorder_sections(list_id, 0, 2) is True
        reordered = [s.title for s in store.get_packing_list_by_id(list_id).sections]
        assert reordered[:3] == [titles[1], titles[2], titles[0]]
        assert store.reorder_sections(list_id, 0, 99) is False

    def test_toggle_collapsed(self, store):
        list_id = new_list(store)
        section_id = store.get_packing_list_by_id(list_id).sections[0].id
        store.toggle_section_collapsed(list_id, section_id)
        assert store.get_packing_list_by_id(list_id).sections[0].collapsed is True
        store.toggle_section_collapsed(list_id, section_id)
        assert store.get_packing_list_by_id(list_id).sections[0].collapsed is False


class TestItems:
    def test_add_item(self, store, list_with_items):
        list_id, _, _ = list_with_items
        items = section_by_title(store, list_id, "Gear").items
        assert [i.name for i in items] == ["Tent", "Stove", "Lantern"]
        assert all(i.source == "custom" and not i.checked for i in items)
        assert store.has_item_named(list_id, "  TENT")
        assert not store.has_item_named(list_id, "Tarp")

    def test_update_item(self, store, list_with_items):
        list_id, section_id, (tent_id, _, _) = list_with_items
        store.update_item(list_id, section_id, tent_id, {"name": "Big tent", "quantity": 2, "id": "hijack"})
        tent = section_by_title(store, list_id, "Gear").items[0]
        assert (tent.id, tent.name, tent.quantity) == (tent_id, "Big tent", 2)

    def test_update_item_ignores_nulls_for_required_fields(self, store, list_with_items):
        list_id, section_id, (tent_id, _, _) = list_with_items
        store.toggle_item_checked(list_id, section_id, tent_id)
        store.update_item(list_id, section_id, tent_id, {"name": None, "checked": None, "note": None})
        tent = section_by_title(store, list_id, "Gear").items[0]
        assert (tent.name, tent.checked, tent.note) == ("Tent", True, None)

    def test_delete_item(self, store, list_with_items):
        list_id, section_id, (_, stove_id, _) = list_with_items
        assert store.delete_item(list_id, section_id, stove_id) is True
        assert [i.name for i in section_by_title(store, list_id, "Gear").items] == ["Tent", "Lantern"]

    def test_duplicate_item(self, store, list_with_items):
        list_id, section_id, (tent_id, _, _) = list_with_items
        store.toggle_item_checked(list_id, section_id, tent_id)
        first = store.duplicate_item(list_id, section_id, tent_id)
        second = store.duplicate_item(list_id, section_id, tent_id)
        items = section_by_title(store, list_id, "Gear").items
        copies = {i.id: i for i in items}
        assert copies[first].name == "Tent (copy)"
        assert copies[second].name == "Tent (copy 2)"
        assert copies[first].checked is False
        assert items[-1].id == second

    def test_check_and_uncheck_all(self, store, list_with_items):
        list_id, _, _ = list_with_items
        store.check_all_items(list_id)
        assert store.get_progress(list_id).percentage == 100
        store.uncheck_all_items(list_id)
        assert store.get_progress(list_id).packed == 0


class TestProgress:
    def test_rounds_to_nearest_percent(self, store, list_with_items):
        list_id, section_id, (tent_id, stove_id, _) = list_with_items
        store.toggle_item_checked(list_id, section_id, tent_id)
        progress = store.get_progress(list_id)
        assert (progress.packed, progress.total, progress.percentage) == (1, 3, 33)
        store.toggle_item_checked(list_id, section_id, stove_id)
        assert store.get_progress(list_id).percentage == 67

    def test_empty_list(self, store):
        list_id = new_list(store)
        progress = store.get_progress(list_id)
        assert (progress.packed, progress.total, progress.percentage) == (0, 0, 0)

    def test_unknown_list(self, store):
        assert store.get_progress("missing").total == 0


class TestGearAndMeta:
    def test_merge_gear(self, store):
        list_id = new_list(store, template_keys=["essential"])
        store.merge_gear(list_id, [gear("g1", "Tent", "shelter"), gear("g2", "Hammock", "sleep")])
        shelter = section_by_title(store, list_id, "Shelter & Sleep")
        names = [i.name for i in shelter.items]
        assert names.count("Tent") == 1
        assert names[-1] == "Hammock"

    def test_first_aid_prompt_flag(self, store):
        list_id = new_list(store)
        store.set_do_not_prompt_first_aid(list_id, True)
        assert store.get_packing_list_by_id(list_id).meta.do_not_prompt_first_aid is True


class TestTemplates:
    def test_save_as_template(self, store, list_with_items):
        list_id, section_id, (tent_id, _, _) = list_with_items
        store.toggle_item_checked(list_id, section_id, tent_id)
        template_id = store.save_as_template(list_id)
        template = store.get_packing_list_by_id(template_id)
        source = store.get_packing_list_by_id(list_id)
        assert template.name == "Yosemite Weekend Template"
        assert template.is_template is True
        assert template.trip_id is None
        source_ids = {i.id for s in source.sections for i in s.items} | {s.id for s in source.sections}
        template_ids = {i.id for s in template.sections for i in s.items} | {s.id for s in template.sections}
        assert not source_ids & template_ids
        assert not any(i.checked for s in template.sections for i in s.items)

    def test_save_as_template_with_name(self, store):
        list_id = new_list(store)
        template_id = store.save_as_template(list_id, "Base kit")
        assert store.get_packing_list_by_id(template_id).name == "Base kit"
        assert store.save_as_template("missing") is None

    def test_copy_template_to_trip(self, store):
        list_id = new_list(store)
        template_id = store.save_as_template(list_id)
        copy_id = store.copy_template_to_trip(template_id, "trip-4")
        copy = store.get_packing_list_by_id(copy_id)
        assert copy.name == "Yosemite Weekend"
        assert copy.is_template is False
        assert copy.trip_id == "trip-4"

    def test_toggle_template_status_detaches_trip(self, store):
        list_id = new_list(store, trip_id="trip-1")
        store.toggle_template_status(list_id)
        packing_list = store.get_packing_list_by_id(list_id)
        assert packing_list.is_template is True
        assert packing_list.trip_id is None
        store.toggle_template_status(list_id)
        assert store.get_packing_list_by_id(list_id).is_template is False
