"""
Allocation Ledger Tests

Covers the per-item/per-storage quantity ledger:
1. Point reads/writes with clamping and pruning of zero entries
2. Per-item and per-storage aggregation
3. Saturating transfers that conserve an item's total
4. Bulk import from row lists and flat mappings
5. Idempotent clearing and tolerant loading of persisted state
"""

import math

import pytest

from core.inventory.ledger import AllocationLedger, LEDGER_KEY
from core.storage.backends import InMemoryStateBackend


@pytest.fixture
def backend():
    return InMemoryStateBackend()


@pytest.fixture
def ledger(backend):
    return AllocationLedger(backend)


class TestSetAndGet:
    """Point reads and writes."""

    def test_get_missing_is_zero(self, ledger):
        assert ledger.get("1001", "1") == 0

    def test_set_then_get(self, ledger):
        ledger.set("1001", "1", 10)
        assert ledger.get("1001", "1") == 10

    def test_fractional_quantity(self, ledger):
        ledger.set("1001", "1", 2.5)
        assert ledger.get("1001", "1") == 2.5

    @pytest.mark.parametrize("bad", [0, -3, float("nan"), float("inf"), None, "abc", ""])
    def test_non_positive_or_invalid_is_removed(self, ledger, backend, bad):
        ledger.set("1001", "1", 10)
        ledger.set("1001", "1", bad)

        assert ledger.get("1001", "1") == 0
        assert "1001" not in (backend.load(LEDGER_KEY) or {})

    def test_zero_prunes_only_that_storage(self, ledger, backend):
        ledger.set("1001", "1", 10)
        ledger.set("1001", "2", 5)
        ledger.set("1001", "1", 0)

        assert backend.load(LEDGER_KEY) == {"1001": {"2": 5}}

    def test_numeric_and_string_ids_are_interchangeable(self, ledger):
        ledger.set(1001, 1, 3)
        assert ledger.get("1001", "1") == 3
        assert ledger.get(1001.0, 1) == 3

    def test_numeric_string_quantity_is_coerced(self, ledger):
        ledger.set("1001", "1", "7")
        assert ledger.get("1001", "1") == 7

    def test_setting_zero_on_absent_entry_writes_nothing_visible(self, ledger, backend):
        ledger.set("1001", "1", 0)
        assert backend.load(LEDGER_KEY) == {}


class TestAdd:
    """Relative adjustments floored at zero."""

    def test_add_to_existing(self, ledger):
        ledger.set("1001", "1", 4)
        ledger.add("1001", "1", 3)
        assert ledger.get("1001", "1") == 7

    def test_add_to_absent(self, ledger):
        ledger.add("1001", "L1", 2)
        assert ledger.get("1001", "L1") == 2

    def test_negative_delta_clamps_at_zero(self, ledger, backend):
        ledger.set("1001", "1", 4)
        ledger.add("1001", "1", -10)

        assert ledger.get("1001", "1") == 0
        assert "1001" not in backend.load(LEDGER_KEY)

    def test_non_numeric_delta_is_noop(self, ledger):
        ledger.set("1001", "1", 4)
        ledger.add("1001", "1", "abc")
        assert ledger.get("1001", "1") == 4


class TestAggregation:
    """Per-item and per-storage views."""

    def test_total_for_item(self, ledger):
        ledger.set("1001", "1", 10)
        ledger.set("1001", "2", 5)
        assert ledger.total_for_item("1001") == 15

    def test_get_all_for_item(self, ledger):
        ledger.set("1001", "1", 10)
        ledger.set("1001", "L1", 5)
        assert ledger.get_all_for_item(1001) == {"1": 10, "L1": 5}

    def test_get_all_for_unknown_item_is_empty(self, ledger):
        assert ledger.get_all_for_item("nope") == {}
        assert ledger.total_for_item("nope") == 0

    def test_get_all_for_item_is_a_snapshot(self, ledger):
        ledger.set("1001", "1", 10)
        snapshot = ledger.get_all_for_item("1001")
        snapshot["1"] = 99
        assert ledger.get("1001", "1") == 10

    def test_entries_for_storage(self, ledger):
        ledger.set("1001", "1", 10)
        ledger.set("1002", "1", 3)
        ledger.set("1003", "2", 8)

        entries = ledger.entries_for_storage(1)
        by_item = {e.item_id: e.quantity for e in entries}

        assert by_item == {"1001": 10, "1002": 3}
        assert ledger.total_for_storage("1") == 13

    def test_entries_keep_integral_quantities_as_int(self, ledger):
        ledger.set("1001", "1", 3)
        ledger.set("1002", "1", 2.5)

        entries = {e.item_id: e.quantity for e in ledger.entries_for_storage("1")}

        assert type(entries["1001"]) is int
        assert type(entries["1002"]) is float
        assert type(entries["1001"]) is type(ledger.get("1001", "1"))

    def test_entries_for_empty_storage(self, ledger):
        assert ledger.entries_for_storage("L9") == []
        assert ledger.total_for_storage("L9") == 0


class TestTransfer:
    """Saturating moves between storages."""

    def test_example_scenario(self, ledger):
        ledger.set("1001", "1", 10)
        ledger.set("1001", "2", 5)
        assert ledger.total_for_item("1001") == 15

        ledger.transfer("1001", "1", "2", 4)

        assert ledger.get("1001", "1") == 6
        assert ledger.get("1001", "2") == 9
        assert ledger.total_for_item("1001") == 15

    def test_over_request_moves_only_available(self, ledger, backend):
        ledger.set("1001", "1", 3)
        ledger.set("1001", "2", 1)
        before = ledger.get("1001", "1")

        moved = ledger.transfer("1001", "1", "2", 50)

        assert moved == before
        assert ledger.get("1001", "1") == 0
        assert ledger.get("1001", "2") == 1 + before
        assert "1" not in backend.load(LEDGER_KEY)["1001"]

    def test_transfer_to_new_storage(self, ledger):
        ledger.set("1001", "1", 5)
        ledger.transfer(1001, 1, "L1", 2)
        assert ledger.get_all_for_item("1001") == {"1": 3, "L1": 2}

    @pytest.mark.parametrize("amount", [0, -5, float("nan"), "abc"])
    def test_non_positive_amount_is_noop(self, ledger, backend, amount):
        ledger.set("1001", "1", 5)
        before = backend.raw(LEDGER_KEY)

        assert ledger.transfer("1001", "1", "2", amount) == 0
        assert backend.raw(LEDGER_KEY) == before

    def test_empty_source_is_noop(self, ledger, backend):
        ledger.set("1001", "2", 5)
        before = backend.raw(LEDGER_KEY)

        assert ledger.transfer("1001", "1", "2", 3) == 0
        assert backend.raw(LEDGER_KEY) == before

    @pytest.mark.parametrize(
        "amount",
        [1, 2.5, 7, 10, 11, 1000],
    )
    def test_conservation(self, ledger, amount):
        ledger.set("1001", "1", 10)
        ledger.set("1001", "2", 5)
        ledger.set("1001", "L1", 0.5)
        before = ledger.total_for_item("1001")

        ledger.transfer("1001", "1", "L1", amount)

        assert math.isclose(ledger.total_for_item("1001"), before)

    def test_transfer_to_same_storage_keeps_quantity(self, ledger):
        ledger.set("1001", "1", 5)
        ledger.transfer("1001", "1", "1", 3)
        assert ledger.get("1001", "1") == 5

    def test_other_items_untouched(self, ledger):
        ledger.set("1001", "1", 5)
        ledger.set("1002", "1", 7)
        ledger.transfer("1001", "1", "2", 5)
        assert ledger.get("1002", "1") == 7


class TestImport:
    """Bulk import for one storage."""

    def test_example_scenario(self, ledger, backend):
        ledger.import_for_storage("1", [
            {"item_id": "9", "quantity": 3},
            {"id": "10", "qty": -5},
        ])

        assert ledger.get("9", "1") == 3
        assert ledger.get("10", "1") == 0
        assert "10" not in backend.load(LEDGER_KEY)

    def test_flat_mapping(self, ledger):
        applied = ledger.import_for_storage("L1", {"1001": 4, "1002": "2.5"})

        assert applied == 2
        assert ledger.get("1001", "L1") == 4
        assert ledger.get("1002", "L1") == 2.5

    def test_overwrites_instead_of_adding(self, ledger):
        ledger.set("1001", "1", 10)
        ledger.import_for_storage("1", [{"item_id": 1001, "quantity": 2}])
        assert ledger.get("1001", "1") == 2

    def test_zero_quantity_removes_existing(self, ledger):
        ledger.set("1001", "1", 10)
        ledger.import_for_storage("1", {"1001": 0})
        assert ledger.get_all_for_item("1001") == {}

    def test_only_named_storage_is_touched(self, ledger):
        ledger.set("1001", "2", 10)
        ledger.import_for_storage("1", {"1001": 1})
        assert ledger.get_all_for_item("1001") == {"1": 1, "2": 10}

    def test_bad_rows_are_skipped(self, ledger):
        applied = ledger.import_for_storage("1", [
            None,
            "junk",
            42,
            {"quantity": 5},
            {"item_id": "7", "quantity": 1},
        ])

        assert applied == 1
        assert ledger.entries_for_storage("1")[0].item_id == "7"

    def test_item_id_preferred_over_id(self, ledger):
        ledger.import_for_storage("1", [{"item_id": "5", "id": "6", "quantity": 1}])
        assert ledger.get("5", "1") == 1
        assert ledger.get("6", "1") == 0

    def test_quantity_preferred_over_qty(self, ledger):
        ledger.import_for_storage("1", [{"item_id": "5", "quantity": 2, "qty": 9}])
        assert ledger.get("5", "1") == 2

    def test_non_numeric_quantity_clamps_to_zero(self, ledger):
        ledger.set("5", "1", 3)
        ledger.import_for_storage("1", [{"item_id": "5", "quantity": "abc"}])
        assert ledger.get("5", "1") == 0

    @pytest.mark.parametrize("payload", [None, [], {}, "text", 12])
    def test_empty_or_unsupported_payload_is_noop(self, ledger, payload):
        ledger.set("5", "1", 3)
        assert ledger.import_for_storage("1", payload) == 0
        assert ledger.get("5", "1") == 3


class TestClear:
    """Clearing a storage and the whole ledger."""

    def test_clear_storage(self, ledger, backend):
        ledger.set("1001", "1", 10)
        ledger.set("1001", "2", 5)
        ledger.set("1002", "1", 3)

        ledger.clear_storage("1")

        assert ledger.entries_for_storage("1") == []
        assert backend.load(LEDGER_KEY) == {"1001": {"2": 5}}

    def test_clear_storage_is_idempotent(self, ledger, backend):
        ledger.set("1001", "1", 10)
        ledger.set("1002", "2", 5)

        ledger.clear_storage("1")
        once = backend.raw(LEDGER_KEY)
        ledger.clear_storage("1")

        assert backend.raw(LEDGER_KEY) == once
        assert ledger.entries_for_storage("1") == []

    def test_clear_unknown_storage_does_not_save(self, ledger, backend):
        ledger.set("1001", "1", 10)
        backend.put_raw(LEDGER_KEY, '{"1001": {"1": 10}}')

        ledger.clear_storage("nope")

        assert backend.raw(LEDGER_KEY) == '{"1001": {"1": 10}}'

    def test_clear_all(self, ledger):
        ledger.set("1001", "1", 10)
        ledger.set("1002", "L1", 1)

        ledger.clear_all()

        assert ledger.get_all() == {}
        ledger.clear_all()


class TestPersistence:
    """State lives only in the backend."""

    def test_two_instances_share_state(self, backend):
        AllocationLedger(backend).set("1001", "1", 10)
        assert AllocationLedger(backend).get("1001", "1") == 10

    def test_malformed_state_loads_empty(self, backend):
        backend.put_raw(LEDGER_KEY, "[1, 2, 3]")
        ledger = AllocationLedger(backend)

        assert ledger.get_all() == {}
        ledger.set("1001", "1", 1)
        assert ledger.get_all() == {"1001": {"1": 1}}

    def test_load_drops_non_positive_values(self, backend):
        backend.save(LEDGER_KEY, {"1001": {"1": 0, "2": -3, "3": 4}, "1002": {"1": 0}, "1003": "x"})
        ledger = AllocationLedger(backend)

        assert ledger.get_all() == {"1001": {"3": 4}}
