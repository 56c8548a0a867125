"""
Allocation Reconciliation Tests

The ERP reports how many units of each item exist; the ledger records
where they sit. Reconciliation flags items whose allocated total differs.
"""

import pytest

from connectors.rivhit import RivhitItem, mock_response
from core.inventory import AllocationLedger
from core.storage.backends import InMemoryStateBackend
from reconciliation import AllocationStatus, reconcile_allocations, reconcile_item
from reconciliation.engine import CheckStatus


@pytest.fixture
def ledger():
    return AllocationLedger(InMemoryStateBackend())


def _item(item_id, quantity, name=""):
    return {"item_id": item_id, "item_name": name, "quantity": quantity}


class TestReconcileItem:

    def test_matched(self, ledger):
        ledger.set("1001", "1", 20)
        ledger.set("1001", "L1", 5)

        result = reconcile_item(ledger, RivhitItem(item_id=1001, quantity=25))

        assert result.status == AllocationStatus.MATCHED
        assert result.allocated_quantity == 25
        assert result.variance == 0
        assert result.allocations == {"1": 20, "L1": 5}

    def test_variance(self, ledger):
        ledger.set("1002", "1", 6)

        result = reconcile_item(ledger, RivhitItem(item_id=1002, quantity=4))

        assert result.status == AllocationStatus.VARIANCE
        assert result.variance == 2

    def test_unallocated(self, ledger):
        result = reconcile_item(ledger, RivhitItem(item_id=1003, quantity=4))
        assert result.status == AllocationStatus.UNALLOCATED
        assert result.variance == -4

    def test_nothing_on_either_side_matches(self, ledger):
        result = reconcile_item(ledger, RivhitItem(item_id=1004, quantity=0))
        assert result.status == AllocationStatus.MATCHED

    def test_fractional_quantities(self, ledger):
        ledger.set("1005", "1", 0.1)
        ledger.set("1005", "2", 0.2)

        result = reconcile_item(ledger, RivhitItem(item_id="1005", quantity=0.3))

        assert result.status == AllocationStatus.MATCHED


class TestReconcileAllocations:

    def test_report(self, ledger):
        ledger.set("1001", "1", 25)
        ledger.set("1002", "1", 1)
        ledger.set("9999", "L1", 3)

        report = reconcile_allocations(ledger, [
            _item(1001, 25, "Shirt"),
            _item(1002, 4, "Jeans"),
            _item(1003, 2, "Hat"),
        ])

        assert report.status == CheckStatus.WARN
        assert [r.status for r in report.items] == [
            AllocationStatus.MATCHED,
            AllocationStatus.VARIANCE,
            AllocationStatus.UNALLOCATED,
        ]
        assert report.unknown_item_ids == ["9999"]
        assert report.summary == {
            "total_items": 3,
            "matched": 1,
            "variance": 1,
            "unallocated": 1,
            "unknown": 1,
        }

    def test_all_matched_passes(self, ledger):
        ledger.set("1001", "1", 25)
        report = reconcile_allocations(ledger, [_item(1001, 25)])
        assert report.status == CheckStatus.PASS

    def test_rows_without_item_id_are_skipped(self, ledger):
        report = reconcile_allocations(ledger, [{"item_name": "?"}, "junk"])
        assert report.items == []

    def test_does_not_modify_ledger(self, ledger):
        ledger.set("1001", "1", 3)
        before = ledger.get_all()

        reconcile_allocations(ledger, [_item(1001, 25)])

        assert ledger.get_all() == before

    def test_against_mock_item_list(self, ledger):
        ledger.set(1001, 1, 25)
        items = mock_response("Item.List").data["item_list"]

        report = reconcile_allocations(ledger, items)

        by_id = {r.item_id: r for r in report.items}
        assert by_id["1001"].status == AllocationStatus.MATCHED
        assert by_id["1002"].status == AllocationStatus.UNALLOCATED
        assert by_id["1002"].item_name == "מכנסי ג׳ינס"


class TestServerRowEdgeCases:
    """Item.List rows with negative or missing values."""

    def test_negative_server_quantity_is_flagged(self, ledger):
        report = reconcile_allocations(ledger, [_item(1001, -5)])

        row = report.items[0]
        assert row.server_quantity == -5
        assert row.status == AllocationStatus.VARIANCE
        assert row.variance == 5
        assert report.status == CheckStatus.WARN

    def test_negative_server_quantity_against_allocation(self, ledger):
        ledger.set("1001", "1", 2)
        result = reconcile_item(ledger, RivhitItem(item_id=1001, quantity=-2))
        assert result.status == AllocationStatus.VARIANCE
        assert result.variance == 4

    def test_null_name_and_quantity(self, ledger):
        report = reconcile_allocations(ledger, [
            {"item_id": 1001, "item_name": None, "quantity": None},
        ])

        row = report.items[0]
        assert row.item_name == ""
        assert row.server_quantity == 0
        assert row.status == AllocationStatus.MATCHED
        assert report.status == CheckStatus.PASS

    def test_null_quantity_with_allocation_is_variance(self, ledger):
        ledger.set("1001", "L1", 3)
        report = reconcile_allocations(ledger, [{"item_id": "1001", "quantity": None}])
        assert report.items[0].status == AllocationStatus.VARIANCE

    def test_numeric_text_quantity(self, ledger):
        ledger.set("1001", "1", 4)
        report = reconcile_allocations(ledger, [{"item_id": 1001, "quantity": " 4 "}])
        assert report.items[0].status == AllocationStatus.MATCHED
