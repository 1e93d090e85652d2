import math
from datetime import datetime

from stock_checker.domain.classifier import ExpectationClassifier
from stock_checker.domain.models import Tier
from stock_checker.domain.services import StockReconciler, count_matched_keys, sort_rows

from helpers import KEY, make_movement, make_snapshot

AS_OF = datetime(2024, 6, 30)


def test_snapshot_row_joined_with_replay():
    movements = [
        make_movement(10, "101", datetime(2024, 6, 25)),
        make_movement(-3, "601", datetime(2024, 6, 26)),
        make_movement(2, "701", datetime(2024, 6, 1)),
    ]
    report = StockReconciler().reconcile(movements, [make_snapshot(9)], as_of=AS_OF)

    row = report.rows[0]
    assert row.key == KEY
    assert row.expected == 9.0
    assert row.delta == 0.0
    assert row.last_receipt.quantity == 10
    assert row.last_sale.movement_type == "601"
    assert row.last_count.posted_at == datetime(2024, 6, 1)
    assert row.days_since_receipt == 5.0
    assert row.loss_sum == 0.0
    assert row.tier is Tier.HIGH
    assert report.summary.matched_keys == 1
    assert report.summary.total_movements == 3


def test_snapshot_without_movements_gets_defaults():
    report = StockReconciler().reconcile([], [make_snapshot(4)], as_of=AS_OF)

    row = report.rows[0]
    assert row.expected == 0.0
    assert row.delta == 4.0
    assert row.last_count is None and row.last_sale is None and row.last_receipt is None
    assert math.isnan(row.days_since_count)
    assert math.isnan(row.days_since_receipt)
    assert row.tier is Tier.MEDIUM
    assert report.summary.matched_keys == 0


def test_log_only_keys_excluded_but_counted_for_overlap():
    movements = [make_movement(5), make_movement(5, material="000999")]
    snapshot = [make_snapshot(5), make_snapshot(1, material="000777")]

    report = StockReconciler().reconcile(movements, snapshot, as_of=AS_OF)

    assert {row.key for row in report.rows} == {s.key for s in snapshot}
    assert report.summary.matched_keys == 1
    assert count_matched_keys(movements, snapshot) == 1


def test_sort_order_stock_first_then_lowest_tier_then_quantity():
    classifier = ExpectationClassifier()
    snapshot = [
        make_snapshot(0, material="A"),
        make_snapshot(50, material="B"),
        make_snapshot(30, material="C"),
        make_snapshot(80, material="D"),
        make_snapshot(-2, material="E"),
    ]
    movements = [
        make_movement(50, "101", datetime(2024, 6, 25), material="B"),
        make_movement(1, "701", datetime(2024, 6, 20), material="B"),
        make_movement(50, "101", datetime(2024, 6, 25), material="C"),
    ]

    report = StockReconciler(classifier).reconcile(movements, snapshot, as_of=AS_OF)

    assert [row.material for row in report.rows] == ["D", "C", "B", "A", "E"]
    assert [row.tier for row in report.rows] == [
        Tier.LOW,
        Tier.LOW,
        Tier.HIGH,
        Tier.NOT_APPLICABLE,
        Tier.NOT_APPLICABLE,
    ]
    assert report.summary.count(Tier.NOT_APPLICABLE) == 2
    assert report.summary.count(Tier.MEDIUM) == 0


def test_sort_rows_is_stable_for_equal_rows():
    report = StockReconciler().reconcile([], [make_snapshot(3, material="X"), make_snapshot(3, material="Y")], as_of=AS_OF)
    assert [row.material for row in sort_rows(report.rows)] == ["X", "Y"]
