import math
from datetime import datetime

from stock_checker.domain.replay import (
    COUNT,
    RECEIPT,
    SALE,
    MovementReplay,
    days_since,
    expected_on_hand,
    last_events,
    loss_sums,
)

from helpers import KEY, make_movement


def test_expected_on_hand_sums_every_movement():
    records = [make_movement(10), make_movement(-3, "601"), make_movement(2, "701")]
    assert expected_on_hand(records) == {KEY: 9.0}


def test_last_event_picks_latest_matching_timestamp():
    records = [
        make_movement(5, "101", datetime(2024, 1, 1), text="old"),
        make_movement(7, "101", datetime(2024, 2, 1), text="new"),
        make_movement(-1, "601", datetime(2024, 3, 1)),
    ]

    events = last_events(records, RECEIPT)

    assert events[KEY].quantity == 7
    assert events[KEY].movement_type_text == "new"
    assert events[KEY].posted_at == datetime(2024, 2, 1)
    assert events[KEY].category == "receipt"


def test_last_event_first_seen_wins_ties():
    moment = datetime(2024, 1, 1, 9, 0)
    records = [
        make_movement(-1, "251", moment, text="first"),
        make_movement(-2, "601", moment, text="second"),
    ]
    assert last_events(records, SALE)[KEY].movement_type_text == "first"


def test_last_event_ignores_undated_and_absent_keys():
    records = [make_movement(4, "701", None)]
    assert last_events(records, COUNT) == {}
    assert last_events(records, RECEIPT) == {}


def test_loss_sums_present_for_every_key():
    records = [
        make_movement(10),
        make_movement(-2, "702"),
        make_movement(-1, "702"),
        make_movement(3, "701"),
        make_movement(5, material="000999"),
    ]
    assert loss_sums(records) == {KEY: -3.0, "1000|000999|0001": 0.0}


def test_days_since():
    now = datetime(2024, 1, 11, 12, 0)
    assert days_since(datetime(2024, 1, 1), now) == 10.5
    assert math.isnan(days_since(None, now))


def test_movement_replay_lookups_default_for_unknown_keys():
    replay = MovementReplay([make_movement(10), make_movement(-4, "702")])

    assert replay.expected_for(KEY) == 6.0
    assert replay.loss_for(KEY) == -4.0
    assert replay.expected_for("x|y|z") == 0.0
    assert replay.loss_for("x|y|z") == 0.0
    events = replay.events_for(KEY)
    assert events["count"].movement_type == "702"
    assert events["receipt"].quantity == 10
    assert events["sale"] is None
