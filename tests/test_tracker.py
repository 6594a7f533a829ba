"""Tests for the transition tracker."""
from datetime import datetime, timezone

import pytest

from ticket_availability_notify.models import MonitoredItem
from ticket_availability_notify.tracker import evaluate, mark_checked

NOW = datetime(2025, 4, 18, 12, 0, tzinfo=timezone.utc)


def make_item(was_available):
    return MonitoredItem(
        name="Test Concert",
        location="https://example.com/concert",
        was_available=was_available,
    )


@pytest.mark.parametrize(
    "was_available, probed, should_notify",
    [
        (False, True, True),
        (False, False, False),
        (True, True, False),
        (True, False, False),
    ],
)
def test_transitions(was_available, probed, should_notify):
    result = evaluate(make_item(was_available), probed, now=NOW)

    assert result.should_notify is should_notify
    assert result.item.was_available is probed
    assert result.item.last_checked_at == NOW


def test_evaluate_does_not_mutate_input():
    item = make_item(False)

    result = evaluate(item, True, now=NOW)

    assert item.was_available is False
    assert item.last_checked_at is None
    assert result.item is not item


def test_evaluate_defaults_to_current_utc_time():
    result = evaluate(make_item(False), False)

    assert result.item.last_checked_at.tzinfo is not None


def test_rearms_after_going_back_to_sold_out():
    """A second sold-out -> available edge notifies again."""
    first = evaluate(make_item(False), True, now=NOW)
    gone = evaluate(first.item, False, now=NOW)
    back = evaluate(gone.item, True, now=NOW)

    assert first.should_notify is True
    assert gone.should_notify is False
    assert back.should_notify is True


@pytest.mark.parametrize("was_available", [False, True])
def test_mark_checked_keeps_availability(was_available):
    item = make_item(was_available)

    result = mark_checked(item, now=NOW)

    assert result.should_notify is False
    assert result.item.was_available is was_available
    assert result.item.last_checked_at == NOW
    assert item.last_checked_at is None
