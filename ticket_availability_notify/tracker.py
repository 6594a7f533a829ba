"""Sold-out/available transition tracking."""
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from .models import MonitoredItem, TransitionResult


def evaluate(
    item: MonitoredItem,
    newly_available: bool,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """Compare a probe result with the item's last known state.

    Only a sold-out -> available edge asks for a notification. Going back to
    sold out re-arms the item silently. The returned item is a copy with
    ``last_checked_at`` set to ``now``.
    """
    checked_at = now or datetime.now(timezone.utc)
    should_notify = newly_available and not item.was_available
    updated = replace(item, was_available=newly_available, last_checked_at=checked_at)
    return TransitionResult(should_notify=should_notify, item=updated)


def mark_checked(item: MonitoredItem, now: Optional[datetime] = None) -> TransitionResult:
    """Record a check whose outcome is unknown; availability is left as it was."""
    checked_at = now or datetime.now(timezone.utc)
    return TransitionResult(should_notify=False, item=replace(item, last_checked_at=checked_at))
