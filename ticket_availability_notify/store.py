"""
Persistence for the list of monitored items.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import MonitoredItem

logger = logging.getLogger(__name__)

DEFAULT_ITEM = MonitoredItem(
    name="Example Concert",
    location="https://wigmore-hall.org.uk/whats-on/example-concert",
)

TRUE_STRINGS = {"true", "1", "yes"}
FALSE_STRINGS = {"false", "0", "no", ""}


class StoredItem(BaseModel):
    """On-disk representation of a monitored item."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    url: str
    date: Optional[str] = None
    last_checked: Optional[datetime] = Field(None, alias="lastChecked")
    was_available: bool = Field(False, alias="wasAvailable")

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        """Keep non-string dates as text so the record is never rejected."""
        if v is None or isinstance(v, str):
            return v
        logger.warning(f"Non-string date value {v!r}; keeping it as text")
        return str(v)

    @field_validator("was_available", mode="before")
    @classmethod
    def default_was_available(cls, v):
        """Treat a null or unrecognised flag as never available."""
        if v is None:
            return False
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float)) and v in (0, 1):
            return bool(v)
        if isinstance(v, str) and v.strip().lower() in TRUE_STRINGS | FALSE_STRINGS:
            return v.strip().lower() in TRUE_STRINGS
        logger.warning(f"Ignoring malformed wasAvailable value: {v!r}")
        return False

    @field_validator("last_checked", mode="before")
    @classmethod
    def parse_last_checked(cls, v):
        """Drop timestamps that cannot be parsed instead of rejecting the record."""
        if v is None or isinstance(v, datetime):
            return v
        try:
            return datetime.fromisoformat(str(v).replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Ignoring malformed lastChecked value: {v!r}")
            return None

    def to_item(self) -> MonitoredItem:
        """Convert to a MonitoredItem, keeping the raw date text."""
        return MonitoredItem(
            name=self.name,
            location=self.url,
            scheduled_date=parse_scheduled_date(self.date, self.name),
            last_checked_at=self.last_checked,
            was_available=self.was_available,
            date_text=self.date,
        )

    @classmethod
    def from_item(cls, item: MonitoredItem) -> "StoredItem":
        if item.scheduled_date is not None:
            date_text = item.scheduled_date.isoformat()
        else:
            date_text = item.date_text
        return cls(
            name=item.name,
            url=item.location,
            date=date_text,
            last_checked=item.last_checked_at,
            was_available=item.was_available,
        )


def parse_scheduled_date(value: Optional[str], name: str = "") -> Optional[date]:
    """Parse a YYYY-MM-DD string; malformed values are logged and yield None."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        logger.warning(
            f"Invalid date {value!r} for {name or 'item'}; treating it as undated"
        )
        return None


def items_from_records(records: Iterable[Any]) -> Tuple[List[MonitoredItem], List[Any]]:
    """Validate raw records, returning usable items and the raw records skipped."""
    items: List[MonitoredItem] = []
    skipped: List[Any] = []
    for index, record in enumerate(records):
        try:
            items.append(StoredItem.model_validate(record).to_item())
        except ValidationError as e:
            skipped.append(record)
            logger.warning(f"Skipping invalid record #{index}: {e.error_count()} error(s)")
            logger.debug(f"Validation details for record #{index}: {e}")
    return items, skipped


def items_to_records(items: Iterable[MonitoredItem]) -> List[dict]:
    return [
        StoredItem.from_item(item).model_dump(by_alias=True, mode="json")
        for item in items
    ]


class ItemStore(ABC):
    """Base class for item stores."""

    def load(self) -> List[MonitoredItem]:
        """Load items, seeding and persisting the placeholder when nothing is stored."""
        items = self._read()
        if items is None:
            logger.info("No monitored items found, creating a default entry")
            items = [replace(DEFAULT_ITEM)]
            try:
                self.save(items)
            except OSError as e:
                logger.error(f"Could not persist the default item: {e}")
        return items

    @abstractmethod
    def _read(self) -> Optional[List[MonitoredItem]]:
        """Return the persisted items, or None when nothing usable is stored."""

    @abstractmethod
    def save(self, items: List[MonitoredItem]) -> None:
        """Persist the given items."""


class InMemoryItemStore(ItemStore):
    """Store that keeps items in process memory."""

    def __init__(self, items: Optional[Iterable[MonitoredItem]] = None):
        self.items: List[MonitoredItem] = [replace(i) for i in items or []]
        self.save_count = 0

    def _read(self) -> Optional[List[MonitoredItem]]:
        if not self.items:
            return None
        return [replace(i) for i in self.items]

    def save(self, items: List[MonitoredItem]) -> None:
        self.items = [replace(i) for i in items]
        self.save_count += 1


class JsonFileItemStore(ItemStore):
    """Store backed by a JSON file holding a list of records."""

    def __init__(self, path):
        self.path = Path(path)
        # Records that failed validation on the last read; written back untouched
        self.skipped_records: List[Any] = []

    def _read(self) -> Optional[List[MonitoredItem]]:
        self.skipped_records = []
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read {self.path}: {e}")
            return None

        if not isinstance(data, list):
            logger.error(f"Expected a list of items in {self.path}, got {type(data).__name__}")
            return None

        if not data:
            return None

        items, self.skipped_records = items_from_records(data)
        return items

    def save(self, items: List[MonitoredItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items_to_records(items) + self.skipped_records, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug(f"Saved {len(items)} item(s) to {self.path}")
