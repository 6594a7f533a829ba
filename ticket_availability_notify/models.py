"""Data models and types for the Ticket Availability Notifier."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class Availability(Enum):
    """Outcome of a single probe."""
    AVAILABLE = "available"
    SOLD_OUT = "sold_out"
    UNKNOWN = "unknown"  # probe failed


@dataclass
class MonitoredItem:
    """An event page watched for returned tickets."""
    name: str
    location: str
    scheduled_date: Optional[date] = None
    last_checked_at: Optional[datetime] = None
    was_available: bool = False
    date_text: Optional[str] = None


@dataclass
class TransitionResult:
    """Decision produced by the transition tracker for one probe."""
    should_notify: bool
    item: MonitoredItem


@dataclass
class Notification:
    """Represents a notification to be sent."""
    title: str
    message: str


@dataclass
class BatchSummary:
    """Counters for one batch of checks."""
    checked: int = 0
    available: int = 0
    notified: int = 0
    failed: int = 0


@dataclass
class ProberConfig:
    """Configuration for the availability prober."""
    timeout: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    classifier: str = "booking-link"  # 'booking-link' or 'text-marker'
    booking_path: str = "/book"
    available_markers: Tuple[str, ...] = ("book now", "buy tickets", "book tickets")
    sold_out_marker: str = "sold out"
    availability_selector: str = ".ticket-availability"


@dataclass
class NotificationConfig:
    """Configuration for notifications."""
    enabled: bool = True
    channel: str = "whatsapp"  # 'whatsapp', 'sms', 'email' or 'ntfy'
    recipient: Optional[str] = None
    sender: Optional[str] = None
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    ntfy_topic: Optional[str] = None


@dataclass
class ScheduleConfig:
    """Timer configuration for the monitor."""
    check_cron: str = "0 * * * *"
    priority_interval_min: int = 15
    priority_window_days: int = 3


@dataclass
class AppConfig:
    """Main application configuration."""
    store_path: str = "concerts.json"
    log_level: str = "INFO"
    prober: ProberConfig = field(default_factory=ProberConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
