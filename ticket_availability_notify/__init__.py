"""Ticket Availability Notifier package.

This package watches sold-out event pages on a schedule and sends a
notification when tickets become available again.
"""

__version__ = "0.1.0"

# Import key components to make them available at the package level
from .app import TicketMonitor, load_config
from .models import AppConfig, MonitoredItem, Availability, NotificationConfig, ProberConfig
from .notifications import NotificationManager
from .prober import AvailabilityProber, BookingLinkClassifier, TextMarkerClassifier
from .store import ItemStore, InMemoryItemStore, JsonFileItemStore
from .tracker import evaluate

__all__ = [
    'TicketMonitor',
    'load_config',
    'AppConfig',
    'MonitoredItem',
    'Availability',
    'NotificationConfig',
    'ProberConfig',
    'NotificationManager',
    'AvailabilityProber',
    'BookingLinkClassifier',
    'TextMarkerClassifier',
    'ItemStore',
    'InMemoryItemStore',
    'JsonFileItemStore',
    'evaluate',
]
