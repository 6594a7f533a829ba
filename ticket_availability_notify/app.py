"""
Main application module for the Ticket Availability Notifier.
"""
import asyncio
import logging
import signal
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from dotenv import load_dotenv

from .config import Settings
from .models import (
    AppConfig, Availability, BatchSummary, MonitoredItem, NotificationConfig, ProberConfig,
    ScheduleConfig,
)
from .notifications import NotificationManager, create_notification_manager
from .prober import AvailabilityProber
from .store import ItemStore, JsonFileItemStore
from .tracker import evaluate, mark_checked

logger = logging.getLogger(__name__)

ItemFilter = Callable[[List[MonitoredItem], date], List[MonitoredItem]]


def active_items(items: List[MonitoredItem], today: date) -> List[MonitoredItem]:
    """Items that are undated or not yet past."""
    return [i for i in items if i.scheduled_date is None or i.scheduled_date >= today]


def priority_items(
    items: List[MonitoredItem], today: date, window_days: int = 3
) -> List[MonitoredItem]:
    """Items dated between today and ``window_days`` from today, inclusive."""
    return [
        i for i in items
        if i.scheduled_date is not None
        and 0 <= (i.scheduled_date - today).days <= window_days
    ]


def sort_by_date(items: List[MonitoredItem]) -> List[MonitoredItem]:
    """Sort ascending by date; undated items go last in their original order."""
    return sorted(items, key=lambda i: (i.scheduled_date is None, i.scheduled_date or date.min))


class TicketMonitor:
    """Checks monitored items on a schedule and notifies on availability."""

    def __init__(
        self,
        config: AppConfig,
        store: Optional[ItemStore] = None,
        notifier: Optional[NotificationManager] = None,
        prober_factory: Optional[Callable[[], AvailabilityProber]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize with application configuration and collaborators."""
        self.config = config
        self.store = store or JsonFileItemStore(config.store_path)
        self.notifier = notifier or create_notification_manager(config.notification)
        self.prober_factory = prober_factory or (lambda: AvailabilityProber(config.prober))
        self.clock = clock
        self.shutdown_event = asyncio.Event()
        self.batch_count = 0
        self._lock = asyncio.Lock()

    def _handle_shutdown(self, signum) -> None:
        """Handle shutdown signals gracefully."""
        logger.warning(f"Received signal {signum}, initiating graceful shutdown...")
        self.shutdown_event.set()

    async def check_all(self) -> BatchSummary:
        """Check every item that is not past its date."""
        return await self._run_batch("standard", active_items)

    async def check_priority(self) -> BatchSummary:
        """Check only the items happening within the priority window."""
        window = self.config.schedule.priority_window_days
        return await self._run_batch(
            "priority", lambda items, today: priority_items(items, today, window)
        )

    async def _run_batch(self, label: str, select: ItemFilter) -> BatchSummary:
        # One batch at a time, so store read-modify-write cycles never interleave
        async with self._lock:
            self.batch_count += 1
            now = self.clock()
            logger.info(f"🔄 Running {label} check #{self.batch_count} at {now.strftime('%Y-%m-%d %H:%M:%S')}")

            items = self.store.load()
            positions = {id(item): index for index, item in enumerate(items)}
            selected = sort_by_date(select(items, now.date()))
            summary = BatchSummary()

            if not selected:
                logger.info(f"No items due for the {label} check")

            try:
                async with self.prober_factory() as prober:
                    for item in selected:
                        try:
                            updated = await self._check_item(prober, item, summary)
                        except Exception as e:
                            summary.failed += 1
                            logger.error(f"Error processing {item.name}: {e}", exc_info=True)
                            continue
                        items[positions[id(item)]] = updated
            finally:
                try:
                    self.store.save(items)
                except Exception as e:
                    logger.error(f"Failed to save monitored items: {e}", exc_info=True)

            logger.info(
                f"✅ {label.capitalize()} check done: {summary.checked} checked, "
                f"{summary.available} available, {summary.notified} notified, "
                f"{summary.failed} failed"
            )
            return summary

    async def _check_item(
        self, prober: AvailabilityProber, item: MonitoredItem, summary: BatchSummary
    ) -> MonitoredItem:
        availability = await prober.check(item)
        checked_at = self.clock().astimezone(timezone.utc)
        summary.checked += 1

        if availability is Availability.UNKNOWN:
            # A failed check is not a state change
            summary.failed += 1
            logger.warning(f"{item.name}: check failed, keeping last known state")
            return mark_checked(item, checked_at).item

        available = availability is Availability.AVAILABLE
        result = evaluate(item, available, now=checked_at)

        if available:
            summary.available += 1
            logger.info(f"{item.name}: AVAILABLE! 🎉")
        else:
            logger.info(f"{item.name}: Still sold out")

        if result.should_notify:
            # The transition stands even if delivery fails
            if await self.notifier.notify(result.item):
                summary.notified += 1

        return result.item

    def _log_monitored_items(self) -> None:
        items = self.store.load()
        logger.info(f"👀 Monitoring {len(items)} item(s):")
        for item in items:
            when = item.scheduled_date.isoformat() if item.scheduled_date else "no date"
            logger.info(f"- {item.name} ({when}): {item.location}")

    def start_scheduler(self) -> AsyncIOScheduler:
        """Register the standard and priority timers and start them."""
        schedule = self.config.schedule
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self.check_all,
            CronTrigger.from_crontab(schedule.check_cron),
            id="standard-check",
            max_instances=1,
            coalesce=True,
        )
        scheduler.add_job(
            self.check_priority,
            "interval",
            minutes=schedule.priority_interval_min,
            id="priority-check",
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        logger.info(
            f"Scheduler started: standard check '{schedule.check_cron}', "
            f"priority check every {schedule.priority_interval_min} minutes"
        )
        return scheduler

    async def run(self, once: bool = False) -> None:
        """Run the initial check, then keep checking until shutdown."""
        logger.info("🚀 Starting Ticket Availability Notifier")
        self._log_monitored_items()

        if once:
            await self.check_all()
            return

        loop = asyncio.get_running_loop()
        handled = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._handle_shutdown, sig)
                handled.append(sig)
            except (NotImplementedError, RuntimeError):
                logger.debug(f"Signal handler for {sig} not supported here")

        scheduler = None
        try:
            scheduler = self.start_scheduler()
            await self.check_all()
            await self.shutdown_event.wait()
        finally:
            if scheduler is not None:
                scheduler.shutdown(wait=False)
            for sig in handled:
                loop.remove_signal_handler(sig)
            logger.info("✅ Ticket monitoring stopped")


def create_default_config() -> AppConfig:
    """Create a default configuration."""
    return AppConfig(
        store_path="concerts.json",
        log_level="INFO",
        prober=ProberConfig(),
        notification=NotificationConfig(channel="whatsapp"),
        schedule=ScheduleConfig(
            check_cron="0 * * * *",
            priority_interval_min=15,
            priority_window_days=3
        )
    )


def config_from_settings(settings: Settings) -> AppConfig:
    """Map validated settings onto the application config."""
    config = create_default_config()
    config.store_path = settings.STORE_PATH
    config.log_level = settings.LOG_LEVEL

    config.schedule.check_cron = settings.CHECK_CRON
    config.schedule.priority_interval_min = settings.PRIORITY_INTERVAL_MIN
    config.schedule.priority_window_days = settings.PRIORITY_WINDOW_DAYS

    config.prober.timeout = settings.REQUEST_TIMEOUT
    if settings.USER_AGENT:
        config.prober.user_agent = settings.USER_AGENT
    config.prober.classifier = settings.CLASSIFIER
    config.prober.booking_path = settings.BOOKING_PATH

    notification = config.notification
    notification.channel = settings.NOTIFY_CHANNEL
    notification.recipient = settings.NOTIFY_TO
    notification.sender = settings.NOTIFY_FROM
    notification.twilio_account_sid = settings.TWILIO_ACCOUNT_SID
    notification.twilio_auth_token = settings.TWILIO_AUTH_TOKEN
    notification.smtp_host = settings.SMTP_HOST
    notification.smtp_port = settings.SMTP_PORT
    notification.smtp_username = settings.SMTP_USERNAME
    notification.smtp_password = settings.SMTP_PASSWORD
    notification.ntfy_topic = settings.NTFY_TOPIC
    return config


def load_config(env_file: Optional[str] = ".env") -> AppConfig:
    """Load configuration from environment variables and an optional .env file."""
    if env_file:
        load_dotenv(dotenv_path=env_file)
    return config_from_settings(Settings(_env_file=env_file))
