"""Command-line interface for the Ticket Availability Notifier."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from ticket_availability_notify import __version__
from ticket_availability_notify.app import TicketMonitor, load_config
from ticket_availability_notify.config import VALID_CHANNELS
from ticket_availability_notify.models import AppConfig


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: List of command line arguments. If None, uses sys.argv[1:].

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Watch sold-out event pages and get notified when tickets come back.",
    )

    store_group = parser.add_argument_group('Store')
    store_group.add_argument(
        '--store',
        type=str,
        help='JSON file holding the monitored items (default: STORE_PATH or concerts.json)',
    )

    schedule_group = parser.add_argument_group('Schedule')
    schedule_group.add_argument(
        '--cron',
        type=str,
        help='cron expression for the standard check (default: "0 * * * *")',
    )
    schedule_group.add_argument(
        '--priority-interval',
        type=int,
        help='minutes between checks of items happening within the priority window',
    )
    schedule_group.add_argument(
        '--once',
        action='store_true',
        help='run a single check of all items and exit',
    )

    notification_group = parser.add_argument_group('Notification Configuration')
    notification_group.add_argument(
        '--channel',
        type=str,
        choices=sorted(VALID_CHANNELS),
        help='notification channel',
    )

    log_group = parser.add_argument_group('Logging')
    log_group.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level',
    )
    log_group.add_argument(
        '--verbose', '-v',
        action='store_const',
        const='DEBUG',
        dest='log_level',
        help='Enable verbose output (same as --log-level DEBUG)',
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
        help='show version and exit',
    )

    if args is None:
        args = sys.argv[1:]
    return parser.parse_args(args)


def apply_args(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Override configuration values with the ones given on the command line."""
    if args.store:
        config.store_path = args.store
    if args.cron:
        config.schedule.check_cron = args.cron
    if args.priority_interval:
        config.schedule.priority_interval_min = args.priority_interval
    if args.channel:
        config.notification.channel = args.channel
    if args.log_level:
        config.log_level = args.log_level
    return config


def configure_logging(level: str = 'INFO') -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as a string (e.g., 'INFO', 'DEBUG').
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Third-party request logging is noisy at INFO
    for name in ('httpx', 'apscheduler', 'twilio'):
        logging.getLogger(name).setLevel(logging.WARNING)


async def async_main(argv: Optional[List[str]] = None) -> int:
    """Async entry point for the CLI."""
    args = parse_args(argv)

    try:
        config = apply_args(load_config(), args)
    except ValidationError as e:
        configure_logging()
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        return 1

    configure_logging(level=config.log_level)
    logger = logging.getLogger(__name__)

    try:
        monitor = TicketMonitor(config)
        await monitor.run(once=args.once)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")

    return 0


def main() -> int:
    """Main entry point for CLI."""
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        print("\n👋 Operation cancelled by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
