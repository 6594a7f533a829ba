"""Ticket Availability Notifier

Watches sold-out event pages and sends a notification when tickets come back.
"""
import asyncio
import logging
import sys


def main() -> int:
    """Main entry point that runs the CLI with proper asyncio setup."""
    try:
        # Import here to avoid circular imports
        from ticket_availability_notify.cli import async_main

        return asyncio.run(async_main())

    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
