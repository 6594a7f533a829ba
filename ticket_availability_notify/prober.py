"""
Availability probing for event pages.
"""
import logging
import re
from typing import Optional, Protocol, Sequence

import httpx
from bs4 import BeautifulSoup

from .models import Availability, MonitoredItem, ProberConfig

logger = logging.getLogger(__name__)


class PageClassifier(Protocol):
    """Decides from raw markup whether tickets can be booked."""

    def classify(self, markup: str) -> bool:
        ...


class BookingLinkClassifier:
    """Looks for a "book now" style link pointing at a booking path."""

    def __init__(
        self,
        booking_path: str = "/book",
        available_markers: Sequence[str] = ("book now", "buy tickets", "book tickets"),
        sold_out_marker: str = "sold out",
    ):
        self.booking_path = booking_path
        self.available_pattern = re.compile(
            "|".join(re.escape(m) for m in available_markers), re.I
        )
        self.sold_out_pattern = re.compile(re.escape(sold_out_marker), re.I)

    def classify(self, markup: str) -> bool:
        soup = BeautifulSoup(markup, "html.parser")
        for link in soup.find_all("a", href=True):
            if self.booking_path not in link["href"]:
                continue
            text = link.get_text(" ", strip=True)
            if self.sold_out_pattern.search(text):
                continue
            if self.available_pattern.search(text):
                return True
        return False


class TextMarkerClassifier:
    """Reads an availability element and checks it is not marked sold out."""

    def __init__(self, selector: str = ".ticket-availability", sold_out_marker: str = "sold out"):
        self.selector = selector
        self.sold_out_pattern = re.compile(re.escape(sold_out_marker), re.I)

    def classify(self, markup: str) -> bool:
        soup = BeautifulSoup(markup, "html.parser")
        text = " ".join(el.get_text(" ", strip=True) for el in soup.select(self.selector))
        return not self.sold_out_pattern.search(text)


def create_classifier(config: ProberConfig) -> PageClassifier:
    """Build the page classifier named in the config."""
    if config.classifier == "text-marker":
        return TextMarkerClassifier(config.availability_selector, config.sold_out_marker)
    if config.classifier == "booking-link":
        return BookingLinkClassifier(
            config.booking_path, config.available_markers, config.sold_out_marker
        )
    raise ValueError(f"Unknown classifier: {config.classifier}")


class AvailabilityProber:
    """Fetches event pages and classifies ticket availability."""

    def __init__(self, config: ProberConfig, classifier: Optional[PageClassifier] = None):
        self.config = config
        self.classifier = classifier or create_classifier(config)
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            timeout=self.config.timeout,
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def check(self, item: MonitoredItem) -> Availability:
        """Probe one item, returning UNKNOWN when the page could not be read."""
        if self.client is None:
            raise RuntimeError("Prober not initialized")

        logger.info(f"Checking availability for: {item.name}")
        try:
            response = await self.client.get(item.location)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error fetching {item.name} ({item.location}): {e}")
            return Availability.UNKNOWN

        try:
            available = self.classifier.classify(response.text)
        except Exception as e:
            logger.error(f"Could not classify page for {item.name}: {e}", exc_info=True)
            return Availability.UNKNOWN

        return Availability.AVAILABLE if available else Availability.SOLD_OUT

    async def probe(self, item: MonitoredItem) -> bool:
        """Return True only when tickets were confirmed available."""
        try:
            return await self.check(item) is Availability.AVAILABLE
        except Exception as e:
            logger.error(f"Error checking {item.name}: {e}", exc_info=True)
            return False
