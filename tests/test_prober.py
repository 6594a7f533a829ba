"""Tests for the prober module."""
import httpx
import pytest
from unittest.mock import MagicMock

from ticket_availability_notify.models import Availability, MonitoredItem, ProberConfig
from ticket_availability_notify.prober import (
    AvailabilityProber, BookingLinkClassifier, TextMarkerClassifier, create_classifier
)

AVAILABLE_PAGE = """
<html><body>
  <h1>Example Concert</h1>
  <a href="/whats-on/other">Book now for something else</a>
  <a href="/book/12345" class="btn"><span>Book now</span></a>
</body></html>
"""

SOLD_OUT_PAGE = """
<html><body>
  <h1>Example Concert</h1>
  <a href="/book/12345" class="btn">Sold out</a>
  <p>Book now for our next season!</p>
</body></html>
"""


class TestBookingLinkClassifier:
    """Tests for the BookingLinkClassifier class."""

    @pytest.fixture
    def classifier(self):
        return BookingLinkClassifier()

    def test_available_when_booking_link_says_book_now(self, classifier):
        assert classifier.classify(AVAILABLE_PAGE) is True

    def test_sold_out_when_booking_link_says_sold_out(self, classifier):
        assert classifier.classify(SOLD_OUT_PAGE) is False

    def test_ignores_links_outside_booking_path(self, classifier):
        html = '<a href="/whats-on/1">Book now</a>'
        assert classifier.classify(html) is False

    def test_sold_out_marker_wins_on_same_link(self, classifier):
        html = '<a href="/book/1">Book now - sold out</a>'
        assert classifier.classify(html) is False

    def test_any_available_link_is_enough(self, classifier):
        html = '<a href="/book/1">Sold out</a><a href="/book/2">Buy tickets</a>'
        assert classifier.classify(html) is True

    def test_marker_match_is_case_insensitive(self, classifier):
        assert classifier.classify('<a href="/book/1">BOOK NOW</a>') is True

    def test_custom_booking_path(self):
        classifier = BookingLinkClassifier(booking_path="/tickets/")
        assert classifier.classify('<a href="/tickets/7">Book now</a>') is True
        assert classifier.classify('<a href="/book/7">Book now</a>') is False

    def test_empty_page(self, classifier):
        assert classifier.classify("") is False


class TestTextMarkerClassifier:
    """Tests for the TextMarkerClassifier class."""

    def test_sold_out(self):
        html = '<div class="ticket-availability">Sold out</div>'
        assert TextMarkerClassifier().classify(html) is False

    def test_available(self):
        html = '<div class="ticket-availability">Tickets from £15</div>'
        assert TextMarkerClassifier().classify(html) is True


def test_create_classifier():
    assert isinstance(create_classifier(ProberConfig()), BookingLinkClassifier)
    assert isinstance(create_classifier(ProberConfig(classifier="text-marker")), TextMarkerClassifier)
    with pytest.raises(ValueError):
        create_classifier(ProberConfig(classifier="magic"))


class TestAvailabilityProber:
    """Tests for the AvailabilityProber class."""

    @pytest.fixture
    def item(self):
        return MonitoredItem(name="Example Concert", location="https://example.com/concert")

    def make_prober(self, handler, classifier=None):
        prober = AvailabilityProber(ProberConfig(), classifier=classifier)
        prober.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return prober

    @pytest.mark.asyncio
    async def test_probe_available(self, item):
        prober = self.make_prober(lambda request: httpx.Response(200, text=AVAILABLE_PAGE))

        assert await prober.check(item) is Availability.AVAILABLE
        assert await prober.probe(item) is True

    @pytest.mark.asyncio
    async def test_probe_sold_out(self, item):
        prober = self.make_prober(lambda request: httpx.Response(200, text=SOLD_OUT_PAGE))

        assert await prober.check(item) is Availability.SOLD_OUT
        assert await prober.probe(item) is False

    @pytest.mark.asyncio
    async def test_http_error_status_is_unknown(self, item):
        prober = self.make_prober(lambda request: httpx.Response(503, text=AVAILABLE_PAGE))

        assert await prober.check(item) is Availability.UNKNOWN
        assert await prober.probe(item) is False

    @pytest.mark.asyncio
    async def test_network_error_is_unknown(self, item):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        prober = self.make_prober(handler)

        assert await prober.check(item) is Availability.UNKNOWN
        assert await prober.probe(item) is False

    @pytest.mark.asyncio
    async def test_timeout_is_unknown(self, item):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        prober = self.make_prober(handler)

        assert await prober.probe(item) is False

    @pytest.mark.asyncio
    async def test_classifier_error_is_unknown(self, item):
        classifier = MagicMock()
        classifier.classify.side_effect = RuntimeError("bad markup")
        prober = self.make_prober(lambda request: httpx.Response(200, text="<html>"), classifier)

        assert await prober.check(item) is Availability.UNKNOWN
        assert await prober.probe(item) is False

    @pytest.mark.asyncio
    async def test_uses_pluggable_classifier(self, item):
        classifier = MagicMock()
        classifier.classify.return_value = True
        prober = self.make_prober(lambda request: httpx.Response(200, text="raw markup"), classifier)

        assert await prober.probe(item) is True
        classifier.classify.assert_called_once_with("raw markup")

    @pytest.mark.asyncio
    async def test_probe_without_client_returns_false(self, item):
        prober = AvailabilityProber(ProberConfig())

        assert await prober.probe(item) is False

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes_client(self):
        prober = AvailabilityProber(ProberConfig(user_agent="test-agent"))

        async with prober as entered:
            assert entered is prober
            assert prober.client is not None
            assert prober.client.headers["User-Agent"] == "test-agent"

        assert prober.client is None
