import httpx
import pytest

from seabite.clients.geocoding import GeocodingClient, parse_address
from seabite.clients.storefront_api import StorefrontAPIClient
from seabite.services.location_service import LocationService, is_deliverable

NOTIFICATIONS = [
    {"_id": "n1", "message": "Your order is out for delivery", "read": False},
    {"_id": "n2", "message": "Fresh catch just landed", "read": True},
]


class RecordingHandler:
    """MockTransport handler that remembers requests and replays one response."""

    def __init__(self, response=None, error=None):
        self.requests = []
        self._response = response or httpx.Response(200, json=[])
        self._error = error

    def __call__(self, request):
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return httpx.Response(
            self._response.status_code,
            headers=self._response.headers,
            content=self._response.content,
        )


def api_client(handler, **kwargs):
    return StorefrontAPIClient("http://api.test/", transport=httpx.MockTransport(handler), **kwargs)


class TestStorefrontAPIClient:

    def test_list_notifications_sends_bearer_token(self):
        handler = RecordingHandler(httpx.Response(200, json=NOTIFICATIONS))

        result = api_client(handler, token="secret").list_notifications()

        assert result == NOTIFICATIONS
        [request] = handler.requests
        assert request.method == "GET"
        assert request.url == "http://api.test/api/notifications"
        assert request.headers["Authorization"] == "Bearer secret"

    def test_token_read_from_storage(self, tab_a):
        tab_a.set_item("token", "from-storage")
        handler = RecordingHandler()

        api_client(handler, context=tab_a).list_my_orders()

        assert handler.requests[0].url.path == "/api/orders/myorders"
        assert handler.requests[0].headers["Authorization"] == "Bearer from-storage"

    def test_no_token_no_header(self, tab_a):
        handler = RecordingHandler()

        api_client(handler, context=tab_a).list_notifications()

        assert "Authorization" not in handler.requests[0].headers

    @pytest.mark.parametrize("call,method,path", [
        (lambda c: c.mark_all_read(), "PUT", "/api/notifications/read-all"),
        (lambda c: c.delete_notification("n1"), "DELETE", "/api/notifications/n1"),
        (lambda c: c.clear_notifications(), "DELETE", "/api/notifications/clear/all"),
    ])
    def test_write_endpoints(self, call, method, path):
        handler = RecordingHandler(httpx.Response(200, json={"message": "ok"}))

        assert call(api_client(handler, token="secret")) is True
        assert handler.requests[0].method == method
        assert handler.requests[0].url.path == path

    def test_error_status_is_reported_as_failure(self):
        handler = RecordingHandler(httpx.Response(500, json={"message": "boom"}))
        client = api_client(handler, token="secret")

        assert client.mark_all_read() is False
        assert client.list_notifications() == []

    def test_connection_error_gives_empty_list(self):
        handler = RecordingHandler(error=httpx.ConnectError("refused"))

        assert api_client(handler).list_notifications() == []

    @pytest.mark.parametrize("response", [
        httpx.Response(200, json={"notifications": []}),
        httpx.Response(200, text="<html>maintenance</html>"),
    ])
    def test_unexpected_body_gives_empty_list(self, response):
        assert api_client(RecordingHandler(response)).list_notifications() == []


HYDERABAD = {
    "display_name": "Road No. 12, Banjara Hills, Hyderabad, Telangana, 500034, India",
    "lat": "17.4126",
    "lon": "78.4392",
    "address": {"city": "Hyderabad", "state": "Telangana", "postcode": "500034"},
}


class TestGeocodingClient:

    def test_search_appends_country(self):
        handler = RecordingHandler(httpx.Response(200, json=[HYDERABAD]))
        client = GeocodingClient(transport=httpx.MockTransport(handler))

        address = client.search("  Banjara   Hills ")

        params = handler.requests[0].url.params
        assert params["q"] == "Banjara Hills, India"
        assert params["limit"] == "1"
        assert handler.requests[0].headers["User-Agent"] == "seabite-storefront/1.0"
        assert address.city == "Hyderabad"
        assert address.lat == pytest.approx(17.4126)

    def test_blank_search_makes_no_request(self):
        handler = RecordingHandler()

        assert GeocodingClient(transport=httpx.MockTransport(handler)).search("   ") is None
        assert handler.requests == []

    def test_reverse(self):
        handler = RecordingHandler(httpx.Response(200, json=HYDERABAD))

        address = GeocodingClient(transport=httpx.MockTransport(handler)).reverse(17.41, 78.44)

        assert address.state == "Telangana"
        assert address.zip == "500034"
        assert handler.requests[0].url.params["lat"] == "17.41"

    def test_reverse_error_payload(self):
        handler = RecordingHandler(httpx.Response(200, json={"error": "Unable to geocode"}))

        assert GeocodingClient(transport=httpx.MockTransport(handler)).reverse(0, 0) is None

    def test_network_failure(self):
        handler = RecordingHandler(error=httpx.ConnectTimeout("slow"))

        assert GeocodingClient(transport=httpx.MockTransport(handler)).search("Vizag") is None

    def test_city_falls_back_to_town_then_village(self):
        assert parse_address({"address": {"town": "Bhimavaram"}}).city == "Bhimavaram"
        assert parse_address({"address": {"village": "Kovvur"}}).city == "Kovvur"
        assert parse_address({}).street == ""


class TestLocationService:

    @pytest.mark.parametrize("state,expected", [
        ("Telangana", True),
        ("andhra pradesh", True),
        ("AP", True),
        ("Karnataka", False),
        ("", False),
        (None, False),
    ])
    def test_is_deliverable(self, state, expected):
        assert is_deliverable(state) is expected

    def test_locate(self):
        handler = RecordingHandler(httpx.Response(200, json=HYDERABAD))
        service = LocationService(GeocodingClient(transport=httpx.MockTransport(handler)))

        lookup = service.locate(17.41, 78.44)

        assert lookup.found
        assert lookup.deliverable

    def test_search_outside_delivery_area(self):
        bengaluru = {"display_name": "Bengaluru", "address": {"city": "Bengaluru", "state": "Karnataka"}}
        handler = RecordingHandler(httpx.Response(200, json=[bengaluru]))
        service = LocationService(GeocodingClient(transport=httpx.MockTransport(handler)))

        lookup = service.search("Koramangala")

        assert lookup.found
        assert not lookup.deliverable
