"""HTTP client for the Topsort auctions and events API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeAlias
from urllib.parse import quote, urlparse

import httpx

from core.config import DEFAULT_BASE_URL, get_settings
from core.logging import get_logger
from services.topsort.errors import DecodeError, classify_error
from services.topsort.types import EventType, format_rfc3339, to_payload

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from types import TracebackType

    from core.config import TopsortSettings
    from services.topsort.types import (
        AuctionRequest,
        ClickEvent,
        ImpressionEvent,
        Product,
        PurchaseEvent,
        Session,
        Slots,
    )

logger = get_logger(__name__)

SDK_VERSION = "2.1.1"
USER_AGENT = f"Topsort/Python SDK {SDK_VERSION}"

# Default timeout for API requests
DEFAULT_TIMEOUT = 30.0

# API paths
AUCTIONS_PATH = "/v1/auctions"
EVENTS_PATH = "/v1/events"
AD_LOCATIONS_PATH = "/api/v1/ad_locations"

JSON: TypeAlias = Any


def _validate_base_url(base_url: str) -> None:
    """Raise ValueError unless base_url is an absolute http(s) URL."""
    msg = f"Invalid base_url: {base_url!r}. Must be an absolute http(s) URL"
    parsed = urlparse(base_url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(msg)
    if any(char.isspace() for char in parsed.netloc):
        raise ValueError(msg)

    try:
        # urlparse only checks the port range when it is read
        parsed.port  # noqa: B018
        httpx.URL(base_url)
    except (ValueError, httpx.InvalidURL) as e:
        raise ValueError(msg) from e


class TopsortClient:
    """
    Async HTTP client for the Topsort API.

    Every call issues exactly one request and either returns the decoded
    JSON body or raises a ``TopsortError``. Nothing is retried or cached.
    Calls may run concurrently on one instance.

    Attributes:
        marketplace: Marketplace identifier.
        base_url: API base URL.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        marketplace: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Topsort client.

        Args:
            marketplace: Marketplace identifier.
            api_key: Topsort API key, sent as a bearer token.
            base_url: API base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``).

        Raises:
            ValueError: If base_url is not an absolute http(s) URL with a valid
                host and port, or if api_key cannot be sent in a header.
        """
        _validate_base_url(base_url)
        if not (api_key.isascii() and api_key.isprintable()):
            msg = "Invalid api_key: must contain only printable ASCII characters"
            raise ValueError(msg)

        self._marketplace = marketplace
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = logger.bind(marketplace=marketplace)

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: TopsortSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> TopsortClient:
        """
        Create a client from configuration.

        Args:
            settings: Topsort settings. Defaults to the cached environment settings.
            transport: Optional httpx transport.

        Returns:
            Configured client.
        """
        settings = settings or get_settings().topsort
        return cls(
            marketplace=settings.marketplace,
            api_key=settings.api_key.get_secret_value(),
            base_url=settings.base_url,
            timeout=settings.timeout,
            transport=transport,
        )

    @property
    def marketplace(self) -> str:
        """Return the marketplace identifier."""
        return self._marketplace

    @property
    def base_url(self) -> str:
        """Return the API base URL."""
        return self._base_url

    @property
    def timeout(self) -> float:
        """Return the request timeout."""
        return self._timeout

    @property
    def is_closed(self) -> bool:
        """Check if the underlying HTTP client has been closed."""
        return self._client.is_closed

    def __repr__(self) -> str:
        return f"TopsortClient(marketplace={self._marketplace!r}, base_url={self._base_url!r})"

    async def close(self) -> None:
        """Close the HTTP client."""
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> TopsortClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Any = None,
    ) -> JSON:
        """
        Make an API request and decode its JSON body.

        Args:
            operation: Label used as the prefix of any error message.
            method: HTTP method.
            path: API path.
            json: Request body.

        Returns:
            The decoded response body, or None when the body is empty.

        Raises:
            TopsortError: If the request fails or the body is not valid JSON.
        """
        url = f"{self._base_url}{path}"

        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = classify_error(operation, e, url)
            self._logger.error(
                "Topsort request failed",
                operation=operation,
                error_code=error.code.value,
                status_code=error.status_code,
                url=url,
            )
            raise error from e

        return self._decode(operation, response)

    def _decode(self, operation: str, response: httpx.Response) -> JSON:
        """Decode a success response body."""
        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            self._logger.error(
                "Failed to parse Topsort response",
                operation=operation,
                status_code=response.status_code,
                error=str(e),
            )
            raise DecodeError(operation, e, response) from e

    async def create_auction(
        self,
        slots: Slots | Mapping[str, Any],
        products: Iterable[Product | Mapping[str, Any]],
        session: Session | Mapping[str, Any],
        banner_options: Mapping[str, Any] | None = None,
    ) -> JSON:
        """
        Create an auction between products for promotion slots.

        The winners should be promoted on the page, either by moving them up
        in the result list or rendering them in a dedicated location.

        Args:
            slots: Number of slots to fill per slot type.
            products: Candidate products, in ranking order.
            session: Session the auction belongs to.
            banner_options: Banner configuration, sent verbatim when given.

        Returns:
            The auction result, including winners.

        Raises:
            TopsortError: If the request fails.
            TypeError: If a value in the arguments is not JSON serializable.
        """
        body: dict[str, Any] = {
            "slots": to_payload(slots),
            "products": [to_payload(product) for product in products],
            "session": to_payload(session),
        }
        if banner_options is not None:
            body["bannerOptions"] = to_payload(banner_options)

        self._logger.info(
            "Creating Topsort auction",
            products=len(body["products"]),
        )

        return await self._request("Auction creation failed", "POST", AUCTIONS_PATH, json=body)

    async def create_auction_request(self, request: AuctionRequest) -> JSON:
        """Create an auction from a prepared ``AuctionRequest``."""
        return await self.create_auction(
            request.slots,
            request.products,
            request.session,
            request.banner_options,
        )

    async def get_auction(self, auction_id: str) -> JSON:
        """
        Get an earlier auction result.

        Args:
            auction_id: Id returned when the auction was created.

        Returns:
            The auction result.
        """
        if not auction_id:
            msg = "auction_id is required"
            raise ValueError(msg)

        self._logger.info(
            "Getting Topsort auction",
            auction_id=auction_id,
        )

        return await self._request(
            "Failed to get auction",
            "GET",
            f"{AUCTIONS_PATH}/{quote(auction_id, safe='')}",
        )

    async def _create_event(self, event_type: EventType, data: Any) -> JSON:
        """
        Report an event.

        The event type always overrides an ``eventType`` key in ``data``.

        Args:
            event_type: Type of the event.
            data: Event payload, a record type or a mapping.

        Returns:
            The acknowledgment body.

        Raises:
            TopsortError: If the request fails.
            TypeError: If a value in data is not JSON serializable.
        """
        payload = to_payload(data)
        if payload.get("eventType", event_type.value) != event_type.value:
            self._logger.warning(
                "Overriding caller-supplied eventType",
                supplied=payload["eventType"],
                event_type=event_type.value,
            )

        body = {**payload, "eventType": event_type.value}

        self._logger.info(
            "Reporting Topsort event",
            event_type=event_type.value,
        )

        return await self._request("Event creation failed", "POST", EVENTS_PATH, json=body)

    async def report_click(self, data: ClickEvent | Mapping[str, Any]) -> JSON:
        """Report a click on a promoted product."""
        return await self._create_event(EventType.CLICK, data)

    async def report_impressions(self, data: ImpressionEvent | Mapping[str, Any]) -> JSON:
        """Report the impressions seen during a session."""
        return await self._create_event(EventType.IMPRESSION, data)

    async def report_purchase(self, data: PurchaseEvent | Mapping[str, Any]) -> JSON:
        """
        Report a purchase.

        ``purchasedAt`` is formatted as an RFC 3339 timestamp; every other
        field is sent unchanged.

        Raises:
            ValueError: If the purchase has no purchasedAt.
        """
        payload = to_payload(data)
        if payload.get("purchasedAt") is None:
            msg = "purchasedAt is required"
            raise ValueError(msg)

        payload["purchasedAt"] = format_rfc3339(payload["purchasedAt"])
        return await self._create_event(EventType.PURCHASE, payload)

    async def get_ad_locations(self) -> JSON:
        """
        List the ad locations available to the marketplace.

        Returns:
            List of ad locations.
        """
        self._logger.info("Getting Topsort ad locations")

        return await self._request("Failed to get ad locations", "GET", AD_LOCATIONS_PATH)
