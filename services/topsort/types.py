"""Request types for the Topsort API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Event types accepted by the events endpoint."""

    IMPRESSION = "Impression"
    CLICK = "Click"
    PURCHASE = "Purchase"


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in values.items() if value is not None}


def _require(value: str, name: str) -> None:
    if not value:
        msg = f"{name} is required"
        raise ValueError(msg)


def format_rfc3339(value: datetime | str) -> str:
    """
    Format a datetime as an RFC 3339 timestamp with second precision.

    Naive datetimes are taken to be UTC. Strings are assumed to be
    formatted already and are returned unchanged.

    Args:
        value: Datetime to format.

    Returns:
        Timestamp such as ``2024-05-01T12:30:00+00:00``.
    """
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat(timespec="seconds")


@dataclass(frozen=True, slots=True)
class Slots:
    """
    Number of promotional slots to auction, per slot type.

    Attributes:
        listings: Sponsored listing slots.
        video_ads: Video ad slots.
        banner_ads: Banner ad slots.
    """

    listings: int | None = None
    video_ads: int | None = None
    banner_ads: int | None = None

    def __post_init__(self) -> None:
        """Validate slot counts."""
        for name in ("listings", "video_ads", "banner_ads"):
            count = getattr(self, name)
            if count is not None and count < 0:
                msg = f"{name} cannot be negative"
                raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        return _compact(
            {
                "listings": self.listings,
                "videoAds": self.video_ads,
                "bannerAds": self.banner_ads,
            }
        )


@dataclass(frozen=True, slots=True)
class Product:
    """A candidate product taking part in an auction."""

    product_id: str
    quality: str | None = None

    def __post_init__(self) -> None:
        """Validate product."""
        _require(self.product_id, "product_id")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        return _compact({"productId": self.product_id, "quality": self.quality})


@dataclass(frozen=True, slots=True)
class Session:
    """
    Correlation identifiers for a single visit or order.

    Attributes:
        session_id: Identifier of the user session.
        consumer_id: Identifier of the consumer, if known.
        order_intent_id: Identifier of the cart or order intent.
        order_id: Identifier of the completed order.
    """

    session_id: str
    consumer_id: str | None = None
    order_intent_id: str | None = None
    order_id: str | None = None

    def __post_init__(self) -> None:
        """Validate session."""
        _require(self.session_id, "session_id")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        return _compact(
            {
                "sessionId": self.session_id,
                "consumerId": self.consumer_id,
                "orderIntentId": self.order_intent_id,
                "orderId": self.order_id,
            }
        )


@dataclass(frozen=True, slots=True)
class Placement:
    """Where on the marketplace a promoted product was shown."""

    page: str
    location: str

    def __post_init__(self) -> None:
        """Validate placement."""
        _require(self.page, "page")
        _require(self.location, "location")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        return {"page": self.page, "location": self.location}


@dataclass(frozen=True, slots=True)
class Impression:
    """
    A single product impression.

    Attributes:
        placement: Where the product was shown.
        product_id: The product that was shown.
        auction_id: Auction that promoted the product, None for organic results.
        id: Marketplace-supplied impression id.
    """

    placement: Placement
    product_id: str
    auction_id: str | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate impression."""
        _require(self.product_id, "product_id")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        return _compact(
            {
                "placement": self.placement.to_dict(),
                "productId": self.product_id,
                "auctionId": self.auction_id,
                "id": self.id,
            }
        )


@dataclass(frozen=True, slots=True)
class AuctionRequest:
    """
    Body of an auction request.

    Attributes:
        slots: Slots to fill.
        products: Candidate products, in ranking order.
        session: Session the auction belongs to.
        banner_options: Banner configuration, sent verbatim.
    """

    slots: Slots
    products: tuple[Product, ...]
    session: Session
    banner_options: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        body: dict[str, Any] = {
            "slots": self.slots.to_dict(),
            "products": [product.to_dict() for product in self.products],
            "session": self.session.to_dict(),
        }
        if self.banner_options is not None:
            body["bannerOptions"] = dict(self.banner_options)
        return body


@dataclass(frozen=True, slots=True)
class ClickEvent:
    """A click on a promoted product."""

    session: Session
    placement: Placement
    product_id: str
    auction_id: str
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate click."""
        _require(self.product_id, "product_id")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation, without the event type."""
        return _compact(
            {
                "session": self.session.to_dict(),
                "placement": self.placement.to_dict(),
                "productId": self.product_id,
                "auctionId": self.auction_id,
                "id": self.id,
            }
        )


@dataclass(frozen=True, slots=True)
class ImpressionEvent:
    """A batch of impressions seen within one session."""

    session: Session
    impressions: tuple[Impression, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation, without the event type."""
        return {
            "session": self.session.to_dict(),
            "impressions": [impression.to_dict() for impression in self.impressions],
        }


@dataclass(frozen=True, slots=True)
class PurchaseItem:
    """
    A purchased line item.

    Attributes:
        product_id: The purchased product.
        unit_price: Price per unit in currency minor units (e.g. cents).
        auction_id: Auction that promoted the product, if any.
        quantity: Number of units purchased.
    """

    product_id: str
    unit_price: int
    auction_id: str | None = None
    quantity: int | None = None

    def __post_init__(self) -> None:
        """Validate purchase item."""
        _require(self.product_id, "product_id")
        if self.quantity is not None and self.quantity < 0:
            msg = "quantity cannot be negative"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        return _compact(
            {
                "productId": self.product_id,
                "auctionId": self.auction_id,
                "quantity": self.quantity,
                "unitPrice": self.unit_price,
            }
        )


@dataclass(frozen=True, slots=True)
class PurchaseEvent:
    """
    A completed purchase.

    ``purchased_at`` is kept as a datetime; the client formats it when
    the event is reported.
    """

    session: Session
    id: str
    purchased_at: datetime
    items: tuple[PurchaseItem, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate purchase."""
        _require(self.id, "id")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation, without the event type."""
        return {
            "session": self.session.to_dict(),
            "id": self.id,
            "purchasedAt": self.purchased_at,
            "items": [item.to_dict() for item in self.items],
        }


def to_payload(value: Any) -> Any:
    """
    Convert a record type (or a plain mapping/list of them) into JSON-ready data.

    Mappings are copied so the caller's data is never mutated.
    """
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: to_payload(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [to_payload(item) for item in value]
    return value
