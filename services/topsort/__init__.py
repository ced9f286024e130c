"""Topsort auctions and events API client package."""

from services.topsort.client import SDK_VERSION, TopsortClient
from services.topsort.errors import ErrorCode, TopsortError
from services.topsort.types import (
    AuctionRequest,
    ClickEvent,
    EventType,
    Impression,
    ImpressionEvent,
    Placement,
    Product,
    PurchaseEvent,
    PurchaseItem,
    Session,
    Slots,
)

__version__ = SDK_VERSION

__all__ = [
    "AuctionRequest",
    "ClickEvent",
    "ErrorCode",
    "EventType",
    "Impression",
    "ImpressionEvent",
    "Placement",
    "Product",
    "PurchaseEvent",
    "PurchaseItem",
    "Session",
    "Slots",
    "TopsortClient",
    "TopsortError",
    "__version__",
]
