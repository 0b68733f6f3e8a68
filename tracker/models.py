"""
Data models for the Shipment Tracker.
Defines tracking events, the combined tracking result, and the storefront order shape.

Tracking flow:
1. Resolve order number to a YunExpress tracking number (Shopify)
2. Pull YunExpress events
3. Detect handoff to GLS and pull GLS events
4. Merge both feeds into one timeline, newest first
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Courier(str, Enum):
    """Courier labels shown on tracking events."""
    YUNEXPRESS = "Yuntexpress"
    GLS = "GLS"
    STOREFRONT = "ZdrowaMed"  # Placeholder for events raised by the shop itself


class QueryKind(str, Enum):
    """How an incoming tracking query is interpreted."""
    ORDER = "order"
    TRACKING = "tracking"


class LookupStatus(str, Enum):
    """Outcome of a single carrier lookup."""
    OK = "ok"
    DEGRADED = "degraded"


class TrackingEvent(BaseModel):
    """A single event in a shipment's timeline."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    timestamp: str
    status: str
    location: str = ""
    courier: Courier


class TrackingResult(BaseModel):
    """Combined tracking answer returned to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    order_number: Optional[str] = Field(None, alias="orderNumber")
    tracking_number: Optional[str] = Field(None, alias="trackingNumber")
    gls_tracking: Optional[str] = Field(None, alias="glsTracking")
    events: list[TrackingEvent] = Field(default_factory=list)

    # Only set for orders that have not shipped yet
    status: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def to_response(self) -> dict:
        """JSON body for the HTTP response."""
        exclude = set()
        if self.status is None:
            exclude.add("status")
        if self.is_pending:
            exclude.add("gls_tracking")
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class CarrierLookup(BaseModel):
    """
    Result of asking one carrier for events.

    A degraded lookup carries no events and a reason; callers that only care
    about events use `events` and never see an exception.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    carrier: Courier
    tracking_number: str
    status: LookupStatus
    events: list[TrackingEvent] = Field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def ok(cls, carrier: Courier, tracking_number: str, events: list[TrackingEvent]) -> "CarrierLookup":
        return cls(
            carrier=carrier,
            tracking_number=tracking_number,
            status=LookupStatus.OK,
            events=events,
        )

    @classmethod
    def degraded(cls, carrier: Courier, tracking_number: str, reason: str) -> "CarrierLookup":
        return cls(
            carrier=carrier,
            tracking_number=tracking_number,
            status=LookupStatus.DEGRADED,
            reason=reason,
        )

    @property
    def is_degraded(self) -> bool:
        return self.status == LookupStatus.DEGRADED


# ===== Storefront (Shopify) =====

class ShopifyFulfillment(BaseModel):
    """A fulfillment attached to a storefront order."""

    tracking_number: Optional[str] = None


class ShopifyOrder(BaseModel):
    """The subset of a Shopify order the tracker reads."""

    name: str
    created_at: Optional[str] = None
    fulfillments: Optional[list[ShopifyFulfillment]] = None

    @property
    def display_number(self) -> str:
        """Order name without the leading '#'."""
        return self.name.replace("#", "", 1)

    @property
    def tracking_number(self) -> Optional[str]:
        """Tracking number of the first fulfillment, if any."""
        if not self.fulfillments:
            return None
        return self.fulfillments[0].tracking_number or None
