"""
Carrier response normalizers.
Map carrier-specific event shapes onto TrackingEvent.
"""

from typing import Any

from tracker.models import Courier, TrackingEvent


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def normalize_yunexpress_detail(detail: dict) -> TrackingEvent:
    """Map a YunExpress TrackingDetails entry."""
    return TrackingEvent(
        timestamp=_text(detail.get("ProcessDate")),
        status=_text(detail.get("ProcessContent")),
        location=_text(detail.get("ProcessLocation")),
        courier=Courier.YUNEXPRESS,
    )


def normalize_gls_history(event: dict) -> TrackingEvent:
    """Map a GLS public tracking history entry. Country defaults to Poland."""
    address = event.get("address")
    if not isinstance(address, dict):
        address = {}
    city = address.get("city") or ""
    country = address.get("country") or "Poland"

    return TrackingEvent(
        timestamp=_text(event.get("date")),
        status=_text(event.get("evtDscr")),
        location=f"{city}, {country}".strip(),
        courier=Courier.GLS,
    )


def normalize_gls_auth_event(event: dict) -> TrackingEvent:
    """Map an event from the authenticated GLS API."""
    return TrackingEvent(
        timestamp=_text(event.get("timestamp")),
        status=_text(event.get("description")),
        location=_text(event.get("location")),
        courier=Courier.GLS,
    )
