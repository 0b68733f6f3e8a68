"""
Carrier API integrations for tracking information.
Supports YunExpress (primary) and GLS Poland (last-mile, public and authenticated).

Every lookup degrades to an empty event list instead of raising: a missing
carrier feed means fewer events, not a failed request.
"""

import base64
from abc import ABC, abstractmethod
from typing import Optional
import aiohttp
from loguru import logger

from tracker.config import YUNEXPRESS_TRACK_URL, GLS_PUBLIC_TRACK_URL, GLS_AUTH_TRACK_URL
from tracker.models import CarrierLookup, Courier, TrackingEvent
from tracker.tracking.normalizer import (
    normalize_gls_auth_event,
    normalize_gls_history,
    normalize_yunexpress_detail,
)


class CarrierAPI(ABC):
    """Base class for carrier API integrations."""

    courier: Courier

    @abstractmethod
    async def lookup(self, tracking_number: str) -> CarrierLookup:
        """Look up a shipment. Never raises; failures come back degraded."""
        pass

    def get_carrier_name(self) -> str:
        """Get the carrier name."""
        return self.courier.value

    async def get_tracking(self, tracking_number: str) -> list[TrackingEvent]:
        """Get normalized events for a shipment (empty on any failure)."""
        result = await self.lookup(tracking_number)
        if result.is_degraded:
            logger.warning(
                f"{self.get_carrier_name()} lookup for {tracking_number} degraded: {result.reason}"
            )
        return list(result.events)

    def _degraded(self, tracking_number: str, reason: str) -> CarrierLookup:
        return CarrierLookup.degraded(self.courier, tracking_number, reason)

    def _ok(self, tracking_number: str, events: list[TrackingEvent]) -> CarrierLookup:
        return CarrierLookup.ok(self.courier, tracking_number, events)


class YunExpressAPI(CarrierAPI):
    """
    YunExpress WayBill tracking integration.

    Requires YunExpress customer credentials:
    - API key (sent base64-encoded as Basic auth)
    - Customer code
    """

    courier = Courier.YUNEXPRESS

    def __init__(self, api_key: str, customer_code: str, api_url: str = YUNEXPRESS_TRACK_URL):
        self.api_key = api_key
        self.customer_code = customer_code
        self.api_url = api_url

    def _auth_header(self) -> str:
        token = base64.b64encode(self.api_key.encode()).decode()
        return f"Basic {token}"

    async def lookup(self, tracking_number: str) -> CarrierLookup:
        """Get tracking events from YunExpress."""
        try:
            async with aiohttp.ClientSession() as session:
                headers = {
                    "Authorization": self._auth_header(),
                    "Content-Type": "application/json",
                }

                payload = {
                    "CustomerCode": self.customer_code,
                    "WayBillNumber": tracking_number,
                }

                async with session.post(self.api_url, json=payload, headers=headers) as resp:
                    if resp.status != 200:
                        error = await resp.text()
                        logger.warning(f"YunExpress tracking failed ({resp.status}): {error}")
                        return self._degraded(tracking_number, f"HTTP {resp.status}")

                    data = await resp.json(content_type=None)

        except Exception as e:
            logger.error(f"YunExpress API error: {e}")
            return self._degraded(tracking_number, f"{type(e).__name__}: {e}")

        return self._parse_response(tracking_number, data)

    def _parse_response(self, tracking_number: str, data) -> CarrierLookup:
        """Parse YunExpress API response."""
        if not isinstance(data, dict) or not data.get("Success") or not data.get("Item"):
            logger.info(f"YunExpress tracking not found: {tracking_number}")
            return self._degraded(tracking_number, "YunExpress tracking not found")

        try:
            item = data["Item"]
            details = item.get("TrackingDetails") if isinstance(item, dict) else None
            if details is not None and not isinstance(details, list):
                raise ValueError(f"TrackingDetails is {type(details).__name__}, expected list")

            events = [
                normalize_yunexpress_detail(detail)
                for detail in details or []
                if isinstance(detail, dict)
            ]

        except Exception as e:
            logger.error(f"Error parsing YunExpress response: {e}")
            return self._degraded(tracking_number, f"Malformed YunExpress response: {e}")

        logger.debug(f"YunExpress {tracking_number}: {len(events)} events")
        return self._ok(tracking_number, events)


class GLSAPI(CarrierAPI):
    """GLS Poland public parcel lookup. No credentials needed."""

    courier = Courier.GLS

    def __init__(self, api_url: str = GLS_PUBLIC_TRACK_URL):
        self.api_url = api_url

    async def lookup(self, tracking_number: str) -> CarrierLookup:
        """Get tracking events from the public GLS endpoint."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    self.api_url,
                    params={"match": tracking_number},
                    headers={"Accept": "application/json"},
                ) as resp:
                    if resp.status != 200:
                        error = await resp.text()
                        logger.warning(f"GLS tracking failed ({resp.status}): {error}")
                        return self._degraded(tracking_number, f"HTTP {resp.status}")

                    data = await resp.json(content_type=None)

        except Exception as e:
            logger.error(f"GLS API error: {e}")
            return self._degraded(tracking_number, f"{type(e).__name__}: {e}")

        return self._parse_response(tracking_number, data)

    def _parse_response(self, tracking_number: str, data) -> CarrierLookup:
        """Parse GLS tuStatus response; only the first parcel is read."""
        parcels = data.get("tuStatus") if isinstance(data, dict) else None
        if not parcels:
            logger.info(f"GLS tracking not found: {tracking_number}")
            return self._degraded(tracking_number, "GLS tracking not found")

        try:
            if not isinstance(parcels, list):
                raise ValueError(f"tuStatus is {type(parcels).__name__}, expected list")

            parcel = parcels[0] if isinstance(parcels[0], dict) else {}
            history = parcel.get("history") or []
            if not isinstance(history, list):
                raise ValueError(f"history is {type(history).__name__}, expected list")

            events = [
                normalize_gls_history(event)
                for event in history
                if isinstance(event, dict)
            ]

        except Exception as e:
            logger.error(f"Error parsing GLS response: {e}")
            return self._degraded(tracking_number, f"Malformed GLS response: {e}")

        logger.debug(f"GLS {tracking_number}: {len(events)} events")
        return self._ok(tracking_number, events)


class GLSAuthAPI(CarrierAPI):
    """
    GLS Poland tracking with account credentials.

    Used instead of the public lookup when a GLS API key is configured.
    """

    courier = Courier.GLS

    def __init__(self, api_key: str, api_url: str = GLS_AUTH_TRACK_URL):
        self.api_key = api_key
        self.api_url = api_url

    async def lookup(self, tracking_number: str) -> CarrierLookup:
        """Get tracking events from the authenticated GLS API."""
        try:
            async with aiohttp.ClientSession() as session:
                headers = {
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                }

                async with session.post(
                    self.api_url,
                    json={"trackingNumber": tracking_number},
                    headers=headers,
                ) as resp:
                    if resp.status != 200:
                        error = await resp.text()
                        logger.warning(f"GLS Auth tracking failed ({resp.status}): {error}")
                        return self._degraded(tracking_number, f"HTTP {resp.status}")

                    data = await resp.json(content_type=None)

        except Exception as e:
            logger.error(f"GLS Auth API error: {e}")
            return self._degraded(tracking_number, f"{type(e).__name__}: {e}")

        return self._parse_response(tracking_number, data)

    def _parse_response(self, tracking_number: str, data) -> CarrierLookup:
        """Parse the authenticated GLS events list."""
        events: Optional[list] = data.get("events") if isinstance(data, dict) else None
        if not isinstance(events, list):
            logger.info(f"GLS response has no events: {tracking_number}")
            return self._degraded(tracking_number, "GLS response has no events")

        try:
            normalized = [normalize_gls_auth_event(event) for event in events if isinstance(event, dict)]
        except Exception as e:
            logger.error(f"Error parsing GLS Auth response: {e}")
            return self._degraded(tracking_number, f"Malformed GLS response: {e}")

        return self._ok(tracking_number, normalized)
