"""
Tracking Manager.
Combines YunExpress and GLS events into a single timeline.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from loguru import logger

from tracker.config import TrackerConfig
from tracker.models import TrackingEvent, TrackingResult
from tracker.tracking.carrier_api import CarrierAPI, GLSAPI, GLSAuthAPI, YunExpressAPI
from tracker.tracking.handoff import extract_gls_number


# Unparseable timestamps sort after everything else
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)


def parse_timestamp(value: str) -> datetime:
    """Parse a carrier timestamp. Naive values are taken as UTC."""
    text = (value or "").strip()
    if not text:
        return _OLDEST

    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return _OLDEST

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def merge_events(*feeds: Iterable[TrackingEvent]) -> list[TrackingEvent]:
    """Concatenate event feeds and sort newest first. Ties keep feed order."""
    combined = [event for feed in feeds for event in feed]
    return sorted(combined, key=lambda event: parse_timestamp(event.timestamp), reverse=True)


class TrackingManager:
    """
    Runs the combined YunExpress + GLS lookup.

    Calls are sequential: the GLS number is only known once the YunExpress
    events have been read.
    """

    def __init__(
        self,
        config: TrackerConfig,
        yunexpress: Optional[CarrierAPI] = None,
        gls: Optional[CarrierAPI] = None,
    ):
        self.config = config
        self.yunexpress = yunexpress or YunExpressAPI(
            api_key=config.yunexpress_api_key,
            customer_code=config.yunexpress_customer_code,
            api_url=config.yunexpress_api_url,
        )
        self.gls = gls or self._build_gls_client(config)

    @staticmethod
    def _build_gls_client(config: TrackerConfig) -> CarrierAPI:
        """Authenticated GLS API when a key is configured, public lookup otherwise."""
        if config.gls_auth_enabled:
            logger.info("GLS authenticated API configured")
            return GLSAuthAPI(api_key=config.gls_api_key, api_url=config.gls_auth_api_url)
        return GLSAPI(api_url=config.gls_api_url)

    async def get_gls_events(self, gls_number: str) -> list[TrackingEvent]:
        """GLS events for a handed-over parcel; empty when not available yet."""
        try:
            return await self.gls.get_tracking(gls_number)
        except Exception as e:
            logger.info(f"GLS tracking not available yet for {gls_number}: {e}")
            return []

    async def get_combined_tracking(
        self,
        yunexpress_number: str,
        order_number: Optional[str] = None,
    ) -> TrackingResult:
        """
        Get the merged timeline for a YunExpress shipment.

        Args:
            yunexpress_number: YunExpress waybill number
            order_number: Display order number, if the lookup started from an order

        Returns:
            TrackingResult with events sorted newest first
        """
        yunexpress_events = await self.yunexpress.get_tracking(yunexpress_number)
        gls_number = extract_gls_number(yunexpress_events)

        gls_events: list[TrackingEvent] = []
        if gls_number:
            logger.info(f"Shipment {yunexpress_number} handed over to GLS: {gls_number}")
            gls_events = await self.get_gls_events(gls_number)

        events = merge_events(yunexpress_events, gls_events)
        logger.info(
            f"Tracking {yunexpress_number}: {len(yunexpress_events)} YunExpress + "
            f"{len(gls_events)} GLS events"
        )

        return TrackingResult(
            order_number=order_number or yunexpress_number,
            tracking_number=yunexpress_number,
            gls_tracking=gls_number,
            events=events,
        )
