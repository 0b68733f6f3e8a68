"""
Tracking query routing.
Decides whether a query is an order number or a tracking number and dispatches it.
"""

import re
from typing import Optional
from loguru import logger

from tracker.config import TrackerConfig
from tracker.models import QueryKind, TrackingResult
from tracker.tracking.storefront import OrderResolver, ShopifyAPI
from tracker.tracking.tracking_manager import TrackingManager


ORDER_NUMBER_PATTERN = re.compile(r"\d{1,6}", re.ASCII)


def classify_query(number: str) -> QueryKind:
    """Order numbers start with '#' or are 1-6 digits; anything else is a tracking number."""
    if number.startswith("#") or ORDER_NUMBER_PATTERN.fullmatch(number):
        return QueryKind.ORDER
    return QueryKind.TRACKING


class TrackingService:
    """Entry point used by the HTTP handler and the CLI."""

    def __init__(
        self,
        config: TrackerConfig,
        tracking_manager: Optional[TrackingManager] = None,
        order_resolver: Optional[OrderResolver] = None,
    ):
        self.config = config
        self.tracking_manager = tracking_manager or TrackingManager(config)
        self.order_resolver = order_resolver or OrderResolver(
            ShopifyAPI.from_config(config),
            self.tracking_manager,
        )

    async def track(self, number: str) -> TrackingResult:
        """Resolve a query to a tracking result."""
        kind = classify_query(number)
        logger.debug(f"Query {number!r} classified as {kind.value}")

        if kind == QueryKind.ORDER:
            order_number = number[1:] if number.startswith("#") else number
            return await self.order_resolver.resolve(order_number)

        return await self.tracking_manager.get_combined_tracking(number)
