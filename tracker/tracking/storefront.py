"""
Shopify storefront integration.
Resolves a customer-facing order number to its shipment timeline.
"""

from typing import Optional
import aiohttp
from loguru import logger

from tracker.config import TrackerConfig
from tracker.exceptions import OrderNotFoundError
from tracker.models import Courier, ShopifyOrder, TrackingEvent, TrackingResult
from tracker.tracking.tracking_manager import TrackingManager


class ShopifyAPI:
    """Shopify Admin API order lookup."""

    def __init__(self, base_url: str, access_token: str, api_version: str = "2024-01"):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.api_version = api_version

    @classmethod
    def from_config(cls, config: TrackerConfig) -> "ShopifyAPI":
        return cls(
            base_url=config.shopify_base_url,
            access_token=config.shopify_access_token,
            api_version=config.shopify_api_version,
        )

    @property
    def orders_url(self) -> str:
        return f"{self.base_url}/admin/api/{self.api_version}/orders.json"

    async def find_orders(self, order_name: str) -> list[ShopifyOrder]:
        """
        Find orders by display name.

        Raises:
            aiohttp.ClientResponseError: storefront returned an error status
        """
        async with aiohttp.ClientSession() as session:
            async with session.get(
                self.orders_url,
                params={"name": order_name},
                headers={"X-Shopify-Access-Token": self.access_token},
            ) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)

        orders = data.get("orders") or []
        return [ShopifyOrder.model_validate(order) for order in orders]


class OrderResolver:
    """
    Turns an order number into a TrackingResult.

    Orders without a tracking number yet get a single "Order confirmed" event.
    """

    def __init__(self, shopify: ShopifyAPI, tracking_manager: TrackingManager):
        self.shopify = shopify
        self.tracking_manager = tracking_manager

    @staticmethod
    def pending_result(order: ShopifyOrder) -> TrackingResult:
        """Placeholder timeline for an order that has not shipped."""
        return TrackingResult(
            order_number=order.display_number,
            tracking_number=None,
            status="pending",
            events=[
                TrackingEvent(
                    timestamp=order.created_at or "",
                    status="Order confirmed",
                    location="Warehouse",
                    courier=Courier.STOREFRONT,
                )
            ],
        )

    async def resolve(self, order_number: str) -> TrackingResult:
        """
        Resolve an order number (without '#') to its tracking timeline.

        Raises:
            OrderNotFoundError: no storefront order has this name
        """
        orders = await self.shopify.find_orders(order_number)
        if not orders:
            raise OrderNotFoundError(order_number)

        order = orders[0]
        tracking_number: Optional[str] = order.tracking_number

        if not tracking_number:
            logger.info(f"Order {order.name} has no tracking number yet")
            return self.pending_result(order)

        logger.info(f"Order {order.name} ships as {tracking_number}")
        return await self.tracking_manager.get_combined_tracking(
            tracking_number,
            order.display_number,
        )
