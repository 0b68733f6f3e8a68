"""
Tracking integration module.
Pulls tracking events from YunExpress and GLS and resolves Shopify orders.
"""

from tracker.tracking.carrier_api import CarrierAPI, YunExpressAPI, GLSAPI, GLSAuthAPI
from tracker.tracking.tracking_manager import TrackingManager
from tracker.tracking.storefront import ShopifyAPI, OrderResolver
from tracker.tracking.service import TrackingService, classify_query

__all__ = [
    "CarrierAPI",
    "YunExpressAPI",
    "GLSAPI",
    "GLSAuthAPI",
    "TrackingManager",
    "ShopifyAPI",
    "OrderResolver",
    "TrackingService",
    "classify_query",
]
