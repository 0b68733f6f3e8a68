"""Errors raised by the tracking pipeline."""


class TrackerError(Exception):
    """Base class for tracker errors."""


class OrderNotFoundError(TrackerError):
    """The storefront has no order with the requested name."""

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Order not found: {order_number}")


class ConfigurationError(TrackerError):
    """A mandatory setting is missing."""
