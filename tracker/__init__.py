"""
Shipment Tracker.
Aggregates YunExpress and GLS tracking into a single timeline.
"""

__version__ = "1.0.0"
