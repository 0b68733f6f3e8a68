"""
Carrier handoff detection.

YunExpress reports the transfer to GLS as free text, e.g.
"Delivered to local carrier, GLS no. 12345678901". The GLS number is the
first standalone 11-digit run in that status line.
"""

import re
from typing import Iterable, Optional

from tracker.models import TrackingEvent


HANDOFF_PHRASES = ("delivered to local carrier", "handed over")

# GLS parcel numbers are 11 digits. Not documented by either carrier.
GLS_NUMBER_PATTERN = re.compile(r"\b\d{11}\b", re.ASCII)


def find_handoff_event(events: Iterable[TrackingEvent]) -> Optional[TrackingEvent]:
    """Return the first event that reports a handoff to the local carrier."""
    for event in events:
        status = event.status.lower()
        if any(phrase in status for phrase in HANDOFF_PHRASES):
            return event
    return None


def extract_gls_number(events: Iterable[TrackingEvent]) -> Optional[str]:
    """Extract the GLS tracking number from YunExpress events, if handed over."""
    event = find_handoff_event(events)
    if event is None:
        return None

    match = GLS_NUMBER_PATTERN.search(event.status)
    return match.group(0) if match else None
