"""Stop/airline filtering and price/duration sorting of itineraries."""

import logging
from typing import Optional

from .itinerary import elapsed_minutes, marketing_carrier, stop_count, total_fare

logger = logging.getLogger(__name__)

STOP_FILTERS = {
    "direct": lambda stops: stops == 0,
    "one": lambda stops: stops == 1,
    "multi": lambda stops: stops >= 2,
}

SORT_KEYS = {
    "fastest": elapsed_minutes,
    "cheapest": lambda itin: total_fare(itin) or 0.0,
}


def matches_stops(itinerary: dict, stops_filter: Optional[str]) -> bool:
    check = STOP_FILTERS.get(stops_filter or "")
    return check is None or check(stop_count(itinerary))


def selected_airlines(airline_filter: Optional[dict]) -> set[str]:
    return {code.upper() for code, on in (airline_filter or {}).items() if on}


def matches_airline(itinerary: dict, selected: set[str]) -> bool:
    if not selected:
        return True
    return marketing_carrier(itinerary) in selected


def filter_and_sort(
    itineraries: list[dict],
    stops_filter: Optional[str] = None,
    airline_filter: Optional[dict] = None,
    sort_option: Optional[str] = None,
) -> list[dict]:
    """Keep itineraries passing both filters, then sort (stable) if asked.

    Unknown filter or sort values impose no constraint / keep GDS order.
    """
    selected = selected_airlines(airline_filter)
    kept = [
        itin for itin in itineraries
        if matches_stops(itin, stops_filter) and matches_airline(itin, selected)
    ]
    if len(kept) != len(itineraries):
        logger.debug(f"Filtered {len(itineraries) - len(kept)} of {len(itineraries)} itineraries")

    sort_key = SORT_KEYS.get(sort_option or "")
    if sort_key is not None:
        kept.sort(key=sort_key)
    return kept
