"""Accessors for Sabre priced-itinerary trees.

Itineraries stay as the raw dicts returned by the GDS; these helpers locate
the parts the engine reads and writes regardless of response variant.
"""

from typing import Any, Optional

from .extract import as_list, dig, first_of, path, to_amount

RESPONSE_ROOT = "OTA_AirLowFareSearchRS"


def priced_itineraries(response: Any) -> list[dict]:
    """List of itinerary dicts in a BFM response (empty when none)."""
    node = dig(response, RESPONSE_ROOT, "PricedItineraries", "PricedItinerary")
    return [itin for itin in as_list(node) if isinstance(itin, dict)]


def pricing_info(itinerary: Any) -> Optional[dict]:
    """The first AirItineraryPricingInfo block (list or single object)."""
    info = dig(itinerary, "AirItineraryPricingInfo", 0)
    return info if isinstance(info, dict) else None


def legs(itinerary: Any) -> list[dict]:
    node = dig(itinerary, "AirItinerary", "OriginDestinationOptions", "OriginDestinationOption")
    return [leg for leg in as_list(node) if isinstance(leg, dict)]


def leg_segments(leg: Any) -> list[dict]:
    return [seg for seg in as_list(dig(leg, "FlightSegment")) if isinstance(seg, dict)]


def all_segments(itinerary: Any) -> list[dict]:
    return [seg for leg in legs(itinerary) for seg in leg_segments(leg)]


def first_segment(itinerary: Any) -> Optional[dict]:
    segments = all_segments(itinerary)
    return segments[0] if segments else None


def marketing_carrier(itinerary: Any) -> Optional[str]:
    """Marketing carrier code of the very first flight segment."""
    code = dig(first_segment(itinerary), "MarketingAirline", "Code")
    return str(code).upper() if code else None


def fare_infos(pricing: Any) -> list[dict]:
    """Fare-info records: ``FareInfos.FareInfo`` or a bare ``FareInfo``."""
    node = dig(pricing, "FareInfos", "FareInfo")
    if node is None:
        node = dig(pricing, "FareInfo")
    return [info for info in as_list(node) if isinstance(info, dict)]


def fare_breakdowns(pricing: Any) -> list[dict]:
    """PTC fare breakdowns: nested ``PTC_FareBreakdown`` or a bare list."""
    node = dig(pricing, "PTC_FareBreakdowns")
    if isinstance(node, dict) and "PTC_FareBreakdown" in node:
        node = node["PTC_FareBreakdown"]
    return [item for item in as_list(node) if isinstance(item, dict)]


def first_fare_info(pricing: Any) -> Optional[dict]:
    infos = fare_infos(pricing)
    return infos[0] if infos else None


def first_fare_breakdown(pricing: Any) -> Optional[dict]:
    items = fare_breakdowns(pricing)
    return items[0] if items else None


# Total fare, in order of preference. The first entry is the canonical field
# the markup engine and normalizer write back to.
TOTAL_FARE_NODES = [
    path("ItinTotalFare", "TotalFare"),
    path("ItinTotalFare"),
    lambda p: dig(first_fare_info(p), "TPA_Extensions", "TotalFare"),
]


def total_fare_node(pricing: Any) -> Optional[dict]:
    """First fare node that carries a parseable amount."""
    for accessor in TOTAL_FARE_NODES:
        node = first_of([accessor], pricing)
        if isinstance(node, dict) and to_amount(node) is not None:
            return node
    return None


def total_fare(itinerary: Any) -> Optional[float]:
    return to_amount(total_fare_node(pricing_info(itinerary)))


def total_fare_currency(pricing: Any) -> Optional[str]:
    node = total_fare_node(pricing)
    if node is None:
        return None
    return node.get("CurrencyCode") or node.get("currency") or None


def set_total_fare(pricing: dict, amount: float, currency: Optional[str]) -> None:
    """Write the canonical ``ItinTotalFare.TotalFare`` node."""
    itin_total = pricing.get("ItinTotalFare")
    if not isinstance(itin_total, dict):
        itin_total = {}
        pricing["ItinTotalFare"] = itin_total
    node = itin_total.get("TotalFare")
    if not isinstance(node, dict):
        node = {}
        itin_total["TotalFare"] = node
    node["Amount"] = amount
    if currency:
        node["CurrencyCode"] = currency


def elapsed_minutes(itinerary: Any) -> int:
    """Total elapsed time: sum of each leg's ElapsedTime (0 when absent)."""
    total = 0
    for leg in legs(itinerary):
        try:
            total += int(float(leg.get("ElapsedTime") or 0))
        except (TypeError, ValueError, OverflowError):
            continue
    return total


def stop_count(itinerary: Any) -> int:
    return sum(max(0, len(leg_segments(leg)) - 1) for leg in legs(itinerary))
