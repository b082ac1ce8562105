"""Itinerary normalizer.

Hoists seats-remaining, baggage allowance, cabin code, total tax and total
fare from whichever nested location the GDS response variant used onto
canonical fields of the first pricing-info block:

    pricing["SeatsRemaining"]          int
    pricing["Baggage"]                 str
    pricing["CabinCode"]               str
    pricing["TotalTax"]                {"Amount": float, "CurrencyCode": str}
    pricing["ItinTotalFare"]["TotalFare"]

Each attribute is an ordered list of accessors (see ``extract.first_of``). An
attribute that no accessor finds is simply left off. Source fields are never
removed, so normalizing twice gives the same result as normalizing once.
"""

import logging
from typing import Any, Optional

from .config import DEFAULT_CURRENCY
from .extract import as_list, dig, first_of, path, safe, to_amount, to_positive_int
from .itinerary import (
    all_segments,
    fare_infos,
    first_fare_breakdown,
    first_fare_info,
    pricing_info,
    set_total_fare,
    total_fare_currency,
    total_fare_node,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Seats remaining
# ---------------------------------------------------------------------------

SEGMENT_SEATS = [
    path("SeatsRemaining", "Number"),
    path("TPA_Extensions", "SeatsRemaining", "Number"),
]

FARE_INFO_SEATS = [
    path("TPA_Extensions", "SeatsRemaining", "Number"),
]


def seats_remaining(itinerary: Any) -> Optional[int]:
    """First positive seat count on any segment, then on any fare-info."""
    for segment in all_segments(itinerary):
        seats = to_positive_int(first_of(SEGMENT_SEATS, segment))
        if seats is not None:
            return seats
    for info in fare_infos(pricing_info(itinerary)):
        seats = to_positive_int(first_of(FARE_INFO_SEATS, info))
        if seats is not None:
            return seats
    return None


# ---------------------------------------------------------------------------
# Baggage
# ---------------------------------------------------------------------------

BAGGAGE_TEXT = [
    path("TPA_Extensions", "Baggage", "Checkin"),
    path("TPA_Extensions", "Baggage", "Cabin"),
    lambda p: dig(first_fare_info(p), "TPA_Extensions", "Baggage", "Checkin"),
    lambda p: dig(first_fare_info(p), "TPA_Extensions", "Baggage", "Cabin"),
    lambda p: dig(first_fare_breakdown(p), "TPA_Extensions", "Baggage", "Checkin"),
    lambda p: dig(first_fare_breakdown(p), "TPA_Extensions", "Baggage", "Cabin"),
]

BAGGAGE_INFO_BLOCK = [
    lambda p: dig(first_fare_info(p), "TPA_Extensions", "BaggageInformation"),
    path("TPA_Extensions", "BaggageInformation"),
]

BAGGAGE_INFO_TEXT = [
    path("Description"),
    path("Provision"),
    path("BaggageDetails", 0, "Description"),
    lambda b: _allowance(b, "Pieces", "PC"),
    lambda b: _allowance(b, "Weight", "KG"),
    lambda b: _allowance(b.get("Allowance"), "Pieces", "PC"),
    lambda b: _allowance(b.get("Allowance"), "Weight", "KG"),
]


def _allowance(block: Any, key: str, unit: str) -> Optional[str]:
    value = dig(block, key)
    if _is_blank(value):
        return None
    return f"{value}{unit}"


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == 0 or value == "0"


def extract_baggage(pricing: Any) -> Optional[str]:
    """Baggage allowance text for one pricing-info block, or None."""
    text = first_of(BAGGAGE_TEXT, pricing)
    if text is not None:
        return str(text)
    block = first_of(BAGGAGE_INFO_BLOCK, pricing)
    first = dig(block, 0)
    if not isinstance(first, dict):
        return None
    text = first_of(BAGGAGE_INFO_TEXT, first)
    return str(text) if text is not None else None


# ---------------------------------------------------------------------------
# Cabin
# ---------------------------------------------------------------------------

CABIN_CODE = [
    lambda p: dig(first_fare_info(p), "TPA_Extensions", "Cabin", "Cabin"),
]


def cabin_code(pricing: Any) -> Optional[str]:
    code = first_of(CABIN_CODE, pricing)
    return str(code) if code is not None else None


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------

def _passenger_fare(pricing: Any) -> Any:
    return dig(first_fare_breakdown(pricing), "PassengerFare")


def _explicit_total_tax(pricing: Any) -> Optional[float]:
    return to_amount(dig(_passenger_fare(pricing), "Taxes", "TotalTax"))


def _summed_tax_lines(pricing: Any) -> Optional[float]:
    lines = as_list(dig(_passenger_fare(pricing), "Taxes", "Tax"))
    amounts = [to_amount(line) for line in lines]
    amounts = [a for a in amounts if a is not None]
    if not amounts:
        return None
    return sum(amounts)


TAX_AMOUNT = [_explicit_total_tax, _summed_tax_lines]

TAX_CURRENCY = [
    total_fare_currency,
    lambda p: dig(_passenger_fare(p), "TotalFare", "CurrencyCode"),
    lambda p: dig(_passenger_fare(p), "EquivFare", "CurrencyCode"),
]


def total_tax(pricing: Any) -> Optional[dict]:
    """{"Amount", "CurrencyCode"} for the first fare breakdown, or None."""
    amount = first_of(TAX_AMOUNT, pricing)
    if amount is None:
        return None
    currency = first_of(TAX_CURRENCY, pricing) or DEFAULT_CURRENCY
    return {"Amount": round(amount, 2), "CurrencyCode": currency}


# ---------------------------------------------------------------------------
# Normalize
# ---------------------------------------------------------------------------

def normalize(itinerary: dict) -> dict:
    """Write canonical fields onto the itinerary's pricing info, in place."""
    pricing = pricing_info(itinerary)
    if pricing is None:
        logger.debug("Itinerary has no pricing info; nothing to normalize")
        return itinerary

    fare_node = safe(total_fare_node, pricing)
    if fare_node is not None:
        set_total_fare(pricing, to_amount(fare_node), total_fare_currency(pricing))

    seats = safe(seats_remaining, itinerary)
    if seats is not None:
        pricing["SeatsRemaining"] = seats

    baggage = safe(extract_baggage, pricing)
    if baggage is not None:
        pricing["Baggage"] = baggage

    cabin = safe(cabin_code, pricing)
    if cabin is not None:
        pricing["CabinCode"] = cabin

    tax = safe(total_tax, pricing)
    if tax is not None:
        pricing["TotalTax"] = tax

    return itinerary


def normalize_all(itineraries: list[dict]) -> list[dict]:
    for itinerary in itineraries:
        normalize(itinerary)
    return itineraries


# ---------------------------------------------------------------------------
# Fare rules
# ---------------------------------------------------------------------------

RULES_BLOCK = [
    lambda p: dig(first_fare_info(p), "TPA_Extensions", "Rules"),
    path("TPA_Extensions", "Rules"),
]

NON_REFUNDABLE_MARKERS = ("NON REFUNDABLE", "NON-REFUNDABLE", "NOT REFUNDABLE", "NONREFUNDABLE", "NONREF")


def extract_fare_rules(pricing: Any) -> dict:
    """Cancellation / date-change / no-show text; all None when absent."""
    rules = first_of(RULES_BLOCK, pricing)
    if not isinstance(rules, dict):
        return {"cancellation": None, "dateChange": None, "noShow": None}
    return {
        "cancellation": rules.get("Cancellation") or None,
        "dateChange": rules.get("DateChange") or None,
        "noShow": rules.get("NoShow") or None,
    }


def fare_basis_codes(pricing: Any) -> list[str]:
    codes = as_list(dig(first_fare_breakdown(pricing), "FareBasisCodes", "FareBasisCode"))
    result = []
    for code in codes:
        if isinstance(code, dict):
            code = code.get("content") or code.get("FareBasisCode") or ""
        if code:
            result.append(str(code))
    return result


def infer_refundable(rules: dict, codes: list[str]) -> tuple[Optional[bool], Optional[str]]:
    """Guess refundability from rule text, then from fare basis codes.

    Returns (refundable, source) where source is "rules", "farebasis" or None.
    """
    text = " ".join(str(rules.get(k) or "") for k in ("cancellation", "dateChange", "noShow")).upper()
    if any(marker in text for marker in NON_REFUNDABLE_MARKERS):
        return False, "rules"
    if "REFUNDABLE" in text:
        return True, "rules"
    if any("NR" in code.upper() for code in codes):
        return False, "farebasis"
    return None, None
