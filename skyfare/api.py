"""Request handlers returning ``(status, body)`` pairs.

Validation problems give a 400 and never reach the GDS. Upstream failures
come back as a 200 with ``success: False``, so callers must check the
``success`` flag rather than the status alone.
"""

import logging
from typing import Any

from .config import DEFAULT_CABIN
from .errors import ValidationError
from .fare_calendar import FareCalendarAggregator
from .models import SearchRequest
from .normalize import extract_baggage, extract_fare_rules, fare_basis_codes, infer_refundable
from .search import FlightSearchService

logger = logging.getLogger(__name__)

Response = tuple[int, dict]


def _client_error(message: str) -> Response:
    return 400, {"success": False, "error": message}


async def handle_flight_search(payload: Any, service: FlightSearchService) -> Response:
    try:
        request = SearchRequest.from_payload(payload)
    except ValidationError as e:
        return _client_error(str(e))
    return 200, await service.search(request)


async def handle_fare_calendar(params: Any, aggregator: FareCalendarAggregator) -> Response:
    params = params or {}
    origin = params.get("origin")
    destination = params.get("destination")
    month = params.get("month")
    if not origin or not destination or not month:
        return _client_error("origin, destination, month required")
    cabin = params.get("cabin") or DEFAULT_CABIN
    try:
        adults = int(params.get("adults") or 1)
    except (TypeError, ValueError):
        return _client_error("adults must be an integer")
    if adults < 1:
        return _client_error("adults must be at least 1")

    try:
        result = await aggregator.build(origin, destination, month, cabin=cabin, adults=adults)
    except ValidationError as e:
        return _client_error(str(e))
    except Exception as e:
        logger.error(f"Fare calendar error: {e}")
        return 200, {"success": False, "error": str(e) or "Failed to fetch fare calendar"}

    return 200, {
        "success": True,
        "origin": result.origin,
        "destination": result.destination,
        "month": result.month,
        "fares": [entry.to_dict() for entry in result.fares],
    }


def handle_fare_rules(payload: Any) -> Response:
    pricing = payload.get("pricingInfo") if isinstance(payload, dict) else None
    if not pricing:
        return _client_error("pricingInfo required")
    rules = extract_fare_rules(pricing)
    codes = fare_basis_codes(pricing)
    refundable, source = infer_refundable(rules, codes)
    return 200, {
        "success": True,
        "rules": rules,
        "fareBasisCodes": codes,
        "inferredRefundable": refundable,
        "inferredSource": source,
    }


def handle_baggage(payload: Any) -> Response:
    pricing = payload.get("pricingInfo") if isinstance(payload, dict) else None
    if not pricing:
        return _client_error("pricingInfo required")
    return 200, {"success": True, "baggage": extract_baggage(pricing)}
