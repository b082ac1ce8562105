"""Fare calendar: minimum fare per day of a month for one route.

One GDS query per calendar date, at most ``concurrency`` in flight at a time.
Whole-month results are cached per (origin, destination, month, cabin, adults).
"""

import asyncio
import calendar as cal_mod
import logging
import re
from typing import Any, Optional

from .cache import TTLCache, make_key
from .config import CALENDAR_CONCURRENCY, DEFAULT_CABIN, DEFAULT_CURRENCY
from .errors import ValidationError
from .extract import dig, to_amount
from .gds.base import BaseGDSClient
from .itinerary import first_fare_info, priced_itineraries, pricing_info
from .models import FareCalendarEntry, FareCalendarResult, FlightQuery, Travellers

logger = logging.getLogger(__name__)

MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

FARE_NODES = [
    lambda p: dig(p, "ItinTotalFare", "TotalFare"),
    lambda p: dig(p, "ItinTotalFare"),
    lambda p: dig(first_fare_info(p), "TPA_Extensions", "TotalFare"),
]


def parse_month(month: str) -> tuple[int, int]:
    """Validate YYYY-MM and return (year, month)."""
    match = MONTH_RE.match(month or "")
    if not match:
        raise ValidationError(f"Invalid month format: {month}. Use YYYY-MM (e.g. 2025-07)")
    year, mon = int(match.group(1)), int(match.group(2))
    if not 1 <= mon <= 12 or year < 1:
        raise ValidationError(f"Invalid month: {month}")
    return year, mon


def month_dates(year: int, month: int) -> list[str]:
    _, days_in_month = cal_mod.monthrange(year, month)
    return [f"{year}-{month:02d}-{d:02d}" for d in range(1, days_in_month + 1)]


def _fare_of(pricing: Any, default_currency: str) -> Optional[tuple[float, str]]:
    for accessor in FARE_NODES:
        node = accessor(pricing)
        amount = to_amount(node)
        if amount is None:
            continue
        currency = None
        if isinstance(node, dict):
            currency = node.get("CurrencyCode") or node.get("currency")
        return amount, currency or default_currency
    return None


def min_fare(response: Any, default_currency: str = DEFAULT_CURRENCY) -> Optional[tuple[float, str]]:
    """Cheapest (amount, currency) over the raw itineraries, or None."""
    best: Optional[tuple[float, str]] = None
    for itinerary in priced_itineraries(response):
        fare = _fare_of(pricing_info(itinerary), default_currency)
        if fare is not None and (best is None or fare[0] < best[0]):
            best = fare
    return best


class FareCalendarAggregator:
    """Builds cached per-day minimum fare calendars from a GDS client."""

    def __init__(
        self,
        gds: BaseGDSClient,
        cache: Optional[TTLCache] = None,
        concurrency: int = CALENDAR_CONCURRENCY,
        default_currency: str = DEFAULT_CURRENCY,
    ):
        self.gds = gds
        self.cache = cache if cache is not None else TTLCache()
        self.concurrency = concurrency
        self.default_currency = default_currency

    async def _fare_for_date(
        self,
        sem: asyncio.Semaphore,
        origin: str,
        destination: str,
        day: str,
        cabin: str,
        adults: int,
    ) -> FareCalendarEntry:
        query = FlightQuery(
            origin=origin,
            destination=destination,
            departure_date=day,
            travellers=Travellers(adults=adults, cabin=cabin),
        )
        async with sem:
            try:
                response = await self.gds.search(query)
            except Exception as e:
                logger.warning(f"Fare calendar: {origin}->{destination} {day} failed: {e}")
                return FareCalendarEntry(date=day)

        fare = min_fare(response, self.default_currency)
        if fare is None:
            return FareCalendarEntry(date=day)
        return FareCalendarEntry(date=day, amount=fare[0], currency=fare[1])

    async def build(
        self,
        origin: str,
        destination: str,
        month: str,
        cabin: Optional[str] = None,
        adults: int = 1,
    ) -> FareCalendarResult:
        """Minimum fare for every day of *month*, served from cache when fresh."""
        if not origin or not destination:
            raise ValidationError("origin, destination, month required")
        year, mon = parse_month(month)
        cabin = cabin or DEFAULT_CABIN
        origin, destination = origin.upper(), destination.upper()

        key = make_key(origin, destination, month, cabin, adults)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Cache hit for fare calendar {origin}->{destination} {month}")
            return cached

        dates = month_dates(year, mon)
        logger.info(f"Fare calendar: scanning {len(dates)} days for {origin}->{destination} {month}")
        sem = asyncio.Semaphore(self.concurrency)
        entries = await asyncio.gather(*[
            self._fare_for_date(sem, origin, destination, day, cabin, adults)
            for day in dates
        ])

        result = FareCalendarResult(
            origin=origin,
            destination=destination,
            month=month,
            fares=list(entries),
            cabin=cabin,
            adults=adults,
        )
        self.cache.put(key, result)
        return result
