"""Data models for skyfare fare search."""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .config import DEFAULT_CABIN
from .errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MARKUP_TYPES = ("percentage", "flat")
RULE_STATUSES = ("active", "inactive")
TRIP_TYPES = ("oneway", "roundtrip", "multicity")


def parse_date(value: Any, field_name: str) -> str:
    """Validate a YYYY-MM-DD string and return it unchanged."""
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise ValidationError(f"Invalid {field_name} format. Must be YYYY-MM-DD")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value} is not a calendar date")
    return value


def _split_codes(raw: Any) -> frozenset:
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        raw = re.split(r"[\s,;]+", raw)
    return frozenset(str(code).strip().upper() for code in raw if str(code).strip())


@dataclass
class MarkupRule:
    """A price markup rule applied on top of the GDS fare."""
    id: str
    markup_type: str  # percentage / flat
    markup_value: float
    priority: int = 0
    airlines: frozenset = frozenset()  # empty = all carriers
    origin: Optional[str] = None  # advisory, not matched
    status: str = "active"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def matches_carrier(self, carrier: Optional[str]) -> bool:
        if not self.airlines:
            return True
        if not carrier:
            return False
        return carrier.upper() in self.airlines

    @classmethod
    def from_dict(cls, data: dict) -> "MarkupRule":
        """Build a rule from loosely typed data (store rows, admin JSON)."""
        markup_type = str(data.get("markupType", data.get("markup_type", "percentage"))).lower()
        if markup_type not in MARKUP_TYPES:
            raise ValueError(f"Unknown markup type: {markup_type}")
        value = float(data.get("markupValue", data.get("markup_value", 0)) or 0)
        if value < 0:
            raise ValueError("Markup value must be non-negative")
        rule_id = data.get("id", data.get("_id"))
        return cls(
            id=str(rule_id) if rule_id is not None else "",
            markup_type=markup_type,
            markup_value=value,
            priority=int(data.get("priority") or 0),
            airlines=_split_codes(data.get("airlines")),
            origin=data.get("origin") or None,
            status=str(data.get("status", "active")).lower(),
        )


@dataclass
class TripSegment:
    """One origin/destination/date leg of a requested trip."""
    origin: str
    destination: str
    date: str


@dataclass
class Travellers:
    adults: int = 1
    children: int = 0
    infants: int = 0
    cabin: Optional[str] = None


@dataclass
class FlightQuery:
    """Structured availability query handed to a GDS client."""
    origin: str
    destination: str
    departure_date: str
    return_date: Optional[str] = None
    travellers: Travellers = field(default_factory=Travellers)
    segments: list[TripSegment] = field(default_factory=list)

    def legs(self) -> list[TripSegment]:
        """Ordered legs to request: multi-city segments, or outbound (+ return)."""
        if self.segments:
            return list(self.segments)
        legs = [TripSegment(self.origin, self.destination, self.departure_date)]
        if self.return_date:
            legs.append(TripSegment(self.destination, self.origin, self.return_date))
        return legs


@dataclass
class SearchRequest:
    """A validated flight search request."""
    query: FlightQuery
    trip_type: str = "oneway"
    sort_option: Optional[str] = None
    filter_stops: Optional[str] = None
    filter_airlines: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "SearchRequest":
        """Validate a raw request body.

        Raises ValidationError on missing origin/destination/date, malformed
        dates or an empty multi-city segment list.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be an object")

        trip_type = str(payload.get("tripType") or "oneway").lower().replace("-", "").replace("_", "")
        if trip_type not in TRIP_TYPES:
            trip_type = "roundtrip" if payload.get("returnDate") else "oneway"

        travellers = _parse_travellers(payload)

        segments: list[TripSegment] = []
        if trip_type == "multicity":
            raw_segments = payload.get("segments") or []
            if not raw_segments:
                raise ValidationError("Multi-city search requires at least one segment")
            for i, seg in enumerate(raw_segments, start=1):
                if not isinstance(seg, dict) or not seg.get("origin") or not seg.get("destination") or not seg.get("date"):
                    raise ValidationError(f"Segment {i} requires origin, destination and date")
                segments.append(TripSegment(
                    origin=str(seg["origin"]).upper(),
                    destination=str(seg["destination"]).upper(),
                    date=parse_date(seg["date"], f"segment {i} date"),
                ))
            first, last = segments[0], segments[-1]
            query = FlightQuery(
                origin=str(payload.get("origin") or first.origin).upper(),
                destination=str(payload.get("destination") or last.destination).upper(),
                departure_date=first.date,
                travellers=travellers,
                segments=segments,
            )
        else:
            origin = payload.get("origin")
            destination = payload.get("destination")
            departure_date = payload.get("departureDate")
            if not origin or not destination or not departure_date:
                raise ValidationError("Missing required fields: origin, destination, departureDate")
            return_date = payload.get("returnDate") or None
            query = FlightQuery(
                origin=str(origin).upper(),
                destination=str(destination).upper(),
                departure_date=parse_date(departure_date, "departureDate"),
                return_date=parse_date(return_date, "returnDate") if return_date else None,
                travellers=travellers,
            )

        airlines = payload.get("filterAirlines") or {}
        if not isinstance(airlines, dict):
            raise ValidationError("filterAirlines must be a map of carrier code to boolean")

        return cls(
            query=query,
            trip_type=trip_type,
            sort_option=payload.get("sortOption") or None,
            filter_stops=payload.get("filterStops") or None,
            filter_airlines={str(k).upper(): bool(v) for k, v in airlines.items()},
        )


def _parse_travellers(payload: dict) -> Travellers:
    raw = payload.get("travellers") or {}
    if not isinstance(raw, dict):
        raise ValidationError("travellers must be an object")
    try:
        adults = int(raw.get("adults", payload.get("passengers", 1)) or 1)
        children = int(raw.get("children", 0) or 0)
        infants = int(raw.get("infants", 0) or 0)
    except (TypeError, ValueError):
        raise ValidationError("Traveller counts must be integers")
    if adults < 1 or children < 0 or infants < 0:
        raise ValidationError("At least one adult is required and counts cannot be negative")
    cabin = raw.get("cabin") or raw.get("class") or payload.get("class") or None
    return Travellers(adults=adults, children=children, infants=infants, cabin=cabin)


@dataclass
class FareCalendarEntry:
    """Minimum fare found for one departure date."""
    date: str
    amount: Optional[float] = None
    currency: Optional[str] = None

    def to_dict(self) -> dict:
        return {"date": self.date, "amount": self.amount, "currency": self.currency}


@dataclass
class FareCalendarResult:
    """Per-day minimum fares for one route and month."""
    origin: str
    destination: str
    month: str
    fares: list[FareCalendarEntry] = field(default_factory=list)
    cabin: str = DEFAULT_CABIN
    adults: int = 1

    def best(self) -> Optional[FareCalendarEntry]:
        priced = [f for f in self.fares if f.amount is not None]
        if not priced:
            return None
        return min(priced, key=lambda f: f.amount)
