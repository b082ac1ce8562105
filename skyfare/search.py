"""Flight search: GDS query + markup + normalization + filter/sort."""

import asyncio
import logging
from typing import Callable, Optional

from . import rules as rules_mod
from .gds.base import BaseGDSClient
from .itinerary import priced_itineraries
from .markup import apply_markup_all
from .models import MarkupRule, SearchRequest
from .normalize import normalize_all
from .pipeline import filter_and_sort

logger = logging.getLogger(__name__)

RuleLoader = Callable[[], list[MarkupRule]]


class FlightSearchService:
    """Runs one search request end to end.

    *rule_loader* is a blocking callable returning the active markup rules;
    it runs in a worker thread alongside the GDS call.
    """

    def __init__(self, gds: BaseGDSClient, rule_loader: Optional[RuleLoader] = None):
        self.gds = gds
        self.rule_loader = rule_loader or rules_mod.list_active_rules

    async def run(self, request: SearchRequest) -> list[dict]:
        """Return the marked-up, normalized, filtered and sorted itineraries.

        GDS and rule-store failures propagate to the caller.
        """
        response, rules = await asyncio.gather(
            self.gds.search(request.query),
            asyncio.to_thread(self.rule_loader),
        )
        itineraries = priced_itineraries(response)
        applied = apply_markup_all(itineraries, rules)
        logger.debug(f"{len(itineraries)} itineraries, {applied} marked up with {len(rules)} active rules")

        normalize_all(itineraries)
        return filter_and_sort(
            itineraries,
            stops_filter=request.filter_stops,
            airline_filter=request.filter_airlines,
            sort_option=request.sort_option,
        )

    async def search(self, request: SearchRequest) -> dict:
        """Like ``run`` but never raises: failures become a success-false payload."""
        try:
            itineraries = await self.run(request)
        except Exception as e:
            logger.error(f"Flight search error: {e}")
            return {"success": False, "error": str(e) or "Flight search failed"}
        return {"success": True, "data": itineraries, "count": len(itineraries)}
