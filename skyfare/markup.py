"""Markup rule engine.

Selects at most one markup rule per itinerary and layers it on top of the
GDS-quoted total fare.

Known gap: ``MarkupRule.origin`` is stored with every rule but is not matched
against itinerary data. Whether it is reserved schema or a missing check has
not been settled, so rules with an origin still match every origin.
"""

import logging
from typing import Iterable, Optional

from .extract import dig, to_amount
from .itinerary import (
    marketing_carrier,
    pricing_info,
    set_total_fare,
    total_fare_currency,
    total_fare_node,
)
from .models import MarkupRule

logger = logging.getLogger(__name__)


def sort_rules(rules: Iterable[MarkupRule]) -> list[MarkupRule]:
    """Highest priority first; equal priorities keep store order."""
    return sorted(rules, key=lambda r: r.priority, reverse=True)


def governing_carrier(itinerary: dict) -> Optional[str]:
    """Validating carrier from the pricing info, else first marketing carrier."""
    validating = dig(pricing_info(itinerary), "TPA_Extensions", "ValidatingCarrier")
    if isinstance(validating, dict):
        validating = validating.get("Code")
    if isinstance(validating, str) and validating.strip():
        return validating.strip().upper()
    return marketing_carrier(itinerary)


def select_rule(carrier: Optional[str], sorted_rules: list[MarkupRule]) -> Optional[MarkupRule]:
    for rule in sorted_rules:
        if rule.is_active and rule.matches_carrier(carrier):
            return rule
    return None


def markup_amount(rule: MarkupRule, fare: float) -> float:
    if rule.markup_type == "percentage":
        return fare * (rule.markup_value / 100)
    return rule.markup_value


def apply_markup(itinerary: dict, rules: list[MarkupRule], presorted: bool = False) -> Optional[MarkupRule]:
    """Apply the governing markup rule to *itinerary* in place.

    Returns the applied rule, or None when no rule matched or the itinerary
    has no total fare (the itinerary is then left untouched).
    """
    sorted_rules = rules if presorted else sort_rules(rules)
    rule = select_rule(governing_carrier(itinerary), sorted_rules)
    if rule is None:
        return None

    pricing = pricing_info(itinerary)
    original = to_amount(total_fare_node(pricing))
    if pricing is None or original is None:
        return None

    added = markup_amount(rule, original)
    new_total = round(original + added, 2)
    set_total_fare(pricing, new_total, total_fare_currency(pricing))
    pricing["Markup"] = {
        "Amount": round(new_total - original, 2),
        "Type": rule.markup_type,
        "RuleId": rule.id,
        "OriginalFare": original,
    }
    logger.debug(f"Markup rule {rule.id} applied: {original} -> {new_total}")
    return rule


def apply_markup_all(itineraries: list[dict], rules: list[MarkupRule]) -> int:
    """Mark up every itinerary; returns how many were changed."""
    sorted_rules = sort_rules(rules)
    applied = 0
    for itinerary in itineraries:
        if apply_markup(itinerary, sorted_rules, presorted=True) is not None:
            applied += 1
    return applied
