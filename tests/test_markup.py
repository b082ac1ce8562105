"""Tests for the markup rule engine."""

import copy
import itertools
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from skyfare.itinerary import pricing_info, total_fare
from skyfare.markup import apply_markup, apply_markup_all, governing_carrier, select_rule, sort_rules
from skyfare.models import MarkupRule
from tests.mock_data import BG_DIRECT, EK_ONE_STOP, make_itinerary


def rule(rule_id, value, markup_type="percentage", priority=0, airlines=(), status="active", origin=None):
    return MarkupRule(
        id=rule_id,
        markup_type=markup_type,
        markup_value=value,
        priority=priority,
        airlines=frozenset(airlines),
        status=status,
        origin=origin,
    )


# ── Governing carrier ───────────────────────────────────────────────────────


def test_governing_carrier_prefers_validating():
    itin = make_itinerary("EK", 1000, validating="QR")
    assert governing_carrier(itin) == "QR"


def test_governing_carrier_falls_back_to_first_segment():
    assert governing_carrier(copy.deepcopy(EK_ONE_STOP)) == "EK"


def test_governing_carrier_accepts_bare_string():
    itin = make_itinerary("EK", 1000)
    pricing_info(itin)["TPA_Extensions"] = {"ValidatingCarrier": "bg"}
    assert governing_carrier(itin) == "BG"


# ── Rule selection ──────────────────────────────────────────────────────────


def test_sort_rules_is_stable_for_equal_priority():
    rules = [rule("a", 1, priority=5), rule("b", 2, priority=10), rule("c", 3, priority=5)]
    assert [r.id for r in sort_rules(rules)] == ["b", "a", "c"]


def test_select_rule_skips_inactive_and_non_matching():
    rules = sort_rules([
        rule("inactive", 50, priority=100, status="inactive"),
        rule("qr-only", 20, priority=50, airlines={"QR"}),
        rule("bg", 10, priority=10, airlines={"BG"}),
        rule("catch-all", 1, priority=0),
    ])
    assert select_rule("BG", rules).id == "bg"
    assert select_rule("EK", rules).id == "catch-all"


def test_airline_match_is_case_insensitive():
    rules = [rule("bg", 10, airlines={"BG"})]
    assert select_rule("bg", rules).id == "bg"


def test_selection_independent_of_input_order():
    rules = [
        rule("low", 1, priority=1),
        rule("high-bg", 2, priority=9, airlines={"BG"}),
        rule("mid", 3, priority=5),
    ]
    for perm in itertools.permutations(rules):
        itin = copy.deepcopy(BG_DIRECT)
        applied = apply_markup(itin, list(perm))
        assert applied.id == "high-bg"


def test_origin_is_not_matched():
    """A rule's origin is advisory; it still applies to other origins."""
    itin = copy.deepcopy(BG_DIRECT)  # departs DAC
    applied = apply_markup(itin, [rule("cgp", 10, origin="CGP")])
    assert applied is not None
    assert applied.id == "cgp"


# ── Fare arithmetic ─────────────────────────────────────────────────────────


def test_percentage_markup():
    itin = copy.deepcopy(BG_DIRECT)
    apply_markup(itin, [rule("pct", 7.5)])
    assert total_fare(itin) == round(52000 * 1.075, 2)
    audit = pricing_info(itin)["Markup"]
    assert audit == {"Amount": 3900.0, "Type": "percentage", "RuleId": "pct", "OriginalFare": 52000.0}


def test_flat_markup_rounds_to_cents():
    itin = make_itinerary("BG", "1000.105")
    apply_markup(itin, [rule("flat", 250.333, markup_type="flat")])
    assert total_fare(itin) == round(1000.105 + 250.333, 2)
    assert pricing_info(itin)["Markup"]["Type"] == "flat"


def test_markup_keeps_currency():
    itin = copy.deepcopy(EK_ONE_STOP)
    apply_markup(itin, [rule("pct", 10)])
    node = pricing_info(itin)["ItinTotalFare"]["TotalFare"]
    assert node["CurrencyCode"] == "BDT"
    assert node["Amount"] == round(48500.50 * 1.10, 2)


def test_markup_on_alternate_fare_location_writes_canonical_field():
    itin = make_itinerary("SV", None)
    pricing_info(itin)["ItinTotalFare"] = {"Amount": "45000", "CurrencyCode": "BDT"}
    apply_markup(itin, [rule("flat", 500, markup_type="flat")])
    assert pricing_info(itin)["ItinTotalFare"]["TotalFare"] == {"Amount": 45500.0, "CurrencyCode": "BDT"}


# ── Pass-through cases ──────────────────────────────────────────────────────


def test_no_matching_rule_leaves_itinerary_unchanged():
    itin = copy.deepcopy(BG_DIRECT)
    before = copy.deepcopy(itin)
    assert apply_markup(itin, [rule("ek", 10, airlines={"EK"}), rule("off", 5, status="inactive")]) is None
    assert itin == before
    assert "Markup" not in pricing_info(itin)


def test_no_fare_leaves_itinerary_unchanged():
    itin = make_itinerary("BG", None)
    before = copy.deepcopy(itin)
    assert apply_markup(itin, [rule("any", 10)]) is None
    assert itin == before


def test_no_pricing_info_is_not_an_error():
    itin = {"AirItinerary": {}}
    assert apply_markup(itin, [rule("any", 10)]) is None
    assert itin == {"AirItinerary": {}}


def test_apply_markup_all_counts_changes():
    itins = [make_itinerary("BG", 100), make_itinerary("EK", 200), make_itinerary("QR", None)]
    applied = apply_markup_all(itins, [rule("bg", 10, airlines={"BG"}), rule("ek", 5, markup_type="flat", airlines={"EK"})])
    assert applied == 2
    assert total_fare(itins[0]) == 110.0
    assert total_fare(itins[1]) == 205.0


# ── Rule parsing ────────────────────────────────────────────────────────────


def test_rule_from_loose_dict():
    r = MarkupRule.from_dict({
        "_id": "65f0",
        "markupType": "Flat",
        "markupValue": "300",
        "priority": "7",
        "airlines": "bg, ek\nqr",
        "origin": "DAC",
    })
    assert r.id == "65f0"
    assert r.markup_type == "flat"
    assert r.markup_value == 300.0
    assert r.priority == 7
    assert r.airlines == frozenset({"BG", "EK", "QR"})
    assert r.is_active


def test_rule_from_dict_rejects_bad_type_and_negative_value():
    with pytest.raises(ValueError):
        MarkupRule.from_dict({"markupType": "multiplier", "markupValue": 2})
    with pytest.raises(ValueError):
        MarkupRule.from_dict({"markupType": "flat", "markupValue": -1})


def test_audit_amount_matches_total_delta():
    for fare in (0.125, 99.995, 1000.005, 48500.5, 123456.785):
        for value in (7.5, 12.345, 33.3):
            itin = make_itinerary("BG", fare)
            apply_markup(itin, [rule("pct", value)])
            audit = pricing_info(itin)["Markup"]
            assert audit["Amount"] == round(total_fare(itin) - audit["OriginalFare"], 2)
