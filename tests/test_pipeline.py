"""Tests for stop/airline filtering and sorting."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from skyfare.itinerary import elapsed_minutes, marketing_carrier, priced_itineraries, stop_count, total_fare
from skyfare.pipeline import filter_and_sort
from tests.mock_data import search_response, make_itinerary


def carriers(itins):
    return [marketing_carrier(i) for i in itins]


# ── Stop counting ───────────────────────────────────────────────────────────


def test_stop_count_per_fixture():
    bg, ek, sv = priced_itineraries(search_response())
    assert stop_count(bg) == 0
    assert stop_count(ek) == 1
    assert stop_count(sv) == 2


def test_stop_count_sums_over_legs():
    # Round trip: one stop outbound, direct return
    assert stop_count(make_itinerary("EK", 100, legs=[2, 1])) == 1
    assert stop_count(make_itinerary("EK", 100, legs=[2, 2])) == 2


def test_elapsed_minutes_sums_legs():
    assert elapsed_minutes(make_itinerary("EK", 100, legs=[1, 1], elapsed=[300, 320])) == 620
    assert elapsed_minutes(make_itinerary("EK", 100)) == 0


# ── Filters ─────────────────────────────────────────────────────────────────


def test_direct_filter():
    itins = priced_itineraries(search_response())
    assert carriers(filter_and_sort(itins, stops_filter="direct")) == ["BG"]


def test_one_and_multi_stop_filters():
    itins = priced_itineraries(search_response())
    assert carriers(filter_and_sort(itins, stops_filter="one")) == ["EK"]
    assert carriers(filter_and_sort(itins, stops_filter="multi")) == ["SV"]


def test_unknown_stop_filter_is_no_constraint():
    itins = priced_itineraries(search_response())
    assert carriers(filter_and_sort(itins, stops_filter="nonsense")) == ["BG", "EK", "SV"]


def test_airline_filter():
    itins = priced_itineraries(search_response())
    result = filter_and_sort(itins, airline_filter={"EK": True, "sv": True, "BG": False})
    assert carriers(result) == ["EK", "SV"]


def test_airline_filter_all_false_is_no_constraint():
    itins = priced_itineraries(search_response())
    assert len(filter_and_sort(itins, airline_filter={"EK": False, "BG": False})) == 3
    assert len(filter_and_sort(itins, airline_filter={})) == 3


def test_filters_combine():
    itins = priced_itineraries(search_response())
    assert filter_and_sort(itins, stops_filter="direct", airline_filter={"EK": True}) == []


def test_filter_on_empty_list():
    assert filter_and_sort([], stops_filter="direct", sort_option="cheapest") == []


# ── Sorting ─────────────────────────────────────────────────────────────────


def test_cheapest_sort():
    itins = priced_itineraries(search_response())
    result = filter_and_sort(itins, sort_option="cheapest")
    fares = [total_fare(i) for i in result]
    assert fares == sorted(fares)
    assert carriers(result) == ["SV", "EK", "BG"]


def test_fastest_sort():
    itins = priced_itineraries(search_response())
    result = filter_and_sort(itins, sort_option="fastest")
    times = [elapsed_minutes(i) for i in result]
    assert times == sorted(times)
    assert carriers(result) == ["BG", "EK", "SV"]


def test_sort_is_stable_for_ties():
    itins = [make_itinerary(code, 500) for code in ("AA", "BB", "CC", "DD")]
    assert carriers(filter_and_sort(itins, sort_option="cheapest")) == ["AA", "BB", "CC", "DD"]


def test_missing_fare_sorts_as_zero():
    itins = [make_itinerary("AA", 300), make_itinerary("BB", None), make_itinerary("CC", 100)]
    assert carriers(filter_and_sort(itins, sort_option="cheapest")) == ["BB", "CC", "AA"]


def test_unknown_sort_keeps_gds_order():
    itins = priced_itineraries(search_response())
    assert carriers(filter_and_sort(itins, sort_option="random")) == ["BG", "EK", "SV"]
    assert carriers(filter_and_sort(itins)) == ["BG", "EK", "SV"]


def test_elapsed_minutes_accepts_float_strings():
    itin = make_itinerary("EK", 100, legs=[1, 1], elapsed=["125.0", 60.0])
    assert elapsed_minutes(itin) == 185
