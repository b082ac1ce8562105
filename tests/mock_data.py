"""Mock Sabre BFM responses for testing.

The three itineraries deliberately use different response shapes for the
same logical fields (list vs. single pricing info, ``FareInfos.FareInfo`` vs.
bare ``FareInfo``, nested vs. bare ``PTC_FareBreakdowns``, total fare under
``TotalFare`` vs. directly on ``ItinTotalFare``).
"""

import copy

# Biman direct DAC-JED: the "standard" shape with everything present.
BG_DIRECT = {
    "SequenceNumber": 1,
    "AirItinerary": {
        "DirectionInd": "OneWay",
        "OriginDestinationOptions": {
            "OriginDestinationOption": [
                {
                    "ElapsedTime": 390,
                    "FlightSegment": [
                        {
                            "DepartureDateTime": "2025-07-15T18:30:00",
                            "ArrivalDateTime": "2025-07-15T22:00:00",
                            "FlightNumber": "135",
                            "ResBookDesigCode": "V",
                            "ElapsedTime": 390,
                            "DepartureAirport": {"LocationCode": "DAC"},
                            "ArrivalAirport": {"LocationCode": "JED"},
                            "MarketingAirline": {"Code": "BG"},
                            "OperatingAirline": {"Code": "BG", "FlightNumber": "135"},
                        }
                    ],
                }
            ]
        },
    },
    "AirItineraryPricingInfo": [
        {
            "ItinTotalFare": {
                "BaseFare": {"Amount": 40000, "CurrencyCode": "BDT"},
                "TotalFare": {"Amount": 52000, "CurrencyCode": "BDT"},
            },
            "FareInfos": {
                "FareInfo": [
                    {
                        "FareReference": "V",
                        "TPA_Extensions": {
                            "SeatsRemaining": {"Number": 4, "BelowMin": False},
                            "Cabin": {"Cabin": "Y"},
                        },
                    }
                ]
            },
            "PTC_FareBreakdowns": {
                "PTC_FareBreakdown": [
                    {
                        "PassengerTypeQuantity": {"Code": "ADT", "Quantity": 1},
                        "FareBasisCodes": {"FareBasisCode": [{"content": "VLOWBD"}]},
                        "PassengerFare": {
                            "BaseFare": {"Amount": 40000, "CurrencyCode": "BDT"},
                            "Taxes": {
                                "Tax": [
                                    {"TaxCode": "BD", "Amount": 500, "CurrencyCode": "BDT"},
                                    {"TaxCode": "E5", "Amount": 1500, "CurrencyCode": "BDT"},
                                ],
                                "TotalTax": {"Amount": 12000, "CurrencyCode": "BDT"},
                            },
                            "TotalFare": {"Amount": 52000, "CurrencyCode": "BDT"},
                        },
                    }
                ]
            },
            "TPA_Extensions": {
                "ValidatingCarrier": {"Code": "BG"},
                "Baggage": {"Checkin": "30KG", "Cabin": "7KG"},
                "Rules": {
                    "Cancellation": "NON-REFUNDABLE AFTER DEPARTURE",
                    "DateChange": "CHANGE FEE BDT 5000",
                },
            },
        }
    ],
}

# Emirates via DXB: single pricing-info object, no validating carrier,
# seats on the segments, structured baggage info, tax lines only.
EK_ONE_STOP = {
    "SequenceNumber": 2,
    "AirItinerary": {
        "OriginDestinationOptions": {
            "OriginDestinationOption": {
                "ElapsedTime": 600,
                "FlightSegment": [
                    {
                        "DepartureDateTime": "2025-07-15T09:40:00",
                        "ArrivalDateTime": "2025-07-15T13:10:00",
                        "FlightNumber": "583",
                        "DepartureAirport": {"LocationCode": "DAC"},
                        "ArrivalAirport": {"LocationCode": "DXB"},
                        "MarketingAirline": {"Code": "EK"},
                        "SeatsRemaining": {"Number": 7},
                    },
                    {
                        "DepartureDateTime": "2025-07-15T15:30:00",
                        "ArrivalDateTime": "2025-07-15T17:40:00",
                        "FlightNumber": "801",
                        "DepartureAirport": {"LocationCode": "DXB"},
                        "ArrivalAirport": {"LocationCode": "JED"},
                        "MarketingAirline": {"Code": "EK"},
                        "SeatsRemaining": {"Number": 3},
                    },
                ],
            }
        }
    },
    "AirItineraryPricingInfo": {
        "ItinTotalFare": {
            "TotalFare": {"Amount": "48500.50", "CurrencyCode": "BDT"},
        },
        "FareInfo": [
            {
                "TPA_Extensions": {
                    "Cabin": {"Cabin": "Y"},
                    "BaggageInformation": [{"Pieces": 2}],
                }
            }
        ],
        "PTC_FareBreakdowns": {
            "PTC_FareBreakdown": {
                "PassengerFare": {
                    "Taxes": {
                        "Tax": [
                            {"TaxCode": "BD", "Amount": 500},
                            {"TaxCode": "UT", "Amount": "3000.25"},
                            {"TaxCode": "YQ", "Amount": 6000},
                        ]
                    },
                    "EquivFare": {"Amount": 39000, "CurrencyCode": "USD"},
                }
            }
        },
    },
}

# Saudia with two stops: total fare directly on ItinTotalFare, bare
# PTC_FareBreakdowns list, no seat or baggage data at all.
SV_TWO_STOP = {
    "SequenceNumber": 3,
    "AirItinerary": {
        "OriginDestinationOptions": {
            "OriginDestinationOption": [
                {
                    "ElapsedTime": 900,
                    "FlightSegment": [
                        {
                            "DepartureDateTime": "2025-07-15T06:00:00",
                            "FlightNumber": "805",
                            "DepartureAirport": {"LocationCode": "DAC"},
                            "ArrivalAirport": {"LocationCode": "CCU"},
                            "MarketingAirline": {"Code": "SV"},
                        },
                        {
                            "DepartureDateTime": "2025-07-15T10:00:00",
                            "FlightNumber": "811",
                            "DepartureAirport": {"LocationCode": "CCU"},
                            "ArrivalAirport": {"LocationCode": "RUH"},
                            "MarketingAirline": {"Code": "SV"},
                        },
                        {
                            "DepartureDateTime": "2025-07-15T18:00:00",
                            "FlightNumber": "1021",
                            "DepartureAirport": {"LocationCode": "RUH"},
                            "ArrivalAirport": {"LocationCode": "JED"},
                            "MarketingAirline": {"Code": "SV"},
                        },
                    ],
                }
            ]
        }
    },
    "AirItineraryPricingInfo": [
        {
            "ItinTotalFare": {"Amount": "45000", "CurrencyCode": "BDT"},
            "PTC_FareBreakdowns": [
                {
                    "FareBasisCodes": {"FareBasisCode": ["TNRBD", "TNRBD"]},
                    "PassengerFare": {
                        "Taxes": {"TotalTax": {"Amount": 9000}},
                        "TotalFare": {"Amount": 45000, "CurrencyCode": "BDT"},
                    },
                }
            ],
            "TPA_Extensions": {"ValidatingCarrier": {"Code": "SV"}},
        }
    ],
}


def search_response(*itineraries: dict) -> dict:
    """A BFM response wrapping deep copies of *itineraries*.

    Defaults to the three fixtures above in GDS order BG, EK, SV.
    """
    itins = itineraries or (BG_DIRECT, EK_ONE_STOP, SV_TWO_STOP)
    return {
        "OTA_AirLowFareSearchRS": {
            "PricedItineraries": {
                "PricedItinerary": [copy.deepcopy(i) for i in itins]
            }
        }
    }


EMPTY_RESPONSE = {"OTA_AirLowFareSearchRS": {"PricedItineraries": {}}}

SINGLE_ITINERARY_RESPONSE = {
    "OTA_AirLowFareSearchRS": {
        "PricedItineraries": {"PricedItinerary": BG_DIRECT}
    }
}


def make_itinerary(
    carrier: str,
    fare,
    legs: list[int] = (1,),
    elapsed: list[int] = None,
    validating: str = None,
) -> dict:
    """Build a minimal itinerary.

    *legs* gives the segment count of each leg; *elapsed* the ElapsedTime of
    each leg (omitted when None).
    """
    options = []
    for i, count in enumerate(legs):
        option = {
            "FlightSegment": [
                {
                    "FlightNumber": str(100 + i * 10 + n),
                    "DepartureAirport": {"LocationCode": "AAA"},
                    "ArrivalAirport": {"LocationCode": "BBB"},
                    "MarketingAirline": {"Code": carrier},
                }
                for n in range(count)
            ]
        }
        if elapsed is not None:
            option["ElapsedTime"] = elapsed[i]
        options.append(option)

    pricing = {"ItinTotalFare": {"TotalFare": {"Amount": fare, "CurrencyCode": "BDT"}}}
    if validating:
        pricing["TPA_Extensions"] = {"ValidatingCarrier": {"Code": validating}}

    return {
        "AirItinerary": {"OriginDestinationOptions": {"OriginDestinationOption": options}},
        "AirItineraryPricingInfo": [pricing],
    }
