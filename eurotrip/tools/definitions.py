"""모델에 제공하는 여행 편집 도구 스키마.

도구 이름과 입력 스키마는 인터프리터 핸들러와 1:1로 대응해야 합니다.
"""

from __future__ import annotations

from typing import Any

from eurotrip.schemas.enums import AccommodationType, ActivityCategory

SET_ROUTE = "set_route"
ADD_STOP = "add_stop"
REMOVE_STOP = "remove_stop"
UPDATE_STOP = "update_stop"
REORDER_STOPS = "reorder_stops"
UPDATE_TRIP = "update_trip"
ADD_BURGER_RECOMMENDATIONS = "add_burger_recommendations"
ADD_FONDUE_RECOMMENDATIONS = "add_fondue_recommendations"

TOOL_NAMES = frozenset(
    {
        SET_ROUTE,
        ADD_STOP,
        REMOVE_STOP,
        UPDATE_STOP,
        REORDER_STOPS,
        UPDATE_TRIP,
        ADD_BURGER_RECOMMENDATIONS,
        ADD_FONDUE_RECOMMENDATIONS,
    }
)


def _activity_schema(*, with_enum: bool) -> dict[str, Any]:
    category: dict[str, Any] = {"type": "string"}
    if with_enum:
        category["enum"] = [value.value for value in ActivityCategory]
    return {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "duration_hours": {"type": "number"},
                "cost_estimate": {"type": "number"},
                "category": category,
            },
            "required": ["name"],
        },
    }


def _accommodation_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "type": {"type": "string", "enum": [value.value for value in AccommodationType]},
            "cost_per_night": {"type": "number"},
            "notes": {"type": "string"},
        },
        "required": ["name", "type"],
    }


def _stop_properties(currency: str) -> dict[str, Any]:
    return {
        "name": {"type": "string", "description": "City or location name"},
        "lat": {"type": "number", "description": "Latitude"},
        "lng": {"type": "number", "description": "Longitude"},
        "country": {"type": "string", "description": "Country name"},
        "nights": {"type": "number", "description": "Number of nights to stay"},
        "activities": _activity_schema(with_enum=True),
        "accommodation": _accommodation_schema(),
        "daily_budget": {"type": "number", "description": f"Estimated daily budget in {currency}"},
        "notes": {"type": "string"},
    }


def _recommendation_tool(
    name: str,
    description: str,
    *,
    list_key: str,
    noun: str,
    stop_hint: str,
    specialty_hint: str,
    time_hint: str,
    currency: str,
) -> dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "input_schema": {
            "type": "object",
            "properties": {
                "recommendations": {
                    "type": "array",
                    "description": f"{noun.capitalize()} recommendations grouped by stop",
                    "items": {
                        "type": "object",
                        "properties": {
                            "stop_name": {"type": "string", "description": stop_hint},
                            list_key: {
                                "type": "array",
                                "description": f"List of {noun} restaurants for this stop",
                                "items": {
                                    "type": "object",
                                    "properties": {
                                        "restaurant_name": {"type": "string", "description": "Restaurant name"},
                                        "specialty": {"type": "string", "description": specialty_hint},
                                        "address": {"type": "string", "description": "Street address"},
                                        "cost_estimate": {
                                            "type": "number",
                                            "description": f"Cost per person in {currency}",
                                        },
                                        "time_suggestion": {"type": "string", "description": time_hint},
                                        "description": {
                                            "type": "string",
                                            "description": "What makes this place special",
                                        },
                                    },
                                    "required": ["restaurant_name", "specialty", "cost_estimate"],
                                },
                            },
                        },
                        "required": ["stop_name", list_key],
                    },
                },
            },
            "required": ["recommendations"],
        },
    }


def get_trip_tools(currency: str = "EUR") -> list[dict[str, Any]]:
    """제공자 형식의 도구 정의 목록을 반환합니다.

    Args:
        currency: 비용 필드 설명에 표시할 통화 코드.
    """
    stop_properties = _stop_properties(currency)
    return [
        {
            "name": SET_ROUTE,
            "description": (
                "Set the entire trip itinerary at once. Use this when creating a new trip or completely "
                "replacing the current route. Provides all stops with coordinates, activities, accommodations, "
                "and budget estimates. Always use this for initial trip creation rather than calling add_stop "
                "multiple times."
            ),
            "input_schema": {
                "type": "object",
                "properties": {
                    "stops": {
                        "type": "array",
                        "description": "Ordered list of stops for the trip",
                        "items": {
                            "type": "object",
                            "properties": stop_properties,
                            "required": ["name", "lat", "lng", "nights"],
                        },
                    },
                    "trip_name": {"type": "string", "description": "Name for the trip"},
                    "start_date": {"type": "string", "description": "Trip start date (YYYY-MM-DD)"},
                    "travelers": {"type": "number", "description": "Number of travelers"},
                    "total_budget": {"type": "number", "description": f"Total trip budget in {currency}"},
                },
                "required": ["stops"],
            },
        },
        {
            "name": ADD_STOP,
            "description": (
                "Add a single stop to the existing itinerary at a specific position. Use this when the user "
                "wants to add one new destination to an already-planned trip. Do NOT use this for reordering; "
                "use reorder_stops instead."
            ),
            "input_schema": {
                "type": "object",
                "properties": {
                    **stop_properties,
                    "activities": _activity_schema(with_enum=False),
                    "position": {
                        "type": "number",
                        "description": "Zero-based index where to insert the stop. Omit to add at the end.",
                    },
                },
                "required": ["name", "lat", "lng", "nights"],
            },
        },
        {
            "name": REMOVE_STOP,
            "description": (
                "Remove a stop from the itinerary by name. Use this when the user wants to skip a destination. "
                "Do NOT use remove + add to reorder; use reorder_stops instead."
            ),
            "input_schema": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Name of the stop to remove (case-insensitive match)",
                    },
                },
                "required": ["name"],
            },
        },
        {
            "name": UPDATE_STOP,
            "description": (
                "Update details of an existing stop (nights, activities, accommodation, budget). Use this to "
                "modify a stop without changing its position in the route."
            ),
            "input_schema": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Name of the stop to update (case-insensitive match)",
                    },
                    "nights": {"type": "number"},
                    "activities": _activity_schema(with_enum=False),
                    "accommodation": _accommodation_schema(),
                    "daily_budget": {"type": "number"},
                    "notes": {"type": "string"},
                },
                "required": ["name"],
            },
        },
        {
            "name": REORDER_STOPS,
            "description": (
                "Change the order of stops in the itinerary. Provide the complete list of stop names in the "
                "desired new order. All existing stops must be included."
            ),
            "input_schema": {
                "type": "object",
                "properties": {
                    "stop_names": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "All stop names in the desired order",
                    },
                },
                "required": ["stop_names"],
            },
        },
        {
            "name": UPDATE_TRIP,
            "description": (
                "Update trip-level metadata such as the trip name, dates, number of travelers, or total budget. "
                "Does not affect individual stops."
            ),
            "input_schema": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Trip name"},
                    "start_date": {"type": "string", "description": "Start date (YYYY-MM-DD)"},
                    "end_date": {"type": "string", "description": "End date (YYYY-MM-DD)"},
                    "travelers": {"type": "number", "description": "Number of travelers"},
                    "total_budget": {"type": "number", "description": f"Total budget in {currency}"},
                    "currency": {"type": "string", "description": "Currency code (default: EUR)"},
                    "food_query": {
                        "type": "string",
                        "description": (
                            "Places search query for food preferences (e.g. \"italian restaurant\", "
                            "\"vegan food\"). Set this after learning the travelers' food preferences."
                        ),
                    },
                },
            },
        },
        _recommendation_tool(
            ADD_BURGER_RECOMMENDATIONS,
            (
                "Add burger restaurant recommendations as activities to one or more stops. Use this after "
                "creating a route when the user is a burger enthusiast. Include specific restaurants with "
                "names, specialties, addresses, and costs."
            ),
            list_key="burgers",
            noun="burger",
            stop_hint="Name of the city/stop",
            specialty_hint="Signature burger or dish (e.g., \"Classic smash burger with truffle fries\")",
            time_hint="Recommended time (e.g., \"Lunch\", \"Dinner\")",
            currency=currency,
        ),
        _recommendation_tool(
            ADD_FONDUE_RECOMMENDATIONS,
            (
                "Add cheese fondue restaurant recommendations as activities to Swiss stops. Use when the route "
                "passes through Switzerland and the user loves fondue. Include specific restaurants with "
                "traditional Swiss fondue experiences."
            ),
            list_key="fondues",
            noun="fondue",
            stop_hint="Name of the city/stop (should be in Switzerland)",
            specialty_hint="Type of fondue (e.g., \"Traditional Gruyère & Vacherin blend\")",
            time_hint="Recommended time (usually \"Dinner\")",
            currency=currency,
        ),
    ]
