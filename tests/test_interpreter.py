"""도구 호출 인터프리터 테스트."""

import itertools

from eurotrip.schemas.chat import ParsedToolCall
from eurotrip.schemas.enums import ActivityCategory, BurgerRarity
from eurotrip.schemas.trip import Coordinates, Stop, TripDocument, TripMetadata
from eurotrip.store.actions import UpdateTripMetadata
from eurotrip.store.reducer import create_default_document
from eurotrip.store.store import TripStore
from eurotrip.tools.definitions import TOOL_NAMES, get_trip_tools
from eurotrip.tools.interpreter import HANDLERS, interpret


def _ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


def _call(name: str, tool_input: dict) -> ParsedToolCall:
    return ParsedToolCall(id=f"toolu_{name}", name=name, input=tool_input)


def _run(store: TripStore, name: str, tool_input: dict, **kwargs) -> str:
    result = interpret(_call(name, tool_input), store.document, id_factory=store.id_factory, **kwargs)
    for action in result.actions:
        store.dispatch(action)
    return result.result_text


def _paris_rome() -> TripDocument:
    return TripDocument(
        metadata=TripMetadata(name="Classic"),
        stops=[
            Stop(id="p", name="Paris", coordinates=Coordinates(lat=48.85, lng=2.35)),
            Stop(id="r", name="Rome", coordinates=Coordinates(lat=41.9, lng=12.5)),
        ],
    )


ROUTE_INPUT = {
    "trip_name": "Grand Tour",
    "travelers": 2,
    "stops": [
        {"name": "Paris", "lat": 48.85, "lng": 2.35, "nights": 2, "country": "France"},
        {"name": "Rome", "lat": 41.9, "lng": 12.5, "nights": 3, "country": "Italy"},
    ],
}


class TestRouteTools:
    """정류지 편집 도구 테스트."""

    def test_set_route_creates_stops_with_fresh_ids(self):
        store = TripStore(id_factory=_ids())

        text = _run(store, "set_route", ROUTE_INPUT)

        document = store.document
        assert [stop.name for stop in document.stops] == ["Paris", "Rome"]
        assert [stop.id for stop in document.stops] == ["id-1", "id-2"]
        assert all(stop.accommodation is None for stop in document.stops)
        assert document.route_segments == []
        assert document.metadata.name == "Grand Tour"
        assert document.metadata.travelers == 2
        assert text.index("Paris") < text.index("Rome")
        assert text == "Route set with 2 stops: Paris → Rome"

    def test_set_route_without_stops_is_an_error(self):
        result = interpret(_call("set_route", {"stops": []}), create_default_document())

        assert result.actions == []
        assert result.result_text.startswith("Error")

    def test_remove_unknown_stop_lists_current_stops(self):
        result = interpret(_call("remove_stop", {"name": "Madrid"}), _paris_rome())

        assert result.actions == []
        assert "Madrid" in result.result_text
        assert "Paris, Rome" in result.result_text

    def test_stop_names_match_case_insensitively(self):
        store = TripStore(_paris_rome())

        text = _run(store, "remove_stop", {"name": "rome"})

        assert text == "Removed stop: Rome"
        assert store.document.stop_names() == ["Paris"]

    def test_add_stop_with_position(self):
        store = TripStore(_paris_rome(), id_factory=_ids())

        text = _run(store, "add_stop", {"name": "Milan", "lat": 45.46, "lng": 9.19, "nights": 1, "position": 1})

        assert text == "Added stop: Milan at position 1"
        assert store.document.stop_names() == ["Paris", "Milan", "Rome"]

    def test_add_stop_defaults_missing_fields(self):
        store = TripStore(id_factory=_ids())

        _run(store, "add_stop", {"name": "Nowhere", "lat": "north", "nights": 0})

        stop = store.document.stops[0]
        assert stop.coordinates == Coordinates(lat=0.0, lng=0.0)
        assert stop.nights == 1

    def test_update_stop_keeps_unspecified_fields(self):
        document = _paris_rome()
        document.stops[0].notes = "Louvre first"
        store = TripStore(document)

        _run(store, "update_stop", {"name": "Paris", "nights": 4, "accommodation": {"name": "Hotel Lutetia", "type": "castle"}})

        paris = store.document.find_stop("p")
        assert paris.nights == 4
        assert paris.notes == "Louvre first"
        assert paris.accommodation.name == "Hotel Lutetia"
        assert paris.accommodation.type == "other"

    def test_reorder_rejects_unknown_names(self):
        store = TripStore(_paris_rome())

        text = _run(store, "reorder_stops", {"stop_names": ["Rome", "Oslo"]})

        assert "Oslo" in text
        assert store.document.stop_names() == ["Paris", "Rome"]

    def test_reorder_stops(self):
        store = TripStore(_paris_rome())

        text = _run(store, "reorder_stops", {"stop_names": ["Rome", "Paris"]})

        assert text == "Reordered stops: Rome → Paris"
        assert store.document.stop_names() == ["Rome", "Paris"]

    def test_update_trip_twice_keeps_both_fields(self):
        store = TripStore()

        _run(store, "update_trip", {"start_date": "2026-07-01", "ignored": "x"})
        text = _run(store, "update_trip", {"travelers": 3, "food_query": "schnitzel"})

        metadata = store.document.metadata
        assert metadata.start_date == "2026-07-01"
        assert metadata.travelers == 3
        assert metadata.food_query == "schnitzel"
        assert "ignored" not in metadata.model_dump()
        assert text == "Updated trip: travelers, food_query"

    def test_unknown_tool(self):
        result = interpret(_call("teleport", {}), _paris_rome())

        assert result.actions == []
        assert result.result_text == "Unknown tool: teleport"

    def test_replay_with_fresh_id_factory_is_deterministic(self):
        first = TripStore(id_factory=_ids())
        second = TripStore(id_factory=_ids())

        _run(first, "set_route", ROUTE_INPUT)
        _run(second, "set_route", ROUTE_INPUT)

        assert first.document == second.document


class TestRecommendations:
    """음식 추천 도구 테스트."""

    BURGERS = {
        "recommendations": [
            {
                "stop_name": "paris",
                "burgers": [
                    {
                        "restaurant_name": "Big Fernand",
                        "specialty": "Le Bartholomé",
                        "cost_estimate": 18,
                        "description": "A legendary French burger",
                    },
                    {"restaurant_name": "Blend", "cost_estimate": 15, "description": "Rare aged beef"},
                    {"restaurant_name": "Quick", "cost_estimate": 8},
                ],
            },
            {"stop_name": "Madrid", "burgers": [{"restaurant_name": "Goiko"}]},
        ]
    }

    def test_partial_success_adds_known_stops_and_warns(self):
        document = _paris_rome()
        document.metadata.travelers = 2
        store = TripStore(document)

        text = _run(store, "add_burger_recommendations", self.BURGERS)

        paris = store.document.find_stop("p")
        assert [activity.name for activity in paris.activities] == ["Big Fernand", "Blend", "Quick"]
        assert paris.activities[0].category == ActivityCategory.BURGER
        assert paris.activities[0].cost_estimate == 36
        assert paris.activities[0].duration_hours == 1
        assert '⚠️ Stop "Madrid" not found, skipped' in text
        assert text.endswith(" 🍔")

    def test_strict_mode_rejects_whole_call(self):
        store = TripStore(_paris_rome())

        text = _run(store, "add_burger_recommendations", self.BURGERS, strict_stop_names=True)

        assert text.startswith('Error: Stop "Madrid" not found')
        assert store.document.find_stop("p").activities == []

    def test_repeated_stop_accumulates_activities(self):
        store = TripStore(_paris_rome())

        _run(
            store,
            "add_fondue_recommendations",
            {
                "recommendations": [
                    {"stop_name": "Rome", "fondues": [{"restaurant_name": "Chalet"}]},
                    {"stop_name": "ROME", "fondues": [{"restaurant_name": "Alpina"}]},
                ]
            },
        )

        rome = store.document.find_stop("r")
        assert [activity.name for activity in rome.activities] == ["Chalet", "Alpina"]
        assert rome.activities[0].category == ActivityCategory.FONDUE
        assert rome.activities[0].duration_hours == 2

    def test_burger_challenge_scores_described_burgers(self):
        document = _paris_rome()
        store = TripStore(document)
        store.dispatch(UpdateTripMetadata(updates={"mode": "burger_challenge", "burger_score": 1}))

        _run(store, "add_burger_recommendations", self.BURGERS)

        metadata = store.document.metadata
        assert metadata.burger_score == 1 + 10 + 5
        assert [(item.restaurant_name, item.rarity, item.city) for item in metadata.burgers_collected] == [
            ("Big Fernand", BurgerRarity.LEGENDARY, "paris"),
            ("Blend", BurgerRarity.RARE, "paris"),
        ]

    def test_fondue_does_not_touch_burger_score(self):
        store = TripStore(_paris_rome())
        store.dispatch(UpdateTripMetadata(updates={"mode": "burger_challenge"}))

        _run(store, "add_fondue_recommendations", {"recommendations": [{"stop_name": "Paris", "fondues": [{"restaurant_name": "Pain"}]}]})

        assert store.document.metadata.burger_score is None


def test_tool_definitions_match_handlers():
    tools = get_trip_tools("CHF")

    assert {tool["name"] for tool in tools} == TOOL_NAMES == set(HANDLERS)
    set_route = next(tool for tool in tools if tool["name"] == "set_route")
    assert "CHF" in set_route["input_schema"]["properties"]["total_budget"]["description"]
    update_trip = next(tool for tool in tools if tool["name"] == "update_trip")
    assert "food_query" in update_trip["input_schema"]["properties"]
