import math

import pytest

from src.triproute.models.domain import Location
from src.triproute.services.geospatial import haversine_km, location_distance_km
from src.triproute.services.routing.sequencer import (
    DAY_START_MINUTES,
    schedule_hierarchical,
    schedule_locations,
    sequence_hierarchical,
    sequence_locations,
    sequence_two_tier,
)


def _location(name: str, lat: float, lng: float, **kwargs) -> Location:
    return Location(name=name, latitude=lat, longitude=lng, **kwargs)


def _names(locations):
    return [location.name for location in locations]


@pytest.fixture
def time_window_day():
    locations = [
        _location("Start", 0, 0, opening_time="09:00", closing_time="18:00"),
        _location("A", 0.01, 0.01, opening_time="10:00", closing_time="12:00", visit_duration=60),
        _location("B", 0.02, 0.02, opening_time="14:00", closing_time="16:00", visit_duration=60),
        _location("C", 0.005, 0.005),
    ]
    matrix = [
        [0, 600, 1200, 300],
        [600, 0, 600, 300],
        [1200, 600, 0, 900],
        [300, 300, 900, 0],
    ]
    return locations, matrix


def test_haversine_one_degree_of_longitude_at_equator():
    assert haversine_km(0, 0, 0, 1) == pytest.approx(111.19, abs=0.01)
    assert haversine_km(21.5, 39.2, 21.5, 39.2) == 0


def test_location_distance_is_symmetric():
    a = _location("a", 48.85, 2.35)
    b = _location("b", 51.50, -0.12)
    assert location_distance_km(a, b) == pytest.approx(location_distance_km(b, a))
    assert location_distance_km(a, b) == pytest.approx(343, abs=2)


@pytest.mark.parametrize("count", [0, 1, 2])
def test_short_lists_are_returned_unchanged(count):
    locations = [_location(f"L{i}", 10 - i, 10 - i) for i in range(count)]
    result = sequence_locations(locations, lock_last=True)

    assert result == locations
    assert all(out is original for out, original in zip(result, locations))


def test_short_list_schedule_has_no_timings():
    result = schedule_locations([_location("a", 0, 0), _location("b", 1, 1)])
    assert [stop.sequence for stop in result.stops] == [1, 2]
    assert all(stop.arrival_min is None and stop.departure_min is None for stop in result.stops)


def test_time_windows_order_start_c_a_b(time_window_day):
    locations, matrix = time_window_day

    assert _names(sequence_locations(locations, matrix)) == ["Start", "C", "A", "B"]


def test_time_windows_schedule(time_window_day):
    locations, matrix = time_window_day
    result = schedule_locations(locations, matrix)

    start, c, a, b = result.stops
    assert start.departure_min == DAY_START_MINUTES
    assert (c.arrival_min, c.departure_min) == (545, 605)
    assert (a.arrival_min, a.wait_min, a.departure_min) == (610, 0, 670)
    assert (b.arrival_min, b.wait_min, b.departure_min) == (680, 160, 900)
    assert result.total_travel_min == 20
    assert result.total_wait_min == 160
    assert result.late_stops == 0
    assert result.end_min == 900


def test_waiting_for_opening_delays_departure():
    locations = [
        _location("Hotel", 0, 0),
        _location("Museum", 0, 0.001, opening_time="12:00", visit_duration=90),
        _location("Cafe", 0, 0.5),
    ]
    result = schedule_locations(locations)
    museum = next(stop for stop in result.stops if stop.location.name == "Museum")

    assert museum.departure_min >= 12 * 60 + 90


def test_result_is_a_permutation_of_the_input():
    locations = [_location(f"L{i}", (i * 7 % 5) * 0.01, (i * 3 % 4) * 0.01) for i in range(9)]
    result = sequence_locations(locations)

    assert len(result) == len(locations)
    assert {id(location) for location in result} == {id(location) for location in locations}
    assert result[0] is locations[0]


def test_lock_last_keeps_final_stop_last():
    locations = [
        _location("Start", 0, 0),
        _location("Far", 0, 0.2),
        _location("Farther", 0, 0.3),
        _location("End", 0, 0.0001),
    ]
    assert _names(sequence_locations(locations)) == ["Start", "End", "Far", "Farther"]

    result = schedule_locations(locations, lock_last=True)
    assert _names(result.locations) == ["Start", "Far", "Farther", "End"]
    assert result.stops[-1].pinned
    assert result.stops[-1].arrival_min is None


def test_lock_last_ignores_matrix_proximity():
    locations = [_location(name, 0, 0) for name in ("S", "X", "Y", "E")]
    matrix = [
        [0, 900, 800, 1],
        [900, 0, 60, 1],
        [800, 60, 0, 1],
        [1, 1, 1, 0],
    ]
    assert _names(sequence_locations(locations, matrix, lock_last=True)) == ["S", "Y", "X", "E"]


def test_smaller_matrix_entry_is_preferred():
    locations = [_location(name, 0, 0) for name in ("S", "Slow", "Fast")]
    matrix = [
        [0, 600, 300],
        [600, 0, 60],
        [300, 60, 0],
    ]
    assert _names(sequence_locations(locations, matrix)) == ["S", "Fast", "Slow"]


def test_co_located_stops_keep_input_order():
    locations = [_location(name, 1.0, 1.0) for name in ("S", "X", "Y", "Z")]
    assert _names(sequence_locations(locations)) == ["S", "X", "Y", "Z"]


def test_equal_scores_prefer_earlier_index():
    locations = [_location(name, 0, 0) for name in ("S", "P", "Q")]
    matrix = [
        [0, 120, 120],
        [120, 0, 120],
        [120, 120, 0],
    ]
    assert _names(sequence_locations(locations, matrix)) == ["S", "P", "Q"]


def test_late_stops_are_ranked_behind_open_ones():
    locations = [
        _location("S", 0, 0),
        _location("Closed", 0, 0.0001, closing_time="08:00"),
        _location("Open", 0, 0.3),
    ]
    result = schedule_locations(locations)

    assert _names(result.locations) == ["S", "Open", "Closed"]
    assert result.stops[2].late
    assert result.late_stops == 1


def test_all_infeasible_still_returns_full_order():
    locations = [
        _location("S", 0, 0),
        _location("Far", 0, 0.1, closing_time="08:00"),
        _location("Near", 0, 0.01, closing_time="07:00"),
    ]
    assert _names(sequence_locations(locations)) == ["S", "Near", "Far"]


@pytest.mark.parametrize("bad_value", ["ab:cd", "10", "noon", "1O:00"])
def test_malformed_times_behave_like_absent_ones(bad_value):
    def build(opening, closing):
        return [
            _location("S", 0, 0),
            _location("Gallery", 0, 0.01, opening_time=opening, closing_time=closing),
            _location("Park", 0, 0.02),
            _location("Pier", 0, 0.005),
        ]

    absent = schedule_locations(build(None, None))
    malformed = schedule_locations(build(bad_value, bad_value))

    assert _names(malformed.locations) == _names(absent.locations)
    assert [stop.departure_min for stop in malformed.stops] == [stop.departure_min for stop in absent.stops]


def test_blank_clock_sides_count_as_zero():
    locations = [
        _location("S", 0, 0),
        _location("Late", 0, 0.001, opening_time="13:"),
        _location("Far", 0, 0.05),
    ]
    result = schedule_locations(locations)

    assert _names(result.locations) == ["S", "Far", "Late"]
    assert result.stops[2].arrival_min + result.stops[2].wait_min == 780


def test_unreachable_matrix_entries_do_not_abort():
    locations = [_location(name, 0, 0) for name in ("S", "Island", "Town", "Village")]
    matrix = [
        [0, None, 600, 900],
        [math.inf, 0, None, None],
        [600, None, 0, 300],
        [900, math.inf, 300, 0],
    ]
    assert _names(sequence_locations(locations, matrix)) == ["S", "Town", "Village", "Island"]


def test_short_lists_skip_matrix_checks():
    locations = [_location("A", 0, 0), _location("B", 0, 0.01)]
    assert sequence_locations(locations, [[0]]) == locations


def test_mismatched_matrix_raises():
    locations = [_location(name, 0, 0) for name in ("S", "X", "Y")]
    with pytest.raises(ValueError):
        sequence_locations(locations, [[0, 1], [1, 0]])
    with pytest.raises(ValueError):
        sequence_locations(locations, [[0, 1, 2], [1, 0], [2, 1, 0]])


def test_zero_duration_falls_back_to_default_visit():
    locations = [
        _location("S", 0, 0),
        _location("Quick", 0, 0, visit_duration=0),
        _location("Next", 0, 0),
    ]
    result = schedule_locations(locations)
    assert result.stops[1].departure_min == DAY_START_MINUTES + 60


@pytest.fixture
def places_and_pois():
    return [
        _location("Place 1", 0, 0, id="p1"),
        _location("Place 2", 0.1, 0.1, id="p2"),
        _location("POI 1.1", 0, 0, id="poi1", parent_id="p1"),
        _location("POI 1.2", 0, 0, id="poi2", parent_id="p1"),
        _location("POI 2.1", 0.1, 0.1, id="poi3", parent_id="p2"),
    ]


def test_hierarchical_returns_only_points_of_interest(places_and_pois):
    result = sequence_hierarchical(places_and_pois)

    assert _names(result) == ["POI 1.1", "POI 1.2", "POI 2.1"]
    assert all(location.parent_id for location in result)


def test_hierarchical_without_points_of_interest_is_empty():
    locations = [_location("Place 1", 0, 0, id="p1"), _location("Place 2", 1, 1, id="p2")]
    assert sequence_hierarchical(locations) == []
    assert schedule_hierarchical(locations).stops == []


def test_hierarchical_first_poi_starts_the_walk():
    locations = [
        _location("Hotel", 0, 0, id="h"),
        _location("Far POI", 0, 0.5, id="f", parent_id="h"),
        _location("Near POI", 0, 0.0001, id="n", parent_id="h"),
        _location("Mid POI", 0, 0.2, id="m", parent_id="h"),
    ]
    assert _names(sequence_hierarchical(locations)) == ["Far POI", "Mid POI", "Near POI"]


def test_hierarchical_lock_last_pins_last_poi():
    locations = [
        _location("Place", 0, 0, id="p"),
        _location("First", 0, 0, parent_id="p"),
        _location("Near", 0, 0.001, parent_id="p"),
        _location("Farther", 0, 0.01, parent_id="p"),
        _location("Exit", 0, 0.0005, parent_id="p"),
    ]
    result = sequence_hierarchical(locations, lock_last=True)
    assert _names(result) == ["First", "Near", "Farther", "Exit"]


def test_two_tier_places_each_followed_by_their_pois(places_and_pois):
    result = sequence_two_tier(places_and_pois)
    assert _names(result) == ["Place 1", "POI 1.1", "POI 1.2", "Place 2", "POI 2.1"]


def test_two_tier_uses_place_matrix_and_keeps_orphans():
    locations = [
        _location("Hotel", 0, 0, id="h"),
        _location("Museum", 0, 0.1, id="m"),
        _location("Park", 0, 0.2, id="p"),
        _location("Hall", 0, 0.1, parent_id="m"),
        _location("Lost", 5, 5, parent_id="missing"),
    ]
    place_matrix = [
        [0, 900, 300],
        [900, 0, 300],
        [300, 300, 0],
    ]
    result = sequence_two_tier(locations, place_matrix)
    assert _names(result) == ["Hotel", "Park", "Museum", "Hall", "Lost"]
