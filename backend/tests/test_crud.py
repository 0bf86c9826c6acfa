from datetime import time

from db import crud, schemas
from db.seed import SAMPLE_FILE, seed_from_file


class TestStartTimes:

    def test_rep_numbers_default_to_next_free(self, db_session, campus):
        start_times = crud.list_start_times(db_session, campus.bus_id)
        assert [st.rep_no for st in start_times] == [1, 2]
        assert crud.get_bus(db_session, campus.bus_id).total_rep == 2

    def test_total_rep_follows_highest_rep(self, db_session, campus):
        added = crud.add_start_time(
            db_session, campus.bus_id, schemas.StartTimeCreate(start_time=time(18, 0), rep_no=5)
        )
        assert crud.get_bus(db_session, campus.bus_id).total_rep == 5

        crud.delete_start_time(db_session, added.id)
        assert crud.get_bus(db_session, campus.bus_id).total_rep == 2

    def test_find_start_time(self, db_session, campus):
        assert crud.find_start_time(db_session, campus.bus_id, time(10, 0)) is not None
        assert crud.find_start_time(db_session, campus.bus_id, time(9, 0)) is None


class TestRoutes:

    def test_route_stops_sorted_by_order(self, db_session, campus):
        route = crud.get_route_stops(db_session, campus.bus_id)
        assert [s.name for s in route] == ["A", "B", "C"]
        assert [s.stop_order for s in route] == [1, 2, 3]
        assert route[1].time_from_start == 5

    def test_buses_serving_both_stops(self, db_session, campus):
        stop_a, _, stop_c = campus.stop_ids
        lonely = crud.create_stop(db_session, schemas.StopCreate(name="Lonely", latitude=22.0, longitude=87.0))

        assert [b.id for b in crud.get_buses_serving_stops(db_session, stop_a, stop_c)] == [campus.bus_id]
        assert crud.get_buses_serving_stops(db_session, stop_a, lonely.id) == []

    def test_stop_in_use(self, db_session, campus):
        assert crud.is_stop_in_use(db_session, campus.stop_ids[0])
        lonely = crud.create_stop(db_session, schemas.StopCreate(name="Lonely", latitude=22.0, longitude=87.0))
        assert not crud.is_stop_in_use(db_session, lonely.id)

    def test_delete_bus_removes_route_and_schedule(self, db_session, campus):
        assert crud.delete_bus(db_session, campus.bus_id)
        assert crud.get_route_entries(db_session, campus.bus_id) == []
        assert crud.list_start_times(db_session, campus.bus_id) == []
        assert crud.get_stop(db_session, campus.stop_ids[0]) is not None


class TestDrivers:

    def test_bus_for_driver(self, db_session, campus):
        assert crud.get_bus_for_driver(db_session, campus.driver_id).id == campus.bus_id
        assert crud.get_bus_for_driver(db_session, campus.other_driver_id) is None

    def test_delete_driver_unassigns_bus(self, db_session, campus):
        assert crud.delete_driver(db_session, campus.driver_id)
        assert crud.get_bus(db_session, campus.bus_id).driver_id is None


class TestTripState:

    def test_reset_forgets_last_cleared_stop(self, db_session, campus):
        bus = crud.get_bus(db_session, campus.bus_id)
        crud.save_trip_state(db_session, bus, stops_cleared=1, last_cleared_stop_id=campus.stop_ids[0])
        assert bus.last_cleared_stop_id == campus.stop_ids[0]

        crud.save_trip_state(db_session, bus, stops_cleared=0, start_stop_sequence=2, reset=True)
        assert bus.stops_cleared == 0
        assert bus.start_stop_sequence == 2
        assert bus.last_cleared_stop_id is None

    def test_record_location(self, db_session, campus):
        bus = crud.record_location(db_session, crud.get_bus(db_session, campus.bus_id), 22.3, 87.3)
        assert (bus.latitude, bus.longitude) == (22.3, 87.3)
        assert bus.location_updated_at is not None

    def test_departed_flag(self, db_session, campus):
        bus = crud.get_bus(db_session, campus.bus_id)
        assert bus.departed_last_stop is True

        crud.save_trip_state(db_session, bus, stops_cleared=1, last_cleared_stop_id=campus.stop_ids[0])
        assert bus.departed_last_stop is False

        crud.mark_departed(db_session, bus)
        assert bus.departed_last_stop is True

        crud.save_trip_state(db_session, bus, stops_cleared=2, last_cleared_stop_id=campus.stop_ids[1])
        crud.save_trip_state(db_session, bus, stops_cleared=0, reset=True)
        assert bus.departed_last_stop is True


class TestStatistics:

    def test_count_entities(self, db_session, campus):
        crud.create_bus(db_session, schemas.BusCreate(name="Spare"))
        assert crud.count_entities(db_session) == {
            "total_drivers": 2,
            "total_buses": 2,
            "total_stops": 3,
            "total_routes": 1,
        }


def test_seed_sample_campus(db_session):
    counts = seed_from_file(db_session, SAMPLE_FILE)
    assert counts == {"drivers": 2, "stops": 5, "buses": 2, "route_entries": 8, "start_times": 6}

    loop_a = crud.list_buses(db_session)[0]
    assert loop_a.name == "Campus Loop A"
    assert loop_a.driver.name == "Ravi Kumar"
    assert loop_a.total_rep == 4
    assert [s.name for s in crud.get_route_stops(db_session, loop_a.id)][:2] == ["Main Gate", "Main Building"]
