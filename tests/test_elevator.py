"""Elevator state machine: movement, doors, boarding and service budget."""

from __future__ import annotations

import copy

import pytest

from scheduler import SweepInsertPolicy
from simulation import Elevator, PassengerRequest


def kinds(events):
    return [event.kind for event in events]


def run_ticks(elevator: Elevator, count: int) -> list:
    emitted = []
    for t in range(count):
        emitted.extend(elevator.tick(t))
    return emitted


class TestQueries:

    @pytest.mark.parametrize("current, floor", [(0, 4), (4, 0), (3, 3), (7, 2)])
    def test_distance_is_symmetric_and_non_negative(self, current, floor):
        a = Elevator(elevator_id=0, floor_count=10, current_floor=current)
        b = Elevator(elevator_id=1, floor_count=10, current_floor=floor)
        assert a.distance_to(floor) == b.distance_to(current)
        assert a.distance_to(floor) >= 0

    def test_not_en_route_without_destinations(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=3)
        assert not elevator.is_en_route_to(3, 1)
        assert not elevator.is_en_route_to(5, -1)

    def test_en_route_upward_sweep(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=2, destinations=[7])
        assert elevator.is_en_route_to(5, 1)
        assert elevator.is_en_route_to(2, 1)
        assert elevator.is_en_route_to(7, 1)
        assert not elevator.is_en_route_to(5, -1)
        assert not elevator.is_en_route_to(8, 1)
        assert not elevator.is_en_route_to(1, 1)

    def test_en_route_downward_sweep_uses_last_stop(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=6, destinations=[4, 1])
        assert elevator.is_en_route_to(3, -1)
        assert elevator.is_en_route_to(1, -1)
        assert not elevator.is_en_route_to(0, -1)
        assert not elevator.is_en_route_to(3, 1)

    def test_occupied_and_running_follow_state(self):
        elevator = Elevator(elevator_id=0, floor_count=5)
        assert not elevator.occupied
        assert elevator.running
        elevator.onboard_passengers.append(PassengerRequest(0, 1, 3))
        elevator.trips_until_service = 0
        assert elevator.occupied
        assert not elevator.running
        assert elevator.label == "Elevator 1"


class TestAddDestination:

    def test_resorts_toward_committed_direction(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=5)
        elevator.add_destination(2)
        assert elevator.destinations == [2]
        elevator.add_destination(8)
        assert elevator.destinations == [8, 2]
        elevator.add_destination(3)
        assert elevator.destinations == [2, 3, 8]

    def test_current_floor_is_never_queued(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=5)
        elevator.add_destination(5)
        assert elevator.destinations == []

    def test_inserting_twice_matches_inserting_once(self):
        once = Elevator(elevator_id=0, floor_count=10, current_floor=4, destinations=[6])
        twice = copy.deepcopy(once)
        once.add_destination(1)
        twice.add_destination(1)
        twice.add_destination(1)
        assert once.destinations == twice.destinations
        assert twice.destinations.count(1) == 1

    def test_policy_is_pluggable(self):
        elevator = Elevator(
            elevator_id=0,
            floor_count=10,
            current_floor=5,
            destinations=[8],
            insert_policy=SweepInsertPolicy(),
        )
        elevator.add_destination(2)
        elevator.add_destination(7)
        assert elevator.destinations == [7, 8, 2]


class TestTick:

    def test_single_trip_scenario(self):
        elevator = Elevator(elevator_id=0, floor_count=5)
        elevator.summon(2, 4)

        first = run_ticks(elevator, 3)
        assert kinds(first) == ["moved", "moved", "doors_opened", "boarded", "doors_closed"]
        assert elevator.current_floor == 2
        assert elevator.occupied
        assert elevator.destinations == [4]

        rest = run_ticks(elevator, 3)
        assert kinds(rest) == ["moved", "moved", "doors_opened", "disembarked", "doors_closed"]
        assert elevator.current_floor == 4
        assert elevator.trips_until_service == 99
        assert elevator.distance_traveled == 4
        assert not elevator.occupied
        assert not elevator.has_pending_work

    def test_door_lingers_without_moving(self):
        elevator = Elevator(elevator_id=0, floor_count=10, linger_ticks=3)
        elevator.summon(1, 6)
        elevator.tick()
        assert elevator.door_open

        open_ticks = 0
        while elevator.door_open:
            elevator.tick()
            open_ticks += 1
            assert elevator.current_floor == 1
        assert open_ticks == 3

    def test_idle_elevator_does_nothing(self):
        elevator = Elevator(elevator_id=0, floor_count=5, current_floor=3)
        assert elevator.tick() == []
        assert elevator.current_floor == 3
        assert elevator.status == "4 - Closed (0)"

    def test_summon_at_current_floor_boards_when_idle(self):
        elevator = Elevator(elevator_id=0, floor_count=5, current_floor=2)
        elevator.summon(2, 0)
        assert elevator.destinations == []

        emitted = elevator.tick()
        assert kinds(emitted) == ["doors_opened", "boarded"]
        assert elevator.destinations == [0]
        assert elevator.status == "3 - Open (1)"

    def test_passenger_waits_for_matching_direction(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=5)
        elevator.summon(3, 8)
        elevator.add_destination(0)
        assert elevator.destinations == [0, 3]

        # Car runs down to 0 first, passing the up-bound passenger on 3.
        run_ticks(elevator, 3)
        assert elevator.current_floor == 3
        assert elevator.waiting_passengers
        assert not elevator.onboard_passengers

        run_ticks(elevator, 60)
        assert not elevator.waiting_passengers
        assert not elevator.has_pending_work
        assert elevator.current_floor == 8

    def test_rider_boards_while_doors_are_open(self):
        rider = PassengerRequest(passenger_id=None, origin=0, destination=9)
        elevator = Elevator(
            elevator_id=0,
            floor_count=10,
            current_floor=3,
            destinations=[9],
            onboard_passengers=[rider],
            door_open=True,
            linger_remaining=1,
        )
        late = elevator.summon(3, 8)
        assert elevator.destinations == [9]

        events = elevator.tick(0)
        assert kinds(events) == ["boarded", "doors_closed"]
        assert elevator.current_floor == 3
        assert late in elevator.onboard_passengers
        assert late.board_time == 0
        assert 8 in elevator.destinations

        run_ticks(elevator, 5)
        assert elevator.current_floor == 8
        assert late not in elevator.onboard_passengers
        assert rider in elevator.onboard_passengers

    def test_rider_at_standing_car_boards_before_it_moves(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=3, destinations=[9])
        late = elevator.summon(3, 8)

        events = elevator.tick(0)
        assert kinds(events) == ["doors_opened", "boarded"]
        assert elevator.current_floor == 3
        assert elevator.onboard_passengers == [late]
        assert elevator.distance_traveled == 0

    def test_skipped_rider_is_collected_after_the_sweep(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=3, destinations=[9])
        down = elevator.summon(3, 0)

        floors = []
        for t in range(6):
            elevator.tick(t)
            floors.append(elevator.current_floor)
        assert floors == [4, 5, 6, 7, 8, 9]
        assert elevator.destinations == [3]

        for t in range(6, 18):
            elevator.tick(t)
        assert down.board_time == 12
        assert down.alight_time == 16
        assert elevator.current_floor == 0
        assert not elevator.has_pending_work

    def test_queued_floor_on_the_way_is_served(self):
        elevator = Elevator(elevator_id=0, floor_count=10, current_floor=5, destinations=[2, 3, 8])
        run_ticks(elevator, 2)
        assert elevator.current_floor == 3
        assert 3 not in elevator.destinations
        assert elevator.destinations == [2, 8]

    def test_service_exhaustion(self):
        elevator = Elevator(elevator_id=0, floor_count=5, trips_until_service=1)
        elevator.summon(0, 2)
        emitted = run_ticks(elevator, 4)
        assert elevator.current_floor == 2
        assert elevator.trips_until_service == 0
        assert not elevator.running
        assert "retired" in kinds(emitted)
        assert elevator.status == "Stopped"

    def test_retired_elevator_still_discharges_passengers(self):
        elevator = Elevator(elevator_id=0, floor_count=10, trips_until_service=1)
        elevator.summon(0, 3)
        elevator.summon(1, 5)
        run_ticks(elevator, 40)
        assert not elevator.running
        assert not elevator.onboard_passengers
        assert not elevator.waiting_passengers
        assert elevator.trips_until_service == 0

    def test_service_restores_budget(self):
        elevator = Elevator(elevator_id=0, floor_count=5, trips_until_service=0)
        elevator.service(10)
        assert elevator.running
        assert elevator.trips_until_service == 10

    def test_tick_order_does_not_matter(self):
        a = Elevator(elevator_id=0, floor_count=10)
        b = Elevator(elevator_id=1, floor_count=10, current_floor=9)
        a.summon(3, 7)
        b.summon(4, 1)
        a2, b2 = copy.deepcopy(a), copy.deepcopy(b)

        for t in range(12):
            a.tick(t)
            b.tick(t)
            b2.tick(t)
            a2.tick(t)
        assert a.snapshot() == a2.snapshot()
        assert b.snapshot() == b2.snapshot()

    def test_events_carry_source_and_time(self):
        elevator = Elevator(elevator_id=2, floor_count=5)
        elevator.summon(1, 3)
        (event,) = elevator.tick(42)[:1]
        assert event.timestamp == 42
        assert event.source_id == "Elevator 3"
        assert event.message == "Moved to floor 2"
        assert event.floor == 1
