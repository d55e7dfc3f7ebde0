import random

import pytest

from errors import (
    InvalidCredentials,
    ReservationNotFound,
    SpotNotFound,
    SpotUnavailable,
    ValidationError,
    ZoneNotFound,
)
from models import SpotStatus, ZoneId
from parking_system import ParkingSystem, ZoneLayout, efficiency
from user_directory import HashedCredentialVerifier

from conftest import TODAY


def reserve(parking, spot_id, zone="A", date=TODAY, user_id="1"):
    return parking.create_reservation(
        zone=zone,
        spot_id=spot_id,
        date=date,
        start_time="09:00",
        end_time="10:00",
        user_id=user_id,
        vehicle="TS07XY0001",
    )


def snapshot(parking):
    zones = {zid: z.to_dict() for zid, z in parking.list_zones().items()}
    spots = {zid: [s.status for s in parking.list_spots(zid)] for zid in zones}
    return zones, spots, len(parking.reservations.all())


def assert_consistent(parking):
    for zid, zone in parking.list_zones().items():
        assert zone.is_balanced()
        counts = parking.spots.count(zid)
        assert counts[SpotStatus.AVAILABLE] == zone.available
        assert counts[SpotStatus.OCCUPIED] == zone.occupied
        assert counts[SpotStatus.RESERVED] == zone.reserved


# --- seeding ---

def test_default_seed_matches_demo_layout(parking):
    a = parking.get_zone("A")
    assert (a.capacity, a.available, a.occupied, a.reserved) == (80, 60, 15, 5)
    assert a.name == "Student Parking"
    assert [z.value for z in parking.list_zones()] == ["A", "B", "C", "D"]
    assert_consistent(parking)


def test_spot_ids_and_types(parking):
    spots = parking.list_spots("d")
    assert len(spots) == 20
    assert spots[0].spot_id == "D-001"
    assert spots[-1].spot_id == "D-020"
    assert {s.spot_type.value for s in spots} == {"vip"}
    assert spots[0].status == SpotStatus.AVAILABLE


def test_random_seed_derives_counters_from_spots():
    s = ParkingSystem()
    s.initialize(rng=random.Random(42))
    assert_consistent(s)
    assert sum(z.capacity for z in s.list_zones().values()) == 200


def test_layout_overflow_rejected():
    s = ParkingSystem()
    with pytest.raises(ValidationError):
        s.initialize(layout={ZoneId.A: ZoneLayout("Tiny", 2, occupied=2, reserved=1)})


def test_reset_discards_reservations_and_users(parking):
    reserve(parking, "A-001")
    parking.register("new_user", "n@x.in", "KLU9", "pw")
    parking.reset()
    assert parking.reservations.size() == 0
    assert parking.users.find_by_username("new_user") is None
    assert parking.get_zone("A").available == 60


def test_shutdown_clears_everything(parking):
    parking.shutdown()
    assert parking.list_zones() == {}
    with pytest.raises(ZoneNotFound):
        parking.list_spots("A")


def test_unknown_zone_not_found(parking):
    with pytest.raises(ZoneNotFound):
        parking.list_spots("Z")


# --- reservations ---

def test_reserve_then_cancel_scenario(parking):
    r = reserve(parking, "A-001")
    assert r.reservation_id.startswith("RES-")
    assert parking.spots.find_spot(ZoneId.A, "A-001").status == SpotStatus.RESERVED
    a = parking.get_zone("A")
    assert (a.available, a.reserved, a.occupied) == (59, 6, 15)
    assert_consistent(parking)

    parking.cancel_reservation(r.reservation_id)
    assert parking.spots.find_spot(ZoneId.A, "A-001").status == SpotStatus.AVAILABLE
    a = parking.get_zone("A")
    assert (a.available, a.reserved, a.occupied) == (60, 5, 15)
    assert_consistent(parking)


def test_round_trip_restores_exact_state(parking):
    before = snapshot(parking)
    r = reserve(parking, "B-003", zone="B")
    parking.cancel_reservation(r.reservation_id)
    assert snapshot(parking) == before


def test_missing_spot_mutates_nothing(parking):
    before = snapshot(parking)
    with pytest.raises(SpotNotFound):
        reserve(parking, "A-999")
    with pytest.raises(SpotNotFound):
        reserve(parking, "A-001", zone="Q")
    assert snapshot(parking) == before


def test_reserved_spot_rejected_and_nothing_mutated(parking):
    reserve(parking, "A-001")
    before = snapshot(parking)
    with pytest.raises(SpotUnavailable):
        reserve(parking, "A-001", user_id="2")
    assert snapshot(parking) == before


def test_occupied_spot_rejected(parking):
    # the last 15 spots of zone A are seeded occupied
    with pytest.raises(SpotUnavailable):
        reserve(parking, "A-080")


def test_each_reserved_spot_has_one_reservation(parking):
    """
    Holds placed through create_reservation map one-to-one onto ledger
    entries. Seeded reserved spots have no ledger entry, so this starts
    from a layout with none.
    """
    parking.initialize(layout={ZoneId.A: ZoneLayout("Student Parking", 10)})
    ids = [reserve(parking, f"A-00{i}").reservation_id for i in range(1, 6)]
    parking.cancel_reservation(ids[2])

    reserved = [s.spot_id for s in parking.list_spots("A") if s.status == SpotStatus.RESERVED]
    booked = [r.spot_id for r in parking.reservations.all()]
    assert sorted(reserved) == sorted(booked)
    assert len(set(booked)) == len(booked)
    assert_consistent(parking)


def test_reservation_ids_unique(parking):
    ids = {reserve(parking, f"C-0{i:02d}", zone="C").reservation_id for i in range(1, 20)}
    assert len(ids) == 19


def test_cancel_unknown_reservation(parking):
    before = snapshot(parking)
    with pytest.raises(ReservationNotFound):
        parking.cancel_reservation("RES-nope")
    assert snapshot(parking) == before


def test_cancel_twice_fails_second_time(parking):
    r = reserve(parking, "A-001")
    parking.cancel_reservation(r.reservation_id)
    with pytest.raises(ReservationNotFound):
        parking.cancel_reservation(r.reservation_id)
    assert parking.get_zone("A").available == 60


def test_list_reservations_by_user_keeps_order(parking):
    r1 = reserve(parking, "A-001", user_id="7")
    reserve(parking, "A-002", user_id="8")
    r3 = reserve(parking, "A-003", user_id="7")
    assert [r.reservation_id for r in parking.list_reservations("7")] == [
        r1.reservation_id,
        r3.reservation_id,
    ]
    assert parking.list_reservations("nobody") == []


# --- statistics ---

def test_statistics_on_default_layout(parking):
    stats = parking.compute_statistics()
    assert stats.total_spots == 200
    assert stats.occupied == 36
    assert stats.available == 150
    assert stats.reserved == 14
    assert stats.efficiency == 82
    assert stats.today_reservations == 0


def test_statistics_count_only_today(parking):
    reserve(parking, "A-001")
    reserve(parking, "A-002", date="2024-03-16")
    stats = parking.compute_statistics()
    assert stats.today_reservations == 1
    assert stats.reserved == 16
    # reserved spots do not reduce efficiency
    assert stats.efficiency == 82


def test_statistics_empty_lot():
    s = ParkingSystem()
    s.initialize(layout={}, demo_users=False)
    stats = s.compute_statistics()
    assert stats.total_spots == 0
    assert stats.efficiency == 0


def test_efficiency_rounds_half_up():
    assert efficiency(200, 36) == 82
    assert efficiency(8, 1) == 88      # 87.5
    assert efficiency(3, 1) == 67      # 66.67
    assert efficiency(3, 2) == 33      # 33.33
    assert efficiency(0, 0) == 0


# --- users ---

def test_login_with_demo_password(parking):
    user = parking.authenticate("vamsi_krishna", "demo123")
    assert user.user_id == 1
    assert parking.authenticate("faculty_demo", "password").user_type == "faculty"


def test_login_rejects_other_password(parking):
    with pytest.raises(InvalidCredentials):
        parking.authenticate("vamsi_krishna", "letmein")
    with pytest.raises(InvalidCredentials):
        parking.authenticate("ghost", "demo123")


def test_register_assigns_next_id(parking):
    user = parking.register("new_user", "new@kluniversity.in", "KLU2024099", "pw")
    assert user.user_id == 3
    assert user.user_type == "student"
    assert user.created_at.startswith(TODAY)


def test_register_duplicate_username(parking):
    from errors import DuplicateUser

    with pytest.raises(DuplicateUser):
        parking.register("vamsi_krishna", "x@x.in", "KLU0000", "pw")
    with pytest.raises(DuplicateUser):
        parking.register("someone", "x@x.in", "FAC2023001", "pw")


def test_register_keeps_unrecognised_user_type(parking):
    user = parking.register("u", "u@x.in", "K1", "pw", user_type="staff")
    assert user.user_type == "staff"
    assert user.user_id == 3


def test_register_normalises_known_user_type(parking):
    assert parking.register("u", "u@x.in", "K1", "pw", user_type="Faculty").user_type == "faculty"
    assert parking.register("v", "v@x.in", "K2", "pw", user_type="").user_type == "student"


def test_hashed_verifier_checks_registered_password():
    s = ParkingSystem(verifier=HashedCredentialVerifier())
    s.initialize()
    s.register("alice", "a@x.in", "KLU1", "s3cret", user_type="faculty")
    assert s.authenticate("alice", "s3cret").username == "alice"
    assert s.authenticate("vamsi_krishna", "demo123").user_id == 1
    with pytest.raises(InvalidCredentials):
        s.authenticate("alice", "password")


def test_statistics_waits_for_lock(parking):
    import threading

    result = []
    with parking._lock:
        t = threading.Thread(target=lambda: result.append(parking.compute_statistics()))
        t.start()
        t.join(timeout=0.2)
        assert result == []
    t.join(timeout=5)
    assert result[0].total_spots == 200
