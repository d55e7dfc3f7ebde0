from __future__ import annotations

import logging
import random
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from errors import (
    InvalidCredentials,
    SpotNotFound,
    SpotUnavailable,
    ValidationError,
    ZoneNotFound,
)
from ledger import ReservationLedger
from models import (
    Reservation,
    Spot,
    SpotStatus,
    Statistics,
    User,
    UserType,
    Zone,
    ZoneId,
)
from spot_registry import SpotRegistry
from user_directory import CredentialVerifier, UserDirectory
from zone_store import ZoneStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneLayout:
    name: str
    capacity: int
    occupied: int = 0
    reserved: int = 0


# Seeded counts follow the campus demo data; occupied and reserved spots are
# taken from the end of each zone so "<zone>-001" starts out available.
DEFAULT_LAYOUT: dict[ZoneId, ZoneLayout] = {
    ZoneId.A: ZoneLayout("Student Parking", 80, occupied=15, reserved=5),
    ZoneId.B: ZoneLayout("Faculty Parking", 60, occupied=10, reserved=5),
    ZoneId.C: ZoneLayout("Visitor Parking", 40, occupied=8, reserved=2),
    ZoneId.D: ZoneLayout("VIP Parking", 20, occupied=3, reserved=2),
}

DEMO_USERS = (
    ("vamsi_krishna", "vamsi@kluniversity.in", "KLU2023001", UserType.STUDENT),
    ("faculty_demo", "faculty@kluniversity.in", "FAC2023001", UserType.FACULTY),
)
DEMO_USER_PASSWORD = "demo123"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ParkingSystem:
    """
    Owner of the whole in-memory dataset and the only way to mutate it.

    - Spot Registry : per-zone spot list and status
    - Zone Store    : per-zone available / occupied / reserved counters
    - Ledger        : active reservations
    - Directory     : users and credential check

    A spot status change and the matching counter change always happen
    together in _transition(). Mutating operations run under one lock.
    """

    def __init__(
        self,
        verifier: Optional[CredentialVerifier] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.spots = SpotRegistry()
        self.zones = ZoneStore()
        self.reservations = ReservationLedger()
        self.users = UserDirectory(verifier)
        self.clock = clock
        self._lock = threading.RLock()

    # -------------------------
    # Lifecycle
    # -------------------------
    def initialize(
        self,
        layout: Optional[dict[ZoneId, ZoneLayout]] = None,
        rng: Optional[random.Random] = None,
        demo_users: bool = True,
    ) -> None:
        """
        Seed zones, spots and demo users.

        With rng, each spot is randomly occupied (20%) or reserved (20%)
        and the layout's occupied/reserved counts are ignored. Either way
        the zone counters are derived from the resulting spot list.
        """
        layout = DEFAULT_LAYOUT if layout is None else layout
        with self._lock:
            self.shutdown()

            for zone_id, zl in layout.items():
                if rng is not None:
                    statuses = [self._random_status(rng) for _ in range(zl.capacity)]
                else:
                    statuses = self._layout_statuses(zl)
                self.spots.add_zone(zone_id, statuses)
                self.zones.load(zone_id, zl.name, self.spots.count(zone_id))

            if demo_users:
                for username, email, klu_id, user_type in DEMO_USERS:
                    self.users.register(
                        username=username,
                        email=email,
                        klu_id=klu_id,
                        password=DEMO_USER_PASSWORD,
                        user_type=user_type.value,
                        created_at=self._timestamp(),
                    )

        logger.info(
            "Seeded %d zones, %d spots, %d users",
            len(layout), self.spots.size(), len(self.users.all()),
        )

    def reset(self, **kwargs) -> None:
        self.initialize(**kwargs)

    def shutdown(self) -> None:
        with self._lock:
            self.reservations.clear()
            self.spots.clear()
            self.zones.clear()
            self.users.clear()

    # -------------------------
    # Read side
    # -------------------------
    def list_spots(self, zone: ZoneId | str) -> list[Spot]:
        zone_id = ZoneId.parse(zone)
        if zone_id is None:
            raise ZoneNotFound()
        return self.spots.list_spots(zone_id)

    def list_zones(self) -> dict[ZoneId, Zone]:
        return self.zones.all_zones()

    def get_zone(self, zone: ZoneId | str) -> Zone:
        zone_id = ZoneId.parse(zone)
        if zone_id is None:
            raise ZoneNotFound()
        return self.zones.get_zone(zone_id)

    def list_reservations(self, user_id: str) -> list[Reservation]:
        return self.reservations.list_by_user(user_id)

    # -------------------------
    # Reservations
    # -------------------------
    def create_reservation(
        self,
        zone: ZoneId | str,
        spot_id: str,
        date: str,
        start_time: str,
        end_time: str,
        user_id: str,
        vehicle: str,
    ) -> Reservation:
        zone_id = ZoneId.parse(zone)
        if zone_id is None:
            raise SpotNotFound(f"Spot {spot_id} not found")

        with self._lock:
            spot = self.spots.find_spot(zone_id, spot_id)
            if spot.status != SpotStatus.AVAILABLE:
                raise SpotUnavailable()

            r = Reservation(
                reservation_id=self._new_reservation_id(),
                user_id=user_id,
                zone=zone_id,
                spot_id=spot.spot_id,
                date=date,
                start_time=start_time,
                end_time=end_time,
                vehicle=vehicle,
                created_at=self._timestamp(),
            )
            self._transition(spot, SpotStatus.AVAILABLE, SpotStatus.RESERVED)
            self.reservations.append(r)

        logger.info("Reservation %s: spot %s for user %s", r.reservation_id, spot_id, user_id)
        return r

    def cancel_reservation(self, reservation_id: str) -> Reservation:
        with self._lock:
            r = self.reservations.get(reservation_id)

            try:
                spot = self.spots.find_spot(r.zone, r.spot_id)
            except SpotNotFound:
                spot = None
                logger.warning("Reservation %s points at missing spot %s", reservation_id, r.spot_id)

            if spot is not None and spot.status == SpotStatus.RESERVED:
                self._transition(spot, SpotStatus.RESERVED, SpotStatus.AVAILABLE)
            self.reservations.remove(reservation_id)

        logger.info("Reservation %s cancelled, spot %s released", reservation_id, r.spot_id)
        return r

    # -------------------------
    # Statistics
    # -------------------------
    def compute_statistics(self) -> Statistics:
        today = self.clock().astimezone(timezone.utc).date().isoformat()

        with self._lock:
            zones = self.zones.all_zones().values()
            total = sum(z.capacity for z in zones)
            available = sum(z.available for z in zones)
            occupied = sum(z.occupied for z in zones)
            reserved = sum(z.reserved for z in zones)
            today_reservations = self.reservations.count_on(today)

        return Statistics(
            total_spots=total,
            available=available,
            occupied=occupied,
            reserved=reserved,
            efficiency=efficiency(total, occupied),
            today_reservations=today_reservations,
        )

    # -------------------------
    # Users
    # -------------------------
    def authenticate(self, username: str, password: str) -> User:
        try:
            return self.users.authenticate(username, password)
        except InvalidCredentials:
            logger.warning("Failed login for %r", username)
            raise

    def register(
        self,
        username: str,
        email: str,
        klu_id: str,
        password: str,
        user_type: UserType | str | None = None,
    ) -> User:
        user_type = normalize_user_type(user_type)

        with self._lock:
            user = self.users.register(
                username=username,
                email=email,
                klu_id=klu_id,
                password=password,
                user_type=user_type,
                created_at=self._timestamp(),
            )
        logger.info("Registered user %s (id=%d)", user.username, user.user_id)
        return user

    # -------------------------
    # Internals
    # -------------------------
    def _transition(self, spot: Spot, from_status: SpotStatus, to_status: SpotStatus) -> None:
        """Move one spot between statuses and shift its zone counters to match."""
        if spot.status != from_status:
            raise SpotUnavailable(f"Spot {spot.spot_id} is {spot.status.value}, expected {from_status.value}")

        delta = {status.value: 0 for status in SpotStatus}
        delta[from_status.value] -= 1
        delta[to_status.value] += 1

        # counters first: adjust() validates and raises before anything changes
        self.zones.adjust(spot.zone, **delta)
        self.spots.set_status(spot.zone, spot.spot_id, to_status)

    def _timestamp(self) -> str:
        return self.clock().astimezone(timezone.utc).isoformat()

    @staticmethod
    def _new_reservation_id() -> str:
        return f"RES-{uuid.uuid4().hex}"

    @staticmethod
    def _layout_statuses(zl: ZoneLayout) -> list[SpotStatus]:
        free = zl.capacity - zl.occupied - zl.reserved
        if free < 0:
            raise ValidationError(f"{zl.name}: occupied + reserved exceeds capacity")
        return (
            [SpotStatus.AVAILABLE] * free
            + [SpotStatus.RESERVED] * zl.reserved
            + [SpotStatus.OCCUPIED] * zl.occupied
        )

    @staticmethod
    def _random_status(rng: random.Random) -> SpotStatus:
        x = rng.random()
        if x < 0.2:
            return SpotStatus.OCCUPIED
        if x < 0.4:
            return SpotStatus.RESERVED
        return SpotStatus.AVAILABLE


def efficiency(total_spots: int, occupied: int) -> int:
    """
    Percentage of spots not occupied, rounded half up. 0 for an empty lot.
    Reserved spots count as not occupied.
    """
    if total_spots <= 0:
        return 0
    free = total_spots - occupied
    # integer half-up rounding of free * 100 / total_spots
    return (free * 200 + total_spots) // (total_spots * 2)


def normalize_user_type(user_type: UserType | str | None) -> str:
    """Known types are lower-cased; anything else is kept as sent. Empty -> student."""
    if isinstance(user_type, UserType):
        return user_type.value
    if user_type is None or user_type == "":
        return UserType.STUDENT.value
    raw = str(user_type)
    if raw.lower() in {t.value for t in UserType}:
        return raw.lower()
    return raw
