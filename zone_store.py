from __future__ import annotations

from errors import InvariantViolation, ZoneNotFound
from models import SpotStatus, Zone, ZoneId


class ZoneStore:
    """
    Per-zone aggregate counters.

    adjust() validates the whole delta before touching anything, so a zone is
    never left half-updated and available + occupied + reserved == capacity
    holds after every call.
    """

    def __init__(self) -> None:
        self._zones: dict[ZoneId, Zone] = {}

    def clear(self) -> None:
        self._zones.clear()

    def load(self, zone_id: ZoneId, name: str, counts: dict[SpotStatus, int]) -> Zone:
        """Install a zone whose counters come straight from the spot list."""
        zone = Zone(
            zone_id=zone_id,
            name=name,
            capacity=sum(counts.values()),
            available=counts[SpotStatus.AVAILABLE],
            occupied=counts[SpotStatus.OCCUPIED],
            reserved=counts[SpotStatus.RESERVED],
        )
        self._zones[zone_id] = zone
        return zone

    def get_zone(self, zone_id: ZoneId) -> Zone:
        zone = self._zones.get(zone_id)
        if zone is None:
            raise ZoneNotFound()
        return zone

    def all_zones(self) -> dict[ZoneId, Zone]:
        return dict(self._zones)

    def adjust(
        self,
        zone_id: ZoneId,
        available: int = 0,
        occupied: int = 0,
        reserved: int = 0,
    ) -> None:
        zone = self.get_zone(zone_id)

        new_available = zone.available + available
        new_occupied = zone.occupied + occupied
        new_reserved = zone.reserved + reserved

        if min(new_available, new_occupied, new_reserved) < 0:
            raise InvariantViolation(f"Zone {zone_id.value} counter would go negative")
        if new_available + new_occupied + new_reserved != zone.capacity:
            raise InvariantViolation(f"Zone {zone_id.value} counters would not sum to capacity")

        zone.available = new_available
        zone.occupied = new_occupied
        zone.reserved = new_reserved
