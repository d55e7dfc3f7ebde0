from __future__ import annotations

from errors import SpotNotFound, ZoneNotFound
from models import Spot, SpotStatus, SpotType, ZoneId


class SpotRegistry:
    """
    Per-zone spot lists.

    Spots keep their creation order ("A-001", "A-002", ...) for listing, and a
    side index gives O(1) lookup by id. Status is changed only through
    set_status, which ParkingSystem calls from its transition step.
    """

    def __init__(self) -> None:
        self._spots: dict[ZoneId, list[Spot]] = {}
        self._index: dict[ZoneId, dict[str, Spot]] = {}

    def clear(self) -> None:
        self._spots.clear()
        self._index.clear()

    def add_zone(self, zone: ZoneId, statuses: list[SpotStatus]) -> list[Spot]:
        """Create one spot per status, numbered from 1."""
        spot_type = SpotType.for_zone(zone)
        spots = [
            Spot(
                spot_id=f"{zone.value}-{i:03d}",
                zone=zone,
                status=status,
                spot_type=spot_type,
            )
            for i, status in enumerate(statuses, start=1)
        ]
        self._spots[zone] = spots
        self._index[zone] = {s.spot_id: s for s in spots}
        return spots

    def list_spots(self, zone: ZoneId) -> list[Spot]:
        if zone not in self._spots:
            raise ZoneNotFound()
        return list(self._spots[zone])

    def find_spot(self, zone: ZoneId, spot_id: str) -> Spot:
        spot = self._index.get(zone, {}).get(spot_id)
        if spot is None:
            raise SpotNotFound(f"Spot {spot_id} not found")
        return spot

    def set_status(self, zone: ZoneId, spot_id: str, status: SpotStatus) -> None:
        self.find_spot(zone, spot_id).status = status

    def count(self, zone: ZoneId) -> dict[SpotStatus, int]:
        counts = {status: 0 for status in SpotStatus}
        for spot in self.list_spots(zone):
            counts[spot.status] += 1
        return counts

    def size(self) -> int:
        return sum(len(spots) for spots in self._spots.values())
