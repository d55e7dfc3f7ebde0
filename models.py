from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ZoneId(Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @classmethod
    def parse(cls, value: Any) -> Optional["ZoneId"]:
        """Case-insensitive zone lookup (None if unknown)"""
        if isinstance(value, ZoneId):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class SpotStatus(Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


class SpotType(Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    VISITOR = "visitor"
    VIP = "vip"

    @classmethod
    def for_zone(cls, zone: ZoneId) -> "SpotType":
        return _ZONE_SPOT_TYPES[zone]


_ZONE_SPOT_TYPES = {
    ZoneId.A: SpotType.STUDENT,
    ZoneId.B: SpotType.FACULTY,
    ZoneId.C: SpotType.VISITOR,
    ZoneId.D: SpotType.VIP,
}


class UserType(Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    VISITOR = "visitor"


@dataclass
class Spot:
    spot_id: str        # "A-001"
    zone: ZoneId
    status: SpotStatus
    spot_type: SpotType

    def to_dict(self) -> dict:
        return {
            "id": self.spot_id,
            "status": self.status.value,
            "zone": self.zone.value,
            "type": self.spot_type.value,
        }


@dataclass
class Zone:
    zone_id: ZoneId
    name: str
    capacity: int
    available: int
    occupied: int
    reserved: int

    def is_balanced(self) -> bool:
        return self.available + self.occupied + self.reserved == self.capacity

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "capacity": self.capacity,
            "available": self.available,
            "occupied": self.occupied,
            "reserved": self.reserved,
        }


@dataclass
class Reservation:
    reservation_id: str
    user_id: str
    zone: ZoneId
    spot_id: str
    date: str           # "YYYY-MM-DD"
    start_time: str
    end_time: str
    vehicle: str
    created_at: str     # ISO-8601 (UTC)
    status: SpotStatus = SpotStatus.RESERVED

    def to_dict(self) -> dict:
        return {
            "id": self.reservation_id,
            "userId": self.user_id,
            "zone": self.zone.value,
            "spotId": self.spot_id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "vehicle": self.vehicle,
            "status": self.status.value,
            "createdAt": self.created_at,
        }


@dataclass
class User:
    user_id: int
    username: str
    email: str
    klu_id: str
    user_type: str      # UserType value, or whatever the client sent
    created_at: str

    def public_dict(self) -> dict:
        """Fields safe to return from login"""
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "kluId": self.klu_id,
            "type": self.user_type,
        }

    def to_dict(self) -> dict:
        d = self.public_dict()
        d["createdAt"] = self.created_at
        return d


@dataclass
class Statistics:
    total_spots: int
    available: int
    occupied: int
    reserved: int
    efficiency: int
    today_reservations: int

    def to_dict(self) -> dict:
        return {
            "totalSpots": self.total_spots,
            "available": self.available,
            "occupied": self.occupied,
            "reserved": self.reserved,
            "efficiency": self.efficiency,
            "todayReservations": self.today_reservations,
        }
