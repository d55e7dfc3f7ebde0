from __future__ import annotations

from errors import ReservationNotFound
from models import Reservation


class ReservationLedger:
    """Active reservations in creation order."""

    def __init__(self) -> None:
        self._items: list[Reservation] = []

    def clear(self) -> None:
        self._items.clear()

    def append(self, reservation: Reservation) -> None:
        self._items.append(reservation)

    def get(self, reservation_id: str) -> Reservation:
        for r in self._items:
            if r.reservation_id == reservation_id:
                return r
        raise ReservationNotFound()

    def remove(self, reservation_id: str) -> Reservation:
        r = self.get(reservation_id)
        self._items.remove(r)
        return r

    def list_by_user(self, user_id: str) -> list[Reservation]:
        return [r for r in self._items if r.user_id == user_id]

    def count_on(self, date: str) -> int:
        return sum(1 for r in self._items if r.date == date)

    def all(self) -> list[Reservation]:
        return list(self._items)

    def size(self) -> int:
        return len(self._items)
