"""
In-memory booking store.

Bookings are appended once and never rewritten; cancellation is recorded
in a status overlay applied when bookings are read. In production this
would sit on a durable store with a unique constraint on booking id.
"""

from datetime import date, datetime
from typing import Dict, Iterator, List, Optional

from loguru import logger

from courtbook.exceptions import BookingNotFoundError, InvalidBookingStateError
from courtbook.models.booking import Booking, BookingRequest, BookingStatus, generate_token
from courtbook.services.lifecycle import (
    bookings_on_day,
    is_upcoming_and_not_expired,
    real_time_status,
)

_MAX_ID_ATTEMPTS = 20


class BookingStore:
    """
    Canonical collection of a user's bookings.
    """

    def __init__(self):
        self._log: List[Booking] = []
        self._index: Dict[str, int] = {}
        self._status_overlay: Dict[str, BookingStatus] = {}

    def _new_id(self) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            booking_id = generate_token()
            if booking_id not in self._index:
                return booking_id
        # 6-character space exhausted by chance; widen to 8
        return generate_token(8)

    def _current(self, position: int) -> Booking:
        booking = self._log[position]
        status = self._status_overlay.get(booking.id)
        if status is None:
            return booking
        return booking.model_copy(update={"status": status})

    def add(self, request: BookingRequest, now: Optional[datetime] = None) -> Booking:
        """
        Store a new booking with status Upcoming.

        Args:
            request: Booking details
            now: Creation time, defaults to the current time

        Returns:
            The stored booking
        """
        data = request.model_dump(include=set(BookingRequest.model_fields))
        booking = Booking(
            **data,
            id=self._new_id(),
            status=BookingStatus.UPCOMING,
            created_at=now or datetime.now(),
        )
        self._index[booking.id] = len(self._log)
        self._log.append(booking)
        logger.info(f"Stored booking {booking.id} for {booking.facility_name} on {booking.date} {booking.time}")
        return booking

    def get(self, booking_id: str) -> Booking:
        """
        Raises:
            BookingNotFoundError: if no booking has this id
        """
        position = self._index.get(booking_id)
        if position is None:
            raise BookingNotFoundError(booking_id)
        return self._current(position)

    def find_by_share_token(self, share_token: str) -> Optional[Booking]:
        for position, booking in enumerate(self._log):
            if booking.share_token == share_token:
                return self._current(position)
        return None

    def cancel(self, booking_id: str, now: Optional[datetime] = None) -> Booking:
        """
        Mark a booking as cancelled.

        Args:
            booking_id: Booking to cancel
            now: When given, a booking that has already finished is refused

        Returns:
            The cancelled booking

        Raises:
            BookingNotFoundError: unknown booking id
            InvalidBookingStateError: booking already cancelled or completed
        """
        booking = self.get(booking_id)
        if booking.status is BookingStatus.CANCELLED:
            raise InvalidBookingStateError(booking_id, f"Booking {booking_id} is already cancelled")
        if now is not None and real_time_status(booking, now) is BookingStatus.COMPLETED:
            raise InvalidBookingStateError(booking_id, f"Booking {booking_id} has already been completed")

        self._status_overlay[booking_id] = BookingStatus.CANCELLED
        logger.info(f"Cancelled booking {booking_id}")
        return self.get(booking_id)

    def list(self) -> List[Booking]:
        """Snapshot of all bookings, newest first."""
        return [self._current(position) for position in reversed(range(len(self._log)))]

    def __iter__(self) -> Iterator[Booking]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._log)

    def active_count(self, now: Optional[datetime] = None) -> int:
        """
        Bookings stored as Upcoming. With `now`, bookings that have
        already finished are left out.
        """
        return sum(
            1
            for booking in self.list()
            if booking.status is BookingStatus.UPCOMING
            and (now is None or is_upcoming_and_not_expired(booking, now))
        )

    def daily_count(self, day: date, now: datetime) -> int:
        """Non-cancelled bookings on a calendar day."""
        return len(bookings_on_day(self.list(), day, now))
