"""
Booking Lifecycle - derived status and time windows.

A stored booking is either Upcoming or Cancelled. Whether an uncancelled
booking has been completed, may still be cancelled, or may show its entry
QR code is worked out here from the current time and the booking's date
label and time range.

None of these functions raise on malformed dates or times. They log a
warning and return a default that neither hides the booking nor blocks a
legitimate action:

    real_time_status          -> Upcoming
    is_upcoming_and_not_expired -> True
    is_cancellation_allowed   -> True
    is_credential_available   -> False
    is_more_than_one_hour_away -> True
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from loguru import logger

from courtbook.config import get_settings
from courtbook.exceptions import TimeFormatError
from courtbook.models.booking import Booking, BookingStatus, BookingView
from courtbook.services.time_format import parse_start_minutes, parse_time_range

TODAY = "Today"
TOMORROW = "Tomorrow"

# A year-less date further back than this is read as next year's
YEAR_ROLLOVER_DAYS = 183

ONE_HOUR = timedelta(hours=1)

_FORMATS_WITH_YEAR = ("%b %d, %Y", "%B %d, %Y", "%Y-%m-%d")
_MONTH_DAY_FORMATS = ("%b %d, %Y", "%B %d, %Y")


def _month_day_in_year(text: str, year: int) -> Optional[date]:
    for fmt in _MONTH_DAY_FORMATS:
        try:
            return datetime.strptime(f"{text}, {year}", fmt).date()
        except ValueError:
            continue
    return None


def display_date_label(day: date, now: datetime) -> str:
    """
    Label stored on a booking: 'Today', 'Tomorrow' or e.g. 'Oct 21, 2026'.
    """
    today = now.date()
    if day == today:
        return TODAY
    if day == today + timedelta(days=1):
        return TOMORROW
    return day.strftime("%b %d, %Y")


def resolve_booking_date(label: str, now: datetime) -> date:
    """
    Turn a booking's date label into a calendar day.

    Accepts "Today", "Tomorrow", "Oct 21, 2026", "October 21, 2026",
    "2026-10-21" and year-less "Oct 21". A year-less date takes the current
    year. When that day does not exist this year (Feb 29) or lies more
    than half a year in the past, the next year in which it exists is used.

    Raises:
        TimeFormatError: if the label matches none of these shapes
    """
    text = label.strip()
    today = now.date()
    if text == TODAY:
        return today
    if text == TOMORROW:
        return today + timedelta(days=1)

    if "," in text or "-" in text:
        for fmt in _FORMATS_WITH_YEAR:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise TimeFormatError(f"Unrecognized booking date: {label!r}")

    this_year = _month_day_in_year(text, now.year)
    if this_year is not None and (today - this_year).days <= YEAR_ROLLOVER_DAYS:
        return this_year

    # Feb 29 can be up to eight years away (e.g. after 2096)
    for year in range(now.year + 1, now.year + 9):
        later = _month_day_in_year(text, year)
        if later is not None:
            return later
    if this_year is not None:
        return this_year
    raise TimeFormatError(f"Unrecognized booking date: {label!r}")


def _at_minutes(day: date, minutes: int) -> datetime:
    return datetime.combine(day, time.min) + timedelta(minutes=minutes)


def booking_start(booking: Booking, now: datetime) -> datetime:
    """Start of the booking as a datetime."""
    day = resolve_booking_date(booking.date, now)
    return _at_minutes(day, parse_start_minutes(booking.time))


def booking_end(booking: Booking, now: datetime) -> datetime:
    """End of the booking; a bare time is treated as its own end."""
    day = resolve_booking_date(booking.date, now)
    if "-" not in booking.time:
        return _at_minutes(day, parse_start_minutes(booking.time))
    _, end = parse_time_range(booking.time)
    return _at_minutes(day, end)


def _log_parse_failure(booking: Booking, error: Exception) -> None:
    logger.warning(
        f"Cannot parse date/time of booking {booking.id} "
        f"({booking.date!r}, {booking.time!r}): {error}"
    )


def real_time_status(booking: Booking, now: datetime) -> BookingStatus:
    """
    Status to display right now.

    Cancelled is final. Otherwise the booking is Completed once its end
    time has passed and Upcoming until then.
    """
    if booking.status is BookingStatus.CANCELLED:
        return BookingStatus.CANCELLED
    try:
        end = booking_end(booking, now)
    except TimeFormatError as e:
        _log_parse_failure(booking, e)
        return BookingStatus.UPCOMING
    return BookingStatus.COMPLETED if end < now else BookingStatus.UPCOMING


def is_upcoming_and_not_expired(booking: Booking, now: datetime) -> bool:
    """Whether the booking's end is still ahead, regardless of stored status."""
    try:
        return booking_end(booking, now) > now
    except TimeFormatError as e:
        _log_parse_failure(booking, e)
        return True


def bookings_on_day(bookings: Iterable[Booking], day: date, now: datetime) -> List[Booking]:
    """
    Non-cancelled bookings falling on a calendar day.

    A booking whose date label cannot be read is matched on the label
    itself instead.
    """
    label = display_date_label(day, now)
    matches = []
    for booking in bookings:
        if booking.status is BookingStatus.CANCELLED:
            continue
        try:
            on_day = resolve_booking_date(booking.date, now) == day
        except TimeFormatError as e:
            _log_parse_failure(booking, e)
            on_day = booking.date.strip() == label
        if on_day:
            matches.append(booking)
    return matches


def is_active(booking: Booking, now: datetime) -> bool:
    """Stored as Upcoming and not yet finished."""
    return booking.status is BookingStatus.UPCOMING and is_upcoming_and_not_expired(
        booking, now
    )


class BookingLifecycle:
    """
    Cancellation and credential windows, plus display helpers.
    """

    def __init__(
        self,
        cancellation_cutoff_minutes: Optional[int] = None,
        credential_lead_minutes: Optional[int] = None,
        credential_grace_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.cancellation_cutoff = timedelta(
            minutes=settings.cancellation_cutoff_minutes
            if cancellation_cutoff_minutes is None
            else cancellation_cutoff_minutes
        )
        self.credential_lead = timedelta(
            minutes=settings.credential_lead_minutes
            if credential_lead_minutes is None
            else credential_lead_minutes
        )
        self.credential_grace = timedelta(
            minutes=settings.credential_grace_minutes
            if credential_grace_minutes is None
            else credential_grace_minutes
        )

    def real_time_status(self, booking: Booking, now: datetime) -> BookingStatus:
        return real_time_status(booking, now)

    def is_upcoming_and_not_expired(self, booking: Booking, now: datetime) -> bool:
        return is_upcoming_and_not_expired(booking, now)

    def is_cancellation_allowed(self, booking: Booking, now: datetime) -> bool:
        """Cancelling is allowed until the cutoff before the start."""
        try:
            start = booking_start(booking, now)
        except TimeFormatError as e:
            _log_parse_failure(booking, e)
            return True
        return now < start - self.cancellation_cutoff

    def is_credential_available(self, booking: Booking, now: datetime) -> bool:
        """
        Whether the entry QR code can be shown.

        It opens one hour before the start and closes 20 minutes after it
        (with default settings), both ends inclusive.
        """
        try:
            start = booking_start(booking, now)
        except TimeFormatError as e:
            _log_parse_failure(booking, e)
            return False
        return start - self.credential_lead <= now <= start + self.credential_grace

    def is_more_than_one_hour_away(self, booking: Booking, now: datetime) -> bool:
        try:
            start = booking_start(booking, now)
        except TimeFormatError as e:
            _log_parse_failure(booking, e)
            return True
        return now < start - ONE_HOUR

    def credential_status(self, booking: Booking, now: datetime) -> str:
        """Short text describing when the QR code can be shown."""
        try:
            start = booking_start(booking, now)
        except TimeFormatError as e:
            _log_parse_failure(booking, e)
            return "Unable to calculate"

        opens = start - self.credential_lead
        closes = start + self.credential_grace
        if opens <= now <= closes:
            return "Available now"
        if now > closes:
            return "QR Code expired"

        remaining = int((opens - now).total_seconds() // 60)
        hours, minutes = divmod(remaining, 60)
        if hours > 0:
            return f"Available in {hours}h {minutes}m"
        return f"Available in {minutes}m"

    def view(self, booking: Booking, now: datetime) -> BookingView:
        status = real_time_status(booking, now)
        upcoming = status is BookingStatus.UPCOMING
        return BookingView(
            booking=booking,
            real_time_status=status,
            is_active=is_active(booking, now),
            can_cancel=upcoming and self.is_cancellation_allowed(booking, now),
            credential_available=upcoming and self.is_credential_available(booking, now),
            credential_status=self.credential_status(booking, now),
        )

    def sort_for_display(self, bookings: Iterable[Booking], now: datetime) -> List[BookingView]:
        """
        Upcoming bookings first, then completed and cancelled ones; latest
        start first within each group.
        """

        def start_or_now(booking: Booking) -> datetime:
            try:
                return booking_start(booking, now)
            except TimeFormatError:
                return now

        views = [self.view(booking, now) for booking in bookings]
        views.sort(key=lambda v: start_or_now(v.booking), reverse=True)
        views.sort(key=lambda v: v.real_time_status is not BookingStatus.UPCOMING)
        return views
