"""
Market Hours

US equity session status and next-open calculation, plus the list of
markets the tracker knows about.
"""
from dataclasses import dataclass, field
from datetime import datetime, date, time, timedelta
from functools import lru_cache
from typing import Optional, Any, Callable
from zoneinfo import ZoneInfo


def _nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    """n-th given weekday of a month (0=Monday)."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


def _last_weekday(year: int, month: int, weekday: int) -> date:
    next_month = date(year + month // 12, month % 12 + 1, 1)
    last = next_month - timedelta(days=1)
    return last - timedelta(days=(last.weekday() - weekday) % 7)


def _easter_sunday(year: int) -> date:
    """Gregorian Easter (anonymous algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def _observed(d: date) -> date:
    """Saturday holidays close Friday, Sunday holidays close Monday."""
    if d.weekday() == 5:
        return d - timedelta(days=1)
    if d.weekday() == 6:
        return d + timedelta(days=1)
    return d


@lru_cache(maxsize=32)
def us_market_holidays(year: int) -> frozenset[date]:
    """NYSE full-day closures for a year."""
    holidays = {
        _nth_weekday(year, 1, 0, 3),                    # Martin Luther King Jr. Day
        _nth_weekday(year, 2, 0, 3),                    # Washington's Birthday
        _easter_sunday(year) - timedelta(days=2),       # Good Friday
        _last_weekday(year, 5, 0),                      # Memorial Day
        _observed(date(year, 7, 4)),                    # Independence Day
        _nth_weekday(year, 9, 0, 1),                    # Labor Day
        _nth_weekday(year, 11, 3, 4),                   # Thanksgiving
        _observed(date(year, 12, 25)),                  # Christmas
    }
    # No Friday closure when New Year's Day is a Saturday
    new_year = date(year, 1, 1)
    if new_year.weekday() != 5:
        holidays.add(_observed(new_year))
    if year >= 2022:
        holidays.add(_observed(date(year, 6, 19)))      # Juneteenth
    return frozenset(holidays)


@dataclass
class MarketHours:
    """Market trading hours configuration."""
    open_hour: int = 9
    open_minute: int = 30
    close_hour: int = 16
    close_minute: int = 0
    timezone: str = "America/New_York"

    # Days when market is closed (0=Monday, 6=Sunday)
    closed_days: list[int] = field(default_factory=lambda: [5, 6])  # Sat, Sun

    # Extra full-day closures, "YYYY-MM-DD"
    holidays: set[str] = field(default_factory=set)

    # Rule-based closures for a given year
    holiday_calendar: Optional[Callable[[int], frozenset[date]]] = None

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def open_time(self) -> time:
        return time(self.open_hour, self.open_minute)

    @property
    def close_time(self) -> time:
        return time(self.close_hour, self.close_minute)

    def is_trading_day(self, d: date) -> bool:
        """Check if a date is a trading day."""
        if d.weekday() in self.closed_days:
            return False
        if d.isoformat() in self.holidays:
            return False
        if self.holiday_calendar is not None and d in self.holiday_calendar(d.year):
            return False
        return True


US_MARKET_HOURS = MarketHours(
    open_hour=9,
    open_minute=30,
    close_hour=16,
    close_minute=0,
    timezone="America/New_York",
    closed_days=[5, 6],
    holiday_calendar=us_market_holidays,
)


SUPPORTED_MARKETS: list[dict[str, Any]] = [
    {"code": "US", "name": "United States", "exchanges": ["NASDAQ", "NYSE", "AMEX"]},
    {"code": "CA", "name": "Canada", "exchanges": ["TSX", "TSXV"]},
    {"code": "UK", "name": "United Kingdom", "exchanges": ["LSE"]},
    {"code": "DE", "name": "Germany", "exchanges": ["XETRA"]},
    {"code": "JP", "name": "Japan", "exchanges": ["TSE"]},
    {"code": "AU", "name": "Australia", "exchanges": ["ASX"]},
]


@dataclass(frozen=True)
class MarketStatus:
    """Whether the market is open now and when it next opens."""
    is_open: bool
    next_open: datetime
    timezone: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_open": self.is_open,
            "next_open": self.next_open.isoformat(),
            "timezone": self.timezone,
        }


def _localize(now: Optional[datetime], hours: MarketHours) -> datetime:
    if now is None:
        return datetime.now(hours.tz)
    if now.tzinfo is None:
        # Naive datetimes are taken to be exchange-local already
        return now.replace(tzinfo=hours.tz)
    return now.astimezone(hours.tz)


def is_market_open(now: Optional[datetime] = None, hours: MarketHours = US_MARKET_HOURS) -> bool:
    """Regular session check; pre/post market counts as closed."""
    local = _localize(now, hours)
    if not hours.is_trading_day(local.date()):
        return False
    return hours.open_time <= local.time() < hours.close_time


def get_next_market_open(
    now: Optional[datetime] = None,
    hours: MarketHours = US_MARKET_HOURS,
) -> datetime:
    """
    Next session open strictly after ``now``.

    If the market has not opened yet today (and today trades), that is
    today's open.
    """
    local = _localize(now, hours)
    candidate = local.date()
    if local.time() >= hours.open_time:
        candidate += timedelta(days=1)

    while not hours.is_trading_day(candidate):
        candidate += timedelta(days=1)

    return datetime.combine(candidate, hours.open_time, tzinfo=hours.tz)


def get_market_status(
    now: Optional[datetime] = None,
    hours: MarketHours = US_MARKET_HOURS,
) -> MarketStatus:
    """Get the market status at ``now`` (defaults to the current time)."""
    local = _localize(now, hours)
    return MarketStatus(
        is_open=is_market_open(local, hours),
        next_open=get_next_market_open(local, hours),
        timezone=hours.timezone,
    )
