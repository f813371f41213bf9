import calendar
from datetime import date, datetime
from typing import Callable, Literal, Sequence, TypeVar

Window = Literal["1m", "3m", "6m", "1y", "all"]
WINDOWS: tuple[str, ...] = ("1m", "3m", "6m", "1y", "all")

_WINDOW_MONTHS: dict[str, int] = {"1m": 1, "3m": 3, "6m": 6, "1y": 12}

T = TypeVar("T")


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _default_date_of(entry) -> date:
    return _as_date(entry.date)


def subtract_months(day: date, months: int) -> date:
    """Calendar month subtraction; the day is clamped to the target month's length."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def window_cutoff(window: Window, now: date | datetime) -> date | None:
    if window == "all":
        return None
    if window not in _WINDOW_MONTHS:
        raise ValueError(f"Unknown window {window!r}; expected one of {', '.join(WINDOWS)}")
    return subtract_months(_as_date(now), _WINDOW_MONTHS[window])


def filter_by_window(
    series: Sequence[T],
    window: Window,
    now: date | datetime,
    date_of: Callable[[T], date] = _default_date_of,
) -> Sequence[T]:
    cutoff = window_cutoff(window, now)
    if cutoff is None:
        return series
    return [entry for entry in series if _as_date(date_of(entry)) >= cutoff]


def filter_by_range(
    series: Sequence[T],
    start: date | None = None,
    end: date | None = None,
    date_of: Callable[[T], date] = _default_date_of,
) -> list[T]:
    """Inclusive start/end filter; either bound may be omitted."""
    kept = []
    for entry in series:
        day = _as_date(date_of(entry))
        if start and day < start:
            continue
        if end and day > end:
            continue
        kept.append(entry)
    return kept


def sort_series(series: Sequence[T], date_of: Callable[[T], date] = _default_date_of) -> list[T]:
    return sorted(series, key=lambda entry: _as_date(date_of(entry)))
