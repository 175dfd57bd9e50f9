"""Timeframe presets and explicit date ranges for commit loading."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


@dataclass(frozen=True)
class TimeframePreset:
    label: str
    keyword: str
    hours: int


PRESETS: tuple[TimeframePreset, ...] = (
    TimeframePreset("24h", "24", 24),
    TimeframePreset("48h", "48", 48),
    TimeframePreset("72h", "72", 72),
    TimeframePreset("1 week", "week", 24 * 7),
    TimeframePreset("1 month", "month", 24 * 30),
)


@dataclass(frozen=True)
class DateRange:
    """Explicit window covering ``start`` through ``end``, both days inclusive."""

    start: date
    end: date

    @property
    def label(self) -> str:
        return f"{self.start.isoformat()} – {self.end.isoformat()}"


@dataclass(frozen=True)
class TimeWindow:
    since: datetime
    until: datetime | None
    label: str

    def bounds_text(self, now: datetime) -> tuple[str, str]:
        """Return ``(from, to)`` day strings used in prompts."""
        end = self.until if self.until is not None else now
        return self.since.strftime("%Y-%m-%d"), end.strftime("%Y-%m-%d")


def preset_index_for_keyword(keyword: str | None) -> int:
    """Resolve a CLI/config keyword ("24", "week", "1 month", ...) to a preset index."""
    if not keyword:
        return 0
    wanted = keyword.strip().lower()
    for idx, preset in enumerate(PRESETS):
        if wanted in {preset.keyword, preset.label.lower()}:
            return idx
    return 0


def cycle_preset(index: int, step: int) -> int:
    """Move ``step`` presets from ``index``, wrapping at both ends."""
    return (index + step) % len(PRESETS)


def window_for(interval_index: int, date_range: DateRange | None, now: datetime) -> TimeWindow:
    """Compute the active window; an explicit date range wins over the preset."""
    if date_range is not None:
        since = datetime.combine(date_range.start, time.min)
        until = datetime.combine(date_range.end, time.max.replace(microsecond=0))
        return TimeWindow(since=since, until=until, label=date_range.label)
    preset = PRESETS[max(0, min(interval_index, len(PRESETS) - 1))]
    return TimeWindow(since=now - timedelta(hours=preset.hours), until=None, label=preset.label)


def window_label(interval_index: int, date_range: DateRange | None) -> str:
    if date_range is not None:
        return date_range.label
    return PRESETS[max(0, min(interval_index, len(PRESETS) - 1))].label
