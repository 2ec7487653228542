"""Time control parsing helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass


def _main_period(value: str) -> str:
    # "40/5400+30:1800+30" -> "40/5400"
    return value.split(":", 1)[0].split("+", 1)[0].strip()


def _parse_time_control_value(value: str) -> TimeControl | None:
    normalized = value.strip()
    if not normalized or normalized in {"-", "?"}:
        return None
    main = _main_period(normalized)
    for parser in (
        _parse_time_control_seconds,
        _parse_time_control_slash,
        _parse_time_control_fallback,
    ):
        initial = parser(main)
        if initial is not None:
            return TimeControl(initial=initial)
    return None


def _parse_time_control_seconds(value: str) -> int | None:
    if value.isdigit():
        return int(value)
    return None


def _parse_time_control_slash(value: str) -> int | None:
    if "/" not in value:
        return None
    parts = [part for part in value.split("/") if part]
    if not parts or not parts[-1].isdigit():
        return None
    return int(parts[-1])


def _parse_time_control_fallback(value: str) -> int | None:
    match = re.search(r"(\d+)", value)
    if match:
        return int(match.group(1))
    return None


@dataclass(frozen=True, slots=True)
class TimeControl:
    """Main-period time in seconds of a PGN `TimeControl` tag."""

    initial: int

    @classmethod
    def from_pgn_string(cls, value: str | None) -> TimeControl | None:
        if not value:
            return None
        return _parse_time_control_value(value)


def base_time_seconds(value: str | None) -> int:
    """Return the main-period clock in seconds, or 0 when the tag is absent or unreadable."""
    parsed = TimeControl.from_pgn_string(value)
    return parsed.initial if parsed is not None else 0
