"""Convert `H:MM:SS` clock tokens to seconds."""

CLOCK_PARTS_FULL = 3
CLOCK_PARTS_SHORT = 2


def _normalize_clock_parts(token: str) -> tuple[str, str, str] | None:
    parts = token.strip().split(":")
    if len(parts) == CLOCK_PARTS_FULL:
        return parts[0], parts[1], parts[2]
    if len(parts) == CLOCK_PARTS_SHORT:
        return "0", parts[0], parts[1]
    return None


def _clock_to_seconds(token: str) -> float:
    """Return the clock token as seconds; malformed tokens count as zero."""
    clock_parts = _normalize_clock_parts(token)
    if clock_parts is None:
        return 0
    hours, minutes, seconds = clock_parts
    try:
        total = float(hours) * 3600 + float(minutes) * 60 + float(seconds)
    except ValueError:
        return 0
    return int(total) if total.is_integer() else total
