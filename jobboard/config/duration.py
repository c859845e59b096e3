"""Duration strings used by the config file ("5m", "7d", "PT15M")."""

import re


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""

    pass


_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

_ISO_PATTERN = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$"
)
_HUMAN_PATTERN = re.compile(r"(\d+)\s*([smhd])")


def parse_duration(value: str) -> int:
    """
    Convert a duration string to whole seconds.

    Accepts compact human form ("30s", "5m", "1h30m", "7d") and the
    ISO-8601 subset P[n]DT[n]H[n]M[n]S.

    Raises:
        DurationParseError: If the string is empty, malformed or zero

    Examples:
        >>> parse_duration("5m")
        300
        >>> parse_duration("P7D")
        604800
    """
    value = value.strip()
    if not value:
        raise DurationParseError("Duration string cannot be empty")

    if value.upper().startswith("P"):
        seconds = _parse_iso(value.upper())
    else:
        seconds = _parse_human(value.lower())

    if seconds == 0:
        raise DurationParseError(f"Duration cannot be zero: '{value}'")
    return seconds


def _parse_iso(value: str) -> int:
    match = _ISO_PATTERN.match(value)
    if not match:
        raise DurationParseError(
            f"Invalid ISO-8601 duration: '{value}'. Expected e.g. 'P7D', 'PT5M', 'PT1H30M'"
        )

    days, hours, minutes, seconds = match.groups()
    total = int(days or 0) * 86400 + int(hours or 0) * 3600 + int(minutes or 0) * 60
    if seconds:
        total += int(float(seconds))
    return total


def _parse_human(value: str) -> int:
    pieces = _HUMAN_PATTERN.findall(value)
    if not pieces:
        raise DurationParseError(
            f"Invalid duration: '{value}'. Expected e.g. '30s', '5m', '1h', '7d' or '1h30m'"
        )

    # Reject leftovers such as "5x" or "m5"
    if "".join(f"{num}{unit}" for num, unit in pieces) != re.sub(r"\s+", "", value):
        raise DurationParseError(
            f"Invalid characters in duration: '{value}'. Units are s, m, h and d"
        )

    return sum(int(num) * _UNIT_SECONDS[unit] for num, unit in pieces)


def validate_duration_range(seconds: int, min_seconds: int, max_seconds: int, label: str) -> None:
    """
    Check that a parsed duration lies within [min_seconds, max_seconds].

    Raises:
        DurationParseError: If the duration is out of range
    """
    if seconds < min_seconds:
        raise DurationParseError(
            f"{label} too short: {describe_seconds(seconds)}. Minimum is {describe_seconds(min_seconds)}."
        )
    if seconds > max_seconds:
        raise DurationParseError(
            f"{label} too long: {describe_seconds(seconds)}. Maximum is {describe_seconds(max_seconds)}."
        )


def describe_seconds(seconds: int) -> str:
    """Render seconds with the largest whole unit, e.g. "5 minutes"."""
    for unit_seconds, name in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= unit_seconds:
            amount = seconds // unit_seconds
            return f"{amount} {name}{'s' if amount != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"
