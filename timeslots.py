from datetime import datetime


def time_to_minutes(value: str) -> int:
    """Convert a 24h "HH:MM" clock time into minutes since midnight.

    Raises ValueError when the string is not a valid clock time.
    """
    parsed = datetime.strptime(value, "%H:%M")
    return parsed.hour * 60 + parsed.minute


def overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """
    Check whether two time ranges on the same day conflict.

    Ranges are half-open, [start, end), so a meeting ending at 09:00 does
    not conflict with one starting at 09:00.

    **Example:**
    - `overlaps("08:00", "09:00", "08:30", "10:00")` -> True
    - `overlaps("08:00", "09:00", "09:00", "10:00")` -> False
    """
    return (
        time_to_minutes(a_start) < time_to_minutes(b_end)
        and time_to_minutes(b_start) < time_to_minutes(a_end)
    )
