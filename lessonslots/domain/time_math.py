"""
Wall-clock helpers working on "HH:MM" strings and minutes since midnight.

Inputs are assumed to be well formed; format validation belongs to the
configuration layer and the host application's forms.
"""


def to_minutes(hhmm: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total_minutes: int) -> str:
    """Convert minutes since midnight back to "HH:MM"."""
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def add_minutes(hhmm: str, minutes: int) -> str:
    """
    Compute an end time from a start time and a duration.

    No wrapping past midnight: the operating window closes at 23:30.
    """
    return from_minutes(to_minutes(hhmm) + minutes)


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap test; touching intervals do not overlap."""
    return a_start < b_end and a_end > b_start
