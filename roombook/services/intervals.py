from dataclasses import dataclass

from roombook.services.errors import InvalidTimeRange


@dataclass(frozen=True)
class Interval:
    """Half-open wall-clock interval [start, end) on a single day.

    Times are zero-padded "HH:MM" strings, so plain string comparison
    orders them correctly.
    """

    start: str
    end: str

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidTimeRange(self.start, self.end)

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)


def overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """Touching at a shared boundary is not an overlap."""
    return a_start < b_end and b_start < a_end


def validate_range(start_time: str, end_time: str) -> Interval:
    return Interval(start_time, end_time)
