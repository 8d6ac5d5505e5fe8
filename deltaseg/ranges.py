# deltaseg/ranges.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class IndexRange:
    """Half-open interval [start, end) over an integer index domain.

    start == end is an empty range anchored at a position. Two ranges are
    only positionally comparable when they belong to the same domain.
    """
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"IndexRange start ({self.start}) must not exceed end ({self.end})"
            )

    def __len__(self) -> int:
        return self.end - self.start

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end))

    def __repr__(self) -> str:
        return f"IndexRange({self.start}, {self.end})"

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, position: int) -> bool:
        """True if position lies inside the range."""
        return self.start <= position < self.end

    def covers(self, other: IndexRange) -> bool:
        """True if other lies fully within this range (bounds inclusive)."""
        return self.start <= other.start and other.end <= self.end

    def shifted(self, offset: int) -> IndexRange:
        return IndexRange(self.start + offset, self.end + offset)

    def as_slice(self, origin: int = 0) -> slice:
        """Slice into a 0-based array whose first element sits at origin."""
        return slice(self.start - origin, self.end - origin)


def map_range(
    self_domain: IndexRange,
    other_domain: IndexRange,
    sub_range: IndexRange,
) -> Optional[IndexRange]:
    """Translate sub_range of self_domain into the matching range of other_domain.

    Walks self_domain position by position (its end included, so the end
    bound of sub_range can be found) while a cursor walks other_domain from
    its start. The cursor position at sub_range.start becomes the mapped
    start, at sub_range.end the mapped end.

    Returns None if sub_range is not inside self_domain, or if the cursor
    runs past other_domain.end before both bounds are found. Never returns
    a clamped range.
    """
    mapped_start: Optional[int] = None
    mapped_end: Optional[int] = None
    cursor = other_domain.start
    for position in range(self_domain.start, self_domain.end + 1):
        if cursor > other_domain.end:
            break
        if position == sub_range.start:
            mapped_start = cursor
        if position == sub_range.end:
            mapped_end = cursor
        if mapped_start is not None and mapped_end is not None:
            return IndexRange(mapped_start, mapped_end)
        cursor += 1
    return None
