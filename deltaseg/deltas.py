# deltaseg/deltas.py

from __future__ import annotations

from typing import Optional

from deltaseg.core.errors import MismatchError
from deltaseg.models import NumericSequence
from deltaseg.ranges import IndexRange, map_range


def compute_deltas(
    target: NumericSequence,
    source: NumericSequence,
    sub_range: Optional[IndexRange] = None,
) -> NumericSequence:
    """Element-wise target - source over sub_range of the target's domain.

    sub_range defaults to the whole target domain and is translated into the
    source's domain with map_range, so sequences with different start
    offsets line up position by position.

    The result is anchored at sub_range.start (the target's coordinates)
    and has exactly len(sub_range) elements. An empty range gives an empty
    result.

    Raises:
        MismatchError: lengths differ, or sub_range has no counterpart in
            the source's domain.
    """
    if len(target) != len(source):
        raise MismatchError(
            f"Cannot compare sequences of length {len(target)} and {len(source)}"
        )
    window = target.domain if sub_range is None else sub_range
    mapped = map_range(target.domain, source.domain, window)
    if mapped is None:
        raise MismatchError(
            f"Range {window} of domain {target.domain} has no counterpart in {source.domain}"
        )
    values = target.window(window).values - source.window(mapped).values
    return NumericSequence(values, start=window.start)
