# deltaseg/applier.py

from __future__ import annotations

from typing import Any

import numpy as np

from deltaseg.core.errors import OutOfBoundsError
from deltaseg.models import NumericSequence
from deltaseg.ranges import IndexRange


def apply_delta(sequence: NumericSequence, delta: Any, index_range: IndexRange) -> NumericSequence:
    """A new sequence with delta added at every position of index_range.

    Positions outside the range are unchanged; length, start offset and
    dtype are preserved. delta is cast to the sequence's element type with
    same_kind casting, so a float delta on an integer sequence raises
    TypeError instead of truncating.

    Raises:
        OutOfBoundsError: index_range starts before or ends after the
            sequence's domain.
    """
    domain = sequence.domain
    if index_range.start < domain.start or index_range.end > domain.end:
        raise OutOfBoundsError(f"Range {index_range} exceeds domain {domain}")

    step = np.asarray(delta).astype(sequence.dtype, casting="same_kind")
    shifted = sequence.values.copy()
    local = index_range.as_slice(domain.start)
    shifted[local] = shifted[local] + step
    return NumericSequence(shifted, start=sequence.start)
