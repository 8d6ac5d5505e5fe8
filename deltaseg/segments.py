"""Segment finder: group deltas into maximal same-signed runs.

Algorithm:
1. Compute deltas of target from source over the full domain
2. Fold left over every delta position plus one sentinel end position
3. A zero delta, a sign flip, or the sentinel closes the open run
4. A sign flip opens a new run at the same position
5. While a run stays open, keep the delta closest to zero as its extremal

Zero is decided by the comparison policy. Once both values are known to be
non-zero, a sign flip is an exact negative product of extremal and delta;
the policy epsilon bounds single values, not products.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import reduce
from typing import Any, Optional

from deltaseg.comparison import EXACT, ComparablePolicy
from deltaseg.deltas import compute_deltas
from deltaseg.models import DeltaRun, NumericSequence, as_scalar
from deltaseg.ranges import IndexRange


@dataclass(frozen=True)
class _ScanState:
    open_start: Optional[int] = None
    extremal: Any = None
    runs: tuple[DeltaRun, ...] = ()


def _close(state: _ScanState, position: int) -> _ScanState:
    if state.open_start is None:
        return _ScanState(runs=state.runs)
    run = DeltaRun(range=IndexRange(state.open_start, position), delta=state.extremal)
    return _ScanState(runs=state.runs + (run,))


def _make_step(policy: ComparablePolicy, zero: Any):
    """Create the fold step function that captures the comparison policy."""

    def step(state: _ScanState, item: tuple[int, Any]) -> _ScanState:
        position, delta = item

        # Sentinel or zero delta: flush whatever is open
        if delta is None or policy.is_equal(delta, zero):
            return _close(state, position)

        if state.open_start is None:
            return replace(state, open_start=position, extremal=delta)

        # Sign flip: flush, then the flipping delta starts the next run
        product = as_scalar(state.extremal) * as_scalar(delta)
        if EXACT.is_less(product, 0):
            return replace(_close(state, position), open_start=position, extremal=delta)

        if policy.is_greater(delta, zero):
            closer = policy.min(state.extremal, delta)
        else:
            closer = policy.max(state.extremal, delta)
        return replace(state, extremal=closer)

    return step


def find_segments(
    target: NumericSequence,
    source: NumericSequence,
    policy: Optional[ComparablePolicy] = None,
) -> list[DeltaRun]:
    """Maximal runs of non-zero, same-signed delta of target from source.

    Each run carries the delta closest to zero within it. Ranges are in
    the target's domain. Returns [] when every delta is zero under the
    policy (default: the policy of the deltas' dtype).

    Raises:
        MismatchError: sequence lengths differ.
    """
    deltas = compute_deltas(target, source)
    positions = list(target.domain)
    assert len(deltas) == len(positions), "deltas do not cover the scanned positions"

    if len(deltas) == 0:
        return []
    policy = policy or deltas.policy()
    zero = deltas.values[0] - deltas.values[0]

    items = list(zip(positions, deltas.values))
    items.append((target.domain.end, None))
    final = reduce(_make_step(policy, zero), items, _ScanState())
    return list(final.runs)
