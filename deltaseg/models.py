"""deltaseg data models and convergence state.

Contains all dataclasses that cross module boundaries within deltaseg.
ConvergenceState is the LangGraph TypedDict for the convergence loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional, TypedDict

import numpy as np

from deltaseg.comparison import ComparablePolicy, policy_for
from deltaseg.ranges import IndexRange


# Signed integers and floats. Deltas must be able to go negative.
SUPPORTED_KINDS = frozenset("if")


def as_scalar(value: Any) -> Any:
    """Plain Python number for a numpy scalar.

    Fixed-width products and abs() can overflow; Python numbers cannot.
    """
    return value.item() if hasattr(value, "item") else value


@dataclass(frozen=True, eq=False)
class NumericSequence:
    """Immutable 1-D run of numbers over the index domain [start, start + len).

    values is copied on construction and marked read-only, so a sequence
    can be shared freely; every operation returns a new sequence.
    Indexing uses domain positions, not 0-based offsets.
    """

    values: np.ndarray
    start: int = 0

    def __post_init__(self) -> None:
        array = np.array(self.values)
        if array.ndim != 1:
            raise ValueError(f"NumericSequence must be 1-D, got {array.ndim}-D")
        if array.dtype.kind not in SUPPORTED_KINDS:
            raise TypeError(
                f"Unsupported element dtype {array.dtype}: "
                "expected signed integers or floats"
            )
        array.flags.writeable = False
        object.__setattr__(self, "values", array)
        object.__setattr__(self, "start", int(self.start))

    @property
    def domain(self) -> IndexRange:
        return IndexRange(self.start, self.start + len(self.values))

    @property
    def dtype(self) -> np.dtype:
        return self.values.dtype

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __getitem__(self, position: int) -> Any:
        if not self.domain.contains(position):
            raise IndexError(f"Position {position} outside domain {self.domain}")
        return self.values[position - self.start]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NumericSequence):
            return NotImplemented
        return self.start == other.start and np.array_equal(self.values, other.values)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"NumericSequence({self.tolist()}, start={self.start}, dtype={self.dtype})"

    def window(self, sub_range: IndexRange) -> NumericSequence:
        """The elements at sub_range, keeping their domain positions."""
        if not self.domain.covers(sub_range):
            raise IndexError(f"Range {sub_range} outside domain {self.domain}")
        return NumericSequence(self.values[sub_range.as_slice(self.start)], start=sub_range.start)

    def tolist(self) -> list:
        return self.values.tolist()

    def policy(self) -> ComparablePolicy:
        """Default comparison policy for this sequence's element type."""
        return policy_for(self.dtype)

    def is_close(self, other: NumericSequence, policy: Optional[ComparablePolicy] = None) -> bool:
        """Element-wise equality under a comparison policy.

        Domains must match exactly; values compare with the policy of this
        sequence's dtype unless one is given.
        """
        if self.domain != other.domain:
            return False
        policy = policy or self.policy()
        return all(policy.is_equal(a, b) for a, b in zip(self.values, other.values))


@dataclass(frozen=True)
class DeltaRun:
    """A maximal span of same-signed, non-zero deltas.

    delta is the value in the span closest to zero, in the element type of
    the deltas. Applying it to the whole span zeroes at least that position.
    """

    range: IndexRange
    delta: Any

    @property
    def sign(self) -> int:
        return 1 if self.delta > 0 else -1


@dataclass(frozen=True)
class ConvergenceStep:
    """One applied step: delta added over range, producing snapshot."""

    delta: Any
    range: IndexRange
    snapshot: NumericSequence


@dataclass(frozen=True)
class ConvergenceTrace:
    """Record of a convergence run, one entry per applied step.

    snapshots[i] is the sequence after applying deltas[i] over ranges[i].
    An empty trace means source already matched target.
    """

    deltas: tuple[Any, ...] = ()
    ranges: tuple[IndexRange, ...] = ()
    snapshots: tuple[NumericSequence, ...] = ()

    def __len__(self) -> int:
        return len(self.deltas)

    @property
    def steps(self) -> tuple[ConvergenceStep, ...]:
        return tuple(
            ConvergenceStep(delta=d, range=r, snapshot=s)
            for d, r, s in zip(self.deltas, self.ranges, self.snapshots)
        )

    @property
    def final(self) -> Optional[NumericSequence]:
        """Last snapshot, or None if nothing was applied."""
        if not self.snapshots:
            return None
        return self.snapshots[-1]

    def extended(self, delta: Any, index_range: IndexRange, snapshot: NumericSequence) -> ConvergenceTrace:
        """A new trace with one more step appended."""
        return ConvergenceTrace(
            deltas=self.deltas + (delta,),
            ranges=self.ranges + (index_range,),
            snapshots=self.snapshots + (snapshot,),
        )


# --- Convergence Loop State (LangGraph TypedDict) ---


class ConvergenceState(TypedDict, total=False):
    """LangGraph state for the convergence loop.

    total=False: all fields optional, enabling incremental building.
    Nodes read/write only their fields.
    """

    # Set by graph initialization, replaced by the apply node
    current: NumericSequence

    # Segment node output
    candidates: list[DeltaRun]

    # Apply node output
    trace: ConvergenceTrace
    step: int
