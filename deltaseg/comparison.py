"""Tolerance-aware comparison policies.

A policy decides equality and ordering for one element type. Integer
types compare exactly; floating-point types compare against a fixed
absolute epsilon taken from ToleranceConfig. The policy for a dtype is
resolved once per call chain by policy_for(), never inside the scans.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import numpy as np

from deltaseg.core.config import ToleranceConfig


class ComparablePolicy(ABC):
    """Equality and ordering with tolerance for one element type.

    Subclasses implement the three predicates; min, max and sign are
    derived from them so every policy agrees with itself.
    """

    @abstractmethod
    def is_equal(self, a: Any, b: Any) -> bool:
        ...

    @abstractmethod
    def is_greater(self, a: Any, b: Any) -> bool:
        ...

    @abstractmethod
    def is_less(self, a: Any, b: Any) -> bool:
        ...

    def min(self, x: Any, y: Any) -> Any:
        return y if self.is_greater(x, y) else x

    def max(self, x: Any, y: Any) -> Any:
        return y if self.is_less(x, y) else x

    def is_zero(self, value: Any) -> bool:
        return self.is_equal(value, value - value)

    def sign(self, value: Any) -> int:
        """-1, 0 or 1 under this policy."""
        zero = value - value
        if self.is_greater(value, zero):
            return 1
        if self.is_less(value, zero):
            return -1
        return 0


@dataclass(frozen=True)
class ExactPolicy(ComparablePolicy):
    """Plain equality and ordering, for integer element types."""

    def is_equal(self, a: Any, b: Any) -> bool:
        return bool(a == b)

    def is_greater(self, a: Any, b: Any) -> bool:
        return bool(a > b)

    def is_less(self, a: Any, b: Any) -> bool:
        return bool(a < b)


@dataclass(frozen=True)
class TolerantPolicy(ComparablePolicy):
    """Fixed absolute-epsilon comparison, for floating-point element types.

    is_equal:   |a - b| <  epsilon
    is_greater:  a - b  >= epsilon
    is_less:     a - b  <= -epsilon

    The band is symmetric and does not scale with the operands.
    """

    epsilon: float

    def __post_init__(self) -> None:
        if not self.epsilon > 0:
            raise ValueError("epsilon must be positive")

    def is_equal(self, a: Any, b: Any) -> bool:
        return bool(abs(a - b) < self.epsilon)

    def is_greater(self, a: Any, b: Any) -> bool:
        return bool((a - b) >= self.epsilon)

    def is_less(self, a: Any, b: Any) -> bool:
        return bool((a - b) <= -self.epsilon)


EXACT = ExactPolicy()


def policy_for(dtype, tolerance: ToleranceConfig = ToleranceConfig()) -> ComparablePolicy:
    """Resolve the comparison policy for an element dtype.

    Signed integers get EXACT; floats get a TolerantPolicy with the
    epsilon configured for their width.
    """
    dtype = np.dtype(dtype)
    if dtype.kind == "i":
        return EXACT
    if dtype.kind == "f":
        return TolerantPolicy(tolerance.epsilon_for(dtype))
    raise TypeError(f"No comparison policy for dtype {dtype}")
