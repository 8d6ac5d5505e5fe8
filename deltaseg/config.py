"""Convergence loop configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from deltaseg.core.config import ToleranceConfig
from deltaseg.core.errors import ConfigError


@dataclass(frozen=True)
class ConvergenceConfig:
    """Configurable parameters for the convergence loop.

    max_steps: cap on applied steps. None means the length of the source,
    which a selector picking from the offered candidates never exceeds.
    """

    max_steps: Optional[int] = None
    tolerance: ToleranceConfig = field(default_factory=ToleranceConfig)

    def __post_init__(self) -> None:
        if self.max_steps is not None and self.max_steps < 0:
            raise ConfigError("max_steps must be non-negative")

    def step_cap(self, length: int) -> int:
        """Resolve the step cap for a sequence of the given length."""
        if self.max_steps is None:
            return length
        return self.max_steps
