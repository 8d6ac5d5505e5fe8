"""Foundation configuration dataclasses.

ToleranceConfig is shared by the comparison policies and the convergence loop.
All behavior-controlling parameters live here, not as magic numbers in code.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from deltaseg.core.errors import ConfigError


@dataclass(frozen=True)
class ToleranceConfig:
    """Absolute epsilon per floating-point element type.

    Two floats closer than epsilon compare equal. Integer types never
    consult this config; they compare exactly.
    """

    float16: float = 1e-2
    float32: float = 1e-4
    float64: float = 1e-5
    longdouble: float = 1e-5

    def __post_init__(self) -> None:
        for name in ("float16", "float32", "float64", "longdouble"):
            if not getattr(self, name) > 0:
                raise ConfigError(f"Tolerance for {name} must be positive")

    def epsilon_for(self, dtype) -> float:
        """Epsilon configured for a floating-point dtype."""
        dtype = np.dtype(dtype)
        table = {
            np.dtype(np.float16): self.float16,
            np.dtype(np.float32): self.float32,
            np.dtype(np.float64): self.float64,
            np.dtype(np.longdouble): self.longdouble,
        }
        try:
            return table[dtype]
        except KeyError:
            raise ConfigError(f"No tolerance configured for dtype {dtype}") from None
