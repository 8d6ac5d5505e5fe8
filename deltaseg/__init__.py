"""deltaseg: delta segmentation and stepwise convergence of numeric sequences."""

from deltaseg.applier import apply_delta
from deltaseg.comparison import EXACT, ComparablePolicy, ExactPolicy, TolerantPolicy, policy_for
from deltaseg.config import ConvergenceConfig
from deltaseg.core.config import ToleranceConfig
from deltaseg.deltas import compute_deltas
from deltaseg.loop import build_convergence_graph, converge
from deltaseg.models import ConvergenceStep, ConvergenceTrace, DeltaRun, NumericSequence
from deltaseg.ranges import IndexRange, map_range
from deltaseg.segments import find_segments

__all__ = [
    "EXACT",
    "ComparablePolicy",
    "ConvergenceConfig",
    "ConvergenceStep",
    "ConvergenceTrace",
    "DeltaRun",
    "ExactPolicy",
    "IndexRange",
    "NumericSequence",
    "ToleranceConfig",
    "TolerantPolicy",
    "apply_delta",
    "build_convergence_graph",
    "compute_deltas",
    "converge",
    "find_segments",
    "map_range",
    "policy_for",
]
