# deltaseg/selectors/builtin.py

from __future__ import annotations

from typing import Optional

from deltaseg.models import DeltaRun, as_scalar
from deltaseg.selectors import selector


@selector("first")
def select_first(candidates: list[DeltaRun]) -> Optional[DeltaRun]:
    """Earliest run in domain order."""
    return candidates[0] if candidates else None


@selector("last")
def select_last(candidates: list[DeltaRun]) -> Optional[DeltaRun]:
    return candidates[-1] if candidates else None


@selector("largest")
def select_largest(candidates: list[DeltaRun]) -> Optional[DeltaRun]:
    """Run with the largest absolute delta. Ties go to the earliest run."""
    if not candidates:
        return None
    return max(candidates, key=lambda run: abs(as_scalar(run.delta)))


@selector("widest")
def select_widest(candidates: list[DeltaRun]) -> Optional[DeltaRun]:
    """Run covering the most positions. Ties go to the earliest run."""
    if not candidates:
        return None
    return max(candidates, key=lambda run: len(run.range))


@selector("none")
def select_none(candidates: list[DeltaRun]) -> Optional[DeltaRun]:
    """Always declines."""
    return None
