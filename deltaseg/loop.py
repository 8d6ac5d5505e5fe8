"""Convergence loop graph (LangGraph StateGraph).

Graph topology:
    segment -> decide
                 ├── "apply" -> apply -> segment (loop back)
                 └── "stop"  -> END

Each pass finds the runs still separating the current sequence from the
target, lets the selector pick one, and applies that run's delta. The
loop ends when no runs remain.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np
from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph

from deltaseg.applier import apply_delta
from deltaseg.comparison import ComparablePolicy, policy_for
from deltaseg.config import ConvergenceConfig
from deltaseg.core.errors import (
    ConvergenceLimitError,
    MismatchError,
    SelectionFailedError,
)
from deltaseg.models import ConvergenceState, ConvergenceTrace, NumericSequence
from deltaseg.ranges import map_range
from deltaseg.segments import find_segments
from deltaseg.selectors import Selector, get_selector

logger = logging.getLogger(__name__)


def _make_segment_node(
    target: NumericSequence,
    config: ConvergenceConfig,
    policy: Optional[ComparablePolicy],
):
    """Create a segment node that closes over the target and policy."""

    def segment_node(state: ConvergenceState) -> dict:
        """Find the runs separating the current sequence from the target."""
        current = state["current"]
        resolved = policy or policy_for(
            np.result_type(target.dtype, current.dtype), config.tolerance
        )
        return {"candidates": find_segments(target, current, resolved)}

    return segment_node


def should_continue(state: ConvergenceState) -> str:
    """Conditional edge: "apply" while runs remain, "stop" once none do."""
    if state.get("candidates"):
        return "apply"
    return "stop"


def _make_apply_node(target: NumericSequence, selector: Selector, step_cap: int):
    """Create an apply node that closes over the selector and step cap.

    LangGraph nodes must have signature (state) -> dict, so dependencies
    are captured via closure rather than passed as arguments.
    """

    def apply_node(state: ConvergenceState) -> dict:
        """Apply the selected run's delta to the current sequence."""
        candidates = state.get("candidates", [])
        current = state["current"]
        trace = state.get("trace", ConvergenceTrace())
        step = state.get("step", 0)

        if step >= step_cap:
            logger.warning(
                "Step cap %d reached with %d runs left", step_cap, len(candidates)
            )
            raise ConvergenceLimitError(
                f"Convergence did not finish within {step_cap} steps"
            )

        pick = selector(candidates)
        if pick is None:
            logger.warning(
                "Step %d: selector declined %d candidates", step, len(candidates)
            )
            raise SelectionFailedError(
                f"Selector declined to choose among {len(candidates)} candidates"
            )

        applied_range = map_range(target.domain, current.domain, pick.range)
        if applied_range is None:
            raise MismatchError(
                f"Run {pick.range} has no counterpart in domain {current.domain}"
            )
        updated = apply_delta(current, pick.delta, applied_range)
        logger.debug("Step %d: applied %s over %s", step, pick.delta, applied_range)
        return {
            "current": updated,
            "trace": trace.extended(pick.delta, applied_range, updated),
            "step": step + 1,
        }

    return apply_node


def build_convergence_graph(
    target: NumericSequence,
    selector: Union[Selector, str],
    config: ConvergenceConfig = ConvergenceConfig(),
    policy: Optional[ComparablePolicy] = None,
) -> CompiledStateGraph:
    """Build the convergence loop toward target as a LangGraph StateGraph.

    Args:
        target: Sequence the loop converges to.
        selector: Selector callable, or the name of a registered one.
        config: Step cap and tolerance settings.
        policy: Comparison policy. Default: resolved from the element dtype.

    Returns a compiled StateGraph ready to invoke with {"current": source}.
    """
    if isinstance(selector, str):
        selector = get_selector(selector)

    graph = StateGraph(ConvergenceState)

    graph.add_node("segment", _make_segment_node(target, config, policy))
    graph.add_node("apply", _make_apply_node(target, selector, config.step_cap(len(target))))

    graph.add_edge(START, "segment")
    graph.add_conditional_edges(
        "segment",
        should_continue,
        {"apply": "apply", "stop": END},
    )
    graph.add_edge("apply", "segment")

    return graph.compile()


def converge(
    target: NumericSequence,
    source: NumericSequence,
    selector: Union[Selector, str],
    config: ConvergenceConfig = ConvergenceConfig(),
    policy: Optional[ComparablePolicy] = None,
) -> ConvergenceTrace:
    """Transform source into target one selected run at a time.

    All or nothing: either the full trace is returned, or an error is
    raised and no partial trace escapes. The source is promoted to the
    common element type of both sequences, so an integer source converges
    to a float target with float snapshots.

    Raises:
        MismatchError: sequence lengths differ.
        SelectionFailedError: the selector returned None.
        ConvergenceLimitError: more steps than the configured cap.
    """
    if len(target) != len(source):
        raise MismatchError(
            f"Cannot converge sequence of length {len(source)} to length {len(target)}"
        )
    common = np.result_type(target.dtype, source.dtype)
    if source.dtype != common:
        source = NumericSequence(source.values.astype(common), start=source.start)
    step_cap = config.step_cap(len(source))
    graph = build_convergence_graph(target, selector, config, policy)
    # One superstep for the first segment pass, two per applied step.
    final = graph.invoke(
        {"current": source, "trace": ConvergenceTrace(), "step": 0},
        config={"recursion_limit": 2 * step_cap + 5},
    )
    trace = final.get("trace", ConvergenceTrace())
    logger.info("Converged in %d steps", len(trace))
    return trace
