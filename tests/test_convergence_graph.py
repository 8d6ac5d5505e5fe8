"""Tests for deltaseg.loop: convergence graph topology and convergence runs."""

import logging

import numpy as np
import pytest

from deltaseg.config import ConvergenceConfig
from deltaseg.core.errors import ConvergenceLimitError, MismatchError, SelectionFailedError
from deltaseg.loop import build_convergence_graph, converge, should_continue
from deltaseg.models import ConvergenceState, DeltaRun, NumericSequence
from deltaseg.ranges import IndexRange

NORMAL_TARGET = NumericSequence([42, 321, 53, 532, 12, 8, 2123, 2, 12341, 653, 1, 4])
NORMAL_INITIAL = NumericSequence([1, 23, 53, 123, 412, 8, 231, 23, 1234, 43, 1, 3])
SHORTER = NumericSequence([1])
LONGER = NumericSequence([55] * 15)


def select_first(candidates):
    return candidates[0] if candidates else None


class TestGraphTopology:
    def test_graph_has_expected_nodes(self):
        graph = build_convergence_graph(NORMAL_TARGET, select_first)
        node_names = set(graph.get_graph().nodes.keys())
        # LangGraph adds __start__ and __end__ nodes
        assert "segment" in node_names
        assert "apply" in node_names

    def test_graph_accepts_selector_name(self):
        graph = build_convergence_graph(NORMAL_TARGET, "first")
        assert graph is not None


class TestShouldContinue:
    def test_candidates_continue(self):
        state: ConvergenceState = {"candidates": [DeltaRun(IndexRange(0, 1), 1)]}
        assert should_continue(state) == "apply"

    def test_no_candidates_stop(self):
        state: ConvergenceState = {"candidates": []}
        assert should_continue(state) == "stop"

    def test_default_state_stops(self):
        state: ConvergenceState = {}
        assert should_continue(state) == "stop"


class TestConverge:
    def test_first_selector_trace(self):
        trace = converge(NORMAL_TARGET, NORMAL_INITIAL, select_first)
        assert len(trace) == 9
        assert [int(d) for d in trace.deltas] == [41, 257, 409, -400, 1892, -21, 610, 10497, 1]
        assert list(trace.ranges) == [
            IndexRange(0, 2),
            IndexRange(1, 2),
            IndexRange(3, 4),
            IndexRange(4, 5),
            IndexRange(6, 7),
            IndexRange(7, 8),
            IndexRange(8, 10),
            IndexRange(8, 9),
            IndexRange(11, 12),
        ]
        assert trace.snapshots[0].tolist() == [42, 64, 53, 123, 412, 8, 231, 23, 1234, 43, 1, 3]
        assert trace.snapshots[6].tolist() == [42, 321, 53, 532, 12, 8, 2123, 2, 1844, 653, 1, 3]
        assert trace.final == NORMAL_TARGET

    def test_snapshots_chain_from_source(self):
        trace = converge(NORMAL_TARGET, NORMAL_INITIAL, select_first)
        previous = NORMAL_INITIAL
        for step in trace.steps:
            changed = [
                position for position in previous.domain
                if previous[position] != step.snapshot[position]
            ]
            assert set(changed) <= set(step.range)
            previous = step.snapshot
        assert NORMAL_INITIAL.tolist() == [1, 23, 53, 123, 412, 8, 231, 23, 1234, 43, 1, 3]

    def test_shorter_source(self):
        with pytest.raises(MismatchError):
            converge(NORMAL_TARGET, SHORTER, select_first)

    def test_longer_source(self):
        with pytest.raises(MismatchError):
            converge(NORMAL_TARGET, LONGER, select_first)

    def test_declining_selector_fails(self):
        with pytest.raises(SelectionFailedError):
            converge(NORMAL_TARGET, NORMAL_INITIAL, lambda candidates: None)

    def test_selector_declining_midway_fails(self):
        calls = []

        def pick_once(candidates):
            calls.append(len(candidates))
            return candidates[0] if len(calls) == 1 else None

        with pytest.raises(SelectionFailedError):
            converge(NORMAL_TARGET, NORMAL_INITIAL, pick_once)
        assert len(calls) == 2

    def test_already_converged(self):
        trace = converge(NORMAL_TARGET, NORMAL_TARGET, lambda candidates: None)
        assert len(trace) == 0
        assert trace.final is None

    @pytest.mark.parametrize("name", ["first", "last", "largest", "widest"])
    def test_registered_selectors_reach_target(self, name):
        trace = converge(NORMAL_TARGET, NORMAL_INITIAL, name)
        assert trace.final == NORMAL_TARGET
        assert len(trace) <= len(NORMAL_TARGET)

    def test_step_cap(self):
        config = ConvergenceConfig(max_steps=2)
        with pytest.raises(ConvergenceLimitError):
            converge(NORMAL_TARGET, NORMAL_INITIAL, select_first, config=config)

    def test_step_cap_not_hit_when_enough(self):
        config = ConvergenceConfig(max_steps=9)
        trace = converge(NORMAL_TARGET, NORMAL_INITIAL, select_first, config=config)
        assert len(trace) == 9

    def test_float_sequences_converge_within_tolerance(self):
        target = NumericSequence([0.5, 1.25, -3.0, 2.2, 2.2])
        source = NumericSequence([0.1, 0.25, -1.0, 2.2, 0.0])
        trace = converge(target, source, select_first)
        assert trace.final.is_close(target)

    def test_differently_indexed_source(self):
        target = NumericSequence([5, 5], start=0)
        source = NumericSequence([1, 2], start=10)
        trace = converge(target, source, select_first)
        assert [int(d) for d in trace.deltas] == [3, 1]
        assert list(trace.ranges) == [IndexRange(10, 12), IndexRange(10, 11)]
        assert trace.final == NumericSequence([5, 5], start=10)

    def test_logs_completion(self, caplog):
        caplog.set_level(logging.INFO, logger="deltaseg.loop")
        converge(NORMAL_TARGET, NORMAL_INITIAL, select_first)
        assert "Converged in 9 steps" in caplog.text


class TestMixedElementTypes:
    def test_integer_source_converges_to_float_target(self):
        target = NumericSequence([1.5, 2.0])
        source = NumericSequence([1, 2])
        trace = converge(target, source, "first")
        assert trace.final.dtype == np.float64
        assert trace.final.is_close(target)
        assert len(trace) == 1

    def test_narrow_integer_source_widens(self):
        target = NumericSequence(np.array([300, -300], dtype=np.int16))
        source = NumericSequence(np.array([1, 2], dtype=np.int8))
        trace = converge(target, source, select_first)
        assert trace.final.dtype == np.int16
        assert trace.final.tolist() == [300, -300]

    def test_source_is_not_modified(self):
        source = NumericSequence([1, 2])
        converge(NumericSequence([1.5, 2.0]), source, select_first)
        assert source.dtype == np.int64
        assert source.tolist() == [1, 2]
