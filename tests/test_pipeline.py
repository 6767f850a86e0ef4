"""
Tests for the mutual structure filtering pipeline.
"""

from __future__ import annotations

from typing import List

import numpy as np
import pytest

import msfilter.core.pipeline as pipeline_module
from msfilter import (
    DimensionMismatchError,
    FilterCancelledError,
    FilterParams,
    InvalidParameterError,
    MutualStructureFilter,
    PipelineState,
    PlaneSet,
    RasterImage,
    apply_mutual_structure_filter,
    filter_rasters,
)


def _gray_planes(shape=(8, 8), value: float = 0.5) -> PlaneSet:
    plane = np.full(shape, value, dtype=np.float32)
    return PlaneSet(plane, plane, plane)


def _random_planes(shape=(12, 10), seed: int = 0) -> PlaneSet:
    rng = np.random.default_rng(seed)
    return PlaneSet.from_array(rng.random(shape + (3,)).astype(np.float32))


def test_progress_is_monotonic_and_ends_at_100() -> None:
    reports: List[float] = []
    params = FilterParams(radius=2, epsilon=0.01, iterations=4)
    result = apply_mutual_structure_filter(
        _random_planes(), _random_planes(seed=1), params, progress=reports.append
    )

    assert reports == [0.0, 25.0, 50.0, 75.0, 100.0]
    assert result.shape == (12, 10)


def test_progress_reported_before_each_iteration(monkeypatch: pytest.MonkeyPatch) -> None:
    events: List[str] = []
    guides = []
    real_filter = pipeline_module.guided_filter_channel

    def recording_filter(p, guide, radius, epsilon):
        events.append("filter")
        guides.append(guide)
        return real_filter(p, guide, radius, epsilon)

    monkeypatch.setattr(pipeline_module, "guided_filter_channel", recording_filter)

    msf = MutualStructureFilter(FilterParams(radius=1, epsilon=0.01, iterations=2))
    msf.process(
        _random_planes(),
        _random_planes(seed=1),
        progress=lambda p: events.append(f"progress {p:.0f}"),
    )

    assert events == [
        "progress 0",
        "filter",
        "filter",
        "filter",
        "progress 50",
        "filter",
        "filter",
        "filter",
        "progress 100",
    ]
    # Every channel and iteration shares one precomputed guidance plane.
    assert all(guide is guides[0] for guide in guides)


def test_single_iteration_reports_start_and_end() -> None:
    reports: List[float] = []
    apply_mutual_structure_filter(
        _random_planes(), _random_planes(), FilterParams(iterations=1), progress=reports.append
    )
    assert reports == [0.0, 100.0]


@pytest.mark.parametrize(
    "params",
    [
        FilterParams(iterations=0),
        FilterParams(epsilon=0.0),
        FilterParams(epsilon=-1.0),
        FilterParams(radius=-1),
    ],
)
def test_invalid_params_raise_without_progress(params: FilterParams) -> None:
    reports: List[float] = []
    with pytest.raises(InvalidParameterError):
        apply_mutual_structure_filter(
            _random_planes(), _random_planes(), params, progress=reports.append
        )
    assert reports == []


def test_params_changed_after_construction_fail_before_work() -> None:
    params = FilterParams()
    msf = MutualStructureFilter(params)
    params.iterations = 0
    reports: List[float] = []

    with pytest.raises(InvalidParameterError):
        msf.process(_random_planes(), _random_planes(), progress=reports.append)

    assert reports == []
    assert msf.state == PipelineState.FAILED


def test_dimension_mismatch_fails() -> None:
    msf = MutualStructureFilter()
    reports: List[float] = []
    with pytest.raises(DimensionMismatchError):
        msf.process(_random_planes((8, 8)), _random_planes((8, 9)), progress=reports.append)
    assert reports == []
    assert msf.state == PipelineState.FAILED


def test_non_finite_input_fails() -> None:
    target = _random_planes()
    target.g[3, 3] = np.nan
    with pytest.raises(InvalidParameterError):
        MutualStructureFilter().process(target, _random_planes())


def test_input_planes_not_modified() -> None:
    target = _random_planes()
    guidance = _random_planes(seed=4)
    before = target.to_array().copy()
    MutualStructureFilter().process(target, guidance)
    np.testing.assert_array_equal(target.to_array(), before)


def test_radius_zero_leaves_target_unchanged() -> None:
    target = _random_planes()
    result = MutualStructureFilter(FilterParams(radius=0)).process(target, _random_planes(seed=2))
    np.testing.assert_array_equal(result.to_array(), target.to_array())


def test_iter_process_state_transitions() -> None:
    msf = MutualStructureFilter(FilterParams(radius=1, iterations=3))
    assert msf.state == PipelineState.IDLE

    steps = msf.iter_process(_random_planes(), _random_planes(seed=1))
    seen = []
    while True:
        try:
            percent = next(steps)
        except StopIteration as stop:
            result = stop.value
            break
        seen.append((percent, msf.state, msf.iteration))

    assert seen[0] == (0.0, PipelineState.ITERATING, 0)
    assert seen[1][2] == 1
    assert seen[2][2] == 2
    assert seen[-1] == (100.0, PipelineState.DONE, None)
    assert isinstance(result, PlaneSet)


def test_cancellation_between_iterations() -> None:
    reports: List[float] = []
    calls = []

    def should_cancel() -> bool:
        calls.append(1)
        return len(calls) > 1

    msf = MutualStructureFilter(FilterParams(iterations=3))
    with pytest.raises(FilterCancelledError):
        msf.process(
            _random_planes(), _random_planes(), progress=reports.append, should_cancel=should_cancel
        )

    assert reports == [0.0]
    assert msf.state == PipelineState.FAILED


def test_single_white_pixel_scenario() -> None:
    target = _gray_planes((4, 4))
    target.r[2, 2] = target.g[2, 2] = target.b[2, 2] = 1.0
    guidance = PlaneSet(target.r, target.g, target.b)

    params = FilterParams(radius=1, epsilon=0.01, iterations=1)
    result = apply_mutual_structure_filter(target, guidance, params)

    # Every window holding the white pixel has mean 5/9 and variance 2/81, so
    # a = (2/81) / (2/81 + 0.01) = 2/2.81 and b = (5/9)(1 - a) = 0.45/2.81.
    # Elsewhere a = 0 and b = 0.5. Those windows are centered on rows and
    # columns 1..3; `covered` is the clamped share of them per axis.
    a = 2.0 / 2.81
    b = 0.45 / 2.81
    covered = np.array([1.0 / 3.0, 2.0 / 3.0, 1.0, 1.0])
    share = np.outer(covered, covered)
    guide = np.asarray(target.r, dtype=float)
    expected = share * a * guide + share * b + (1.0 - share) * 0.5

    for plane in result:
        np.testing.assert_allclose(plane, expected, atol=1e-5)

    np.testing.assert_allclose(result.r[0, 0], 0.501779, atol=1e-5)
    np.testing.assert_allclose(result.r[2, 2], 0.871886, atol=1e-5)
    np.testing.assert_allclose(result.r[3, 3], 0.516014, atol=1e-5)


def test_iter_process_for_loop_keeps_result() -> None:
    msf = MutualStructureFilter(FilterParams(radius=1, iterations=2))
    target = _random_planes()
    guidance = _random_planes(seed=1)

    seen = [percent for percent in msf.iter_process(target, guidance)]

    assert seen == [0.0, 50.0, 100.0]
    assert msf.state == PipelineState.DONE
    expected = MutualStructureFilter(FilterParams(radius=1, iterations=2)).process(target, guidance)
    np.testing.assert_array_equal(msf.result.to_array(), expected.to_array())


def test_iter_process_closed_mid_run_marks_failed() -> None:
    msf = MutualStructureFilter(FilterParams(iterations=3))
    steps = msf.iter_process(_random_planes(), _random_planes(seed=1))
    assert next(steps) == 0.0
    assert next(steps) == pytest.approx(100.0 / 3.0)

    steps.close()

    assert msf.state == PipelineState.FAILED
    assert msf.result is None


def test_interleaved_runs_do_not_interfere() -> None:
    params = FilterParams(radius=2, epsilon=0.02, iterations=3)
    first = (_random_planes(seed=10), _random_planes(seed=11))
    second = (_random_planes(seed=20), _random_planes(seed=21))

    msf_a = MutualStructureFilter(params)
    msf_b = MutualStructureFilter(params)
    steps_a = msf_a.iter_process(*first)
    steps_b = msf_b.iter_process(*second)
    for step_a, step_b in zip(steps_a, steps_b):
        assert step_a == step_b

    alone_a = MutualStructureFilter(params).process(*first)
    alone_b = MutualStructureFilter(params).process(*second)
    np.testing.assert_array_equal(msf_a.result.to_array(), alone_a.to_array())
    np.testing.assert_array_equal(msf_b.result.to_array(), alone_b.to_array())


def test_filter_rasters_end_to_end() -> None:
    rng = np.random.default_rng(5)
    target = RasterImage(rng.integers(0, 256, size=(9, 11, 4), dtype=np.uint8))
    guidance = RasterImage(rng.integers(0, 256, size=(9, 11, 4), dtype=np.uint8))

    reports: List[float] = []
    result = filter_rasters(target, guidance, FilterParams(radius=2), progress=reports.append)

    assert result.shape == target.shape
    assert (result.data[:, :, 3] == 255).all()
    assert reports[-1] == 100.0


def test_filter_rasters_requires_matching_guidance() -> None:
    target = RasterImage(np.zeros((6, 6, 4), dtype=np.uint8))
    guidance = RasterImage(np.zeros((3, 3, 4), dtype=np.uint8))
    with pytest.raises(DimensionMismatchError):
        filter_rasters(target, guidance)


def test_filter_rasters_resamples_guidance() -> None:
    target = RasterImage(np.full((6, 8, 4), 128, dtype=np.uint8))
    guidance = RasterImage(np.full((3, 4, 4), 200, dtype=np.uint8))
    result = filter_rasters(target, guidance, resample_guidance=True)
    assert result.shape == (6, 8)
    np.testing.assert_array_equal(result.data[:, :, :3], 128)


def test_valid_params() -> None:
    FilterParams(radius=0, epsilon=1e-4, iterations=15).validate()


@pytest.mark.parametrize(
    "params",
    [
        FilterParams(radius=1.5),
        FilterParams(radius=True),
        FilterParams(iterations=2.0),
        FilterParams(epsilon=float("inf")),
        FilterParams(epsilon="0.1"),
        FilterParams(epsilon=None),
    ],
)
def test_invalid_param_types(params: FilterParams) -> None:
    with pytest.raises(InvalidParameterError):
        params.validate()
