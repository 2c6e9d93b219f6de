"""
Tests for viewport sampling.

Uses the synthetic 1-degree global raster from conftest, whose elevation in row r
is 8800 - 100 * r meters.
"""

import numpy as np
import pytest

from src.topoview.projection import to_screen
from src.topoview.sampling import (
    BoundingBox,
    Sample,
    ViewportSamples,
    ViewRequest,
    bounding_box,
    iteration_sizes,
    round_half_up,
    sample_viewport,
    step_sizes,
    strided_range,
)


class TestViewRequest:
    """Tests for ViewRequest validation."""

    def test_defaults(self):
        request = ViewRequest()
        assert request.zoom == 1
        assert request.levels == 100
        assert not request.full_extent

    def test_full_extent_forces_zoom_one(self):
        assert ViewRequest(zoom=0, full_extent=True).effective_zoom == 1
        assert ViewRequest(zoom=0.5).effective_zoom == 0.5

    def test_non_positive_quality_raises(self):
        with pytest.raises(ValueError, match="quality"):
            ViewRequest(quality=0)

    def test_levels_below_one_raises(self):
        with pytest.raises(ValueError, match="levels"):
            ViewRequest(levels=0)


class TestBoundingBox:
    """Tests for bounding box derivation."""

    def test_full_extent_covers_globe(self):
        box = bounding_box(ViewRequest(full_extent=True, center_lat=40, center_lng=10))
        assert box == BoundingBox(start_lat=-90.0, start_lng=-180.0, end_lat=90.0, end_lng=180.0)

    def test_full_extent_ignores_zoom(self):
        box_a = bounding_box(ViewRequest(full_extent=True, zoom=0))
        box_b = bounding_box(ViewRequest(full_extent=True, zoom=1))
        assert box_a == box_b

    def test_positive_zoom_halves_window(self):
        box = bounding_box(ViewRequest(center_lat=10, center_lng=20, zoom=1))
        assert box.start_lat == pytest.approx(10 + 5.3)
        assert box.end_lat == pytest.approx(10 - 5.3)
        assert box.start_lng == pytest.approx(20 + 18.85)
        assert box.end_lng == pytest.approx(20 - 18.85)

    def test_zero_zoom_quarters_window(self):
        box = bounding_box(ViewRequest(zoom=0))
        assert box.start_lat == pytest.approx(26.5)
        assert box.start_lng == pytest.approx(94.25)
        assert box.end_lat == pytest.approx(-26.5)


class TestGridParameters:
    """Tests for iteration sizes, steps and strided ranges."""

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(-0.5) == 0
        assert round_half_up(-2.5) == -2
        np.testing.assert_array_equal(round_half_up(np.array([1.5, -1.5])), [2.0, -1.0])

    def test_iteration_sizes_full_extent(self):
        box = bounding_box(ViewRequest(full_extent=True))
        assert iteration_sizes(box, 1) == (1800, 3600)

    def test_iteration_sizes_region(self):
        box = bounding_box(ViewRequest(zoom=1))
        assert iteration_sizes(box, 1) == (106, 377)

    def test_full_extent_steps_ignore_quality(self):
        assert step_sizes(ViewRequest(full_extent=True, quality=5)) == (8.5, 9.5)

    def test_region_steps_scale_with_quality(self):
        assert step_sizes(ViewRequest(zoom=1, quality=2)) == (1.0, 2.0)

    def test_zoomed_out_steps_halve_quality(self):
        assert step_sizes(ViewRequest(zoom=0, quality=2)) == (0.5, 1.0)

    def test_strided_range_values(self):
        assert list(strided_range(3, 1)) == [0, 1, 2]
        assert list(strided_range(2, 0.5)) == [0, 0.5, 1.0, 1.5]

    def test_strided_range_stop_is_exclusive(self):
        assert list(strided_range(1801, 8.5))[-1] == 211 * 8.5

    def test_strided_range_does_not_drift(self):
        values = list(strided_range(10, 0.1))
        assert values[-1] == 99 * 0.1
        assert len(values) == 100

    def test_strided_range_rejects_non_positive_step(self):
        with pytest.raises(ValueError, match="step"):
            list(strided_range(10, 0))


class TestSampleViewport:
    """Tests for the grid walk and raster lookups."""

    def test_full_extent_sample_count(self, world_raster):
        samples = sample_viewport(ViewRequest(full_extent=True), world_raster)
        assert len(samples) == 212 * 380

    def test_full_extent_ignores_zoom(self, world_raster):
        """Two full-extent requests differing only in zoom sample identically."""
        a = sample_viewport(ViewRequest(full_extent=True, zoom=0), world_raster)
        b = sample_viewport(ViewRequest(full_extent=True, zoom=1), world_raster)
        assert len(a) == len(b)
        np.testing.assert_array_equal(a.x, b.x)
        np.testing.assert_array_equal(a.y, b.y)

    def test_region_sample_count(self, world_raster):
        samples = sample_viewport(ViewRequest(zoom=1, quality=1), world_raster)
        assert len(samples) == 214 * 378

    def test_higher_quality_samples_less(self, world_raster):
        fine = sample_viewport(ViewRequest(zoom=1, quality=1), world_raster)
        coarse = sample_viewport(ViewRequest(zoom=1, quality=2), world_raster)
        assert len(coarse) == 107 * 189
        assert len(coarse) < len(fine)

    def test_walk_starts_at_rounded_box_edge(self, world_raster):
        """The walk starts at the rounded start corner and moves south/west."""
        samples = sample_viewport(ViewRequest(zoom=1, quality=1), world_raster)
        first = next(iter(samples))
        assert (first.x, first.y) == pytest.approx(to_screen(5.3, 18.9))
        # col 198, row trunc(90 - 5.3) = 84
        assert first.elevation == 8800 - 100 * 84

        assert samples.y[-1] > samples.y[0]
        assert samples.x[-1] < samples.x[0]

    def test_walk_is_row_major(self, world_raster):
        """Latitude is the outer loop, so the first row shares one screen y."""
        samples = sample_viewport(ViewRequest(zoom=1, quality=2), world_raster)
        assert np.all(samples.y[:189] == samples.y[0])
        assert samples.y[189] != samples.y[0]

    def test_screen_position_is_taken_before_wrap(self, world_raster):
        """Longitudes past 180 keep their unwrapped screen x but read wrapped cells."""
        request = ViewRequest(center_lat=11.346521, center_lng=142.197337, zoom=0)
        samples = sample_viewport(request, world_raster)
        first = next(iter(samples))

        # Rounded start corner is (38, 236); 236 wraps to -124
        assert first.x == pytest.approx((236 + 180) * 1920 / 360)
        assert first.x > 1920
        assert first.elevation == 8800 - 100 * 52

    def test_out_of_raster_samples_are_misses(self, tiny_raster):
        """Cells outside the raster give no elevation and raise nothing.

        Truncation toward zero maps coordinates in (-1, 0) onto cell 0, so the
        latitudes -0.75, 0.1, 0.95, 1.8 and longitudes -0.45, 0.5, 1.45 hit.
        """
        samples = sample_viewport(ViewRequest(full_extent=True), tiny_raster)
        hits = samples.elevation[~np.isnan(samples.elevation)]

        assert samples.miss_count == len(samples) - 12
        assert hits.tolist() == [100.0, 100.0, 200.0] * 3 + [300.0, 300.0, 400.0]

    def test_south_pole_row_is_outside_raster(self, world_raster):
        samples = sample_viewport(ViewRequest(full_extent=True), world_raster)
        assert np.isnan(samples.elevation[:380]).all()
        assert not np.isnan(samples.elevation[380:]).any()


class TestViewportSamples:
    """Tests for the sample container."""

    def test_iteration_yields_none_for_misses(self):
        samples = ViewportSamples(
            x=np.array([1.0, 2.0]),
            y=np.array([3.0, 4.0]),
            elevation=np.array([np.nan, 5.0]),
        )
        assert list(samples) == [Sample(1.0, 3.0, None), Sample(2.0, 4.0, 5.0)]
        assert samples.miss_count == 1

    def test_coerce_from_tuples(self):
        samples = ViewportSamples.coerce([(0, 0, 10), (1, 2, None)])
        np.testing.assert_array_equal(samples.x, [0.0, 1.0])
        assert samples.miss_count == 1

    def test_coerce_empty(self):
        assert len(ViewportSamples.coerce([])) == 0

    def test_coerce_passes_through(self):
        samples = ViewportSamples(np.zeros(1), np.zeros(1), np.zeros(1))
        assert ViewportSamples.coerce(samples) is samples
