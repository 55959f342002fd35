import numpy as np
import pytest

from turret_vision.schemas.motion import MotionRegion, PipelineConfig
from turret_vision.vision.background import BackgroundModel
from turret_vision.vision.pipeline import MotionPipeline, best_contour
from turret_vision.vision.preprocessing import FramePreprocessor

from .conftest import blank_frame, with_square


def make_pipeline(background_frame, min_area, config):
    background = BackgroundModel.capture(background_frame, FramePreprocessor(config))
    return MotionPipeline(background, min_area, config)


def square_contour(size, x=0, y=0):
    return np.array(
        [[[x, y]], [[x, y + size]], [[x + size, y + size]], [[x + size, y]]],
        dtype=np.int32,
    )


class TestBestContour:

    def test_area_must_strictly_exceed_minimum(self):
        contour = square_contour(10)  # area 100
        assert best_contour([contour], 100) is None
        assert best_contour([contour], 99) is contour

    def test_picks_largest(self):
        small, large, medium = square_contour(5), square_contour(20), square_contour(10)
        assert best_contour([small, large, medium], 0) is large

    def test_tie_keeps_first(self):
        first, second = square_contour(10), square_contour(10, x=50)
        assert best_contour([first, second], 0) is first

    def test_empty(self):
        assert best_contour([], 0) is None


class TestMotionPipeline:

    def test_identical_frame_produces_nothing(self):
        rng = np.random.default_rng(7)
        background = rng.integers(0, 256, size=(480, 640, 3), dtype=np.uint8)
        pipeline = make_pipeline(background, 0, PipelineConfig())

        result = pipeline.process(background.copy())

        assert not result.delta.any()
        assert not result.thresh.any()
        assert result.region is None
        assert not result.motion_detected

    def test_single_rectangle_is_enclosed_tightly(self, exact_config):
        pipeline = make_pipeline(blank_frame(), 100, exact_config)

        result = pipeline.process(with_square(blank_frame(), 100, 120, 40, 40))

        assert result.region == MotionRegion(x=100, y=120, width=40, height=40)

    def test_area_filter_is_strict(self, exact_config):
        # a filled 40x40 blob traces a 39x39 polygon
        frame = with_square(blank_frame(), 100, 120, 40, 40)

        assert make_pipeline(blank_frame(), 1520, exact_config).process(frame).region is not None
        assert make_pipeline(blank_frame(), 1521, exact_config).process(frame).region is None

    def test_largest_region_wins(self, exact_config):
        frame = blank_frame()
        frame = with_square(frame, 50, 50, 40, 40)
        frame = with_square(frame, 250, 300, 80, 60)
        frame = with_square(frame, 400, 50, 20, 20)

        result = make_pipeline(blank_frame(), 100, exact_config).process(frame)

        assert result.region.to_xywh() == [250, 300, 80, 60]

    @pytest.mark.parametrize("intensity,foreground", [(50, True), (49, False)])
    def test_threshold_is_inclusive(self, exact_config, intensity, foreground):
        frame = with_square(blank_frame(), 100, 100, 40, 40, value=intensity)

        result = make_pipeline(blank_frame(), 0, exact_config).process(frame)

        assert result.thresh[120, 120] == (255 if foreground else 0)
        assert (result.region is not None) == foreground

    def test_threshold_is_binary(self):
        frame = with_square(blank_frame(), 100, 100, 60, 60, value=180)
        result = make_pipeline(blank_frame(), 0, PipelineConfig()).process(frame)
        assert set(np.unique(result.thresh)) <= {0, 255}

    def test_dilation_grows_mask(self):
        config = PipelineConfig(blur_kernel=1, dilation_kernel=3, mirror=False)
        frame = with_square(blank_frame(), 100, 120, 40, 40)

        result = make_pipeline(blank_frame(), 100, config).process(frame)

        assert result.region.to_xywh() == [99, 119, 42, 42]

    def test_mirrored_input(self):
        config = PipelineConfig(blur_kernel=1, dilation_kernel=1, mirror=True)
        frame = with_square(blank_frame(), 430, 50, 20, 20)

        result = make_pipeline(blank_frame(), 100, config).process(frame)

        assert result.region.to_xywh() == [50, 50, 20, 20]

    def test_detection_is_drawn_on_frame(self, exact_config):
        frame = with_square(blank_frame(), 100, 120, 40, 40)

        result = make_pipeline(blank_frame(), 100, exact_config).process(frame)

        assert result.frame[120, 120].tolist() == [0, 255, 0]
        assert set(np.unique(result.thresh)) <= {0, 255}

    def test_frame_untouched_without_detection(self, exact_config):
        frame = with_square(blank_frame(), 100, 120, 5, 5)

        result = make_pipeline(blank_frame(), 1000, exact_config).process(frame)

        assert result.region is None
        assert np.array_equal(result.frame, frame)

    def test_buffers_are_reused(self, exact_config):
        pipeline = make_pipeline(blank_frame(), 100, exact_config)

        first = pipeline.process(blank_frame())
        second = pipeline.process(with_square(blank_frame(), 10, 10, 30, 30))

        assert np.shares_memory(first.delta, second.delta)
        assert np.shares_memory(first.thresh, second.thresh)
        assert np.shares_memory(first.frame, second.frame)

    def test_rebaseline_absorbs_change(self, exact_config):
        pipeline = make_pipeline(blank_frame(), 100, exact_config)
        moved = with_square(blank_frame(), 100, 120, 40, 40)

        assert pipeline.process(moved).region is not None
        pipeline.rebaseline()
        assert pipeline.process(moved).region is None

    def test_background_size_must_match(self):
        background = BackgroundModel(np.zeros((100, 100), dtype=np.uint8))
        with pytest.raises(ValueError):
            MotionPipeline(background, 100, PipelineConfig())

    def test_release_drops_buffers(self, exact_config):
        pipeline = make_pipeline(blank_frame(), 100, exact_config)
        pipeline.release()
        assert pipeline.buffers.released
        assert pipeline.buffers.delta is None
