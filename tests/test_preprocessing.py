import numpy as np
import pytest

from turret_vision.schemas.motion import PipelineConfig
from turret_vision.vision.background import BackgroundModel
from turret_vision.vision.preprocessing import FramePreprocessor

from .conftest import blank_frame


@pytest.fixture
def noisy_frame():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(480, 640, 3), dtype=np.uint8)


def test_output_is_canonical_grayscale(noisy_frame):
    gray = FramePreprocessor().process(noisy_frame)
    assert gray.shape == (500, 500)
    assert gray.dtype == np.uint8


def test_custom_frame_size():
    config = PipelineConfig(frame_size=(320, 240))
    gray = FramePreprocessor(config).process(blank_frame())
    assert gray.shape == (240, 320)


def test_preprocessing_is_deterministic(noisy_frame):
    preprocessor = FramePreprocessor()
    first = preprocessor.process(noisy_frame)
    second = preprocessor.process(noisy_frame.copy())
    assert first.tobytes() == second.tobytes()


def test_mirror_flips_horizontally():
    frame = blank_frame()
    frame[:, :10] = 255

    mirrored = FramePreprocessor(PipelineConfig(blur_kernel=1)).process(frame)
    assert (mirrored[:, 490:] == 255).all()
    assert (mirrored[:, :490] == 0).all()

    plain = FramePreprocessor(PipelineConfig(blur_kernel=1, mirror=False)).process(frame)
    assert (plain[:, :10] == 255).all()


def test_blur_smooths_hard_edges():
    frame = blank_frame()
    frame[200:300, 200:300] = 255
    gray = FramePreprocessor(PipelineConfig(mirror=False)).process(frame)
    # values bleed past the edge of the square
    assert 0 < gray[250, 197] < 255
    assert gray[250, 250] >= 254


def test_writes_into_given_buffers(noisy_frame):
    preprocessor = FramePreprocessor()
    color = np.zeros((500, 500, 3), dtype=np.uint8)
    gray = np.zeros((500, 500), dtype=np.uint8)

    color_out = preprocessor.normalize(noisy_frame, out=color)
    gray_out = preprocessor.grayscale(color_out, out=gray)

    assert np.shares_memory(color_out, color)
    assert np.shares_memory(gray_out, gray)
    assert np.array_equal(gray_out, preprocessor.process(noisy_frame))


class TestBackgroundModel:

    def test_frame_is_read_only(self):
        background = BackgroundModel(np.zeros((500, 500), dtype=np.uint8))
        with pytest.raises(ValueError):
            background.frame[0, 0] = 1

    def test_copies_source(self):
        source = np.zeros((500, 500), dtype=np.uint8)
        background = BackgroundModel(source)
        source[:] = 200
        assert background.frame.max() == 0

    def test_rejects_color_frames(self):
        with pytest.raises(ValueError):
            BackgroundModel(blank_frame())

    def test_capture_preprocesses(self, noisy_frame):
        preprocessor = FramePreprocessor()
        background = BackgroundModel.capture(noisy_frame, preprocessor)
        assert background.shape == (500, 500)
        assert np.array_equal(background.frame, preprocessor.process(noisy_frame))
        assert background.matches(np.zeros((500, 500), dtype=np.uint8))
        assert not background.matches(np.zeros((100, 100), dtype=np.uint8))
