import warnings
import numpy as np
import PIL.Image
import pytest
from sky_renders import ui


def frame_args(**overrides):
    values = dict(ui.DEFAULTS, resolution=64)
    values.update(overrides)
    return list(values.values())


def test_altitude_slider_stays_above_surface():
    assert ui.MIN_ALTITUDE_KM > 0.0
    assert ui.DEFAULTS["altitude_km"] >= ui.MIN_ALTITUDE_KM


def test_render_frame_perspective():
    """Default controls give a 4:3 RGB frame."""
    image = ui.render_frame(*frame_args())
    assert isinstance(image, PIL.Image.Image)
    assert image.size == (64, 48)


def test_render_frame_environment_map():
    image = ui.render_frame(*frame_args(projection="Environment Map"))
    assert image.size == (64, 32)


def test_render_frame_on_ground_looking_down():
    """A zero altitude from the controls is lifted to the slider floor and renders cleanly."""
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        image = ui.render_frame(*frame_args(altitude_km=0.0, pitch=-30.0))
    pixels = np.asarray(image)
    assert pixels.shape == (48, 64, 3)
    assert pixels.max() > 0


if __name__ == "__main__":
    pytest.main([__file__])
