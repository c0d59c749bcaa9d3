from pathlib import Path

import pytest

from spriteloop.core import CropInsets, KeyColor
from spriteloop.core.errors import InvalidFrameError, ValidationError
from spriteloop.core.separable_filter import MAX_RADIUS
from spriteloop.utils import validators


def test_parse_key_color_formats():
    assert validators.parse_key_color("0,255,0") == KeyColor(0, 255, 0)
    assert validators.parse_key_color(" 1, 2, 3, 4 ") == KeyColor(1, 2, 3)
    assert validators.parse_key_color("#00fF10") == KeyColor(0, 255, 16)


@pytest.mark.parametrize("value", ["", "300,0,0", "a,b,c", "1,2", "#12345", "#zzzzzz"])
def test_parse_key_color_rejects_bad_values(value):
    with pytest.raises(ValidationError):
        validators.parse_key_color(value)


def test_parse_color_tuple_appends_alpha():
    assert validators.parse_color_tuple("10,20,30") == (10, 20, 30, 255)
    assert validators.parse_color_tuple("") is None
    with pytest.raises(ValidationError):
        validators.parse_color_tuple("10,20,300")


def test_tolerance_range():
    assert validators.validate_tolerance(442) == 442
    with pytest.raises(ValidationError):
        validators.validate_tolerance(443)
    with pytest.raises(ValidationError):
        validators.validate_tolerance(-1)


def test_grid_and_radius():
    validators.validate_grid(0, 0, 0)
    with pytest.raises(ValidationError):
        validators.validate_grid(-1, None)
    with pytest.raises(ValidationError):
        validators.validate_grid(None, None, padding=-3)
    with pytest.raises(ValidationError):
        validators.validate_radius(-0.5, "Feather")
    assert validators.validate_radius(MAX_RADIUS, "Feather") == MAX_RADIUS
    with pytest.raises(ValidationError):
        validators.validate_radius(MAX_RADIUS + 1, "Smoothing")


def test_parse_crop():
    assert validators.parse_crop(None) == CropInsets()
    assert validators.parse_crop([1, 2, 3, 4]) == CropInsets(top=1, right=2, bottom=3, left=4)
    with pytest.raises(ValidationError):
        validators.parse_crop([1, 2, 3])
    with pytest.raises(ValidationError):
        validators.parse_crop([1, -2, 3, 4])


def test_validate_frame_path(tmp_path):
    frame = tmp_path / "a.png"
    frame.write_bytes(b"")
    assert validators.validate_frame_path(frame) == frame
    with pytest.raises(InvalidFrameError):
        validators.validate_frame_path(tmp_path / "missing.png")
    clip = tmp_path / "clip.mp4"
    clip.write_bytes(b"")
    with pytest.raises(InvalidFrameError):
        validators.validate_frame_path(clip)
    assert validators.validate_frame_path(str(frame)) == frame


@pytest.mark.parametrize("value", [None, "", Path("")])
def test_validate_frame_path_requires_a_path(value):
    with pytest.raises(InvalidFrameError, match="No path provided"):
        validators.validate_frame_path(value)
