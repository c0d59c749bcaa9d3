import numpy as np
import pytest

from spriteloop.core import ChromaKeySettings, FeatherDirection, KeyColor, PixelBuffer
from spriteloop.core.chroma_key import apply_chroma_key, build_key_mask
from spriteloop.core.errors import BufferShapeError
from spriteloop.core.separable_filter import erode_2d

GREEN = (0, 255, 0)
RED = (255, 0, 0)


def _row(*colors, alpha=255):
    pixels = [channel for color in colors for channel in (*color, alpha)]
    return PixelBuffer(len(colors), 1, bytes(pixels))


def test_keys_out_exact_color_with_zero_tolerance():
    buffer = _row(GREEN, RED)
    result = apply_chroma_key(buffer, ChromaKeySettings(colors=[GREEN], tolerance=0, feather=0))
    assert result.alpha.tolist() == [[0, 255]]


def test_no_key_colors_leaves_alpha_untouched():
    buffer = PixelBuffer(1, 1, bytes([10, 20, 30, 200]))
    result = apply_chroma_key(buffer, ChromaKeySettings(colors=[], tolerance=10, feather=5))
    assert result is buffer
    assert result.pixels.tolist() == [10, 20, 30, 200]


def test_alpha_rewritten_in_place_and_rgb_untouched():
    buffer = _row(GREEN, RED, (1, 2, 3), alpha=17)
    rgb_before = buffer.rgba[..., :3].copy()
    result = apply_chroma_key(buffer, ChromaKeySettings(colors=[GREEN], tolerance=0, feather=0))
    assert result is buffer
    assert np.array_equal(buffer.rgba[..., :3], rgb_before)
    assert buffer.alpha.tolist() == [[0, 255, 255]]


def test_hard_threshold_matches_distance():
    rng = np.random.default_rng(3)
    rgba = rng.integers(0, 256, size=(5, 7, 4), dtype=np.uint8)
    buffer = PixelBuffer(7, 5, rgba.copy())
    key = KeyColor(40, 200, 60)
    tolerance = 150.0
    apply_chroma_key(buffer, ChromaKeySettings(colors=[key], tolerance=tolerance, feather=0))

    distance = np.sqrt(((rgba[..., :3].astype(float) - np.array(key.as_tuple())) ** 2).sum(axis=-1))
    assert np.all(buffer.alpha[distance <= tolerance] == 0)
    assert np.all(buffer.alpha[distance > tolerance] == 255)


def test_nearest_of_several_colors_is_used():
    buffer = _row(GREEN, (0, 0, 250), RED)
    apply_chroma_key(buffer, ChromaKeySettings(colors=[GREEN, (0, 0, 255)], tolerance=10, feather=0))
    assert buffer.alpha.tolist() == [[0, 0, 255]]


def test_tolerance_is_clamped():
    buffer = _row((0, 0, 0), (255, 255, 255))
    apply_chroma_key(buffer, ChromaKeySettings(colors=[(0, 0, 0)], tolerance=10_000, feather=0))
    assert buffer.alpha.tolist() == [[0, 0]]

    buffer = _row(GREEN, RED)
    apply_chroma_key(buffer, ChromaKeySettings(colors=[GREEN], tolerance=-5, feather=0))
    assert buffer.alpha.tolist() == [[0, 255]]


def test_feather_toward_background_fades_both_sides():
    buffer = _row(GREEN, GREEN, RED, RED, RED)
    apply_chroma_key(buffer, ChromaKeySettings(colors=[GREEN], tolerance=0, feather=1))
    assert buffer.alpha.tolist() == [[0, 85, 170, 255, 255]]


def test_feather_toward_subject_keeps_core_opaque():
    buffer = _row(GREEN, GREEN, RED, RED, RED)
    settings = ChromaKeySettings(
        colors=[GREEN], tolerance=0, feather=1, feather_direction=FeatherDirection.SUBJECT
    )
    apply_chroma_key(buffer, settings)
    assert buffer.alpha.tolist() == [[0, 85, 255, 255, 255]]


def test_subject_direction_never_drops_below_choked_mask():
    rng = np.random.default_rng(11)
    rgba = rng.integers(0, 256, size=(8, 8, 4), dtype=np.uint8)
    settings = ChromaKeySettings(
        colors=[(128, 128, 128)], tolerance=120, feather=2, choke=1, smoothing=1, feather_direction="subject"
    )
    choked = erode_2d(build_key_mask(rgba, settings.colors, settings.tolerance), settings.choke)
    buffer = PixelBuffer(8, 8, rgba.copy())
    apply_chroma_key(buffer, settings)
    assert np.all(buffer.alpha >= choked)


def test_choke_shrinks_opaque_region():
    buffer = _row(GREEN, RED, RED, RED, GREEN)
    apply_chroma_key(buffer, ChromaKeySettings(colors=[GREEN], tolerance=0, feather=0, choke=1))
    assert buffer.alpha.tolist() == [[0, 0, 255, 0, 0]]


def test_zero_size_buffer_is_a_no_op():
    buffer = PixelBuffer(0, 0, b"")
    assert apply_chroma_key(buffer, ChromaKeySettings(colors=[GREEN])) is buffer
    assert buffer.pixels.size == 0


def test_malformed_buffer_fails_fast():
    with pytest.raises(BufferShapeError):
        PixelBuffer(2, 2, bytes(3))
