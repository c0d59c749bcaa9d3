import itertools

import pytest

from spriteloop.core import CropInsets, Rect
from spriteloop.core.spritesheet_packer import calculate_layout, crop_rect, resolve_grid


def test_layout_with_padding():
    layout = calculate_layout(32, 16, 3, columns=2, rows=2, padding=4)
    assert layout.sheet_width == 68
    assert layout.sheet_height == 36
    assert layout.cells == [Rect(0, 0, 32, 16), Rect(36, 0, 32, 16), Rect(0, 20, 32, 16)]


def test_rows_are_a_floor_not_a_cap():
    layout = calculate_layout(10, 10, 5, columns=2, rows=1, padding=0)
    assert layout.rows == 3
    assert layout.sheet_height == 30
    assert len(layout.cells) == 5


def test_extra_requested_rows_are_kept():
    layout = calculate_layout(10, 10, 2, columns=2, rows=3, padding=2)
    assert layout.rows == 3
    assert layout.sheet_height == 34


def test_zero_frames():
    layout = calculate_layout(10, 10, 0, columns=3, rows=2, padding=1)
    assert layout.cells == []
    assert layout.sheet_width == 32
    assert layout.sheet_height == 21


def test_inputs_are_sanitized():
    layout = calculate_layout(8, 8, 3, columns=0, rows=-4, padding=-2)
    assert (layout.columns, layout.rows) == (1, 3)
    assert layout.sheet_width == 8
    assert layout.sheet_height == 24

    layout = calculate_layout(8, 8, 4, columns=2.7, rows=1.2, padding=1.9)
    assert (layout.columns, layout.rows) == (2, 2)
    assert layout.sheet_width == 17


@pytest.mark.parametrize(
    "count,columns,padding",
    [(1, 1, 0), (7, 3, 2), (12, 4, 5), (9, 9, 1)],
)
def test_cells_do_not_overlap_and_sheet_is_tight(count, columns, padding):
    layout = calculate_layout(13, 7, count, columns, 1, padding)
    for a, b in itertools.combinations(layout.cells, 2):
        disjoint = (
            a.x + a.width <= b.x
            or b.x + b.width <= a.x
            or a.y + a.height <= b.y
            or b.y + b.height <= a.y
        )
        assert disjoint
    assert max(c.x + c.width for c in layout.cells) == layout.sheet_width
    assert max(c.y + c.height for c in layout.cells) == layout.sheet_height


def test_resolve_grid_defaults():
    assert resolve_grid(5, None, None) == (5, 1)
    assert resolve_grid(5, 2, None) == (2, 3)
    assert resolve_grid(5, 2, 4) == (2, 4)
    assert resolve_grid(0, 0, 0) == (1, 1)


def test_crop_rect_trims_insets():
    assert crop_rect(10, 10, CropInsets(top=2, right=3, bottom=4, left=1)) == Rect(1, 2, 6, 4)


def test_crop_rect_never_empty():
    assert crop_rect(10, 10, CropInsets(20, 20, 20, 20)) == Rect(9, 9, 1, 1)
    assert crop_rect(4, 3, CropInsets()) == Rect(0, 0, 4, 3)
