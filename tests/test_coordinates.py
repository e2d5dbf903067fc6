"""Tests for display <-> canvas <-> source coordinate mapping."""

import pytest

from core.coordinates import Box, boundary_positions, cell_centers, display_size, map_to_canvas


def test_map_to_canvas_corrects_for_display_scaling():
    # 800px backing buffer drawn at 400px on screen, offset by (10, 20)
    box = Box(10, 20, 400, 300)
    assert map_to_canvas(210, 170, box, 800, 600) == pytest.approx((400, 300))


def test_map_to_canvas_identity_when_unscaled():
    box = Box(0, 0, 800, 600)
    assert map_to_canvas(123, 456, box, 800, 600) == (123, 456)


def test_map_to_canvas_empty_box():
    assert map_to_canvas(50, 50, Box(0, 0, 0, 0), 800, 600) == (0.0, 0.0)


def test_boundary_positions_brackets_lines_with_edges():
    xs = boundary_positions([0.25, 0.5], 1000)
    assert xs == [0.0, 250.0, 500.0, 1000.0]
    assert len(boundary_positions([], 640)) == 2


def test_display_size_caps_and_keeps_aspect():
    assert display_size(1600, 600) == (800, 300)
    assert display_size(900, 1200) == (450, 600)


def test_display_size_truncates_to_whole_pixels():
    size = display_size(900, 600)
    assert size == (800, 533)
    assert all(isinstance(v, int) for v in size)
    assert display_size(5000, 1) == (800, 1)


def test_display_size_never_upscales():
    assert display_size(320, 240) == (320, 240)


def test_cell_centers_row_major():
    centers = cell_centers([0, 100, 300], [0, 50])
    assert centers == [(50, 25), (200, 25)]
