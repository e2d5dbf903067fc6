"""Tests for line hit-testing and the drag state machine."""

import random

import pytest

from core.drag import (IDLE, CursorHint, DragController, LineHit, constrain_position,
                       find_nearest_line)
from core.grid_model import Axis, GridModel

WIDTH, HEIGHT = 900, 600


@pytest.fixture
def model():
    return GridModel(3, 2)  # vertical at 300/600px, horizontal at 300px


@pytest.fixture
def controller(model):
    return DragController(model)


def test_miss_when_farther_than_threshold():
    assert find_nearest_line((420, 100), [0.5], [0.5], 800, 600) is None


def test_threshold_is_exclusive():
    assert find_nearest_line((410, 100), [0.5], [0.5], 800, 600) is None
    assert find_nearest_line((409, 100), [0.5], [0.5], 800, 600) == LineHit(Axis.VERTICAL, 0)


def test_hits_horizontal_line():
    hit = find_nearest_line((100, 455), [0.5], [0.25, 0.75], 800, 600)
    assert hit == LineHit(Axis.HORIZONTAL, 1)


def test_vertical_wins_at_corner_even_if_horizontal_is_closer():
    hit = find_nearest_line((408, 301), [0.5], [0.5], 800, 600)
    assert hit == LineHit(Axis.VERTICAL, 0)


def test_first_vertical_in_index_order_wins():
    hit = find_nearest_line((105, 0), [0.12, 0.14], [], 800, 600)
    assert hit == LineHit(Axis.VERTICAL, 0)


def test_constrain_uses_edges_and_neighbours():
    positions = [0.3, 0.5, 0.7]
    assert constrain_position(positions, 0, -1.0) == pytest.approx(0.05)
    assert constrain_position(positions, 0, 0.9) == pytest.approx(0.45)
    assert constrain_position(positions, 2, 2.0) == pytest.approx(0.95)
    assert constrain_position(positions, 1, 0.55) == pytest.approx(0.55)


def test_press_on_line_starts_drag(controller):
    hint = controller.press((302, 100), WIDTH, HEIGHT)

    assert hint == CursorHint.RESIZE_HORIZONTAL
    assert controller.state.active
    assert controller.state.axis == Axis.VERTICAL
    assert controller.state.line_index == 0


def test_press_on_horizontal_line_suggests_vertical_resize(controller):
    assert controller.press((150, 298), WIDTH, HEIGHT) == CursorHint.RESIZE_VERTICAL


def test_press_off_line_stays_idle(controller):
    assert controller.press((150, 100), WIDTH, HEIGHT) is None
    assert controller.state == IDLE


def test_drag_past_origin_clamps_to_margin(controller, model):
    controller.press((300, 100), WIDTH, HEIGHT)
    controller.move((-50, 100), WIDTH, HEIGHT)

    assert model.positions(Axis.VERTICAL)[0] == pytest.approx(0.05)


def test_drag_past_neighbour_clamps_before_it(controller, model):
    controller.press((300, 100), WIDTH, HEIGHT)
    controller.move((880, 100), WIDTH, HEIGHT)

    assert model.positions(Axis.VERTICAL)[0] == pytest.approx(2 / 3 - 0.05)
    assert model.positions(Axis.VERTICAL)[1] == pytest.approx(2 / 3)


def test_drag_horizontal_line_follows_y(controller, model):
    controller.press((150, 300), WIDTH, HEIGHT)
    controller.move((700, 420), WIDTH, HEIGHT)

    assert model.positions(Axis.HORIZONTAL) == pytest.approx([0.7])
    assert model.positions(Axis.VERTICAL) == pytest.approx([1 / 3, 2 / 3])


def test_hover_does_not_mutate_model(controller, model):
    before = (model.vertical_lines, model.horizontal_lines)

    assert controller.move((301, 50), WIDTH, HEIGHT) == CursorHint.RESIZE_HORIZONTAL
    assert controller.move((50, 302), WIDTH, HEIGHT) == CursorHint.RESIZE_VERTICAL
    assert controller.move((50, 50), WIDTH, HEIGHT) == CursorHint.DEFAULT

    assert (model.vertical_lines, model.horizontal_lines) == before
    assert controller.state == IDLE


def test_release_returns_to_idle(controller):
    controller.press((300, 100), WIDTH, HEIGHT)
    assert controller.release() == CursorHint.DEFAULT
    assert controller.state == IDLE


def test_move_after_regrid_drops_stale_drag(controller, model):
    controller.press((600, 100), WIDTH, HEIGHT)  # vertical line 1
    model.initialize(2, 2)

    assert controller.move((500, 100), WIDTH, HEIGHT) == CursorHint.DEFAULT
    assert controller.state == IDLE
    assert model.positions(Axis.VERTICAL) == [0.5]


def test_random_drags_keep_lines_ordered_and_spaced():
    rng = random.Random(1234)
    model = GridModel(10, 10)
    controller = DragController(model)

    for _ in range(300):
        axis = rng.choice([Axis.VERTICAL, Axis.HORIZONTAL])
        positions = model.positions(axis)
        index = rng.randrange(len(positions))
        if axis == Axis.VERTICAL:
            start = (positions[index] * WIDTH, 0)
        else:
            # Keep x away from every vertical line so the horizontal one is hit
            start = (-100, positions[index] * HEIGHT)
        if controller.press(start, WIDTH, HEIGHT) is None:
            continue
        for _ in range(5):
            controller.move((rng.uniform(-200, 1100), rng.uniform(-200, 800)), WIDTH, HEIGHT)
        controller.release()

        for check in (Axis.VERTICAL, Axis.HORIZONTAL):
            ps = [0.0] + model.positions(check) + [1.0]
            assert all(b - a >= 0.05 - 1e-9 for a, b in zip(ps, ps[1:]))
