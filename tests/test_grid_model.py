"""Tests for GridModel line generation and the two-phase dimension change."""

import pytest

from core.grid_model import Axis, GridModel, GridLine, even_lines, is_valid_size


@pytest.mark.parametrize("cols", range(1, 11))
@pytest.mark.parametrize("rows", range(1, 11))
def test_initialize_produces_ordered_interior_lines(cols, rows):
    model = GridModel()
    model.initialize(cols, rows)

    assert len(model.vertical_lines) == cols - 1
    assert len(model.horizontal_lines) == rows - 1
    for axis in (Axis.VERTICAL, Axis.HORIZONTAL):
        positions = model.positions(axis)
        assert all(0.0 < p < 1.0 for p in positions)
        assert all(a < b for a, b in zip(positions, positions[1:]))


def test_default_grid_is_three_by_three():
    model = GridModel()
    assert (model.cols, model.rows) == (3, 3)
    assert model.positions(Axis.VERTICAL) == pytest.approx([1 / 3, 2 / 3])
    assert model.cell_count == 9


def test_even_lines_single_cell_has_no_lines():
    assert even_lines(1) == []
    assert even_lines(4) == [GridLine(0.25), GridLine(0.5), GridLine(0.75)]


@pytest.mark.parametrize("value", [0, 11, -1, "abc", None, 3.5, True])
def test_invalid_sizes_rejected(value):
    assert not is_valid_size(value)


def test_set_dimensions_ignores_invalid_and_keeps_previous():
    model = GridModel(4, 5)
    assert model.set_dimensions(0, "x") is False
    assert (model.cols, model.rows) == (4, 5)

    assert model.set_dimensions(11, 2) is True
    assert (model.cols, model.rows) == (4, 2)


def test_set_dimensions_does_not_regenerate_lines():
    model = GridModel(3, 3)
    model.set_dimensions(5, 2)

    # Stale lines persist until commit
    assert len(model.vertical_lines) == 2
    assert len(model.horizontal_lines) == 2

    model.commit()
    assert len(model.vertical_lines) == 4
    assert len(model.horizontal_lines) == 1


def test_set_dimensions_same_value_is_not_a_change():
    model = GridModel(3, 3)
    assert model.set_dimensions(3, 3) is False


def test_reset_discards_manual_adjustments():
    model = GridModel(2, 2)
    model.move_line(Axis.VERTICAL, 0, 0.2)
    model.move_line(Axis.HORIZONTAL, 0, 0.9)

    model.reset()

    assert model.positions(Axis.VERTICAL) == [0.5]
    assert model.positions(Axis.HORIZONTAL) == [0.5]


def test_move_line_replaces_only_that_index():
    model = GridModel(4, 1)
    before = model.vertical_lines
    model.move_line(Axis.VERTICAL, 1, 0.4)

    assert model.positions(Axis.VERTICAL) == pytest.approx([0.25, 0.4, 0.75])
    # Previous sequence is not mutated in place
    assert before[1] == GridLine(0.5)


def test_lines_for_none_axis_raises():
    with pytest.raises(ValueError):
        GridModel().lines(Axis.NONE)
