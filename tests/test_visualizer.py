from __future__ import annotations

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from macflow import CellState, FluidSimulation, SCENARIO_CHANNEL, new_domain
from visualizer import FIELDS, FluidVisualizer, field_image


def test_field_image_normalizes_interior() -> None:
    grid = new_domain(5, 4, 0.1)
    grid.u[1:-1, 1:-1] = np.array([[0.0, 2.0], [4.0, 1.0], [3.0, 8.0]])
    grid.u[0, :] = 100.0   # outer ring does not affect the scale
    img = field_image(grid, "velocity_x")
    assert img.shape == (2, 3)          # (H-2, W-2)
    assert img.min() == 0.0 and img.max() == 1.0
    assert img[0, 1] == pytest.approx(0.5)   # u[2, 1] = 4 on a 0..8 scale


def test_field_image_masks_walls() -> None:
    grid = new_domain(5, 5, 0.1)
    grid.pressure[2, 3] = -5.0
    grid.set_cell_state(1, 1, CellState.WALL)
    img = field_image(grid, "pressure")
    assert img.mask[0, 0]
    assert not img.mask[2, 1]


def test_constant_field_maps_to_zero() -> None:
    grid = new_domain(4, 4, 0.1)
    img = field_image(grid, "velocity_y")
    assert np.all(img == 0.0)


def test_unknown_field_rejected() -> None:
    with pytest.raises(ValueError):
        field_image(new_domain(3, 3, 0.1), "vorticity")


def test_viewer_update_steps_simulation() -> None:
    sim = FluidSimulation(10, 6, scenario=SCENARIO_CHANNEL)
    viz = FluidVisualizer(sim, field="pressure")
    artists = viz.update(0)
    assert sim.frame == 1
    assert len(artists) == 2
    assert set(FIELDS) == {"velocity_x", "velocity_y", "pressure"}
