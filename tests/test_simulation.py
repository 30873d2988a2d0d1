from __future__ import annotations

import numpy as np
import pytest

from macflow import (
    CellState, FluidSimulation, SCENARIO_CHANNEL, SCENARIO_TANK,
    advect_velocity, new_domain, solve_incompressibility,
)


def boxed(width: int, height: int, dt: float = 0.1):
    grid = new_domain(width, height, dt)
    for x in range(width):
        grid.set_cell_state(x, 0, CellState.WALL)
        grid.set_cell_state(x, height - 1, CellState.WALL)
    for y in range(height):
        grid.set_cell_state(0, y, CellState.WALL)
        grid.set_cell_state(width - 1, y, CellState.WALL)
    return grid


def assert_walls_impermeable(grid) -> None:
    wall = grid.state == CellState.WALL
    # u[x, y] is shared by cells (x-1, y) and (x, y)
    u_touch = wall.copy()
    u_touch[1:, :] |= wall[:-1, :]
    # v[x, y] is shared by cells (x, y-1) and (x, y)
    v_touch = wall.copy()
    v_touch[:, 1:] |= wall[:, :-1]
    assert np.all(grid.u[u_touch] == 0.0)
    assert np.all(grid.v[v_touch] == 0.0)


def test_quiescent_box_stays_at_rest() -> None:
    grid = boxed(12, 9)
    for _ in range(20):
        grid.reset_pressure()
        solve_incompressibility(grid)
        advect_velocity(grid)
    assert np.all(grid.u == 0.0) and np.all(grid.v == 0.0)
    assert np.all(grid.pressure == 0.0)


def test_walls_stay_impermeable_with_stirred_interior() -> None:
    grid = boxed(12, 10)
    grid.set_cell_state(5, 5, CellState.WALL)
    grid.set_cell_state(6, 5, CellState.WALL)
    rng = np.random.default_rng(2)
    for _ in range(10):
        fluid = grid.state == CellState.FLUID
        grid.u[fluid] += rng.normal(scale=0.5, size=int(fluid.sum()))
        # stirring may push flow through walls; one step must remove it
        grid.reset_pressure()
        solve_incompressibility(grid)
        advect_velocity(grid)
        interior = np.zeros_like(fluid)
        interior[1:-1, 1:-1] = True
        wall = grid.state == CellState.WALL
        u_touch = (wall | np.roll(wall, 1, axis=0)) & interior
        v_touch = (wall | np.roll(wall, 1, axis=1)) & interior
        assert np.all(grid.u[u_touch] == 0.0)
        assert np.all(grid.v[v_touch] == 0.0)


def test_channel_end_to_end() -> None:
    # 10x6, Wall rows at y=0 and y=5, inflow of 10 on both ends, dt=0.1
    sim = FluidSimulation(10, 6, dt=0.1, scenario=SCENARIO_CHANNEL)
    grid = sim.grid
    assert np.all(grid.state[:, 0] == CellState.WALL)
    assert np.all(grid.state[:, 5] == CellState.WALL)
    assert np.all(grid.state[:, 1:5] == CellState.FLUID)

    for _ in range(50):
        sim.step()
        g = sim.grid
        for arr in (g.u, g.v, g.pressure):
            assert np.all(np.isfinite(arr))
        # nothing crosses the Wall rows
        assert np.all(g.u[:, 0] == 0.0) and np.all(g.u[:, 5] == 0.0)
        assert np.all(g.v[:, 0] == 0.0) and np.all(g.v[:, 5] == 0.0)
        assert np.all(g.v[1:-1, 1] == 0.0)
        # the left inflow face is outside every cell the engine updates
        assert np.all(g.u[0, 1:5] == 10.0)

    assert sim.frame == 50
    assert len(sim.perf_log) == 50


def test_tank_falls_under_gravity_and_keeps_walls_tight() -> None:
    sim = FluidSimulation(12, 10, scenario=SCENARIO_TANK)
    assert sim.dt == 0.1
    for _ in range(5):
        metrics = sim.step()
    g = sim.grid
    assert np.all(np.isfinite(g.v)) and np.all(np.isfinite(g.pressure))
    assert np.all(g.v[1:-1, 1] == 0.0)      # floor
    assert np.all(g.u[1, 1:-1] == 0.0)      # left wall face
    assert np.all(g.u[-1, 1:-1] == 0.0)     # right wall face
    assert metrics["frame"] == 5
    assert metrics["scenario"] == SCENARIO_TANK


def test_step_metrics_keys() -> None:
    sim = FluidSimulation(8, 6, scenario=SCENARIO_CHANNEL)
    assert sim.dt == 0.01
    metrics = sim.step()
    assert {"frame", "scenario", "total_ms", "fps", "forces_ms", "project_ms",
            "advect_ms", "divergence_max", "divergence_mean",
            "pressure_min", "pressure_max"} <= set(metrics)
    assert metrics["pressure_min"] <= metrics["pressure_max"]


def test_inflow_toggle_and_reset(capsys) -> None:
    sim = FluidSimulation(8, 6, scenario=SCENARIO_CHANNEL)
    sim.set_inflow(False)
    sim.step()
    assert np.all(sim.grid.u[0, :] == 0.0)
    sim.set_inflow(True)
    sim.step()
    assert np.all(sim.grid.u[0, 1:-1] == 10.0)

    sim.reset()
    assert sim.frame == 0 and sim.perf_log == []
    assert np.all(sim.grid.u == 0.0)
    out = capsys.readouterr().out
    assert "[Simulation] Inflow off" in out
    assert "[Simulation] Reset CHANNEL 8x6" in out


def test_print_status(capsys) -> None:
    sim = FluidSimulation(8, 6)
    sim.step()
    sim.print_status()
    assert "Frame: 1" in capsys.readouterr().out


def test_unknown_scenario_rejected() -> None:
    with pytest.raises(ValueError):
        FluidSimulation(8, 6, scenario="OCEAN")


def test_step_is_deterministic() -> None:
    a = FluidSimulation(10, 8, scenario=SCENARIO_TANK)
    b = FluidSimulation(10, 8, scenario=SCENARIO_TANK)
    for _ in range(3):
        a.step()
        b.step()
    np.testing.assert_array_equal(a.grid.u, b.grid.u)
    np.testing.assert_array_equal(a.grid.v, b.grid.v)
    np.testing.assert_array_equal(a.grid.pressure, b.grid.pressure)
