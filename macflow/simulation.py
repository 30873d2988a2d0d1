"""
simulation.py — Master Physics Loop
====================================
This is the complete simulation step that ties everything together.
One call to `step()` advances the fluid by dt seconds.

Physics pipeline per frame:
  1. Apply external forces (gravity or boundary inflow, depending on scenario)
  2. Reset the pressure field (it is a per-step diagnostic, not carried over)
  3. Project velocity (enforce incompressibility)
  4. Advect velocity (self-advection)

Two scenarios are built in:
  - TANK    : walls on the floor and both sides, open top, gravity
  - CHANNEL : walls on the floor and ceiling, constant inflow through
              both vertical boundaries (a small wind tunnel)
"""

import time

import numpy as np
from .grid import CellState, FluidConfig, FluidGrid
from .advect import advect_velocity
from .forces import INFLOW_SPEED, apply_gravity, apply_inflow, reset_pressure
from .solver import solve_incompressibility


SCENARIO_TANK    = "TANK"
SCENARIO_CHANNEL = "CHANNEL"

# Timesteps the scenarios were tuned for
DEFAULT_TIMESTEPS = {
    SCENARIO_TANK    : 0.1,
    SCENARIO_CHANNEL : 0.01,
}


def build_tank(width: int, height: int, dt: float,
               config: FluidConfig | None = None) -> FluidGrid:
    """Grid with a Wall floor (y = 0) and Wall side columns."""
    grid = FluidGrid(width, height, dt, config)
    for x in range(width):
        grid.set_cell_state(x, 0, CellState.WALL)
    for y in range(1, height - 1):
        grid.set_cell_state(0, y, CellState.WALL)
        grid.set_cell_state(width - 1, y, CellState.WALL)
    return grid


def build_channel(width: int, height: int, dt: float,
                  config: FluidConfig | None = None) -> FluidGrid:
    """Grid with Wall rows at the bottom (y = 0) and top (y = H-1)."""
    grid = FluidGrid(width, height, dt, config)
    for x in range(width):
        grid.set_cell_state(x, height - 1, CellState.WALL)
        grid.set_cell_state(x, 0, CellState.WALL)
    return grid


_BUILDERS = {
    SCENARIO_TANK    : build_tank,
    SCENARIO_CHANNEL : build_channel,
}


class FluidSimulation:
    """
    The complete 2D fluid simulation.

    Usage:
        sim = FluidSimulation(256, 128, scenario=SCENARIO_CHANNEL)
        for frame in range(100):
            sim.step()
            pressure = sim.grid.pressure   # Hand to visualizer
    """

    def __init__(self, width: int = 256, height: int = 128, dt: float | None = None,
                 scenario: str = SCENARIO_TANK, config: FluidConfig | None = None):
        """
        Args:
            width, height : Grid size in cells
            dt            : Timestep (seconds). None = the scenario's default
            scenario      : SCENARIO_TANK or SCENARIO_CHANNEL
            config        : Spacing/density/solver constants
        """
        if scenario not in _BUILDERS:
            raise ValueError(f"Unknown scenario: {scenario}. Use 'TANK' or 'CHANNEL'.")
        self.width = width
        self.height = height
        self.dt = DEFAULT_TIMESTEPS[scenario] if dt is None else dt
        self.scenario = scenario
        self.config = config
        self.inflow = True
        self.grid = _BUILDERS[scenario](width, height, self.dt, config)
        self.frame = 0
        self.perf_log = []   # stores timing data per frame

    def set_inflow(self, enabled: bool):
        """Switch the CHANNEL inflow on or off (no effect on TANK)."""
        self.inflow = bool(enabled)
        print(f"[Simulation] Inflow {'on' if self.inflow else 'off'}")

    def reset(self):
        """Throw the current grid away and rebuild the scenario from rest."""
        self.grid = _BUILDERS[self.scenario](self.width, self.height, self.dt, self.config)
        self.frame = 0
        self.perf_log = []
        print(f"[Simulation] Reset {self.scenario} {self.width}x{self.height}")

    def apply_forces(self):
        if self.scenario == SCENARIO_TANK:
            apply_gravity(self.grid)
        else:
            apply_inflow(self.grid, INFLOW_SPEED if self.inflow else 0.0)

    def step(self) -> dict:
        """
        Advance simulation by one timestep (dt seconds).

        Returns performance metrics dict for benchmarking.
        """
        t_total_start = time.perf_counter()
        g = self.grid

        # ── Step 1: External forces ────────────────────────────────────────
        t0 = time.perf_counter()
        self.apply_forces()
        reset_pressure(g)
        t_forces = (time.perf_counter() - t0) * 1000

        # ── Step 2: Project velocity (enforce incompressibility) ───────────
        # This is the expensive step.
        t0 = time.perf_counter()
        proj_metrics = solve_incompressibility(g)
        t_project = (time.perf_counter() - t0) * 1000

        # ── Step 3: Advect velocity (self-advection) ───────────────────────
        t0 = time.perf_counter()
        advect_velocity(g)
        t_advect = (time.perf_counter() - t0) * 1000

        # ── Frame bookkeeping ──────────────────────────────────────────────
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000
        interior = g.pressure[1:-1, 1:-1]

        metrics = {
            "frame"            : self.frame,
            "scenario"         : self.scenario,
            "total_ms"         : t_total,
            "fps"              : 1000.0 / t_total if t_total > 0 else 0,
            "forces_ms"        : t_forces,
            "project_ms"       : t_project,
            "advect_ms"        : t_advect,
            "divergence_max"   : proj_metrics["divergence_after_max"],
            "divergence_mean"  : proj_metrics["divergence_after_mean"],
            "pressure_min"     : float(interior.min()),
            "pressure_max"     : float(interior.max()),
        }
        self.perf_log.append(metrics)
        return metrics

    def print_status(self):
        """Pretty-print current simulation state."""
        g = self.grid
        div = g.compute_divergence()
        uc, vc = g.get_velocity_at_center()
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  Scenario: {self.scenario}  |  dt={self.dt}")
        print(f"  Velocity  : max_u={np.abs(uc).max():.4f}, max_v={np.abs(vc).max():.4f}")
        print(f"  Divergence: max={np.abs(div).max():.6f}, mean={np.abs(div).mean():.8f}")
        print(f"  Pressure  : max={g.pressure.max():.4f}, min={g.pressure.min():.4f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")
