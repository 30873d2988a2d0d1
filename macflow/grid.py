"""
grid.py — 2D MAC (Marker-and-Cell) Staggered Grid
===================================================
The foundation of the entire simulation.

Layout on a single cell (x, y):
  - Pressure and divergence live at the CELL CENTER
  - Velocity `u` lives on the cell's LEFT face    → position (x, y + 0.5)
  - Velocity `v` lives on the cell's BOTTOM face  → position (x + 0.5, y)

So the face shared with the right neighbour is stored as u[x + 1, y] and the
face shared with the neighbour above is stored as v[x, y + 1].

Every field is a (width, height) float64 array indexed [x, y]. Cells on the
outer ring (x = 0, x = W-1, y = 0, y = H-1) are never visited by the solver
or the advector. They hold boundary values written by the caller; the only
ring entries the engine writes are the faces u[W-1, y] and v[x, H-1], which
interior cells share with the ring.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class ConfigurationError(ValueError):
    """Raised when a grid or its configuration cannot be built."""


class CellState(IntEnum):
    WALL = 0
    FLUID = 1


@dataclass(slots=True)
class FluidConfig:
    """Physical and numerical constants of one domain.

    spacing         : cell size (uniform in both axes)
    density         : fluid density, 1000 kg/m³ is water
    iterations      : relaxation sweeps per solve (never terminated early)
    over_relaxation : SOR factor, must stay below the stability bound of 2
    """
    spacing: float = 1.0
    density: float = 1000.0
    iterations: int = 40
    over_relaxation: float = 1.9

    def __post_init__(self) -> None:
        if not (math.isfinite(self.spacing) and self.spacing > 0.0):
            raise ConfigurationError("spacing must be positive.")
        if not (math.isfinite(self.density) and self.density > 0.0):
            raise ConfigurationError("density must be positive.")
        if self.iterations < 0:
            raise ConfigurationError("iterations must be non-negative.")
        if not 0.0 < self.over_relaxation < 2.0:
            raise ConfigurationError("over_relaxation must lie in (0, 2).")


@dataclass(frozen=True, slots=True)
class Cell:
    """Read-only snapshot of one grid cell."""
    velocity: tuple[float, float]
    pressure: float
    divergence: float
    state: CellState


class FluidGrid:
    """
    W x H MAC grid storing all simulation state.
    This is the single source of truth passed between the solver and the advector.
    """

    def __init__(self, width: int, height: int, timestep: float,
                 config: FluidConfig | None = None):
        """
        Args:
            width, height : Number of cells along x and y (at least 3 each)
            timestep      : Seconds advanced per step, owned by this grid
            config        : Spacing/density/solver constants (defaults: water, unit cells)
        """
        if width < 3 or height < 3:
            raise ConfigurationError(
                f"Grid must be at least 3x3 cells, got {width}x{height}.")
        if not (math.isfinite(timestep) and timestep > 0.0):
            raise ConfigurationError(f"timestep must be positive, got {timestep}.")

        self.width = int(width)
        self.height = int(height)
        self.timestep = float(timestep)
        self.config = config if config is not None else FluidConfig()

        shape = (self.width, self.height)

        # ── Velocity fields (face-centered, staggered) ─────────────────────
        self.u = np.zeros(shape, dtype=np.float64)
        self.v = np.zeros(shape, dtype=np.float64)

        # ── Scalar fields (cell-centered) ──────────────────────────────────
        self.pressure = np.zeros(shape, dtype=np.float64)
        # First-sweep residual of the last solve (diagnostic only)
        self.divergence = np.zeros(shape, dtype=np.float64)

        self.state = np.full(shape, CellState.FLUID, dtype=np.uint8)

    @property
    def spacing(self) -> float:
        return self.config.spacing

    @property
    def density(self) -> float:
        return self.config.density

    def set_cell_state(self, x: int, y: int, new_state: CellState):
        """
        Turn cell (x, y) into a Wall or back into Fluid.

        Becoming a Wall zeroes the four faces around the cell: its own u/v and
        the neighbour-owned faces v[x, y+1] and u[x+1, y]. Becoming Fluid again
        keeps whatever velocity is stored there.
        """
        new_state = CellState(new_state)
        current = self.state[x, y]
        if current == new_state:
            return

        if current == CellState.FLUID:
            self.u[x, y] = 0.0
            self.v[x, y] = 0.0
            if y + 1 < self.height:
                self.v[x, y + 1] = 0.0
            if x + 1 < self.width:
                self.u[x + 1, y] = 0.0

        self.state[x, y] = new_state

    def is_wall(self, x: int, y: int) -> bool:
        return self.state[x, y] == CellState.WALL

    def cell(self, x: int, y: int) -> Cell:
        return Cell(
            velocity=(float(self.u[x, y]), float(self.v[x, y])),
            pressure=float(self.pressure[x, y]),
            divergence=float(self.divergence[x, y]),
            state=CellState(int(self.state[x, y])),
        )

    def velocity(self, x: int, y: int) -> tuple[float, float]:
        return float(self.u[x, y]), float(self.v[x, y])

    def set_velocity(self, x: int, y: int, u: float, v: float):
        self.u[x, y] = u
        self.v[x, y] = v

    def fluid_mask(self) -> np.ndarray:
        """Boolean (W, H) array, True where the cell is Fluid."""
        return self.state == CellState.FLUID

    def reset_pressure(self):
        """Zero the pressure of interior cells. Callers do this before every step."""
        self.pressure[1:-1, 1:-1] = 0.0

    def compute_divergence(self) -> np.ndarray:
        """
        Net face divergence of every interior cell, using the solver's sign layout:
            div = u_left - u_right - v_top + v_bottom

        Wall cells and the outer ring report 0. For an incompressible field this
        should be ~0 on every Fluid cell.

        Returns: (W, H) array.
        """
        div = np.zeros_like(self.u)
        div[1:-1, 1:-1] = (
            self.u[1:-1, 1:-1]
            - self.u[2:, 1:-1]
            - self.v[1:-1, 2:]
            + self.v[1:-1, 1:-1]
        )
        div[~self.fluid_mask()] = 0.0
        return div

    def get_velocity_at_center(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Interpolate staggered face velocities to cell centers.
        The last column/row has no outer face and reuses its own.

        Returns (uc, vc) each of shape (W, H).
        """
        u_right = np.concatenate([self.u[1:, :], self.u[-1:, :]], axis=0)
        v_top = np.concatenate([self.v[:, 1:], self.v[:, -1:]], axis=1)
        uc = 0.5 * (self.u + u_right)
        vc = 0.5 * (self.v + v_top)
        return uc, vc

    def copy(self) -> FluidGrid:
        other = FluidGrid(self.width, self.height, self.timestep, self.config)
        for name in ("u", "v", "pressure", "divergence", "state"):
            np.copyto(getattr(other, name), getattr(self, name))
        return other

    def reset(self):
        """Back to the freshly constructed state: all Fluid, all fields zero."""
        for arr in [self.u, self.v, self.pressure, self.divergence]:
            arr[:] = 0.0
        self.state[:] = CellState.FLUID

    def __repr__(self):
        max_div = np.abs(self.compute_divergence()).max()
        max_vel = max(np.abs(self.u).max(), np.abs(self.v).max())
        walls = int((self.state == CellState.WALL).sum())
        return (
            f"FluidGrid({self.width}x{self.height}, dt={self.timestep})\n"
            f"  walls     : {walls}/{self.width * self.height} cells\n"
            f"  velocity  : max_component={max_vel:.4f}\n"
            f"  pressure  : min={self.pressure.min():.4f}, max={self.pressure.max():.4f}\n"
            f"  divergence: max={max_div:.6f} (target: ~0)"
        )


def new_domain(width: int, height: int, timestep: float,
               config: FluidConfig | None = None) -> FluidGrid:
    """Build an all-Fluid grid. Raises ConfigurationError on invalid dimensions or timestep."""
    return FluidGrid(width, height, timestep, config)
