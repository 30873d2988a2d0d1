"""
forces.py — External Forces (Gravity, Inflow, User Input)
==========================================================
Caller-side forcing applied to the velocity field before each step.
None of this is part of the projection/advection core; these helpers only
write face velocities (and reset pressure) the way an interactive front end
would.

  - Gravity pulls every v-face down, except faces resting on a Wall.
  - Inflow pins u on the left and right boundary columns (wind tunnel).
  - Impulse adds a local, linearly fading kick (mouse drag, fan).
"""

import numpy as np
from .grid import CellState, FluidGrid


# ── Forcing parameters ────────────────────────────────────────────────────────
GRAVITY        = 9.81   # m/s², pulls along -y
INFLOW_SPEED   = 10.0   # m/s on the boundary u-faces


def apply_gravity(grid: FluidGrid, gravity: float = GRAVITY):
    """
    Apply gravity to the interior v-faces.

    A v-face sits on the bottom of its cell; when the cell below is a Wall the
    face is the floor and must stay at rest, hence the fluid factor.

    Modifies: grid.v (in-place)
    """
    below_is_fluid = (grid.state[1:-1, :-2] == CellState.FLUID).astype(np.float64)
    grid.v[1:-1, 1:-1] -= below_is_fluid * grid.timestep * gravity


def apply_inflow(grid: FluidGrid, speed: float = INFLOW_SPEED):
    """
    Impose a horizontal velocity on both vertical boundaries.

    Writes u on the left column (x = 0) and the right column (x = W-1) for
    every interior row. speed = 0 switches the inflow off.

    Modifies: grid.u (in-place)
    """
    grid.u[0, 1:-1] = speed
    grid.u[-1, 1:-1] = speed


def apply_impulse(grid: FluidGrid, x: int, y: int,
                  du: float, dv: float, radius: int = 3):
    """
    Apply a localized velocity impulse (e.g. a user drag).
    Strength falls off linearly with distance from (x, y); faces touching a
    Wall are left alone.

    Args:
        x, y   : Center of the impulse (cell indices)
        du, dv : Velocity added at the center
        radius : Influence radius in cells
    """
    W, H = grid.width, grid.height
    ix, iy = np.meshgrid(np.arange(W), np.arange(H), indexing='ij')
    fluid = grid.state == CellState.FLUID

    # Faces are indexed like their cell, one distance map serves u and v
    dist = np.sqrt((ix - x)**2 + (iy - y)**2)
    near = dist < radius

    # u-face: the cell and its west neighbour must both be open
    open_u = fluid.copy()
    open_u[1:, :] &= fluid[:-1, :]
    mask_u = near & open_u
    grid.u[mask_u] += du * (1 - dist[mask_u] / radius)

    # v-face: the cell and its south neighbour must both be open
    open_v = fluid.copy()
    open_v[:, 1:] &= fluid[:, :-1]
    mask_v = near & open_v
    grid.v[mask_v] += dv * (1 - dist[mask_v] / radius)


def reset_pressure(grid: FluidGrid):
    """Zero interior pressure; the solver accumulates into it during a step."""
    grid.reset_pressure()
