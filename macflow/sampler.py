"""
sampler.py — Staggered Velocity Sampling
=========================================
Reads a continuous-space velocity component out of the MAC grid.

Because u and v live on different faces, each one is interpolated on its own
lattice:
  - u samples sit at (i, j + 0.5)  → half-cell offset on y
  - v samples sit at (i + 0.5, j)  → half-cell offset on x

The 2x2 stencil base index is clamped to [0, length - 2] so the stencil
never leaves the array. Queries outside the grid therefore extrapolate
linearly from the nearest edge stencil instead of raising.
"""

import numpy as np
from .grid import FluidGrid


def _bilinear_interpolate(field: np.ndarray, x: np.ndarray, y: np.ndarray,
                          spacing: float, x_offset: float, y_offset: float) -> np.ndarray:
    """
    Bilinear interpolation of a staggered 2D component at arbitrary positions.

    Args:
        field              : (W, H) array of stored samples
        x, y               : Query positions in physical units (same shape)
        spacing            : Cell size
        x_offset, y_offset : Where sample [i, j] sits, in cells: ((i + x_offset), (j + y_offset))

    Returns:
        Interpolated values, same shape as x/y. Exact stored values when a
        query lands on a sample position.
    """
    Nx, Ny = field.shape

    # Lower corner of the 2x2 stencil, clamped so that index + 1 stays valid
    x0 = np.clip(np.floor(x / spacing - x_offset).astype(np.int64), 0, Nx - 2)
    y0 = np.clip(np.floor(y / spacing - y_offset).astype(np.int64), 0, Ny - 2)

    # Fractional part relative to the clamped corner
    fx = (x - (x0 + x_offset) * spacing) / spacing
    fy = (y - (y0 + y_offset) * spacing) / spacing

    w00 = 1.0 - fx
    w10 = 1.0 - fy
    w01 = fx
    w11 = fy

    return (
        w00 * w10 * field[x0, y0]
        + w01 * w10 * field[x0 + 1, y0]
        + w01 * w11 * field[x0 + 1, y0 + 1]
        + w00 * w11 * field[x0, y0 + 1]
    )


def _sample(field: np.ndarray, x, y, spacing: float, x_offset: float, y_offset: float):
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    x, y = np.broadcast_arrays(x, y)
    out = _bilinear_interpolate(field, x, y, spacing, x_offset, y_offset)
    if out.ndim == 0:
        return float(out)
    return out


def sample_u(grid: FluidGrid, x, y):
    """
    Horizontal velocity at physical point (x, y).

    Accepts scalars (returns a float) or arrays (returns an array).
    """
    return _sample(grid.u, x, y, grid.spacing, 0.0, 0.5)


def sample_v(grid: FluidGrid, x, y):
    """Vertical velocity at physical point (x, y). Same conventions as sample_u."""
    return _sample(grid.v, x, y, grid.spacing, 0.5, 0.0)


def sample_velocity(grid: FluidGrid, x, y):
    """(u, v) at physical point (x, y)."""
    return sample_u(grid, x, y), sample_v(grid, x, y)
