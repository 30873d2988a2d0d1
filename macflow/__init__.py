"""
macflow/ — 2D Incompressible Flow on a MAC Grid
================================================
Exports the engine interfaces a front end needs.

Build a domain with new_domain(), mark walls with set_cell_state(), then
each frame: write forcing, zero pressure, solve_incompressibility(grid),
advect_velocity(grid). FluidSimulation bundles that loop.
"""

from .grid import Cell, CellState, ConfigurationError, FluidConfig, FluidGrid, new_domain
from .sampler import sample_u, sample_v, sample_velocity
from .solver import solve_incompressibility
from .advect import advect_velocity
from .simulation import FluidSimulation, SCENARIO_TANK, SCENARIO_CHANNEL

__all__ = [
    "Cell", "CellState", "ConfigurationError", "FluidConfig", "FluidGrid", "new_domain",
    "sample_u", "sample_v", "sample_velocity",
    "solve_incompressibility", "advect_velocity",
    "FluidSimulation", "SCENARIO_TANK", "SCENARIO_CHANNEL",
]
