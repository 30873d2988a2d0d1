"""
visualizer.py — Live Field Viewer
==================================
Renders one scalar field of the 2D grid as an image:
  - velocity_x : u on the left face of each cell
  - velocity_y : v on the bottom face of each cell
  - pressure   : the pressure correction of the last step

Values are min/max normalized over the interior every frame, Wall cells
are drawn black. Uses matplotlib FuncAnimation for real-time updates.

Keys: x / y / p switch field, r resets the scenario, v toggles the inflow.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.colors import LinearSegmentedColormap

from macflow.grid import CellState, FluidGrid

FIELDS = ("velocity_x", "velocity_y", "pressure")
_FIELD_KEYS = {"x": "velocity_x", "y": "velocity_y", "p": "pressure"}

# Low values yellow, high values red
FIELD_COLORS = ["#ffff00", "#ff8000", "#ff0000"]
field_cmap = LinearSegmentedColormap.from_list("field", FIELD_COLORS)
field_cmap.set_bad("#000000")


def field_image(grid: FluidGrid, field: str) -> np.ma.MaskedArray:
    """
    Interior of `field` scaled to [0, 1], Wall cells masked.

    Returns an (H-2, W-2) masked array, rows along y, ready for
    imshow(origin='lower'). A constant field maps to all zeros.
    """
    if field == "velocity_x":
        values = grid.u
    elif field == "velocity_y":
        values = grid.v
    elif field == "pressure":
        values = grid.pressure
    else:
        raise ValueError(f"Unknown field: {field}. Use one of {FIELDS}.")

    interior = values[1:-1, 1:-1]
    lo, hi = interior.min(), interior.max()
    if hi > lo:
        level = (interior - lo) / (hi - lo)
    else:
        level = np.zeros_like(interior)

    walls = grid.state[1:-1, 1:-1] == CellState.WALL
    return np.ma.masked_array(level.T, mask=walls.T)


class FluidVisualizer:
    """
    Real-time single-field viewer of the fluid simulation.

    Usage (standalone):
        from macflow import FluidSimulation
        from visualizer import FluidVisualizer

        sim = FluidSimulation(256, 128)
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation, field: str = "velocity_x"):
        """
        Args:
            simulation : FluidSimulation instance
            field      : Field shown first (see FIELDS)
        """
        if field not in FIELDS:
            raise ValueError(f"Unknown field: {field}. Use one of {FIELDS}.")
        self.sim = simulation
        self.field = field
        self._setup_figure()

    def _setup_figure(self):
        """Initialize the matplotlib figure."""
        self.fig, self.ax = plt.subplots(figsize=(12, 6))
        self.fig.patch.set_facecolor('#0a0a0a')
        self.ax.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        self.img = self.ax.imshow(
            field_image(self.sim.grid, self.field), cmap=field_cmap,
            vmin=0, vmax=1.0,
            interpolation='nearest',
            origin='lower',
            aspect='equal'
        )
        self.title_text = self.ax.set_title(
            "", color='#cccccc', fontsize=10, fontfamily='monospace'
        )
        self.fig.canvas.mpl_connect('key_press_event', self._on_key)
        plt.tight_layout()

    def _on_key(self, event):
        if event.key in _FIELD_KEYS:
            self.field = _FIELD_KEYS[event.key]
            print(f"[Viewer] Showing {self.field}")
        elif event.key == "r":
            self.sim.reset()
        elif event.key == "v":
            self.sim.set_inflow(not self.sim.inflow)

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates the image."""
        metrics = self.sim.step()

        self.img.set_data(field_image(self.sim.grid, self.field))

        self.title_text.set_text(
            f"Frame {metrics['frame']} | {metrics['scenario']} | {self.field} | "
            f"{metrics['fps']:.1f} FPS | "
            f"div_max={metrics['divergence_max']:.5f}"
        )

        return [self.img, self.title_text]

    def run(self, fps: int = 30, frames: int | None = None):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render (None = infinite)
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=False,
            cache_frame_data=False
        )
        plt.show()

    def save_gif(self, path: str = "macflow.gif", fps: int = 10, frames: int = 100):
        """Save animation as a GIF (for reports and demos)."""
        print(f"[Viewer] Rendering {frames} frames to {path}...")
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=100, blit=False
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"[Viewer] Saved: {path}")
