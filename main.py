"""
main.py — Entry Point
======================
Runs the 2D solver live, headless, or as a benchmark.

Usage:
    python main.py                                 # Headless tank (default)
    python main.py --mode live --scenario channel  # Live viewer, wind tunnel
    python main.py --mode benchmark                # Per-phase timings
"""

import argparse
import numpy as np


def run_live(scenario: str, width: int, height: int, dt: float | None):
    """Live interactive visualization."""
    from macflow import FluidSimulation
    from visualizer import FluidVisualizer

    print(f"Starting live simulation ({scenario} {width}x{height})...")
    print("Keys: x/y/p field, r reset, v inflow. Close the window to exit.\n")

    sim = FluidSimulation(width, height, dt=dt, scenario=scenario)
    viz = FluidVisualizer(sim)
    viz.run()


def run_headless(scenario: str, width: int, height: int, dt: float | None,
                 frames: int = 100):
    """Run simulation without display — prints stats every 10 frames."""
    from macflow import FluidSimulation

    print(f"\nHeadless simulation | {scenario} {width}x{height} | {frames} frames")
    print(f"{'─'*60}")

    sim = FluidSimulation(width, height, dt=dt, scenario=scenario)
    total_times = []

    for f in range(frames):
        metrics = sim.step()
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"p=[{metrics['pressure_min']:.1f}, {metrics['pressure_max']:.1f}]")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(scenario: str, width: int, height: int, dt: float | None,
                  frames: int = 50):
    """
    Detailed performance breakdown.
    Shows how long each physics step takes.
    """
    from macflow import FluidSimulation

    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {scenario} {width}x{height} | {frames} frames")
    print(f"{'='*60}")

    sim = FluidSimulation(width, height, dt=dt, scenario=scenario)

    # Warm up
    for _ in range(3):
        sim.step()

    logs = [sim.step() for _ in range(frames)]

    keys = ["forces_ms", "project_ms", "advect_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="2D MAC-grid Fluid Simulation")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument(
        "--scenario", choices=["tank", "channel"], default="tank",
        help="Boundary/forcing preset (default: tank)"
    )
    parser.add_argument("--width",  type=int, default=256, help="Cells along x (default: 256)")
    parser.add_argument("--height", type=int, default=128, help="Cells along y (default: 128)")
    parser.add_argument("--dt",     type=float, default=None, help="Timestep (default: per scenario)")
    parser.add_argument("--frames", type=int, default=100, help="Number of frames")

    args = parser.parse_args()
    scenario = args.scenario.upper()

    if args.mode == "live":
        run_live(scenario, args.width, args.height, args.dt)
    elif args.mode == "headless":
        run_headless(scenario, args.width, args.height, args.dt, frames=args.frames)
    elif args.mode == "benchmark":
        run_benchmark(scenario, args.width, args.height, args.dt, frames=args.frames)
