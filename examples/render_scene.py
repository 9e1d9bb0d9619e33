#!/usr/bin/env python3
"""Render a preset scene with the multithreaded tiled renderer.

Renders asynchronously, printing row progress while the worker threads
run, then shows the finished framebuffer in a Matplotlib window.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene NAME        Preset scene: default or showcase (default: default)
    --width WIDTH       Image width in pixels (default: 800)
    --samples SAMPLES   Samples per pixel (default: 50)
    --depth DEPTH       Maximum bounces per path (default: 10)
    --threads THREADS   Worker threads (default: CPU count)
    --seed SEED         Base random seed (default: 0)
    --no-preview        Skip the Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --scene showcase --width 400 --samples 20
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("default", "showcase"),
        default="default",
        help="Preset scene (default: default)",
    )
    parser.add_argument("--width", type=int, default=800, help="Image width (default: 800)")
    parser.add_argument("--samples", type=int, default=50, help="Samples per pixel (default: 50)")
    parser.add_argument("--depth", type=int, default=10, help="Maximum bounces (default: 10)")
    parser.add_argument(
        "--threads",
        type=int,
        default=os.cpu_count() or 1,
        help="Worker threads (default: CPU count)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Base random seed (default: 0)")
    parser.add_argument("--no-preview", action="store_true", help="Skip the preview window")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_scene(
    scene_name: str = "default",
    width: int = 800,
    samples_per_pixel: int = 50,
    max_depth: int = 10,
    thread_count: int = 1,
    seed: int = 0,
    quiet: bool = False,
):
    """Render a preset scene, printing progress until all rows are done.

    Returns:
        Tuple of (pixel_buffer, width, height).
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.renderer import render_async
    from src.pathtracer.preview.display import format_progress
    from src.pathtracer.scene.presets import PRESETS, SceneParams

    params = SceneParams(
        image_width=width, samples_per_pixel=samples_per_pixel, max_depth=max_depth
    )
    scene, camera = PRESETS[scene_name](params)
    height = camera.image_height

    if not quiet:
        print(
            f"Rendering '{scene_name}' at {width}x{height}, {samples_per_pixel} spp, "
            f"depth {max_depth}, {thread_count} threads..."
        )

    start_time = time.time()
    job = render_async(
        scene, camera, width, height, samples_per_pixel, max_depth, thread_count, seed
    )
    while job.is_running:
        if not quiet:
            print(f"\r  {format_progress(job.progress)}", end="", flush=True)
        time.sleep(0.1)
    job.join()

    if not quiet:
        print(f"\r  {format_progress(job.progress)} in {time.time() - start_time:.2f}s")

    return job.framebuffer(), width, height


def main() -> int:
    """Main entry point."""
    args = parse_args()

    ti.init(arch=ti.cpu)

    from src.pathtracer.core.settings import ConfigurationError
    from src.pathtracer.preview.display import show_framebuffer

    try:
        pixels, width, height = render_scene(
            scene_name=args.scene,
            width=args.width,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            thread_count=args.threads,
            seed=args.seed,
            quiet=args.quiet,
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.no_preview:
        show_framebuffer(pixels, width, height, title=f"{args.scene} - {args.samples} spp")
    return 0


if __name__ == "__main__":
    sys.exit(main())
