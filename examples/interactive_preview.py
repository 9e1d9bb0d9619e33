#!/usr/bin/env python3
"""Watch a preset scene render in a live window.

Rows appear as the worker threads finish them. Press ``r`` to render the
scene again once the current pass is done; close the window to quit.

Usage:
    python -m examples.interactive_preview [--scene NAME] [--width W] [--threads N]
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive render preview.")
    parser.add_argument("--scene", choices=("default", "showcase"), default="showcase")
    parser.add_argument("--width", type=int, default=800)
    parser.add_argument("--samples", type=int, default=50)
    parser.add_argument("--depth", type=int, default=10)
    parser.add_argument("--threads", type=int, default=os.cpu_count() or 1)
    parser.add_argument("--seed", type=int, default=0)
    return parser.parse_args()


def main() -> int:
    """Main entry point for the interactive preview.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()

    # Initialize Taichi first (before importing modules that use ti.kernel)
    ti.init(arch=ti.cpu)

    from src.pathtracer.preview.interactive import RenderWindow
    from src.pathtracer.scene.presets import PRESETS, SceneParams

    if not RenderWindow.is_display_available():
        print("Error: no display available for the preview window", file=sys.stderr)
        return 1

    params = SceneParams(
        image_width=args.width, samples_per_pixel=args.samples, max_depth=args.depth
    )
    scene, camera = PRESETS[args.scene](params)

    print(f"Scene: {args.scene} ({camera.image_width}x{camera.image_height})")
    print("Press 'r' to re-render, close the window to quit.")

    window = RenderWindow(scene, camera, thread_count=args.threads, seed=args.seed)
    window.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
