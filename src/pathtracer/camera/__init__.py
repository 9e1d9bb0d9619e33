"""Camera module for primary ray generation.

Components:
    pinhole: Perspective pinhole camera with jittered pixel sampling
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    sample_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
    "sample_ray",
]
