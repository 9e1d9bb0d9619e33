"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector utilities and random sampling
    rng: Per-pixel hash random streams and worker seed derivation
    interval: Scalar ranges bounding intersection parameters
    settings: Render configuration and configuration errors
    locking: Process-wide lock around Taichi launches
    integrator: Iterative path integrator with sky illumination
    renderer: Multithreaded tiled renderer and progress reporting

All per-pixel work runs inside Taichi kernels; worker threads partition
the image by rows and report progress as rows complete.
"""

from .interval import (
    EMPTY,
    UNIVERSE,
    Interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    ray_at,
    reflect,
    reflectance,
    refract,
    vec3,
)
from .locking import kernel_lock
from .rng import pcg_hash, random_f32, random_range, seed_state, spawn_worker_seeds
from .settings import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, ConfigurationError, RenderSettings

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.integrator or src.pathtracer.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "reflectance",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "pcg_hash",
    "seed_state",
    "random_f32",
    "random_range",
    "spawn_worker_seeds",
    "Interval",
    "make_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "EMPTY",
    "UNIVERSE",
    "ConfigurationError",
    "RenderSettings",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
    "kernel_lock",
]
