"""Path integrator turning a camera ray into a colour estimate.

The colour of a ray is defined recursively: a hit scatters according to
the surface material and contributes ``attenuation * colour(scattered)``,
an absorbed ray is black, and a ray that escapes sees the sky gradient.
Depth exhaustion returns black. ``ray_color`` unrolls that recursion into
a loop carrying the running throughput product, so per-path stack usage
is constant.

Hits closer than T_MIN are ignored so a scattered ray does not re-hit the
surface it starts on.

Example:
    >>> from src.pathtracer.core.integrator import trace_ray_color
    >>> trace_ray_color((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=10)
    (0.5, 0.7, 1.0)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.core.interval import Interval
from src.pathtracer.core.locking import kernel_lock
from src.pathtracer.core.ray import Ray, make_ray, normalize
from src.pathtracer.core.rng import seed_state
from src.pathtracer.geometry.sphere import HitRecord
from src.pathtracer.materials.dielectric import scatter_dielectric_by_id
from src.pathtracer.materials.lambertian import scatter_lambertian_by_id
from src.pathtracer.materials.metal import scatter_metal_by_id
from src.pathtracer.scene.intersection import intersect_scene
from src.pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Acceptable ray parameters for scene hits
T_MIN = 0.001
T_MAX = float("inf")

# Sky gradient endpoints
SKY_HORIZON = (1.0, 1.0, 1.0)
SKY_ZENITH = (0.5, 0.7, 1.0)

_query_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background colour seen along a direction that hits nothing.

    Blends white at the horizon into light blue overhead:
    a = 0.5 * (unit(direction).y + 1); colour = (1 - a) * white + a * blue.
    """
    a = 0.5 * (normalize(direction).y + 1.0)
    return (1.0 - a) * vec3(1.0, 1.0, 1.0) + a * vec3(0.5, 0.7, 1.0)


@ti.func
def scatter_material(material_id: ti.i32, direction: vec3, rec: HitRecord, state: ti.u32):
    """Scatter a ray off the material referenced by a hit record.

    Args:
        material_id: Material handle of the surface.
        direction: Incoming ray direction.
        rec: The hit record (point, normal, front_face).
        state: Random stream state.

    Returns:
        A tuple of (attenuation, scattered_ray, did_scatter, new_state).
        ``did_scatter`` is 0 when the ray is absorbed; unknown handles
        absorb.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    rng = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, rng = scatter_lambertian_by_id(
            type_index, rec.normal, rng
        )
        did_scatter = 1
    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter, rng = scatter_metal_by_id(
            type_index, direction, rec.normal, rng
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, rng = scatter_dielectric_by_id(
            type_index, direction, rec.normal, rec.front_face, rng
        )
        did_scatter = 1

    return attenuation, make_ray(rec.point, scattered_direction), did_scatter, rng


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Estimate the colour carried back along a ray.

    Args:
        ray: The primary ray.
        max_depth: Maximum number of scattering events. 0 yields black.
        state: Random stream state.

    Returns:
        A tuple of (colour, new_state).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    rng = state

    # Paths still active when the depth budget runs out contribute black
    active = 1
    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(current, Interval(lower=T_MIN, upper=tm.inf))
            if rec.hit == 0:
                color = throughput * sky_color(current.direction)
                active = 0
            else:
                attenuation, scattered, did_scatter, rng = scatter_material(
                    rec.material_id, current.direction, rec, rng
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    return color, rng


@ti.kernel
def _trace_ray_color_kernel(origin: vec3, direction: vec3, depth: ti.i32, seed: ti.u32):
    # Single-iteration outer loop keeps the path loop serial
    for _ in range(1):
        color, _state = ray_color(
            make_ray(origin, direction), depth, seed_state(seed, ti.cast(0, ti.u32))
        )
        _query_color[None] = color


def trace_ray_color(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace one ray through the current scene from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        depth: Bounce budget.
        seed: Seed of the random stream used for scattering.

    Returns:
        The colour estimate as (r, g, b).
    """
    with kernel_lock:
        _trace_ray_color_kernel(vec3(*origin), vec3(*direction), depth, seed)
        color = _query_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def sky_gradient(direction) -> np.ndarray:
    """Analytic sky colour for one or more directions, computed with NumPy.

    Args:
        direction: Array-like of shape (3,) or (..., 3).

    Returns:
        Colours with the same leading shape as ``direction``.
    """
    d = np.asarray(direction, dtype=np.float64)
    unit_y = d[..., 1] / np.linalg.norm(d, axis=-1)
    a = (0.5 * (unit_y + 1.0))[..., np.newaxis]
    return (1.0 - a) * np.asarray(SKY_HORIZON) + a * np.asarray(SKY_ZENITH)
