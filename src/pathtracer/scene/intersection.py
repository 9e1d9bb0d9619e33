"""Scene-level nearest-hit queries over an unordered sphere collection.

The scene stores spheres in Taichi fields (Structure of Arrays) together
with the handle of the material each sphere uses. ``intersect_scene``
tests every sphere and keeps the nearest hit by shrinking the search
interval to [lower, closest_so_far] as hits are found.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.interval import Interval
from src.pathtracer.core.locking import kernel_lock
from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Result slots for Python-side hit queries
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Stale field data is overwritten when
    new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material handle to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Load a sphere from scene storage."""
    return Sphere(
        center=sphere_centers[index],
        radius=sphere_radii[index],
        material_id=sphere_material_ids[index],
    )


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the nearest hit of a ray across all spheres in the scene.

    Each successful test shrinks the upper bound of the search interval to
    the hit's t, so later spheres can only replace the result with a
    strictly closer hit. Exact ties keep the earlier sphere.

    Args:
        ray: The ray to trace.
        ray_t: Interval of acceptable ray parameters.

    Returns:
        The nearest HitRecord, or a miss record.
    """
    closest_t = ray_t.upper
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), Interval(lower=ray_t.lower, upper=closest_t))
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


@ti.kernel
def _find_nearest_hit_kernel(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32):
    # Single-iteration outer loop keeps the sphere loop serial
    for _ in range(1):
        rec = intersect_scene(
            Ray(origin=origin, direction=direction),
            Interval(lower=t_min, upper=t_max),
        )
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.point
        _query_normal[None] = rec.normal
        _query_front_face[None] = rec.front_face
        _query_material_id[None] = rec.material_id


@dataclass
class HitInfo:
    """Python-side copy of a HitRecord.

    Attributes:
        t: The ray parameter of the hit.
        point: The hit point.
        normal: Unit normal facing against the ray.
        front_face: Whether the ray arrived from outside the surface.
        material_id: Handle of the material at the hit point.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int


def find_nearest_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    t_min: float = 0.001,
    t_max: float = math.inf,
) -> HitInfo | None:
    """Query the nearest hit of a ray from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        t_min: Lower bound of acceptable ray parameters.
        t_max: Upper bound of acceptable ray parameters.

    Returns:
        A HitInfo for the nearest hit, or None if the ray hits nothing.
    """
    with kernel_lock:
        _find_nearest_hit_kernel(vec3(*origin), vec3(*direction), t_min, t_max)
        hit = _query_hit[None]
        t = _query_t[None]
        point = _query_point[None]
        normal = _query_normal[None]
        front_face = _query_front_face[None]
        material_id = _query_material_id[None]
    if hit == 0:
        return None

    return HitInfo(
        t=float(t),
        point=(float(point[0]), float(point[1]), float(point[2])),
        normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        front_face=bool(front_face),
        material_id=int(material_id),
    )
