"""Sphere primitive with robust ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine used by the scene collection.

The quadratic is solved in its half-b form with the reformulated root
computation from Ray Tracing Gems, which avoids catastrophic cancellation
when h^2 is nearly equal to a*c.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.interval import Interval, interval_surrounds
from src.pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material handle.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Handle of the material shared by this sphere.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The 3D point of the intersection. Only valid if hit == 1.
        normal: Unit surface normal, always facing against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the geometric outward normal already faced against
            the ray (ray arriving from outside), 0 if it had to be flipped.
        material_id: Handle of the material at the hit point, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def face_normal(direction: vec3, outward_normal: vec3):
    """Orient a unit outward normal against the ray direction.

    Returns:
        A tuple of (front_face, normal).
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(direction, outward_normal) > 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 - 2*h*t + c = 0 for its two real roots.

    Args:
        h: Half of the (negated) linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of the discriminant h^2 - a*c.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = h + sign_h * sqrt_d

    t0 = 0.0
    t1 = 0.0
    if ti.abs(q) < 1e-10:
        # Tangent ray through the center plane: fall back to the plain formula
        t0 = (h - sqrt_d) / a
        t1 = (h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Intersect a ray with a sphere inside a parameter interval.

    Substituting the ray into |P - C|^2 = r^2 gives

        a*t^2 - 2*h*t + c = 0

    with a = d.d, h = d.(C - O) and c = |C - O|^2 - r^2. A negative
    discriminant h^2 - a*c means the ray misses. Otherwise the smaller root
    is used if ray_t surrounds it, then the larger one.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        ray_t: Open interval of acceptable ray parameters.

    Returns:
        A HitRecord; check its hit field.
    """
    oc = sphere.center - ray.origin
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        t0, t1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))

        root = t0
        valid = interval_surrounds(ray_t, root)
        if valid == 0:
            root = t1
            valid = interval_surrounds(ray_t, root)

        if valid == 1:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = face_normal(ray.direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result
