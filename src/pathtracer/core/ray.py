"""Ray data structure and vector utilities for Taichi path tracing.

This module provides the Ray dataclass and the vector helpers used by the
geometry, material and camera code. Vector arithmetic (addition, scaling,
component-wise products) is native to ``taichi.math.vec3``; the functions
here add the ray-tracing specific operations on top of it.

Random sampling helpers take and return an explicit random stream state
(see ``core.rng``) instead of drawing from a shared generator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.rng import random_range

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection-sampling attempts
MAX_REJECTION_ATTEMPTS = 64


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to
            be unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared length of a vector (no square root)."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Only meaningful for vectors that are not near zero; callers check
    ``near_zero`` first where a degenerate vector is possible.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Returns:
        1 if every component is smaller than NEAR_ZERO_EPSILON in
        magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    result = 0
    if ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s:
        result = 1
    return result


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a unit normal: v - 2 (v . n) n."""
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The refracted direction is split into the components perpendicular and
    parallel to the normal. Callers must rule out total internal reflection
    beforehand.

    Args:
        uv: The unit incident direction.
        n: The unit surface normal, facing against uv.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(-tm.dot(uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the incident angle, in [0, 1].
        refraction_ratio: Ratio of refractive indices (> 0).

    Returns:
        The probability of reflection, in [0, 1].
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ti.pow(1.0 - cosine, 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3(state: ti.u32, lo: ti.f32, hi: ti.f32):
    """Generate a vector with components uniform in [lo, hi).

    Returns:
        A tuple of (vector, new_state).
    """
    rng = state
    x, rng = random_range(rng, lo, hi)
    y, rng = random_range(rng, lo, hi)
    z, rng = random_range(rng, lo, hi)
    return vec3(x, y, z), rng


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point strictly inside the unit sphere.

    Uses rejection sampling on the enclosing cube. The attempt count is
    bounded; exhausting it (probability ~0.48^64) yields the origin.

    Returns:
        A tuple of (point, new_state) with length(point) < 1.
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            candidate, rng = random_vec3(rng, -1.0, 1.0)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = 1
    return p, rng


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Candidates too close to the origin are rejected so that normalization
    never divides by (near) zero.

    Returns:
        A tuple of (unit_vector, new_state).
    """
    rng = state
    result = vec3(0.0, 1.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            candidate, rng = random_vec3(rng, -1.0, 1.0)
            lensq = length_squared(candidate)
            if 1e-12 < lensq and lensq <= 1.0:
                result = candidate / ti.sqrt(lensq)
                found = 1
    return result, rng


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a random point inside the unit disk in the xy-plane.

    Returns:
        A tuple of (point, new_state) where point = (x, y, 0) and
        x^2 + y^2 < 1.
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            x, rng = random_range(rng, -1.0, 1.0)
            y, rng = random_range(rng, -1.0, 1.0)
            if x * x + y * y < 1.0:
                p = vec3(x, y, 0.0)
                found = 1
    return p, rng
