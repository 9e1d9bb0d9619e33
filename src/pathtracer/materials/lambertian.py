"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters light toward a random direction biased by the
surface normal. Offsetting the normal by a uniformly distributed unit vector
yields directions with a cosine-weighted distribution about the normal, so
the sampling weight reduces to the albedo:

    attenuation = (albedo / pi) * cos(theta) / (cos(theta) / pi) = albedo

Example:
    >>> from src.pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, state = scatter_lambertian(albedo, normal, state)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a scattered direction for a Lambertian surface.

    The direction is normal + random_unit_vector. When the random vector
    almost exactly cancels the normal the sum is degenerate and the bare
    normal is used instead. Lambertian surfaces never absorb a ray.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point.
        state: Random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, new_state).
    """
    offset, new_state = random_unit_vector(state)
    scattered_direction = normal + offset

    if near_zero(scattered_direction) == 1:
        scattered_direction = normal

    return scattered_direction, albedo, new_state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def check_albedo(albedo: tuple[float, float, float]) -> None:
    """Raise ValueError unless every albedo component lies in [0, 1]."""
    for i, component in enumerate(albedo):
        if not 0.0 <= component <= 1.0:
            raise ValueError(f"Albedo component {i} = {component} is outside [0, 1]")


def clear_lambertian_materials() -> None:
    """Forget every registered Lambertian material."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Register a Lambertian albedo.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        Index of the new material within the Lambertian registry.

    Raises:
        RuntimeError: If the registry is full.
        ValueError: If any albedo component is outside [0, 1].
    """
    check_albedo(albedo)

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Number of registered Lambertian materials."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Albedo of Lambertian material ``material_idx``."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3, state: ti.u32):
    """Scatter off a registered Lambertian material.

    Returns:
        A tuple of (scattered_direction, attenuation, new_state).
    """
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal, state)
