"""Dielectric (glass/water) material implementation.

Dielectrics either reflect or refract every incoming ray; they never absorb
and never tint, so the attenuation is always white.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1
    - Schlick's approximation for the angle-dependent reflectance

Example:
    >>> from src.pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, state = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, reflect, reflectance, refract
from src.pathtracer.core.rng import random_f32

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices for the side the ray arrives from.

    Returns 1/ior when entering the material (front face) and ior when
    leaving it.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def cannot_refract(refraction_ratio: ti.f32, cos_theta: ti.f32) -> ti.i32:
    """Check for total internal reflection at the given incident cosine."""
    sin_theta = tm.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))
    result = 0
    if refraction_ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Compute the scattered direction for a dielectric surface.

    Reflects when refraction is impossible (total internal reflection) or
    when a uniform draw falls below the Schlick reflectance; refracts
    otherwise.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing against the ray.
        front_face: 1 if the ray arrives from outside the surface.
        state: Random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, new_state). The
        attenuation is always (1, 1, 1).
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ior, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)

    draw, new_state = random_f32(state)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract(ratio, cos_theta) == 1 or draw < reflectance(cos_theta, ratio):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, new_state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Scatter off a registered dielectric material.

    Returns:
        A tuple of (scattered_direction, attenuation, new_state).
    """
    return scatter_dielectric(
        get_dielectric_ior(material_idx), incident_direction, normal, front_face, state
    )
