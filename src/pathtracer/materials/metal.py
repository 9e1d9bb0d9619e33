"""Specular metal surfaces with optional fuzz.

Metals reflect the incident direction about the surface normal:

    R = I - 2(I . N)N

The reflection is perturbed by a random point in a sphere of radius
``fuzz`` (0 = perfect mirror, 1 = very rough). A perturbed direction that
ends up below the surface is absorbed.

Example:
    >>> from src.pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, state = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, random_in_unit_sphere, reflect
from src.pathtracer.materials.lambertian import check_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Compute the scattered direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: Perturbation radius in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing against the ray.
        state: Random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state)
        where did_scatter is 0 when the ray is absorbed into the surface.
    """
    reflected = reflect(normalize(incident_direction), normal)
    offset, new_state = random_in_unit_sphere(state)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, albedo, did_scatter, new_state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Forget every registered metal material."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Register a metal albedo and fuzz radius.

    Args:
        albedo: The reflective color as (R, G, B) tuple, components in [0, 1].
        fuzz: Perturbation radius in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        Index of the new material within the metal registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is outside [0, 1].
    """
    check_albedo(albedo)
    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Number of registered metal materials."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Scatter off a registered metal material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
    """
    return scatter_metal(
        get_metal_albedo(material_idx),
        get_metal_fuzz(material_idx),
        incident_direction,
        normal,
        state,
    )
