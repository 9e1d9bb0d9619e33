"""Preset scenes.

Factories that build a SceneManager together with a matching camera:

- ``create_default_scene``: a small blue diffuse sphere resting on a huge
  yellow-green ground sphere, seen from just behind the origin.
- ``create_material_showcase_scene``: the default scene plus a hollow
  glass sphere on the left and a fuzzy metal sphere on the right.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.presets import SceneParams, create_default_scene
    >>> scene, camera = create_default_scene(SceneParams(image_width=200))
    >>> camera.image_height
    112
"""

from dataclasses import dataclass

from src.pathtracer.camera.pinhole import PinholeCamera
from src.pathtracer.scene.manager import SceneManager

# =============================================================================
# Scene Parameters
# =============================================================================


@dataclass
class SceneParams:
    """Resolution and budget overrides for a preset scene.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Jittered rays per pixel.
        max_depth: Bounce budget per path.
        vfov: Vertical field of view in degrees.
    """

    image_width: int = 800
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 50
    max_depth: int = 10
    vfov: float = 90.0


# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0
GROUND_ALBEDO = (0.8, 0.8, 0.0)

CENTER_SPHERE_CENTER = (0.0, 0.0, -1.0)
CENTER_SPHERE_RADIUS = 0.5
CENTER_SPHERE_ALBEDO = (0.1, 0.2, 0.5)

LOOKFROM = (0.0, 0.0, 1.0)
LOOKAT = (0.0, 0.0, -1.0)
VUP = (0.0, 1.0, 0.0)

# Showcase additions
GLASS_IOR = 1.5
GLASS_CENTER = (-1.0, 0.0, -1.0)
GLASS_RADIUS = 0.5
BUBBLE_RADIUS = 0.4
METAL_CENTER = (1.0, 0.0, -1.0)
METAL_RADIUS = 0.5
METAL_ALBEDO = (0.8, 0.6, 0.2)
METAL_FUZZ = 0.3


def _make_camera(params: SceneParams) -> PinholeCamera:
    return PinholeCamera(
        lookfrom=LOOKFROM,
        lookat=LOOKAT,
        vup=VUP,
        vfov=params.vfov,
        aspect_ratio=params.aspect_ratio,
        image_width=params.image_width,
        samples_per_pixel=params.samples_per_pixel,
        max_depth=params.max_depth,
    )


# =============================================================================
# Scene Factories
# =============================================================================


def create_default_scene(
    params: SceneParams | None = None,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the two-sphere scene.

    Args:
        params: Resolution and budget overrides. Defaults to 800x450,
            50 samples per pixel and depth 10.

    Returns:
        A tuple of (scene, camera).
    """
    if params is None:
        params = SceneParams()

    scene = SceneManager()
    ground = scene.make_lambertian(GROUND_ALBEDO)
    center = scene.make_lambertian(CENTER_SPHERE_ALBEDO)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere(CENTER_SPHERE_CENTER, CENTER_SPHERE_RADIUS, center)

    return scene, _make_camera(params)


def create_material_showcase_scene(
    params: SceneParams | None = None,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the default scene with a hollow glass sphere and a fuzzy metal sphere.

    The glass sphere is hollow: an inner sphere with the reciprocal index
    of refraction models the air bubble.

    Args:
        params: Resolution and budget overrides.

    Returns:
        A tuple of (scene, camera).
    """
    scene, camera = create_default_scene(params)

    glass = scene.make_dielectric(GLASS_IOR)
    bubble = scene.make_dielectric(1.0 / GLASS_IOR)
    metal = scene.make_metal(METAL_ALBEDO, METAL_FUZZ)

    scene.add_sphere(GLASS_CENTER, GLASS_RADIUS, glass)
    scene.add_sphere(GLASS_CENTER, BUBBLE_RADIUS, bubble)
    scene.add_sphere(METAL_CENTER, METAL_RADIUS, metal)

    return scene, camera


PRESETS = {
    "default": create_default_scene,
    "showcase": create_material_showcase_scene,
}
