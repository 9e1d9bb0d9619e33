"""Pytest configuration for path tracer tests.

Taichi must be initialized once per session, before any module that
declares fields or kernels is imported; test modules therefore import
package code inside the test functions.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Repeated ti.init() calls reset the runtime and invalidate fields held
    by already-imported modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Reset spheres, material registries and material handles around each test."""
    from src.pathtracer.materials.dielectric import clear_dielectric_materials
    from src.pathtracer.materials.lambertian import clear_lambertian_materials
    from src.pathtracer.materials.metal import clear_metal_materials
    from src.pathtracer.scene.intersection import clear_scene
    from src.pathtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def default_camera():
    """Camera at (0, 0, 1) looking down -z with a 90 degree field of view."""
    from src.pathtracer.camera.pinhole import PinholeCamera

    return PinholeCamera(
        lookfrom=(0.0, 0.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=2.0,
        image_width=64,
        samples_per_pixel=4,
        max_depth=10,
    )
