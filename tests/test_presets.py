"""Tests for the preset scene factories."""

import pytest


class TestDefaultScene:
    """Tests for create_default_scene."""

    def test_two_lambertian_spheres(self):
        from src.pathtracer.scene.manager import MaterialType
        from src.pathtracer.scene.presets import create_default_scene

        scene, camera = create_default_scene()

        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 2
        assert all(m.material_type == MaterialType.LAMBERTIAN for m in scene.materials)
        assert scene.spheres[0].center == (0.0, -100.5, -1.0)
        assert scene.spheres[0].radius == 100.0
        assert scene.spheres[1].center == (0.0, 0.0, -1.0)
        assert scene.spheres[1].radius == 0.5

    def test_default_camera(self):
        from src.pathtracer.scene.presets import create_default_scene

        _, camera = create_default_scene()

        assert camera.lookfrom == (0.0, 0.0, 1.0)
        assert camera.lookat == (0.0, 0.0, -1.0)
        assert camera.vfov == 90.0
        assert camera.image_width == 800
        assert camera.image_height == 450
        camera.validate()

    def test_params_override_budgets(self):
        from src.pathtracer.scene.presets import SceneParams, create_default_scene

        params = SceneParams(image_width=64, aspect_ratio=2.0, samples_per_pixel=3, max_depth=4)
        _, camera = create_default_scene(params)

        assert (camera.image_width, camera.image_height) == (64, 32)
        assert camera.samples_per_pixel == 3
        assert camera.max_depth == 4


class TestShowcaseScene:
    """Tests for create_material_showcase_scene."""

    def test_contains_every_material_kind(self):
        from src.pathtracer.scene.manager import MaterialType
        from src.pathtracer.scene.presets import create_material_showcase_scene

        scene, _ = create_material_showcase_scene()

        kinds = {m.material_type for m in scene.materials}
        assert kinds == {MaterialType.LAMBERTIAN, MaterialType.METAL, MaterialType.DIELECTRIC}
        assert scene.get_sphere_count() == 5

    def test_hollow_glass_uses_reciprocal_index(self):
        from src.pathtracer.scene.manager import MaterialType
        from src.pathtracer.scene.presets import create_material_showcase_scene

        scene, _ = create_material_showcase_scene()

        iors = sorted(
            m.params["ior"] for m in scene.materials if m.material_type == MaterialType.DIELECTRIC
        )
        assert iors[0] == pytest.approx(1.0 / 1.5)
        assert iors[1] == pytest.approx(1.5)

    def test_renders(self):
        import numpy as np

        from src.pathtracer.core.renderer import render
        from src.pathtracer.scene.presets import SceneParams, create_material_showcase_scene

        scene, camera = create_material_showcase_scene(SceneParams(image_width=16))
        pixels, progress = render(scene, camera, 16, 9, 2, 5, thread_count=3)

        assert progress.rows_done == 9
        assert np.all(pixels.reshape(9, 16, 4)[..., 3] == 255)


class TestPresetRegistry:
    """Tests for the PRESETS lookup."""

    @pytest.mark.parametrize("name", ["default", "showcase"])
    def test_factories_return_scene_and_camera(self, name):
        from src.pathtracer.camera.pinhole import PinholeCamera
        from src.pathtracer.scene.manager import SceneManager
        from src.pathtracer.scene.presets import PRESETS

        scene, camera = PRESETS[name]()
        assert isinstance(scene, SceneManager)
        assert isinstance(camera, PinholeCamera)
