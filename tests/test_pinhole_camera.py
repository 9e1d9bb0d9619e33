"""Unit tests for the pinhole camera.

Tests cover:
- Configuration validation (sizes, field of view, degenerate bases)
- Orthonormal basis and viewport geometry
- Jittered primary rays staying within their pixel
"""

import math

import numpy as np
import pytest


class TestCameraConfiguration:
    """Tests for PinholeCamera fields and validate()."""

    def test_image_height_from_aspect(self, default_camera):
        assert default_camera.image_height == 32

    def test_image_height_is_at_least_one(self):
        from src.pathtracer.camera.pinhole import PinholeCamera

        camera = PinholeCamera((0, 0, 0), (0, 0, -1), aspect_ratio=100.0, image_width=10)
        assert camera.image_height == 1

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"image_width": 0}, "image_width"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"vfov": 0.0}, "vfov"),
            ({"vfov": 180.0}, "vfov"),
            ({"samples_per_pixel": 0}, "samples_per_pixel"),
            ({"max_depth": -1}, "max_depth"),
            ({"lookat": (0.0, 0.0, 1.0)}, "different"),
            ({"vup": (0.0, 0.0, 1.0)}, "parallel"),
        ],
    )
    def test_invalid_configuration(self, default_camera, overrides, message):
        from dataclasses import replace

        from src.pathtracer.core.settings import ConfigurationError

        camera = replace(default_camera, **overrides)
        with pytest.raises(ConfigurationError, match=message):
            camera.validate()

    def test_max_depth_zero_is_valid(self, default_camera):
        from dataclasses import replace

        replace(default_camera, max_depth=0).validate()


class TestCameraGeometry:
    """Tests for setup_camera and get_camera_info."""

    def test_basis_is_orthonormal(self):
        from src.pathtracer.camera.pinhole import PinholeCamera, get_camera_info, setup_camera

        setup_camera(PinholeCamera((3.0, 2.0, 1.0), (0.0, 0.5, -2.0), (0.0, 1.0, 0.0), 40.0))
        info = get_camera_info()
        u, v, w = (np.array(info[k]) for k in ("u", "v", "w"))

        for vec in (u, v, w):
            assert abs(np.linalg.norm(vec) - 1.0) < 1e-5
        assert abs(np.dot(u, v)) < 1e-5
        assert abs(np.dot(u, w)) < 1e-5
        assert abs(np.dot(v, w)) < 1e-5
        # w points from lookat back toward the eye
        back = np.array([3.0, 1.5, 3.0])
        assert np.allclose(w, back / np.linalg.norm(back), atol=1e-5)

    def test_viewport_geometry(self, default_camera):
        """90 degree fov at unit distance spans 2 units vertically, top row first."""
        from src.pathtracer.camera.pinhole import get_camera_info, setup_camera

        setup_camera(default_camera)
        info = get_camera_info()
        width, height = default_camera.image_width, default_camera.image_height

        delta_u = np.array(info["pixel_delta_u"])
        delta_v = np.array(info["pixel_delta_v"])
        assert np.allclose(delta_u * width, [2.0 * math.tan(math.pi / 4) * 2.0, 0.0, 0.0])
        assert np.allclose(delta_v * height, [0.0, -2.0, 0.0], atol=1e-6)

        pixel00 = np.array(info["pixel00_loc"])
        expected = np.array([-2.0, 1.0, 0.0]) + 0.5 * (delta_u + delta_v)
        assert np.allclose(pixel00, expected, atol=1e-5)
        assert np.allclose(info["center"], [0.0, 0.0, 1.0])

    def test_resolution_override(self, default_camera):
        from src.pathtracer.camera.pinhole import get_camera_info, setup_camera

        setup_camera(default_camera, image_width=2, image_height=1)
        info = get_camera_info()
        assert np.allclose(info["pixel_delta_u"], [2.0, 0.0, 0.0], atol=1e-6)
        assert np.allclose(info["pixel_delta_v"], [0.0, -2.0, 0.0], atol=1e-6)

    def test_setup_rejects_invalid_camera(self, default_camera):
        from dataclasses import replace

        from src.pathtracer.camera.pinhole import setup_camera
        from src.pathtracer.core.settings import ConfigurationError

        with pytest.raises(ConfigurationError):
            setup_camera(replace(default_camera, vup=(0.0, 0.0, -1.0)))


class TestRayGeneration:
    """Tests for get_ray through sample_ray."""

    def test_rays_start_at_eye_and_land_in_pixel(self, default_camera):
        from src.pathtracer.camera.pinhole import get_camera_info, sample_ray, setup_camera

        setup_camera(default_camera)
        info = get_camera_info()
        pixel00 = np.array(info["pixel00_loc"])
        du = np.array(info["pixel_delta_u"])
        dv = np.array(info["pixel_delta_v"])

        i, j = 10, 5
        center = pixel00 + i * du + j * dv
        for seed in range(16):
            origin, direction = sample_ray(i, j, seed)
            assert np.allclose(origin, [0.0, 0.0, 1.0])
            # The ray reaches the viewport plane (z = 0) at t = 1
            target = origin + direction
            offset = target - center
            assert abs(offset[2]) < 1e-5
            assert abs(offset[0]) <= 0.5 * abs(du[0]) + 1e-5
            assert abs(offset[1]) <= 0.5 * abs(dv[1]) + 1e-5

    def test_jitter_depends_on_seed(self, default_camera):
        from src.pathtracer.camera.pinhole import sample_ray, setup_camera

        setup_camera(default_camera)
        _, d0 = sample_ray(3, 3, seed=1)
        _, d1 = sample_ray(3, 3, seed=2)
        _, d0_again = sample_ray(3, 3, seed=1)
        assert not np.allclose(d0, d1)
        assert np.array_equal(d0, d0_again)
