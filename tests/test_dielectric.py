"""Unit tests for the Dielectric material module.

Tests cover:
- Refraction at normal incidence
- Total internal reflection
- Schlick reflectance bounds
- White attenuation (never absorbs)
- Registry operations and IOR validation
"""

import numpy as np
import pytest
import taichi as ti


class TestDielectricScatter:
    """Tests for scatter_dielectric."""

    def test_total_internal_reflection(self):
        """Leaving glass at a steep angle always reflects."""
        from src.pathtracer.core.rng import seed_state
        from src.pathtracer.materials.dielectric import scatter_dielectric, vec3

        n = 256
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                # 60 degrees from the normal, inside the glass (back face)
                d, _, _ = scatter_dielectric(
                    1.5,
                    vec3(0.866, 0.5, 0.0),
                    vec3(0.0, -1.0, 0.0),
                    0,
                    seed_state(ti.cast(8, ti.u32), ti.cast(i, ti.u32)),
                )
                directions[i] = d

        test_kernel()
        dirs = directions.to_numpy()
        assert np.allclose(dirs, [0.866, -0.5, 0.0], atol=1e-3)

    def test_normal_incidence_mostly_refracts(self):
        """Head-on, glass reflects ~4% of rays and transmits the rest unbent."""
        from src.pathtracer.core.rng import seed_state
        from src.pathtracer.materials.dielectric import scatter_dielectric, vec3

        n = 4096
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                d, att, _ = scatter_dielectric(
                    1.5,
                    vec3(0.0, -3.0, 0.0),
                    vec3(0.0, 1.0, 0.0),
                    1,
                    seed_state(ti.cast(6, ti.u32), ti.cast(i, ti.u32)),
                )
                directions[i] = d
                attenuations[i] = att

        test_kernel()
        dirs = directions.to_numpy()
        reflected = dirs[:, 1] > 0.0
        assert 0.01 < reflected.mean() < 0.08
        assert np.allclose(dirs[~reflected], [0.0, -1.0, 0.0], atol=1e-5)
        assert np.allclose(attenuations.to_numpy(), 1.0)

    def test_refraction_ratio(self):
        from src.pathtracer.materials.dielectric import refraction_ratio_for

        ratios = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            ratios[0] = refraction_ratio_for(1.5, 1)
            ratios[1] = refraction_ratio_for(1.5, 0)

        test_kernel()
        assert abs(ratios[0] - 1.0 / 1.5) < 1e-6
        assert abs(ratios[1] - 1.5) < 1e-6


class TestSchlickReflectance:
    """Schlick's approximation stays within [0, 1]."""

    def test_bounds_over_grid(self):
        from src.pathtracer.core.ray import reflectance

        cosines = np.linspace(0.0, 1.0, 33)
        ratios = np.array([0.05, 0.25, 1.0 / 1.5, 1.0, 1.33, 1.5, 2.4, 10.0])
        nc, nr = len(cosines), len(ratios)

        cos_field = ti.field(dtype=ti.f32, shape=nc)
        ratio_field = ti.field(dtype=ti.f32, shape=nr)
        out = ti.field(dtype=ti.f32, shape=(nc, nr))
        cos_field.from_numpy(cosines.astype(np.float32))
        ratio_field.from_numpy(ratios.astype(np.float32))

        @ti.kernel
        def test_kernel():
            for i, j in ti.ndrange(nc, nr):
                out[i, j] = reflectance(cos_field[i], ratio_field[j])

        test_kernel()
        values = out.to_numpy()
        assert np.all(values >= 0.0)
        assert np.all(values <= 1.0 + 1e-6)


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_and_count(self):
        from src.pathtracer.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        assert add_dielectric_material(1.5) == 0
        assert add_dielectric_material(1.0 / 1.5) == 1
        assert get_dielectric_material_count() == 2

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_non_positive_ior_rejected(self, ior):
        from src.pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="positive"):
            add_dielectric_material(ior)
