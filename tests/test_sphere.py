"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting a sphere from outside (front face)
- Ray missing a sphere
- Ray starting inside a sphere (back face)
- Interval bounds rejecting hits
- Outward, unit-length normals over the whole surface
"""

import math

import numpy as np
import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.001, t_max=math.inf):
    """Run hit_sphere in a kernel and return the record fields as a dict."""
    from src.pathtracer.core.interval import Interval
    from src.pathtracer.core.ray import Ray
    from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        record = hit_sphere(
            Ray(origin=o, direction=d),
            Sphere(center=c, radius=r, material_id=7),
            Interval(lower=lo, upper=hi),
        )
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face
        material_id[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": point.to_numpy(),
        "normal": normal.to_numpy(),
        "front_face": front_face[None],
        "material_id": material_id[None],
    }


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        """A ray aimed at the centre hits at distance - radius."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        assert np.allclose(rec["point"], [0.0, 0.0, 1.0], atol=1e-5)
        assert np.allclose(rec["normal"], [0.0, 0.0, 1.0], atol=1e-5)
        assert rec["front_face"] == 1
        assert rec["material_id"] == 7

    def test_distance_matches_center_distance_minus_radius(self):
        """Holds for arbitrary positions and unnormalized directions."""
        origin = np.array([1.0, 2.0, 3.0])
        center = np.array([-2.0, 0.5, -4.0])
        radius = 0.75
        to_center = center - origin
        rec = _hit(tuple(origin), tuple(to_center), tuple(center), radius)

        assert rec["hit"] == 1
        distance = rec["t"] * np.linalg.norm(to_center)
        assert abs(distance - (np.linalg.norm(to_center) - radius)) < 1e-4

    def test_miss(self):
        """A ray passing wide of the sphere reports no hit."""
        rec = _hit((0.0, 3.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0
        assert rec["material_id"] == -1

    def test_sphere_behind_ray(self):
        """Both roots negative: no hit."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_inside_hit_is_back_face(self):
        """From the centre the far root is used and the normal is flipped."""
        rec = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert rec["front_face"] == 0
        assert np.allclose(rec["normal"], [-1.0, 0.0, 0.0], atol=1e-5)

    def test_interval_rejects_far_hit(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)
        assert rec["hit"] == 0

    def test_interval_lower_bound_skips_near_root(self):
        """With the near root excluded the far side is reported."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-5
        assert rec["front_face"] == 0


class TestSphereNormals:
    """The outward normal at any surface point is unit length and points away from the centre."""

    def test_normals_over_surface(self):
        from src.pathtracer.core.interval import Interval
        from src.pathtracer.core.ray import Ray
        from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        rng = np.random.default_rng(0)
        targets = rng.normal(size=(256, 3))
        targets /= np.linalg.norm(targets, axis=1, keepdims=True)
        n = len(targets)

        target_field = ti.Vector.field(3, dtype=ti.f32, shape=n)
        target_field.from_numpy(targets.astype(np.float32))
        normals = ti.Vector.field(3, dtype=ti.f32, shape=n)
        points = ti.Vector.field(3, dtype=ti.f32, shape=n)
        hits = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=1.0, material_id=0)
            for i in range(n):
                # Shoot from outside straight back at the surface point
                origin = 3.0 * target_field[i]
                rec = hit_sphere(
                    Ray(origin=origin, direction=-target_field[i]),
                    sphere,
                    Interval(lower=0.001, upper=1e30),
                )
                hits[i] = rec.hit
                normals[i] = rec.normal
                points[i] = rec.point

        test_kernel()
        assert np.all(hits.to_numpy() == 1)
        normal_arr = normals.to_numpy()
        point_arr = points.to_numpy()
        assert np.allclose(np.linalg.norm(normal_arr, axis=1), 1.0, atol=1e-5)
        assert np.all(np.sum(normal_arr * point_arr, axis=1) > 0.0)
