"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit records and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) evaluated inside the
render kernels. Every routine follows the pattern:
    record = hit_shape(ray, shape, ray_t)
"""

from .sphere import HitRecord, Sphere, face_normal, hit_sphere, make_miss_record

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "face_normal",
]
