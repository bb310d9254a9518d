"""Geometry module for shape primitives.

This module provides the sphere primitive and its intersection algorithm:

Components:
    sphere: Sphere primitive, HitRecord, and ray-sphere intersection

All intersection routines are implemented as Taichi functions (@ti.func)
so that every pixel's rays can be tested in parallel. A primitive reports
its hit through a HitRecord whose hit flag doubles as the optional result:

    record = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
    if record.hit == 1: ...
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "set_face_normal",
]
