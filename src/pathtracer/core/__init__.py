"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector utilities and random sampling helpers
    integrator: Depth-bounded color integrator and the render target
    renderer: Row-by-row rendering loop with progress reporting

The integrator walks each camera path iteratively, multiplying the
attenuation of every bounce into a throughput and stopping on absorption,
escape to the background, or exhaustion of the depth budget.

All compute-intensive operations use Taichi kernels for parallel execution.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and renderer are NOT imported here because they declare
# Taichi fields at import time. Import them directly once Taichi is initialized:
#   from pathtracer.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
