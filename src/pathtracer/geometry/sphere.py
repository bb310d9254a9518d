"""Sphere primitive with ray-sphere intersection.

This module provides a Sphere dataclass, the HitRecord shared by every
intersection routine, and the ray-sphere intersection function. The
intersection uses the half-b form of the quadratic formula and tries the
nearer root before the farther one, so a ray that starts inside a sphere
reports the far wall.

A negative radius describes an inverted sphere: the computed outward normal
points toward the center, which lets a negative-radius sphere nested inside a
glass sphere act as a hollow bubble.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values invert the normals.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
            A record with hit == 0 stands for "no intersection"; its other
            fields are meaningless.
        t: The ray parameter at the intersection.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal, always facing against the
            incoming ray (flipped for back-face hits).
        front_face: 1 if the ray arrived from the side the outward normal
            points toward, 0 if it hit the surface from behind.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a surface normal against the incoming ray.

    A hit is front-facing when the ray direction has a non-positive dot
    product with the outward normal. Grazing rays (dot == 0) count as
    front-facing.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal) where normal opposes the ray.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) > 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    Expanding and rearranging gives the quadratic equation:
        a*t^2 + 2*h*t + c = 0

    where:
        oc = origin - center
        a = dot(direction, direction)
        h = dot(oc, direction)  (half of the traditional b)
        c = dot(oc, oc) - radius^2

    The roots are (-h - sqrt(h^2 - a*c)) / a and (-h + sqrt(h^2 - a*c)) / a.
    The smaller root is tried first, then the larger; the first one inside
    the open interval (t_min, t_max) is the hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Lower bound of acceptable t values (excludes self-intersection).
        t_max: Upper bound of acceptable t values (closest hit so far).

    Returns:
        A HitRecord; check its hit field to see if an intersection occurred.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root that lies in the acceptable range
        t = (-h - sqrt_d) / a
        valid = (t > t_min) and (t < t_max)
        if not valid:
            t = (-h + sqrt_d) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = set_face_normal(ray_direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
