"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Open-interval handling of t_min and t_max
- Negative radius (inverted normals)
"""

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.001, t_max=1000.0):
    """Run hit_sphere in a kernel and return the record as a dict."""
    from pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        record = hit_sphere(o, d, Sphere(center=c, radius=r), lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None]),
        "normal": tuple(normal[None]),
        "front_face": front_face[None],
    }


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        from pathtracer.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert abs(c[0] - 1.0) < 1e-6
        assert abs(c[1] - 2.0) < 1e-6
        assert abs(c[2] - 3.0) < 1e-6
        assert abs(radius_result[None] - 0.5) < 1e-6

    def test_set_face_normal(self):
        """Normals are flipped to oppose the ray; grazing counts as front."""
        from pathtracer.geometry.sphere import set_face_normal, vec3

        front = ti.field(dtype=ti.i32, shape=3)
        normals = ti.Vector.field(3, dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 0.0, 1.0)
            f0, n0 = set_face_normal(vec3(0.0, 0.0, -1.0), n)
            f1, n1 = set_face_normal(vec3(0.0, 0.0, 1.0), n)
            f2, n2 = set_face_normal(vec3(1.0, 0.0, 0.0), n)
            front[0] = f0
            front[1] = f1
            front[2] = f2
            normals[0] = n0
            normals[1] = n1
            normals[2] = n2

        test_kernel()
        assert front[0] == 1
        assert abs(normals[0][2] - 1.0) < 1e-6
        assert front[1] == 0
        assert abs(normals[1][2] + 1.0) < 1e-6
        assert front[2] == 1
        assert abs(normals[2][2] - 1.0) < 1e-6


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit(self):
        """Ray hitting sphere head-on from outside."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5
        assert abs(rec["normal"][2] - 1.0) < 1e-5
        assert rec["front_face"] == 1

    def test_unit_sphere_in_front_of_origin(self):
        """The canonical camera ray hits the sphere at (0, 0, -1) at t = 0.5."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 0.5) < 1e-5
        assert abs(rec["point"][2] + 0.5) < 1e-5
        assert abs(rec["normal"][2] - 1.0) < 1e-5

    def test_miss(self):
        rec = _hit((0.0, 5.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_sphere_behind_ray(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_inside_sphere(self):
        """From inside, the far root is taken and the hit is a back face."""
        rec = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert rec["front_face"] == 0
        # Normal is flipped to face the ray
        assert abs(rec["normal"][0] + 1.0) < 1e-5

    def test_unnormalized_direction(self):
        """t is measured in units of the given direction."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5

    def test_oblique_hit_normal_is_unit(self):
        rec = _hit((0.3, 0.4, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        n = rec["normal"]
        assert abs(n[0] ** 2 + n[1] ** 2 + n[2] ** 2 - 1.0) < 1e-5
        assert abs(n[0] - 0.3) < 1e-5
        assert abs(n[1] - 0.4) < 1e-5


class TestIntervalBounds:
    """Tests for the open (t_min, t_max) acceptance interval."""

    def test_near_root_below_t_min_uses_far_root(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-5
        assert rec["front_face"] == 0

    def test_both_roots_outside_interval(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)
        assert rec["hit"] == 0

    def test_root_equal_to_t_max_is_rejected(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=4.0)
        assert rec["hit"] == 0

    def test_root_equal_to_t_min_is_rejected(self):
        """The near root at exactly t_min is skipped in favour of the far root."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-5


class TestNegativeRadius:
    """A negative radius inverts the outward normal (hollow bubble)."""

    def test_negative_radius_flips_front_face(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), -1.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        # Outward normal points inward, so the ray sees a back face
        assert rec["front_face"] == 0
        # The stored normal still opposes the ray
        assert abs(rec["normal"][2] - 1.0) < 1e-5


class TestNumericalRange:
    """Intersections far from the origin stay accurate in single precision."""

    @pytest.mark.parametrize("radius", [100.0, 1000.0])
    def test_large_sphere_far_away(self, radius):
        rec = _hit(
            (0.0, 0.0, 0.0), (0.0, -1.0, 0.0), (0.0, -radius - 0.5, 0.0), radius
        )
        assert rec["hit"] == 1
        assert abs(rec["t"] - 0.5) < 1e-3
