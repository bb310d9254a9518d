"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Material type tracking and kernel-side lookup
- Sphere addition with materials and shared materials
- Convenience methods (add_*_sphere)
- Scene serialization (to_dict, from_dict)
- Scene clearing
"""

import json

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from pathtracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_ids_are_unified_across_types(self, fresh_scene):
        assert fresh_scene.add_lambertian_material((0.8, 0.3, 0.3)) == 0
        assert fresh_scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.3) == 1
        assert fresh_scene.add_dielectric_material(1.5) == 2
        assert fresh_scene.add_lambertian_material((0.1, 0.1, 0.1)) == 3
        assert fresh_scene.get_material_count() == 4

    def test_type_local_indices(self, fresh_scene):
        from pathtracer.scene.manager import MaterialType

        fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        fresh_scene.add_metal_material((0.5, 0.5, 0.5))
        second_lambertian = fresh_scene.add_lambertian_material((0.2, 0.2, 0.2))

        info = fresh_scene.get_material_info(second_lambertian)
        assert info.material_type == MaterialType.LAMBERTIAN
        assert info.type_index == 1
        assert info.params == {"albedo": (0.2, 0.2, 0.2)}

    def test_invalid_parameters_raise(self, fresh_scene):
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material((1.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_metal_material((0.5, 0.5, 0.5), fuzz=2.0)
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(0.0)
        # Failed registrations do not consume IDs
        assert fresh_scene.get_material_count() == 0

    def test_unknown_material_lookups(self, fresh_scene):
        assert fresh_scene.get_material_info(0) is None
        assert fresh_scene.get_material_type_python(-1) is None


class TestKernelSideLookup:
    """Tests for get_material_type and get_material_type_index in kernels."""

    def test_type_and_index_lookup(self, fresh_scene):
        from pathtracer.scene.manager import (
            MaterialType,
            get_material_type,
            get_material_type_index,
        )

        fresh_scene.add_dielectric_material(1.5)
        fresh_scene.add_metal_material((0.5, 0.5, 0.5))
        fresh_scene.add_metal_material((0.7, 0.7, 0.7))

        types = ti.field(dtype=ti.i32, shape=4)
        indices = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            for k in range(4):
                types[k] = get_material_type(k)
                indices[k] = get_material_type_index(k)

        test_kernel()
        assert types.to_numpy().tolist() == [
            int(MaterialType.DIELECTRIC),
            int(MaterialType.METAL),
            int(MaterialType.METAL),
            -1,
        ]
        assert indices.to_numpy().tolist() == [0, 0, 1, -1]


class TestSpheres:
    """Tests for sphere addition."""

    def test_add_sphere_with_material(self, fresh_scene):
        mat_id = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        assert fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, mat_id) == 0
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.spheres[0].material_id == mat_id

    def test_spheres_can_share_a_material(self, fresh_scene):
        glass = fresh_scene.add_dielectric_material(1.5)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)
        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.get_material_count() == 1

    @pytest.mark.parametrize("material_id", [-1, 0, 5])
    def test_invalid_material_id_raises(self, fresh_scene, material_id):
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.add_sphere((0.0, 0.0, 0.0), 1.0, material_id)

    def test_convenience_methods(self, fresh_scene):
        from pathtracer.scene.manager import MaterialType

        assert fresh_scene.add_lambertian_sphere((0, 0, 0), 1.0, (0.5, 0.5, 0.5)) == (0, 0)
        assert fresh_scene.add_metal_sphere((1, 0, 0), 1.0, (0.5, 0.5, 0.5), 0.2) == (1, 1)
        assert fresh_scene.add_dielectric_sphere((2, 0, 0), 1.0, 1.33) == (2, 2)
        assert fresh_scene.get_material_type_python(1) == MaterialType.METAL
        assert fresh_scene.get_material_type_python(2) == MaterialType.DIELECTRIC

    def test_intersection_reports_material(self, fresh_scene):
        from pathtracer.scene.intersection import intersect_scene, vec3

        fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        metal = fresh_scene.add_metal_material((0.5, 0.5, 0.5))
        fresh_scene.add_sphere((0.0, 0.0, -2.0), 0.5, metal)

        material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), 0.001, 1e10)
            material_id[None] = rec.material_id

        test_kernel()
        assert material_id[None] == metal


class TestSceneClearing:
    """Tests for clear() and for constructing a new manager."""

    def test_clear(self, fresh_scene):
        from pathtracer.materials import get_lambertian_material_count

        fresh_scene.add_lambertian_sphere((0, 0, 0), 1.0, (0.5, 0.5, 0.5))
        fresh_scene.clear()
        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_material_count() == 0
        assert get_lambertian_material_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []

    def test_new_manager_replaces_scene(self, fresh_scene):
        from pathtracer.scene.manager import SceneManager

        fresh_scene.add_lambertian_sphere((0, 0, 0), 1.0, (0.5, 0.5, 0.5))
        other = SceneManager()
        assert other.get_sphere_count() == 0


class TestSceneSerialization:
    """Tests for dictionary export and import."""

    def test_to_dict(self, fresh_scene):
        fresh_scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        fresh_scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), 1.0)

        data = fresh_scene.to_dict()
        assert data["materials"] == [
            {"type": "lambertian", "albedo": (0.8, 0.8, 0.0)},
            {"type": "metal", "albedo": (0.8, 0.6, 0.2), "fuzz": 1.0},
        ]
        assert data["spheres"][1] == {
            "center": [1.0, 0.0, -1.0],
            "radius": 0.5,
            "material_id": 1,
        }

    def test_json_roundtrip_rebuilds_scene(self, fresh_scene):
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.1, 0.2, 0.5))
        glass = fresh_scene.add_dielectric_material(1.5)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)

        data = json.loads(json.dumps(fresh_scene.to_dict()))
        fresh_scene.from_dict(data)

        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.spheres[2].radius == pytest.approx(-0.4)
        assert fresh_scene.spheres[2].material_id == glass

    def test_unknown_material_type_raises(self, fresh_scene):
        with pytest.raises(ValueError, match="Unknown material type"):
            fresh_scene.from_dict({"materials": [{"type": "plastic"}], "spheres": []})

    def test_capacity(self):
        from pathtracer.scene.manager import MAX_MATERIALS, SceneManager

        assert SceneManager.get_max_spheres() == 1024
        assert SceneManager.get_max_materials() == MAX_MATERIALS
