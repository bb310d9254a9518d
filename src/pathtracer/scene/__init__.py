"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Sphere storage and closest-hit queries over the scene
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes and JSON scene files

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for sphere data
    - A unified material ID space mapped onto per-type registries
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    PRESETS,
    create_preset,
    empty,
    load_scene_file,
    random_spheres,
    three_spheres,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "PRESETS",
    "create_preset",
    "three_spheres",
    "random_spheres",
    "empty",
    "load_scene_file",
]
