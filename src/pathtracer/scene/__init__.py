"""Scene module for scene storage, materials and preset scenes.

Components:
    intersection: Sphere storage and nearest-hit queries
    manager: Material arena and scene construction API
    presets: Ready-made scenes with matching cameras

Scene data lives in Taichi fields (Structure of Arrays) so kernels can
read it directly; spheres refer to materials by integer handle.
"""

from .intersection import (
    MAX_SPHERES,
    HitInfo,
    add_sphere,
    clear_scene,
    find_nearest_hit,
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
    SceneParams,
    create_default_scene,
    create_material_showcase_scene,
)

__all__ = [
    # Intersection
    "MAX_SPHERES",
    "HitInfo",
    "add_sphere",
    "clear_scene",
    "find_nearest_hit",
    "get_sphere_count",
    "intersect_scene",
    # Manager
    "MAX_MATERIALS",
    "MaterialInfo",
    "MaterialType",
    "SceneConfig",
    "SceneManager",
    "SphereInfo",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "PRESETS",
    "SceneParams",
    "create_default_scene",
    "create_material_showcase_scene",
]
