"""Material arena and scene construction API.

Materials live in per-type registries (Lambertian, Metal, Dielectric).
The scene manager layers a single handle space over those registries:
every material gets a small integer handle, and two Taichi fields map a
handle to its (material_type, type_local_index) pair so kernels can
dispatch to the right scattering function. Any number of spheres may
share one handle.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> ground = scene.make_lambertian((0.8, 0.8, 0.0))
    >>> scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.locking import kernel_lock
from src.pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from src.pathtracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from src.pathtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from src.pathtracer.scene import intersection
from src.pathtracer.scene.intersection import clear_scene

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]
Point = tuple[float, float, float]


class MaterialType(IntEnum):
    """Closed set of material variants known to the integrator."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of material handles across all types
MAX_MATERIALS = 768

# material_types[h] is the MaterialType of handle h
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[h] is the index of handle h in its type registry
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Forget every material handle."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Material type of a handle, or -1 for an unknown handle."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Index of a handle inside its type registry, or -1 for an unknown handle."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Host-side record of a registered material.

    Attributes:
        material_id: The handle returned to callers.
        material_type: Which registry holds the parameters.
        type_index: Index within that registry.
        params: The parameters exactly as supplied.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of a sphere in the scene."""

    sphere_index: int
    center: Point
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data description of a scene.

    Attributes:
        materials: One dict per material, in handle order. Each has a
            ``type`` key ("lambertian", "metal" or "dielectric") plus that
            type's parameters.
        spheres: One dict per sphere with ``center``, ``radius`` and
            ``material_id`` keys.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    values = tuple(float(v) for v in values)
    if len(values) != 3:
        raise ValueError(f"{name} must have exactly 3 components, got {len(values)}")
    return values  # type: ignore[return-value]


class SceneManager:
    """Builds a scene of spheres and shared materials.

    Creating a SceneManager (or calling ``clear``) resets the global
    sphere storage, every material registry and the handle table, so only
    one scene is live at a time. The renderer calls ``load`` before each
    render, which makes the rendered scene live again.

    Attributes:
        materials: MaterialInfo for every handle, indexed by handle.
        spheres: SphereInfo for every sphere, indexed by sphere index.

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.make_dielectric(1.5)
        >>> scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        >>> scene.add_sphere((-1.0, 0.0, -1.0), 0.4, scene.make_dielectric(1.0 / 1.5))
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        with kernel_lock:
            clear_scene()
            clear_lambertian_materials()
            clear_metal_materials()
            clear_dielectric_materials()
            _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Remove all spheres and materials."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register(
        self, material_type: MaterialType, type_index: int, params: dict[str, Any]
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def make_lambertian(self, albedo: Color) -> int:
        """Register a diffuse material.

        Args:
            albedo: Reflectance per channel, each in [0, 1].

        Returns:
            The material handle.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            RuntimeError: If a material capacity is exceeded.
        """
        albedo = _as_triple(albedo, "albedo")
        with kernel_lock:
            type_index = add_lambertian_material(albedo)
            return self._register(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def make_metal(self, albedo: Color, fuzz: float = 0.0) -> int:
        """Register a specular material.

        Args:
            albedo: Reflectance per channel, each in [0, 1].
            fuzz: Perturbation radius in [0, 1]. 0 is a perfect mirror.

        Returns:
            The material handle.

        Raises:
            ValueError: If albedo or fuzz is outside [0, 1].
            RuntimeError: If a material capacity is exceeded.
        """
        albedo = _as_triple(albedo, "albedo")
        with kernel_lock:
            type_index = add_metal_material(albedo, fuzz)
            return self._register(
                MaterialType.METAL, type_index, {"albedo": albedo, "fuzz": float(fuzz)}
            )

    def make_dielectric(self, refractive_index: float = 1.5) -> int:
        """Register a glass-like material.

        Args:
            refractive_index: Index of refraction relative to the
                surrounding medium. Must be positive.

        Returns:
            The material handle.

        Raises:
            ValueError: If refractive_index is not positive.
            RuntimeError: If a material capacity is exceeded.
        """
        with kernel_lock:
            type_index = add_dielectric_material(refractive_index)
            return self._register(
                MaterialType.DIELECTRIC, type_index, {"ior": float(refractive_index)}
            )

    def get_material_count(self) -> int:
        """Number of registered material handles."""
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Look up a handle, returning None when it is unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(self, center: Point, radius: float, material: int) -> int:
        """Add a sphere that uses an existing material handle.

        Args:
            center: Sphere centre as (x, y, z).
            radius: Sphere radius, must be positive.
            material: A handle returned by one of the ``make_*`` methods.

        Returns:
            The index of the sphere.

        Raises:
            ValueError: If the radius is not positive or the handle is unknown.
            RuntimeError: If the sphere capacity is exceeded.
        """
        center = _as_triple(center, "center")
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        if self.get_material_info(material) is None:
            raise ValueError(f"Invalid material handle: {material}")

        with kernel_lock:
            sphere_index = intersection.add_sphere(vec3(*center), float(radius), material)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material_id=material,
            )
        )
        return sphere_index

    def get_sphere_count(self) -> int:
        """Number of spheres in the scene."""
        return len(self.spheres)

    def load(self) -> None:
        """Upload this scene into the fields the render kernels read.

        Only one scene is live at a time, and constructing another
        SceneManager replaces it. Loading re-registers the recorded
        materials and spheres in order, so handles and sphere indices are
        unchanged.
        """
        self.from_config(self.to_config())

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export materials and spheres as plain data."""
        config = SceneConfig()
        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by ``config``.

        Materials are registered in list order, so the handles in the
        sphere entries refer to positions in ``config.materials``.

        Raises:
            ValueError: If a material type is unknown or any value is invalid.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                self.make_lambertian(mat_config.get("albedo", (0.5, 0.5, 0.5)))
            elif mat_type == "metal":
                self.make_metal(
                    mat_config.get("albedo", (0.8, 0.8, 0.8)),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == "dielectric":
                self.make_dielectric(mat_config.get("ior", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat_type!r}")

        for sphere_config in config.spheres:
            self.add_sphere(
                sphere_config.get("center", (0.0, 0.0, 0.0)),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a JSON-compatible dictionary."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        self.from_config(
            SceneConfig(
                materials=list(data.get("materials", [])),
                spheres=list(data.get("spheres", [])),
            )
        )
