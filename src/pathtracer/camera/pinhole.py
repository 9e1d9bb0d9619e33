"""Pinhole camera model for primary ray generation.

The camera builds an orthonormal basis (u, v, w) from look-at parameters:
- w: points from lookat toward lookfrom (opposite the view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits at unit distance in front of the eye. Pixel (0, 0) is
the top-left pixel; rows increase downward. ``get_ray`` jitters each ray
uniformly within its pixel footprint for anti-aliasing. There is no lens,
so nothing is ever out of focus.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.pinhole import PinholeCamera, setup_camera
    >>> camera = PinholeCamera(
    ...     lookfrom=(0.0, 0.0, 1.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=90.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_width=800,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.pathtracer.core.locking import kernel_lock
from src.pathtracer.core.ray import make_ray
from src.pathtracer.core.rng import random_f32, seed_state
from src.pathtracer.core.settings import ConfigurationError

# Smallest |vup x w| accepted before the basis is considered degenerate
_PARALLEL_TOLERANCE = 1e-8

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Eye position in world space.
        lookat: Point the camera looks at.
        vup: Approximate up direction.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Image width divided by image height.
        image_width: Output width in pixels.
        samples_per_pixel: Jittered rays traced per pixel.
        max_depth: Maximum number of bounces per path.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    image_width: int = 400
    samples_per_pixel: int = 10
    max_depth: int = 10

    @property
    def image_height(self) -> int:
        """Output height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))

    def validate(self) -> None:
        """Reject unusable camera parameters.

        Raises:
            ConfigurationError: If a size, count or angle is out of range,
                or the look-at parameters cannot form a basis.
        """
        if self.aspect_ratio <= 0.0:
            raise ConfigurationError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width <= 0:
            raise ConfigurationError(f"image_width must be positive, got {self.image_width}")
        if not 0.0 < self.vfov < 180.0:
            raise ConfigurationError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.samples_per_pixel <= 0:
            raise ConfigurationError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must be non-negative, got {self.max_depth}")

        view = np.subtract(self.lookfrom, self.lookat).astype(np.float64)
        if np.linalg.norm(view) == 0.0:
            raise ConfigurationError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(np.asarray(self.vup, dtype=np.float64), view)) < (
            _PARALLEL_TOLERANCE * np.linalg.norm(view)
        ):
            raise ConfigurationError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

# Result slots for Python-side ray queries
_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup
# =============================================================================


def setup_camera(
    camera: PinholeCamera,
    image_width: int | None = None,
    image_height: int | None = None,
) -> None:
    """Derive the viewport geometry and store it for kernels.

    Args:
        camera: Camera configuration.
        image_width: Resolution override; defaults to ``camera.image_width``.
        image_height: Resolution override; defaults to ``camera.image_height``.

    Raises:
        ConfigurationError: If the camera or the resolution is invalid.
    """
    camera.validate()
    width = camera.image_width if image_width is None else image_width
    height = camera.image_height if image_height is None else image_height
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Image dimensions must be positive, got {width}x{height}")

    lookfrom = np.asarray(camera.lookfrom, dtype=np.float64)
    lookat = np.asarray(camera.lookat, dtype=np.float64)
    vup = np.asarray(camera.vup, dtype=np.float64)

    # Square pixels: the viewport follows the actual pixel grid, which
    # differs from aspect_ratio when the height was rounded or overridden
    theta = math.radians(camera.vfov)
    viewport_height = 2.0 * math.tan(theta / 2.0)
    viewport_width = viewport_height * (width / height)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Viewport edges; v points down the image so row 0 is the top row
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / width
    pixel_delta_v = viewport_v / height

    viewport_upper_left = lookfrom - w - viewport_u / 2.0 - viewport_v / 2.0
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    with kernel_lock:
        _camera_center[None] = lookfrom.tolist()
        _pixel00_loc[None] = pixel00_loc.tolist()
        _pixel_delta_u[None] = pixel_delta_u.tolist()
        _pixel_delta_v[None] = pixel_delta_v.tolist()
        _camera_u[None] = u.tolist()
        _camera_v[None] = v.tolist()
        _camera_w[None] = w.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(i: ti.i32, j: ti.i32, state: ti.u32):
    """Generate a jittered primary ray through pixel (i, j).

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).
        state: Random stream state.

    Returns:
        A tuple of (ray, new_state). The direction is not normalized.
    """
    offset_x, rng = random_f32(state)
    offset_y, rng2 = random_f32(rng)

    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(i, ti.f32) + offset_x - 0.5) * _pixel_delta_u[None]
        + (ti.cast(j, ti.f32) + offset_y - 0.5) * _pixel_delta_v[None]
    )
    origin = _camera_center[None]
    return make_ray(origin, pixel_sample - origin), rng2


@ti.kernel
def _sample_ray_kernel(i: ti.i32, j: ti.i32, seed: ti.u32):
    ray, _ = get_ray(i, j, seed_state(seed, ti.cast(0, ti.u32)))
    _query_origin[None] = ray.origin
    _query_direction[None] = ray.direction


def sample_ray(i: int, j: int, seed: int = 0) -> tuple[np.ndarray, np.ndarray]:
    """Generate one jittered ray from Python.

    Args:
        i: Pixel column.
        j: Pixel row.
        seed: Seed of the random stream used for the jitter.

    Returns:
        Tuple of (origin, direction) as float32 arrays.
    """
    with kernel_lock:
        _sample_ray_kernel(i, j, seed)
        return _query_origin.to_numpy(), _query_direction.to_numpy()


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Current camera state for debugging.

    Returns:
        Dictionary with center, pixel00_loc, pixel_delta_u, pixel_delta_v,
        u, v and w.
    """
    fields = {
        "center": _camera_center,
        "pixel00_loc": _pixel00_loc,
        "pixel_delta_u": _pixel_delta_u,
        "pixel_delta_v": _pixel_delta_v,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
    }
    info = {}
    with kernel_lock:
        values = {name: value_field[None] for name, value_field in fields.items()}
    for name, value in values.items():
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
