"""Render configuration and configuration errors.

Render budgets (resolution, samples, depth, worker count, seed) are carried
in a RenderSettings dataclass and validated before any worker thread is
spawned. Invalid values are rejected with a ConfigurationError; they are
never silently clamped.

Example:
    >>> settings = RenderSettings(width=400, height=225, samples_per_pixel=10)
    >>> settings.validate()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.pathtracer.camera.pinhole import PinholeCamera

# Maximum supported image dimensions (the framebuffer is preallocated to
# this size so kernels never recompile for a new resolution)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 1152


class ConfigurationError(ValueError):
    """Raised when a render, camera or scene configuration is invalid."""


@dataclass
class RenderSettings:
    """Budgets and resources for one render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered camera rays per pixel.
        max_depth: Maximum number of bounces per path. 0 renders black.
        thread_count: Number of worker threads (row ranges).
        seed: Base seed from which per-worker seeds are derived.
    """

    width: int
    height: int
    samples_per_pixel: int = 10
    max_depth: int = 10
    thread_count: int = 1
    seed: int = 0

    def validate(self) -> None:
        """Check every field, raising on the first invalid one.

        Raises:
            ConfigurationError: If any setting is out of range.
        """
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ConfigurationError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise ConfigurationError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.thread_count <= 0:
            raise ConfigurationError(f"thread_count must be positive, got {self.thread_count}")
        if self.seed < 0:
            raise ConfigurationError(f"seed must be non-negative, got {self.seed}")

    @classmethod
    def from_camera(
        cls,
        camera: PinholeCamera,
        thread_count: int = 1,
        seed: int = 0,
    ) -> RenderSettings:
        """Build settings from the budgets carried by a camera.

        Args:
            camera: Camera configuration providing resolution, samples and depth.
            thread_count: Number of worker threads.
            seed: Base seed.

        Returns:
            The corresponding RenderSettings (not yet validated).
        """
        return cls(
            width=camera.image_width,
            height=camera.image_height,
            samples_per_pixel=camera.samples_per_pixel,
            max_depth=camera.max_depth,
            thread_count=thread_count,
            seed=seed,
        )
