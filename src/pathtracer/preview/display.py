"""Matplotlib-based preview of rendered framebuffers.

Framebuffers are flat, row-major RGBA8 buffers (row 0 at the top), which
is exactly the layout Matplotlib's ``imshow`` expects once reshaped.

Example:
    >>> from src.pathtracer.core.renderer import render
    >>> from src.pathtracer.preview.display import show_framebuffer
    >>>
    >>> pixels, progress = render(scene, camera, 400, 225, 10, 10, thread_count=4)
    >>> show_framebuffer(pixels, 400, 225)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.pathtracer.core.renderer import RenderProgress


def framebuffer_to_image(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Reshape a flat RGBA8 buffer into an (height, width, 4) image.

    Args:
        buffer: ``width * height * 4`` bytes, row-major.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A uint8 array of shape (height, width, 4).

    Raises:
        ValueError: If the buffer size does not match the dimensions.
    """
    data = np.asarray(buffer, dtype=np.uint8)
    expected = width * height * 4
    if data.size != expected:
        raise ValueError(
            f"Buffer holds {data.size} bytes, expected {expected} for {width}x{height} RGBA"
        )
    return data.reshape(height, width, 4)


def image_to_float(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.float32]:
    """Convert an RGBA8 image to RGB floats in [0, 1]."""
    return image[..., :3].astype(np.float32) / 255.0


def format_progress(progress: RenderProgress | float) -> str:
    """Progress text for a status line or window title.

    Args:
        progress: A RenderProgress, or a completed fraction in [0, 1].

    Returns:
        Text such as "Rendering... 42.0%", or "Done" once complete.
    """
    fraction = float(progress) if isinstance(progress, (int, float)) else progress.fraction
    if fraction >= 1.0:
        return "Done"
    return f"Rendering... {100.0 * fraction:.1f}%"


def show_framebuffer(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
    *,
    title: str | None = None,
    figsize: tuple[float, float] | None = None,
    block: bool = True,
) -> None:
    """Display a framebuffer in a Matplotlib figure.

    Args:
        buffer: Flat RGBA8 buffer.
        width: Image width in pixels.
        height: Image height in pixels.
        title: Figure title (default shows the resolution).
        figsize: Figure size in inches; defaults to 8 inches wide.
        block: Whether to block until the figure is closed.
    """
    import matplotlib.pyplot as plt

    image = framebuffer_to_image(buffer, width, height)
    if figsize is None:
        figsize = (8.0, 8.0 * height / width)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image, interpolation="nearest")
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
