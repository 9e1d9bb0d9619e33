"""Preview module for looking at rendered framebuffers.

Components:
    display: Framebuffer reshaping, progress text and Matplotlib preview
    interactive: Taichi GGUI window showing a render as it progresses
"""

from src.pathtracer.preview.display import (
    format_progress,
    framebuffer_to_image,
    image_to_float,
    show_framebuffer,
)
from src.pathtracer.preview.interactive import RenderWindow

__all__ = [
    "framebuffer_to_image",
    "image_to_float",
    "format_progress",
    "show_framebuffer",
    "RenderWindow",
]
