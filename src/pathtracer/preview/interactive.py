"""Interactive preview window for progressive renders.

RenderWindow shows the framebuffer of a running render in a Taichi GGUI
window, refreshing it every frame so rows appear as workers finish them.
Pressing ``r`` starts a fresh render once the current one is done.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.preview.interactive import RenderWindow
    >>> from src.pathtracer.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> window = RenderWindow(scene, camera, thread_count=8)
    >>> window.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.pathtracer.core.locking import kernel_lock
from src.pathtracer.core.renderer import RenderJob
from src.pathtracer.core.settings import RenderSettings
from src.pathtracer.preview.display import format_progress, image_to_float

if TYPE_CHECKING:
    from src.pathtracer.camera.pinhole import PinholeCamera
    from src.pathtracer.scene.manager import SceneManager


class RenderWindow:
    """A GGUI window that displays a render while it progresses.

    Attributes:
        width: Image (and window) width in pixels.
        height: Image (and window) height in pixels.
        job: The most recent render job, or None before the first render.
    """

    def __init__(
        self,
        scene: SceneManager,
        camera: PinholeCamera,
        *,
        thread_count: int = 4,
        seed: int = 0,
        title: str = "Path Tracer - Preview",
    ) -> None:
        camera.validate()
        self.scene = scene
        self.camera = camera
        self.width = camera.image_width
        self.height = camera.image_height
        self.thread_count = thread_count
        self.seed = seed
        self.job: RenderJob | None = None
        self._title = title
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Taichi fields are indexed (x, y) with y pointing up
        with kernel_lock:
            self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(self.width, self.height))

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @staticmethod
    def to_display_array(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.float32]:
        """Convert an (height, width, 4) RGBA8 image to the (width, height, 3) layout."""
        return np.ascontiguousarray(np.transpose(np.flipud(image_to_float(image)), (1, 0, 2)))

    def start_render(self) -> RenderJob:
        """Start a new render of the scene unless one is still running."""
        if self.job is not None and self.job.is_running:
            return self.job
        if self.job is not None:
            self.job.join()
        settings = RenderSettings.from_camera(self.camera, self.thread_count, self.seed)
        self.job = RenderJob(self.scene, self.camera, settings).start()
        return self.job

    def refresh(self) -> str:
        """Copy the current framebuffer into the display field.

        Returns:
            The progress text for the current job.
        """
        if self.job is None:
            return "Idle"
        pixels = self.to_display_array(self.job.image())
        with kernel_lock:
            self.display_image.from_numpy(pixels)
        if self.job.failed:
            return "Render failed"
        return format_progress(self.job.progress)

    def run(self) -> None:
        """Run the window loop until the window is closed."""
        self._initialize_window()
        assert self._window is not None and self._canvas is not None

        self.start_render()
        while self._window.running:
            if self._window.get_event(ti.ui.PRESS) and self._window.event.key == "r":
                self.start_render()

            status = self.refresh()
            with self._window.GUI.sub_window("Status", 0.02, 0.02, 0.3, 0.08) as panel:
                panel.text(status)

            with kernel_lock:
                self._canvas.set_image(self.display_image)
            self._window.show()

        if self.job is not None:
            self.job.join()

    @staticmethod
    def is_display_available() -> bool:
        """True unless running on a headless Linux machine."""
        if os.name == "nt" or os.uname().sysname == "Darwin":
            return True
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
