"""Multithreaded tiled renderer.

The image's rows are split into ``thread_count`` contiguous, disjoint
ranges and one worker thread renders each range. A worker renders a row
by launching a kernel that traces every pixel of that row in parallel,
converts the averaged colour to an opaque RGBA8 pixel and stores it in a
shared framebuffer, then bumps the shared progress counter.

Taichi kernel launches are not reentrant, so launches (and framebuffer
reads) are serialized by ``kernel_lock``. Row launches from different
workers therefore never overlap: ``thread_count`` decides which worker
owns which rows and how progress is reported, while the CPU parallelism
comes from Taichi spreading the pixels of each row over its own threads.
Randomness never depends on that serialization: every worker gets its
own seed and every pixel derives its own stream from (worker seed, pixel
index), so the output is a pure function of the configuration, the base
seed and the thread count.

A failing worker stops the others before their next row.
``RenderJob.failed`` tells pollers to stop waiting, and ``join`` re-raises
the error.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.renderer import render
    >>> from src.pathtracer.scene.presets import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> pixels, progress = render(scene, camera, 200, 100, 4, 10, thread_count=4)
    >>> progress.rows_done
    100
"""

import threading
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.pinhole import PinholeCamera, get_ray, setup_camera
from src.pathtracer.core.integrator import ray_color
from src.pathtracer.core.interval import Interval, interval_clamp
from src.pathtracer.core.locking import kernel_lock
from src.pathtracer.core.rng import seed_state, spawn_worker_seeds
from src.pathtracer.core.settings import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    RenderSettings,
)

if TYPE_CHECKING:
    from src.pathtracer.scene.manager import SceneManager

# Type alias for 3D vectors
vec3 = tm.vec3

# Tone mapping: channels are clamped to [0, INTENSITY_MAX] then scaled by
# INTENSITY_SCALE, so an exact 1.0 never overflows to 256
INTENSITY_MAX = 0.999
INTENSITY_SCALE = 256.0

# Owner tag of a pixel no worker has written
NO_OWNER = -1

# =============================================================================
# Shared Framebuffer
# =============================================================================

# Row-major RGBA8, preallocated to the maximum image size
_framebuffer = ti.field(dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, 4))

# Write instrumentation: which worker wrote each pixel, and how many times
_pixel_owner = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_pixel_writes = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_query_rgba = ti.Vector.field(4, dtype=ti.i32, shape=())

# Guards _active_job
_job_lock = threading.Lock()
_active_job: "RenderJob | None" = None


# =============================================================================
# Row Partitioning and Progress
# =============================================================================


def partition_rows(height: int, thread_count: int) -> list[range]:
    """Split rows 0..height-1 into contiguous ranges, one per worker.

    Every range but the last holds ``height // thread_count`` rows; the
    remainder goes to the last range. When there are more workers than
    rows the leading ranges are empty.

    Args:
        height: Number of image rows.
        thread_count: Number of workers.

    Returns:
        A list of ``thread_count`` ranges covering every row exactly once.

    Raises:
        ValueError: If height is negative or thread_count is not positive.
    """
    if thread_count <= 0:
        raise ValueError(f"thread_count must be positive, got {thread_count}")
    if height < 0:
        raise ValueError(f"height must be non-negative, got {height}")

    rows_per_worker = height // thread_count
    ranges = []
    for k in range(thread_count):
        start = k * rows_per_worker
        stop = height if k == thread_count - 1 else start + rows_per_worker
        ranges.append(range(start, stop))
    return ranges


class RenderProgress:
    """Number of finished rows in one render pass.

    The counter only moves forward, one row at a time, and never exceeds
    ``total_rows``. Readers may see a slightly stale value.
    """

    def __init__(self, total_rows: int) -> None:
        self._total_rows = total_rows
        self._rows_done = 0
        self._lock = threading.Lock()

    @property
    def total_rows(self) -> int:
        return self._total_rows

    @property
    def rows_done(self) -> int:
        return self._rows_done

    @property
    def fraction(self) -> float:
        """Completed fraction in [0, 1]."""
        if self._total_rows == 0:
            return 1.0
        return self._rows_done / self._total_rows

    @property
    def is_complete(self) -> bool:
        return self._rows_done >= self._total_rows

    def increment(self) -> int:
        """Record one finished row and return the new count.

        Raises:
            RuntimeError: If every row has already been counted.
        """
        with self._lock:
            if self._rows_done >= self._total_rows:
                raise RuntimeError("Progress already reached the total row count")
            self._rows_done += 1
            return self._rows_done

    def __repr__(self) -> str:
        return f"RenderProgress({self._rows_done}/{self._total_rows})"


# =============================================================================
# Kernels
# =============================================================================


@ti.func
def to_rgba8(color_sum: vec3, samples: ti.i32) -> tm.ivec4:
    """Convert a sum of colour samples to an opaque 8-bit pixel.

    Averages, replaces NaN or infinite channels with 0, applies the
    square-root gamma curve, clamps to [0, 0.999] and scales by 256.

    Returns:
        (r, g, b, 255) as integers in [0, 255].
    """
    scale = 1.0 / ti.cast(samples, ti.f32)
    intensity = Interval(lower=0.0, upper=INTENSITY_MAX)
    rgba = tm.ivec4(0, 0, 0, 255)
    for c in ti.static(range(3)):
        value = color_sum[c] * scale
        if tm.isnan(value) or tm.isinf(value):
            value = 0.0
        value = tm.sqrt(tm.max(value, 0.0))
        rgba[c] = ti.cast(INTENSITY_SCALE * interval_clamp(intensity, value), ti.i32)
    return rgba


@ti.kernel
def _tone_map_kernel(color_sum: vec3, samples: ti.i32):
    _query_rgba[None] = to_rgba8(color_sum, samples)


def tone_map(color_sum: tuple[float, float, float], samples: int = 1) -> tuple[int, int, int, int]:
    """Python entry point to ``to_rgba8``, for a single pixel."""
    with kernel_lock:
        _tone_map_kernel(vec3(*color_sum), samples)
        rgba = _query_rgba[None]
    return (int(rgba[0]), int(rgba[1]), int(rgba[2]), int(rgba[3]))


@ti.kernel
def _clear_region(width: ti.i32, height: ti.i32):
    for j, i in ti.ndrange(height, width):
        for c in ti.static(range(3)):
            _framebuffer[j, i, c] = ti.cast(0, ti.u8)
        _framebuffer[j, i, 3] = ti.cast(255, ti.u8)
        _pixel_owner[j, i] = NO_OWNER
        _pixel_writes[j, i] = 0


@ti.kernel
def _render_row(
    row: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
    worker_id: ti.i32,
):
    # Pixels of the row are traced in parallel
    for i in range(width):
        state = seed_state(seed, ti.cast(row * width + i, ti.u32))
        color_sum = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            ray, state = get_ray(i, row, state)
            color, state = ray_color(ray, max_depth, state)
            color_sum += color

        rgba = to_rgba8(color_sum, samples_per_pixel)
        for c in ti.static(range(4)):
            _framebuffer[row, i, c] = ti.cast(rgba[c], ti.u8)
        _pixel_owner[row, i] = worker_id
        ti.atomic_add(_pixel_writes[row, i], 1)


# =============================================================================
# Render Jobs
# =============================================================================


class RenderJob:
    """One render pass executed by a fixed set of worker threads.

    Threads are spawned by ``start`` and finish when their rows are done;
    there is no persistent pool and no cancellation. Configuration is
    validated when the job is created, before any thread exists.

    Attributes:
        scene: The scene being rendered, loaded into the kernel fields by
            ``start``. None renders whatever scene is currently loaded.
        camera: Camera configuration.
        settings: Resolution, budgets, thread count and seed.
        progress: Shared finished-row counter.
        row_ranges: Rows assigned to each worker.
        worker_seeds: Seed of each worker's random streams.
    """

    def __init__(
        self,
        scene: "SceneManager | None",
        camera: PinholeCamera,
        settings: RenderSettings,
    ) -> None:
        settings.validate()
        camera.validate()

        self.scene = scene
        self.camera = camera
        self.settings = settings
        self.progress = RenderProgress(settings.height)
        self.row_ranges = partition_rows(settings.height, settings.thread_count)
        self.worker_seeds = spawn_worker_seeds(settings.seed, settings.thread_count)
        self._threads: list[threading.Thread] = []
        self._errors: list[BaseException] = []
        self._errors_lock = threading.Lock()
        self._stop = threading.Event()

    @property
    def is_running(self) -> bool:
        """True while any worker thread is alive."""
        return any(thread.is_alive() for thread in self._threads)

    @property
    def failed(self) -> bool:
        """True once any worker has raised; progress will not reach the total."""
        return self._stop.is_set()

    def start(self) -> "RenderJob":
        """Prepare the framebuffer and spawn the workers.

        Returns:
            self, for chaining.

        Raises:
            RuntimeError: If this job was already started or another render
                is still running.
        """
        global _active_job

        if self._threads:
            raise RuntimeError("Render job already started")

        with _job_lock:
            if _active_job is not None and _active_job.is_running:
                raise RuntimeError("Another render is already in progress")

            with kernel_lock:
                if self.scene is not None:
                    self.scene.load()
                setup_camera(self.camera, self.settings.width, self.settings.height)
                _clear_region(self.settings.width, self.settings.height)

            self._threads = [
                threading.Thread(
                    target=self._run_worker,
                    args=(worker_id, rows, seed),
                    name=f"render-worker-{worker_id}",
                    daemon=True,
                )
                for worker_id, (rows, seed) in enumerate(zip(self.row_ranges, self.worker_seeds))
            ]
            for thread in self._threads:
                thread.start()
            _active_job = self

        return self

    def _run_worker(self, worker_id: int, rows: range, seed: int) -> None:
        settings = self.settings
        try:
            for row in rows:
                if self._stop.is_set():
                    break
                with kernel_lock:
                    _render_row(
                        row,
                        settings.width,
                        settings.samples_per_pixel,
                        settings.max_depth,
                        seed,
                        worker_id,
                    )
                self.progress.increment()
        except Exception as exc:
            # Surfaced to the caller by join()
            with self._errors_lock:
                self._errors.append(exc)
            self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        """Wait for every worker to finish.

        Args:
            timeout: Time limit in seconds for each worker, or None to wait forever.

        Raises:
            RuntimeError: If the job was never started.
            Exception: The first error raised by a worker, if any.
        """
        if not self._threads:
            raise RuntimeError("Render job was not started")
        for thread in self._threads:
            thread.join(timeout)
        if self._errors:
            raise self._errors[0]

    def framebuffer(self) -> npt.NDArray[np.uint8]:
        """Snapshot of the pixel buffer as a flat ``width * height * 4`` array.

        Safe to call while the render is still running; unfinished rows
        are opaque black.
        """
        return self.image().reshape(-1)

    def image(self) -> npt.NDArray[np.uint8]:
        """Snapshot of the pixel buffer shaped (height, width, 4)."""
        width, height = self.settings.width, self.settings.height
        with kernel_lock:
            data = _framebuffer.to_numpy()
        return np.ascontiguousarray(data[:height, :width, :])

    def pixel_owners(self) -> npt.NDArray[np.int32]:
        """Worker id that wrote each pixel, shaped (height, width)."""
        width, height = self.settings.width, self.settings.height
        with kernel_lock:
            data = _pixel_owner.to_numpy()
        return np.ascontiguousarray(data[:height, :width])

    def write_counts(self) -> npt.NDArray[np.int32]:
        """Number of writes each pixel received, shaped (height, width)."""
        width, height = self.settings.width, self.settings.height
        with kernel_lock:
            data = _pixel_writes.to_numpy()
        return np.ascontiguousarray(data[:height, :width])

    def __repr__(self) -> str:
        s = self.settings
        return (
            f"RenderJob({s.width}x{s.height}, spp={s.samples_per_pixel}, "
            f"depth={s.max_depth}, threads={s.thread_count}, {self.progress!r})"
        )


# =============================================================================
# Public Rendering API
# =============================================================================


def render_async(
    scene: "SceneManager | None",
    camera: PinholeCamera,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    thread_count: int,
    seed: int = 0,
) -> RenderJob:
    """Start a render and return immediately.

    Poll ``job.progress`` and read ``job.framebuffer()`` for a progressive
    preview; call ``job.join()`` once done.

    Raises:
        ConfigurationError: If any setting or the camera is invalid.
        RuntimeError: If another render is still running.
    """
    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        thread_count=thread_count,
        seed=seed,
    )
    return RenderJob(scene, camera, settings).start()


def render(
    scene: "SceneManager | None",
    camera: PinholeCamera,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    thread_count: int,
    seed: int = 0,
) -> tuple[npt.NDArray[np.uint8], RenderProgress]:
    """Render an image, blocking until every worker has finished.

    Args:
        scene: The scene whose spheres and materials are loaded.
        camera: Camera geometry; its resolution is overridden by
            ``width`` and ``height``.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Jittered rays per pixel.
        max_depth: Bounce budget per path.
        thread_count: Number of worker threads.
        seed: Base seed for the per-worker random streams.

    Returns:
        Tuple of (pixel_buffer, progress). ``pixel_buffer`` is a flat
        row-major uint8 array of ``width * height`` RGBA pixels.

    Raises:
        ConfigurationError: If any setting or the camera is invalid.
        RuntimeError: If another render is still running.
    """
    job = render_async(
        scene, camera, width, height, samples_per_pixel, max_depth, thread_count, seed
    )
    job.join()
    return job.framebuffer(), job.progress
