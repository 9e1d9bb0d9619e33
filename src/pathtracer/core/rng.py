"""Stateless-hash random streams for deterministic parallel sampling.

Every sampling routine in the renderer takes an explicit ``u32`` state and
returns the advanced state next to its result. Each pixel derives its own
stream from the seed of the worker that renders it and the pixel's linear
index, so the image depends only on (seed, pixel) and never on how Taichi
schedules the parallel loop. No generator is shared between workers.

The permutation is the PCG "RXS-M-XS" output function applied to an LCG
step, which is cheap and has good statistical quality for rendering.

Example:
    >>> @ti.kernel
    ... def sample() -> ti.f32:
    ...     state = seed_state(ti.u32(1234), ti.u32(0))
    ...     value, state = random_f32(state)
    ...     return value
"""

import numpy as np
import taichi as ti

# LCG step constants (PCG multiplier, odd increment)
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1013904223

# Output permutation multiplier
_RXS_MULTIPLIER = 277803737

# Golden-ratio constant used to spread consecutive indices apart
_INDEX_SCRAMBLE = 0x7F4A7C15

# Random floats are built from the low 24 bits (exact in f32)
_MANTISSA_MASK = 0xFFFFFF
_MANTISSA_SCALE = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value into a well-distributed 32-bit value.

    Args:
        value: Input state.

    Returns:
        The permuted 32-bit value.
    """
    state = value * ti.cast(_LCG_MULTIPLIER, ti.u32) + ti.cast(_LCG_INCREMENT, ti.u32)
    shift = (state >> ti.cast(28, ti.u32)) + ti.cast(4, ti.u32)
    word = ((state >> shift) ^ state) * ti.cast(_RXS_MULTIPLIER, ti.u32)
    return (word >> ti.cast(22, ti.u32)) ^ word


@ti.func
def seed_state(seed: ti.u32, index: ti.u32) -> ti.u32:
    """Derive the initial state of a random stream.

    Args:
        seed: The worker seed.
        index: The stream index (the pixel's row-major index).

    Returns:
        The initial stream state.
    """
    return pcg_hash(pcg_hash(seed) ^ (index * ti.cast(_INDEX_SCRAMBLE, ti.u32)))


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current stream state.

    Returns:
        A tuple of (value, new_state).
    """
    new_state = pcg_hash(state)
    value = ti.cast(new_state & ti.cast(_MANTISSA_MASK, ti.u32), ti.f32) * _MANTISSA_SCALE
    return value, new_state


@ti.func
def random_range(state: ti.u32, lo: ti.f32, hi: ti.f32):
    """Draw a uniform float in [lo, hi).

    Args:
        state: The current stream state.
        lo: Lower bound.
        hi: Upper bound.

    Returns:
        A tuple of (value, new_state).
    """
    value, new_state = random_f32(state)
    return lo + (hi - lo) * value, new_state


def spawn_worker_seeds(seed: int, count: int) -> list[int]:
    """Derive independent 32-bit seeds for a set of render workers.

    Uses NumPy's SeedSequence so that worker streams are statistically
    independent even for adjacent base seeds.

    Args:
        seed: The base seed of the render (non-negative).
        count: Number of workers.

    Returns:
        A list of ``count`` unsigned 32-bit seeds.

    Raises:
        ValueError: If seed is negative or count is not positive.
    """
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")
    if count <= 0:
        raise ValueError(f"Worker count must be positive, got {count}")

    children = np.random.SeedSequence(seed).spawn(count)
    return [int(child.generate_state(1, dtype=np.uint32)[0]) for child in children]
