"""Unit tests for scalar intervals."""

import math

import taichi as ti


def test_contains_is_closed_and_surrounds_is_open():
    from src.pathtracer.core.interval import Interval, interval_contains, interval_surrounds

    results = ti.field(dtype=ti.i32, shape=4)

    @ti.kernel
    def test_kernel():
        interval = Interval(lower=0.0, upper=1.0)
        results[0] = interval_contains(interval, 0.0)
        results[1] = interval_surrounds(interval, 0.0)
        results[2] = interval_contains(interval, 0.5)
        results[3] = interval_surrounds(interval, 0.5)

    test_kernel()
    assert results.to_numpy().tolist() == [1, 0, 1, 1]


def test_empty_interval_contains_nothing():
    from src.pathtracer.core.interval import EMPTY, interval_contains, interval_size, make_interval

    contains = ti.field(dtype=ti.i32, shape=())
    size = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(lower: ti.f32, upper: ti.f32):
        interval = make_interval(lower, upper)
        contains[None] = interval_contains(interval, 0.0)
        size[None] = interval_size(interval)

    test_kernel(*EMPTY)
    assert contains[None] == 0
    assert size[None] < 0.0


def test_universe_surrounds_everything_finite():
    from src.pathtracer.core.interval import UNIVERSE, interval_surrounds, make_interval

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(lower: ti.f32, upper: ti.f32):
        result[None] = interval_surrounds(make_interval(lower, upper), 1e30)

    test_kernel(*UNIVERSE)
    assert result[None] == 1
    assert math.isinf(UNIVERSE[1])


def test_clamp_is_idempotent():
    """Clamping an already clamped value changes nothing."""
    from src.pathtracer.core.interval import Interval, interval_clamp

    inputs = [-1.0, 0.0, 0.3, 0.999, 1.0, 7.5]
    n = len(inputs)
    values = ti.field(dtype=ti.f32, shape=n)
    once = ti.field(dtype=ti.f32, shape=n)
    twice = ti.field(dtype=ti.f32, shape=n)
    for i, v in enumerate(inputs):
        values[i] = v

    @ti.kernel
    def test_kernel():
        interval = Interval(lower=0.0, upper=0.999)
        for i in range(n):
            a = interval_clamp(interval, values[i])
            once[i] = a
            twice[i] = interval_clamp(interval, a)

    test_kernel()
    assert once.to_numpy().tolist() == twice.to_numpy().tolist()
    assert once.to_numpy().min() >= 0.0
    assert once.to_numpy().max() <= 0.999 + 1e-7
