"""Counter-based random numbers for Taichi kernels.

Every sample owns a 32-bit generator state derived from (seed, pixel, sample) with
an integer avalanche hash. The state is passed by value through the Taichi
functions that consume randomness, each of which returns the advanced state next
to its result:

    u, state = random_f32(state)

No generator state is shared between threads, so a render with a fixed seed is
reproducible bit for bit whatever the thread scheduling and however the samples
are split into progressive batches.

Right shifts are masked so the result is the same whether the backend shifts
unsigned integers logically or arithmetically.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.core.rng import random_f32, seed_sample_state
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_sample_state(7, 0, 0)
    ...     u, state = random_f32(state)
    ...     return u
"""

import taichi as ti

# 2^-24: maps the top 24 bits of a state onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def hash_u32(x: ti.u32) -> ti.u32:
    """Wang's 32-bit integer hash.

    Args:
        x: Input value.

    Returns:
        A well-mixed 32-bit value.
    """
    h = (x ^ ti.u32(61)) ^ ((x >> 16) & ti.u32(0xFFFF))
    h = h * ti.u32(9)
    h = h ^ ((h >> 4) & ti.u32(0x0FFFFFFF))
    h = h * ti.u32(0x27D4EB2D)
    h = h ^ ((h >> 15) & ti.u32(0x1FFFF))
    return h


@ti.func
def next_state(state: ti.u32) -> ti.u32:
    """Advance a generator state with xorshift32.

    Args:
        state: Current (non-zero) state.

    Returns:
        The next state. Never zero for a non-zero input.
    """
    x = state
    x = x ^ (x << 13)
    x = x ^ ((x >> 17) & ti.u32(0x7FFF))
    x = x ^ (x << 5)
    return x


@ti.func
def seed_sample_state(seed: ti.i32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the generator state for one sample of one pixel.

    Args:
        seed: Render seed.
        pixel_index: Flattened pixel index (row * width + column).
        sample_index: Global index of the sample within the pixel.

    Returns:
        A non-zero generator state.
    """
    h = hash_u32(ti.cast(sample_index, ti.u32))
    h = hash_u32(ti.cast(pixel_index, ti.u32) ^ h)
    h = hash_u32(ti.cast(seed, ti.u32) + h)
    if h == ti.u32(0):
        h = ti.u32(0x6A09E667)
    return h


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: Current generator state.

    Returns:
        A tuple (value, state) with the drawn value and the advanced state.
    """
    new_state = next_state(state)
    value = ti.cast((new_state >> 8) & ti.u32(0xFFFFFF), ti.f32) * _INV_2_24
    return value, new_state
