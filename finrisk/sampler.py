"""
Normal random variate samplers for FinRisk.

Mathematical Model
------------------
Box-Muller transform of two independent uniforms u, v ∈ (0, 1):

    z = sqrt(-2 ln u) · cos(2π v)  ~  N(0, 1)
    x = μ + σ z

Exact zeros are rejected before the logarithm is taken.

Design principles
-----------------
- Injected capability: the simulator only sees ``sampler.normal(mean, std)``
- No global generator: every sampler owns its ``numpy.random.Generator``
- Independent streams: ``spawn_samplers`` derives child streams from one
  ``SeedSequence`` so strategies never share generator state
- Statistical suitability only (not cryptographically secure)

Examples
--------
>>> sampler = BoxMullerSampler(seed=42)
>>> draws = [sampler.normal(100.0, 15.0) for _ in range(10_000)]
>>> abs(np.mean(draws) - 100.0) < 1.0
True
"""

from __future__ import annotations
import math
from typing import List, Optional, Protocol, runtime_checkable

import numpy as np

__all__ = [
    "NormalSampler",
    "BoxMullerSampler",
    "ConstantSampler",
    "spawn_samplers",
]

_TWO_PI = 2.0 * math.pi


@runtime_checkable
class NormalSampler(Protocol):
    """Anything that can draw a normal variate with given mean and std."""

    def normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        ...


class BoxMullerSampler:
    """
    Box-Muller normal sampler backed by a NumPy generator.

    Uniforms are pulled from the generator in blocks and consumed two per
    call, which keeps the per-draw cost low in the monthly simulation loop
    without changing the distribution.

    Parameters
    ----------
    rng : np.random.Generator, optional
        Source of uniform randomness. Takes precedence over ``seed``.
    seed : int, optional
        Seed for a fresh ``np.random.default_rng`` when ``rng`` is None.
    block_size : int, default 4096
        Number of uniforms fetched per refill (rounded up to even).
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        *,
        seed: Optional[int] = None,
        block_size: int = 4096,
    ):
        if block_size < 2:
            raise ValueError(f"block_size must be >= 2, got {block_size}")
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.block_size = block_size + (block_size % 2)
        self._buffer: List[float] = []
        self._pos = 0

    def _uniform(self) -> float:
        """Next uniform in (0, 1), skipping exact zeros."""
        while True:
            if self._pos >= len(self._buffer):
                self._buffer = self.rng.random(self.block_size).tolist()
                self._pos = 0
            u = self._buffer[self._pos]
            self._pos += 1
            if u != 0.0:
                return u

    def standard_normal(self) -> float:
        u = self._uniform()
        v = self._uniform()
        return math.sqrt(-2.0 * math.log(u)) * math.cos(_TWO_PI * v)

    def normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        """Draw one N(mean, std²) variate."""
        return mean + std * self.standard_normal()

    def __repr__(self) -> str:
        return f"BoxMullerSampler(block_size={self.block_size})"


class ConstantSampler:
    """
    Deterministic stand-in that always returns ``mean + std * z``.

    With the default ``z=0`` every draw equals its mean, turning the
    household model into a deterministic projection.

    Examples
    --------
    >>> ConstantSampler().normal(5.0, 2.0)
    5.0
    >>> ConstantSampler(z=-1.0).normal(5.0, 2.0)
    3.0
    """

    def __init__(self, z: float = 0.0):
        self.z = float(z)

    def normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        return mean + std * self.z

    def __repr__(self) -> str:
        return f"ConstantSampler(z={self.z})"


def spawn_samplers(seed: Optional[int], n: int) -> List[BoxMullerSampler]:
    """
    Create ``n`` statistically independent samplers from one root seed.

    Parameters
    ----------
    seed : int or None
        Root entropy. None draws fresh OS entropy.
    n : int
        Number of child samplers.

    Returns
    -------
    list of BoxMullerSampler
        Same seed → same list of streams, in order.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    children = np.random.SeedSequence(seed).spawn(n)
    return [BoxMullerSampler(np.random.default_rng(child)) for child in children]
