"""Seeded random number generation backed by a 32-bit Mersenne Twister."""

from __future__ import annotations

import math

from abmsim.coordinate import Coordinate3D

_MASK = 0xFFFFFFFF
_N = 624
_M = 397
_MATRIX_A = 0x9908B0DF
_UPPER = 0x80000000
_LOWER = 0x7FFFFFFF


class MersenneTwister:
    """The standard MT19937 generator with the classic integer seeding."""

    MAX = _MASK

    def __init__(self, seed: int = 5489) -> None:
        state = [seed & _MASK]
        for i in range(1, _N):
            prev = state[-1]
            state.append((1812433253 * (prev ^ (prev >> 30)) + i) & _MASK)
        self._state = state
        self._index = _N

    def _twist(self) -> None:
        mt = self._state
        for i in range(_N):
            y = (mt[i] & _UPPER) | (mt[(i + 1) % _N] & _LOWER)
            value = mt[(i + _M) % _N] ^ (y >> 1)
            if y & 1:
                value ^= _MATRIX_A
            mt[i] = value
        self._index = 0

    def random_uint32(self) -> int:
        """Next 32-bit unsigned output."""
        if self._index >= _N:
            self._twist()
        y = self._state[self._index]
        self._index += 1
        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        y ^= y >> 18
        return y & _MASK


class Randomizer:
    """Random values for the simulation, reproducible from one seed."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._mt = MersenneTwister(seed)
        self._spare_gauss: float | None = None

    def _unit(self) -> float:
        return self._mt.random_uint32() / MersenneTwister.MAX

    def generate_double(self, a: float | None = None, b: float | None = None) -> float:
        """Uniform value in [0, 1], in [0, a], or in [a, b]."""
        u = self._unit()
        if a is None:
            return u
        if b is None:
            return u * a
        return a + u * (b - a)

    def generate_int(self, a: int, b: int | None = None) -> int:
        """Unsigned integer in [0, a] or, with two bounds, in [a, b]."""
        raw = self._mt.random_uint32()
        if b is None:
            return raw % ((a + 1) & _MASK)
        span = (((b - a) & _MASK) + 1) & _MASK
        return (a + raw % span) & _MASK

    def random_direction(self, spatial_dims: int, length: float) -> Coordinate3D:
        """Random vector of the given length, in the plane for two dimensions."""
        if spatial_dims == 2:
            phi = self.generate_double(math.pi * 2.0)
            return Coordinate3D(length * math.cos(phi), length * math.sin(phi), 0.0)
        u = self.generate_double()
        phi = self.generate_double(math.pi * 2.0)
        subst = 2 * length * math.sqrt(u * (1 - u))
        return Coordinate3D(
            subst * math.cos(phi),
            subst * math.sin(phi),
            length * (1 - 2 * u),
        )

    def rayleigh(self, sigma: float = 1.0) -> float:
        """Rayleigh-distributed value with scale sigma."""
        norm_x = self.normal(0.0, sigma)
        norm_y = self.normal(0.0, sigma)
        return math.sqrt(norm_x * norm_x + norm_y * norm_y)

    def normal(self, mean: float = 0.0, stddev: float = 1.0, box_muller: bool = True) -> float:
        """Normally distributed value; a zero deviation returns the mean unchanged."""
        if stddev == 0:
            return mean
        return mean + stddev * self._standard_normal(box_muller)

    def _standard_normal(self, box_muller: bool) -> float:
        if self._spare_gauss is not None:
            value = self._spare_gauss
            self._spare_gauss = None
            return value
        if box_muller:
            u1 = 1 - self.generate_double()
            u2 = self.generate_double()
            interim = math.sqrt(-2.0 * math.log(u1)) if u1 > 0 else math.inf
            value = interim * math.cos(2 * math.pi * u2)
            self._spare_gauss = interim * math.sin(2 * math.pi * u2)
        else:
            while True:
                u1 = 2 * self.generate_double() - 1
                u2 = 2 * self.generate_double() - 1
                r = u1 * u1 + u2 * u2
                if 0 < r <= 1:
                    break
            interim = math.sqrt(-2.0 * math.log(r) / r)
            value = interim * u1
            self._spare_gauss = interim * u2
        return value