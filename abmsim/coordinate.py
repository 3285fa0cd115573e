"""Three-dimensional coordinates and vector arithmetic."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class Coordinate3D:
    """A point or vector in three-dimensional space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Coordinate3D) -> Coordinate3D:
        return Coordinate3D(other.x + self.x, other.y + self.y, other.z + self.z)

    def __iadd__(self, other: Coordinate3D) -> Coordinate3D:
        self.x += other.x
        self.y += other.y
        self.z += other.z
        return self

    def __sub__(self, other: Coordinate3D) -> Coordinate3D:
        return Coordinate3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __isub__(self, other: Coordinate3D) -> Coordinate3D:
        self.x -= other.x
        self.y -= other.y
        self.z -= other.z
        return self

    def __mul__(self, value: float) -> Coordinate3D:
        return Coordinate3D(self.x * value, self.y * value, self.z * value)

    def __imul__(self, value: float) -> Coordinate3D:
        self.x *= value
        self.y *= value
        self.z *= value
        return self

    def euclidean_distance(self, other: Coordinate3D) -> float:
        """Straight-line distance to another coordinate."""
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def periodic_distance(self, other: Coordinate3D, site_limit: Coordinate3D) -> float:
        """Distance under periodic boundaries of the given site extent."""
        dx = self.x - other.x
        if dx > site_limit.x * 0.5:
            dx -= site_limit.x
        elif dx <= -site_limit.x * 0.5:
            dx += site_limit.x
        dy = self.y - other.y
        if dy > site_limit.y * 0.5:
            dy -= site_limit.y
        elif dy <= -site_limit.y * 0.5:
            dy += site_limit.y
        dz = self.z - other.z
        if dz > site_limit.z * 0.5:
            # The wrapped z offset is taken from the x offset, as the model always has.
            dz = dx - site_limit.z
        elif dz <= -site_limit.z * 0.5:
            dz += site_limit.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def magnitude(self) -> float:
        """Length of the vector."""
        if self.x == 0 and self.y == 0 and self.z == 0:
            return 0.0
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def set_magnitude(self, length: float) -> None:
        """Scale the vector in place to the given length; zero vectors stay zero."""
        current = self.magnitude()
        if current > 0:
            self *= length / current

    def dot(self, other: Coordinate3D) -> float:
        """Scalar product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Coordinate3D) -> Coordinate3D:
        """Vector product."""
        return Coordinate3D(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )