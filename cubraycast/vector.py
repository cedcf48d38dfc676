"""Two-component vectors used for positions, directions and camera planes."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Iterator, Union

Operand = Union["Vector", float, int]


@dataclass(frozen=True)
class Vector:
    """An immutable 2D vector.

    Vector-by-vector multiplication and division treat the vectors as
    complex numbers (x + iy), which makes them rotations and scalings.
    Arithmetic with a plain number applies it to both components.
    """

    x: float = 0.0
    y: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __add__(self, other: Operand) -> Vector:
        if isinstance(other, Vector):
            return Vector(self.x + other.x, self.y + other.y)
        if isinstance(other, Real):
            return Vector(self.x + other, self.y + other)
        return NotImplemented

    def __sub__(self, other: Operand) -> Vector:
        if isinstance(other, Vector):
            return Vector(self.x - other.x, self.y - other.y)
        if isinstance(other, Real):
            return Vector(self.x - other, self.y - other)
        return NotImplemented

    def __mul__(self, other: Operand) -> Vector:
        if isinstance(other, Vector):
            return Vector(
                self.x * other.x - self.y * other.y,
                self.x * other.y + self.y * other.x,
            )
        if isinstance(other, Real):
            return Vector(self.x * other, self.y * other)
        return NotImplemented

    def __truediv__(self, other: Operand) -> Vector:
        if isinstance(other, Vector):
            norm = other.x * other.x + other.y * other.y
            if norm == 0:
                raise ZeroDivisionError("division by a zero vector")
            return Vector(
                (self.x * other.x + self.y * other.y) / norm,
                (self.y * other.x - self.x * other.y) / norm,
            )
        if isinstance(other, Real):
            if other == 0:
                return self
            return Vector(self.x / other, self.y / other)
        return NotImplemented