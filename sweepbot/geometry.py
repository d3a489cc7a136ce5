import math
from dataclasses import dataclass
from typing import Iterable, Optional


# ============================================================================
# 2-D GEOMETRY PRIMITIVES
# ============================================================================
@dataclass(frozen=True)
class Point:
    """Cartesian sample in the sensor frame (x along angle=0)"""
    x: float
    y: float

    @classmethod
    def from_polar(cls, distance: float, angle: float) -> "Point":
        return cls(distance * math.cos(angle), distance * math.sin(angle))

    def length(self) -> float:
        """Radial distance from the origin"""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


class Line:
    """
    Line in implicit form a*x + b*y + c = 0

    Lines built from points are normalised so that (a, b) is a unit vector
    with b > 0 (or b == 0 and a > 0). The same geometric line then always
    has the same coefficients and c is its signed offset from the origin.
    """
    __slots__ = ("a", "b", "c")

    def __init__(self, a: float, b: float, c: float):
        self.a = float(a)
        self.b = float(b)
        self.c = float(c)

    @classmethod
    def from_points(cls, p1: Point, p2: Point) -> "Line":
        a = p1.y - p2.y
        b = p2.x - p1.x
        c = p1.x * (p2.y - p1.y) - p1.y * (p2.x - p1.x)
        norm = math.hypot(a, b)
        if norm == 0.0:
            return cls(a, b, c)
        if b < 0 or (b == 0 and a < 0):
            norm = -norm
        return cls(a / norm, b / norm, c / norm)

    @classmethod
    def from_slope_intercept(cls, slope: float, intercept: float) -> "Line":
        """y = slope*x + intercept"""
        return cls(slope, -1.0, intercept)

    def is_degenerate(self) -> bool:
        return self.a == 0.0 and self.b == 0.0

    def is_vertical(self) -> bool:
        return self.b == 0.0

    def slope(self) -> float:
        """Ratio a/b used for parallelism tests (inf for vertical lines)"""
        if self.is_vertical():
            return math.inf
        return self.a / self.b

    def signed_distance(self, p: Point) -> float:
        return (self.a * p.x + self.b * p.y + self.c) / math.hypot(self.a, self.b)

    def distance(self, p: Point) -> float:
        return abs(self.signed_distance(p))

    def is_parallel(self, other: "Line") -> bool:
        if self.is_vertical() and other.is_vertical():
            return True
        if not self.is_vertical() and not other.is_vertical():
            return self.slope() == other.slope()
        return False

    def is_close_to_parallel(self, other: "Line", tolerance: float) -> bool:
        if self.is_parallel(other):
            return True
        if self.is_vertical() or other.is_vertical():
            # the non-vertical one must be nearly vertical itself
            return abs(self.b + other.b) < tolerance
        return abs(self.slope() - other.slope()) <= tolerance

    def is_close_to_collinear(self, other: "Line", slope_tolerance: float,
                              offset_tolerance: float) -> bool:
        return (self.is_close_to_parallel(other, slope_tolerance)
                and abs(self.c - other.c) <= offset_tolerance)

    def __eq__(self, other):
        if not isinstance(other, Line):
            return NotImplemented
        return (self.a, self.b, self.c) == (other.a, other.b, other.c)

    def __repr__(self):
        return f"Line(a={self.a:.4f}, b={self.b:.4f}, c={self.c:.4f})"


@dataclass(frozen=True)
class Segment:
    """Straight run between two points"""
    p1: Point
    p2: Point

    def line(self) -> Line:
        return Line.from_points(self.p1, self.p2)

    def length(self) -> float:
        return self.p1.distance_to(self.p2)

    def distance(self, p: Point) -> float:
        """Perpendicular distance from p to the segment's supporting line"""
        line = self.line()
        if line.is_degenerate():
            return self.p1.distance_to(p)
        return line.distance(p)


@dataclass(frozen=True)
class Interval:
    """Half-open range [min, max)"""
    min: float
    max: float

    @property
    def length(self) -> float:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value < self.max


def least_squares_line(points: Iterable[Point]) -> Optional[Line]:
    """Best-fit line through a run of points. Not implemented yet."""
    raise NotImplementedError("least-squares line fitting is not implemented")
