from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from .config import RobotConfig
from .geometry import Point, Segment

# ============================================================================
# WALL DETECTION
# ============================================================================
# Defaults, overridable through RobotConfig
FAR_RANGE = 600.0
FAR_RATIO = 0.01
NEAR_TOLERANCE = 5.0
SLOPE_DIFF = 0.1
OFFSET_DIFF = 5.0


class SegmentKind(Enum):
    MEASURED = "measured"
    INTERPOLATED = "interpolated"


@dataclass(frozen=True)
class TaggedSegment:
    """Segment plus whether it was observed or bridges a gap"""
    kind: SegmentKind
    segment: Segment

    @classmethod
    def measured(cls, segment: Segment) -> "TaggedSegment":
        return cls(SegmentKind.MEASURED, segment)

    @classmethod
    def interpolated(cls, segment: Segment) -> "TaggedSegment":
        return cls(SegmentKind.INTERPOLATED, segment)

    @property
    def is_measured(self) -> bool:
        return self.kind is SegmentKind.MEASURED


@dataclass
class Wall:
    """Collinear measured segments joined by interpolated bridges"""
    segments: List[TaggedSegment] = field(default_factory=list)

    def measured(self) -> List[Segment]:
        return [s.segment for s in self.segments if s.is_measured]

    def interpolated(self) -> List[Segment]:
        return [s.segment for s in self.segments if not s.is_measured]

    def is_merged(self) -> bool:
        """True when more than one measured segment was grouped"""
        return len(self.measured()) > 1


def _breaks_segment(p: Point, test_segment: Segment, far_range: float,
                    far_ratio: float, near_tolerance: float) -> bool:
    distance = test_segment.distance(p)
    length = p.length()
    if length > far_range:
        return distance > length * far_ratio
    return abs(distance - length) < near_tolerance


def create_segments(points: Sequence[Point], cfg: RobotConfig = None) -> List[Segment]:
    """
    Split an angularly ordered point cloud into straight runs

    A run from points[left] to points[right] holds while every point
    between them stays close to the line through its ends. When one does
    not, the run is closed at right-1 and a new one starts at right.
    """
    far_range = cfg.segment_far_range if cfg else FAR_RANGE
    far_ratio = cfg.segment_far_ratio if cfg else FAR_RATIO
    near_tolerance = cfg.segment_near_tolerance if cfg else NEAR_TOLERANCE

    segments = []
    if len(points) < 2:
        return segments

    left = 0
    right = 1
    while right < len(points):
        test_segment = Segment(points[left], points[right])
        for p in points[left + 1:right]:
            if _breaks_segment(p, test_segment, far_range, far_ratio, near_tolerance):
                segments.append(Segment(points[left], points[right - 1]))
                left = right
                break
        right += 1

    # trailing run; a lone point left after the last split is dropped
    if left < len(points) - 1:
        segments.append(Segment(points[left], points[-1]))

    return segments


def connect_segments(segments: Sequence[Segment], cfg: RobotConfig = None) -> List[Wall]:
    """
    Greedy grouping of close-to-collinear segments into walls

    The first remaining segment seeds a wall and absorbs, in list order,
    every other remaining segment whose line is within the slope and
    offset tolerances of the seed's line.
    """
    slope_diff = cfg.wall_slope_tolerance if cfg else SLOPE_DIFF
    offset_diff = cfg.wall_offset_tolerance if cfg else OFFSET_DIFF

    remaining = list(segments)
    walls = []
    while remaining:
        seed = remaining[0]
        line = seed.line()
        wall = Wall([TaggedSegment.measured(seed)])
        rest = []
        previous = seed
        for segment in remaining[1:]:
            if line.is_close_to_collinear(segment.line(), slope_diff, offset_diff):
                wall.segments.append(TaggedSegment.interpolated(Segment(previous.p2, segment.p1)))
                wall.segments.append(TaggedSegment.measured(segment))
                previous = segment
            else:
                rest.append(segment)
        remaining = rest
        walls.append(wall)
    return walls


def find_walls(points: Sequence[Point], cfg: RobotConfig = None) -> List[Wall]:
    return connect_segments(create_segments(points, cfg), cfg)
