"""Vector, rect and screen-mapping utility functions."""

import math
from dataclasses import dataclass

Point2 = tuple[float, float]
Point3 = tuple[float, float, float]
Vec3 = tuple[float, float, float]

ORIGIN3: Point3 = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, origin at top-left (image y grows downward)."""
    x: float
    y: float
    width: float
    height: float

    def contains(self, point) -> bool:
        """Strict containment test; points on the border are outside."""
        return (self.x < point[0] < self.x + self.width
                and self.y < point[1] < self.y + self.height)


def dist2(a, b) -> float:
    """Euclidean distance between 2D points (extra components ignored)."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def dist3(a: Point3, b: Point3) -> float:
    """Euclidean distance between 3D points."""
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)


def clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp value to range [lo, hi]."""
    return max(lo, min(hi, v))


def sub3(a: Vec3, b: Vec3) -> Vec3:
    """Vector subtraction: a - b."""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def add3(a: Vec3, b: Vec3) -> Vec3:
    """Vector addition: a + b."""
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def scale3(a: Vec3, s: float) -> Vec3:
    return (a[0] * s, a[1] * s, a[2] * s)


def lerp(a: float, b: float, t: float) -> float:
    return (1.0 - t) * a + t * b


def lerp3(start: Point3, end: Point3, t: float) -> Point3:
    """Linear interpolation between two 3D points (t=0 -> start, t=1 -> end)."""
    return (lerp(start[0], end[0], t), lerp(start[1], end[1], t), lerp(start[2], end[2], t))


def is_finite3(p: Point3) -> bool:
    return all(math.isfinite(c) for c in p)


def deadzone3(old: Point3 | None, new: Point3 | None, radius: float) -> Point3:
    """
    Move `old` toward `new` only by the distance exceeding `radius`.

    Inside the radius the old position is returned unchanged.
    """
    if old is None or new is None:
        return ORIGIN3
    d = dist3(old, new)
    if d > radius:
        offset = scale3(sub3(new, old), radius / d)
        return sub3(new, offset)
    return old


def deadzone2(old: Point2 | None, new: Point2 | None, radius: float) -> Point2:
    """2D variant of `deadzone3`, operating on x/y only."""
    if old is None or new is None:
        return (0.0, 0.0)
    d = dist2(old, new)
    if d > radius:
        return (new[0] - (new[0] - old[0]) / d * radius,
                new[1] - (new[1] - old[1]) / d * radius)
    return (old[0], old[1])


def offset_rect(base: Rect, offset: float, scale: float = 1.0) -> Rect:
    """Scale a rect about its centre, shift it sideways by `offset` and keep 80% of the scaled height."""
    return Rect(
        x=base.x + offset - (base.width * (scale - 1) / 2),
        y=base.y - (base.height * (scale - 1) / 2),
        width=base.width * scale,
        height=base.height * scale * 0.8,
    )


def body_to_view_point(point, rect: Rect) -> Point2:
    """
    Normalise a body-space point within `rect` to view space [0, 1].

    The x axis is mirrored so a user's movement to their right moves right
    on screen.
    """
    nx = (point[0] - rect.x) / rect.width if rect.width else 0.0
    ny = (point[1] - rect.y) / rect.height if rect.height else 0.0
    return (1 - min(1, max(0, nx)), min(1, max(0, ny)))


def body_to_screen_point(point, rect: Rect, screen_width: float, screen_height: float) -> Point2:
    """Map a body-space point into pixel coordinates through `rect`."""
    vx, vy = body_to_view_point(point, rect)
    return (vx * screen_width, vy * screen_height)


def angle_between_deg(midpoint, point1, point2) -> float:
    """Angle in degrees at `midpoint` between the 2D lines to `point1` and `point2`."""
    v1 = (point1[0] - midpoint[0], point1[1] - midpoint[1])
    v2 = (point2[0] - midpoint[0], point2[1] - midpoint[1])
    m1 = math.hypot(*v1)
    m2 = math.hypot(*v2)
    if m1 == 0 or m2 == 0:
        return 0.0
    cos_theta = clamp((v1[0] * v2[0] + v1[1] * v2[1]) / (m1 * m2), -1.0, 1.0)
    return math.degrees(math.acos(cos_theta))
