"""Path - the closed figure-eight track customers travel along."""
from __future__ import annotations

import math

from saas_defense.types import Point

_REGION_STRIDE = 10
_REGION_PADDING = 10.0


class Path:
    """Lemniscate of Gerono centred on the play field.

    ``position_at(t)`` maps a path fraction in [0, 1) to canvas coordinates.
    The curve crosses itself at the centre, which is also where ``t`` wraps,
    so the centre doubles as the renewal point.
    """

    def __init__(
        self,
        width: float,
        height: float,
        samples: int = 500,
        path_width: float = 30.0,
    ) -> None:
        self._samples = samples
        self._path_width = path_width
        self._points: list[Point] = []
        self._regions: list[tuple[float, float, float, float]] = []
        self.resize(width, height)

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def center(self) -> Point:
        return (self._cx, self._cy)

    @property
    def path_width(self) -> float:
        return self._path_width

    @property
    def points(self) -> tuple[Point, ...]:
        return tuple(self._points)

    def resize(self, width: float, height: float) -> None:
        """Rebuild the curve and its placement regions for a new canvas size."""
        self._width = width
        self._height = height
        self._cx = width / 2
        self._cy = height / 2
        self._rx = width * 0.4
        self._ry = height * 0.3
        self._points = [
            self.position_at(i / self._samples) for i in range(self._samples)
        ]
        side = self._path_width + _REGION_PADDING
        half = side / 2
        self._regions = [
            (x - half, y - half, side, side)
            for x, y in self._points[::_REGION_STRIDE]
        ]

    def position_at(self, t: float) -> Point:
        angle = (t % 1.0) * 2 * math.pi
        s = math.sin(angle)
        return (
            self._cx + self._rx * s,
            self._cy + self._ry * s * math.cos(angle),
        )

    def is_near_center(self, point: Point, threshold: float = 20.0) -> bool:
        return math.dist(point, self.center) < threshold

    def is_valid_placement(self, x: float, y: float, size: float = 30.0) -> bool:
        """True when a ``size`` square at (x, y) stays off the track and on canvas."""
        half = size / 2
        if (
            x - half < 0
            or x + half > self._width
            or y - half < 0
            or y + half > self._height
        ):
            return False
        for rx, ry, rw, rh in self._regions:
            if (
                x + half > rx
                and x - half < rx + rw
                and y + half > ry
                and y - half < ry + rh
            ):
                return False
        return math.dist((x, y), self.center) >= self._path_width + half
