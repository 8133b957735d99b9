from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import json

from ..rng import rand_index

Point = tuple[float, float]


@dataclass(frozen=True, slots=True)
class PathData:
    """Enemy route in base-surface coordinates (800x400 unless stated)."""

    name: str
    points: tuple[Point, ...]
    base_width: float = 800.0
    base_height: float = 400.0

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ValueError(f"Path {self.name!r} needs at least 2 waypoints")
        if not self.base_width > 0 or not self.base_height > 0:
            raise ValueError(f"Path {self.name!r} has an empty base surface")

    def scaled(self, width: float, height: float) -> list[Point]:
        sx = width / self.base_width
        sy = height / self.base_height
        return [(x * sx, y * sy) for x, y in self.points]

    @property
    def core(self) -> Point:
        return self.points[-1]


PATH_PATTERNS: tuple[PathData, ...] = (
    PathData(
        name="zigzag",
        points=(
            (0, 200), (150, 200), (150, 100), (300, 100), (300, 300),
            (450, 300), (450, 150), (600, 150), (600, 250), (750, 250),
        ),
    ),
    PathData(
        name="spiral",
        points=(
            (0, 350), (200, 350), (200, 100), (600, 100), (600, 300),
            (300, 300), (300, 200), (500, 200), (500, 250), (400, 250),
        ),
    ),
    PathData(
        name="s_curve",
        points=((0, 100), (200, 100), (300, 200), (400, 300), (500, 200), (600, 100), (750, 200)),
    ),
    PathData(
        name="l_shape",
        points=((0, 300), (300, 300), (300, 100), (500, 100), (500, 350), (700, 350), (700, 200)),
    ),
    PathData(
        name="double_bend",
        points=(
            (0, 150), (150, 150), (250, 250), (350, 150),
            (450, 250), (550, 150), (650, 250), (750, 150),
        ),
    ),
)


def get_path_pattern(name: str) -> PathData:
    for pattern in PATH_PATTERNS:
        if pattern.name == name:
            return pattern
    raise KeyError(f"Unknown path pattern: {name!r}")


def random_path(state, patterns: tuple[PathData, ...] = PATH_PATTERNS) -> PathData:
    return patterns[rand_index(state, len(patterns))]


def path_from_points(raw: list, *, name: str = "custom", base_width: float = 800.0, base_height: float = 400.0) -> PathData:
    points: list[Point] = []
    for item in raw:
        if isinstance(item, dict):
            x, y = item.get("x"), item.get("y")
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            x, y = item
        else:
            raise ValueError(f"Invalid waypoint {item!r} in path {name!r}")
        points.append((float(x), float(y)))
    return PathData(name=name, points=tuple(points), base_width=base_width, base_height=base_height)


def load_path_json(path: str | Path) -> PathData:
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    surface = data.get("surface", {}) or {}
    return path_from_points(
        data["points"],
        name=str(data.get("name", p.stem)),
        base_width=float(surface.get("width", 800)),
        base_height=float(surface.get("height", 400)),
    )
