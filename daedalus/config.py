"""
Generator settings.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigError


@dataclass
class GeneratorConfig:
    """
    Everything that shapes a generated dungeon.

    Sizes are (x, y, z) triples; y counts levels. Room sizes are in cells and
    are drawn per axis between min_room_size and max_room_size inclusive.
    """

    cell_size: Tuple[float, float, float] = (5.0, 5.0, 5.0)
    grid_size: Tuple[int, int, int] = (20, 10, 20)
    num_rooms: int = 10
    min_room_size: Tuple[int, int, int] = (2, 1, 2)
    max_room_size: Tuple[int, int, int] = (4, 1, 4)
    extra_hallway_factor: float = 0.5  # Share of non-tree edges that also get a hallway
    stair_cost: float = 5
    seed: Optional[int] = None
    degenerate_retries: int = 3  # Jittered retries when room centers are coplanar
    report_timing: bool = False

    def __post_init__(self) -> None:
        self.cell_size = _triple("cell_size", self.cell_size, float)
        self.grid_size = _triple("grid_size", self.grid_size, int)
        self.min_room_size = _triple("min_room_size", self.min_room_size, int)
        self.max_room_size = _triple("max_room_size", self.max_room_size, int)

        if any(size <= 0 for size in self.cell_size):
            raise ConfigError(f"cell_size must be positive, got {self.cell_size}")
        if any(count <= 0 for count in self.grid_size):
            raise ConfigError(f"grid_size must be positive, got {self.grid_size}")
        if self.num_rooms < 0:
            raise ConfigError(f"num_rooms must not be negative, got {self.num_rooms}")
        if any(size < 1 for size in self.min_room_size):
            raise ConfigError(f"min_room_size must be at least 1 per axis, got {self.min_room_size}")
        for axis in range(3):
            if self.min_room_size[axis] > self.max_room_size[axis]:
                raise ConfigError(
                    f"min_room_size {self.min_room_size} exceeds max_room_size {self.max_room_size}"
                )
        if not 0.0 <= self.extra_hallway_factor <= 1.0:
            raise ConfigError(
                f"extra_hallway_factor must be between 0 and 1, got {self.extra_hallway_factor}"
            )
        if self.stair_cost < 1:
            raise ConfigError(f"stair_cost must be at least 1, got {self.stair_cost}")
        if self.degenerate_retries < 0:
            raise ConfigError(f"degenerate_retries must not be negative, got {self.degenerate_retries}")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "GeneratorConfig":
        """Build a config from a plain mapping (e.g. parsed JSON). Unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**dict(values))

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping with lists for the triples, suitable for JSON."""
        result = asdict(self)
        for name in ("cell_size", "grid_size", "min_room_size", "max_room_size"):
            result[name] = list(result[name])
        return result


def _triple(name: str, value: Any, cast: type) -> tuple:
    try:
        items = tuple(cast(item) for item in value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be three numbers, got {value!r}") from e
    if len(items) != 3:
        raise ConfigError(f"{name} must have three values, got {value!r}")
    return items


__all__ = ["GeneratorConfig"]
