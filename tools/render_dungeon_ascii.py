#!/usr/bin/env python3
"""
Render a generated dungeon as ASCII art for debugging, one block per level.

Usage:
    uv run tools/render_dungeon_ascii.py [--num-rooms N] [--seed S] [--grid X Y Z] [--config FILE] [--timing] [--events]
"""

import argparse
import json
import sys
from pathlib import Path

# Add parent directory to path so we can import daedalus
sys.path.insert(0, str(Path(__file__).parent.parent))

from daedalus.config import GeneratorConfig
from daedalus.event_system import EventBus
from daedalus.generator import DungeonGenerator
from daedalus.grid import CellType, Direction, Grid


# Stairs point the way you walk when climbing them; stair space uses a letter
STAIR_TO_ASCII = {
    Direction.NORTH: "^",
    Direction.SOUTH: "v",
    Direction.EAST: ">",
    Direction.WEST: "<",
}
STAIR_SPACE_TO_ASCII = {
    Direction.NORTH: "n",
    Direction.SOUTH: "s",
    Direction.EAST: "e",
    Direction.WEST: "w",
}
CELL_TO_ASCII = {
    CellType.EMPTY: ".",
    CellType.ROOM: "#",
    CellType.HALLWAY: "+",
}


def render_level_ascii(grid: Grid, level: int) -> str:
    """One level as text, north at the top and east to the right."""
    width, _, depth = grid.dimensions
    lines = []
    for z in reversed(range(depth)):
        line = ""
        for x in range(width):
            cell = grid.get_cell((x, level, z))
            if cell.cell_type == CellType.STAIRS:
                line += STAIR_TO_ASCII.get(cell.face_direction, "S")
            elif cell.cell_type == CellType.STAIR_SPACE:
                line += STAIR_SPACE_TO_ASCII.get(cell.face_direction, "s")
            else:
                line += CELL_TO_ASCII.get(cell.cell_type, "?")
        lines.append(line)
    return "\n".join(lines)


def render_dungeon_ascii(grid: Grid) -> str:
    """Every non-empty level, bottom first."""
    blocks = []
    for level in range(grid.dimensions[1]):
        if all(grid.get_cell((x, level, z)).is_empty
               for x in range(grid.dimensions[0]) for z in range(grid.dimensions[2])):
            continue
        blocks.append(f"Level {level}:\n{render_level_ascii(grid, level)}")
    return "\n\n".join(blocks)


def main():
    parser = argparse.ArgumentParser(description="Render dungeon as ASCII art")
    parser.add_argument("--num-rooms", type=int, default=None, help="Number of room placement attempts")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible generation")
    parser.add_argument("--grid", type=int, nargs=3, metavar=("X", "Y", "Z"), help="Grid size in cells")
    parser.add_argument("--config", type=str, help="JSON file with GeneratorConfig fields")
    parser.add_argument("--timing", action="store_true", help="Print per-phase timings to stderr")
    parser.add_argument("--events", action="store_true", help="Print every generation event to stderr")
    args = parser.parse_args()

    values = {}
    if args.config:
        values.update(json.loads(Path(args.config).read_text()))
    if args.num_rooms is not None:
        values["num_rooms"] = args.num_rooms
    if args.seed is not None:
        values["seed"] = args.seed
    if args.grid is not None:
        values["grid_size"] = args.grid
    if args.timing:
        values["report_timing"] = True
    config = GeneratorConfig.from_dict(values)

    event_bus = EventBus()
    if args.events:
        event_bus.subscribe_all(lambda event_data: print(event_data.event.name, file=sys.stderr))

    result = DungeonGenerator(config, event_bus).generate()

    print(render_dungeon_ascii(result.grid))

    # Print some debug info
    print(f"\n--- Debug Info ---")
    print(f"Grid size: {'x'.join(str(n) for n in result.grid.dimensions)} cells")
    print(f"Rooms placed: {len(result.rooms)}")
    print(f"Tetrahedra: {len(result.tetrahedra)}")
    print(f"Hallways: {len(result.mst)} tree + {len(result.extra_edges)} extra")
    print(f"Paths carved: {len(result.paths)} ({sum(p.stair_count for p in result.paths)} staircases)")
    if result.failed_pairs:
        print(f"Paths failed: {len(result.failed_pairs)}")


if __name__ == "__main__":
    main()
