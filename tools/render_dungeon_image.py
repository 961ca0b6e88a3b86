#!/usr/bin/env python3
"""
Render a dungeon to an image file for visual inspection.

Every level is drawn top-down (north up) side by side, followed by a panel
with all levels flattened. Graph overlays are drawn on that last panel.

Useful for:
- Checking room placement and hallway carving
- Debugging the tetrahedralization and spanning tree

Usage:
    uv run tools/render_dungeon_image.py                        # Default config, random seed
    uv run tools/render_dungeon_image.py --rooms 20             # 20 room attempts
    uv run tools/render_dungeon_image.py --seed 42              # Reproducible dungeon
    uv run tools/render_dungeon_image.py --overlay mst room-map # Draw graph overlays
    uv run tools/render_dungeon_image.py --output my.png        # Custom output path
"""

import argparse
import cv2
import numpy as np
import sys
from pathlib import Path
from PIL import Image as PILImage, ImageDraw, ImageFont
from typing import Iterable, List, Tuple

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from daedalus.config import GeneratorConfig
from daedalus.generator import DungeonGenerator, GenerationResult
from daedalus.geometry import Point
from daedalus.grid import Grid

CELL_PIXELS = 16
PANEL_GAP = 8
LABEL_HEIGHT = 20

# BGR colour per CellType value
CELL_COLOURS = np.array(
    [
        (32, 32, 32),  # EMPTY
        (180, 120, 60),  # ROOM
        (60, 180, 220),  # HALLWAY
        (60, 60, 220),  # STAIRS
        (150, 150, 240),  # STAIR_SPACE
    ],
    dtype=np.uint8,
)

OVERLAY_COLOURS = {
    "tetrahedralization": (120, 120, 120),
    "room-map": (0, 200, 0),
    "mst": (255, 255, 255),
}


def render_level(types: np.ndarray, level: int) -> np.ndarray:
    """One level as an image, north at the top."""
    # types is indexed [x, y, z]; images are [row, col] with row 0 at the top
    level_types = types[:, level, :].T[::-1, :]
    image = CELL_COLOURS[level_types]
    return cv2.resize(
        image,
        (image.shape[1] * CELL_PIXELS, image.shape[0] * CELL_PIXELS),
        interpolation=cv2.INTER_NEAREST,
    )


def render_flattened(types: np.ndarray) -> np.ndarray:
    """All levels seen from above; the highest-valued cell type in each column wins."""
    flat = types.max(axis=1).T[::-1, :]
    image = CELL_COLOURS[flat]
    return cv2.resize(
        image,
        (image.shape[1] * CELL_PIXELS, image.shape[0] * CELL_PIXELS),
        interpolation=cv2.INTER_NEAREST,
    )


def world_to_pixel(grid: Grid, point: Point) -> Tuple[int, int]:
    """Project a world position onto the flattened panel."""
    x = point[0] / grid.cell_size[0] * CELL_PIXELS + CELL_PIXELS / 2
    z = point[2] / grid.cell_size[2] * CELL_PIXELS + CELL_PIXELS / 2
    return int(round(x)), int(round(grid.dimensions[2] * CELL_PIXELS - z))


def draw_edges(image: np.ndarray, grid: Grid, edges: Iterable, colour: Tuple[int, int, int]) -> None:
    for edge in edges:
        cv2.line(image, world_to_pixel(grid, edge.point_a), world_to_pixel(grid, edge.point_b), colour, 1)


def render_result(result: GenerationResult, overlays: Iterable[str]) -> np.ndarray:
    grid = result.grid
    types = grid.cell_types().astype(np.intp)

    flattened = render_flattened(types)
    overlays = set(overlays)
    if "tetrahedralization" in overlays:
        draw_edges(flattened, grid, (edge for edges in result.edge_map.values() for edge in edges),
                   OVERLAY_COLOURS["tetrahedralization"])
    if "room-map" in overlays:
        for start_room, goal_rooms in result.room_map.items():
            for goal_room in goal_rooms:
                cv2.line(flattened, world_to_pixel(grid, start_room.center),
                         world_to_pixel(grid, goal_room.center), OVERLAY_COLOURS["room-map"], 1)
    if "mst" in overlays:
        draw_edges(flattened, grid, result.mst, OVERLAY_COLOURS["mst"])
    for room in result.rooms:
        cv2.circle(flattened, world_to_pixel(grid, room.center), 3, (0, 0, 255), -1)

    panels = [render_level(types, level) for level in range(grid.dimensions[1])] + [flattened]
    labels = [f"Level {level}" for level in range(grid.dimensions[1])] + ["All levels"]
    height = panels[0].shape[0]
    gap = np.zeros((height, PANEL_GAP, 3), dtype=np.uint8)
    row = []
    for panel in panels:
        row.extend([panel, gap])
    image = np.hstack(row[:-1])
    return add_labels(image, labels, panels[0].shape[1] + PANEL_GAP)


def add_labels(image: np.ndarray, labels: List[str], stride: int) -> np.ndarray:
    """Add a caption strip above the panels."""
    strip = np.zeros((LABEL_HEIGHT, image.shape[1], 3), dtype=np.uint8)
    labelled = np.vstack([strip, image])

    # Convert BGR numpy array to RGB PIL Image
    pil_image = PILImage.fromarray(cv2.cvtColor(labelled, cv2.COLOR_BGR2RGB))
    draw = ImageDraw.Draw(pil_image)
    try:
        font = ImageFont.truetype("/System/Library/Fonts/Helvetica.ttc", 14)
    except (IOError, OSError):
        font = ImageFont.load_default()

    for number, label in enumerate(labels):
        draw.text((number * stride + 4, 3), label, fill=(220, 220, 220), font=font)

    # Convert back to BGR numpy array
    return cv2.cvtColor(np.array(pil_image), cv2.COLOR_RGB2BGR)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render a dungeon to an image file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--rooms", "-r",
        type=int,
        default=10,
        help="Number of room placement attempts (default: 10)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducible dungeons",
    )
    parser.add_argument(
        "--grid",
        type=int,
        nargs=3,
        default=[20, 10, 20],
        metavar=("X", "Y", "Z"),
        help="Grid size in cells (default: 20 10 20)",
    )
    parser.add_argument(
        "--overlay",
        nargs="*",
        choices=sorted(OVERLAY_COLOURS),
        default=[],
        help="Graph overlays to draw on the flattened panel",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default="dungeon_render.png",
        help="Output image path (default: dungeon_render.png)",
    )

    args = parser.parse_args()

    if args.seed is not None:
        print(f"Using random seed: {args.seed}")

    config = GeneratorConfig(num_rooms=args.rooms, seed=args.seed, grid_size=tuple(args.grid))
    print(f"Generating dungeon with {args.rooms} room attempts...")
    result = DungeonGenerator(config).generate()
    print(f"Placed {len(result.rooms)} rooms, carved {len(result.paths)} paths")

    image = render_result(result, args.overlay)

    # Save image
    output_path = Path(args.output)
    cv2.imwrite(str(output_path), image)
    print(f"Saved to: {output_path.absolute()}")

    # Print room info
    print(f"\nRooms ({len(result.rooms)}):")
    for number, room in enumerate(result.rooms):
        print(f"  Room {number}: center {room.center}, {len(room)} cells")


if __name__ == "__main__":
    main()
