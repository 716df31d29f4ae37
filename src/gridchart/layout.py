from __future__ import annotations

import logging
from dataclasses import replace

from .grid import Grid
from .types import Box, Config, ResolvedNode

logger = logging.getLogger(__name__)

# ============================================================================
# Grid layout
#
# Every cell is node_width x node_height, separated by gap_x / gap_y, with
# a gap-wide border around the whole grid. Rows are never re-flowed: a node
# keeps its column index even when its row is shorter than others.
# ============================================================================


def cell_box(row: int, col: int, config: Config) -> Box:
    """Pixel bounding box of the grid cell at (row, col)."""
    return Box(
        x=col * (config.node_width + config.gap_x) + config.gap_x,
        y=row * (config.node_height + config.gap_y) + config.gap_y,
        width=config.node_width,
        height=config.node_height,
    )


def canvas_size(grid: Grid, config: Config) -> tuple[float, float]:
    """Width and height of the canvas holding the whole grid plus its border."""
    width = grid.cols * config.node_width + (grid.cols + 1) * config.gap_x
    height = grid.rows * config.node_height + (grid.rows + 1) * config.gap_y
    return width, height


def layout_nodes(
    nodes: list[ResolvedNode], grid: Grid, config: Config
) -> tuple[list[ResolvedNode], float, float]:
    """Assign pixel boxes to nodes.

    Returns new node records plus the canvas width and height.
    """
    positioned = [replace(node, box=cell_box(node.row, node.col, config)) for node in nodes]
    width, height = canvas_size(grid, config)
    logger.debug(
        "laid out %d nodes on a %dx%d grid (%sx%s px)",
        len(positioned),
        grid.rows,
        grid.cols,
        width,
        height,
    )
    return positioned, width, height
