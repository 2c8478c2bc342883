"""
ASCII rendering for span grids.

Draws a grid as a bordered character block using only the public read
accessors (extent, cell_at, is_visible, is_default), the same way any other
renderer would walk it.
"""

from __future__ import annotations

import logging
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from grid_types import SpanCell
from spangrid import SpanGrid

logger = logging.getLogger(__name__)

DEFAULT_CHAR = "_"
COVERED_CHAR = "·"
NO_CONTENT_CHAR = "#"

PALETTE: list[Callable[[str], str]] = [
    chalk.red,
    chalk.green,
    chalk.yellow,
    chalk.blue,
    chalk.magenta,
    chalk.cyan,
    chalk.redBright,
    chalk.greenBright,
    chalk.yellowBright,
    chalk.blueBright,
]


def cell_label(cell: SpanCell) -> str:
    """Single character shown at a cell's anchor."""
    if cell.content is None:
        return NO_CONTENT_CHAR
    text = str(cell.content)
    return text[0] if text else NO_CONTENT_CHAR


def render_grid(
    grid: SpanGrid,
    cell_width: int = 3,
    color: bool = True,
    show_axes: bool = False,
) -> str:
    """
    Render a grid to a string.

    Anchors of placed cells show the cell's label, positions covered by a
    spanning cell show a middle dot, default positions show an underscore.

    Args:
        grid: The grid to render
        cell_width: Characters per position (default 3)
        color: Color each placed cell from a fixed palette (default True)
        show_axes: Print logical column indices above and row indices to the left

    Returns:
        Rendered string, one line per grid row plus the border lines
    """
    if cell_width < 1:
        raise ValueError(f"cell_width must be at least 1, got {cell_width}")

    extent = grid.extent()

    # Colors follow the order in which cells are first met
    cell_colors: dict[int, Callable[[str], str]] = {}

    def colorize(cell: SpanCell) -> Callable[[str], str]:
        if not color:
            return lambda s: s
        if id(cell) not in cell_colors:
            cell_colors[id(cell)] = PALETTE[len(cell_colors) % len(PALETTE)]
        return cell_colors[id(cell)]

    row_labels = [str(row) for row in range(extent.row0, extent.row_end + 1)]
    margin = max(len(label) for label in row_labels) + 1 if show_axes else 0
    grid_width = extent.col_number * cell_width + 2

    lines: list[str] = []

    if show_axes:
        header = "".join(
            str(col)[-cell_width:].center(cell_width) for col in range(extent.col0, extent.col_end + 1)
        )
        lines.append(" " * (margin + 1) + header)

    lines.append(" " * margin + "┌" + "─" * (grid_width - 2) + "┐")

    for row, label in zip(range(extent.row0, extent.row_end + 1), row_labels):
        line_parts = [label.rjust(margin - 1) + " " if show_axes else "", "│"]
        for col in range(extent.col0, extent.col_end + 1):
            if grid.is_default(row, col):
                line_parts.append(DEFAULT_CHAR.center(cell_width))
                continue
            cell = grid.cell_at(row, col)
            char = cell_label(cell) if grid.is_visible(row, col) else COVERED_CHAR
            line_parts.append(colorize(cell)(char.center(cell_width)))
        line_parts.append("│")
        lines.append("".join(line_parts))

    lines.append(" " * margin + "└" + "─" * (grid_width - 2) + "┘")

    logger.debug("render_grid: %d x %d, %d colored cells", extent.row_number, extent.col_number, len(cell_colors))
    return "\n".join(lines)
