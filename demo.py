"""
Demonstration script for the span grid.
"""

import logging

from ascii_render import render_grid
from grid_parser import parse_grid_concise
from grid_types import Axis, BoundaryCondition, Edge, SpanCell
from spangrid import SpanGrid


def banner(title: str) -> None:
    print("=" * 40)
    print(title)
    print("=" * 40)


def placement_demo() -> None:
    """Spanning cells, growth and clipping."""
    grid = SpanGrid(3, 3)
    grid.set_grow()

    banner("2x2 cell at (0, 0) in a 3x3 grid:")
    grid.set_cell(SpanCell(2, 2).set_content("A"), 0, 0)
    print(render_grid(grid, show_axes=True))
    print()

    banner("1x1 cell at (-2, 0), top edge grows:")
    result = grid.set_cell(SpanCell().set_content("B"), -2, 0)
    print(result)
    print(render_grid(grid, show_axes=True))
    print()

    banner("1x4 cell at (2, 2), right edge clips:")
    grid.set_boundary_condition(Edge.RIGHT, BoundaryCondition.CLIPPING)
    cell = SpanCell(1, 4).set_content("C")
    result = grid.set_cell(cell, 2, 2)
    print(result, "-> col_span now", cell.col_span)
    print(render_grid(grid, show_axes=True))
    print()


def compaction_demo() -> None:
    """Compaction and coalescing on a sparse grid."""
    grid = parse_grid_concise("______|_aa___|_aa__b|______|____cc", row0=-1, col0=-1)
    grid.add_tag(Axis.ROW, 1, "total")

    banner("Sparse grid:")
    print(render_grid(grid, show_axes=True))
    print()

    banner("Compacted along rows and columns:")
    grid.compact(Axis.ROW, Axis.COLUMN)
    print(render_grid(grid, show_axes=True))
    print("row tagged 'total':", [row for row in range(grid.row0, grid.row_end + 1) if grid.has_tag(Axis.ROW, row, "total")])
    print()

    banner("Coalesced along rows:")
    grid.coalesce(Axis.ROW)
    print(render_grid(grid, show_axes=True))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    placement_demo()
    print()
    compaction_demo()
