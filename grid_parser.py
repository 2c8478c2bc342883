"""
Grid parsing utilities for span grids.

Provides two parsing formats:
1. Standard format with space-separated tokens
2. Concise format with single-character cells

In both, a rectangle of identical tokens becomes one SpanCell covering the
rectangle, with the token as its anonymous content.
"""

from __future__ import annotations

from grid_types import BoundaryRules, SpanCell
from spangrid import SpanGrid

__all__ = ["parse_grid", "parse_grid_concise"]

DEFAULT_TOKEN = "_"


def parse_grid(
    definition: str,
    row0: int = 0,
    col0: int = 0,
    rules: BoundaryRules | None = None,
) -> SpanGrid:
    """
    Parse a grid from a compact string format.

    Format:
    - Rows separated by |
    - Cells separated by single spaces
    - Underscore (_) or an empty string (from multiple adjacent spaces): default position
    - Any other token: content. Identical tokens must form one filled rectangle,
      which becomes a single span cell.

    Example:
        "a a b|a a _|c c c"
        Creates a 3x3 grid with a 2x2 cell "a" at (0, 0), a 1x1 cell "b" at (0, 2),
        a default position at (1, 2) and a 1x3 cell "c" at (2, 0).

    Args:
        definition: The grid definition
        row0: Logical index of the first row
        col0: Logical index of the first column
        rules: Boundary rules for the new grid (all FIXED if omitted)

    Returns:
        SpanGrid holding the parsed cells

    Raises:
        ValueError: If rows differ in length or a token is not a rectangle
    """
    row_strings = definition.split("|")
    # Multiple spaces = multiple default positions
    rows = [row_str.split(" ") for row_str in row_strings]

    cols = len(rows[0])
    mismatched = [(i, len(row)) for i, row in enumerate(rows) if len(row) != cols]
    if mismatched:
        error_msg = (
            f"Inconsistent row lengths in grid definition\n"
            f"  Expected: {cols} columns (from row 0)\n"
            f"  Mismatched rows:\n"
        )
        for row_idx, actual_cols in mismatched:
            error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{row_strings[row_idx]}\"\n"
        error_msg += "  All rows must have the same number of cells"
        raise ValueError(error_msg)

    return _build(rows, row0, col0, rules)


def parse_grid_concise(
    definition: str,
    row0: int = 0,
    col0: int = 0,
    rules: BoundaryRules | None = None,
) -> SpanGrid:
    """
    Parse a grid where every character is one position.

    Format:
    - Rows separated by |
    - Underscore (_): default position
    - Any other non-space character: content, grouped into rectangles as in parse_grid
    - Short rows are padded with default positions

    Example:
        "aab|aa|ccc" is the same grid as parse_grid("a a b|a a _|c c c").
    """
    row_strings = [row_str.strip() for row_str in definition.strip().split("|")]
    for row_idx, row_str in enumerate(row_strings):
        if " " in row_str:
            raise ValueError(
                f"Invalid character ' ' in concise grid definition\n"
                f"  Row {row_idx}: \"{row_str}\"\n"
                f"  Use '{DEFAULT_TOKEN}' for default positions"
            )

    rows = [list(row_str) for row_str in row_strings]
    max_cols = max(len(row) for row in rows)
    if max_cols == 0:
        raise ValueError("Empty grid definition")
    rows = [row + [DEFAULT_TOKEN] * (max_cols - len(row)) for row in rows]

    return _build(rows, row0, col0, rules)


def _build(
    rows: list[list[str]],
    row0: int,
    col0: int,
    rules: BoundaryRules | None,
) -> SpanGrid:
    """Group identical tokens into rectangles and place them in a new grid."""
    positions: dict[str, list[tuple[int, int]]] = {}
    for r, row in enumerate(rows):
        for c, token in enumerate(row):
            if token and token != DEFAULT_TOKEN:
                positions.setdefault(token, []).append((r, c))

    grid = SpanGrid(len(rows), len(rows[0]), row0, col0, rules)

    # Anchors are the first occurrence in row-major order
    for token, cells in sorted(positions.items(), key=lambda item: item[1][0]):
        top = min(r for r, _ in cells)
        bottom = max(r for r, _ in cells)
        left = min(c for _, c in cells)
        right = max(c for _, c in cells)
        row_span = bottom - top + 1
        col_span = right - left + 1

        if len(cells) != row_span * col_span:
            raise ValueError(
                f"Token '{token}' does not form a filled rectangle\n"
                f"  Bounding box: rows {top}..{bottom}, columns {left}..{right}\n"
                f"  Found {len(cells)} of {row_span * col_span} positions"
            )

        cell = SpanCell(row_span, col_span).set_content(token)
        grid.set_cell(cell, top + row0, left + col0)

    return grid
