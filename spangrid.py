"""
Mutable two-dimensional grid of span cells.

A SpanGrid addresses its positions with logical indices: rows run from row0 to
row_end and columns from col0 to col_end, and both origins shift when the grid
grows or is compacted at its top or left edge. Every position holds either the
shared DEFAULT_CELL or a reference to a placed SpanCell; a cell covering several
positions is referenced from all of them and is visible only at its anchor
(top-left) position.

Placement runs in two phases: resolve (pure, see resolve_axis) then apply.
Along each axis the requested span falls into one of six cases relative to the
current bounds [0, size - 1]:

    1. entirely before the leading edge
    2. starts before the leading edge, ends inside
    3. starts before the leading edge, ends past the trailing edge
    4. entirely inside
    5. starts inside, ends past the trailing edge
    6. entirely past the trailing edge

The edge's BoundaryCondition then decides: FIXED refuses, CLIPPING truncates
(cases 1 and 6 clip the whole cell away), GROW adds exactly the missing rows or
columns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from grid_types import (
    DEFAULT_CELL,
    DEFAULT_GRID_SIZE,
    TAG_EMPTY_VALUE,
    Axis,
    BoundaryCondition,
    BoundaryRules,
    CellConflictError,
    CheckResult,
    Edge,
    Extent,
    InvalidArgumentError,
    OutOfRangeError,
    SetResult,
    SpanCell,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Axis Resolution (pure)
# =============================================================================


@dataclass(frozen=True)
class AxisPlan:
    """
    Resolved placement along one axis.

    start and end are matrix offsets on the axis as it will be once grow_lead
    positions have been added before offset 0 and grow_trail positions after
    the last one.
    """

    start: int
    end: int
    grow_lead: int = 0
    grow_trail: int = 0
    clipped: bool = False

    @property
    def span(self) -> int:
        return self.end - self.start + 1


def classify(start: int, end: int, size: int) -> int:
    """Return which of the six placement cases [start, end] is in against [0, size - 1]."""
    if end < 0:
        return 1
    if start < 0:
        return 2 if end < size else 3
    if start < size:
        return 4 if end < size else 5
    return 6


def _refusal(span: int, size: int, axis: Axis, origin: int) -> OutOfRangeError:
    noun = "row" if axis is Axis.ROW else "col"
    if span > size:
        return OutOfRangeError(
            f"Cell has too many {noun}s ({span}). Maximum {noun} number is {size}"
        )
    return OutOfRangeError(
        f"{noun} must be between {origin} and {origin + size - span}"
    )


def resolve_axis(
    start: int,
    span: int,
    size: int,
    lead: BoundaryCondition,
    trail: BoundaryCondition,
    axis: Axis = Axis.ROW,
    origin: int = 0,
) -> AxisPlan | None:
    """
    Apply the boundary conditions of one axis to a requested span.

    Args:
        start: Requested first offset (may be negative)
        span: Number of positions the cell covers (>= 1)
        size: Current number of positions on the axis
        lead: Condition at the leading edge (top or left)
        trail: Condition at the trailing edge (bottom or right)
        axis: Only used for error messages
        origin: Logical index of offset 0, only used for error messages

    Returns:
        The resolved AxisPlan, or None if clipping removes the cell entirely

    Raises:
        OutOfRangeError: If a FIXED edge refuses the placement
    """
    end = start + span - 1
    case = classify(start, end, size)

    if case == 4:
        return AxisPlan(start, end)

    if case in (1, 6):
        condition = lead if case == 1 else trail
        match condition:
            case BoundaryCondition.FIXED:
                raise OutOfRangeError(
                    f"Cell lies completely outside of the grid "
                    f"({axis.value} {start + origin}..{end + origin}, "
                    f"bounds {origin}..{origin + size - 1})"
                )
            case BoundaryCondition.CLIPPING:
                return None
            case BoundaryCondition.GROW:
                if case == 1:
                    return AxisPlan(0, span - 1, grow_lead=-start)
                return AxisPlan(start, end, grow_trail=end - size + 1)

    grow_lead = 0
    grow_trail = 0
    clipped = False

    # Cases 2 and 3 cross the leading edge
    if case in (2, 3):
        match lead:
            case BoundaryCondition.FIXED:
                raise _refusal(span, size, axis, origin)
            case BoundaryCondition.CLIPPING:
                start = 0
                clipped = True
            case BoundaryCondition.GROW:
                grow_lead = -start
                start = 0
                end = span - 1

    # Cases 3 and 5 cross the trailing edge
    if case in (3, 5):
        grown_size = size + grow_lead
        match trail:
            case BoundaryCondition.FIXED:
                raise _refusal(span, size, axis, origin)
            case BoundaryCondition.CLIPPING:
                end = grown_size - 1
                clipped = True
            case BoundaryCondition.GROW:
                grow_trail = end - grown_size + 1

    return AxisPlan(start, end, grow_lead, grow_trail, clipped)


# =============================================================================
# Grid
# =============================================================================


class SpanGrid:
    """
    A resizable grid whose cells may span several rows and columns.

    Three parallel structures describe each position: the cell matrix (None
    stands for DEFAULT_CELL), the visibility matrix, and the row/column tags
    keyed by logical index.
    """

    def __init__(
        self,
        rows: int = DEFAULT_GRID_SIZE,
        cols: int = DEFAULT_GRID_SIZE,
        row0: int = 0,
        col0: int = 0,
        rules: BoundaryRules | None = None,
    ) -> None:
        _check_count(rows, "rows")
        _check_count(cols, "cols")

        self._row0 = row0
        self._col0 = col0
        self._rows = rows
        self._cols = cols
        self._cells: list[list[SpanCell | None]] = [[None] * cols for _ in range(rows)]
        self._visible: list[list[bool]] = [[True] * cols for _ in range(rows)]
        self._rules = rules if rules is not None else BoundaryRules()
        self._tags: dict[Axis, dict[int, dict[str, str]]] = {Axis.ROW: {}, Axis.COLUMN: {}}
        self._placed = 0

    def __repr__(self) -> str:
        return (
            f"SpanGrid(rows={self._rows}, cols={self._cols}, "
            f"row0={self._row0}, col0={self._col0}, placed={self._placed})"
        )

    # -------------------------------------------------------------------------
    # Extent
    # -------------------------------------------------------------------------

    @property
    def row0(self) -> int:
        return self._row0

    @property
    def col0(self) -> int:
        return self._col0

    @property
    def row_end(self) -> int:
        return self._row0 + self._rows - 1

    @property
    def col_end(self) -> int:
        return self._col0 + self._cols - 1

    @property
    def row_number(self) -> int:
        return self._rows

    @property
    def col_number(self) -> int:
        return self._cols

    def extent(self) -> Extent:
        return Extent(self._row0, self._col0, self.row_end, self.col_end)

    def is_empty(self) -> bool:
        """True iff no position holds a placed cell."""
        return self._placed == 0

    # -------------------------------------------------------------------------
    # Boundary conditions
    # -------------------------------------------------------------------------

    @property
    def rules(self) -> BoundaryRules:
        return self._rules

    def get_boundary_condition(self, edge: Edge) -> BoundaryCondition:
        _check_edge(edge)
        return self._rules.for_edge(edge)

    def set_boundary_condition(self, edge: Edge, condition: BoundaryCondition) -> None:
        _check_edge(edge)
        if not isinstance(condition, BoundaryCondition):
            raise InvalidArgumentError(f"condition must be a BoundaryCondition, got {condition!r}")
        self._rules = self._rules.with_edge(edge, condition)

    def set_fixed(self) -> None:
        self._rules = BoundaryRules.uniform(BoundaryCondition.FIXED)

    def set_clipping(self) -> None:
        self._rules = BoundaryRules.uniform(BoundaryCondition.CLIPPING)

    def set_grow(self) -> None:
        self._rules = BoundaryRules.uniform(BoundaryCondition.GROW)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def _offset(self, row: int, col: int) -> tuple[int, int]:
        r = row - self._row0
        c = col - self._col0
        if not 0 <= r < self._rows:
            raise OutOfRangeError(f"row must be between {self._row0} and {self.row_end}, got {row}")
        if not 0 <= c < self._cols:
            raise OutOfRangeError(f"col must be between {self._col0} and {self.col_end}, got {col}")
        return r, c

    def cell_at(self, row: int, col: int) -> SpanCell:
        """The cell covering a logical position (DEFAULT_CELL if untouched)."""
        r, c = self._offset(row, col)
        cell = self._cells[r][c]
        return DEFAULT_CELL if cell is None else cell

    def is_visible(self, row: int, col: int) -> bool:
        """True at the anchor of a placed cell and at every default position."""
        r, c = self._offset(row, col)
        return self._visible[r][c]

    def is_default(self, row: int, col: int) -> bool:
        r, c = self._offset(row, col)
        return self._cells[r][c] is None

    def visible_cells(self) -> Iterator[tuple[int, int, SpanCell]]:
        """Yield (row, col, cell) for the anchor of every placed cell, row-major."""
        for r, row in enumerate(self._cells):
            for c, cell in enumerate(row):
                if cell is not None and self._visible[r][c]:
                    yield r + self._row0, c + self._col0, cell

    # -------------------------------------------------------------------------
    # Growth
    # -------------------------------------------------------------------------

    def grow(self, edge: Edge, count: int = 1) -> None:
        """
        Add count default rows or columns at the given edge.

        Growing at the top or left moves row0 or col0 down by count, so the
        logical index of every existing position (and every tag) is unchanged.
        """
        _check_edge(edge)
        _check_count(count, "count")

        match edge:
            case Edge.TOP:
                self._cells = [[None] * self._cols for _ in range(count)] + self._cells
                self._visible = [[True] * self._cols for _ in range(count)] + self._visible
                self._row0 -= count
                self._rows += count
            case Edge.BOTTOM:
                self._cells = self._cells + [[None] * self._cols for _ in range(count)]
                self._visible = self._visible + [[True] * self._cols for _ in range(count)]
                self._rows += count
            case Edge.LEFT:
                self._cells = [[None] * count + row for row in self._cells]
                self._visible = [[True] * count + row for row in self._visible]
                self._col0 -= count
                self._cols += count
            case Edge.RIGHT:
                self._cells = [row + [None] * count for row in self._cells]
                self._visible = [row + [True] * count for row in self._visible]
                self._cols += count

        logger.info("grow: %d at %s -> %s", count, edge.value, self.extent())

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def _plan(self, cell: SpanCell, row: int, col: int) -> tuple[AxisPlan, AxisPlan] | None:
        """
        Resolve a placement without touching the grid.

        Rows are resolved before columns; a row axis that clips the cell away
        ends the resolution before the column conditions are consulted.
        """
        if cell is None:
            raise InvalidArgumentError("cell may not be None")
        if cell is DEFAULT_CELL:
            raise InvalidArgumentError("DEFAULT_CELL cannot be placed")
        if cell.is_placed:
            raise InvalidArgumentError("cell is already placed in a grid")

        rows_plan = resolve_axis(
            row - self._row0,
            cell.row_span,
            self._rows,
            self._rules.top,
            self._rules.bottom,
            Axis.ROW,
            self._row0,
        )
        if rows_plan is None:
            return None
        cols_plan = resolve_axis(
            col - self._col0,
            cell.col_span,
            self._cols,
            self._rules.left,
            self._rules.right,
            Axis.COLUMN,
            self._col0,
        )
        if cols_plan is None:
            return None

        # Positions added by growth are default, only the existing ones can conflict
        for r in range(rows_plan.start, rows_plan.end + 1):
            old_r = r - rows_plan.grow_lead
            if not 0 <= old_r < self._rows:
                continue
            for c in range(cols_plan.start, cols_plan.end + 1):
                old_c = c - cols_plan.grow_lead
                if 0 <= old_c < self._cols and self._cells[old_r][old_c] is not None:
                    raise CellConflictError(
                        f"Cell conflict when trying to add cell at location "
                        f"({old_r + self._row0}/{old_c + self._col0}): already covered by a cell"
                    )

        return rows_plan, cols_plan

    def can_set_cell(self, cell: SpanCell, row: int, col: int) -> CheckResult:
        """
        Probe whether set_cell would succeed, without changing anything.

        A cell that is already placed (here or in another grid) is refused with
        NO. None and DEFAULT_CELL still raise InvalidArgumentError.
        """
        if cell is not None and cell.is_placed:
            return CheckResult.NO
        try:
            plan = self._plan(cell, row, col)
        except (OutOfRangeError, CellConflictError):
            return CheckResult.NO
        return CheckResult.FULLY_CLIPPED if plan is None else CheckResult.YES

    def set_cell(self, cell: SpanCell, row: int, col: int) -> SetResult | None:
        """
        Place a cell with its anchor at the logical position (row, col).

        Args:
            cell: An unplaced SpanCell; it is owned by the grid afterwards
            row: Requested logical anchor row
            col: Requested logical anchor column

        Returns:
            SetResult with the actual anchor and end positions, or None if the
            cell was clipped away entirely

        Raises:
            InvalidArgumentError: If cell is None, DEFAULT_CELL, or already placed in any grid
            OutOfRangeError: If a FIXED edge refuses the placement
            CellConflictError: If the resolved rectangle overlaps a placed cell
        """
        plan = self._plan(cell, row, col)
        if plan is None:
            logger.debug("set_cell: cell at (%d, %d) clipped away entirely", row, col)
            return None
        rows_plan, cols_plan = plan

        if rows_plan.grow_lead:
            self.grow(Edge.TOP, rows_plan.grow_lead)
        if rows_plan.grow_trail:
            self.grow(Edge.BOTTOM, rows_plan.grow_trail)
        if cols_plan.grow_lead:
            self.grow(Edge.LEFT, cols_plan.grow_lead)
        if cols_plan.grow_trail:
            self.grow(Edge.RIGHT, cols_plan.grow_trail)

        modified = rows_plan.clipped or cols_plan.clipped
        if modified:
            cell._truncate(rows_plan.span, cols_plan.span)

        for r in range(rows_plan.start, rows_plan.end + 1):
            for c in range(cols_plan.start, cols_plan.end + 1):
                self._cells[r][c] = cell
                self._visible[r][c] = False
        self._visible[rows_plan.start][cols_plan.start] = True
        cell._owner = self
        self._placed += 1

        result = SetResult(
            rows_plan.start + self._row0,
            cols_plan.start + self._col0,
            rows_plan.end + self._row0,
            cols_plan.end + self._col0,
            modified,
        )
        logger.debug("set_cell: requested (%d, %d) -> %s", row, col, result)
        return result

    def add_grid(self, other: SpanGrid, row0: int, col0: int) -> None:
        """
        Place a copy of every placed cell of other, shifted by (row0, col0).

        Each copy goes through set_cell, so this grid's boundary conditions
        apply. Cells placed before a failing one stay placed.
        """
        if other is None:
            raise InvalidArgumentError("other may not be None")
        for row, col, cell in list(other.visible_cells()):
            self.set_cell(cell.copy(), row0 + row, col0 + col)

    # -------------------------------------------------------------------------
    # Compaction
    # -------------------------------------------------------------------------

    def _row_is_default(self, r: int) -> bool:
        return all(cell is None for cell in self._cells[r])

    def _col_is_default(self, c: int) -> bool:
        return all(row[c] is None for row in self._cells)

    def compact(self, *locations: Edge | Axis) -> bool:
        """
        Remove rows and columns that hold only default cells.

        An Edge removes the consecutive default rows/columns at that edge; an
        Axis removes every default row (Axis.ROW) or column (Axis.COLUMN)
        anywhere in the grid. Without arguments all four edges are compacted.

        Returns:
            True if the extent of the grid changed

        Raises:
            UnsupportedOperationError: If the grid holds no placed cell
        """
        if self.is_empty():
            raise UnsupportedOperationError(
                "The grid has no cells defined - compacting it would make it disappear"
            )
        if not locations:
            locations = (Edge.LEFT, Edge.RIGHT, Edge.TOP, Edge.BOTTOM)
        for location in locations:
            if not isinstance(location, (Edge, Axis)):
                raise InvalidArgumentError(f"location must be an Edge or an Axis, got {location!r}")

        before = self.extent()
        for location in locations:
            match location:
                case Edge():
                    self._compact_edge(location)
                case Axis():
                    self._compact_axis(location)

        changed = self.extent() != before
        if changed:
            logger.info("compact: %s -> %s", before, self.extent())
        return changed

    def _compact_edge(self, edge: Edge) -> None:
        count = 0
        match edge:
            case Edge.TOP:
                while count < self._rows and self._row_is_default(count):
                    count += 1
                if count:
                    self._cells = self._cells[count:]
                    self._visible = self._visible[count:]
                    self._drop_tags(Axis.ROW, self._row0, self._row0 + count)
                    self._row0 += count
                    self._rows -= count
            case Edge.BOTTOM:
                while count < self._rows and self._row_is_default(self._rows - 1 - count):
                    count += 1
                if count:
                    self._drop_tags(Axis.ROW, self.row_end - count + 1, self.row_end + 1)
                    self._cells = self._cells[: self._rows - count]
                    self._visible = self._visible[: self._rows - count]
                    self._rows -= count
            case Edge.LEFT:
                while count < self._cols and self._col_is_default(count):
                    count += 1
                if count:
                    self._cells = [row[count:] for row in self._cells]
                    self._visible = [row[count:] for row in self._visible]
                    self._drop_tags(Axis.COLUMN, self._col0, self._col0 + count)
                    self._col0 += count
                    self._cols -= count
            case Edge.RIGHT:
                while count < self._cols and self._col_is_default(self._cols - 1 - count):
                    count += 1
                if count:
                    self._drop_tags(Axis.COLUMN, self.col_end - count + 1, self.col_end + 1)
                    self._cells = [row[: self._cols - count] for row in self._cells]
                    self._visible = [row[: self._cols - count] for row in self._visible]
                    self._cols -= count
        logger.debug("compact: removed %d at %s", count, edge.value)

    def _compact_axis(self, axis: Axis) -> None:
        if axis is Axis.ROW:
            keep = [r for r in range(self._rows) if not self._row_is_default(r)]
            size, origin = self._rows, self._row0
        else:
            keep = [c for c in range(self._cols) if not self._col_is_default(c)]
            size, origin = self._cols, self._col0

        if not keep:
            raise UnsupportedOperationError(
                f"Compaction would remove every {axis.value} of the grid"
            )
        if len(keep) == size:
            return

        # Retained rows/columns close up behind the first retained one
        new_origin = origin + keep[0]
        old_tags = self._tags[axis]
        self._tags[axis] = {
            new_origin + i: old_tags[origin + k] for i, k in enumerate(keep) if origin + k in old_tags
        }

        if axis is Axis.ROW:
            self._cells = [self._cells[r] for r in keep]
            self._visible = [self._visible[r] for r in keep]
            self._row0 = new_origin
            self._rows = len(keep)
        else:
            self._cells = [[row[c] for c in keep] for row in self._cells]
            self._visible = [[row[c] for c in keep] for row in self._visible]
            self._col0 = new_origin
            self._cols = len(keep)
        logger.debug("compact: kept %d of %d along %s", len(keep), size, axis.value)

    # -------------------------------------------------------------------------
    # Coalescing
    # -------------------------------------------------------------------------

    def coalesce(self, axis: Axis) -> bool:
        """
        Replace each maximal run of default positions with one placed cell.

        Axis.ROW scans every row and places 1 x n cells; Axis.COLUMN scans
        every column and places n x 1 cells.

        Returns:
            True if at least one run was replaced
        """
        if not isinstance(axis, Axis):
            raise InvalidArgumentError(f"axis must be an Axis, got {axis!r}")

        placed = 0
        if axis is Axis.ROW:
            for r in range(self._rows):
                for start, length in list(_default_runs(self._cells[r])):
                    self.set_cell(SpanCell(1, length), r + self._row0, start + self._col0)
                    placed += 1
        else:
            for c in range(self._cols):
                column = [row[c] for row in self._cells]
                for start, length in _default_runs(column):
                    self.set_cell(SpanCell(length, 1), start + self._row0, c + self._col0)
                    placed += 1

        if placed:
            logger.info("coalesce: %d cells placed along %s", placed, axis.value)
        return placed > 0

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def _check_index(self, axis: Axis, index: int) -> None:
        if not isinstance(axis, Axis):
            raise InvalidArgumentError(f"axis must be an Axis, got {axis!r}")
        if axis is Axis.ROW and not self._row0 <= index <= self.row_end:
            raise OutOfRangeError(f"row must be between {self._row0} and {self.row_end}, got {index}")
        if axis is Axis.COLUMN and not self._col0 <= index <= self.col_end:
            raise OutOfRangeError(f"col must be between {self._col0} and {self.col_end}, got {index}")

    def add_tag(self, axis: Axis, index: int, name: str, value: str = TAG_EMPTY_VALUE) -> None:
        """Attach a named marker (optionally with a value) to a whole row or column."""
        if name is None:
            raise InvalidArgumentError("tag name may not be None")
        if value is None:
            raise InvalidArgumentError("tag value may not be None")
        self._check_index(axis, index)
        self._tags[axis].setdefault(index, {})[name] = value

    def has_tag(self, axis: Axis, index: int, name: str) -> bool:
        if name is None:
            raise InvalidArgumentError("tag name may not be None")
        self._check_index(axis, index)
        return name in self._tags[axis].get(index, {})

    def get_tag(self, axis: Axis, index: int, name: str) -> str | None:
        if name is None:
            raise InvalidArgumentError("tag name may not be None")
        self._check_index(axis, index)
        return self._tags[axis].get(index, {}).get(name)

    def tags(self, axis: Axis, index: int) -> dict[str, str]:
        self._check_index(axis, index)
        return dict(self._tags[axis].get(index, {}))

    def _drop_tags(self, axis: Axis, start: int, stop: int) -> None:
        for index in range(start, stop):
            self._tags[axis].pop(index, None)


# =============================================================================
# Helpers
# =============================================================================


def _default_runs(line: list[SpanCell | None]) -> Iterator[tuple[int, int]]:
    """Yield (start, length) of every maximal run of None in line."""
    start: int | None = None
    for i, cell in enumerate(line):
        if cell is None:
            if start is None:
                start = i
        elif start is not None:
            yield start, i - start
            start = None
    if start is not None:
        yield start, len(line) - start


def _check_edge(edge: Edge) -> None:
    if not isinstance(edge, Edge):
        raise InvalidArgumentError(f"edge must be an Edge, got {edge!r}")


def _check_count(count: int, name: str) -> None:
    if not isinstance(count, int) or isinstance(count, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {count!r}")
    if count <= 0:
        raise InvalidArgumentError(f"{name} must be greater than 0, got {count}")
