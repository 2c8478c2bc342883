"""
Property tests: random operation sequences keep the grid consistent.
"""

from hypothesis import given, settings, strategies as st

from grid_types import Axis, BoundaryCondition, CheckResult, Edge, GridError, SpanCell
from spangrid import SpanGrid
from test_spangrid import snapshot

conditions = st.sampled_from(list(BoundaryCondition))
edges = st.sampled_from(list(Edge))
axes = st.sampled_from(list(Axis))

place = st.tuples(
    st.just("place"),
    st.integers(-4, 9),
    st.integers(-4, 9),
    st.integers(1, 4),
    st.integers(1, 4),
)
grow = st.tuples(st.just("grow"), edges, st.integers(1, 3))
set_condition = st.tuples(st.just("condition"), edges, conditions)
compact = st.tuples(st.just("compact"), st.one_of(edges, axes))
coalesce = st.tuples(st.just("coalesce"), axes)

operations = st.lists(
    st.one_of(place, place, place, grow, set_condition, compact, coalesce),
    max_size=25,
)


def check_consistency(grid: SpanGrid) -> None:
    """Every position is covered by at most one cell, and anchors match spans."""
    extent = grid.extent()
    assert extent.row_end == extent.row0 + grid.row_number - 1
    assert extent.col_end == extent.col0 + grid.col_number - 1

    covered: dict[tuple[int, int], int] = {}
    for row, col, cell in grid.visible_cells():
        assert row + cell.row_span - 1 <= extent.row_end
        assert col + cell.col_span - 1 <= extent.col_end
        for r in range(row, row + cell.row_span):
            for c in range(col, col + cell.col_span):
                assert grid.cell_at(r, c) is cell
                assert not grid.is_default(r, c)
                assert grid.is_visible(r, c) == ((r, c) == (row, col))
                covered[(r, c)] = covered.get((r, c), 0) + 1

    for r in range(extent.row0, extent.row_end + 1):
        for c in range(extent.col0, extent.col_end + 1):
            if grid.is_default(r, c):
                assert grid.is_visible(r, c)
                assert (r, c) not in covered
            else:
                assert covered[(r, c)] == 1


class TestRandomOperations:
    """Random placement, growth, compaction and coalescing sequences."""

    @settings(deadline=None, max_examples=200)
    @given(start=conditions, ops=operations)
    def test_grid_stays_consistent(self, start: BoundaryCondition, ops: list[tuple]) -> None:
        grid = SpanGrid(5, 5)
        grid.set_boundary_condition(Edge.TOP, start)
        grid.set_boundary_condition(Edge.RIGHT, start)

        for op in ops:
            match op:
                case ("place", row, col, row_span, col_span):
                    cell = SpanCell(row_span, col_span)
                    before = snapshot(grid)
                    try:
                        result = grid.set_cell(cell, row, col)
                    except GridError:
                        assert snapshot(grid) == before
                        assert (cell.row_span, cell.col_span) == (row_span, col_span)
                    else:
                        if result is None:
                            assert snapshot(grid) == before
                        else:
                            assert grid.cell_at(result.row, result.col) is cell
                            assert grid.is_visible(result.row, result.col)
                            assert result.row_end - result.row + 1 == cell.row_span
                            assert result.col_end - result.col + 1 == cell.col_span
                            assert result.modified == ((cell.row_span, cell.col_span) != (row_span, col_span))
                case ("grow", edge, count):
                    grid.grow(edge, count)
                case ("condition", edge, condition):
                    grid.set_boundary_condition(edge, condition)
                case ("compact", location):
                    if grid.is_empty():
                        continue
                    grid.compact(location)
                    assert not grid.compact(location)
                case ("coalesce", axis):
                    grid.coalesce(axis)
                    assert not any(
                        grid.is_default(r, c)
                        for r in range(grid.row0, grid.row_end + 1)
                        for c in range(grid.col0, grid.col_end + 1)
                    )
            check_consistency(grid)

    @settings(deadline=None)
    @given(
        row=st.integers(-6, 10),
        col=st.integers(-6, 10),
        row_span=st.integers(1, 7),
        col_span=st.integers(1, 7),
        top=conditions,
        bottom=conditions,
        left=conditions,
        right=conditions,
    )
    def test_probe_matches_placement(
        self,
        row: int,
        col: int,
        row_span: int,
        col_span: int,
        top: BoundaryCondition,
        bottom: BoundaryCondition,
        left: BoundaryCondition,
        right: BoundaryCondition,
    ) -> None:
        """can_set_cell predicts set_cell exactly and changes nothing itself."""
        grid = SpanGrid(5, 5)
        grid.set_cell(SpanCell(2, 2), 2, 2)
        for edge, condition in zip(Edge, (top, bottom, left, right)):
            grid.set_boundary_condition(edge, condition)

        before = snapshot(grid)
        answer = grid.can_set_cell(SpanCell(row_span, col_span), row, col)
        assert snapshot(grid) == before

        try:
            result = grid.set_cell(SpanCell(row_span, col_span), row, col)
        except GridError:
            assert answer is CheckResult.NO
        else:
            assert answer is (CheckResult.FULLY_CLIPPED if result is None else CheckResult.YES)
