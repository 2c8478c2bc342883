"""
Shared type definitions for the span grid system.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

DEFAULT_GRID_SIZE = 50
TAG_EMPTY_VALUE = ""


# =============================================================================
# Errors
# =============================================================================


class GridError(Exception):
    """Base class for every grid-specific failure."""


class InvalidArgumentError(GridError, ValueError):
    """A required value is missing, or a span/count/size is not positive."""


class OutOfRangeError(GridError, IndexError):
    """A logical coordinate lies outside the grid, or a fixed edge refuses a placement."""


class CellConflictError(GridError, ValueError):
    """A placement would overwrite a position already covered by a placed cell."""


class UnsupportedOperationError(GridError, RuntimeError):
    """The operation has no defined result for the grid in its current state."""


# =============================================================================
# Locations and Policy
# =============================================================================


class Axis(Enum):
    """Rows or columns of the grid."""

    ROW = "row"
    COLUMN = "column"


class Edge(Enum):
    """One of the four grid boundaries."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @property
    def axis(self) -> Axis:
        """The axis that grows or shrinks when this edge moves."""
        return Axis.ROW if self in (Edge.TOP, Edge.BOTTOM) else Axis.COLUMN

    @property
    def is_leading(self) -> bool:
        """True for the edges at the low-index end (top and left)."""
        return self in (Edge.TOP, Edge.LEFT)


class BoundaryCondition(Enum):
    """What happens when a placement extends past an edge."""

    FIXED = "fixed"  # Refuse the placement
    CLIPPING = "clipping"  # Truncate the cell to the current bounds
    GROW = "grow"  # Grow the grid until the cell fits


class CheckResult(Enum):
    """Answer of a side-effect-free placement probe."""

    NO = "no"
    FULLY_CLIPPED = "fully_clipped"
    YES = "yes"


@dataclass(frozen=True)
class BoundaryRules:
    """Boundary condition per edge. All edges are fixed unless stated otherwise."""

    top: BoundaryCondition = BoundaryCondition.FIXED
    bottom: BoundaryCondition = BoundaryCondition.FIXED
    left: BoundaryCondition = BoundaryCondition.FIXED
    right: BoundaryCondition = BoundaryCondition.FIXED

    @classmethod
    def uniform(cls, condition: BoundaryCondition) -> BoundaryRules:
        """Same condition on all four edges."""
        return cls(top=condition, bottom=condition, left=condition, right=condition)

    def for_edge(self, edge: Edge) -> BoundaryCondition:
        return getattr(self, edge.value)

    def with_edge(self, edge: Edge, condition: BoundaryCondition) -> BoundaryRules:
        return replace(self, **{edge.value: condition})


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class Extent:
    """Logical bounds of a grid, inclusive at both ends."""

    row0: int
    col0: int
    row_end: int
    col_end: int

    @property
    def row_number(self) -> int:
        return self.row_end - self.row0 + 1

    @property
    def col_number(self) -> int:
        return self.col_end - self.col0 + 1

    def contains(self, row: int, col: int) -> bool:
        return self.row0 <= row <= self.row_end and self.col0 <= col <= self.col_end


@dataclass(frozen=True)
class SetResult:
    """
    Where a cell actually landed.

    The anchor and end coordinates are logical and reflect the grid after any
    growth. They can differ from the requested location when clipping moved the
    anchor; `modified` is True iff the cell's span was truncated.
    """

    row: int
    col: int
    row_end: int
    col_end: int
    modified: bool = False


# =============================================================================
# Cells
# =============================================================================


_MISSING: Any = object()


def _check_span(span: int, name: str) -> None:
    if not isinstance(span, int) or isinstance(span, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {span!r}")
    if span < 1:
        raise InvalidArgumentError(f"{name} must be larger than 0, got {span}")


def _key_name(key: str | Enum) -> str:
    if key is None:
        raise InvalidArgumentError("key may not be None")
    return key.name if isinstance(key, Enum) else key


class SpanCell:
    """
    A unit of content covering row_span x col_span grid positions.

    Content is opaque to the grid: one anonymous value, a keyed map, a style
    marker and a set of string hints. The span is read-only from outside; the
    grid only ever changes it while clipping the cell during placement. A cell
    belongs to at most one grid, recorded as its owner once it is placed.
    """

    def __init__(
        self,
        row_span: int = 1,
        col_span: int = 1,
        content: Any = None,
        contents: dict[str, Any] | None = None,
        style: Enum | str | None = None,
        hints: set[str] | None = None,
    ) -> None:
        _check_span(row_span, "row_span")
        _check_span(col_span, "col_span")
        self._row_span = row_span
        self._col_span = col_span
        self.content = content
        self.contents: dict[str, Any] = dict(contents) if contents else {}
        self.style = style
        self.hints: set[str] = set(hints) if hints else set()
        self._owner: object | None = None

    def __repr__(self) -> str:
        return (
            f"SpanCell(row_span={self._row_span}, col_span={self._col_span}, "
            f"content={self.content!r})"
        )

    @property
    def row_span(self) -> int:
        return self._row_span

    @property
    def col_span(self) -> int:
        return self._col_span

    @property
    def is_placed(self) -> bool:
        """True once a grid has taken the cell."""
        return self._owner is not None

    def set_content(self, key_or_value: Any, value: Any = _MISSING) -> SpanCell:
        """
        Set the anonymous content (one argument) or a keyed content (two arguments).

        Enum keys are stored under their name. Neither keys nor values may be None.
        """
        if value is _MISSING:
            if key_or_value is None:
                raise InvalidArgumentError("value may not be None")
            self.content = key_or_value
            return self
        if value is None:
            raise InvalidArgumentError("value may not be None")
        self.contents[_key_name(key_or_value)] = value
        return self

    def get_content(self, key: str | Enum | None = None) -> Any:
        if key is None:
            return self.content
        return self.contents.get(_key_name(key))

    def has_content(self, key: str | Enum) -> bool:
        return _key_name(key) in self.contents

    def set_style(self, style: Enum | str) -> SpanCell:
        if style is None:
            raise InvalidArgumentError("style may not be None")
        self.style = style
        return self

    def add_hint(self, hint: str | Enum) -> SpanCell:
        if hint is None:
            raise InvalidArgumentError("hint may not be None")
        self.hints.add(hint.name if isinstance(hint, Enum) else hint)
        return self

    def contains_hint(self, hint: str | Enum) -> bool:
        if hint is None:
            raise InvalidArgumentError("hint may not be None")
        return (hint.name if isinstance(hint, Enum) else hint) in self.hints

    def copy(self) -> SpanCell:
        """An unplaced duplicate with the same span and content."""
        return SpanCell(
            self._row_span,
            self._col_span,
            self.content,
            self.contents,
            self.style,
            self.hints,
        )

    def _truncate(self, row_span: int, col_span: int) -> None:
        # Only called by SpanGrid while clipping
        _check_span(row_span, "row_span")
        _check_span(col_span, "col_span")
        self._row_span = row_span
        self._col_span = col_span


class _DefaultCell(SpanCell):
    """The shared 1x1 sentinel for untouched positions. Never mutated."""

    def __init__(self) -> None:
        object.__setattr__(self, "_frozen", False)
        super().__init__()
        self.contents = MappingProxyType({})  # type: ignore[assignment]
        self.hints = frozenset()  # type: ignore[assignment]
        object.__setattr__(self, "_frozen", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise UnsupportedOperationError("the default cell is immutable")
        object.__setattr__(self, name, value)

    def set_content(self, key_or_value: Any, value: Any = _MISSING) -> SpanCell:
        raise UnsupportedOperationError("the default cell is immutable")

    def set_style(self, style: Enum | str) -> SpanCell:
        raise UnsupportedOperationError("the default cell is immutable")

    def add_hint(self, hint: str | Enum) -> SpanCell:
        raise UnsupportedOperationError("the default cell is immutable")

    def _truncate(self, row_span: int, col_span: int) -> None:
        raise UnsupportedOperationError("the default cell is immutable")

    def __repr__(self) -> str:
        return "DEFAULT_CELL"


DEFAULT_CELL: SpanCell = _DefaultCell()
