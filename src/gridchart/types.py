from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

# ============================================================================
# Enumerations
# ============================================================================

Side = Literal["n", "s", "w", "e"]

NodeShape = Literal[
    "rect",
    "square",
    "ellipse",
    "circle",
    "diamond",
    "angled_square",
]

ArrowheadPolicy = Literal["none", "start", "end", "both"]

SIDES: tuple[str, ...] = ("n", "s", "w", "e")
NODE_SHAPES: tuple[str, ...] = (
    "rect",
    "square",
    "ellipse",
    "circle",
    "diamond",
    "angled_square",
)
ARROWHEAD_POLICIES: tuple[str, ...] = ("none", "start", "end", "both")

DEFAULT_SHAPE: NodeShape = "rect"
DEFAULT_ARROWHEADS: ArrowheadPolicy = "end"

# Grid step (row delta, column delta) for each side/direction
SIDE_STEPS: dict[str, tuple[int, int]] = {
    "n": (-1, 0),
    "s": (1, 0),
    "w": (0, -1),
    "e": (0, 1),
}

# ============================================================================
# Parsed document: syntax tree produced by the parser
# ============================================================================


@dataclass(slots=True, frozen=True)
class LabelRef:
    name: str


@dataclass(slots=True, frozen=True)
class RelativeRef:
    direction: Side


@dataclass(slots=True, frozen=True)
class SelfRef:
    pass


Destination = Union[LabelRef, RelativeRef, SelfRef]


@dataclass(slots=True)
class Attribute:
    """One `key: value` pair, with its source position for error reporting."""

    key: str
    value: Any
    line: int = 0
    column: int = 0


@dataclass(slots=True)
class ConnectionSpec:
    source_side: Side
    dest_side: Side
    destination: Destination
    attributes: list[Attribute] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass(slots=True)
class Occurrence:
    identifier: str
    label: str | None = None
    attributes: list[Attribute] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass(slots=True)
class DefineEntry:
    identifier: str
    attributes: list[Attribute] = field(default_factory=list)
    line: int = 0
    column: int = 0


# A grid cell: None is an empty (`_`) cell
Cell = Union[Occurrence, None]


@dataclass(slots=True)
class Document:
    rows: list[list[Cell]]
    definitions: list[DefineEntry]


# ============================================================================
# Resolved chart: after attribute merging and reference resolution
# ============================================================================


@dataclass(slots=True)
class Point:
    x: float
    y: float


@dataclass(slots=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(slots=True)
class Arrowhead:
    """Triangle marker; `apex` touches the path end named by `end`."""

    end: Literal["start", "end"]
    apex: Point
    left: Point
    right: Point


@dataclass(slots=True)
class ResolvedConnection:
    source: int
    target: int
    source_side: Side
    dest_side: Side
    text: str | None = None
    classes: tuple[str, ...] = ()
    arrowheads: ArrowheadPolicy = DEFAULT_ARROWHEADS
    points: list[Point] = field(default_factory=list)
    arrowhead_marks: list[Arrowhead] = field(default_factory=list)


@dataclass(slots=True)
class ResolvedNode:
    index: int
    identifier: str
    row: int
    col: int
    label: str | None = None
    text: str | None = None
    classes: tuple[str, ...] = ()
    shape: NodeShape = DEFAULT_SHAPE
    box: Box | None = None
    connections: list[ResolvedConnection] = field(default_factory=list)


@dataclass(slots=True)
class Chart:
    """Fully resolved, positioned and routed chart, ready for rendering."""

    width: float
    height: float
    nodes: list[ResolvedNode]

    @property
    def connections(self) -> list[ResolvedConnection]:
        return [conn for node in self.nodes for conn in node.connections]


# ============================================================================
# Config: user-facing configuration for one compilation
# ============================================================================


@dataclass(slots=True, frozen=True)
class Config:
    node_width: float = 200
    node_height: float = 100
    gap_x: float = 50
    gap_y: float = 50
    css: tuple[str, ...] = ()
    default_css: bool = True

    def __post_init__(self) -> None:
        for name in ("node_width", "node_height", "gap_x", "gap_y"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
