"""gridchart: compile grid-based flowchart descriptions to SVG."""

from __future__ import annotations

import logging

from .attributes import resolve_attributes
from .errors import (
    ChartError,
    ChartSyntaxError,
    DuplicateAttributeError,
    DuplicateDefineEntryError,
    DuplicateLabelError,
    MisplacedTextShorthandError,
    NoAdjacentNodeError,
    UnknownValueError,
    UnresolvedLabelError,
)
from .grid import Grid, document_size
from .layout import layout_nodes
from .parser import parse_document
from .references import resolve_references
from .renderer import render_svg
from .routing import route_connections
from .theme import default_stylesheet
from .types import Chart, Config, Document

__version__ = "0.1.0"

__all__ = [
    "render_flowchart",
    "compile_flowchart",
    "parse_document",
    "render_svg",
    "default_stylesheet",
    "Chart",
    "Config",
    "Document",
    "ChartError",
    "ChartSyntaxError",
    "DuplicateAttributeError",
    "DuplicateDefineEntryError",
    "DuplicateLabelError",
    "MisplacedTextShorthandError",
    "NoAdjacentNodeError",
    "UnknownValueError",
    "UnresolvedLabelError",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())


def compile_flowchart(text: str, config: Config | None = None) -> Chart:
    """Parse, resolve, lay out and route a flowchart.

    Raises a ChartError subclass on the first problem found; nothing is
    rendered in that case.
    """
    if config is None:
        config = Config()

    document = parse_document(text)
    drafts = resolve_attributes(document)
    rows, cols = document_size(document)
    grid = Grid.from_positions(((d.row, d.col) for d in drafts), rows, cols)
    nodes = resolve_references(drafts, grid)
    nodes, width, height = layout_nodes(nodes, grid, config)
    nodes = route_connections(nodes, grid, config)
    return Chart(width=width, height=height, nodes=nodes)


def render_flowchart(text: str, config: Config | None = None) -> str:
    """Render flowchart source text to an SVG string."""
    if config is None:
        config = Config()
    return render_svg(compile_flowchart(text, config), config)
