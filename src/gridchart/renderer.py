from __future__ import annotations

import math

from .routing import shape_extents
from .styles import COORDINATE_PRECISION, LINE_HEIGHT_EM, TEXT_BASELINE_SHIFT
from .theme import build_style_block, default_stylesheet
from .types import Arrowhead, Box, Chart, Config, Point, ResolvedConnection, ResolvedNode

# ============================================================================
# SVG renderer: converts a routed Chart into an SVG string.
#
# Layout of the document (class names are part of the public styling API):
#
#   <svg>
#     <style>                       default sheet, then user sheets
#     <rect class="background">
#     <g class="nodes">
#       <g class="node-wrapper ...">  shape.node.<shape>, text
#     <g class="connections">
#       <g class="connection ...">    path.path, path.arrowhead.start|end, text
# ============================================================================


def render_svg(chart: Chart, config: Config | None = None) -> str:
    """Render a routed chart as an SVG string."""
    if config is None:
        config = Config()

    width, height = fmt(chart.width), fmt(chart.height)
    parts: list[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" '
        f'width="{width}" height="{height}">'
    ]

    sheets = [default_stylesheet()] if config.default_css else []
    sheets.extend(config.css)
    style = build_style_block(sheets)
    if style:
        parts.append(style)

    parts.append(f'<rect class="background" x="0" y="0" width="{width}" height="{height}" />')

    # 1. Nodes
    parts.append('<g class="nodes">')
    for node in chart.nodes:
        parts.append(_render_node(node))
    parts.append("</g>")

    # 2. Connections
    parts.append('<g class="connections">')
    for connection in chart.connections:
        parts.append(_render_connection(connection))
    parts.append("</g>")

    parts.append("</svg>")
    return "\n".join(parts) + "\n"


# ============================================================================
# Node rendering
# ============================================================================


def _render_node(node: ResolvedNode) -> str:
    assert node.box is not None
    lines = [f'<g class="{_class_attr("node-wrapper", node.classes)}">']
    lines.append(_render_shape(node))
    if node.text:
        lines.append(_render_text(node.text, Point(x=node.box.cx, y=node.box.cy)))
    lines.append("</g>")
    return "\n".join(lines)


def _render_shape(node: ResolvedNode) -> str:
    box = node.box
    assert box is not None
    shape = node.shape
    cls = f"node {shape}"
    hw, hh = shape_extents(shape, box)

    if shape == "ellipse":
        return (
            f'<ellipse class="{cls}" cx="{fmt(box.cx)}" cy="{fmt(box.cy)}" '
            f'rx="{fmt(hw)}" ry="{fmt(hh)}" />'
        )
    if shape == "circle":
        return f'<circle class="{cls}" cx="{fmt(box.cx)}" cy="{fmt(box.cy)}" r="{fmt(hw)}" />'
    if shape in ("diamond", "angled_square"):
        return f'<polygon class="{cls}" points="{_rhombus_points(box, hw, hh)}" />'
    # rect and square
    return (
        f'<rect class="{cls}" x="{fmt(box.cx - hw)}" y="{fmt(box.cy - hh)}" '
        f'width="{fmt(2 * hw)}" height="{fmt(2 * hh)}" />'
    )


def _rhombus_points(box: Box, hw: float, hh: float) -> str:
    cx, cy = box.cx, box.cy
    corners = [
        Point(x=cx, y=cy - hh),
        Point(x=cx + hw, y=cy),
        Point(x=cx, y=cy + hh),
        Point(x=cx - hw, y=cy),
    ]
    return " ".join(f"{fmt(p.x)},{fmt(p.y)}" for p in corners)


def _render_text(text: str, center: Point) -> str:
    x, y = fmt(center.x), fmt(center.y)
    lines = text.split("\n")
    if len(lines) == 1:
        return f'<text x="{x}" y="{y}" text-anchor="middle" dy="{TEXT_BASELINE_SHIFT}">{escape_xml(text)}</text>'

    # Center the block of lines vertically around the anchor point
    first_offset = -(len(lines) - 1) * LINE_HEIGHT_EM / 2
    spans = []
    for i, line in enumerate(lines):
        dy = first_offset if i == 0 else LINE_HEIGHT_EM
        spans.append(f'<tspan x="{x}" dy="{fmt(dy)}em">{escape_xml(line)}</tspan>')
    return (
        f'<text x="{x}" y="{y}" text-anchor="middle" dy="{TEXT_BASELINE_SHIFT}">'
        + "".join(spans)
        + "</text>"
    )


# ============================================================================
# Connection rendering
# ============================================================================


def _render_connection(connection: ResolvedConnection) -> str:
    lines = [f'<g class="{_class_attr("connection", connection.classes)}">']
    lines.append(f'<path class="path" d="{path_data(connection.points)}" />')
    for mark in connection.arrowhead_marks:
        lines.append(_render_arrowhead(mark))
    if connection.text:
        lines.append(_render_text(connection.text, path_midpoint(connection.points)))
    lines.append("</g>")
    return "\n".join(lines)


def _render_arrowhead(mark: Arrowhead) -> str:
    d = path_data([mark.apex, mark.left, mark.right]) + " Z"
    return f'<path class="arrowhead {mark.end}" d="{d}" />'


def path_data(points: list[Point]) -> str:
    """SVG path `d` attribute for a polyline."""
    commands = []
    for i, p in enumerate(points):
        commands.append(f"{'M' if i == 0 else 'L'} {fmt(p.x)} {fmt(p.y)}")
    return " ".join(commands)


def path_midpoint(points: list[Point]) -> Point:
    """Point halfway along a polyline, measured by length."""
    if not points:
        return Point(x=0, y=0)

    segments = [
        (a, b, math.dist((a.x, a.y), (b.x, b.y))) for a, b in zip(points, points[1:])
    ]
    half = sum(length for _, _, length in segments) / 2
    for a, b, length in segments:
        if length > 0 and half <= length:
            t = half / length
            return Point(x=a.x + (b.x - a.x) * t, y=a.y + (b.y - a.y) * t)
        half -= length
    return points[-1]


# ============================================================================
# Utilities
# ============================================================================


def fmt(value: float) -> str:
    """Format a coordinate deterministically: integers without a decimal point."""
    rounded = round(value, COORDINATE_PRECISION)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{COORDINATE_PRECISION}f}".rstrip("0").rstrip(".")


def _class_attr(base: str, classes: tuple[str, ...]) -> str:
    return " ".join([base, *(escape_xml(c) for c in classes if c != base)])


XML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)


def escape_xml(text: str) -> str:
    """Escape text for use in XML content and attribute values."""
    return text.translate(XML_ESCAPES)

