"""Tests for the SVG renderer.

Uses hand-built Chart data so the output can be checked without running
layout and routing.
"""

from __future__ import annotations

import pytest

from gridchart.renderer import escape_xml, fmt, path_data, path_midpoint, render_svg
from gridchart.routing import build_arrowheads
from gridchart.types import Box, Chart, Config, Point, ResolvedConnection, ResolvedNode


def make_node(**overrides) -> ResolvedNode:
    """Helper to build a positioned node."""
    defaults = dict(
        index=0,
        identifier="a",
        row=0,
        col=0,
        text="Test",
        shape="rect",
        box=Box(x=50, y=50, width=200, height=100),
    )
    defaults.update(overrides)
    return ResolvedNode(**defaults)


def make_connection(**overrides) -> ResolvedConnection:
    """Helper to build a routed connection with an end arrowhead."""
    points = overrides.pop("points", [Point(x=150, y=150), Point(x=150, y=200)])
    defaults = dict(
        source=0,
        target=1,
        source_side="s",
        dest_side="n",
        points=points,
        arrowhead_marks=build_arrowheads(points, overrides.get("arrowheads", "end")),
    )
    defaults.update(overrides)
    return ResolvedConnection(**defaults)


def make_chart(**overrides) -> Chart:
    defaults = dict(width=300, height=200, nodes=[make_node()])
    defaults.update(overrides)
    return Chart(**defaults)


# ============================================================================
# Document structure
# ============================================================================


class TestDocument:
    def test_root_element(self):
        svg = render_svg(make_chart(width=300, height=350))
        assert svg.startswith(
            '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 350" width="300" height="350">'
        )
        assert svg.endswith("</svg>\n")

    def test_element_order(self):
        node_b = make_node(index=1, identifier="b", row=1, box=Box(50, 200, 200, 100))
        chart = make_chart(nodes=[make_node(connections=[make_connection()]), node_b])
        svg = render_svg(chart)
        order = [
            svg.index("<style>"),
            svg.index('<rect class="background"'),
            svg.index('<g class="nodes">'),
            svg.index('<g class="connections">'),
        ]
        assert order == sorted(order)
        assert svg.index('<g class="connection">') > svg.index('<g class="connections">')

    def test_background_covers_canvas(self):
        svg = render_svg(make_chart())
        assert '<rect class="background" x="0" y="0" width="300" height="200" />' in svg

    def test_empty_chart(self):
        svg = render_svg(make_chart(width=50, height=50, nodes=[]))
        assert '<g class="nodes">\n</g>' in svg
        assert '<g class="connections">\n</g>' in svg

    def test_deterministic(self):
        chart = make_chart(nodes=[make_node(connections=[make_connection(text="go")])])
        assert render_svg(chart) == render_svg(chart)


# ============================================================================
# Styles
# ============================================================================


class TestStyleBlock:
    def test_default_stylesheet_is_embedded(self):
        svg = render_svg(make_chart())
        assert ".node-wrapper text" in svg
        assert ".connection .arrowhead" in svg

    def test_user_css_comes_after_default(self):
        svg = render_svg(make_chart(), Config(css=(".node { fill: red; }",)))
        assert svg.index(".node { fill: red; }") > svg.index(".background {")

    def test_user_sheets_keep_their_order(self):
        svg = render_svg(make_chart(), Config(css=("/* one */", "/* two */")))
        assert svg.index("/* one */") < svg.index("/* two */")

    def test_no_default_css(self):
        svg = render_svg(make_chart(), Config(default_css=False))
        assert "<style>" not in svg

    def test_only_user_css(self):
        svg = render_svg(make_chart(), Config(default_css=False, css=(".node { fill: red; }",)))
        assert "<style>\n.node { fill: red; }\n</style>" in svg
        assert "color-mix" not in svg

    def test_markup_characters_use_cdata(self):
        svg = render_svg(
            make_chart(),
            Config(default_css=False, css=(".node::after { content: '<&>'; }",)),
        )
        assert "<![CDATA[" in svg


# ============================================================================
# Nodes
# ============================================================================


class TestNodes:
    def test_rect(self):
        svg = render_svg(make_chart())
        assert '<rect class="node rect" x="50" y="50" width="200" height="100" />' in svg

    def test_square_is_centered(self):
        svg = render_svg(make_chart(nodes=[make_node(shape="square")]))
        assert '<rect class="node square" x="100" y="50" width="100" height="100" />' in svg

    def test_ellipse(self):
        svg = render_svg(make_chart(nodes=[make_node(shape="ellipse")]))
        assert '<ellipse class="node ellipse" cx="150" cy="100" rx="100" ry="50" />' in svg

    def test_circle(self):
        svg = render_svg(make_chart(nodes=[make_node(shape="circle")]))
        assert '<circle class="node circle" cx="150" cy="100" r="50" />' in svg

    def test_diamond(self):
        svg = render_svg(make_chart(nodes=[make_node(shape="diamond")]))
        assert '<polygon class="node diamond" points="150,50 250,100 150,150 50,100" />' in svg

    def test_angled_square(self):
        svg = render_svg(make_chart(nodes=[make_node(shape="angled_square")]))
        assert (
            '<polygon class="node angled_square" points="150,50 200,100 150,150 100,100" />'
            in svg
        )

    def test_wrapper_classes(self):
        svg = render_svg(make_chart(nodes=[make_node(classes=("warn", "big"))]))
        assert '<g class="node-wrapper warn big">' in svg

    def test_text_is_centered(self):
        svg = render_svg(make_chart(nodes=[make_node(text="Hello")]))
        assert '<text x="150" y="100" text-anchor="middle" dy="0.35em">Hello</text>' in svg

    def test_no_text_element_without_text(self):
        svg = render_svg(make_chart(nodes=[make_node(text=None)]))
        assert "<text" not in svg

    def test_multiline_text(self):
        svg = render_svg(make_chart(nodes=[make_node(text="one\ntwo")]))
        assert '<tspan x="150" dy="-0.6em">one</tspan><tspan x="150" dy="1.2em">two</tspan>' in svg

    def test_text_is_escaped(self):
        svg = render_svg(make_chart(nodes=[make_node(text='<a & "b">')]))
        assert "&lt;a &amp; &quot;b&quot;&gt;" in svg


# ============================================================================
# Connections
# ============================================================================


class TestConnections:
    def test_path(self):
        chart = make_chart(nodes=[make_node(connections=[make_connection()])])
        svg = render_svg(chart)
        assert '<path class="path" d="M 150 150 L 150 200" />' in svg

    def test_connection_classes(self):
        chart = make_chart(nodes=[make_node(connections=[make_connection(classes=("hot",))])])
        assert '<g class="connection hot">' in render_svg(chart)

    def test_arrowheads_follow_path(self):
        chart = make_chart(nodes=[make_node(connections=[make_connection(arrowheads="both")])])
        svg = render_svg(chart)
        start = svg.index('<path class="arrowhead start" d="M 150 150 L')
        end = svg.index('<path class="arrowhead end" d="M 150 200 L')
        assert svg.index('<path class="path"') < start < end
        assert svg.count(" Z\" />") == 2

    def test_no_arrowheads(self):
        chart = make_chart(nodes=[make_node(connections=[make_connection(arrowheads="none")])])
        assert "arrowhead" not in render_svg(chart, Config(default_css=False))

    def test_text_at_path_midpoint(self):
        chart = make_chart(nodes=[make_node(connections=[make_connection(text="yes")])])
        svg = render_svg(chart)
        assert '<text x="150" y="175" text-anchor="middle" dy="0.35em">yes</text>' in svg


# ============================================================================
# Helpers
# ============================================================================


class TestHelpers:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (100, "100"),
            (100.0, "100"),
            (2.5, "2.5"),
            (10.3923, "10.39"),
            (-6.0, "-6"),
            (0.001, "0"),
        ],
    )
    def test_fmt(self, value, expected):
        assert fmt(value) == expected

    def test_path_data(self):
        assert path_data([Point(0, 0), Point(10.5, 0), Point(10.5, 20)]) == "M 0 0 L 10.5 0 L 10.5 20"

    def test_path_midpoint_by_length(self):
        mid = path_midpoint([Point(0, 0), Point(0, 10), Point(10, 10)])
        assert (mid.x, mid.y) == (0, 10)

    def test_path_midpoint_inside_segment(self):
        mid = path_midpoint([Point(0, 0), Point(30, 0), Point(30, 10)])
        assert (mid.x, mid.y) == (20, 0)

    def test_path_midpoint_degenerate(self):
        assert path_midpoint([]) == Point(0, 0)
        assert path_midpoint([Point(3, 4)]) == Point(3, 4)

    def test_escape_xml(self):
        assert escape_xml("a<b>&'\"") == "a&lt;b&gt;&amp;&#39;&quot;"
