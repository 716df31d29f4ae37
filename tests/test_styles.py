"""Tests for the built-in stylesheet and style block assembly."""

from __future__ import annotations

from gridchart.styles import FONT_SIZES, FONT_STACK
from gridchart.theme import DEFAULTS, MIX, ChartColors, build_style_block, default_stylesheet


class TestDefaultStylesheet:
    def test_targets_every_public_class(self):
        css = default_stylesheet()
        for selector in (
            ".background",
            ".node ",
            ".node-wrapper text",
            ".connection .path",
            ".connection .arrowhead",
            ".connection text",
        ):
            assert selector in css

    def test_uses_default_colors(self):
        css = default_stylesheet()
        assert f"--bg: {DEFAULTS.bg};" in css
        assert f"--fg: {DEFAULTS.fg};" in css

    def test_derived_colors_use_color_mix(self):
        css = default_stylesheet()
        assert f"var(--fg) {MIX['line']}%" in css
        assert "--line:" not in css

    def test_custom_base_colors(self):
        css = default_stylesheet(ChartColors(bg="#000", fg="#fff"))
        assert "--bg: #000;" in css
        assert "--fg: #fff;" in css

    def test_derived_colors_can_be_pinned_from_user_css(self):
        css = default_stylesheet()
        for variable in ("--line", "--accent", "--surface", "--border"):
            assert f"var({variable}, color-mix(" in css

    def test_font_settings(self):
        css = default_stylesheet()
        assert FONT_STACK in css
        assert f"font-size: {FONT_SIZES['node_text']}px;" in css
        assert f"font-size: {FONT_SIZES['connection_text']}px;" in css


class TestBuildStyleBlock:
    def test_empty(self):
        assert build_style_block([]) == ""
        assert build_style_block(["", "  \n"]) == ""

    def test_joins_sheets_in_order(self):
        assert build_style_block(["a {}", "b {}"]) == "<style>\na {}\nb {}\n</style>"

    def test_cdata_for_markup(self):
        block = build_style_block(["a::after { content: '&'; }"])
        assert block == "<style>\n<![CDATA[\na::after { content: '&'; }\n]]>\n</style>"
