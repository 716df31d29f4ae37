from __future__ import annotations

from dataclasses import dataclass

from .styles import FONT_SIZES, FONT_STACK, FONT_WEIGHTS, STROKE_WIDTHS

# ============================================================================
# Types
# ============================================================================


@dataclass(slots=True, frozen=True)
class ChartColors:
    """Colors baked into the default stylesheet.

    Line, arrow and node colors are mixed from these two with color-mix();
    a user stylesheet can pin them by setting --line, --accent, --surface
    or --border on the svg element.
    """

    bg: str
    fg: str


# ============================================================================
# Defaults
# ============================================================================

DEFAULTS = ChartColors(bg="#FFFFFF", fg="#27272A")

# ============================================================================
# color-mix() weights for derived CSS variables
# ============================================================================

MIX = {
    "line": 50,
    "arrow": 70,
    "node_fill": 3,
    "node_stroke": 40,
    "text_muted": 60,
}


# ============================================================================
# Stylesheets
# ============================================================================


def default_stylesheet(colors: ChartColors = DEFAULTS) -> str:
    """The built-in stylesheet; every rule targets a documented class name."""
    return f"""svg {{
  --bg: {colors.bg};
  --fg: {colors.fg};
  --_line: var(--line, color-mix(in srgb, var(--fg) {MIX["line"]}%, var(--bg)));
  --_arrow: var(--accent, color-mix(in srgb, var(--fg) {MIX["arrow"]}%, var(--bg)));
  --_node-fill: var(--surface, color-mix(in srgb, var(--fg) {MIX["node_fill"]}%, var(--bg)));
  --_node-stroke: var(--border, color-mix(in srgb, var(--fg) {MIX["node_stroke"]}%, var(--bg)));
  --_text-muted: color-mix(in srgb, var(--fg) {MIX["text_muted"]}%, var(--bg));
}}
text {{
  font-family: {FONT_STACK};
}}
.background {{
  fill: var(--bg);
}}
.node {{
  fill: var(--_node-fill);
  stroke: var(--_node-stroke);
  stroke-width: {STROKE_WIDTHS["node"]};
}}
.node-wrapper text {{
  fill: var(--fg);
  font-size: {FONT_SIZES["node_text"]}px;
  font-weight: {FONT_WEIGHTS["node_text"]};
}}
.connection .path {{
  fill: none;
  stroke: var(--_line);
  stroke-width: {STROKE_WIDTHS["connection"]};
}}
.connection .arrowhead {{
  fill: var(--_arrow);
  stroke: none;
}}
.connection text {{
  fill: var(--_text-muted);
  font-size: {FONT_SIZES["connection_text"]}px;
  font-weight: {FONT_WEIGHTS["connection_text"]};
}}"""


def build_style_block(stylesheets: list[str]) -> str:
    """Wrap stylesheets, in cascade order, in one SVG <style> element.

    Returns an empty string when there is nothing to embed.
    """
    sheets = [sheet.strip() for sheet in stylesheets if sheet.strip()]
    if not sheets:
        return ""
    body = "\n".join(sheets)
    if "<" in body or "&" in body:
        body = f"<![CDATA[\n{body}\n]]>"
    return f"<style>\n{body}\n</style>"
