from __future__ import annotations

# ============================================================================
# Rendering constants
# ============================================================================

FONT_FAMILY = "Inter"
FONT_STACK = f"'{FONT_FAMILY}', system-ui, sans-serif"

# Fixed font sizes (px)
FONT_SIZES = {
    "node_text": 14,
    "connection_text": 12,
}

# Font weights per element type
FONT_WEIGHTS = {
    "node_text": 500,
    "connection_text": 400,
}

STROKE_WIDTHS = {
    "node": 1.5,
    "connection": 1.5,
}

TEXT_BASELINE_SHIFT = "0.35em"

# Vertical distance between stacked lines of multi-line text
LINE_HEIGHT_EM = 1.2

# Equilateral triangle drawn at connection ends
ARROW_HEAD = {
    "size": 12,
}

# Decimal places kept when writing coordinates
COORDINATE_PRECISION = 2
