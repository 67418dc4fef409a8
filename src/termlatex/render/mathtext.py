"""Default rendering delegate built on matplotlib mathtext.

No TeX installation required: matplotlib's own mathtext parser validates the
expression, its layout box gives the measurement and the SVG backend
produces the markup.
"""

import io
import re

from matplotlib import mathtext
from matplotlib.font_manager import FontProperties

from termlatex.telemetry import get_logger, shorten_expr

from .base import LatexRenderer
from .types import RenderResult

logger = get_logger(__name__)

# Block equations are drawn slightly larger than inline ones
DISPLAY_FONT_SCALE = 1.2


def sanitize_for_mathtext(expression: str) -> str:
    r"""Rewrite constructs mathtext parses poorly.

    1. Newlines become spaces.
    2. ``\le``/``\ge`` become ``\leq``/``\geq`` (not followed by a letter,
       so ``\left`` and ``\geq`` are untouched).
    3. ``\lvert``/``\rvert`` become plain bars.
    """
    expression = expression.replace("\n", " ")
    expression = re.sub(r"\\le(?![a-zA-Z])", r"\\leq", expression)
    expression = re.sub(r"\\ge(?![a-zA-Z])", r"\\geq", expression)
    expression = expression.replace(r"\left\lvert", r"\left|")
    expression = expression.replace(r"\right\rvert", r"\right|")
    expression = expression.replace(r"\lvert", "|")
    expression = expression.replace(r"\rvert", "|")
    return expression


class MathtextRenderer(LatexRenderer):
    """Render expressions to SVG with matplotlib mathtext."""

    def __init__(self, math_fontfamily: str = "stix", color: str = "#eeeeee"):
        self._math_fontfamily = math_fontfamily
        self._color = color
        self._parser = mathtext.MathTextParser("path")

    def render(self, expression: str, display: bool, font_size: float) -> RenderResult:
        source = sanitize_for_mathtext(expression).strip()
        if not source:
            return RenderResult.failure("Empty expression")

        size = font_size * DISPLAY_FONT_SCALE if display else font_size
        prop = FontProperties(size=size, math_fontfamily=self._math_fontfamily)
        wrapped = f"${source}$"

        try:
            # dpi=72 makes one point one pixel; height already includes depth
            layout = self._parser.parse(wrapped, dpi=72, prop=prop)
        except ValueError as e:
            logger.debug(f"[Mathtext] Parse failed for {shorten_expr(source)!r}: {e}")
            return RenderResult.failure(str(e))

        buf = io.BytesIO()
        mathtext.math_to_image(wrapped, buf, prop=prop, dpi=72, format="svg", color=self._color)
        return RenderResult(
            markup=buf.getvalue().decode("utf-8"),
            pixel_width=float(layout.width),
            pixel_height=float(layout.height),
        )
