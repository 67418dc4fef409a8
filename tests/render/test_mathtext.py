"""Tests for render/mathtext.py"""

import pytest

from termlatex.render.base import safe_render
from termlatex.render.mathtext import MathtextRenderer, sanitize_for_mathtext


class TestSanitizeForMathtext:
    """mathtext 预处理测试"""

    def test_newlines(self):
        assert sanitize_for_mathtext("a\nb") == "a b"

    def test_le_ge(self):
        assert sanitize_for_mathtext("x \\le 1 \\ge 0") == "x \\leq 1 \\geq 0"

    def test_le_prefix_untouched(self):
        """\\left / \\leq 不受影响"""
        assert sanitize_for_mathtext("\\left( \\leq \\geq \\right)") == "\\left( \\leq \\geq \\right)"

    def test_vert(self):
        assert sanitize_for_mathtext("\\lvert x \\rvert") == "| x |"
        assert sanitize_for_mathtext("\\left\\lvert x \\right\\rvert") == "\\left| x \\right|"


class TestMathtextRenderer:
    """matplotlib mathtext 渲染委托测试"""

    @pytest.fixture
    def renderer(self):
        return MathtextRenderer()

    def test_render_simple(self, renderer):
        result = renderer.render("x^2", display=False, font_size=11.2)
        assert result.ok
        assert "<svg" in result.markup
        assert result.pixel_width > 0
        assert result.pixel_height > 0

    def test_render_fraction(self, renderer):
        result = renderer.render("\\frac{1}{2}", display=False, font_size=11.2)
        assert result.ok

    def test_display_is_larger(self, renderer):
        inline = renderer.render("x + y", display=False, font_size=11.2)
        block = renderer.render("x + y", display=True, font_size=11.2)
        assert block.pixel_width > inline.pixel_width

    def test_width_grows_with_content(self, renderer):
        short = renderer.render("x", display=False, font_size=11.2)
        long = renderer.render("x + y + z + w", display=False, font_size=11.2)
        assert long.pixel_width > short.pixel_width

    def test_invalid_expression_fails(self, renderer):
        """缺少参数时解析失败，返回 error 而不是抛异常"""
        result = renderer.render("\\frac{1}", display=False, font_size=11.2)
        assert not result.ok
        assert result.error

    def test_empty_fails(self, renderer):
        assert not renderer.render("   ", display=True, font_size=11.2).ok

    def test_safe_render(self, renderer):
        assert safe_render(renderer, "\\alpha", False, 11.2).ok
