"""识别谓词测试"""

import pytest

from termlatex.detector.predicates import (
    accept_inline_candidate,
    is_shell_prompt_shape,
    looks_like_math,
)


class TestAcceptInlineCandidate:
    """行内候选接受规则"""

    @pytest.mark.parametrize("text", ["x", "5", "abcdef", "a b c"])
    def test_short_accepted(self, text):
        """长度 < 7 直接接受"""
        assert accept_inline_candidate(text)

    def test_seven_chars_without_indicator_rejected(self):
        assert not accept_inline_candidate("abcdefg")

    @pytest.mark.parametrize("text", ["a + b = c", "x^2 + y^2", "\\alpha\\beta", "a > b > c", "n < 100 items"])
    def test_indicator_accepted(self, text):
        assert accept_inline_candidate(text)

    def test_prose_rejected(self):
        assert not accept_inline_candidate("5 today and tomorrow")

    def test_too_long_rejected(self):
        """含数学符号但长度 >= 150 也拒绝"""
        assert not accept_inline_candidate("x + " * 40)


class TestLooksLikeMath:
    """末尾片段数学判断"""

    @pytest.mark.parametrize("text", ["\\frac{1", "x^{2", "a_{i", "\\sqrt", "1 \\cdot"])
    def test_contains_pattern(self, text):
        assert looks_like_math(text)

    @pytest.mark.parametrize("text", ["\\fr", "\\sq", "\\be", "x \\"])
    def test_truncated_command(self, text):
        """chunk 切在控制序列中间"""
        assert looks_like_math(text)

    @pytest.mark.parametrize("text", ["5 today", "HOME/bin", "\\xyz", "x^2"])
    def test_not_math(self, text):
        assert not looks_like_math(text)


class TestIsShellPromptShape:
    """shell 提示符形状"""

    def test_trailing_single_marker(self):
        assert is_shell_prompt_shape("", is_block=False)

    def test_space_after_marker(self):
        assert is_shell_prompt_shape(" ls -la", is_block=False)

    def test_text_after_marker(self):
        assert not is_shell_prompt_shape("x", is_block=False)

    def test_block_never_prompt(self):
        assert not is_shell_prompt_shape("", is_block=True)
        assert not is_shell_prompt_shape(" x", is_block=True)
