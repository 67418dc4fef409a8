"""缓冲状态流转测试"""

from termlatex.detector.transitions import (
    apply_overflow_valve,
    scan_alternate_screen,
    split_trailing_candidate,
)
from termlatex.detector.types import DetectorPhase, TailSplit


class TestSplitTrailingCandidate:
    """末尾切分规则"""

    def test_no_marker(self):
        split = split_trailing_candidate("plain text")
        assert split == TailSplit(DetectorPhase.IDLE, "plain text")

    def test_inline_truncated_command(self):
        """I1: 单标记 + 控制序列片段 → 缓冲"""
        split = split_trailing_candidate("result: $\\fr")
        assert split.phase == DetectorPhase.BUFFERING_INLINE
        assert split.emitted == "result: "
        assert split.buffered == "$\\fr"

    def test_inline_plain_tail_not_buffered(self):
        """单标记后不像公式 → 原样输出"""
        split = split_trailing_candidate("cost is $5 today")
        assert split == TailSplit(DetectorPhase.IDLE, "cost is $5 today")

    def test_shell_prompt(self):
        """P1: 提示符形状不缓冲"""
        assert split_trailing_candidate("user@host:~$ ").phase == DetectorPhase.IDLE
        assert split_trailing_candidate("user@host:~$").phase == DetectorPhase.IDLE

    def test_block_open(self):
        """B1: 双标记开头总是缓冲"""
        split = split_trailing_candidate("see $$\\int_0")
        assert split.phase == DetectorPhase.BUFFERING_BLOCK
        assert split.emitted == "see "
        assert split.buffered == "$$\\int_0"

    def test_trailing_double_marker(self):
        """末尾恰好是 $$ 时视为块级开标记"""
        split = split_trailing_candidate("abc $$")
        assert split.phase == DetectorPhase.BUFFERING_BLOCK
        assert split.buffered == "$$"

    def test_marker_before_newline(self):
        """N1: 最后一个标记在换行之前 → 不缓冲"""
        split = split_trailing_candidate("a $\\frac\nnext line")
        assert split.phase == DetectorPhase.IDLE

    def test_block_limit(self):
        """候选长度达到上限时不缓冲"""
        assert split_trailing_candidate("$$" + "a" * 97).phase == DetectorPhase.BUFFERING_BLOCK
        assert split_trailing_candidate("$$" + "a" * 98).phase == DetectorPhase.IDLE

    def test_inline_limit(self):
        assert split_trailing_candidate("$\\frac" + "1" * 43).phase == DetectorPhase.BUFFERING_INLINE
        assert split_trailing_candidate("$\\frac" + "1" * 44).phase == DetectorPhase.IDLE

    def test_custom_limits(self):
        assert split_trailing_candidate("$$abcd", block_max=5).phase == DetectorPhase.IDLE

    def test_concatenation_invariant(self):
        for text in ["a $$b", "x $\\fr", "cost $5", "$$"]:
            split = split_trailing_candidate(text)
            assert split.emitted + split.buffered == text


class TestApplyOverflowValve:
    """O1: 缓冲溢出"""

    def test_under_cap(self):
        split = TailSplit(DetectorPhase.BUFFERING_BLOCK, "a", "$$" + "b" * 98)
        assert apply_overflow_valve(split) == (split, False)

    def test_over_cap(self):
        split = TailSplit(DetectorPhase.BUFFERING_BLOCK, "a", "$$" + "b" * 99)
        result, overflowed = apply_overflow_valve(split)
        assert overflowed
        assert result == TailSplit(DetectorPhase.IDLE, "a$$" + "b" * 99)

    def test_custom_cap(self):
        split = TailSplit(DetectorPhase.BUFFERING_INLINE, "", "$\\fr")
        _, overflowed = apply_overflow_valve(split, hard_cap=3)
        assert overflowed


class TestScanAlternateScreen:
    """备用屏幕切换检测"""

    def test_no_sequence(self):
        assert scan_alternate_screen("plain $x$") is None

    def test_enter(self):
        assert scan_alternate_screen("\x1b[?1049h\x1b[H") is True
        assert scan_alternate_screen("\x1b[?47h") is True
        assert scan_alternate_screen("\x1b[?1047h") is True

    def test_exit(self):
        assert scan_alternate_screen("\x1b[?1049l") is False

    def test_last_sequence_wins(self):
        assert scan_alternate_screen("\x1b[?1049h...\x1b[?1049l") is False
        assert scan_alternate_screen("\x1b[?1049l...\x1b[?1049h") is True
