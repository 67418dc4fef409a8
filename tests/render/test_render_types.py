"""Tests for render/types.py"""

from termlatex.render.types import CellMetrics, LatexEntry, RenderResult


class TestCellMetrics:
    """Tests for CellMetrics."""

    def test_font_size(self):
        assert CellMetrics(8.0, 20.0).font_size == 14.0

    def test_default(self):
        assert CellMetrics.default() == CellMetrics(8.0, 16.0)

    def test_or_default_none(self):
        assert CellMetrics.or_default(None) == CellMetrics.default()

    def test_or_default_zero(self):
        """零尺寸视为未知"""
        assert CellMetrics.or_default(CellMetrics(0.0, 16.0)) == CellMetrics.default()
        assert CellMetrics.or_default(CellMetrics(8.0, 0.0)) == CellMetrics.default()

    def test_or_default_keeps_valid(self):
        cell = CellMetrics(9.0, 18.0)
        assert CellMetrics.or_default(cell) is cell


class TestRenderResult:
    """Tests for RenderResult."""

    def test_ok(self):
        assert RenderResult(markup="<svg/>", pixel_width=1.0).ok

    def test_failure(self):
        result = RenderResult.failure("bad")
        assert not result.ok
        assert result.error == "bad"

    def test_failure_empty_reason(self):
        assert RenderResult.failure("").error == "Unknown error"


class TestLatexEntry:
    """Tests for LatexEntry."""

    def _entry(self) -> LatexEntry:
        return LatexEntry(
            source="x",
            display=True,
            pixel_width=10.0,
            pixel_height=16.0,
            width_cells=4,
            height_cells=1,
            metrics=CellMetrics(8.0, 16.0),
        )

    def test_resolve_success(self):
        entry = self._entry()
        assert not entry.has_result
        assert entry.resolve(RenderResult(markup="<svg/>"))
        assert entry.markup == "<svg/>"
        assert entry.error is None

    def test_resolve_failure(self):
        entry = self._entry()
        assert entry.resolve(RenderResult.failure("nope"))
        assert entry.error == "nope"
        assert entry.markup is None

    def test_resolve_only_once(self):
        """已有结果时不覆盖"""
        entry = self._entry()
        entry.resolve(RenderResult.failure("nope"))
        assert not entry.resolve(RenderResult(markup="<svg/>"))
        assert entry.error == "nope"
        assert entry.markup is None

    def test_is_stale(self):
        entry = self._entry()
        assert not entry.is_stale(CellMetrics(8.0, 16.0))
        assert entry.is_stale(CellMetrics(10.0, 20.0))

    def test_matches(self):
        entry = self._entry()
        assert entry.matches("x", True)
        assert not entry.matches("x", False)
        assert not entry.matches("y", True)
