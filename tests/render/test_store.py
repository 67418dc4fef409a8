"""Tests for render/store.py"""

from termlatex.render.store import ExpressionStore
from termlatex.render.types import CellMetrics, LatexEntry
from termlatex.telemetry import metrics


def make_entry(source: str = "x^2", display: bool = False, markup: str | None = "<svg/>") -> LatexEntry:
    return LatexEntry(
        source=source,
        display=display,
        pixel_width=40.0,
        pixel_height=16.0,
        width_cells=5,
        height_cells=1,
        metrics=CellMetrics(8.0, 16.0),
        markup=markup,
    )


class TestExpressionStore:
    """Tests for ExpressionStore class."""

    def test_initial_state(self):
        store = ExpressionStore()
        assert len(store) == 0
        assert store.get("abc") is None
        assert "abc" not in store

    def test_put_and_get(self):
        store = ExpressionStore()
        entry = make_entry()
        store.put("abc", entry)

        assert store.get("abc") is entry
        assert "abc" in store
        assert store.hashes() == ["abc"]
        assert metrics.get_gauge("store.size") == 1

    def test_overwrite_same_expression(self):
        """同一表达式重复写入不计为冲突"""
        store = ExpressionStore()
        store.put("abc", make_entry())
        store.put("abc", make_entry())

        assert len(store) == 1
        assert metrics.get_counter("store.collisions") == 0

    def test_collision_last_write_wins(self):
        """不同表达式同 hash：后写覆盖并计数"""
        store = ExpressionStore()
        store.put("abc", make_entry("x^2"))
        second = make_entry("y^2")
        store.put("abc", second)

        assert store.get("abc") is second
        assert metrics.get_counter("store.collisions") == 1

    def test_no_eviction_over_capacity(self):
        """超过声明容量只告警，不淘汰"""
        store = ExpressionStore(max_size=2)
        for i in range(4):
            store.put(f"h{i:02d}", make_entry(f"x_{i}"))

        assert len(store) == 4
        assert all(f"h{i:02d}" in store for i in range(4))
        assert metrics.get_counter("store.over_capacity") == 2

    def test_default_capacity(self):
        assert ExpressionStore().max_size == 5000

    def test_clear(self):
        store = ExpressionStore()
        store.put("abc", make_entry())
        store.clear()

        assert len(store) == 0
        assert store.get("abc") is None
        assert metrics.get_gauge("store.size") == 0
