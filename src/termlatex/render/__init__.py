"""Expression rendering module."""

from .base import ERROR_MARKUP, LatexRenderer, safe_render
from .mathtext import MathtextRenderer, sanitize_for_mathtext
from .snapshot import SnapshotRenderer
from .store import ExpressionStore
from .types import CellMetrics, LatexEntry, RenderResult

__all__ = [
    "LatexRenderer",
    "MathtextRenderer",
    "SnapshotRenderer",
    "ExpressionStore",
    "CellMetrics",
    "LatexEntry",
    "RenderResult",
    "ERROR_MARKUP",
    "safe_render",
    "sanitize_for_mathtext",
]
