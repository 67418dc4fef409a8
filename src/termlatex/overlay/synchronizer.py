"""Overlay Synchronizer

Keeps positioned overlay elements in sync with the placeholder tokens visible
in the host grid.

Reconciliation (mark-and-sweep):
    mark all records stale → scan visible rows → decode tokens → resolve in
    store → create/update record (fresh) → remove records still stale
"""

from termlatex import config
from termlatex.adapters.base import GridHost
from termlatex.core.placeholder import decode_placeholders
from termlatex.render.base import ERROR_MARKUP, LatexRenderer, safe_render
from termlatex.render.store import ExpressionStore
from termlatex.render.types import CellMetrics, LatexEntry
from termlatex.telemetry import format_hash_log, get_logger, metrics
from termlatex.timer import Timer

from .layout import place_block, place_inline
from .surface import OverlaySurface
from .types import OverlayRecord, ThemeColors

logger = get_logger(__name__)

SCROLL_TASK = "overlay.scroll"
RESIZE_TASK = "overlay.resize"


class OverlaySynchronizer:
    """Overlay Synchronizer

    Coordinates:
    - Host notifications (render → immediate pass, scroll → debounced pass,
      resize → clear + delayed rebuild)
    - Token scanning of the visible viewport
    - Layout of block / inline overlays
    - Lazy rendering of entries stored without a result

    Tracking is keyed by hash: when one hash is visible twice, only the
    last-scanned position is kept.
    """

    def __init__(
        self,
        host: GridHost,
        store: ExpressionStore,
        surface: OverlaySurface,
        renderer: LatexRenderer | None = None,
        timer: Timer | None = None,
        min_placeholder_width: int | None = None,
        scroll_debounce: float | None = None,
        resize_delay: float | None = None,
    ):
        """Initialize the synchronizer.

        Args:
            host: Grid host to read rows, metrics and theme from
            store: Expression store shared with the processor
            surface: Positioned render target
            renderer: Delegate for entries stored without a render result
            timer: Scheduler for debounce / rebuild delays
            min_placeholder_width: Minimum inline overlay width in cells
            scroll_debounce: Quiet interval before a scroll pass (seconds)
            resize_delay: Delay before rebuilding after resize (seconds)
        """
        self._host = host
        self._store = store
        self._surface = surface
        self._renderer = renderer
        self._timer = timer or Timer()
        self._min_cells = min_placeholder_width or config.MIN_PLACEHOLDER_WIDTH
        self._scroll_debounce = scroll_debounce or config.SCROLL_DEBOUNCE_SECONDS
        self._resize_delay = resize_delay or config.RESIZE_REBUILD_DELAY_SECONDS

        self._records: dict[str, OverlayRecord] = {}
        self._cached_colors: ThemeColors | None = None
        self._unsubscribers: list = []
        self._enabled = True
        self._disposed = False

    @property
    def records(self) -> dict[str, OverlayRecord]:
        """Currently tracked overlays, keyed by hash."""
        return dict(self._records)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _active(self) -> bool:
        return self._enabled and not self._disposed

    # === Host notifications ===

    def attach(self) -> None:
        """Subscribe to the host's render / scroll / resize notifications."""
        if self._unsubscribers or self._disposed:
            return
        self._unsubscribers = [
            self._host.on_render.subscribe(self._on_render),
            self._host.on_scroll.subscribe(self._on_scroll),
            self._host.on_resize.subscribe(self._on_resize),
        ]

    def _on_render(self) -> None:
        if self._active():
            self.reconcile()

    def _on_scroll(self) -> None:
        if self._active():
            self._schedule(SCROLL_TASK, self._scroll_debounce)

    def _on_resize(self) -> None:
        if not self._active():
            return
        # Positions are invalid until the host finishes re-laying out
        self.clear_all()
        self._schedule(RESIZE_TASK, self._resize_delay)

    def _schedule(self, name: str, delay: float) -> None:
        try:
            self._timer.register_delay(name, delay, self._run_scheduled)
        except RuntimeError:
            # No running event loop: reconcile right away
            logger.debug(f"[Overlay] No event loop for '{name}', reconciling immediately")
            self.reconcile()

    def _run_scheduled(self) -> None:
        if self._active():
            self.reconcile()

    # === Reconciliation ===

    def reconcile(self) -> int:
        """Run one mark-and-sweep pass over the visible viewport.

        Never raises; failures are logged and counted.

        Returns:
            Number of overlays tracked after the pass
        """
        if not self._active():
            return 0

        try:
            self._reconcile()
        except Exception as e:
            logger.error(f"[Overlay] Reconciliation failed: {e}")
            metrics.inc("overlay.errors")

        metrics.inc("overlay.reconcile")
        metrics.gauge("overlay.tracked", len(self._records))
        return len(self._records)

    def _reconcile(self) -> None:
        for record in self._records.values():
            record.fresh = False

        cell = CellMetrics.or_default(self._host.cell_metrics())
        colors = self._colors()
        cols = self._host.cols
        viewport_y = self._host.viewport_y

        for row in range(self._host.rows):
            text = self._host.get_line(viewport_y + row)
            if not text:
                continue
            for hash_code, col in decode_placeholders(text):
                entry = self._store.get(hash_code)
                if entry is None:
                    metrics.inc("overlay.unresolved")
                    continue
                self._place(hash_code, entry, row, col, cell, cols, colors)

        for hash_code in [h for h, r in self._records.items() if not r.fresh]:
            self._remove(hash_code)

    def _place(
        self,
        hash_code: str,
        entry: LatexEntry,
        row: int,
        col: int,
        cell: CellMetrics,
        cols: int,
        colors: ThemeColors,
    ) -> None:
        record = self._records.get(hash_code)
        if record is None:
            element = self._surface.create(hash_code, entry.display)
            record = OverlayRecord(hash_code=hash_code, element=element)
            self._records[hash_code] = record
            metrics.inc("overlay.created")
            logger.debug(format_hash_log("Overlay", hash_code, f"Created at ({row}, {col})"))

        if entry.display:
            placement = place_block(row, entry, cell, cols, colors)
        else:
            placement = place_inline(row, col, entry, cell, cols, self._min_cells, colors)

        self._surface.update(record.element, self._markup_for(hash_code, entry), placement)
        record.row = row
        record.col = col
        record.placement = placement
        record.fresh = True

    def _markup_for(self, hash_code: str, entry: LatexEntry) -> str:
        """Rendered markup, populating the entry lazily on first use."""
        if not entry.has_result and self._renderer is not None:
            result = safe_render(self._renderer, entry.source, entry.display, entry.metrics.font_size)
            entry.resolve(result)
            if entry.error:
                logger.debug(format_hash_log("Overlay", hash_code, f"Render failed: {entry.error}"))

        if entry.error:
            return ERROR_MARKUP
        return entry.markup or ""

    def _remove(self, hash_code: str) -> None:
        record = self._records.pop(hash_code, None)
        if record is None:
            return
        self._surface.remove(record.element)
        metrics.inc("overlay.removed")
        logger.debug(format_hash_log("Overlay", hash_code, "Removed"))

    def clear_all(self) -> None:
        """Remove every tracked overlay."""
        for hash_code in list(self._records.keys()):
            self._remove(hash_code)
        metrics.gauge("overlay.tracked", 0)

    # === Theme ===

    def _colors(self) -> ThemeColors:
        if self._cached_colors is None:
            self._cached_colors = self._host.theme() or ThemeColors()
        return self._cached_colors

    def clear_color_cache(self) -> None:
        """Forget cached theme colors (call after a theme change)."""
        self._cached_colors = None

    # === Lifecycle ===

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable overlays.

        Disabling removes every overlay; enabling runs a pass immediately.
        """
        self._enabled = enabled
        if not enabled:
            self._timer.cancel_delay(SCROLL_TASK)
            self._timer.cancel_delay(RESIZE_TASK)
            self.clear_all()
        else:
            self.reconcile()

    def dispose(self) -> None:
        """Cancel pending timers, remove overlays and unsubscribe.

        Any notification arriving afterwards is a no-op.
        """
        if self._disposed:
            return
        self._disposed = True
        self._timer.stop()
        self.clear_all()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        logger.debug("[Overlay] Disposed")
