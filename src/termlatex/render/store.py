"""表达式缓存

内容寻址：hash → LatexEntry。
"""

from termlatex import config
from termlatex.telemetry import format_hash_log, get_logger, metrics, shorten_expr

from .types import LatexEntry

logger = get_logger(__name__)


class ExpressionStore:
    """表达式缓存

    维护：
    - hash → LatexEntry 映射（同 hash 后写覆盖，不做链式处理）
    - 声明容量 max_size（仅告警，不淘汰）
    """

    def __init__(self, max_size: int | None = None):
        self._entries: dict[str, LatexEntry] = {}
        self._max_size = max_size or config.CACHE_SIZE
        self._capacity_warned = False

    @property
    def max_size(self) -> int:
        return self._max_size

    def put(self, hash_code: str, entry: LatexEntry) -> None:
        """插入或覆盖条目"""
        previous = self._entries.get(hash_code)
        if previous is not None and not previous.matches(entry.source, entry.display):
            logger.debug(format_hash_log(
                "Store", hash_code,
                f"Collision, overwriting {shorten_expr(previous.source)!r} "
                f"with {shorten_expr(entry.source)!r}",
            ))
            metrics.inc("store.collisions")

        self._entries[hash_code] = entry
        metrics.gauge("store.size", len(self._entries))

        if len(self._entries) > self._max_size:
            metrics.inc("store.over_capacity")
            if not self._capacity_warned:
                self._capacity_warned = True
                logger.warning(
                    f"[Store] {len(self._entries)} entries exceed configured "
                    f"cache size {self._max_size}; no eviction is performed"
                )

    def get(self, hash_code: str) -> LatexEntry | None:
        """获取条目，不存在返回 None"""
        return self._entries.get(hash_code)

    def clear(self) -> None:
        """移除全部条目"""
        self._entries.clear()
        self._capacity_warned = False
        metrics.gauge("store.size", 0)

    def __contains__(self, hash_code: object) -> bool:
        return hash_code in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def hashes(self) -> list[str]:
        """获取所有 hash（用于调试）"""
        return list(self._entries.keys())
