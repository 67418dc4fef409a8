"""Demo: 将文本流经 LatexAddon 写入虚拟终端，并导出 SVG 快照"""

import argparse
import sys
from pathlib import Path

from .adapters.virtual import VirtualTerminal
from .addon import LatexAddon, LatexAddonConfig
from .render.snapshot import SnapshotRenderer
from .telemetry import configure_logging, get_logger, metrics

logger = get_logger(__name__)

SAMPLE_TEXT = (
    "The equation $E = mc^2$ is famous.\n"
    "A fraction: $\\frac{1}{2}$ and a root $\\sqrt{x^2 + y^2}$.\n"
    "$$\\int_0^1 x^2 \\, dx = \\frac{1}{3}$$\n"
    "The price is $5 today and $10 tomorrow.\n"
    "$ ls -la\n"
)


def chunked(text: str, size: int) -> list[str]:
    """按行、再按固定长度切分，模拟 PTY 分片"""
    chunks = []
    for line in text.splitlines(keepends=True):
        chunks.extend(line[i:i + size] for i in range(0, len(line), size))
    return chunks


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="termlatex-demo",
        description="Stream text through the LaTeX addon on a virtual terminal and export an SVG snapshot.",
    )
    parser.add_argument("source", nargs="?", help="文本或文件路径，缺省使用内置示例，'-' 读取 stdin")
    parser.add_argument("-o", "--output", default="termlatex.svg", help="SVG 输出路径")
    parser.add_argument("--cols", type=int, default=80, help="终端列数")
    parser.add_argument("--rows", type=int, default=24, help="终端行数")
    parser.add_argument("--chunk-size", type=int, default=80, help="每次写入的字符数")
    parser.add_argument("--disable", action="store_true", help="停用公式识别（对比用）")
    parser.add_argument("--debug", action="store_true", help="输出 DEBUG 日志")
    return parser.parse_args(argv)


def read_source(source: str | None) -> str:
    if source is None:
        return SAMPLE_TEXT
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if path.is_file():
        return path.read_text(encoding="utf-8")
    return source


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(debug=args.debug)

    text = read_source(args.source).replace("\r\n", "\n").replace("\n", "\r\n")
    term = VirtualTerminal(cols=args.cols, rows=args.rows)
    addon = LatexAddon(LatexAddonConfig(enabled=not args.disable, debug_logging=args.debug))
    addon.activate(term)

    for chunk in chunked(text, max(1, args.chunk_size)):
        addon.write(chunk)

    svg = SnapshotRenderer(title="termlatex").render(term, addon.store, addon.surface.elements)
    Path(args.output).write_text(svg, encoding="utf-8")

    counters = metrics.get_all_counters()
    print(f"Wrote {args.output}")
    for name in sorted(counters):
        print(f"  {name}: {counters[name]}")

    addon.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
