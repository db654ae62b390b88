"""Window to text/ANSI/SVG renderer using Rich library."""

import io
import re
from pathlib import Path

from rich.console import Console
from rich.style import Style
from rich.text import Text

from ..config import PREVIEW_TITLE, PREVIEW_WIDTH
from ..telemetry import get_logger
from ..window.engine import WindowEngine, default_engine
from ..window.serializer import read_window
from ..window.types import (
    A_BLINK,
    A_BOLD,
    A_INVIS,
    A_REVERSE,
    A_UNDERLINE,
    Window,
    cell_attrs,
    cell_char,
    pair_number,
)

logger = get_logger(__name__)

# XML 1.0 允许的字符范围
_INVALID_XML_CHARS_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ud800-\udfff\ufffe\uffff]"
)

# ANSI 8 色，颜色对 n 默认映射为 (前景 n, 默认背景)
ANSI_COLORS = [
    "black",
    "red",
    "green",
    "yellow",
    "blue",
    "magenta",
    "cyan",
    "white",
]


def _sanitize_for_xml(text: str) -> str:
    """移除 XML 中不允许的字符。"""
    return _INVALID_XML_CHARS_RE.sub("", text)


def _printable(char: str) -> str:
    """不可显示字符替换为空格，保持列对齐。"""
    return char if _sanitize_for_xml(char) else " "


def default_pairs() -> dict[int, tuple[str | None, str | None]]:
    """颜色对 1..7 为 ANSI 前景色，0 为终端默认色"""
    return {n: (ANSI_COLORS[n], None) for n in range(1, len(ANSI_COLORS))}


class WindowRenderer:
    """窗口渲染器，将 cell 网格转换为 Rich Text 并导出。"""

    def __init__(self, pairs: dict[int, tuple[str | None, str | None]] | None = None):
        """
        初始化渲染器。

        Args:
            pairs: 颜色对编号 -> (前景, 背景)，None 表示终端默认色
        """
        self.pairs = pairs if pairs is not None else default_pairs()

    def to_rich(self, window: Window) -> Text:
        """将窗口内容转换为 Rich Text，每行一个换行。"""
        rich_text = Text()

        for y in range(window.height):
            # 相邻同属性的 cell 合并为一段
            run: list[str] = []
            run_attrs: int | None = None
            for cell in window.rows[y]:
                attrs = cell_attrs(cell)
                if attrs != run_attrs and run:
                    rich_text.append("".join(run), style=self._build_style(run_attrs))
                    run = []
                run_attrs = attrs
                run.append(" " if attrs & A_INVIS else _printable(cell_char(cell)))
            if run:
                rich_text.append("".join(run), style=self._build_style(run_attrs))
            rich_text.append("\n")

        return rich_text

    def _build_style(self, attrs: int | None) -> Style | None:
        """从属性位构建 Rich Style。"""
        if not attrs:
            return None

        style_kwargs: dict[str, str | bool] = {}
        fg, bg = self.pairs.get(pair_number(attrs), (None, None))
        if fg:
            style_kwargs["color"] = fg
        if bg:
            style_kwargs["bgcolor"] = bg
        if attrs & A_BOLD:
            style_kwargs["bold"] = True
        if attrs & A_UNDERLINE:
            style_kwargs["underline"] = True
        if attrs & A_REVERSE:
            style_kwargs["reverse"] = True
        if attrs & A_BLINK:
            style_kwargs["blink"] = True

        return Style(**style_kwargs) if style_kwargs else None  # type: ignore[arg-type]

    def _console(self, window: Window) -> Console:
        return Console(
            record=True,
            width=window.width or PREVIEW_WIDTH,
            height=window.height or None,
            force_terminal=True,
            color_system="truecolor",
            file=io.StringIO(),
        )

    def render_text(self, window: Window) -> str:
        """纯文本（无样式）"""
        return "\n".join(window.lines())

    def render_ansi(self, window: Window) -> str:
        """带 ANSI 转义序列的文本"""
        console = self._console(window)
        console.print(self.to_rich(window), end="", no_wrap=True)
        return console.export_text(styles=True)

    def render_svg(self, window: Window, title: str = PREVIEW_TITLE) -> str:
        """渲染为 SVG。"""
        rich_text = self.to_rich(window)
        console = self._console(window)
        console.print(rich_text, end="", no_wrap=True)
        return console.export_svg(title=title)

    def render_dump(self, path: str | Path, engine: WindowEngine | None = None) -> str | None:
        """读取 dump 文件并渲染为 SVG，读取失败返回 None。"""
        engine = engine or default_engine()
        try:
            with open(path, "rb") as f:
                window = read_window(f, engine)
        except OSError as e:
            logger.warning(f"[Preview] Cannot open {path}: {e}")
            return None

        if window is None:
            return None

        try:
            return self.render_svg(window)
        finally:
            engine.release_window(window)
