"""Window Engine 抽象接口

序列化层只通过这组操作接触窗口存储：
1. allocate_window: 分配空白窗口
2. allocate_lines: 按 height/width 分配行缓冲
3. mark_all_dirty: 整窗标脏
4. copy_region: 破坏性覆盖（保持目标窗口身份）
5. release_window: 释放窗口

MemoryEngine 是纯 Python 实现，并记录未释放窗口数，便于检查泄漏。
"""

from abc import ABC, abstractmethod

from ..config import MAX_WINDOW_CELLS
from ..telemetry import format_window_log, get_logger
from .types import BLANK, NO_CHANGE, Window, new_row

logger = get_logger(__name__)


class WindowEngine(ABC):
    """窗口引擎抽象接口

    使用示例:
        engine = MemoryEngine()
        win = engine.new_window(3, 5)
        win.set_cell(1, 2, make_cell("x", A_BOLD))
        engine.copy_region(win, screen.curscr)
        engine.release_window(win)
    """

    @abstractmethod
    def allocate_window(self) -> Window:
        """分配一个空白窗口（无行缓冲）"""

    def can_allocate(self, nlines: int, ncols: int) -> bool:
        """声明的尺寸能否分配（在建立行列表之前调用）"""
        return nlines > 0 and ncols > 0

    @abstractmethod
    def allocate_lines(self, window: Window) -> Window | None:
        """根据 window.height/width 分配行缓冲

        Returns:
            成功返回 window；失败返回 None，且 window 仍可安全释放
        """

    @abstractmethod
    def mark_all_dirty(self, window: Window) -> None:
        """整窗标记为已变化"""

    @abstractmethod
    def copy_region(self, src: Window, dst: Window) -> bool:
        """用 src 的内容覆盖 dst 的重叠区域"""

    @abstractmethod
    def release_window(self, window: Window) -> None:
        """释放窗口及其所有存储"""


class MemoryEngine(WindowEngine):
    """内存窗口引擎"""

    def __init__(self, max_cells: int = MAX_WINDOW_CELLS):
        self.max_cells = max_cells
        self._live: dict[int, Window] = {}

    @property
    def live_count(self) -> int:
        """已分配但未释放的窗口数"""
        return len(self._live)

    def is_live(self, window: Window) -> bool:
        return id(window) in self._live

    def can_allocate(self, nlines: int, ncols: int) -> bool:
        return super().can_allocate(nlines, ncols) and nlines * ncols <= self.max_cells

    def allocate_window(self) -> Window:
        window = Window()
        self._live[id(window)] = window
        return window

    def new_window(self, nlines: int, ncols: int, begy: int = 0, begx: int = 0) -> Window | None:
        """创建并清空一个 nlines x ncols 窗口，失败返回 None"""
        if not self.can_allocate(nlines, ncols):
            return None

        window = self.allocate_window()
        window.height = nlines
        window.width = ncols
        window.begy = begy
        window.begx = begx
        window.bmarg = nlines - 1
        window.rows = [None] * nlines
        window.first_changed = [NO_CHANGE] * nlines
        window.last_changed = [NO_CHANGE] * nlines

        if self.allocate_lines(window) is None:
            self.release_window(window)
            return None

        self.mark_all_dirty(window)
        return window

    def allocate_lines(self, window: Window) -> Window | None:
        nlines, ncols = window.height, window.width
        if not self.can_allocate(nlines, ncols):
            logger.warning(format_window_log("Engine", window, "refusing line allocation"))
            return None

        fill = window.bkgd or BLANK
        try:
            if len(window.rows) != nlines:
                window.rows = [None] * nlines
            for i in range(nlines):
                window.rows[i] = new_row(ncols, fill)
        except MemoryError:
            logger.error(format_window_log("Engine", window, "out of memory"))
            return None

        return window

    def mark_all_dirty(self, window: Window) -> None:
        last = window.width - 1
        for y in range(window.height):
            window.first_changed[y] = 0
            window.last_changed[y] = last

    def copy_region(self, src: Window, dst: Window) -> bool:
        # 以屏幕坐标求两窗口的重叠区域
        first_line = max(src.begy, dst.begy)
        first_col = max(src.begx, dst.begx)
        last_line = min(src.begy + src.height, dst.begy + dst.height)
        last_col = min(src.begx + src.width, dst.begx + dst.width)

        if last_line <= first_line or last_col <= first_col:
            return True

        src_y, src_x = first_line - src.begy, first_col - src.begx
        dst_y, dst_x = first_line - dst.begy, first_col - dst.begx
        ncols = last_col - first_col

        for offset in range(last_line - first_line):
            src_row = src.rows[src_y + offset]
            dst_row = dst.rows[dst_y + offset]
            y = dst_y + offset

            first = last = NO_CHANGE
            for col in range(ncols):
                cell = src_row[src_x + col]
                if dst_row[dst_x + col] != cell:
                    dst_row[dst_x + col] = cell
                    if first == NO_CHANGE:
                        first = dst_x + col
                    last = dst_x + col

            if first != NO_CHANGE:
                dst.touch_range(y, first, last)

        return True

    def release_window(self, window: Window) -> None:
        if self._live.pop(id(window), None) is None:
            logger.debug(format_window_log("Engine", window, "release of unknown window"))
        window.rows = []
        window.first_changed = []
        window.last_changed = []
        window.parent = None


_default_engine: MemoryEngine | None = None


def default_engine() -> MemoryEngine:
    """进程共享的 MemoryEngine"""
    global _default_engine
    if _default_engine is None:
        _default_engine = MemoryEngine()
    return _default_engine
