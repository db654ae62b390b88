"""虚拟屏幕上下文

虚拟屏幕（curscr）代表终端当前显示的内容。每个屏幕实例由一个
ScreenContext 持有，显式传给快照操作，不使用进程级全局变量，
因此多个独立屏幕可以共存。
"""

import threading
from dataclasses import dataclass, field

from ..window.engine import WindowEngine, default_engine
from ..window.types import Window


@dataclass(eq=False)
class ScreenContext:
    """虚拟屏幕句柄

    Attributes:
        curscr: 当前屏幕窗口，恢复时原地覆盖，身份不变
        engine: 分配/复制/释放窗口的引擎
        lock: dump/restore 期间持有，与其他屏幕修改互斥
    """

    curscr: Window
    engine: WindowEngine = field(default_factory=default_engine)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @classmethod
    def create(cls, lines: int, cols: int, engine: WindowEngine | None = None) -> "ScreenContext":
        """创建一个 lines x cols 的空白屏幕"""
        engine = engine or default_engine()
        curscr = engine.new_window(lines, cols)
        if curscr is None:
            raise ValueError(f"cannot create {lines}x{cols} screen")
        return cls(curscr=curscr, engine=engine)

    @property
    def lines(self) -> int:
        return self.curscr.height

    @property
    def cols(self) -> int:
        return self.curscr.width

    def close(self) -> None:
        """释放屏幕窗口"""
        with self.lock:
            self.engine.release_window(self.curscr)
