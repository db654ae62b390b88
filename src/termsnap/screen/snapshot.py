"""屏幕快照

- dump_screen: 把当前虚拟屏幕写入文件
- restore_screen: 从文件重建窗口并覆盖到当前虚拟屏幕
- init_screen: 无操作（restore 已完整重建屏幕）
- set_screen: restore_screen 的别名

每次调用都是针对单个文件的同步事务；流在调用内打开和关闭。
dump 不使用 temp + rename，失败时可能留下不完整文件。
"""

from pathlib import Path

from ..config import METRICS_ENABLED
from ..telemetry import get_logger, metrics
from ..window.serializer import read_window, write_window
from .context import ScreenContext

logger = get_logger(__name__)


def dump_screen(screen: ScreenContext, path: str | Path | None) -> bool:
    """保存虚拟屏幕到文件

    Args:
        screen: 屏幕上下文
        path: 目标文件路径

    Returns:
        是否成功
    """
    logger.debug(f"[Screen] dump_screen: {path}")
    if not path:
        return False

    with screen.lock:
        try:
            f = open(path, "wb")
        except OSError as e:
            logger.error(f"[Screen] Cannot open {path} for writing: {e}")
            return False

        try:
            return write_window(screen.curscr, f)
        finally:
            f.close()


def restore_screen(screen: ScreenContext, path: str | Path | None) -> bool:
    """从文件恢复虚拟屏幕

    重建失败时屏幕内容保持不变；成功时覆盖屏幕全部重叠区域，
    然后释放临时窗口。

    Args:
        screen: 屏幕上下文
        path: dump_screen 写出的文件

    Returns:
        是否成功
    """
    logger.debug(f"[Screen] restore_screen: {path}")
    if not path:
        return False

    with screen.lock:
        try:
            f = open(path, "rb")
        except OSError as e:
            logger.error(f"[Screen] Cannot open {path} for reading: {e}")
            return False

        try:
            replacement = read_window(f, screen.engine)
        finally:
            f.close()

        if replacement is None:
            if METRICS_ENABLED:
                metrics.inc("screen.restore", {"result": "fail"})
            return False

        try:
            result = screen.engine.copy_region(replacement, screen.curscr)
        finally:
            screen.engine.release_window(replacement)

    if METRICS_ENABLED:
        metrics.inc("screen.restore", {"result": "ok" if result else "fail"})
    if result:
        logger.info(f"[Screen] Restored {screen.lines}x{screen.cols} screen from {path}")
    return result


def init_screen(screen: ScreenContext, path: str | Path | None) -> bool:
    """无操作，始终成功"""
    logger.debug(f"[Screen] init_screen: {path}")
    return True


def set_screen(screen: ScreenContext, path: str | Path | None) -> bool:
    """restore_screen 的别名"""
    logger.debug(f"[Screen] set_screen: {path}")
    return restore_screen(screen, path)
