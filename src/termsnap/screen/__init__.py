"""Screen module - 虚拟屏幕上下文和快照"""

from .context import ScreenContext
from .snapshot import dump_screen, init_screen, restore_screen, set_screen

__all__ = [
    "ScreenContext",
    "dump_screen",
    "restore_screen",
    "init_screen",
    "set_screen",
]
