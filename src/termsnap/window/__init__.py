"""Window module - 窗口模型、引擎接口和序列化"""

from .engine import MemoryEngine, WindowEngine, default_engine
from .errors import DumpAllocationError, DumpError, DumpFormatError, DumpIOError
from .serializer import dump_window, load_window, read_window, write_window
from .types import (
    A_BOLD,
    A_REVERSE,
    A_UNDERLINE,
    NO_CHANGE,
    Window,
    cell_attrs,
    cell_char,
    color_pair,
    make_cell,
    pair_number,
)

__all__ = [
    "Window",
    "WindowEngine",
    "MemoryEngine",
    "default_engine",
    "DumpError",
    "DumpIOError",
    "DumpFormatError",
    "DumpAllocationError",
    "dump_window",
    "load_window",
    "read_window",
    "write_window",
    "NO_CHANGE",
    "A_BOLD",
    "A_REVERSE",
    "A_UNDERLINE",
    "make_cell",
    "cell_char",
    "cell_attrs",
    "color_pair",
    "pair_number",
]
