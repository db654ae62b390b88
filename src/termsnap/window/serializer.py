"""窗口序列化

dump 文件格式：
- 3 字节标记 (DUMP_MARKER)
- 1 字节版本 (DUMP_VERSION)
- 头部：显式字段列表，本机字节序，标准宽度
- height 个行数据块，每块 width * CELL_SIZE 字节

头部字段列表变化时必须递增 DUMP_VERSION；版本不一致的文件直接拒绝，不做迁移。
"""

import struct
from array import array
from typing import BinaryIO

from ..config import CELL_TYPECODE, DUMP_MARKER, DUMP_VERSION, METRICS_ENABLED
from ..telemetry import format_window_log, get_logger, metrics
from .engine import WindowEngine, default_engine
from .errors import DumpAllocationError, DumpError, DumpFormatError, DumpIOError
from .types import NO_CHANGE, Window

logger = get_logger(__name__)

# (属性名, struct 格式码)，顺序即磁盘顺序
HEADER_FIELDS: tuple[tuple[str, str], ...] = (
    ("cury", "i"),
    ("curx", "i"),
    ("height", "i"),
    ("width", "i"),
    ("begy", "i"),
    ("begx", "i"),
    ("flags", "i"),
    ("attrs", "I"),
    ("bkgd", "I"),
    ("clear", "?"),
    ("leaveit", "?"),
    ("scroll", "?"),
    ("nodelay", "?"),
    ("immed", "?"),
    ("sync", "?"),
    ("use_keypad", "?"),
    ("tmarg", "i"),
    ("bmarg", "i"),
    ("delayms", "i"),
    ("parx", "i"),
    ("pary", "i"),
)

_HEADER = struct.Struct("=" + "".join(code for _, code in HEADER_FIELDS))

MAGIC_SIZE = len(DUMP_MARKER) + 1
HEADER_SIZE = _HEADER.size
CELL_SIZE = array(CELL_TYPECODE).itemsize


def _write(stream: BinaryIO, data: bytes) -> None:
    try:
        written = stream.write(data)
    except (OSError, ValueError, TypeError) as e:
        raise DumpIOError(f"write failed: {e}") from e
    if written is not None and written != len(data):
        raise DumpIOError(f"short write: {written}/{len(data)} bytes")


def _read_into(stream: BinaryIO, view: memoryview) -> None:
    """把 view 读满，不足则抛 DumpIOError"""
    total = len(view)
    filled = 0
    readinto = getattr(stream, "readinto", None)
    try:
        while filled < total:
            if readinto is not None:
                n = readinto(view[filled:])
            else:
                chunk = stream.read(total - filled)
                n = len(chunk) if chunk else 0
                if n:
                    view[filled:filled + n] = chunk
            if not n:
                raise DumpIOError(f"short read: {filled}/{total} bytes")
            filled += n
    except (OSError, ValueError, TypeError) as e:
        raise DumpIOError(f"read failed: {e}") from e


def _check_rows(window: Window) -> None:
    """行缓冲必须齐全且每行恰好 width 个 cell"""
    if window.height <= 0 or window.width <= 0:
        raise DumpFormatError(f"bad window size {window.height}x{window.width}")
    if len(window.rows) < window.height:
        raise DumpFormatError(f"window has {len(window.rows)} rows, expected {window.height}")
    for y in range(window.height):
        row = window.rows[y]
        if row is None:
            raise DumpFormatError(f"row {y} is missing")
        if len(row) != window.width:
            raise DumpFormatError(f"row {y} has {len(row)} cells, expected {window.width}")


def pack_header(window: Window) -> bytes:
    """按 HEADER_FIELDS 打包窗口元数据"""
    try:
        return _HEADER.pack(*(getattr(window, name) for name, _ in HEADER_FIELDS))
    except struct.error as e:
        raise DumpFormatError(f"header field out of range: {e}") from e


def unpack_header(data: bytes, window: Window) -> None:
    """把头部字节写回窗口字段"""
    for (name, _), value in zip(HEADER_FIELDS, _HEADER.unpack(data)):
        setattr(window, name, value)


def dump_window(window: Window, stream: BinaryIO) -> None:
    """将窗口写入流

    依次写入标记、版本、头部和每行数据。不关闭、不 flush 流，不修改窗口。
    格式不合法的窗口在写入任何字节前被拒绝。

    Raises:
        DumpFormatError: 窗口行缓冲缺失/长度不符，或头部字段越界
        DumpIOError: 流为 None、写失败或短写
    """
    if window is None:
        raise DumpFormatError("no window")
    if stream is None:
        raise DumpIOError("no stream")

    _check_rows(window)
    header = pack_header(window)

    _write(stream, DUMP_MARKER + bytes((DUMP_VERSION,)))
    _write(stream, header)
    for y in range(window.height):
        _write(stream, window.rows[y].tobytes())


def write_window(window: Window, stream: BinaryIO) -> bool:
    """将窗口写入流，返回是否成功

    失败时流中可能留下不完整的数据，由调用方丢弃。
    """
    logger.debug(format_window_log("Dump", window, "write_window"))
    try:
        dump_window(window, stream)
    except DumpError as e:
        logger.warning(format_window_log("Dump", window, f"write failed: {e}"))
        if METRICS_ENABLED:
            metrics.inc("dump.error", {"op": "write", "reason": e.reason})
        return False

    if METRICS_ENABLED:
        metrics.inc("dump.write")
    return True


def _populate(window: Window, stream: BinaryIO, engine: WindowEngine) -> None:
    magic = bytearray(MAGIC_SIZE)
    _read_into(stream, memoryview(magic))
    if bytes(magic[:-1]) != DUMP_MARKER:
        raise DumpFormatError(f"bad marker {bytes(magic[:-1])!r}")
    if magic[-1] != DUMP_VERSION:
        raise DumpFormatError(f"unsupported version {magic[-1]}, expected {DUMP_VERSION}")

    header = bytearray(HEADER_SIZE)
    _read_into(stream, memoryview(header))
    unpack_header(bytes(header), window)

    nlines, ncols = window.height, window.width
    if not engine.can_allocate(nlines, ncols):
        raise DumpAllocationError(f"cannot allocate {nlines}x{ncols} window")

    # 行指针和脏范围全部重新分配，不沿用文件中的任何状态
    window.parent = None
    window.rows = [None] * nlines
    window.first_changed = [NO_CHANGE] * nlines
    window.last_changed = [NO_CHANGE] * nlines

    if engine.allocate_lines(window) is None:
        raise DumpAllocationError(f"line allocation failed for {nlines}x{ncols}")

    for y in range(nlines):
        _read_into(stream, memoryview(window.rows[y]).cast("B"))


def load_window(stream: BinaryIO, engine: WindowEngine | None = None) -> Window:
    """从流中重建窗口

    要么返回完整的新窗口，要么释放所有中间分配后抛出异常。
    成功时整窗标脏（文件中没有有效的变化跟踪状态）。

    Raises:
        DumpIOError: 流为 None、读失败或数据不足
        DumpFormatError: 标记或版本不匹配
        DumpAllocationError: 任一分配步骤失败
    """
    engine = engine or default_engine()
    if stream is None:
        raise DumpIOError("no stream")

    try:
        window = engine.allocate_window()
    except MemoryError as e:
        raise DumpAllocationError("window allocation failed") from e

    try:
        _populate(window, stream, engine)
    except MemoryError as e:
        engine.release_window(window)
        raise DumpAllocationError("out of memory") from e
    except Exception:
        engine.release_window(window)
        raise

    engine.mark_all_dirty(window)
    return window


def read_window(stream: BinaryIO, engine: WindowEngine | None = None) -> Window | None:
    """从流中重建窗口，失败返回 None（原因只记录在日志和指标中）"""
    logger.debug("[Dump] read_window")
    try:
        window = load_window(stream, engine)
    except DumpError as e:
        logger.warning(f"[Dump] read failed ({e.reason}): {e}")
        if METRICS_ENABLED:
            metrics.inc("dump.error", {"op": "read", "reason": e.reason})
        return None

    if METRICS_ENABLED:
        metrics.inc("dump.read")
    logger.debug(format_window_log("Dump", window, "window loaded"))
    return window
