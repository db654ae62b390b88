"""Window 数据模型

窗口是一个固定尺寸的 cell 网格。每个 cell 是一个 32 位无符号整数：
低 16 位为字符码，高 16 位为属性，其中最高 8 位为颜色对编号。
"""

from array import array
from dataclasses import dataclass, field

from ..config import CELL_TYPECODE

# === Cell 编码 ===
A_NORMAL = 0
A_CHARTEXT = 0x0000FFFF
A_ATTRIBUTES = 0xFFFF0000
A_COLOR = 0xFF000000

A_ALTCHARSET = 0x00010000
A_RIGHTLINE = 0x00020000
A_LEFTLINE = 0x00040000
A_INVIS = 0x00080000
A_UNDERLINE = 0x00100000
A_REVERSE = 0x00200000
A_BLINK = 0x00400000
A_BOLD = 0x00800000

COLOR_SHIFT = 24

BLANK = ord(" ")

# 行未变化时 first_changed/last_changed 的取值
NO_CHANGE = -1


def make_cell(char: str | int, attrs: int = A_NORMAL) -> int:
    """组合字符和属性为一个 cell"""
    code = ord(char) if isinstance(char, str) else char
    return (code & A_CHARTEXT) | (attrs & A_ATTRIBUTES)


def cell_char(cell: int) -> str:
    """取出 cell 的字符"""
    return chr(cell & A_CHARTEXT)


def cell_attrs(cell: int) -> int:
    """取出 cell 的属性位（含颜色对）"""
    return cell & A_ATTRIBUTES


def color_pair(n: int) -> int:
    """颜色对编号转为属性位"""
    return (n << COLOR_SHIFT) & A_COLOR


def pair_number(cell: int) -> int:
    """从 cell 或属性位中取出颜色对编号"""
    return (cell & A_COLOR) >> COLOR_SHIFT


def new_row(width: int, fill: int = BLANK) -> array:
    """创建一行 cell 缓冲"""
    return array(CELL_TYPECODE, [fill]) * width


@dataclass(eq=False)
class Window:
    """终端窗口

    Attributes:
        height, width: 行数和列数，生命周期内不变
        rows: 每行一个 cell 缓冲，长度为 width
        first_changed, last_changed: 每行的脏列范围，NO_CHANGE 表示未变化
        cury, curx: 光标位置
        begy, begx: 窗口在屏幕上的左上角
        tmarg, bmarg: 滚动区域上下边界
        parent: 父窗口（仅内存中有效，不持久化）

    其余字段对序列化层不透明，原样保存和恢复。
    """

    height: int = 0
    width: int = 0
    cury: int = 0
    curx: int = 0
    begy: int = 0
    begx: int = 0
    flags: int = 0
    attrs: int = A_NORMAL
    bkgd: int = BLANK
    clear: bool = False
    leaveit: bool = False
    scroll: bool = False
    nodelay: bool = False
    immed: bool = False
    sync: bool = False
    use_keypad: bool = False
    tmarg: int = 0
    bmarg: int = 0
    delayms: int = 0
    parx: int = -1
    pary: int = -1

    rows: list[array | None] = field(default_factory=list)
    first_changed: list[int] = field(default_factory=list)
    last_changed: list[int] = field(default_factory=list)
    parent: "Window | None" = None

    def cell(self, y: int, x: int) -> int:
        """读取 (y, x) 处的 cell"""
        return self.rows[y][x]

    def set_cell(self, y: int, x: int, cell: int) -> None:
        """写入 (y, x) 处的 cell，并扩展该行的脏范围"""
        row = self.rows[y]
        if row[x] == cell:
            return
        row[x] = cell
        self.touch_range(y, x, x)

    def touch_range(self, y: int, first: int, last: int) -> None:
        """把第 y 行的 [first, last] 列并入脏范围"""
        if self.first_changed[y] == NO_CHANGE or first < self.first_changed[y]:
            self.first_changed[y] = first
        if last > self.last_changed[y]:
            self.last_changed[y] = last

    def is_dirty(self, y: int) -> bool:
        return self.first_changed[y] != NO_CHANGE

    def row_text(self, y: int) -> str:
        """第 y 行的纯文本（去掉属性）"""
        return "".join(cell_char(c) for c in self.rows[y])

    def lines(self) -> list[str]:
        return [self.row_text(y) for y in range(self.height)]
