"""屏幕快照测试"""

import io

import pytest

from termsnap.screen import ScreenContext, dump_screen, init_screen, restore_screen, set_screen
from termsnap.telemetry import metrics
from termsnap.window.engine import MemoryEngine
from termsnap.window.serializer import read_window
from termsnap.window.types import A_BOLD, A_REVERSE, NO_CHANGE, color_pair, make_cell


@pytest.fixture
def screen(engine):
    """3x5 屏幕，(1, 2) 处有特殊字符"""
    ctx = ScreenContext.create(3, 5, engine)
    for x, ch in enumerate("abcde"):
        ctx.curscr.set_cell(0, x, make_cell(ch))
    ctx.curscr.set_cell(1, 2, make_cell("*", A_BOLD | color_pair(2)))
    ctx.curscr.set_cell(2, 0, make_cell("z", A_REVERSE))
    return ctx


def _rows(window):
    return [row.tobytes() for row in window.rows]


class TestDumpScreen:
    """dump_screen"""

    def test_dump_writes_file(self, screen, tmp_path):
        path = tmp_path / "screen.dump"

        assert dump_screen(screen, path) is True

        with open(path, "rb") as f:
            loaded = read_window(f, MemoryEngine())
        assert _rows(loaded) == _rows(screen.curscr)

    def test_dump_accepts_str_path(self, screen, tmp_path):
        assert dump_screen(screen, str(tmp_path / "screen.dump")) is True

    def test_dump_no_path(self, screen):
        assert dump_screen(screen, None) is False
        assert dump_screen(screen, "") is False

    def test_dump_unwritable_path(self, screen, tmp_path):
        """目录不存在时失败"""
        assert dump_screen(screen, tmp_path / "missing" / "screen.dump") is False

    def test_dump_failure_may_leave_file(self, screen, tmp_path):
        """写入失败返回 False；不做原子写入"""
        screen.curscr.rows[1] = None
        path = tmp_path / "screen.dump"

        assert dump_screen(screen, path) is False
        assert path.exists()
        assert path.read_bytes() == b""


class TestRestoreScreen:
    """restore_screen"""

    def test_dump_then_restore(self, screen, engine, tmp_path):
        """3x5 屏幕保存后恢复到新屏幕"""
        path = tmp_path / "screen.dump"
        assert dump_screen(screen, path)

        fresh = ScreenContext.create(3, 5, engine)
        assert restore_screen(fresh, path) is True

        assert fresh.curscr.cell(1, 2) == make_cell("*", A_BOLD | color_pair(2))
        assert _rows(fresh.curscr) == _rows(screen.curscr)

    def test_restore_preserves_identity(self, screen, engine, tmp_path):
        """恢复是原地覆盖，不替换窗口对象"""
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)
        fresh = ScreenContext.create(3, 5, engine)
        curscr, rows = fresh.curscr, fresh.curscr.rows

        restore_screen(fresh, path)

        assert fresh.curscr is curscr
        assert fresh.curscr.rows is rows

    def test_restore_releases_temporary_window(self, screen, engine, tmp_path):
        """临时窗口恰好释放一次"""
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)
        fresh = ScreenContext.create(3, 5, engine)
        live = engine.live_count

        restore_screen(fresh, path)

        assert engine.live_count == live

    def test_restore_marks_changes_dirty(self, screen, engine, tmp_path):
        """恢复后变化的 cell 需要重绘"""
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)
        fresh = ScreenContext.create(3, 5, engine)
        for y in range(3):
            fresh.curscr.first_changed[y] = NO_CHANGE
            fresh.curscr.last_changed[y] = NO_CHANGE

        restore_screen(fresh, path)

        assert fresh.curscr.first_changed == [0, 2, 0]
        assert fresh.curscr.last_changed == [4, 2, 0]

    def test_restore_idempotent(self, screen, engine, tmp_path):
        """同一文件恢复两次结果一致"""
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)
        fresh = ScreenContext.create(3, 5, engine)

        assert restore_screen(fresh, path)
        first = _rows(fresh.curscr)
        fresh.curscr.set_cell(0, 0, make_cell("#"))
        assert restore_screen(fresh, path)

        assert _rows(fresh.curscr) == first

    def test_restore_larger_dump_clips(self, engine, tmp_path):
        """更大的 dump 只覆盖屏幕范围内的部分"""
        big = ScreenContext.create(4, 8, engine)
        big.curscr.set_cell(1, 1, make_cell("k"))
        big.curscr.set_cell(3, 7, make_cell("q"))
        path = tmp_path / "big.dump"
        dump_screen(big, path)

        small = ScreenContext.create(2, 3, engine)
        assert restore_screen(small, path) is True
        assert small.curscr.lines() == ["   ", " k "]

    def test_restore_counts_metrics(self, screen, engine, tmp_path):
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)

        restore_screen(ScreenContext.create(3, 5, engine), path)

        assert metrics.get_counter("screen.restore", {"result": "ok"}) == 1


class TestRestoreFailure:
    """恢复失败时屏幕不变"""

    @pytest.mark.parametrize(
        "content",
        [b"", b"garbage", b"PDC\xff" + b"\0" * 200],
    )
    def test_bad_file_leaves_screen_untouched(self, screen, engine, tmp_path, content):
        path = tmp_path / "bad.dump"
        path.write_bytes(content)
        before = _rows(screen.curscr)
        dirty = (list(screen.curscr.first_changed), list(screen.curscr.last_changed))
        live = engine.live_count

        assert restore_screen(screen, path) is False

        assert _rows(screen.curscr) == before
        assert (screen.curscr.first_changed, screen.curscr.last_changed) == dirty
        assert engine.live_count == live
        assert metrics.get_counter("screen.restore", {"result": "fail"}) == 1

    def test_truncated_file_leaves_screen_untouched(self, screen, engine, tmp_path):
        other = ScreenContext.create(3, 5, engine)
        path = tmp_path / "cut.dump"
        dump_screen(other, path)
        path.write_bytes(path.read_bytes()[:-3])
        before = _rows(screen.curscr)

        assert restore_screen(screen, path) is False
        assert _rows(screen.curscr) == before

    def test_missing_file(self, screen, tmp_path):
        assert restore_screen(screen, tmp_path / "nope.dump") is False

    def test_no_path(self, screen):
        assert restore_screen(screen, None) is False

    def test_temporary_window_released_when_copy_raises(self, screen, tmp_path):
        """复制抛异常时临时窗口仍被释放"""

        class FailingCopyEngine(MemoryEngine):
            def copy_region(self, src, dst):
                raise RuntimeError("copy failed")

        engine = FailingCopyEngine()
        target = ScreenContext.create(3, 5, engine)
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)

        with pytest.raises(RuntimeError):
            restore_screen(target, path)
        assert engine.live_count == 1

    def test_copy_result_is_returned(self, screen, tmp_path):
        """restore 返回复制操作的结果"""

        class RefusingEngine(MemoryEngine):
            def copy_region(self, src, dst):
                return False

        engine = RefusingEngine()
        target = ScreenContext.create(3, 5, engine)
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)

        assert restore_screen(target, path) is False
        assert engine.live_count == 1


class TestEntryPoints:
    """init_screen / set_screen"""

    def test_init_screen_is_noop(self, screen, tmp_path):
        path = tmp_path / "never.dump"
        before = _rows(screen.curscr)

        assert init_screen(screen, path) is True
        assert init_screen(screen, None) is True
        assert not path.exists()
        assert _rows(screen.curscr) == before

    def test_set_screen_restores(self, screen, engine, tmp_path):
        path = tmp_path / "screen.dump"
        dump_screen(screen, path)
        fresh = ScreenContext.create(3, 5, engine)

        assert set_screen(fresh, path) is True
        assert _rows(fresh.curscr) == _rows(screen.curscr)

    def test_set_screen_failure(self, screen, tmp_path):
        assert set_screen(screen, tmp_path / "nope.dump") is False
