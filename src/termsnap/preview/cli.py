"""termsnap-preview - 把 dump 文件渲染为 SVG 或文本"""

import argparse
import sys
from pathlib import Path

from ..telemetry import configure_logging
from ..window.engine import default_engine
from ..window.serializer import read_window
from .renderer import WindowRenderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="termsnap-preview", description=__doc__)
    parser.add_argument("dump", type=Path, help="dump_screen/write_window 写出的文件")
    parser.add_argument("-o", "--output", type=Path, help="输出文件，默认 stdout")
    parser.add_argument(
        "-f",
        "--format",
        choices=("svg", "text", "ansi"),
        default="svg",
        help="输出格式",
    )
    parser.add_argument("--log-level", default=None, help="覆盖 TERMSNAP_LOG_LEVEL")
    return parser


def main(argv: list[str] | None = None) -> int:
    """入口函数，成功返回 0"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    engine = default_engine()
    try:
        with open(args.dump, "rb") as f:
            window = read_window(f, engine)
    except OSError as e:
        print(f"termsnap-preview: {e}", file=sys.stderr)
        return 1

    if window is None:
        print(f"termsnap-preview: {args.dump}: not a readable dump", file=sys.stderr)
        return 1

    renderer = WindowRenderer()
    try:
        if args.format == "text":
            output = renderer.render_text(window) + "\n"
        elif args.format == "ansi":
            output = renderer.render_ansi(window)
        else:
            output = renderer.render_svg(window)
    finally:
        engine.release_window(window)

    if args.output:
        args.output.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
