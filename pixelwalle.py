from __future__ import annotations

import argparse
import base64
import json
import logging
import os
from pathlib import Path
import sys


logger = logging.getLogger("pixelwalle")

DEFAULT_WIDTH = 1080
DEFAULT_HEIGHT = 720


def default_width() -> int:
    return int(os.getenv("PIXELWALLE_WIDTH", str(DEFAULT_WIDTH)))


def default_height() -> int:
    return int(os.getenv("PIXELWALLE_HEIGHT", str(DEFAULT_HEIGHT)))


def configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.getenv("PIXELWALLE_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def emit(payload: dict) -> None:
    print(json.dumps(payload))


def emit_errors(errors) -> int:
    emit({"errors": [err.to_dict() for err in errors]})
    return 1 if errors else 0


def cmd_check(args: argparse.Namespace) -> int:
    from Interpreter.interpreter import check_source

    source = Path(args.file).read_text(encoding="utf-8")
    return emit_errors(check_source(source))


def cmd_ast(args: argparse.Namespace) -> int:
    from Interpreter.astprinter import format_ast
    from Interpreter.errors import PixelWalleError
    from Interpreter.interpreter import compile_source

    source = Path(args.file).read_text(encoding="utf-8")
    try:
        program = compile_source(source)
    except PixelWalleError as exc:
        return emit_errors([exc])
    print(format_ast(program))
    return 0


def load_state(args: argparse.Namespace):
    from Engine.canvas import Canvas
    from Interpreter.state import ExecutionState

    state_path = Path(args.state) if args.state else None
    if state_path is not None and state_path.exists() and not args.reset:
        saved = json.loads(state_path.read_text(encoding="utf-8"))
        if saved.get("width") == args.width and saved.get("height") == args.height:
            state = ExecutionState.from_dict(saved["state"])
            canvas = Canvas(args.width, args.height, state)
            canvas.loadRGBA(base64.b64decode(saved["pixels"]))
            logger.debug("resumed state from %s", state_path)
            return state, canvas
        logger.info("canvas size changed, starting from a blank canvas")

    state = ExecutionState()
    return state, Canvas(args.width, args.height, state)


def save_state(path: Path, state, canvas) -> None:
    from Engine.imagefile import write_bytes_atomic

    payload = {
        "width": canvas.width,
        "height": canvas.height,
        "state": state.to_dict(),
        "pixels": base64.b64encode(canvas.toRGBA()).decode("ascii"),
    }
    write_bytes_atomic(path, json.dumps(payload).encode("utf-8"))


def cmd_run(args: argparse.Namespace) -> int:
    from Interpreter.errors import PixelWalleError
    from Interpreter.interpreter import execute, compile_source

    try:
        source = Path(args.file).read_text(encoding="utf-8")
        state, canvas = load_state(args)
        if args.input_image:
            from Engine.imagefile import read_canvas_image

            read_canvas_image(canvas, args.input_image)
        program = compile_source(source)
        result = execute(program, state, canvas, args.start_line, args.lines_to_process)
    except PixelWalleError as exc:
        return emit_errors([exc])
    except ValueError as exc:
        # CanvasError and malformed saved state
        return emit_errors([_driver_error(str(exc))])
    except KeyError as exc:
        return emit_errors([_driver_error(f"Saved state is missing the {exc} entry")])
    except OSError as exc:
        return emit_errors([_driver_error(f"Cannot read {exc.filename}: {exc.strerror}")])

    if args.state:
        save_state(Path(args.state), state, canvas)

    payload = result.to_dict()
    if args.output or args.base64:
        from Engine.imagefile import encode_png, write_bytes_atomic

        png = encode_png(canvas)
        if args.output:
            write_bytes_atomic(Path(args.output), png)
        if args.base64:
            payload["image"] = base64.b64encode(png).decode("ascii")
    if args.debug_view:
        payload["debugView"] = canvas.debugView()
    emit(payload)
    return 0


def _driver_error(message: str):
    from Interpreter.errors import PixelWalleError

    return PixelWalleError(message, 0, 0)


def cmd_gui(args: argparse.Namespace) -> int:
    from PyQt5.QtWidgets import QApplication
    from GUI.mainwindow import PixelWalleMainWindow

    app = QApplication.instance() or QApplication([])
    window = PixelWalleMainWindow(default_width(), default_height())
    if args.file:
        window.load_file(args.file)
    window.show()
    app.exec_()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PixelWalle CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="cmd", required=True)

    check_parser = sub.add_parser("check", help="Report diagnostics for a .pw file as JSON")
    check_parser.add_argument("file", help="Path to the program")
    check_parser.set_defaults(func=cmd_check)

    ast_parser = sub.add_parser("ast", help="Print the parsed program tree")
    ast_parser.add_argument("file", help="Path to the program")
    ast_parser.set_defaults(func=cmd_ast)

    run_parser = sub.add_parser("run", help="Execute a program, optionally one chunk at a time")
    run_parser.add_argument("file", help="Path to the program")
    run_parser.add_argument("--width", type=int, default=default_width())
    run_parser.add_argument("--height", type=int, default=default_height())
    run_parser.add_argument("--start-line", type=int, default=1)
    run_parser.add_argument(
        "--lines-to-process",
        type=int,
        default=-1,
        help="Statement budget for this chunk (-1 runs to the end)",
    )
    run_parser.add_argument("--state", help="JSON file holding state and pixels between chunks")
    run_parser.add_argument("--input-image", help="PNG to load onto the canvas before running")
    run_parser.add_argument("--output", help="Write the final canvas as PNG")
    run_parser.add_argument("--base64", action="store_true", help="Include the PNG as base64 in the output")
    run_parser.add_argument("--debug-view", action="store_true", help="Include a letter map of the canvas")
    run_parser.add_argument("--reset", action="store_true", help="Ignore any saved state")
    run_parser.set_defaults(func=cmd_run)

    gui_parser = sub.add_parser("gui", help="Open the GUI editor")
    gui_parser.add_argument("file", nargs="?", help="Optional program to load")
    gui_parser.set_defaults(func=cmd_gui)

    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
