import json
import os
import subprocess
import sys


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
CLI = os.path.join(ROOT, "pixelwalle.py")


def run_cli(*args, env=None):
    full_env = dict(os.environ)
    full_env.pop("PIXELWALLE_WIDTH", None)
    full_env.pop("PIXELWALLE_HEIGHT", None)
    if env:
        full_env.update(env)
    return subprocess.run(
        [sys.executable, CLI, *args],
        text=True,
        capture_output=True,
        cwd=ROOT,
        env=full_env,
        timeout=30,
    )


def write(tmp_path, source, name="prog.pw"):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_check_clean_program(tmp_path):
    proc = run_cli("check", write(tmp_path, "Spawn(0, 0)\nFill()\n"))
    assert proc.returncode == 0
    assert json.loads(proc.stdout) == {"errors": []}


def test_check_reports_batched_errors(tmp_path):
    proc = run_cli("check", write(tmp_path, "Spawn(0, 0)\nDrawLine(1, 0, nope)\nColor(5)\n"))
    assert proc.returncode == 1
    errors = json.loads(proc.stdout)["errors"]
    assert [e["line"] for e in errors] == [2, 3]
    assert set(errors[0]) == {"line", "column", "message"}


def test_check_reports_lex_error(tmp_path):
    proc = run_cli("check", write(tmp_path, 'Spawn(0, 0)\nColr("Red")\n'))
    errors = json.loads(proc.stdout)["errors"]
    assert len(errors) == 1
    assert "Color" in errors[0]["message"]
    assert errors[0]["line"] == 2


def test_ast_dump(tmp_path):
    proc = run_cli("ast", write(tmp_path, "Spawn(1, 2)\nx <- 3\n"))
    assert proc.returncode == 0
    assert proc.stdout.splitlines() == ["Program:", "  Spawn(x=1, y=2)", "  Assign x <-", "    Literal: 3"]


def test_run_outputs_cursor_and_letter_map(tmp_path):
    prog = write(tmp_path, 'Spawn(0, 0)\nColor("Red")\nDrawLine(1, 0, 3)\n')
    proc = run_cli("run", prog, "--width", "5", "--height", "2", "--debug-view")
    assert proc.returncode == 0, proc.stderr
    out = json.loads(proc.stdout)
    assert out["cursorX"] == 3
    assert out["cursorY"] == 0
    assert out["lastProcessedLine"] == 3
    assert out["finished"] is True
    assert out["debugView"] == "RRRWW\nWWWWW"


def test_run_size_from_environment(tmp_path):
    prog = write(tmp_path, "Spawn(0, 0)\nw <- GetCanvasSize()\nDrawLine(1, 0, w)\n")
    proc = run_cli("run", prog, "--debug-view", env={"PIXELWALLE_WIDTH": "4", "PIXELWALLE_HEIGHT": "1"})
    out = json.loads(proc.stdout)
    assert out["debugView"] == "KKKK"
    assert out["cursorX"] == 4


def test_run_in_chunks_with_saved_state(tmp_path):
    prog = write(tmp_path, "Spawn(0, 0)\nDrawLine(1, 0, 1)\nDrawLine(1, 0, 1)\nDrawLine(1, 0, 1)\n")
    state = str(tmp_path / "state.json")
    common = ("--width", "4", "--height", "1", "--state", state, "--debug-view")

    first = json.loads(run_cli("run", prog, *common, "--lines-to-process", "2").stdout)
    assert first["lastProcessedLine"] == 2
    assert first["nextLine"] == 3
    assert first["finished"] is False
    assert first["debugView"] == "KWWW"

    second = json.loads(run_cli("run", prog, *common, "--start-line", str(first["nextLine"])).stdout)
    assert second["finished"] is True
    assert second["cursorX"] == 3
    assert second["debugView"] == "KKKW"

    again = json.loads(run_cli("run", prog, *common).stdout)
    assert "Spawn" in again["errors"][0]["message"]

    reset = json.loads(run_cli("run", prog, *common, "--reset").stdout)
    assert reset["debugView"] == "KKKW"


def test_run_runtime_error(tmp_path):
    prog = write(tmp_path, "Spawn(0, 0)\nx <- 1 / 0\n")
    proc = run_cli("run", prog, "--width", "3", "--height", "3")
    assert proc.returncode == 1
    errors = json.loads(proc.stdout)["errors"]
    assert errors[0]["line"] == 2
    assert "Division by zero" in errors[0]["message"]


def test_verbose_logs_go_to_stderr(tmp_path):
    prog = write(tmp_path, "Spawn(0, 0)\nl\nGoTo[l](false)\n")
    proc = run_cli("-v", "run", prog, "--width", "2", "--height", "2")
    assert proc.returncode == 0
    json.loads(proc.stdout)
    assert "chunk" in proc.stderr


def test_run_reports_incomplete_state_file(tmp_path):
    prog = write(tmp_path, "Spawn(0, 0)\nFill()\n")
    state = tmp_path / "state.json"
    state.write_text(json.dumps({"width": 3, "height": 3, "pixels": ""}), encoding="utf-8")
    proc = run_cli("run", prog, "--width", "3", "--height", "3", "--state", str(state))
    assert proc.returncode == 1
    errors = json.loads(proc.stdout)["errors"]
    assert "state" in errors[0]["message"]
    assert "Traceback" not in proc.stderr


def test_run_reports_missing_input_image(tmp_path):
    prog = write(tmp_path, "Spawn(0, 0)\nFill()\n")
    missing = str(tmp_path / "nope.png")
    proc = run_cli("run", prog, "--width", "3", "--height", "3", "--input-image", missing)
    assert proc.returncode == 1
    errors = json.loads(proc.stdout)["errors"]
    assert missing in errors[0]["message"]
    assert "Traceback" not in proc.stderr
