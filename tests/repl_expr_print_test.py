import os
import subprocess
import sys


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
CLI = os.path.join(ROOT, "cli.py")


def run_cli(args, inp=None):
    return subprocess.run(
        [sys.executable, CLI] + args,
        input=inp,
        text=True,
        capture_output=True,
        cwd=ROOT,
        timeout=10,
    )


def run_repl_with_input(inp: str) -> str:
    proc = run_cli(["repl"], inp)

    # REPL should exit cleanly after :q
    if proc.returncode != 0:
        raise AssertionError(f"REPL exited with code {proc.returncode}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}")

    return proc.stdout


def test_auto_print_expression():
    out = run_repl_with_input("1 + 2\n:q\n")
    if "3" not in out:
        raise AssertionError(f"Expected 3 in output.\nOUT:\n{out}")


def test_persistent_state_expression():
    out = run_repl_with_input("x = 2\nx + 5\n:q\n")
    if "7" not in out:
        raise AssertionError(f"Expected 7 in output.\nOUT:\n{out}")


def test_multiline_block_and_error_recovery():
    out = run_repl_with_input("i = 0\nwhile (i < 4) {\ni = i + 1\n}\nnope\ni * 10\n:q\n")
    if "Undefined variable: nope" not in out:
        raise AssertionError(f"Expected undefined variable error.\nOUT:\n{out}")
    if "40" not in out:
        raise AssertionError(f"Expected 40 in output.\nOUT:\n{out}")


def test_run_prints_stack_and_globals(tmp_path):
    src = tmp_path / "prog.pbl"
    src.write_text("x = [1, 2]\nx[1] = 5\nx[1] * 2\n", encoding="utf-8")
    proc = run_cli(["run", str(src)])
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert "Stack: [10]" in proc.stdout
    assert "x = [1, 5]" in proc.stdout


def test_run_reports_runtime_error(tmp_path):
    src = tmp_path / "bad.pbl"
    src.write_text("x = [1, 2, 3]\nx[3]\n", encoding="utf-8")
    proc = run_cli(["run", str(src)])
    assert proc.returncode == 1
    assert "Index error: index 3 out of range for array of length 3" in proc.stdout
    assert "bad.pbl:2" in proc.stdout


def test_build_lists_instructions(tmp_path):
    src = tmp_path / "loop.pbl"
    src.write_text("i = 0\nwhile (i < 2) { i = i + 1 }\n", encoding="utf-8")
    proc = run_cli(["build", str(src)])
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert "0005  JZ 11" in proc.stdout
    assert "0011  LABEL end" in proc.stdout


def test_parse_prints_tree(tmp_path):
    src = tmp_path / "tree.pbl"
    src.write_text("x = 1 + 2\n", encoding="utf-8")
    proc = run_cli(["parse", str(src)])
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert "type: VarDecl" in proc.stdout
    assert "op: +" in proc.stdout


def test_parse_error_exits_nonzero(tmp_path):
    src = tmp_path / "broken.pbl"
    src.write_text("if (1 {\n", encoding="utf-8")
    proc = run_cli(["parse", str(src)])
    assert proc.returncode == 1
    assert "Parse error at line 1:" in proc.stdout


if __name__ == "__main__":
    test_auto_print_expression()
    test_persistent_state_expression()
    print("ok")
