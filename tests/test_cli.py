from pathlib import Path

import pytest

from mlq_scheduler.cli import EXIT_INCOMPLETE, EXIT_OK, EXIT_WORKLOAD_ERROR, main

WORKLOAD = """# label; BT; AT; Q; Pr
A; 3; 0; 1; 2
B; 4; 0; 2; 1
C; 2; 1; 3; 3
"""


def _workload(tmp_path: Path, name: str = "w.txt") -> Path:
    p = tmp_path / name
    p.write_text(WORKLOAD)
    return p


def test_run_writes_default_output(tmp_path: Path):
    p = _workload(tmp_path)
    assert main(["run", str(p)]) == EXIT_OK

    lines = (tmp_path / "output_w.txt").read_text().splitlines()
    assert lines[0] == "# file: w.txt"
    assert [line.split(";")[0] for line in lines[2:5]] == ["A", "B", "C"]
    assert lines[-1].startswith("WT=")


def test_run_with_explicit_output(tmp_path: Path):
    p = _workload(tmp_path)
    out = tmp_path / "results.txt"
    assert main(["-v", "run", str(p), "-o", str(out)]) == EXIT_OK
    assert out.exists()


def test_run_missing_workload(tmp_path: Path):
    assert main(["run", str(tmp_path / "nope.txt")]) == EXIT_WORKLOAD_ERROR


def test_run_hits_tick_ceiling(tmp_path: Path):
    p = _workload(tmp_path)
    assert main(["--quiet", "run", str(p), "--max-ticks", "3"]) == EXIT_INCOMPLETE
    text = (tmp_path / "output_w.txt").read_text()
    assert "# INCOMPLETE" in text


def test_run_rejects_non_positive_ceiling(tmp_path: Path):
    p = _workload(tmp_path)
    with pytest.raises(SystemExit):
        main(["run", str(p), "--max-ticks", "0"])


def test_compare(tmp_path: Path, capsys):
    a = _workload(tmp_path, "a.txt")
    b = tmp_path / "b.txt"
    b.write_text("X;2;0;3;1\nY;1;0;1;1\n")
    assert main(["compare", str(a), str(b)]) == EXIT_OK
    assert "Workload comparison" in capsys.readouterr().out


def test_run_non_utf8_workload(tmp_path: Path):
    p = tmp_path / "bad.txt"
    p.write_bytes(b"A;1;0;1;1\n\xff\xfe;2;0;1;1\n")
    assert main(["run", str(p)]) == EXIT_WORKLOAD_ERROR


def test_run_plain_gantt(tmp_path: Path, capsys):
    p = _workload(tmp_path)
    assert main(["run", str(p), "--plain"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "Gantt Chart (digits = queue level):" in out
    assert "|111222233|" in out
