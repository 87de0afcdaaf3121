from mlq_scheduler.gantt import build_rich_gantt, render_gantt
from mlq_scheduler.models import ScheduledSlice


def test_render_gantt_marks_levels_and_idle_gap():
    slices = [
        ScheduledSlice(pid="B", start_time=3, end_time=4, level=2),
        ScheduledSlice(pid="A", start_time=0, end_time=2, level=1),
    ]
    assert render_gantt(slices).splitlines() == [
        "Gantt Chart (digits = queue level):",
        "|11.2|",
        "A  B",
        "0  2  3  4",
    ]


def test_render_gantt_empty():
    assert render_gantt([]) == "(no execution)"


def test_rich_gantt_time_marks():
    slices = [
        ScheduledSlice(pid="A", start_time=0, end_time=1, level=1),
        ScheduledSlice(pid="C", start_time=1, end_time=4, level=3),
    ]
    _, marks = build_rich_gantt(slices)
    assert marks == "0  1  4"
    _, empty_marks = build_rich_gantt([])
    assert empty_marks == ""
