import pytest

from mlq_scheduler.models import Process
from mlq_scheduler.queues import (
    LEVEL_DISCIPLINES,
    QueueDiscipline,
    ReadyQueue,
    ReadyQueueSet,
)


def _proc(pid, burst, level=1):
    return Process(pid, burst_time=burst, arrival_time=0, queue_level=level)


def test_level_disciplines():
    assert LEVEL_DISCIPLINES[1] is QueueDiscipline.ROUND_ROBIN
    assert LEVEL_DISCIPLINES[2] is QueueDiscipline.ROUND_ROBIN
    assert LEVEL_DISCIPLINES[3] is QueueDiscipline.SHORTEST_JOB_FIRST


def test_round_robin_queue_is_fifo():
    q = ReadyQueue(QueueDiscipline.ROUND_ROBIN)
    for pid, burst in [("A", 5), ("B", 1), ("C", 3)]:
        q.enqueue(_proc(pid, burst))
    assert [p.pid for p in q] == ["A", "B", "C"]
    assert q.dequeue_next().pid == "A"
    assert q.dequeue_next().pid == "B"
    assert len(q) == 1


def test_sjf_queue_orders_by_original_burst():
    q = ReadyQueue(QueueDiscipline.SHORTEST_JOB_FIRST)
    long_job = _proc("L", 6, level=3)
    # Mostly done, but still ordered by its original burst of 6
    for _ in range(5):
        long_job.advance_one_tick()
    q.enqueue(long_job)
    q.enqueue(_proc("S", 2, level=3))
    q.enqueue(_proc("M", 4, level=3))
    assert [q.dequeue_next().pid for _ in range(3)] == ["S", "M", "L"]


def test_sjf_ties_follow_insertion_order():
    q = ReadyQueue(QueueDiscipline.SHORTEST_JOB_FIRST)
    for pid in ["C", "A", "B"]:
        q.enqueue(_proc(pid, 3, level=3))
    assert [q.dequeue_next().pid for _ in range(3)] == ["C", "A", "B"]


def test_dequeue_from_empty_queue():
    assert ReadyQueue(QueueDiscipline.ROUND_ROBIN).dequeue_next() is None
    assert ReadyQueue(QueueDiscipline.SHORTEST_JOB_FIRST).dequeue_next() is None


def test_has_ready_above():
    queues = ReadyQueueSet()
    assert not queues.has_ready_above(3)

    queues.enqueue(2, _proc("B", 2, level=2))
    assert queues.has_ready_above(3)
    assert not queues.has_ready_above(2)
    assert not queues.has_ready_above(1)

    queues.enqueue(1, _proc("A", 2))
    assert queues.has_ready_above(2)


def test_highest_ready_level_and_snapshot():
    queues = ReadyQueueSet()
    assert queues.highest_ready_level() is None
    queues.enqueue(3, _proc("C", 4, level=3))
    queues.enqueue(2, _proc("B", 2, level=2))
    assert queues.highest_ready_level() == 2
    assert queues.snapshot() == {1: [], 2: ["B"], 3: ["C"]}
    assert len(queues) == 2
    assert queues.dequeue_next(2).pid == "B"
    assert queues.highest_ready_level() == 3


@pytest.mark.parametrize("level", [0, 4, -1])
def test_invalid_level_rejected(level):
    queues = ReadyQueueSet()
    with pytest.raises(ValueError):
        queues.enqueue(level, _proc("A", 1))
    with pytest.raises(ValueError):
        queues.has_ready_above(level)


def test_membership_is_by_pid():
    q = ReadyQueue(QueueDiscipline.SHORTEST_JOB_FIRST)
    q.enqueue(_proc("A", 3, level=3))
    assert _proc("A", 9, level=3) in q
    assert _proc("B", 3, level=3) not in q
    q.dequeue_next()
    assert _proc("A", 3, level=3) not in q
